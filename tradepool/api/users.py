"""
User directory endpoints.

Sign-in records the user's display name so counterparties can be named
in potential trades.
"""

from typing import Annotated

from fastapi import APIRouter, Depends
from pydantic import BaseModel, Field
from sqlalchemy.ext.asyncio import AsyncSession

from tradepool.db import list_users
from tradepool.db.database import get_session
from tradepool.services.identity import sign_in

router = APIRouter(prefix="/users", tags=["users"])


class SignInRequest(BaseModel):
    """Request model for recording a sign-in."""

    display_name: str | None = Field(
        default=None,
        description="Display name from the identity provider",
        examples=["Ash Ketchum"],
    )


class UserResponse(BaseModel):
    """A user directory entry."""

    user_id: str
    display_name: str | None = None


@router.put("/{user_id}", response_model=UserResponse)
async def record_sign_in(
    user_id: str,
    request: SignInRequest,
    session: Annotated[AsyncSession, Depends(get_session)],
) -> UserResponse:
    """Create or refresh the caller's directory entry."""
    user = await sign_in(session, user_id, request.display_name)
    return UserResponse(user_id=user.user_id, display_name=user.display_name)


@router.get("", response_model=list[UserResponse])
async def get_users(
    session: Annotated[AsyncSession, Depends(get_session)],
) -> list[UserResponse]:
    """Every user in the directory."""
    users = await list_users(session)
    return [UserResponse(user_id=u.user_id, display_name=u.display_name) for u in users]
