"""
Proposal endpoints.

Create, list and withdraw a user's offers and requests.
"""

from typing import Annotated

from fastapi import APIRouter, Depends, status
from pydantic import BaseModel, Field
from sqlalchemy.ext.asyncio import AsyncSession

from tradepool.api.dependencies import ProposalResponse, get_catalog
from tradepool.config import settings
from tradepool.db import (
    create_proposal,
    delete_proposal,
    get_user_proposals,
    proposal_to_model,
)
from tradepool.db.database import get_session
from tradepool.models.card import CardRef
from tradepool.models.failure import CardNotFoundError
from tradepool.models.proposal import ProposalType
from tradepool.services.card_catalog import CardCatalog
from tradepool.services.snapshot import split_proposals

router = APIRouter(prefix="/proposals", tags=["proposals"])


class ProposalCreateRequest(BaseModel):
    """Request model for offering or requesting a card."""

    set: str = Field(..., min_length=1, examples=["A1"])
    id: str = Field(..., min_length=1, examples=["1"])
    type: ProposalType = Field(..., description="offer or request")


class UserProposalsResponse(BaseModel):
    """A user's proposals, most recent first."""

    user_id: str
    offers: list[ProposalResponse] = Field(default_factory=list)
    requests: list[ProposalResponse] = Field(default_factory=list)


class DeleteResponse(BaseModel):
    """Response model for withdrawing a proposal."""

    user_id: str
    key: str
    deleted: bool
    message: str = ""


@router.get("/{user_id}", response_model=UserProposalsResponse)
async def get_proposals(
    user_id: str,
    session: Annotated[AsyncSession, Depends(get_session)],
    catalog: Annotated[CardCatalog, Depends(get_catalog)],
) -> UserProposalsResponse:
    """List a user's offers and requests."""
    records = await get_user_proposals(session, user_id)
    offers, requests = split_proposals([proposal_to_model(r) for r in records])
    return UserProposalsResponse(
        user_id=user_id,
        offers=[ProposalResponse.from_proposal(p, catalog) for p in offers],
        requests=[ProposalResponse.from_proposal(p, catalog) for p in requests],
    )


@router.post("/{user_id}", response_model=ProposalResponse, status_code=status.HTTP_201_CREATED)
async def add_proposal(
    user_id: str,
    request: ProposalCreateRequest,
    session: Annotated[AsyncSession, Depends(get_session)],
    catalog: Annotated[CardCatalog, Depends(get_catalog)],
) -> ProposalResponse:
    """
    Offer or request a card.

    The card must exist in the catalog and have a tradeable rarity.
    """
    card = catalog.find_card(CardRef.of(request.set, request.id))
    if card is None:
        raise CardNotFoundError(request.set, request.id)

    record = await create_proposal(
        session,
        card,
        request.type,
        user_id,
        excluded_rarities=settings.non_tradeable_rarities,
    )
    return ProposalResponse.from_proposal(proposal_to_model(record), catalog)


@router.delete("/{user_id}/{key}", response_model=DeleteResponse)
async def withdraw_proposal(
    user_id: str,
    key: str,
    session: Annotated[AsyncSession, Depends(get_session)],
) -> DeleteResponse:
    """
    Withdraw a proposal.

    Withdrawing a proposal that is already gone succeeds with deleted=False.
    """
    deleted = await delete_proposal(session, user_id, key)
    return DeleteResponse(
        user_id=user_id,
        key=key,
        deleted=deleted,
        message="Proposal withdrawn." if deleted else "Proposal was already withdrawn.",
    )
