"""
Identity of the current user.

The identity provider itself (authentication, sign-in popups, tokens)
is external. This module only models what matching needs from it:
who the current user is, and whether that is known yet.
"""

import logging
from dataclasses import dataclass

from sqlalchemy.ext.asyncio import AsyncSession

from tradepool.db.operations import upsert_user
from tradepool.models.db import UserDB

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class IdentityState:
    """
    Snapshot of the identity provider.

    Matching is inert (produces no trades) while identity is loading or
    when nobody is signed in.
    """

    current_user_id: str | None = None
    is_loading: bool = False

    @property
    def resolved(self) -> bool:
        return not self.is_loading and bool(self.current_user_id)

    @classmethod
    def loading(cls) -> "IdentityState":
        return cls(current_user_id=None, is_loading=True)

    @classmethod
    def signed_in(cls, user_id: str) -> "IdentityState":
        return cls(current_user_id=user_id, is_loading=False)


async def sign_in(session: AsyncSession, user_id: str, display_name: str | None) -> UserDB:
    """
    Record a successful sign-in in the user directory.

    The directory entry is rewritten on every sign-in so the display
    name shown to counterparties stays current.
    """
    user = await upsert_user(session, user_id, display_name)
    logger.info("User %s signed in", user_id)
    return user
