"""
Proposal store operations.

Async functions for the user directory, trade proposals and pending
trade staging records. Proposals are only ever created or deleted,
never edited in place.
"""

import logging
from collections.abc import Collection
from typing import Any
from uuid import uuid4

from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession

from tradepool.models.card import Card, CardRef
from tradepool.models.db import PendingTradeDB, TradeProposalDB, UserDB
from tradepool.models.failure import CardNotTradeableError
from tradepool.models.proposal import Proposal, ProposalType, UserEntry
from tradepool.models.rarity import NON_TRADEABLE_RARITIES, is_tradeable
from tradepool.models.trade import TradeStatus

logger = logging.getLogger(__name__)


def new_key() -> str:
    """Store-assigned proposal key."""
    return uuid4().hex


# --- User Directory ---


async def get_user(session: AsyncSession, user_id: str) -> UserDB | None:
    """Get a directory entry. Returns None if the user never signed in."""
    return await session.get(UserDB, user_id)


async def upsert_user(session: AsyncSession, user_id: str, display_name: str | None) -> UserDB:
    """Create or refresh a directory entry."""
    user = await get_user(session, user_id)
    if user:
        user.display_name = display_name
    else:
        user = UserDB(user_id=user_id, display_name=display_name)
        session.add(user)
    await session.flush()
    return user


async def list_users(session: AsyncSession) -> list[UserEntry]:
    """All directory entries."""
    result = await session.execute(select(UserDB).order_by(UserDB.user_id))
    return [UserEntry(user_id=u.user_id, display_name=u.display_name) for u in result.scalars()]


# --- Trade Proposals ---


async def create_proposal(
    session: AsyncSession,
    card: Card,
    proposal_type: ProposalType,
    user_id: str,
    excluded_rarities: Collection[str] = NON_TRADEABLE_RARITIES,
) -> TradeProposalDB:
    """
    Record that a user offers or requests a card.

    Raises:
        CardNotTradeableError: If the card's rarity is excluded from trading
    """
    if not is_tradeable(card, excluded_rarities):
        raise CardNotTradeableError(card.name, card.rarity)

    proposal = TradeProposalDB(
        owner=user_id,
        key=new_key(),
        set_code=card.set_code,
        card_id=card.card_id,
        type=ProposalType(proposal_type).value,
    )
    session.add(proposal)
    await session.flush()
    logger.info("Created %s %s for %s (%s)", proposal.type, proposal.key, user_id, card.ref)
    return proposal


def proposal_to_model(record: TradeProposalDB) -> Proposal:
    """Convert a database proposal to a domain model."""
    return Proposal(
        owner=record.owner,
        key=record.key,
        ref=CardRef.of(record.set_code, record.card_id),
        type=ProposalType(record.type),
    )


async def get_proposal(session: AsyncSession, user_id: str, key: str) -> TradeProposalDB | None:
    """Get one proposal by (owner, key)."""
    result = await session.execute(
        select(TradeProposalDB).where(
            TradeProposalDB.owner == user_id,
            TradeProposalDB.key == key,
        )
    )
    return result.scalar_one_or_none()


async def get_user_proposals(session: AsyncSession, user_id: str) -> list[TradeProposalDB]:
    """A user's proposals in creation order."""
    result = await session.execute(
        select(TradeProposalDB)
        .where(TradeProposalDB.owner == user_id)
        .order_by(TradeProposalDB.id)
    )
    return list(result.scalars().all())


async def delete_proposal(session: AsyncSession, user_id: str, key: str) -> bool:
    """
    Retract a proposal.

    Idempotent: deleting a proposal that is already gone is a no-op.

    Returns True if a record was deleted, False if none existed.
    """
    result = await session.execute(
        delete(TradeProposalDB).where(
            TradeProposalDB.owner == user_id,
            TradeProposalDB.key == key,
        )
    )
    # rowcount is available on DELETE results; type stubs incomplete for async
    deleted = int(result.rowcount) > 0  # type: ignore[attr-defined]
    if not deleted:
        logger.debug("Proposal %s/%s already absent", user_id, key)
    return deleted


async def get_proposal_snapshot(session: AsyncSession) -> dict[str, dict[str, dict[str, Any]]]:
    """
    Read every user's proposals.

    Returns the store's nested shape
    ``{user_id: {key: {"set", "id", "type"}}}``, each user's
    proposals in creation order.
    """
    result = await session.execute(select(TradeProposalDB).order_by(TradeProposalDB.id))
    snapshot: dict[str, dict[str, dict[str, Any]]] = {}
    for proposal in result.scalars():
        snapshot.setdefault(proposal.owner, {})[proposal.key] = {
            "set": proposal.set_code,
            "id": proposal.card_id,
            "type": proposal.type,
        }
    return snapshot


# --- Pending Trades ---


async def create_pending_trade(
    session: AsyncSession,
    initiator: str,
    counterparty: str,
    keys: tuple[str, str, str, str],
    prompt: str,
) -> PendingTradeDB:
    """
    Stage a proposed trade awaiting confirmation.

    Args:
        keys: my offer, my request, their offer, their request
    """
    my_offer_key, my_request_key, their_offer_key, their_request_key = keys
    pending = PendingTradeDB(
        token=uuid4().hex,
        initiator=initiator,
        counterparty=counterparty,
        my_offer_key=my_offer_key,
        my_request_key=my_request_key,
        their_offer_key=their_offer_key,
        their_request_key=their_request_key,
        status=TradeStatus.PENDING.value,
        prompt=prompt,
    )
    session.add(pending)
    await session.flush()
    return pending


async def get_pending_trade(session: AsyncSession, token: str) -> PendingTradeDB | None:
    """Get a staging record by confirmation token."""
    return await session.get(PendingTradeDB, token)


async def get_trades_by_status(session: AsyncSession, status: TradeStatus) -> list[PendingTradeDB]:
    """Staging records in a given status, oldest first."""
    result = await session.execute(
        select(PendingTradeDB)
        .where(PendingTradeDB.status == status.value)
        .order_by(PendingTradeDB.created_at)
    )
    return list(result.scalars().all())


async def set_trade_status(
    session: AsyncSession, pending: PendingTradeDB, status: TradeStatus
) -> PendingTradeDB:
    """Move a staging record to a new status."""
    pending.status = status.value
    await session.flush()
    return pending
