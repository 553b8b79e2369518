"""
Trade execution.

Accepting a potential trade retracts the four proposals behind it:
my offer, my request, their offer, their request, always in that order.

Consent and mutation are separate steps. ``propose_trade`` stages the
trade and returns a confirmation token with a prompt naming both cards;
``confirm_trade`` either declines (nothing is deleted) or performs the
retraction.

Retraction is not a single transaction across the four records. The
staging record is committed as in_progress before any deletion, so a
client that fails part way leaves a record any client can finish with
``resume_pending_trades``. Every deletion is idempotent, which makes
re-running the whole sequence always safe.
"""

import logging
from collections.abc import Callable

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from tradepool.db.operations import (
    create_pending_trade,
    delete_proposal,
    get_pending_trade,
    get_trades_by_status,
    set_trade_status,
)
from tradepool.models.db import PendingTradeDB
from tradepool.models.failure import (
    CardNotFoundError,
    PartialMutationError,
    TradeNotFoundError,
    TradeNotPartyError,
)
from tradepool.models.proposal import PotentialTrade
from tradepool.models.trade import TradeConfirmation, TradeResult, TradeStatus
from tradepool.services.card_catalog import CardCatalog

logger = logging.getLogger(__name__)


def trade_prompt(trade: PotentialTrade, catalog: CardCatalog) -> tuple[str, str, str]:
    """
    Build the confirmation prompt for a trade.

    Returns:
        (prompt, my card name, their card name)

    Raises:
        CardNotFoundError: If either offered card is missing from the catalog
    """
    my_card = catalog.find_card(trade.my_offer.ref)
    if my_card is None:
        raise CardNotFoundError(trade.my_offer.ref.set_code, trade.my_offer.ref.card_id)
    their_card = catalog.find_card(trade.their_offer.ref)
    if their_card is None:
        raise CardNotFoundError(trade.their_offer.ref.set_code, trade.their_offer.ref.card_id)

    prompt = (
        f"Trade your {my_card.name} for {trade.counterparty_display_name}'s {their_card.name}?"
    )
    return prompt, my_card.name, their_card.name


async def propose_trade(
    session: AsyncSession, trade: PotentialTrade, catalog: CardCatalog
) -> TradeConfirmation:
    """Stage a trade and return the token needed to confirm it."""
    prompt, my_card_name, their_card_name = trade_prompt(trade, catalog)

    pending = await create_pending_trade(
        session,
        initiator=trade.my_offer.owner,
        counterparty=trade.counterparty_id,
        keys=(
            trade.my_offer.key,
            trade.my_request.key,
            trade.their_offer.key,
            trade.their_request.key,
        ),
        prompt=prompt,
    )
    await session.commit()
    logger.info(
        "Proposed trade %s between %s and %s",
        pending.token,
        pending.initiator,
        pending.counterparty,
    )

    return TradeConfirmation(
        token=pending.token,
        prompt=prompt,
        my_card_name=my_card_name,
        their_card_name=their_card_name,
        counterparty_display_name=trade.counterparty_display_name,
    )


async def _retract(session: AsyncSession, pending: PendingTradeDB) -> TradeResult:
    """Delete the four proposals in fixed order, then mark the trade completed."""
    token = pending.token
    result = TradeResult(token=token, status=TradeStatus.IN_PROGRESS)
    try:
        for owner, key in pending.retraction_order():
            if await delete_proposal(session, owner, key):
                result.deleted.append((owner, key))
            else:
                result.already_absent.append((owner, key))
        await set_trade_status(session, pending, TradeStatus.COMPLETED)
        await session.commit()
    except SQLAlchemyError as e:
        await session.rollback()
        logger.error("Trade %s interrupted after %d deletions: %s", token, len(result.deleted), e)
        raise PartialMutationError(
            token, deleted=len(result.deleted), detail=type(e).__name__
        ) from e

    result.status = TradeStatus.COMPLETED
    if result.already_absent:
        logger.info(
            "Trade %s completed; %d proposals were already gone",
            token,
            len(result.already_absent),
        )
    return result


async def confirm_trade(
    session: AsyncSession, token: str, user_id: str | None, accept: bool = True
) -> TradeResult:
    """
    Second half of the accept protocol.

    Only the user who proposed the trade can answer it.
    Declining a pending trade deletes nothing. Confirming a trade that is
    already completed or declined is a no-op returning its final status.
    A trade left in progress by an interrupted client is always finished,
    since consent was already given.

    Raises:
        TradeNotFoundError: If the token matches no staged trade
        TradeNotPartyError: If user_id is not the trade's initiator
        PartialMutationError: If the store failed during retraction
    """
    pending = await get_pending_trade(session, token)
    if pending is None:
        raise TradeNotFoundError(token)
    if user_id is None or user_id != pending.initiator:
        logger.warning("Rejected confirmation of trade %s by %s", token, user_id)
        raise TradeNotPartyError(token)

    status = TradeStatus(pending.status)
    if status in (TradeStatus.COMPLETED, TradeStatus.DECLINED):
        return TradeResult(token=token, status=status)

    if status is TradeStatus.PENDING:
        if not accept:
            await set_trade_status(session, pending, TradeStatus.DECLINED)
            await session.commit()
            logger.info("Trade %s declined", token)
            return TradeResult(token=token, status=TradeStatus.DECLINED)

        await set_trade_status(session, pending, TradeStatus.IN_PROGRESS)
        await session.commit()

    return await _retract(session, pending)


async def resume_pending_trades(session: AsyncSession) -> list[TradeResult]:
    """
    Finish every trade left in progress.

    A failure on one trade is logged and does not stop the others.
    """
    results = []
    tokens = [p.token for p in await get_trades_by_status(session, TradeStatus.IN_PROGRESS)]
    for token in tokens:
        pending = await get_pending_trade(session, token)
        if pending is None or pending.status != TradeStatus.IN_PROGRESS.value:
            continue
        try:
            results.append(await _retract(session, pending))
        except PartialMutationError:
            logger.warning("Trade %s still in progress; will retry on next load", token)
    if results:
        logger.info("Resumed %d interrupted trades", len(results))
    return results


async def accept_trade(
    session: AsyncSession,
    trade: PotentialTrade,
    catalog: CardCatalog,
    confirm: Callable[[str], bool],
) -> TradeResult | None:
    """
    Ask for consent and, if given, retract the trade's four proposals.

    ``confirm`` receives the prompt naming both cards. When it returns
    False nothing is written at all and None is returned.
    """
    prompt, _, _ = trade_prompt(trade, catalog)
    if not confirm(prompt):
        logger.info("Trade with %s declined before staging", trade.counterparty_id)
        return None

    confirmation = await propose_trade(session, trade, catalog)
    return await confirm_trade(
        session, confirmation.token, trade.my_offer.owner, accept=True
    )
