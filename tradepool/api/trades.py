"""
Potential trade endpoints.

Lists the caller's potential trades and runs the two-step accept
protocol: propose (get a confirmation token and prompt), then confirm
or decline.
"""

from typing import Annotated

from fastapi import APIRouter, Depends, Query
from pydantic import BaseModel, Field
from sqlalchemy.ext.asyncio import AsyncSession

from tradepool.api.dependencies import (
    ProposalResponse,
    get_catalog,
    get_identity,
    get_rarity_rule,
)
from tradepool.config import settings
from tradepool.db import get_proposal_snapshot, list_users
from tradepool.db.database import get_session
from tradepool.models.failure import StaleTradeError
from tradepool.models.proposal import PotentialTrade
from tradepool.models.rarity import RarityRule
from tradepool.services.card_catalog import CardCatalog
from tradepool.services.identity import IdentityState
from tradepool.services.matching import TradeBoard, build_directory, filter_potential_trades
from tradepool.services.snapshot import flatten_snapshot
from tradepool.services.trade_executor import (
    confirm_trade,
    propose_trade,
    resume_pending_trades,
)

router = APIRouter(prefix="/trades", tags=["trades"])


class PotentialTradeResponse(BaseModel):
    """A candidate two-party exchange."""

    my_offer: ProposalResponse
    my_request: ProposalResponse
    their_offer: ProposalResponse
    their_request: ProposalResponse
    counterparty_id: str
    counterparty_display_name: str

    @classmethod
    def from_trade(cls, trade: PotentialTrade, catalog: CardCatalog) -> "PotentialTradeResponse":
        return cls(
            my_offer=ProposalResponse.from_proposal(trade.my_offer, catalog),
            my_request=ProposalResponse.from_proposal(trade.my_request, catalog),
            their_offer=ProposalResponse.from_proposal(trade.their_offer, catalog),
            their_request=ProposalResponse.from_proposal(trade.their_request, catalog),
            counterparty_id=trade.counterparty_id,
            counterparty_display_name=trade.counterparty_display_name,
        )


class PotentialTradeListResponse(BaseModel):
    """Potential trades for the caller."""

    user_id: str | None
    trades: list[PotentialTradeResponse] = Field(default_factory=list)
    count: int = 0


class ProposeTradeRequest(BaseModel):
    """Identifies one potential trade by its four proposal keys."""

    counterparty_id: str
    my_offer_key: str
    my_request_key: str
    their_offer_key: str
    their_request_key: str


class TradeConfirmationResponse(BaseModel):
    """Token and prompt to show before confirming a trade."""

    token: str
    prompt: str
    my_card_name: str
    their_card_name: str
    counterparty_display_name: str


class ConfirmTradeRequest(BaseModel):
    """The user's answer to the confirmation prompt."""

    accept: bool = Field(..., description="True to trade, False to decline")


class TradeResultResponse(BaseModel):
    """Outcome of a confirmation."""

    token: str
    status: str
    deleted: int = 0
    already_absent: int = 0


async def _load_board(
    session: AsyncSession,
    identity: IdentityState,
    catalog: CardCatalog,
    rule: RarityRule,
) -> TradeBoard:
    """Read a fresh snapshot and directory for one matching pass."""
    snapshot = flatten_snapshot(await get_proposal_snapshot(session))
    directory = build_directory(await list_users(session))
    return TradeBoard(
        identity=identity,
        snapshot=snapshot,
        directory=directory,
        catalog=catalog,
        rule=rule,
        excluded_rarities=settings.non_tradeable_rarities,
        unknown_display_name=settings.unknown_display_name,
    )


@router.get("", response_model=PotentialTradeListResponse)
async def list_potential_trades(
    session: Annotated[AsyncSession, Depends(get_session)],
    identity: Annotated[IdentityState, Depends(get_identity)],
    catalog: Annotated[CardCatalog, Depends(get_catalog)],
    rule: Annotated[RarityRule, Depends(get_rarity_rule)],
    set_code: Annotated[str | None, Query(alias="set")] = None,
    rarity: str | None = None,
    player: str | None = None,
) -> PotentialTradeListResponse:
    """
    Potential trades for the caller.

    Empty when nobody is signed in. Optional filters narrow by the set
    and rarity of the card received, and by counterparty name.
    """
    if not identity.resolved:
        return PotentialTradeListResponse(user_id=None)

    board = await _load_board(session, identity, catalog, rule)
    trades = filter_potential_trades(
        board.potential_trades(), catalog, set_code=set_code, rarity=rarity, player=player
    )
    return PotentialTradeListResponse(
        user_id=identity.current_user_id,
        trades=[PotentialTradeResponse.from_trade(t, catalog) for t in trades],
        count=len(trades),
    )


@router.post("/propose", response_model=TradeConfirmationResponse)
async def propose(
    request: ProposeTradeRequest,
    session: Annotated[AsyncSession, Depends(get_session)],
    identity: Annotated[IdentityState, Depends(get_identity)],
    catalog: Annotated[CardCatalog, Depends(get_catalog)],
    rule: Annotated[RarityRule, Depends(get_rarity_rule)],
) -> TradeConfirmationResponse:
    """
    Stage one of the caller's potential trades.

    The trade must still be among the caller's current potential trades.
    """
    keys = [
        request.my_offer_key,
        request.my_request_key,
        request.their_offer_key,
        request.their_request_key,
    ]
    board = await _load_board(session, identity, catalog, rule)
    trade = next(
        (
            t
            for t in board.potential_trades()
            if t.counterparty_id == request.counterparty_id
            and [t.my_offer.key, t.my_request.key, t.their_offer.key, t.their_request.key]
            == keys
        ),
        None,
    )
    if trade is None:
        raise StaleTradeError(keys)

    confirmation = await propose_trade(session, trade, catalog)
    return TradeConfirmationResponse(
        token=confirmation.token,
        prompt=confirmation.prompt,
        my_card_name=confirmation.my_card_name,
        their_card_name=confirmation.their_card_name,
        counterparty_display_name=confirmation.counterparty_display_name,
    )


@router.post("/confirm/{token}", response_model=TradeResultResponse)
async def confirm(
    token: str,
    request: ConfirmTradeRequest,
    session: Annotated[AsyncSession, Depends(get_session)],
    identity: Annotated[IdentityState, Depends(get_identity)],
) -> TradeResultResponse:
    """Accept or decline a staged trade. Only the proposing user may answer."""
    result = await confirm_trade(
        session, token, identity.current_user_id, accept=request.accept
    )
    return TradeResultResponse(
        token=result.token,
        status=result.status.value,
        deleted=len(result.deleted),
        already_absent=len(result.already_absent),
    )


@router.post("/resume", response_model=list[TradeResultResponse])
async def resume(
    session: Annotated[AsyncSession, Depends(get_session)],
) -> list[TradeResultResponse]:
    """Finish any trades an interrupted client left in progress."""
    results = await resume_pending_trades(session)
    return [
        TradeResultResponse(
            token=r.token,
            status=r.status.value,
            deleted=len(r.deleted),
            already_absent=len(r.already_absent),
        )
        for r in results
    ]
