"""
TradePool services.

Catalog lookup, snapshot normalization, trade matching and execution.
"""

from tradepool.services.card_catalog import (
    CardCatalog,
    build_card_catalog,
    download_card_catalog,
    get_card_catalog,
    load_card_catalog,
    paginate,
)
from tradepool.services.identity import IdentityState, sign_in
from tradepool.services.matching import (
    TradeBoard,
    build_directory,
    compute_potential_trades,
    filter_potential_trades,
    short_display_name,
)
from tradepool.services.snapshot import (
    SnapshotSanitization,
    flatten_snapshot,
    sanitize_snapshot,
    split_proposals,
)
from tradepool.services.trade_executor import (
    accept_trade,
    confirm_trade,
    propose_trade,
    resume_pending_trades,
    trade_prompt,
)

__all__ = [
    "CardCatalog",
    "IdentityState",
    "SnapshotSanitization",
    "TradeBoard",
    "accept_trade",
    "build_card_catalog",
    "build_directory",
    "compute_potential_trades",
    "confirm_trade",
    "download_card_catalog",
    "filter_potential_trades",
    "flatten_snapshot",
    "get_card_catalog",
    "load_card_catalog",
    "paginate",
    "propose_trade",
    "resume_pending_trades",
    "sanitize_snapshot",
    "short_display_name",
    "sign_in",
    "split_proposals",
    "trade_prompt",
]
