from tradepool.db.database import get_session, init_db
from tradepool.db.operations import (
    create_pending_trade,
    create_proposal,
    delete_proposal,
    get_pending_trade,
    get_proposal,
    get_proposal_snapshot,
    get_trades_by_status,
    get_user,
    get_user_proposals,
    list_users,
    proposal_to_model,
    set_trade_status,
    upsert_user,
)

__all__ = [
    "create_pending_trade",
    "create_proposal",
    "delete_proposal",
    "get_pending_trade",
    "get_proposal",
    "get_proposal_snapshot",
    "get_session",
    "get_trades_by_status",
    "get_user",
    "get_user_proposals",
    "init_db",
    "list_users",
    "proposal_to_model",
    "set_trade_status",
    "upsert_user",
]
