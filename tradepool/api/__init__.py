from tradepool.api.cards import router as cards_router
from tradepool.api.health import router as health_router
from tradepool.api.proposals import router as proposals_router
from tradepool.api.trades import router as trades_router
from tradepool.api.users import router as users_router

__all__ = [
    "cards_router",
    "health_router",
    "proposals_router",
    "trades_router",
    "users_router",
]
