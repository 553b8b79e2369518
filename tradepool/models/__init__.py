from tradepool.models.card import Card, CardRef
from tradepool.models.failure import (
    CardNotFoundError,
    CardNotTradeableError,
    FailureDetail,
    FailureKind,
    KnownError,
    PartialMutationError,
    StaleTradeError,
    TradeNotFoundError,
    TradeNotPartyError,
)
from tradepool.models.proposal import PotentialTrade, Proposal, ProposalType, UserEntry
from tradepool.models.rarity import (
    NON_TRADEABLE_RARITIES,
    RARITY_ORDER,
    ExactTierRule,
    RarityRule,
    TierBucketRule,
    is_tradeable,
    rarity_rank,
    rule_from_name,
)
from tradepool.models.trade import TradeConfirmation, TradeResult, TradeStatus

__all__ = [
    "NON_TRADEABLE_RARITIES",
    "RARITY_ORDER",
    "Card",
    "CardNotFoundError",
    "CardNotTradeableError",
    "CardRef",
    "ExactTierRule",
    "FailureDetail",
    "FailureKind",
    "KnownError",
    "PartialMutationError",
    "PotentialTrade",
    "Proposal",
    "ProposalType",
    "RarityRule",
    "StaleTradeError",
    "TierBucketRule",
    "TradeConfirmation",
    "TradeNotFoundError",
    "TradeNotPartyError",
    "TradeResult",
    "TradeStatus",
    "UserEntry",
    "is_tradeable",
    "rarity_rank",
    "rule_from_name",
]
