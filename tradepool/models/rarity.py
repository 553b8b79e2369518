"""
Rarity tiers, compatibility rules and trade eligibility.

A compatibility rule is an opaque predicate over two rarity values,
evaluated in the direction "rarity I give up" -> "rarity I receive".
The matching engine never inspects tier semantics itself.
"""

from collections.abc import Collection, Mapping
from typing import Protocol

from tradepool.models.card import Card

# Ordered from most common to rarest
RARITY_ORDER: tuple[str, ...] = (
    "◊",
    "◊◊",
    "◊◊◊",
    "◊◊◊◊",
    "☆",
    "☆☆",
    "☆☆☆",
    "👑",
    "Promo",
)

# Promotional cards and the highest collector tiers are never tradeable
NON_TRADEABLE_RARITIES: frozenset[str] = frozenset({"Promo", "☆☆", "☆☆☆", "👑"})

# Default grouping used by TierBucketRule
DEFAULT_RARITY_BUCKETS: dict[str, str] = {
    "◊": "diamond-low",
    "◊◊": "diamond-low",
    "◊◊◊": "diamond-high",
    "◊◊◊◊": "diamond-high",
    "☆": "star",
}


class RarityRule(Protocol):
    """Decides whether a card of one rarity may be exchanged for another."""

    def compatible(self, giving: str, receiving: str) -> bool: ...


class ExactTierRule:
    """Cards are exchangeable only within the same rarity tier."""

    def compatible(self, giving: str, receiving: str) -> bool:
        return giving == receiving

    def __repr__(self) -> str:
        return "ExactTierRule()"


class TierBucketRule:
    """
    Cards are exchangeable when both tiers fall in the same bucket.

    Tiers absent from the bucket table are never compatible with anything.
    """

    def __init__(self, buckets: Mapping[str, str] | None = None):
        self.buckets = dict(DEFAULT_RARITY_BUCKETS if buckets is None else buckets)

    def compatible(self, giving: str, receiving: str) -> bool:
        giving_bucket = self.buckets.get(giving)
        if giving_bucket is None:
            return False
        return giving_bucket == self.buckets.get(receiving)

    def __repr__(self) -> str:
        return f"TierBucketRule({self.buckets!r})"


def rule_from_name(name: str) -> RarityRule:
    """
    Build a compatibility rule from its configured name.

    Raises:
        ValueError: If the name is not a known rule
    """
    normalized = name.strip().lower()
    if normalized == "exact":
        return ExactTierRule()
    if normalized == "bucket":
        return TierBucketRule()
    raise ValueError(f"Unknown rarity rule '{name}'. Expected 'exact' or 'bucket'.")


def is_tradeable(card: Card, excluded: Collection[str] = NON_TRADEABLE_RARITIES) -> bool:
    """Check whether a card's rarity tier permits trading at all."""
    return card.rarity not in excluded


def rarity_rank(rarity: str) -> int:
    """Position of a rarity in RARITY_ORDER; unknown tiers sort last."""
    try:
        return RARITY_ORDER.index(rarity)
    except ValueError:
        return len(RARITY_ORDER)
