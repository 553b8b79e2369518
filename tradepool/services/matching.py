"""
Potential trade matching.

Finds pairs of users whose offers and requests reciprocally satisfy each
other: I offer a card they request, they offer a card I request, and the
rarity of what I give up is compatible with the rarity of what I receive.

The engine is a pure function of its inputs. It keeps no state between
calls, never mutates proposals, and never fails the whole computation
because one candidate cannot be resolved.
"""

import logging
from collections.abc import Collection, Iterable, Mapping
from dataclasses import dataclass

from tradepool.models.card import CardRef
from tradepool.models.proposal import PotentialTrade, Proposal, UserEntry
from tradepool.models.rarity import NON_TRADEABLE_RARITIES, RarityRule
from tradepool.services.card_catalog import CardCatalog
from tradepool.services.identity import IdentityState
from tradepool.services.snapshot import Snapshot, sanitize_snapshot, split_proposals

logger = logging.getLogger(__name__)

UNKNOWN_DISPLAY_NAME = "unknown"

# (their offer's card, counterparty, my offer's key). Scoped per counterparty,
# unlike a global (card, my offer) key that would hide the same trade from a
# second user.
DedupKey = tuple[CardRef, str, str]


def build_directory(entries: Iterable[UserEntry]) -> dict[str, str | None]:
    """Index user directory entries by user id."""
    return {entry.user_id: entry.display_name for entry in entries}


def short_display_name(
    display_name: str | None, placeholder: str = UNKNOWN_DISPLAY_NAME
) -> str:
    """First token of a display name, or the placeholder when absent."""
    if not display_name or not display_name.strip():
        return placeholder
    return display_name.split()[0]


def _first_by_ref(proposals: Iterable[Proposal]) -> dict[CardRef, Proposal]:
    """Index proposals by card, keeping the first one seen per card."""
    index: dict[CardRef, Proposal] = {}
    for proposal in proposals:
        index.setdefault(proposal.ref, proposal)
    return index


def compute_potential_trades(
    current_user_id: str,
    snapshot: Snapshot,
    directory: Mapping[str, str | None],
    catalog: CardCatalog,
    rule: RarityRule,
    excluded_rarities: Collection[str] = NON_TRADEABLE_RARITIES,
    unknown_display_name: str = UNKNOWN_DISPLAY_NAME,
) -> list[PotentialTrade]:
    """
    Compute every potential two-party trade for the current user.

    Args:
        current_user_id: The user whose trades are computed
        snapshot: Flattened proposals per user, in store (creation) order
        directory: User id -> display name
        catalog: Card catalog, used for rarity lookups
        rule: Rarity compatibility rule, applied as (my offer, my request)
        excluded_rarities: Rarities that never take part in trades
        unknown_display_name: Placeholder for users missing from the directory

    Returns:
        Potential trades in discovery order: counterparties in snapshot
        order, then my offers most recent first, then their offers in
        store order.
    """
    matchable = sanitize_snapshot(snapshot, catalog, excluded_rarities).snapshot

    my_offers, my_requests = split_proposals(matchable.get(current_user_id, []))
    if not my_offers or not my_requests:
        return []

    my_request_by_ref = _first_by_ref(my_requests)

    def rarity_of(ref: CardRef) -> str | None:
        card = catalog.find_card(ref)
        return card.rarity if card else None

    # Cards I request that I would accept in exchange for each of my offers
    request_rarities = {ref: rarity_of(ref) for ref in my_request_by_ref}
    acceptable: dict[str, set[CardRef]] = {}
    for my_offer in my_offers:
        offer_rarity = rarity_of(my_offer.ref)
        acceptable[my_offer.key] = {
            ref
            for ref, request_rarity in request_rarities.items()
            if offer_rarity is not None
            and request_rarity is not None
            and rule.compatible(offer_rarity, request_rarity)
        }

    trades: list[PotentialTrade] = []
    seen: set[DedupKey] = set()

    for their_user_id, their_proposals in matchable.items():
        if their_user_id == current_user_id:
            continue

        their_request_by_ref = _first_by_ref(p for p in their_proposals if p.is_request)
        if not their_request_by_ref:
            continue
        their_offers = [p for p in their_proposals if p.is_offer]

        their_name = short_display_name(directory.get(their_user_id), unknown_display_name)

        for my_offer in my_offers:
            their_request = their_request_by_ref.get(my_offer.ref)
            if their_request is None:
                continue

            wanted = acceptable[my_offer.key]
            for their_offer in their_offers:
                if their_offer.ref not in wanted:
                    continue

                my_request = my_request_by_ref.get(their_offer.ref)
                if my_request is None:
                    # Vanished between listing and resolution; never emit a partial trade
                    continue

                dedup_key = (their_offer.ref, their_user_id, my_offer.key)
                if dedup_key in seen:
                    continue
                seen.add(dedup_key)

                trades.append(
                    PotentialTrade(
                        my_offer=my_offer,
                        my_request=my_request,
                        their_offer=their_offer,
                        their_request=their_request,
                        counterparty_id=their_user_id,
                        counterparty_display_name=their_name,
                    )
                )

    logger.debug("Computed %d potential trades for %s", len(trades), current_user_id)
    return trades


def filter_potential_trades(
    trades: Iterable[PotentialTrade],
    catalog: CardCatalog,
    set_code: str | None = None,
    rarity: str | None = None,
    player: str | None = None,
) -> list[PotentialTrade]:
    """
    Narrow potential trades for display.

    Filters apply to the card I would receive (set and rarity) and to the
    counterparty's short display name.
    """
    results = []
    for trade in trades:
        if set_code and trade.my_request.ref.set_code != set_code:
            continue
        if rarity:
            card = catalog.find_card(trade.my_request.ref)
            if card is None or card.rarity != rarity:
                continue
        if player and trade.counterparty_display_name != player:
            continue
        results.append(trade)
    return results


@dataclass
class TradeBoard:
    """
    Data sources for one matching pass, injected by the caller.

    Nothing here is shared across calls. Each fresh snapshot gets a fresh
    board; a board built from a superseded snapshot is simply discarded.
    """

    identity: IdentityState
    snapshot: Snapshot
    directory: Mapping[str, str | None]
    catalog: CardCatalog
    rule: RarityRule
    excluded_rarities: Collection[str] = NON_TRADEABLE_RARITIES
    unknown_display_name: str = UNKNOWN_DISPLAY_NAME

    def potential_trades(self) -> list[PotentialTrade]:
        """Potential trades for the signed-in user; empty while identity is unresolved."""
        user_id = self.identity.current_user_id
        if not self.identity.resolved or user_id is None:
            return []
        return compute_potential_trades(
            user_id,
            self.snapshot,
            self.directory,
            self.catalog,
            self.rule,
            excluded_rarities=self.excluded_rarities,
            unknown_display_name=self.unknown_display_name,
        )

    def my_proposals(self) -> tuple[list[Proposal], list[Proposal]]:
        """The signed-in user's (offers, requests), most recent first."""
        user_id = self.identity.current_user_id
        if not self.identity.resolved or user_id is None:
            return [], []
        return split_proposals(self.snapshot.get(user_id, []))
