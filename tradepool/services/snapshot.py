"""
Proposal snapshot normalization.

The proposal store delivers a nested mapping
``{user_id: {proposal_key: {"set", "id", "type"}}}``. Matching needs a
flat, ordered list of Proposal objects per user, restricted to cards
that exist in the catalog and are tradeable.

INVARIANT: Normalization never fails the whole snapshot. Malformed or
unresolvable entries are dropped and logged; everything else survives.
"""

import logging
from collections.abc import Collection, Mapping
from dataclasses import dataclass, field
from typing import Any

from tradepool.models.card import CardRef
from tradepool.models.proposal import Proposal, ProposalType
from tradepool.models.rarity import NON_TRADEABLE_RARITIES, is_tradeable
from tradepool.services.card_catalog import CardCatalog

logger = logging.getLogger(__name__)

RawSnapshot = Mapping[str, Mapping[str, Mapping[str, Any]]]
Snapshot = dict[str, list[Proposal]]

DROP_UNKNOWN_CARD = "unknown_card"
DROP_NOT_TRADEABLE = "not_tradeable"


def proposal_from_record(owner: str, key: str, record: Mapping[str, Any]) -> Proposal | None:
    """
    Attach the store key to a raw proposal record.

    Returns None if the record lacks a card reference or has an unknown type.
    """
    set_code = record.get("set")
    card_id = record.get("id")
    if set_code in (None, "") or card_id in (None, ""):
        return None
    try:
        proposal_type = ProposalType(record.get("type"))
    except ValueError:
        return None
    return Proposal(
        owner=owner,
        key=str(key),
        ref=CardRef.of(set_code, card_id),
        type=proposal_type,
    )


def flatten_snapshot(raw: RawSnapshot | None) -> Snapshot:
    """
    Flatten the store's nested mapping into ordered proposal lists.

    Store order (creation order) is preserved within each user.
    A None snapshot (nothing delivered yet) flattens to an empty mapping.
    """
    if not raw:
        return {}

    flattened: Snapshot = {}
    for owner, proposals in raw.items():
        user_proposals = []
        for key, record in (proposals or {}).items():
            proposal = proposal_from_record(owner, key, record)
            if proposal is None:
                logger.warning("Dropping malformed proposal %s/%s", owner, key)
                continue
            user_proposals.append(proposal)
        flattened[owner] = user_proposals
    return flattened


@dataclass
class SnapshotSanitization:
    """Result of restricting a snapshot to matchable proposals."""

    snapshot: Snapshot
    """Proposals that reference known, tradeable cards."""

    dropped: list[tuple[Proposal, str]] = field(default_factory=list)
    """Proposals excluded from matching, with the reason."""

    @property
    def had_drops(self) -> bool:
        return bool(self.dropped)


def sanitize_snapshot(
    snapshot: Snapshot,
    catalog: CardCatalog,
    excluded_rarities: Collection[str] = NON_TRADEABLE_RARITIES,
) -> SnapshotSanitization:
    """
    Exclude proposals that must not take part in matching.

    Proposals for cards absent from the catalog, and for cards whose
    rarity is not tradeable, are dropped. Stored proposals are left
    untouched; this only shapes what the matching engine sees.
    """
    kept: Snapshot = {}
    dropped: list[tuple[Proposal, str]] = []

    for owner, proposals in snapshot.items():
        kept_proposals = []
        for proposal in proposals:
            card = catalog.find_card(proposal.ref)
            if card is None:
                dropped.append((proposal, DROP_UNKNOWN_CARD))
            elif not is_tradeable(card, excluded_rarities):
                dropped.append((proposal, DROP_NOT_TRADEABLE))
            else:
                kept_proposals.append(proposal)
        kept[owner] = kept_proposals

    if dropped:
        logger.debug(
            "snapshot_sanitized",
            extra={
                "dropped_count": len(dropped),
                "dropped_refs": [str(p.ref) for p, _ in dropped[:10]],
            },
        )

    return SnapshotSanitization(snapshot=kept, dropped=dropped)


def split_proposals(proposals: list[Proposal]) -> tuple[list[Proposal], list[Proposal]]:
    """
    Partition one user's proposals into offers and requests.

    Both lists are most recent first: the store returns creation order,
    so each list is reversed.
    """
    offers = [p for p in proposals if p.is_offer]
    requests = [p for p in proposals if p.is_request]
    offers.reverse()
    requests.reverse()
    return offers, requests
