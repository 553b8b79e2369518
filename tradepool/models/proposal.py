from dataclasses import dataclass
from enum import Enum

from tradepool.models.card import CardRef


class ProposalType(str, Enum):
    """What a user declares about a card."""

    OFFER = "offer"
    REQUEST = "request"


@dataclass(frozen=True, slots=True)
class Proposal:
    """
    A user's standing offer or request for a specific card.

    Attributes:
        owner: User id of the proposal's owner
        key: Store-assigned identifier, unique within the owner's proposals
        ref: The card being offered or requested
        type: Offer or request
    """

    owner: str
    key: str
    ref: CardRef
    type: ProposalType

    @property
    def is_offer(self) -> bool:
        return self.type is ProposalType.OFFER

    @property
    def is_request(self) -> bool:
        return self.type is ProposalType.REQUEST


@dataclass(frozen=True, slots=True)
class UserEntry:
    """A user directory record."""

    user_id: str
    display_name: str | None = None


@dataclass(frozen=True, slots=True)
class PotentialTrade:
    """
    A candidate two-party exchange.

    Derived from a snapshot and never persisted. Identified only by the
    four proposals it references.
    """

    my_offer: Proposal
    my_request: Proposal
    their_offer: Proposal
    their_request: Proposal
    counterparty_id: str
    counterparty_display_name: str

    @property
    def proposal_keys(self) -> tuple[tuple[str, str], ...]:
        """(owner, key) of the four proposals, in retraction order."""
        return (
            (self.my_offer.owner, self.my_offer.key),
            (self.my_request.owner, self.my_request.key),
            (self.their_offer.owner, self.their_offer.key),
            (self.their_request.owner, self.their_request.key),
        )
