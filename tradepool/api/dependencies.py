"""
Shared FastAPI dependencies.

Data sources are resolved per request and passed explicitly into the
services; nothing here holds per-user state.
"""

from typing import Annotated

from fastapi import Header, HTTPException, status
from pydantic import BaseModel

from tradepool.config import settings
from tradepool.models.card import Card
from tradepool.models.proposal import Proposal
from tradepool.models.rarity import RarityRule, rule_from_name
from tradepool.services.card_catalog import CardCatalog, get_card_catalog
from tradepool.services.identity import IdentityState


def get_catalog() -> CardCatalog:
    """Card catalog, or 503 when it has not been downloaded yet."""
    try:
        return get_card_catalog()
    except FileNotFoundError as e:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Card catalog not available. Please try again later.",
        ) from e


def get_rarity_rule() -> RarityRule:
    """The configured rarity compatibility rule."""
    return rule_from_name(settings.rarity_rule)


def get_identity(
    x_user_id: Annotated[str | None, Header()] = None,
) -> IdentityState:
    """
    Identity of the caller.

    Authentication happens upstream; the gateway forwards the verified
    user id in the X-User-Id header. No header means nobody is signed in.
    """
    if not x_user_id:
        return IdentityState()
    return IdentityState.signed_in(x_user_id)


class CardResponse(BaseModel):
    """A catalog card."""

    set: str
    id: str
    name: str
    rarity: str
    image: str = ""

    @classmethod
    def from_card(cls, card: Card) -> "CardResponse":
        return cls(
            set=card.set_code,
            id=card.card_id,
            name=card.name,
            rarity=card.rarity,
            image=card.image_ref,
        )


class ProposalResponse(BaseModel):
    """A proposal with its card resolved when the catalog knows it."""

    owner: str
    key: str
    set: str
    id: str
    type: str
    card: CardResponse | None = None

    @classmethod
    def from_proposal(cls, proposal: Proposal, catalog: CardCatalog) -> "ProposalResponse":
        card = catalog.find_card(proposal.ref)
        return cls(
            owner=proposal.owner,
            key=proposal.key,
            set=proposal.ref.set_code,
            id=proposal.ref.card_id,
            type=proposal.type.value,
            card=CardResponse.from_card(card) if card else None,
        )
