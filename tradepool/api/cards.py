"""
Card catalog endpoints.

Lists the cards that can be offered or requested. Non-tradeable
rarities never appear here.
"""

from typing import Annotated

from fastapi import APIRouter, Depends, Query
from pydantic import BaseModel

from tradepool.api.dependencies import CardResponse, get_catalog
from tradepool.config import DEFAULT_PAGE_SIZE, MAX_PAGE_SIZE, settings
from tradepool.services.card_catalog import CardCatalog, paginate

router = APIRouter(prefix="/cards", tags=["cards"])


class CardListResponse(BaseModel):
    """One page of tradeable cards."""

    cards: list[CardResponse]
    total: int
    offset: int
    limit: int


class CatalogFacetsResponse(BaseModel):
    """Values available for catalog filters."""

    sets: list[str]
    rarities: list[str]


@router.get("", response_model=CardListResponse)
async def search_cards(
    catalog: Annotated[CardCatalog, Depends(get_catalog)],
    set_code: Annotated[str | None, Query(alias="set")] = None,
    rarity: str | None = None,
    q: str = "",
    offset: Annotated[int, Query(ge=0)] = 0,
    limit: Annotated[int, Query(ge=1, le=MAX_PAGE_SIZE)] = DEFAULT_PAGE_SIZE,
) -> CardListResponse:
    """
    Search tradeable cards.

    Filters by set, rarity and case-insensitive name prefix. Results are
    paged so clients can load more as the user scrolls.
    """
    matches = catalog.search(
        set_code=set_code,
        rarity=rarity,
        name_prefix=q,
        excluded_rarities=settings.non_tradeable_rarities,
    )
    page = paginate(matches, offset, limit)
    return CardListResponse(
        cards=[CardResponse.from_card(card) for card in page],
        total=len(matches),
        offset=offset,
        limit=limit,
    )


@router.get("/facets", response_model=CatalogFacetsResponse)
async def catalog_facets(
    catalog: Annotated[CardCatalog, Depends(get_catalog)],
) -> CatalogFacetsResponse:
    """Sets and tradeable rarities present in the catalog."""
    return CatalogFacetsResponse(
        sets=catalog.sets(),
        rarities=[r for r in catalog.rarities() if r not in settings.non_tradeable_rarities],
    )
