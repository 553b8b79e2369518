"""
Card catalog service.

Loads the card catalog once and answers lookups by (set, id).
"""

import json
import logging
from collections.abc import Collection, Iterable, Sequence
from functools import lru_cache
from pathlib import Path
from typing import Any

import httpx

from tradepool.config import settings
from tradepool.models.card import Card, CardRef
from tradepool.models.rarity import NON_TRADEABLE_RARITIES, is_tradeable, rarity_rank

logger = logging.getLogger(__name__)

REQUIRED_FIELDS = ("set", "id", "name", "rarity")


class CardCatalog:
    """
    Read-only index of card definitions.

    Cards keep catalog order; lookups go through a (set, id) index.
    """

    def __init__(self, cards: Iterable[Card]):
        self._cards: list[Card] = []
        self._index: dict[CardRef, Card] = {}
        for card in cards:
            if card.ref in self._index:
                logger.debug("Duplicate catalog entry %s ignored", card.ref)
                continue
            self._cards.append(card)
            self._index[card.ref] = card

    def __len__(self) -> int:
        return len(self._cards)

    def __contains__(self, ref: object) -> bool:
        return ref in self._index

    @property
    def cards(self) -> list[Card]:
        return list(self._cards)

    def find_card(self, ref: CardRef) -> Card | None:
        """Look up a card by identity. Returns None if absent."""
        return self._index.get(ref)

    def sets(self) -> list[str]:
        """Set codes in first-seen order."""
        return list(dict.fromkeys(card.set_code for card in self._cards))

    def rarities(self) -> list[str]:
        """Distinct rarities, most common first."""
        return sorted({card.rarity for card in self._cards}, key=rarity_rank)

    def search(
        self,
        set_code: str | None = None,
        rarity: str | None = None,
        name_prefix: str = "",
        tradeable_only: bool = True,
        excluded_rarities: Collection[str] = NON_TRADEABLE_RARITIES,
    ) -> list[Card]:
        """
        Cards available to be offered or requested.

        Args:
            set_code: Only cards from this set
            rarity: Only cards of this rarity
            name_prefix: Case-insensitive prefix of the card name
            tradeable_only: Apply the trade eligibility filter
            excluded_rarities: Rarities that can never be traded

        Returns:
            Matching cards in catalog order.
        """
        prefix = name_prefix.lower()
        results = []
        for card in self._cards:
            if set_code and card.set_code != set_code:
                continue
            if rarity and card.rarity != rarity:
                continue
            if tradeable_only and not is_tradeable(card, excluded_rarities):
                continue
            if not card.name.lower().startswith(prefix):
                continue
            results.append(card)
        return results


def paginate(cards: Sequence[Card], offset: int, limit: int) -> list[Card]:
    """Slice one page of results for incremental loading."""
    if offset < 0 or limit < 0:
        raise ValueError("offset and limit must be non-negative")
    return list(cards[offset : offset + limit])


def card_from_record(record: dict[str, Any]) -> Card | None:
    """
    Build a Card from a raw catalog record.

    Returns None if a required field is missing.
    """
    if any(record.get(name) in (None, "") for name in REQUIRED_FIELDS):
        return None
    return Card(
        set_code=str(record["set"]),
        card_id=str(record["id"]),
        name=str(record["name"]),
        rarity=str(record["rarity"]),
        image_ref=str(record.get("image", "")),
    )


def build_card_catalog(records: Iterable[dict[str, Any]]) -> CardCatalog:
    """Build a catalog from raw records, skipping malformed ones."""
    cards = []
    skipped = 0
    for record in records:
        card = card_from_record(record)
        if card is None:
            skipped += 1
            continue
        cards.append(card)

    if skipped:
        logger.warning("Skipped %d malformed catalog records", skipped)

    return CardCatalog(cards)


async def download_card_catalog(url: str, output_path: Path | None = None) -> Path:
    """
    Download the card catalog JSON.

    Args:
        url: Location of the catalog JSON array
        output_path: Where to save the file. Defaults to the configured catalog path

    Returns:
        Path to downloaded file.

    Raises:
        ValueError: If no URL is configured
        httpx.HTTPError: If download fails
    """
    if not url:
        raise ValueError("No catalog URL configured")

    if output_path is None:
        output_path = Path(settings.catalog_path)

    output_path.parent.mkdir(parents=True, exist_ok=True)

    async with httpx.AsyncClient(timeout=30.0) as client:
        async with client.stream("GET", url) as response:
            response.raise_for_status()
            with open(output_path, "wb") as f:
                async for chunk in response.aiter_bytes(8192):
                    f.write(chunk)

    return output_path


def load_card_catalog(path: Path | None = None) -> CardCatalog:
    """
    Load the card catalog from file.

    Args:
        path: Path to JSON file. Defaults to the configured catalog path

    Returns:
        CardCatalog indexed by (set, id).

    Raises:
        FileNotFoundError: If catalog file doesn't exist
    """
    if path is None:
        path = Path(settings.catalog_path)

    if not path.exists():
        raise FileNotFoundError(
            f"Card catalog not found at {path}. "
            "Run `python -m tradepool.jobs.download_catalog` first."
        )

    with open(path, encoding="utf-8") as f:
        records = json.load(f)

    catalog = build_card_catalog(records)
    logger.info("Loaded %d cards from %s", len(catalog), path)
    return catalog


@lru_cache(maxsize=1)
def get_card_catalog() -> CardCatalog:
    """
    Get cached card catalog.

    Cached after first load.

    Raises:
        FileNotFoundError: If catalog file doesn't exist
    """
    return load_card_catalog()
