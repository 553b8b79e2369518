from dataclasses import dataclass


@dataclass(frozen=True, slots=True)
class CardRef:
    """
    Identity of a catalog card.

    Card ids are compared as strings so that numeric ids coming from the
    catalog and string ids coming from the proposal store agree.
    """

    set_code: str
    card_id: str

    @classmethod
    def of(cls, set_code: str, card_id: str | int) -> "CardRef":
        return cls(set_code=str(set_code), card_id=str(card_id))

    def __str__(self) -> str:
        return f"{self.set_code}-{self.card_id}"


@dataclass(frozen=True, slots=True)
class Card:
    """
    An immutable catalog entry.

    Attributes:
        set_code: Set code (e.g., "A1", "A1a")
        card_id: Identifier unique within the set
        name: Card name as printed
        rarity: Rarity tier symbol (e.g., "◊◊", "☆", "Promo")
        image_ref: Artwork reference (URL or file name)
    """

    set_code: str
    card_id: str
    name: str
    rarity: str
    image_ref: str = ""

    @property
    def ref(self) -> CardRef:
        """Identity key of this card."""
        return CardRef(self.set_code, self.card_id)
