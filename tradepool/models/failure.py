"""
Failure classification for the trade pool.

Known failures carry a kind, a user-appropriate message and an HTTP
status code. The matching engine itself never raises for missing cards
or vanished proposals; it degrades instead. Only the mutation surface
raises these errors.
"""

from enum import Enum

from pydantic import BaseModel, Field


class FailureKind(str, Enum):
    """Classification of failure types."""

    # Resource failures
    NOT_FOUND = "not_found"
    STALE_REFERENCE = "stale_reference"

    # Constraint violations
    NOT_TRADEABLE = "not_tradeable"

    # Trade execution
    NOT_TRADE_PARTY = "not_trade_party"
    PARTIAL_MUTATION = "partial_mutation"


class FailureDetail(BaseModel):
    """Detailed information about a failure."""

    kind: FailureKind = Field(
        ...,
        description="Classification of the failure",
    )
    message: str = Field(
        ...,
        description="User-appropriate explanation of what went wrong",
    )
    detail: str | None = Field(
        default=None,
        description="Additional technical detail (optional)",
    )
    suggestion: str | None = Field(
        default=None,
        description="Suggested action for the user",
    )


class KnownError(Exception):
    """
    Base class for exceptions that represent known, explainable failures.

    Subclass this for errors where the system knows exactly what went wrong.
    """

    def __init__(
        self,
        kind: FailureKind,
        message: str,
        detail: str | None = None,
        suggestion: str | None = None,
        status_code: int = 400,
    ):
        self.kind = kind
        self.message = message
        self.detail = detail
        self.suggestion = suggestion
        self.status_code = status_code
        super().__init__(message)

    def to_detail(self) -> FailureDetail:
        """Convert to a serializable failure body."""
        return FailureDetail(
            kind=self.kind,
            message=self.message,
            detail=self.detail,
            suggestion=self.suggestion,
        )


class CardNotFoundError(KnownError):
    """Raised when a card reference is absent from the catalog."""

    def __init__(self, set_code: str, card_id: str):
        self.set_code = set_code
        self.card_id = card_id
        super().__init__(
            kind=FailureKind.NOT_FOUND,
            message=f"Card {set_code}-{card_id} is not in the catalog.",
            suggestion="Check the set code and card id.",
            status_code=404,
        )


class CardNotTradeableError(KnownError):
    """Raised when offering or requesting a card whose rarity cannot be traded."""

    def __init__(self, card_name: str, rarity: str):
        self.card_name = card_name
        self.rarity = rarity
        super().__init__(
            kind=FailureKind.NOT_TRADEABLE,
            message=f"{card_name} cannot be traded.",
            detail=f"Rarity '{rarity}' is excluded from trading",
            status_code=400,
        )


class TradeNotFoundError(KnownError):
    """Raised when a confirmation token does not match any proposed trade."""

    def __init__(self, token: str):
        self.token = token
        super().__init__(
            kind=FailureKind.NOT_FOUND,
            message="This trade is no longer available.",
            detail=f"Unknown confirmation token {token}",
            suggestion="Refresh your potential trades and try again.",
            status_code=404,
        )


class TradeNotPartyError(KnownError):
    """Raised when someone other than the proposing user answers a trade."""

    def __init__(self, token: str):
        self.token = token
        super().__init__(
            kind=FailureKind.NOT_TRADE_PARTY,
            message="Only the user who proposed this trade can confirm it.",
            detail=f"Caller is not the initiator of trade {token}",
            status_code=403,
        )


class StaleTradeError(KnownError):
    """Raised when a requested trade is no longer among the potential trades."""

    def __init__(self, keys: list[str]):
        self.keys = keys
        super().__init__(
            kind=FailureKind.STALE_REFERENCE,
            message="This trade is no longer available.",
            detail=f"No potential trade for proposals: {', '.join(keys)}",
            suggestion="Refresh your potential trades and try again.",
            status_code=409,
        )


class PartialMutationError(KnownError):
    """
    Raised when a trade's proposal retraction stopped part way.

    The staging record stays in progress so any client can finish it.
    """

    def __init__(self, token: str, deleted: int, detail: str | None = None):
        self.token = token
        self.deleted = deleted
        super().__init__(
            kind=FailureKind.PARTIAL_MUTATION,
            message="The trade was interrupted and will be completed automatically.",
            detail=detail,
            suggestion="Retry the confirmation; completed steps are not repeated.",
            status_code=503,
        )
