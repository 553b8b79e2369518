from dataclasses import dataclass, field
from enum import Enum


class TradeStatus(str, Enum):
    """Lifecycle of a proposed trade's staging record."""

    PENDING = "pending"
    DECLINED = "declined"
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"


@dataclass(frozen=True, slots=True)
class TradeConfirmation:
    """
    First half of the accept protocol.

    The prompt names both cards so the user can give explicit consent
    before anything is deleted.
    """

    token: str
    prompt: str
    my_card_name: str
    their_card_name: str
    counterparty_display_name: str


@dataclass
class TradeResult:
    """Outcome of confirming (or declining) a proposed trade."""

    token: str
    status: TradeStatus
    deleted: list[tuple[str, str]] = field(default_factory=list)
    already_absent: list[tuple[str, str]] = field(default_factory=list)

    @property
    def accepted(self) -> bool:
        return self.status is TradeStatus.COMPLETED
