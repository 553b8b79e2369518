"""
SQLAlchemy ORM models for persistent storage.

The proposal store and user directory live here, along with the staging
records that track accepted trades until all four proposals are retracted.
"""

from datetime import datetime

from sqlalchemy import DateTime, Integer, String, UniqueConstraint, func
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column


class Base(DeclarativeBase):
    """Base class for all ORM models."""

    pass


class UserDB(Base):
    """
    A user directory entry.

    Written on every sign-in so display names stay current.
    """

    __tablename__ = "users"

    user_id: Mapped[str] = mapped_column(String(255), primary_key=True)
    display_name: Mapped[str | None] = mapped_column(String(255), nullable=True)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), onupdate=func.now()
    )

    def __repr__(self) -> str:
        return f"<UserDB(user_id={self.user_id}, display_name={self.display_name})>"


class TradeProposalDB(Base):
    """
    A single offer or request.

    The key is assigned by the store on creation and is unique per owner.
    The autoincrement id preserves creation order.
    """

    __tablename__ = "trade_proposals"
    __table_args__ = (UniqueConstraint("owner", "key", name="uq_owner_key"),)

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    owner: Mapped[str] = mapped_column(String(255), index=True)
    key: Mapped[str] = mapped_column(String(64))
    set_code: Mapped[str] = mapped_column(String(16))
    card_id: Mapped[str] = mapped_column(String(32))
    type: Mapped[str] = mapped_column(String(16))
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now())

    def __repr__(self) -> str:
        return (
            f"<TradeProposalDB(owner={self.owner}, key={self.key}, "
            f"card={self.set_code}-{self.card_id}, type={self.type})>"
        )


class PendingTradeDB(Base):
    """
    Staging record for a proposed trade.

    Status moves pending -> declined, or pending -> in_progress -> completed.
    An in_progress record whose deletions were interrupted can be finished
    by any client.
    """

    __tablename__ = "pending_trades"

    token: Mapped[str] = mapped_column(String(64), primary_key=True)
    initiator: Mapped[str] = mapped_column(String(255), index=True)
    counterparty: Mapped[str] = mapped_column(String(255))

    my_offer_key: Mapped[str] = mapped_column(String(64))
    my_request_key: Mapped[str] = mapped_column(String(64))
    their_offer_key: Mapped[str] = mapped_column(String(64))
    their_request_key: Mapped[str] = mapped_column(String(64))

    status: Mapped[str] = mapped_column(String(16), default="pending", index=True)
    prompt: Mapped[str] = mapped_column(String(512), default="")

    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now())
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), onupdate=func.now()
    )

    def retraction_order(self) -> list[tuple[str, str]]:
        """(owner, key) pairs in the fixed deletion order."""
        return [
            (self.initiator, self.my_offer_key),
            (self.initiator, self.my_request_key),
            (self.counterparty, self.their_offer_key),
            (self.counterparty, self.their_request_key),
        ]

    def __repr__(self) -> str:
        return f"<PendingTradeDB(token={self.token}, status={self.status})>"
