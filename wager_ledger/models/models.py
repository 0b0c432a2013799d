"""SQLAlchemy ORM Models for the Wager Ledger.

A Wager is the aggregate; Offers hang off it by role, Users take part in it
through the UserWager collection, and Operations are the append-only log of
actions taken against it.
"""

from datetime import datetime
from enum import Enum as PyEnum
from uuid import UUID

from sqlalchemy import (
    CheckConstraint,
    Enum,
    ForeignKey,
    Index,
    Integer,
    String,
    Text,
    UniqueConstraint,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from .base import Base, SoftDeleteMixin, TimestampMixin, UUIDMixin, utcnow


# =============================================================================
# ENUMS
# =============================================================================


class OperationType(str, PyEnum):
    PROPOSE = "PROPOSE"
    ACCEPT = "ACCEPT"
    REJECT = "REJECT"
    CANCEL = "CANCEL"
    TAKE = "TAKE"
    CLOSE = "CLOSE"
    APPEAL = "APPEAL"


class WagerStatus(str, PyEnum):
    UNACCEPTED = "UNACCEPTED"  # Proposed to a named taker
    LISTED = "LISTED"  # Open for anyone to take
    UNCONFIRMED = "UNCONFIRMED"
    ACCEPTED = "ACCEPTED"
    REJECTED = "REJECTED"
    CANCELLED = "CANCELLED"
    EXPIRED = "EXPIRED"
    CLOSED = "CLOSED"
    COMPLETED = "COMPLETED"
    APPEALED = "APPEALED"


class Currency(str, PyEnum):
    CAD = "CAD"
    USD = "USD"


class OfferRole(str, PyEnum):
    MAKER = "MAKER"
    TAKER = "TAKER"


def _enum_values(enum_cls):
    return [e.value for e in enum_cls]


# =============================================================================
# USER
# =============================================================================


class User(Base, UUIDMixin, TimestampMixin, SoftDeleteMixin):
    """A party to wagers, identified by Slack handle."""

    __tablename__ = "users"

    slack_handle: Mapped[str] = mapped_column(String(64), nullable=False)

    __table_args__ = (
        # Natural key for find-or-create; keeps concurrent creation from
        # producing two rows for the same handle.
        UniqueConstraint("slack_handle"),
    )

    def __repr__(self) -> str:
        return f"<User(id={self.id}, slack_handle='{self.slack_handle}')>"


# =============================================================================
# WAGER & OFFERS
# =============================================================================


class Wager(Base, UUIDMixin, TimestampMixin, SoftDeleteMixin):
    """The bet aggregate between a maker and (optionally) a taker."""

    __tablename__ = "wagers"

    sequential_id: Mapped[int] = mapped_column(Integer, nullable=False)
    outcome: Mapped[str] = mapped_column(Text, nullable=False)
    status: Mapped[WagerStatus] = mapped_column(
        Enum(WagerStatus, name="wager_status", values_callable=_enum_values),
        nullable=False,
    )

    maker_id: Mapped[UUID] = mapped_column(ForeignKey("users.id"), nullable=False)
    taker_id: Mapped[UUID | None] = mapped_column(ForeignKey("users.id"))
    arbiter_id: Mapped[UUID | None] = mapped_column(ForeignKey("users.id"))

    # Caller-supplied
    expiration: Mapped[datetime | None] = mapped_column()
    maturation: Mapped[datetime | None] = mapped_column()

    # Lifecycle timestamps
    accepted_at: Mapped[datetime | None] = mapped_column()
    accepted_by_maker_at: Mapped[datetime | None] = mapped_column()
    accepted_by_taker_at: Mapped[datetime | None] = mapped_column()
    accepted_by_arbiter_at: Mapped[datetime | None] = mapped_column()
    rejected_at: Mapped[datetime | None] = mapped_column()
    cancelled_at: Mapped[datetime | None] = mapped_column()
    appealed_at: Mapped[datetime | None] = mapped_column()
    taken_at: Mapped[datetime | None] = mapped_column()
    completed_at: Mapped[datetime | None] = mapped_column()
    closed_at: Mapped[datetime | None] = mapped_column()

    # Users responsible for terminal transitions
    rejected_by: Mapped[UUID | None] = mapped_column(ForeignKey("users.id"))
    cancelled_by: Mapped[UUID | None] = mapped_column(ForeignKey("users.id"))
    appealed_by: Mapped[UUID | None] = mapped_column(ForeignKey("users.id"))
    closed_by: Mapped[UUID | None] = mapped_column(ForeignKey("users.id"))

    # Relationships
    maker: Mapped["User"] = relationship(foreign_keys=[maker_id])
    taker: Mapped["User | None"] = relationship(foreign_keys=[taker_id])
    arbiter: Mapped["User | None"] = relationship(foreign_keys=[arbiter_id])
    offers: Mapped[list["Offer"]] = relationship(
        back_populates="wager",
        order_by="Offer.role",
    )

    __table_args__ = (
        UniqueConstraint("sequential_id"),
        Index("idx_wagers_maker", "maker_id"),
        Index("idx_wagers_status", "status"),
    )

    def _offer_for(self, role: OfferRole) -> "Offer | None":
        for offer in self.offers:
            if offer.role == role:
                return offer
        return None

    @property
    def maker_offer(self) -> "Offer | None":
        return self._offer_for(OfferRole.MAKER)

    @property
    def taker_offer(self) -> "Offer | None":
        return self._offer_for(OfferRole.TAKER)

    def __repr__(self) -> str:
        return f"<Wager(#{self.sequential_id}, status={self.status}, maker_id={self.maker_id})>"


class Offer(Base, UUIDMixin, TimestampMixin, SoftDeleteMixin):
    """One side's stake terms within a Wager."""

    __tablename__ = "offers"

    wager_id: Mapped[UUID] = mapped_column(ForeignKey("wagers.id"), nullable=False)
    role: Mapped[OfferRole] = mapped_column(
        Enum(OfferRole, name="offer_role", values_callable=_enum_values),
        nullable=False,
    )
    currency: Mapped[Currency] = mapped_column(
        Enum(Currency, name="currency", values_callable=_enum_values),
        nullable=False,
    )
    amount_in_cents: Mapped[int] = mapped_column(Integer, nullable=False)
    description: Mapped[str] = mapped_column(Text, nullable=False, default="")

    wager: Mapped["Wager"] = relationship(back_populates="offers")

    __table_args__ = (
        UniqueConstraint("wager_id", "role"),
        CheckConstraint("amount_in_cents >= 0", name="amount_non_negative"),
    )


class UserWager(Base):
    """Membership of a Wager in a User's collection."""

    __tablename__ = "user_wagers"

    user_id: Mapped[UUID] = mapped_column(ForeignKey("users.id"), primary_key=True)
    wager_id: Mapped[UUID] = mapped_column(ForeignKey("wagers.id"), primary_key=True)
    created_at: Mapped[datetime] = mapped_column(default=utcnow, nullable=False)

    user: Mapped["User"] = relationship()
    wager: Mapped["Wager"] = relationship()


# =============================================================================
# OPERATION LOG
# =============================================================================


class Operation(Base, UUIDMixin, SoftDeleteMixin):
    """Immutable audit record of one action taken against a Wager.

    Both references are NOT NULL: an Operation that was never linked cannot
    be flushed, so the enclosing transaction fails instead of persisting a
    dangling entry.
    """

    __tablename__ = "operations"

    type: Mapped[OperationType] = mapped_column(
        Enum(OperationType, name="operation_type", values_callable=_enum_values),
        nullable=False,
    )
    user_id: Mapped[UUID] = mapped_column(ForeignKey("users.id"), nullable=False)
    wager_id: Mapped[UUID] = mapped_column(ForeignKey("wagers.id"), nullable=False)
    created_at: Mapped[datetime] = mapped_column(default=utcnow, nullable=False)

    user: Mapped["User"] = relationship(foreign_keys=[user_id])
    wager: Mapped["Wager"] = relationship(foreign_keys=[wager_id])

    __table_args__ = (
        Index("idx_operations_wager", "wager_id", "created_at"),
        Index("idx_operations_user", "user_id"),
    )
