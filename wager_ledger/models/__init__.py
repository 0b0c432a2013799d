"""SQLAlchemy ORM Models for the Wager Ledger."""

from .base import Base, SoftDeleteMixin, TimestampMixin, UUIDMixin
from .models import (
    # Enums
    Currency,
    OfferRole,
    OperationType,
    WagerStatus,
    # Entities
    Offer,
    Operation,
    User,
    UserWager,
    Wager,
)

__all__ = [
    # Base
    "Base",
    "UUIDMixin",
    "TimestampMixin",
    "SoftDeleteMixin",
    # Enums
    "Currency",
    "OfferRole",
    "OperationType",
    "WagerStatus",
    # Entities
    "User",
    "Wager",
    "Offer",
    "UserWager",
    "Operation",
]
