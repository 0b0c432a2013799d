"""Data transfer objects passed between the API layer and the services."""

from dataclasses import dataclass
from datetime import datetime
from typing import Generic, TypeVar
from uuid import UUID

from ..models import Currency, Operation, OperationType, User, Wager

T = TypeVar("T")


@dataclass
class OfferTerms:
    """One side's stake terms."""
    currency: Currency
    amount_in_cents: int
    description: str = ""


@dataclass
class WagerParameters:
    """Wager-shaped fields supplied with an operation (PROPOSE only, today)."""
    taker_handle: str | None = None
    arbiter_handle: str | None = None
    outcome: str | None = None
    maker_offer: OfferTerms | None = None
    taker_offer: OfferTerms | None = None
    expiration: datetime | None = None
    maturation: datetime | None = None


@dataclass
class OperationRequest:
    """A request to append one operation to the ledger."""
    acting_user_handle: str
    operation_type: OperationType
    wager_id: UUID | None = None
    wager_sequential_id: int | None = None
    wager_parameters: WagerParameters | None = None


@dataclass
class FindOrCreateResult(Generic[T]):
    """Existing-or-new entity plus whether this call created it."""
    entity: T
    created: bool


@dataclass
class OperationResult:
    """The persisted operation with the rows it was linked to."""
    operation: Operation
    wager: Wager
    acting_user: User
    acting_user_created: bool
