"""Pydantic schemas for operations and wagers."""

from datetime import datetime
from uuid import UUID

from pydantic import Field

from ..models import Currency, OfferRole, Operation, OperationType, Wager, WagerStatus
from ..services.dto import OfferTerms, OperationRequest, WagerParameters
from .base import LedgerBaseModel, UserRef


# =============================================================================
# REQUESTS
# =============================================================================


class OfferSchema(LedgerBaseModel):
    """One side's stake terms."""

    currency: Currency
    amount_in_cents: int = Field(..., ge=0)
    description: str = Field(default="", max_length=2000)

    def to_dto(self) -> OfferTerms:
        return OfferTerms(
            currency=self.currency,
            amount_in_cents=self.amount_in_cents,
            description=self.description,
        )


class WagerParametersSchema(LedgerBaseModel):
    """Wager-shaped fields supplied with an operation."""

    taker_handle: str | None = None
    arbiter_handle: str | None = None
    outcome: str | None = None
    maker_offer: OfferSchema | None = None
    taker_offer: OfferSchema | None = None
    expiration: datetime | None = None
    maturation: datetime | None = None

    def to_dto(self) -> WagerParameters:
        return WagerParameters(
            taker_handle=self.taker_handle,
            arbiter_handle=self.arbiter_handle,
            outcome=self.outcome,
            maker_offer=self.maker_offer.to_dto() if self.maker_offer else None,
            taker_offer=self.taker_offer.to_dto() if self.taker_offer else None,
            expiration=self.expiration,
            maturation=self.maturation,
        )


class OperationCreateRequest(LedgerBaseModel):
    """Request to append an operation to the ledger."""

    acting_user_handle: str = Field(..., min_length=1, max_length=64)
    operation_type: OperationType
    wager_opaque_id: UUID | None = None
    wager_sequential_id: int | None = Field(default=None, ge=1)
    wager_parameters: WagerParametersSchema | None = None

    def to_request(self) -> OperationRequest:
        return OperationRequest(
            acting_user_handle=self.acting_user_handle,
            operation_type=self.operation_type,
            wager_id=self.wager_opaque_id,
            wager_sequential_id=self.wager_sequential_id,
            wager_parameters=(
                self.wager_parameters.to_dto() if self.wager_parameters else None
            ),
        )


# =============================================================================
# RESPONSES
# =============================================================================


class WagerRef(LedgerBaseModel):
    """Wager reference embedded in operation responses."""

    id: UUID
    sequential_id: int
    status: WagerStatus
    maker_id: UUID
    taker_id: UUID | None = None
    arbiter_id: UUID | None = None

    @classmethod
    def from_wager(cls, wager: Wager) -> "WagerRef":
        return cls(
            id=wager.id,
            sequential_id=wager.sequential_id,
            status=wager.status,
            maker_id=wager.maker_id,
            taker_id=wager.taker_id,
            arbiter_id=wager.arbiter_id,
        )


class OperationResponse(LedgerBaseModel):
    """A persisted operation."""

    id: UUID
    type: OperationType
    acting_user: UserRef
    wager: WagerRef
    created_at: datetime


class OperationLogEntry(LedgerBaseModel):
    """One entry of a wager's operation log."""

    id: UUID
    type: OperationType
    acting_user: UserRef
    created_at: datetime

    @classmethod
    def from_operation(cls, operation: Operation) -> "OperationLogEntry":
        return cls(
            id=operation.id,
            type=operation.type,
            acting_user=UserRef.model_validate(operation.user),
            created_at=operation.created_at,
        )


class OfferResponse(LedgerBaseModel):
    role: OfferRole
    currency: Currency
    amount_in_cents: int
    description: str


class WagerResponse(LedgerBaseModel):
    """Full wager with both offers and participants."""

    id: UUID
    sequential_id: int
    outcome: str
    status: WagerStatus
    maker: UserRef
    taker: UserRef | None = None
    arbiter: UserRef | None = None
    maker_offer: OfferResponse | None = None
    taker_offer: OfferResponse | None = None
    expiration: datetime | None = None
    maturation: datetime | None = None
    created_at: datetime


class OperationHistoryResponse(LedgerBaseModel):
    """A wager's append-only operation log, oldest first."""

    wager: WagerRef
    operations: list[OperationLogEntry]
