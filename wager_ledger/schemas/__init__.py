"""Wager Ledger API Schemas.

- base: common configuration, error envelope, references
- operations: operation requests, operation and wager responses
"""

from .base import ErrorDetail, ErrorResponse, LedgerBaseModel, UserRef
from .operations import (
    OfferResponse,
    OfferSchema,
    OperationCreateRequest,
    OperationHistoryResponse,
    OperationLogEntry,
    OperationResponse,
    WagerParametersSchema,
    WagerRef,
    WagerResponse,
)

__all__ = [
    "LedgerBaseModel",
    "ErrorDetail",
    "ErrorResponse",
    "UserRef",
    "OfferSchema",
    "WagerParametersSchema",
    "OperationCreateRequest",
    "OperationResponse",
    "OperationLogEntry",
    "OperationHistoryResponse",
    "OfferResponse",
    "WagerRef",
    "WagerResponse",
]
