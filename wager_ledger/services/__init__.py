"""Business logic services for the Wager Ledger."""

from .dto import (
    FindOrCreateResult,
    OfferTerms,
    OperationRequest,
    OperationResult,
    WagerParameters,
)
from .errors import (
    AmbiguousWagerReference,
    InvalidSlackHandle,
    LedgerError,
    MissingWagerParameters,
    MissingWagerReference,
    OperationValidationError,
    PolicyConfigurationError,
    SequentialIdConflict,
    TransactionFailedError,
    UnexpectedWagerParameters,
    UnexpectedWagerReference,
    UserDeleted,
    WagerNotFound,
    WagerParameterPolicyViolation,
)
from .operation_engine import OperationEngine
from .operation_validator import validate_operation
from .parameter_policy import (
    POLICY_TABLE,
    ParameterPolicy,
    WagerParameter,
    verify_policy_table,
)
from .wager_repository import NewWagerFields, WagerRepository

__all__ = [
    # Engine
    "OperationEngine",
    "WagerRepository",
    "NewWagerFields",
    "validate_operation",
    # Policy
    "POLICY_TABLE",
    "ParameterPolicy",
    "WagerParameter",
    "verify_policy_table",
    # DTOs
    "OperationRequest",
    "WagerParameters",
    "OfferTerms",
    "OperationResult",
    "FindOrCreateResult",
    # Errors
    "LedgerError",
    "OperationValidationError",
    "AmbiguousWagerReference",
    "MissingWagerReference",
    "UnexpectedWagerReference",
    "MissingWagerParameters",
    "UnexpectedWagerParameters",
    "WagerParameterPolicyViolation",
    "InvalidSlackHandle",
    "WagerNotFound",
    "UserDeleted",
    "TransactionFailedError",
    "SequentialIdConflict",
    "PolicyConfigurationError",
]
