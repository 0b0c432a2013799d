"""Exceptions raised by the wager ledger services.

Every error carries a stable ``code`` that the API layer uses as the
``error`` field of its response body.
"""


# =============================================================================
# BASE
# =============================================================================


class LedgerError(Exception):
    """Base exception for ledger operations."""

    code = "ledger_error"


# =============================================================================
# VALIDATION (raised before any I/O)
# =============================================================================


class OperationValidationError(LedgerError):
    """The submitted operation request is malformed for its type."""

    code = "invalid_operation"


class AmbiguousWagerReference(OperationValidationError):
    """Both an opaque id and a sequential id were supplied."""

    code = "ambiguous_wager_reference"


class MissingWagerReference(OperationValidationError):
    """Neither an opaque id nor a sequential id was supplied."""

    code = "missing_wager_reference"


class UnexpectedWagerReference(OperationValidationError):
    """A PROPOSE request referenced an existing wager."""

    code = "unexpected_wager_reference"


class MissingWagerParameters(OperationValidationError):
    """A PROPOSE request came without wager parameters."""

    code = "missing_wager_parameters"


class UnexpectedWagerParameters(OperationValidationError):
    """A non-PROPOSE request carried wager parameters."""

    code = "unexpected_wager_parameters"


class WagerParameterPolicyViolation(OperationValidationError):
    """A wager parameter broke the policy row for the operation type."""

    code = "wager_parameter_policy_violation"

    def __init__(self, field: str, policy: str, operation_type: str):
        self.field = field
        self.policy = policy
        self.operation_type = operation_type
        if policy == "REQUIRED":
            message = f"'{field}' is required for {operation_type}"
        else:
            message = f"'{field}' is not allowed for {operation_type}"
        super().__init__(message)


class InvalidSlackHandle(OperationValidationError):
    """A Slack handle does not match the configured pattern."""

    code = "invalid_slack_handle"

    def __init__(self, field: str, handle: str | None):
        self.field = field
        self.handle = handle
        super().__init__(f"'{field}' is not a valid Slack handle: {handle!r}")


# =============================================================================
# RESOLUTION
# =============================================================================


class WagerNotFound(LedgerError):
    """Referenced wager does not exist (or was deleted)."""

    code = "wager_not_found"


class UserDeleted(LedgerError):
    """The Slack handle belongs to a soft-deleted user and cannot be reused."""

    code = "user_deleted"


# =============================================================================
# TRANSACTION
# =============================================================================


class TransactionFailedError(LedgerError):
    """The resolve/link transaction failed and was rolled back.

    The original exception is chained as ``__cause__``.
    """

    code = "transaction_failed"


class SequentialIdConflict(TransactionFailedError):
    """Another transaction committed a wager with the same sequential id first."""

    code = "sequential_id_conflict"


# =============================================================================
# STARTUP
# =============================================================================


class PolicyConfigurationError(LedgerError):
    """The parameter policy table is inconsistent; the service must not start."""

    code = "policy_configuration_error"
