"""
Operation Validator: accept or reject a request before any persistence I/O.

Rules, applied in order:
1. Non-PROPOSE requests reference exactly one existing wager
   (opaque id XOR sequential id).
2. PROPOSE requests reference no wager and must carry wager parameters.
3. Non-PROPOSE requests carry no wager parameters.
4. Each wager parameter obeys the policy row for the operation type.
5. Every Slack handle matches the configured pattern.

This module is pure: no sessions, no logging of side effects.
"""

import re
from typing import Any

from ..models import OperationType
from .dto import OperationRequest, WagerParameters
from .errors import (
    AmbiguousWagerReference,
    InvalidSlackHandle,
    MissingWagerParameters,
    MissingWagerReference,
    UnexpectedWagerParameters,
    UnexpectedWagerReference,
    WagerParameterPolicyViolation,
)
from .parameter_policy import (
    POLICY_TABLE,
    ParameterPolicy,
    PolicyTable,
    WagerParameter,
    policy_for,
)

DEFAULT_HANDLE_PATTERN = r"^[UW][A-Z0-9]+$"

# WagerParameter -> attribute on WagerParameters
PARAMETER_FIELDS: dict[WagerParameter, str] = {
    WagerParameter.TAKER: "taker_handle",
    WagerParameter.ARBITER: "arbiter_handle",
    WagerParameter.OUTCOME: "outcome",
    WagerParameter.MAKER_OFFER: "maker_offer",
    WagerParameter.TAKER_OFFER: "taker_offer",
    WagerParameter.EXPIRATION: "expiration",
    WagerParameter.MATURATION: "maturation",
}


def _is_present(value: Any) -> bool:
    if value is None:
        return False
    if isinstance(value, str):
        return bool(value.strip())
    return True


def check_wager_reference(wager_id: Any, sequential_id: int | None) -> None:
    """Exactly one of the two wager identifiers must be given."""
    if wager_id is not None and sequential_id is not None:
        raise AmbiguousWagerReference(
            "Supply either a wager id or a sequential id, not both"
        )
    if wager_id is None and sequential_id is None:
        raise MissingWagerReference(
            "A wager id or a sequential id is required"
        )


def check_parameters(
    operation_type: OperationType,
    parameters: WagerParameters,
    table: PolicyTable = POLICY_TABLE,
) -> None:
    """Check each wager parameter against the policy row for the type."""
    for parameter, field_name in PARAMETER_FIELDS.items():
        policy = policy_for(operation_type, parameter, table)
        present = _is_present(getattr(parameters, field_name))
        if policy == ParameterPolicy.REQUIRED and not present:
            raise WagerParameterPolicyViolation(
                parameter.value, policy.value, operation_type.value
            )
        if policy == ParameterPolicy.FORBIDDEN and present:
            raise WagerParameterPolicyViolation(
                parameter.value, policy.value, operation_type.value
            )


def check_handle(field: str, handle: str | None, pattern: re.Pattern[str]) -> None:
    if handle is None or not pattern.fullmatch(handle):
        raise InvalidSlackHandle(field, handle)


def validate_operation(
    request: OperationRequest,
    policy_table: PolicyTable = POLICY_TABLE,
    handle_pattern: str = DEFAULT_HANDLE_PATTERN,
) -> None:
    """
    Validate an operation request.

    Raises:
        OperationValidationError: the specific subclass for the first
            rule the request breaks.
    """
    has_reference = (
        request.wager_id is not None or request.wager_sequential_id is not None
    )

    if request.operation_type == OperationType.PROPOSE:
        if has_reference:
            raise UnexpectedWagerReference(
                "PROPOSE creates a new wager and cannot reference an existing one"
            )
        if request.wager_parameters is None:
            raise MissingWagerParameters("PROPOSE requires wager parameters")
    else:
        check_wager_reference(request.wager_id, request.wager_sequential_id)
        if request.wager_parameters is not None:
            raise UnexpectedWagerParameters(
                f"{request.operation_type.value} does not accept wager parameters"
            )

    if request.wager_parameters is not None:
        check_parameters(request.operation_type, request.wager_parameters, policy_table)

    pattern = re.compile(handle_pattern)
    check_handle("acting_user_handle", request.acting_user_handle, pattern)
    params = request.wager_parameters
    if params is not None:
        if _is_present(params.taker_handle):
            check_handle("taker", params.taker_handle, pattern)
        if _is_present(params.arbiter_handle):
            check_handle("arbiter", params.arbiter_handle, pattern)
