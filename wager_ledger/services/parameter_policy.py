"""
Parameter Policy Table: which wager fields each operation type accepts.

The table is plain data: one row per OperationType, one entry per
WagerParameter. The validator walks it generically, and
``verify_policy_table`` is run at startup so the service refuses to serve
with an incomplete or malformed table.
"""

from collections.abc import Mapping
from enum import Enum

from ..models import OperationType
from .errors import PolicyConfigurationError


class ParameterPolicy(str, Enum):
    FORBIDDEN = "FORBIDDEN"
    OPTIONAL = "OPTIONAL"
    REQUIRED = "REQUIRED"


class WagerParameter(str, Enum):
    """Wager-shaped fields a request may carry."""

    TAKER = "taker"
    ARBITER = "arbiter"
    OUTCOME = "outcome"
    MAKER_OFFER = "maker_offer"
    TAKER_OFFER = "taker_offer"
    EXPIRATION = "expiration"
    MATURATION = "maturation"


PolicyTable = Mapping[OperationType, Mapping[WagerParameter, ParameterPolicy]]

_NO_PARAMETERS = {parameter: ParameterPolicy.FORBIDDEN for parameter in WagerParameter}

POLICY_TABLE: PolicyTable = {
    OperationType.PROPOSE: {
        WagerParameter.TAKER: ParameterPolicy.OPTIONAL,
        WagerParameter.ARBITER: ParameterPolicy.OPTIONAL,
        WagerParameter.OUTCOME: ParameterPolicy.REQUIRED,
        WagerParameter.MAKER_OFFER: ParameterPolicy.REQUIRED,
        WagerParameter.TAKER_OFFER: ParameterPolicy.REQUIRED,
        WagerParameter.EXPIRATION: ParameterPolicy.OPTIONAL,
        WagerParameter.MATURATION: ParameterPolicy.OPTIONAL,
    },
    OperationType.ACCEPT: dict(_NO_PARAMETERS),
    OperationType.REJECT: dict(_NO_PARAMETERS),
    OperationType.CANCEL: dict(_NO_PARAMETERS),
    OperationType.TAKE: dict(_NO_PARAMETERS),
    OperationType.CLOSE: dict(_NO_PARAMETERS),
    OperationType.APPEAL: dict(_NO_PARAMETERS),
}


def verify_policy_table(table: PolicyTable) -> None:
    """Check the table covers every operation type and parameter exactly.

    Raises:
        PolicyConfigurationError: listing every problem found.
    """
    problems: list[str] = []

    expected_types = set(OperationType)
    covered_types = set(table.keys())
    missing_types = expected_types - covered_types
    unexpected_types = covered_types - expected_types
    if missing_types:
        problems.append(
            "missing operation types: " + ", ".join(sorted(str(t.value) for t in missing_types))
        )
    if unexpected_types:
        problems.append(
            "unexpected operation types: " + ", ".join(sorted(repr(t) for t in unexpected_types))
        )

    expected_parameters = set(WagerParameter)
    for operation_type, row in table.items():
        label = getattr(operation_type, "value", operation_type)
        keys = set(row.keys())
        missing = expected_parameters - keys
        extra = keys - expected_parameters
        if missing:
            problems.append(
                f"{label}: missing parameters "
                + ", ".join(sorted(p.value for p in missing))
            )
        if extra:
            problems.append(
                f"{label}: unexpected parameters " + ", ".join(sorted(repr(p) for p in extra))
            )
        for parameter, policy in row.items():
            if not isinstance(policy, ParameterPolicy):
                problems.append(
                    f"{label}.{getattr(parameter, 'value', parameter)}: "
                    f"{policy!r} is not a parameter policy"
                )

    if problems:
        raise PolicyConfigurationError(
            "Inconsistent parameter policy table: " + "; ".join(problems)
        )


def policy_for(
    operation_type: OperationType,
    parameter: WagerParameter,
    table: PolicyTable = POLICY_TABLE,
) -> ParameterPolicy:
    return table[operation_type][parameter]
