"""
Tests for the Parameter Policy Table and its startup self-check.
"""

import pytest

from wager_ledger.models import OperationType
from wager_ledger.services import (
    POLICY_TABLE,
    ParameterPolicy,
    PolicyConfigurationError,
    WagerParameter,
    verify_policy_table,
)


def _copy_table() -> dict:
    return {op: dict(row) for op, row in POLICY_TABLE.items()}


class TestPolicyTableContents:
    """The shipped table."""

    def test_shipped_table_is_consistent(self):
        verify_policy_table(POLICY_TABLE)

    def test_propose_requires_outcome_and_both_offers(self):
        row = POLICY_TABLE[OperationType.PROPOSE]
        assert row[WagerParameter.OUTCOME] == ParameterPolicy.REQUIRED
        assert row[WagerParameter.MAKER_OFFER] == ParameterPolicy.REQUIRED
        assert row[WagerParameter.TAKER_OFFER] == ParameterPolicy.REQUIRED

    def test_propose_participants_and_dates_are_optional(self):
        row = POLICY_TABLE[OperationType.PROPOSE]
        for parameter in (
            WagerParameter.TAKER,
            WagerParameter.ARBITER,
            WagerParameter.EXPIRATION,
            WagerParameter.MATURATION,
        ):
            assert row[parameter] == ParameterPolicy.OPTIONAL

    @pytest.mark.parametrize(
        "operation_type",
        [op for op in OperationType if op != OperationType.PROPOSE],
    )
    def test_other_types_forbid_every_parameter(self, operation_type):
        row = POLICY_TABLE[operation_type]
        assert set(row.values()) == {ParameterPolicy.FORBIDDEN}


class TestVerifyPolicyTable:
    """verify_policy_table() must reject any incomplete or malformed table."""

    def test_missing_operation_type(self):
        table = _copy_table()
        del table[OperationType.APPEAL]

        with pytest.raises(PolicyConfigurationError) as exc_info:
            verify_policy_table(table)

        assert "missing operation types: APPEAL" in str(exc_info.value)

    def test_unexpected_operation_type(self):
        table = _copy_table()
        table["SETTLE"] = dict(table[OperationType.ACCEPT])

        with pytest.raises(PolicyConfigurationError) as exc_info:
            verify_policy_table(table)

        assert "unexpected operation types" in str(exc_info.value)

    def test_missing_parameter(self):
        table = _copy_table()
        del table[OperationType.PROPOSE][WagerParameter.MATURATION]

        with pytest.raises(PolicyConfigurationError) as exc_info:
            verify_policy_table(table)

        assert "PROPOSE: missing parameters maturation" in str(exc_info.value)

    def test_extraneous_parameter(self):
        table = _copy_table()
        table[OperationType.CLOSE]["winner"] = ParameterPolicy.OPTIONAL

        with pytest.raises(PolicyConfigurationError) as exc_info:
            verify_policy_table(table)

        assert "CLOSE: unexpected parameters" in str(exc_info.value)

    def test_value_outside_policy_enum(self):
        table = _copy_table()
        table[OperationType.PROPOSE][WagerParameter.OUTCOME] = "MANDATORY"

        with pytest.raises(PolicyConfigurationError) as exc_info:
            verify_policy_table(table)

        assert "'MANDATORY' is not a parameter policy" in str(exc_info.value)

    def test_reports_every_problem_at_once(self):
        table = _copy_table()
        del table[OperationType.TAKE]
        del table[OperationType.PROPOSE][WagerParameter.TAKER]

        with pytest.raises(PolicyConfigurationError) as exc_info:
            verify_policy_table(table)

        message = str(exc_info.value)
        assert "TAKE" in message
        assert "taker" in message
