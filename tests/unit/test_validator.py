"""
Module 07 - Attestation Validator Unit Tests
Tests for oracle/validator.py

Tests:
- Valid views pass
- Each failure maps to its error code
- Checks run fail-closed, first failure wins
"""
import pytest

from core.merkle.partial_tree import SelectiveDisclosureTree
from core.schemas.errors import ErrorCodes
from core.schemas.ledger import CreateCommand, GenericComponent
from oracle.fact_oracle import PrimeOracle
from oracle.validator import AttestationValidator, validate

from fixtures import (
    FIXED_SALT,
    make_command,
    make_notary,
    make_oracle_view,
    make_party,
    make_state,
    tamper_first_visible,
)


@pytest.fixture
def oracle():
    party, _ = make_party("Oracle")
    return party


@pytest.fixture
def validator(oracle):
    return AttestationValidator(oracle.owning_key, PrimeOracle())


def _view(components, predicate=lambda c: True):
    return SelectiveDisclosureTree(components, FIXED_SALT).filter(predicate)


def _commands_only(component):
    return isinstance(component, CreateCommand)


class TestValidViews:
    """Views the oracle may sign."""

    def test_oracle_view_passes(self, validator, oracle, requester):
        party, _ = requester
        result = validator.validate(make_oracle_view(oracle.owning_key, party))

        assert result.ok
        assert result.error is None
        assert result.reason is None
        assert {c.check_id for c in result.checks} == {"structure", "signer_0", "fact_0"}

    def test_multiple_commands_pass(self, validator, oracle):
        view = _view([
            make_command(oracle.owning_key, index=10, value=29),
            make_command(oracle.owning_key, index=100, value=541),
        ])

        assert validator.validate(view).ok

    def test_passthrough_kind_ignored(self, oracle):
        validator = AttestationValidator(oracle.owning_key, PrimeOracle(), passthrough_kinds=["notary"])
        view = _view([make_command(oracle.owning_key), make_notary()])

        result = validator.validate(view)
        assert result.ok
        assert any(c.check_id == "kind_1" and c.ok for c in result.checks)

    def test_module_level_validate(self, oracle, requester):
        party, _ = requester
        result = validate(oracle, make_oracle_view(oracle.owning_key, party), PrimeOracle())

        assert result.ok


class TestRejections:
    """Each failure surfaces its own error code."""

    def test_tampered_command_is_malformed(self, validator, oracle, requester):
        party, _ = requester
        view = make_oracle_view(oracle.owning_key, party)
        forged = tamper_first_visible(view, make_command(oracle.owning_key, value=31))

        result = validator.validate(forged)
        assert not result.ok
        assert result.reason == ErrorCodes.MALFORMED_DISCLOSURE
        assert result.get_failed_checks()[0].check_id == "structure"

    def test_state_disclosed_is_unexpected_kind(self, validator, oracle, requester):
        party, _ = requester
        view = _view([make_command(oracle.owning_key), make_state(party)])

        result = validator.validate(view)
        assert result.reason == ErrorCodes.UNEXPECTED_LEAF_KIND
        assert result.error.message == "Oracle received data of different type than expected."
        assert result.error.details == {"leaf_index": 1, "kind": "prime_state"}

    def test_generic_component_not_passthrough_by_default(self, validator, oracle):
        view = _view([make_command(oracle.owning_key), make_notary()])

        assert validator.validate(view).reason == ErrorCodes.UNEXPECTED_LEAF_KIND

    def test_oracle_not_a_signer(self, validator, requester):
        party, _ = requester
        view = _view([make_command(party.owning_key)])

        result = validator.validate(view)
        assert result.reason == ErrorCodes.NOT_A_SIGNING_PARTY
        assert result.error.details["leaf_index"] == 0

    def test_wrong_value_is_fact_mismatch(self, validator, oracle):
        view = _view([make_command(oracle.owning_key, index=10, value=31)])

        result = validator.validate(view)
        assert result.reason == ErrorCodes.FACT_MISMATCH
        assert result.error.details == {"index": 10, "claimed": 31, "expected": 29}

    def test_out_of_domain_index_is_invalid_argument(self, validator, oracle):
        view = _view([make_command(oracle.owning_key, index=1, value=2)])

        result = validator.validate(view)
        assert result.reason == ErrorCodes.INVALID_ARGUMENT
        assert result.error.message == "N must be greater than one."

    def test_nothing_disclosed(self, validator, oracle, requester):
        party, _ = requester
        view = _view(
            [make_command(oracle.owning_key), make_state(party)],
            predicate=lambda c: False,
        )

        result = validator.validate(view)
        assert result.reason == ErrorCodes.NOTHING_TO_ATTEST
        assert result.get_failed_checks()[0].check_id == "commands"

    def test_empty_transaction_is_nothing_to_attest(self, validator):
        assert validator.validate(_view([])).reason == ErrorCodes.NOTHING_TO_ATTEST

    def test_passthrough_only_is_nothing_to_attest(self, oracle):
        validator = AttestationValidator(oracle.owning_key, PrimeOracle(), passthrough_kinds=["notary"])

        assert validator.validate(_view([make_notary()])).reason == ErrorCodes.NOTHING_TO_ATTEST


class TestCheckOrder:
    """The first failing check decides the outcome."""

    def test_kind_checked_before_facts(self, validator, oracle):
        view = _view([
            make_command(oracle.owning_key, value=31),
            GenericComponent(kind="time_window", data={"until": "2026-01-01"}),
        ])

        assert validator.validate(view).reason == ErrorCodes.UNEXPECTED_LEAF_KIND

    def test_commands_checked_in_tree_order(self, validator, oracle, requester):
        party, _ = requester
        view = _view([
            make_command(oracle.owning_key, value=31),
            make_command(party.owning_key),
        ])

        assert validator.validate(view).reason == ErrorCodes.FACT_MISMATCH

    def test_signer_checked_before_fact(self, validator, requester):
        party, _ = requester
        view = _view([make_command(party.owning_key, value=31)])

        assert validator.validate(view).reason == ErrorCodes.NOT_A_SIGNING_PARTY

    def test_failure_stops_further_checks(self, validator, oracle):
        view = _view([
            make_command(oracle.owning_key, value=31),
            make_command(oracle.owning_key, index=100, value=541),
        ])

        result = validator.validate(view)
        assert result.error_count == 1
        assert "fact_1" not in {c.check_id for c in result.checks}
