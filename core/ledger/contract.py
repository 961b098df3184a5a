"""
Module 05 - Prime Contract
Rules a prime transaction must satisfy before anyone signs it.

The contract does not check that the fact is correct; that is the
oracle's job. It only checks the command and the output agree.
"""
from __future__ import annotations

from core.schemas.errors import ContractViolationException
from core.schemas.ledger import CreateCommand, LedgerComponent

from .transaction import WireTransaction


INPUT_KIND = "input"


def _require(condition: bool, message: str) -> None:
    if not condition:
        raise ContractViolationException(message)


class PrimeContract:
    """Verification rules for transactions that create a prime state."""

    @staticmethod
    def verify(tx: WireTransaction) -> None:
        """
        Raises:
            ContractViolationException: If any rule is broken
        """
        _require(
            not any(c.kind == INPUT_KIND for c in tx.components),
            "There are no inputs",
        )
        _require(len(tx.outputs) == 1, "Exactly one prime state is created")
        _require(len(tx.commands) == 1, "Exactly one create command is present")
        output = tx.outputs[0]
        command = tx.commands[0]
        _require(
            command.index == output.index and command.value == output.value,
            "The prime in the output does not match the prime in the command.",
        )
        _require(
            output.requester.owning_key in command.signers,
            "The requester must be a required signer",
        )


def oracle_command_filter(oracle_key: str):
    """
    Predicate disclosing only create commands the oracle must sign.

    Everything else stays hidden from the oracle.
    """
    def predicate(component: LedgerComponent) -> bool:
        return isinstance(component, CreateCommand) and component.requires(oracle_key)

    return predicate
