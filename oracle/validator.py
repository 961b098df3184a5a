"""
Module 07 - Attestation Validator
Decides whether the oracle may sign a partially disclosed transaction.

Owner: Oracle Engineer
Module ID: M07

Validation steps (fail-closed, first failure wins):
1. The view's Merkle structure recomputes to its committed root
2. Every disclosed leaf is a create command or a configured passthrough kind
3. Every disclosed create command lists the oracle's key among its signers
4. Every disclosed create command carries the value the fact oracle computes
5. At least one create command was disclosed

The validator is pure: besides fact oracle calls it has no effects, so a
single instance can serve concurrent exchanges.
"""
from __future__ import annotations

import logging
from typing import Iterable

from core.merkle.partial_tree import PartialView, VisibleLeaf, verify_structure
from core.schemas.errors import (
    FactMismatchException,
    InvalidArgumentException,
    MalformedDisclosureException,
    NotASigningPartyException,
    NothingToAttestException,
    OracleProtocolException,
    UnexpectedLeafKindException,
)
from core.schemas.ledger import CreateCommand, Party
from core.schemas.verification import CheckResult, VerificationResult

from .fact_oracle import FactOracle


logger = logging.getLogger(__name__)


def _failure(
    checks: list[CheckResult],
    check_id: str,
    exc: OracleProtocolException,
) -> VerificationResult:
    checks.append(CheckResult.failed(check_id, exc.message, details=dict(exc.details)))
    logger.info(f"Attestation validation failed: {exc.code}: {exc.message}")
    return VerificationResult.failure(checks, error=exc.to_error_model())


class AttestationValidator:
    """
    Checks a partial view on behalf of one oracle identity.

    Args:
        oracle_key: The oracle's public identity key
        fact_oracle: Source of truth for fact values
        passthrough_kinds: Component kinds that may be disclosed and are
            ignored; any other non-command kind is rejected
    """

    def __init__(
        self,
        oracle_key: str,
        fact_oracle: FactOracle,
        passthrough_kinds: Iterable[str] = (),
    ) -> None:
        self.oracle_key = oracle_key
        self.fact_oracle = fact_oracle
        self.passthrough_kinds = frozenset(passthrough_kinds)

    def validate(self, view: PartialView) -> VerificationResult:
        """
        Validate ``view``.

        Returns:
            VerificationResult with ok=True only if every disclosed create
            command passed; otherwise ``error.code`` names the first failure
        """
        checks: list[CheckResult] = []

        if not verify_structure(view):
            return _failure(
                checks,
                "structure",
                MalformedDisclosureException(
                    "Partial view does not recompute to its committed root",
                    details={"root": view.root, "leaf_count": view.leaf_count},
                ),
            )
        checks.append(CheckResult.passed("structure", "Partial view recomputes to its root"))

        commands: list[tuple[VisibleLeaf, CreateCommand]] = []
        for leaf in view.visible_leaves():
            component = leaf.component
            if isinstance(component, CreateCommand):
                commands.append((leaf, component))
            elif component.kind in self.passthrough_kinds:
                checks.append(CheckResult.passed(
                    f"kind_{leaf.index}",
                    f"Passthrough component '{component.kind}' ignored",
                ))
            else:
                return _failure(
                    checks,
                    f"kind_{leaf.index}",
                    UnexpectedLeafKindException(
                        "Oracle received data of different type than expected.",
                        leaf_index=leaf.index,
                        kind=component.kind,
                    ),
                )

        for leaf, command in commands:
            if not command.requires(self.oracle_key):
                return _failure(
                    checks,
                    f"signer_{leaf.index}",
                    NotASigningPartyException(
                        "Oracle is not a required signer of the disclosed command",
                        leaf_index=leaf.index,
                    ),
                )
            checks.append(CheckResult.passed(f"signer_{leaf.index}", "Oracle is a required signer"))

            try:
                expected = self.fact_oracle.query(command.index)
            except InvalidArgumentException as e:
                return _failure(checks, f"fact_{leaf.index}", e)

            if expected != command.value:
                return _failure(
                    checks,
                    f"fact_{leaf.index}",
                    FactMismatchException(
                        f"Incorrect value for index {command.index}",
                        index=command.index,
                        claimed=command.value,
                        expected=expected,
                    ),
                )
            checks.append(CheckResult.passed(
                f"fact_{leaf.index}",
                f"Value for index {command.index} confirmed",
            ))

        if not commands:
            return _failure(checks, "commands", NothingToAttestException())

        return VerificationResult.success(checks)


def validate(
    oracle_identity: Party,
    view: PartialView,
    fact_oracle: FactOracle,
    passthrough_kinds: Iterable[str] = (),
) -> VerificationResult:
    """Validate ``view`` for ``oracle_identity`` with a throwaway validator."""
    validator = AttestationValidator(
        oracle_identity.owning_key,
        fact_oracle,
        passthrough_kinds=passthrough_kinds,
    )
    return validator.validate(view)


__all__ = [
    "AttestationValidator",
    "validate",
]
