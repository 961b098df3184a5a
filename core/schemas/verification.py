"""
Module 01 - Schemas & Canonicalization
File: verification.py

Purpose: Verdict of the attestation validator.

Each validation step appends a CheckResult keyed by what it inspected
(``structure``, ``kind_<i>``, ``signer_<i>``, ``fact_<i>``, ``commands``).
The overall VerificationResult carries the OracleError of the first
failing step, which the oracle returns verbatim as its rejection.
"""

from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field

from .errors import OracleError


CheckSeverity = Literal["info", "warn", "error"]


class CheckResult(BaseModel):
    """Outcome of one validation step over a partial view."""

    model_config = ConfigDict(extra="forbid")

    check_id: str = Field(..., min_length=1, description="Step and leaf position, e.g. 'fact_0'")
    ok: bool
    severity: CheckSeverity
    message: str
    details: dict[str, Any] = Field(default_factory=dict)

    @property
    def is_error(self) -> bool:
        return not self.ok and self.severity == "error"

    @classmethod
    def passed(
        cls,
        check_id: str,
        message: str = "Check passed",
        details: dict[str, Any] | None = None,
    ) -> "CheckResult":
        return cls(check_id=check_id, ok=True, severity="info", message=message, details=details or {})

    @classmethod
    def failed(
        cls,
        check_id: str,
        message: str,
        details: dict[str, Any] | None = None,
    ) -> "CheckResult":
        return cls(check_id=check_id, ok=False, severity="error", message=message, details=details or {})


class VerificationResult(BaseModel):
    """
    Verdict over a whole partial view.

    ``ok`` is True only when every disclosed create command passed; the
    oracle signs nothing otherwise. Checks stop at the first failure, so
    ``checks`` ends with the failing step.
    """

    model_config = ConfigDict(extra="forbid")

    ok: bool
    checks: list[CheckResult] = Field(default_factory=list)
    error: OracleError | None = Field(
        default=None,
        description="Rejection the oracle returns when ok is False",
    )

    @property
    def reason(self) -> str | None:
        """Error code of the rejection, None when the view may be signed."""
        return self.error.code if self.error else None

    @property
    def error_count(self) -> int:
        return sum(1 for check in self.checks if check.is_error)

    def get_failed_checks(self) -> list[CheckResult]:
        return [check for check in self.checks if not check.ok]

    @classmethod
    def success(cls, checks: list[CheckResult] | None = None) -> "VerificationResult":
        return cls(ok=True, checks=checks or [])

    @classmethod
    def failure(
        cls,
        checks: list[CheckResult],
        error: OracleError | None = None,
    ) -> "VerificationResult":
        return cls(ok=False, checks=checks, error=error)
