"""
Module 01 - Schemas & Canonicalization
File: errors.py

Purpose: Standard error taxonomy for the oracle attestation protocol.
Defines both Pydantic models for structured error communication
and Python exceptions for control flow.
"""

from typing import Any

from pydantic import BaseModel, ConfigDict, Field


# =============================================================================
# Error Codes (Machine-Readable Constants)
# =============================================================================

class ErrorCodes:
    """Stable machine-readable error codes used across the protocol."""

    # Schema & Serialization Errors
    SCHEMA_VALIDATION_ERROR = "SCHEMA_VALIDATION_ERROR"
    CANONICALIZATION_ERROR = "CANONICALIZATION_ERROR"
    UNSUPPORTED_VERSION = "UNSUPPORTED_VERSION"

    # Fact Oracle Errors
    INVALID_ARGUMENT = "INVALID_ARGUMENT"

    # Attestation Validation Errors
    MALFORMED_DISCLOSURE = "MALFORMED_DISCLOSURE"
    UNEXPECTED_LEAF_KIND = "UNEXPECTED_LEAF_KIND"
    NOT_A_SIGNING_PARTY = "NOT_A_SIGNING_PARTY"
    FACT_MISMATCH = "FACT_MISMATCH"
    NOTHING_TO_ATTEST = "NOTHING_TO_ATTEST"

    # Signature & Ledger Errors
    SIGNATURE_INVALID = "SIGNATURE_INVALID"
    CONTRACT_VIOLATION = "CONTRACT_VIOLATION"

    # Transport Errors
    EXCHANGE_FAILED = "EXCHANGE_FAILED"


# Codes an oracle may hand back to a requester as a semantic rejection.
REJECTION_CODES: frozenset[str] = frozenset({
    ErrorCodes.INVALID_ARGUMENT,
    ErrorCodes.MALFORMED_DISCLOSURE,
    ErrorCodes.UNEXPECTED_LEAF_KIND,
    ErrorCodes.NOT_A_SIGNING_PARTY,
    ErrorCodes.FACT_MISMATCH,
    ErrorCodes.NOTHING_TO_ATTEST,
})


# =============================================================================
# Pydantic Error Models (Structured Communication)
# =============================================================================

class OracleError(BaseModel):
    """
    Base error model for structured error communication across the protocol.

    Used for passing failures between the oracle and requester roles
    without exceptions, enabling structured handling and serialization.
    """

    model_config = ConfigDict(
        extra="forbid",
        frozen=False,
        validate_assignment=True,
    )

    code: str = Field(
        ...,
        description="Stable machine-readable error code",
        examples=[ErrorCodes.FACT_MISMATCH],
    )
    message: str = Field(
        ...,
        description="Human-readable error message",
    )
    details: dict[str, Any] = Field(
        default_factory=dict,
        description="Additional structured details about the error",
    )
    retryable: bool = Field(
        default=False,
        description="Whether the exchange can be retried unchanged",
    )

    def to_exception(self) -> "OracleProtocolException":
        """Convert this error model to a raised exception."""
        return OracleProtocolException(
            message=self.message,
            code=self.code,
            details=self.details,
            retryable=self.retryable,
        )


# =============================================================================
# Python Exceptions (Control Flow)
# =============================================================================

class OracleProtocolException(Exception):
    """
    Base exception for all oracle protocol errors.

    Carries structured error information and can be converted
    to/from OracleError models.
    """

    def __init__(
        self,
        message: str,
        code: str = "ORACLE_ERROR",
        details: dict[str, Any] | None = None,
        retryable: bool = False,
    ) -> None:
        super().__init__(message)
        self.code = code
        self.message = message
        self.details = details or {}
        self.retryable = retryable

    def to_error_model(self) -> OracleError:
        """Convert this exception to an OracleError model."""
        return OracleError(
            code=self.code,
            message=self.message,
            details=self.details,
            retryable=self.retryable,
        )

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(code={self.code!r}, message={self.message!r})"


class CanonicalizationException(OracleProtocolException):
    """Exception raised when canonical serialization fails."""

    def __init__(
        self,
        message: str,
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(
            message=message,
            code=ErrorCodes.CANONICALIZATION_ERROR,
            details=details,
            retryable=False,
        )


class SchemaValidationException(OracleProtocolException):
    """Exception raised when schema validation fails."""

    def __init__(
        self,
        message: str,
        field_path: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        full_details = details or {}
        if field_path:
            full_details["field_path"] = field_path
        super().__init__(
            message=message,
            code=ErrorCodes.SCHEMA_VALIDATION_ERROR,
            details=full_details,
            retryable=False,
        )


class InvalidArgumentException(OracleProtocolException):
    """Raised when a fact oracle is queried outside its domain."""

    def __init__(
        self,
        message: str,
        index: int | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        full_details = details or {}
        if index is not None:
            full_details["index"] = index
        super().__init__(
            message=message,
            code=ErrorCodes.INVALID_ARGUMENT,
            details=full_details,
            retryable=False,
        )


class MalformedDisclosureException(OracleProtocolException):
    """Raised when a partial view fails structural verification."""

    def __init__(
        self,
        message: str,
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(
            message=message,
            code=ErrorCodes.MALFORMED_DISCLOSURE,
            details=details,
            retryable=False,
        )


class UnexpectedLeafKindException(OracleProtocolException):
    """Raised when a disclosed leaf is of a kind the oracle does not interpret."""

    def __init__(
        self,
        message: str,
        leaf_index: int | None = None,
        kind: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        full_details = details or {}
        if leaf_index is not None:
            full_details["leaf_index"] = leaf_index
        if kind:
            full_details["kind"] = kind
        super().__init__(
            message=message,
            code=ErrorCodes.UNEXPECTED_LEAF_KIND,
            details=full_details,
            retryable=False,
        )


class NotASigningPartyException(OracleProtocolException):
    """Raised when the oracle's key is absent from a command's signers."""

    def __init__(
        self,
        message: str,
        leaf_index: int | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        full_details = details or {}
        if leaf_index is not None:
            full_details["leaf_index"] = leaf_index
        super().__init__(
            message=message,
            code=ErrorCodes.NOT_A_SIGNING_PARTY,
            details=full_details,
            retryable=False,
        )


class FactMismatchException(OracleProtocolException):
    """Raised when a command claims a value the oracle does not compute."""

    def __init__(
        self,
        message: str,
        index: int | None = None,
        claimed: int | None = None,
        expected: int | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        full_details = details or {}
        if index is not None:
            full_details["index"] = index
        if claimed is not None:
            full_details["claimed"] = claimed
        if expected is not None:
            full_details["expected"] = expected
        super().__init__(
            message=message,
            code=ErrorCodes.FACT_MISMATCH,
            details=full_details,
            retryable=False,
        )


class NothingToAttestException(OracleProtocolException):
    """Raised when a structurally valid view discloses no command to attest."""

    def __init__(
        self,
        message: str = "No disclosed leaves match a create command",
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(
            message=message,
            code=ErrorCodes.NOTHING_TO_ATTEST,
            details=details,
            retryable=False,
        )


class SignatureInvalidException(OracleProtocolException):
    """Raised when a signature does not verify against its digest and key."""

    def __init__(
        self,
        message: str,
        signer: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        full_details = details or {}
        if signer:
            full_details["signer"] = signer
        super().__init__(
            message=message,
            code=ErrorCodes.SIGNATURE_INVALID,
            details=full_details,
            retryable=False,
        )


class ContractViolationException(OracleProtocolException):
    """Raised when a transaction breaks the prime contract rules."""

    def __init__(
        self,
        message: str,
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(
            message=message,
            code=ErrorCodes.CONTRACT_VIOLATION,
            details=details,
            retryable=False,
        )


class ExchangeFailedException(OracleProtocolException):
    """
    Raised when an exchange fails for a non-semantic reason.

    Distinct from a rejection: the requester may retry the whole
    exchange without changing the underlying commitment.
    """

    def __init__(
        self,
        message: str = "exchange failed",
        stage: str | None = None,
        details: dict[str, Any] | None = None,
        retryable: bool = True,
    ) -> None:
        full_details = details or {}
        if stage:
            full_details["stage"] = stage
        super().__init__(
            message=message,
            code=ErrorCodes.EXCHANGE_FAILED,
            details=full_details,
            retryable=retryable,
        )


class AttestationRejectedException(OracleProtocolException):
    """
    Raised on the requester side when the oracle refuses to attest.

    Carries the oracle's rejection code verbatim. Terminal for the
    attempt: retrying requires a different commitment.
    """

    def __init__(
        self,
        message: str,
        code: str,
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(
            message=message,
            code=code,
            details=details,
            retryable=False,
        )

