"""
Module 01 - Schemas & Canonicalization
File: __init__.py

Purpose: Export the public API for the schemas module.
Protocol messages live in core.schemas.protocol and are imported from
there directly, since they depend on core.merkle.
"""

# Version constants
from .versioning import (
    PROTOCOL_VERSION,
    SUPPORTED_PROTOCOL_VERSIONS,
    UnsupportedProtocolVersionError,
    assert_supported_protocol_version,
    is_compatible_protocol_version,
)

# Canonical serialization API
from .canonical import (
    CANONICAL_JSON_SEPARATORS,
    canonical_equals,
    canonicalize_value,
    dumps_canonical,
    loads_canonical,
    to_canonical_json_dict,
)

# Error models and exceptions
from .errors import (
    REJECTION_CODES,
    AttestationRejectedException,
    CanonicalizationException,
    ContractViolationException,
    ErrorCodes,
    ExchangeFailedException,
    FactMismatchException,
    InvalidArgumentException,
    MalformedDisclosureException,
    NotASigningPartyException,
    NothingToAttestException,
    OracleError,
    OracleProtocolException,
    SchemaValidationException,
    SignatureInvalidException,
    UnexpectedLeafKindException,
)

# Verification results
from .verification import (
    CheckResult,
    CheckSeverity,
    VerificationResult,
)

# Ledger components
from .ledger import (
    CREATE_COMMAND_KIND,
    PRIME_STATE_KIND,
    CreateCommand,
    GenericComponent,
    LedgerComponent,
    Party,
    PrimeState,
    ordinal,
)

__all__ = [
    # Versioning
    "PROTOCOL_VERSION",
    "SUPPORTED_PROTOCOL_VERSIONS",
    "UnsupportedProtocolVersionError",
    "assert_supported_protocol_version",
    "is_compatible_protocol_version",
    # Canonical
    "CANONICAL_JSON_SEPARATORS",
    "canonical_equals",
    "canonicalize_value",
    "dumps_canonical",
    "loads_canonical",
    "to_canonical_json_dict",
    # Errors
    "REJECTION_CODES",
    "AttestationRejectedException",
    "CanonicalizationException",
    "ContractViolationException",
    "ErrorCodes",
    "ExchangeFailedException",
    "FactMismatchException",
    "InvalidArgumentException",
    "MalformedDisclosureException",
    "NotASigningPartyException",
    "NothingToAttestException",
    "OracleError",
    "OracleProtocolException",
    "SchemaValidationException",
    "SignatureInvalidException",
    "UnexpectedLeafKindException",
    # Verification
    "CheckResult",
    "CheckSeverity",
    "VerificationResult",
    # Ledger
    "CREATE_COMMAND_KIND",
    "PRIME_STATE_KIND",
    "CreateCommand",
    "GenericComponent",
    "LedgerComponent",
    "Party",
    "PrimeState",
    "ordinal",
]
