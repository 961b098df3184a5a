"""
Oracle role: fact oracles, the attestation validator and the service
that answers query and attest requests.
"""
from .fact_oracle import DEFAULT_MAX_INDEX, MIN_INDEX, FactOracle, PrimeOracle, nth_prime
from .validator import AttestationValidator, validate
from .service import OracleService

__all__ = [
    "MIN_INDEX",
    "DEFAULT_MAX_INDEX",
    "FactOracle",
    "PrimeOracle",
    "nth_prime",
    "AttestationValidator",
    "validate",
    "OracleService",
]
