"""
Runtime Configuration Module

Provides configuration loading for the oracle and requester roles.
"""

from .runtime import (
    OracleConfig,
    ProtocolConfig,
    RuntimeConfig,
    ValidatorConfig,
    configure_logging,
)

__all__ = [
    "OracleConfig",
    "ProtocolConfig",
    "RuntimeConfig",
    "ValidatorConfig",
    "configure_logging",
]
