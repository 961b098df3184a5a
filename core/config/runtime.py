"""
Runtime Configuration

Central configuration for the oracle role, its validator and the
request protocol.
"""

from __future__ import annotations

import copy
import logging
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Optional

from dotenv import load_dotenv

load_dotenv()


LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


def _env_bool(name: str, default: str = "false") -> bool:
    return os.getenv(name, default).strip().lower() in ("1", "true", "yes")


@dataclass
class OracleConfig:
    """Identity and limits of the oracle role."""
    name: str = "Oracle"
    # Raw Ed25519 seed as 0x hex; a fresh key is generated when unset
    signing_key_hex: Optional[str] = None
    # Upper bound on queried indices; None uses the fact oracle default
    max_index: Optional[int] = None


@dataclass
class ValidatorConfig:
    """Configuration for the attestation validator."""
    # Component kinds the oracle may see disclosed without interpreting them
    passthrough_kinds: list[str] = field(default_factory=list)


@dataclass
class ProtocolConfig:
    """Configuration for requester-side exchanges."""
    heartbeat: bool = True
    serialize_messages: bool = True


@dataclass
class RuntimeConfig:
    """
    Complete runtime configuration.

    Can be loaded from:
    - Environment variables (a .env file is honoured)
    - YAML file
    - Programmatic construction
    """
    oracle: OracleConfig = field(default_factory=OracleConfig)
    validator: ValidatorConfig = field(default_factory=ValidatorConfig)
    protocol: ProtocolConfig = field(default_factory=ProtocolConfig)
    debug: bool = False
    extra: dict[str, Any] = field(default_factory=dict)

    @staticmethod
    def _get_env_overrides() -> dict[str, Any]:
        """
        Get configuration overrides from environment variables.

        This is the SINGLE source of truth for all env var reading.

        Supported variables:
        - PRIMES_ORACLE_NAME: Oracle display name
        - PRIMES_ORACLE_SIGNING_KEY: Oracle Ed25519 seed (0x hex)
        - PRIMES_ORACLE_MAX_INDEX: Largest index the oracle will answer
        - PRIMES_ORACLE_PASSTHROUGH_KINDS: Comma separated component kinds
        - PRIMES_ORACLE_HEARTBEAT: Send a heartbeat before queries (true/false)
        - PRIMES_ORACLE_DEBUG: Enable debug logging (true/false)
        """
        overrides: dict[str, Any] = {}

        if os.getenv("PRIMES_ORACLE_NAME"):
            overrides.setdefault("oracle", {})["name"] = os.getenv("PRIMES_ORACLE_NAME")
        if os.getenv("PRIMES_ORACLE_SIGNING_KEY"):
            overrides.setdefault("oracle", {})["signing_key_hex"] = os.getenv("PRIMES_ORACLE_SIGNING_KEY")
        if os.getenv("PRIMES_ORACLE_MAX_INDEX"):
            overrides.setdefault("oracle", {})["max_index"] = int(os.getenv("PRIMES_ORACLE_MAX_INDEX"))

        if os.getenv("PRIMES_ORACLE_PASSTHROUGH_KINDS"):
            kinds = [
                k.strip()
                for k in os.getenv("PRIMES_ORACLE_PASSTHROUGH_KINDS", "").split(",")
                if k.strip()
            ]
            overrides.setdefault("validator", {})["passthrough_kinds"] = kinds

        if os.getenv("PRIMES_ORACLE_HEARTBEAT"):
            overrides.setdefault("protocol", {})["heartbeat"] = _env_bool(
                "PRIMES_ORACLE_HEARTBEAT", "true"
            )

        if os.getenv("PRIMES_ORACLE_DEBUG"):
            overrides["debug"] = _env_bool("PRIMES_ORACLE_DEBUG")

        return overrides

    @classmethod
    def from_env(cls) -> "RuntimeConfig":
        """Load configuration purely from environment variables."""
        return cls.from_dict(cls._get_env_overrides())

    @classmethod
    def from_yaml(cls, path: str | Path) -> "RuntimeConfig":
        """Load configuration from a YAML file."""
        import yaml
        path = Path(path)
        if not path.exists():
            raise FileNotFoundError(f"Config file not found: {path}")

        with open(path) as f:
            data = yaml.safe_load(f) or {}

        return cls.from_dict(data)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "RuntimeConfig":
        """Load configuration from a dictionary (supports partial data)."""
        oracle_data = data.get("oracle", {})
        validator_data = data.get("validator", {})
        protocol_data = data.get("protocol", {})

        oracle = OracleConfig(**oracle_data) if oracle_data else OracleConfig()
        validator = ValidatorConfig(**validator_data) if validator_data else ValidatorConfig()
        protocol = ProtocolConfig(**protocol_data) if protocol_data else ProtocolConfig()

        return cls(
            oracle=oracle,
            validator=validator,
            protocol=protocol,
            debug=bool(data.get("debug", False)),
            extra=data.get("extra", {}),
        )

    def with_env_overrides(self) -> "RuntimeConfig":
        """
        Return a new config with environment variable overrides applied.

        This allows loading from a config file first, then overlaying env vars.
        """
        overrides = self._get_env_overrides()
        if not overrides:
            return self

        new_config = copy.deepcopy(self)

        for section in ("oracle", "validator", "protocol"):
            for key, value in overrides.get(section, {}).items():
                setattr(getattr(new_config, section), key, value)

        if "debug" in overrides:
            new_config.debug = overrides["debug"]

        return new_config

    def to_dict(self) -> dict[str, Any]:
        """Convert configuration to a dictionary. The signing key is never included."""
        return {
            "oracle": {
                "name": self.oracle.name,
                "max_index": self.oracle.max_index,
            },
            "validator": {
                "passthrough_kinds": list(self.validator.passthrough_kinds),
            },
            "protocol": {
                "heartbeat": self.protocol.heartbeat,
                "serialize_messages": self.protocol.serialize_messages,
            },
            "debug": self.debug,
            "extra": self.extra,
        }


def configure_logging(debug: bool = False) -> None:
    """Configure root logging for a process hosting either role."""
    logging.basicConfig(
        level=logging.DEBUG if debug else logging.INFO,
        format=LOG_FORMAT,
    )
