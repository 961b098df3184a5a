"""
Module 01 - Schemas & Canonicalization
File: versioning.py

Purpose: Wire protocol version shared by the requester and oracle roles.
Every message carries ``protocol_version``; the oracle answers a message
from an unknown version with an UNSUPPORTED_VERSION rejection instead
of guessing at its layout.

Imports nothing from the other schema files so every module can use it.
"""

PROTOCOL_VERSION: str = "v1"

SUPPORTED_PROTOCOL_VERSIONS: frozenset[str] = frozenset({PROTOCOL_VERSION})


class UnsupportedProtocolVersionError(ValueError):
    """A message was stamped with a version this node cannot read."""

    def __init__(self, version: str) -> None:
        self.version = version
        super().__init__(
            f"Unsupported protocol version: '{version}'. "
            f"This node speaks {sorted(SUPPORTED_PROTOCOL_VERSIONS)}"
        )


def is_compatible_protocol_version(version: str) -> bool:
    return version in SUPPORTED_PROTOCOL_VERSIONS


def assert_supported_protocol_version(version: str) -> None:
    """
    Raises:
        UnsupportedProtocolVersionError: If ``version`` cannot be read
    """
    if not is_compatible_protocol_version(version):
        raise UnsupportedProtocolVersionError(version)
