"""
Test fixtures package for the oracle protocol tests.

Usage:
    from fixtures import make_party, make_oracle_view

    def test_something():
        requester, _ = make_party("Requester")
        view = make_oracle_view(oracle_key, requester)
"""

from .common import (
    FIXED_SALT,
    make_command,
    make_notary,
    make_oracle_service,
    make_oracle_view,
    make_party,
    make_session,
    make_state,
    make_transaction,
    tamper_first_visible,
)

__all__ = [
    "FIXED_SALT",
    "make_command",
    "make_notary",
    "make_oracle_service",
    "make_oracle_view",
    "make_party",
    "make_session",
    "make_state",
    "make_transaction",
    "tamper_first_visible",
]
