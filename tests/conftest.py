"""
Pytest configuration and shared fixtures for oracle protocol tests.

This conftest.py:
1. Adds project root to sys.path for imports
2. Provides commonly-used fixtures via pytest's autodiscovery
3. Configures pytest markers and settings
"""

import sys
from pathlib import Path

import pytest

# =============================================================================
# Path Setup - Must happen before any local imports
# =============================================================================

_PROJECT_ROOT = Path(__file__).resolve().parent.parent
_TESTS_ROOT = Path(__file__).resolve().parent

for _path in [str(_PROJECT_ROOT), str(_TESTS_ROOT)]:
    if _path not in sys.path:
        sys.path.insert(0, _path)

# =============================================================================
# Import fixtures using importlib (more robust for pytest loading)
# =============================================================================

import importlib

_common = importlib.import_module("fixtures.common")

make_party = _common.make_party
make_oracle_service = _common.make_oracle_service
make_session = _common.make_session


# =============================================================================
# Pytest Fixtures (autodiscovered by pytest)
# =============================================================================

@pytest.fixture
def oracle_service():
    """Provide a fresh OracleService with its own key."""
    return make_oracle_service()


@pytest.fixture
def oracle_key(oracle_service):
    """Public key of the oracle_service fixture."""
    return oracle_service.identity.owning_key


@pytest.fixture
def requester():
    """Provide a requester identity and its signing service."""
    return make_party("Requester")


@pytest.fixture
def session(oracle_service):
    """Serializing LocalSession connected to oracle_service."""
    return make_session(oracle_service)


# =============================================================================
# Pytest Configuration
# =============================================================================

def pytest_configure(config):
    """Register custom markers."""
    config.addinivalue_line(
        "markers", "slow: marks tests as slow (deselect with '-m \"not slow\"')"
    )
    config.addinivalue_line(
        "markers", "integration: marks tests as integration tests"
    )
    config.addinivalue_line(
        "markers", "unit: marks tests as unit tests"
    )
