"""
Pytest configuration and shared fixtures for basket ledger tests.

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

OPERATOR = _common.OPERATOR
make_keypairs = _common.make_keypairs
make_quorum_config = _common.make_quorum_config
make_ledger = _common.make_ledger
make_ledger_with_token = _common.make_ledger_with_token
make_verifiers = _common.make_verifiers


# =============================================================================
# Pytest Fixtures (autodiscovered by pytest)
# =============================================================================

@pytest.fixture
def keypairs():
    """Three deterministic oracle keypairs."""
    return make_keypairs(3)


@pytest.fixture
def quorum_config(keypairs):
    """2-of-3 quorum over the default keypairs."""
    return make_quorum_config(keypairs, 2)


@pytest.fixture
def verifiers(keypairs):
    """One ReorgVerifier per default keypair."""
    return make_verifiers(keypairs)


@pytest.fixture
def ledger_with_token():
    """(ledger, keypairs, supply_record) with token 1 and a supply of 100."""
    return make_ledger_with_token(token_id=1, total_supply=100)


@pytest.fixture(autouse=True)
def _isolate_basket_env(monkeypatch):
    """Keep BASKET_* variables from the developer's shell out of tests."""
    import os
    for name in list(os.environ):
        if name.startswith("BASKET_"):
            monkeypatch.delenv(name, raising=False)


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


# =============================================================================
# Test Helpers (available to all tests via fixtures)
# =============================================================================

@pytest.fixture
def assert_check_passed():
    """Helper to assert a specific check passed in VerificationResult."""
    def _assert(result, check_id: str):
        checks = [c for c in result.checks if c.check_id == check_id]
        assert len(checks) == 1, f"Expected check '{check_id}' not found in {[c.check_id for c in result.checks]}"
        assert checks[0].ok, f"Check '{check_id}' failed: {checks[0].message}"
    return _assert


@pytest.fixture
def assert_check_failed():
    """Helper to assert a specific check failed in VerificationResult."""
    def _assert(result, check_id: str):
        checks = [c for c in result.checks if c.check_id == check_id]
        assert len(checks) == 1, f"Expected check '{check_id}' not found in {[c.check_id for c in result.checks]}"
        assert not checks[0].ok, f"Check '{check_id}' unexpectedly passed"
    return _assert
