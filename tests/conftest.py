"""
Pytest configuration and shared fixtures for ChainProof tests.

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

# Get the project root (parent of tests/)
_PROJECT_ROOT = Path(__file__).resolve().parent.parent

if str(_PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(_PROJECT_ROOT))

from core.crypto.hashing import transaction_id  # noqa: E402
from core.config.runtime import set_default_config  # noqa: E402


# =============================================================================
# Factories
# =============================================================================

def make_leaves(count: int, prefix: str = "tx") -> list[bytes]:
    """Deterministic leaf digests: transaction_id(b"tx-0"), ..."""
    return [transaction_id(f"{prefix}-{i}".encode()) for i in range(count)]


# =============================================================================
# Pytest Fixtures (autodiscovered by pytest)
# =============================================================================

@pytest.fixture
def leaves():
    """Provide five deterministic leaf digests (odd count)."""
    return make_leaves(5)


@pytest.fixture
def leaf_factory():
    """Provide the make_leaves factory."""
    return make_leaves


@pytest.fixture
def clean_env(monkeypatch):
    """Remove every CHAINPROOF_* variable for the duration of a test."""
    import os
    for key in list(os.environ):
        if key.startswith("CHAINPROOF_"):
            monkeypatch.delenv(key, raising=False)
    return monkeypatch


@pytest.fixture(autouse=True)
def reset_default_config():
    """Keep the process-wide default config from leaking between tests."""
    yield
    set_default_config(None)


# =============================================================================
# Pytest Configuration
# =============================================================================

def pytest_configure(config):
    """Register custom markers."""
    config.addinivalue_line(
        "markers", "unit: marks tests as unit tests"
    )
