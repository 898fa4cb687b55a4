"""
conftest.py - Shared pytest fixtures for portfolio ledger tests

Provides common fixtures used across unit, conformance and functional tests:
- Empty and allocated ledgers
- The reference scenario (6000/3000/1000 allocation, 2000/1000/500 SIP)
- A flat-market year (every rate zero) for easy-to-check arithmetic
- Paths to command fixture files
"""

from pathlib import Path

import pytest

from mymoney import PortfolioLedger
from tests.builders import (
    REFERENCE_RATES, by_class, first_months, register_flat_months, register_rates,
)


FIXTURES_DIR = Path(__file__).parent / "fixtures"


# =============================================================================
# BASIC FIXTURES
# =============================================================================

@pytest.fixture
def empty_ledger():
    """Fresh ledger with nothing allocated."""
    return PortfolioLedger("test", verbose=False)


@pytest.fixture
def allocated_ledger(empty_ledger):
    """Reference allocation and SIP, no rates yet."""
    empty_ledger.allocate(by_class("6000", "3000", "1000"))
    empty_ledger.init_sip(by_class("2000", "1000", "500"))
    return empty_ledger


# =============================================================================
# SCENARIO FIXTURES
# =============================================================================

@pytest.fixture
def reference_ledger(allocated_ledger):
    """Reference scenario with January to June rates registered."""
    register_rates(allocated_ledger, REFERENCE_RATES)
    return allocated_ledger


@pytest.fixture
def flat_year_ledger(allocated_ledger):
    """Reference allocation and SIP with zero rates for all twelve months."""
    register_flat_months(allocated_ledger, first_months(12))
    return allocated_ledger


@pytest.fixture
def fixture_path():
    """Resolve a file under tests/fixtures."""
    def _resolve(name: str) -> Path:
        return FIXTURES_DIR / name
    return _resolve
