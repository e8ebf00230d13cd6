"""
Shared test fixtures for the ABS Deal Modeler test suite.
"""
import os
import sys

import pytest

# Ensure project root is on sys.path
sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))

from engine.templates import SUBPRIME_AUTO_CLASSIC, get_template
from engine.scenarios import ScenarioParams
from engine.waterfall import run_waterfall
from engine import market_data


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------

@pytest.fixture
def subprime():
    """Classic subprime auto structure: $260mm pool, 18.5% WAC, 60 month WAM."""
    return SUBPRIME_AUTO_CLASSIC


@pytest.fixture
def base_params():
    """Subprime base case: 15 CPR, 5 CDR, 45% recovery over 60 months."""
    return ScenarioParams(cpr=15, cdr=5, recovery=45, months=60)


@pytest.fixture
def stress_params():
    """Heavy default scenario that breaches triggers early."""
    return ScenarioParams(cpr=5, cdr=20, recovery=20, months=60)


@pytest.fixture
def base_result(subprime, base_params):
    return run_waterfall(subprime, base_params)


@pytest.fixture
def auto_abs():
    return get_template("auto-abs")


@pytest.fixture
def clo():
    return get_template("clo")


@pytest.fixture
def clean_rate_cache(monkeypatch):
    """Empty base rate cache and no FRED key."""
    monkeypatch.delenv("FRED_API_KEY", raising=False)
    market_data.clear_cache()
    yield
    market_data.clear_cache()
