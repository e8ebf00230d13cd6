"""
Tests for engine.irr module.
"""
import numpy_financial as npf
import pytest

from engine.irr import calculate_irr, annualize_irr


class TestCalculateIrr:

    def test_single_period_ten_percent(self):
        assert calculate_irr([-100, 110]) == pytest.approx(0.10, abs=1e-4)

    def test_zero_rate(self):
        assert calculate_irr([-100, 50, 50]) == pytest.approx(0.0, abs=1e-6)

    def test_matches_numpy_financial(self):
        flows = [-95.0] + [1.0] * 11 + [101.0]
        assert calculate_irr(flows) == pytest.approx(npf.irr(flows), abs=1e-6)

    def test_matches_numpy_financial_amortizing(self):
        flows = [-1000.0] + [90.0] * 12 + [0.0, 15.0]
        assert calculate_irr(flows) == pytest.approx(npf.irr(flows), abs=1e-6)

    def test_all_positive_is_none(self):
        assert calculate_irr([100, 10, 10]) is None

    def test_all_negative_is_none(self):
        assert calculate_irr([-100, -10, -10]) is None

    def test_too_short_is_none(self):
        assert calculate_irr([-100]) is None
        assert calculate_irr([]) is None

    def test_total_loss_stays_above_floor(self):
        """Near-total loss converges to a rate above the -99% clamp, never below it."""
        rate = calculate_irr([-100, 0.5])
        assert rate is None or rate >= -0.99

    def test_non_convergence_is_none(self):
        assert calculate_irr([-100, 110], max_iterations=0) is None


class TestAnnualizeIrr:

    def test_compounds_monthly(self):
        assert annualize_irr(0.01) == pytest.approx(1.01 ** 12 - 1)

    def test_none_passes_through(self):
        assert annualize_irr(None) is None

    def test_zero(self):
        assert annualize_irr(0.0) == 0.0
