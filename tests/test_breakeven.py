"""
Tests for engine.breakeven module.
"""
from dataclasses import replace

import pytest

from engine.breakeven import find_breakeven_cdr, breakeven_table
from engine.config import LOSS_THRESHOLD
from engine.scenarios import ScenarioParams
from engine.waterfall import run_waterfall


CLASS_E = 4


def _loss_at(template, params, cdr, idx):
    return run_waterfall(template, params.with_cdr(cdr)).tranche_summary[idx].principal_loss


class TestFindBreakevenCdr:

    def test_mezzanine_breakeven_in_range(self, subprime, base_params):
        be = find_breakeven_cdr(subprime, base_params, CLASS_E)
        assert be is not None
        assert 0 < be < 50

    def test_boundary_brackets_threshold(self, subprime, base_params):
        be = find_breakeven_cdr(subprime, base_params, CLASS_E)
        assert _loss_at(subprime, base_params, be + 0.1, CLASS_E) > LOSS_THRESHOLD
        assert _loss_at(subprime, base_params, max(0.0, be - 0.1), CLASS_E) <= LOSS_THRESHOLD

    def test_ignores_scenario_cdr(self, subprime, base_params):
        a = find_breakeven_cdr(subprime, base_params, CLASS_E)
        b = find_breakeven_cdr(subprime, base_params.with_cdr(25), CLASS_E)
        assert a == b

    def test_zero_when_structurally_short(self, subprime, base_params):
        # Notes exceed collateral, so the residual loses even with no defaults
        short = replace(subprime, collateral_balance=100)
        assert find_breakeven_cdr(short, base_params, len(subprime.tranches) - 1) == 0

    def test_none_when_defaults_fully_recovered(self, subprime):
        params = ScenarioParams(cpr=15, cdr=5, recovery=100, months=60)
        assert find_breakeven_cdr(subprime, params, 0) is None

    def test_index_out_of_range(self, subprime, base_params):
        with pytest.raises(IndexError):
            find_breakeven_cdr(subprime, base_params, len(subprime.tranches))
        with pytest.raises(IndexError):
            find_breakeven_cdr(subprime, base_params, -1)


class TestBreakevenTable:

    def test_one_entry_per_tranche(self, subprime, base_params):
        table = breakeven_table(subprime, base_params)
        assert len(table) == len(subprime.tranches)

    def test_seniors_break_no_earlier_than_juniors(self, subprime, base_params):
        table = breakeven_table(subprime, base_params)
        for senior, junior in zip(table, table[1:]):
            if junior is None:
                assert senior is None
            elif senior is not None:
                assert senior >= junior - 0.1
