"""
Tests for engine.scenarios module.
"""
import pytest

from engine.deal import DealConfigError
from engine.scenarios import (
    ScenarioParams,
    ScenarioResult,
    SCENARIO_PRESETS,
    build_params,
    classify_status,
    get_presets,
    get_sanity_scenarios,
    get_standard_scenarios,
    get_template_defaults,
    run_scenario,
    run_scenarios,
)
from engine.templates import DEAL_TEMPLATES
from engine.waterfall import run_waterfall


class TestScenarioParams:

    def test_severity(self):
        assert ScenarioParams(cpr=10, cdr=2, recovery=45, months=60).severity == 55

    def test_with_cdr_leaves_original(self, base_params):
        stressed = base_params.with_cdr(12)
        assert stressed.cdr == 12
        assert base_params.cdr == 5
        assert stressed.cpr == base_params.cpr

    def test_price_defaults_to_par(self, base_params):
        assert base_params.price_for(3) == 100.0

    @pytest.mark.parametrize("kwargs", [
        {"cpr": -1, "cdr": 2, "recovery": 50, "months": 60},
        {"cpr": 10, "cdr": 2, "recovery": 101, "months": 60},
        {"cpr": 10, "cdr": 2, "recovery": -5, "months": 60},
        {"cpr": 10, "cdr": 2, "recovery": 50, "months": 0},
        {"cpr": float("nan"), "cdr": 2, "recovery": 50, "months": 60},
        {"cpr": 10, "cdr": float("inf"), "recovery": 50, "months": 60},
        {"cpr": 10, "cdr": 2, "recovery": 50, "months": 60, "base_rate": float("nan")},
        {"cpr": 10, "cdr": 2, "recovery": 50, "months": 60, "tranche_prices_pct": (100, float("nan"))},
    ])
    def test_invalid(self, kwargs):
        with pytest.raises(DealConfigError):
            ScenarioParams(**kwargs).validate()


class TestPresets:

    def test_every_template_has_presets(self):
        for template_id in DEAL_TEMPLATES:
            assert set(SCENARIO_PRESETS[template_id]) == {"base", "stress", "extension"}

    def test_unknown_template_falls_back_to_equipment(self):
        assert get_presets("subprime-auto") is SCENARIO_PRESETS["equipment"]

    def test_unknown_template_defaults(self):
        defaults = get_template_defaults("nope")
        assert defaults.equity_share_pct == 55
        assert defaults.tranche_prices_pct == ()

    def test_build_params_uses_template_defaults(self, auto_abs):
        params = build_params(auto_abs, get_presets("auto-abs")["stress"])
        assert params.cdr == 10
        assert params.equity_share_pct == 33
        assert params.tranche_prices_pct == (100, 100, 100, 100, 100, 96)
        assert params.servicing_fee_bps == 50
        assert params.other_fees_bps == 100
        params.validate(auto_abs)

    def test_build_params_pads_prices_to_stack(self, subprime):
        params = build_params(subprime, get_presets(subprime.id)["base"])
        assert params.tranche_prices_pct == (100.0,) * len(subprime.tranches)

    def test_standard_scenarios_carry_base_rate(self, clo):
        scenarios = get_standard_scenarios(clo, base_rate=4.25)
        assert all(p.base_rate == 4.25 for p in scenarios.values())


class TestSanityScenarios:

    def test_keys(self, auto_abs):
        assert list(get_sanity_scenarios(auto_abs)) == ["base", "improve", "nuke"]

    def test_direction(self, auto_abs):
        s = get_sanity_scenarios(auto_abs)
        assert s["improve"].cdr <= s["base"].cdr <= s["nuke"].cdr
        assert s["improve"].recovery >= s["base"].recovery >= s["nuke"].recovery
        assert s["improve"].excess_spread_bps == 100
        assert s["nuke"].excess_spread_bps == -100

    def test_nuke_breaches_cnl(self, auto_abs):
        results = run_scenarios(auto_abs, get_sanity_scenarios(auto_abs))
        assert set(results) == {"base", "improve", "nuke"}
        nuke = run_waterfall(auto_abs, get_sanity_scenarios(auto_abs)["nuke"])
        assert nuke.final_cnl > 15
        assert nuke.trigger_breaches > 0


class TestScenarioResults:

    def test_classify_status(self):
        assert classify_status(0.0, 0.0) == "safe"
        assert classify_status(0.005, 0.005) == "safe"
        assert classify_status(0.0, 1.0) == "impaired"
        assert classify_status(2.0, 1.0) == "loss"

    def test_run_scenario_rows(self, subprime, base_params):
        rows = run_scenario(subprime, base_params)
        assert len(rows) == len(subprime.tranches)
        assert all(isinstance(r, ScenarioResult) for r in rows)
        assert rows[0].tranche == "Class A"
        assert rows[0].yield_pct == pytest.approx(3.69 + 0.95)
        assert rows[-1].yield_pct is None
        assert rows[-1].rating == "NR"

    def test_base_presets_keep_senior_safe(self):
        for template in DEAL_TEMPLATES.values():
            base = get_standard_scenarios(template)["base"]
            assert run_scenario(template, base)[0].status == "safe"
