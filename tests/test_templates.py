"""
Tests for engine.deal and engine.templates modules.
"""
from dataclasses import replace

import pytest

from engine.deal import (
    DealConfigError,
    DealTemplate,
    Rating,
    TriggerSpec,
    TriggerType,
)
from engine.templates import (
    DEAL_TEMPLATES,
    SUBPRIME_AUTO_CLASSIC,
    get_template,
    get_template_keys,
)
from engine.waterfall import run_waterfall
from components.styles import RATING_COLORS, rating_color


class TestTemplateStore:

    def test_keys(self):
        assert get_template_keys() == ["auto-abs", "clo", "consumer", "equipment"]

    @pytest.mark.parametrize("template_id", ["auto-abs", "clo", "consumer", "equipment"])
    def test_templates_validate(self, template_id):
        template = get_template(template_id)
        assert template.validate()
        assert template.id == template_id

    @pytest.mark.parametrize("template_id", ["auto-abs", "clo", "consumer", "equipment"])
    def test_single_equity_piece_at_bottom(self, template_id):
        template = get_template(template_id)
        assert template.equity_index == len(template.tranches) - 1
        assert sum(1 for t in template.tranches if t.is_equity) == 1

    def test_notes_sum_to_collateral(self):
        for template in [*DEAL_TEMPLATES.values(), SUBPRIME_AUTO_CLASSIC]:
            assert template.total_note_balance == pytest.approx(template.collateral_balance)

    def test_classic_template_lookup(self):
        assert get_template("subprime-auto") is SUBPRIME_AUTO_CLASSIC

    def test_unknown_template(self):
        with pytest.raises(DealConfigError, match="Unknown template"):
            get_template("cmbs")

    def test_initial_oc(self):
        assert SUBPRIME_AUTO_CLASSIC.initial_oc_percent == pytest.approx(260 / 245 * 100)


class TestSerialization:

    @pytest.mark.parametrize("template_id", ["auto-abs", "clo", "consumer", "equipment"])
    def test_round_trip(self, template_id):
        template = get_template(template_id)
        assert DealTemplate.from_dict(template.to_dict()) == template

    def test_bad_rating(self):
        data = SUBPRIME_AUTO_CLASSIC.to_dict()
        data["tranches"][0]["rating"] = "AAA+"
        with pytest.raises(DealConfigError):
            DealTemplate.from_dict(data)

    def test_missing_trigger_threshold(self):
        data = SUBPRIME_AUTO_CLASSIC.to_dict()
        del data["triggers"][0]["threshold"]
        with pytest.raises(DealConfigError):
            DealTemplate.from_dict(data)


class TestTriggerSpec:

    def test_oc_fails_below(self):
        oc = TriggerSpec("OC", TriggerType.OC, 105)
        assert oc.is_breached(104.9)
        assert not oc.is_breached(105)

    def test_cnl_fails_above(self):
        cnl = TriggerSpec("CNL", TriggerType.CNL, 15)
        assert cnl.is_breached(15.1)
        assert not cnl.is_breached(15)

    def test_ard_after_month(self):
        ard = TriggerSpec("ARD", TriggerType.ARD, 36)
        assert not ard.is_breached(36)
        assert ard.is_breached(37)

    def test_info_never_breaches(self):
        info = TriggerSpec("Non-Call End", TriggerType.INFO, 24)
        assert not info.is_breached(0)
        assert not info.is_breached(1000)

    def test_ic_parsed_but_inert(self, subprime, base_params):
        # An IC test that would fail every period leaves the cash flows alone
        ic = TriggerSpec("IC", TriggerType.IC, 10_000)
        with_ic = replace(subprime, triggers=subprime.triggers + (ic,))
        assert run_waterfall(with_ic, base_params).cash_flows == run_waterfall(subprime, base_params).cash_flows


class TestRatingColors:

    def test_every_rating_has_a_color(self):
        assert set(RATING_COLORS) == set(Rating)

    def test_lookup(self):
        assert rating_color(Rating.AAA).startswith("#")
