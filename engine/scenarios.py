"""
Scenario parameters, presets and scenario runs for the ABS Deal Modeler
"""
import math
from dataclasses import dataclass, replace
from typing import Dict, List, Optional, Tuple

from .config import (
    DEFAULT_BASE_RATE,
    DEFAULT_SERVICING_FEE_BPS,
    DEFAULT_OTHER_FEES_BPS,
    DEFAULT_EQUITY_EXCESS_SHARE_PCT,
    DEFAULT_PRICE_PCT,
    LOSS_THRESHOLD,
)
from .deal import DealTemplate, DealConfigError


@dataclass(frozen=True)
class ScenarioParams:
    """Collateral performance and structural assumptions for one run"""
    cpr: float  # Annualized prepayment rate, %
    cdr: float  # Annualized default rate, %
    recovery: float  # % of defaulted balance recovered
    months: int  # Projection horizon
    base_rate: float = DEFAULT_BASE_RATE  # Floating index, %
    excess_spread_bps: float = 0.0
    servicing_fee_bps: float = 0.0
    other_fees_bps: float = 0.0
    equity_share_pct: float = 100.0  # Excess spread released to equity in pro-rata mode
    tranche_prices_pct: Optional[Tuple[float, ...]] = None

    @property
    def severity(self) -> float:
        return 100 - self.recovery

    def with_cdr(self, cdr: float) -> "ScenarioParams":
        return replace(self, cdr=cdr)

    def price_for(self, index: int) -> float:
        """Purchase price (% of par) of tranche at index"""
        if self.tranche_prices_pct is None:
            return DEFAULT_PRICE_PCT
        return self.tranche_prices_pct[index]

    def validate(self, template: Optional[DealTemplate] = None) -> bool:
        """Validate assumptions (and price vector length against a template)"""
        numbers = {
            "CPR": self.cpr,
            "CDR": self.cdr,
            "recovery": self.recovery,
            "months": self.months,
            "base rate": self.base_rate,
            "excess spread adjustment": self.excess_spread_bps,
            "servicing fee": self.servicing_fee_bps,
            "other fees": self.other_fees_bps,
            "equity share": self.equity_share_pct,
        }
        for label, value in numbers.items():
            if not math.isfinite(value):
                raise DealConfigError(f"{label} must be finite, got {value}")
        prices = self.tranche_prices_pct or ()
        if not all(math.isfinite(p) for p in prices):
            raise DealConfigError(f"Tranche prices must be finite, got {self.tranche_prices_pct}")
        if self.cpr < 0 or self.cdr < 0:
            raise DealConfigError(f"CPR/CDR cannot be negative (CPR={self.cpr}, CDR={self.cdr})")
        if not 0 <= self.recovery <= 100:
            raise DealConfigError(f"Recovery must be between 0 and 100, got {self.recovery}")
        if self.months < 1:
            raise DealConfigError(f"Projection horizon must be at least 1 month, got {self.months}")
        if template is not None and self.tranche_prices_pct is not None:
            if len(self.tranche_prices_pct) != len(template.tranches):
                raise DealConfigError(
                    f"Expected {len(template.tranches)} tranche prices, got {len(self.tranche_prices_pct)}"
                )
        return True


@dataclass(frozen=True)
class ScenarioPreset:
    """Named CPR/CDR/recovery preset"""
    name: str
    cpr: float
    cdr: float
    recovery: float
    months: int


@dataclass(frozen=True)
class TemplateDefaults:
    """Per-template structural defaults"""
    equity_share_pct: float
    tranche_prices_pct: Tuple[float, ...] = ()


# Base presets are calibrated to a clean new deal: no breaches, positive IRRs.
# Horizons are long enough for the pool to fully amortize.
SCENARIO_PRESETS: Dict[str, Dict[str, ScenarioPreset]] = {
    "auto-abs": {
        "base": ScenarioPreset("Base", cpr=22, cdr=2, recovery=65, months=60),
        "stress": ScenarioPreset("Stress", cpr=6, cdr=10, recovery=35, months=72),
        "extension": ScenarioPreset("Extension", cpr=3, cdr=5, recovery=45, months=84),
    },
    "consumer": {
        "base": ScenarioPreset("Base", cpr=28, cdr=2, recovery=45, months=48),
        "stress": ScenarioPreset("Stress", cpr=8, cdr=12, recovery=15, months=60),
        "extension": ScenarioPreset("Extension", cpr=4, cdr=7, recovery=20, months=72),
    },
    "equipment": {
        "base": ScenarioPreset("Base", cpr=18, cdr=2, recovery=85, months=60),
        "stress": ScenarioPreset("Stress", cpr=4, cdr=6, recovery=50, months=72),
        "extension": ScenarioPreset("Extension", cpr=2, cdr=3, recovery=55, months=84),
    },
    "clo": {
        "base": ScenarioPreset("Base", cpr=20, cdr=1.5, recovery=75, months=72),
        "stress": ScenarioPreset("Stress", cpr=6, cdr=6, recovery=50, months=120),
        "extension": ScenarioPreset("Extension", cpr=4, cdr=3, recovery=60, months=120),
    },
}

TEMPLATE_DEFAULTS: Dict[str, TemplateDefaults] = {
    "auto-abs": TemplateDefaults(33, (100, 100, 100, 100, 100, 96)),
    "consumer": TemplateDefaults(72, (100, 100, 100, 100, 99)),
    "equipment": TemplateDefaults(100, (100, 100, 100, 80)),
    "clo": TemplateDefaults(100, (100, 100, 100, 100, 100, 58)),
}


def get_template_defaults(template_id: str) -> TemplateDefaults:
    return TEMPLATE_DEFAULTS.get(
        template_id, TemplateDefaults(DEFAULT_EQUITY_EXCESS_SHARE_PCT)
    )


def get_presets(template_id: str) -> Dict[str, ScenarioPreset]:
    """Presets for a template, falling back to the equipment set"""
    return SCENARIO_PRESETS.get(template_id, SCENARIO_PRESETS["equipment"])


def build_params(
    template: DealTemplate,
    preset: ScenarioPreset,
    base_rate: float = DEFAULT_BASE_RATE,
    excess_spread_bps: float = 0.0,
    servicing_fee_bps: float = DEFAULT_SERVICING_FEE_BPS,
    other_fees_bps: float = DEFAULT_OTHER_FEES_BPS,
) -> ScenarioParams:
    """Combine a preset with the template's structural defaults"""
    defaults = get_template_defaults(template.id)
    prices = defaults.tranche_prices_pct
    if len(prices) != len(template.tranches):
        prices = tuple(DEFAULT_PRICE_PCT for _ in template.tranches)

    return ScenarioParams(
        cpr=preset.cpr,
        cdr=preset.cdr,
        recovery=preset.recovery,
        months=preset.months,
        base_rate=base_rate,
        excess_spread_bps=excess_spread_bps,
        servicing_fee_bps=servicing_fee_bps,
        other_fees_bps=other_fees_bps,
        equity_share_pct=defaults.equity_share_pct,
        tranche_prices_pct=tuple(prices),
    )


def get_standard_scenarios(template: DealTemplate, base_rate: float = DEFAULT_BASE_RATE) -> Dict[str, ScenarioParams]:
    """Base / stress / extension scenarios for a template"""
    return {
        key: build_params(template, preset, base_rate=base_rate)
        for key, preset in get_presets(template.id).items()
    }


def get_sanity_scenarios(template: DealTemplate, base_rate: float = DEFAULT_BASE_RATE) -> Dict[str, ScenarioParams]:
    """
    Base, improving and severe ("nuke") scenarios around the base preset.

    Used to eyeball that the base case is clean, an improving case stays
    clean, and a severe case breaches triggers.
    """
    base = get_presets(template.id)["base"]
    improve = ScenarioPreset(
        "Improve",
        cpr=max(0, base.cpr - 8),
        cdr=max(0, base.cdr - 1),
        recovery=min(95, base.recovery + 5),
        months=base.months,
    )
    nuke = ScenarioPreset(
        "Nuke",
        cpr=max(1, base.cpr - 12),
        cdr=min(30, base.cdr * 6),
        recovery=max(10, base.recovery - 35),
        months=max(base.months, 72),
    )
    return {
        "base": build_params(template, base, base_rate=base_rate),
        "improve": build_params(template, improve, base_rate=base_rate, excess_spread_bps=100),
        "nuke": build_params(template, nuke, base_rate=base_rate, excess_spread_bps=-100),
    }


# =============================================================================
# SCENARIO RESULTS
# =============================================================================

@dataclass
class ScenarioResult:
    """Per-tranche outcome of a scenario run"""
    tranche: str
    rating: str
    subordination: float
    moic: float
    wal: float
    yield_pct: Optional[float]  # Contractual coupon for rated notes, None for equity
    irr: Optional[float]
    principal_loss: float
    status: str  # "safe", "impaired", "loss"


def classify_status(principal_loss: float, interest_shortfall: float) -> str:
    if principal_loss > LOSS_THRESHOLD:
        return "loss"
    if interest_shortfall > LOSS_THRESHOLD:
        return "impaired"
    return "safe"


def run_scenario(template: DealTemplate, params: ScenarioParams) -> List[ScenarioResult]:
    """Run the waterfall and reduce it to one result row per tranche"""
    from .waterfall import run_waterfall

    output = run_waterfall(template, params)
    results = []
    for spec, summary in zip(template.tranches, output.tranche_summary):
        results.append(ScenarioResult(
            tranche=spec.name,
            rating=spec.rating.value,
            subordination=spec.subordination,
            moic=summary.moic,
            wal=summary.wal,
            yield_pct=None if spec.is_equity else spec.coupon_rate(params.base_rate),
            irr=summary.irr,
            principal_loss=summary.principal_loss,
            status=classify_status(summary.principal_loss, summary.interest_shortfall),
        ))
    return results


def run_scenarios(
    template: DealTemplate,
    scenarios: Dict[str, ScenarioParams],
) -> Dict[str, List[ScenarioResult]]:
    """Run multiple scenarios"""
    return {name: run_scenario(template, params) for name, params in scenarios.items()}
