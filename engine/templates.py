"""
Deal template store - static deal archetypes for the Deal Modeler
Subordination and spread levels reflect 2025 new-issue benchmarks
"""
from typing import Dict, List

from .deal import (
    DealTemplate,
    DealConfigError,
    TrancheSpec,
    TriggerSpec,
    TriggerType,
    CouponType,
    Rating,
)

_FLT = CouponType.FLOATING
_FIX = CouponType.FIXED

_OC_TEST = TriggerSpec("OC Test", TriggerType.OC, 104, "Sequential pay + cash trapping")


def _cnl(threshold: float) -> TriggerSpec:
    return TriggerSpec("CNL Trigger", TriggerType.CNL, threshold, "Sequential pay + accelerated amortization")


def _ard(month: int) -> TriggerSpec:
    return TriggerSpec("ARD", TriggerType.ARD, month, "Excess cash diverts to senior paydown")


DEAL_TEMPLATES: Dict[str, DealTemplate] = {
    "auto-abs": DealTemplate(
        id="auto-abs",
        name="Auto ABS (Subprime)",
        description="Asset-backed securities collateralized by subprime auto loans",
        collateral_type="Subprime Auto Loans",
        collateral_balance=300,
        wac=17.5,
        wam=54,
        typical_wal="1.5-2.5 years",
        tranches=(
            TrancheSpec("Class A", 165, _FLT, 110, Rating.AAA, 45.0),
            TrancheSpec("Class B", 40, _FLT, 175, Rating.AA, 31.7),
            TrancheSpec("Class C", 35, _FLT, 250, Rating.A, 20.0),
            TrancheSpec("Class D", 25, _FLT, 375, Rating.BBB, 11.7),
            TrancheSpec("Class E", 20, _FLT, 625, Rating.BB, 5.0),
            TrancheSpec("Residual", 15, _FIX, 0, Rating.NR, 0),
        ),
        triggers=(_OC_TEST, _cnl(15), _ard(36)),
        key_risks=("Default rates", "Depreciation risk", "Economic sensitivity", "Prepayment risk"),
        typical_spreads=(("AAA", "75-110 bps"), ("BBB", "180-250 bps")),
    ),
    "clo": DealTemplate(
        id="clo",
        name="CLO (Collateralized Loan Obligation)",
        description="Pool of leveraged loans to corporate borrowers",
        collateral_type="Broadly Syndicated Loans",
        collateral_balance=500,
        wac=9.5,
        wam=60,
        typical_wal="4-6 years",
        tranches=(
            TrancheSpec("Class A", 310, _FLT, 135, Rating.AAA, 38.0),
            TrancheSpec("Class B", 50, _FLT, 180, Rating.AA, 28.0),
            TrancheSpec("Class C", 35, _FLT, 235, Rating.A, 21.0),
            TrancheSpec("Class D", 30, _FLT, 360, Rating.BBB, 15.0),
            TrancheSpec("Class E", 25, _FLT, 700, Rating.BB, 10.0),
            TrancheSpec("Equity", 50, _FIX, 0, Rating.NR, 0),
        ),
        triggers=(
            _OC_TEST,
            TriggerSpec("Non-Call End", TriggerType.INFO, 24, "Deal callable; optional redemption (informational only)"),
        ),
        key_risks=("Corporate credit risk", "Reinvestment risk", "Manager selection", "CCC bucket"),
        typical_spreads=(("AAA", "125-145 bps"), ("BBB", "320-400 bps")),
    ),
    "consumer": DealTemplate(
        id="consumer",
        name="Consumer ABS",
        description="Unsecured consumer loans (personal loans, credit cards)",
        collateral_type="Unsecured Consumer Debt",
        collateral_balance=250,
        wac=14.5,
        wam=36,
        typical_wal="1.5-3.0 years",
        tranches=(
            TrancheSpec("Class A", 150, _FLT, 95, Rating.AAA, 40.0),
            TrancheSpec("Class B", 35, _FLT, 155, Rating.AA, 26.0),
            TrancheSpec("Class C", 30, _FLT, 215, Rating.A, 14.0),
            TrancheSpec("Class D", 20, _FLT, 325, Rating.BBB, 6.0),
            TrancheSpec("Residual", 15, _FIX, 0, Rating.NR, 0),
        ),
        triggers=(_OC_TEST, _cnl(12), _ard(24)),
        key_risks=("No collateral recovery", "Regulatory changes", "Consumer behavior", "Charge-off timing"),
        typical_spreads=(("AAA", "85-120 bps"), ("BBB", "280-375 bps")),
    ),
    "equipment": DealTemplate(
        id="equipment",
        name="Equipment ABS",
        description="Loans/leases for business equipment (railcar, aircraft, construction)",
        collateral_type="Commercial Equipment",
        collateral_balance=300,
        wac=8.5,
        wam=48,
        typical_wal="2.5-4.0 years",
        tranches=(
            TrancheSpec("Class A", 240, _FLT, 65, Rating.AAA, 20.0),
            TrancheSpec("Class B", 30, _FLT, 150, Rating.A, 10.0),
            TrancheSpec("Class C", 15, _FLT, 275, Rating.BBB, 5.0),
            TrancheSpec("Equity", 15, _FIX, 0, Rating.NR, 0),
        ),
        triggers=(_OC_TEST, _cnl(5), _ard(48)),
        key_risks=("Residual value risk", "Obligor concentration", "Equipment obsolescence", "Technology risk"),
        typical_spreads=(("AAA", "50-80 bps"), ("A", "120-175 bps")),
    ),
}

# Classic teaching structure used on the standalone waterfall walkthrough
SUBPRIME_AUTO_CLASSIC = DealTemplate(
    id="subprime-auto",
    name="Subprime Auto ABS",
    description="Loans to borrowers with lower credit scores (typically <660 FICO)",
    collateral_type="Auto - Subprime",
    collateral_balance=260,
    wac=18.5,
    wam=60,
    typical_wal="1.5-2.5 years",
    tranches=(
        TrancheSpec("Class A", 150, _FLT, 95, Rating.AAA, 42.5),
        TrancheSpec("Class B", 35, _FLT, 145, Rating.AA, 29.0),
        TrancheSpec("Class C", 25, _FLT, 195, Rating.A, 19.4),
        TrancheSpec("Class D", 20, _FLT, 295, Rating.BBB, 11.7),
        TrancheSpec("Class E", 15, _FLT, 550, Rating.BB, 5.9),
        TrancheSpec("Residual", 15, _FIX, 0, Rating.NR, 0),
    ),
    triggers=(
        TriggerSpec("OC Test", TriggerType.OC, 105, "Sequential Pay"),
        TriggerSpec("CNL Trigger", TriggerType.CNL, 15, "Turbo Senior"),
    ),
    key_risks=("Higher default rates", "Depreciation risk", "Economic sensitivity"),
    typical_spreads=(("AAA", "85-110 bps"), ("BBB", "275-325 bps")),
)


def get_template_keys() -> List[str]:
    """Template ids in display order"""
    return list(DEAL_TEMPLATES.keys())


def get_template(template_id: str) -> DealTemplate:
    """Look up a template by id"""
    if template_id == SUBPRIME_AUTO_CLASSIC.id:
        return SUBPRIME_AUTO_CLASSIC
    try:
        return DEAL_TEMPLATES[template_id]
    except KeyError:
        raise DealConfigError(
            f"Unknown template '{template_id}'. Available: {', '.join(get_template_keys())}"
        ) from None
