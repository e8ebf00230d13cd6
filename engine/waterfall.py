"""
Cashflow waterfall engine for ABS/CLO deal templates

Projects collateral cash flow month by month under CPR/CDR/recovery
assumptions, pays tranche interest senior-to-junior, distributes principal
pro-rata or sequentially, and evaluates OC/CNL/ARD triggers each period.
"""
import logging
from dataclasses import dataclass, asdict, replace
from typing import List, Optional, Tuple

import pandas as pd

from .config import COLLATERAL_EPSILON, OC_SENTINEL
from .deal import DealTemplate, TriggerType
from .metrics import TrancheSummary, allocate_writedowns, summarize_tranches
from .scenarios import ScenarioParams

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CashFlowRecord:
    """One simulated month of collateral and structure activity"""
    period: int
    collateral_start: float
    collateral_end: float
    scheduled_principal: float
    prepayments: float
    defaults: float
    recoveries: float
    losses: float
    interest_income: float
    excess_spread: float
    cnl_percent: float
    oc_percent: float
    trigger_status: str  # "Pass" / "Fail"
    ard_active: bool
    turbo_payment: float
    excess_spread_to_equity: float = 0.0
    principal_distributed: float = 0.0
    released_principal: float = 0.0  # Left over after every tranche is retired
    sequential: bool = False


@dataclass
class WaterfallResult:
    """Full output of a waterfall run"""
    cash_flows: List[CashFlowRecord]
    tranche_summary: List[TrancheSummary]
    trigger_breaches: int
    final_cnl: float
    final_oc: float
    ard_triggered: bool
    ard_month: Optional[int]

    @property
    def first_breach_period(self) -> Optional[int]:
        for cf in self.cash_flows:
            if cf.trigger_status == "Fail":
                return cf.period
        return None

    def to_frame(self) -> pd.DataFrame:
        """Cash flow ledger as a DataFrame, one row per period"""
        return pd.DataFrame([asdict(cf) for cf in self.cash_flows])

    def summary_frame(self) -> pd.DataFrame:
        """Tranche summary as a DataFrame, one row per tranche"""
        return pd.DataFrame([asdict(t) for t in self.tranche_summary])


@dataclass(frozen=True)
class _PeriodState:
    """Accumulator threaded through the period loop"""
    collateral_balance: float
    cumulative_loss: float
    balances: Tuple[float, ...]
    principal_received: Tuple[float, ...]
    interest_received: Tuple[float, ...]
    interest_shortfall: Tuple[float, ...]
    cash_history: Tuple[Tuple[float, ...], ...]
    sequential: bool = False
    ard_month: Optional[int] = None


def _initial_state(template: DealTemplate) -> _PeriodState:
    n = len(template.tranches)
    return _PeriodState(
        collateral_balance=template.collateral_balance,
        cumulative_loss=0.0,
        balances=tuple(t.balance for t in template.tranches),
        principal_received=(0.0,) * n,
        interest_received=(0.0,) * n,
        interest_shortfall=(0.0,) * n,
        cash_history=((),) * n,
    )


def _effective_yield(template: DealTemplate, params: ScenarioParams) -> float:
    """Collateral yield net of fees, floored at zero"""
    return max(
        0.0,
        template.wac
        + params.excess_spread_bps / 100
        - params.servicing_fee_bps / 100
        - params.other_fees_bps / 100,
    )


def _step(
    template: DealTemplate,
    params: ScenarioParams,
    state: _PeriodState,
    period: int,
) -> Tuple[_PeriodState, CashFlowRecord]:
    """Simulate one month and return the next state with its record"""
    tranches = template.tranches
    n = len(tranches)
    start = state.collateral_balance

    # Collateral flows off the start-of-period balance. Capped in order so the
    # pool can never pay down more than it holds.
    scheduled = min(start * (1 / template.wam), start)
    prepayments = min(start * (params.cpr / 100 / 12), start - scheduled)
    defaults = min(start * (params.cdr / 100 / 12), start - scheduled - prepayments)
    recoveries = defaults * (params.recovery / 100)
    losses = defaults * (params.severity / 100)
    interest_income = start * (_effective_yield(template, params) / 100 / 12)

    balances = list(state.balances)
    interest_paid = [0.0] * n
    principal_paid = [0.0] * n
    shortfall = list(state.interest_shortfall)

    # Interest, senior to junior
    available_interest = interest_income
    for i, spec in enumerate(tranches):
        if balances[i] > 0 and spec.spread > 0:
            coupon_due = balances[i] * (spec.coupon_rate(params.base_rate) / 100 / 12)
            coupon_paid = min(coupon_due, available_interest)
            interest_paid[i] = coupon_paid
            shortfall[i] += coupon_due - coupon_paid
            available_interest -= coupon_paid
    excess_spread = max(0.0, available_interest)

    cumulative_loss = state.cumulative_loss + losses
    collateral_end = start - scheduled - prepayments - defaults
    cnl_percent = cumulative_loss / template.collateral_balance * 100

    cnl_trigger = template.get_trigger(TriggerType.CNL)
    cnl_breached = cnl_trigger is not None and cnl_trigger.is_breached(cnl_percent)

    ard_trigger = template.get_trigger(TriggerType.ARD)
    post_ard = (
        ard_trigger is not None
        and ard_trigger.is_breached(period)
        and collateral_end > COLLATERAL_EPSILON
    )
    ard_month = state.ard_month
    if post_ard and ard_month is None:
        ard_month = period
        logger.info("%s: ARD reached in period %d, excess spread turbos seniors", template.name, period)

    sequential = state.sequential or post_ard

    # Excess spread: all of it turbos principal in sequential mode; in
    # pro-rata mode the equity share is released and the rest builds OC.
    if sequential:
        to_equity = 0.0
        turbo = excess_spread
    else:
        equity_share = max(0.0, min(1.0, params.equity_share_pct / 100))
        to_equity = excess_spread * equity_share
        turbo = excess_spread - to_equity
    available_principal = scheduled + prepayments + recoveries + turbo
    principal_pool = available_principal

    rated = [i for i, spec in enumerate(tranches) if spec.is_rated and balances[i] > 0]
    if sequential:
        for i in rated:
            if available_principal <= 0:
                break
            paydown = min(available_principal, balances[i])
            balances[i] -= paydown
            principal_paid[i] += paydown
            available_principal -= paydown
    else:
        snapshot = {i: balances[i] for i in rated}
        total_rated = sum(snapshot.values())
        if total_rated > 0:
            to_distribute = min(available_principal, total_rated)
            for i in rated:
                if to_distribute >= total_rated:
                    paydown = balances[i]
                else:
                    paydown = min(to_distribute * snapshot[i] / total_rated, balances[i])
                balances[i] -= paydown
                principal_paid[i] += paydown
                available_principal -= paydown

    # Residual principal goes to the equity piece
    for i, spec in enumerate(tranches):
        if available_principal <= 0:
            break
        if spec.is_equity and balances[i] > 0:
            paydown = min(available_principal, balances[i])
            balances[i] -= paydown
            principal_paid[i] += paydown
            available_principal -= paydown

    equity_idx = template.equity_index
    if equity_idx is not None:
        interest_paid[equity_idx] += to_equity

    rated_balance = sum(balances[i] for i, spec in enumerate(tranches) if spec.is_rated)
    oc_percent = collateral_end / rated_balance * 100 if rated_balance > 0 else OC_SENTINEL
    oc_trigger = template.get_trigger(TriggerType.OC)
    oc_breached = oc_trigger is not None and rated_balance > 0 and oc_trigger.is_breached(oc_percent)

    latched = state.sequential or oc_breached or cnl_breached
    if latched and not state.sequential:
        logger.info(
            "%s: trigger breach in period %d (OC %.2f%%, CNL %.2f%%), switching to sequential pay",
            template.name, period, oc_percent, cnl_percent,
        )

    record = CashFlowRecord(
        period=period,
        collateral_start=start,
        collateral_end=max(0.0, collateral_end),
        scheduled_principal=scheduled,
        prepayments=prepayments,
        defaults=defaults,
        recoveries=recoveries,
        losses=losses,
        interest_income=interest_income,
        excess_spread=excess_spread,
        cnl_percent=cnl_percent,
        oc_percent=oc_percent,
        trigger_status="Fail" if latched else "Pass",
        ard_active=post_ard,
        turbo_payment=turbo,
        excess_spread_to_equity=to_equity,
        principal_distributed=sum(principal_paid),
        released_principal=max(0.0, principal_pool - sum(principal_paid)),
        sequential=sequential,
    )

    next_state = replace(
        state,
        collateral_balance=collateral_end,
        cumulative_loss=cumulative_loss,
        balances=tuple(balances),
        principal_received=tuple(r + p for r, p in zip(state.principal_received, principal_paid)),
        interest_received=tuple(r + p for r, p in zip(state.interest_received, interest_paid)),
        interest_shortfall=tuple(shortfall),
        cash_history=tuple(
            history + (interest_paid[i] + principal_paid[i],)
            for i, history in enumerate(state.cash_history)
        ),
        sequential=latched,
        ard_month=ard_month,
    )
    return next_state, record


def run_waterfall(template: DealTemplate, params: ScenarioParams) -> WaterfallResult:
    """
    Run the full waterfall for a template under a scenario.

    Args:
        template: Deal template (collateral, tranches, triggers)
        params: Scenario assumptions

    Returns:
        WaterfallResult with the period ledger and tranche summaries

    Raises:
        DealConfigError: If the template or scenario is invalid
    """
    template.validate()
    params.validate(template)

    max_months = int(max(params.months, template.wam * 2))
    state = _initial_state(template)
    cash_flows: List[CashFlowRecord] = []

    period = 1
    while period <= max_months and state.collateral_balance > COLLATERAL_EPSILON:
        state, record = _step(template, params, state, period)
        cash_flows.append(record)
        period += 1

    tranche_summary = summarize_tranches(
        template,
        params,
        final_balances=allocate_writedowns(
            state.balances, state.collateral_balance, template.equity_index
        ),
        principal_received=state.principal_received,
        interest_received=state.interest_received,
        interest_shortfall=state.interest_shortfall,
        cash_histories=state.cash_history,
        num_periods=len(cash_flows),
    )

    last = cash_flows[-1] if cash_flows else None
    result = WaterfallResult(
        cash_flows=cash_flows,
        tranche_summary=tranche_summary,
        trigger_breaches=sum(1 for cf in cash_flows if cf.trigger_status == "Fail"),
        final_cnl=last.cnl_percent if last else 0.0,
        final_oc=last.oc_percent if last else 0.0,
        ard_triggered=state.ard_month is not None,
        ard_month=state.ard_month,
    )
    logger.debug(
        "%s: %d periods, %d breach periods, final CNL %.2f%%",
        template.name, len(cash_flows), result.trigger_breaches, result.final_cnl,
    )
    return result
