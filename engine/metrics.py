"""
Tranche summary metrics - MOIC, WAL, principal loss and IRR
"""
from dataclasses import dataclass
from typing import Iterable, List, Optional, Sequence, Tuple

from .config import IRR_FLOOR
from .deal import DealTemplate
from .irr import calculate_irr, annualize_irr
from .scenarios import ScenarioParams


@dataclass(frozen=True)
class TrancheSummary:
    """Lifetime results for a single tranche"""
    name: str
    rating: str
    original_balance: float
    final_balance: float
    total_interest: float
    total_principal: float
    principal_loss: float
    interest_shortfall: float  # Cumulative unpaid coupon
    moic: float
    irr: Optional[float]  # Annualized; None when no rate solves the cash flows
    wal: float  # Years

    @property
    def total_cash(self) -> float:
        return self.total_principal + self.total_interest


def calculate_moic(total_cash: float, invested_capital: float) -> float:
    """Multiple on invested capital"""
    return total_cash / invested_capital if invested_capital > 0 else 0.0


def approximate_wal(num_periods: int, principal_received: float) -> float:
    """
    Coarse weighted-average life in years.

    Half the simulated horizon, not a principal-weighted average. Known
    approximation, kept as is.
    """
    if principal_received <= 0:
        return 0.0
    return (num_periods / 2) / 12


def tranche_irr(invested_capital: float, cash_received: Sequence[float]) -> Optional[float]:
    """Annualized IRR of buying at invested_capital and receiving cash_received monthly"""
    monthly = calculate_irr([-invested_capital, *cash_received])
    annual = annualize_irr(monthly)
    if annual is None:
        return None
    return max(IRR_FLOOR, annual)


def allocate_writedowns(
    balances: Sequence[float],
    collateral_remaining: float,
    equity_index: Optional[int] = None,
) -> Tuple[float, ...]:
    """
    Write off note balance no longer backed by collateral, most junior first.

    The equity piece at equity_index absorbs losses before any rated note,
    then rated notes are cut from the bottom of the stack up.
    """
    written = list(balances)
    shortfall = sum(written) - max(0.0, collateral_remaining)
    order = [i for i in reversed(range(len(written))) if i != equity_index]
    if equity_index is not None:
        order.insert(0, equity_index)
    for idx in order:
        if shortfall <= 0:
            break
        cut = min(shortfall, written[idx])
        written[idx] -= cut
        shortfall -= cut
    return tuple(written)


def summarize_tranches(
    template: DealTemplate,
    params: ScenarioParams,
    final_balances: Sequence[float],
    principal_received: Sequence[float],
    interest_received: Sequence[float],
    interest_shortfall: Sequence[float],
    cash_histories: Sequence[Sequence[float]],
    num_periods: int,
) -> List[TrancheSummary]:
    """Reduce the per-tranche accumulators of a waterfall run into summaries"""
    summaries = []
    for idx, tranche in enumerate(template.tranches):
        original = tranche.balance
        final = max(0.0, final_balances[idx])
        principal = principal_received[idx]
        interest = interest_received[idx]
        invested = original * (params.price_for(idx) / 100) if original > 0 else 0.0

        irr = tranche_irr(invested, cash_histories[idx]) if original > 0 else None

        summaries.append(TrancheSummary(
            name=tranche.name,
            rating=tranche.rating.value,
            original_balance=original,
            final_balance=final,
            total_interest=interest,
            total_principal=principal,
            principal_loss=max(0.0, original - principal - final),
            interest_shortfall=interest_shortfall[idx],
            moic=calculate_moic(principal + interest, invested),
            irr=irr,
            wal=approximate_wal(num_periods, principal),
        ))
    return summaries


def min_irr(summaries: Iterable[TrancheSummary]) -> Optional[float]:
    """Lowest IRR across tranches, skipping tranches without one"""
    irrs = [s.irr for s in summaries if s.irr is not None]
    return min(irrs) if irrs else None
