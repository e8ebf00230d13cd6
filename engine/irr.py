"""
IRR root finder (Newton-Raphson on monthly cash flows)
"""
from typing import Optional, Sequence

import numpy as np

from .config import IRR_GUESS, IRR_MAX_ITERATIONS, IRR_TOLERANCE, IRR_FLOOR


def calculate_irr(
    cash_flows: Sequence[float],
    guess: float = IRR_GUESS,
    max_iterations: int = IRR_MAX_ITERATIONS,
) -> Optional[float]:
    """
    Find the periodic rate r where NPV(r) = 0.

    Args:
        cash_flows: Signed cash flows, index 0 at t=0
        guess: Starting rate
        max_iterations: Newton steps before giving up

    Returns:
        Periodic rate, or None when the series has no sign change,
        the derivative vanishes, or the iteration does not converge
    """
    flows = np.asarray(cash_flows, dtype=float)
    if flows.size < 2:
        return None
    if not (flows > 0).any() or not (flows < 0).any():
        return None

    t = np.arange(flows.size)
    rate = guess
    for _ in range(max_iterations):
        discount = (1 + rate) ** -t
        npv = float(np.sum(flows * discount))
        if abs(npv) < IRR_TOLERANCE:
            return rate
        dnpv = float(np.sum(-t[1:] * flows[1:] * discount[1:] / (1 + rate)))
        if dnpv == 0:
            return None
        rate = rate - npv / dnpv
        if rate <= IRR_FLOOR:
            rate = IRR_FLOOR
    return None


def annualize_irr(monthly_rate: Optional[float]) -> Optional[float]:
    """Compound a monthly rate to an annual rate"""
    if monthly_rate is None:
        return None
    return (1 + monthly_rate) ** 12 - 1
