"""
Breakeven CDR solver - bisection over the default rate
"""
import logging
from typing import List, Optional

from .config import (
    BREAKEVEN_CDR_LOW,
    BREAKEVEN_CDR_HIGH,
    BREAKEVEN_MAX_ITERATIONS,
    BREAKEVEN_TOLERANCE,
    LOSS_THRESHOLD,
)
from .deal import DealTemplate
from .scenarios import ScenarioParams
from .waterfall import run_waterfall

logger = logging.getLogger(__name__)


def _has_loss(template: DealTemplate, params: ScenarioParams, cdr: float, tranche_index: int) -> bool:
    result = run_waterfall(template, params.with_cdr(cdr))
    return result.tranche_summary[tranche_index].principal_loss > LOSS_THRESHOLD


def find_breakeven_cdr(
    template: DealTemplate,
    params: ScenarioParams,
    tranche_index: int,
    low: float = BREAKEVEN_CDR_LOW,
    high: float = BREAKEVEN_CDR_HIGH,
) -> Optional[float]:
    """
    Find the lowest CDR at which a tranche first takes principal loss.

    Args:
        template: Deal template
        params: Scenario assumptions (the CDR field is ignored)
        tranche_index: Position of the tranche in the stack
        low: Lower CDR bound, %
        high: Upper CDR bound, %

    Returns:
        Breakeven CDR in %, 0 if the tranche loses principal with no
        defaults, or None if it survives even at the upper bound
    """
    if not 0 <= tranche_index < len(template.tranches):
        raise IndexError(
            f"Tranche index {tranche_index} out of range for {len(template.tranches)} tranches"
        )

    if _has_loss(template, params, low, tranche_index):
        return low
    if not _has_loss(template, params, high, tranche_index):
        return None

    for _ in range(BREAKEVEN_MAX_ITERATIONS):
        mid = (low + high) / 2
        if _has_loss(template, params, mid, tranche_index):
            high = mid
        else:
            low = mid
        if high - low < BREAKEVEN_TOLERANCE:
            break

    breakeven = (low + high) / 2
    logger.debug(
        "%s / %s: breakeven CDR %.2f%%",
        template.name, template.tranches[tranche_index].name, breakeven,
    )
    return breakeven


def breakeven_table(template: DealTemplate, params: ScenarioParams) -> List[Optional[float]]:
    """Breakeven CDR for every tranche, senior first"""
    return [find_breakeven_cdr(template, params, idx) for idx in range(len(template.tranches))]
