#!/usr/bin/env python3
"""Run the base / improve / nuke sanity scenarios for a deal template."""

import argparse
import logging
import sys
from pathlib import Path
from typing import List, Optional

sys.path.insert(0, str(Path(__file__).resolve().parents[1]))

from engine.config import DEFAULT_BASE_RATE
from engine.deal import DealConfigError
from engine.metrics import min_irr
from engine.scenarios import get_sanity_scenarios
from engine.templates import get_template, get_template_keys
from engine.waterfall import run_waterfall


def _fmt_pct(val: Optional[float]) -> str:
    return "--" if val is None else f"{val * 100:.2f}%"


def run_sanity(template_id: str, base_rate: float = DEFAULT_BASE_RATE) -> List[dict]:
    """One summary row per sanity scenario"""
    template = get_template(template_id)
    rows = []
    for name, params in get_sanity_scenarios(template, base_rate=base_rate).items():
        result = run_waterfall(template, params)
        equity_idx = template.equity_index
        rows.append({
            "scenario": name,
            "breach_months": result.trigger_breaches,
            "first_breach": result.first_breach_period,
            "equity_irr": result.tranche_summary[equity_idx].irr if equity_idx is not None else None,
            "min_irr": min_irr(result.tranche_summary),
        })
    return rows


def main(argv: Optional[List[str]] = None) -> int:
    parser = argparse.ArgumentParser(description="Deal template sanity scenarios.")
    parser.add_argument("template", nargs="?", default="auto-abs",
                        help=f"Template id, one of: {', '.join(get_template_keys())}")
    parser.add_argument("--base-rate", type=float, default=DEFAULT_BASE_RATE, help="Base rate in %%.")
    parser.add_argument("-v", "--verbose", action="store_true")
    args = parser.parse_args(argv)

    logging.basicConfig(level=logging.INFO if args.verbose else logging.WARNING)

    try:
        rows = run_sanity(args.template, base_rate=args.base_rate)
    except DealConfigError as e:
        print(f"[FAIL] {e}")
        return 1

    print(f"{'scenario':<10}{'breaches':>10}{'first':>8}{'equity irr':>13}{'min irr':>11}")
    for row in rows:
        first = row["first_breach"] if row["first_breach"] is not None else "--"
        print(
            f"{row['scenario']:<10}{row['breach_months']:>10}{first:>8}"
            f"{_fmt_pct(row['equity_irr']):>13}{_fmt_pct(row['min_irr']):>11}"
        )
    return 0


if __name__ == "__main__":
    sys.exit(main())
