"""
ABS Deal Modeler Engine Package
Core calculation modules for the structured credit waterfall dashboard
"""

# Deal and structure classes
from .deal import (
    DealTemplate,
    TrancheSpec,
    TriggerSpec,
    TriggerType,
    CouponType,
    Rating,
    DealConfigError,
)

# Template store
from .templates import (
    DEAL_TEMPLATES,
    SUBPRIME_AUTO_CLASSIC,
    get_template,
    get_template_keys,
)

# Scenarios
from .scenarios import (
    ScenarioParams,
    ScenarioPreset,
    ScenarioResult,
    TemplateDefaults,
    SCENARIO_PRESETS,
    TEMPLATE_DEFAULTS,
    build_params,
    get_presets,
    get_template_defaults,
    get_standard_scenarios,
    get_sanity_scenarios,
    run_scenario,
    run_scenarios,
)

# Waterfall engine
from .waterfall import (
    run_waterfall,
    CashFlowRecord,
    WaterfallResult,
)

# Metrics and IRR
from .metrics import TrancheSummary, summarize_tranches, min_irr
from .irr import calculate_irr, annualize_irr

# Breakeven
from .breakeven import find_breakeven_cdr, breakeven_table

# Market data
from .market_data import (
    BaseRateData,
    MarketRecord,
    get_live_base_rate,
    get_base_rate_with_manual_override,
    fetch_record,
    format_rate_display,
)

# Export
from .export import (
    create_excel_workbook,
    export_cashflows_to_csv,
    export_summary_to_csv,
)

__all__ = [
    # Deal
    "DealTemplate",
    "TrancheSpec",
    "TriggerSpec",
    "TriggerType",
    "CouponType",
    "Rating",
    "DealConfigError",
    # Templates
    "DEAL_TEMPLATES",
    "SUBPRIME_AUTO_CLASSIC",
    "get_template",
    "get_template_keys",
    # Scenarios
    "ScenarioParams",
    "ScenarioPreset",
    "ScenarioResult",
    "SCENARIO_PRESETS",
    "build_params",
    "get_standard_scenarios",
    "get_sanity_scenarios",
    "run_scenario",
    "run_scenarios",
    # Waterfall
    "run_waterfall",
    "CashFlowRecord",
    "WaterfallResult",
    # Metrics
    "TrancheSummary",
    "min_irr",
    "calculate_irr",
    "annualize_irr",
    # Breakeven
    "find_breakeven_cdr",
    "breakeven_table",
    # Market data
    "BaseRateData",
    "MarketRecord",
    "get_live_base_rate",
    "fetch_record",
    # Export
    "create_excel_workbook",
    "export_cashflows_to_csv",
    "export_summary_to_csv",
]
