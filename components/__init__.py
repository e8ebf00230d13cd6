"""
Components package for the ABS Deal Modeler
"""
from .styles import (
    get_page_css,
    get_plotly_theme,
    status_badge,
    page_header,
    rating_color,
    CYAN_PRIMARY,
    MINT_ACCENT,
    WARNING_ORANGE,
    ERROR_RED,
    SUCCESS_GREEN,
    CHART_COLORS,
    RATING_COLORS,
    STATUS_COLORS,
)

from .sidebar import (
    render_rate_indicator,
    render_section_header,
    create_scenario_inputs,
)

from .charts import (
    apply_dashboard_theme,
    create_collateral_chart,
    create_trigger_chart,
    create_tranche_balance_chart,
    create_capital_stack_chart,
    create_scenario_irr_chart,
    create_breakeven_chart,
)
