"""
Sidebar components - base rate indicator and scenario inputs for the Deal Modeler
"""
from typing import Optional

import streamlit as st

from engine.deal import DealTemplate
from engine.market_data import BaseRateData, get_base_rate_with_manual_override, format_rate_display
from engine.scenarios import ScenarioParams, get_presets, get_template_defaults
from engine.config import DEFAULT_BASE_RATE, DEFAULT_SERVICING_FEE_BPS, DEFAULT_OTHER_FEES_BPS
from components.styles import (
    CYAN_PRIMARY, TEXT_SECONDARY, TEXT_MUTED,
    SUCCESS_GREEN, WARNING_ORANGE, DARK_BG_SECONDARY,
)


def render_rate_indicator(manual_override: Optional[float] = None) -> BaseRateData:
    """
    Render the base rate indicator in the sidebar

    Args:
        manual_override: Optional manual base rate in %

    Returns:
        BaseRateData with the rate in use
    """
    rate_data = get_base_rate_with_manual_override(manual_override)
    display = format_rate_display(rate_data)

    if display["is_live"]:
        status_html = '<span class="live-dot"></span>LIVE'
        status_color = SUCCESS_GREEN
    elif display["is_stale"]:
        status_html = "CACHED (Stale)"
        status_color = WARNING_ORANGE
    elif rate_data.source == "manual":
        status_html = "MANUAL"
        status_color = "#ab63fa"
    elif rate_data.source == "cached":
        status_html = "CACHED"
        status_color = CYAN_PRIMARY
    else:
        status_html = "FALLBACK"
        status_color = TEXT_MUTED

    st.sidebar.markdown(
        f"""
        <style>
        .live-dot {{
            display: inline-block;
            width: 8px;
            height: 8px;
            background: {SUCCESS_GREEN};
            border-radius: 50%;
            margin-right: 6px;
        }}
        </style>
        <div style="
            background: {DARK_BG_SECONDARY};
            border: 1px solid rgba(76, 201, 240, 0.3);
            border-radius: 10px;
            padding: 0.75rem 1rem;
            margin-bottom: 1rem;
        ">
            <div style="display: flex; justify-content: space-between; align-items: center;">
                <div>
                    <div style="font-size: 0.7rem; color: {TEXT_SECONDARY}; text-transform: uppercase;">
                        Base Rate (SOFR)
                    </div>
                    <div style="font-size: 1.5rem; font-weight: 700; color: {CYAN_PRIMARY};">
                        {display['rate']}
                    </div>
                </div>
                <div style="text-align: right;">
                    <div style="font-size: 0.65rem; color: {status_color};">{status_html}</div>
                    <div style="font-size: 0.6rem; color: {TEXT_MUTED};">{display['timestamp']}</div>
                </div>
            </div>
        </div>
        """,
        unsafe_allow_html=True,
    )

    return rate_data


def render_section_header(title: str):
    """Render a styled section header in sidebar"""
    st.sidebar.markdown(
        f"""
        <div style="
            margin: 1rem 0 0.5rem 0;
            padding-bottom: 0.3rem;
            border-bottom: 1px solid rgba(76, 201, 240, 0.2);
            font-size: 0.8rem;
            font-weight: 600;
            color: {CYAN_PRIMARY};
            text-transform: uppercase;
            letter-spacing: 0.1em;
        ">
            {title}
        </div>
        """,
        unsafe_allow_html=True,
    )


def _apply_preset(template_id: str, preset_key: str):
    preset = get_presets(template_id)[preset_key]
    st.session_state.cpr = float(preset.cpr)
    st.session_state.cdr = float(preset.cdr)
    st.session_state.recovery = float(preset.recovery)
    st.session_state.months = int(preset.months)


def create_scenario_inputs(template: DealTemplate) -> ScenarioParams:
    """
    Create scenario input widgets in the sidebar.

    Preset buttons write into session state so the sliders pick them up.

    Returns:
        ScenarioParams built from the widget values
    """
    presets = get_presets(template.id)
    defaults = get_template_defaults(template.id)

    # Reset to the base preset whenever the template changes
    if st.session_state.get("scenario_template") != template.id:
        st.session_state.scenario_template = template.id
        _apply_preset(template.id, "base")

    render_section_header("Scenario Presets")
    cols = st.sidebar.columns(len(presets))
    for col, (key, preset) in zip(cols, presets.items()):
        if col.button(preset.name, key=f"preset_{key}", use_container_width=True):
            _apply_preset(template.id, key)

    render_section_header("Collateral Performance")
    cpr = st.sidebar.slider("CPR (%)", min_value=0.0, max_value=50.0, step=0.5, key="cpr",
                            help="Annualized voluntary prepayment rate")
    cdr = st.sidebar.slider("CDR (%)", min_value=0.0, max_value=30.0, step=0.25, key="cdr",
                            help="Annualized default rate")
    recovery = st.sidebar.slider("Recovery (%)", min_value=0.0, max_value=100.0, step=1.0, key="recovery",
                                 help="Share of defaulted balance recovered")
    months = st.sidebar.slider("Projection (months)", min_value=12, max_value=180, step=6, key="months")

    render_section_header("Rates & Fees")
    use_manual_rate = st.sidebar.checkbox("Use Manual Base Rate", value=False,
                                          help="Override the live SOFR fetch")
    if use_manual_rate:
        manual_rate = st.sidebar.slider("Manual Base Rate (%)", min_value=0.0, max_value=8.0,
                                        value=DEFAULT_BASE_RATE, step=0.01)
        rate_data = render_rate_indicator(manual_override=manual_rate)
    else:
        rate_data = render_rate_indicator()

    excess_spread_bps = st.sidebar.slider("Excess Spread Adj (bps)", min_value=-300, max_value=300,
                                          value=0, step=25)
    servicing_fee_bps = st.sidebar.slider("Servicing Fee (bps)", min_value=0, max_value=200,
                                          value=DEFAULT_SERVICING_FEE_BPS, step=5)
    other_fees_bps = st.sidebar.slider("Other Fees (bps)", min_value=0, max_value=300,
                                       value=DEFAULT_OTHER_FEES_BPS, step=5)

    render_section_header("Structure")
    equity_share_pct = st.sidebar.slider(
        "Equity Share of Excess Spread (%)",
        min_value=0,
        max_value=100,
        value=int(defaults.equity_share_pct),
        step=1,
        help="Released to equity while triggers pass; the rest builds OC",
    )

    prices = []
    with st.sidebar.expander("Purchase Prices (% of par)"):
        for idx, spec in enumerate(template.tranches):
            default_price = defaults.tranche_prices_pct[idx] if idx < len(defaults.tranche_prices_pct) else 100.0
            prices.append(st.number_input(
                spec.name,
                min_value=1.0,
                max_value=150.0,
                value=float(default_price),
                step=0.5,
                key=f"price_{template.id}_{idx}",
            ))

    return ScenarioParams(
        cpr=cpr,
        cdr=cdr,
        recovery=recovery,
        months=int(months),
        base_rate=rate_data.rate,
        excess_spread_bps=excess_spread_bps,
        servicing_fee_bps=servicing_fee_bps,
        other_fees_bps=other_fees_bps,
        equity_share_pct=equity_share_pct,
        tranche_prices_pct=tuple(prices),
    )
