"""
ABS Deal Modeler - structured credit waterfall dashboard
"""
import logging

import streamlit as st
import pandas as pd

from components.styles import get_page_css, page_header, status_badge
from components.sidebar import render_section_header, create_scenario_inputs
from components.charts import (
    create_collateral_chart,
    create_trigger_chart,
    create_tranche_balance_chart,
    create_capital_stack_chart,
)
from engine.deal import DealConfigError
from engine.templates import get_template, get_template_keys, DEAL_TEMPLATES
from engine.waterfall import run_waterfall
from engine.metrics import min_irr
from engine.export import create_excel_workbook, export_cashflows_to_csv, export_summary_to_csv

logging.basicConfig(level=logging.INFO, format="%(asctime)s %(name)s %(levelname)s %(message)s")


def fmt_pct(val, decimals=1):
    """Format a fraction as a percentage, None as N/A"""
    if val is None:
        return "N/A"
    return f"{val:.{decimals}%}"


def fmt_moic(val):
    return f"{val:.2f}x"


# Page config
st.set_page_config(
    page_title="ABS Deal Modeler",
    page_icon="📊",
    layout="wide",
)

st.markdown(get_page_css(), unsafe_allow_html=True)
st.markdown(
    page_header("ABS Deal Modeler", "Collateral cash flow, tranche waterfall and trigger analysis"),
    unsafe_allow_html=True,
)

# -----------------------------------------------------------------------------
# SIDEBAR - INPUTS
# -----------------------------------------------------------------------------
render_section_header("Deal Template")
template_id = st.sidebar.selectbox(
    "Template",
    options=get_template_keys(),
    format_func=lambda key: DEAL_TEMPLATES[key].name,
)
template = get_template(template_id)
params = create_scenario_inputs(template)

try:
    result = run_waterfall(template, params)
except DealConfigError as e:
    st.error(f"Invalid deal configuration: {e}")
    st.stop()

st.session_state["template_id"] = template.id
st.session_state["params"] = params

# -----------------------------------------------------------------------------
# KEY METRICS
# -----------------------------------------------------------------------------
equity_idx = template.equity_index
equity_irr = result.tranche_summary[equity_idx].irr if equity_idx is not None else None

col1, col2, col3, col4, col5, col6 = st.columns(6)
with col1:
    st.metric("Breach Periods", result.trigger_breaches,
              help="Months with the sequential-pay latch engaged")
with col2:
    first = result.first_breach_period
    st.metric("First Breach", f"Month {first}" if first is not None else "None")
with col3:
    st.metric("Final CNL", f"{result.final_cnl:.2f}%")
with col4:
    st.metric("Final OC", f"{result.final_oc:.1f}%")
with col5:
    st.metric("Equity IRR", fmt_pct(equity_irr))
with col6:
    st.metric("Min Tranche IRR", fmt_pct(min_irr(result.tranche_summary)))

if result.ard_triggered:
    st.markdown(
        status_badge(f"ARD active from month {result.ard_month}", "fail"),
        unsafe_allow_html=True,
    )
elif result.trigger_breaches == 0:
    st.markdown(status_badge("All triggers passing", "pass"), unsafe_allow_html=True)

st.divider()

# -----------------------------------------------------------------------------
# TABS
# -----------------------------------------------------------------------------
tab1, tab2, tab3, tab4 = st.tabs([
    "💰 Cash Flows",
    "🚦 Triggers",
    "📊 Tranches",
    "📥 Export",
])

with tab1:
    st.plotly_chart(create_collateral_chart(result), use_container_width=True)
    with st.expander("Period ledger"):
        st.dataframe(result.to_frame(), use_container_width=True, hide_index=True)

with tab2:
    st.plotly_chart(create_trigger_chart(template, result), use_container_width=True)

    trigger_rows = [
        {
            "Trigger": t.name,
            "Type": t.type.value,
            "Threshold": t.threshold,
            "Consequence": t.consequence,
        }
        for t in template.triggers
    ]
    st.dataframe(pd.DataFrame(trigger_rows), use_container_width=True, hide_index=True)

with tab3:
    col1, col2 = st.columns([1, 2])
    with col1:
        st.plotly_chart(create_capital_stack_chart(template), use_container_width=True)
    with col2:
        st.plotly_chart(create_tranche_balance_chart(template, result), use_container_width=True)

    summary_rows = []
    for s in result.tranche_summary:
        summary_rows.append({
            "Tranche": s.name,
            "Rating": s.rating,
            "Original ($mm)": f"{s.original_balance:,.2f}",
            "Interest ($mm)": f"{s.total_interest:,.2f}",
            "Principal ($mm)": f"{s.total_principal:,.2f}",
            "Loss ($mm)": f"{s.principal_loss:,.2f}",
            "Shortfall ($mm)": f"{s.interest_shortfall:,.2f}",
            "MOIC": fmt_moic(s.moic),
            "IRR": fmt_pct(s.irr),
            "WAL (yrs)": f"{s.wal:.2f}",
        })
    st.dataframe(pd.DataFrame(summary_rows), use_container_width=True, hide_index=True)

    if template.key_risks:
        st.markdown("**Key risks:** " + ", ".join(template.key_risks))

with tab4:
    file_stem = template.id.replace("-", "_")
    col1, col2, col3 = st.columns(3)
    with col1:
        st.download_button(
            label="Download Cash Flows (CSV)",
            data=export_cashflows_to_csv(result),
            file_name=f"{file_stem}_cashflows.csv",
            mime="text/csv",
        )
    with col2:
        st.download_button(
            label="Download Tranche Summary (CSV)",
            data=export_summary_to_csv(result),
            file_name=f"{file_stem}_summary.csv",
            mime="text/csv",
        )
    with col3:
        st.download_button(
            label="Download Workbook (Excel)",
            data=create_excel_workbook(template, params, result),
            file_name=f"{file_stem}_waterfall.xlsx",
            mime="application/vnd.openxmlformats-officedocument.spreadsheetml.sheet",
        )
