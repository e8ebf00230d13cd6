"""
Stress Scenarios Page - preset scenarios and breakeven CDR per tranche
"""
import sys
from pathlib import Path
sys.path.insert(0, str(Path(__file__).parent.parent))

import streamlit as st
import pandas as pd

from components.styles import get_page_css, page_header
from components.charts import create_scenario_irr_chart, create_breakeven_chart
from engine.deal import DealConfigError
from engine.templates import get_template
from engine.scenarios import get_standard_scenarios, run_scenarios
from engine.breakeven import breakeven_table


def fmt_pct(val):
    if val is None:
        return "N/A"
    return f"{val:.1%}"


st.set_page_config(
    page_title="Stress Scenarios | ABS Deal Modeler",
    page_icon="📈",
    layout="wide",
)

st.markdown(get_page_css(), unsafe_allow_html=True)

if "template_id" not in st.session_state or "params" not in st.session_state:
    st.warning("No deal configured. Set up a scenario on the Deal Modeler page first.")
    st.page_link("app.py", label="→ Go to Deal Modeler")
    st.stop()

template = get_template(st.session_state["template_id"])
params = st.session_state["params"]

st.markdown(
    page_header(f"Stress Scenarios: {template.name}", "Preset scenarios and breakeven default rates"),
    unsafe_allow_html=True,
)


@st.cache_data(show_spinner="Running scenarios...")
def _run_presets(template_id: str, base_rate: float):
    t = get_template(template_id)
    return run_scenarios(t, get_standard_scenarios(t, base_rate=base_rate))


@st.cache_data(show_spinner="Solving breakeven CDRs...")
def _run_breakevens(template_id: str, _params, params_key: tuple):
    return breakeven_table(get_template(template_id), _params)


try:
    scenario_results = _run_presets(template.id, params.base_rate)
except DealConfigError as e:
    st.error(f"Invalid deal configuration: {e}")
    st.stop()

# -----------------------------------------------------------------------------
# PRESET SCENARIOS
# -----------------------------------------------------------------------------
st.subheader("Preset Scenarios")
st.plotly_chart(create_scenario_irr_chart(scenario_results), use_container_width=True)

rows = []
for name, results in scenario_results.items():
    for r in results:
        rows.append({
            "Scenario": name.title(),
            "Tranche": r.tranche,
            "Rating": r.rating,
            "CE (%)": f"{r.subordination:.1f}",
            "Coupon (%)": f"{r.yield_pct:.2f}" if r.yield_pct is not None else "N/A",
            "IRR": fmt_pct(r.irr),
            "MOIC": f"{r.moic:.2f}x",
            "WAL (yrs)": f"{r.wal:.2f}",
            "Loss ($mm)": f"{r.principal_loss:,.2f}",
            "Status": r.status.title(),
        })
st.dataframe(pd.DataFrame(rows), use_container_width=True, hide_index=True)

st.divider()

# -----------------------------------------------------------------------------
# BREAKEVEN CDR
# -----------------------------------------------------------------------------
st.subheader("Breakeven CDR")
st.caption(
    "Lowest annual default rate at which each tranche first takes a principal loss, "
    "holding the current CPR, recovery and fee assumptions."
)

breakevens = _run_breakevens(template.id, params, tuple(sorted(vars(params).items())))
st.plotly_chart(create_breakeven_chart(template, breakevens, params.cdr), use_container_width=True)

breakeven_rows = [
    {
        "Tranche": spec.name,
        "Rating": spec.rating.value,
        "Breakeven CDR": f"{be:.2f}%" if be is not None else "> 50%",
        "Cushion vs Scenario": f"{be - params.cdr:+.2f}%" if be is not None else "N/A",
    }
    for spec, be in zip(template.tranches, breakevens)
]
st.dataframe(pd.DataFrame(breakeven_rows), use_container_width=True, hide_index=True)
