"""
Plotly chart builders for waterfall results
"""
from typing import Dict, List, Optional

import plotly.graph_objects as go
from plotly.subplots import make_subplots

from engine.deal import DealTemplate, TriggerType
from engine.waterfall import WaterfallResult
from engine.scenarios import ScenarioResult
from components.styles import (
    CYAN_PRIMARY, MINT_ACCENT, WARNING_ORANGE, ERROR_RED,
    TEXT_PRIMARY, STATUS_COLORS, get_plotly_theme, rating_color,
)


def apply_dashboard_theme(fig: go.Figure) -> go.Figure:
    """Apply the dashboard theme to any Plotly figure"""
    fig.update_layout(**get_plotly_theme())
    return fig


def create_collateral_chart(result: WaterfallResult, title: str = "Collateral Cash Flows") -> go.Figure:
    """Stacked principal components with the collateral balance on a second axis"""
    periods = [cf.period for cf in result.cash_flows]
    fig = make_subplots(specs=[[{"secondary_y": True}]])

    for label, attr, color in [
        ("Scheduled", "scheduled_principal", CYAN_PRIMARY),
        ("Prepayments", "prepayments", MINT_ACCENT),
        ("Recoveries", "recoveries", WARNING_ORANGE),
        ("Losses", "losses", ERROR_RED),
    ]:
        fig.add_trace(
            go.Bar(x=periods, y=[getattr(cf, attr) for cf in result.cash_flows], name=label, marker_color=color),
            secondary_y=False,
        )

    fig.add_trace(
        go.Scatter(
            x=periods,
            y=[cf.collateral_end for cf in result.cash_flows],
            name="Collateral Balance",
            mode="lines",
            line={"color": TEXT_PRIMARY, "width": 2},
        ),
        secondary_y=True,
    )

    fig.update_layout(
        title={"text": title},
        barmode="stack",
        height=420,
        legend={"orientation": "h", "yanchor": "top", "y": -0.2, "xanchor": "center", "x": 0.5},
    )
    fig.update_xaxes(title_text="Period (month)")
    fig.update_yaxes(title_text="$mm per month", secondary_y=False)
    fig.update_yaxes(title_text="Balance ($mm)", secondary_y=True)
    return apply_dashboard_theme(fig)


def create_trigger_chart(template: DealTemplate, result: WaterfallResult) -> go.Figure:
    """OC% and CNL% paths against their trigger thresholds"""
    periods = [cf.period for cf in result.cash_flows]
    fig = make_subplots(specs=[[{"secondary_y": True}]])

    # Cap the 999 sentinel so the axis stays readable
    oc = [min(cf.oc_percent, 200) for cf in result.cash_flows]
    fig.add_trace(go.Scatter(x=periods, y=oc, name="OC %", line={"color": CYAN_PRIMARY}), secondary_y=False)
    fig.add_trace(
        go.Scatter(x=periods, y=[cf.cnl_percent for cf in result.cash_flows], name="CNL %", line={"color": ERROR_RED}),
        secondary_y=True,
    )

    oc_trigger = template.get_trigger(TriggerType.OC)
    if oc_trigger is not None:
        fig.add_hline(y=oc_trigger.threshold, line_dash="dash", line_color=CYAN_PRIMARY,
                      annotation_text=f"OC trigger {oc_trigger.threshold:.0f}%")
    cnl_trigger = template.get_trigger(TriggerType.CNL)
    if cnl_trigger is not None:
        fig.add_shape(type="line", xref="paper", x0=0, x1=1, yref="y2",
                      y0=cnl_trigger.threshold, y1=cnl_trigger.threshold,
                      line={"dash": "dash", "color": ERROR_RED})
    ard_trigger = template.get_trigger(TriggerType.ARD)
    if ard_trigger is not None:
        fig.add_vline(x=ard_trigger.threshold, line_dash="dot", line_color=WARNING_ORANGE,
                      annotation_text="ARD")

    first_breach = result.first_breach_period
    if first_breach is not None:
        fig.add_vrect(x0=first_breach - 0.5, x1=periods[-1] + 0.5, fillcolor=ERROR_RED, opacity=0.08,
                      line_width=0, annotation_text="Sequential (latched)")

    fig.update_layout(title={"text": "Trigger Tests"}, height=380)
    fig.update_yaxes(title_text="OC %", secondary_y=False)
    fig.update_yaxes(title_text="CNL %", secondary_y=True)
    return apply_dashboard_theme(fig)


def create_tranche_balance_chart(template: DealTemplate, result: WaterfallResult) -> go.Figure:
    """Principal repaid and principal lost per tranche"""
    fig = go.Figure()
    for spec, summary in zip(template.tranches, result.tranche_summary):
        fig.add_trace(go.Bar(
            x=[spec.name],
            y=[summary.total_principal],
            name=f"{spec.name} repaid",
            marker_color=rating_color(spec.rating),
            showlegend=False,
        ))
        fig.add_trace(go.Bar(
            x=[spec.name],
            y=[summary.principal_loss],
            name=f"{spec.name} loss",
            marker_color=ERROR_RED,
            showlegend=False,
        ))
    fig.update_layout(
        title={"text": "Principal Repaid vs Lost"},
        barmode="stack",
        height=360,
        yaxis_title="$mm",
    )
    return apply_dashboard_theme(fig)


def create_capital_stack_chart(template: DealTemplate) -> go.Figure:
    """Stacked capital structure, senior on top"""
    fig = go.Figure()
    for spec in reversed(template.tranches):
        fig.add_trace(go.Bar(
            x=["Capital Stack"],
            y=[spec.balance],
            name=f"{spec.name} ({spec.rating.value}) - ${spec.balance:,.0f}mm",
            marker_color=rating_color(spec.rating),
            text=[f"{spec.name}<br>{spec.subordination:.1f}% CE"],
            textposition="inside",
        ))
    fig.update_layout(barmode="stack", height=420, yaxis_title="$mm")
    return apply_dashboard_theme(fig)


def create_scenario_irr_chart(
    scenario_results: Dict[str, List[ScenarioResult]],
    title: str = "Tranche IRR by Scenario",
) -> go.Figure:
    """Grouped bar of tranche IRRs; tranches without an IRR are left blank"""
    fig = go.Figure()
    for name, rows in scenario_results.items():
        fig.add_trace(go.Bar(
            x=[r.tranche for r in rows],
            y=[r.irr * 100 if r.irr is not None else None for r in rows],
            name=name.title(),
            marker_line_color=[STATUS_COLORS[r.status] for r in rows],
            marker_line_width=2,
        ))
    fig.update_layout(title={"text": title}, barmode="group", height=400, yaxis_title="IRR (%)")
    return apply_dashboard_theme(fig)


def create_breakeven_chart(template: DealTemplate, breakevens: List[Optional[float]], stress_cdr: float) -> go.Figure:
    """Breakeven CDR per tranche against the scenario CDR"""
    names = [t.name for t in template.tranches]
    fig = go.Figure(go.Bar(
        x=names,
        y=breakevens,
        marker_color=[rating_color(t.rating) for t in template.tranches],
        text=[f"{b:.1f}%" if b is not None else "> 50%" for b in breakevens],
        textposition="outside",
    ))
    fig.add_hline(y=stress_cdr, line_dash="dash", line_color=ERROR_RED, annotation_text=f"Scenario CDR {stress_cdr:.1f}%")
    fig.update_layout(title={"text": "Breakeven CDR"}, height=380, yaxis_title="CDR (%)")
    return apply_dashboard_theme(fig)
