"""
CSV and Excel export of waterfall results
"""
from io import BytesIO

import pandas as pd
from openpyxl import Workbook
from openpyxl.styles import Font, PatternFill, Alignment
from openpyxl.utils.dataframe import dataframe_to_rows

from .deal import DealTemplate
from .scenarios import ScenarioParams
from .waterfall import WaterfallResult


COLORS = {
    "navy": "1C2156",
    "white": "FFFFFF",
}

CASHFLOW_COLUMNS = {
    "period": "Period",
    "collateral_start": "Collateral_Start",
    "collateral_end": "Collateral_End",
    "scheduled_principal": "Scheduled_Principal",
    "prepayments": "Prepayments",
    "defaults": "Defaults",
    "recoveries": "Recoveries",
    "losses": "Losses",
    "interest_income": "Interest_Income",
    "excess_spread": "Excess_Spread",
    "cnl_percent": "CNL_Pct",
    "oc_percent": "OC_Pct",
    "trigger_status": "Trigger_Status",
    "ard_active": "ARD_Active",
    "turbo_payment": "Turbo_Payment",
}

SUMMARY_COLUMNS = {
    "name": "Tranche",
    "rating": "Rating",
    "original_balance": "Original_Balance",
    "final_balance": "Final_Balance",
    "total_interest": "Total_Interest",
    "total_principal": "Total_Principal",
    "principal_loss": "Principal_Loss",
    "interest_shortfall": "Interest_Shortfall",
    "moic": "MOIC",
    "irr": "IRR",
    "wal": "WAL",
}


def cashflows_frame(result: WaterfallResult) -> pd.DataFrame:
    """Period ledger with export column names"""
    df = result.to_frame()
    if df.empty:
        return pd.DataFrame(columns=list(CASHFLOW_COLUMNS.values()))
    return df[list(CASHFLOW_COLUMNS)].rename(columns=CASHFLOW_COLUMNS)


def summary_frame(result: WaterfallResult) -> pd.DataFrame:
    """Tranche summary with export column names"""
    df = result.summary_frame()
    return df[list(SUMMARY_COLUMNS)].rename(columns=SUMMARY_COLUMNS)


def export_cashflows_to_csv(result: WaterfallResult) -> str:
    """Export the period ledger to a CSV string"""
    return cashflows_frame(result).to_csv(index=False)


def export_summary_to_csv(result: WaterfallResult) -> str:
    """Export the tranche summary to a CSV string"""
    return summary_frame(result).to_csv(index=False)


def _write_frame(ws, df: pd.DataFrame):
    # Missing IRRs become empty cells rather than NaN
    df = df.astype(object).where(pd.notna(df), None)
    for row in dataframe_to_rows(df, index=False, header=True):
        ws.append(row)
    for cell in ws[1]:
        cell.font = Font(bold=True, color=COLORS["white"])
        cell.fill = PatternFill(start_color=COLORS["navy"], end_color=COLORS["navy"], fill_type="solid")
        cell.alignment = Alignment(horizontal="center", vertical="center")
    for column in ws.columns:
        ws.column_dimensions[column[0].column_letter].width = max(12, len(str(column[0].value)) + 2)


def create_excel_workbook(
    template: DealTemplate,
    params: ScenarioParams,
    result: WaterfallResult,
) -> BytesIO:
    """
    Create an Excel workbook with assumptions, tranche summary and cash flows

    Returns:
        BytesIO buffer with the workbook
    """
    wb = Workbook()

    ws = wb.active
    ws.title = "Assumptions"
    ws["A1"] = template.name
    ws["A1"].font = Font(bold=True, size=14)
    assumptions = [
        ("Collateral Balance ($mm)", template.collateral_balance),
        ("WAC (%)", template.wac),
        ("WAM (months)", template.wam),
        ("CPR (%)", params.cpr),
        ("CDR (%)", params.cdr),
        ("Recovery (%)", params.recovery),
        ("Projection (months)", params.months),
        ("Base Rate (%)", params.base_rate),
        ("Excess Spread Adj (bps)", params.excess_spread_bps),
        ("Servicing Fee (bps)", params.servicing_fee_bps),
        ("Other Fees (bps)", params.other_fees_bps),
        ("Equity Excess Share (%)", params.equity_share_pct),
        ("Trigger Breach Periods", result.trigger_breaches),
        ("Final CNL (%)", result.final_cnl),
        ("Final OC (%)", result.final_oc),
    ]
    for row, (label, value) in enumerate(assumptions, 3):
        ws.cell(row=row, column=1, value=label)
        ws.cell(row=row, column=2, value=value)
    ws.column_dimensions["A"].width = 26
    ws.column_dimensions["B"].width = 14

    _write_frame(wb.create_sheet(title="Tranche Summary"), summary_frame(result))
    _write_frame(wb.create_sheet(title="Cash Flows"), cashflows_frame(result))

    buffer = BytesIO()
    wb.save(buffer)
    buffer.seek(0)
    return buffer
