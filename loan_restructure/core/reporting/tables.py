# ===========================================
# core/reporting/tables.py
# ポートフォリオ明細・戦略比較を DataFrame に組み立てる
# ===========================================

from typing import Iterable, Optional, Sequence

import numpy as np
import pandas as pd

from loan_restructure.config.params import LoanParams, find_strategy
from loan_restructure.core.engine.loan_engine import (
    compute_monthly_payment,
    compute_total_interest,
)
from loan_restructure.core.portfolio.portfolio import loan_label
from loan_restructure.core.reporting.formatting import format_inr_full
from loan_restructure.core.simulation.restructure import StrategyResult

PORTFOLIO_COLUMNS = [
    "Loan Type", "Principal", "Rate (p.a.)", "Tenure (months)", "Monthly EMI", "Total Interest",
]
PORTFOLIO_MONEY_COLUMNS = ["Principal", "Monthly EMI", "Total Interest"]

COMPARISON_COLUMNS = [
    "strategy_id", "Strategy", "New Total Interest", "Interest Saved", "Savings %",
    "New Monthly EMI", "EMI Change", "New Tenure", "Best",
]
COMPARISON_MONEY_COLUMNS = ["New Total Interest", "Interest Saved", "New Monthly EMI", "EMI Change"]


def portfolio_breakdown_df(portfolio: Sequence[LoanParams]) -> pd.DataFrame:
    """
    ローン1本＝1行、最後に TOTAL 行（金利・期間は空欄）。
    """
    rows = []
    for loan in portfolio:
        rows.append({
            "Loan Type": loan_label(loan, fallback=""),
            "Principal": loan.amount,
            "Rate (p.a.)": loan.rate,
            "Tenure (months)": loan.tenure,
            "Monthly EMI": compute_monthly_payment(loan.amount, loan.rate, loan.tenure),
            "Total Interest": compute_total_interest(loan.amount, loan.rate, loan.tenure),
        })

    rows.append({
        "Loan Type": "TOTAL",
        "Principal": sum(r["Principal"] for r in rows),
        "Rate (p.a.)": np.nan,
        "Tenure (months)": np.nan,
        "Monthly EMI": sum(r["Monthly EMI"] for r in rows),
        "Total Interest": sum(r["Total Interest"] for r in rows),
    })
    return pd.DataFrame(rows, columns=PORTFOLIO_COLUMNS)


def strategy_comparison_df(
    results: Sequence[StrategyResult],
    best: Optional[StrategyResult] = None,
) -> pd.DataFrame:
    rows = []
    for r in results:
        meta = find_strategy(r.strategy_id)
        rows.append({
            "strategy_id": r.strategy_id,
            "Strategy": meta.label if meta else r.strategy_id,
            "New Total Interest": r.new_interest,
            "Interest Saved": r.savings,
            "Savings %": r.savings_percent,
            "New Monthly EMI": r.new_emi,
            "EMI Change": r.emi_reduction,
            "New Tenure": r.new_tenure,
            "Best": best is not None and r.strategy_id == best.strategy_id,
        })

    return pd.DataFrame(rows, columns=COMPARISON_COLUMNS)


def create_display_dataframe(df: pd.DataFrame, money_columns: Iterable[str]) -> pd.DataFrame:
    """
    表示用：金額列を ₹ 表記の文字列へ。欠損は空欄。
    """
    def format_cell(val):
        if val is None or (isinstance(val, (float, np.floating)) and np.isnan(val)):
            return ""
        if isinstance(val, (int, float, np.integer, np.floating)):
            return format_inr_full(float(val))
        return str(val)

    df_display = df.copy()
    for col in money_columns:
        if col in df_display.columns:
            df_display[col] = df_display[col].apply(format_cell)
    return df_display

# ============== end core/reporting/tables.py
