# ============== loan_restructure/ui/app.py ==============

import logging
import os
import sys
import traceback

import pandas as pd
import streamlit as st

# ----------------------------------------------------------------------
# パス解決（streamlit run loan_restructure/ui/app.py で起動する前提）
# ----------------------------------------------------------------------
current_dir = os.path.dirname(os.path.abspath(__file__))
project_root = os.path.dirname(os.path.dirname(current_dir))
if project_root not in sys.path:
    sys.path.append(project_root)

from loan_restructure.config.params import find_strategy
from loan_restructure.core.engine.loan_engine import LoanEngine
from loan_restructure.core.portfolio.portfolio import (
    add_loan,
    available_loan_types,
    default_portfolio,
    loan_label,
    portfolio_totals,
    remove_loan,
    update_loan,
)
from loan_restructure.core.reporting.formatting import format_inr, format_inr_full
from loan_restructure.core.reporting.report_html import generate_report_html, report_filename
from loan_restructure.core.reporting.tables import (
    COMPARISON_MONEY_COLUMNS,
    PORTFOLIO_MONEY_COLUMNS,
    create_display_dataframe,
    portfolio_breakdown_df,
    strategy_comparison_df,
)
from loan_restructure.core.simulation.analysis import analyze_portfolio

logger = logging.getLogger(__name__)


# ----------------------------------------------------------------------
# CSS注入
# ----------------------------------------------------------------------
def inject_global_css():
    st.markdown(
        """
        <style>
        .lr-card {
            background-color: #f4f5f7;
            border-left: 4px solid #1a365d;
            padding: 12px 16px;
            margin-bottom: 10px;
            border-radius: 8px;
            display: flex;
            flex-direction: column;
        }
        .lr-label {
            font-size: 0.95rem;
            font-weight: 700;
            color: #444;
            margin-bottom: 2px;
        }
        .lr-value {
            font-size: 1.25rem;
            font-weight: 800;
            color: #111;
            text-align: right;
            font-variant-numeric: tabular-nums;
        }
        .lr-section-title {
            font-size: 1.25rem;
            font-weight: 800;
            margin-top: 26px;
            margin-bottom: 14px;
            color: #444;
        }
        .lr-best {
            background: #f0fff4;
            border: 2px solid #38a169;
            border-radius: 12px;
            padding: 18px 22px;
            text-align: center;
        }
        </style>
        """,
        unsafe_allow_html=True,
    )


def summary_card(label, value):
    return f"""
    <div class="lr-card">
        <div class="lr-label">{label}</div>
        <div class="lr-value">{value}</div>
    </div>
    """


# ----------------------------------------------------------------------
# 1. セッション状態
# ----------------------------------------------------------------------
def init_state():
    if "portfolio" not in st.session_state:
        st.session_state.portfolio = default_portfolio()
    if "analysis" not in st.session_state:
        st.session_state.analysis = None


def set_portfolio(portfolio):
    st.session_state.portfolio = portfolio
    # ローンを触ったら前回の結果は無効
    st.session_state.analysis = None


def reset_loan_widgets():
    # 行の追加・削除で index がずれるので、入力欄の状態を捨てる
    for key in list(st.session_state.keys()):
        if key.startswith(("amount_", "rate_", "tenure_")):
            del st.session_state[key]


# ----------------------------------------------------------------------
# 2. サイドバー（ローン入力）
# ----------------------------------------------------------------------
def setup_sidebar() -> str:
    st.sidebar.markdown("## 🛠 Loan Portfolio")

    business_name = st.sidebar.text_input("Business / Client Name", value="ABC Trading Co.")

    portfolio = st.session_state.portfolio
    st.sidebar.caption(f"{len(portfolio)} active loan(s)")

    for idx, loan in enumerate(portfolio):
        with st.sidebar.expander(f"{idx + 1}. {loan_label(loan)}", expanded=True):
            amount = st.number_input(
                "Amount (₹)", 0.0, value=float(loan.amount), step=50_000.0, format="%.0f",
                key=f"amount_{idx}",
            )
            rate = st.number_input(
                "Rate (% p.a.)", 0.0, 50.0, value=float(loan.rate), step=0.25,
                key=f"rate_{idx}",
            )
            tenure = st.number_input(
                "Tenure (months)", 1, 600, value=int(loan.tenure), step=1,
                key=f"tenure_{idx}",
            )

            for field, value in (("amount", amount), ("rate", rate), ("tenure", tenure)):
                if value != getattr(loan, field):
                    set_portfolio(update_loan(st.session_state.portfolio, idx, field, value))

            if st.button("Remove", key=f"remove_{idx}"):
                set_portfolio(remove_loan(st.session_state.portfolio, idx))
                reset_loan_widgets()
                st.rerun()

    st.sidebar.markdown("#### ➕ Add Loan")
    for preset in available_loan_types(st.session_state.portfolio):
        if st.sidebar.button(f"{preset.icon} {preset.label}", key=f"add_{preset.id}"):
            set_portfolio(add_loan(st.session_state.portfolio, preset.id))
            reset_loan_widgets()
            st.rerun()

    return business_name


# ----------------------------------------------------------------------
# 3. 結果表示
# ----------------------------------------------------------------------
def render_results(analysis):
    best = analysis.best
    best_meta = find_strategy(best.strategy_id)

    st.markdown(
        f"""
        <div class="lr-best">
            <div class="lr-label">Maximum Potential Savings ({best_meta.label})</div>
            <div style="font-size:2.2rem;font-weight:900;color:#22543d;">{format_inr_full(best.savings)}</div>
            <div>on total interest of {format_inr_full(best.current_total_interest)}
            across {format_inr(best.total_principal)} in loans</div>
        </div>
        """,
        unsafe_allow_html=True,
    )

    col_l, col_r = st.columns(2)

    with col_l:
        st.markdown('<div class="lr-section-title">Interest Comparison</div>', unsafe_allow_html=True)
        chart_df = pd.DataFrame(
            {"Interest": [best.current_total_interest, best.new_interest, best.savings]},
            index=["Current", "After", "Saved"],
        )
        st.bar_chart(chart_df)

    with col_r:
        st.markdown('<div class="lr-section-title">Savings Rate</div>', unsafe_allow_html=True)
        st.markdown(summary_card("Interest saved", f"{best.savings_percent:.1f}%"), unsafe_allow_html=True)
        st.markdown(
            summary_card("EMI", f"{format_inr_full(best.current_monthly_emi)} → {format_inr_full(best.new_emi)}"),
            unsafe_allow_html=True,
        )

    st.markdown('<div class="lr-section-title">Restructuring Strategies</div>', unsafe_allow_html=True)
    for i, r in enumerate(analysis.ranked):
        meta = find_strategy(r.strategy_id)
        badge = "🏆 Best · " if i == 0 else ""
        with st.expander(f"{badge}{meta.label}: {format_inr(r.savings)}", expanded=(i == 0)):
            st.caption(meta.description)
            st.write(r.details)
            st.write(
                f"New tenure: {r.new_tenure} months · "
                f"EMI {format_inr_full(r.current_monthly_emi)} → {format_inr_full(r.new_emi)}"
            )

    tabs = st.tabs(["📊 Strategy Comparison", "🏦 Portfolio", "📒 Repayment Schedule"])

    with tabs[0]:
        comparison = strategy_comparison_df(analysis.results, best)
        st.dataframe(
            create_display_dataframe(comparison, COMPARISON_MONEY_COLUMNS).drop(columns=["strategy_id"]),
            use_container_width=True,
        )
    with tabs[1]:
        st.dataframe(
            create_display_dataframe(portfolio_breakdown_df(analysis.portfolio), PORTFOLIO_MONEY_COLUMNS),
            use_container_width=True,
        )
    with tabs[2]:
        labels = [f"{i + 1}. {loan_label(l)}" for i, l in enumerate(analysis.portfolio)]
        picked = st.selectbox("Loan", range(len(labels)), format_func=lambda i: labels[i])
        st.dataframe(LoanEngine.from_loan(analysis.portfolio[picked]).schedule(), use_container_width=True)

    report = generate_report_html(analysis.portfolio, analysis.results, analysis.business_name)
    st.download_button(
        "📄 Download Report",
        data=report,
        file_name=report_filename(analysis.business_name),
        mime="text/html",
    )


# ----------------------------------------------------------------------
# 4. メイン
# ----------------------------------------------------------------------
def main():
    logging.basicConfig(level=logging.INFO, format="%(asctime)s %(levelname)s %(name)s: %(message)s")
    st.set_page_config(layout="wide", page_title="LoanRestructure Pro")
    inject_global_css()
    init_state()

    st.title("💰 LoanRestructure Pro: SME Debt Optimization Engine")

    business_name = setup_sidebar()
    portfolio = st.session_state.portfolio

    # ============================================================
    # 前提条件（カード）
    # ============================================================
    if portfolio:
        totals = portfolio_totals(portfolio)
        col1, col2, col3 = st.columns(3)
        with col1:
            st.markdown(summary_card("Total Principal", format_inr(totals["total_principal"])), unsafe_allow_html=True)
        with col2:
            st.markdown(summary_card("Monthly EMI", format_inr_full(totals["total_emi"])), unsafe_allow_html=True)
        with col3:
            st.markdown(summary_card("Total Interest", format_inr(totals["total_interest"])), unsafe_allow_html=True)

    # ============================================================
    # 実行ボタン
    # ============================================================
    label = (
        f"🔍 Analyze {len(portfolio)} Loan{'s' if len(portfolio) > 1 else ''} - Find Savings"
        if portfolio
        else "Add at least one loan to begin"
    )
    run_clicked = st.button(label, type="primary", use_container_width=True, disabled=not portfolio)

    if run_clicked:
        try:
            st.session_state.analysis = analyze_portfolio(portfolio, business_name)
        except Exception as e:
            logger.exception("Analysis failed")
            st.error(f"Analysis error: {str(e)}")
            st.code(traceback.format_exc())

    if st.session_state.analysis is not None:
        render_results(st.session_state.analysis)


if __name__ == "__main__":
    main()

# ============== loan_restructure/ui/app.py ============== end
