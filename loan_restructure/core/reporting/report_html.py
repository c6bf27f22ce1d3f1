# ===========================================
# core/reporting/report_html.py
# 顧客向けレポート（単体で開ける HTML）を生成する
# ===========================================

import datetime
import html
import re
from typing import Optional, Sequence

from loan_restructure.config.params import LoanParams, find_strategy
from loan_restructure.core.reporting.formatting import format_inr, format_inr_full, format_rate
from loan_restructure.core.reporting.tables import portfolio_breakdown_df
from loan_restructure.core.simulation.analysis import select_best
from loan_restructure.core.simulation.restructure import StrategyResult

REPORT_CSS = """
  @page { size: A4; margin: 20mm; }
  * { margin: 0; padding: 0; box-sizing: border-box; }
  body { font-family: 'Segoe UI', system-ui, sans-serif; color: #1a1a2e; line-height: 1.6; font-size: 11pt; }
  .header { background: linear-gradient(135deg, #0a1628 0%, #1a365d 100%); color: white; padding: 32px; margin: -20mm -20mm 24px; }
  .header h1 { font-size: 22pt; font-weight: 700; margin-bottom: 4px; }
  .header p { opacity: 0.8; font-size: 10pt; }
  .badge { display: inline-block; background: #f6ad55; color: #1a1a2e; padding: 3px 12px; border-radius: 20px; font-size: 9pt; font-weight: 600; margin-top: 8px; }
  .section { margin-bottom: 20px; }
  .section h2 { font-size: 13pt; color: #1a365d; border-bottom: 2px solid #e2e8f0; padding-bottom: 6px; margin-bottom: 12px; }
  table { width: 100%; border-collapse: collapse; font-size: 10pt; margin-bottom: 16px; }
  th { background: #f7fafc; color: #4a5568; font-weight: 600; text-align: left; padding: 8px 12px; border-bottom: 2px solid #e2e8f0; }
  td { padding: 8px 12px; border-bottom: 1px solid #edf2f7; }
  .total-row { font-weight: 700; background: #f7fafc; }
  .highlight-row { background: #f0fff4; }
  .up { color: #e53e3e; }
  .down { color: #38a169; }
  .savings-box { background: linear-gradient(135deg, #f0fff4, #c6f6d5); border: 2px solid #38a169; border-radius: 12px; padding: 20px; text-align: center; margin: 20px 0; }
  .savings-amount { font-size: 28pt; font-weight: 800; color: #22543d; }
  .savings-label { font-size: 10pt; color: #4a5568; margin-top: 4px; }
  .strategy-box { background: #ebf8ff; border-left: 4px solid #3182ce; padding: 12px 16px; margin: 12px 0; border-radius: 0 8px 8px 0; }
  .metric-grid { display: grid; grid-template-columns: 1fr 1fr 1fr; gap: 12px; margin: 16px 0; }
  .metric { background: #f7fafc; padding: 12px; border-radius: 8px; text-align: center; }
  .metric-value { font-size: 16pt; font-weight: 700; color: #1a365d; }
  .metric-label { font-size: 8pt; color: #718096; text-transform: uppercase; letter-spacing: 0.5px; }
  .footer { margin-top: 32px; padding-top: 16px; border-top: 1px solid #e2e8f0; font-size: 9pt; color: #a0aec0; text-align: center; }
"""

DISCLAIMER = (
    "This report is generated by <strong>LoanRestructure Pro</strong> for advisory purposes only. "
    "Actual savings may vary based on lender terms, processing fees, and market conditions. "
    "Consult your CA or financial advisor before taking action."
)


def _strategy_label(strategy_id: str) -> str:
    meta = find_strategy(strategy_id)
    return meta.label if meta else strategy_id


# -----------------------------------------
# 各セクション
# -----------------------------------------
def _portfolio_rows(portfolio: Sequence[LoanParams]) -> str:
    df = portfolio_breakdown_df(portfolio)
    rows = []

    for _, row in df.iterrows():
        if row["Loan Type"] == "TOTAL":
            rows.append(
                '<tr class="total-row">'
                "<td>TOTAL</td>"
                f"<td>{format_inr_full(row['Principal'])}</td>"
                "<td>-</td><td>-</td>"
                f"<td>{format_inr_full(row['Monthly EMI'])}</td>"
                f"<td>{format_inr_full(row['Total Interest'])}</td>"
                "</tr>"
            )
            continue

        rows.append(
            "<tr>"
            f"<td>{html.escape(row['Loan Type'])}</td>"
            f"<td>{format_inr_full(row['Principal'])}</td>"
            f"<td>{format_rate(row['Rate (p.a.)'])}%</td>"
            f"<td>{int(row['Tenure (months)'])} months</td>"
            f"<td>{format_inr_full(row['Monthly EMI'])}</td>"
            f"<td>{format_inr_full(row['Total Interest'])}</td>"
            "</tr>"
        )

    return "\n".join(rows)


def _comparison_rows(results: Sequence[StrategyResult], best: StrategyResult) -> str:
    rows = []

    for r in results:
        is_best = r.strategy_id == best.strategy_id
        if r.emi_reduction > 0:
            emi_change = f'<td class="down">↓ {format_inr_full(abs(r.emi_reduction))}</td>'
        else:
            emi_change = f'<td class="up">↑ {format_inr_full(abs(r.emi_reduction))}</td>'

        rows.append(
            f'<tr class="{"highlight-row" if is_best else ""}">'
            f"<td>{'⭐ ' if is_best else ''}{_strategy_label(r.strategy_id)}</td>"
            f"<td>{format_inr_full(r.new_interest)}</td>"
            f'<td class="down">{format_inr_full(r.savings)}</td>'
            f"<td>{format_inr_full(r.new_emi)}</td>"
            f"{emi_change}"
            "</tr>"
        )

    return "\n".join(rows)


# ============================================================
# generate_report_html()
# ============================================================
def generate_report_html(
    portfolio: Sequence[LoanParams],
    results: Sequence[StrategyResult],
    business_name: str,
    generated_on: Optional[datetime.date] = None,
) -> str:
    """
    ポートフォリオ明細・最大節約額・全戦略比較・推奨アクションを1枚にまとめる。
    ベスト戦略は select_best()（同額なら宣言順で先のもの）。
    """
    if not results:
        raise ValueError("generate_report_html needs the strategy results to report on")

    generated_on = generated_on or datetime.date.today()
    best = select_best(results)
    best_label = _strategy_label(best.strategy_id)
    name = html.escape(business_name)

    return f"""<!DOCTYPE html>
<html><head><meta charset="utf-8"><title>Loan Restructuring Report - {name}</title>
<style>{REPORT_CSS}</style></head><body>
  <div class="header">
    <h1>Loan Restructuring Analysis</h1>
    <p>{name} - Confidential Report</p>
    <span class="badge">Generated {generated_on.day} {generated_on.strftime('%B %Y')}</span>
  </div>

  <div class="section">
    <h2>Current Loan Portfolio</h2>
    <table>
      <thead><tr><th>Loan Type</th><th>Principal</th><th>Rate (p.a.)</th><th>Tenure</th><th>Monthly EMI</th><th>Total Interest</th></tr></thead>
      <tbody>
{_portfolio_rows(portfolio)}
      </tbody>
    </table>
  </div>

  <div class="savings-box">
    <div class="savings-amount">{format_inr_full(best.savings)}</div>
    <div class="savings-label">Maximum Potential Interest Savings with "{best_label}" Strategy</div>
  </div>

  <div class="section">
    <h2>Strategy Comparison</h2>
    <table>
      <thead><tr><th>Strategy</th><th>New Total Interest</th><th>Interest Saved</th><th>New Monthly EMI</th><th>EMI Change</th></tr></thead>
      <tbody>
{_comparison_rows(results, best)}
      </tbody>
    </table>
  </div>

  <div class="section">
    <h2>Recommended Action Plan</h2>
    <div class="strategy-box">
      <strong>{best_label}</strong><br/>
      {html.escape(best.details)}
    </div>
    <div class="metric-grid">
      <div class="metric"><div class="metric-value">{format_inr(best.savings)}</div><div class="metric-label">Total Savings</div></div>
      <div class="metric"><div class="metric-value">{best.savings_percent:.1f}%</div><div class="metric-label">Interest Reduction</div></div>
      <div class="metric"><div class="metric-value">{best.new_tenure}mo</div><div class="metric-label">Optimized Tenure</div></div>
    </div>
  </div>

  <div class="footer">
    <p>{DISCLAIMER}</p>
  </div>
</body></html>"""


def report_filename(business_name: str, on_date: Optional[datetime.date] = None) -> str:
    on_date = on_date or datetime.date.today()
    safe_name = re.sub(r"\s+", "_", business_name)
    return f"LoanRestructure_{safe_name}_{on_date.isoformat()}.html"

# ============== end core/reporting/report_html.py
