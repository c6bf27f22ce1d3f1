# ===============================
# core/simulation/restructure.py
# ===============================

import logging
import math
from dataclasses import dataclass, replace
from typing import Callable, Dict, Optional, Sequence, Tuple

from loan_restructure.config.params import (
    DEFAULT_RESTRUCTURE_PARAMS,
    LoanParams,
    RestructureParams,
    find_loan_type,
)
from loan_restructure.core.engine.loan_engine import (
    compute_monthly_payment,
    compute_total_interest,
    round_half_up,
)
from loan_restructure.core.portfolio.portfolio import validate_portfolio
from loan_restructure.core.reporting.formatting import format_rate

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class StrategyResult:
    """
    1つのリストラ戦略について「現状 vs 組み直し後」を並べた結果。
    simulate_restructure() の戻り値で、保存はしない。
    """

    strategy_id: str
    current_total_interest: float
    current_monthly_emi: float
    current_total_payout: float
    new_interest: float
    new_emi: float
    new_tenure: int
    savings: float                 # max(0, 現状利息 - 新利息)
    emi_reduction: float           # 現状EMI - 新EMI（符号付き）
    savings_percent: float
    details: str
    total_principal: float
    interest_change: float         # 現状利息 - 新利息（符号付き、0 で切らない）
    new_rate: Optional[float] = None
    restructured_loans: Tuple[LoanParams, ...] = ()


@dataclass(frozen=True)
class _Baseline:
    total_principal: float
    current_interest: float
    current_emi: float
    max_tenure: int


@dataclass(frozen=True)
class _Plan:
    loans: Tuple[LoanParams, ...]
    new_tenure: int
    details: str
    new_emi: Optional[float] = None    # None ならローン別 EMI の合計
    new_rate: Optional[float] = None


# -------------------------------------------------
# 集計ヘルパー
# -------------------------------------------------
def _sum_interest(loans: Sequence[LoanParams]) -> float:
    return sum(compute_total_interest(l.amount, l.rate, l.tenure) for l in loans)


def _sum_emi(loans: Sequence[LoanParams]) -> float:
    return sum(compute_monthly_payment(l.amount, l.rate, l.tenure) for l in loans)


def _by_rate_desc(loans: Sequence[LoanParams]) -> list:
    # 安定ソート：同率なら元の並び順が先
    return sorted(loans, key=lambda l: l.rate, reverse=True)


def _baseline(loans: Sequence[LoanParams]) -> _Baseline:
    return _Baseline(
        total_principal=sum(l.amount for l in loans),
        current_interest=_sum_interest(loans),
        current_emi=_sum_emi(loans),
        max_tenure=max(l.tenure for l in loans),
    )


# -------------------------------------------------
# 5つの戦略
# -------------------------------------------------
def _prepay_highest(loans, base: _Baseline, p: RestructureParams) -> _Plan:
    # 最高金利が複数あれば先頭のもの
    highest_index = max(range(len(loans)), key=lambda i: loans[i].rate)
    highest = loans[highest_index]
    reduced_tenure = max(p.prepay_min_tenure, round_half_up(highest.tenure * p.prepay_tenure_factor))

    new_loans = tuple(
        replace(l, tenure=reduced_tenure) if i == highest_index else l
        for i, l in enumerate(loans)
    )

    preset = find_loan_type(highest.loan_type)
    label = preset.label if preset else "highest rate loan"

    return _Plan(
        loans=new_loans,
        new_tenure=reduced_tenure,
        # 浮いた資金を返済に回す想定で EMI を 15% 上乗せ
        new_emi=base.current_emi * (1 + p.prepay_emi_uplift),
        details=(
            f"Aggressively prepay {label} ({format_rate(highest.rate)}% p.a.) - "
            f"reduces tenure by ~{highest.tenure - reduced_tenure} months"
        ),
    )


def _consolidate(loans, base: _Baseline, p: RestructureParams) -> _Plan:
    if base.total_principal > 0:
        weighted_rate = sum(l.rate * l.amount for l in loans) / base.total_principal
    else:
        weighted_rate = 0.0

    new_rate = max(p.consolidate_rate_floor, weighted_rate - p.consolidate_rate_discount)
    new_tenure = round_half_up(base.max_tenure * p.consolidate_tenure_factor)

    return _Plan(
        loans=(LoanParams(amount=base.total_principal, rate=new_rate, tenure=new_tenure),),
        new_tenure=new_tenure,
        new_rate=new_rate,
        details=(
            f"Consolidate {len(loans)} loans into single facility at {new_rate:.1f}% "
            f"(vs weighted avg {weighted_rate:.1f}%) - simpler compliance, one EMI"
        ),
    )


def _balance_transfer(loans, base: _Baseline, p: RestructureParams) -> _Plan:
    # 閾値ちょうど（11%）は据え置き側
    high_rate = [l for l in loans if l.rate > p.balance_transfer_threshold]

    new_loans = tuple(
        replace(l, rate=p.transfer_rate) if l.rate > p.balance_transfer_threshold else l
        for l in loans
    )

    emi_reduction = base.current_emi - _sum_emi(new_loans)
    if emi_reduction > 0:
        transferred = sum(l.amount for l in high_rate)
        recovery_months = round_half_up(transferred * p.transfer_fee_ratio / emi_reduction)
    else:
        recovery_months = p.default_recovery_months

    return _Plan(
        loans=new_loans,
        new_tenure=base.max_tenure,
        new_rate=p.transfer_rate,
        details=(
            f"Transfer {len(high_rate)} high-rate loan(s) to {format_rate(p.transfer_rate)}% lender - "
            f"processing fee ~1% one-time, recovered in {recovery_months} months"
        ),
    )


def _extend_tenure(loans, base: _Baseline, p: RestructureParams) -> _Plan:
    new_loans = tuple(
        replace(l, tenure=round_half_up(l.tenure * p.extend_tenure_factor)) for l in loans
    )

    return _Plan(
        loans=new_loans,
        new_tenure=round_half_up(base.max_tenure * p.extend_tenure_factor),
        details=(
            "Extend all loan tenures by ~50% - EMI drops significantly, total interest "
            "increases but cash flow pressure eases immediately"
        ),
    )


def _hybrid(loans, base: _Baseline, p: RestructureParams) -> _Plan:
    ranked = _by_rate_desc(loans)
    split = math.ceil(len(ranked) / 2)
    top_half, bottom_half = ranked[:split], ranked[split:]

    moved = tuple(
        replace(l, rate=p.transfer_rate, tenure=round_half_up(l.tenure * p.hybrid_tenure_factor))
        for l in top_half
    )

    return _Plan(
        loans=moved + tuple(bottom_half),
        new_tenure=base.max_tenure,
        new_rate=p.transfer_rate,
        details=(
            f"Balance-transfer top {len(top_half)} costliest loan(s) to {format_rate(p.transfer_rate)}% "
            "+ accelerate repayment. Keep low-rate loans unchanged. Best risk-adjusted savings."
        ),
    )


STRATEGY_HANDLERS: Dict[str, Callable[..., _Plan]] = {
    "prepay_highest": _prepay_highest,
    "consolidate": _consolidate,
    "balance_transfer": _balance_transfer,
    "extend_tenure": _extend_tenure,
    "hybrid": _hybrid,
}


# ============================================================
# simulate_restructure()
# ============================================================
def simulate_restructure(
    portfolio: Sequence[LoanParams],
    strategy_id: str,
    params: RestructureParams = DEFAULT_RESTRUCTURE_PARAMS,
) -> StrategyResult:
    """
    ポートフォリオに戦略を1つ当てて StrategyResult を返す。

    ・空のポートフォリオは ValueError（前提条件違反）
    ・未知の strategy_id は例外にせず、現状のまま（節約 0）を返す
    """
    validate_portfolio(portfolio)
    loans = tuple(portfolio)
    base = _baseline(loans)

    handler = STRATEGY_HANDLERS.get(strategy_id)
    if handler is None:
        logger.warning("Unknown strategy id %r: returning baseline unchanged", strategy_id)
        plan = _Plan(loans=loans, new_tenure=base.max_tenure, details="", new_emi=base.current_emi)
        new_interest = base.current_interest
    else:
        plan = handler(loans, base, params)
        new_interest = _sum_interest(plan.loans)

    new_emi = plan.new_emi if plan.new_emi is not None else _sum_emi(plan.loans)

    interest_change = base.current_interest - new_interest
    savings = max(0.0, interest_change)
    savings_percent = savings / base.current_interest * 100 if base.current_interest > 0 else 0.0

    logger.debug(
        "simulate_restructure %s: current_interest=%.2f new_interest=%.2f savings=%.2f",
        strategy_id, base.current_interest, new_interest, savings,
    )

    return StrategyResult(
        strategy_id=strategy_id,
        current_total_interest=base.current_interest,
        current_monthly_emi=base.current_emi,
        current_total_payout=base.total_principal + base.current_interest,
        new_interest=new_interest,
        new_emi=new_emi,
        new_tenure=plan.new_tenure,
        savings=savings,
        emi_reduction=base.current_emi - new_emi,
        savings_percent=savings_percent,
        details=plan.details,
        total_principal=base.total_principal,
        interest_change=interest_change,
        new_rate=plan.new_rate,
        restructured_loans=plan.loans,
    )

# ============= end restructure.py
