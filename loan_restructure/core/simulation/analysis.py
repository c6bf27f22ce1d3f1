# ===============================
# core/simulation/analysis.py
# ===============================

import logging
from dataclasses import dataclass
from typing import List, Sequence, Tuple

from loan_restructure.config.params import STRATEGY_IDS, LoanParams
from loan_restructure.core.portfolio.portfolio import validate_portfolio
from loan_restructure.core.simulation.restructure import StrategyResult, simulate_restructure

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PortfolioAnalysis:
    business_name: str
    portfolio: Tuple[LoanParams, ...]
    results: Tuple[StrategyResult, ...]     # 宣言順
    ranked: Tuple[StrategyResult, ...]      # 節約額の降順
    best: StrategyResult


def run_all_strategies(portfolio: Sequence[LoanParams]) -> List[StrategyResult]:
    validate_portfolio(portfolio)
    return [simulate_restructure(portfolio, strategy_id) for strategy_id in STRATEGY_IDS]


def select_best(results: Sequence[StrategyResult]) -> StrategyResult:
    """
    節約額が最大の戦略。同額なら先に出てきた方（宣言順）を残す。
    """
    if not results:
        raise ValueError("select_best needs at least one StrategyResult")

    best = results[0]
    for result in results[1:]:
        if result.savings > best.savings:
            best = result
    return best


def rank_results(results: Sequence[StrategyResult]) -> List[StrategyResult]:
    return sorted(results, key=lambda r: r.savings, reverse=True)


def analyze_portfolio(portfolio: Sequence[LoanParams], business_name: str = "") -> PortfolioAnalysis:
    results = run_all_strategies(portfolio)
    best = select_best(results)

    logger.info(
        "Analyzed %d loans for %r: best=%s savings=%.2f",
        len(portfolio), business_name, best.strategy_id, best.savings,
    )

    return PortfolioAnalysis(
        business_name=business_name,
        portfolio=tuple(portfolio),
        results=tuple(results),
        ranked=tuple(rank_results(results)),
        best=best,
    )

# ============= end analysis.py
