#=========== loan_restructure/config/params.py

from dataclasses import dataclass
from typing import Optional, Tuple


@dataclass(frozen=True)
class LoanParams:
    amount: float                     # 元本（₹）
    rate: float                       # 年利（%表記, 11.5 = 11.5%）
    tenure: int                       # 返済期間（月）
    loan_type: Optional[str] = None   # LOAN_TYPES の id（表示用のみ）


@dataclass(frozen=True)
class LoanTypePreset:
    id: str
    label: str
    icon: str
    default_rate: float
    default_tenure: int
    default_amount: float


@dataclass(frozen=True)
class StrategyMeta:
    id: str
    label: str
    description: str


@dataclass(frozen=True)
class RestructureParams:
    # 高金利ローン繰上返済（アバランチ）
    prepay_tenure_factor: float = 0.65
    prepay_min_tenure: int = 6
    prepay_emi_uplift: float = 0.15

    # 一本化
    consolidate_rate_floor: float = 9.5
    consolidate_rate_discount: float = 2.5
    consolidate_tenure_factor: float = 1.1

    # 借換え
    balance_transfer_threshold: float = 11.0
    transfer_rate: float = 9.75
    transfer_fee_ratio: float = 0.01
    default_recovery_months: int = 6

    # 期間延長
    extend_tenure_factor: float = 1.5

    # ハイブリッド
    hybrid_tenure_factor: float = 0.8


# -------------------------------------------------
# 固定テーブル（読み取り専用）
# -------------------------------------------------
LOAN_TYPES: Tuple[LoanTypePreset, ...] = (
    LoanTypePreset("term", "Term Loan", "🏦", 11.5, 60, 1_500_000.0),
    LoanTypePreset("ccod", "CC/OD Facility", "💳", 13.5, 12, 800_000.0),
    LoanTypePreset("mudra", "MUDRA Loan", "🏛️", 10.0, 36, 500_000.0),
    LoanTypePreset("vehicle", "Vehicle/Equipment", "🚛", 12.0, 48, 1_200_000.0),
    LoanTypePreset("working", "Working Capital", "⚙️", 14.0, 24, 600_000.0),
)

RESTRUCTURE_STRATEGIES: Tuple[StrategyMeta, ...] = (
    StrategyMeta("prepay_highest", "Prepay Highest Rate First",
                 "Avalanche method: target the costliest loan"),
    StrategyMeta("consolidate", "Consolidate All Loans",
                 "Single loan at a negotiated lower rate"),
    StrategyMeta("balance_transfer", "Balance Transfer",
                 "Move high-rate loans to a lower-rate lender"),
    StrategyMeta("extend_tenure", "Extend Tenure + Reduce EMI",
                 "Ease monthly cash flow pressure"),
    StrategyMeta("hybrid", "Hybrid Optimal",
                 "AI-recommended mix of strategies"),
)

# 宣言順（比較表・ベスト判定のタイブレークはこの順）
STRATEGY_IDS: Tuple[str, ...] = tuple(s.id for s in RESTRUCTURE_STRATEGIES)

DEFAULT_RESTRUCTURE_PARAMS = RestructureParams()


def find_loan_type(type_id: Optional[str]) -> Optional[LoanTypePreset]:
    for preset in LOAN_TYPES:
        if preset.id == type_id:
            return preset
    return None


def find_strategy(strategy_id: str) -> Optional[StrategyMeta]:
    for meta in RESTRUCTURE_STRATEGIES:
        if meta.id == strategy_id:
            return meta
    return None

#=========== end params.py
