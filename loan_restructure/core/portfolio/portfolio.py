# ===== core/portfolio/portfolio.py =====

from dataclasses import replace
from typing import Dict, List, Sequence, Tuple

from loan_restructure.config.params import (
    LOAN_TYPES,
    LoanParams,
    LoanTypePreset,
    find_loan_type,
)
from loan_restructure.core.engine.loan_engine import (
    compute_monthly_payment,
    compute_total_interest,
)

EDITABLE_FIELDS = ("amount", "rate", "tenure")


def default_portfolio() -> Tuple[LoanParams, ...]:
    """
    初期表示用のサンプル（タームローン / CC・OD / MUDRA）。
    """
    return (
        LoanParams(amount=1_500_000.0, rate=11.5, tenure=60, loan_type="term"),
        LoanParams(amount=800_000.0, rate=13.5, tenure=12, loan_type="ccod"),
        LoanParams(amount=500_000.0, rate=10.0, tenure=36, loan_type="mudra"),
    )


def validate_portfolio(portfolio: Sequence[LoanParams]) -> None:
    if not portfolio:
        raise ValueError("portfolio must contain at least one loan")

    for loan in portfolio:
        if not isinstance(loan, LoanParams):
            raise TypeError(
                f"portfolio expects LoanParams entries, got {type(loan)}"
            )


# -------------------------------------------------
# 編集（常に新しい tuple を返す）
# -------------------------------------------------
def add_loan(portfolio: Sequence[LoanParams], type_id: str) -> Tuple[LoanParams, ...]:
    preset = find_loan_type(type_id)
    if preset is None:
        # 未知の種別は何もしない
        return tuple(portfolio)

    new_loan = LoanParams(
        amount=preset.default_amount,
        rate=preset.default_rate,
        tenure=preset.default_tenure,
        loan_type=preset.id,
    )
    return tuple(portfolio) + (new_loan,)


def remove_loan(portfolio: Sequence[LoanParams], index: int) -> Tuple[LoanParams, ...]:
    if not 0 <= index < len(portfolio):
        raise IndexError(f"remove_loan: index {index} out of range for {len(portfolio)} loans")

    return tuple(loan for i, loan in enumerate(portfolio) if i != index)


def update_loan(portfolio: Sequence[LoanParams], index: int, field: str, value) -> Tuple[LoanParams, ...]:
    if field not in EDITABLE_FIELDS:
        raise ValueError(f"update_loan: field must be one of {EDITABLE_FIELDS}, got {field!r}")
    if not 0 <= index < len(portfolio):
        raise IndexError(f"update_loan: index {index} out of range for {len(portfolio)} loans")

    value = int(value) if field == "tenure" else float(value)

    loans = list(portfolio)
    loans[index] = replace(loans[index], **{field: value})
    return tuple(loans)


def available_loan_types(portfolio: Sequence[LoanParams]) -> List[LoanTypePreset]:
    used = {loan.loan_type for loan in portfolio}
    return [preset for preset in LOAN_TYPES if preset.id not in used]


# -------------------------------------------------
# 集計
# -------------------------------------------------
def portfolio_totals(portfolio: Sequence[LoanParams]) -> Dict[str, float]:
    return {
        "total_principal": sum(loan.amount for loan in portfolio),
        "total_interest": sum(
            compute_total_interest(loan.amount, loan.rate, loan.tenure) for loan in portfolio
        ),
        "total_emi": sum(
            compute_monthly_payment(loan.amount, loan.rate, loan.tenure) for loan in portfolio
        ),
    }


def loan_label(loan: LoanParams, fallback: str = "Loan") -> str:
    preset = find_loan_type(loan.loan_type)
    if preset is not None:
        return preset.label
    return loan.loan_type or fallback

# ===== end portfolio.py =====
