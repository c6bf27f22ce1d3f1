import pytest

from loan_restructure.config.params import LOAN_TYPES, LoanParams
from loan_restructure.core.engine.loan_engine import compute_monthly_payment
from loan_restructure.core.portfolio.portfolio import (
    add_loan,
    available_loan_types,
    loan_label,
    portfolio_totals,
    remove_loan,
    update_loan,
    validate_portfolio,
)


def test_add_loan_uses_preset_defaults(sample_portfolio):
    portfolio = add_loan(sample_portfolio, "vehicle")

    assert len(portfolio) == 4
    assert portfolio[-1] == LoanParams(amount=1_200_000.0, rate=12.0, tenure=48, loan_type="vehicle")
    # 元の tuple はそのまま
    assert len(sample_portfolio) == 3


def test_add_unknown_loan_type_is_noop(sample_portfolio):
    assert add_loan(sample_portfolio, "gold") == tuple(sample_portfolio)


def test_remove_loan(sample_portfolio):
    portfolio = remove_loan(sample_portfolio, 1)
    assert [l.loan_type for l in portfolio] == ["term", "mudra"]

    with pytest.raises(IndexError):
        remove_loan(sample_portfolio, 3)


def test_update_loan(sample_portfolio):
    portfolio = update_loan(sample_portfolio, 0, "tenure", "72")
    assert portfolio[0].tenure == 72
    assert isinstance(portfolio[0].tenure, int)
    assert sample_portfolio[0].tenure == 60

    portfolio = update_loan(portfolio, 2, "rate", 9.25)
    assert portfolio[2].rate == 9.25


def test_update_loan_rejects_bad_input(sample_portfolio):
    with pytest.raises(ValueError):
        update_loan(sample_portfolio, 0, "loan_type", "vehicle")
    with pytest.raises(IndexError):
        update_loan(sample_portfolio, -1, "amount", 10.0)


def test_available_loan_types(sample_portfolio):
    assert [p.id for p in available_loan_types(sample_portfolio)] == ["vehicle", "working"]
    assert len(available_loan_types(())) == len(LOAN_TYPES)


def test_portfolio_totals(sample_portfolio):
    totals = portfolio_totals(sample_portfolio)

    assert totals["total_principal"] == 2_800_000
    assert totals["total_interest"] == pytest.approx(619_843.50, abs=0.01)
    assert totals["total_emi"] == pytest.approx(
        sum(compute_monthly_payment(l.amount, l.rate, l.tenure) for l in sample_portfolio)
    )


def test_loan_label():
    assert loan_label(LoanParams(1.0, 1.0, 1, loan_type="ccod")) == "CC/OD Facility"
    assert loan_label(LoanParams(1.0, 1.0, 1, loan_type="gold")) == "gold"
    assert loan_label(LoanParams(1.0, 1.0, 1)) == "Loan"


def test_validate_portfolio():
    with pytest.raises(ValueError):
        validate_portfolio([])
    with pytest.raises(TypeError):
        validate_portfolio([{"amount": 1.0, "rate": 1.0, "tenure": 1}])
