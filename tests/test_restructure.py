import logging

import pytest

from loan_restructure.config.params import STRATEGY_IDS, LoanParams
from loan_restructure.core.engine.loan_engine import compute_total_interest
from loan_restructure.core.simulation.restructure import simulate_restructure


PORTFOLIOS = [
    (
        LoanParams(amount=1_500_000.0, rate=11.5, tenure=60, loan_type="term"),
        LoanParams(amount=800_000.0, rate=13.5, tenure=12, loan_type="ccod"),
        LoanParams(amount=500_000.0, rate=10.0, tenure=36, loan_type="mudra"),
    ),
    (LoanParams(amount=250_000.0, rate=8.0, tenure=24),),
    (
        LoanParams(amount=1_200_000.0, rate=12.0, tenure=48, loan_type="vehicle"),
        LoanParams(amount=600_000.0, rate=14.0, tenure=24, loan_type="working"),
        LoanParams(amount=300_000.0, rate=11.0, tenure=18),
        LoanParams(amount=90_000.0, rate=0.0, tenure=9),
    ),
]


def _weighted_rate(loans):
    return sum(l.rate * l.amount for l in loans) / sum(l.amount for l in loans)


# -------------------------------------------------
# ベースライン
# -------------------------------------------------
def test_baseline_figures(sample_portfolio):
    result = simulate_restructure(sample_portfolio, "hybrid")

    assert result.total_principal == 2_800_000
    assert result.current_total_interest == pytest.approx(619_843.50, abs=0.01)
    assert result.current_monthly_emi == pytest.approx(120_764.13, abs=0.01)
    assert result.current_total_payout == pytest.approx(2_800_000 + result.current_total_interest)


@pytest.mark.parametrize("portfolio", PORTFOLIOS)
@pytest.mark.parametrize("strategy_id", STRATEGY_IDS)
def test_savings_never_negative(portfolio, strategy_id):
    result = simulate_restructure(portfolio, strategy_id)

    assert result.savings >= 0
    assert result.savings == max(0.0, result.interest_change)
    assert result.emi_reduction == pytest.approx(result.current_monthly_emi - result.new_emi)
    assert result.strategy_id == strategy_id


@pytest.mark.parametrize("strategy_id", STRATEGY_IDS)
def test_savings_percent_zero_without_interest(zero_rate_portfolio, strategy_id):
    result = simulate_restructure(zero_rate_portfolio, strategy_id)

    assert result.current_total_interest == 0
    assert result.savings_percent == 0


def test_empty_portfolio_is_rejected():
    with pytest.raises(ValueError):
        simulate_restructure([], "consolidate")


def test_unknown_strategy_returns_baseline(sample_portfolio, caplog):
    with caplog.at_level(logging.WARNING):
        result = simulate_restructure(sample_portfolio, "refinance_everything")

    assert result.new_interest == result.current_total_interest
    assert result.new_emi == result.current_monthly_emi
    assert result.new_tenure == 60
    assert result.savings == 0
    assert result.savings_percent == 0
    assert result.details == ""
    assert "refinance_everything" in caplog.text


@pytest.mark.parametrize("strategy_id", STRATEGY_IDS)
def test_simulation_is_idempotent(sample_portfolio, strategy_id):
    assert simulate_restructure(sample_portfolio, strategy_id) == simulate_restructure(sample_portfolio, strategy_id)


# -------------------------------------------------
# prepay_highest
# -------------------------------------------------
def test_prepay_shrinks_only_highest_rate_loan(sample_portfolio):
    result = simulate_restructure(sample_portfolio, "prepay_highest")

    tenures = [l.tenure for l in result.restructured_loans]
    assert tenures == [60, 8, 36]            # CC/OD: max(6, round(12 * 0.65)) = 8
    assert result.new_tenure == 8
    assert result.new_emi == pytest.approx(result.current_monthly_emi * 1.15)
    assert result.emi_reduction < 0
    assert result.savings == pytest.approx(18_670.94, abs=0.01)
    assert "CC/OD Facility (13.5% p.a.)" in result.details
    assert "~4 months" in result.details


def test_prepay_respects_minimum_tenure():
    loans = [LoanParams(amount=100_000.0, rate=15.0, tenure=8)]
    result = simulate_restructure(loans, "prepay_highest")

    # round(8 * 0.65) = 5 -> 6
    assert result.new_tenure == 6


def test_prepay_tie_picks_first_loan():
    loans = [
        LoanParams(amount=100_000.0, rate=14.0, tenure=24),
        LoanParams(amount=200_000.0, rate=14.0, tenure=36),
    ]
    result = simulate_restructure(loans, "prepay_highest")

    assert [l.tenure for l in result.restructured_loans] == [16, 36]
    assert "highest rate loan" in result.details


# -------------------------------------------------
# consolidate
# -------------------------------------------------
def test_consolidate_rate_is_clamped(sample_portfolio):
    result = simulate_restructure(sample_portfolio, "consolidate")

    assert _weighted_rate(sample_portfolio) == pytest.approx(11.8036, abs=1e-4)
    assert result.new_rate == max(9.5, _weighted_rate(sample_portfolio) - 2.5) == 9.5
    assert result.new_tenure == 66
    assert len(result.restructured_loans) == 1
    assert result.new_interest == pytest.approx(compute_total_interest(2_800_000, 9.5, 66))
    # 期間が伸びるので利息は増える -> 節約 0、差額はマイナスで残る
    assert result.savings == 0
    assert result.interest_change < 0
    assert "Consolidate 3 loans into single facility at 9.5%" in result.details


def test_consolidate_discount_above_floor():
    loans = [
        LoanParams(amount=100_000.0, rate=20.0, tenure=24),
        LoanParams(amount=300_000.0, rate=16.0, tenure=12),
    ]
    result = simulate_restructure(loans, "consolidate")

    assert result.new_rate == pytest.approx(17.0 - 2.5)
    assert result.new_tenure == 26              # round(24 * 1.1)


# -------------------------------------------------
# balance_transfer
# -------------------------------------------------
def test_balance_transfer_threshold_is_inclusive():
    loans = [
        LoanParams(amount=400_000.0, rate=11.0, tenure=36),
        LoanParams(amount=400_000.0, rate=11.01, tenure=36),
        LoanParams(amount=400_000.0, rate=15.0, tenure=24),
    ]
    result = simulate_restructure(loans, "balance_transfer")

    assert [l.rate for l in result.restructured_loans] == [11.0, 9.75, 9.75]
    assert [l.tenure for l in result.restructured_loans] == [36, 36, 24]
    assert result.new_tenure == 36
    assert "Transfer 2 high-rate loan(s) to 9.75% lender" in result.details


def test_balance_transfer_sample(sample_portfolio):
    result = simulate_restructure(sample_portfolio, "balance_transfer")

    assert result.savings == pytest.approx(94_975.49, abs=0.01)
    assert 0 < result.savings < result.current_total_interest
    assert result.emi_reduction == pytest.approx(2_704.44, abs=0.01)
    # 23L * 1% / 2704.44 = 8.5 -> 9
    assert "recovered in 9 months" in result.details


def test_balance_transfer_without_emi_drop_uses_default_recovery():
    loans = [LoanParams(amount=500_000.0, rate=10.0, tenure=36)]
    result = simulate_restructure(loans, "balance_transfer")

    assert result.savings == 0
    assert "Transfer 0 high-rate loan(s)" in result.details
    assert "recovered in 6 months" in result.details


# -------------------------------------------------
# extend_tenure
# -------------------------------------------------
def test_extend_tenure_lowers_emi_but_costs_interest(sample_portfolio):
    result = simulate_restructure(sample_portfolio, "extend_tenure")

    assert [l.tenure for l in result.restructured_loans] == [90, 18, 54]
    assert [l.rate for l in result.restructured_loans] == [11.5, 13.5, 10.0]
    assert result.new_tenure == 90
    assert result.emi_reduction > 0
    assert result.interest_change == pytest.approx(-336_799.44, abs=0.01)
    assert result.savings == 0
    assert result.savings_percent == 0


def test_extend_tenure_rounds_halves_up():
    loans = [LoanParams(amount=100_000.0, rate=12.0, tenure=7)]
    result = simulate_restructure(loans, "extend_tenure")

    assert result.restructured_loans[0].tenure == 11
    assert result.new_tenure == 11


# -------------------------------------------------
# hybrid
# -------------------------------------------------
def test_hybrid_moves_costliest_half(sample_portfolio):
    result = simulate_restructure(sample_portfolio, "hybrid")

    moved = [l for l in result.restructured_loans if l.rate == 9.75]
    assert sorted((l.loan_type, l.tenure) for l in moved) == [("ccod", 10), ("term", 48)]
    kept = [l for l in result.restructured_loans if l.rate != 9.75]
    assert kept == [sample_portfolio[2]]

    assert result.new_tenure == 60
    assert result.savings == pytest.approx(185_376.47, abs=0.01)
    assert 0 < result.savings < result.current_total_interest
    assert result.savings_percent == pytest.approx(result.savings / result.current_total_interest * 100)
    assert "top 2 costliest loan(s)" in result.details


def test_hybrid_single_loan_moves_it():
    loans = [LoanParams(amount=300_000.0, rate=9.0, tenure=20)]
    result = simulate_restructure(loans, "hybrid")

    assert result.restructured_loans == (LoanParams(amount=300_000.0, rate=9.75, tenure=16),)
