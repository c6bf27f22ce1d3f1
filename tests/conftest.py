import pytest

from loan_restructure.config.params import LoanParams
from loan_restructure.core.portfolio.portfolio import default_portfolio


@pytest.fixture
def sample_portfolio():
    # term 15L @11.5% / 60mo, CC-OD 8L @13.5% / 12mo, MUDRA 5L @10% / 36mo
    return default_portfolio()


@pytest.fixture
def zero_rate_portfolio():
    return (
        LoanParams(amount=120_000.0, rate=0.0, tenure=12),
        LoanParams(amount=60_000.0, rate=0.0, tenure=6),
    )
