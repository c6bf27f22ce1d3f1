#==== loan_restructure/core/engine/loan_engine.py ====

import math

import pandas as pd


SCHEDULE_COLUMNS = ["month", "principal", "interest", "total_payment", "remaining_balance"]


def round_half_up(value: float) -> int:
    """
    0.5 は常に +∞ 方向へ丸める（Python 標準の round は偶数丸めなので使わない）。
    """
    return int(math.floor(value + 0.5))


def compute_monthly_payment(principal: float, annual_rate_percent: float, tenure_months: int) -> float:
    """
    元利均等返済の月次返済額（EMI）。
    元本または期間が 0 以下なら 0 を返す（例外は出さない）。
    """
    if principal <= 0 or tenure_months <= 0:
        return 0.0

    monthly_rate = annual_rate_percent / 100 / 12

    if monthly_rate == 0:
        # 無利息の場合
        return principal / tenure_months

    # 月次返済額 (M) = P * [ i(1 + i)^n / ((1 + i)^n - 1) ]
    growth = math.pow(1 + monthly_rate, tenure_months)
    return principal * monthly_rate * growth / (growth - 1)


def compute_total_interest(principal: float, annual_rate_percent: float, tenure_months: int) -> float:
    """
    総支払利息 = EMI * 回数 - 元本。
    期間 0 以下では EMI = 0 なので -元本 になる（呼び出し側でガードすること）。
    """
    payment = compute_monthly_payment(principal, annual_rate_percent, tenure_months)
    return payment * tenure_months - principal


class LoanEngine:
    """
    1本のローンについて、元利均等返済の返済予定表を組み立てる。
    """
    def __init__(self, amount: float, annual_rate: float, tenure_months: int):
        self.initial_amount = amount          # 借入当初残高
        self.annual_rate = annual_rate        # 年利 (%表記)
        self.total_months = tenure_months     # 総返済回数 (月)
        self.monthly_rate = annual_rate / 100 / 12
        self.monthly_payment = compute_monthly_payment(amount, annual_rate, tenure_months)

    @classmethod
    def from_loan(cls, loan) -> "LoanEngine":
        return cls(amount=loan.amount, annual_rate=loan.rate, tenure_months=loan.tenure)

    @property
    def total_interest(self) -> float:
        return compute_total_interest(self.initial_amount, self.annual_rate, self.total_months)

    def schedule(self) -> pd.DataFrame:
        """
        月ごとの元本・利息・支払額・残高を DataFrame で返す。
        最終回は残高全額を元本として返済する。
        """
        if self.initial_amount <= 0 or self.total_months <= 0:
            return pd.DataFrame(columns=SCHEDULE_COLUMNS)

        rows = []
        balance = self.initial_amount

        for month in range(1, self.total_months + 1):
            interest = balance * self.monthly_rate

            if month == self.total_months:
                # 最終回調整
                principal = balance
                total_payment = principal + interest
            else:
                principal = self.monthly_payment - interest
                total_payment = self.monthly_payment

            balance = max(0.0, balance - principal)

            rows.append({
                "month": month,
                "principal": principal,
                "interest": interest,
                "total_payment": total_payment,
                "remaining_balance": balance,
            })

        return pd.DataFrame(rows, columns=SCHEDULE_COLUMNS)

#======= 以上, core/engine/loan_engine.py end ======
