# ============================================
# core/reporting/formatting.py
# （金額表示：インド式桁区切り・Cr/L/K 略記）
# ============================================

import math

CRORE = 10_000_000
LAKH = 100_000
THOUSAND = 1_000


def _group_indian(digits: str) -> str:
    """
    '1500000' -> '15,00,000'（下3桁、その上は2桁ごと）
    """
    if len(digits) <= 3:
        return digits

    head, tail = digits[:-3], digits[-3:]
    groups = []
    while len(head) > 2:
        groups.insert(0, head[-2:])
        head = head[:-2]
    if head:
        groups.insert(0, head)
    return ",".join(groups) + "," + tail


def format_inr_full(amount: float) -> str:
    rounded = int(math.floor(amount + 0.5))
    sign = "-" if rounded < 0 else ""
    return f"₹{sign}{_group_indian(str(abs(rounded)))}"


def format_inr(amount: float) -> str:
    if amount >= CRORE:
        return f"₹{amount / CRORE:.2f} Cr"
    if amount >= LAKH:
        return f"₹{amount / LAKH:.2f} L"
    if amount >= THOUSAND:
        return f"₹{amount / THOUSAND:.1f}K"
    return format_inr_full(amount)


def format_rate(rate: float) -> str:
    # 10.0 -> '10', 13.5 -> '13.5'
    rate = float(rate)
    if rate.is_integer():
        return str(int(rate))
    return repr(rate)

# ============================================
# END core/reporting/formatting.py
# ============================================
