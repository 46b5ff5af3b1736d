"""Cashback calculation and monthly spend reporting"""

from decimal import Decimal, ROUND_HALF_UP
from typing import Dict, Iterable, List

from cashback_tracker.domain.models import MonthlyReport, Transaction, TransactionLine
from cashback_tracker.utils.date_utils import in_month, month_label

_CENT = Decimal("0.01")
_MICRO = Decimal("0.000001")


def _round(value: float, quantum: Decimal) -> float:
    # str() gives the shortest repr, so 2.675 rounds to 2.68 rather than 2.67
    return float(Decimal(str(value)).quantize(quantum, rounding=ROUND_HALF_UP))


def round2(value: float) -> float:
    """Round a money value to cents, half up"""
    return _round(value, _CENT)


def round6(value: float) -> float:
    """Round an asset quantity to 6 decimals, half up"""
    return _round(value, _MICRO)


def calculate_cashback(amount: float, rate: float) -> float:
    return round2(amount * rate)


def filter_by_month(transactions: Iterable[Transaction], year: int, month: int) -> List[Transaction]:
    """Transactions dated inside the calendar month, in their original order"""
    return [t for t in transactions if in_month(t.date, year, month)]


def sum_spent(transactions: Iterable[Transaction]) -> float:
    """Total spend with every amount counted to the cent"""
    return round2(sum(round2(t.amount) for t in transactions))


def summarize_by_category(transactions: Iterable[Transaction]) -> Dict[str, float]:
    """Spend per category, rounded to cents, in first-seen order"""
    totals: Dict[str, float] = {}
    for txn in transactions:
        totals[txn.category] = totals.get(txn.category, 0.0) + round2(txn.amount)
    return {category: round2(total) for category, total in totals.items()}


def build_monthly_report(
    transactions: Iterable[Transaction],
    year: int,
    month: int,
    cashback_rate: float,
) -> MonthlyReport:
    """
    Compute per-transaction cashback and monthly totals.

    totals.cashback is the sum of the already-rounded per-transaction
    cashback values, so it always matches the rows shown to the user.
    """
    month_txns = filter_by_month(transactions, year, month)

    lines = [TransactionLine(transaction=t, cashback=calculate_cashback(t.amount, cashback_rate)) for t in month_txns]

    return MonthlyReport(
        year=year,
        month=month,
        label=month_label(year, month),
        total_spent=sum_spent(month_txns),
        total_cashback=round2(sum(line.cashback for line in lines)),
        count=len(month_txns),
        category_totals=summarize_by_category(month_txns),
        lines=lines,
    )
