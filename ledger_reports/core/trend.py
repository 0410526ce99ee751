"""
Trend projection over a monthly series.

Answers "what share of this month's income (or expense) came from account X"
for the single-account line chart, plus per-month subtotals.
"""
from decimal import Decimal, ROUND_HALF_UP
from typing import Iterable, List, Sequence

from ledger_reports.common.models import (
    AccountSeries,
    Classification,
    MonthlyBucket,
    MonthlySeries,
    MonthlyTotals,
    TrendPoint,
)


def round_percent(value: float) -> float:
    """Round half-up to one decimal place (12.25 -> 12.3)."""
    return float(Decimal(str(value)).quantize(Decimal('0.1'), rounding=ROUND_HALF_UP))


def project_buckets(
    buckets: Iterable[MonthlyBucket],
    accounts: Sequence[AccountSeries],
    target_account: str,
) -> List[TrendPoint]:
    """
    Project one account's share of its classification, month by month.

    Args:
        buckets: Monthly buckets from the aggregator
        accounts: Account series of the same aggregation run
        target_account: Account name to project

    Returns:
        One TrendPoint per bucket; empty when the account is unknown
    """
    target = next((a for a in accounts if a.name == target_account), None)
    if target is None:
        return []

    peers = [a.name for a in accounts if a.classification is target.classification]

    points = []
    for bucket in buckets:
        value = abs(bucket.amounts.get(target.name, 0.0))
        class_total = sum(abs(bucket.amounts.get(name, 0.0)) for name in peers)
        percent = round_percent(value / class_total * 100) if class_total > 0 else 0.0
        points.append(TrendPoint(month=bucket.month, absolute_value=value, percent_of_class_total=percent))
    return points


def project(series: MonthlySeries, target_account: str) -> List[TrendPoint]:
    """Project an account over an aggregated series."""
    return project_buckets(series.buckets, series.accounts, target_account)


def monthly_totals(series: MonthlySeries) -> List[MonthlyTotals]:
    """Income and expense subtotals (both positive) and the net result per month."""
    frame = series.to_frame()
    income_columns = [a.name for a in series.accounts if a.classification is Classification.INCOME]
    expense_columns = [a.name for a in series.accounts if a.classification is Classification.EXPENSE]

    income = frame[income_columns].sum(axis=1)
    expense = frame[expense_columns].abs().sum(axis=1)
    return [
        MonthlyTotals(month=month, income=float(inc), expense=float(exp), net=float(inc - exp))
        for month, inc, exp in zip(frame.index, income, expense)
    ]
