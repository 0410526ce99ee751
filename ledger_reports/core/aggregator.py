"""
Monthly Aggregator

Folds transaction records into per-month signed amounts per account, the
shape consumed by the stacked income/expense chart.
"""
from collections import OrderedDict
from typing import Dict, Iterable, List, Optional

import pandas as pd

from ledger_reports.common.logging_config import get_logger
from ledger_reports.common.models import (
    AccountSeries,
    Classification,
    MonthlyBucket,
    MonthlySeries,
    TransactionRecord,
)

logger = get_logger(__name__)

# Income accounts (green/blue family)
INCOME_COLORS = [
    '#10b981', '#06b6d4', '#0ea5e9', '#3b82f6', '#6366f1',
    '#34d399', '#22d3ee', '#38bdf8', '#60a5fa', '#818cf8'
]

# Expense accounts (orange/red family)
EXPENSE_COLORS = [
    '#f97316', '#ef4444', '#ec4899', '#f59e0b', '#e11d48',
    '#fb923c', '#f87171', '#f472b6', '#fbbf24', '#fb7185'
]

TAX_COLLECTED_ACCOUNT = '仮受消費税'
TAX_PAID_ACCOUNT = '仮払消費税'

_TAX_ACCOUNTS = {
    Classification.INCOME: TAX_COLLECTED_ACCOUNT,
    Classification.EXPENSE: TAX_PAID_ACCOUNT,
}


def month_key(value) -> Optional[str]:
    """Return 'YYYY-MM' for a record date, or None when it cannot be parsed."""
    if value is None or value == '':
        return None
    ts = pd.to_datetime(value, errors='coerce')
    if ts is None or pd.isna(ts):
        return None
    return f"{ts.year:04d}-{ts.month:02d}"


class MonthlyAggregator:
    """
    Buckets records by month and account.

    Income postings are stored positive and expense postings negative.
    Accounts keep the order in which they were first seen, so colors are
    stable across repeated runs over the same data.
    """

    def __init__(self):
        self._totals: Dict[str, Dict[str, float]] = {}
        self._classes: "OrderedDict[str, Classification]" = OrderedDict()

    def aggregate(self, records: Iterable[TransactionRecord]) -> MonthlySeries:
        """
        Aggregate records into monthly buckets.

        Args:
            records: Records in source order

        Returns:
            MonthlySeries with one bucket per month between the first and last
            contributing month (inclusive), or an empty series
        """
        self._totals = {}
        self._classes = OrderedDict()

        skipped = 0
        for record in records:
            if not self._fold(record):
                skipped += 1

        if not self._totals:
            logger.info("No postable records; empty monthly series", skipped=skipped)
            return MonthlySeries()

        accounts = self._build_accounts()
        months = self._month_range(min(self._totals), max(self._totals))

        buckets = []
        for month in months:
            month_data = self._totals.get(month, {})
            amounts = {}
            for acc in accounts:
                amount = month_data.get(acc.name, 0.0)
                if acc.classification is Classification.EXPENSE:
                    amount = -amount if amount else 0.0
                amounts[acc.name] = amount
            buckets.append(MonthlyBucket(month=month, amounts=amounts))

        logger.info(
            "Monthly aggregation complete",
            months=len(buckets),
            accounts=len(accounts),
            skipped=skipped,
        )
        return MonthlySeries(buckets=buckets, accounts=accounts)

    def _fold(self, record: TransactionRecord) -> bool:
        """Add one record's postings. Returns False when it contributed nothing."""
        posting = record.posting
        if posting is None:
            return False

        month = month_key(record.transaction_date)
        if month is None:
            logger.warning(
                "Skipping record with unparseable date",
                record_id=record.record_id,
                transaction_date=str(record.transaction_date),
            )
            return False

        classification = posting.classification
        line = posting.primary
        contributed = False

        if line.is_postable:
            contributed |= self._post(month, line.account, line.amount, classification)
        if line.has_tax:
            contributed |= self._post(month, _TAX_ACCOUNTS[classification], line.tax, classification)

        if not contributed:
            logger.debug("Record has no postable amount", record_id=record.record_id)
        return contributed

    def _post(self, month: str, account: str, amount: float, classification: Classification) -> bool:
        known = self._classes.get(account)
        if known is not None and known is not classification:
            # first classification wins for the whole run
            logger.warning(
                "Account posted with conflicting classification; contribution dropped",
                account=account,
                classification=known.value,
                conflicting=classification.value,
            )
            return False
        if known is None:
            self._classes[account] = classification

        month_data = self._totals.setdefault(month, {})
        month_data[account] = month_data.get(account, 0.0) + amount
        return True

    def _build_accounts(self) -> List[AccountSeries]:
        accounts = []
        income_idx = 0
        expense_idx = 0
        for name, classification in self._classes.items():
            if classification is Classification.INCOME:
                color = INCOME_COLORS[income_idx % len(INCOME_COLORS)]
                income_idx += 1
            else:
                color = EXPENSE_COLORS[expense_idx % len(EXPENSE_COLORS)]
                expense_idx += 1
            accounts.append(AccountSeries(name=name, classification=classification, color=color))
        return accounts

    @staticmethod
    def _month_range(first: str, last: str) -> List[str]:
        return [p.strftime('%Y-%m') for p in pd.period_range(start=first, end=last, freq='M')]


def aggregate(records: Iterable[TransactionRecord]) -> MonthlySeries:
    """Aggregate records with a fresh MonthlyAggregator."""
    return MonthlyAggregator().aggregate(records)
