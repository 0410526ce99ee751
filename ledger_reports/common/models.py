"""
Canonical value types shared by the aggregator and the exporters.

Records arrive from the bookkeeping backend as dictionaries; `from_dict`
constructors turn them into immutable values once, at the edge.
"""
import math
from dataclasses import dataclass, field
from datetime import date, datetime
from enum import Enum
from typing import Any, Dict, List, Optional, Tuple, Union

import pandas as pd


class Direction(int, Enum):
    """Backend direction code of a record."""
    INCOME = 1
    EXPENSE = 2


class Classification(str, Enum):
    """Whether an account stacks above (income) or below (expense) zero."""
    INCOME = "income"
    EXPENSE = "expense"


class ExportFormat(str, Enum):
    CSV = "csv"
    PDF = "pdf"

    @property
    def extension(self) -> str:
        return self.value

    @property
    def media_type(self) -> str:
        return "text/csv; charset=utf-8" if self is ExportFormat.CSV else "application/pdf"


ZIP_MEDIA_TYPE = "application/zip"


def parse_amount(value: Any) -> Optional[float]:
    """Parse a backend amount. Blanks, non-finite and unparseable values become None."""
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        result = float(value)
    else:
        text = str(value).strip().replace(',', '')
        if not text:
            return None
        try:
            result = float(text)
        except ValueError:
            return None
    return result if math.isfinite(result) else None


def parse_code(value: Any) -> Optional[int]:
    """Parse a small integer classification code (fin_type, ct_rate, ...)."""
    if value is None or value == '' or isinstance(value, bool):
        return None
    try:
        return int(value)
    except (TypeError, ValueError):
        return None


def date_part(value: Union[str, date, None]) -> str:
    """Return the calendar-day part of a backend timestamp ('2024-03-15T09:00' -> '2024-03-15')."""
    if value is None:
        return ''
    if isinstance(value, (date, datetime)):
        return value.strftime('%Y-%m-%d')
    return str(value).split('T')[0]


# =============================================================================
# TRANSACTION RECORDS
# =============================================================================

@dataclass(frozen=True)
class PostingLine:
    """One side (debit or credit) of a record: account, amount and tax."""
    account: str = ""
    amount: Optional[float] = None
    tax: Optional[float] = None

    @property
    def is_postable(self) -> bool:
        return bool(self.account) and self.amount is not None and self.amount > 0

    @property
    def has_tax(self) -> bool:
        return self.tax is not None and self.tax > 0


@dataclass(frozen=True)
class IncomePosting:
    """Inbound record. The credit line carries the revenue account."""
    credit: PostingLine
    debit: Optional[PostingLine] = None

    direction = Direction.INCOME
    classification = Classification.INCOME

    @property
    def primary(self) -> PostingLine:
        return self.credit


@dataclass(frozen=True)
class ExpensePosting:
    """Outbound record. The debit line carries the expense account."""
    debit: PostingLine
    credit: Optional[PostingLine] = None

    direction = Direction.EXPENSE
    classification = Classification.EXPENSE

    @property
    def primary(self) -> PostingLine:
        return self.debit


Posting = Union[IncomePosting, ExpensePosting]


def _line_from(data: Dict[str, Any], side: str) -> Optional[PostingLine]:
    account = data.get(f'{side}_item') or ''
    amount = parse_amount(data.get(f'{side}_amount'))
    tax = parse_amount(data.get(f'{side}_ct'))
    if not account and amount is None and tax is None:
        return None
    return PostingLine(account=str(account), amount=amount, tax=tax)


@dataclass(frozen=True)
class TransactionRecord:
    """
    A bookkeeping entry as supplied by the record source.

    `posting` is None while the record is still pending classification.
    """
    transaction_date: Union[str, date, None]
    description: str = ""
    posting: Optional[Posting] = None
    fin_type: Optional[int] = None
    ct_rate: Optional[int] = None
    created_at: Optional[str] = None
    updated_at: Optional[str] = None
    record_id: Optional[str] = None

    @property
    def direction(self) -> Optional[Direction]:
        return self.posting.direction if self.posting is not None else None

    @property
    def debit_line(self) -> Optional[PostingLine]:
        return self.posting.debit if self.posting is not None else None

    @property
    def credit_line(self) -> Optional[PostingLine]:
        return self.posting.credit if self.posting is not None else None

    @property
    def date_text(self) -> str:
        return date_part(self.transaction_date)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "TransactionRecord":
        """
        Build a record from the backend's field names.

        Args:
            data: Dict with transaction_date, description, transaction_type,
                debit_item/amount/ct, credit_item/amount/ct, fin_type, ct_rate,
                created_at, updated_at, id

        Returns:
            TransactionRecord; an unknown transaction_type leaves it unclassified
        """
        direction = parse_code(data.get('transaction_type'))
        debit = _line_from(data, 'debit')
        credit = _line_from(data, 'credit')

        posting: Optional[Posting] = None
        if direction == Direction.INCOME:
            posting = IncomePosting(credit=credit or PostingLine(), debit=debit)
        elif direction == Direction.EXPENSE:
            posting = ExpensePosting(debit=debit or PostingLine(), credit=credit)

        record_id = data.get('id')
        return cls(
            transaction_date=data.get('transaction_date'),
            description=str(data.get('description') or ''),
            posting=posting,
            fin_type=parse_code(data.get('fin_type')),
            ct_rate=parse_code(data.get('ct_rate')),
            created_at=data.get('created_at'),
            updated_at=data.get('updated_at'),
            record_id=str(record_id) if record_id is not None else None,
        )

    def to_dict(self) -> Dict[str, Any]:
        debit = self.debit_line or PostingLine()
        credit = self.credit_line or PostingLine()
        return {
            'id': self.record_id,
            'transaction_date': self.date_text,
            'description': self.description,
            'transaction_type': int(self.direction) if self.direction else None,
            'fin_type': self.fin_type,
            'debit_item': debit.account,
            'debit_amount': debit.amount,
            'debit_ct': debit.tax,
            'credit_item': credit.account,
            'credit_amount': credit.amount,
            'credit_ct': credit.tax,
            'ct_rate': self.ct_rate,
            'created_at': self.created_at,
            'updated_at': self.updated_at,
        }


# =============================================================================
# GENERATED SUMMARIES (general ledger, trial balance)
# =============================================================================

@dataclass(frozen=True)
class LedgerEntry:
    date: str
    counter_account: str = ""
    memo: str = ""
    debit_amount: Optional[float] = None
    credit_amount: Optional[float] = None
    balance: float = 0.0


@dataclass(frozen=True)
class LedgerSummary:
    debit_total: float = 0.0
    credit_total: float = 0.0
    balance: float = 0.0


@dataclass(frozen=True)
class Ledger:
    """General-ledger page of one account."""
    account: str
    entries: Tuple[LedgerEntry, ...] = ()
    summary: LedgerSummary = field(default_factory=LedgerSummary)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Ledger":
        """Build from the backend payload (Japanese keys). A missing summary is recomputed."""
        entries = tuple(
            LedgerEntry(
                date=date_part(e.get('年月日')),
                counter_account=str(e.get('相手勘定科目') or ''),
                memo=str(e.get('摘要') or ''),
                debit_amount=parse_amount(e.get('借方金額')),
                credit_amount=parse_amount(e.get('貸方金額')),
                balance=parse_amount(e.get('残高')) or 0.0,
            )
            for e in data.get('entries', [])
        )
        raw_summary = data.get('summary')
        if raw_summary:
            summary = LedgerSummary(
                debit_total=parse_amount(raw_summary.get('借方合計')) or 0.0,
                credit_total=parse_amount(raw_summary.get('貸方合計')) or 0.0,
                balance=parse_amount(raw_summary.get('残高')) or 0.0,
            )
        else:
            summary = LedgerSummary(
                debit_total=sum(e.debit_amount or 0.0 for e in entries),
                credit_total=sum(e.credit_amount or 0.0 for e in entries),
                balance=entries[-1].balance if entries else 0.0,
            )
        return cls(account=str(data.get('勘定科目') or ''), entries=entries, summary=summary)


@dataclass(frozen=True)
class TrialBalanceEntry:
    account: str
    debit_total: float = 0.0
    credit_total: float = 0.0
    debit_balance: float = 0.0
    credit_balance: float = 0.0


@dataclass(frozen=True)
class TrialBalanceSummary:
    debit_total: float = 0.0
    credit_total: float = 0.0
    debit_balance: float = 0.0
    credit_balance: float = 0.0


@dataclass(frozen=True)
class TrialBalance:
    entries: Tuple[TrialBalanceEntry, ...] = ()
    summary: TrialBalanceSummary = field(default_factory=TrialBalanceSummary)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "TrialBalance":
        """Build from the backend payload (Japanese keys). A missing summary is recomputed."""
        entries = tuple(
            TrialBalanceEntry(
                account=str(e.get('勘定科目') or ''),
                debit_total=parse_amount(e.get('借方合計')) or 0.0,
                credit_total=parse_amount(e.get('貸方合計')) or 0.0,
                debit_balance=parse_amount(e.get('借方残高')) or 0.0,
                credit_balance=parse_amount(e.get('貸方残高')) or 0.0,
            )
            for e in data.get('entries', [])
        )
        raw_summary = data.get('summary')
        if raw_summary:
            summary = TrialBalanceSummary(
                debit_total=parse_amount(raw_summary.get('借方合計')) or 0.0,
                credit_total=parse_amount(raw_summary.get('貸方合計')) or 0.0,
                debit_balance=parse_amount(raw_summary.get('借方残高')) or 0.0,
                credit_balance=parse_amount(raw_summary.get('貸方残高')) or 0.0,
            )
        else:
            summary = TrialBalanceSummary(
                debit_total=sum(e.debit_total for e in entries),
                credit_total=sum(e.credit_total for e in entries),
                debit_balance=sum(e.debit_balance for e in entries),
                credit_balance=sum(e.credit_balance for e in entries),
            )
        return cls(entries=entries, summary=summary)


# =============================================================================
# AGGREGATION RESULTS
# =============================================================================

@dataclass(frozen=True)
class AccountSeries:
    name: str
    classification: Classification
    color: str


@dataclass(frozen=True)
class MonthlyBucket:
    """Signed amounts per account for one month (income > 0, expense < 0)."""
    month: str
    amounts: Dict[str, float]

    @property
    def income_total(self) -> float:
        return sum(v for v in self.amounts.values() if v > 0)

    @property
    def expense_total(self) -> float:
        return sum(-v for v in self.amounts.values() if v < 0)


@dataclass(frozen=True)
class MonthlySeries:
    buckets: List[MonthlyBucket] = field(default_factory=list)
    accounts: List[AccountSeries] = field(default_factory=list)

    @property
    def months(self) -> List[str]:
        return [b.month for b in self.buckets]

    def account(self, name: str) -> Optional[AccountSeries]:
        for acc in self.accounts:
            if acc.name == name:
                return acc
        return None

    def to_frame(self) -> pd.DataFrame:
        """Chart-ready frame: one row per month, one column per account (account order)."""
        columns = [a.name for a in self.accounts]
        if not self.buckets:
            return pd.DataFrame(columns=columns, index=pd.Index([], name='month'), dtype=float)
        return pd.DataFrame(
            [b.amounts for b in self.buckets],
            index=pd.Index(self.months, name='month'),
            columns=columns,
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            'monthly_data': [{'month': b.month, **b.amounts} for b in self.buckets],
            'accounts': [
                {'name': a.name, 'type': a.classification.value, 'color': a.color}
                for a in self.accounts
            ],
        }


@dataclass(frozen=True)
class TrendPoint:
    month: str
    absolute_value: float
    percent_of_class_total: float


@dataclass(frozen=True)
class MonthlyTotals:
    month: str
    income: float
    expense: float
    net: float


# =============================================================================
# OUTPUT ARTIFACTS
# =============================================================================

@dataclass(frozen=True)
class ReportDocument:
    """A rendered file handed back to the caller; nothing keeps a reference to it."""
    filename: str
    content: bytes
    media_type: str
