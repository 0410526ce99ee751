"""
Report kinds and their fixed column layouts.

Each report kind documents its header set once here; exporters never derive
headers from data. Widths are fractions of the usable page width so every
table fills the page in the PDF renderer.
"""
from dataclasses import dataclass
from enum import Enum
from typing import Any, Iterable, List, Optional, Sequence, Tuple

from ledger_reports.common.models import (
    Ledger,
    PostingLine,
    TransactionRecord,
    TrialBalance,
    date_part,
)


class ReportKind(str, Enum):
    JOURNAL = "journal"
    TRANSACTIONS = "transactions"
    LEDGER = "ledger"
    TRIAL_BALANCE = "trial_balance"

    @property
    def label(self) -> str:
        return REPORT_LABELS[self]


REPORT_LABELS = {
    ReportKind.JOURNAL: '仕訳帳',
    ReportKind.TRANSACTIONS: '仕訳帳',
    ReportKind.LEDGER: '総勘定元帳',
    ReportKind.TRIAL_BALANCE: '試算表',
}

TOTAL_LABEL = '合計'

TRANSACTION_TYPE_LABELS = {1: '収入', 2: '支出'}

FIN_TYPE_LABELS = {
    1: '現金',
    2: '銀行振込/デビット',
    3: '電子マネー/QR決済',
    4: '個人クレジットカード',
    5: '法人クレジットカード',
}

# Narrow variant for the journal PDF column
FIN_TYPE_SHORT_LABELS = {1: '現金', 2: '銀行', 3: '電子', 4: 'クレカ', 5: '他'}

CT_RATE_LABELS = {0: '非課税', 1: '8%', 2: '10%', 3: '混合', 4: 'その他'}


@dataclass(frozen=True)
class Column:
    """
    One table column.

    Attributes:
        label: Header text
        width: Fraction of the usable page width (PDF only)
        align: LEFT, CENTER or RIGHT (PDF only)
        numeric: Amount column; formatted and blanked when zero/None
        free_text: Description column; always quoted in CSV, secondary font in PDF
        keep_zero: Write zero instead of blank in CSV data rows (running balances)
    """
    label: str
    width: float = 0.0
    align: str = 'LEFT'
    numeric: bool = False
    free_text: bool = False
    keep_zero: bool = False


@dataclass(frozen=True)
class ReportTable:
    """Rows of raw cell values laid against a fixed column set, plus an optional totals row."""
    columns: Tuple[Column, ...]
    rows: List[List[Any]]
    totals: Optional[List[Any]] = None
    font_size: float = 9
    cell_padding: float = 2.0

    @property
    def header_labels(self) -> List[str]:
        return [c.label for c in self.columns]


def _amount(label: str, width: float = 0.0, keep_zero: bool = False) -> Column:
    return Column(label, width=width, align='RIGHT', numeric=True, keep_zero=keep_zero)


# =============================================================================
# COLUMN SETS
# =============================================================================

JOURNAL_CSV_COLUMNS = (
    Column('日付'),
    Column('備考', free_text=True),
    Column('借方科目'),
    _amount('借方金額'),
    _amount('借方税額'),
    Column('貸方科目'),
    _amount('貸方金額'),
    _amount('貸方税額'),
)

JOURNAL_PDF_COLUMNS = (
    Column('日付', width=0.085),
    Column('種類', width=0.05),
    Column('決済', width=0.06),
    Column('備考', width=0.23, free_text=True),
    Column('借方科目', width=0.11),
    _amount('借方金額', width=0.085),
    _amount('借方税', width=0.065),
    Column('貸方科目', width=0.11),
    _amount('貸方金額', width=0.085),
    _amount('貸方税', width=0.065),
    Column('税率', width=0.055),
)

TRANSACTION_CSV_COLUMNS = (
    Column('日付'),
    Column('種類'),
    Column('決済方法'),
    Column('備考', free_text=True),
    Column('借方科目'),
    _amount('借方金額'),
    _amount('借方税額'),
    Column('貸方科目'),
    _amount('貸方金額'),
    _amount('貸方税額'),
    Column('税率'),
    Column('記帳日時'),
    Column('更新日時'),
)

LEDGER_COLUMNS = (
    Column('日付', width=0.11),
    Column('相手勘定科目', width=0.16),
    Column('摘要', width=0.37, free_text=True),
    _amount('借方金額', width=0.12),
    _amount('貸方金額', width=0.12),
    _amount('残高', width=0.12, keep_zero=True),
)

TRIAL_BALANCE_COLUMNS = (
    _amount('借方残高', width=0.18),
    _amount('借方合計', width=0.18),
    Column('勘定科目', width=0.28, align='CENTER'),
    _amount('貸方合計', width=0.18),
    _amount('貸方残高', width=0.18),
)


# =============================================================================
# ROW BUILDERS
# =============================================================================

def _sum(values: Iterable[Optional[float]]) -> float:
    return sum(v or 0.0 for v in values)


def _line(line: Optional[PostingLine]) -> PostingLine:
    return line or PostingLine()


def _journal_totals(records: Sequence[TransactionRecord], width: int, slots: dict) -> List[Any]:
    totals: List[Any] = [''] * width
    totals[0] = TOTAL_LABEL
    debits = [_line(r.debit_line) for r in records]
    credits = [_line(r.credit_line) for r in records]
    totals[slots['debit_amount']] = _sum(d.amount for d in debits)
    totals[slots['debit_tax']] = _sum(d.tax for d in debits)
    totals[slots['credit_amount']] = _sum(c.amount for c in credits)
    totals[slots['credit_tax']] = _sum(c.tax for c in credits)
    return totals


def journal_csv_table(records: Sequence[TransactionRecord]) -> ReportTable:
    rows = []
    for r in records:
        debit, credit = _line(r.debit_line), _line(r.credit_line)
        rows.append([
            r.date_text,
            r.description,
            debit.account,
            debit.amount,
            debit.tax,
            credit.account,
            credit.amount,
            credit.tax,
        ])
    totals = _journal_totals(
        records, len(JOURNAL_CSV_COLUMNS),
        {'debit_amount': 3, 'debit_tax': 4, 'credit_amount': 6, 'credit_tax': 7},
    )
    return ReportTable(columns=JOURNAL_CSV_COLUMNS, rows=rows, totals=totals)


def journal_pdf_table(records: Sequence[TransactionRecord]) -> ReportTable:
    rows = []
    for r in records:
        debit, credit = _line(r.debit_line), _line(r.credit_line)
        rows.append([
            r.date_text,
            TRANSACTION_TYPE_LABELS.get(int(r.direction), '') if r.direction else '',
            FIN_TYPE_SHORT_LABELS.get(r.fin_type, '') if r.fin_type else '',
            r.description,
            debit.account,
            debit.amount,
            debit.tax,
            credit.account,
            credit.amount,
            credit.tax,
            CT_RATE_LABELS.get(r.ct_rate, '') if r.ct_rate is not None else '',
        ])
    totals = _journal_totals(
        records, len(JOURNAL_PDF_COLUMNS),
        {'debit_amount': 5, 'debit_tax': 6, 'credit_amount': 8, 'credit_tax': 9},
    )
    return ReportTable(columns=JOURNAL_PDF_COLUMNS, rows=rows, totals=totals, font_size=9, cell_padding=2.0)


def transaction_csv_table(records: Sequence[TransactionRecord]) -> ReportTable:
    rows = []
    for r in records:
        debit, credit = _line(r.debit_line), _line(r.credit_line)
        rows.append([
            r.date_text,
            TRANSACTION_TYPE_LABELS.get(int(r.direction), '') if r.direction else '',
            FIN_TYPE_LABELS.get(r.fin_type, '') if r.fin_type else '',
            r.description,
            debit.account,
            debit.amount,
            debit.tax,
            credit.account,
            credit.amount,
            credit.tax,
            CT_RATE_LABELS.get(r.ct_rate, '') if r.ct_rate is not None else '',
            date_part(r.created_at),
            date_part(r.updated_at),
        ])
    totals = _journal_totals(
        records, len(TRANSACTION_CSV_COLUMNS),
        {'debit_amount': 5, 'debit_tax': 6, 'credit_amount': 8, 'credit_tax': 9},
    )
    return ReportTable(columns=TRANSACTION_CSV_COLUMNS, rows=rows, totals=totals)


def ledger_table(ledger: Ledger) -> ReportTable:
    rows = [
        [e.date, e.counter_account, e.memo, e.debit_amount, e.credit_amount, e.balance]
        for e in ledger.entries
    ]
    s = ledger.summary
    totals = [TOTAL_LABEL, '', '', s.debit_total, s.credit_total, s.balance]
    return ReportTable(columns=LEDGER_COLUMNS, rows=rows, totals=totals, font_size=10, cell_padding=2.5)


def trial_balance_table(trial_balance: TrialBalance) -> ReportTable:
    rows = [
        [e.debit_balance, e.debit_total, e.account, e.credit_total, e.credit_balance]
        for e in trial_balance.entries
    ]
    s = trial_balance.summary
    totals = [s.debit_balance, s.debit_total, TOTAL_LABEL, s.credit_total, s.credit_balance]
    return ReportTable(columns=TRIAL_BALANCE_COLUMNS, rows=rows, totals=totals, font_size=11, cell_padding=3.0)


# =============================================================================
# FORMATTING
# =============================================================================

def format_plain(value: float) -> str:
    """Ungrouped number for CSV: 1000, 12.5."""
    value = float(value)
    if value.is_integer():
        return str(int(value))
    return f"{value:.2f}".rstrip('0').rstrip('.')


def format_grouped(value: float) -> str:
    """Thousands-grouped number without currency symbol: 1,234,567."""
    value = float(value)
    if value.is_integer():
        return f"{int(value):,}"
    return f"{value:,.2f}".rstrip('0').rstrip('.')


def format_cell(value: Any, column: Column, in_totals: bool = False,
                grouped: bool = False, honor_keep_zero: bool = False) -> str:
    """
    Render one raw cell value.

    Amounts that are None or zero render empty, except in the totals row
    (zero -> '0') and, when honor_keep_zero is set, in keep_zero columns.
    """
    if value is None:
        return ''
    if column.numeric and isinstance(value, (int, float)):
        if value == 0 and not in_totals and not (honor_keep_zero and column.keep_zero):
            return ''
        return format_grouped(value) if grouped else format_plain(value)
    return str(value)


# =============================================================================
# NAMING
# =============================================================================

def date_range_label(date_from: str, date_to: str) -> str:
    return f"{date_from} ~ {date_to}"


# full-width look-alikes, so "A/B" and "A_B" stay distinct entry names
_SEPARATOR_SUBSTITUTES = str.maketrans({'/': '\uff0f', '\\': '\uff3c'})


def _safe_part(part: str) -> str:
    return str(part).translate(_SEPARATOR_SUBSTITUTES).strip()


def build_filename(kind: ReportKind, date_from: str, date_to: str, extension: str,
                   account: Optional[str] = None) -> str:
    """
    Build `<kind label>[_<account>]_<from>_<to>.<ext>`.

    Path separators in the parts are replaced so the name stays a single
    archive entry.
    """
    parts = [kind.label]
    if account:
        parts.append(_safe_part(account))
    parts.extend([_safe_part(date_from), _safe_part(date_to)])
    return "_".join(parts) + f".{extension}"
