"""
Shared fixtures: sample records, ledgers, a font loader backed by the
Vera font bundled with reportlab, and a PDF text reader.
"""
import io
from pathlib import Path

import pdfplumber
import pytest
import reportlab

from ledger_reports.common.models import (
    ExpensePosting,
    IncomePosting,
    Ledger,
    LedgerEntry,
    LedgerSummary,
    PostingLine,
    TransactionRecord,
    TrialBalance,
    TrialBalanceEntry,
    TrialBalanceSummary,
)
from ledger_reports.common.preferences import PreferenceStore
from ledger_reports.exporters.fonts import FontLoader

VERA_PATH = Path(reportlab.__file__).parent / "fonts" / "Vera.ttf"


def income(date, account, amount, tax=None, description="", record_id=None):
    """Inbound record: cash debited, `account` credited."""
    return TransactionRecord(
        transaction_date=date,
        description=description,
        posting=IncomePosting(
            credit=PostingLine(account=account, amount=amount, tax=tax),
            debit=PostingLine(account="Cash", amount=amount),
        ),
        fin_type=1,
        ct_rate=2,
        record_id=record_id,
    )


def expense(date, account, amount, tax=None, description="", record_id=None):
    """Outbound record: `account` debited, cash credited."""
    return TransactionRecord(
        transaction_date=date,
        description=description,
        posting=ExpensePosting(
            debit=PostingLine(account=account, amount=amount, tax=tax),
            credit=PostingLine(account="Cash", amount=amount),
        ),
        fin_type=2,
        ct_rate=2,
        record_id=record_id,
    )


def make_ledger(account, rows=3):
    entries = tuple(
        LedgerEntry(
            date=f"2024-01-{i + 1:02d}",
            counter_account="Cash",
            memo=f"Entry {i + 1}",
            debit_amount=100.0,
            credit_amount=None,
            balance=100.0 * (i + 1),
        )
        for i in range(rows)
    )
    summary = LedgerSummary(debit_total=100.0 * rows, credit_total=0.0, balance=100.0 * rows)
    return Ledger(account=account, entries=entries, summary=summary)


@pytest.fixture
def sample_records():
    return [
        income("2024-03-05", "Sales", 1000, tax=80, description="Invoice 1", record_id="r1"),
        expense("2024-03-10", "Supplies", 500, description="Pens, paper", record_id="r2"),
        income("2024-05-02", "Sales", 2000, description="Invoice 2", record_id="r3"),
    ]


@pytest.fixture
def sample_ledger():
    return make_ledger("Sales", rows=3)


@pytest.fixture
def sample_trial_balance():
    entries = (
        TrialBalanceEntry(account="Cash", debit_total=3000.0, credit_total=500.0, debit_balance=2500.0),
        TrialBalanceEntry(account="Sales", debit_total=0.0, credit_total=3000.0, credit_balance=3000.0),
        TrialBalanceEntry(account="Supplies", debit_total=500.0, credit_total=0.0, debit_balance=500.0),
    )
    summary = TrialBalanceSummary(debit_total=3500.0, credit_total=3500.0, debit_balance=3000.0, credit_balance=3000.0)
    return TrialBalance(entries=entries, summary=summary)


@pytest.fixture
def font_bytes():
    return VERA_PATH.read_bytes()


@pytest.fixture
def font_fetcher(font_bytes):
    """Async fetcher serving Vera for every font file; records requested names."""
    calls = []

    async def fetch(filename):
        calls.append(filename)
        return font_bytes

    fetch.calls = calls
    return fetch


@pytest.fixture
def font_loader(font_fetcher):
    return FontLoader(fetcher=font_fetcher)


@pytest.fixture
def preferences(tmp_path):
    return PreferenceStore(tmp_path / "preferences.json")


@pytest.fixture
def pdf_pages_text():
    """Return a function extracting the text of every page of a PDF blob."""
    def read(content):
        with pdfplumber.open(io.BytesIO(content)) as pdf:
            return [page.extract_text() or "" for page in pdf.pages]
    return read
