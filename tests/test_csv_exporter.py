"""
Unit tests for the delimited-text exporter and the report column layouts.
"""
import csv
import io

import pytest

from conftest import expense, income
from ledger_reports.common.models import Ledger, LedgerEntry, TransactionRecord
from ledger_reports.exporters.csv_exporter import BOM, DelimitedTextExporter, quote_cell, to_delimited_text
from ledger_reports.exporters.report_kinds import (
    JOURNAL_CSV_COLUMNS,
    JOURNAL_PDF_COLUMNS,
    LEDGER_COLUMNS,
    TRANSACTION_CSV_COLUMNS,
    TRIAL_BALANCE_COLUMNS,
    Column,
    ReportKind,
    ReportTable,
    build_filename,
    date_range_label,
    format_cell,
    journal_csv_table,
    ledger_table,
    transaction_csv_table,
    trial_balance_table,
)


def decode_lines(content):
    return content.decode("utf-8-sig").split("\n")


def parse_rows(content):
    return list(csv.reader(io.StringIO(content.decode("utf-8-sig"))))


# =============================================================================
# TEST: encoding and quoting
# =============================================================================

class TestEncoding:
    """Tests for BOM, quoting and line structure."""

    def test_starts_with_bom(self, sample_records):
        content = to_delimited_text(journal_csv_table(sample_records))
        assert content.startswith(b"\xef\xbb\xbf")
        assert content.decode("utf-8").startswith(BOM)

    def test_empty_journal_has_header_and_zero_totals(self):
        """Zero records: header row plus a totals row of zeros."""
        lines = decode_lines(to_delimited_text(journal_csv_table([])))
        assert lines == [
            "日付,備考,借方科目,借方金額,借方税額,貸方科目,貸方金額,貸方税額",
            "合計,,,0,0,,0,0",
        ]

    def test_description_always_quoted(self):
        record = income("2024-01-05", "Sales", 1000, description="Lunch")
        lines = decode_lines(to_delimited_text(journal_csv_table([record])))
        assert lines[1] == '2024-01-05,"Lunch",Cash,1000,,Sales,1000,'

    def test_internal_quotes_doubled(self):
        record = income("2024-01-05", "Sales", 10, description='say "hi"')
        lines = decode_lines(to_delimited_text(journal_csv_table([record])))
        assert '"say ""hi"""' in lines[1]

    @pytest.mark.parametrize("text,expected", [
        ("plain", "plain"),
        ("a,b", '"a,b"'),
        ('a"b', '"a""b"'),
        ("line\nbreak", '"line\nbreak"'),
        ("", ""),
    ])
    def test_quote_cell(self, text, expected):
        assert quote_cell(text) == expected

    def test_forced_quote_on_empty(self):
        assert quote_cell("", force=True) == '""'

    def test_row_width_mismatch_raises(self):
        table = ReportTable(columns=JOURNAL_CSV_COLUMNS, rows=[["2024-01-01"]])
        with pytest.raises(ValueError):
            DelimitedTextExporter().export(table)


# =============================================================================
# TEST: round trip
# =============================================================================

class TestRoundTrip:
    """Tests parsing exported files back with a standard CSV reader."""

    def test_row_count_and_width(self, sample_records):
        """Header + one line per record + totals, all the header's width."""
        rows = parse_rows(to_delimited_text(journal_csv_table(sample_records)))
        assert len(rows) == len(sample_records) + 2
        assert all(len(r) == len(JOURNAL_CSV_COLUMNS) for r in rows)

    def test_commas_in_description_survive(self, sample_records):
        rows = parse_rows(to_delimited_text(journal_csv_table(sample_records)))
        assert rows[2][1] == "Pens, paper"

    def test_journal_totals(self, sample_records):
        """Debit and credit totals sum every record's lines."""
        totals = parse_rows(to_delimited_text(journal_csv_table(sample_records)))[-1]
        assert totals[0] == "合計"
        assert totals[3] == "3500"   # debit amounts: 1000 cash + 500 supplies + 2000 cash
        assert totals[7] == "80"     # credit tax

    def test_transaction_list_columns(self, sample_records):
        rows = parse_rows(to_delimited_text(transaction_csv_table(sample_records)))
        assert rows[0] == [c.label for c in TRANSACTION_CSV_COLUMNS]
        assert rows[1][1] == "収入"
        assert rows[1][2] == "現金"
        assert rows[1][10] == "10%"
        assert rows[2][1] == "支出"


# =============================================================================
# TEST: amounts
# =============================================================================

class TestAmounts:
    """Tests for zero, missing and keep-zero amount cells."""

    def test_non_finite_amounts_blank(self):
        """NaN/inf strings from the backend export as empty cells and do not poison totals."""
        record = TransactionRecord.from_dict({
            "transaction_date": "2024-01-01",
            "transaction_type": 1,
            "debit_item": "Cash",
            "debit_amount": "inf",
            "credit_item": "Sales",
            "credit_amount": "NaN",
        })
        rows = parse_rows(to_delimited_text(journal_csv_table([record])))
        assert rows[1] == ["2024-01-01", "", "Cash", "", "", "Sales", "", ""]
        assert rows[-1] == ["合計", "", "", "0", "0", "", "0", "0"]

    def test_zero_and_none_blank_in_data_rows(self):
        record = expense("2024-01-05", "Rent", 0, tax=None)
        row = parse_rows(to_delimited_text(journal_csv_table([record])))[1]
        assert row[3] == ""
        assert row[4] == ""

    def test_ledger_balance_keeps_zero(self):
        ledger = Ledger(
            account="Cash",
            entries=(LedgerEntry(date="2024-01-01", memo="Opening", balance=0.0),),
        )
        rows = parse_rows(to_delimited_text(ledger_table(ledger)))
        assert rows[1][5] == "0"
        assert rows[1][3] == ""

    def test_ledger_totals_row(self, sample_ledger):
        rows = parse_rows(to_delimited_text(ledger_table(sample_ledger)))
        assert rows[0] == [c.label for c in LEDGER_COLUMNS]
        assert rows[-1] == ["合計", "", "", "300", "0", "300"]

    def test_trial_balance_total_label_in_account_column(self, sample_trial_balance):
        rows = parse_rows(to_delimited_text(trial_balance_table(sample_trial_balance)))
        assert rows[0] == [c.label for c in TRIAL_BALANCE_COLUMNS]
        assert rows[-1] == ["3000", "3500", "合計", "3500", "3000"]

    def test_fractional_amounts(self):
        column = Column("amount", numeric=True)
        assert format_cell(12.5, column) == "12.5"
        assert format_cell(1234567.0, column, grouped=True) == "1,234,567"
        assert format_cell(0, column, in_totals=True) == "0"


# =============================================================================
# TEST: layouts and naming
# =============================================================================

class TestLayouts:
    """Tests for column sets and file names."""

    @pytest.mark.parametrize("columns", [
        JOURNAL_PDF_COLUMNS, LEDGER_COLUMNS, TRIAL_BALANCE_COLUMNS,
    ])
    def test_pdf_widths_fill_page(self, columns):
        assert sum(c.width for c in columns) == pytest.approx(1.0)

    def test_journal_pdf_has_eleven_columns(self):
        assert len(JOURNAL_PDF_COLUMNS) == 11

    def test_filenames(self):
        assert build_filename(ReportKind.JOURNAL, "2024-01-01", "2024-01-31", "csv") == "仕訳帳_2024-01-01_2024-01-31.csv"
        assert build_filename(ReportKind.LEDGER, "2024-01-01", "2024-01-31", "pdf", account="売上高") == \
            "総勘定元帳_売上高_2024-01-01_2024-01-31.pdf"
        assert build_filename(ReportKind.TRIAL_BALANCE, "2024-01-01", "2024-12-31", "csv") == \
            "試算表_2024-01-01_2024-12-31.csv"

    def test_filename_path_separators_replaced(self):
        name = build_filename(ReportKind.LEDGER, "2024-01-01", "2024-01-31", "csv", account="A/B\\C")
        assert name == "総勘定元帳_A／B＼C_2024-01-01_2024-01-31.csv"
        assert "/" not in name and "\\" not in name

    def test_separator_does_not_collide_with_underscore(self):
        slash = build_filename(ReportKind.LEDGER, "2024-01-01", "2024-01-31", "csv", account="A/B")
        underscore = build_filename(ReportKind.LEDGER, "2024-01-01", "2024-01-31", "csv", account="A_B")
        assert slash != underscore

    def test_date_range_label(self):
        assert date_range_label("2024-01-01", "2024-01-31") == "2024-01-01 ~ 2024-01-31"
