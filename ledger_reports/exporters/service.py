"""
Report export orchestration.

Turns journal records, ledgers and trial balances into downloadable
ReportDocuments in the requested format, including the "export all
accounts" bulk path that renders ledgers one by one into a ZIP.
"""
from typing import Callable, Optional, Sequence, Union

from ledger_reports.common.exceptions import UnsupportedFormatError
from ledger_reports.common.logging_config import get_logger
from ledger_reports.common.models import (
    ExportFormat,
    Ledger,
    ReportDocument,
    TransactionRecord,
    TrialBalance,
)
from ledger_reports.common.preferences import PreferenceStore
from ledger_reports.exporters.archive import bundle_documents
from ledger_reports.exporters.csv_exporter import DelimitedTextExporter
from ledger_reports.exporters.pdf_renderer import DocumentMeta, PaginatedDocumentExporter
from ledger_reports.exporters.report_kinds import (
    ReportKind,
    ReportTable,
    build_filename,
    date_range_label,
    journal_csv_table,
    journal_pdf_table,
    ledger_table,
    transaction_csv_table,
    trial_balance_table,
)

logger = get_logger(__name__)


def coerce_format(fmt: Union[str, ExportFormat]) -> ExportFormat:
    if isinstance(fmt, ExportFormat):
        return fmt
    try:
        return ExportFormat(str(fmt).lower())
    except ValueError:
        raise UnsupportedFormatError(f"Unsupported export format: {fmt}")


def ledger_title(account: str) -> str:
    return f"{ReportKind.LEDGER.label} - {account}"


class ReportExportService:
    """
    Entry point for every export.

    Args:
        pdf_exporter: Renderer for PDF output (defaults to one bound to the
            process-wide font loader)
        preferences: Store that remembers the organization label of the
            last successful PDF export
    """

    def __init__(self, pdf_exporter: Optional[PaginatedDocumentExporter] = None,
                 preferences: Optional[PreferenceStore] = None):
        self.pdf_exporter = pdf_exporter or PaginatedDocumentExporter()
        self.csv_exporter = DelimitedTextExporter()
        self.preferences = preferences or PreferenceStore()

    async def export_journal(self, records: Sequence[TransactionRecord], fmt: Union[str, ExportFormat],
                             date_from: str, date_to: str, organization_label: str = "") -> ReportDocument:
        """Journal book (仕訳帳): 8 columns in CSV, 11 in PDF, totals row in both."""
        fmt = coerce_format(fmt)
        build = journal_pdf_table if fmt is ExportFormat.PDF else journal_csv_table
        document = await self._render(
            build(records), fmt,
            DocumentMeta(ReportKind.JOURNAL.label, date_range_label(date_from, date_to), organization_label),
            build_filename(ReportKind.JOURNAL, date_from, date_to, fmt.extension),
        )
        self._remember_label(fmt, organization_label)
        return document

    async def export_transactions(self, records: Sequence[TransactionRecord], date_from: str, date_to: str,
                                  fmt: Union[str, ExportFormat] = ExportFormat.CSV) -> ReportDocument:
        """
        Full transaction list with every field, for re-import into spreadsheets.

        Raises:
            UnsupportedFormatError: for anything but CSV
        """
        fmt = coerce_format(fmt)
        if fmt is not ExportFormat.CSV:
            raise UnsupportedFormatError("Transaction list export is only available as CSV")
        return await self._render(
            transaction_csv_table(records), fmt,
            DocumentMeta(ReportKind.TRANSACTIONS.label, date_range_label(date_from, date_to)),
            build_filename(ReportKind.TRANSACTIONS, date_from, date_to, fmt.extension),
        )

    async def export_ledger(self, ledger: Ledger, fmt: Union[str, ExportFormat],
                            date_from: str, date_to: str, organization_label: str = "") -> ReportDocument:
        """General ledger (総勘定元帳) of one account."""
        fmt = coerce_format(fmt)
        document = await self._render_ledger(ledger, fmt, date_from, date_to, organization_label)
        self._remember_label(fmt, organization_label)
        return document

    async def export_all_ledgers(self, ledgers: Sequence[Ledger], fmt: Union[str, ExportFormat],
                                 date_from: str, date_to: str, organization_label: str = "",
                                 on_progress: Optional[Callable[[int, int], None]] = None) -> ReportDocument:
        """
        Render every ledger and bundle the results into one ZIP.

        Documents are rendered strictly one after another; document N+1 starts
        only when N has completed. A failure aborts the whole bundle.

        Args:
            on_progress: Called with (completed, total) after each document
        """
        fmt = coerce_format(fmt)
        total = len(ledgers)
        documents = []
        for index, ledger in enumerate(ledgers, start=1):
            documents.append(await self._render_ledger(ledger, fmt, date_from, date_to, organization_label))
            logger.debug("Ledger rendered", account=ledger.account, done=index, total=total)
            if on_progress:
                on_progress(index, total)

        archive_name = build_filename(ReportKind.LEDGER, date_from, date_to, 'zip')
        archive = await bundle_documents(documents, archive_name)
        self._remember_label(fmt, organization_label)
        logger.info("Ledgers exported", format=fmt.value, documents=total, filename=archive_name)
        return archive

    async def export_trial_balance(self, trial_balance: TrialBalance, fmt: Union[str, ExportFormat],
                                   date_from: str, date_to: str, organization_label: str = "") -> ReportDocument:
        """Trial balance (試算表)."""
        fmt = coerce_format(fmt)
        document = await self._render(
            trial_balance_table(trial_balance), fmt,
            DocumentMeta(ReportKind.TRIAL_BALANCE.label, date_range_label(date_from, date_to), organization_label),
            build_filename(ReportKind.TRIAL_BALANCE, date_from, date_to, fmt.extension),
        )
        self._remember_label(fmt, organization_label)
        return document

    async def _render_ledger(self, ledger: Ledger, fmt: ExportFormat, date_from: str, date_to: str,
                             organization_label: str) -> ReportDocument:
        return await self._render(
            ledger_table(ledger), fmt,
            DocumentMeta(ledger_title(ledger.account), date_range_label(date_from, date_to), organization_label),
            build_filename(ReportKind.LEDGER, date_from, date_to, fmt.extension, account=ledger.account),
        )

    async def _render(self, table: ReportTable, fmt: ExportFormat, meta: DocumentMeta,
                      filename: str) -> ReportDocument:
        if fmt is ExportFormat.PDF:
            content = await self.pdf_exporter.render(table, meta)
        else:
            content = self.csv_exporter.export(table)
        logger.info("Report exported", filename=filename, format=fmt.value, rows=len(table.rows), size=len(content))
        return ReportDocument(filename=filename, content=content, media_type=fmt.media_type)

    def _remember_label(self, fmt: ExportFormat, organization_label: str):
        if fmt is ExportFormat.PDF:
            self.preferences.remember_organization_label(organization_label)
