# Shared models, configuration, logging and errors
from .exceptions import (
    ArchiveBundleError,
    DocumentRenderError,
    ReportExportError,
    ResourceLoadError,
    UnsupportedFormatError,
)
from .models import (
    AccountSeries,
    Classification,
    Direction,
    ExpensePosting,
    ExportFormat,
    IncomePosting,
    Ledger,
    MonthlyBucket,
    MonthlySeries,
    PostingLine,
    ReportDocument,
    TransactionRecord,
    TrialBalance,
)

__all__ = [
    'ArchiveBundleError',
    'DocumentRenderError',
    'ReportExportError',
    'ResourceLoadError',
    'UnsupportedFormatError',
    'AccountSeries',
    'Classification',
    'Direction',
    'ExpensePosting',
    'ExportFormat',
    'IncomePosting',
    'Ledger',
    'MonthlyBucket',
    'MonthlySeries',
    'PostingLine',
    'ReportDocument',
    'TransactionRecord',
    'TrialBalance',
]
