# Exporters
from .archive import bundle_documents, bundle_many
from .csv_exporter import DelimitedTextExporter, to_delimited_text
from .fonts import FontLoader, get_font_loader
from .pdf_renderer import DocumentMeta, PaginatedDocumentExporter, layout_pages, stamp_footers
from .report_kinds import ReportKind, ReportTable
from .service import ReportExportService

__all__ = [
    'bundle_documents',
    'bundle_many',
    'DelimitedTextExporter',
    'to_delimited_text',
    'FontLoader',
    'get_font_loader',
    'DocumentMeta',
    'PaginatedDocumentExporter',
    'layout_pages',
    'stamp_footers',
    'ReportKind',
    'ReportTable',
    'ReportExportService',
]
