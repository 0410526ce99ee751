"""
Paginated-document exporter (landscape A4 PDF).

Rendering runs in two phases so the footer can print "Page X / N" with the
real N on every page:

1. layout_pages() splits the table into PageContent objects; the page count
   is unknown while this runs.
2. stamp_footers() fixes a FooterStamp on every page once the count is known.

Only stamped pages are drawn onto the canvas.
"""
from dataclasses import dataclass, replace
from io import BytesIO
from typing import Dict, List, Optional, Sequence, Tuple
from xml.sax.saxutils import escape

from reportlab.lib import colors
from reportlab.lib.enums import TA_CENTER, TA_LEFT, TA_RIGHT
from reportlab.lib.pagesizes import A4, landscape
from reportlab.lib.styles import ParagraphStyle
from reportlab.lib.units import mm
from reportlab.pdfgen import canvas
from reportlab.platypus import Paragraph, Table, TableStyle

from ledger_reports.common.exceptions import DocumentRenderError
from ledger_reports.common.logging_config import get_logger
from ledger_reports.exporters.fonts import FontBundle, FontLoader, get_font_loader
from ledger_reports.exporters.report_kinds import Column, ReportTable, format_cell

logger = get_logger(__name__)

PAGE_SIZE = landscape(A4)
PAGE_WIDTH, PAGE_HEIGHT = PAGE_SIZE
MARGIN = 14 * mm
USABLE_WIDTH = PAGE_WIDTH - 2 * MARGIN

# Distances from the top edge
FIRST_PAGE_TITLE_Y = 18 * mm
FIRST_PAGE_RANGE_Y = 26 * mm
FIRST_PAGE_ORG_Y = 34 * mm
FIRST_PAGE_TABLE_TOP = 40 * mm
LATER_PAGE_HEADER_Y = 12 * mm
LATER_PAGE_TABLE_TOP = 18 * mm

# Distances from the bottom edge
FOOTER_Y = 10 * mm
TABLE_BOTTOM = 18 * mm

COLORS = {
    'header': colors.Color(66 / 255, 139 / 255, 202 / 255),
    'header_text': colors.white,
    'grid': colors.HexColor('#c8c8c8'),
    'totals': colors.HexColor('#f0f0f0'),
    'text': colors.black,
    'muted': colors.HexColor('#505050'),
}

_ALIGNMENTS = {'LEFT': TA_LEFT, 'CENTER': TA_CENTER, 'RIGHT': TA_RIGHT}


@dataclass(frozen=True)
class DocumentMeta:
    title: str
    date_range_label: str
    organization_label: str = ""


@dataclass(frozen=True)
class FooterStamp:
    page: int
    total: int
    organization_label: str = ""

    @property
    def text(self) -> str:
        return f"Page {self.page} / {self.total}"


@dataclass(frozen=True)
class PageContent:
    """One laid-out page: its slice of the table and, after phase 2, its footer."""
    number: int
    table: Table
    height: float
    footer: Optional[FooterStamp] = None

    @property
    def is_first(self) -> bool:
        return self.number == 1


def available_height(first_page: bool) -> float:
    top = FIRST_PAGE_TABLE_TOP if first_page else LATER_PAGE_TABLE_TOP
    return PAGE_HEIGHT - top - TABLE_BOTTOM


def column_widths(columns: Sequence[Column]) -> List[float]:
    """Scale the width fractions so the table spans the usable width exactly."""
    total = sum(c.width for c in columns)
    if total <= 0:
        return [USABLE_WIDTH / len(columns)] * len(columns)
    return [USABLE_WIDTH * c.width / total for c in columns]


class _CellStyles:
    """ParagraphStyle cache keyed by font, alignment and role."""

    def __init__(self, fonts: FontBundle, font_size: float):
        self.fonts = fonts
        self.font_size = font_size
        self._styles: Dict[Tuple[str, str, bool], ParagraphStyle] = {}

    def get(self, font_name: str, align: str, header: bool = False) -> ParagraphStyle:
        key = (font_name, align, header)
        if key not in self._styles:
            self._styles[key] = ParagraphStyle(
                name=f"Cell-{font_name}-{align}-{'h' if header else 'd'}",
                fontName=font_name,
                fontSize=self.font_size,
                leading=self.font_size * 1.25,
                alignment=TA_CENTER if header else _ALIGNMENTS.get(align, TA_LEFT),
                textColor=COLORS['header_text'] if header else COLORS['text'],
                wordWrap='CJK',
            )
        return self._styles[key]


def _paragraph(text: str, style: ParagraphStyle) -> List[Paragraph]:
    # list cells so a row taller than the page can be split inside the cell
    return [Paragraph(escape(text).replace('\n', '<br/>'), style)]


def build_table(table: ReportTable, fonts: FontBundle) -> Table:
    """
    Convert a ReportTable into a reportlab Table with the header row repeated.

    Free-text cells of data rows use the secondary font; every other cell,
    including the header and totals rows, uses the primary font.
    """
    styles = _CellStyles(fonts, table.font_size)
    columns = table.columns

    data = [[_paragraph(c.label, styles.get(fonts.primary_name, c.align, header=True)) for c in columns]]

    for row in table.rows:
        if len(row) != len(columns):
            raise DocumentRenderError(f"Row has {len(row)} cells, expected {len(columns)}")
        cells = []
        for value, column in zip(row, columns):
            font = fonts.secondary_name if column.free_text else fonts.primary_name
            text = format_cell(value, column, grouped=True)
            cells.append(_paragraph(text, styles.get(font, column.align)))
        data.append(cells)

    if table.totals is not None:
        data.append([
            _paragraph(format_cell(value, column, in_totals=True, grouped=True),
                       styles.get(fonts.primary_name, column.align))
            for value, column in zip(table.totals, columns)
        ])

    pad = table.cell_padding
    commands = [
        ('BACKGROUND', (0, 0), (-1, 0), COLORS['header']),
        ('GRID', (0, 0), (-1, -1), 0.25, COLORS['grid']),
        ('VALIGN', (0, 0), (-1, -1), 'MIDDLE'),
        ('LEFTPADDING', (0, 0), (-1, -1), pad),
        ('RIGHTPADDING', (0, 0), (-1, -1), pad),
        ('TOPPADDING', (0, 0), (-1, -1), pad),
        ('BOTTOMPADDING', (0, 0), (-1, -1), pad),
    ]
    if table.totals is not None:
        # absolute index so the style follows the row across page splits
        last = len(data) - 1
        commands.append(('BACKGROUND', (0, last), (-1, last), COLORS['totals']))

    return Table(
        data,
        colWidths=column_widths(columns),
        repeatRows=1,
        splitInRow=1,
        style=TableStyle(commands),
    )


def layout_pages(table: ReportTable, fonts: FontBundle) -> List[PageContent]:
    """
    Phase 1: split the table across pages.

    Page 1 has less room than later pages because of its taller header.

    A row taller than the page is split inside its cells and continues on
    the next page.

    Raises:
        DocumentRenderError: if no progress can be made on a page
    """
    remaining = build_table(table, fonts)
    pages: List[PageContent] = []
    number = 1

    while remaining is not None:
        avail = available_height(first_page=number == 1)
        _, height = remaining.wrap(USABLE_WIDTH, avail)
        if height <= avail:
            pages.append(PageContent(number=number, table=remaining, height=height))
            break

        parts = remaining.split(USABLE_WIDTH, avail)
        if not parts:
            raise DocumentRenderError(f"Table row too tall for page {number}")
        if len(parts) == 1:
            _, height = parts[0].wrap(USABLE_WIDTH, avail)
            pages.append(PageContent(number=number, table=parts[0], height=height))
            break

        head, remaining = parts[0], parts[1]
        _, head_height = head.wrap(USABLE_WIDTH, avail)
        pages.append(PageContent(number=number, table=head, height=head_height))
        number += 1

    return pages


def stamp_footers(pages: Sequence[PageContent], organization_label: str = "") -> List[PageContent]:
    """Phase 2: fix "Page X / N" on every page now that N is known."""
    total = len(pages)
    return [
        replace(page, footer=FooterStamp(page=page.number, total=total, organization_label=organization_label))
        for page in pages
    ]


class PaginatedDocumentExporter:
    """Renders a ReportTable into a landscape A4 PDF with repeating headers and footers."""

    def __init__(self, font_loader: Optional[FontLoader] = None):
        self.font_loader = font_loader or get_font_loader()

    async def render(self, table: ReportTable, meta: DocumentMeta) -> bytes:
        """
        Render the document.

        Args:
            table: Rows and fixed columns of the report
            meta: Title, date range label and organization label

        Returns:
            bytes of the PDF file

        Raises:
            ResourceLoadError: if the fonts cannot be fetched
            DocumentRenderError: if the table cannot be laid out or drawn
        """
        fonts = await self.font_loader.load()

        try:
            pages = layout_pages(table, fonts)
            pages = stamp_footers(pages, meta.organization_label)
            content = self._draw(pages, meta, fonts)
        except DocumentRenderError:
            raise
        except Exception as e:
            logger.error(f"PDF rendering failed: {e}", title=meta.title)
            raise DocumentRenderError(f"PDF rendering failed: {e}") from e

        logger.info("PDF rendered", title=meta.title, pages=len(pages), rows=len(table.rows))
        return content

    def _draw(self, pages: Sequence[PageContent], meta: DocumentMeta, fonts: FontBundle) -> bytes:
        buffer = BytesIO()
        c = canvas.Canvas(buffer, pagesize=PAGE_SIZE)
        c.setTitle(meta.title)

        for page in pages:
            if page.footer is None:
                raise DocumentRenderError(f"Page {page.number} drawn before footers were stamped")
            self._draw_header(c, page, meta, fonts)
            top = FIRST_PAGE_TABLE_TOP if page.is_first else LATER_PAGE_TABLE_TOP
            page.table.drawOn(c, MARGIN, PAGE_HEIGHT - top - page.height)
            self._draw_footer(c, page.footer, fonts)
            c.showPage()

        c.save()
        return buffer.getvalue()

    def _draw_header(self, c: canvas.Canvas, page: PageContent, meta: DocumentMeta, fonts: FontBundle):
        c.saveState()
        c.setFillColor(COLORS['text'])
        if page.is_first:
            c.setFont(fonts.primary_name, 18)
            c.drawCentredString(PAGE_WIDTH / 2, PAGE_HEIGHT - FIRST_PAGE_TITLE_Y, meta.title)
            c.setFont(fonts.primary_name, 11)
            c.drawCentredString(PAGE_WIDTH / 2, PAGE_HEIGHT - FIRST_PAGE_RANGE_Y, meta.date_range_label)
            if meta.organization_label:
                c.setFont(fonts.primary_name, 10)
                c.drawRightString(PAGE_WIDTH - MARGIN, PAGE_HEIGHT - FIRST_PAGE_ORG_Y, meta.organization_label)
        else:
            c.setFont(fonts.primary_name, 10)
            c.drawString(MARGIN, PAGE_HEIGHT - LATER_PAGE_HEADER_Y, f"{meta.title} ({meta.date_range_label})")
            if meta.organization_label:
                c.drawRightString(PAGE_WIDTH - MARGIN, PAGE_HEIGHT - LATER_PAGE_HEADER_Y, meta.organization_label)
        c.restoreState()

    def _draw_footer(self, c: canvas.Canvas, stamp: FooterStamp, fonts: FontBundle):
        c.saveState()
        c.setFont(fonts.primary_name, 9)
        c.setFillColor(COLORS['muted'])
        if stamp.organization_label:
            c.drawString(MARGIN, FOOTER_Y, stamp.organization_label)
        c.drawRightString(PAGE_WIDTH - MARGIN, FOOTER_Y, stamp.text)
        c.restoreState()
