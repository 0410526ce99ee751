"""
Delimited-text exporter (CSV for spreadsheet tools).
"""
from typing import Any, List, Sequence

from ledger_reports.common.logging_config import get_logger
from ledger_reports.exporters.report_kinds import Column, ReportTable, format_cell

logger = get_logger(__name__)

BOM = '\ufeff'
DELIMITER = ','
QUOTE = '"'
LINE_SEPARATOR = '\n'

_NEEDS_QUOTING = (DELIMITER, QUOTE, '\n', '\r')


def quote_cell(text: str, force: bool = False) -> str:
    """
    Quote a cell when it contains the delimiter, a quote or a line break.

    Internal quotes are doubled. `force` quotes unconditionally (descriptions).
    """
    if force or any(ch in text for ch in _NEEDS_QUOTING):
        return QUOTE + text.replace(QUOTE, QUOTE * 2) + QUOTE
    return text


class DelimitedTextExporter:
    """Exports a ReportTable as UTF-8 CSV with a byte-order marker."""

    def format_row(self, values: Sequence[Any], columns: Sequence[Column], in_totals: bool = False) -> str:
        """
        Format one line.

        Free-text cells are always quoted in data rows; in the totals row they
        are non-applicable and stay empty.
        """
        cells = []
        for value, column in zip(values, columns):
            text = format_cell(value, column, in_totals=in_totals, honor_keep_zero=True)
            cells.append(quote_cell(text, force=column.free_text and not in_totals))
        return DELIMITER.join(cells)

    def export(self, table: ReportTable) -> bytes:
        """
        Render the table.

        Args:
            table: Rows and fixed columns; totals row appended when present

        Returns:
            bytes of the CSV file (UTF-8, BOM-prefixed)
        """
        columns = table.columns
        width = len(columns)

        lines: List[str] = [DELIMITER.join(quote_cell(c.label) for c in columns)]
        for row in table.rows:
            if len(row) != width:
                raise ValueError(f"Row has {len(row)} cells, expected {width}")
            lines.append(self.format_row(row, columns))

        if table.totals is not None:
            lines.append(self.format_row(table.totals, columns, in_totals=True))

        logger.debug("CSV rendered", rows=len(table.rows), columns=width)
        return (BOM + LINE_SEPARATOR.join(lines)).encode('utf-8')


def to_delimited_text(table: ReportTable) -> bytes:
    return DelimitedTextExporter().export(table)
