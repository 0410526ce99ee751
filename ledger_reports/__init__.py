"""
Ledger Reports

Report aggregation and multi-format export for a bookkeeping backend:
- Monthly aggregation and trend projection for charts
- CSV export (UTF-8 with BOM) for spreadsheet tools
- Paginated landscape PDF export with repeating headers and footers
- ZIP bundling for per-account bulk exports
"""

__version__ = "1.0.0"
