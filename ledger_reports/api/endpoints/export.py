"""
Report export endpoints (journal, transaction list, ledgers, trial balance).
"""
import io
from typing import Any, Dict, List
from urllib.parse import quote

from fastapi import APIRouter, Depends, HTTPException, Query
from fastapi.responses import StreamingResponse
from pydantic import BaseModel

from ledger_reports.api.state import get_export_service
from ledger_reports.common.exceptions import (
    ReportExportError,
    ResourceLoadError,
    UnsupportedFormatError,
)
from ledger_reports.common.logging_config import get_logger
from ledger_reports.common.models import Ledger, ReportDocument, TransactionRecord, TrialBalance
from ledger_reports.exporters.service import ReportExportService

logger = get_logger(__name__)
router = APIRouter()


class DateRange(BaseModel):
    date_from: str
    date_to: str
    organization_label: str = ""


class JournalExportRequest(DateRange):
    """Records as returned by the bookkeeping backend."""
    records: List[Dict[str, Any]] = []


class LedgerExportRequest(DateRange):
    ledger: Dict[str, Any]


class LedgersExportRequest(DateRange):
    ledgers: List[Dict[str, Any]] = []


class TrialBalanceExportRequest(DateRange):
    trial_balance: Dict[str, Any]


def content_disposition(filename: str) -> str:
    """Attachment header; the name is percent-encoded since it is usually Japanese."""
    return f"attachment; filename*=UTF-8''{quote(filename)}"


def to_response(document: ReportDocument) -> StreamingResponse:
    headers = {'Content-Disposition': content_disposition(document.filename)}
    return StreamingResponse(io.BytesIO(document.content), media_type=document.media_type, headers=headers)


def to_http_error(e: ReportExportError) -> HTTPException:
    if isinstance(e, ResourceLoadError):
        status = 503
    elif isinstance(e, UnsupportedFormatError):
        status = 400
    else:
        status = 500
    logger.error(f"Export failed: {e}", error_type=type(e).__name__, status_code=status)
    return HTTPException(status_code=status, detail=str(e))


@router.post("/journal")
async def export_journal(
    payload: JournalExportRequest,
    fmt: str = Query("csv"),
    service: ReportExportService = Depends(get_export_service),
):
    """Journal book as CSV or PDF."""
    records = [TransactionRecord.from_dict(r) for r in payload.records]
    try:
        document = await service.export_journal(
            records, fmt, payload.date_from, payload.date_to, payload.organization_label
        )
    except ReportExportError as e:
        raise to_http_error(e)
    return to_response(document)


@router.post("/transactions")
async def export_transactions(
    payload: JournalExportRequest,
    service: ReportExportService = Depends(get_export_service),
):
    """Full transaction list (CSV only)."""
    records = [TransactionRecord.from_dict(r) for r in payload.records]
    try:
        document = await service.export_transactions(records, payload.date_from, payload.date_to)
    except ReportExportError as e:
        raise to_http_error(e)
    return to_response(document)


@router.post("/ledger")
async def export_ledger(
    payload: LedgerExportRequest,
    fmt: str = Query("csv"),
    service: ReportExportService = Depends(get_export_service),
):
    """General ledger of one account."""
    try:
        document = await service.export_ledger(
            Ledger.from_dict(payload.ledger), fmt,
            payload.date_from, payload.date_to, payload.organization_label,
        )
    except ReportExportError as e:
        raise to_http_error(e)
    return to_response(document)


@router.post("/ledgers")
async def export_all_ledgers(
    payload: LedgersExportRequest,
    fmt: str = Query("csv"),
    service: ReportExportService = Depends(get_export_service),
):
    """Every account's ledger, rendered one by one and bundled into a ZIP."""
    ledgers = [Ledger.from_dict(item) for item in payload.ledgers]
    try:
        document = await service.export_all_ledgers(
            ledgers, fmt, payload.date_from, payload.date_to, payload.organization_label
        )
    except ReportExportError as e:
        raise to_http_error(e)
    return to_response(document)


@router.post("/trial-balance")
async def export_trial_balance(
    payload: TrialBalanceExportRequest,
    fmt: str = Query("csv"),
    service: ReportExportService = Depends(get_export_service),
):
    """Trial balance as CSV or PDF."""
    try:
        document = await service.export_trial_balance(
            TrialBalance.from_dict(payload.trial_balance), fmt,
            payload.date_from, payload.date_to, payload.organization_label,
        )
    except ReportExportError as e:
        raise to_http_error(e)
    return to_response(document)
