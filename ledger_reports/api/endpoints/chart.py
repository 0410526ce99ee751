"""
Chart data endpoints: monthly stacked series and single-account trend.
"""
from dataclasses import asdict
from typing import Any, Dict, List

from fastapi import APIRouter
from pydantic import BaseModel

from ledger_reports.common.logging_config import get_logger
from ledger_reports.common.models import TransactionRecord
from ledger_reports.core.aggregator import aggregate
from ledger_reports.core.trend import monthly_totals, project

logger = get_logger(__name__)
router = APIRouter()


class ChartRequest(BaseModel):
    records: List[Dict[str, Any]] = []


class TrendRequest(ChartRequest):
    account: str


@router.post("/monthly")
def monthly_chart(payload: ChartRequest):
    """Per-month signed amounts per account, plus income/expense subtotals."""
    series = aggregate(TransactionRecord.from_dict(r) for r in payload.records)
    result = series.to_dict()
    result['totals'] = [asdict(t) for t in monthly_totals(series)]
    logger.info("Monthly chart built", months=len(series.buckets), accounts=len(series.accounts))
    return result


@router.post("/trend")
def trend_chart(payload: TrendRequest):
    """One account's monthly value and share of its income/expense total."""
    series = aggregate(TransactionRecord.from_dict(r) for r in payload.records)
    account = series.account(payload.account)
    if account is None:
        logger.info("Trend requested for unknown account", account=payload.account)
        return {"account": payload.account, "type": None, "color": None, "points": []}

    return {
        "account": account.name,
        "type": account.classification.value,
        "color": account.color,
        "points": [asdict(p) for p in project(series, account.name)],
    }
