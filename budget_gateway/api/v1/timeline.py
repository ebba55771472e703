"""Ledger timeline endpoints - grouped transaction feed with running balance"""

import logging
from datetime import date
from typing import List, Literal, Optional

from fastapi import APIRouter, Depends, HTTPException, Query, Request

from budget_gateway.api.dependencies import get_ledger_client, get_request_id
from budget_gateway.api.v1.schemas import (
    TimelineEntrySchema,
    TimelineItemSchema,
    TimelineRequest,
    TimelineResponse,
)
from budget_gateway.domain.engine import compute_timeline
from budget_gateway.domain.exceptions import LedgerAPIError
from budget_gateway.domain.models import DailyLedgerEntry
from budget_gateway.domain.timeline import filter_timeline
from budget_gateway.infrastructure.clients.ledger import LedgerClient
from budget_gateway.infrastructure.observability.metrics import ledger_fetch_failures_counter

router = APIRouter()


def to_timeline_response(entries: List[DailyLedgerEntry], warnings: List[str]) -> TimelineResponse:
    return TimelineResponse(
        entries=[
            TimelineEntrySchema(
                date=entry.date,
                incomes=entry.incomes,
                expenses=entry.expenses,
                total=entry.total,
                running_balance=entry.running_balance,
                items=[TimelineItemSchema.model_validate(e, from_attributes=True) for e in entry.items],
            )
            for entry in entries
        ],
        warnings=warnings,
    )


@router.post("/timeline", response_model=TimelineResponse)
def build_timeline(body: TimelineRequest):
    """Aggregate caller-supplied events into the daily ledger (every day of the month)"""
    warnings: List[str] = []
    entries = compute_timeline(body.events, body.opening_balance, body.year, body.month, warnings)
    if body.type != "all":
        entries = filter_timeline(entries, body.type)
    return to_timeline_response(entries, warnings)


@router.get("/households/{household_id}/timeline", response_model=TimelineResponse)
async def get_household_timeline(
    household_id: str,
    request: Request,
    month: Optional[int] = Query(None, ge=1, le=12),
    year: Optional[int] = Query(None, ge=1),
    type: Literal["all", "income", "expense"] = Query("all"),
    ledger_client: LedgerClient = Depends(get_ledger_client),
):
    """
    Transaction feed for a month: days with activity only, each carrying
    the running balance of the full ledger.
    """
    request_id = get_request_id(request)
    today = date.today()
    month = month or today.month
    year = year or today.year

    try:
        snapshot = await ledger_client.get_snapshot(household_id, month, year)
    except LedgerAPIError as e:
        ledger_fetch_failures_counter.inc()
        logging.error(f"Ledger API error: {e}", extra={"request_id": request_id})
        raise HTTPException(status_code=503, detail="Ledger service unavailable")

    if snapshot is None:
        return TimelineResponse(entries=[], warnings=[])

    warnings: List[str] = []
    entries = compute_timeline(snapshot.events, snapshot.opening_balance, year, month, warnings)
    return to_timeline_response(filter_timeline(entries, type), warnings)
