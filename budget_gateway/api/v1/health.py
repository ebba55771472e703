"""Financial health endpoints - daily budget projection for a household"""

import logging
import time
from datetime import date
from decimal import Decimal
from typing import Any, Dict, Optional

from fastapi import APIRouter, Depends, HTTPException, Query, Request
from sqlalchemy.orm import Session

from budget_gateway.api.dependencies import get_health_cache, get_ledger_client, get_request_id
from budget_gateway.api.v1.household_settings import HouseholdConfig, load_household_config
from budget_gateway.api.v1.schemas import (
    AlertSchema,
    BalancePointSchema,
    ChartSeriesSchema,
    DailyProjectionSchema,
    DayAllowanceSchema,
    FinancialHealthRequest,
    FinancialHealthResponse,
    HistoryItem,
    HistoryResponse,
    PotentialBudgetPointSchema,
    PurchaseSimulationRequest,
    PurchaseSimulationResponse,
)
from budget_gateway.config import settings
from budget_gateway.domain.charts import build_chart_series
from budget_gateway.domain.engine import compute_financial_health
from budget_gateway.domain.events import parse_events
from budget_gateway.domain.exceptions import ConfigError, LedgerAPIError
from budget_gateway.domain.models import INCOME, FinancialHealthResult, HealthThresholds, ReservePolicy
from budget_gateway.domain.simulator import simulate_purchase
from budget_gateway.infrastructure.cache import HealthCache, input_hash
from budget_gateway.infrastructure.clients.ledger import LedgerClient, LedgerSnapshot
from budget_gateway.infrastructure.database.repositories import SnapshotRepository
from budget_gateway.infrastructure.database.session import get_db
from budget_gateway.infrastructure.observability.logging import log_health_computation
from budget_gateway.infrastructure.observability.metrics import ledger_fetch_failures_counter, record_health
from budget_gateway.utils.money import ZERO

router = APIRouter()


def autonomy_label(result: FinancialHealthResult) -> str:
    """Runway for display, capped (e.g. "90+")"""
    cap = settings.autonomy_display_cap_days
    if result.autonomy_is_indefinite or result.autonomy_days > cap:
        return f"{cap}+"
    return str(int(result.autonomy_days))


def to_health_response(result: FinancialHealthResult) -> FinancialHealthResponse:
    """Convert engine output into the API view model, chart series included"""
    charts = build_chart_series(result.daily_projections, result.daily_allowances)
    return FinancialHealthResponse(
        status=result.status,
        current_balance=result.current_balance,
        minimum_reserve=result.minimum_reserve,
        future_commitments=result.future_commitments,
        flexible_commitments=result.flexible_commitments,
        daily_budget=result.daily_budget,
        weekend_daily_budget=result.weekend_daily_budget,
        autonomy_days=None if result.autonomy_is_indefinite else result.autonomy_days,
        autonomy_label=autonomy_label(result),
        projected_end_balance=result.projected_end_balance,
        average_daily_variable_spend=result.average_daily_variable_spend,
        bottleneck_date=result.bottleneck_date,
        bottleneck_balance=result.bottleneck_balance,
        slack=result.slack,
        days_remaining=result.days_remaining,
        month_progress=result.month_progress,
        realized_income=result.realized_income,
        projected_income=result.projected_income,
        realized_expenses=result.realized_expenses,
        projected_expenses=result.projected_expenses,
        alerts=[AlertSchema.model_validate(a, from_attributes=True) for a in result.alerts],
        daily_projections=[
            DailyProjectionSchema.model_validate(p, from_attributes=True) for p in result.daily_projections
        ],
        daily_allowances=[
            DayAllowanceSchema.model_validate(a, from_attributes=True) for a in result.daily_allowances
        ],
        charts=ChartSeriesSchema(
            balance_series=[
                BalancePointSchema.model_validate(p, from_attributes=True) for p in charts.balance_series
            ],
            potential_budget_series=[
                PotentialBudgetPointSchema.model_validate(p, from_attributes=True)
                for p in charts.potential_budget_series
            ],
        ),
        warnings=result.warnings,
    )


def _thresholds(low_balance_threshold: Decimal) -> HealthThresholds:
    return HealthThresholds(
        caution_slack_ratio=settings.caution_slack_ratio,
        low_balance_threshold=low_balance_threshold,
        short_runway_days=settings.short_runway_days,
    )


def month_income(snapshot: Optional[LedgerSnapshot], month: int, year: int) -> Decimal:
    """Realized plus scheduled income of the month, the fallback reference for percentage reserves"""
    if snapshot is None:
        return ZERO
    events, _ = parse_events(snapshot.events)
    return sum(
        (e.amount for e in events if e.type == INCOME and e.date.year == year and e.date.month == month),
        ZERO,
    )


def build_health_inputs(
    snapshot: Optional[LedgerSnapshot],
    config: HouseholdConfig,
    today: date,
    month: int,
    year: int,
) -> Dict[str, Any]:
    """Keyword arguments for compute_financial_health from a ledger snapshot and household settings"""
    reference_income = config.reference_income
    if reference_income is None:
        reference_income = month_income(snapshot, month, year)

    return {
        "events": snapshot.events if snapshot is not None else None,
        "opening_balance": snapshot.opening_balance if snapshot is not None else ZERO,
        "current_balance": snapshot.current_balance if snapshot is not None else ZERO,
        "today": today,
        "reserve_policy": config.reserve_policy,
        "weekend_weight": config.weekend_weight,
        "reference_income": reference_income,
        "year": year,
        "month": month,
        "thresholds": _thresholds(config.low_balance_threshold),
        "fixed_categories": frozenset(c.lower() for c in settings.fixed_expense_categories),
    }


def _hashable(inputs: Dict[str, Any]) -> Dict[str, Any]:
    payload = dict(inputs)
    payload["fixed_categories"] = sorted(payload["fixed_categories"])
    return payload


def _resolve_month(month: Optional[int], year: Optional[int], today: date) -> tuple[int, int]:
    return month or today.month, year or today.year


@router.post("/financial-health", response_model=FinancialHealthResponse)
def compute_health(body: FinancialHealthRequest):
    """
    Stateless computation over caller-supplied ledger data.

    No ledger fetch, no persistence: the same body always yields the same result.
    """
    try:
        reserve_policy = ReservePolicy(body.reserve_kind, body.reserve_value)
        result = compute_financial_health(
            body.events,
            body.opening_balance,
            body.current_balance,
            body.today,
            reserve_policy,
            body.weekend_weight,
            body.reference_income,
            year=body.year,
            month=body.month,
            thresholds=_thresholds(
                body.low_balance_threshold
                if body.low_balance_threshold is not None
                else settings.default_low_balance_threshold
            ),
            fixed_categories=frozenset(c.lower() for c in settings.fixed_expense_categories),
        )
    except ConfigError as e:
        raise HTTPException(status_code=422, detail=str(e))

    return to_health_response(result)


@router.get("/households/{household_id}/financial-health", response_model=FinancialHealthResponse)
async def get_household_health(
    household_id: str,
    request: Request,
    month: Optional[int] = Query(None, ge=1, le=12),
    year: Optional[int] = Query(None, ge=1),
    as_of: Optional[date] = Query(None, description="Reference 'today' (defaults to the server date)"),
    db: Session = Depends(get_db),
    ledger_client: LedgerClient = Depends(get_ledger_client),
    cache: HealthCache = Depends(get_health_cache),
):
    """
    Financial health of a household for a month.

    Flow:
    1. Fetch the month's ledger snapshot from the ledger service
    2. Load household settings (reserve policy, weekend weight)
    3. Serve from cache or run the projection engine
    4. Persist a snapshot for history
    5. Record metrics and a structured log line
    """
    start_time = time.time()
    request_id = get_request_id(request)
    today = as_of or date.today()
    month, year = _resolve_month(month, year, today)

    try:
        # 1. Ledger snapshot
        snapshot = await ledger_client.get_snapshot(household_id, month, year)

        # 2. Settings
        config = load_household_config(db, household_id)
        inputs = build_health_inputs(snapshot, config, today, month, year)

        # 3. Compute (cached per household, month and exact inputs)
        digest = input_hash(_hashable(inputs))
        cache_key = (household_id, month, year, digest)
        result = cache.get(cache_key)
        cache_hit = result is not None
        if result is None:
            result = compute_financial_health(**inputs)
            cache.put(cache_key, result)

        # 4. Persist snapshot
        SnapshotRepository(db).create_snapshot(
            household_id=household_id,
            year=year,
            month=month,
            as_of=today,
            input_hash=digest,
            result=result,
        )
        db.commit()

        # 5. Metrics and logs
        duration_ms = (time.time() - start_time) * 1000
        if not cache_hit:
            record_health(result.status, result.daily_budget, len(result.warnings))
        log_health_computation(
            request_id,
            household_id,
            result.status,
            str(result.daily_budget),
            cache_hit,
            duration_ms,
            dropped_events=len(result.warnings),
            autonomy_days=autonomy_label(result),
        )

        return to_health_response(result)

    except LedgerAPIError as e:
        ledger_fetch_failures_counter.inc()
        db.rollback()
        logging.error(f"Ledger API error: {e}", extra={"request_id": request_id})
        raise HTTPException(status_code=503, detail="Ledger service unavailable")

    except ConfigError as e:
        db.rollback()
        logging.warning(f"Invalid household settings: {e}", extra={"request_id": request_id})
        raise HTTPException(status_code=422, detail=str(e))

    except Exception as e:
        db.rollback()
        logging.error(f"Unexpected error: {e}", extra={"request_id": request_id})
        raise HTTPException(status_code=500, detail="Internal server error")


@router.post(
    "/households/{household_id}/purchase-simulation",
    response_model=PurchaseSimulationResponse,
)
async def simulate_household_purchase(
    household_id: str,
    body: PurchaseSimulationRequest,
    request: Request,
    as_of: Optional[date] = Query(None),
    db: Session = Depends(get_db),
    ledger_client: LedgerClient = Depends(get_ledger_client),
):
    """What happens to today's budget if the household buys this now"""
    request_id = get_request_id(request)
    today = as_of or date.today()
    month, year = today.month, today.year

    try:
        snapshot = await ledger_client.get_snapshot(household_id, month, year)
        config = load_household_config(db, household_id)
        inputs = build_health_inputs(snapshot, config, today, month, year)
        simulation = simulate_purchase(body.amount, **inputs)

    except LedgerAPIError as e:
        ledger_fetch_failures_counter.inc()
        logging.error(f"Ledger API error: {e}", extra={"request_id": request_id})
        raise HTTPException(status_code=503, detail="Ledger service unavailable")

    except ConfigError as e:
        raise HTTPException(status_code=422, detail=str(e))

    return PurchaseSimulationResponse.model_validate(simulation, from_attributes=True)


@router.get("/households/{household_id}/financial-health/history", response_model=HistoryResponse)
def get_health_history(household_id: str, db: Session = Depends(get_db)):
    """Recently served health snapshots, newest first"""
    snapshots = SnapshotRepository(db).get_snapshots_by_household(household_id, limit=20)

    return HistoryResponse(
        household_id=household_id,
        snapshots=[
            HistoryItem(
                snapshot_id=str(s.id),
                year=s.year,
                month=s.month,
                as_of=s.as_of,
                status=s.status,
                daily_budget=s.daily_budget,
                projected_end_balance=s.projected_end_balance,
                created_at=s.created_at.isoformat(),
            )
            for s in snapshots
        ],
    )
