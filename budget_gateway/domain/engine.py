"""Financial health engine - core business logic for the daily budget projection"""

import logging
from dataclasses import replace
from datetime import date, timedelta
from decimal import ROUND_HALF_UP, Decimal
from typing import FrozenSet, Iterable, List, Optional, Sequence, Tuple

from budget_gateway.domain import timeline as timeline_aggregator
from budget_gateway.domain.allocation import DayWeigher, allocate_daily_budget, weekend_weigher
from budget_gateway.domain.autonomy import estimate_autonomy
from budget_gateway.domain.bottleneck import find_bottleneck, resolve_reserve
from budget_gateway.domain.events import RawEvent, parse_events
from budget_gateway.domain.health import classify_health
from budget_gateway.domain.models import (
    EXPENSE,
    HEALTHY,
    INCOME,
    INDEFINITE_AUTONOMY,
    DailyLedgerEntry,
    DailyProjection,
    FinancialHealthResult,
    HealthThresholds,
    ReservePolicy,
    TransactionEvent,
)
from budget_gateway.domain.projection import project_balance
from budget_gateway.utils.date_utils import month_bounds
from budget_gateway.utils.money import ZERO, round_money, to_decimal

logger = logging.getLogger(__name__)

DEFAULT_FIXED_CATEGORIES: FrozenSet[str] = frozenset({"bills", "housing", "rent", "utilities"})


def compute_timeline(
    events: Iterable[RawEvent],
    opening,
    year: Optional[int] = None,
    month: Optional[int] = None,
    warnings: Optional[List[str]] = None,
) -> List[DailyLedgerEntry]:
    """
    Ledger feed entry point: validate events, then aggregate them by day.

    Malformed events and events outside the month end up in `warnings`
    when a list is given.
    """
    parsed, parse_warnings = parse_events(events)
    if warnings is not None:
        warnings.extend(parse_warnings)
    return timeline_aggregator.compute_timeline(parsed, to_decimal(opening), year, month, warnings)


def zeroed_result(warnings: Optional[List[str]] = None) -> FinancialHealthResult:
    """Result for a household without ledger data: healthy, every amount 0"""
    return FinancialHealthResult(
        current_balance=ZERO,
        minimum_reserve=ZERO,
        future_commitments=ZERO,
        flexible_commitments=ZERO,
        daily_budget=ZERO,
        weekend_daily_budget=ZERO,
        autonomy_days=INDEFINITE_AUTONOMY,
        status=HEALTHY,
        alerts=[],
        projected_end_balance=ZERO,
        average_daily_variable_spend=ZERO,
        daily_projections=[],
        warnings=list(warnings or []),
    )


def _month_progress(today: date, month_start: date, month_end: date) -> Decimal:
    if today < month_start:
        return ZERO
    if today > month_end:
        return Decimal("1")
    return (Decimal(today.day) / Decimal(month_end.day)).quantize(Decimal("0.0001"), rounding=ROUND_HALF_UP)


def _reconcile(incomes: Decimal, expenses: Decimal, net: Decimal) -> Tuple[Decimal, Decimal]:
    """Shift the rounding gap onto one side so incomes - expenses == net, neither going negative"""
    gap = net - (incomes - expenses)
    if gap > 0:
        if expenses >= gap:
            return incomes, expenses - gap
        return incomes + gap, expenses
    if gap < 0:
        if incomes >= -gap:
            return incomes + gap, expenses
        return incomes, expenses - gap
    return incomes, expenses


def round_projections(projections: Sequence[DailyProjection], current_balance: Decimal) -> List[DailyProjection]:
    """
    Round the projection for output.

    Balances are rounded as running totals and each day's rounded
    incomes - expenses is the step between consecutive rounded balances, so
    the rounded current balance plus the rounded daily nets reproduces every
    rounded balance exactly.
    """
    rounded = []
    previous = round_money(current_balance)
    for p in projections:
        balance = round_money(p.balance)
        incomes, expenses = _reconcile(round_money(p.incomes), round_money(p.expenses), balance - previous)
        rounded.append(replace(p, incomes=incomes, expenses=expenses, balance=balance))
        previous = balance
    return rounded


def _sum(events: Iterable[TransactionEvent]) -> Decimal:
    return sum((e.amount for e in events), ZERO)


def compute_financial_health(
    events: Optional[Iterable[RawEvent]],
    opening_balance,
    current_balance,
    today: date,
    reserve_policy: ReservePolicy,
    weekend_weight,
    reference_income,
    *,
    year: Optional[int] = None,
    month: Optional[int] = None,
    thresholds: Optional[HealthThresholds] = None,
    fixed_categories: FrozenSet[str] = DEFAULT_FIXED_CATEGORIES,
    weigher: Optional[DayWeigher] = None,
) -> FinancialHealthResult:
    """
    Main entry point: project the month and derive today's safe budget.

    Flow:
    1. Validate events (malformed ones become warnings)
    2. Aggregate the month into a daily timeline
    3. Project [today, month end] from the realized balance
    4. Find the bottleneck day and slack above the reserve
    5. Allocate the slack across days up to the bottleneck
    6. Estimate runway from trailing variable spend
    7. Classify health and build alerts

    `year`/`month` select the viewed month (default: today's). A closed month
    yields an empty projection, HEALTHY and a zero daily budget.

    Raises:
        ConfigError: weekend weight below 1 or negative reference income
            with a percentage reserve
    """
    weekend_weight = to_decimal(weekend_weight)
    day_weigher = weekend_weigher(weekend_weight)
    if weigher is not None:
        day_weigher = weigher
    thresholds = thresholds or HealthThresholds()

    if events is None:
        return zeroed_result()

    parsed, warnings = parse_events(events)
    opening_balance = to_decimal(opening_balance)
    current_balance = to_decimal(current_balance)
    reference_income = to_decimal(reference_income)

    if not parsed and opening_balance == 0 and current_balance == 0:
        return zeroed_result(warnings)

    year = year or today.year
    month = month or today.month
    month_start, month_end = month_bounds(year, month)

    # 2-5: projection pipeline
    timeline = timeline_aggregator.compute_timeline(parsed, opening_balance, year, month, warnings)
    projections = project_balance(timeline, current_balance, today, month_end)
    reserve = resolve_reserve(reserve_policy, reference_income)
    bottleneck = find_bottleneck(projections, reserve)
    allowances = allocate_daily_budget(projections, bottleneck, day_weigher)

    # 6: runway uses every valid event, trailing days may precede the month
    autonomy = estimate_autonomy(parsed, current_balance, today)

    projected_end_balance = projections[-1].balance if projections else current_balance

    month_events = [e for e in parsed if month_start <= e.date <= month_end]
    window_start = max(today, month_start)
    scheduled_expenses = [
        e for e in month_events
        if e.is_projected and e.type == EXPENSE and window_start <= e.date
    ]
    fixed = [e for e in scheduled_expenses if e.is_recurring or e.category.lower() in fixed_categories]
    future_commitments = _sum(fixed)
    flexible_commitments = _sum(scheduled_expenses) - future_commitments
    overdue_scheduled = sum(1 for e in month_events if e.is_projected and e.date < today)

    # 7: status
    status, alerts = classify_health(
        bottleneck,
        projected_end_balance,
        current_balance,
        thresholds,
        month_end=month_end,
        autonomy=autonomy,
        scheduled_commitments=future_commitments + flexible_commitments,
        overdue_scheduled=overdue_scheduled,
    )

    daily_budget = ZERO
    weekend_daily_budget = ZERO
    if allowances and allowances[0].date == today:
        daily_budget = allowances[0].allowance
        if allowances[0].weight > 0:
            # Weekend class as the active weigher sees it: the coming Saturday
            saturday = today + timedelta(days=(5 - today.weekday()) % 7)
            weekend_daily_budget = daily_budget / allowances[0].weight * day_weigher(saturday)

    realized = [e for e in month_events if not e.is_projected]
    scheduled = [e for e in month_events if e.is_projected]

    result = FinancialHealthResult(
        current_balance=round_money(current_balance),
        minimum_reserve=round_money(reserve),
        future_commitments=round_money(future_commitments),
        flexible_commitments=round_money(flexible_commitments),
        daily_budget=round_money(daily_budget),
        weekend_daily_budget=round_money(weekend_daily_budget),
        autonomy_days=round_money(autonomy.autonomy_days),
        status=status,
        alerts=alerts,
        projected_end_balance=round_money(projected_end_balance),
        average_daily_variable_spend=round_money(autonomy.average_daily_variable_spend),
        daily_projections=round_projections(projections, current_balance),
        daily_allowances=[replace(a, allowance=round_money(a.allowance)) for a in allowances],
        bottleneck_date=bottleneck.date if bottleneck else None,
        bottleneck_balance=round_money(bottleneck.balance) if bottleneck else None,
        slack=round_money(bottleneck.slack) if bottleneck else ZERO,
        days_remaining=len(projections),
        month_progress=_month_progress(today, month_start, month_end),
        realized_income=round_money(_sum(e for e in realized if e.type == INCOME)),
        projected_income=round_money(_sum(e for e in scheduled if e.type == INCOME)),
        realized_expenses=round_money(_sum(e for e in realized if e.type == EXPENSE)),
        projected_expenses=round_money(_sum(e for e in scheduled if e.type == EXPENSE)),
        warnings=warnings,
    )

    logger.debug(
        "Financial health computed",
        extra={
            "status": status,
            "daily_budget": str(result.daily_budget),
            "days_remaining": result.days_remaining,
            "dropped_events": len(warnings),
        },
    )
    return result
