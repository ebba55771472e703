"""Day-level aggregation of ledger events into a running balance"""

import logging
from collections import defaultdict
from datetime import date
from decimal import Decimal
from typing import Dict, List, Optional, Sequence

from budget_gateway.domain.models import EXPENSE, INCOME, DailyLedgerEntry, TransactionEvent
from budget_gateway.utils.date_utils import generate_date_range, month_bounds
from budget_gateway.utils.money import ZERO

logger = logging.getLogger(__name__)


def compute_timeline(
    events: Sequence[TransactionEvent],
    opening: Decimal,
    year: Optional[int] = None,
    month: Optional[int] = None,
    warnings: Optional[List[str]] = None,
) -> List[DailyLedgerEntry]:
    """
    Group events by calendar day and accumulate a running balance.

    Requirements:
    - One entry per calendar day of the target month, empty days at zero net
    - Running balance starts at the opening balance
    - Events outside the target month are ignored with a warning

    A missing year or month is taken from the earliest event. Without events
    and without both of them there is nothing to lay out.
    """
    if year is None or month is None:
        if not events:
            return []
        first = min(e.date for e in events)
        year = first.year if year is None else year
        month = first.month if month is None else month

    month_start, month_end = month_bounds(year, month)

    # Bucket events by day, in ledger order within a day
    by_day: Dict[date, List[TransactionEvent]] = defaultdict(list)
    for event in events:
        if not month_start <= event.date <= month_end:
            message = (
                f"Event {event.source_id} dated {event.date.isoformat()} is outside "
                f"{year:04d}-{month:02d} and was ignored"
            )
            logger.warning(message)
            if warnings is not None:
                warnings.append(message)
            continue
        by_day[event.date].append(event)

    entries = []
    running_balance = opening
    for day in generate_date_range(month_start, month_end):
        items = by_day.get(day, [])
        incomes = sum((e.amount for e in items if e.type == INCOME), ZERO)
        expenses = sum((e.amount for e in items if e.type == EXPENSE), ZERO)
        total = incomes - expenses
        running_balance += total

        entries.append(
            DailyLedgerEntry(
                date=day,
                incomes=incomes,
                expenses=expenses,
                total=total,
                running_balance=running_balance,
                projected_incomes=sum(
                    (e.amount for e in items if e.type == INCOME and e.is_projected), ZERO
                ),
                projected_expenses=sum(
                    (e.amount for e in items if e.type == EXPENSE and e.is_projected), ZERO
                ),
                items=tuple(items),
            )
        )

    return entries


def filter_timeline(entries: Sequence[DailyLedgerEntry], event_type: str = "all") -> List[DailyLedgerEntry]:
    """
    Narrow each day's items to incomes or expenses for the feed view.

    Running balances are left untouched: they always reflect the full ledger.
    Days left without items are dropped, matching the grouped feed.
    """
    if event_type == "all":
        return [entry for entry in entries if entry.items]

    filtered = []
    for entry in entries:
        items = tuple(e for e in entry.items if e.type == event_type)
        if items:
            filtered.append(
                DailyLedgerEntry(
                    date=entry.date,
                    incomes=entry.incomes if event_type == INCOME else ZERO,
                    expenses=entry.expenses if event_type == EXPENSE else ZERO,
                    total=sum((e.signed_amount for e in items), ZERO),
                    running_balance=entry.running_balance,
                    projected_incomes=entry.projected_incomes if event_type == INCOME else ZERO,
                    projected_expenses=entry.projected_expenses if event_type == EXPENSE else ZERO,
                    items=items,
                )
            )
    return filtered
