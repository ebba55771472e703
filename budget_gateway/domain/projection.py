"""Forward balance projection from today to month end"""

from datetime import date
from decimal import Decimal
from typing import Dict, List, Sequence

from budget_gateway.domain.models import DailyLedgerEntry, DailyProjection
from budget_gateway.utils.date_utils import generate_date_range
from budget_gateway.utils.money import ZERO


def project_balance(
    timeline: Sequence[DailyLedgerEntry],
    current_balance: Decimal,
    today: date,
    month_end: date,
) -> List[DailyProjection]:
    """
    Roll the realized balance forward over [today, month_end].

    Requirements:
    - Starts from the realized current balance, not the opening balance
    - Only projected (scheduled) events move the balance; realized events
      are already inside current_balance and must not be counted twice
    - Today's own scheduled events land on today's balance
    - Window collapses to empty when today is after month end

    Days of the window the timeline does not cover (today falls before the
    viewed month) are zero-net days.
    """
    if today > month_end:
        return []

    by_date: Dict[date, DailyLedgerEntry] = {entry.date: entry for entry in timeline}

    projections = []
    balance = current_balance
    for day in generate_date_range(today, month_end):
        entry = by_date.get(day)
        incomes = entry.projected_incomes if entry else ZERO
        expenses = entry.projected_expenses if entry else ZERO
        balance = balance + incomes - expenses

        projections.append(
            DailyProjection(
                day=day.day,
                date=day,
                incomes=incomes,
                expenses=expenses,
                balance=balance,
                has_transaction=bool(entry and any(e.is_projected for e in entry.items)),
            )
        )

    return projections
