"""Trailing variable-spend average and cash runway"""

from datetime import date, timedelta
from decimal import Decimal
from typing import Sequence

from budget_gateway.domain.models import EXPENSE, INDEFINITE_AUTONOMY, AutonomyEstimate, TransactionEvent
from budget_gateway.utils.money import ZERO

TRAILING_DAYS = 7


def estimate_autonomy(
    events: Sequence[TransactionEvent],
    current_balance: Decimal,
    today: date,
) -> AutonomyEstimate:
    """
    Estimate how many days the current balance lasts at the recent spend rate.

    Only realized, non-recurring expenses from the 7 days before today count:
    recurring bills are commitments, not discretionary burn. A zero average
    returns the indefinite sentinel instead of dividing by zero.
    """
    window_start = today - timedelta(days=TRAILING_DAYS)

    variable_spend = sum(
        (
            e.amount
            for e in events
            if e.type == EXPENSE
            and not e.is_projected
            and not e.is_recurring
            and window_start <= e.date < today
        ),
        ZERO,
    )
    average = variable_spend / TRAILING_DAYS

    if average == 0:
        return AutonomyEstimate(
            average_daily_variable_spend=ZERO,
            autonomy_days=INDEFINITE_AUTONOMY,
            is_indefinite=True,
        )

    return AutonomyEstimate(
        average_daily_variable_spend=average,
        autonomy_days=max(current_balance, ZERO) / average,
        is_indefinite=False,
    )
