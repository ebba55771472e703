"""View-model series for the projection charts"""

from typing import Sequence

from budget_gateway.domain.models import (
    BalancePoint,
    ChartSeries,
    DailyProjection,
    DayAllowance,
    PotentialBudgetPoint,
)
from budget_gateway.utils.money import ZERO, round_money


def build_chart_series(projections: Sequence[DailyProjection], allowances: Sequence[DayAllowance]) -> ChartSeries:
    """
    Format the projection for display.

    - balance_series: projected balance next to the "budgeted" balance, i.e.
      the balance after spending every allowance up to that day
    - potential_budget_series: what could be spent on a day if nothing
      discretionary was spent before it (allowances rolling over)
    """
    allowance_by_date = {a.date: a.allowance for a in allowances}

    balance_series = []
    potential_series = []
    spent = ZERO
    for projection in projections:
        allowance = allowance_by_date.get(projection.date, ZERO)
        spent += allowance
        label = str(projection.day)

        balance_series.append(
            BalancePoint(
                date=projection.date,
                label=label,
                projected_balance=round_money(projection.balance),
                budgeted_balance=round_money(projection.balance - spent),
                incomes=round_money(projection.incomes),
                expenses=round_money(projection.expenses),
            )
        )
        potential_series.append(
            PotentialBudgetPoint(
                date=projection.date,
                label=label,
                allowance=round_money(allowance),
                potential_budget=round_money(spent),
            )
        )

    return ChartSeries(balance_series=balance_series, potential_budget_series=potential_series)
