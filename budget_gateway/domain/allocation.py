"""Reserve-constrained daily spending allocation with weighted day classes"""

from datetime import date
from decimal import Decimal
from typing import Callable, List, Optional, Sequence

from budget_gateway.domain.exceptions import ConfigError
from budget_gateway.domain.models import Bottleneck, DailyProjection, DayAllowance
from budget_gateway.utils.date_utils import is_weekend
from budget_gateway.utils.money import ZERO

DayWeigher = Callable[[date], Decimal]

WEEKDAY_WEIGHT = Decimal("1")


def weekend_weigher(weekend_weight: Decimal) -> DayWeigher:
    """Weight 1 for weekdays, weekend_weight for Saturday and Sunday"""
    if weekend_weight < 1:
        raise ConfigError(f"Weekend weight must be at least 1.0, got {weekend_weight}")

    def weigh(day: date) -> Decimal:
        return weekend_weight if is_weekend(day) else WEEKDAY_WEIGHT

    return weigh


def allocate_daily_budget(
    projections: Sequence[DailyProjection],
    bottleneck: Optional[Bottleneck],
    weigher: DayWeigher,
) -> List[DayAllowance]:
    """
    Spread the slack over [today, bottleneck] proportionally to day weights.

    Algorithm:
        base_unit = max(slack, 0) / sum(weights in horizon)
        allowance = base_unit * weight   (0 after the horizon)

    Spending exactly each allowance through the horizon leaves the
    bottleneck balance on the reserve floor. A breached reserve yields a
    zero allowance for every day, never a negative one.

    Returns one DayAllowance per projected day.
    """
    if not projections or bottleneck is None:
        return []

    horizon = [p for p in projections if p.date <= bottleneck.binding_until]
    weights = [weigher(p.date) for p in horizon]
    total_weight = sum(weights, ZERO)

    slack = max(bottleneck.slack, ZERO)
    base_unit = slack / total_weight if total_weight > 0 else ZERO

    allowances = [
        DayAllowance(date=p.date, weight=w, allowance=base_unit * w)
        for p, w in zip(horizon, weights)
    ]
    allowances.extend(
        DayAllowance(date=p.date, weight=weigher(p.date), allowance=ZERO)
        for p in projections[len(horizon):]
    )
    return allowances
