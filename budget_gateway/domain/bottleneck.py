"""Worst-future-day detection and reserve resolution"""

from decimal import Decimal
from typing import Optional, Sequence

from budget_gateway.domain.exceptions import ConfigError
from budget_gateway.domain.models import Bottleneck, DailyProjection, ReservePolicy


def resolve_reserve(policy: ReservePolicy, reference_income: Decimal) -> Decimal:
    """
    Minimum balance in currency units.

    - fixed: the configured value
    - percentage: value% of the household's reference income
    """
    if policy.kind == "fixed":
        return policy.value
    if reference_income < 0:
        raise ConfigError(f"Reference income cannot be negative, got {reference_income}")
    return policy.value / Decimal("100") * reference_income


def find_bottleneck(projections: Sequence[DailyProjection], reserve: Decimal) -> Optional[Bottleneck]:
    """
    Linear scan for the minimum projected balance.

    Ties resolve to the earliest day. binding_until records the latest day
    carrying the same minimum: spending before that day lowers it just as
    much, so the allocator must spread the slack up to it.
    """
    if not projections:
        return None

    worst = projections[0]
    binding_until = worst.date
    for projection in projections[1:]:
        if projection.balance < worst.balance:
            worst = projection
            binding_until = projection.date
        elif projection.balance == worst.balance:
            binding_until = projection.date

    return Bottleneck(
        date=worst.date,
        balance=worst.balance,
        reserve=reserve,
        slack=worst.balance - reserve,
        binding_until=binding_until,
    )
