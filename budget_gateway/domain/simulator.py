"""What-if analysis for a purchase made today"""

from datetime import date
from decimal import Decimal
from typing import Any

from budget_gateway.domain.engine import compute_financial_health
from budget_gateway.domain.models import PurchaseSimulation
from budget_gateway.utils.money import ZERO, round_money, to_decimal

HIGH_DROP_PERCENTAGE = Decimal("40")
MEDIUM_DROP_PERCENTAGE = Decimal("15")


def classify_impact(new_slack: Decimal, drop_percentage: Decimal) -> str:
    """
    Severity bands:
    - CRITICAL: the purchase pushes the bottleneck below the reserve
    - HIGH: daily budget drops by more than 40%
    - MEDIUM: more than 15%
    - LOW: otherwise
    """
    if new_slack < 0:
        return "CRITICAL"
    if drop_percentage > HIGH_DROP_PERCENTAGE:
        return "HIGH"
    if drop_percentage > MEDIUM_DROP_PERCENTAGE:
        return "MEDIUM"
    return "LOW"


def simulate_purchase(amount, *, current_balance, today: date, **health_inputs: Any) -> PurchaseSimulation:
    """
    Recompute the health as if `amount` left the account today.

    `health_inputs` are the remaining keyword arguments of
    compute_financial_health (events, opening_balance, reserve_policy, ...).
    """
    amount = to_decimal(amount)
    if amount <= 0:
        raise ValueError(f"Purchase amount must be positive, got {amount}")
    current_balance = to_decimal(current_balance)

    before = compute_financial_health(current_balance=current_balance, today=today, **health_inputs)
    after = compute_financial_health(current_balance=current_balance - amount, today=today, **health_inputs)

    budget_drop = before.daily_budget - after.daily_budget
    if before.daily_budget > 0:
        drop_percentage = budget_drop / before.daily_budget * Decimal("100")
        days_to_recover = amount / before.daily_budget
    else:
        drop_percentage = Decimal("100")
        days_to_recover = ZERO

    # A past month has no bottleneck; there is nothing left to breach
    new_slack = after.slack if after.bottleneck_date is not None else ZERO

    return PurchaseSimulation(
        amount=round_money(amount),
        current_daily_budget=before.daily_budget,
        new_daily_budget=after.daily_budget,
        budget_drop=round_money(budget_drop),
        budget_drop_percentage=round_money(drop_percentage),
        days_to_recover=round_money(days_to_recover),
        impact_severity=classify_impact(new_slack, drop_percentage),
        new_status=after.status,
    )
