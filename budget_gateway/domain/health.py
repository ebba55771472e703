"""Health status classification and alert generation"""

from datetime import date
from decimal import Decimal
from typing import List, Optional, Tuple

from budget_gateway.domain.models import (
    CAUTION,
    CRITICAL,
    DANGER,
    HEALTHY,
    INFO,
    WARNING,
    Alert,
    AutonomyEstimate,
    Bottleneck,
    HealthThresholds,
)
from budget_gateway.utils.money import ZERO, round_money


def _money(amount: Decimal) -> str:
    return f"{round_money(amount):,.2f}"


def classify_health(
    bottleneck: Optional[Bottleneck],
    projected_end_balance: Decimal,
    current_balance: Decimal,
    thresholds: HealthThresholds,
    month_end: Optional[date] = None,
    autonomy: Optional[AutonomyEstimate] = None,
    scheduled_commitments: Decimal = ZERO,
    overdue_scheduled: int = 0,
) -> Tuple[str, List[Alert]]:
    """
    Map the projection outcome to HEALTHY / CAUTION / DANGER plus alerts.

    Rules:
    - DANGER: bottleneck balance below the reserve, or a negative month end
    - CAUTION: slack exhausted (exactly zero), slack under
      caution_slack_ratio of the current balance, or a month end below the
      low-balance threshold
    - HEALTHY otherwise

    Without a bottleneck (closed month, nothing ahead) the status is HEALTHY.
    """
    alerts: List[Alert] = []
    status = HEALTHY

    if bottleneck is not None:
        if bottleneck.balance < bottleneck.reserve or projected_end_balance < 0:
            status = DANGER
            alerts.append(
                Alert(
                    severity=CRITICAL,
                    message=(
                        f"Projected balance of {_money(bottleneck.balance)} on "
                        f"{bottleneck.date.isoformat()} falls below the minimum reserve of "
                        f"{_money(bottleneck.reserve)}"
                    ),
                    date=bottleneck.date,
                    amount=round_money(bottleneck.balance),
                )
            )
            if projected_end_balance < 0 and month_end is not None and month_end != bottleneck.date:
                alerts.append(
                    Alert(
                        severity=WARNING,
                        message=f"Month is projected to close at {_money(projected_end_balance)}",
                        date=month_end,
                        amount=round_money(projected_end_balance),
                    )
                )
        else:
            comfortable_margin = current_balance * thresholds.caution_slack_ratio
            if bottleneck.slack == 0:
                status = CAUTION
                alerts.append(
                    Alert(
                        severity=WARNING,
                        message=(
                            f"No room above the minimum reserve on {bottleneck.date.isoformat()}: "
                            "any extra spending breaches it"
                        ),
                        date=bottleneck.date,
                        amount=round_money(bottleneck.balance),
                    )
                )
            elif bottleneck.slack < comfortable_margin:
                status = CAUTION
                alerts.append(
                    Alert(
                        severity=WARNING,
                        message=(
                            f"Only {_money(bottleneck.slack)} above the minimum reserve on "
                            f"{bottleneck.date.isoformat()}"
                        ),
                        date=bottleneck.date,
                        amount=round_money(bottleneck.slack),
                    )
                )
            if projected_end_balance < thresholds.low_balance_threshold:
                status = CAUTION
                alerts.append(
                    Alert(
                        severity=WARNING,
                        message=(
                            f"Month is projected to close at {_money(projected_end_balance)}, "
                            f"under the {_money(thresholds.low_balance_threshold)} alert threshold"
                        ),
                        date=month_end,
                        amount=round_money(projected_end_balance),
                    )
                )

    if current_balance < thresholds.low_balance_threshold and status != DANGER:
        alerts.append(
            Alert(
                severity=WARNING,
                message=f"Current balance {_money(current_balance)} is below the low-balance alert threshold",
                amount=round_money(current_balance),
            )
        )

    if autonomy is not None and not autonomy.is_indefinite:
        if autonomy.autonomy_days < thresholds.short_runway_days:
            alerts.append(
                Alert(
                    severity=WARNING,
                    message=(
                        f"At the recent pace of {_money(autonomy.average_daily_variable_spend)}/day "
                        f"the balance lasts about {int(autonomy.autonomy_days)} days"
                    ),
                    amount=round_money(autonomy.average_daily_variable_spend),
                )
            )

    if scheduled_commitments > 0:
        alerts.append(
            Alert(
                severity=INFO,
                message=f"{_money(scheduled_commitments)} in scheduled expenses until month end",
                amount=round_money(scheduled_commitments),
            )
        )

    if overdue_scheduled:
        alerts.append(
            Alert(
                severity=INFO,
                message=f"{overdue_scheduled} scheduled item(s) dated before today were not projected",
            )
        )

    return status, alerts
