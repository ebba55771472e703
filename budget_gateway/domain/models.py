"""Domain models - pure Python dataclasses representing the budget engine's inputs and outputs"""

from dataclasses import dataclass, field
from datetime import date
from decimal import Decimal
from typing import List, Optional, Tuple

from budget_gateway.domain.exceptions import ConfigError

INCOME = "income"
EXPENSE = "expense"
EVENT_TYPES = (INCOME, EXPENSE)

HEALTHY = "HEALTHY"
CAUTION = "CAUTION"
DANGER = "DANGER"

CRITICAL = "critical"
WARNING = "warning"
INFO = "info"

INDEFINITE_AUTONOMY = Decimal("Infinity")


@dataclass(frozen=True)
class TransactionEvent:
    """One ledger line, realized or scheduled"""

    date: date
    type: str  # "income" or "expense"
    amount: Decimal  # non-negative magnitude
    category: str
    is_projected: bool
    is_recurring: bool
    source_id: str
    description: str = ""

    @property
    def signed_amount(self) -> Decimal:
        return self.amount if self.type == INCOME else -self.amount


@dataclass(frozen=True)
class ReservePolicy:
    """Minimum balance the household wants to keep at all times"""

    kind: str  # "fixed" or "percentage"
    value: Decimal

    def __post_init__(self) -> None:
        if self.kind not in ("fixed", "percentage"):
            raise ConfigError(f"Unknown reserve policy kind: {self.kind!r}")
        if self.kind == "percentage" and not (Decimal("0") <= self.value <= Decimal("100")):
            raise ConfigError(f"Percentage reserve must be within [0, 100], got {self.value}")
        if self.kind == "fixed" and self.value < 0:
            raise ConfigError(f"Fixed reserve cannot be negative, got {self.value}")


@dataclass(frozen=True)
class DailyLedgerEntry:
    """One calendar day of the ledger feed"""

    date: date
    incomes: Decimal
    expenses: Decimal
    total: Decimal
    running_balance: Decimal
    projected_incomes: Decimal
    projected_expenses: Decimal
    items: Tuple[TransactionEvent, ...] = ()


@dataclass(frozen=True)
class DailyProjection:
    """Projected balance for one day of the window [today, month end]"""

    day: int
    date: date
    incomes: Decimal
    expenses: Decimal
    balance: Decimal
    has_transaction: bool


@dataclass(frozen=True)
class Bottleneck:
    """Worst projected day and the room left above the reserve"""

    date: date
    balance: Decimal
    reserve: Decimal
    slack: Decimal
    binding_until: date  # last day the minimum balance recurs


@dataclass(frozen=True)
class DayAllowance:
    date: date
    weight: Decimal
    allowance: Decimal


@dataclass(frozen=True)
class AutonomyEstimate:
    average_daily_variable_spend: Decimal
    autonomy_days: Decimal
    is_indefinite: bool


@dataclass(frozen=True)
class Alert:
    severity: str  # "critical" | "warning" | "info"
    message: str
    date: Optional[date] = None
    amount: Optional[Decimal] = None


@dataclass(frozen=True)
class HealthThresholds:
    """Tunable bands for the health classifier"""

    caution_slack_ratio: Decimal = Decimal("0.10")
    low_balance_threshold: Decimal = Decimal("100")
    short_runway_days: int = 7


@dataclass(frozen=True)
class BalancePoint:
    date: date
    label: str
    projected_balance: Decimal
    budgeted_balance: Decimal
    incomes: Decimal
    expenses: Decimal


@dataclass(frozen=True)
class PotentialBudgetPoint:
    date: date
    label: str
    allowance: Decimal
    potential_budget: Decimal


@dataclass(frozen=True)
class ChartSeries:
    balance_series: List[BalancePoint]
    potential_budget_series: List[PotentialBudgetPoint]


@dataclass(frozen=True)
class FinancialHealthResult:
    """Output of the projection engine, read-only view data"""

    current_balance: Decimal
    minimum_reserve: Decimal
    future_commitments: Decimal
    flexible_commitments: Decimal
    daily_budget: Decimal
    weekend_daily_budget: Decimal
    autonomy_days: Decimal
    status: str
    alerts: List[Alert]
    projected_end_balance: Decimal
    average_daily_variable_spend: Decimal
    daily_projections: List[DailyProjection]
    daily_allowances: List[DayAllowance] = field(default_factory=list)
    bottleneck_date: Optional[date] = None
    bottleneck_balance: Optional[Decimal] = None
    slack: Decimal = Decimal("0")
    days_remaining: int = 0
    month_progress: Decimal = Decimal("0")
    realized_income: Decimal = Decimal("0")
    projected_income: Decimal = Decimal("0")
    realized_expenses: Decimal = Decimal("0")
    projected_expenses: Decimal = Decimal("0")
    warnings: List[str] = field(default_factory=list)

    @property
    def autonomy_is_indefinite(self) -> bool:
        return self.autonomy_days == INDEFINITE_AUTONOMY


@dataclass(frozen=True)
class PurchaseSimulation:
    """Impact of a hypothetical purchase made today"""

    amount: Decimal
    current_daily_budget: Decimal
    new_daily_budget: Decimal
    budget_drop: Decimal
    budget_drop_percentage: Decimal
    days_to_recover: Decimal
    impact_severity: str  # LOW | MEDIUM | HIGH | CRITICAL
    new_status: str
