"""Pydantic schemas for API request/response validation"""

from pydantic import BaseModel, Field
import datetime as dt
from decimal import Decimal
from typing import Any, Dict, List, Literal, Optional


class AlertSchema(BaseModel):
    """Single health alert"""

    severity: Literal["critical", "warning", "info"]
    message: str
    date: Optional[dt.date] = None
    amount: Optional[Decimal] = None


class DailyProjectionSchema(BaseModel):
    day: int
    date: dt.date
    incomes: Decimal
    expenses: Decimal
    balance: Decimal
    has_transaction: bool


class DayAllowanceSchema(BaseModel):
    date: dt.date
    weight: Decimal
    allowance: Decimal


class BalancePointSchema(BaseModel):
    date: dt.date
    label: str
    projected_balance: Decimal
    budgeted_balance: Decimal
    incomes: Decimal
    expenses: Decimal


class PotentialBudgetPointSchema(BaseModel):
    date: dt.date
    label: str
    allowance: Decimal
    potential_budget: Decimal


class ChartSeriesSchema(BaseModel):
    balance_series: List[BalancePointSchema]
    potential_budget_series: List[PotentialBudgetPointSchema]


class FinancialHealthResponse(BaseModel):
    """Financial health view data for summary cards and charts"""

    status: Literal["HEALTHY", "CAUTION", "DANGER"]
    current_balance: Decimal
    minimum_reserve: Decimal
    future_commitments: Decimal
    flexible_commitments: Decimal
    daily_budget: Decimal
    weekend_daily_budget: Decimal
    autonomy_days: Optional[Decimal] = Field(None, description="None when spending is zero (indefinite runway)")
    autonomy_label: str
    projected_end_balance: Decimal
    average_daily_variable_spend: Decimal
    bottleneck_date: Optional[dt.date] = None
    bottleneck_balance: Optional[Decimal] = None
    slack: Decimal
    days_remaining: int
    month_progress: Decimal
    realized_income: Decimal
    projected_income: Decimal
    realized_expenses: Decimal
    projected_expenses: Decimal
    alerts: List[AlertSchema]
    daily_projections: List[DailyProjectionSchema]
    daily_allowances: List[DayAllowanceSchema]
    charts: ChartSeriesSchema
    warnings: List[str] = []


class FinancialHealthRequest(BaseModel):
    """Request body for POST /v1/financial-health (stateless computation)"""

    events: List[Dict[str, Any]] = Field(default_factory=list, description="Ledger events; malformed ones are dropped")
    opening_balance: Decimal = Decimal("0")
    current_balance: Decimal
    today: dt.date
    reserve_kind: Literal["fixed", "percentage"] = "fixed"
    reserve_value: Decimal = Decimal("0")
    weekend_weight: Decimal = Decimal("1")
    reference_income: Decimal = Decimal("0")
    low_balance_threshold: Optional[Decimal] = None
    year: Optional[int] = Field(None, ge=1)
    month: Optional[int] = Field(None, ge=1, le=12)


class TimelineItemSchema(BaseModel):
    source_id: str
    type: Literal["income", "expense"]
    amount: Decimal
    category: str
    description: str
    is_projected: bool
    is_recurring: bool


class TimelineEntrySchema(BaseModel):
    """One day of the grouped ledger feed"""

    date: dt.date
    incomes: Decimal
    expenses: Decimal
    total: Decimal
    running_balance: Decimal
    items: List[TimelineItemSchema]


class TimelineRequest(BaseModel):
    """Request body for POST /v1/timeline"""

    events: List[Dict[str, Any]] = Field(default_factory=list)
    opening_balance: Decimal = Decimal("0")
    year: Optional[int] = Field(None, ge=1)
    month: Optional[int] = Field(None, ge=1, le=12)
    type: Literal["all", "income", "expense"] = "all"


class TimelineResponse(BaseModel):
    entries: List[TimelineEntrySchema]
    warnings: List[str] = []


class HouseholdSettingsSchema(BaseModel):
    """Household financial settings (GET response and PUT body)"""

    reserve_kind: Literal["fixed", "percentage"]
    reserve_value: Decimal
    weekend_weight: Decimal
    reference_income: Optional[Decimal] = Field(None, description="None: use the month's income")
    low_balance_threshold: Decimal = Decimal("100")


class PurchaseSimulationRequest(BaseModel):
    """Request body for POST /v1/households/{household_id}/purchase-simulation"""

    amount: Decimal = Field(..., gt=0, description="Purchase amount")


class PurchaseSimulationResponse(BaseModel):
    amount: Decimal
    current_daily_budget: Decimal
    new_daily_budget: Decimal
    budget_drop: Decimal
    budget_drop_percentage: Decimal
    days_to_recover: Decimal
    impact_severity: Literal["LOW", "MEDIUM", "HIGH", "CRITICAL"]
    new_status: Literal["HEALTHY", "CAUTION", "DANGER"]


class HistoryItem(BaseModel):
    """Single served health snapshot"""

    snapshot_id: str
    year: int
    month: int
    as_of: dt.date
    status: str
    daily_budget: Decimal
    projected_end_balance: Decimal
    created_at: str


class HistoryResponse(BaseModel):
    """Response for GET /v1/households/{household_id}/financial-health/history"""

    household_id: str
    snapshots: List[HistoryItem]
