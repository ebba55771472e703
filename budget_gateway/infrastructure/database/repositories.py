"""Data access layer for household settings and health snapshots"""

from datetime import date
from decimal import Decimal
from typing import List, Optional
from sqlalchemy.orm import Session
from budget_gateway.config import settings
from budget_gateway.infrastructure.database.models import HealthSnapshot, HouseholdFinancialSettings
from budget_gateway.domain.models import FinancialHealthResult


class SettingsRepository:
    """Repository for household financial settings"""

    def __init__(self, db: Session):
        self.db = db

    def get(self, household_id: str) -> Optional[HouseholdFinancialSettings]:
        return self.db.get(HouseholdFinancialSettings, household_id)

    def upsert(
        self,
        household_id: str,
        reserve_kind: str,
        reserve_value: Decimal,
        weekend_weight: Decimal,
        reference_income: Optional[Decimal],
        low_balance_threshold: Decimal,
    ) -> HouseholdFinancialSettings:
        """Create or replace a household's settings"""
        row = self.get(household_id)
        if row is None:
            row = HouseholdFinancialSettings(household_id=household_id)
            self.db.add(row)

        row.reserve_kind = reserve_kind
        row.reserve_value = reserve_value
        row.weekend_weight = weekend_weight
        row.reference_income = reference_income
        row.low_balance_threshold = low_balance_threshold
        self.db.flush()
        return row


class SnapshotRepository:
    """Repository for computed health snapshots"""

    def __init__(self, db: Session, autonomy_cap: Optional[Decimal] = None):
        self.db = db
        # Runway is stored capped like the "90+" label; the column holds 12 integer digits
        self.autonomy_cap = autonomy_cap if autonomy_cap is not None else Decimal(settings.autonomy_display_cap_days)

    def create_snapshot(
        self,
        household_id: str,
        year: int,
        month: int,
        as_of: date,
        input_hash: str,
        result: FinancialHealthResult,
    ) -> HealthSnapshot:
        """Persist a served health result"""
        snapshot = HealthSnapshot(
            household_id=household_id,
            year=year,
            month=month,
            as_of=as_of,
            input_hash=input_hash,
            status=result.status,
            current_balance=result.current_balance,
            daily_budget=result.daily_budget,
            projected_end_balance=result.projected_end_balance,
            autonomy_days=None if result.autonomy_is_indefinite else min(result.autonomy_days, self.autonomy_cap),
            alerts=[{"severity": a.severity, "message": a.message} for a in result.alerts],
        )
        self.db.add(snapshot)
        self.db.flush()  # Get ID without committing
        return snapshot

    def get_snapshots_by_household(self, household_id: str, limit: int = 20) -> List[HealthSnapshot]:
        """Fetch recent snapshots for a household"""
        return (
            self.db.query(HealthSnapshot)
            .filter(HealthSnapshot.household_id == household_id)
            .order_by(HealthSnapshot.created_at.desc())
            .limit(limit)
            .all()
        )
