"""SQLAlchemy ORM models for household settings and computed health snapshots"""

import uuid
from sqlalchemy import Column, Date, DateTime, Integer, JSON, Numeric, Text, Uuid
from sqlalchemy.orm import declarative_base
from sqlalchemy.sql import func

Base = declarative_base()


class HouseholdFinancialSettings(Base):
    """Household-level engine configuration"""

    __tablename__ = "household_financial_settings"

    household_id = Column(Text, primary_key=True)
    reserve_kind = Column(Text, nullable=False, default="fixed")
    reserve_value = Column(Numeric(14, 2), nullable=False, default=0)
    weekend_weight = Column(Numeric(6, 2), nullable=False, default=1)
    reference_income = Column(Numeric(14, 2), nullable=True)  # None: use the month's income
    low_balance_threshold = Column(Numeric(14, 2), nullable=False, default=100)
    updated_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now(), onupdate=func.now())


class HealthSnapshot(Base):
    """Health result as served to a household, kept for history"""

    __tablename__ = "health_snapshot"

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    household_id = Column(Text, nullable=False, index=True)
    year = Column(Integer, nullable=False)
    month = Column(Integer, nullable=False)
    as_of = Column(Date, nullable=False)
    input_hash = Column(Text, nullable=False)
    status = Column(Text, nullable=False)
    current_balance = Column(Numeric(14, 2), nullable=False)
    daily_budget = Column(Numeric(14, 2), nullable=False)
    projected_end_balance = Column(Numeric(14, 2), nullable=False)
    autonomy_days = Column(Numeric(14, 2), nullable=True)  # None: indefinite
    alerts = Column(JSON, nullable=True)
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())
