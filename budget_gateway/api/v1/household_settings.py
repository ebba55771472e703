"""GET/PUT /v1/households/{household_id}/settings - Household financial settings"""

import logging
from dataclasses import dataclass
from decimal import Decimal
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from budget_gateway.api.dependencies import get_health_cache
from budget_gateway.api.v1.schemas import HouseholdSettingsSchema
from budget_gateway.config import settings
from budget_gateway.domain.allocation import weekend_weigher
from budget_gateway.domain.exceptions import ConfigError
from budget_gateway.domain.models import ReservePolicy
from budget_gateway.infrastructure.cache import HealthCache
from budget_gateway.infrastructure.database.repositories import SettingsRepository
from budget_gateway.infrastructure.database.session import get_db
from budget_gateway.infrastructure.observability.metrics import config_error_counter

router = APIRouter()


@dataclass(frozen=True)
class HouseholdConfig:
    """Engine configuration resolved for one household"""

    reserve_policy: ReservePolicy
    weekend_weight: Decimal
    reference_income: Optional[Decimal]
    low_balance_threshold: Decimal


def load_household_config(db: Session, household_id: str) -> HouseholdConfig:
    """
    Stored settings, or the service defaults for households that never saved any.

    Raises:
        ConfigError: stored values no longer pass validation
    """
    row = SettingsRepository(db).get(household_id)
    if row is None:
        return HouseholdConfig(
            reserve_policy=ReservePolicy(settings.default_reserve_kind, settings.default_reserve_value),
            weekend_weight=settings.default_weekend_weight,
            reference_income=None,
            low_balance_threshold=settings.default_low_balance_threshold,
        )
    return HouseholdConfig(
        reserve_policy=ReservePolicy(row.reserve_kind, Decimal(row.reserve_value)),
        weekend_weight=Decimal(row.weekend_weight),
        reference_income=Decimal(row.reference_income) if row.reference_income is not None else None,
        low_balance_threshold=Decimal(row.low_balance_threshold),
    )


@router.get("/households/{household_id}/settings", response_model=HouseholdSettingsSchema)
def get_household_settings(household_id: str, db: Session = Depends(get_db)):
    """Current settings (defaults when none were saved)"""
    try:
        config = load_household_config(db, household_id)
    except ConfigError as e:
        raise HTTPException(status_code=422, detail=str(e))

    return HouseholdSettingsSchema(
        reserve_kind=config.reserve_policy.kind,
        reserve_value=config.reserve_policy.value,
        weekend_weight=config.weekend_weight,
        reference_income=config.reference_income,
        low_balance_threshold=config.low_balance_threshold,
    )


@router.put("/households/{household_id}/settings", response_model=HouseholdSettingsSchema)
def update_household_settings(
    household_id: str,
    body: HouseholdSettingsSchema,
    db: Session = Depends(get_db),
    cache: HealthCache = Depends(get_health_cache),
):
    """
    Validate and store settings.

    Invalid values are rejected with 422, never clamped. Cached health
    results of the household are dropped.
    """
    try:
        ReservePolicy(body.reserve_kind, body.reserve_value)
        weekend_weigher(body.weekend_weight)
        if body.reference_income is not None and body.reference_income < 0:
            raise ConfigError(f"Reference income cannot be negative, got {body.reference_income}")
    except ConfigError as e:
        config_error_counter.inc()
        logging.warning(f"Rejected settings: {e}", extra={"household_id": household_id})
        raise HTTPException(status_code=422, detail=str(e))

    SettingsRepository(db).upsert(
        household_id=household_id,
        reserve_kind=body.reserve_kind,
        reserve_value=body.reserve_value,
        weekend_weight=body.weekend_weight,
        reference_income=body.reference_income,
        low_balance_threshold=body.low_balance_threshold,
    )
    db.commit()
    cache.invalidate_household(household_id)

    return body
