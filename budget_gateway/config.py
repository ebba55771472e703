"""Configuration management using Pydantic Settings"""

from decimal import Decimal
from typing import List

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application configuration loaded from environment variables"""

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    # Database
    database_url: str = "sqlite:///./household_budget.db"

    # External Services
    ledger_api_base: str = "http://localhost:8002"

    # Service
    service_name: str = "budget-gateway"
    log_level: str = "INFO"

    # HTTP Client
    http_timeout_seconds: float = 5.0
    ledger_max_retries: int = 3
    ledger_backoff_base: float = 0.5  # Exponential backoff base in seconds

    # Household defaults (used until a household saves its own settings)
    default_reserve_kind: str = "fixed"
    default_reserve_value: Decimal = Decimal("0")
    default_weekend_weight: Decimal = Decimal("1.0")
    default_low_balance_threshold: Decimal = Decimal("100")

    # Health thresholds
    caution_slack_ratio: Decimal = Decimal("0.10")
    short_runway_days: int = 7
    autonomy_display_cap_days: int = 90
    fixed_expense_categories: List[str] = ["bills", "housing", "rent", "utilities"]

    # Health result cache
    health_cache_ttl_seconds: float = 120.0
    health_cache_max_entries: int = 512


settings = Settings()
