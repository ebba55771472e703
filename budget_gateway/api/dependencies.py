"""Dependency injection for FastAPI endpoints"""

from fastapi import Request
from budget_gateway.config import settings
from budget_gateway.infrastructure.cache import HealthCache
from budget_gateway.infrastructure.clients.ledger import LedgerClient

health_cache: HealthCache = HealthCache(
    ttl_seconds=settings.health_cache_ttl_seconds,
    max_entries=settings.health_cache_max_entries,
)


def get_request_id(request: Request) -> str:
    """Extract request ID from request state"""
    return getattr(request.state, "request_id", "unknown")


def get_ledger_client() -> LedgerClient:
    """Provide Ledger API client instance"""
    return LedgerClient()


def get_health_cache() -> HealthCache:
    """Provide the process-wide health result cache"""
    return health_cache
