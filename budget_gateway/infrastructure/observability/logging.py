"""Structured JSON logging for production observability"""

import logging
import sys
from datetime import datetime, timezone
from typing import Any, Dict, Optional

from pythonjsonlogger import jsonlogger

from budget_gateway.config import settings


class CustomJsonFormatter(jsonlogger.JsonFormatter):
    """Custom JSON formatter with timestamp and service metadata"""

    def add_fields(self, log_record: Dict[str, Any], record: logging.LogRecord, message_dict: Dict[str, Any]) -> None:
        super().add_fields(log_record, record, message_dict)
        log_record["timestamp"] = datetime.now(timezone.utc).isoformat()
        log_record["level"] = record.levelname
        log_record["service"] = settings.service_name


def setup_logging(level: str = "INFO") -> None:
    """Send every record to stdout as one JSON object per line"""
    root = logging.getLogger()
    root.setLevel(level)
    root.handlers.clear()

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(CustomJsonFormatter("%(timestamp)s %(level)s %(name)s %(message)s"))
    root.addHandler(handler)

    # httpx logs every ledger request at INFO; failures are logged by the client callers
    logging.getLogger("httpx").setLevel(max(logging.WARNING, root.level))


def log_health_computation(
    request_id: str,
    household_id: str,
    status: str,
    daily_budget: str,
    cache_hit: bool,
    duration_ms: float,
    dropped_events: int = 0,
    autonomy_days: Optional[str] = None,
) -> None:
    """Log structured health outcome for analysis"""
    logging.info(
        "Financial health computed",
        extra={
            "request_id": request_id,
            "household_id": household_id,
            "step": "health_complete",
            "health_status": status,
            "daily_budget": daily_budget,
            "autonomy_days": autonomy_days,
            "cache_hit": cache_hit,
            "dropped_events": dropped_events,
            "duration_ms": duration_ms,
        },
    )
