"""Prometheus metrics for health outcomes, daily budgets, ledger fetches and cache efficiency"""

from decimal import Decimal

from prometheus_client import Counter, Histogram

# Health metrics
health_status_counter = Counter(
    "budget_health_computations_total",
    "Financial health computations by resulting status",
    ["status"],  # HEALTHY | CAUTION | DANGER
)

daily_budget_histogram = Histogram(
    "budget_daily_budget_amount",
    "Safe daily budget handed out",
    buckets=[0, 10, 25, 50, 100, 250, 500, 1000],
)

dropped_events_counter = Counter(
    "budget_dropped_events_total",
    "Malformed or out-of-month ledger events skipped during computation",
)

config_error_counter = Counter(
    "budget_config_errors_total",
    "Rejected household financial settings",
)

# Ledger API metrics
ledger_latency_histogram = Histogram(
    "ledger_fetch_latency_seconds",
    "Ledger snapshot response time",
    buckets=[0.1, 0.25, 0.5, 1.0, 2.5, 5.0, 10.0],
)

ledger_fetch_failures_counter = Counter(
    "ledger_fetch_failures_total",
    "Failed ledger API calls",
)

# Cache metrics
health_cache_counter = Counter(
    "budget_health_cache_total",
    "Health cache lookups",
    ["result"],  # hit | miss
)

# Service health
request_duration_histogram = Histogram(
    "http_request_duration_seconds",
    "HTTP request latency",
    ["method", "endpoint", "status"],
)


def record_health(status: str, daily_budget: Decimal, dropped_events: int) -> None:
    """Record outcome metrics for monitoring household health distribution"""
    health_status_counter.labels(status=status).inc()
    daily_budget_histogram.observe(float(daily_budget))
    if dropped_events:
        dropped_events_counter.inc(dropped_events)
