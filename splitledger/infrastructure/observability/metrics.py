"""Prometheus metrics for monitoring ledger recomputation, settlements, and webhook performance"""

from prometheus_client import Counter, Histogram

# Ledger metrics
ledger_computation_counter = Counter(
    "splitledger_ledger_computations_total",
    "Total balance/plan recomputations",
    ["view"],  # balances | plan | stateless
)

plan_size_histogram = Histogram(
    "splitledger_plan_entries",
    "Number of entries in computed settlement plans",
    buckets=[0, 1, 2, 3, 5, 8, 13, 21],
)

# Settlement metrics
settlement_counter = Counter(
    "splitledger_settlements_total",
    "Settlement lifecycle events",
    ["event"],  # proposed | confirmed
)

# Webhook metrics
webhook_latency_histogram = Histogram(
    "webhook_latency_seconds",
    "Settlement notification webhook response time",
    buckets=[0.1, 0.25, 0.5, 1.0, 2.5, 5.0, 10.0],
)

webhook_failure_counter = Counter(
    "webhook_failures_total",
    "Failed webhook deliveries",
)

# Service health
request_duration_histogram = Histogram(
    "http_request_duration_seconds",
    "HTTP request latency",
    ["method", "endpoint", "status"],
)


def record_computation(view: str, plan_size: int | None = None) -> None:
    """Record a ledger recomputation and, for plan views, the plan size"""
    ledger_computation_counter.labels(view=view).inc()
    if plan_size is not None:
        plan_size_histogram.observe(plan_size)


def record_settlement(event: str) -> None:
    settlement_counter.labels(event=event).inc()
