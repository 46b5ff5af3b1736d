"""Prometheus metrics for purchase volume, cashback and price lookups"""

from prometheus_client import Counter, Histogram

# Transaction metrics
transactions_created_counter = Counter(
    "cashback_transactions_created_total",
    "Purchases recorded",
    ["category"],
)

transactions_deleted_counter = Counter(
    "cashback_transactions_deleted_total",
    "Purchases deleted",
)

cashback_amount_histogram = Histogram(
    "cashback_amount_usd",
    "Cashback earned per purchase in USD",
    buckets=[0.1, 0.5, 1.0, 2.5, 5.0, 10.0, 25.0, 50.0],
)

# Price metrics
price_lookup_counter = Counter(
    "price_lookups_total",
    "Historical and live price lookups",
    ["kind", "source"],  # kind: historical | live, source: cache | api | stale
)

price_fetch_failures_counter = Counter(
    "price_fetch_failures_total",
    "Failed price API calls",
    ["kind"],
)

price_skipped_counter = Counter(
    "price_skipped_transactions_total",
    "Purchases excluded from SOL totals for lack of a price",
)

# Service health
request_duration_histogram = Histogram(
    "http_request_duration_seconds",
    "HTTP request latency",
    ["method", "endpoint", "status"],
)


def record_transaction_created(category: str, cashback_usd: float) -> None:
    """Record purchase volume by category and cashback distribution"""
    transactions_created_counter.labels(category=category).inc()
    cashback_amount_histogram.observe(cashback_usd)
