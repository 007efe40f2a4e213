"""Prometheus metrics for dashboard computations, exports and ledger fetches"""

from prometheus_client import Counter, Histogram

# Engine metrics
dashboard_counter = Counter(
    "udp_dashboard_total",
    "Dashboards computed",
    ["window"],  # 7d | 30d | 90d | 1y | all | custom
)

dashboard_transactions_histogram = Histogram(
    "udp_dashboard_transactions",
    "Transactions inside the requested window",
    buckets=[0, 10, 50, 100, 500, 1000, 5000],
)

csv_export_counter = Counter(
    "udp_csv_export_total",
    "CSV exports served",
    ["escape_policy"],
)

parse_failures_counter = Counter(
    "udp_parse_failures_total",
    "Ledger records rejected with a parse error",
)

# Cache metrics
cache_lookup_counter = Counter(
    "udp_dashboard_cache_lookups_total",
    "Dashboard cache lookups",
    ["result"],  # hit | miss
)

# Ledger API metrics
ledger_fetch_failures_counter = Counter(
    "ledger_fetch_failures_total",
    "Failed ledger API calls",
)

ledger_fetch_latency_histogram = Histogram(
    "ledger_fetch_latency_seconds",
    "Ledger balance history response time",
    buckets=[0.1, 0.25, 0.5, 1.0, 2.5, 5.0, 10.0],
)

# Service health
request_duration_histogram = Histogram(
    "http_request_duration_seconds",
    "HTTP request latency",
    ["method", "endpoint", "status"],
)


def record_dashboard(window_label: str, transaction_count: int) -> None:
    """Record a dashboard computation for the requested window"""
    dashboard_counter.labels(window=window_label).inc()
    dashboard_transactions_histogram.observe(transaction_count)


def record_cache_lookup(hit: bool) -> None:
    cache_lookup_counter.labels(result="hit" if hit else "miss").inc()
