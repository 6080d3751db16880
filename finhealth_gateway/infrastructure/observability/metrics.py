"""Prometheus metrics for monitoring score distribution, recurring detection, and backend calls"""

from prometheus_client import Counter, Histogram

# Health score metrics
score_counter = Counter(
    "finhealth_score_total",
    "Total health scores calculated",
    ["level"],  # 0-5
)

score_histogram = Histogram(
    "finhealth_score_value",
    "Distribution of health score totals",
    buckets=[200, 400, 600, 750, 900, 1000],
)

# Recurring detection metrics
recurring_detection_counter = Counter(
    "finhealth_recurring_detection_total",
    "Recurring charge detections run",
)

recurring_charges_histogram = Histogram(
    "finhealth_recurring_charges_found",
    "Recurring charges found per detection",
    buckets=[0, 1, 2, 5, 10, 20, 50],
)

recurring_cache_counter = Counter(
    "finhealth_recurring_cache_total",
    "Recurring result cache lookups",
    ["result"],  # hit | miss
)

rate_limited_counter = Counter(
    "finhealth_rate_limited_total",
    "Requests rejected by the per-user rate limit",
)

# Finance backend metrics
finance_fetch_failures_counter = Counter(
    "finance_api_fetch_failures_total",
    "Failed finance backend calls",
)

# Service health
request_duration_histogram = Histogram(
    "http_request_duration_seconds",
    "HTTP request latency",
    ["method", "endpoint", "status"],
)


def record_score(total: int, level: int) -> None:
    """Record score metrics for monitoring level distribution"""
    score_counter.labels(level=str(level)).inc()
    score_histogram.observe(total)


def record_recurring_detection(charge_count: int) -> None:
    """Record a completed recurring detection"""
    recurring_detection_counter.inc()
    recurring_charges_histogram.observe(charge_count)
