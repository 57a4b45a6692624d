"""Prometheus metrics for trip extensions, store health and request latency"""

from prometheus_client import Counter, Histogram

# Extension metrics
extension_counter = Counter(
    "driveflow_extension_total",
    "Trip extension attempts by outcome",
    ["outcome"],  # extended | invalid | unavailable | payment_failed | unsaved
)

extension_days_histogram = Histogram(
    "driveflow_extension_days",
    "Extra days added per confirmed extension",
    buckets=[1, 2, 3, 5, 7, 14, 30],
)

payment_failure_counter = Counter(
    "driveflow_payment_failures_total",
    "Extension payments that did not succeed",
    ["method"],
)

unsaved_extension_payments_counter = Counter(
    "driveflow_extension_unsaved_payments_total",
    "Extension payments taken whose new return date was not saved",
)

# Store metrics
store_failures_counter = Counter(
    "driveflow_store_failures_total",
    "Failed queries against the booking store",
    ["entity"],
)

storage_upload_failures_counter = Counter(
    "driveflow_storage_upload_failures_total",
    "Failed uploads to object storage",
)

# Service health
request_duration_histogram = Histogram(
    "http_request_duration_seconds",
    "HTTP request latency",
    ["method", "endpoint", "status"],
)


def record_extension(outcome: str, extra_days: int = 0) -> None:
    """Record extension outcome; day distribution only for confirmed extensions"""
    extension_counter.labels(outcome=outcome).inc()
    if outcome == "extended":
        extension_days_histogram.observe(extra_days)
    elif outcome == "unsaved":
        unsaved_extension_payments_counter.inc()
