"""
Metrics definitions for DisasterLens.

This module defines Prometheus metrics for monitoring
report intake, classification, persistence and realtime fan-out.
"""

from prometheus_client import Counter, Histogram, Gauge

# 카운터 메트릭
reports_received = Counter(
    "reports_received_total",
    "Number of reports submitted",
    ["origin"]
)

reports_classified = Counter(
    "reports_classified_total",
    "Number of classifier results",
    ["type", "severity"]
)

report_transitions = Counter(
    "report_status_transitions_total",
    "Number of report status changes",
    ["status"]
)

alert_mutations = Counter(
    "alert_mutations_total",
    "Number of alert create/update/delete operations",
    ["operation"]
)

store_fallbacks = Counter(
    "store_fallbacks_total",
    "Store operations that skipped an unavailable source",
    ["source", "operation"]
)

events_broadcast = Counter(
    "realtime_events_broadcast_total",
    "Realtime events broadcast to subscribers",
    ["type"]
)

delivery_failures = Counter(
    "realtime_delivery_failures_total",
    "Subscriber deliveries that failed and removed the subscriber"
)

# 히스토그램 메트릭
classify_seconds = Histogram(
    "classify_duration_seconds",
    "Time spent classifying report text",
    buckets=[0.0001, 0.0005, 0.001, 0.005, 0.01, 0.05, 0.1]
)

store_seconds = Histogram(
    "store_operation_duration_seconds",
    "Time spent in store operations",
    ["operation"],
    buckets=[0.001, 0.005, 0.01, 0.05, 0.1, 0.5, 1.0, 5.0]
)

# 게이지 메트릭
subscribers = Gauge(
    "realtime_subscribers",
    "Currently connected realtime subscribers"
)

uptime_seconds = Gauge(
    "uptime_seconds",
    "Service uptime in seconds"
)
