"""Prometheus metrics for card mutations and reminder scheduling"""

from prometheus_client import Counter, Histogram

# Card metrics
card_mutation_counter = Counter(
    "card_calendar_card_mutations_total",
    "Card create/update/delete operations",
    ["action"],  # create | update | delete
)

validation_failure_counter = Counter(
    "card_calendar_validation_failures_total",
    "Card input rejected by validation",
)

storage_failure_counter = Counter(
    "card_calendar_storage_failures_total",
    "Card or reminder store operations that failed",
)

# Reminder metrics
reminder_upsert_counter = Counter(
    "card_calendar_reminders_upserted_total",
    "Reminder requests issued to the notification sink",
    ["kind"],  # cut_date | payment
)

reminder_cancel_counter = Counter(
    "card_calendar_reminder_cancellations_total",
    "Per-card reminder cancellations",
)

reconcile_skipped_counter = Counter(
    "card_calendar_reconcile_skipped_total",
    "Reconciles skipped because notifications are not authorized",
)

reschedule_all_counter = Counter(
    "card_calendar_reschedule_all_total",
    "Full reminder reschedules",
)

# Service health
request_duration_histogram = Histogram(
    "http_request_duration_seconds",
    "HTTP request latency",
    ["method", "endpoint", "status"],
)
