"""Prometheus metrics for OrderStream."""

from prometheus_client import Counter

# Feed messages by final outcome: acked | not_acked | gave_up
messages_consumed_total = Counter(
    "orderstream_messages_consumed_total",
    "Total feed messages handled by the ingestion worker",
    ["outcome"]
)

# Individual orders: stored | unchanged | rejected | failed
orders_processed_total = Counter(
    "orderstream_orders_processed_total",
    "Total orders processed by the ingestion worker",
    ["result"]
)

dead_letters_total = Counter(
    "orderstream_dead_letters_total",
    "Payloads forwarded to the dead-letter channel",
    ["reason", "status"]  # status: sent|failed
)

cache_requests_total = Counter(
    "orderstream_cache_requests_total",
    "Order cache lookups",
    ["result"]  # hit|miss
)

cache_evictions_total = Counter(
    "orderstream_cache_evictions_total",
    "Entries evicted from the order cache by capacity"
)
