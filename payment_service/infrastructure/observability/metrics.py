"""Prometheus metrics for payment operations, rule rejections and search volume"""

from prometheus_client import Counter, Histogram

# Lifecycle metrics
transaction_operation_counter = Counter(
    "payment_transaction_operations_total",
    "Pay/cancel/refund operations processed",
    ["operation", "bank_id", "outcome"],  # outcome: success | rejected | invalid_bank | not_found | error
)

business_rule_rejection_counter = Counter(
    "payment_business_rule_rejections_total",
    "Cancel/refund rejected by time window or reversal rules",
    ["operation"],
)

transaction_amount_histogram = Histogram(
    "payment_transaction_amount",
    "Amounts charged by successful pay operations",
    buckets=[10, 50, 100, 500, 1_000, 5_000, 10_000, 50_000],
)

# Search metrics
search_result_size_histogram = Histogram(
    "payment_search_result_rows",
    "Rows returned per search",
    buckets=[0, 1, 5, 10, 50, 100, 500, 1_000],
)

# Service health
request_duration_histogram = Histogram(
    "http_request_duration_seconds",
    "HTTP request latency",
    ["method", "endpoint", "status"],
)


def record_operation(operation: str, bank_id: str, outcome: str) -> None:
    """
    Record the outcome of a pay, cancel or refund.

    bank_id must be a canonical id or "unknown" to keep label cardinality bounded.
    """
    transaction_operation_counter.labels(operation=operation, bank_id=bank_id, outcome=outcome).inc()
    if outcome == "rejected":
        business_rule_rejection_counter.labels(operation=operation).inc()
