"""
Metrics instrumentation for observability.
Prometheus-compatible collectors registered on the default registry;
the hosting web app exposes them with `render_metrics()`.
"""

from prometheus_client import Counter, Histogram, generate_latest, CONTENT_TYPE_LATEST

# Connection metrics
connection_attempts = Counter(
    'mongo_connection_attempts_total',
    'MongoDB connection attempts',
    ['result']  # success, failure
)

# Database metrics
db_operations = Counter(
    'db_operations_total',
    'Total database operations',
    ['operation']  # read, write, delete, lookup
)

write_latency = Histogram(
    'db_write_latency_seconds',
    'Validated document write latency',
    ['collection'],
    buckets=[0.001, 0.005, 0.01, 0.025, 0.05, 0.1, 0.25, 0.5, 1.0]
)

# Validation metrics
validation_failures = Counter(
    'validation_failures_total',
    'Writes rejected before reaching the database',
    ['model', 'reason']  # reason: invalid, missing_reference, duplicate
)


def render_metrics() -> tuple[bytes, str]:
    """Return the exposition payload and its content type."""
    return generate_latest(), CONTENT_TYPE_LATEST


# Convenience functions for instrumentation
def record_connection_attempt(success: bool):
    result = "success" if success else "failure"
    connection_attempts.labels(result=result).inc()

def record_db_operation(operation: str):
    """Record database operation. Operation: read, write, delete, lookup"""
    db_operations.labels(operation=operation).inc()

def record_validation_failure(model: str, reason: str):
    validation_failures.labels(model=model, reason=reason).inc()
