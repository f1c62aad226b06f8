"""Custom metrics for the marketplace client."""

from opentelemetry import metrics

meter = metrics.get_meter("marketplace-client")

api_request_counter = meter.create_counter(
    name="api_request_total",
    description="Total number of marketplace API requests by method and outcome",
    unit="1",
)

api_request_duration = meter.create_histogram(
    name="api_request_duration_seconds",
    description="Duration of marketplace API requests",
    unit="s",
)

session_expired_counter = meter.create_counter(
    name="session_expired_total",
    description="Number of sessions torn down after a 401 response",
    unit="1",
)

optimistic_rollback_counter = meter.create_counter(
    name="optimistic_rollback_total",
    description="Number of optimistic local changes reverted after a failed call",
    unit="1",
)


def record_api_request(method: str, outcome: str, duration_seconds: float) -> None:
    """Record a completed API request.

    Args:
        method: HTTP method
        outcome: "success" or the error class name
        duration_seconds: Wall time of the request
    """
    attributes = {"method": method, "outcome": outcome}
    api_request_counter.add(1, attributes)
    api_request_duration.record(duration_seconds, attributes)


def record_session_expired() -> None:
    """Record a session teardown caused by a 401 response."""
    session_expired_counter.add(1)


def record_optimistic_rollback(entity: str, operation: str) -> None:
    """Record a reverted optimistic change.

    Args:
        entity: Entity kind, e.g. "menu_item"
        operation: Operation that was rolled back ("add", "update", "remove")
    """
    optimistic_rollback_counter.add(1, {"entity": entity, "operation": operation})
