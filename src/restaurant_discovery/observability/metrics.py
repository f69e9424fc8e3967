"""Custom metrics for the restaurant discovery library."""

from opentelemetry import metrics

# Get meter for discovery library
meter = metrics.get_meter("discovery-svc")

# Discovery query counter
discovery_query_counter = meter.create_counter(
    name="discovery_queries_total",
    description="Total number of discovery queries by operation",
    unit="1",
)

# Discovery result size histogram
discovery_result_size = meter.create_histogram(
    name="discovery_result_size",
    description="Number of restaurants returned by discovery queries",
    unit="1",
)

favorites_mutation_counter = meter.create_counter(
    name="favorites_mutations_total",
    description="Total number of favorites mutations by operation",
    unit="1",
)

restaurant_refresh_counter = meter.create_counter(
    name="restaurant_refresh_total",
    description="Total number of restaurant snapshot refreshes by outcome",
    unit="1",
)

# Refresh duration histogram
restaurant_refresh_duration = meter.create_histogram(
    name="restaurant_refresh_duration_seconds",
    description="Duration of restaurant snapshot refreshes",
    unit="s",
)

# Current snapshot size gauge
snapshot_size = meter.create_up_down_counter(
    name="restaurant_snapshot_size",
    description="Number of restaurants in the current snapshot",
    unit="1",
)

_last_snapshot_size = 0


def record_discovery_query(operation: str, result_count: int) -> None:
    """Record a discovery query.

    Args:
        operation: Query operation (e.g., "search", "nearby")
        result_count: Number of restaurants returned
    """
    discovery_query_counter.add(1, {"operation": operation})
    discovery_result_size.record(result_count, {"operation": operation})


def record_favorites_mutation(operation: str, changed: bool) -> None:
    """Record a favorites mutation.

    Args:
        operation: Mutation performed ("add", "remove")
        changed: Whether the favorite set actually changed
    """
    favorites_mutation_counter.add(1, {"operation": operation, "changed": changed})


def record_refresh(outcome: str, duration_seconds: float) -> None:
    """Record a restaurant snapshot refresh.

    Args:
        outcome: "success" or "failure"
        duration_seconds: Duration in seconds
    """
    restaurant_refresh_counter.add(1, {"outcome": outcome})
    restaurant_refresh_duration.record(duration_seconds, {"outcome": outcome})


def record_snapshot_replaced(size: int) -> None:
    """Record the size of a newly installed snapshot.

    Args:
        size: Number of restaurants in the new snapshot
    """
    global _last_snapshot_size
    snapshot_size.add(size - _last_snapshot_size)
    _last_snapshot_size = size
