"""In-memory holder of the current restaurant snapshot."""

import logging
from collections.abc import Iterable

from restaurant_discovery.exceptions import NotFoundError
from restaurant_discovery.models.restaurant_models import Restaurant, SnapshotChanged
from restaurant_discovery.observability.metrics import record_snapshot_replaced
from restaurant_discovery.services.event_stream import EventStream, Subscription

logger = logging.getLogger(__name__)


class RestaurantStore:
    """Canonical snapshot of restaurant records.

    The snapshot is an immutable tuple replaced wholesale by ``replace_all``;
    readers always get the tuple that was current when they asked, never a
    partially applied update. The store does not fetch data itself, a data
    provider collaborator drives ``replace_all``.
    """

    def __init__(self) -> None:
        """Initialize an empty store."""
        self._snapshot: tuple[Restaurant, ...] = ()
        self._index: dict[str, Restaurant] = {}
        self._version = 0
        # Slow subscribers only need the latest snapshot
        self._events: EventStream[SnapshotChanged] = EventStream("restaurant-snapshot", max_pending=1)

    @property
    def version(self) -> int:
        """Number of snapshot replacements applied so far."""
        return self._version

    def __len__(self) -> int:
        return len(self._snapshot)

    def replace_all(self, records: Iterable[Restaurant]) -> int:
        """Atomically replace the snapshot.

        Duplicate ids keep the last record supplied, placed at the position
        where the id first appeared.

        Args:
            records: New restaurant records in display order

        Returns:
            int: Number of restaurants in the new snapshot
        """
        index: dict[str, Restaurant] = {}
        duplicates = 0
        for record in records:
            if record.id in index:
                duplicates += 1
            index[record.id] = record

        if duplicates:
            logger.warning(f"Snapshot contained {duplicates} duplicate restaurant ids, kept last")

        snapshot = tuple(index.values())

        # Snapshot and index always describe the same replacement
        self._snapshot, self._index = snapshot, index
        self._version += 1

        logger.info(f"Restaurant snapshot v{self._version} loaded with {len(snapshot)} restaurants")
        record_snapshot_replaced(len(snapshot))

        self._events.publish(SnapshotChanged(version=self._version, restaurants=snapshot))
        return len(snapshot)

    def snapshot(self) -> tuple[Restaurant, ...]:
        """Return the current immutable snapshot."""
        return self._snapshot

    def get_all(self) -> tuple[Restaurant, ...]:
        """Return every restaurant in the order of the last replacement."""
        return self._snapshot

    def get_by_id(self, restaurant_id: str) -> Restaurant:
        """Look up a restaurant by id.

        Args:
            restaurant_id: Restaurant identifier

        Returns:
            Restaurant: The matching record

        Raises:
            NotFoundError: If the id is not in the current snapshot
        """
        restaurant = self._index.get(restaurant_id)
        if restaurant is None:
            raise NotFoundError(restaurant_id)
        return restaurant

    def subscribe(self) -> Subscription[SnapshotChanged]:
        """Subscribe to snapshot replacements made after this call."""
        return self._events.subscribe()
