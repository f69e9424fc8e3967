"""Refresh service that populates the restaurant store from a data provider."""

import logging
import time
from dataclasses import dataclass

from restaurant_discovery.adapters.base_adapter import RestaurantDataProvider
from restaurant_discovery.exceptions import DataProviderError
from restaurant_discovery.observability.decorators import traced
from restaurant_discovery.observability.metrics import record_refresh
from restaurant_discovery.services.restaurant_store import RestaurantStore

logger = logging.getLogger(__name__)


@dataclass
class RefreshResult:
    """Result of a snapshot refresh.

    Attributes:
        success: Whether a new snapshot was installed
        source: Name of the data provider used
        restaurant_count: Restaurants in the store after the refresh
        version: Store version after the refresh
        error_message: Error message if the refresh failed, None otherwise
    """

    success: bool
    source: str
    restaurant_count: int
    version: int
    error_message: str | None = None


class RestaurantRefreshService:
    """Pulls restaurants from a data provider into a RestaurantStore.

    A failed fetch leaves the current snapshot in place. Retrying is left
    to the caller.
    """

    def __init__(self, provider: RestaurantDataProvider, store: RestaurantStore) -> None:
        """Initialize the RestaurantRefreshService.

        Args:
            provider: Source of restaurant records
            store: Store receiving the new snapshots
        """
        self.provider = provider
        self.store = store

    @traced("restaurants.refresh")
    async def refresh(self) -> RefreshResult:
        """Fetch restaurants and replace the store's snapshot.

        Returns:
            RefreshResult indicating success/failure and the resulting snapshot size
        """
        start = time.monotonic()

        try:
            restaurants = await self.provider.fetch_restaurants()
        except DataProviderError as e:
            logger.error(f"Restaurant refresh from {self.provider.source_name} failed: {e}")
            record_refresh("failure", time.monotonic() - start)
            return RefreshResult(
                success=False,
                source=self.provider.source_name,
                restaurant_count=len(self.store),
                version=self.store.version,
                error_message=str(e),
            )

        count = self.store.replace_all(restaurants)
        record_refresh("success", time.monotonic() - start)

        return RefreshResult(
            success=True,
            source=self.provider.source_name,
            restaurant_count=count,
            version=self.store.version,
        )
