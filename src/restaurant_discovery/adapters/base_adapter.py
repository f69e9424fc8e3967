"""Base contracts for the collaborators the discovery library consumes.

Data providers return parsed records and skip malformed ones; transport
failures raise ``DataProviderError``. Location providers either return a
``Location`` or raise ``LocationUnavailableError``. Neither retries, the
caller decides whether to try again.
"""

from abc import ABC, abstractmethod

from restaurant_discovery.models.restaurant_models import Location, Restaurant


class RestaurantDataProvider(ABC):
    """Abstract source of restaurant records.

    Implementations (document store, REST API, ...) feed the restaurant
    store through the refresh service.
    """

    def __init__(self, source_name: str) -> None:
        """Initialize the provider.

        Args:
            source_name: Name of the backing source (e.g., 'dynamodb', 'http')
        """
        self.source_name = source_name

    @abstractmethod
    async def fetch_restaurants(self) -> list[Restaurant]:
        """Fetch the full list of restaurants.

        Returns:
            list: Parsed restaurants in source order; malformed records are skipped

        Raises:
            DataProviderError: If the source cannot be reached
        """
        pass


class LocationProvider(ABC):
    """Abstract source of the device's current location."""

    @abstractmethod
    async def get_current_location(self) -> Location:
        """Return a best-effort current location.

        Returns:
            Location: The current position

        Raises:
            LocationPermissionDeniedError: If location access is not granted
            LocationUnavailableError: If no location can be determined
        """
        pass
