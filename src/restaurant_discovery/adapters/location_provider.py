"""Location providers.

``DeviceLocationProvider`` wraps the platform's "last known location" call:
it checks the location permission first, falls back to a default location
when the platform has no fix yet, and reports platform failures as
``LocationUnavailableError``.
"""

import logging
from collections.abc import Awaitable, Callable

from restaurant_discovery.adapters.base_adapter import LocationProvider
from restaurant_discovery.exceptions import (
    LocationPermissionDeniedError,
    LocationUnavailableError,
)
from restaurant_discovery.models.restaurant_models import Location

logger = logging.getLogger(__name__)

# Universidad de los Andes campus, Bogotá
DEFAULT_LATITUDE = 4.6017
DEFAULT_LONGITUDE = -74.0659


class FixedLocationProvider(LocationProvider):
    """Always reports the same location."""

    def __init__(self, latitude: float = DEFAULT_LATITUDE, longitude: float = DEFAULT_LONGITUDE) -> None:
        self.latitude = latitude
        self.longitude = longitude

    async def get_current_location(self) -> Location:
        return Location(latitude=self.latitude, longitude=self.longitude)


class DeviceLocationProvider(LocationProvider):
    """Location provider backed by a platform location reader.

    The reader returns the last known Location, or None when the platform
    has no fix yet.
    """

    def __init__(
        self,
        reader: Callable[[], Awaitable[Location | None]],
        has_permission: Callable[[], bool],
        default_location: Location | None = None,
    ) -> None:
        """Initialize the provider.

        Args:
            reader: Coroutine function returning the last known location or None
            has_permission: Returns whether location access is granted
            default_location: Location used when the reader has no fix
        """
        self.reader = reader
        self.has_permission = has_permission
        self.default_location = default_location

    async def get_current_location(self) -> Location:
        """Return the device location.

        Returns:
            Location: Last known location, or the default location without a fix

        Raises:
            LocationPermissionDeniedError: If location permission is not granted
            LocationUnavailableError: If the reader fails, or has no fix and no default is set
        """
        if not self.has_permission():
            raise LocationPermissionDeniedError("Location permission not granted")

        try:
            location = await self.reader()
        except Exception as e:
            logger.error(f"Location reader failed: {e}")
            raise LocationUnavailableError(f"Location unavailable: {e}") from e

        if location is not None:
            return location

        if self.default_location is None:
            raise LocationUnavailableError("No location fix available")

        logger.info("No location fix, using default location")
        return Location(
            latitude=self.default_location.latitude,
            longitude=self.default_location.longitude,
        )
