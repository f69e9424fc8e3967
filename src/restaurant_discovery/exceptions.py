"""Error taxonomy for the discovery library.

Discovery queries only raise for bad calling conventions (unknown ids, invalid
query input). Collaborator failures (profile store, location, data provider)
are translated into these types and surfaced to the caller without retrying.
"""


class DiscoveryError(Exception):
    """Base class for all errors raised by the discovery library."""


class NotFoundError(DiscoveryError):
    """Raised when a restaurant id is not present in the current snapshot."""

    def __init__(self, restaurant_id: str) -> None:
        super().__init__(f"Restaurant not found: {restaurant_id}")
        self.restaurant_id = restaurant_id


class NotLoggedInError(DiscoveryError):
    """Raised when a favorites mutation is attempted without an active session."""

    def __init__(self) -> None:
        super().__init__("User not logged in")


class ProfileUnavailableError(DiscoveryError):
    """Raised when the user-profile store cannot be reached."""


class LocationUnavailableError(DiscoveryError):
    """Raised when no current location could be obtained."""


class LocationPermissionDeniedError(LocationUnavailableError):
    """Raised when the platform refuses access to the device location."""


class QueryValidationError(DiscoveryError, ValueError):
    """Raised for malformed query input such as a negative radius."""


class DataProviderError(DiscoveryError):
    """Raised when a restaurant data provider fails to deliver a batch."""
