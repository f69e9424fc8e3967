"""Listing, searching and ranking queries over the restaurant snapshot."""

import logging
import math
from collections.abc import Callable, Iterable
from datetime import datetime, tzinfo
from zoneinfo import ZoneInfo

from restaurant_discovery.adapters.base_adapter import LocationProvider
from restaurant_discovery.exceptions import QueryValidationError
from restaurant_discovery.models.discovery_models import DiscoveryQuery
from restaurant_discovery.models.restaurant_models import OpenHoursPolicy, Restaurant
from restaurant_discovery.observability.metrics import record_discovery_query
from restaurant_discovery.services.geo_distance import distance_km
from restaurant_discovery.services.opening_hours import is_open_at
from restaurant_discovery.services.restaurant_store import RestaurantStore

logger = logging.getLogger(__name__)

DEFAULT_TIMEZONE = "America/Bogota"
DEFAULT_NEARBY_RADIUS_KM = 5.0

# Home screen chips that are not categories
BROWSE_ALL = "All"
BROWSE_OPEN = "Open"
BROWSE_TOP_RATED = "TopRated"


def _validate_point(latitude: float, longitude: float) -> None:
    if not (math.isfinite(latitude) and math.isfinite(longitude)):
        raise QueryValidationError(f"Coordinates must be finite, got ({latitude}, {longitude})")


def _validate_radius(radius_km: float) -> None:
    if math.isnan(radius_km) or radius_km < 0:
        raise QueryValidationError(f"Radius must be non-negative, got {radius_km}")


class DiscoveryEngine:
    """Answers listing and filtering queries against a RestaurantStore.

    Every query reads the store's snapshot once on entry and works only on
    that tuple, so a concurrent replacement is observed either entirely or
    not at all. Queries never mutate the store and never suspend. Filters
    preserve snapshot order; every sort is stable, so ties keep snapshot
    order too.
    """

    def __init__(
        self,
        store: RestaurantStore,
        open_hours_policy: OpenHoursPolicy = OpenHoursPolicy.DERIVED_FROM_HOURS,
        timezone: str | tzinfo = DEFAULT_TIMEZONE,
        clock: Callable[[], datetime] | None = None,
        default_radius_km: float = DEFAULT_NEARBY_RADIUS_KM,
    ) -> None:
        """Initialize the engine.

        Args:
            store: Snapshot holder to query
            open_hours_policy: Default policy for open-now decisions
            timezone: Restaurants' local timezone (name or tzinfo)
            clock: Returns the current time, defaults to the wall clock
            default_radius_km: Radius used by nearby_from_provider
        """
        _validate_radius(default_radius_km)

        self.store = store
        self.open_hours_policy = open_hours_policy
        self.timezone = ZoneInfo(timezone) if isinstance(timezone, str) else timezone
        self.default_radius_km = default_radius_km
        self._clock = clock or (lambda: datetime.now(self.timezone))

    def now(self) -> datetime:
        """Current time in the restaurants' local timezone."""
        current = self._clock()
        if current.tzinfo is None:
            return current.replace(tzinfo=self.timezone)
        return current.astimezone(self.timezone)

    def get_all(self) -> tuple[Restaurant, ...]:
        """Return the whole current snapshot."""
        return self.store.snapshot()

    def get_by_id(self, restaurant_id: str) -> Restaurant:
        """Look up a restaurant by id.

        Raises:
            NotFoundError: If the id is not in the current snapshot
        """
        return self.store.get_by_id(restaurant_id)

    def search(self, query: str) -> list[Restaurant]:
        """Case-insensitive substring search over name, description, category and tags.

        Leading and trailing whitespace is stripped from the query before
        matching, so "  pizza " finds the same restaurants as "pizza". A blank
        query matches nothing.

        Args:
            query: Text typed by the user

        Returns:
            list: Matching restaurants in snapshot order
        """
        results = self._search_in(self.store.snapshot(), query)
        record_discovery_query("search", len(results))
        return results

    def filter_by_category(self, category: str) -> list[Restaurant]:
        """Restaurants whose category equals the given one, ignoring case."""
        results = self._category_in(self.store.snapshot(), category)
        record_discovery_query("filter_by_category", len(results))
        return results

    def filter_by_price(self, tiers: Iterable[str]) -> list[Restaurant]:
        """Restaurants whose price tier is one of the given tiers."""
        wanted = {tier.strip() for tier in tiers}
        return [r for r in self.store.snapshot() if r.price_range.strip() in wanted]

    def filter_by_min_rating(self, min_rating: float) -> list[Restaurant]:
        """Restaurants rated at least ``min_rating``."""
        if math.isnan(min_rating):
            raise QueryValidationError("Minimum rating must be a number")
        return [r for r in self.store.snapshot() if r.rating >= min_rating]

    def nearby(self, latitude: float, longitude: float, radius_km: float) -> list[Restaurant]:
        """Restaurants within ``radius_km`` of a point, closest first.

        The boundary is inclusive and ties keep snapshot order.

        Args:
            latitude: Latitude of the reference point in degrees
            longitude: Longitude of the reference point in degrees
            radius_km: Maximum distance in kilometres

        Returns:
            list: Restaurants sorted ascending by distance

        Raises:
            QueryValidationError: If the radius is negative or coordinates are not finite
        """
        results = [r for r, _ in self.nearby_with_distance(latitude, longitude, radius_km)]
        record_discovery_query("nearby", len(results))
        return results

    def nearby_with_distance(
        self, latitude: float, longitude: float, radius_km: float
    ) -> list[tuple[Restaurant, float]]:
        """Same as ``nearby`` but pairs each restaurant with its distance in km."""
        _validate_point(latitude, longitude)
        _validate_radius(radius_km)
        return self._nearby_in(self.store.snapshot(), latitude, longitude, radius_km)

    async def nearby_from_provider(
        self, location_provider: LocationProvider, radius_km: float | None = None
    ) -> list[Restaurant]:
        """Restaurants near the device's current location.

        Args:
            location_provider: Source of the current location
            radius_km: Radius in kilometres, defaults to the engine's default radius

        Returns:
            list: Restaurants sorted ascending by distance

        Raises:
            LocationUnavailableError: If the provider has no location
        """
        location = await location_provider.get_current_location()
        radius = self.default_radius_km if radius_km is None else radius_km
        return self.nearby(location.latitude, location.longitude, radius)

    def is_open_now(
        self,
        restaurant: Restaurant,
        policy: OpenHoursPolicy | None = None,
        now: datetime | None = None,
    ) -> bool:
        """Whether a restaurant is open at ``now`` (defaults to the current time)."""
        moment = now if now is not None else self.now()
        return is_open_at(restaurant, moment, policy or self.open_hours_policy)

    def filter_open_now(
        self, policy: OpenHoursPolicy | None = None, now: datetime | None = None
    ) -> list[Restaurant]:
        """Restaurants open right now.

        With the derived policy, opening hours are parsed and compared with
        the local wall clock; unparsable hours fall back to the stored flag.

        Args:
            policy: Override of the engine's open-hours policy
            now: Override of the current local time

        Returns:
            list: Open restaurants in snapshot order
        """
        results = self._open_in(self.store.snapshot(), policy, now)
        record_discovery_query("filter_open_now", len(results))
        return results

    def sort_by_rating(self) -> list[Restaurant]:
        """All restaurants, best rated first."""
        return sorted(self.store.snapshot(), key=lambda r: r.rating, reverse=True)

    def sort_by_price(self) -> list[Restaurant]:
        """All restaurants, cheapest tier first."""
        return sorted(self.store.snapshot(), key=lambda r: r.price_rank)

    def available_categories(self) -> list[str]:
        """Distinct non-empty categories in the snapshot, sorted alphabetically."""
        categories: dict[str, str] = {}
        for restaurant in self.store.snapshot():
            if restaurant.category:
                categories.setdefault(restaurant.category.casefold(), restaurant.category)
        return sorted(categories.values(), key=str.casefold)

    def browse(self, selection: str) -> list[Restaurant]:
        """Listing behind a home-screen chip.

        Args:
            selection: "All", "Open", "TopRated", or a category name

        Returns:
            list: Restaurants for that chip
        """
        if selection == BROWSE_ALL:
            return list(self.store.snapshot())
        if selection == BROWSE_OPEN:
            return self.filter_open_now()
        if selection == BROWSE_TOP_RATED:
            return self.sort_by_rating()
        return self.filter_by_category(selection)

    def discover(self, query: DiscoveryQuery) -> list[Restaurant]:
        """Apply every criterion of a DiscoveryQuery to one snapshot.

        When ``near`` is set, "relevance" ordering means closest first.

        Args:
            query: Combined criteria

        Returns:
            list: Matching restaurants, ordered and limited as requested

        Raises:
            QueryValidationError: If distance ordering is requested without a point
        """
        if query.sort == "distance" and query.near is None:
            raise QueryValidationError("Sorting by distance requires a reference point")

        results: list[Restaurant] = list(self.store.snapshot())

        if query.text is not None:
            results = self._search_in(results, query.text)
        if query.category:
            results = self._category_in(results, query.category)
        if query.price_tiers:
            wanted = {tier.strip() for tier in query.price_tiers}
            results = [r for r in results if r.price_range.strip() in wanted]
        if query.min_rating > 0:
            results = [r for r in results if r.rating >= query.min_rating]
        if query.open_now:
            results = self._open_in(results, None, None)

        if query.near is not None:
            near = query.near
            by_distance = self._nearby_in(results, near.latitude, near.longitude, near.radius_km)
            if query.sort in ("distance", "relevance"):
                results = [r for r, _ in by_distance]
            else:
                kept = {r.id for r, _ in by_distance}
                results = [r for r in results if r.id in kept]

        if query.sort == "rating":
            results.sort(key=lambda r: r.rating, reverse=True)
        elif query.sort == "price":
            results.sort(key=lambda r: r.price_rank)

        if query.limit is not None:
            results = results[: query.limit]

        record_discovery_query("discover", len(results))
        return results

    def _search_in(self, restaurants: Iterable[Restaurant], query: str) -> list[Restaurant]:
        needle = query.strip().casefold()
        if not needle:
            return []
        return [
            r
            for r in restaurants
            if needle in r.name.casefold()
            or needle in r.description.casefold()
            or needle in r.category.casefold()
            or any(needle in tag.casefold() for tag in r.tags)
        ]

    def _category_in(self, restaurants: Iterable[Restaurant], category: str) -> list[Restaurant]:
        wanted = category.casefold()
        return [r for r in restaurants if r.category.casefold() == wanted]

    def _open_in(
        self,
        restaurants: Iterable[Restaurant],
        policy: OpenHoursPolicy | None,
        now: datetime | None,
    ) -> list[Restaurant]:
        moment = now if now is not None else self.now()
        effective = policy or self.open_hours_policy
        return [r for r in restaurants if is_open_at(r, moment, effective)]

    def _nearby_in(
        self,
        restaurants: Iterable[Restaurant],
        latitude: float,
        longitude: float,
        radius_km: float,
    ) -> list[tuple[Restaurant, float]]:
        # Distance is computed once per record and reused as the sort key
        within: list[tuple[Restaurant, float]] = []
        for restaurant in restaurants:
            distance = distance_km(latitude, longitude, restaurant.latitude, restaurant.longitude)
            if distance <= radius_km:
                within.append((restaurant, distance))
        within.sort(key=lambda pair: pair[1])
        return within
