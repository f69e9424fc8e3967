"""REST restaurant API provider.

Fetches restaurant documents from the restaurant API (``GET /restaurants``)
and parses them into ``Restaurant`` records. The API returns either a bare
JSON list or an object with a ``restaurants`` list.
"""

import logging
from typing import Any

import httpx

from restaurant_discovery.adapters.base_adapter import RestaurantDataProvider
from restaurant_discovery.exceptions import DataProviderError
from restaurant_discovery.models.restaurant_models import Restaurant

logger = logging.getLogger(__name__)


def parse_restaurant_documents(documents: list[Any], source: str) -> list[Restaurant]:
    """Parse raw restaurant documents, skipping any malformed one.

    Args:
        documents: Raw documents as returned by the source
        source: Source name used in log messages

    Returns:
        list: Successfully parsed restaurants in source order
    """
    restaurants = []
    for document in documents:
        if not isinstance(document, dict):
            logger.warning(f"Skipping non-object restaurant document from {source}")
            continue
        try:
            restaurants.append(Restaurant.from_document(document))
        except (ValueError, TypeError) as e:
            logger.warning(f"Skipping malformed restaurant {document.get('id')!r} from {source}: {e}")
    return restaurants


class HttpRestaurantProvider(RestaurantDataProvider):
    """HTTP client for the restaurant API."""

    def __init__(self, base_url: str, api_key: str | None = None, timeout: float = 10.0) -> None:
        """Initialize the provider.

        Args:
            base_url: Base URL of the restaurant API (e.g., "https://api.example.com")
            api_key: Optional API key sent as X-API-Key
            timeout: Request timeout in seconds
        """
        super().__init__("http")
        self.base_url = base_url.rstrip("/")
        self.api_key = api_key
        self.timeout = timeout

    def _headers(self) -> dict[str, str]:
        return {"X-API-Key": self.api_key} if self.api_key else {}

    async def fetch_restaurants(self) -> list[Restaurant]:
        """Fetch every restaurant from the API.

        Returns:
            list: Parsed restaurants, malformed records skipped

        Raises:
            DataProviderError: On HTTP or network failure, or an unparseable payload
        """
        url = f"{self.base_url}/restaurants"

        try:
            async with httpx.AsyncClient(timeout=self.timeout) as client:
                response = await client.get(url, headers=self._headers())
                response.raise_for_status()
                data = response.json()
        except (httpx.HTTPStatusError, httpx.RequestError) as e:
            logger.error(f"Failed to fetch restaurants from {url}: {e}")
            raise DataProviderError(f"Restaurant API unavailable: {e}") from e
        except ValueError as e:
            logger.error(f"Restaurant API returned a non-JSON body from {url}: {e}")
            raise DataProviderError(f"Restaurant API returned invalid JSON: {e}") from e

        documents = data.get("restaurants") if isinstance(data, dict) else data
        if not isinstance(documents, list):
            logger.error(f"Unexpected restaurant payload from {url}")
            raise DataProviderError("Restaurant API returned an unexpected payload")

        restaurants = parse_restaurant_documents(documents, self.source_name)
        logger.info(f"Fetched {len(restaurants)} of {len(documents)} restaurants from API")
        return restaurants

    async def fetch_restaurant(self, restaurant_id: str) -> Restaurant | None:
        """Fetch a single restaurant by id.

        Args:
            restaurant_id: Restaurant identifier

        Returns:
            Restaurant if found and well formed, None otherwise

        Raises:
            DataProviderError: On network failure, a non-404 HTTP error or a non-JSON body
        """
        url = f"{self.base_url}/restaurants/{restaurant_id}"

        try:
            async with httpx.AsyncClient(timeout=self.timeout) as client:
                response = await client.get(url, headers=self._headers())
                if response.status_code == 404:
                    return None
                response.raise_for_status()
                data = response.json()
        except (httpx.HTTPStatusError, httpx.RequestError) as e:
            logger.error(f"Failed to fetch restaurant {restaurant_id}: {e}")
            raise DataProviderError(f"Restaurant API unavailable: {e}") from e
        except ValueError as e:
            logger.error(f"Restaurant API returned a non-JSON body from {url}: {e}")
            raise DataProviderError(f"Restaurant API returned invalid JSON: {e}") from e

        parsed = parse_restaurant_documents([data], self.source_name)
        return parsed[0] if parsed else None
