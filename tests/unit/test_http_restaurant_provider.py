"""Unit tests for HttpRestaurantProvider."""

import json
from unittest.mock import AsyncMock, MagicMock, patch

import httpx
import pytest

from restaurant_discovery.adapters.http_restaurant_provider import (
    HttpRestaurantProvider,
    parse_restaurant_documents,
)
from restaurant_discovery.exceptions import DataProviderError
from restaurant_discovery.models.restaurant_models import Restaurant
from restaurant_discovery.services.discovery_engine import DiscoveryEngine
from restaurant_discovery.services.restaurant_refresh_service import RestaurantRefreshService
from restaurant_discovery.services.restaurant_store import RestaurantStore


def _response(payload: object, status_code: int = 200) -> MagicMock:
    mock_response = MagicMock()
    mock_response.status_code = status_code
    mock_response.json.return_value = payload
    return mock_response


@pytest.mark.unit
class TestParseRestaurantDocuments:
    """Test suite for parse_restaurant_documents."""

    def test_skips_malformed_documents(self) -> None:
        """Test that bad records are dropped and good ones kept in order."""
        documents = [
            {"id": "rest_1", "name": "One"},
            "not a document",
            {"name": "No id"},
            {"id": "rest_2", "rating": "five stars"},
            {"id": "rest_3", "name": "Three"},
        ]

        restaurants = parse_restaurant_documents(documents, "test")

        assert [r.id for r in restaurants] == ["rest_1", "rest_3"]

    def test_skips_non_finite_coordinates(self) -> None:
        """Test that an Infinity coordinate is dropped and nearby keeps working."""
        documents = json.loads(
            '[{"id": "a", "latitude": 4.60, "longitude": -74.07},'
            ' {"id": "bad", "latitude": Infinity, "longitude": -74.07},'
            ' {"id": "worse", "latitude": 4.60, "longitude": NaN}]'
        )

        restaurants = parse_restaurant_documents(documents, "test")
        store = RestaurantStore()
        store.replace_all(restaurants)

        assert [r.id for r in restaurants] == ["a"]
        assert [r.id for r in DiscoveryEngine(store).nearby(4.60, -74.07, 5.0)] == ["a"]

    def test_skips_nan_rating(self) -> None:
        """Test that a NaN rating is dropped so the rating sort stays ordered."""
        documents = json.loads(
            '[{"id": "a", "rating": 3.0}, {"id": "b", "rating": NaN},'
            ' {"id": "c", "rating": 5.0}, {"id": "d", "rating": 4.0}]'
        )

        store = RestaurantStore()
        store.replace_all(parse_restaurant_documents(documents, "test"))

        assert [r.id for r in DiscoveryEngine(store).sort_by_rating()] == ["c", "d", "a"]

    def test_empty_input(self) -> None:
        """Test that no documents produce no restaurants."""
        assert parse_restaurant_documents([], "test") == []


@pytest.mark.unit
class TestHttpRestaurantProvider:
    """Test suite for HttpRestaurantProvider."""

    @pytest.fixture
    def provider(self) -> HttpRestaurantProvider:
        """Create a provider with test configuration."""
        return HttpRestaurantProvider(base_url="https://api.test.com/", api_key="test-api-key")

    def test_provider_initialization(self, provider: HttpRestaurantProvider) -> None:
        """Test that the base URL is normalized."""
        assert provider.base_url == "https://api.test.com"
        assert provider.source_name == "http"

    @pytest.mark.asyncio
    async def test_fetch_restaurants_list_payload(
        self, provider: HttpRestaurantProvider, mock_restaurant_item: dict
    ) -> None:
        """Test fetching a bare JSON list."""
        document = {**mock_restaurant_item, "rating": 4.5, "reviewCount": 12}
        document.update(latitude=4.6017, longitude=-74.0659, lastUpdated=1705314600000)

        with patch(
            "httpx.AsyncClient.get", new_callable=AsyncMock, return_value=_response([document])
        ):
            restaurants = await provider.fetch_restaurants()

        assert len(restaurants) == 1
        assert isinstance(restaurants[0], Restaurant)
        assert restaurants[0].id == "rest_123456"
        assert restaurants[0].rating == 4.5

    @pytest.mark.asyncio
    async def test_fetch_restaurants_wrapped_payload(
        self, provider: HttpRestaurantProvider
    ) -> None:
        """Test fetching an object with a restaurants list."""
        payload = {"restaurants": [{"id": "rest_1"}, {"id": "rest_2", "imageUrl": "x.jpg"}]}

        with patch("httpx.AsyncClient.get", new_callable=AsyncMock, return_value=_response(payload)):
            restaurants = await provider.fetch_restaurants()

        assert [r.id for r in restaurants] == ["rest_1", "rest_2"]
        assert restaurants[1].image_url == "x.jpg"

    @pytest.mark.asyncio
    async def test_fetch_restaurants_sends_api_key(self, provider: HttpRestaurantProvider) -> None:
        """Test that the API key is included in request headers."""
        mock_get = AsyncMock(return_value=_response([]))

        with patch("httpx.AsyncClient.get", mock_get):
            await provider.fetch_restaurants()

        mock_get.assert_called_once()
        assert mock_get.call_args.args[0] == "https://api.test.com/restaurants"
        assert mock_get.call_args.kwargs["headers"]["X-API-Key"] == "test-api-key"

    @pytest.mark.asyncio
    async def test_no_api_key_sends_no_header(self) -> None:
        """Test that no auth header is sent without a key."""
        provider = HttpRestaurantProvider(base_url="https://api.test.com")
        mock_get = AsyncMock(return_value=_response([]))

        with patch("httpx.AsyncClient.get", mock_get):
            await provider.fetch_restaurants()

        assert mock_get.call_args.kwargs["headers"] == {}

    @pytest.mark.asyncio
    async def test_fetch_restaurants_api_error(self, provider: HttpRestaurantProvider) -> None:
        """Test that HTTP errors raise DataProviderError."""
        mock_response = _response({}, status_code=500)
        mock_response.raise_for_status.side_effect = httpx.HTTPStatusError(
            "Server error", request=MagicMock(), response=mock_response
        )

        with patch("httpx.AsyncClient.get", new_callable=AsyncMock, return_value=mock_response):
            with pytest.raises(DataProviderError):
                await provider.fetch_restaurants()

    @pytest.mark.asyncio
    async def test_fetch_restaurants_network_error(self, provider: HttpRestaurantProvider) -> None:
        """Test that network errors raise DataProviderError."""
        with patch(
            "httpx.AsyncClient.get",
            new_callable=AsyncMock,
            side_effect=httpx.RequestError("Connection failed", request=MagicMock()),
        ):
            with pytest.raises(DataProviderError):
                await provider.fetch_restaurants()

    @pytest.mark.asyncio
    async def test_fetch_restaurants_unexpected_payload(
        self, provider: HttpRestaurantProvider
    ) -> None:
        """Test that a payload without a list raises DataProviderError."""
        with patch(
            "httpx.AsyncClient.get",
            new_callable=AsyncMock,
            return_value=_response({"error": "nope"}),
        ):
            with pytest.raises(DataProviderError):
                await provider.fetch_restaurants()

    @pytest.mark.asyncio
    async def test_fetch_restaurant_success(self, provider: HttpRestaurantProvider) -> None:
        """Test fetching a single restaurant."""
        mock_get = AsyncMock(return_value=_response({"id": "rest_1", "name": "One"}))

        with patch("httpx.AsyncClient.get", mock_get):
            restaurant = await provider.fetch_restaurant("rest_1")

        assert restaurant is not None
        assert restaurant.name == "One"
        assert mock_get.call_args.args[0] == "https://api.test.com/restaurants/rest_1"

    @pytest.mark.asyncio
    async def test_fetch_restaurant_not_found(self, provider: HttpRestaurantProvider) -> None:
        """Test that a 404 returns None."""
        with patch(
            "httpx.AsyncClient.get",
            new_callable=AsyncMock,
            return_value=_response({}, status_code=404),
        ):
            restaurant = await provider.fetch_restaurant("missing")

        assert restaurant is None

    @pytest.mark.asyncio
    async def test_fetch_restaurant_network_error(self, provider: HttpRestaurantProvider) -> None:
        """Test that network errors raise DataProviderError."""
        with patch(
            "httpx.AsyncClient.get",
            new_callable=AsyncMock,
            side_effect=httpx.RequestError("Timeout", request=MagicMock()),
        ):
            with pytest.raises(DataProviderError):
                await provider.fetch_restaurant("rest_1")

    @pytest.mark.asyncio
    async def test_fetch_restaurants_non_json_body(self, provider: HttpRestaurantProvider) -> None:
        """Test that a 200 response with a non-JSON body raises DataProviderError."""
        mock_response = _response(None)
        mock_response.json.side_effect = json.JSONDecodeError("Expecting value", "<html>", 0)

        with patch("httpx.AsyncClient.get", new_callable=AsyncMock, return_value=mock_response):
            with pytest.raises(DataProviderError) as exc_info:
                await provider.fetch_restaurants()

        assert isinstance(exc_info.value.__cause__, ValueError)

    @pytest.mark.asyncio
    async def test_fetch_restaurant_non_json_body(self, provider: HttpRestaurantProvider) -> None:
        """Test that a single-restaurant fetch wraps a non-JSON body."""
        mock_response = _response(None)
        mock_response.json.side_effect = ValueError("Expecting value")

        with patch("httpx.AsyncClient.get", new_callable=AsyncMock, return_value=mock_response):
            with pytest.raises(DataProviderError):
                await provider.fetch_restaurant("rest_1")

    @pytest.mark.asyncio
    async def test_refresh_survives_non_json_body(
        self, provider: HttpRestaurantProvider, sample_restaurants: list[Restaurant]
    ) -> None:
        """Test that a refresh reports failure and keeps the old snapshot on a bad body."""
        store = RestaurantStore()
        store.replace_all(sample_restaurants)
        service = RestaurantRefreshService(provider=provider, store=store)
        mock_response = _response(None)
        mock_response.json.side_effect = ValueError("Expecting value")

        with patch("httpx.AsyncClient.get", new_callable=AsyncMock, return_value=mock_response):
            result = await service.refresh()

        assert result.success is False
        assert result.restaurant_count == 3
        assert [r.id for r in store.get_all()] == ["rest_cafe", "rest_pizza", "rest_grill"]
