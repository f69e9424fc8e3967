"""Shared pytest fixtures and configuration for all tests."""

from collections.abc import Callable
from datetime import UTC, datetime
from decimal import Decimal

import pytest

from restaurant_discovery.models.restaurant_models import Restaurant


def make_restaurant(restaurant_id: str, **overrides: object) -> Restaurant:
    """Build a Restaurant with sensible defaults for tests."""
    fields: dict[str, object] = {
        "id": restaurant_id,
        "name": f"Restaurant {restaurant_id}",
        "description": "",
        "category": "Café",
        "price_range": "$$",
        "rating": 4.0,
        "latitude": 4.60,
        "longitude": -74.07,
        "opening_hours": "",
        "is_open": False,
        "last_updated": datetime(2024, 1, 15, 10, 30, tzinfo=UTC),
    }
    fields.update(overrides)
    return Restaurant(**fields)  # type: ignore[arg-type]


@pytest.fixture
def mock_restaurant_id() -> str:
    """Fixture providing a standard test restaurant ID."""
    return "rest_123456"


@pytest.fixture
def mock_user_id() -> str:
    """Fixture providing a standard test user ID."""
    return "user_abc"


@pytest.fixture
def sample_restaurants() -> list[Restaurant]:
    """Fixture providing a small snapshot around Bogotá."""
    return [
        make_restaurant(
            "rest_cafe",
            name="Café Campus",
            description="Coffee and pastries near the university",
            category="Café",
            price_range="$",
            rating=4.5,
            latitude=4.60,
            longitude=-74.07,
            opening_hours="7:00 AM – 6:00 PM",
            tags=("vegetarian", "wifi"),
        ),
        make_restaurant(
            "rest_pizza",
            name="Pizza Norte",
            description="Wood-fired pizza",
            category="Pizza",
            price_range="$$",
            rating=4.2,
            latitude=4.70,
            longitude=-74.20,
            opening_hours="11 PM–2 AM",
            tags=("gluten-free",),
        ),
        make_restaurant(
            "rest_grill",
            name="Parrilla Andina",
            description="Grilled meats",
            category="Grill",
            price_range="$$$",
            rating=4.5,
            latitude=4.605,
            longitude=-74.068,
            opening_hours="24 horas",
            tags=(),
        ),
    ]


@pytest.fixture
def mock_restaurant_item() -> dict:
    """Fixture providing a restaurant item as stored in DynamoDB."""
    return {
        "id": "rest_123456",
        "name": "Café Campus",
        "description": "Coffee and pastries",
        "category": "Café",
        "priceRange": "$",
        "rating": Decimal("4.5"),
        "reviewCount": Decimal("12"),
        "imageURL": "https://example.com/cafe.jpg",
        "latitude": Decimal("4.6017"),
        "longitude": Decimal("-74.0659"),
        "address": "Cra 1 # 18A-12",
        "phone": "+57 1 3394949",
        "openingHours": "7:00 AM – 6:00 PM",
        "isOpen": True,
        "lastUpdated": Decimal("1705314600000"),
        "tags": ["vegetarian", "wifi"],
    }


@pytest.fixture
def restaurant_factory() -> Callable[..., Restaurant]:
    """Fixture providing the make_restaurant builder."""
    return make_restaurant
