"""Restaurant and location models.

Restaurants arrive from a document store or a REST API using the camelCase
field names written by the mobile client. ``Restaurant.from_document`` maps
those payloads onto the immutable domain model, filling defaults for any
missing optional field.
"""

from datetime import UTC, datetime
from decimal import Decimal
from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator

PRICE_TIER_RANKS = {"$": 1, "$$": 2, "$$$": 3, "$$$$": 4}
DEFAULT_PRICE_RANGE = "$$"

# Ranks after every known tier so unknown labels sort last
UNKNOWN_PRICE_RANK = len(PRICE_TIER_RANKS) + 1


class OpenHoursPolicy(str, Enum):
    """How to decide whether a restaurant is open right now."""

    STORED_FLAG = "stored"
    DERIVED_FROM_HOURS = "derived"


def price_tier_rank(price_range: str) -> int:
    """Return the ordinal of a price tier ("$" < "$$" < "$$$").

    Args:
        price_range: Tier label as stored on the restaurant

    Returns:
        int: Tier ordinal, UNKNOWN_PRICE_RANK for labels that are not tiers
    """
    label = price_range.strip()
    if label in PRICE_TIER_RANKS:
        return PRICE_TIER_RANKS[label]
    if label and set(label) == {"$"}:
        return len(label)
    return UNKNOWN_PRICE_RANK


def _plain_number(value: Any) -> Any:
    """Convert DynamoDB Decimals to int/float, leave anything else untouched."""
    if isinstance(value, Decimal):
        if not value.is_finite():
            return float(value)
        return int(value) if value == value.to_integral_value() else float(value)
    return value


def _parse_timestamp(value: Any) -> Any:
    """Interpret epoch milliseconds or ISO-8601 strings as UTC datetimes."""
    value = _plain_number(value)
    if value is None:
        return datetime.now(UTC)
    if isinstance(value, bool):
        return value
    if isinstance(value, int | float):
        return datetime.fromtimestamp(value / 1000, UTC)
    if isinstance(value, str):
        parsed = datetime.fromisoformat(value)
        return parsed if parsed.tzinfo else parsed.replace(tzinfo=UTC)
    return value


class Restaurant(BaseModel):
    """A restaurant record as held in a snapshot.

    Records are immutable; a refresh replaces the whole snapshot instead of
    editing records in place.
    """

    model_config = ConfigDict(frozen=True, allow_inf_nan=False)

    id: str = Field(..., min_length=1, description="Unique restaurant identifier")
    name: str = Field(default="", description="Display name")
    description: str = Field(default="", description="Free-text description")
    category: str = Field(default="", description="Cuisine or venue category")
    address: str = Field(default="", description="Street address")
    phone: str = Field(default="", description="Contact phone number")
    opening_hours: str = Field(default="", description="Opening hours as free text")
    price_range: str = Field(default=DEFAULT_PRICE_RANGE, description="Price tier ($, $$, $$$)")
    rating: float = Field(default=0.0, description="Average rating, advisory")
    review_count: int = Field(default=0, description="Number of reviews", ge=0)
    image_url: str = Field(default="", description="Image URL, may be empty")
    latitude: float = Field(default=0.0, description="Latitude in degrees")
    longitude: float = Field(default=0.0, description="Longitude in degrees")
    is_open: bool = Field(default=False, description="Last known open flag")
    last_updated: datetime = Field(
        default_factory=lambda: datetime.now(UTC), description="Last update timestamp"
    )
    tags: tuple[str, ...] = Field(default=(), description="Labels such as dietary attributes")

    @field_validator("tags", mode="before")
    @classmethod
    def keep_string_tags(cls, v: Any) -> Any:
        """Drop non-string entries from the tag list."""
        if v is None:
            return ()
        if isinstance(v, list | tuple):
            return tuple(tag for tag in v if isinstance(tag, str))
        return v

    @property
    def price_rank(self) -> int:
        """Ordinal of this restaurant's price tier."""
        return price_tier_rank(self.price_range)

    @classmethod
    def from_document(cls, data: dict[str, Any], document_id: str | None = None) -> "Restaurant":
        """Create a Restaurant from a document-store or API payload.

        Missing optional fields take their defaults. Present fields with the
        wrong shape raise a pydantic ValidationError so the caller can skip
        the record.

        Args:
            data: Raw document fields (camelCase keys)
            document_id: Document key, used when the payload has no "id"

        Returns:
            Restaurant: Parsed model instance
        """
        image_url = data.get("imageURL", data.get("imageUrl"))
        price_range = data.get("priceRange")

        fields: dict[str, Any] = {
            "id": document_id if document_id is not None else data.get("id"),
            "name": data.get("name") or "",
            "description": data.get("description") or "",
            "category": data.get("category") or "",
            "address": data.get("address") or "",
            "phone": data.get("phone") or "",
            "opening_hours": data.get("openingHours") or "",
            "price_range": price_range if price_range is not None else DEFAULT_PRICE_RANGE,
            "rating": _plain_number(data.get("rating", 0.0)),
            "review_count": _plain_number(data.get("reviewCount", 0)),
            "image_url": image_url or "",
            "latitude": _plain_number(data.get("latitude", 0.0)),
            "longitude": _plain_number(data.get("longitude", 0.0)),
            "is_open": data.get("isOpen", False),
            "last_updated": _parse_timestamp(data.get("lastUpdated")),
            "tags": data.get("tags"),
        }

        # Explicit nulls mean "missing"
        for key in ("rating", "review_count", "latitude", "longitude", "is_open"):
            if fields[key] is None:
                del fields[key]

        return cls(**fields)

    def to_dynamodb_item(self) -> dict[str, Any]:
        """Convert to DynamoDB item format.

        Returns:
            dict: DynamoDB-compatible representation using document field names
        """
        return {
            "id": self.id,
            "name": self.name,
            "description": self.description,
            "category": self.category,
            "address": self.address,
            "phone": self.phone,
            "openingHours": self.opening_hours,
            "priceRange": self.price_range,
            "rating": Decimal(str(self.rating)),
            "reviewCount": self.review_count,
            "imageURL": self.image_url,
            "latitude": Decimal(str(self.latitude)),
            "longitude": Decimal(str(self.longitude)),
            "isOpen": self.is_open,
            "lastUpdated": int(self.last_updated.timestamp() * 1000),
            "tags": list(self.tags),
        }


class Location(BaseModel):
    """A device position reported by a location provider."""

    model_config = ConfigDict(frozen=True, allow_inf_nan=False)

    latitude: float = Field(..., description="Latitude in degrees")
    longitude: float = Field(..., description="Longitude in degrees")
    timestamp: datetime = Field(
        default_factory=lambda: datetime.now(UTC), description="When the fix was taken"
    )


class SnapshotChanged(BaseModel):
    """Emitted by the restaurant store after every snapshot replacement."""

    model_config = ConfigDict(frozen=True)

    version: int = Field(..., description="Monotonic snapshot version", ge=1)
    restaurants: tuple[Restaurant, ...] = Field(..., description="The new snapshot")
