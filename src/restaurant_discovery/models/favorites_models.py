"""User profile and favorites models.

The user profile lives in the ``users`` table keyed by ``user_id``; its
``favoriteRestaurants`` attribute is the system of record for a user's
favorites. ``UserFavorites`` is the immutable view handed to callers.
"""

from datetime import UTC, datetime
from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator


class SessionState(str, Enum):
    """Session state of a favorites coordinator."""

    LOGGED_OUT = "logged_out"
    LOGGED_IN = "logged_in"


def _unique_ids(ids: Any) -> Any:
    """Drop duplicates and non-string entries while keeping first-seen order."""
    if not isinstance(ids, list | tuple):
        return ids
    seen: dict[str, None] = {}
    for restaurant_id in ids:
        if isinstance(restaurant_id, str):
            seen.setdefault(restaurant_id, None)
    return list(seen)


class UserProfile(BaseModel):
    """Persisted user profile document.

    Stored in DynamoDB with user_id as partition key.
    """

    user_id: str = Field(..., min_length=1, description="User identifier")
    email: str = Field(default="", description="Account email")
    name: str = Field(default="", description="Display name")
    favorite_restaurants: list[str] = Field(
        default_factory=list, description="Favorite restaurant ids in insertion order"
    )
    dietary_preferences: list[str] = Field(
        default_factory=list, description="Dietary preference labels"
    )
    created_at: datetime = Field(
        default_factory=lambda: datetime.now(UTC), description="Profile creation timestamp"
    )

    @field_validator("favorite_restaurants", "dietary_preferences", mode="before")
    @classmethod
    def dedupe_ids(cls, v: Any) -> Any:
        """Keep string entries only, without duplicates."""
        if v is None:
            return []
        return _unique_ids(v)

    def to_dynamodb_item(self) -> dict[str, Any]:
        """Convert to DynamoDB item format.

        Returns:
            dict: DynamoDB-compatible representation
        """
        return {
            "user_id": self.user_id,
            "email": self.email,
            "name": self.name,
            "favoriteRestaurants": list(self.favorite_restaurants),
            "dietaryPreferences": list(self.dietary_preferences),
            "createdAt": self.created_at.isoformat(),
        }

    @classmethod
    def from_dynamodb_item(cls, item: dict[str, Any]) -> "UserProfile":
        """Create UserProfile from DynamoDB item.

        Args:
            item: DynamoDB item dictionary

        Returns:
            UserProfile: Parsed model instance
        """
        data: dict[str, Any] = {
            "user_id": item["user_id"],
            "email": item.get("email") or "",
            "name": item.get("name") or "",
            "favorite_restaurants": item.get("favoriteRestaurants"),
            "dietary_preferences": item.get("dietaryPreferences"),
        }

        if "createdAt" in item:
            data["created_at"] = datetime.fromisoformat(item["createdAt"])

        return cls(**data)


class UserFavorites(BaseModel):
    """Read-only view of one user's favorite restaurant ids."""

    model_config = ConfigDict(frozen=True)

    user_id: str = Field(..., description="User owning the favorites")
    favorite_ids: tuple[str, ...] = Field(default=(), description="Favorite ids, insertion order")

    @field_validator("favorite_ids", mode="before")
    @classmethod
    def dedupe_favorites(cls, v: Any) -> Any:
        """Keep first-seen order without duplicates."""
        unique = _unique_ids(v)
        return tuple(unique) if isinstance(unique, list) else unique

    def __contains__(self, restaurant_id: object) -> bool:
        return restaurant_id in self.favorite_ids

    def __len__(self) -> int:
        return len(self.favorite_ids)


class FavoritesChanged(BaseModel):
    """Emitted after every successful favorites load or mutation."""

    model_config = ConfigDict(frozen=True)

    user_id: str = Field(..., description="User whose favorites changed")
    favorite_ids: tuple[str, ...] = Field(..., description="Full current favorite set")
