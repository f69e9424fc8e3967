"""Request models for combined discovery queries."""

from typing import Literal

from pydantic import BaseModel, Field


class NearbyArea(BaseModel):
    """Circle around a point used to restrict results by distance."""

    latitude: float = Field(..., ge=-90.0, le=90.0, description="Center latitude in degrees")
    longitude: float = Field(..., ge=-180.0, le=180.0, description="Center longitude in degrees")
    radius_km: float = Field(default=5.0, ge=0.0, description="Inclusive radius in kilometres")


class DiscoveryQuery(BaseModel):
    """All listing criteria the home and search screens can combine.

    Every criterion is optional; an empty query lists the whole snapshot.
    """

    text: str | None = Field(default=None, description="Free-text search, blank means no match")
    category: str | None = Field(default=None, description="Exact category, case-insensitive")
    price_tiers: list[str] | None = Field(
        default=None, description='Price tiers to include, e.g. ["$", "$$"]'
    )
    min_rating: float = Field(default=0.0, ge=0.0, le=5.0)
    open_now: bool = Field(default=False, description="Only restaurants open right now")
    near: NearbyArea | None = Field(default=None, description="Restrict to a radius")
    sort: Literal["relevance", "rating", "price", "distance"] = Field(
        default="relevance", description="Result ordering, relevance keeps snapshot order"
    )
    limit: int | None = Field(default=None, ge=1, le=200)
