"""Shared dependency factory for the discovery library.

Components are configured from environment variables, created once per
process and reused, so every caller shares the same store, engine and
favorites coordinator.
"""

import logging
import os
from typing import Any

import boto3

from restaurant_discovery.adapters.base_adapter import RestaurantDataProvider
from restaurant_discovery.adapters.http_restaurant_provider import HttpRestaurantProvider
from restaurant_discovery.models.restaurant_models import OpenHoursPolicy
from restaurant_discovery.observability import configure_logging, setup_observability
from restaurant_discovery.repositories.profile_repository import UserProfileRepository
from restaurant_discovery.repositories.restaurant_repository import DynamoDBRestaurantRepository
from restaurant_discovery.services.discovery_engine import (
    DEFAULT_NEARBY_RADIUS_KM,
    DEFAULT_TIMEZONE,
    DiscoveryEngine,
)
from restaurant_discovery.services.favorites_coordinator import FavoritesCoordinator
from restaurant_discovery.services.restaurant_refresh_service import RestaurantRefreshService
from restaurant_discovery.services.restaurant_store import RestaurantStore

logger = logging.getLogger(__name__)

# Module-level caches for process-wide reuse
_dynamodb_resource: Any | None = None
_restaurant_store: RestaurantStore | None = None
_restaurant_provider: RestaurantDataProvider | None = None
_refresh_service: RestaurantRefreshService | None = None
_discovery_engine: DiscoveryEngine | None = None
_favorites_coordinator: FavoritesCoordinator | None = None


def get_dynamodb_resource() -> Any:
    """Create or retrieve cached DynamoDB resource.

    Returns:
        Boto3 DynamoDB resource configured for environment
    """
    global _dynamodb_resource

    if _dynamodb_resource is not None:
        return _dynamodb_resource

    endpoint_url = os.getenv("DYNAMODB_ENDPOINT")
    region = os.getenv("AWS_REGION", "us-east-1")

    if endpoint_url:
        # Local DynamoDB - use environment variables
        access_key = os.getenv("AWS_ACCESS_KEY_ID")
        secret_key = os.getenv("AWS_SECRET_ACCESS_KEY")
        logger.info(f"Using local DynamoDB at {endpoint_url}")
        _dynamodb_resource = boto3.resource(
            "dynamodb",
            endpoint_url=endpoint_url,
            region_name=region,
            aws_access_key_id=access_key,
            aws_secret_access_key=secret_key,
        )
    else:
        logger.info(f"Using AWS DynamoDB in region {region}")
        _dynamodb_resource = boto3.resource("dynamodb", region_name=region)

    return _dynamodb_resource


def get_restaurant_store() -> RestaurantStore:
    """Create or retrieve the shared restaurant store."""
    global _restaurant_store

    if _restaurant_store is None:
        _restaurant_store = RestaurantStore()

    return _restaurant_store


def get_restaurant_provider() -> RestaurantDataProvider:
    """Create or retrieve the configured restaurant data provider.

    Uses the restaurant API when RESTAURANT_API_BASE_URL is set, the
    restaurants DynamoDB table otherwise.

    Returns:
        Configured RestaurantDataProvider
    """
    global _restaurant_provider

    if _restaurant_provider is not None:
        return _restaurant_provider

    api_base_url = os.getenv("RESTAURANT_API_BASE_URL")

    if api_base_url:
        _restaurant_provider = HttpRestaurantProvider(
            base_url=api_base_url,
            api_key=os.getenv("RESTAURANT_API_KEY") or None,
        )
        logger.info(f"Restaurant API provider configured at {api_base_url}")
    else:
        table_name = os.getenv("DYNAMODB_RESTAURANTS_TABLE", "restaurants")
        _restaurant_provider = DynamoDBRestaurantRepository(
            dynamodb_resource=get_dynamodb_resource(), table_name=table_name
        )
        logger.info(f"DynamoDB restaurant provider configured for table {table_name}")

    return _restaurant_provider


def get_refresh_service() -> RestaurantRefreshService:
    """Create or retrieve cached refresh service."""
    global _refresh_service

    if _refresh_service is None:
        _refresh_service = RestaurantRefreshService(
            provider=get_restaurant_provider(), store=get_restaurant_store()
        )
        logger.info("Refresh service initialized")

    return _refresh_service


def get_discovery_engine() -> DiscoveryEngine:
    """Create or retrieve cached discovery engine.

    Raises:
        ValueError: If OPEN_HOURS_POLICY or DEFAULT_NEARBY_RADIUS_KM is invalid
    """
    global _discovery_engine

    if _discovery_engine is not None:
        return _discovery_engine

    policy = OpenHoursPolicy(os.getenv("OPEN_HOURS_POLICY", OpenHoursPolicy.DERIVED_FROM_HOURS.value))
    timezone = os.getenv("RESTAURANT_TIMEZONE", DEFAULT_TIMEZONE)
    radius = float(os.getenv("DEFAULT_NEARBY_RADIUS_KM", str(DEFAULT_NEARBY_RADIUS_KM)))

    _discovery_engine = DiscoveryEngine(
        store=get_restaurant_store(),
        open_hours_policy=policy,
        timezone=timezone,
        default_radius_km=radius,
    )

    logger.info(f"Discovery engine initialized (policy={policy.value}, timezone={timezone})")
    return _discovery_engine


def get_favorites_coordinator() -> FavoritesCoordinator:
    """Create or retrieve cached favorites coordinator."""
    global _favorites_coordinator

    if _favorites_coordinator is not None:
        return _favorites_coordinator

    users_table = os.getenv("DYNAMODB_USERS_TABLE", "users")
    profile_repository = UserProfileRepository(
        dynamodb_resource=get_dynamodb_resource(), table_name=users_table
    )
    _favorites_coordinator = FavoritesCoordinator(profile_repository=profile_repository)

    logger.info("Favorites coordinator initialized")
    return _favorites_coordinator


def initialize_environment() -> None:
    """Initialize logging and observability.

    Should be called once at application start.
    """
    log_level = os.getenv("LOG_LEVEL", "INFO")
    configure_logging(log_level)
    setup_observability()

    logger.info("Discovery environment initialized")


def reset_dependencies() -> None:
    """Drop every cached component so the next call rebuilds it."""
    global _dynamodb_resource, _restaurant_store, _restaurant_provider
    global _refresh_service, _discovery_engine, _favorites_coordinator

    _dynamodb_resource = None
    _restaurant_store = None
    _restaurant_provider = None
    _refresh_service = None
    _discovery_engine = None
    _favorites_coordinator = None
