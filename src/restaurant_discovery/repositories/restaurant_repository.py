"""DynamoDB repository for restaurant documents.

Restaurants are stored one item per restaurant with ``id`` as partition key
and the camelCase attribute names written by the mobile client. The
repository doubles as a ``RestaurantDataProvider`` so the refresh service can
load snapshots straight from the table.
"""

import asyncio
import logging
from typing import Any

from botocore.exceptions import BotoCoreError, ClientError
from mypy_boto3_dynamodb.service_resource import DynamoDBServiceResource, Table

from restaurant_discovery.adapters.base_adapter import RestaurantDataProvider
from restaurant_discovery.adapters.http_restaurant_provider import parse_restaurant_documents
from restaurant_discovery.exceptions import DataProviderError
from restaurant_discovery.models.restaurant_models import Restaurant

logger = logging.getLogger(__name__)


class DynamoDBRestaurantRepository(RestaurantDataProvider):
    """Repository for reading restaurant records.

    Manages restaurant items in DynamoDB with id as partition key.
    """

    def __init__(self, dynamodb_resource: DynamoDBServiceResource, table_name: str) -> None:
        """Initialize repository.

        Args:
            dynamodb_resource: Boto3 DynamoDB resource
            table_name: Name of the DynamoDB table
        """
        super().__init__("dynamodb")
        self.dynamodb = dynamodb_resource
        self.table_name = table_name
        self.table: Table = dynamodb_resource.Table(table_name)

    def scan_restaurants(self) -> list[Restaurant]:
        """Read every restaurant in the table, following scan pagination.

        Returns:
            list: Parsed restaurants; malformed items are skipped

        Raises:
            DataProviderError: If DynamoDB rejects the scan
        """
        items: list[dict[str, Any]] = []
        scan_kwargs: dict[str, Any] = {}

        try:
            while True:
                response = self.table.scan(**scan_kwargs)
                items.extend(response.get("Items", []))

                last_key = response.get("LastEvaluatedKey")
                if not last_key:
                    break
                scan_kwargs["ExclusiveStartKey"] = last_key

        except (BotoCoreError, ClientError) as e:
            logger.error(f"Failed to scan restaurants table {self.table_name}: {e}")
            raise DataProviderError(f"Restaurant table unavailable: {e}") from e

        restaurants = parse_restaurant_documents(items, self.source_name)
        logger.info(f"Loaded {len(restaurants)} of {len(items)} restaurants from {self.table_name}")
        return restaurants

    def get_restaurant(self, restaurant_id: str) -> Restaurant | None:
        """Retrieve a single restaurant.

        Args:
            restaurant_id: Restaurant identifier

        Returns:
            Restaurant if found and well formed, None otherwise
        """
        try:
            response = self.table.get_item(Key={"id": restaurant_id})

            if "Item" not in response:
                return None

            parsed = parse_restaurant_documents([response["Item"]], self.source_name)
            return parsed[0] if parsed else None

        except (BotoCoreError, ClientError) as e:
            logger.error(f"Failed to get restaurant {restaurant_id}: {e}")  # pragma: no cover
            return None

    def save_restaurant(self, restaurant: Restaurant) -> bool:
        """Save or update a restaurant item.

        Args:
            restaurant: Restaurant to save

        Returns:
            bool: True if save succeeded, False otherwise
        """
        try:
            self.table.put_item(Item=restaurant.to_dynamodb_item())
            return True

        except (BotoCoreError, ClientError) as e:
            logger.error(f"Failed to save restaurant {restaurant.id}: {e}")  # pragma: no cover
            return False

    async def fetch_restaurants(self) -> list[Restaurant]:
        """Scan the table without blocking the event loop."""
        return await asyncio.to_thread(self.scan_restaurants)
