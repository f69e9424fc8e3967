"""DynamoDB repository for user profiles.

The profile item is the system of record for a user's favorites. Unlike the
restaurant repository, failures here are raised as ``ProfileUnavailableError``
instead of returning None: a missing profile (None) and an unreachable store
must stay distinguishable for the favorites coordinator.
"""

import logging

from botocore.exceptions import BotoCoreError, ClientError
from mypy_boto3_dynamodb.service_resource import DynamoDBServiceResource, Table

from restaurant_discovery.exceptions import ProfileUnavailableError
from restaurant_discovery.models.favorites_models import UserProfile

logger = logging.getLogger(__name__)


class UserProfileRepository:
    """Repository for user profile CRUD operations.

    Manages profile records in DynamoDB with user_id as partition key.
    """

    def __init__(self, dynamodb_resource: DynamoDBServiceResource, table_name: str) -> None:
        """Initialize repository.

        Args:
            dynamodb_resource: Boto3 DynamoDB resource
            table_name: Name of the DynamoDB table
        """
        self.dynamodb = dynamodb_resource
        self.table_name = table_name
        self.table: Table = dynamodb_resource.Table(table_name)

    def get_profile(self, user_id: str) -> UserProfile | None:
        """Retrieve a user's profile.

        Args:
            user_id: User identifier

        Returns:
            UserProfile if found, None if the user has no profile yet

        Raises:
            ProfileUnavailableError: If DynamoDB cannot be reached
        """
        try:
            response = self.table.get_item(Key={"user_id": user_id})
        except (BotoCoreError, ClientError) as e:
            logger.error(f"Failed to get profile for user {user_id}: {e}")
            raise ProfileUnavailableError(f"Profile store unavailable: {e}") from e

        if "Item" not in response:
            return None

        return UserProfile.from_dynamodb_item(response["Item"])

    def save_profile(self, profile: UserProfile) -> None:
        """Create or overwrite a user's profile.

        Args:
            profile: Profile to save

        Raises:
            ProfileUnavailableError: If DynamoDB cannot be reached
        """
        try:
            self.table.put_item(Item=profile.to_dynamodb_item())
        except (BotoCoreError, ClientError) as e:
            logger.error(f"Failed to save profile for user {profile.user_id}: {e}")
            raise ProfileUnavailableError(f"Profile store unavailable: {e}") from e

    def update_favorites(self, user_id: str, favorite_ids: list[str]) -> None:
        """Replace the favorite list on a user's profile.

        Args:
            user_id: User identifier
            favorite_ids: Complete favorite list to store

        Raises:
            ProfileUnavailableError: If DynamoDB cannot be reached
        """
        try:
            self.table.update_item(
                Key={"user_id": user_id},
                UpdateExpression="SET favoriteRestaurants = :favorites",
                ExpressionAttributeValues={":favorites": favorite_ids},
            )
        except (BotoCoreError, ClientError) as e:
            logger.error(f"Failed to update favorites for user {user_id}: {e}")
            raise ProfileUnavailableError(f"Profile store unavailable: {e}") from e
