"""Favorites coordinator for the signed-in user.

The user-profile store is the source of truth; the coordinator keeps a
write-through cache of the current user's favorite ids. Every load and
mutation runs as one unit under a per-instance lock, and the cache is only
updated after the store write succeeded, so concurrent toggles never lose
an update and a failed write leaves the cache untouched.
"""

import asyncio
import logging
from collections.abc import Awaitable, Callable
from typing import TypeVar

from restaurant_discovery.exceptions import NotLoggedInError
from restaurant_discovery.models.favorites_models import (
    FavoritesChanged,
    SessionState,
    UserFavorites,
    UserProfile,
)
from restaurant_discovery.observability.decorators import traced
from restaurant_discovery.observability.metrics import record_favorites_mutation
from restaurant_discovery.repositories.profile_repository import UserProfileRepository
from restaurant_discovery.services.event_stream import EventStream, Subscription

logger = logging.getLogger(__name__)

T = TypeVar("T")

ADD = "add"
REMOVE = "remove"


def _consume_outcome(task: "asyncio.Task[object]") -> None:
    """Retrieve the outcome of a unit whose caller may have stopped waiting."""
    if task.cancelled():
        return
    error = task.exception()
    if error is not None:
        logger.debug(f"Favorites unit finished with {type(error).__name__}: {error}")


class FavoritesCoordinator:
    """Tracks and persists the current user's favorite restaurants.

    State machine: LOGGED_OUT -> LOGGED_IN(favorite_ids). Mutations while
    logged out raise NotLoggedInError. Add and remove are idempotent: they
    always write the resulting list and always notify subscribers, even
    when the set did not change.
    """

    def __init__(self, profile_repository: UserProfileRepository) -> None:
        """Initialize the coordinator in the LOGGED_OUT state.

        Args:
            profile_repository: Store holding user profiles
        """
        self.profile_repository = profile_repository
        self._lock = asyncio.Lock()
        self._user_id: str | None = None
        self._favorite_ids: tuple[str, ...] = ()
        self._events: EventStream[FavoritesChanged] = EventStream("favorites")

    @property
    def state(self) -> SessionState:
        """Current session state."""
        return SessionState.LOGGED_IN if self._user_id is not None else SessionState.LOGGED_OUT

    @property
    def user_id(self) -> str | None:
        """Signed-in user id, None when logged out."""
        return self._user_id

    def favorites(self) -> UserFavorites:
        """Current favorites of the signed-in user.

        Raises:
            NotLoggedInError: If no user is signed in
        """
        user_id = self._user_id
        if user_id is None:
            raise NotLoggedInError()
        return UserFavorites(user_id=user_id, favorite_ids=self._favorite_ids)

    def is_favorite(self, restaurant_id: str) -> bool:
        """Whether the restaurant is in the current favorite set."""
        return restaurant_id in self._favorite_ids

    def subscribe(self) -> Subscription[FavoritesChanged]:
        """Subscribe to favorites changes made after this call."""
        return self._events.subscribe()

    @traced("favorites.load")
    async def load(self, user_id: str, email: str = "", name: str = "") -> UserFavorites:
        """Load a user's favorites and enter the LOGGED_IN state.

        Creates and persists an empty profile when the user has none yet.

        Args:
            user_id: User who just signed in or registered
            email: Email stored on a newly created profile
            name: Display name stored on a newly created profile

        Returns:
            UserFavorites: The loaded favorites

        Raises:
            ProfileUnavailableError: If the profile store cannot be reached
        """

        async def unit() -> UserFavorites:
            profile = await asyncio.to_thread(self.profile_repository.get_profile, user_id)
            if profile is None:
                profile = UserProfile(user_id=user_id, email=email, name=name)
                await asyncio.to_thread(self.profile_repository.save_profile, profile)
                logger.info(f"Created empty profile for user {user_id}")

            self._user_id = user_id
            self._favorite_ids = tuple(profile.favorite_restaurants)
            logger.info(f"Loaded {len(self._favorite_ids)} favorites for user {user_id}")
            return self._publish()

        return await self._run_unit(unit)

    @traced("favorites.add")
    async def add(self, restaurant_id: str) -> UserFavorites:
        """Add a restaurant to the favorites; a no-op success if already present.

        Raises:
            NotLoggedInError: If no user is signed in
            ProfileUnavailableError: If the profile store cannot be reached
        """
        return await self._run_unit(lambda: self._apply(ADD, restaurant_id))

    @traced("favorites.remove")
    async def remove(self, restaurant_id: str) -> UserFavorites:
        """Remove a restaurant from the favorites; a no-op success if absent.

        Raises:
            NotLoggedInError: If no user is signed in
            ProfileUnavailableError: If the profile store cannot be reached
        """
        return await self._run_unit(lambda: self._apply(REMOVE, restaurant_id))

    @traced("favorites.toggle")
    async def toggle(self, restaurant_id: str) -> bool:
        """Flip a restaurant's favorite membership.

        Membership is read inside the same unit that writes, so concurrent
        toggles are applied one after the other.

        Returns:
            bool: True if the restaurant is a favorite afterwards

        Raises:
            NotLoggedInError: If no user is signed in
            ProfileUnavailableError: If the profile store cannot be reached
        """

        async def unit() -> bool:
            operation = REMOVE if restaurant_id in self._favorite_ids else ADD
            favorites = await self._apply(operation, restaurant_id)
            return restaurant_id in favorites

        return await self._run_unit(unit)

    async def logout(self) -> None:
        """Drop the in-memory favorites and return to LOGGED_OUT."""

        async def unit() -> None:
            if self._user_id is not None:
                logger.info(f"User {self._user_id} logged out, clearing favorites")
            self._user_id = None
            self._favorite_ids = ()

        await self._run_unit(unit)

    async def handle_session_change(self, user_id: str | None) -> UserFavorites | None:
        """React to a login or logout reported by the identity provider.

        Args:
            user_id: Newly signed-in user, or None after sign-out

        Returns:
            UserFavorites after a login, None after a logout
        """
        if user_id is None:
            await self.logout()
            return None
        return await self.load(user_id)

    async def _run_unit(self, unit: Callable[[], Awaitable[T]]) -> T:
        # A cancelled caller stops waiting, the unit itself still runs to completion
        task = asyncio.ensure_future(self._locked(unit))
        task.add_done_callback(_consume_outcome)
        return await asyncio.shield(task)

    async def _locked(self, unit: Callable[[], Awaitable[T]]) -> T:
        async with self._lock:
            return await unit()

    async def _apply(self, operation: str, restaurant_id: str) -> UserFavorites:
        user_id = self._user_id
        if user_id is None:
            raise NotLoggedInError()

        current = self._favorite_ids
        if operation == ADD:
            updated = current if restaurant_id in current else (*current, restaurant_id)
        else:
            updated = tuple(fid for fid in current if fid != restaurant_id)

        # Write first: the cache only changes once the store accepted the new list
        await asyncio.to_thread(self.profile_repository.update_favorites, user_id, list(updated))

        self._favorite_ids = updated
        record_favorites_mutation(operation, changed=updated != current)
        logger.info(f"Favorite {operation} {restaurant_id} for user {user_id}")
        return self._publish()

    def _publish(self) -> UserFavorites:
        favorites = self.favorites()
        self._events.publish(
            FavoritesChanged(user_id=favorites.user_id, favorite_ids=favorites.favorite_ids)
        )
        return favorites
