"""Catalog reads, user-authored activities, and reference resolution."""

import logging
from dataclasses import dataclass, replace
from datetime import UTC, datetime
from typing import Protocol
from uuid import UUID, uuid4

from dopamine.domain.catalog import (
    SAMPLE_ACTIVITIES,
    Activity,
    ActivityCategory,
    Difficulty,
    ResolvedActivity,
    UserActivity,
)
from dopamine.domain.errors import NotFoundError, StorageError, ValidationError

_logger = logging.getLogger(__name__)


class CatalogRepository(Protocol):
    """Persistence interface for system and user-authored activities."""

    def list_active_activities(
        self, category: ActivityCategory | None = None
    ) -> list[Activity]:
        """Return active catalog activities, optionally for one category."""

    def get_activity(self, activity_id: str) -> Activity | None:
        """Return a catalog activity by id, if present."""

    def upsert_activities(self, activities: list[Activity]) -> None:
        """Create or replace catalog activities and mark them active."""

    def create_user_activity(self, activity: UserActivity) -> UserActivity:
        """Persist a user-authored activity and return it."""

    def get_user_activity(self, activity_id: UUID) -> UserActivity | None:
        """Return a user-authored activity by id, if present."""

    def list_user_activities(self, user_id: str) -> list[UserActivity]:
        """Return a user's activities ordered by schedule."""

    def delete_user_activity(self, activity_id: UUID) -> None:
        """Delete a user-authored activity."""

    def set_user_activity_home_screen(self, activity_id: UUID, value: bool) -> None:
        """Update the home screen flag of a user-authored activity."""


@dataclass
class CatalogService:
    """Read-mostly access to the activity catalog."""

    repository: CatalogRepository
    use_sample_fallback: bool = True

    def list_activities(self) -> list[Activity]:
        """Return active activities, degrading to the sample catalog."""
        try:
            return self.repository.list_active_activities()
        except StorageError:
            if not self.use_sample_fallback:
                raise
            _logger.warning("Catalog fetch failed, using sample activities")
            return list(SAMPLE_ACTIVITIES)

    def activities_for_category(self, category: ActivityCategory) -> list[Activity]:
        try:
            return self.repository.list_active_activities(category)
        except StorageError:
            if not self.use_sample_fallback:
                raise
            _logger.warning(
                "Catalog fetch failed for %s, using sample activities", category
            )
            return [a for a in SAMPLE_ACTIVITIES if a.category == category]

    def get_activity(self, activity_id: str) -> Activity | None:
        try:
            return self.repository.get_activity(activity_id)
        except StorageError:
            if not self.use_sample_fallback:
                raise
            _logger.warning("Activity fetch failed for %s, using sample", activity_id)
            return _sample_activity(activity_id)

    def search(self, query: str | None) -> list[Activity]:
        """Case-insensitive search over name, description, and benefits."""
        activities = self.list_activities()
        if not query:
            return activities
        needle = query.casefold()
        return [
            activity
            for activity in activities
            if needle in activity.name.casefold()
            or needle in activity.description.casefold()
            or any(needle in benefit.casefold() for benefit in activity.benefits)
        ]

    def filter(
        self,
        category: ActivityCategory | None = None,
        difficulty: Difficulty | None = None,
        min_duration: int | None = None,
        max_duration: int | None = None,
    ) -> list[Activity]:
        filtered = self.list_activities()
        if category is not None:
            filtered = [a for a in filtered if a.category == category]
        if difficulty is not None:
            filtered = [a for a in filtered if a.difficulty == difficulty]
        if min_duration is not None:
            filtered = [a for a in filtered if a.duration_minutes >= min_duration]
        if max_duration is not None:
            filtered = [a for a in filtered if a.duration_minutes <= max_duration]
        return filtered

    def seed_sample_activities(self) -> int:
        """Write the built-in sample catalog to storage and return its size."""
        self.repository.upsert_activities(list(SAMPLE_ACTIVITIES))
        _logger.info("Seeded %s sample activities", len(SAMPLE_ACTIVITIES))
        return len(SAMPLE_ACTIVITIES)

    def create_user_activity(  # noqa: PLR0913
        self,
        user_id: str,
        title: str,
        category: ActivityCategory,
        duration_minutes: int,
        scheduled_time: datetime,
        scheduled_date: datetime,
        is_on_home_screen: bool = False,
    ) -> UserActivity:
        """Validate and persist a user-authored activity."""
        cleaned = title.strip()
        if not cleaned:
            raise ValidationError("Activity title must not be empty")
        if duration_minutes < 0:
            raise ValidationError("Activity duration must not be negative")
        activity = UserActivity(
            id=uuid4(),
            user_id=user_id,
            title=cleaned,
            category=category,
            duration_minutes=duration_minutes,
            scheduled_time=scheduled_time,
            scheduled_date=scheduled_date,
            created_at=datetime.now(tz=UTC),
            is_on_home_screen=is_on_home_screen,
        )
        return self.repository.create_user_activity(activity)

    def list_user_activities(self, user_id: str) -> list[UserActivity]:
        return self.repository.list_user_activities(user_id)

    def delete_user_activity(self, user_id: str, activity_id: UUID) -> None:
        """Delete a user activity owned by ``user_id``."""
        self._owned_user_activity(user_id, activity_id)
        self.repository.delete_user_activity(activity_id)

    def set_on_home_screen(
        self, user_id: str, activity_id: UUID, value: bool
    ) -> UserActivity:
        activity = self._owned_user_activity(user_id, activity_id)
        self.repository.set_user_activity_home_screen(activity_id, value)
        return replace(activity, is_on_home_screen=value)

    def resolve(
        self, activity_id: str, is_user_activity: bool = False
    ) -> ResolvedActivity | None:
        """Resolve a cart or order reference, returning None when it dangles."""
        if is_user_activity:
            return self._resolve_user_activity(activity_id)
        try:
            activity = self.get_activity(activity_id)
        except StorageError:
            _logger.warning("Could not resolve activity %s", activity_id)
            return None
        if activity is None:
            return None
        return ResolvedActivity(
            activity_id=activity.id,
            name=activity.name,
            duration_minutes=activity.duration_minutes,
            icon=activity.icon,
        )

    def _resolve_user_activity(self, activity_id: str) -> ResolvedActivity | None:
        try:
            parsed = UUID(activity_id)
        except ValueError:
            return None
        try:
            activity = self.repository.get_user_activity(parsed)
        except StorageError:
            _logger.warning("Could not resolve user activity %s", activity_id)
            return None
        if activity is None:
            return None
        return ResolvedActivity(
            activity_id=str(activity.id),
            name=activity.title,
            duration_minutes=activity.duration_minutes,
        )

    def _owned_user_activity(self, user_id: str, activity_id: UUID) -> UserActivity:
        activity = self.repository.get_user_activity(activity_id)
        if activity is None or activity.user_id != user_id:
            raise NotFoundError(f"User activity {activity_id} not found")
        return activity


def _sample_activity(activity_id: str) -> Activity | None:
    for activity in SAMPLE_ACTIVITIES:
        if activity.id == activity_id:
            return activity
    return None
