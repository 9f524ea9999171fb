"""Supabase repository for catalog and user-authored activities."""

from dataclasses import dataclass
from datetime import datetime
from uuid import UUID

from supabase import Client

from dopamine.adapters.supabase_support import execute, parse_datetime
from dopamine.domain.catalog import (
    Activity,
    ActivityCategory,
    ActivityType,
    Difficulty,
    UserActivity,
)
from dopamine.services.catalog import CatalogRepository

_ACTIVITY_COLUMNS = (
    "id, name, description, category, duration, difficulty, benefits, icon, "
    "activity_type"
)
_USER_ACTIVITY_COLUMNS = (
    "id, user_id, title, category, duration, scheduled_time, scheduled_date, "
    "created_at, is_on_home_screen"
)


@dataclass
class SupabaseCatalogRepository(CatalogRepository):
    """Supabase implementation for the activity catalog."""

    client: Client

    def list_active_activities(
        self, category: ActivityCategory | None = None
    ) -> list[Activity]:
        query = (
            self.client.table("activities")
            .select(_ACTIVITY_COLUMNS)
            .eq("is_active", True)
        )
        if category is not None:
            query = query.eq("category", category.value)
        response = execute(query.order("name", desc=False), "list activities")
        return [_parse_activity(row) for row in response.data or []]

    def get_activity(self, activity_id: str) -> Activity | None:
        response = execute(
            self.client.table("activities")
            .select(_ACTIVITY_COLUMNS)
            .eq("id", activity_id)
            .limit(1),
            "fetch activity",
        )
        if not response.data:
            return None
        return _parse_activity(response.data[0])

    def upsert_activities(self, activities: list[Activity]) -> None:
        payload = [
            {
                "id": activity.id,
                "name": activity.name,
                "description": activity.description,
                "category": activity.category.value,
                "duration": activity.duration_minutes,
                "difficulty": activity.difficulty.value,
                "benefits": list(activity.benefits),
                "icon": activity.icon,
                "activity_type": (
                    activity.activity_type.value if activity.activity_type else None
                ),
                "is_active": True,
            }
            for activity in activities
        ]
        if payload:
            execute(self.client.table("activities").upsert(payload), "seed activities")

    def create_user_activity(self, activity: UserActivity) -> UserActivity:
        execute(
            self.client.table("user_activities").insert(
                {
                    "id": str(activity.id),
                    "user_id": activity.user_id,
                    "title": activity.title,
                    "category": activity.category.value,
                    "duration": activity.duration_minutes,
                    "scheduled_time": activity.scheduled_time.isoformat(),
                    "scheduled_date": activity.scheduled_date.isoformat(),
                    "created_at": activity.created_at.isoformat(),
                    "is_on_home_screen": activity.is_on_home_screen,
                }
            ),
            "create user activity",
        )
        return activity

    def get_user_activity(self, activity_id: UUID) -> UserActivity | None:
        response = execute(
            self.client.table("user_activities")
            .select(_USER_ACTIVITY_COLUMNS)
            .eq("id", str(activity_id))
            .limit(1),
            "fetch user activity",
        )
        if not response.data:
            return None
        return _parse_user_activity(response.data[0])

    def list_user_activities(self, user_id: str) -> list[UserActivity]:
        response = execute(
            self.client.table("user_activities")
            .select(_USER_ACTIVITY_COLUMNS)
            .eq("user_id", user_id)
            .order("scheduled_time", desc=False),
            "list user activities",
        )
        return [_parse_user_activity(row) for row in response.data or []]

    def delete_user_activity(self, activity_id: UUID) -> None:
        execute(
            self.client.table("user_activities").delete().eq("id", str(activity_id)),
            "delete user activity",
        )

    def set_user_activity_home_screen(self, activity_id: UUID, value: bool) -> None:
        execute(
            self.client.table("user_activities")
            .update({"is_on_home_screen": value})
            .eq("id", str(activity_id)),
            "update user activity",
        )


def _parse_activity(row: dict[str, object]) -> Activity:
    activity_type = row.get("activity_type")
    return Activity(
        id=str(row["id"]),
        name=str(row.get("name", "")),
        description=str(row.get("description") or ""),
        category=ActivityCategory(row["category"]),
        duration_minutes=int(row.get("duration") or 0),
        difficulty=Difficulty(row.get("difficulty") or Difficulty.EASY),
        benefits=tuple(str(b) for b in row.get("benefits") or ()),
        icon=str(row.get("icon") or ""),
        activity_type=ActivityType(activity_type) if activity_type else None,
    )


def _parse_user_activity(row: dict[str, object]) -> UserActivity:
    created_at = parse_datetime(row.get("created_at")) or datetime.min
    return UserActivity(
        id=UUID(str(row["id"])),
        user_id=str(row["user_id"]),
        title=str(row.get("title", "")),
        category=ActivityCategory(row["category"]),
        duration_minutes=int(row.get("duration") or 0),
        scheduled_time=parse_datetime(row.get("scheduled_time")) or created_at,
        scheduled_date=parse_datetime(row.get("scheduled_date")) or created_at,
        created_at=created_at,
        is_on_home_screen=bool(row.get("is_on_home_screen", False)),
    )
