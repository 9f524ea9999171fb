"""Supabase-backed user profile and statistics repository."""

from dataclasses import asdict, dataclass
from datetime import UTC, date, datetime

from supabase import Client

from dopamine.adapters.supabase_support import execute, parse_datetime
from dopamine.domain.users import (
    DEFAULT_DAILY_GOAL_MINUTES,
    UserPreferences,
    UserProfile,
    UserStatistics,
)
from dopamine.services.stats import StatisticsRepository
from dopamine.services.users import UserRepository

_PROFILE_COLUMNS = "id, email, name, created_at, last_login_at, statistics, preferences"


@dataclass
class SupabaseUserRepository(UserRepository, StatisticsRepository):
    """Profiles live in ``users`` with statistics and preferences as JSON columns."""

    client: Client

    def get_profile(self, user_id: str) -> UserProfile | None:
        response = execute(
            self.client.table("users")
            .select(_PROFILE_COLUMNS)
            .eq("id", user_id)
            .limit(1),
            "fetch user",
        )
        if not response.data:
            return None
        row = response.data[0]
        created_at = parse_datetime(row.get("created_at")) or datetime.now(tz=UTC)
        return UserProfile(
            id=str(row["id"]),
            email=str(row.get("email") or ""),
            name=str(row.get("name") or ""),
            created_at=created_at,
            last_login_at=parse_datetime(row.get("last_login_at")) or created_at,
            statistics=_parse_statistics(row.get("statistics")),
            preferences=_parse_preferences(row.get("preferences")),
        )

    def create_profile(self, profile: UserProfile) -> None:
        execute(
            self.client.table("users").insert(
                {
                    "id": profile.id,
                    "email": profile.email,
                    "name": profile.name,
                    "created_at": profile.created_at.isoformat(),
                    "last_login_at": profile.last_login_at.isoformat(),
                    "statistics": _dump_statistics(profile.statistics),
                    "preferences": asdict(profile.preferences),
                }
            ),
            "create user",
        )

    def update_fields(self, user_id: str, fields: dict[str, object]) -> None:
        payload = {
            key: value.isoformat() if isinstance(value, datetime) else value
            for key, value in fields.items()
        }
        execute(
            self.client.table("users").update(payload).eq("id", user_id),
            "update user",
        )

    def update_preferences(self, user_id: str, preferences: UserPreferences) -> None:
        self.update_fields(user_id, {"preferences": asdict(preferences)})

    def delete_profile(self, user_id: str) -> None:
        execute(
            self.client.table("users").delete().eq("id", user_id),
            "delete user",
        )

    def get_statistics(self, user_id: str) -> UserStatistics | None:
        response = execute(
            self.client.table("users").select("statistics").eq("id", user_id).limit(1),
            "fetch statistics",
        )
        if not response.data:
            return None
        return _parse_statistics(response.data[0].get("statistics"))

    def save_statistics(self, user_id: str, statistics: UserStatistics) -> None:
        self.update_fields(user_id, {"statistics": _dump_statistics(statistics)})


def _dump_statistics(statistics: UserStatistics) -> dict[str, object]:
    payload = asdict(statistics)
    payload["last_active_on"] = (
        statistics.last_active_on.isoformat() if statistics.last_active_on else None
    )
    return payload


def _parse_statistics(raw: object) -> UserStatistics:
    if not isinstance(raw, dict):
        return UserStatistics()
    last_active = raw.get("last_active_on")
    return UserStatistics(
        current_streak=int(raw.get("current_streak") or 0),
        longest_streak=int(raw.get("longest_streak") or 0),
        total_activities_completed=int(raw.get("total_activities_completed") or 0),
        total_minutes=int(raw.get("total_minutes") or 0),
        last_active_on=date.fromisoformat(last_active) if last_active else None,
    )


def _parse_preferences(raw: object) -> UserPreferences:
    if not isinstance(raw, dict):
        return UserPreferences()
    return UserPreferences(
        notifications_enabled=bool(raw.get("notifications_enabled", True)),
        dark_mode=bool(raw.get("dark_mode", False)),
        daily_goal_minutes=int(
            raw.get("daily_goal_minutes", DEFAULT_DAILY_GOAL_MINUTES)
        ),
    )
