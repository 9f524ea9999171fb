"""User profile lifecycle."""

from dataclasses import dataclass
from datetime import UTC, datetime
from typing import Protocol

from dopamine.domain.errors import NotFoundError, ValidationError
from dopamine.domain.users import UserPreferences, UserProfile


class UserRepository(Protocol):
    """Persistence interface for user profiles."""

    def get_profile(self, user_id: str) -> UserProfile | None:
        """Return the profile for a user id, if present."""

    def create_profile(self, profile: UserProfile) -> None:
        """Persist a new profile."""

    def update_fields(self, user_id: str, fields: dict[str, object]) -> None:
        """Update top-level profile fields."""

    def update_preferences(self, user_id: str, preferences: UserPreferences) -> None:
        """Overwrite profile preferences."""

    def delete_profile(self, user_id: str) -> None:
        """Delete a profile."""


@dataclass
class UserService:
    """Application service for user profile actions."""

    repository: UserRepository

    def ensure_profile(
        self, user_id: str, email: str, name: str | None = None
    ) -> UserProfile:
        """Return the user's profile, creating it on first sign-in."""
        now = datetime.now(tz=UTC)
        existing = self.repository.get_profile(user_id)
        if existing:
            self.repository.update_fields(user_id, {"last_login_at": now})
            return existing

        profile = UserProfile(
            id=user_id,
            email=email,
            name=name or _default_name(email),
            created_at=now,
            last_login_at=now,
        )
        self.repository.create_profile(profile)
        return profile

    def get_profile(self, user_id: str) -> UserProfile:
        profile = self.repository.get_profile(user_id)
        if profile is None:
            raise NotFoundError(f"User {user_id} not found")
        return profile

    def update_name(self, user_id: str, name: str) -> UserProfile:
        cleaned = name.strip()
        if not cleaned:
            raise ValidationError("Name must not be empty")
        self.get_profile(user_id)
        self.repository.update_fields(user_id, {"name": cleaned})
        return self.get_profile(user_id)

    def update_preferences(
        self, user_id: str, preferences: UserPreferences
    ) -> UserProfile:
        if preferences.daily_goal_minutes < 0:
            raise ValidationError("Daily goal must not be negative")
        self.get_profile(user_id)
        self.repository.update_preferences(user_id, preferences)
        return self.get_profile(user_id)

    def delete_profile(self, user_id: str) -> None:
        self.repository.delete_profile(user_id)


def _default_name(email: str) -> str:
    local_part = email.split("@", maxsplit=1)[0]
    return local_part or "User"
