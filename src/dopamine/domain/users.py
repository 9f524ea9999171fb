"""Domain models for user profiles and statistics."""

from dataclasses import dataclass, field
from datetime import date, datetime

DEFAULT_DAILY_GOAL_MINUTES = 120


@dataclass(frozen=True)
class UserStatistics:
    """Running totals and streak counters for a user."""

    current_streak: int = 0
    longest_streak: int = 0
    total_activities_completed: int = 0
    total_minutes: int = 0
    last_active_on: date | None = None


@dataclass(frozen=True)
class UserPreferences:
    """Profile preferences."""

    notifications_enabled: bool = True
    dark_mode: bool = False
    daily_goal_minutes: int = DEFAULT_DAILY_GOAL_MINUTES


@dataclass(frozen=True)
class UserProfile:
    """User profile stored alongside the identity provider account."""

    id: str
    email: str
    name: str
    created_at: datetime
    last_login_at: datetime
    statistics: UserStatistics = field(default_factory=UserStatistics)
    preferences: UserPreferences = field(default_factory=UserPreferences)


@dataclass(frozen=True)
class AuthenticatedUser:
    """Identity resolved from an access token."""

    id: str
    email: str | None = None
