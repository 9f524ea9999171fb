"""Tests for user profiles."""

import pytest

from dopamine.domain.errors import NotFoundError, ValidationError
from dopamine.domain.users import UserPreferences
from dopamine.services.users import UserService
from tests.conftest import USER_ID, InMemoryUserRepository


def test_ensure_profile_creates_defaults() -> None:
    repository = InMemoryUserRepository()
    service = UserService(repository)

    profile = service.ensure_profile("new-user", "sam.lee@example.com")

    assert profile.name == "sam.lee"
    assert profile.statistics.total_activities_completed == 0
    assert profile.preferences.daily_goal_minutes == 120
    assert profile.preferences.notifications_enabled
    assert not profile.preferences.dark_mode
    assert repository.profiles["new-user"] == profile


def test_ensure_profile_touches_existing_user(user_repository) -> None:
    service = UserService(user_repository)

    service.ensure_profile(USER_ID, "ignored@example.com")

    assert user_repository.touched == [USER_ID]


def test_update_name_rejects_blank(user_repository) -> None:
    service = UserService(user_repository)

    with pytest.raises(ValidationError):
        service.update_name(USER_ID, " ")
    assert service.update_name(USER_ID, " Alex ").name == "Alex"


def test_update_preferences(user_repository) -> None:
    service = UserService(user_repository)

    profile = service.update_preferences(
        USER_ID, UserPreferences(dark_mode=True, daily_goal_minutes=60)
    )

    assert profile.preferences.dark_mode
    assert profile.preferences.daily_goal_minutes == 60


def test_get_missing_profile_raises(user_repository) -> None:
    service = UserService(user_repository)
    service.delete_profile(USER_ID)

    with pytest.raises(NotFoundError):
        service.get_profile(USER_ID)
