"""Pydantic request and response models for the HTTP API."""

from datetime import date, datetime
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field

from dopamine.domain.catalog import ActivityCategory, ActivityType, Difficulty
from dopamine.domain.orders import OrderStatus
from dopamine.domain.timers import TimerPhase


class DomainModel(BaseModel):
    """Response model populated from domain dataclasses."""

    model_config = ConfigDict(from_attributes=True)


class ActivityOut(DomainModel):
    id: str
    name: str
    description: str
    category: ActivityCategory
    duration_minutes: int
    difficulty: Difficulty
    benefits: list[str]
    icon: str
    activity_type: ActivityType | None = None


class UserActivityIn(BaseModel):
    title: str
    category: ActivityCategory
    duration_minutes: int
    scheduled_time: datetime
    scheduled_date: datetime
    is_on_home_screen: bool = False


class UserActivityOut(DomainModel):
    id: UUID
    user_id: str
    title: str
    category: ActivityCategory
    duration_minutes: int
    scheduled_time: datetime
    scheduled_date: datetime
    created_at: datetime
    is_on_home_screen: bool


class HomeScreenIn(BaseModel):
    is_on_home_screen: bool


class MenuCategoryOut(BaseModel):
    category: ActivityCategory
    title: str
    description: str
    icon: str
    order: int


class CartItemIn(BaseModel):
    activity_id: str
    is_user_activity: bool = False


class CartItemOut(DomainModel):
    id: UUID
    activity_id: str
    added_at: datetime
    is_user_activity: bool


class CartOut(DomainModel):
    user_id: str
    items: list[CartItemOut]
    updated_at: datetime
    total_duration: int = 0


class OrderItemOut(DomainModel):
    id: UUID
    activity_id: str
    activity_name: str
    duration_minutes: int
    is_completed: bool
    completed_at: datetime | None = None


class OrderOut(DomainModel):
    id: UUID
    user_id: str
    items: list[OrderItemOut]
    status: OrderStatus
    created_at: datetime
    completed_at: datetime | None = None
    total_duration: int
    completed_items_count: int
    completion_percentage: float


class StatisticsOut(DomainModel):
    current_streak: int
    longest_streak: int
    total_activities_completed: int
    total_minutes: int
    last_active_on: date | None = None


class StreakIn(BaseModel):
    current_streak: int


class PreferencesModel(DomainModel):
    notifications_enabled: bool = True
    dark_mode: bool = False
    daily_goal_minutes: int = 120


class NameIn(BaseModel):
    name: str


class ProfileOut(DomainModel):
    id: str
    email: str
    name: str
    created_at: datetime
    last_login_at: datetime
    statistics: StatisticsOut
    preferences: PreferencesModel


class TimerStartIn(BaseModel):
    activity_id: str
    activity_name: str
    activity_icon: str = ""
    duration_minutes: int = Field(description="Countdown length in minutes")


class TimerStateOut(DomainModel):
    activity_id: str
    remaining_seconds: int
    is_paused: bool
    last_update_time: datetime
    phase: TimerPhase
