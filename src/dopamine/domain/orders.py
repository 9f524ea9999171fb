"""Domain models for orders and their items."""

from dataclasses import dataclass
from datetime import datetime
from enum import StrEnum
from uuid import UUID


class OrderStatus(StrEnum):
    """Lifecycle state of an order."""

    PENDING = "pending"
    ACTIVE = "active"
    COMPLETED = "completed"
    CANCELLED = "cancelled"


@dataclass(frozen=True)
class OrderItem:
    """Snapshot of an activity committed to in an order.

    ``activity_name`` and ``duration_minutes`` are copied at checkout and do not
    follow later catalog edits.
    """

    id: UUID
    activity_id: str
    activity_name: str
    duration_minutes: int
    is_completed: bool = False
    completed_at: datetime | None = None


@dataclass(frozen=True)
class Order:
    """Activities a user committed to at checkout."""

    id: UUID
    user_id: str
    items: tuple[OrderItem, ...]
    status: OrderStatus
    created_at: datetime
    completed_at: datetime | None = None

    @property
    def total_duration(self) -> int:
        return sum(item.duration_minutes for item in self.items)

    @property
    def completed_items_count(self) -> int:
        return sum(1 for item in self.items if item.is_completed)

    @property
    def completion_percentage(self) -> float:
        if not self.items:
            return 0.0
        return self.completed_items_count / len(self.items) * 100

    @property
    def all_items_completed(self) -> bool:
        return bool(self.items) and all(item.is_completed for item in self.items)

    def find_item(self, item_id: UUID) -> OrderItem | None:
        for item in self.items:
            if item.id == item_id:
                return item
        return None
