"""Domain models for the per-user cart."""

from dataclasses import dataclass
from datetime import datetime
from uuid import UUID


@dataclass(frozen=True)
class CartItem:
    """A catalog reference staged for checkout."""

    id: UUID
    activity_id: str
    added_at: datetime
    is_user_activity: bool = False


@dataclass(frozen=True)
class Cart:
    """Singleton cart owned by a user."""

    user_id: str
    items: tuple[CartItem, ...]
    updated_at: datetime

    @property
    def is_empty(self) -> bool:
        return not self.items
