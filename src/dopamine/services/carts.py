"""Cart manager: per-user staging area ahead of checkout."""

import logging
from dataclasses import dataclass
from datetime import UTC, datetime
from typing import Protocol
from uuid import UUID, uuid4

from dopamine.domain.carts import Cart, CartItem
from dopamine.domain.errors import ValidationError
from dopamine.services.catalog import CatalogService
from dopamine.services.feeds import ChangeFeed

_logger = logging.getLogger(__name__)


class CartRepository(Protocol):
    """Persistence interface for carts.

    Items are stored individually so that adding one never rewrites the rest.
    """

    def get_cart(self, user_id: str) -> Cart | None:
        """Return the user's cart, if it exists."""

    def create_cart(self, user_id: str, updated_at: datetime) -> Cart:
        """Create an empty cart for the user and return it."""

    def append_item(self, user_id: str, item: CartItem) -> None:
        """Add a single item to the user's cart."""

    def remove_items(self, user_id: str, item_ids: list[UUID]) -> None:
        """Remove the given items; unknown ids are ignored."""

    def clear_items(self, user_id: str) -> None:
        """Remove every item from the user's cart."""

    def touch(self, user_id: str, updated_at: datetime) -> None:
        """Refresh the cart's ``updated_at`` timestamp."""


@dataclass
class CartService:
    """Application service for cart mutations and totals."""

    repository: CartRepository
    catalog: CatalogService
    feed: ChangeFeed[Cart]

    def fetch_or_create_cart(self, user_id: str) -> Cart:
        """Return the user's cart, creating an empty one on first access."""
        cart = self.repository.get_cart(user_id)
        if cart is None:
            cart = self.repository.create_cart(user_id, datetime.now(tz=UTC))
            _logger.info("Created cart for user %s", user_id)
        return cart

    def add_item(
        self, user_id: str, activity_id: str, is_user_activity: bool = False
    ) -> CartItem:
        """Append a new item; the same activity may appear more than once."""
        if not activity_id.strip():
            raise ValidationError("Activity id must not be empty")
        self.fetch_or_create_cart(user_id)
        now = datetime.now(tz=UTC)
        item = CartItem(
            id=uuid4(),
            activity_id=activity_id,
            added_at=now,
            is_user_activity=is_user_activity,
        )
        self.repository.append_item(user_id, item)
        self.repository.touch(user_id, now)
        _logger.info(
            "%s added to cart: %s",
            "User activity" if is_user_activity else "Activity",
            activity_id,
        )
        self._publish(user_id)
        return item

    def remove_item(self, user_id: str, cart_item_id: UUID) -> None:
        """Remove an item by id; removing an absent id is a no-op."""
        self.remove_items(user_id, [cart_item_id])

    def remove_items(self, user_id: str, cart_item_ids: list[UUID]) -> None:
        self.fetch_or_create_cart(user_id)
        if cart_item_ids:
            self.repository.remove_items(user_id, cart_item_ids)
        self.refresh(user_id)

    def clear(self, user_id: str) -> None:
        self.fetch_or_create_cart(user_id)
        self.repository.clear_items(user_id)
        _logger.info("Cart cleared for user %s", user_id)
        self.refresh(user_id)

    def refresh(self, user_id: str) -> None:
        """Bump the cart timestamp and republish it."""
        self.repository.touch(user_id, datetime.now(tz=UTC))
        self._publish(user_id)

    def total_duration(self, cart: Cart) -> int:
        """Sum durations of resolvable items; dangling references count as 0."""
        total = 0
        for item in cart.items:
            resolved = self.catalog.resolve(item.activity_id, item.is_user_activity)
            if resolved is not None:
                total += resolved.duration_minutes
        return total

    def _publish(self, user_id: str) -> None:
        cart = self.repository.get_cart(user_id)
        if cart is not None:
            self.feed.publish(user_id, cart)
