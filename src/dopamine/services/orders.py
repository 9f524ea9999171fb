"""Order lifecycle: checkout, per-item completion, and status transitions."""

import logging
import time
from dataclasses import dataclass, replace
from datetime import UTC, datetime
from typing import Protocol
from uuid import UUID, uuid4

from dopamine.domain.carts import Cart
from dopamine.domain.errors import (
    DopamineError,
    EmptyCartError,
    NotFoundError,
    StorageError,
    ValidationError,
)
from dopamine.domain.orders import Order, OrderItem, OrderStatus
from dopamine.services.carts import CartService
from dopamine.services.catalog import CatalogService
from dopamine.services.feeds import ChangeFeed
from dopamine.services.stats import StatisticsService

_logger = logging.getLogger(__name__)

_OPEN_STATUSES = frozenset({OrderStatus.PENDING, OrderStatus.ACTIVE})


class OrderRepository(Protocol):
    """Persistence interface for orders and their items."""

    def create_order(self, order: Order) -> None:
        """Persist an order together with its items."""

    def get_order(self, order_id: UUID) -> Order | None:
        """Return an order by id, if present."""

    def list_orders(self, user_id: str) -> list[Order]:
        """Return a user's orders, newest first."""

    def set_item_completion(
        self, order_id: UUID, item_id: UUID, completed_at: datetime | None
    ) -> None:
        """Mark one item complete at ``completed_at``, or incomplete when None."""

    def transition_status(
        self,
        order_id: UUID,
        status: OrderStatus,
        from_statuses: frozenset[OrderStatus],
        completed_at: datetime | None = None,
    ) -> bool:
        """Move the order to ``status`` only if it is in ``from_statuses``.

        ``completed_at`` is written only when given. Returns True when this
        call performed the transition.
        """

    def delete_order(self, order_id: UUID) -> None:
        """Delete an order and its items."""


@dataclass
class OrderService:
    """State machine for orders built from carts."""

    repository: OrderRepository
    cart_service: CartService
    catalog: CatalogService
    statistics: StatisticsService
    feed: ChangeFeed[list[Order]]
    clear_attempts: int = 3
    clear_retry_delay_seconds: float = 0.2

    def checkout(self, user_id: str) -> Order:
        """Convert the user's cart into an active order and empty the cart."""
        cart = self.cart_service.fetch_or_create_cart(user_id)
        if cart.is_empty:
            raise EmptyCartError("Your cart is empty")
        items = self._snapshot_items(cart)
        if not items:
            raise EmptyCartError("No cart items resolve to catalog activities")

        order = Order(
            id=uuid4(),
            user_id=user_id,
            items=tuple(items),
            status=OrderStatus.ACTIVE,
            created_at=datetime.now(tz=UTC),
        )
        self.repository.create_order(order)
        _logger.info("Order created: %s", order.id)

        try:
            self._clear_checked_out(user_id, [item.id for item in cart.items])
        except StorageError:
            _logger.exception("Cart clear failed, rolling back order %s", order.id)
            self._rollback(order)
            raise

        self._refresh_cart(user_id)
        self._publish(user_id)
        return order

    def list_orders(self, user_id: str) -> list[Order]:
        return self.repository.list_orders(user_id)

    def get_order(self, order_id: UUID) -> Order:
        order = self.repository.get_order(order_id)
        if order is None:
            raise NotFoundError(f"Order {order_id} not found")
        return order

    def mark_item_completed(self, order_id: UUID, item_id: UUID) -> Order:
        """Complete one item, completing the order when it is the last one.

        Statistics are recorded once per order, on its first transition into
        ``completed``. Completing an already-completed item changes nothing.
        """
        order = self.get_order(order_id)
        _ensure_not_cancelled(order)
        item = _require_item(order, item_id)
        if item.is_completed:
            return order

        now = datetime.now(tz=UTC)
        self.repository.set_item_completion(order_id, item_id, now)
        _logger.info("Order item marked as completed: %s", item_id)

        refreshed = self.get_order(order_id)
        if refreshed.all_items_completed and refreshed.status in _OPEN_STATUSES:
            first_completion = refreshed.completed_at is None
            transitioned = self.repository.transition_status(
                order_id,
                OrderStatus.COMPLETED,
                from_statuses=_OPEN_STATUSES,
                completed_at=now if first_completion else None,
            )
            if transitioned:
                refreshed = replace(
                    refreshed,
                    status=OrderStatus.COMPLETED,
                    completed_at=refreshed.completed_at or now,
                )
                _logger.info("Order completed: %s", order_id)
                if first_completion:
                    self._record_statistics(refreshed)

        self._publish(refreshed.user_id)
        return refreshed

    def mark_item_incomplete(self, order_id: UUID, item_id: UUID) -> Order:
        """Reopen one item; a completed order returns to ``active``.

        Statistics already recorded for the order are kept.
        """
        order = self.get_order(order_id)
        _ensure_not_cancelled(order)
        item = _require_item(order, item_id)
        if not item.is_completed:
            return order

        self.repository.set_item_completion(order_id, item_id, None)
        _logger.info("Order item marked as incomplete: %s", item_id)
        if order.status == OrderStatus.COMPLETED:
            self.repository.transition_status(
                order_id,
                OrderStatus.ACTIVE,
                from_statuses=frozenset({OrderStatus.COMPLETED}),
            )

        refreshed = self.get_order(order_id)
        self._publish(refreshed.user_id)
        return refreshed

    def cancel_order(self, order_id: UUID) -> Order:
        order = self.get_order(order_id)
        if order.status == OrderStatus.CANCELLED:
            return order
        if order.status == OrderStatus.COMPLETED:
            raise ValidationError("Completed orders cannot be cancelled")
        self.repository.transition_status(
            order_id, OrderStatus.CANCELLED, from_statuses=_OPEN_STATUSES
        )
        _logger.info("Order cancelled: %s", order_id)
        refreshed = self.get_order(order_id)
        self._publish(refreshed.user_id)
        return refreshed

    def delete_order(self, order_id: UUID) -> None:
        """Delete an order at any status; recorded statistics are kept."""
        order = self.get_order(order_id)
        self.repository.delete_order(order_id)
        _logger.info("Order deleted: %s", order_id)
        self._publish(order.user_id)

    def _snapshot_items(self, cart: Cart) -> list[OrderItem]:
        items: list[OrderItem] = []
        for cart_item in cart.items:
            resolved = self.catalog.resolve(
                cart_item.activity_id, cart_item.is_user_activity
            )
            if resolved is None:
                _logger.warning(
                    "Skipping cart item %s: activity %s not found",
                    cart_item.id,
                    cart_item.activity_id,
                )
                continue
            items.append(
                OrderItem(
                    id=uuid4(),
                    activity_id=resolved.activity_id,
                    activity_name=resolved.name,
                    duration_minutes=resolved.duration_minutes,
                )
            )
        return items

    def _clear_checked_out(self, user_id: str, item_ids: list[UUID]) -> None:
        """Remove the checked-out items, retrying on storage failures."""
        attempt = 0
        while True:
            try:
                self.cart_service.repository.remove_items(user_id, item_ids)
                return
            except StorageError as exc:
                attempt += 1
                _logger.warning(
                    "Cart clear failed (attempt %s/%s): %s",
                    attempt,
                    self.clear_attempts,
                    exc,
                )
                if attempt >= self.clear_attempts:
                    raise
                time.sleep(self.clear_retry_delay_seconds)

    def _refresh_cart(self, user_id: str) -> None:
        try:
            self.cart_service.refresh(user_id)
        except StorageError:
            _logger.exception("Failed to refresh cart for user %s", user_id)

    def _rollback(self, order: Order) -> None:
        try:
            self.repository.delete_order(order.id)
        except StorageError:
            _logger.exception("Rollback failed for order %s", order.id)

    def _record_statistics(self, order: Order) -> None:
        try:
            self.statistics.record_completion(order.user_id, order.total_duration)
            self.statistics.record_active_day(order.user_id)
        except DopamineError:
            _logger.exception(
                "Statistics update failed for order %s", order.id
            )

    def _publish(self, user_id: str) -> None:
        try:
            orders = self.repository.list_orders(user_id)
        except StorageError:
            _logger.exception("Failed to refresh orders for user %s", user_id)
            return
        self.feed.publish(user_id, orders)


def _require_item(order: Order, item_id: UUID) -> OrderItem:
    item = order.find_item(item_id)
    if item is None:
        raise NotFoundError(f"Item {item_id} not found in order {order.id}")
    return item


def _ensure_not_cancelled(order: Order) -> None:
    if order.status == OrderStatus.CANCELLED:
        raise ValidationError("Cancelled orders cannot be changed")
