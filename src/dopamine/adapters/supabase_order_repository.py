"""Supabase repository for orders and order items."""

from collections import defaultdict
from dataclasses import dataclass
from datetime import datetime
from uuid import UUID

from supabase import Client

from dopamine.adapters.supabase_support import (
    execute,
    format_datetime,
    parse_datetime,
)
from dopamine.domain.errors import StorageError
from dopamine.domain.orders import Order, OrderItem, OrderStatus
from dopamine.services.orders import OrderRepository

_ORDER_COLUMNS = "id, user_id, status, created_at, completed_at"
_ITEM_COLUMNS = (
    "id, order_id, activity_id, activity_name, duration, is_completed, "
    "completed_at, position"
)


@dataclass
class SupabaseOrderRepository(OrderRepository):
    """Order headers live in ``orders``; items in ``order_items``."""

    client: Client

    def create_order(self, order: Order) -> None:
        execute(
            self.client.table("orders").insert(
                {
                    "id": str(order.id),
                    "user_id": order.user_id,
                    "status": order.status.value,
                    "created_at": order.created_at.isoformat(),
                    "completed_at": format_datetime(order.completed_at),
                }
            ),
            "create order",
        )
        payload = [
            {
                "id": str(item.id),
                "order_id": str(order.id),
                "activity_id": item.activity_id,
                "activity_name": item.activity_name,
                "duration": item.duration_minutes,
                "is_completed": item.is_completed,
                "completed_at": format_datetime(item.completed_at),
                "position": position,
            }
            for position, item in enumerate(order.items)
        ]
        if not payload:
            return
        try:
            execute(self.client.table("order_items").insert(payload), "create order items")
        except StorageError:
            self.delete_order(order.id)
            raise

    def get_order(self, order_id: UUID) -> Order | None:
        response = execute(
            self.client.table("orders")
            .select(_ORDER_COLUMNS)
            .eq("id", str(order_id))
            .limit(1),
            "fetch order",
        )
        if not response.data:
            return None
        items = self._items_by_order([str(order_id)])
        return _parse_order(response.data[0], items.get(str(order_id), []))

    def list_orders(self, user_id: str) -> list[Order]:
        response = execute(
            self.client.table("orders")
            .select(_ORDER_COLUMNS)
            .eq("user_id", user_id)
            .order("created_at", desc=True),
            "list orders",
        )
        rows = response.data or []
        items = self._items_by_order([str(row["id"]) for row in rows])
        return [_parse_order(row, items.get(str(row["id"]), [])) for row in rows]

    def set_item_completion(
        self, order_id: UUID, item_id: UUID, completed_at: datetime | None
    ) -> None:
        execute(
            self.client.table("order_items")
            .update(
                {
                    "is_completed": completed_at is not None,
                    "completed_at": format_datetime(completed_at),
                }
            )
            .eq("id", str(item_id))
            .eq("order_id", str(order_id)),
            "update order item",
        )

    def transition_status(
        self,
        order_id: UUID,
        status: OrderStatus,
        from_statuses: frozenset[OrderStatus],
        completed_at: datetime | None = None,
    ) -> bool:
        payload: dict[str, object] = {"status": status.value}
        if completed_at is not None:
            payload["completed_at"] = completed_at.isoformat()
        response = execute(
            self.client.table("orders")
            .update(payload)
            .eq("id", str(order_id))
            .in_("status", sorted(s.value for s in from_statuses)),
            "update order status",
        )
        return bool(response.data)

    def delete_order(self, order_id: UUID) -> None:
        execute(
            self.client.table("order_items").delete().eq("order_id", str(order_id)),
            "delete order items",
        )
        execute(
            self.client.table("orders").delete().eq("id", str(order_id)),
            "delete order",
        )

    def _items_by_order(self, order_ids: list[str]) -> dict[str, list[OrderItem]]:
        grouped: dict[str, list[OrderItem]] = defaultdict(list)
        if not order_ids:
            return grouped
        response = execute(
            self.client.table("order_items")
            .select(_ITEM_COLUMNS)
            .in_("order_id", order_ids)
            .order("position", desc=False),
            "fetch order items",
        )
        for row in response.data or []:
            grouped[str(row["order_id"])].append(_parse_item(row))
        return grouped


def _parse_order(row: dict[str, object], items: list[OrderItem]) -> Order:
    return Order(
        id=UUID(str(row["id"])),
        user_id=str(row["user_id"]),
        items=tuple(items),
        status=OrderStatus(row.get("status") or OrderStatus.ACTIVE),
        created_at=parse_datetime(row.get("created_at")) or datetime.min,
        completed_at=parse_datetime(row.get("completed_at")),
    )


def _parse_item(row: dict[str, object]) -> OrderItem:
    return OrderItem(
        id=UUID(str(row["id"])),
        activity_id=str(row["activity_id"]),
        activity_name=str(row.get("activity_name", "")),
        duration_minutes=int(row.get("duration") or 0),
        is_completed=bool(row.get("is_completed", False)),
        completed_at=parse_datetime(row.get("completed_at")),
    )
