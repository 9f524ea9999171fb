"""Supabase repository for carts and their items."""

from dataclasses import dataclass
from datetime import datetime
from uuid import UUID

from supabase import Client

from dopamine.adapters.supabase_support import execute, parse_datetime
from dopamine.domain.carts import Cart, CartItem
from dopamine.services.carts import CartRepository


@dataclass
class SupabaseCartRepository(CartRepository):
    """Stores the cart header in ``carts`` and one row per item in ``cart_items``."""

    client: Client

    def get_cart(self, user_id: str) -> Cart | None:
        response = execute(
            self.client.table("carts")
            .select("user_id, updated_at")
            .eq("user_id", user_id)
            .limit(1),
            "fetch cart",
        )
        if not response.data:
            return None
        items_response = execute(
            self.client.table("cart_items")
            .select("id, activity_id, added_at, is_user_activity")
            .eq("user_id", user_id)
            .order("added_at", desc=False),
            "fetch cart items",
        )
        return Cart(
            user_id=user_id,
            items=tuple(_parse_item(row) for row in items_response.data or []),
            updated_at=parse_datetime(response.data[0].get("updated_at"))
            or datetime.min,
        )

    def create_cart(self, user_id: str, updated_at: datetime) -> Cart:
        execute(
            self.client.table("carts").upsert(
                {"user_id": user_id, "updated_at": updated_at.isoformat()}
            ),
            "create cart",
        )
        return Cart(user_id=user_id, items=(), updated_at=updated_at)

    def append_item(self, user_id: str, item: CartItem) -> None:
        execute(
            self.client.table("cart_items").insert(
                {
                    "id": str(item.id),
                    "user_id": user_id,
                    "activity_id": item.activity_id,
                    "added_at": item.added_at.isoformat(),
                    "is_user_activity": item.is_user_activity,
                }
            ),
            "add cart item",
        )

    def remove_items(self, user_id: str, item_ids: list[UUID]) -> None:
        execute(
            self.client.table("cart_items")
            .delete()
            .eq("user_id", user_id)
            .in_("id", [str(item_id) for item_id in item_ids]),
            "remove cart items",
        )

    def clear_items(self, user_id: str) -> None:
        execute(
            self.client.table("cart_items").delete().eq("user_id", user_id),
            "clear cart",
        )

    def touch(self, user_id: str, updated_at: datetime) -> None:
        execute(
            self.client.table("carts")
            .update({"updated_at": updated_at.isoformat()})
            .eq("user_id", user_id),
            "update cart",
        )


def _parse_item(row: dict[str, object]) -> CartItem:
    return CartItem(
        id=UUID(str(row["id"])),
        activity_id=str(row["activity_id"]),
        added_at=parse_datetime(row.get("added_at")) or datetime.min,
        is_user_activity=bool(row.get("is_user_activity", False)),
    )
