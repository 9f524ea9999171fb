"""Tests for the order lifecycle."""

from datetime import timedelta
from uuid import uuid4

import pytest

from dopamine.domain.errors import (
    EmptyCartError,
    NotFoundError,
    StorageError,
    ValidationError,
)
from dopamine.domain.orders import OrderStatus
from tests.conftest import USER_ID


def _checkout(cart_service, order_service, *activity_ids: str):
    for activity_id in activity_ids:
        cart_service.add_item(USER_ID, activity_id)
    return order_service.checkout(USER_ID)


def test_checkout_snapshots_items_and_clears_cart(cart_service, order_service) -> None:
    order = _checkout(cart_service, order_service, "1", "4")

    assert order.status == OrderStatus.ACTIVE
    assert [item.activity_name for item in order.items] == [
        "5-Min Breathing",
        "Deep Work Session",
    ]
    assert order.total_duration == 95
    assert not any(item.is_completed for item in order.items)
    assert cart_service.fetch_or_create_cart(USER_ID).is_empty
    assert order_service.list_orders(USER_ID) == [order]


def test_checkout_empty_cart_writes_nothing(order_service, order_repository) -> None:
    with pytest.raises(EmptyCartError):
        order_service.checkout(USER_ID)

    assert order_repository.orders == {}


def test_checkout_skips_dangling_references(cart_service, order_service) -> None:
    order = _checkout(cart_service, order_service, "1", "missing")

    assert [item.activity_id for item in order.items] == ["1"]


def test_checkout_with_only_dangling_references_is_empty(
    cart_service, order_service, order_repository
) -> None:
    cart_service.add_item(USER_ID, "missing")

    with pytest.raises(EmptyCartError):
        order_service.checkout(USER_ID)

    assert order_repository.orders == {}
    assert len(cart_service.fetch_or_create_cart(USER_ID).items) == 1


def test_checkout_keeps_order_when_cart_refresh_fails(
    cart_service, order_service, cart_repository, order_repository
) -> None:
    cart_service.add_item(USER_ID, "1")
    cart_repository.fail_touch = True

    order = order_service.checkout(USER_ID)

    assert order_repository.deleted == []
    assert order_service.get_order(order.id).status == OrderStatus.ACTIVE
    assert cart_repository.carts[USER_ID].is_empty
    assert [o.id for o in order_service.list_orders(USER_ID)] == [order.id]



def test_order_snapshot_ignores_later_catalog_edits(
    cart_service, order_service, catalog_repository
) -> None:
    order = _checkout(cart_service, order_service, "1")
    catalog_repository.activities.pop("1")

    stored = order_service.get_order(order.id)

    assert stored.items[0].activity_name == "5-Min Breathing"
    assert stored.total_duration == 5


def test_checkout_retries_cart_clear(
    cart_service, order_service, cart_repository
) -> None:
    cart_repository.remove_failures = 2

    order = _checkout(cart_service, order_service, "1")

    assert cart_repository.remove_calls == 3
    assert order_service.get_order(order.id).status == OrderStatus.ACTIVE
    assert cart_service.fetch_or_create_cart(USER_ID).is_empty


def test_checkout_rolls_back_order_when_cart_clear_keeps_failing(
    cart_service, order_service, cart_repository, order_repository
) -> None:
    cart_service.add_item(USER_ID, "1")
    cart_repository.remove_failures = 10

    with pytest.raises(StorageError):
        order_service.checkout(USER_ID)

    assert order_repository.orders == {}
    assert len(order_repository.deleted) == 1
    assert len(cart_service.fetch_or_create_cart(USER_ID).items) == 1


def test_completing_all_items_completes_order_and_records_once(
    cart_service, order_service, statistics_service
) -> None:
    order = _checkout(cart_service, order_service, "1", "4")
    first, second = order.items

    partial = order_service.mark_item_completed(order.id, first.id)
    assert partial.status == OrderStatus.ACTIVE
    assert partial.completion_percentage == 50

    done = order_service.mark_item_completed(order.id, second.id)
    assert done.status == OrderStatus.COMPLETED
    assert done.completed_at is not None

    order_service.mark_item_completed(order.id, second.id)

    stats = statistics_service.get_statistics(USER_ID)
    assert stats.total_activities_completed == 1
    assert stats.total_minutes == 95
    assert stats.current_streak == 1


def test_reopening_and_recompleting_does_not_double_count(
    cart_service, order_service, statistics_service
) -> None:
    order = _checkout(cart_service, order_service, "1")
    item = order.items[0]
    completed = order_service.mark_item_completed(order.id, item.id)

    reopened = order_service.mark_item_incomplete(order.id, item.id)
    assert reopened.status == OrderStatus.ACTIVE
    assert reopened.completed_at == completed.completed_at
    assert not reopened.items[0].is_completed

    again = order_service.mark_item_completed(order.id, item.id)
    assert again.status == OrderStatus.COMPLETED

    stats = statistics_service.get_statistics(USER_ID)
    assert stats.total_activities_completed == 1
    assert stats.total_minutes == 5


def test_two_completed_orders_record_twice(
    cart_service, order_service, statistics_service
) -> None:
    for activity_id in ("1", "7"):
        order = _checkout(cart_service, order_service, activity_id)
        order_service.mark_item_completed(order.id, order.items[0].id)

    stats = statistics_service.get_statistics(USER_ID)
    assert stats.total_activities_completed == 2
    assert stats.total_minutes == 20
    assert stats.current_streak == 1


def test_statistics_failure_does_not_fail_completion(
    cart_service, order_service, user_repository
) -> None:
    order = _checkout(cart_service, order_service, "1")
    user_repository.fail_statistics = True

    done = order_service.mark_item_completed(order.id, order.items[0].id)

    assert done.status == OrderStatus.COMPLETED


def test_concurrent_winner_records_statistics_once(
    cart_service, order_service, order_repository, statistics_service
) -> None:
    order = _checkout(cart_service, order_service, "1", "2")
    first, second = order.items
    order_repository.set_item_completion(order.id, first.id, order.created_at)
    order_repository.transition_status(
        order.id,
        OrderStatus.COMPLETED,
        frozenset({OrderStatus.ACTIVE}),
        completed_at=order.created_at + timedelta(seconds=1),
    )

    order_service.mark_item_completed(order.id, second.id)

    assert statistics_service.get_statistics(USER_ID).total_activities_completed == 0


def test_mark_unknown_item_raises_not_found(cart_service, order_service) -> None:
    order = _checkout(cart_service, order_service, "1")

    with pytest.raises(NotFoundError):
        order_service.mark_item_completed(order.id, uuid4())


def test_get_unknown_order_raises_not_found(order_service) -> None:
    with pytest.raises(NotFoundError):
        order_service.get_order(uuid4())


def test_cancel_order_blocks_item_changes(cart_service, order_service) -> None:
    order = _checkout(cart_service, order_service, "1")

    cancelled = order_service.cancel_order(order.id)

    assert cancelled.status == OrderStatus.CANCELLED
    with pytest.raises(ValidationError):
        order_service.mark_item_completed(order.id, order.items[0].id)


def test_completed_order_cannot_be_cancelled(cart_service, order_service) -> None:
    order = _checkout(cart_service, order_service, "1")
    order_service.mark_item_completed(order.id, order.items[0].id)

    with pytest.raises(ValidationError):
        order_service.cancel_order(order.id)


def test_delete_order_keeps_statistics(
    cart_service, order_service, statistics_service
) -> None:
    order = _checkout(cart_service, order_service, "1")
    order_service.mark_item_completed(order.id, order.items[0].id)

    order_service.delete_order(order.id)

    assert order_service.list_orders(USER_ID) == []
    assert statistics_service.get_statistics(USER_ID).total_activities_completed == 1


def test_order_feed_receives_updates(cart_service, order_service) -> None:
    received = []
    order_service.feed.subscribe(USER_ID, received.append)

    order = _checkout(cart_service, order_service, "1")
    order_service.mark_item_completed(order.id, order.items[0].id)

    assert received[-1][0].status == OrderStatus.COMPLETED
