"""Tests for container wiring."""

import asyncio

from dopamine.containers import build_container


def test_build_container_creates_services(settings) -> None:
    container = build_container(settings)

    assert container.order_service.cart_service is container.cart_service
    assert container.order_service.statistics is container.statistics_service
    assert container.order_service.clear_attempts == settings.checkout_clear_attempts
    assert container.countdown_service.dismissal_seconds == 3.0
    asyncio.run(container.close_resources())
