"""Dependency container wiring for the application."""

from collections.abc import Awaitable, Callable
from dataclasses import dataclass

from supabase import create_client

from dopamine.adapters.identity_client import HttpxIdentityClient, IdentityClient
from dopamine.adapters.supabase_cart_repository import SupabaseCartRepository
from dopamine.adapters.supabase_catalog_repository import SupabaseCatalogRepository
from dopamine.adapters.supabase_menu_repository import SupabaseMenuRepository
from dopamine.adapters.supabase_order_repository import SupabaseOrderRepository
from dopamine.adapters.supabase_user_repository import SupabaseUserRepository
from dopamine.config import Settings
from dopamine.domain.carts import Cart
from dopamine.domain.orders import Order
from dopamine.domain.timers import TimerState
from dopamine.domain.users import UserStatistics
from dopamine.services.carts import CartService
from dopamine.services.catalog import CatalogService
from dopamine.services.feeds import ChangeFeed
from dopamine.services.menu import MenuService
from dopamine.services.orders import OrderService
from dopamine.services.stats import StatisticsService
from dopamine.services.timers import LiveCountdownService
from dopamine.services.users import UserService


@dataclass
class AppContainer:
    """Holds application-wide dependencies."""

    settings: Settings
    identity_client: IdentityClient
    catalog_service: CatalogService
    menu_service: MenuService
    cart_service: CartService
    order_service: OrderService
    statistics_service: StatisticsService
    user_service: UserService
    countdown_service: LiveCountdownService
    close_resources: Callable[[], Awaitable[None]]


def build_container(settings: Settings | None = None) -> AppContainer:
    """Create the default dependency container."""
    resolved_settings = settings or Settings()
    supabase_client = create_client(
        resolved_settings.supabase_url, resolved_settings.supabase_service_key
    )
    user_repository = SupabaseUserRepository(supabase_client)

    catalog_service = CatalogService(SupabaseCatalogRepository(supabase_client))
    menu_service = MenuService(SupabaseMenuRepository(supabase_client))
    cart_service = CartService(
        repository=SupabaseCartRepository(supabase_client),
        catalog=catalog_service,
        feed=ChangeFeed[Cart]("cart"),
    )
    statistics_service = StatisticsService(
        repository=user_repository,
        feed=ChangeFeed[UserStatistics]("statistics"),
        timezone_name=resolved_settings.timezone,
    )
    order_service = OrderService(
        repository=SupabaseOrderRepository(supabase_client),
        cart_service=cart_service,
        catalog=catalog_service,
        statistics=statistics_service,
        feed=ChangeFeed[list[Order]]("orders"),
        clear_attempts=resolved_settings.checkout_clear_attempts,
    )
    countdown_service = LiveCountdownService(
        feed=ChangeFeed[TimerState]("timers"),
        tick_seconds=resolved_settings.timer_tick_seconds,
        dismissal_seconds=resolved_settings.timer_dismissal_seconds,
    )
    identity_client = HttpxIdentityClient.create(
        base_url=resolved_settings.supabase_url,
        api_key=resolved_settings.supabase_service_key,
    )

    async def close_resources() -> None:
        await countdown_service.stop_all()
        await identity_client.close()

    return AppContainer(
        settings=resolved_settings,
        identity_client=identity_client,
        catalog_service=catalog_service,
        menu_service=menu_service,
        cart_service=cart_service,
        order_service=order_service,
        statistics_service=statistics_service,
        user_service=UserService(user_repository),
        countdown_service=countdown_service,
        close_resources=close_resources,
    )
