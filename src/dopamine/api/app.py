"""FastAPI application factory."""

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from uuid import UUID

from fastapi import Depends, FastAPI, Header, HTTPException, Request, status
from fastapi.responses import JSONResponse

from dopamine.api.admin import router as admin_router
from dopamine.api.schemas import (
    ActivityOut,
    CartItemIn,
    CartItemOut,
    CartOut,
    HomeScreenIn,
    MenuCategoryOut,
    NameIn,
    OrderOut,
    PreferencesModel,
    ProfileOut,
    StatisticsOut,
    StreakIn,
    TimerStartIn,
    TimerStateOut,
    UserActivityIn,
    UserActivityOut,
)
from dopamine.app_logging import configure_logging
from dopamine.containers import AppContainer
from dopamine.domain.carts import Cart
from dopamine.domain.catalog import ActivityCategory, Difficulty
from dopamine.domain.errors import (
    DopamineError,
    EmptyCartError,
    NotFoundError,
    StorageError,
    ValidationError,
)
from dopamine.domain.orders import Order
from dopamine.domain.timers import TimerState
from dopamine.domain.users import AuthenticatedUser, UserPreferences

_ERROR_STATUS: dict[type[DopamineError], int] = {
    NotFoundError: status.HTTP_404_NOT_FOUND,
    EmptyCartError: status.HTTP_409_CONFLICT,
    ValidationError: status.HTTP_422_UNPROCESSABLE_ENTITY,
    StorageError: status.HTTP_503_SERVICE_UNAVAILABLE,
}


def _get_container(request: Request) -> AppContainer:
    return request.app.state.container


async def current_user(
    authorization: str | None = Header(default=None),
    container: AppContainer = Depends(_get_container),
) -> AuthenticatedUser:
    """Resolve the bearer token into the signed-in user."""
    scheme, _, token = (authorization or "").partition(" ")
    if scheme.lower() != "bearer" or not token:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED)
    user = await container.identity_client.get_user(token)
    if user is None:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED)
    return user


def create_app(container: AppContainer) -> FastAPI:  # noqa: PLR0915
    """Create a FastAPI app configured with dependencies."""
    configure_logging()
    logger = logging.getLogger(__name__)

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        yield
        await app.state.container.close_resources()

    app = FastAPI(lifespan=lifespan)
    app.state.container = container

    app.include_router(admin_router)

    @app.exception_handler(DopamineError)
    async def handle_domain_error(request: Request, exc: DopamineError) -> JSONResponse:
        status_code = _status_for(exc)
        if status_code >= status.HTTP_500_INTERNAL_SERVER_ERROR:
            logger.warning(
                "Request failed: %s", exc, extra={"path": request.url.path}
            )
        return JSONResponse(status_code=status_code, content={"detail": str(exc)})

    @app.get("/health")
    async def health() -> dict[str, str]:
        """Simple health check endpoint."""
        return {"status": "ok"}

    @app.get("/catalog/activities")
    async def list_activities(  # noqa: PLR0913
        q: str | None = None,
        category: ActivityCategory | None = None,
        difficulty: Difficulty | None = None,
        min_duration: int | None = None,
        max_duration: int | None = None,
        state: AppContainer = Depends(_get_container),
    ) -> list[ActivityOut]:
        activities = state.catalog_service.filter(
            category=category,
            difficulty=difficulty,
            min_duration=min_duration,
            max_duration=max_duration,
        )
        if q:
            matching = {a.id for a in state.catalog_service.search(q)}
            activities = [a for a in activities if a.id in matching]
        return [ActivityOut.model_validate(a) for a in activities]

    @app.get("/catalog/activities/{activity_id}")
    async def get_activity(
        activity_id: str, state: AppContainer = Depends(_get_container)
    ) -> ActivityOut:
        activity = state.catalog_service.get_activity(activity_id)
        if activity is None:
            raise NotFoundError(f"Activity {activity_id} not found")
        return ActivityOut.model_validate(activity)

    @app.get("/menu")
    async def menu(state: AppContainer = Depends(_get_container)) -> list[MenuCategoryOut]:
        return [
            MenuCategoryOut(
                category=category,
                title=info.title,
                description=info.description,
                icon=info.icon,
                order=info.order,
            )
            for category, info in state.menu_service.ordered_categories()
        ]

    @app.get("/me/profile")
    async def profile(
        user: AuthenticatedUser = Depends(current_user),
        state: AppContainer = Depends(_get_container),
    ) -> ProfileOut:
        """Return the profile, creating it on first sign-in."""
        return ProfileOut.model_validate(
            state.user_service.ensure_profile(user.id, user.email or "")
        )

    @app.patch("/me/profile/name")
    async def update_name(
        payload: NameIn,
        user: AuthenticatedUser = Depends(current_user),
        state: AppContainer = Depends(_get_container),
    ) -> ProfileOut:
        return ProfileOut.model_validate(
            state.user_service.update_name(user.id, payload.name)
        )

    @app.put("/me/profile/preferences")
    async def update_preferences(
        payload: PreferencesModel,
        user: AuthenticatedUser = Depends(current_user),
        state: AppContainer = Depends(_get_container),
    ) -> ProfileOut:
        preferences = UserPreferences(**payload.model_dump())
        return ProfileOut.model_validate(
            state.user_service.update_preferences(user.id, preferences)
        )

    @app.get("/me/activities")
    async def list_user_activities(
        user: AuthenticatedUser = Depends(current_user),
        state: AppContainer = Depends(_get_container),
    ) -> list[UserActivityOut]:
        return [
            UserActivityOut.model_validate(a)
            for a in state.catalog_service.list_user_activities(user.id)
        ]

    @app.post("/me/activities", status_code=status.HTTP_201_CREATED)
    async def create_user_activity(
        payload: UserActivityIn,
        user: AuthenticatedUser = Depends(current_user),
        state: AppContainer = Depends(_get_container),
    ) -> UserActivityOut:
        activity = state.catalog_service.create_user_activity(
            user_id=user.id,
            title=payload.title,
            category=payload.category,
            duration_minutes=payload.duration_minutes,
            scheduled_time=payload.scheduled_time,
            scheduled_date=payload.scheduled_date,
            is_on_home_screen=payload.is_on_home_screen,
        )
        return UserActivityOut.model_validate(activity)

    @app.put("/me/activities/{activity_id}/home-screen")
    async def set_home_screen(
        activity_id: UUID,
        payload: HomeScreenIn,
        user: AuthenticatedUser = Depends(current_user),
        state: AppContainer = Depends(_get_container),
    ) -> UserActivityOut:
        activity = state.catalog_service.set_on_home_screen(
            user.id, activity_id, payload.is_on_home_screen
        )
        return UserActivityOut.model_validate(activity)

    @app.delete("/me/activities/{activity_id}", status_code=status.HTTP_204_NO_CONTENT)
    async def delete_user_activity(
        activity_id: UUID,
        user: AuthenticatedUser = Depends(current_user),
        state: AppContainer = Depends(_get_container),
    ) -> None:
        state.catalog_service.delete_user_activity(user.id, activity_id)

    @app.get("/cart")
    async def get_cart(
        user: AuthenticatedUser = Depends(current_user),
        state: AppContainer = Depends(_get_container),
    ) -> CartOut:
        return _cart_out(state, state.cart_service.fetch_or_create_cart(user.id))

    @app.post("/cart/items", status_code=status.HTTP_201_CREATED)
    async def add_cart_item(
        payload: CartItemIn,
        user: AuthenticatedUser = Depends(current_user),
        state: AppContainer = Depends(_get_container),
    ) -> CartItemOut:
        item = state.cart_service.add_item(
            user.id, payload.activity_id, payload.is_user_activity
        )
        return CartItemOut.model_validate(item)

    @app.delete("/cart/items/{cart_item_id}")
    async def remove_cart_item(
        cart_item_id: UUID,
        user: AuthenticatedUser = Depends(current_user),
        state: AppContainer = Depends(_get_container),
    ) -> CartOut:
        state.cart_service.remove_item(user.id, cart_item_id)
        return _cart_out(state, state.cart_service.fetch_or_create_cart(user.id))

    @app.delete("/cart")
    async def clear_cart(
        user: AuthenticatedUser = Depends(current_user),
        state: AppContainer = Depends(_get_container),
    ) -> CartOut:
        state.cart_service.clear(user.id)
        return _cart_out(state, state.cart_service.fetch_or_create_cart(user.id))

    @app.post("/orders", status_code=status.HTTP_201_CREATED)
    def checkout(
        user: AuthenticatedUser = Depends(current_user),
        state: AppContainer = Depends(_get_container),
    ) -> OrderOut:
        """Turn the current cart into an active order."""
        return OrderOut.model_validate(state.order_service.checkout(user.id))

    @app.get("/orders")
    async def list_orders(
        user: AuthenticatedUser = Depends(current_user),
        state: AppContainer = Depends(_get_container),
    ) -> list[OrderOut]:
        return [
            OrderOut.model_validate(o) for o in state.order_service.list_orders(user.id)
        ]

    @app.get("/orders/{order_id}")
    async def get_order(
        order_id: UUID,
        user: AuthenticatedUser = Depends(current_user),
        state: AppContainer = Depends(_get_container),
    ) -> OrderOut:
        return OrderOut.model_validate(_owned_order(state, user, order_id))

    @app.post("/orders/{order_id}/items/{item_id}/complete")
    async def complete_item(
        order_id: UUID,
        item_id: UUID,
        user: AuthenticatedUser = Depends(current_user),
        state: AppContainer = Depends(_get_container),
    ) -> OrderOut:
        _owned_order(state, user, order_id)
        order = state.order_service.mark_item_completed(order_id, item_id)
        return OrderOut.model_validate(order)

    @app.delete("/orders/{order_id}/items/{item_id}/complete")
    async def reopen_item(
        order_id: UUID,
        item_id: UUID,
        user: AuthenticatedUser = Depends(current_user),
        state: AppContainer = Depends(_get_container),
    ) -> OrderOut:
        _owned_order(state, user, order_id)
        order = state.order_service.mark_item_incomplete(order_id, item_id)
        return OrderOut.model_validate(order)

    @app.post("/orders/{order_id}/cancel")
    async def cancel_order(
        order_id: UUID,
        user: AuthenticatedUser = Depends(current_user),
        state: AppContainer = Depends(_get_container),
    ) -> OrderOut:
        _owned_order(state, user, order_id)
        return OrderOut.model_validate(state.order_service.cancel_order(order_id))

    @app.delete("/orders/{order_id}", status_code=status.HTTP_204_NO_CONTENT)
    async def delete_order(
        order_id: UUID,
        user: AuthenticatedUser = Depends(current_user),
        state: AppContainer = Depends(_get_container),
    ) -> None:
        _owned_order(state, user, order_id)
        state.order_service.delete_order(order_id)

    @app.get("/stats")
    async def get_statistics(
        user: AuthenticatedUser = Depends(current_user),
        state: AppContainer = Depends(_get_container),
    ) -> StatisticsOut:
        return StatisticsOut.model_validate(
            state.statistics_service.get_statistics(user.id)
        )

    @app.put("/stats/streak")
    async def update_streak(
        payload: StreakIn,
        user: AuthenticatedUser = Depends(current_user),
        state: AppContainer = Depends(_get_container),
    ) -> StatisticsOut:
        statistics = state.statistics_service.update_streak(
            user.id, payload.current_streak
        )
        return StatisticsOut.model_validate(statistics)

    @app.post("/timers", status_code=status.HTTP_201_CREATED)
    async def start_timer(
        payload: TimerStartIn,
        user: AuthenticatedUser = Depends(current_user),
        state: AppContainer = Depends(_get_container),
    ) -> TimerStateOut:
        timer_state = await state.countdown_service.start(
            user.id,
            payload.activity_id,
            payload.activity_name,
            payload.activity_icon,
            payload.duration_minutes,
        )
        return TimerStateOut.model_validate(timer_state)

    @app.get("/timers/{activity_id}")
    async def get_timer(
        activity_id: str,
        user: AuthenticatedUser = Depends(current_user),
        state: AppContainer = Depends(_get_container),
    ) -> TimerStateOut:
        return _timer_out(
            activity_id, state.countdown_service.state(user.id, activity_id)
        )

    @app.post("/timers/{activity_id}/pause")
    async def pause_timer(
        activity_id: str,
        user: AuthenticatedUser = Depends(current_user),
        state: AppContainer = Depends(_get_container),
    ) -> TimerStateOut:
        return _timer_out(
            activity_id, await state.countdown_service.pause(user.id, activity_id)
        )

    @app.post("/timers/{activity_id}/resume")
    async def resume_timer(
        activity_id: str,
        user: AuthenticatedUser = Depends(current_user),
        state: AppContainer = Depends(_get_container),
    ) -> TimerStateOut:
        return _timer_out(
            activity_id, await state.countdown_service.resume(user.id, activity_id)
        )

    @app.post("/timers/{activity_id}/complete")
    async def complete_timer(
        activity_id: str,
        user: AuthenticatedUser = Depends(current_user),
        state: AppContainer = Depends(_get_container),
    ) -> TimerStateOut:
        return _timer_out(
            activity_id, await state.countdown_service.complete(user.id, activity_id)
        )

    @app.delete("/timers/{activity_id}", status_code=status.HTTP_204_NO_CONTENT)
    async def stop_timer(
        activity_id: str,
        user: AuthenticatedUser = Depends(current_user),
        state: AppContainer = Depends(_get_container),
    ) -> None:
        if not await state.countdown_service.stop(user.id, activity_id):
            raise NotFoundError(f"No countdown for {activity_id}")

    return app


def _status_for(exc: DopamineError) -> int:
    for error_type, status_code in _ERROR_STATUS.items():
        if isinstance(exc, error_type):
            return status_code
    return status.HTTP_500_INTERNAL_SERVER_ERROR


def _cart_out(state: AppContainer, cart: Cart) -> CartOut:
    total = state.cart_service.total_duration(cart)
    return CartOut.model_validate(cart).model_copy(update={"total_duration": total})


def _owned_order(state: AppContainer, user: AuthenticatedUser, order_id: UUID) -> Order:
    order = state.order_service.get_order(order_id)
    if order.user_id != user.id:
        raise NotFoundError(f"Order {order_id} not found")
    return order


def _timer_out(activity_id: str, timer_state: TimerState | None) -> TimerStateOut:
    if timer_state is None:
        raise NotFoundError(f"No countdown for {activity_id}")
    return TimerStateOut.model_validate(timer_state)
