"""Admin API endpoints with simple token auth."""

from __future__ import annotations

from typing import TYPE_CHECKING

from fastapi import APIRouter, Depends, Header, HTTPException, Request, status

if TYPE_CHECKING:
    from dopamine.containers import AppContainer

router = APIRouter(prefix="/admin", tags=["admin"])


def _get_admin_token(request: Request) -> str | None:
    container: AppContainer = request.app.state.container
    return container.settings.admin_token


async def require_admin(
    x_admin_token: str | None = Header(default=None),
    admin_token: str | None = Depends(_get_admin_token),
) -> None:
    """Ensure requests include the configured admin token."""
    if not admin_token or x_admin_token != admin_token:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED)


@router.post("/catalog/seed", dependencies=[Depends(require_admin)])
async def seed_catalog(request: Request) -> dict[str, object]:
    """Write the built-in sample activities to the catalog."""
    container: AppContainer = request.app.state.container
    seeded = container.catalog_service.seed_sample_activities()
    return {"status": "ok", "seeded": seeded}


@router.get("/timers", dependencies=[Depends(require_admin)])
async def list_timers(request: Request) -> dict[str, object]:
    """Return the countdowns currently tracked by this process."""
    container: AppContainer = request.app.state.container
    return {
        "timers": [
            {"user_id": user_id, "activity_id": activity_id}
            for user_id, activity_id in container.countdown_service.active_keys()
        ]
    }
