"""Shared helpers for the Supabase repositories."""

from datetime import datetime
from typing import Any

import httpx
from supabase import PostgrestAPIError

from dopamine.domain.errors import StorageError


def execute(query: Any, action: str) -> Any:
    """Run a query builder, translating client failures into ``StorageError``."""
    try:
        return query.execute()
    except (PostgrestAPIError, httpx.HTTPError) as exc:
        raise StorageError(f"Failed to {action}: {exc}") from exc


def parse_datetime(value: object) -> datetime | None:
    if isinstance(value, str) and value:
        return datetime.fromisoformat(value)
    return None


def format_datetime(value: datetime | None) -> str | None:
    return value.isoformat() if value else None
