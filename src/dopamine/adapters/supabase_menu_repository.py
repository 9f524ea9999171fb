"""Supabase repository for the menu configuration document."""

import logging
from dataclasses import dataclass

from supabase import Client

from dopamine.adapters.supabase_support import execute, parse_datetime
from dopamine.domain.catalog import ActivityCategory, MenuCategoryInfo, MenuConfiguration
from dopamine.services.menu import MenuRepository

_logger = logging.getLogger(__name__)


@dataclass
class SupabaseMenuRepository(MenuRepository):
    """Reads the single ``menu_config`` row."""

    client: Client
    config_id: str = "default"

    def get_configuration(self) -> MenuConfiguration | None:
        response = execute(
            self.client.table("menu_config")
            .select("categories, updated_at")
            .eq("id", self.config_id)
            .limit(1),
            "fetch menu configuration",
        )
        if not response.data:
            return None
        row = response.data[0]
        try:
            categories = {
                ActivityCategory(key): MenuCategoryInfo(
                    title=str(value["title"]),
                    description=str(value.get("description", "")),
                    icon=str(value.get("icon", "")),
                    order=int(value.get("order", 0)),
                )
                for key, value in (row.get("categories") or {}).items()
            }
        except (KeyError, TypeError, ValueError, AttributeError):
            _logger.warning("Malformed menu configuration %s", self.config_id)
            return None
        return MenuConfiguration(
            categories=categories, updated_at=parse_datetime(row.get("updated_at"))
        )
