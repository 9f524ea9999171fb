"""Menu category metadata with a built-in default."""

import logging
from dataclasses import dataclass
from typing import Protocol

from dopamine.domain.catalog import (
    DEFAULT_MENU_CATEGORIES,
    ActivityCategory,
    MenuCategoryInfo,
    MenuConfiguration,
)
from dopamine.domain.errors import StorageError

_logger = logging.getLogger(__name__)


class MenuRepository(Protocol):
    """Persistence interface for the menu configuration document."""

    def get_configuration(self) -> MenuConfiguration | None:
        """Return the stored configuration, or None when absent or unreadable."""


@dataclass
class MenuService:
    """Read-only access to menu category metadata."""

    repository: MenuRepository

    def get_configuration(self) -> MenuConfiguration:
        """Return the stored menu, falling back to the default."""
        try:
            configuration = self.repository.get_configuration()
        except StorageError:
            _logger.exception("Menu fetch failed, using default configuration")
            return default_menu_configuration()
        if configuration is None:
            _logger.warning("Menu configuration not found, using default")
            return default_menu_configuration()
        return configuration

    def category_info(self, category: ActivityCategory) -> MenuCategoryInfo:
        return self.get_configuration().info_for(category)

    def ordered_categories(self) -> list[tuple[ActivityCategory, MenuCategoryInfo]]:
        return self.get_configuration().ordered()


def default_menu_configuration() -> MenuConfiguration:
    return MenuConfiguration(categories=dict(DEFAULT_MENU_CATEGORIES))
