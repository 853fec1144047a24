"""
Textual surface host.

Shows surfaces through a ContentSwitcher and highlights sections through
the navigation Tabs.
"""

from __future__ import annotations

import logging

from textual.css.query import NoMatches
from textual.widgets import ContentSwitcher, Tabs

from steamcity.exceptions import SurfaceNotFoundError
from steamcity.navigation.models import SurfaceId, ViewName

logger = logging.getLogger(__name__)


class TextualSurfaceHost:
    """SurfaceHost over a ContentSwitcher and a Tabs bar."""

    def __init__(self, switcher: ContentSwitcher, tabs: Tabs | None = None) -> None:
        self.switcher = switcher
        self.tabs = tabs

    def _require_surface(self, surface: SurfaceId) -> None:
        try:
            self.switcher.get_child_by_id(surface.value)
        except NoMatches:
            raise SurfaceNotFoundError(surface.value) from None

    def show_surface(self, surface: SurfaceId) -> bool:
        """Make ``surface`` the current child of the switcher."""
        try:
            self._require_surface(surface)
        except SurfaceNotFoundError:
            return False
        # ContentSwitcher hides every other child
        self.switcher.current = surface.value
        return True

    def highlight_section(self, view: ViewName) -> None:
        """Activate the tab of ``view``."""
        if self.tabs is None:
            return
        try:
            self.tabs.query_one(f"#{view.tab_id}")
        except NoMatches:
            logger.warning("Navigation tab not found: %s", view.tab_id)
            return
        self.tabs.active = view.tab_id
