"""
Breadcrumb Widget

Navigation breadcrumb showing the section and the item being viewed.
"""

from __future__ import annotations

from rich.markup import escape
from textual.widgets import Static

from steamcity.navigation.models import Route, ViewName

SECTION_LABELS = {
    ViewName.MAP: "Map",
    ViewName.EXPERIMENTS: "Experiments",
    ViewName.SENSORS: "Sensors",
    ViewName.DATA: "Data",
}


class Breadcrumb(Static):
    """Breadcrumb navigation widget.

    Displays a trail like:
    Experiments > Air quality study - Lycée Victor Hugo
    """

    DEFAULT_CSS = """
    Breadcrumb {
        width: 100%;
        height: 1;
        padding: 0 1;
        background: $surface;
        color: $text-muted;
    }
    """

    def __init__(self, items: list[str] | None = None, separator: str = " > ", *, id: str | None = None) -> None:
        self._items = items or []
        self._separator = separator
        super().__init__(self._format_breadcrumb(), id=id)

    @property
    def items(self) -> list[str]:
        return list(self._items)

    @staticmethod
    def items_for(route: Route, label: str | None = None) -> list[str]:
        """Trail for a route: the section, then ``label`` or the route id."""
        items = [SECTION_LABELS[route.view]]
        if route.id:
            items.append(label or route.id)
        return items

    def _format_breadcrumb(self) -> str:
        if not self._items:
            return ""

        parts = [f"[dim]{escape(item)}[/dim]" for item in self._items[:-1]]
        parts.append(f"[bold]{escape(self._items[-1])}[/bold]")
        return self._separator.join(parts)

    def update_items(self, items: list[str]) -> None:
        """Replace the breadcrumb items."""
        self._items = items
        self.update(self._format_breadcrumb())

    def show_route(self, route: Route, label: str | None = None) -> None:
        """Show the trail for ``route``."""
        self.update_items(self.items_for(route, label))
