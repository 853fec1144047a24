"""
Surface panel base classes.

Every surface of the dashboard is a panel inside the ContentSwitcher. A
panel only renders records it is given; fetching and navigation happen
in the initializer and the app.
"""

from __future__ import annotations

from rich.markup import escape
from rich.text import Text
from textual.containers import Vertical
from textual.message import Message
from textual.widgets import DataTable, Static

from steamcity.config import VALID_PERIODS


def next_period(period: str | None) -> str:
    """Period following ``period`` in the 24h → 7d → 30d → all cycle."""
    if period not in VALID_PERIODS:
        return VALID_PERIODS[0]
    return VALID_PERIODS[(VALID_PERIODS.index(period) + 1) % len(VALID_PERIODS)]


class SurfacePanel(Vertical):
    """A surface with a one-line status area.

    Subclasses yield a ``Static`` with id ``<panel id>-status``.
    """

    DEFAULT_CSS = """
    SurfacePanel {
        height: 1fr;
        padding: 0 1;
    }

    SurfacePanel .section-title {
        text-style: bold;
        margin-top: 1;
    }

    SurfacePanel .status-line {
        height: auto;
        color: $text-muted;
    }

    SurfacePanel .status-line.error {
        color: $error;
    }
    """

    @property
    def status_id(self) -> str:
        return f"{self.id}-status"

    def _status(self) -> Static:
        return self.query_one(f"#{self.status_id}", Static)

    def set_status(self, text: str) -> None:
        status = self._status()
        status.remove_class("error")
        status.update(escape(text))

    def show_loading(self, what: str = "data") -> None:
        self.set_status(f"Loading {what}...")

    def show_error(self, text: str) -> None:
        """Show an error in the status area; the rest of the panel is kept."""
        status = self._status()
        status.add_class("error")
        status.update(escape(text))


class TablePanel(SurfacePanel):
    """A surface built around one row-selectable DataTable."""

    TABLE_ID = ""
    COLUMNS: tuple[str, ...] = ()

    @property
    def table(self) -> DataTable:
        return self.query_one(f"#{self.TABLE_ID}", DataTable)

    def on_mount(self) -> None:
        table = self.table
        if not table.columns:
            table.add_columns(*self.COLUMNS)

    def replace_rows(self, rows: list[tuple[str, tuple[str | Text, ...]]]) -> None:
        """Replace the table contents with (key, cells) rows.

        Plain strings are shown literally. Rows repeating a key are dropped.
        """
        table = self.table
        table.clear()
        seen: set[str] = set()
        for key, cells in rows:
            if key in seen:
                continue
            seen.add(key)
            table.add_row(*(Text(cell) if isinstance(cell, str) else cell for cell in cells), key=key)

    def on_data_table_row_selected(self, event: DataTable.RowSelected) -> None:
        if event.data_table.id != self.TABLE_ID:
            return
        event.stop()
        if event.row_key and event.row_key.value:
            message = self.row_message(str(event.row_key.value))
            if message is not None:
                self.post_message(message)

    def row_message(self, key: str) -> Message | None:
        """Message to post when the row keyed ``key`` is selected."""
        return None
