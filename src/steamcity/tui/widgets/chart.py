"""
Measurement Chart Widget

Sparklines of one or more sensor types over time.
"""

from __future__ import annotations

from datetime import datetime

from rich.markup import escape
from textual.app import ComposeResult
from textual.containers import Vertical
from textual.widgets import Sparkline, Static

# Line colors per series, in order
SERIES_COLORS = ["#5A8B6F", "#CC785C", "#3498DB", "#9B59B6"]

Series = dict[str, tuple[list[datetime], list[float]]]


def describe_series(label: str, values: list[float]) -> str:
    """One-line summary shown above a sparkline."""
    if not values:
        return f"{label}: no data"
    return f"{label}: last {values[-1]:.2f}  min {min(values):.2f}  max {max(values):.2f}  ({len(values)} points)"


class MeasurementChart(Vertical):
    """Chart of at most four measurement series, one sparkline each."""

    DEFAULT_CSS = """
    MeasurementChart {
        height: auto;
        width: 100%;
        margin-top: 1;
    }

    MeasurementChart .chart-title {
        text-style: bold;
    }

    MeasurementChart Sparkline {
        height: 2;
        margin-bottom: 1;
    }
    """

    MAX_SERIES = len(SERIES_COLORS)

    def __init__(
        self,
        *,
        name: str | None = None,
        id: str | None = None,
        classes: str | None = None,
    ) -> None:
        super().__init__(name=name, id=id, classes=classes)
        self._title = ""
        self._series: Series = {}

    @property
    def series(self) -> Series:
        return self._series

    @property
    def title(self) -> str:
        return self._title

    def compose(self) -> ComposeResult:
        yield Static(classes="chart-title")
        for index, color in enumerate(SERIES_COLORS):
            yield Static(id=f"{self.id}-label-{index}", classes="chart-label")
            yield Sparkline([], min_color=color, max_color=color, id=f"{self.id}-line-{index}")

    def on_mount(self) -> None:
        self._render_chart()

    def set_series(self, title: str, series: Series) -> None:
        """Replace the plotted series and redraw.

        Series beyond ``MAX_SERIES`` are not shown.
        """
        self._title = title
        self._series = dict(list(series.items())[: self.MAX_SERIES])
        if self.is_mounted:
            self._render_chart()

    def clear(self, title: str = "") -> None:
        self.set_series(title, {})

    def _render_chart(self) -> None:
        if not self._series:
            heading = f"{self._title} (no data)" if self._title else "No data"
        else:
            heading = self._title
        self.query_one(".chart-title", Static).update(escape(heading))

        rows = list(self._series.items())
        for index in range(self.MAX_SERIES):
            label = self.query_one(f"#{self.id}-label-{index}", Static)
            line = self.query_one(f"#{self.id}-line-{index}", Sparkline)
            if index < len(rows):
                name, (_, values) = rows[index]
                label.update(escape(describe_series(name, values)))
                line.data = values
                label.display = line.display = True
            else:
                line.data = []
                label.display = line.display = False
