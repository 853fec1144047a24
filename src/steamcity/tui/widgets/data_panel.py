"""
Data Panel

Measurements of one experiment: global statistics, statistics per sensor
type and a chart of every sensor type.
"""

from __future__ import annotations

from typing import Any

from textual.app import ComposeResult
from textual.binding import Binding
from textual.message import Message
from textual.widgets import DataTable, Static

from steamcity.measurements import global_stats, series_by_type, summarize_by_type
from steamcity.tui.widgets.base import TablePanel, next_period
from steamcity.tui.widgets.chart import MeasurementChart
from steamcity.tui.widgets.sensors import format_sensor_type, get_period_label


def _fmt(value: float) -> str:
    return f"{value:.2f}"


class DataPanel(TablePanel):
    """Measurement statistics and chart for the selected experiment."""

    TABLE_ID = "data-stats-table"
    COLUMNS = ("Sensor type", "Count", "Min", "Max", "Mean", "Median")

    BINDINGS = [
        Binding("p", "cycle_period", "Period", show=True),
    ]

    class PeriodChanged(Message):
        """Message sent when the data period is changed."""

        def __init__(self, period: str) -> None:
            self.period = period
            super().__init__()

    def __init__(self, *, id: str | None = None) -> None:
        super().__init__(id=id)
        self.experiment_id: str | None = None
        self.period = "24h"

    def compose(self) -> ComposeResult:
        yield Static("Data", classes="section-title")
        yield Static(id="data-header")
        yield Static(id="data-global-stats")
        yield DataTable(id=self.TABLE_ID, cursor_type="row")
        yield MeasurementChart(id="data-chart")
        yield Static(id=self.status_id, classes="status-line")

    @property
    def chart(self) -> MeasurementChart:
        return self.query_one("#data-chart", MeasurementChart)

    def set_context(self, experiment_id: str | None, title: str | None, period: str) -> None:
        """Record which experiment and period are shown."""
        self.experiment_id = experiment_id
        self.period = period
        if experiment_id is None:
            header = f"All experiments - {get_period_label(period)} (p to change)"
        else:
            header = f"{title or experiment_id} - {get_period_label(period)} (p to change)"
        self.query_one("#data-header", Static).update(header)

    def show_measurements(self, measurements: list[dict[str, Any]]) -> None:
        """Compute and display statistics and the chart."""
        stats = global_stats(measurements)
        quality = f"{stats.avg_quality * 100:.0f}%" if stats.avg_quality is not None else "N/A"
        self.query_one("#data-global-stats", Static).update(
            f"Measurements: {stats.total_measurements}   "
            f"Sensor types: {stats.sensor_types}   "
            f"Quality: {quality}   "
            f"Range: {stats.time_range}"
        )

        self.replace_rows(
            [
                (
                    row.sensor_type_id,
                    (
                        format_sensor_type(row.sensor_type_id),
                        str(row.count),
                        _fmt(row.minimum),
                        _fmt(row.maximum),
                        _fmt(row.mean),
                        _fmt(row.median),
                    ),
                )
                for row in summarize_by_type(measurements)
            ]
        )

        self.chart.set_series(get_period_label(self.period), series_by_type(measurements, limit=4))
        if not measurements:
            self.set_status("No measurements for this period")
        else:
            self.set_status(f"{stats.total_measurements} measurements")

    def clear_data(self) -> None:
        self.query_one("#data-global-stats", Static).update("")
        self.table.clear()
        self.chart.clear()

    def action_cycle_period(self) -> None:
        self.post_message(self.PeriodChanged(next_period(self.period)))
