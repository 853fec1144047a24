"""
Sensors Panels

The sensors list and the sensor detail surfaces.
"""

from __future__ import annotations

from typing import Any

from rich.markup import escape
from rich.text import Text
from textual.app import ComposeResult
from textual.binding import Binding
from textual.message import Message
from textual.widgets import DataTable, Static

from steamcity.navigation.models import Route, ViewName
from steamcity.tui.widgets.base import SurfacePanel, TablePanel, next_period
from steamcity.tui.widgets.breadcrumb import Breadcrumb
from steamcity.tui.widgets.chart import MeasurementChart

SENSOR_STATUS = {
    "active": ("● Online", "green"),
    "maintenance": ("● Maintenance", "yellow"),
    "offline": ("● Offline", "red"),
}

PERIOD_LABELS = {
    "24h": "Last 24 hours",
    "7d": "Last 7 days",
    "30d": "Last 30 days",
    "all": "All data",
}

# Number of measurements requested for each period
PERIOD_LIMITS = {"24h": 50, "7d": 168, "30d": 360, "all": 1000}


def sensor_status_cell(status: str | None) -> Text:
    label, style = SENSOR_STATUS.get(status or "active", (status or "-", ""))
    return Text(label, style=style)


def format_sensor_type(type_id: str | None) -> str:
    """``air_quality`` -> ``Air quality``."""
    if not type_id:
        return "-"
    return str(type_id).replace("_", " ").capitalize()


def get_period_label(period: str | None) -> str:
    return PERIOD_LABELS.get(period or "", "Unknown period")


class SensorsPanel(TablePanel):
    """List of sensor devices."""

    TABLE_ID = "sensors-table"
    COLUMNS = ("Status", "Sensor", "Type", "Experiment")

    class SensorSelected(Message):
        """Message sent when a sensor row is selected."""

        def __init__(self, sensor_id: str) -> None:
            self.sensor_id = sensor_id
            super().__init__()

    def compose(self) -> ComposeResult:
        yield Static("Sensors", classes="section-title")
        yield DataTable(id=self.TABLE_ID, cursor_type="row")
        yield Static(id=self.status_id, classes="status-line")

    def show_sensors(
        self,
        sensors: list[dict[str, Any]],
        experiments: dict[str, str] | None = None,
        sensor_type: str | None = None,
        status: str | None = None,
    ) -> None:
        """Show sensors, optionally filtered by type and status.

        Args:
            sensors: Sensor device records
            experiments: Experiment titles by id, for the Experiment column
            sensor_type: Only show sensors of this type
            status: Only show sensors with this status
        """
        titles = experiments or {}
        shown = [
            s
            for s in sensors
            if (not sensor_type or s.get("sensor_type_id") == sensor_type)
            and (not status or (s.get("status") or "active") == status)
        ]
        self.replace_rows(
            [
                (
                    str(s["id"]),
                    (
                        sensor_status_cell(s.get("status")),
                        str(s.get("name") or s["id"]),
                        format_sensor_type(s.get("sensor_type_id")),
                        titles.get(str(s.get("experiment_id")), str(s.get("experiment_id") or "-")),
                    ),
                )
                for s in shown
                if s.get("id")
            ]
        )
        if len(shown) == len(sensors):
            self.set_status(f"{len(sensors)} sensors")
        else:
            self.set_status(f"{len(shown)} of {len(sensors)} sensors")

    def row_message(self, key: str) -> Message:
        return self.SensorSelected(key)


class SensorDetailPanel(SurfacePanel):
    """Detail of one sensor device with a measurement chart over a period."""

    BINDINGS = [
        Binding("p", "cycle_period", "Period", show=True),
        Binding("d", "open_data", "Data", show=True),
        Binding("e", "open_experiment", "Experiment", show=True),
        Binding("backspace", "back_to_list", "Back", show=True),
    ]

    class PeriodChanged(Message):
        """Message sent when the chart period is changed."""

        def __init__(self, sensor_id: str, period: str) -> None:
            self.sensor_id = sensor_id
            self.period = period
            super().__init__()

    class OpenDataView(Message):
        """Message sent to open the data view for the sensor's experiment."""

        def __init__(self, experiment_id: str | None) -> None:
            self.experiment_id = experiment_id
            super().__init__()

    class OpenExperiment(Message):
        """Message sent to open the sensor's experiment."""

        def __init__(self, experiment_id: str) -> None:
            self.experiment_id = experiment_id
            super().__init__()

    class BackToList(Message):
        """Message sent to return to the sensors list."""

    def __init__(self, *, id: str | None = None) -> None:
        super().__init__(id=id)
        self.sensor: dict[str, Any] | None = None
        self.period = "24h"

    def compose(self) -> ComposeResult:
        yield Breadcrumb(["Sensors"], id="sensor-breadcrumb")
        yield Static(id="sensor-info")
        yield Static(id="sensor-period", classes="section-title")
        yield MeasurementChart(id="sensor-chart")
        yield Static(id=self.status_id, classes="status-line")

    @property
    def chart(self) -> MeasurementChart:
        return self.query_one("#sensor-chart", MeasurementChart)

    @property
    def sensor_id(self) -> str | None:
        return str(self.sensor["id"]) if self.sensor and self.sensor.get("id") else None

    def show_sensor(
        self,
        sensor: dict[str, Any],
        experiment_title: str | None = None,
        last_measurement: dict[str, Any] | None = None,
    ) -> None:
        """Render the sensor description."""
        self.sensor = sensor
        name = str(sensor.get("name") or sensor.get("id") or "")
        breadcrumb = self.query_one("#sensor-breadcrumb", Breadcrumb)
        breadcrumb.show_route(Route(view=ViewName.SENSORS, id=self.sensor_id), name)

        status_label, _ = SENSOR_STATUS.get(sensor.get("status") or "active", (str(sensor.get("status")), ""))
        lines = [
            f"[bold]{escape(name)}[/bold]  {escape(status_label)}",
            f"Type: {escape(format_sensor_type(sensor.get('sensor_type_id')))}",
            f"Description: {escape(str(sensor.get('description') or 'No description'))}",
        ]
        if experiment_title:
            lines.append(f"Experiment: {escape(experiment_title)}")
        metadata = sensor.get("metadata") or {}
        if metadata.get("manufacturer") or metadata.get("model"):
            lines.append(
                f"Model: {escape(str(metadata.get('manufacturer') or 'N/A'))} "
                f"{escape(str(metadata.get('model') or ''))}".rstrip()
            )
        if last_measurement is not None:
            lines.append(
                f"Last measurement: {escape(str(last_measurement.get('value')))} "
                f"{escape(str(last_measurement.get('unit') or ''))} "
                f"at {escape(str(last_measurement.get('timestamp') or '-'))}"
            )
        self.query_one("#sensor-info", Static).update("\n".join(lines))

    def set_period(self, period: str) -> None:
        self.period = period
        self.query_one("#sensor-period", Static).update(f"{get_period_label(period)} (p to change)")

    def show_measurements(self, measurements: list[dict[str, Any]], series: dict[str, Any]) -> None:
        name = str((self.sensor or {}).get("name") or self.sensor_id or "")
        self.chart.set_series(f"{name} - {get_period_label(self.period)} ({len(measurements)} points)", series)
        self.set_status(f"{len(measurements)} measurements")

    def action_cycle_period(self) -> None:
        if self.sensor_id is not None:
            self.post_message(self.PeriodChanged(self.sensor_id, next_period(self.period)))

    def action_open_data(self) -> None:
        if self.sensor is not None:
            experiment_id = self.sensor.get("experiment_id")
            self.post_message(self.OpenDataView(str(experiment_id) if experiment_id else None))

    def action_open_experiment(self) -> None:
        if self.sensor is not None and self.sensor.get("experiment_id"):
            self.post_message(self.OpenExperiment(str(self.sensor["experiment_id"])))

    def action_back_to_list(self) -> None:
        self.post_message(self.BackToList())
