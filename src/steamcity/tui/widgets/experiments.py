"""
Experiments Panels

The experiments list and the experiment detail surfaces.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from rich.markup import escape
from rich.text import Text
from textual.app import ComposeResult
from textual.binding import Binding
from textual.message import Message
from textual.widgets import DataTable, Static

from steamcity.navigation.models import Route, ViewName
from steamcity.protocols import get_protocol_label
from steamcity.tui.widgets.base import TablePanel
from steamcity.tui.widgets.breadcrumb import Breadcrumb
from steamcity.tui.widgets.chart import MeasurementChart
from steamcity.tui.widgets.map_panel import protocol_cell

if TYPE_CHECKING:
    from steamcity.navigation import ExperimentDetailCallbacks

STATUS_STYLES = {
    "active": ("● Active", "green"),
    "planned": ("○ Planned", "yellow"),
    "completed": ("✓ Completed", "blue"),
    "cancelled": ("✗ Cancelled", "red"),
}


def status_cell(status: str | None) -> Text:
    label, style = STATUS_STYLES.get(status or "", (status or "-", ""))
    return Text(label, style=style)


def filter_experiments(
    experiments: list[dict[str, Any]],
    protocol: str | None = None,
    status: str | None = None,
    search: str | None = None,
) -> list[dict[str, Any]]:
    """Filter experiments by protocol, status and free-text search.

    Matching is case-insensitive. Search looks at title, school and
    description.
    """
    result = experiments
    if protocol:
        result = [e for e in result if str(e.get("protocol") or "").lower() == protocol.lower()]
    if status:
        result = [e for e in result if str(e.get("status") or "").lower() == status.lower()]
    if search:
        needle = search.lower()
        result = [
            e
            for e in result
            if any(needle in str(e.get(field) or "").lower() for field in ("title", "school", "description"))
        ]
    return result


class ExperimentsPanel(TablePanel):
    """List of experiments."""

    TABLE_ID = "experiments-table"
    COLUMNS = ("Status", "Title", "Protocol", "School", "Student")

    class ExperimentSelected(Message):
        """Message sent when an experiment row is selected."""

        def __init__(self, experiment_id: str) -> None:
            self.experiment_id = experiment_id
            super().__init__()

    def compose(self) -> ComposeResult:
        yield Static("Experiments", classes="section-title")
        yield DataTable(id=self.TABLE_ID, cursor_type="row")
        yield Static(id=self.status_id, classes="status-line")

    def show_experiments(self, experiments: list[dict[str, Any]], **filters: str | None) -> None:
        """Show experiments matching ``filters`` (protocol, status, search)."""
        shown = filter_experiments(experiments, **filters)
        self.replace_rows(
            [
                (
                    str(e["id"]),
                    (
                        status_cell(e.get("status")),
                        str(e.get("title") or e["id"]),
                        protocol_cell(e.get("protocol")),
                        str(e.get("school") or "-"),
                        str(e.get("studentName") or "-"),
                    ),
                )
                for e in shown
                if e.get("id")
            ]
        )

        active = ", ".join(f"{k}: {v}" for k, v in filters.items() if v)
        summary = f"{len(shown)} of {len(experiments)} experiments"
        self.set_status(f"{summary} ({active})" if active else summary)

    def row_message(self, key: str) -> Message:
        return self.ExperimentSelected(key)


class ExperimentDetailPanel(TablePanel):
    """Detail of one experiment: description, sensors and a chart."""

    TABLE_ID = "experiment-sensors-table"
    COLUMNS = ("Sensor", "Type", "Status")

    BINDINGS = [
        Binding("backspace", "back_to_list", "Back", show=True),
    ]

    def __init__(self, *, id: str | None = None) -> None:
        super().__init__(id=id)
        self.experiment: dict[str, Any] | None = None
        self.callbacks: ExperimentDetailCallbacks | None = None

    def compose(self) -> ComposeResult:
        yield Breadcrumb(["Experiments"], id="experiment-breadcrumb")
        yield Static(id="experiment-info")
        yield Static("Sensors", classes="section-title")
        yield DataTable(id=self.TABLE_ID, cursor_type="row")
        yield MeasurementChart(id="experiment-chart")
        yield Static(id=self.status_id, classes="status-line")

    @property
    def chart(self) -> MeasurementChart:
        return self.query_one("#experiment-chart", MeasurementChart)

    def show_experiment(self, experiment: dict[str, Any], callbacks: ExperimentDetailCallbacks) -> None:
        """Render the experiment description and keep ``callbacks`` for user actions."""
        self.experiment = experiment
        self.callbacks = callbacks

        title = str(experiment.get("title") or experiment.get("id") or "")
        self.query_one("#experiment-breadcrumb", Breadcrumb).show_route(
            Route(view=ViewName.EXPERIMENTS, id=str(experiment.get("id") or "")), title
        )

        lines = [
            f"[bold]{escape(title)}[/bold]",
            f"Protocol: {escape(get_protocol_label(experiment.get('protocol')))}",
            f"School: {escape(str(experiment.get('school') or '-'))}",
            f"Status: {escape(str(experiment.get('status') or '-'))}",
        ]
        for field, label in (("description", "Description"), ("hypothesis", "Hypothesis"), ("methodology", "Methodology")):
            if experiment.get(field):
                lines.append(f"{label}: {escape(str(experiment[field]))}")
        self.query_one("#experiment-info", Static).update("\n".join(lines))

        self.table.clear()
        self.chart.clear(title)

    def show_devices(self, devices: list[dict[str, Any]]) -> None:
        """List the sensor devices of the experiment."""
        self.replace_rows(
            [
                (
                    str(d["id"]),
                    (
                        str(d.get("name") or d["id"]),
                        str(d.get("type") or d.get("sensor_type_id") or "-"),
                        str(d.get("status") or "-"),
                    ),
                )
                for d in devices
                if d.get("id")
            ]
        )
        self.set_status(f"{len(devices)} sensors")

    def apply_cluster_color(self, color: str) -> None:
        self.styles.border_left = ("thick", color)

    def row_message(self, key: str) -> None:
        if self.callbacks is not None and self.callbacks.on_sensor_click is not None:
            self.callbacks.on_sensor_click(key)
        return None

    def action_back_to_list(self) -> None:
        if self.callbacks is not None and self.callbacks.on_back_to_list is not None:
            self.callbacks.on_back_to_list()
