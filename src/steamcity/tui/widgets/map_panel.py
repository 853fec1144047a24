"""
Map Panel

Experiment sites grouped by protocol, with a protocol legend.
"""

from __future__ import annotations

from collections import Counter
from typing import Any

from rich.text import Text
from textual.app import ComposeResult
from textual.message import Message
from textual.widgets import DataTable, Static

from steamcity.protocols import get_protocol_color, get_protocol_icon, protocol_key
from steamcity.tui.widgets.base import TablePanel


def experiment_city(experiment: dict[str, Any]) -> str:
    """City of an experiment, from ``city`` or the tail of ``school``."""
    if experiment.get("city"):
        return str(experiment["city"])
    school = str(experiment.get("school") or "")
    return school.rsplit(",", 1)[-1].strip() if "," in school else "-"


def protocol_cell(protocol: str | None) -> Text:
    key = protocol_key(protocol)
    return Text(f"{get_protocol_icon(protocol)} {protocol or key}", style=get_protocol_color(protocol))


class MapPanel(TablePanel):
    """Experiment sites, one row per experiment."""

    TABLE_ID = "map-table"
    COLUMNS = ("Protocol", "Experiment", "City", "School")

    class ExperimentSelected(Message):
        """Message sent when an experiment site is selected."""

        def __init__(self, experiment_id: str) -> None:
            self.experiment_id = experiment_id
            super().__init__()

    def compose(self) -> ComposeResult:
        yield Static("Experiment sites", classes="section-title")
        yield Static(id="map-legend")
        yield DataTable(id=self.TABLE_ID, cursor_type="row")
        yield Static(id=self.status_id, classes="status-line")

    def show_experiments(self, experiments: list[dict[str, Any]], protocol: str | None = None) -> None:
        """Show experiment sites, optionally only those of ``protocol``.

        The legend always counts every experiment.
        """
        counts = Counter(protocol_key(e.get("protocol")) for e in experiments)
        legend = Text()
        for key, count in sorted(counts.items()):
            if legend:
                legend.append("  ")
            legend.append(f"● {key} ({count})", style=get_protocol_color(key))
        self.query_one("#map-legend", Static).update(legend)

        shown = [e for e in experiments if not protocol or protocol_key(e.get("protocol")) == protocol_key(protocol)]
        self.replace_rows(
            [
                (
                    str(e["id"]),
                    (
                        protocol_cell(e.get("protocol")),
                        str(e.get("title") or e["id"]),
                        experiment_city(e),
                        str(e.get("school") or "-"),
                    ),
                )
                for e in shown
                if e.get("id")
            ]
        )

        if protocol:
            self.set_status(f"{len(shown)} of {len(experiments)} sites (protocol: {protocol})")
        else:
            self.set_status(f"{len(shown)} sites")

    def row_message(self, key: str) -> Message:
        return self.ExperimentSelected(key)
