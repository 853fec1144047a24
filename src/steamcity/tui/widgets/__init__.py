"""
SteamCity TUI Widgets

Surface panels and the widgets they are built from.
"""

from .breadcrumb import Breadcrumb
from .chart import MeasurementChart
from .data_panel import DataPanel
from .experiments import ExperimentDetailPanel, ExperimentsPanel
from .map_panel import MapPanel
from .nav_tabs import NavTabs
from .sensors import SensorDetailPanel, SensorsPanel

__all__ = [
    "Breadcrumb",
    "DataPanel",
    "ExperimentDetailPanel",
    "ExperimentsPanel",
    "MapPanel",
    "MeasurementChart",
    "NavTabs",
    "SensorDetailPanel",
    "SensorsPanel",
]
