"""
Navigation data models.

Views, surfaces and the decoded Route value shared by the codec, the
router and the view coordinator.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum


class ViewName(Enum):
    """Top-level navigation sections of the dashboard."""

    MAP = "map"
    EXPERIMENTS = "experiments"
    SENSORS = "sensors"
    DATA = "data"

    @classmethod
    def parse(cls, value: ViewName | str) -> ViewName:
        """Coerce a view name or its string value to a ViewName.

        Raises:
            ValueError: If ``value`` is not a known view
        """
        if isinstance(value, cls):
            return value
        return cls(str(value).lower())

    @property
    def tab_id(self) -> str:
        """Widget id of the navigation tab for this section."""
        return f"{self.value}-tab"


class SurfaceId(Enum):
    """Mutually exclusive visible regions of the dashboard.

    The value is the widget id of the surface in the host.
    """

    MAP_SURFACE = "map-view"
    EXPERIMENTS_LIST = "experiments-view"
    EXPERIMENT_DETAIL = "experiment-detail-view"
    SENSORS_LIST = "sensors-view"
    SENSOR_DETAIL = "sensor-detail-view"
    DATA_VIEW = "data-view"

    @property
    def section(self) -> ViewName:
        """Section that owns this surface."""
        return _SURFACE_SECTIONS[self]

    @classmethod
    def for_view(cls, view: ViewName) -> SurfaceId:
        """Surface shown when a section is opened without an id."""
        return _VIEW_SURFACES[view]


_SURFACE_SECTIONS = {
    SurfaceId.MAP_SURFACE: ViewName.MAP,
    SurfaceId.EXPERIMENTS_LIST: ViewName.EXPERIMENTS,
    SurfaceId.EXPERIMENT_DETAIL: ViewName.EXPERIMENTS,
    SurfaceId.SENSORS_LIST: ViewName.SENSORS,
    SurfaceId.SENSOR_DETAIL: ViewName.SENSORS,
    SurfaceId.DATA_VIEW: ViewName.DATA,
}

_VIEW_SURFACES = {
    ViewName.MAP: SurfaceId.MAP_SURFACE,
    ViewName.EXPERIMENTS: SurfaceId.EXPERIMENTS_LIST,
    ViewName.SENSORS: SurfaceId.SENSORS_LIST,
    ViewName.DATA: SurfaceId.DATA_VIEW,
}


@dataclass(frozen=True)
class Route:
    """Decoded form of an address fragment.

    Attributes:
        view: Section named by the first path segment.
        id: Experiment or sensor id from the second segment, if any.
        params: Decoded query parameters in insertion order.
    """

    view: ViewName
    id: str | None = None
    params: dict[str, str] = field(default_factory=dict)

    def __post_init__(self) -> None:
        # Map routes never carry an id
        if self.view is ViewName.MAP and self.id is not None:
            object.__setattr__(self, "id", None)
        object.__setattr__(self, "params", dict(self.params))

    def with_params(self, params: dict[str, str]) -> Route:
        """Return a copy of this route with ``params`` replaced."""
        return Route(view=self.view, id=self.id, params=params)


DEFAULT_ROUTE = Route(view=ViewName.MAP)
