"""
View Coordinator

Keeps exactly one surface visible, keeps the highlighted section in step
with it, and starts each surface's asynchronous initialization once per
activation.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable, Callable
from dataclasses import dataclass, field
from typing import Any, Protocol

from steamcity.navigation.models import SurfaceId, ViewName

logger = logging.getLogger(__name__)

HookFactory = Callable[[], Awaitable[None]]


class SurfaceHost(Protocol):
    """Host-side display of surfaces and navigation affordances."""

    def show_surface(self, surface: SurfaceId) -> bool:
        """Make ``surface`` the only visible surface.

        Returns False when the host has no widget for the surface.
        """
        ...

    def highlight_section(self, view: ViewName) -> None:
        """Mark the navigation tab for ``view`` as active."""
        ...


@dataclass(frozen=True)
class InitToken:
    """Marker handed to an init hook at activation time.

    A hook holding a token that is no longer current has been superseded
    by a later activation and must leave shared content alone.
    """

    generation: int
    surface: SurfaceId
    coordinator: ViewCoordinator = field(repr=False, compare=False)

    def is_current(self) -> bool:
        return self.coordinator.is_current(self)


@dataclass
class ExperimentDetailCallbacks:
    """Callbacks passed through to the experiment detail renderer."""

    on_chart_create: Callable[[str, Any], Awaitable[None]] | None = None
    apply_cluster_color: Callable[[str], None] | None = None
    on_sensor_click: Callable[[str], None] | None = None
    on_back_to_list: Callable[[], None] | None = None


class ViewInitializer(Protocol):
    """Per-surface initialization hooks and detail renderers."""

    async def initialize_map(self, token: InitToken) -> None: ...

    async def initialize_experiments(self, token: InitToken) -> None: ...

    async def initialize_sensors(self, token: InitToken) -> None: ...

    async def initialize_data(self, experiment_id: str | None, token: InitToken) -> None: ...

    async def load_experiment_details(
        self,
        experiment: dict[str, Any],
        callbacks: ExperimentDetailCallbacks,
        token: InitToken,
    ) -> None: ...

    async def show_sensor_details(self, sensor_id: str, update_url: bool, token: InitToken) -> None: ...


class ViewCoordinator:
    """Owns the visible surface and the active section.

    Surface switching is synchronous and complete when a ``show_*`` method
    returns. Content initialization runs afterwards as an asyncio task,
    which the method returns; awaiting it is only needed to know that
    content has loaded. Superseded tasks are not cancelled.
    """

    def __init__(
        self,
        host: SurfaceHost,
        initializer: ViewInitializer | None = None,
        on_view_change: Callable[[ViewName, bool], Any] | None = None,
    ) -> None:
        """Initialize the coordinator.

        Args:
            host: Surface host that shows widgets and highlights tabs.
            initializer: Hooks that populate each surface.
            on_view_change: Called with (view, update_url) by ``show_view``
                so the owner can write the address when asked to.
        """
        self.host = host
        self.initializer = initializer
        self.on_view_change = on_view_change

        self.active_surface: SurfaceId | None = None
        self.active_section: ViewName | None = None
        self.selected_experiment_for_data: str | None = None

        self._generation = 0
        self._current_token: InitToken | None = None
        self._tasks: set[asyncio.Task[None]] = set()

    @property
    def current_view(self) -> ViewName | None:
        """Section owning the visible surface."""
        return self.active_section

    @property
    def current_token(self) -> InitToken | None:
        return self._current_token

    def is_current(self, token: InitToken) -> bool:
        """Whether ``token`` belongs to the latest activation."""
        return token.generation == self._generation

    @property
    def pending_tasks(self) -> frozenset[asyncio.Task[None]]:
        """Init tasks that have not finished yet."""
        return frozenset(t for t in self._tasks if not t.done())

    # Activation

    def _activate(self, surface: SurfaceId) -> InitToken:
        section = surface.section
        self.host.highlight_section(section)

        if not self.host.show_surface(surface):
            logger.warning("Surface widget not found: %s", surface.value)

        self.active_surface = surface
        self.active_section = section

        self._generation += 1
        self._current_token = InitToken(self._generation, surface, self)
        return self._current_token

    def _spawn(self, label: str, factory: HookFactory | None) -> asyncio.Task[None]:
        task = asyncio.get_running_loop().create_task(self._run_hook(label, factory))
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)
        return task

    async def _run_hook(self, label: str, factory: HookFactory | None) -> None:
        if factory is None:
            return
        try:
            await factory()
        except Exception:
            # The surface stays switched; the renderer shows its own error state
            logger.exception("Failed to initialize %s", label)

    def _require_initializer(self, label: str) -> ViewInitializer | None:
        if self.initializer is None:
            logger.warning("No initializer available for %s", label)
        return self.initializer

    def show_view(self, view: ViewName | str, update_url: bool = True) -> asyncio.Task[None]:
        """Show the list surface of a section and initialize it.

        Args:
            view: Section to show.
            update_url: Passed to ``on_view_change``; True when the caller
                is not the router and wants the address written.

        Returns:
            Task that finishes when the init hook settles.
        """
        view = ViewName.parse(view)
        logger.debug("Switching to view: %s", view.value)

        token = self._activate(SurfaceId.for_view(view))

        if self.on_view_change is not None:
            self.on_view_change(view, update_url)

        return self._spawn(view.value, self._hook_for(view, token))

    def _hook_for(self, view: ViewName, token: InitToken) -> HookFactory | None:
        initializer = self._require_initializer(view.value)
        if initializer is None:
            return None
        if view is ViewName.MAP:
            return lambda: initializer.initialize_map(token)
        if view is ViewName.EXPERIMENTS:
            return lambda: initializer.initialize_experiments(token)
        if view is ViewName.SENSORS:
            return lambda: initializer.initialize_sensors(token)
        experiment_id = self.selected_experiment_for_data
        return lambda: initializer.initialize_data(experiment_id, token)

    def show_experiment_detail(
        self,
        experiment_id: str,
        experiment: dict[str, Any] | None,
        callbacks: ExperimentDetailCallbacks | None = None,
    ) -> asyncio.Task[None]:
        """Show the experiment detail surface and hand it to the renderer.

        Args:
            experiment_id: Id of the experiment being shown.
            experiment: The experiment record. When None, the surface is
                switched but nothing is rendered.
            callbacks: Bundle passed through to the renderer.
        """
        logger.debug("Showing experiment detail: %s", experiment_id)
        token = self._activate(SurfaceId.EXPERIMENT_DETAIL)

        label = f"experiment {experiment_id}"
        if experiment is None:
            logger.debug("No record for %s", label)
            return self._spawn(label, None)

        initializer = self._require_initializer(label)
        if initializer is None:
            return self._spawn(label, None)

        bundle = callbacks or ExperimentDetailCallbacks()
        return self._spawn(label, lambda: initializer.load_experiment_details(experiment, bundle, token))

    def show_sensor_detail(self, sensor_id: str) -> asyncio.Task[None]:
        """Show the sensor detail surface and hand it to the renderer.

        The renderer is told not to write the address, since this is only
        called once the address already names the sensor.
        """
        logger.debug("Showing sensor detail: %s", sensor_id)
        token = self._activate(SurfaceId.SENSOR_DETAIL)

        label = f"sensor {sensor_id}"
        initializer = self._require_initializer(label)
        if initializer is None:
            return self._spawn(label, None)

        return self._spawn(label, lambda: initializer.show_sensor_details(sensor_id, False, token))

    def show_experiments_list(self) -> asyncio.Task[None]:
        """Return to the experiments list."""
        return self.show_view(ViewName.EXPERIMENTS, update_url=True)

    def show_sensors_list(self) -> asyncio.Task[None]:
        """Return to the sensors list."""
        return self.show_view(ViewName.SENSORS, update_url=True)

    def set_selected_experiment_for_data(self, experiment_id: str | None) -> None:
        """Set the experiment whose measurements the data view shows."""
        self.selected_experiment_for_data = experiment_id

    async def wait_idle(self) -> None:
        """Wait for every pending init task to settle."""
        while pending := self.pending_tasks:
            await asyncio.gather(*pending)
