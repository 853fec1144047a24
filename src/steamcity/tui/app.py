"""
SteamCity TUI Application

Main application class: owns the navigation history, the router and the
view coordinator, and wires panel messages to navigation.
"""

from __future__ import annotations

import logging

from textual.app import App, ComposeResult
from textual.binding import Binding
from textual.screen import Screen
from textual.theme import Theme
from textual.widgets import ContentSwitcher, Footer, Header, Input, Tab, Tabs

from steamcity.api import ApiService
from steamcity.config import DashboardSettings, get_settings
from steamcity.exceptions import ApiError, InvalidRouteError
from steamcity.navigation import (
    DEFAULT_ROUTE,
    ExperimentDetailCallbacks,
    InitToken,
    NavigationHistory,
    Route,
    Router,
    SurfaceId,
    ViewCoordinator,
    ViewName,
    decode,
)
from steamcity.navigation.codec import EMPTY_FRAGMENTS
from steamcity.tui.host import TextualSurfaceHost
from steamcity.tui.initializer import DashboardInitializer
from steamcity.tui.widgets import (
    DataPanel,
    ExperimentDetailPanel,
    ExperimentsPanel,
    MapPanel,
    NavTabs,
    SensorDetailPanel,
    SensorsPanel,
)
from steamcity.tui.widgets.breadcrumb import SECTION_LABELS

logger = logging.getLogger(__name__)

STEAMCITY_THEME = Theme(
    name="steamcity",
    primary="#1F3A5F",
    secondary="#6B7B8C",
    accent="#E67E22",
    foreground="#1F2A36",
    background="#F4F6F8",
    surface="#FFFFFF",
    panel="#E3E8EE",
    success="#27AE60",
    error="#C0392B",
    warning="#F39C12",
)


def initial_surface(route: Route) -> SurfaceId:
    """Surface a route shows, used to pick the switcher's first child."""
    if route.view is ViewName.EXPERIMENTS and route.id:
        return SurfaceId.EXPERIMENT_DETAIL
    if route.view is ViewName.SENSORS and route.id:
        return SurfaceId.SENSOR_DETAIL
    return SurfaceId.for_view(route.view)


class SteamCityTUIApp(App[None]):
    """SteamCity Terminal UI Application.

    A terminal dashboard for experiments, sensors and measurements, with
    browser-like navigation through an address bar and history.
    """

    TITLE = "SteamCity"
    CSS_PATH = "styles/app.tcss"

    BINDINGS = [
        Binding("q", "quit", "Quit", show=True),
        Binding("question_mark", "help", "Help", show=True),
        Binding("b", "history_back", "Back", show=True),
        Binding("f", "history_forward", "Forward", show=True),
        Binding("ctrl+l", "focus_address", "Address", show=False),
        Binding("1", "show_section('map')", "Map", show=False),
        Binding("2", "show_section('experiments')", "Experiments", show=False),
        Binding("3", "show_section('sensors')", "Sensors", show=False),
        Binding("4", "show_section('data')", "Data", show=False),
    ]

    def __init__(
        self,
        api_service: ApiService | None = None,
        settings: DashboardSettings | None = None,
        history: NavigationHistory | None = None,
        initial_fragment: str | None = None,
    ) -> None:
        """Initialize the TUI application.

        Args:
            api_service: API client. Created from the settings when omitted
                and closed on exit.
            settings: Dashboard settings. Defaults to ``get_settings()``.
            history: Navigation history to use. Tests pass their own.
            initial_fragment: Deep link to open when no history is given.
        """
        super().__init__()
        self.settings = settings or get_settings()
        self._owns_api = api_service is None
        self.api = api_service or ApiService(self.settings.api_url, timeout=self.settings.api_timeout)

        if history is None:
            history = NavigationHistory.starting_at(initial_fragment) if initial_fragment else NavigationHistory()
        self.history = history

        self.router = Router(
            self.history,
            on_view_change=self._route_view,
            on_experiment_detail=self._route_experiment_detail,
            on_sensor_detail=self._route_sensor_detail,
            on_data_view=self._route_data_view,
            dedupe=self.settings.dedupe_history,
        )
        self.initializer = DashboardInitializer(
            self.api, self, router=self.router, default_period=self.settings.default_period
        )
        self.coordinator: ViewCoordinator | None = None

        self.register_theme(STEAMCITY_THEME)
        self.theme = "steamcity"

    def _initial_route(self) -> Route:
        fragment = self.history.location_hash
        if fragment in EMPTY_FRAGMENTS:
            return DEFAULT_ROUTE
        try:
            return decode(fragment)
        except InvalidRouteError:
            return DEFAULT_ROUTE

    def compose(self) -> ComposeResult:
        route = self._initial_route()
        yield Header()
        yield NavTabs(
            *(Tab(label, id=view.tab_id) for view, label in SECTION_LABELS.items()),
            active=route.view.tab_id,
            id="nav-tabs",
        )
        yield Input(placeholder="#/map", id="address-bar")
        with ContentSwitcher(initial=initial_surface(route).value, id="surfaces"):
            yield MapPanel(id=SurfaceId.MAP_SURFACE.value)
            yield ExperimentsPanel(id=SurfaceId.EXPERIMENTS_LIST.value)
            yield ExperimentDetailPanel(id=SurfaceId.EXPERIMENT_DETAIL.value)
            yield SensorsPanel(id=SurfaceId.SENSORS_LIST.value)
            yield SensorDetailPanel(id=SurfaceId.SENSOR_DETAIL.value)
            yield DataPanel(id=SurfaceId.DATA_VIEW.value)
        yield Footer()

    @property
    def main_screen(self) -> Screen:
        """Screen holding the dashboard, also while a modal is open."""
        return self.screen_stack[0]

    def on_mount(self) -> None:
        """Build the coordinator over the mounted widgets and resolve the address."""
        screen = self.main_screen
        host = TextualSurfaceHost(screen.query_one("#surfaces", ContentSwitcher), screen.query_one("#nav-tabs", Tabs))
        self.initializer.root = screen
        self.coordinator = ViewCoordinator(host, self.initializer, on_view_change=self._on_view_change)
        self.router.init()
        self._sync_address()

    async def on_unmount(self) -> None:
        self.router.destroy()
        if self._owns_api:
            await self.api.aclose()

    # Router callbacks

    def _route_view(self, view: ViewName, update_url: bool) -> None:
        assert self.coordinator is not None
        self.coordinator.show_view(view, update_url)
        self._sync_address()

    def _route_experiment_detail(self, experiment_id: str, update_url: bool) -> None:
        assert self.coordinator is not None
        experiment = self.initializer.cached_experiment(experiment_id)
        self.coordinator.show_experiment_detail(experiment_id, experiment, self._experiment_callbacks())
        if experiment is None:
            token = self.coordinator.current_token
            self.run_worker(self._resolve_experiment(experiment_id, token), exclusive=False)
        self._sync_address()

    def _route_sensor_detail(self, sensor_id: str, update_url: bool) -> None:
        assert self.coordinator is not None
        self.coordinator.show_sensor_detail(sensor_id)
        self._sync_address()

    def _route_data_view(self, experiment_id: str | None, update_url: bool) -> None:
        assert self.coordinator is not None
        self.coordinator.set_selected_experiment_for_data(experiment_id)
        self.coordinator.show_view(ViewName.DATA, update_url)
        self._sync_address()

    async def _resolve_experiment(self, experiment_id: str, token: InitToken | None) -> None:
        """Fetch an experiment missing from the cache, then render it.

        ``token`` belongs to the detail activation that scheduled the fetch;
        once a later navigation supersedes it, the result is dropped.
        """
        if token is None or not token.is_current():
            return
        panel = self.main_screen.query_one(ExperimentDetailPanel)
        panel.show_loading("experiment")
        try:
            experiment = await self.initializer.find_experiment(experiment_id)
        except ApiError as e:
            logger.error("Failed to load experiment %s: %s", experiment_id, e)
            if token.is_current():
                panel.show_error(f"Could not load experiment {experiment_id}: {e}")
            return

        if not token.is_current():
            return
        if experiment is None:
            panel.show_error(f"Experiment not found: {experiment_id}")
            self.notify(f"Experiment not found: {experiment_id}", severity="warning")
            return
        await self.initializer.load_experiment_details(experiment, self._experiment_callbacks(), token)

    def _experiment_callbacks(self) -> ExperimentDetailCallbacks:
        panel = self.main_screen.query_one(ExperimentDetailPanel)
        return ExperimentDetailCallbacks(
            on_chart_create=self.initializer.create_experiment_chart,
            apply_cluster_color=panel.apply_cluster_color,
            on_sensor_click=lambda sensor_id: self.navigate(ViewName.SENSORS, sensor_id),
            on_back_to_list=self._back_to_experiments,
        )

    def _back_to_experiments(self) -> None:
        assert self.coordinator is not None
        self.coordinator.show_experiments_list()

    # Coordinator callback

    def _on_view_change(self, view: ViewName, update_url: bool) -> None:
        if not update_url:
            return
        experiment_id = None
        if view is ViewName.DATA and self.coordinator is not None:
            experiment_id = self.coordinator.selected_experiment_for_data
        self.router.update_url(view, experiment_id)
        self._sync_address()

    # Navigation helpers

    def navigate(self, view: ViewName, id: str | None = None, params: dict[str, str] | None = None) -> None:
        """Navigate to a route, writing a history entry."""
        self.router.navigate(view, id, params)
        self._sync_address()

    def _set_period_param(self, period: str) -> None:
        # The default period is left out of the address
        if period == self.settings.default_period:
            self.router.remove_param("period")
        else:
            self.router.set_param("period", period)
        self._sync_address()

    def _sync_address(self) -> None:
        address = self.main_screen.query_one("#address-bar", Input)
        if address.value != self.history.location_hash:
            address.value = self.history.location_hash

    # Panel messages

    def on_tabs_tab_activated(self, event: Tabs.TabActivated) -> None:
        if self.coordinator is None or event.tab is None or not event.tab.id:
            return
        # Activations already overtaken by a later one are stale
        if event.tab.id != event.tabs.active:
            return
        view = ViewName.parse(event.tab.id.removesuffix("-tab"))
        # Highlighting the section from the coordinator also activates the tab
        if view is self.coordinator.active_section:
            return
        self.coordinator.show_view(view, update_url=True)

    def on_nav_tabs_reselected(self, event: NavTabs.Reselected) -> None:
        # From a detail surface, the section tab leads back to its list
        if self.coordinator is not None:
            self.coordinator.show_view(event.view, update_url=True)

    def on_input_submitted(self, event: Input.Submitted) -> None:
        if event.input.id != "address-bar":
            return
        event.stop()
        # A typed address behaves like editing the browser location
        self.history.set_hash(event.value.strip())
        self._sync_address()

    def on_map_panel_experiment_selected(self, event: MapPanel.ExperimentSelected) -> None:
        self.navigate(ViewName.EXPERIMENTS, event.experiment_id)

    def on_experiments_panel_experiment_selected(self, event: ExperimentsPanel.ExperimentSelected) -> None:
        self.navigate(ViewName.EXPERIMENTS, event.experiment_id)

    def on_sensors_panel_sensor_selected(self, event: SensorsPanel.SensorSelected) -> None:
        self.navigate(ViewName.SENSORS, event.sensor_id)

    async def on_sensor_detail_panel_period_changed(self, event: SensorDetailPanel.PeriodChanged) -> None:
        assert self.coordinator is not None
        token = self.coordinator.current_token
        self._set_period_param(event.period)
        if token is not None:
            await self.initializer.load_sensor_chart(event.sensor_id, event.period, token)

    def on_sensor_detail_panel_open_data_view(self, event: SensorDetailPanel.OpenDataView) -> None:
        self.navigate(ViewName.DATA, event.experiment_id)

    def on_sensor_detail_panel_open_experiment(self, event: SensorDetailPanel.OpenExperiment) -> None:
        self.navigate(ViewName.EXPERIMENTS, event.experiment_id)

    def on_sensor_detail_panel_back_to_list(self, event: SensorDetailPanel.BackToList) -> None:
        assert self.coordinator is not None
        self.coordinator.show_sensors_list()

    def on_data_panel_period_changed(self, event: DataPanel.PeriodChanged) -> None:
        assert self.coordinator is not None
        self._set_period_param(event.period)
        self.coordinator.show_view(ViewName.DATA, update_url=False)

    # Actions

    async def action_quit(self) -> None:
        """Quit the application."""
        self.exit()

    def action_help(self) -> None:
        """Show help screen."""
        from steamcity.tui.screens import HelpScreen

        self.push_screen(HelpScreen())

    def action_history_back(self) -> None:
        if not self.history.back():
            self.notify("No previous page")

    def action_history_forward(self) -> None:
        if not self.history.forward():
            self.notify("No next page")

    def action_focus_address(self) -> None:
        self.main_screen.query_one("#address-bar", Input).focus()

    def action_show_section(self, view: str) -> None:
        assert self.coordinator is not None
        self.coordinator.show_view(ViewName.parse(view), update_url=True)
