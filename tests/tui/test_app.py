"""Tests for the TUI application."""

from __future__ import annotations

import asyncio

import pytest
from textual.widgets import ContentSwitcher, Input, Static, Tabs

from steamcity.config import DashboardSettings
from steamcity.navigation import NavigationHistory, SurfaceId, ViewName, decode
from steamcity.tui.app import SteamCityTUIApp, initial_surface
from steamcity.tui.screens import HelpScreen
from steamcity.tui.widgets import (
    DataPanel,
    ExperimentDetailPanel,
    ExperimentsPanel,
    MapPanel,
    SensorDetailPanel,
)


@pytest.fixture
def settings() -> DashboardSettings:
    return DashboardSettings(api_url="http://testserver/api")


@pytest.fixture
def make_app(api_service, settings):
    """Build an app over the fake API, optionally opened at a deep link."""

    def _make(fragment: str | None = None) -> SteamCityTUIApp:
        history = NavigationHistory.starting_at(fragment) if fragment else NavigationHistory()
        return SteamCityTUIApp(api_service=api_service, settings=settings, history=history)

    return _make


async def settle(app: SteamCityTUIApp, pilot) -> None:
    """Wait for init tasks and workers, then for the screen to refresh."""
    await pilot.pause()
    await app.workers.wait_for_complete()
    await app.coordinator.wait_idle()
    await pilot.pause()


def current_surface(app: SteamCityTUIApp) -> str | None:
    return app.main_screen.query_one("#surfaces", ContentSwitcher).current


def address(app: SteamCityTUIApp) -> str:
    return app.main_screen.query_one("#address-bar", Input).value


def test_initial_surface() -> None:
    """Test the first surface shown for each route."""
    assert initial_surface(decode("#/map")) is SurfaceId.MAP_SURFACE
    assert initial_surface(decode("#/experiments/exp-001")) is SurfaceId.EXPERIMENT_DETAIL
    assert initial_surface(decode("#/sensors")) is SurfaceId.SENSORS_LIST
    assert initial_surface(decode("#/data/exp-001")) is SurfaceId.DATA_VIEW


def test_app_has_required_bindings(settings) -> None:
    """Test app has required bindings."""
    app = SteamCityTUIApp(settings=settings)
    binding_keys = [b.key for b in app.BINDINGS]
    for key in ("q", "question_mark", "b", "f", "1", "2", "3", "4"):
        assert key in binding_keys


class TestStartup:
    """Tests for resolving the address on start."""

    @pytest.mark.asyncio
    async def test_empty_address_opens_map(self, make_app, fake_api) -> None:
        """Test empty address opens map."""
        app = make_app()
        async with app.run_test() as pilot:
            await settle(app, pilot)

            assert current_surface(app) == SurfaceId.MAP_SURFACE.value
            assert address(app) == "#/map"
            assert app.coordinator.active_section is ViewName.MAP
            assert app.main_screen.query_one(MapPanel).table.row_count == 3
            assert fake_api.paths() == ["/experiments"]

    @pytest.mark.asyncio
    async def test_deep_link_to_sensor(self, make_app, fake_api) -> None:
        """Test that a sensor deep link opens the sensor detail."""
        app = make_app("#/sensors/sensor-1")
        async with app.run_test() as pilot:
            await settle(app, pilot)

            panel = app.main_screen.query_one(SensorDetailPanel)
            assert current_surface(app) == SurfaceId.SENSOR_DETAIL.value
            assert app.main_screen.query_one("#nav-tabs", Tabs).active == "sensors-tab"
            assert panel.sensor_id == "sensor-1"
            assert list(panel.chart.series) == ["temperature"]
            assert "Experiment: Air quality near the school" in str(
                panel.query_one("#sensor-info", Static).content
            )
            # Opening a deep link writes no extra history entry
            assert app.history.length == 1

    @pytest.mark.asyncio
    async def test_deep_link_with_period(self, make_app, fake_api) -> None:
        """Test that the period in a deep link picks the chart range."""
        app = make_app("#/sensors/sensor-1?period=7d")
        async with app.run_test() as pilot:
            await settle(app, pilot)

            panel = app.main_screen.query_one(SensorDetailPanel)
            assert panel.period == "7d"
            chart_requests = [r for r in fake_api.requests if r.url.params.get("period") == "7d"]
            assert chart_requests
            assert chart_requests[0].url.params["limit"] == "168"

    @pytest.mark.asyncio
    async def test_invalid_address_redirects_to_map(self, make_app) -> None:
        """Test invalid address redirects to map."""
        app = make_app("#/nowhere")
        async with app.run_test() as pilot:
            await settle(app, pilot)

            assert current_surface(app) == SurfaceId.MAP_SURFACE.value
            assert address(app) == "#/map"


class TestNavigation:
    """Tests for section switching and history."""

    @pytest.mark.asyncio
    async def test_number_key_switches_section(self, make_app) -> None:
        """Test number key switches section."""
        app = make_app()
        async with app.run_test() as pilot:
            await settle(app, pilot)
            app.main_screen.query_one("#nav-tabs", Tabs).focus()
            await pilot.pause()
            await pilot.press("2")
            await settle(app, pilot)

            assert current_surface(app) == SurfaceId.EXPERIMENTS_LIST.value
            assert app.main_screen.query_one("#nav-tabs", Tabs).active == "experiments-tab"
            assert address(app) == "#/experiments"
            assert app.main_screen.query_one(ExperimentsPanel).table.row_count == 3

    @pytest.mark.asyncio
    async def test_back_and_forward(self, make_app) -> None:
        """Test history back and forward between sections."""
        app = make_app()
        async with app.run_test() as pilot:
            await settle(app, pilot)
            app.action_show_section("sensors")
            await settle(app, pilot)

            app.action_history_back()
            await settle(app, pilot)
            assert current_surface(app) == SurfaceId.MAP_SURFACE.value
            assert address(app) == "#/map"

            app.action_history_forward()
            await settle(app, pilot)
            assert current_surface(app) == SurfaceId.SENSORS_LIST.value
            assert address(app) == "#/sensors"

    @pytest.mark.asyncio
    async def test_forward_at_end_keeps_route(self, make_app) -> None:
        """Test forward at end keeps route."""
        app = make_app()
        async with app.run_test() as pilot:
            await settle(app, pilot)
            length = app.history.length
            app.action_history_forward()
            await settle(app, pilot)

            assert app.history.length == length
            assert current_surface(app) == SurfaceId.MAP_SURFACE.value

    @pytest.mark.asyncio
    async def test_address_bar_submit(self, make_app) -> None:
        """Test that submitting the address bar navigates."""
        app = make_app()
        async with app.run_test() as pilot:
            await settle(app, pilot)
            app.action_focus_address()
            await pilot.pause()
            address_bar = app.main_screen.query_one("#address-bar", Input)
            assert address_bar.has_focus

            address_bar.value = "#/experiments?status=active"
            await pilot.press("enter")
            await settle(app, pilot)

            panel = app.main_screen.query_one(ExperimentsPanel)
            assert current_surface(app) == SurfaceId.EXPERIMENTS_LIST.value
            assert panel.table.row_count == 1
            assert app.router.get_param("status") == "active"

    @pytest.mark.asyncio
    async def test_superseded_load_leaves_latest_surface(self, make_app) -> None:
        """Test superseded load leaves latest surface."""
        app = make_app()
        async with app.run_test() as pilot:
            await pilot.pause()
            app.action_show_section("experiments")
            app.action_show_section("data")
            await settle(app, pilot)

            assert current_surface(app) == SurfaceId.DATA_VIEW.value
            assert app.coordinator.active_section is ViewName.DATA
            assert address(app) == "#/data"

    @pytest.mark.asyncio
    async def test_clicking_active_tab_returns_to_list(self, make_app) -> None:
        """Test that clicking the section tab on a detail surface shows its list."""
        app = make_app()
        async with app.run_test() as pilot:
            await settle(app, pilot)
            app.navigate(ViewName.EXPERIMENTS, "exp-001")
            await settle(app, pilot)
            assert current_surface(app) == SurfaceId.EXPERIMENT_DETAIL.value

            await pilot.click("#experiments-tab")
            await settle(app, pilot)

            assert current_surface(app) == SurfaceId.EXPERIMENTS_LIST.value
            assert address(app) == "#/experiments"
            assert app.main_screen.query_one(ExperimentsPanel).table.row_count == 3

    @pytest.mark.asyncio
    async def test_clicking_other_tab_writes_one_entry(self, make_app) -> None:
        """Test that clicking another section tab switches section with one history entry."""
        app = make_app()
        async with app.run_test() as pilot:
            await settle(app, pilot)
            length = app.history.length

            await pilot.click("#sensors-tab")
            await settle(app, pilot)

            assert current_surface(app) == SurfaceId.SENSORS_LIST.value
            assert address(app) == "#/sensors"
            assert app.history.length == length + 1


class TestExperimentDetail:
    """Tests for the experiment detail surface."""

    @pytest.mark.asyncio
    async def test_selecting_experiment_opens_detail(self, make_app, fake_api) -> None:
        """Test selecting experiment opens detail."""
        app = make_app()
        async with app.run_test() as pilot:
            await settle(app, pilot)
            app.navigate(ViewName.EXPERIMENTS, "exp-001")
            await settle(app, pilot)

            panel = app.main_screen.query_one(ExperimentDetailPanel)
            assert current_surface(app) == SurfaceId.EXPERIMENT_DETAIL.value
            assert address(app) == "#/experiments/exp-001"
            assert panel.experiment["id"] == "exp-001"
            assert panel.table.row_count == 2
            assert list(panel.chart.series) == ["humidity", "temperature"]
            # Cached from the map, so no single-record fetch
            assert "/experiments/exp-001" not in fake_api.paths()

    @pytest.mark.asyncio
    async def test_deep_link_fetches_experiment(self, make_app, fake_api) -> None:
        """Test that a deep link to an uncached experiment fetches it."""
        app = make_app("#/experiments/exp-002")
        async with app.run_test() as pilot:
            await settle(app, pilot)

            panel = app.main_screen.query_one(ExperimentDetailPanel)
            assert "/experiments/exp-002" in fake_api.paths()
            assert panel.experiment["title"] == "Classroom temperature"

    @pytest.mark.asyncio
    async def test_unknown_experiment_shows_error(self, make_app) -> None:
        """Test unknown experiment shows error."""
        app = make_app("#/experiments/exp-999")
        async with app.run_test() as pilot:
            await settle(app, pilot)

            panel = app.main_screen.query_one(ExperimentDetailPanel)
            assert current_surface(app) == SurfaceId.EXPERIMENT_DETAIL.value
            assert panel.experiment is None
            status = panel.query_one(f"#{panel.status_id}", Static)
            assert status.has_class("error")
            assert "Experiment not found: exp-999" in str(status.content)

    @pytest.mark.asyncio
    async def test_sensor_click_navigates_to_sensor(self, make_app) -> None:
        """Test sensor click navigates to sensor."""
        app = make_app()
        async with app.run_test() as pilot:
            await settle(app, pilot)
            app.navigate(ViewName.EXPERIMENTS, "exp-001")
            await settle(app, pilot)

            panel = app.main_screen.query_one(ExperimentDetailPanel)
            panel.callbacks.on_sensor_click("sensor-2")
            await settle(app, pilot)

            assert current_surface(app) == SurfaceId.SENSOR_DETAIL.value
            assert address(app) == "#/sensors/sensor-2"

            app.action_history_back()
            await settle(app, pilot)
            assert current_surface(app) == SurfaceId.EXPERIMENT_DETAIL.value

    @pytest.mark.asyncio
    async def test_newer_navigation_wins_over_experiment_fetch(self, make_app) -> None:
        """Test that a sensor opened right after an uncached experiment keeps the surface."""
        app = make_app("#/data")
        async with app.run_test() as pilot:
            await settle(app, pilot)
            app.navigate(ViewName.EXPERIMENTS, "exp-002")
            app.navigate(ViewName.SENSORS, "sensor-1")
            await settle(app, pilot)

            assert address(app) == "#/sensors/sensor-1"
            assert current_surface(app) == SurfaceId.SENSOR_DETAIL.value
            assert app.main_screen.query_one(ExperimentDetailPanel).experiment is None

    @pytest.mark.asyncio
    async def test_experiment_fetch_finishing_late_is_dropped(self, make_app, monkeypatch) -> None:
        """Test that an experiment fetched after a newer navigation is not rendered."""
        app = make_app("#/experiments/exp-002")
        release = asyncio.Event()
        find_experiment = app.initializer.find_experiment

        async def slow_find_experiment(experiment_id):
            await release.wait()
            return await find_experiment(experiment_id)

        monkeypatch.setattr(app.initializer, "find_experiment", slow_find_experiment)
        async with app.run_test() as pilot:
            await pilot.pause()
            assert current_surface(app) == SurfaceId.EXPERIMENT_DETAIL.value

            app.navigate(ViewName.SENSORS, "sensor-1")
            release.set()
            await settle(app, pilot)

            assert current_surface(app) == SurfaceId.SENSOR_DETAIL.value
            assert app.coordinator.active_section is ViewName.SENSORS
            assert app.main_screen.query_one(ExperimentDetailPanel).experiment is None


class TestPanelsWiring:
    """Tests for panel messages reaching the router."""

    @pytest.mark.asyncio
    async def test_sensor_period_goes_to_address(self, make_app) -> None:
        """Test sensor period goes to address."""
        app = make_app("#/sensors/sensor-1")
        async with app.run_test() as pilot:
            await settle(app, pilot)
            panel = app.main_screen.query_one(SensorDetailPanel)
            panel.action_cycle_period()
            await settle(app, pilot)

            assert panel.period == "7d"
            assert address(app) == "#/sensors/sensor-1?period=7d"

    @pytest.mark.asyncio
    async def test_default_period_is_left_out_of_address(self, make_app) -> None:
        """Test default period is left out of address."""
        app = make_app("#/sensors/sensor-1?period=all")
        async with app.run_test() as pilot:
            await settle(app, pilot)
            app.main_screen.query_one(SensorDetailPanel).action_cycle_period()
            await settle(app, pilot)

            assert address(app) == "#/sensors/sensor-1"

    @pytest.mark.asyncio
    async def test_open_data_view_for_sensor_experiment(self, make_app) -> None:
        """Test open data view for sensor experiment."""
        app = make_app("#/sensors/sensor-1")
        async with app.run_test() as pilot:
            await settle(app, pilot)
            app.main_screen.query_one(SensorDetailPanel).action_open_data()
            await settle(app, pilot)

            panel = app.main_screen.query_one(DataPanel)
            assert current_surface(app) == SurfaceId.DATA_VIEW.value
            assert address(app) == "#/data/exp-001"
            assert panel.experiment_id == "exp-001"
            assert panel.table.row_count == 2

    @pytest.mark.asyncio
    async def test_data_period_reloads(self, make_app, fake_api) -> None:
        """Test that changing the data period writes the address and reloads."""
        app = make_app("#/data/exp-001")
        async with app.run_test() as pilot:
            await settle(app, pilot)
            app.main_screen.query_one(DataPanel).action_cycle_period()
            await settle(app, pilot)

            assert address(app) == "#/data/exp-001?period=7d"
            assert app.main_screen.query_one(DataPanel).period == "7d"
            assert fake_api.requests[-1].url.params["period"] == "7d"

    @pytest.mark.asyncio
    async def test_api_failure_shows_error(self, make_app, fake_api) -> None:
        """Test that an API failure shows an error in the panel."""
        fake_api.failing.add("/experiments")
        app = make_app()
        async with app.run_test() as pilot:
            await settle(app, pilot)

            panel = app.main_screen.query_one(MapPanel)
            status = panel.query_one(f"#{panel.status_id}", Static)
            assert status.has_class("error")
            assert "Could not load experiments" in str(status.content)

    @pytest.mark.asyncio
    async def test_sensor_details_can_write_address(self, make_app) -> None:
        """Test that loading a sensor with update_url writes its address first."""
        app = make_app("#/sensors/sensor-1?period=7d")
        async with app.run_test() as pilot:
            await settle(app, pilot)
            length = app.history.length

            await app.initializer.show_sensor_details("sensor-1", True, app.coordinator.current_token)
            await pilot.pause()

            assert app.history.length == length + 1
            assert app.history.location_hash == "#/sensors/sensor-1?period=7d"
            assert app.main_screen.query_one(SensorDetailPanel).sensor_id == "sensor-1"


class TestHelpScreen:
    """Tests for the help modal."""

    @pytest.mark.asyncio
    async def test_help_opens_and_closes(self, make_app) -> None:
        """Test that the help screen opens and closes."""
        app = make_app()
        async with app.run_test() as pilot:
            await settle(app, pilot)
            app.action_help()
            await pilot.pause()
            assert isinstance(app.screen, HelpScreen)

            # Navigation still reaches the dashboard under the modal
            app.history.set_hash("#/sensors")
            await settle(app, pilot)
            assert current_surface(app) == SurfaceId.SENSORS_LIST.value

            await pilot.press("escape")
            await pilot.pause()
            assert not isinstance(app.screen, HelpScreen)

    @pytest.mark.asyncio
    async def test_quit_action(self, make_app) -> None:
        """Test that q quits the app."""
        app = make_app()
        async with app.run_test() as pilot:
            await settle(app, pilot)
            await pilot.press("q")
