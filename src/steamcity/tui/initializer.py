"""
Dashboard initializer

Fetches records from the API and hands them to the surface panels. Every
hook re-checks its InitToken after each await and leaves the panels alone
once a later activation has superseded it.
"""

from __future__ import annotations

import logging
from typing import Any

from textual.dom import DOMNode

from steamcity.api import ApiService
from steamcity.config import VALID_PERIODS
from steamcity.exceptions import ApiError
from steamcity.measurements import series_by_type
from steamcity.navigation import ExperimentDetailCallbacks, InitToken, Router, ViewName
from steamcity.protocols import get_protocol_color
from steamcity.tui.widgets import (
    DataPanel,
    ExperimentDetailPanel,
    ExperimentsPanel,
    MapPanel,
    MeasurementChart,
    SensorDetailPanel,
    SensorsPanel,
)
from steamcity.tui.widgets.sensors import PERIOD_LIMITS

logger = logging.getLogger(__name__)

# Measurements requested for the data view and the experiment chart
DATA_LIMIT = 1000


class DashboardInitializer:
    """ViewInitializer backed by the SteamCity API and the Textual panels."""

    def __init__(
        self,
        api: ApiService,
        root: DOMNode,
        router: Router | None = None,
        default_period: str = "24h",
    ) -> None:
        """Initialize the initializer.

        Args:
            api: API client.
            root: Node the surface panels are queried from (the app).
            router: Router holding the current query parameters.
            default_period: Period used when the address carries none.
        """
        self.api = api
        self.root = root
        self.router = router
        self.default_period = default_period
        self._experiments: list[dict[str, Any]] | None = None

    # Records

    def _params(self) -> dict[str, str]:
        return self.router.get_params() if self.router is not None else {}

    def _period(self) -> str:
        period = self._params().get("period") or self.default_period
        return period if period in VALID_PERIODS else self.default_period

    @property
    def cached_experiments(self) -> list[dict[str, Any]]:
        return self._experiments or []

    async def get_experiments(self, refresh: bool = False) -> list[dict[str, Any]]:
        """Experiments list, fetched once and cached."""
        if self._experiments is None or refresh:
            self._experiments = list(await self.api.fetch_experiments())
        return self._experiments

    def cached_experiment(self, experiment_id: str) -> dict[str, Any] | None:
        for experiment in self.cached_experiments:
            if str(experiment.get("id")) == experiment_id:
                return experiment
        return None

    async def find_experiment(self, experiment_id: str) -> dict[str, Any] | None:
        """Experiment record from the cache, else from the API.

        Returns None when the API does not know the experiment.
        """
        experiment = self.cached_experiment(experiment_id)
        if experiment is not None:
            return experiment
        try:
            return await self.api.fetch_experiment_by_id(experiment_id)
        except ApiError as e:
            if e.status_code == 404:
                return None
            raise

    def _experiment_titles(self) -> dict[str, str]:
        return {str(e["id"]): str(e.get("title") or e["id"]) for e in self.cached_experiments if e.get("id")}

    # List surfaces

    async def initialize_map(self, token: InitToken) -> None:
        panel = self.root.query_one(MapPanel)
        if not token.is_current():
            return
        panel.show_loading("experiments")
        try:
            experiments = await self.get_experiments()
        except ApiError as e:
            if token.is_current():
                panel.show_error(f"Could not load experiments: {e}")
            return
        if not token.is_current():
            logger.debug("Map init superseded")
            return
        panel.show_experiments(experiments, protocol=self._params().get("protocol"))

    async def initialize_experiments(self, token: InitToken) -> None:
        panel = self.root.query_one(ExperimentsPanel)
        if not token.is_current():
            return
        panel.show_loading("experiments")
        try:
            experiments = await self.get_experiments()
        except ApiError as e:
            if token.is_current():
                panel.show_error(f"Could not load experiments: {e}")
            return
        if not token.is_current():
            logger.debug("Experiments init superseded")
            return
        params = self._params()
        panel.show_experiments(
            experiments,
            protocol=params.get("protocol"),
            status=params.get("status"),
            search=params.get("q"),
        )

    async def initialize_sensors(self, token: InitToken) -> None:
        panel = self.root.query_one(SensorsPanel)
        if not token.is_current():
            return
        panel.show_loading("sensors")
        try:
            await self.get_experiments()
            sensors = await self.api.fetch_sensor_devices()
        except ApiError as e:
            if token.is_current():
                panel.show_error(f"Could not load sensors: {e}")
            return
        if not token.is_current():
            logger.debug("Sensors init superseded")
            return
        params = self._params()
        panel.show_sensors(
            sensors,
            experiments=self._experiment_titles(),
            sensor_type=params.get("type"),
            status=params.get("status"),
        )

    async def initialize_data(self, experiment_id: str | None, token: InitToken) -> None:
        panel = self.root.query_one(DataPanel)
        if not token.is_current():
            return
        period = self._period()
        title = None
        if experiment_id is not None:
            experiment = self.cached_experiment(experiment_id)
            title = str(experiment.get("title")) if experiment and experiment.get("title") else None
        panel.set_context(experiment_id, title, period)
        panel.clear_data()
        panel.show_loading("measurements")
        try:
            measurements = await self.api.fetch_measurements(experimentId=experiment_id, period=period, limit=DATA_LIMIT)
        except ApiError as e:
            if token.is_current():
                panel.show_error(f"Could not load measurements: {e}")
            return
        if not token.is_current():
            logger.debug("Data init superseded")
            return
        panel.show_measurements(measurements)

    # Detail surfaces

    async def load_experiment_details(
        self,
        experiment: dict[str, Any],
        callbacks: ExperimentDetailCallbacks,
        token: InitToken,
    ) -> None:
        panel = self.root.query_one(ExperimentDetailPanel)
        if not token.is_current():
            return
        experiment_id = str(experiment.get("id"))
        panel.show_experiment(experiment, callbacks)
        if callbacks.apply_cluster_color is not None:
            callbacks.apply_cluster_color(get_protocol_color(experiment.get("protocol")))

        panel.show_loading("sensors")
        try:
            devices = await self.api.fetch_sensor_devices(experimentId=experiment_id)
        except ApiError as e:
            if token.is_current():
                panel.show_error(f"Could not load sensors: {e}")
            return
        if not token.is_current():
            logger.debug("Experiment %s detail superseded", experiment_id)
            return
        panel.show_devices(devices)

        if callbacks.on_chart_create is not None:
            await callbacks.on_chart_create(experiment_id, panel.chart)

    async def create_experiment_chart(self, experiment_id: str, chart: MeasurementChart) -> None:
        """Plot the recent measurements of an experiment on ``chart``."""
        period = self.default_period
        panel = self.root.query_one(ExperimentDetailPanel)
        try:
            measurements = await self.api.fetch_measurements(experimentId=experiment_id, period=period, limit=DATA_LIMIT)
        except ApiError as e:
            if panel.experiment is not None and str(panel.experiment.get("id")) == experiment_id:
                panel.show_error(f"Could not load measurements: {e}")
            return
        if panel.experiment is None or str(panel.experiment.get("id")) != experiment_id:
            return
        chart.set_series(f"Measurements ({period})", series_by_type(measurements, limit=4))

    async def show_sensor_details(self, sensor_id: str, update_url: bool, token: InitToken) -> None:
        """Load the sensor description, latest measurement and chart.

        The coordinator calls this with ``update_url=False``, since the address
        already names the sensor. Callers that open a sensor without going
        through the router pass True to have its address written first.
        """
        panel = self.root.query_one(SensorDetailPanel)
        if not token.is_current():
            return
        period = self._period()

        if update_url and self.router is not None:
            # The default period is left out of the address
            params = {"period": period} if period != self.default_period else None
            self.router.update_url(ViewName.SENSORS, sensor_id, params)

        panel.show_loading("sensor")
        try:
            sensor = await self.api.fetch_sensor_by_id(sensor_id)
            await self.get_experiments()
            latest = await self.api.fetch_measurements(sensorId=sensor_id, limit=1)
        except ApiError as e:
            if token.is_current():
                panel.show_error(f"Could not load sensor {sensor_id}: {e}")
            return
        if not token.is_current():
            logger.debug("Sensor %s detail superseded", sensor_id)
            return

        experiment = self.cached_experiment(str(sensor.get("experiment_id")))
        panel.show_sensor(
            sensor,
            experiment_title=str(experiment.get("title")) if experiment else None,
            last_measurement=latest[0] if latest else None,
        )
        await self.load_sensor_chart(sensor_id, period, token)

    async def load_sensor_chart(self, sensor_id: str, period: str, token: InitToken) -> None:
        """Load the sensor chart for ``period``."""
        panel = self.root.query_one(SensorDetailPanel)
        panel.set_period(period)
        try:
            measurements = await self.api.fetch_measurements(
                sensorId=sensor_id, period=period, limit=PERIOD_LIMITS.get(period, PERIOD_LIMITS["24h"])
            )
        except ApiError as e:
            if token.is_current():
                panel.show_error(f"Could not load measurements: {e}")
            return
        if not token.is_current():
            return
        panel.show_measurements(measurements, series_by_type(measurements))
