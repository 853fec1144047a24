"""
Router

Maps the address fragment held by a NavigationHistory to one of four
typed callbacks, and writes history entries for programmatic navigation.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Mapping
from typing import Any

from steamcity.exceptions import InvalidRouteError
from steamcity.navigation.codec import EMPTY_FRAGMENTS, decode, encode
from steamcity.navigation.history import HistoryEvent, NavigationHistory
from steamcity.navigation.models import DEFAULT_ROUTE, Route, ViewName

logger = logging.getLogger(__name__)

ViewChangeCallback = Callable[[ViewName, bool], Any]
DetailCallback = Callable[[str, bool], Any]
DataViewCallback = Callable[[str | None, bool], Any]


def _noop(*_args: Any) -> None:
    return None


class Router:
    """Client-side router over a navigation history.

    Callbacks receive ``(target, update_url)``. ``update_url`` is always
    False when the router dispatches, since the address already holds the
    route by the time a callback runs; it is threaded through for
    callers that reuse the callbacks directly.
    """

    def __init__(
        self,
        history: NavigationHistory,
        *,
        on_view_change: ViewChangeCallback | None = None,
        on_experiment_detail: DetailCallback | None = None,
        on_sensor_detail: DetailCallback | None = None,
        on_data_view: DataViewCallback | None = None,
        dedupe: bool = False,
    ) -> None:
        """Initialize the router.

        Args:
            history: Host history the router reads from and writes to.
            on_view_change: Called with (view, update_url) for the map,
                experiments list and sensors list routes.
            on_experiment_detail: Called with (experiment_id, update_url).
            on_sensor_detail: Called with (sensor_id, update_url).
            on_data_view: Called with (experiment_id or None, update_url).
            dedupe: Skip the history push when navigating to the route
                already in the address. Off by default, so every
                navigation is reachable with the back button.
        """
        self.history = history
        self.on_view_change = on_view_change or _noop
        self.on_experiment_detail = on_experiment_detail or _noop
        self.on_sensor_detail = on_sensor_detail or _noop
        self.on_data_view = on_data_view or _noop
        self.dedupe = dedupe

        self._current_route: Route | None = None
        self._listening = False

    # Lifecycle

    def init(self) -> None:
        """Start listening to history events and resolve the initial address."""
        if not self._listening:
            self.history.add_listener("popstate", self._on_history_event)
            self.history.add_listener("hashchange", self._on_history_event)
            self._listening = True

        if self.history.location_hash in EMPTY_FRAGMENTS:
            self.navigate(ViewName.MAP)
        else:
            self.handle_route(update_url=False)

    def destroy(self) -> None:
        """Stop listening to history events."""
        self.history.remove_listener("popstate", self._on_history_event)
        self.history.remove_listener("hashchange", self._on_history_event)
        self._listening = False

    def _on_history_event(self, event: HistoryEvent) -> None:
        logger.debug("History event %s: %s", event, self.history.location_hash)
        self.handle_route(update_url=False)

    # Navigation

    def update_url(
        self,
        view: ViewName | str,
        id: str | None = None,
        params: Mapping[str, Any] | None = None,
    ) -> Route:
        """Write a history entry for a route without dispatching it.

        Args:
            view: Target section.
            id: Optional experiment or sensor id.
            params: Optional query parameters. None and empty values are dropped.

        Returns:
            The route now held in the address.
        """
        route = Route(
            view=ViewName.parse(view),
            id=id or None,
            params={k: str(v) for k, v in (params or {}).items() if v is not None and v != ""},
        )
        fragment = encode(route, with_marker=True)

        if self.dedupe and fragment == self.history.location_hash:
            logger.debug("Skipping duplicate history entry: %s", fragment)
        else:
            self.history.push_state(
                {"view": route.view.value, "id": route.id, "query_params": dict(route.params)},
                fragment,
            )

        self._current_route = route
        return route

    def navigate(
        self,
        view: ViewName | str,
        id: str | None = None,
        params: Mapping[str, Any] | None = None,
    ) -> None:
        """Navigate to a route: write the address, then dispatch it.

        Dispatch uses the fragment just written rather than waiting for a
        history event, so callbacks have run by the time this returns.
        """
        route = self.update_url(view, id, params)
        self._dispatch(route, update_url=False)

    def handle_route(self, update_url: bool = False) -> None:
        """Decode the live address and dispatch it.

        Unknown views redirect to the map.
        """
        fragment = self.history.location_hash
        try:
            route = decode(fragment)
        except InvalidRouteError:
            logger.debug("Invalid route %r, redirecting to map", fragment)
            self.navigate(ViewName.MAP)
            return

        self._dispatch(route, update_url)

    def _dispatch(self, route: Route, update_url: bool) -> None:
        self._current_route = route

        if route.view is ViewName.MAP:
            self.on_view_change(ViewName.MAP, update_url)
        elif route.view is ViewName.EXPERIMENTS:
            if route.id:
                self.on_experiment_detail(route.id, update_url)
            else:
                self.on_view_change(ViewName.EXPERIMENTS, update_url)
        elif route.view is ViewName.SENSORS:
            if route.id:
                self.on_sensor_detail(route.id, update_url)
            else:
                self.on_view_change(ViewName.SENSORS, update_url)
        elif route.view is ViewName.DATA:
            self.on_data_view(route.id, update_url)

    # Current route

    @property
    def current_route(self) -> Route:
        """Route last written or dispatched (the map before ``init``)."""
        return self._current_route or DEFAULT_ROUTE

    @property
    def current_view(self) -> ViewName | None:
        return self._current_route.view if self._current_route else None

    @property
    def current_id(self) -> str | None:
        return self._current_route.id if self._current_route else None

    def get_current_route(self) -> Route:
        """Return a copy of the current route."""
        route = self.current_route
        return Route(view=route.view, id=route.id, params=dict(route.params))

    # Query parameters

    def get_params(self) -> dict[str, str]:
        """Return a copy of the current query parameters."""
        return dict(self.current_route.params)

    def get_param(self, key: str, default: str | None = None) -> str | None:
        """Return one query parameter, or ``default`` when absent.

        An explicitly empty value is returned as ``""``, not ``default``.
        """
        return self.current_route.params.get(key, default)

    def set_param(self, key: str, value: Any) -> None:
        """Set one query parameter, keeping the current view and id."""
        route = self.current_route
        params = dict(route.params)
        params[key] = value
        self.update_url(route.view, route.id, params)

    def remove_param(self, key: str) -> None:
        """Remove one query parameter, keeping the current view and id."""
        route = self.current_route
        params = dict(route.params)
        params.pop(key, None)
        self.update_url(route.view, route.id, params)

    # Aliases matching the dashboard's URL helpers
    update_url_param = set_param
    remove_url_param = remove_param
