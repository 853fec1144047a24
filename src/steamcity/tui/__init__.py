"""
SteamCity Terminal UI Dashboard

A terminal-based dashboard using the Textual framework for browsing
experiments, sensors and measurements.
"""

from __future__ import annotations

from steamcity.config import DashboardSettings


def run_tui(settings: DashboardSettings | None = None, initial_fragment: str | None = None) -> None:
    """Run the SteamCity TUI application.

    Args:
        settings: Dashboard settings. Defaults to the environment.
        initial_fragment: Address to open, e.g. ``#/sensors/s-1``.
    """
    from steamcity.tui.app import SteamCityTUIApp

    app = SteamCityTUIApp(settings=settings, initial_fragment=initial_fragment)
    app.run()


__all__ = ["run_tui"]
