"""
SteamCity - Terminal dashboard for browsing IoT experiment and sensor data.

The navigation core maps address fragments such as
``#/experiments/exp-001?status=active`` to a single visible surface.

Examples:
    >>> from steamcity.navigation import decode
    >>> decode("#/sensors/sensor-123?period=30d").id
    'sensor-123'
"""

from steamcity.navigation import NavigationHistory, Route, Router, ViewCoordinator, ViewName, decode, encode

__version__ = "0.1.0"
__all__ = [
    "NavigationHistory",
    "Route",
    "Router",
    "ViewCoordinator",
    "ViewName",
    "decode",
    "encode",
]
