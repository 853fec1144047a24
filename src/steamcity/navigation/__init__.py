"""
SteamCity navigation

Route codec, navigation history, router and view coordinator.
"""

from .codec import decode, encode, parse_parts
from .coordinator import ExperimentDetailCallbacks, InitToken, SurfaceHost, ViewCoordinator, ViewInitializer
from .history import NavigationHistory
from .models import DEFAULT_ROUTE, Route, SurfaceId, ViewName
from .router import Router

__all__ = [
    "DEFAULT_ROUTE",
    "ExperimentDetailCallbacks",
    "InitToken",
    "NavigationHistory",
    "Route",
    "Router",
    "SurfaceHost",
    "SurfaceId",
    "ViewCoordinator",
    "ViewInitializer",
    "ViewName",
    "decode",
    "encode",
    "parse_parts",
]
