"""
SteamCity API client

Async access to the experiments, sensors and measurements endpoints.
"""

from .service import ApiService

__all__ = ["ApiService"]
