"""
SteamCity TUI Screens

Modal screens shown over the dashboard.
"""

from .help import HelpScreen

__all__ = ["HelpScreen"]
