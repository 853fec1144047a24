"""
Help Screen

Displays keybinding help and the address syntax.
"""

from __future__ import annotations

from textual.app import ComposeResult
from textual.binding import Binding
from textual.containers import Container, VerticalScroll
from textual.screen import ModalScreen
from textual.widgets import Static

HELP_TEXT = """\
[bold]SteamCity TUI - Keyboard Shortcuts[/bold]

[bold underline]Global[/bold underline]
  [cyan]q[/]           Quit application
  [cyan]?[/]           Show this help
  [cyan]1[/]-[cyan]4[/]         Map, Experiments, Sensors, Data
  [cyan]b[/] / [cyan]f[/]       Back / forward through history
  [cyan]Ctrl+L[/]      Edit the address

[bold underline]Lists[/bold underline]
  [cyan]↓[/] / [cyan]↑[/]       Move
  [cyan]Enter[/]       Open the selected row

[bold underline]Detail views[/bold underline]
  [cyan]Backspace[/]   Back to the list
  [cyan]p[/]           Next period (24h, 7d, 30d, all)
  [cyan]d[/]           Data of the sensor's experiment
  [cyan]e[/]           Open the sensor's experiment

[bold underline]Addresses[/bold underline]
  #/map
  #/experiments?protocol=energy&status=active
  #/experiments/<id>
  #/sensors/<id>?period=7d
  #/data/<experimentId>?period=30d

Press [cyan]Esc[/] or [cyan]?[/] to close this help.
"""


class HelpScreen(ModalScreen[None]):
    """Modal screen displaying help information."""

    BINDINGS = [
        Binding("escape", "dismiss", "Close", show=True),
        Binding("question_mark", "dismiss", "Close", show=False),
    ]

    DEFAULT_CSS = """
    HelpScreen {
        align: center middle;
    }

    HelpScreen > Container {
        width: 64;
        height: auto;
        max-height: 80%;
        background: $surface;
        border: solid $primary;
        padding: 1 2;
    }

    HelpScreen Static {
        width: 100%;
    }
    """

    def compose(self) -> ComposeResult:
        """Compose the help screen."""
        yield Container(
            VerticalScroll(
                Static(HELP_TEXT),
            ),
        )

    async def action_dismiss(self, result: None = None) -> None:
        """Dismiss the help screen."""
        self.dismiss(result)
