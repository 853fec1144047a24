"""
Navigation Tabs

Section tabs that also report clicks on the tab that is already active.
"""

from __future__ import annotations

from textual.message import Message
from textual.widgets import Tab, Tabs

from steamcity.navigation.models import ViewName


class NavTabs(Tabs):
    """Tabs for the dashboard sections.

    ``Tabs`` only posts ``TabActivated`` when the active tab changes. A click
    on the active tab posts ``Reselected`` instead, so that the section can
    return from a detail surface to its list.
    """

    class Reselected(Message):
        """Message sent when the active section tab is clicked again."""

        def __init__(self, view: ViewName) -> None:
            self.view = view
            super().__init__()

    def on_tab_clicked(self, event: Tab.Clicked) -> None:
        # Runs before Tabs activates the clicked tab
        if event.tab.id and event.tab.id == self.active:
            self.post_message(self.Reselected(ViewName.parse(event.tab.id.removesuffix("-tab"))))
