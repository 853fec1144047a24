"""
Navigation history.

An in-process stand-in for the browser's ``location.hash`` and
``history`` objects. The live fragment is the single source of truth;
the state object pushed with each entry is informational only.
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass, field
from typing import Any, Literal


HistoryEvent = Literal["popstate", "hashchange"]
HistoryListener = Callable[[HistoryEvent], None]


@dataclass
class HistoryEntry:
    """One entry of the navigation history."""

    fragment: str
    state: dict[str, Any] | None = None


@dataclass
class NavigationHistory:
    """Browser-like session history.

    ``push_state`` writes an entry silently, like ``history.pushState``.
    ``back``/``forward``/``go`` move through entries and fire ``popstate``.
    ``set_hash`` models the user editing the address and fires
    ``hashchange``.
    """

    entries: list[HistoryEntry] = field(default_factory=lambda: [HistoryEntry("")])
    index: int = 0
    _listeners: dict[str, list[HistoryListener]] = field(
        default_factory=lambda: {"popstate": [], "hashchange": []}, repr=False
    )

    @classmethod
    def starting_at(cls, fragment: str) -> NavigationHistory:
        """Create a history whose only entry is ``fragment`` (a deep link)."""
        return cls(entries=[HistoryEntry(_with_marker(fragment))])

    @property
    def location_hash(self) -> str:
        """Current fragment including the leading ``#``, or ``""``."""
        return self.entries[self.index].fragment

    @property
    def state(self) -> dict[str, Any] | None:
        """State object of the current entry."""
        return self.entries[self.index].state

    @property
    def length(self) -> int:
        """Number of entries in the history."""
        return len(self.entries)

    @property
    def can_go_back(self) -> bool:
        return self.index > 0

    @property
    def can_go_forward(self) -> bool:
        return self.index < len(self.entries) - 1

    def add_listener(self, event: HistoryEvent, listener: HistoryListener) -> None:
        """Subscribe ``listener`` to ``event``."""
        self._listeners[event].append(listener)

    def remove_listener(self, event: HistoryEvent, listener: HistoryListener) -> None:
        """Unsubscribe ``listener`` from ``event``. Unknown listeners are ignored."""
        try:
            self._listeners[event].remove(listener)
        except ValueError:
            pass

    def push_state(self, state: dict[str, Any] | None, fragment: str) -> None:
        """Append an entry after the current one and make it current.

        Forward entries are discarded. No event fires.
        """
        del self.entries[self.index + 1 :]
        self.entries.append(HistoryEntry(_with_marker(fragment), state))
        self.index = len(self.entries) - 1

    def replace_state(self, state: dict[str, Any] | None, fragment: str) -> None:
        """Overwrite the current entry. No event fires."""
        self.entries[self.index] = HistoryEntry(_with_marker(fragment), state)

    def go(self, delta: int) -> bool:
        """Move ``delta`` entries through the history.

        Returns:
            True if the position changed and ``popstate`` fired.
        """
        target = self.index + delta
        if delta == 0 or not 0 <= target < len(self.entries):
            return False
        self.index = target
        self._emit("popstate")
        return True

    def back(self) -> bool:
        """Go one entry back."""
        return self.go(-1)

    def forward(self) -> bool:
        """Go one entry forward."""
        return self.go(1)

    def set_hash(self, fragment: str) -> None:
        """Navigate to ``fragment`` as if typed into the address bar.

        Like the browser, setting the current fragment again is a no-op.
        """
        fragment = _with_marker(fragment)
        if fragment == self.location_hash:
            return
        self.push_state(None, fragment)
        self._emit("hashchange")

    def _emit(self, event: HistoryEvent) -> None:
        for listener in list(self._listeners[event]):
            listener(event)


def _with_marker(fragment: str) -> str:
    if not fragment or fragment.startswith("#"):
        return fragment
    return "#" + fragment
