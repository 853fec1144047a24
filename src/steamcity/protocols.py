"""Protocol (cluster) colors, labels and icons used across the dashboard."""

from __future__ import annotations

PROTOCOL_COLORS = {
    "governance": "#e74c3c",
    "environmental": "#27ae60",
    "mobility": "#3498db",
    "energy": "#f39c12",
    "technology": "#9b59b6",
    "other": "#95a5a6",
}

_PROTOCOL_LABELS = {
    "environmental": "Environmental quality, climate and well-being",
    "energy": "Energy savings",
    "mobility": "Mobility",
    "governance": "Governance and citizenship",
    "technology": "AI and technologies",
}

_PROTOCOL_ICONS = {
    "environmental": "🌱",
    "energy": "⚡",
    "mobility": "🚗",
    "governance": "🏛️",
    "technology": "💻",
}


def protocol_key(protocol: str | None) -> str:
    """Normalize a protocol name to one of the color keys, or ``other``."""
    key = (protocol or "").strip().lower()
    return key if key in PROTOCOL_COLORS else "other"


def get_protocol_color(protocol: str | None) -> str:
    return PROTOCOL_COLORS[protocol_key(protocol)]


def get_protocol_label(protocol: str | None) -> str:
    """Label of a protocol, or the protocol itself when unknown."""
    if not protocol:
        return "-"
    return _PROTOCOL_LABELS.get(protocol.strip().lower(), protocol)


def get_protocol_icon(protocol: str | None) -> str:
    """Icon of a protocol, or a clipboard when unknown."""
    return _PROTOCOL_ICONS.get((protocol or "").strip().lower(), "📋")
