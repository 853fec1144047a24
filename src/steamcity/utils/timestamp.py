"""Measurement timestamps.

The SteamCity API stamps measurements with ISO 8601 strings such as
``2024-01-15T10:00:00Z``; older exports carry epoch milliseconds instead.
"""

from __future__ import annotations

from datetime import datetime, timezone


def _as_utc(moment: datetime) -> datetime:
    # Naive values are UTC on the API side
    if moment.tzinfo is None:
        return moment.replace(tzinfo=timezone.utc)
    return moment.astimezone(timezone.utc)


def parse_measurement_time(raw: str | int | float | datetime) -> datetime:
    """Turn a measurement ``timestamp`` field into an aware UTC datetime.

    Args:
        raw: ISO 8601 text (a trailing ``Z`` is accepted), epoch
            milliseconds, or a datetime.

    Raises:
        ValueError: For None, blank text, unparsable text or other types.
    """
    if isinstance(raw, datetime):
        return _as_utc(raw)
    if isinstance(raw, bool):
        raise ValueError(f"Not a measurement time: {raw!r}")
    if isinstance(raw, (int, float)):
        return datetime.fromtimestamp(raw / 1000, tz=timezone.utc)
    if raw is None:
        raise ValueError("Measurement time is missing")
    if not isinstance(raw, str):
        raise ValueError(f"Unsupported measurement time type: {type(raw).__name__}")

    text = raw.strip()
    if not text:
        raise ValueError("Measurement time is empty")
    if text.endswith(("Z", "z")):
        text = f"{text[:-1]}+00:00"
    try:
        return _as_utc(datetime.fromisoformat(text))
    except ValueError as exc:
        raise ValueError(f"Not an ISO 8601 measurement time: {raw!r}") from exc
