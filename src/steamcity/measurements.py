"""
Measurement summaries for the data and sensor views.

Measurements arrive from the API as records with ``sensor_type_id``,
``timestamp``, ``value`` and an optional ``quality`` (a number or
``{"score": number}``).
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from dataclasses import dataclass
from datetime import datetime
from typing import Any

import polars as pl

from steamcity.utils.timestamp import parse_measurement_time

_SCHEMA = {
    "sensor_type_id": pl.Utf8,
    "timestamp": pl.Datetime("ms", "UTC"),
    "value": pl.Float64,
    "quality": pl.Float64,
}


@dataclass(frozen=True)
class SensorTypeStats:
    """Statistics for the measurements of one sensor type."""

    sensor_type_id: str
    count: int
    minimum: float
    maximum: float
    mean: float
    median: float


@dataclass(frozen=True)
class GlobalStats:
    """Statistics over every measurement shown."""

    total_measurements: int
    sensor_types: int
    avg_quality: float | None
    time_range: str


def _quality(record: Mapping[str, Any]) -> float | None:
    quality = record.get("quality")
    if isinstance(quality, Mapping):
        quality = quality.get("score")
    try:
        return float(quality) if quality is not None else None
    except (TypeError, ValueError):
        return None


def _value(record: Mapping[str, Any]) -> float | None:
    try:
        return float(record.get("value"))  # type: ignore[arg-type]
    except (TypeError, ValueError):
        return None


def to_frame(measurements: Iterable[Mapping[str, Any]]) -> pl.DataFrame:
    """Convert measurement records to a DataFrame.

    Records whose value is not numeric keep a null value.
    """
    rows = []
    for record in measurements:
        try:
            timestamp = parse_measurement_time(record["timestamp"])
        except (KeyError, ValueError):
            timestamp = None
        rows.append(
            {
                "sensor_type_id": str(record.get("sensor_type_id") or record.get("sensorType") or "unknown"),
                "timestamp": timestamp,
                "value": _value(record),
                "quality": _quality(record),
            }
        )
    return pl.DataFrame(rows, schema=_SCHEMA)


def summarize_by_type(measurements: Iterable[Mapping[str, Any]]) -> list[SensorTypeStats]:
    """Per sensor type min/max/mean/median over numeric values.

    Types without a numeric value are omitted. Ordered by sensor type id.
    """
    df = to_frame(measurements).filter(pl.col("value").is_not_null())
    if df.is_empty():
        return []

    grouped = (
        df.group_by("sensor_type_id")
        .agg(
            pl.len().alias("count"),
            pl.col("value").min().alias("minimum"),
            pl.col("value").max().alias("maximum"),
            pl.col("value").mean().alias("mean"),
            pl.col("value").median().alias("median"),
        )
        .sort("sensor_type_id")
    )
    return [SensorTypeStats(**row) for row in grouped.iter_rows(named=True)]


def format_time_range(oldest: datetime | None, newest: datetime | None) -> str:
    """Format the span between two timestamps as ``2d 5h``, ``3h`` or ``12min``."""
    if oldest is None or newest is None:
        return "N/A"
    seconds = int((newest - oldest).total_seconds())
    days, remainder = divmod(seconds, 86400)
    hours, remainder = divmod(remainder, 3600)
    if days > 0:
        return f"{days}d {hours}h"
    if hours > 0:
        return f"{hours}h"
    return f"{remainder // 60}min"


def global_stats(measurements: Iterable[Mapping[str, Any]]) -> GlobalStats:
    """Totals across every measurement, whatever its sensor type."""
    df = to_frame(measurements)
    if df.is_empty():
        return GlobalStats(total_measurements=0, sensor_types=0, avg_quality=None, time_range="N/A")

    # Measurements without a quality count as fully reliable
    avg_quality = df["quality"].fill_null(1.0).mean()
    timestamps = df["timestamp"].drop_nulls()

    return GlobalStats(
        total_measurements=df.height,
        sensor_types=df["sensor_type_id"].n_unique(),
        avg_quality=float(avg_quality) if avg_quality is not None else None,  # type: ignore[arg-type]
        time_range=format_time_range(timestamps.min(), timestamps.max()),  # type: ignore[arg-type]
    )


def series_by_type(
    measurements: Iterable[Mapping[str, Any]],
    limit: int | None = None,
) -> dict[str, tuple[list[datetime], list[float]]]:
    """Time-ordered (timestamps, values) per sensor type, for charts.

    Args:
        measurements: Measurement records
        limit: Keep only the first ``limit`` sensor types

    Returns:
        Mapping of sensor type id to (timestamps, values).
    """
    df = to_frame(measurements).drop_nulls(["timestamp", "value"]).sort("timestamp")
    series: dict[str, tuple[list[datetime], list[float]]] = {}
    for type_id in sorted(df["sensor_type_id"].unique().to_list()):
        if limit is not None and len(series) >= limit:
            break
        subset = df.filter(pl.col("sensor_type_id") == type_id)
        series[type_id] = (subset["timestamp"].to_list(), subset["value"].to_list())
    return series
