"""Utility modules for steamcity."""

from steamcity.utils.timestamp import parse_measurement_time

__all__ = ["parse_measurement_time"]
