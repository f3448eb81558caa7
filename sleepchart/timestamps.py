"""Timestamp parsing and conversion helpers. No external API dependencies."""

import numbers
from datetime import datetime
from typing import Union

import pandas as pd

from sleepchart.config import DISPLAY_TIMEZONE

TimestampLike = Union[str, datetime, pd.Timestamp, int, float]

_EPOCH = pd.Timestamp("1970-01-01", tz="UTC")
_ONE_MS = pd.Timedelta(milliseconds=1)


def validate_timezone(tz: str) -> str:
    """Return the timezone name unchanged, or raise ValueError if pandas can't resolve it."""
    try:
        pd.Timestamp(0, tz=tz)
    except (KeyError, ValueError, TypeError) as e:
        raise ValueError(f"Unknown timezone: {tz!r}") from e
    return tz


def parse_timestamp(value: TimestampLike, tz: str = DISPLAY_TIMEZONE) -> pd.Timestamp:
    """Parse a timestamp into a timezone-aware pd.Timestamp.

    Accepts ISO-8601 strings, datetime / pd.Timestamp objects and epoch
    milliseconds. The sleep API reports wall-clock times without an offset, so
    naive values are localized to ``tz``.

    Raises:
        ValueError: If the value is missing, unparseable, or names a wall-clock
            time that is ambiguous or doesn't exist in ``tz`` (DST transitions).
    """
    if value is None or isinstance(value, bool):
        raise ValueError(f"Invalid timestamp: {value!r}")

    try:
        if isinstance(value, numbers.Real):
            ts = pd.Timestamp(value, unit="ms", tz="UTC")
        else:
            ts = pd.Timestamp(value)
            if not pd.isna(ts) and ts.tzinfo is None:
                ts = ts.tz_localize(tz, ambiguous="NaT", nonexistent="NaT")
    except (TypeError, ValueError) as e:
        raise ValueError(f"Invalid timestamp: {value!r}") from e

    if pd.isna(ts):
        raise ValueError(f"Invalid timestamp: {value!r}")
    return ts


def to_timestamp(value: TimestampLike, tz: str = DISPLAY_TIMEZONE) -> pd.Timestamp:
    """Like parse_timestamp, but passes timezone-aware timestamps through untouched."""
    if isinstance(value, pd.Timestamp) and value.tzinfo is not None:
        return value
    return parse_timestamp(value, tz)


def to_epoch_ms(ts: pd.Timestamp) -> int:
    """Exact integer epoch milliseconds for a timezone-aware timestamp."""
    return int((ts - _EPOCH) // _ONE_MS)
