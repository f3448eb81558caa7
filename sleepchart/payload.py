"""Parsing of sleep API payloads into model values.

The payloads arrive already fetched; nothing here talks to the network. A
structurally wrong payload raises InvalidPayloadError, but individual bad
entries are dropped (or, for values, treated as missing readings) so a single
corrupt sample doesn't take the whole chart down.
"""

import logging
import math
from dataclasses import dataclass, field
from typing import Any, Optional

import pandas as pd

from sleepchart.config import DISPLAY_TIMEZONE, MAX_HEART_RATE_BPM
from sleepchart.models import RestingHeartRateEntry, Sample, SleepInterval, SleepStage
from sleepchart.timestamps import parse_timestamp, to_epoch_ms

logger = logging.getLogger(__name__)


class InvalidPayloadError(ValueError):
    """Raised when a payload doesn't have the expected overall shape."""
    pass


@dataclass(frozen=True)
class SleepMetadata:
    """Session summary; any field may be missing from the response."""
    start_time: Optional[pd.Timestamp]
    end_time: Optional[pd.Timestamp]
    total_awake_time_minutes: Optional[float]

    def to_dict(self) -> dict:
        return {
            "startTime": to_epoch_ms(self.start_time) if self.start_time is not None else None,
            "endTime": to_epoch_ms(self.end_time) if self.end_time is not None else None,
            "totalAwakeTimeMinutes": self.total_awake_time_minutes,
        }


@dataclass(frozen=True)
class SleepPayload:
    """One sleep session as returned by the sleep data endpoint."""
    heart_rate: list[Sample] = field(default_factory=list)
    sleep_stages: list[SleepInterval] = field(default_factory=list)
    resting_heart_rate: Optional[float] = None
    metadata: Optional[SleepMetadata] = None


def _parse_number(value: Any) -> Optional[float]:
    if value is None or isinstance(value, bool):
        return None
    try:
        number = float(value)
    except (TypeError, ValueError):
        return None
    if math.isnan(number) or math.isinf(number):
        return None
    return number


def _parse_heart_rate(value: Any) -> Optional[float]:
    number = _parse_number(value)
    if number is not None and abs(number) > MAX_HEART_RATE_BPM:
        logger.warning(f"Treating implausible heart rate {number!r} as a missing reading")
        return None
    return number


def _parse_optional_timestamp(value: Any, tz: str) -> Optional[pd.Timestamp]:
    if value is None:
        return None
    try:
        return parse_timestamp(value, tz)
    except ValueError:
        logger.warning(f"Ignoring invalid metadata timestamp: {value!r}")
        return None


def _require_list(data: dict, key: str) -> list:
    items = data.get(key)
    if items is None:
        return []
    if not isinstance(items, list):
        raise InvalidPayloadError(f"'{key}' must be a list, got {type(items).__name__}")
    return items


def _parse_sample(item: Any, tz: str) -> Optional[Sample]:
    if not isinstance(item, dict):
        logger.warning(f"Dropping heart rate entry that is not an object: {item!r}")
        return None
    try:
        time = parse_timestamp(item.get("time"), tz)
    except ValueError as e:
        logger.warning(f"Dropping heart rate entry: {e}")
        return None
    return Sample(time=time, value=_parse_heart_rate(item.get("value")))


def _parse_sleep_interval(item: Any, tz: str) -> Optional[SleepInterval]:
    if not isinstance(item, dict):
        logger.warning(f"Dropping sleep stage entry that is not an object: {item!r}")
        return None
    try:
        start_time = parse_timestamp(item.get("startTime"), tz)
        if item.get("endTime") is not None:
            end_time = parse_timestamp(item.get("endTime"), tz)
        else:
            # Older responses only carry the duration
            duration = _parse_number(item.get("durationSeconds"))
            if duration is None:
                raise ValueError("missing both endTime and durationSeconds")
            end_time = start_time + pd.Timedelta(seconds=duration)
    except (ValueError, OverflowError) as e:
        logger.warning(f"Dropping sleep stage entry: {e}")
        return None

    if end_time <= start_time:
        logger.warning(f"Dropping sleep stage entry with empty range: {start_time} - {end_time}")
        return None

    return SleepInterval(
        stage=SleepStage.from_label(item.get("level")),
        start_time=start_time,
        end_time=end_time,
    )


def _parse_metadata(data: Any, tz: str) -> Optional[SleepMetadata]:
    if not isinstance(data, dict):
        return None
    return SleepMetadata(
        start_time=_parse_optional_timestamp(data.get("startTime"), tz),
        end_time=_parse_optional_timestamp(data.get("endTime"), tz),
        total_awake_time_minutes=_parse_number(data.get("totalAwakeTimeMinutes")),
    )


def parse_sleep_payload(data: Any, tz: str = DISPLAY_TIMEZONE) -> SleepPayload:
    """Parse a sleep data response.

    Expected shape::

        {
            "metadata": {"startTime": ..., "endTime": ..., "totalAwakeTimeMinutes": ...},
            "sleepStages": [{"level": "deep", "startTime": ..., "endTime": ..., "durationSeconds": ...}],
            "heartRate": [{"time": ..., "value": 58}],
            "restingHeartRate": 54
        }

    Every key is optional. Entry order is preserved; in particular sleep stages
    keep their API order, which decides overlaps when merging.

    Args:
        data: Decoded JSON body.
        tz: Timezone for timestamps that carry no UTC offset.

    Returns:
        SleepPayload with the entries that could be parsed.

    Raises:
        InvalidPayloadError: If data is not an object or a list field isn't a list.
    """
    if not isinstance(data, dict):
        raise InvalidPayloadError(f"Sleep payload must be an object, got {type(data).__name__}")

    samples = [
        sample for sample in (_parse_sample(item, tz) for item in _require_list(data, "heartRate"))
        if sample is not None
    ]
    intervals = [
        interval for interval in (_parse_sleep_interval(item, tz) for item in _require_list(data, "sleepStages"))
        if interval is not None
    ]

    return SleepPayload(
        heart_rate=samples,
        sleep_stages=intervals,
        resting_heart_rate=_parse_heart_rate(data.get("restingHeartRate")),
        metadata=_parse_metadata(data.get("metadata"), tz),
    )


def parse_resting_heart_rate(data: Any, tz: str = DISPLAY_TIMEZONE) -> list[RestingHeartRateEntry]:
    """Parse a resting heart rate history: [{"date": "2025-11-01", "restingHeartRate": 54}, ...].

    Entries with an unparseable date or a missing value are dropped.

    Raises:
        InvalidPayloadError: If data is not a list.
    """
    if not isinstance(data, list):
        raise InvalidPayloadError(f"Resting heart rate history must be a list, got {type(data).__name__}")

    entries: list[RestingHeartRateEntry] = []
    for item in data:
        if not isinstance(item, dict):
            logger.warning(f"Dropping resting heart rate entry that is not an object: {item!r}")
            continue
        value = _parse_heart_rate(item.get("restingHeartRate"))
        if value is None:
            logger.warning(f"Dropping resting heart rate entry without a value: {item!r}")
            continue
        try:
            day = parse_timestamp(item.get("date"), tz)
        except ValueError as e:
            logger.warning(f"Dropping resting heart rate entry: {e}")
            continue
        entries.append(RestingHeartRateEntry(date=day, resting_heart_rate=value))
    return entries
