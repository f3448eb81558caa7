"""Merging smoothed heart rate with sleep stages, plus axis helpers. No external API dependencies."""

import logging
from typing import Optional, Sequence

import numpy as np
import pandas as pd

from sleepchart.config import (
    DISPLAY_TIMEZONE,
    HEART_RATE_FALLBACK_MAX,
    HEART_RATE_FALLBACK_MIN,
    TICK_INTERVAL_MINUTES,
)
from sleepchart.models import (
    CombinedPoint,
    HeartRateDomain,
    Sample,
    SleepInterval,
    stage_info,
)
from sleepchart.timestamps import TimestampLike, to_epoch_ms, to_timestamp

logger = logging.getLogger(__name__)


def samples_to_dataframe(samples: Sequence[Sample]) -> pd.DataFrame:
    """Convert samples to a DataFrame with a UTC 'time' column and a float 'value' column (NaN for gaps)."""
    if not samples:
        return pd.DataFrame(
            {
                "time": pd.Series([], dtype="datetime64[ns, UTC]"),
                "value": pd.Series([], dtype="float64"),
            }
        )
    return pd.DataFrame({
        "time": pd.to_datetime([s.time for s in samples], utc=True),
        "value": np.array(
            [np.nan if s.value is None else s.value for s in samples],
            dtype=np.float64,
        ),
    })


def merge_timeline(
    smoothed: Sequence[Sample],
    intervals: Sequence[SleepInterval],
    resting_heart_rate: Optional[float] = None,
) -> list[CombinedPoint]:
    """Merge smoothed heart rate with sleep stage intervals.

    Produces exactly one CombinedPoint per smoothed sample; the heart rate
    timeline is the spine and no timestamps are added or dropped.

    A point is covered by an interval when start_time <= time < end_time. When
    several intervals cover the same point, the one that comes last in
    ``intervals`` wins. Intervals with an UNKNOWN stage are skipped.

    Note: This is O(n_samples * n_intervals), same as filtering samples by
    sleep period. One night has a few dozen stage intervals at most, so the
    per-interval boolean mask is cheap enough.

    Args:
        smoothed: Smoothed heart rate samples (see calculate_rolling_average).
        intervals: Sleep stage intervals in the order reported by the API.
        resting_heart_rate: Baseline copied onto every point, if known.

    Returns:
        List of CombinedPoint in the same order as ``smoothed``.
    """
    if not smoothed:
        return []

    intervals = list(intervals)
    hr_df = samples_to_dataframe(smoothed)

    # Index of the interval that owns each point (-1 = not in any interval)
    owner = np.full(len(hr_df), -1, dtype=np.int64)
    for index, interval in enumerate(intervals):
        if stage_info(interval.stage) is None:
            logger.debug(
                f"Skipping sleep interval with unknown stage "
                f"({interval.start_time} - {interval.end_time})"
            )
            continue
        in_interval = (
            (hr_df["time"] >= interval.start_time) & (hr_df["time"] < interval.end_time)
        ).to_numpy()
        owner[in_interval] = index

    points: list[CombinedPoint] = []
    for time, value, interval_index in zip(hr_df["time"], hr_df["value"], owner):
        info = stage_info(intervals[interval_index].stage) if interval_index >= 0 else None
        points.append(CombinedPoint(
            time=to_epoch_ms(time),
            heart_rate=None if np.isnan(value) else float(value),
            resting_heart_rate=resting_heart_rate,
            sleep_stage=info.level if info else None,
            sleep_color=info.color if info else None,
        ))
    return points


def heart_rate_domain(smoothed: Sequence[Sample]) -> HeartRateDomain:
    """Min/max over the non-missing smoothed values.

    Falls back to (HEART_RATE_FALLBACK_MIN, HEART_RATE_FALLBACK_MAX) when there
    are no valid values, so the chart always gets a finite, non-empty range.
    """
    values = samples_to_dataframe(smoothed)["value"].dropna()
    if values.empty:
        return HeartRateDomain(min=HEART_RATE_FALLBACK_MIN, max=HEART_RATE_FALLBACK_MAX)
    return HeartRateDomain(min=float(values.min()), max=float(values.max()))


def generate_time_ticks(
    start: TimestampLike,
    end: TimestampLike,
    interval_minutes: int = TICK_INTERVAL_MINUTES,
    tz: str = DISPLAY_TIMEZONE,
) -> list[int]:
    """Axis ticks on a fixed minute grid between two instants.

    The first tick is the earliest grid point >= start on the wall clock of
    ``tz``; each following tick is exactly ``interval_minutes`` later, up to
    and including ``end``. E.g. 23:47 -> 01:12 with a 15 minute grid gives
    00:00, 00:15, 00:30, 00:45, 01:00.

    Args:
        start: First timestamp of the series (epoch ms or timestamp).
        end: Last timestamp of the series (epoch ms or timestamp).
        interval_minutes: Grid spacing in minutes.
        tz: Timezone whose wall clock the grid is aligned to.

    Returns:
        Tick instants as epoch milliseconds. Empty if no grid point falls in
        [start, end].
    """
    freq = f"{interval_minutes}min"
    start_ts = to_timestamp(start, tz).tz_convert(tz)
    end_ts = to_timestamp(end, tz).tz_convert(tz)

    # Keep the start's DST flag when rounding through a repeated wall-clock hour
    first = start_ts.ceil(freq, ambiguous=bool(start_ts.dst()), nonexistent="shift_forward")
    if first > end_ts:
        return []

    ticks = pd.date_range(start=first, end=end_ts, freq=freq)
    return [to_epoch_ms(tick) for tick in ticks]


def timeline_ticks(
    points: Sequence[CombinedPoint],
    interval_minutes: int = TICK_INTERVAL_MINUTES,
    tz: str = DISPLAY_TIMEZONE,
) -> list[int]:
    """Ticks spanning a merged timeline, from its first to its last point."""
    if not points:
        return []
    return generate_time_ticks(points[0].time, points[-1].time, interval_minutes, tz)
