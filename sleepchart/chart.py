"""Chart assembly: turns parsed payloads into the series the dashboard plots."""

import logging
from dataclasses import dataclass
from typing import Optional, Sequence

from sleepchart.config import (
    DISPLAY_TIMEZONE,
    HEART_RATE_AXIS_FLOOR,
    HEART_RATE_AXIS_PADDING,
    RESTING_HEART_RATE_PADDING,
    SMOOTHING_WINDOW_SIZE,
    TICK_INTERVAL_MINUTES,
)
from sleepchart.models import (
    CombinedPoint,
    HeartRateDomain,
    RestingHeartRateEntry,
    RestingHeartRatePoint,
    Sample,
    stage_for_level,
)
from sleepchart.payload import SleepMetadata, SleepPayload
from sleepchart.smoothing import calculate_rolling_average
from sleepchart.timeline import heart_rate_domain, merge_timeline, timeline_ticks
from sleepchart.timestamps import to_epoch_ms

logger = logging.getLogger(__name__)

# Stage axis: one tick per stage level, half a level of margin on each side
STAGE_AXIS_TICKS = (1, 2, 3, 4)
STAGE_AXIS_DOMAIN = (0.5, 4.5)


@dataclass(frozen=True)
class SleepChartData:
    """Everything the sleep chart needs for one night."""
    points: list[CombinedPoint]
    ticks: list[int]
    heart_rate_domain: HeartRateDomain
    heart_rate_axis: tuple[float, float]
    metadata: Optional[SleepMetadata] = None

    def to_dict(self) -> dict:
        return {
            "data": [point.to_dict() for point in self.points],
            "ticks": self.ticks,
            "heartRateDomain": {
                "min": self.heart_rate_domain.min,
                "max": self.heart_rate_domain.max,
            },
            "heartRateAxis": list(self.heart_rate_axis),
            "stageAxis": {
                "domain": list(STAGE_AXIS_DOMAIN),
                "ticks": [
                    {"level": level, "label": stage_axis_label(level)}
                    for level in STAGE_AXIS_TICKS
                ],
            },
            "metadata": self.metadata.to_dict() if self.metadata is not None else None,
        }


@dataclass(frozen=True)
class RestingHeartRateChartData:
    """Resting heart rate history. domain is None when there are no entries."""
    points: list[RestingHeartRatePoint]
    domain: Optional[tuple[float, float]]

    def to_dict(self) -> dict:
        return {
            "data": [point.to_dict() for point in self.points],
            "domain": list(self.domain) if self.domain is not None else None,
        }


def stage_axis_label(level: object) -> str:
    """Upper-case stage name for a stage axis level, '' for levels without a stage."""
    stage = stage_for_level(level)
    return stage.value.upper() if stage is not None else ""


def ensure_sorted(samples: Sequence[Sample]) -> list[Sample]:
    """Return samples in ascending time order.

    Smoothing and merging assume sorted input. Already-sorted input is passed
    through as is; otherwise a stable sort is applied and a warning logged,
    since out-of-order samples usually mean an upstream paging problem.
    """
    samples = list(samples)
    if all(a.time <= b.time for a, b in zip(samples, samples[1:])):
        return samples
    logger.warning(f"Heart rate samples were not in time order; sorting {len(samples)} samples")
    return sorted(samples, key=lambda s: s.time)


def build_sleep_chart(
    payload: SleepPayload,
    window_size: int = SMOOTHING_WINDOW_SIZE,
    tz: str = DISPLAY_TIMEZONE,
    tick_interval_minutes: int = TICK_INTERVAL_MINUTES,
) -> SleepChartData:
    """Build the sleep chart series for one sleep session.

    Sorts heart rate samples if needed, smooths them, merges the sleep stages
    on top and derives ticks and the heart rate axis range.

    Args:
        payload: Parsed sleep payload (see parse_sleep_payload).
        window_size: Smoothing window in samples.
        tz: Timezone the tick grid is aligned to.
        tick_interval_minutes: Spacing of the time axis ticks.

    Returns:
        SleepChartData. With no heart rate samples, points and ticks are empty
        and the domain is the fallback range.
    """
    samples = ensure_sorted(payload.heart_rate)
    smoothed = calculate_rolling_average(samples, window_size)
    points = merge_timeline(smoothed, payload.sleep_stages, payload.resting_heart_rate)
    domain = heart_rate_domain(smoothed)

    logger.info(
        f"Built sleep chart: {len(points)} points, {len(payload.sleep_stages)} stage intervals, "
        f"window {window_size}"
    )

    return SleepChartData(
        points=points,
        ticks=timeline_ticks(points, tick_interval_minutes, tz),
        heart_rate_domain=domain,
        heart_rate_axis=(HEART_RATE_AXIS_FLOOR, domain.max + HEART_RATE_AXIS_PADDING),
        metadata=payload.metadata,
    )


def build_resting_heart_rate_chart(
    entries: Sequence[RestingHeartRateEntry],
    padding: float = RESTING_HEART_RATE_PADDING,
) -> RestingHeartRateChartData:
    """Resting heart rate history points with a domain padded by ``padding`` bpm on both ends."""
    points = [
        RestingHeartRatePoint(date=to_epoch_ms(entry.date), resting_heart_rate=entry.resting_heart_rate)
        for entry in entries
    ]
    if not points:
        return RestingHeartRateChartData(points=[], domain=None)

    values = [point.resting_heart_rate for point in points]
    return RestingHeartRateChartData(
        points=points,
        domain=(min(values) - padding, max(values) + padding),
    )
