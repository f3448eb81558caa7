"""Heart rate smoothing. No external API dependencies."""

from typing import Sequence

import numpy as np

from sleepchart.models import Sample


def calculate_rolling_average(samples: Sequence[Sample], window_size: int) -> list[Sample]:
    """Centered moving average over samples that may contain gaps.

    The window for index i is [i - floor(w/2), i + ceil(w/2)) clamped to the
    sequence, so for an even window it reaches one sample further into the
    future than into the past. Missing readings (None) are excluded from the
    mean; a window with no readings at all yields None rather than a number.

    Samples are expected in ascending time order; they are not re-sorted here.
    This is a direct O(n * w) computation, which is fine for the window sizes
    used by the chart (<= 9). Each window is summed with the builtin sum(), so
    a mean equals sum(values) / len(values) over the same readings, whatever
    the window size.

    Args:
        samples: Heart rate samples sorted by time.
        window_size: Number of samples in the window. Values <= 1 return the
            input unchanged.

    Returns:
        List of samples with the same length and timestamps as the input.
    """
    if not samples:
        return []
    if window_size <= 1:
        return list(samples)

    values = np.array(
        [np.nan if s.value is None else s.value for s in samples],
        dtype=np.float64,
    )
    n = len(values)
    left = window_size // 2
    right = window_size - left  # ceil(window_size / 2)

    smoothed: list[Sample] = []
    for i, sample in enumerate(samples):
        window = values[max(0, i - left):min(n, i + right)]
        valid = window[~np.isnan(window)]
        value = sum(valid.tolist()) / len(valid) if len(valid) > 0 else None
        smoothed.append(Sample(time=sample.time, value=value))
    return smoothed
