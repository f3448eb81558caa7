"""Pytest configuration and shared fixtures for tests."""

import json
import os
from pathlib import Path

import pandas as pd
import pytest

# Pin configuration so a local .env can't change expected values
os.environ["DISPLAY_TIMEZONE"] = "UTC"
os.environ["SMOOTHING_WINDOW_SIZE"] = "9"
os.environ["TICK_INTERVAL_MINUTES"] = "15"

from sleepchart.models import Sample  # noqa: E402

FIXTURES_DIR = Path(__file__).parent / "fixtures"


def make_samples(start: str, values: list, minutes: int = 5) -> list[Sample]:
    """Build samples spaced ``minutes`` apart starting at ``start`` (UTC)."""
    first = pd.Timestamp(start, tz="UTC")
    return [
        Sample(time=first + pd.Timedelta(minutes=minutes * i), value=value)
        for i, value in enumerate(values)
    ]


@pytest.fixture
def sleep_fixture_data() -> dict:
    """Load the sleep payload fixture."""
    with open(FIXTURES_DIR / "sleep_2025-10-31.json") as f:
        return json.load(f)


@pytest.fixture
def heartrate_data_list(sleep_fixture_data: dict) -> list[dict]:
    """Get the list of heart rate records from the sleep fixture."""
    return sleep_fixture_data["heartRate"]


@pytest.fixture
def sleep_stages_list(sleep_fixture_data: dict) -> list[dict]:
    """Get the list of sleep stage records from the sleep fixture."""
    return sleep_fixture_data["sleepStages"]


@pytest.fixture
def resting_heart_rate_fixture_data() -> list[dict]:
    """Load the resting heart rate history fixture."""
    with open(FIXTURES_DIR / "resting_heart_rate_2025-10-27_2025-11-01.json") as f:
        return json.load(f)
