"""Tests for the chart module."""

import logging

import pytest
import pandas as pd

from sleepchart.chart import (
    STAGE_AXIS_DOMAIN,
    STAGE_AXIS_TICKS,
    RestingHeartRateChartData,
    SleepChartData,
    build_resting_heart_rate_chart,
    build_sleep_chart,
    ensure_sorted,
    stage_axis_label,
)
from sleepchart.models import HeartRateDomain, RestingHeartRateEntry, Sample
from sleepchart.payload import SleepPayload, parse_resting_heart_rate, parse_sleep_payload
from sleepchart.smoothing import calculate_rolling_average
from sleepchart.timestamps import to_epoch_ms

from conftest import make_samples


def ms(value: str) -> int:
    return to_epoch_ms(pd.Timestamp(value, tz="UTC"))


class TestStageAxisLabel:
    """Tests for stage_axis_label function."""

    def test_labels_for_each_level(self):
        """Test that every axis tick gets the upper-case stage name."""
        assert [stage_axis_label(level) for level in STAGE_AXIS_TICKS] == ["DEEP", "REM", "LIGHT", "WAKE"]

    @pytest.mark.parametrize("level", [0, 5, None, 2.5])
    def test_unknown_level_is_blank(self, level):
        """Test that levels without a stage get an empty label."""
        assert stage_axis_label(level) == ""


class TestEnsureSorted:
    """Tests for ensure_sorted function."""

    def test_sorted_input_is_unchanged(self, caplog):
        """Test that sorted input is returned as is, without a warning."""
        samples = make_samples("2025-11-01T00:00:00", [60, 61, 62])

        with caplog.at_level(logging.WARNING, logger="sleepchart.chart"):
            result = ensure_sorted(samples)

        assert result == samples
        assert caplog.text == ""

    def test_unsorted_input_is_sorted_with_warning(self, caplog):
        """Test that out-of-order samples are sorted and a warning is logged."""
        samples = make_samples("2025-11-01T00:00:00", [60, 61, 62])
        shuffled = [samples[2], samples[0], samples[1]]

        with caplog.at_level(logging.WARNING, logger="sleepchart.chart"):
            result = ensure_sorted(shuffled)

        assert result == samples
        assert "not in time order" in caplog.text

    def test_sort_is_stable_for_equal_times(self):
        """Test that samples sharing a timestamp keep their relative order."""
        t0 = pd.Timestamp("2025-11-01T00:00:00", tz="UTC")
        t1 = t0 + pd.Timedelta(minutes=5)
        samples = [Sample(t1, 70), Sample(t0, 60), Sample(t0, 61)]

        result = ensure_sorted(samples)

        assert [s.value for s in result] == [60, 61, 70]


class TestBuildSleepChart:
    """Tests for build_sleep_chart function."""

    def test_returns_sleep_chart_data(self, sleep_fixture_data: dict):
        """Test the full pipeline on the fixture night."""
        payload = parse_sleep_payload(sleep_fixture_data)

        chart = build_sleep_chart(payload)

        assert isinstance(chart, SleepChartData)
        assert len(chart.points) == len(sleep_fixture_data["heartRate"])
        assert all(p.resting_heart_rate == 54.0 for p in chart.points)

    def test_fixture_stages(self, sleep_fixture_data: dict):
        """Test stage assignment across the fixture night, including the unknown-label interval."""
        chart = build_sleep_chart(parse_sleep_payload(sleep_fixture_data))
        stages = {p.time: p.sleep_stage for p in chart.points}

        assert stages[ms("2025-10-31T23:45:00")] == 4  # wake
        assert stages[ms("2025-10-31T23:55:00")] == 3  # light starts
        assert stages[ms("2025-11-01T00:05:00")] == 3  # "restless" interval is ignored
        assert stages[ms("2025-11-01T00:25:00")] == 1  # deep starts as light ends
        assert stages[ms("2025-11-01T00:50:00")] == 2  # rem
        assert stages[ms("2025-11-01T01:05:00")] == 4  # wake
        assert stages[ms("2025-11-01T01:15:00")] is None  # end of last interval is exclusive

    def test_fixture_ticks(self, sleep_fixture_data: dict):
        """Test that ticks cover the night on the 15 minute grid."""
        chart = build_sleep_chart(parse_sleep_payload(sleep_fixture_data))

        assert chart.ticks[0] == ms("2025-10-31T23:45:00")
        assert chart.ticks[-1] == ms("2025-11-01T01:15:00")
        assert len(chart.ticks) == 7

    def test_heart_rate_is_smoothed(self, sleep_fixture_data: dict):
        """Test that the chart plots the smoothed, not the raw, heart rate."""
        payload = parse_sleep_payload(sleep_fixture_data)

        chart = build_sleep_chart(payload, window_size=3)
        smoothed = calculate_rolling_average(payload.heart_rate, 3)

        assert [p.heart_rate for p in chart.points] == [s.value for s in smoothed]
        # 23:45 -> mean(64, 63)
        assert chart.points[0].heart_rate == 63.5

    def test_domain_and_axis(self, sleep_fixture_data: dict):
        """Test that the axis runs from the fixed floor to 5 bpm above the smoothed maximum."""
        payload = parse_sleep_payload(sleep_fixture_data)

        chart = build_sleep_chart(payload, window_size=1)

        assert chart.heart_rate_domain == HeartRateDomain(min=52.0, max=65.0)
        assert chart.heart_rate_axis == (45.0, 70.0)

    def test_unsorted_samples_are_sorted_first(self):
        """Test that out-of-order samples are charted in time order."""
        samples = make_samples("2025-11-01T00:00:00", [60, 62, 64])
        payload = SleepPayload(heart_rate=[samples[1], samples[2], samples[0]])

        chart = build_sleep_chart(payload, window_size=1)

        assert [p.time for p in chart.points] == sorted(p.time for p in chart.points)
        assert [p.heart_rate for p in chart.points] == [60.0, 62.0, 64.0]

    def test_empty_payload(self):
        """Test that no heart rate data gives an empty chart with the fallback domain."""
        chart = build_sleep_chart(SleepPayload())

        assert chart.points == []
        assert chart.ticks == []
        assert chart.heart_rate_domain == HeartRateDomain(min=45.0, max=100.0)
        assert chart.heart_rate_axis == (45.0, 105.0)

    def test_to_dict(self, sleep_fixture_data: dict):
        """Test the renderer JSON shape."""
        chart = build_sleep_chart(parse_sleep_payload(sleep_fixture_data))

        result = chart.to_dict()

        assert set(result) == {"data", "ticks", "heartRateDomain", "heartRateAxis", "stageAxis", "metadata"}
        assert result["data"][0]["time"] == ms("2025-10-31T23:45:00")
        assert result["data"][0]["sleepStage"] == 4
        assert result["data"][0]["sleepColor"] == "#c084fc"
        assert "sleepStage" not in result["data"][-1]
        assert result["stageAxis"]["domain"] == list(STAGE_AXIS_DOMAIN)
        assert result["stageAxis"]["ticks"][0] == {"level": 1, "label": "DEEP"}

    def test_session_metadata_is_exposed(self, sleep_fixture_data: dict):
        """Test that session start, end and awake minutes are passed through to the chart."""
        chart = build_sleep_chart(parse_sleep_payload(sleep_fixture_data))

        assert chart.to_dict()["metadata"] == {
            "startTime": ms("2025-10-31T23:45:00"),
            "endTime": ms("2025-11-01T01:15:00"),
            "totalAwakeTimeMinutes": 20.0,
        }

    def test_missing_metadata_is_null(self):
        """Test that a payload without metadata serializes it as null."""
        chart = build_sleep_chart(SleepPayload())

        assert chart.metadata is None
        assert chart.to_dict()["metadata"] is None

    def test_partial_metadata(self):
        """Test that missing metadata fields stay null."""
        payload = parse_sleep_payload({"metadata": {"startTime": "2025-10-31T23:45:00Z"}})

        result = build_sleep_chart(payload).to_dict()

        assert result["metadata"] == {
            "startTime": ms("2025-10-31T23:45:00"),
            "endTime": None,
            "totalAwakeTimeMinutes": None,
        }


class TestBuildRestingHeartRateChart:
    """Tests for build_resting_heart_rate_chart function."""

    def test_points_and_padded_domain(self, resting_heart_rate_fixture_data: list[dict]):
        """Test that points keep input order and the domain is padded by 2 bpm."""
        entries = parse_resting_heart_rate(resting_heart_rate_fixture_data)

        chart = build_resting_heart_rate_chart(entries)

        assert isinstance(chart, RestingHeartRateChartData)
        assert len(chart.points) == 6
        assert chart.points[0].date == ms("2025-10-27T00:00:00")
        assert chart.domain == (51.0, 59.0)

    def test_custom_padding(self):
        """Test a custom padding."""
        entries = [RestingHeartRateEntry(date=pd.Timestamp("2025-11-01", tz="UTC"), resting_heart_rate=55.0)]

        chart = build_resting_heart_rate_chart(entries, padding=5)

        assert chart.domain == (50.0, 60.0)

    def test_empty_history(self):
        """Test that no entries give no points and no domain."""
        chart = build_resting_heart_rate_chart([])

        assert chart.points == []
        assert chart.domain is None
        assert chart.to_dict() == {"data": [], "domain": None}
