"""Value types shared by the smoothing, merge and chart modules."""

from dataclasses import dataclass
from enum import Enum
from typing import Optional

import pandas as pd


class SleepStage(str, Enum):
    """Sleep stage labels reported by the sleep API."""
    WAKE = "wake"
    LIGHT = "light"
    REM = "rem"
    DEEP = "deep"
    UNKNOWN = "unknown"  # Any label outside the four stages above (e.g. classic "restless")

    @classmethod
    def from_label(cls, label: object) -> "SleepStage":
        """Map an API label to a stage. Unrecognized labels become UNKNOWN."""
        try:
            return cls(str(label).strip().lower())
        except ValueError:
            return cls.UNKNOWN


@dataclass(frozen=True)
class StageInfo:
    """How a sleep stage is drawn: bar height on the stage axis and fill color."""
    level: int
    color: str


# Levels run from most restful (deep=1) to least (wake=4)
STAGE_INFO: dict[SleepStage, StageInfo] = {
    SleepStage.WAKE: StageInfo(level=4, color="#c084fc"),   # light purple
    SleepStage.LIGHT: StageInfo(level=3, color="#a855f7"),  # medium purple
    SleepStage.REM: StageInfo(level=2, color="#7c3aed"),    # deeper purple
    SleepStage.DEEP: StageInfo(level=1, color="#5b21b6"),   # dark purple
}


def stage_info(stage: SleepStage) -> Optional[StageInfo]:
    """Plot level and color for a stage, None for SleepStage.UNKNOWN."""
    if stage is SleepStage.UNKNOWN:
        return None
    return STAGE_INFO[stage]


def stage_for_level(level: object) -> Optional[SleepStage]:
    for stage, info in STAGE_INFO.items():
        if info.level == level:
            return stage
    return None


@dataclass(frozen=True)
class Sample:
    """A timestamped heart rate reading. value is None for a missing reading."""
    time: pd.Timestamp
    value: Optional[float]


@dataclass(frozen=True)
class SleepInterval:
    """A sleep stage over the half-open range [start_time, end_time)."""
    stage: SleepStage
    start_time: pd.Timestamp
    end_time: pd.Timestamp


@dataclass(frozen=True)
class CombinedPoint:
    """One instant on the merged heart rate / sleep stage timeline."""
    time: int  # epoch milliseconds
    heart_rate: Optional[float] = None
    resting_heart_rate: Optional[float] = None
    sleep_stage: Optional[int] = None
    sleep_color: Optional[str] = None

    def to_dict(self) -> dict:
        """Renderer shape; absent fields are omitted rather than sent as null."""
        record: dict = {"time": self.time}
        if self.heart_rate is not None:
            record["heartRate"] = self.heart_rate
        if self.resting_heart_rate is not None:
            record["restingHeartRate"] = self.resting_heart_rate
        if self.sleep_stage is not None:
            record["sleepStage"] = self.sleep_stage
            record["sleepColor"] = self.sleep_color
        return record


@dataclass(frozen=True)
class HeartRateDomain:
    min: float
    max: float


@dataclass(frozen=True)
class RestingHeartRateEntry:
    """Resting heart rate reported for one day."""
    date: pd.Timestamp
    resting_heart_rate: float


@dataclass(frozen=True)
class RestingHeartRatePoint:
    date: int  # epoch milliseconds
    resting_heart_rate: float

    def to_dict(self) -> dict:
        return {"date": self.date, "restingHeartRate": self.resting_heart_rate}
