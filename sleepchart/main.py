import logging
from typing import Any

from fastapi import APIRouter, Body, FastAPI, HTTPException, Query

from sleepchart.config import DISPLAY_TIMEZONE, LOG_LEVEL, SMOOTHING_WINDOW_SIZE

# Configure logging to match uvicorn's format
logging.basicConfig(
    level=LOG_LEVEL,
    format="%(levelname)s:     %(name)s - %(message)s",
)

from sleepchart.chart import build_resting_heart_rate_chart, build_sleep_chart
from sleepchart.payload import parse_resting_heart_rate, parse_sleep_payload
from sleepchart.timestamps import validate_timezone

logger = logging.getLogger(__name__)

charts_router = APIRouter(prefix="/charts", tags=["charts"])

app = FastAPI(
    title="Sleep Chart API",
    description="""
## Sleep Chart API

Turns sleep and heart rate data (already fetched from the health data API)
into the series the dashboard charts plot.

### Features
- **Sleep chart**: smoothed heart rate merged with sleep stages, time axis
  ticks and heart rate axis range
- **Resting heart rate history**: per-day resting heart rate with a padded range
    """,
    version="0.1.0",
    docs_url="/docs",  # Swagger UI
    redoc_url="/redoc",  # ReDoc
    openapi_url="/openapi.json",  # OpenAPI schema
)


@app.get("/health")
async def health():
    """Health check endpoint."""
    return {
        "status": "ok",
        "message": "Sleep Chart API",
        "smoothing_window_size": SMOOTHING_WINDOW_SIZE,
        "display_timezone": DISPLAY_TIMEZONE,
    }


@charts_router.post("/sleep")
async def sleep_chart(
    payload: Any = Body(..., description="Sleep data response: metadata, sleepStages, heartRate, restingHeartRate"),
    window_size: int = Query(SMOOTHING_WINDOW_SIZE, ge=1, description="Smoothing window in samples"),
    tz: str = Query(DISPLAY_TIMEZONE, description="Timezone for offset-less timestamps and tick alignment"),
):
    """
    Build the sleep chart for one sleep session.

    Returns one point per heart rate sample with the smoothed heart rate, the
    resting heart rate and the sleep stage (level and color) at that time,
    plus 15-minute time axis ticks and the heart rate axis range.
    """
    try:
        validate_timezone(tz)
        parsed = parse_sleep_payload(payload, tz)
        chart = build_sleep_chart(parsed, window_size=window_size, tz=tz)
        return chart.to_dict()
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except Exception as e:
        logger.exception("Failed to build sleep chart")
        raise HTTPException(status_code=500, detail=str(e))


@charts_router.post("/resting-heart-rate")
async def resting_heart_rate_chart(
    payload: Any = Body(..., description="List of {date, restingHeartRate} entries"),
    tz: str = Query(DISPLAY_TIMEZONE, description="Timezone for offset-less dates"),
):
    """
    Build the resting heart rate history chart.

    Returns one point per day and the value range padded for display.
    """
    try:
        validate_timezone(tz)
        entries = parse_resting_heart_rate(payload, tz)
        return build_resting_heart_rate_chart(entries).to_dict()
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except Exception as e:
        logger.exception("Failed to build resting heart rate chart")
        raise HTTPException(status_code=500, detail=str(e))


app.include_router(charts_router)
