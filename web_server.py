# Load environment variables FIRST (before any other imports)
from __future__ import annotations

from dotenv import load_dotenv
load_dotenv()

import logging
from datetime import datetime
from typing import Any, Dict, Optional

from fastapi import FastAPI, HTTPException
from pydantic import BaseModel

from config import LOG_DATEFMT, LOG_FORMAT, LOG_LEVEL, SITES, get_site
from core.models import Criteria, WeatherSeries
from synthesizer import (
    analyze_mountain_waves,
    analyze_prediction,
    analyze_stability_profile,
    format_prediction_log,
    summarize_prediction,
)

logging.basicConfig(level=LOG_LEVEL, format=LOG_FORMAT, datefmt=LOG_DATEFMT)

# Silence verbose loggers
logging.getLogger("httpx").setLevel(logging.WARNING)
logging.getLogger("httpcore").setLevel(logging.WARNING)
logging.getLogger("uvicorn.access").setLevel(logging.WARNING)
logger = logging.getLogger("web_server")

app = FastAPI(title="Katabatic Dawn Patrol")


class PredictRequest(BaseModel):
    series: Dict[str, Any]
    criteria: Optional[Dict[str, Any]] = None
    reference_utc: Optional[datetime] = None
    timezone: Optional[str] = None


class WavesRequest(BaseModel):
    series: Dict[str, Any]
    timezone: Optional[str] = None


def _decode_series(payload: Dict[str, Any], timezone: Optional[str]) -> WeatherSeries:
    try:
        return WeatherSeries.from_dict(payload, timezone=timezone)
    except ValueError as e:
        raise HTTPException(status_code=422, detail=str(e))


@app.get("/api/sites")
def get_sites():
    """Return the configured valley and mountain sites."""
    return [
        {
            "id": site.site_id,
            "name": site.name,
            "role": site.role,
            "latitude": site.latitude,
            "longitude": site.longitude,
            "elevation_m": site.elevation_m,
            "timezone": site.timezone,
        }
        for site in SITES.values()
    ]


@app.get("/api/katabatic/criteria")
def get_default_criteria():
    """Return the default prediction criteria."""
    return Criteria().to_dict()


@app.post("/api/katabatic/predict")
def predict(request: PredictRequest):
    """Score a pre-fetched forecast series.

    Body:
        series: {"valley": [...], "mountain": [...]} (provider shape accepted)
        criteria: partial criteria overrides
        reference_utc: "now" for the best-window projection
    """
    series = _decode_series(request.series, request.timezone)
    try:
        criteria = Criteria.from_dict(request.criteria)
    except ValueError as e:
        raise HTTPException(status_code=422, detail=str(e))

    prediction = analyze_prediction(series, criteria, reference_utc=request.reference_utc)
    logger.info(format_prediction_log(get_site("valley"), prediction))
    return {
        "prediction": prediction.to_dict(),
        "summary": summarize_prediction(prediction).to_dict(),
    }


@app.post("/api/katabatic/waves")
def waves(request: WavesRequest):
    """Mountain wave analysis and stability profile for a forecast series."""
    series = _decode_series(request.series, request.timezone)
    return {
        "waves": analyze_mountain_waves(series).to_dict(),
        "stability": analyze_stability_profile(series).to_dict(),
    }


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=8000)
