"""
FastAPI application exposing the car detection pipeline.

Upload a photo of a vehicle, optionally with the latitude and longitude where
it was taken, to receive whether a car was found, any license plate text, a
best-guess make and model, and a display-ready summary.
"""

from __future__ import annotations

import logging
import os
from functools import lru_cache
from typing import Optional

from fastapi import Depends, FastAPI, File, Form, HTTPException, UploadFile
from pydantic import BaseModel, Field

from .config import PipelineConfig
from .errors import CarRecognitionError, InvalidImageError
from .models import Location, ResultRecord
from .pipeline import DetectionPipeline, build_pipeline
from .utils import decode_image, setup_logging

logger = logging.getLogger(__name__)

NO_CAR_MESSAGE = "No car detected in the image"


class LocationModel(BaseModel):
    latitude: float
    longitude: float


class DisplayModel(BaseModel):
    license_plate: str = Field(..., description="Plate text or 'Not visible'")
    make: str = Field(..., description="Make or 'Unknown'")
    model: str = Field(..., description="Model or 'Unknown'")
    location: str = Field(..., description="'lat, lon' with four decimals or 'Unknown'")
    timestamp: str = Field(..., description="Medium date and short time, e.g. 'May 1, 2024 at 2:05 PM'")
    confidence: str = Field(..., description="Confidence as a percentage, e.g. '80%'")
    confidence_level: str = Field(..., description="'high', 'medium' or 'low'")


class DetectionResponse(BaseModel):
    car_detected: bool
    license_plate: Optional[str] = None
    make: Optional[str] = None
    model: Optional[str] = None
    location: Optional[LocationModel] = None
    timestamp: str = Field(..., description="ISO-8601 time at which detection started")
    confidence: float = Field(..., description="Pipeline stage marker in [0, 1]")
    message: Optional[str] = None
    display: DisplayModel

    @classmethod
    def from_record(cls, record: ResultRecord) -> "DetectionResponse":
        data = record.to_dict()
        return cls(
            **data,
            message=None if record.car_detected else NO_CAR_MESSAGE,
            display=DisplayModel(
                license_plate=record.license_plate or "Not visible",
                make=record.make or "Unknown",
                model=record.model or "Unknown",
                location=record.formatted_location or "Unknown",
                timestamp=record.formatted_timestamp,
                confidence=f"{record.confidence_percent}%",
                confidence_level=record.confidence_level,
            ),
        )


@lru_cache(maxsize=1)
def get_pipeline() -> DetectionPipeline:
    config = PipelineConfig.from_env()
    setup_logging(config.log_level)
    return build_pipeline(config)


def _location_from_form(latitude: Optional[float], longitude: Optional[float]) -> Optional[Location]:
    if latitude is None and longitude is None:
        return None
    if latitude is None or longitude is None:
        raise HTTPException(status_code=400, detail="Both latitude and longitude are required.")
    try:
        return Location(latitude=latitude, longitude=longitude)
    except ValueError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc


app = FastAPI(
    title="Car Recognition Service",
    version="0.1.0",
    description=(
        "Heuristic car detection, license plate reading and make/model guessing for still photos. "
        "Make and model come from a fixed rule table, not a trained classifier."
    ),
)


@app.get("/health")
async def health() -> dict:
    return {"status": "ok"}


@app.post("/analyze", response_model=DetectionResponse)
async def analyze(
    file: UploadFile = File(...),
    latitude: Optional[float] = Form(None),
    longitude: Optional[float] = Form(None),
    pipeline: DetectionPipeline = Depends(get_pipeline),
) -> DetectionResponse:
    """
    Analyze an uploaded photo for a car.
    """
    location = _location_from_form(latitude, longitude)

    data = await file.read()
    if not data:
        raise HTTPException(status_code=400, detail="Empty file uploaded.")

    try:
        image = decode_image(data)
        record = await pipeline.detect_async(image)
    except InvalidImageError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc
    except CarRecognitionError as exc:
        logger.error("Detection failed: %s", exc)
        raise HTTPException(status_code=500, detail=str(exc)) from exc

    # The pipeline never looks up location itself.
    return DetectionResponse.from_record(record.with_location(location))


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "carrecognition.main:app",
        host="0.0.0.0",
        port=int(os.environ.get("PORT", 8000)),
        reload=False,
    )
