"""
Car detection pipeline.

The pipeline walks a small state machine::

    START -> RECTANGLE_CHECK -> NO_CAR
                             -> TEXT_AND_IDENTIFY -> DONE

Rectangle detection and text recognition failures abort the run. A failure
while identifying the make and model only leaves those fields empty.
"""

from __future__ import annotations

import asyncio
import enum
import logging
from datetime import datetime, timezone
from typing import Callable, List, Optional, Sequence, Tuple

import numpy as np

from .config import PipelineConfig
from .detector import ContourRectangleDetector, YoloRectangleDetector
from .errors import DetectorError, RecognizerError
from .features import CarIdentifier, FeatureExtractor
from .models import (
    CONFIDENCE_CAR_DETECTED,
    CONFIDENCE_COMPLETE,
    CONFIDENCE_NO_CAR,
    Location,
    Rectangle,
    RectangleDetector,
    ResultRecord,
    TextRecognizer,
)
from .ocr import EasyOCRTextRecognizer
from .patterns import first_license_plate
from .utils import to_bgr

logger = logging.getLogger(__name__)


class Stage(enum.Enum):
    START = "start"
    RECTANGLE_CHECK = "rectangle_check"
    NO_CAR = "no_car"
    TEXT_AND_IDENTIFY = "text_and_identify"
    DONE = "done"


STAGE_CONFIDENCE = {
    Stage.NO_CAR: CONFIDENCE_NO_CAR,
    Stage.TEXT_AND_IDENTIFY: CONFIDENCE_CAR_DETECTED,
    Stage.DONE: CONFIDENCE_COMPLETE,
}


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class DetectionPipeline:
    """
    Decide whether a photo shows a car and read what can be read from it.

    Parameters
    ----------
    detector:
        Rectangle detector used both for car detection and feature extraction.
    recognizer:
        Text recognizer consulted only once a car has been detected.
    identifier:
        Make/model identifier. Defaults to a :class:`CarIdentifier` over
        ``detector``.
    config:
        Detection thresholds.
    clock:
        Callable returning the run's timestamp.
    """

    def __init__(
        self,
        detector: RectangleDetector,
        recognizer: TextRecognizer,
        identifier: CarIdentifier | None = None,
        config: PipelineConfig | None = None,
        clock: Callable[[], datetime] = _utcnow,
    ) -> None:
        self.detector = detector
        self.recognizer = recognizer
        self.identifier = identifier or CarIdentifier(FeatureExtractor(detector))
        self.config = config or PipelineConfig()
        self.clock = clock

    def is_car_like(self, rectangle: Rectangle) -> bool:
        return (
            self.config.min_area < rectangle.area < self.config.max_area
            and rectangle.confidence > self.config.min_confidence
        )

    def car_rectangles(self, rectangles: Sequence[Rectangle]) -> List[Rectangle]:
        """Keep the rectangles whose size and confidence suggest a car."""
        return [rect for rect in rectangles if self.is_car_like(rect)]

    def detect(self, image: np.ndarray, location: Optional[Location] = None) -> ResultRecord:
        """
        Run the pipeline over a BGR, BGRA or grayscale image.

        Raises
        ------
        InvalidImageError
            If the image is empty, has non-positive dimensions or an
            unsupported channel count.
        DetectorError
            If the rectangle detector fails.
        RecognizerError
            If the text recognizer fails.
        """
        stage = Stage.START
        image = to_bgr(image)
        timestamp = self.clock()

        stage = self._advance(stage, Stage.RECTANGLE_CHECK)
        try:
            rectangles = list(self.detector.detect(image))
        except Exception as exc:
            raise DetectorError(f"Rectangle detection failed: {exc}") from exc

        candidates = self.car_rectangles(rectangles)
        logger.debug("%d of %d rectangles look like a car", len(candidates), len(rectangles))

        if not candidates:
            stage = self._advance(stage, Stage.NO_CAR)
            logger.info("No car detected in the image")
            return ResultRecord(
                car_detected=False,
                timestamp=timestamp,
                confidence=STAGE_CONFIDENCE[stage],
                location=location,
            )

        stage = self._advance(stage, Stage.TEXT_AND_IDENTIFY)
        license_plate = self._read_plate(image)
        make, model = self._identify(image)

        stage = self._advance(stage, Stage.DONE)
        result = ResultRecord(
            car_detected=True,
            timestamp=timestamp,
            confidence=STAGE_CONFIDENCE[stage],
            license_plate=license_plate,
            make=make,
            model=model,
            location=location,
        )
        logger.info(
            "Car detected: plate=%s make=%s model=%s",
            result.license_plate,
            result.make,
            result.model,
        )
        return result

    async def detect_async(
        self, image: np.ndarray, location: Optional[Location] = None
    ) -> ResultRecord:
        """Run :meth:`detect` in a worker thread."""
        return await asyncio.to_thread(self.detect, image, location)

    def _read_plate(self, image: np.ndarray) -> Optional[str]:
        try:
            candidates = list(self.recognizer.recognize(image))
        except Exception as exc:
            raise RecognizerError(f"Text recognition failed: {exc}") from exc
        return first_license_plate(candidates)

    def _identify(self, image: np.ndarray) -> Tuple[Optional[str], Optional[str]]:
        try:
            return self.identifier.identify(image)
        except Exception as exc:
            logger.warning("Car identification failed: %s", exc)
            return None, None

    @staticmethod
    def _advance(current: Stage, target: Stage) -> Stage:
        logger.debug("Pipeline stage %s -> %s", current.value, target.value)
        return target


def build_detector(config: PipelineConfig) -> RectangleDetector:
    if config.detector_backend == "yolo":
        return YoloRectangleDetector(weights_path=config.yolo_weights)
    return ContourRectangleDetector()


def build_pipeline(config: PipelineConfig | None = None) -> DetectionPipeline:
    """Create a pipeline wired to the backends named in ``config``."""
    config = config or PipelineConfig.from_env()
    recognizer = EasyOCRTextRecognizer(languages=config.ocr_languages, gpu=config.ocr_gpu)
    return DetectionPipeline(build_detector(config), recognizer, config=config)
