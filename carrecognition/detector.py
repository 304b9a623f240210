"""
Rectangle detection backends.

Two detectors satisfy :class:`carrecognition.models.RectangleDetector`:

* :class:`ContourRectangleDetector` finds quadrilateral outlines with OpenCV
  edge detection and polygon approximation. It needs no model weights.
* :class:`YoloRectangleDetector` reports the bounding boxes of a YOLOv8
  model. The weights are expected under ``carrecognition/weights`` unless a
  path is given.

Both return boxes in normalized ``(x, y, width, height)`` coordinates.
"""

from __future__ import annotations

from pathlib import Path
from typing import List, Sequence

import cv2
import numpy as np
from ultralytics import YOLO

from .models import Rectangle
from .utils import image_size, to_bgr

# COCO class ids for car, bus and truck.
VEHICLE_CLASSES = (2, 5, 7)


class ContourRectangleDetector:
    """
    Quadrilateral detector built on Canny edges and ``approxPolyDP``.

    Parameters
    ----------
    min_size:
        Smallest accepted box side, relative to the image's shorter side.
    max_results:
        Maximum number of rectangles to return, largest first.
    """

    def __init__(self, min_size: float = 0.05, max_results: int = 16) -> None:
        self.min_size = min_size
        self.max_results = max_results

    def detect(self, image: np.ndarray) -> List[Rectangle]:
        width, height = image_size(image)
        gray = cv2.cvtColor(to_bgr(image), cv2.COLOR_BGR2GRAY)

        blur = cv2.GaussianBlur(gray, (5, 5), 0)
        edges = cv2.Canny(blur, 50, 150)
        edges = cv2.dilate(edges, None, iterations=1)
        contours, _ = cv2.findContours(edges, cv2.RETR_LIST, cv2.CHAIN_APPROX_SIMPLE)

        min_side = self.min_size * min(width, height)
        rectangles: List[Rectangle] = []
        for contour in contours:
            perimeter = cv2.arcLength(contour, True)
            approx = cv2.approxPolyDP(contour, 0.02 * perimeter, True)
            if len(approx) != 4 or not cv2.isContourConvex(approx):
                continue

            x, y, w, h = cv2.boundingRect(approx)
            if w < min_side or h < min_side:
                continue

            # How well the polygon fills its bounding box.
            fill = float(cv2.contourArea(approx)) / float(w * h)
            rectangles.append(
                Rectangle(
                    bbox=(x / width, y / height, w / width, h / height),
                    confidence=max(0.0, min(1.0, fill)),
                )
            )

        rectangles.sort(key=lambda r: r.area, reverse=True)
        return rectangles[: self.max_results]


class YoloRectangleDetector:
    """
    Vehicle detector backed by a YOLOv8 model.

    Parameters
    ----------
    weights_path:
        Optional custom path to the YOLO weights file. Defaults to
        ``carrecognition/weights/yolov8n.pt``.
    confidence:
        Confidence threshold for YOLO predictions.
    classes:
        Class ids to keep. Defaults to the COCO vehicle classes.
    """

    def __init__(
        self,
        weights_path: Path | str | None = None,
        confidence: float = 0.25,
        iou: float = 0.45,
        classes: Sequence[int] | None = VEHICLE_CLASSES,
    ) -> None:
        self.confidence = confidence
        self.iou = iou
        self.classes = list(classes) if classes is not None else None
        self._weights_path = Path(weights_path) if weights_path else self._default_weights_path()

        if not self._weights_path.exists():
            raise FileNotFoundError(
                f"YOLO weights not found at {self._weights_path}. "
                "Download the detector weights and place them under carrecognition/weights."
            )

        try:
            self._model = YOLO(str(self._weights_path))
        except Exception as exc:  # pragma: no cover - depends on weights file
            raise RuntimeError(f"Failed to load YOLO weights from {self._weights_path}") from exc

    @staticmethod
    def _default_weights_path() -> Path:
        return Path(__file__).resolve().parent / "weights" / "yolov8n.pt"

    def detect(self, image: np.ndarray) -> List[Rectangle]:
        """
        Detect vehicles in a BGR image.
        """
        # YOLO expects RGB input.
        rgb_image = cv2.cvtColor(to_bgr(image), cv2.COLOR_BGR2RGB)
        results = self._model.predict(
            rgb_image,
            conf=self.confidence,
            iou=self.iou,
            classes=self.classes,
            verbose=False,
        )

        rectangles: List[Rectangle] = []
        for result in results or []:
            boxes = getattr(result, "boxes", None)
            if boxes is None:
                continue
            for box in boxes:
                x1, y1, x2, y2 = (max(0.0, min(1.0, float(v))) for v in box.xyxyn[0].tolist())
                w = x2 - x1
                h = y2 - y1
                if w <= 0 or h <= 0:
                    continue

                confidence = float(box.conf.item()) if hasattr(box.conf, "item") else float(box.conf)
                rectangles.append(Rectangle(bbox=(x1, y1, w, h), confidence=confidence))

        return rectangles
