"""
Coarse feature extraction for make/model identification.
"""

from __future__ import annotations

import logging
from typing import Tuple

import numpy as np

from .errors import IdentificationError
from .models import PLACEHOLDER_COLORS, CarFeatures, RectangleDetector
from .predictor import predict_make_model
from .utils import image_size

logger = logging.getLogger(__name__)


class FeatureExtractor:
    """
    Derive :class:`CarFeatures` from an image using a rectangle detector.

    The detector's output is used unfiltered: every rectangle counts towards
    ``headlight_count`` and the first one supplies ``grille_area``.
    """

    def __init__(self, detector: RectangleDetector) -> None:
        self.detector = detector

    def extract(self, image: np.ndarray) -> CarFeatures:
        width, height = image_size(image)
        rectangles = list(self.detector.detect(image))

        return CarFeatures(
            grille_area=float(rectangles[0].width) if rectangles else 0.0,
            headlight_count=len(rectangles),
            body_proportions=width / height,
            dominant_colors=self.dominant_colors(image),
        )

    @staticmethod
    def dominant_colors(image: np.ndarray) -> Tuple[str, ...]:
        # Placeholder; no color analysis is performed.
        return PLACEHOLDER_COLORS


class CarIdentifier:
    """Guess a car's make and model from extracted features."""

    def __init__(self, extractor: FeatureExtractor) -> None:
        self.extractor = extractor

    def identify(self, image: np.ndarray) -> Tuple[str, str]:
        """
        Return ``(make, model)`` for the image.

        Any failure while extracting features is reported as an
        :class:`IdentificationError`.
        """
        try:
            features = self.extractor.extract(image)
        except Exception as exc:
            raise IdentificationError(f"Unable to identify car features: {exc}") from exc

        logger.debug("Extracted car features: %s", features)
        return predict_make_model(features)
