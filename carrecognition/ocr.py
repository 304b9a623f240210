"""
Text recognition backed by EasyOCR.

Candidates keep the order EasyOCR reports them in, which the pipeline treats
as the recognizer's ranking.
"""

from __future__ import annotations

from functools import lru_cache
from typing import List, Sequence, Tuple

import cv2
import easyocr
import numpy as np

from .models import TextCandidate
from .utils import image_size, to_bgr


@lru_cache(maxsize=4)
def _build_reader(languages: Tuple[str, ...], gpu: bool) -> easyocr.Reader:
    """
    Create and cache an EasyOCR reader instance.
    """
    return easyocr.Reader(list(languages), gpu=gpu)


class EasyOCRTextRecognizer:
    """
    Text recognizer using EasyOCR.

    The reader is cached across instances to avoid the heavy initialization
    cost EasyOCR incurs on first use. It is created on the first call to
    :meth:`recognize` rather than at construction time.
    """

    def __init__(self, languages: Sequence[str] | None = None, gpu: bool = False) -> None:
        self.languages = tuple(languages or ("en",))
        self.gpu = gpu

    @property
    def reader(self) -> easyocr.Reader:
        return _build_reader(self.languages, self.gpu)

    def recognize(self, image: np.ndarray) -> List[TextCandidate]:
        """
        Run OCR over a full BGR image.

        Returns
        -------
        A list of :class:`TextCandidate` in EasyOCR order with boxes
        normalized to the image size.
        """
        width, height = image_size(image)
        grayscale = cv2.cvtColor(to_bgr(image), cv2.COLOR_BGR2GRAY)
        result = self.reader.readtext(grayscale, detail=1)

        candidates: List[TextCandidate] = []
        for points, raw_text, confidence in result:
            text = raw_text.strip()
            if not text:
                continue
            xs = [float(p[0]) for p in points]
            ys = [float(p[1]) for p in points]
            bbox = (
                min(xs) / width,
                min(ys) / height,
                (max(xs) - min(xs)) / width,
                (max(ys) - min(ys)) / height,
            )
            candidates.append(TextCandidate(text=text, confidence=float(confidence), bbox=bbox))

        return candidates
