"""
Pipeline configuration.

Values default to the thresholds the detection heuristic was tuned with and
can be overridden through ``CARREC_*`` environment variables.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Optional, Tuple

DETECTOR_BACKENDS = ("contour", "yolo")


def _env_flag(name: str, default: str = "0") -> bool:
    return os.getenv(name, default).lower() in {"1", "true", "yes", "on"}


def _env_float(name: str, default: float) -> float:
    raw = os.getenv(name)
    if raw is None or raw == "":
        return default
    try:
        return float(raw)
    except ValueError as exc:
        raise ValueError(f"{name} must be a number, got {raw!r}") from exc


@dataclass(frozen=True)
class PipelineConfig:
    # Car detection thresholds (normalized box area, detector confidence)
    min_area: float = 0.1
    max_area: float = 0.8
    min_confidence: float = 0.5

    # Backends
    detector_backend: str = "contour"
    yolo_weights: Optional[Path] = None
    ocr_languages: Tuple[str, ...] = ("en",)
    ocr_gpu: bool = False

    # Logging
    log_level: str = "INFO"

    def __post_init__(self) -> None:
        if not 0.0 <= self.min_area < self.max_area <= 1.0:
            raise ValueError(
                f"Area bounds must satisfy 0 <= min_area < max_area <= 1, "
                f"got ({self.min_area}, {self.max_area})"
            )
        if not 0.0 <= self.min_confidence <= 1.0:
            raise ValueError(f"min_confidence must be within [0, 1], got {self.min_confidence}")
        if self.detector_backend not in DETECTOR_BACKENDS:
            raise ValueError(
                f"Unknown detector backend {self.detector_backend!r}; "
                f"expected one of {', '.join(DETECTOR_BACKENDS)}"
            )

    @classmethod
    def from_env(cls) -> "PipelineConfig":
        """Build a configuration from ``CARREC_*`` environment variables."""
        weights = os.getenv("CARREC_YOLO_WEIGHTS")
        languages = os.getenv("CARREC_OCR_LANGUAGES", "en")
        return cls(
            min_area=_env_float("CARREC_MIN_AREA", cls.min_area),
            max_area=_env_float("CARREC_MAX_AREA", cls.max_area),
            min_confidence=_env_float("CARREC_MIN_CONFIDENCE", cls.min_confidence),
            detector_backend=os.getenv("CARREC_DETECTOR", cls.detector_backend).lower(),
            yolo_weights=Path(weights) if weights else None,
            ocr_languages=tuple(lang.strip() for lang in languages.split(",") if lang.strip()),
            ocr_gpu=_env_flag("CARREC_OCR_GPU"),
            log_level=os.getenv("CARREC_LOG_LEVEL", cls.log_level),
        )
