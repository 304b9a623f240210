"""
Error types raised by the car recognition pipeline.

Only :class:`InvalidImageError`, :class:`DetectorError` and
:class:`RecognizerError` ever reach callers of the pipeline. An
:class:`IdentificationError` is downgraded to missing make/model information.
"""

from __future__ import annotations


class CarRecognitionError(RuntimeError):
    """Base class for every failure raised by this package."""

    default_message = "Error processing the image"

    def __init__(self, message: str | None = None) -> None:
        super().__init__(message or self.default_message)


class InvalidImageError(CarRecognitionError, ValueError):
    """The image could not be decoded or has non-positive dimensions."""

    default_message = "Invalid image format"


class DetectorError(CarRecognitionError):
    """The rectangle detector failed."""

    default_message = "Rectangle detection failed"


class RecognizerError(CarRecognitionError):
    """The text recognizer failed."""

    default_message = "Text recognition failed"


class IdentificationError(CarRecognitionError):
    """Make/model identification failed. Never surfaced by the pipeline."""

    default_message = "Error processing car identification"
