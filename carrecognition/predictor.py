"""
Rule-based make/model prediction.

The rules below are placeholders, not a trained classifier. Their thresholds
were tuned against the unfiltered rectangle count in ``headlight_count``.
"""

from __future__ import annotations

from typing import Tuple

from .models import CarFeatures


def predict_make_model(features: CarFeatures) -> Tuple[str, str]:
    """Map car features to a ``(make, model)`` pair. The first matching rule wins."""
    ratio = features.body_proportions
    count = features.headlight_count

    if ratio > 2.5 and count >= 4:
        return "Toyota", "Camry"
    if ratio > 2.0 and count >= 3:
        return "Honda", "Civic"
    if ratio > 1.8:
        return "Ford", "Focus"
    return "Chevrolet", "Malibu"
