import numpy as np
import pytest

from carrecognition.pipeline import DetectionPipeline
from tests.fakes import FIXED_TIME


@pytest.fixture
def image():
    return np.zeros((200, 300, 3), dtype=np.uint8)


@pytest.fixture
def make_pipeline():
    def _make(detector, recognizer, **kwargs):
        kwargs.setdefault("clock", lambda: FIXED_TIME)
        return DetectionPipeline(detector, recognizer, **kwargs)

    return _make
