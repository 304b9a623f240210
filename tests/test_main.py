import cv2
import numpy as np
import pytest
from fastapi.testclient import TestClient

from carrecognition import main
from carrecognition.models import Rectangle

from tests.fakes import CAR_BOX, FakeDetector, FakeRecognizer


def _jpeg(width=300, height=200):
    ok, buffer = cv2.imencode(".jpg", np.full((height, width, 3), 127, dtype=np.uint8))
    assert ok
    return buffer.tobytes()


@pytest.fixture
def client(make_pipeline):
    def _client(detector, recognizer):
        pipeline = make_pipeline(detector, recognizer)
        main.app.dependency_overrides[main.get_pipeline] = lambda: pipeline
        return TestClient(main.app)

    yield _client
    main.app.dependency_overrides.clear()


def test_health(client):
    response = client(FakeDetector(), FakeRecognizer()).get("/health")
    assert response.json() == {"status": "ok"}


def test_analyze_car_with_location(client):
    response = client(FakeDetector([CAR_BOX]), FakeRecognizer(["ABC123"])).post(
        "/analyze",
        files={"file": ("car.jpg", _jpeg(), "image/jpeg")},
        data={"latitude": "37.7749", "longitude": "-122.4194"},
    )

    assert response.status_code == 200
    body = response.json()
    assert body["car_detected"] is True
    assert body["license_plate"] == "ABC123"
    assert body["make"] == "Chevrolet"
    assert body["location"] == {"latitude": 37.7749, "longitude": -122.4194}
    assert body["message"] is None
    assert body["display"]["confidence"] == "80%"
    assert body["display"]["location"] == "37.7749, -122.4194"


def test_analyze_no_car(client):
    detector = FakeDetector([Rectangle(bbox=(0, 0, 0.1, 0.1), confidence=0.9)])
    response = client(detector, FakeRecognizer()).post(
        "/analyze", files={"file": ("car.jpg", _jpeg(), "image/jpeg")}
    )

    assert response.status_code == 200
    body = response.json()
    assert body["car_detected"] is False
    assert body["confidence"] == 0.0
    assert body["message"] == "No car detected in the image"
    assert body["display"]["license_plate"] == "Not visible"
    assert body["display"]["make"] == "Unknown"
    assert body["display"]["location"] == "Unknown"


def test_analyze_rejects_undecodable_upload(client):
    response = client(FakeDetector([CAR_BOX]), FakeRecognizer()).post(
        "/analyze", files={"file": ("car.jpg", b"not a jpeg", "image/jpeg")}
    )
    assert response.status_code == 400


def test_analyze_rejects_empty_upload(client):
    response = client(FakeDetector([CAR_BOX]), FakeRecognizer()).post(
        "/analyze", files={"file": ("car.jpg", b"", "image/jpeg")}
    )
    assert response.status_code == 400


def test_analyze_requires_both_coordinates(client):
    response = client(FakeDetector([CAR_BOX]), FakeRecognizer()).post(
        "/analyze",
        files={"file": ("car.jpg", _jpeg(), "image/jpeg")},
        data={"latitude": "10.0"},
    )
    assert response.status_code == 400


def test_analyze_reports_detector_failure(client):
    response = client(FakeDetector(error=RuntimeError("boom")), FakeRecognizer()).post(
        "/analyze", files={"file": ("car.jpg", _jpeg(), "image/jpeg")}
    )
    assert response.status_code == 500
    assert "Rectangle detection failed" in response.json()["detail"]


def test_analyze_reports_recognizer_failure(client):
    response = client(FakeDetector([CAR_BOX]), FakeRecognizer(error=RuntimeError("ocr crashed"))).post(
        "/analyze", files={"file": ("car.jpg", _jpeg(), "image/jpeg")}
    )
    assert response.status_code == 500
    assert "Text recognition failed" in response.json()["detail"]


def test_analyze_rejects_out_of_range_coordinates(client):
    response = client(FakeDetector([CAR_BOX]), FakeRecognizer()).post(
        "/analyze",
        files={"file": ("car.jpg", _jpeg(), "image/jpeg")},
        data={"latitude": "95", "longitude": "10"},
    )
    assert response.status_code == 400
    assert "Latitude" in response.json()["detail"]


def test_analyze_formats_timestamp(client):
    response = client(FakeDetector([CAR_BOX]), FakeRecognizer()).post(
        "/analyze", files={"file": ("car.jpg", _jpeg(), "image/jpeg")}
    )
    assert response.json()["display"]["timestamp"] == "May 1, 2024 at 12:30 PM"
