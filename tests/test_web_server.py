import os
import sys

sys.path.append(os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from fastapi.testclient import TestClient

from web_server import app
from series_factory import make_series

client = TestClient(app)


def test_sites():
    response = client.get("/api/sites")
    assert response.status_code == 200
    roles = {site["role"] for site in response.json()}
    assert roles == {"valley", "mountain"}


def test_default_criteria():
    response = client.get("/api/katabatic/criteria")
    assert response.status_code == 200
    assert response.json()["max_precipitation_probability"] == 20.0


def test_predict():
    response = client.post("/api/katabatic/predict", json={
        "series": make_series().to_dict(),
        "reference_utc": "2026-10-18T12:00:00Z",
    })
    assert response.status_code == 200
    body = response.json()
    assert body["prediction"]["probability"] == 89
    assert body["prediction"]["confidence"] == "high"
    assert body["summary"]["factors_met"] == 4


def test_predict_with_wave_criteria():
    response = client.post("/api/katabatic/predict", json={
        "series": make_series().to_dict(),
        "criteria": {"includeWaveFactors": True},
        "reference_utc": "2026-10-18T12:00:00Z",
    })
    assert response.status_code == 200
    factors = response.json()["prediction"]["factors"]
    assert "wave_pattern" in factors
    assert "atmospheric_stability" in factors


def test_waves():
    response = client.post("/api/katabatic/waves", json={"series": make_series().to_dict()})
    assert response.status_code == 200
    body = response.json()
    assert body["waves"]["enhancement_potential"] == "negative"
    assert body["stability"]["profile_optimal"] is False


def test_bad_series_is_422():
    response = client.post("/api/katabatic/predict", json={"series": {"valley": [{"temperature": 5}]}})
    assert response.status_code == 422


def test_bad_criteria_is_422():
    response = client.post("/api/katabatic/predict", json={
        "series": make_series().to_dict(),
        "criteria": {"clear_sky_window": "02-05"},
    })
    assert response.status_code == 422


def test_bad_timezone_is_422():
    response = client.post("/api/katabatic/waves", json={
        "series": make_series().to_dict(),
        "timezone": "Nowhere/Special",
    })
    assert response.status_code == 422


def test_non_boolean_wave_flag_is_422():
    response = client.post("/api/katabatic/predict", json={
        "series": make_series().to_dict(),
        "criteria": {"includeWaveFactors": "sometimes"},
    })
    assert response.status_code == 422


def test_string_false_keeps_four_factors():
    response = client.post("/api/katabatic/predict", json={
        "series": make_series().to_dict(),
        "criteria": {"includeWaveFactors": "false"},
        "reference_utc": "2026-10-18T12:00:00Z",
    })
    assert response.status_code == 200
    prediction = response.json()["prediction"]
    assert prediction["probability"] == 89
    assert "wave_pattern" not in prediction["factors"]
