import os
import sys

sys.path.append(os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

import pytest

from core.models import Criteria, TimeWindow, WeatherSample, WeatherSeries, clamp_confidence


class TestWeatherSample:

    def test_from_dict_accepts_provider_keys(self):
        sample = WeatherSample.from_dict({
            "timestamp": 1760000000000,
            "temperature": 8.5,
            "pressure": 1012.0,
            "precipitationProbability": 10,
            "cloudCover": 25,
            "windSpeed": 3.2,
            "windDirection": 250,
        })
        assert sample.precipitation_probability == 10.0
        assert sample.cloud_cover == 25.0
        assert sample.wind_direction == 250.0
        assert sample.humidity == 0.0

    def test_missing_values_become_zero(self):
        sample = WeatherSample.from_dict({"timestamp": 0, "temperature": None})
        assert sample.temperature == 0.0

    def test_timestamp_is_required(self):
        with pytest.raises(ValueError):
            WeatherSample.from_dict({"temperature": 5})
        with pytest.raises(ValueError):
            WeatherSample.from_dict({"timestamp": "yesterday"})

    def test_non_numeric_field_rejected(self):
        with pytest.raises(ValueError):
            WeatherSample.from_dict({"timestamp": 0, "pressure": "high"})

    def test_non_finite_field_rejected(self):
        with pytest.raises(ValueError):
            WeatherSample.from_dict({"timestamp": 0, "temperature": float("nan")})
        with pytest.raises(ValueError):
            WeatherSample.from_dict({"timestamp": 0, "windSpeed": "Infinity"})


class TestWeatherSeries:

    def test_from_dict_accepts_hourly_forecast_wrapper_and_alias(self):
        series = WeatherSeries.from_dict({
            "morrison": {"hourlyForecast": [{"timestamp": 0, "temperature": 4}]},
            "mountain": [{"timestamp": 0, "temperature": 1}],
        })
        assert len(series.valley) == 1
        assert series.valley[0].temperature == 4.0
        assert series.mountain[0].temperature == 1.0
        assert series.timezone == "America/Denver"

    def test_unknown_timezone_rejected(self):
        with pytest.raises(ValueError):
            WeatherSeries.from_dict({"valley": []}, timezone="Mars/Olympus_Mons")

    def test_series_must_be_a_list(self):
        with pytest.raises(ValueError):
            WeatherSeries.from_dict({"valley": "not a list"})

    def test_to_dict_round_trip(self):
        series = WeatherSeries.from_dict({"valley": [{"timestamp": 0, "temperature": 4}]}, timezone="UTC")
        again = WeatherSeries.from_dict(series.to_dict())
        assert again == series


class TestCriteria:

    def test_defaults(self):
        criteria = Criteria()
        assert criteria.max_precipitation_probability == 20.0
        assert criteria.min_cloud_cover_clear_period == 70.0
        assert criteria.min_pressure_change == 2.0
        assert criteria.min_temperature_differential == 5.0
        assert criteria.clear_sky_window == TimeWindow("02:00", "05:00")
        assert criteria.prediction_window == TimeWindow("06:00", "08:00")
        assert criteria.include_wave_factors is False

    def test_from_dict_partial_camel_case(self):
        criteria = Criteria.from_dict({
            "maxPrecipitationProbability": 10,
            "predictionWindow": {"start": "05:00", "end": "07:00"},
            "includeWaveFactors": True,
        })
        assert criteria.max_precipitation_probability == 10.0
        assert criteria.prediction_window.start_hour == 5
        assert criteria.include_wave_factors is True
        # Untouched fields keep their defaults
        assert criteria.min_pressure_change == 2.0

    def test_with_overrides_ignores_none_and_rejects_unknown(self):
        criteria = Criteria().with_overrides(min_pressure_change=None, clear_sky_window=("01:00", "04:00"))
        assert criteria.min_pressure_change == 2.0
        assert criteria.clear_sky_window.label == "01:00-04:00"
        with pytest.raises(ValueError):
            Criteria().with_overrides(max_wind=12)

    def test_wave_flag_accepts_booleans_and_their_strings(self):
        assert Criteria.from_dict({"includeWaveFactors": True}).include_wave_factors is True
        assert Criteria.from_dict({"includeWaveFactors": "false"}).include_wave_factors is False
        assert Criteria.from_dict({"include_wave_factors": "TRUE"}).include_wave_factors is True
        assert Criteria.from_dict({"includeWaveFactors": None}).include_wave_factors is False

    def test_wave_flag_rejects_other_values(self):
        for value in ("yes", "0", 1, 0, [], {}):
            with pytest.raises(ValueError):
                Criteria.from_dict({"includeWaveFactors": value})

    def test_non_finite_threshold_rejected(self):
        with pytest.raises(ValueError):
            Criteria.from_dict({"minPressureChange": float("inf")})

    def test_invalid_window_rejected(self):
        with pytest.raises(ValueError):
            TimeWindow("25:00", "03:00")
        with pytest.raises(ValueError):
            TimeWindow.from_value({"start": "02:00"})
        with pytest.raises(ValueError):
            Criteria.from_dict({"clear_sky_window": "02-05"})


def test_clamp_confidence():
    assert clamp_confidence(-5) == 0.0
    assert clamp_confidence(140) == 100.0
    assert clamp_confidence(float("nan")) == 0.0
