"""
Katabatic Factor Analyzer (Deterministic)

Four independent assessments of overnight drainage-wind potential:
precipitation, sky clarity, pressure trend and valley/mountain temperature
differential. Each factor compares a raw value against its threshold and
maps it to a 0-100 confidence with an asymmetric curve: strong passes are
stretched upward, near misses are compressed toward zero.
"""

import logging
from dataclasses import replace
from typing import List, Sequence, Tuple

from core.forecast_window import last_samples, select_window
from core.models import (
    Criteria,
    KatabaticFactors,
    PrecipitationFactor,
    PressureChangeFactor,
    SkyConditionsFactor,
    TemperatureDifferentialFactor,
    TimeWindow,
    WeatherSample,
    WeatherSeries,
    clamp_confidence,
)

logger = logging.getLogger("katabatic")

# Cloud cover below this counts as a clear hour (%)
CLEAR_SKY_CLOUD_LIMIT = 30.0

# Sky confidence multipliers (pass / fail)
SKY_PASS_MULTIPLIER = 1.2
SKY_FAIL_MULTIPLIER = 0.8

# Pressure trend: trailing sample count, stable band (hPa), confidence scales
PRESSURE_TREND_SAMPLES = 12
PRESSURE_STABLE_BAND_HPA = 1.0
PRESSURE_PASS_SCALE = 70.0
PRESSURE_FAIL_SCALE = 50.0

# Temperature differential confidence scales
TEMP_DIFF_PASS_SCALE = 60.0
TEMP_DIFF_FAIL_SCALE = 40.0


def _ratio(value: float, threshold: float) -> float:
    """value / threshold, 0 when the threshold is zero."""
    if not threshold:
        return 0.0
    return value / threshold


# =============================================================================
# Window aggregates (empty windows degrade to conservative values)
# =============================================================================

def max_precipitation(samples: Sequence[WeatherSample]) -> float:
    if not samples:
        return 0.0
    return max(s.precipitation_probability for s in samples)


def cloud_cover_stats(samples: Sequence[WeatherSample]) -> Tuple[float, float]:
    """(average cloud cover, % of samples with cloud cover < 30)."""
    if not samples:
        return 100.0, 0.0
    average = sum(s.cloud_cover for s in samples) / len(samples)
    clear_count = sum(1 for s in samples if s.cloud_cover < CLEAR_SKY_CLOUD_LIMIT)
    return average, clear_count / len(samples) * 100.0


def average_temperature(samples: Sequence[WeatherSample]) -> float:
    if not samples:
        return 0.0
    return sum(s.temperature for s in samples) / len(samples)


def pressure_trend(samples: Sequence[WeatherSample]) -> Tuple[float, str]:
    """(change in hPa over the trailing samples, rising/falling/stable)."""
    recent: List[WeatherSample] = last_samples(samples, PRESSURE_TREND_SAMPLES)
    if len(recent) < 2:
        return 0.0, "stable"
    change = recent[-1].pressure - recent[0].pressure
    if abs(change) < PRESSURE_STABLE_BAND_HPA:
        trend = "stable"
    elif change > 0:
        trend = "rising"
    else:
        trend = "falling"
    return change, trend


# =============================================================================
# Confidence curves
# =============================================================================

def precipitation_confidence(value: float, threshold: float, meets: bool) -> float:
    if not threshold:
        # Zero tolerance: only a dry forecast passes
        return 100.0 if meets else 0.0
    if meets:
        return clamp_confidence(min(100.0, 100.0 - _ratio(value, threshold) * 100.0))
    return clamp_confidence(max(0.0, 100.0 - _ratio(value - threshold, threshold) * 100.0))


def sky_confidence(coverage: float, meets: bool) -> float:
    if meets:
        return clamp_confidence(min(100.0, coverage * SKY_PASS_MULTIPLIER))
    return clamp_confidence(max(0.0, coverage * SKY_FAIL_MULTIPLIER))


def pressure_confidence(change: float, threshold: float, meets: bool) -> float:
    ratio = _ratio(abs(change), threshold)
    if meets:
        return clamp_confidence(min(100.0, ratio * PRESSURE_PASS_SCALE))
    return clamp_confidence(max(0.0, ratio * PRESSURE_FAIL_SCALE))


def temperature_confidence(differential: float, threshold: float, meets: bool) -> float:
    ratio = _ratio(differential, threshold)
    if meets:
        return clamp_confidence(min(100.0, ratio * TEMP_DIFF_PASS_SCALE))
    return clamp_confidence(max(0.0, ratio * TEMP_DIFF_FAIL_SCALE))


# =============================================================================
# Factor evaluation from raw values
# =============================================================================

def evaluate_precipitation(value: float, threshold: float) -> PrecipitationFactor:
    meets = value <= threshold
    return PrecipitationFactor(
        meets=meets,
        value=value,
        threshold=threshold,
        confidence=precipitation_confidence(value, threshold, meets),
    )


def evaluate_sky_conditions(
    clear_period_coverage: float,
    average_cloud_cover: float,
    threshold: float,
) -> SkyConditionsFactor:
    meets = clear_period_coverage >= threshold
    return SkyConditionsFactor(
        meets=meets,
        clear_period_coverage=clear_period_coverage,
        average_cloud_cover=average_cloud_cover,
        threshold=threshold,
        confidence=sky_confidence(clear_period_coverage, meets),
    )


def evaluate_pressure_change(change: float, trend: str, threshold: float) -> PressureChangeFactor:
    meets = abs(change) >= threshold
    return PressureChangeFactor(
        meets=meets,
        change=change,
        trend=trend,
        threshold=threshold,
        confidence=pressure_confidence(change, threshold, meets),
    )


def evaluate_temperature_differential(
    valley_temp: float,
    mountain_temp: float,
    threshold: float,
) -> TemperatureDifferentialFactor:
    # Valley warmer than the ridge at dawn is the favorable sign
    differential = valley_temp - mountain_temp
    meets = differential >= threshold
    return TemperatureDifferentialFactor(
        meets=meets,
        differential=differential,
        valley_temp=valley_temp,
        mountain_temp=mountain_temp,
        threshold=threshold,
        confidence=temperature_confidence(differential, threshold, meets),
    )


# =============================================================================
# Factor evaluation from a forecast series
# =============================================================================

def _window(series: WeatherSeries, samples: Sequence[WeatherSample], window: TimeWindow) -> List[WeatherSample]:
    return select_window(samples, window, series.tz)


def _without_data(factor):
    """No samples in the window: keep the default values but never pass."""
    return replace(factor, meets=False, confidence=0.0)


def analyze_precipitation(series: WeatherSeries, criteria: Criteria) -> PrecipitationFactor:
    clear_window = _window(series, series.valley, criteria.clear_sky_window)
    prediction_window = _window(series, series.valley, criteria.prediction_window)
    factor = evaluate_precipitation(
        max(max_precipitation(clear_window), max_precipitation(prediction_window)),
        criteria.max_precipitation_probability,
    )
    if not clear_window and not prediction_window:
        logger.debug("No valley samples in %s or %s", criteria.clear_sky_window.label, criteria.prediction_window.label)
        return _without_data(factor)
    return factor


def analyze_sky_conditions(series: WeatherSeries, criteria: Criteria) -> SkyConditionsFactor:
    valley_window = _window(series, series.valley, criteria.clear_sky_window)
    mountain_window = _window(series, series.mountain, criteria.clear_sky_window)
    valley_avg, valley_clear = cloud_cover_stats(valley_window)
    mountain_avg, mountain_clear = cloud_cover_stats(mountain_window)
    factor = evaluate_sky_conditions(
        clear_period_coverage=(valley_clear + mountain_clear) / 2.0,
        average_cloud_cover=(valley_avg + mountain_avg) / 2.0,
        threshold=criteria.min_cloud_cover_clear_period,
    )
    if not valley_window and not mountain_window:
        return _without_data(factor)
    return factor


def analyze_pressure_change(series: WeatherSeries, criteria: Criteria) -> PressureChangeFactor:
    change, trend = pressure_trend(series.valley)
    return evaluate_pressure_change(change, trend, criteria.min_pressure_change)


def analyze_temperature_differential(
    series: WeatherSeries, criteria: Criteria
) -> TemperatureDifferentialFactor:
    valley_window = _window(series, series.valley, criteria.prediction_window)
    mountain_window = _window(series, series.mountain, criteria.prediction_window)
    factor = evaluate_temperature_differential(
        average_temperature(valley_window),
        average_temperature(mountain_window),
        criteria.min_temperature_differential,
    )
    if not valley_window or not mountain_window:
        return _without_data(factor)
    return factor


def analyze_factors(series: WeatherSeries, criteria: Criteria) -> KatabaticFactors:
    """Evaluate the four katabatic factors for one forecast series."""
    factors = KatabaticFactors(
        precipitation=analyze_precipitation(series, criteria),
        sky_conditions=analyze_sky_conditions(series, criteria),
        pressure_change=analyze_pressure_change(series, criteria),
        temperature_differential=analyze_temperature_differential(series, criteria),
    )
    logger.debug(
        "Factors: precip=%.0f%% sky=%.0f%% pressure=%+.1fhPa diff=%.1fC (%d/4 met)",
        factors.precipitation.value,
        factors.sky_conditions.clear_period_coverage,
        factors.pressure_change.change,
        factors.temperature_differential.differential,
        factors.factors_met,
    )
    return factors
