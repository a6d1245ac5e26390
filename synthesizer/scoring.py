"""
Composite Scorer - katabatic prediction entry point.

Fuses the factor assessments into one weighted probability, derives a
confidence tier and a go/maybe/skip recommendation, and assembles the
KatabaticPrediction record. Pure: no I/O, no state between calls.
"""

import logging
from datetime import datetime, timedelta
from decimal import Decimal, ROUND_HALF_UP
from typing import Iterable, Optional, Tuple
from zoneinfo import ZoneInfo

from core.models import (
    BestTimeWindow,
    Criteria,
    KatabaticFactors,
    KatabaticPrediction,
    TimeWindow,
    WeatherSeries,
)
from synthesizer.katabatic import analyze_factors
from synthesizer.mountain_wave import (
    analyze_mountain_waves,
    analyze_stability_profile,
    stability_factor,
    wave_pattern_factor,
)
from synthesizer.narrative import generate_detailed_analysis, generate_explanation

logger = logging.getLogger("scoring")

UTC = ZoneInfo("UTC")

# (weight, penalty when the factor misses its threshold)
# Sky takes the harshest relative penalty: no clear sky, no radiative cooling.
FACTOR_WEIGHTS = {
    "precipitation": (0.30, 50.0),
    "sky_conditions": (0.25, 30.0),
    "pressure_change": (0.25, 40.0),
    "temperature_differential": (0.20, 20.0),
}
WAVE_FACTOR_WEIGHTS = {
    "wave_pattern": (0.10, 20.0),
    "atmospheric_stability": (0.10, 20.0),
}

HIGH_MIN_FACTORS, HIGH_MIN_MEAN_CONFIDENCE, HIGH_MIN_PROBABILITY = 3, 70.0, 75
MEDIUM_MIN_FACTORS, MEDIUM_MIN_MEAN_CONFIDENCE, MEDIUM_MIN_PROBABILITY = 2, 50.0, 50

GO_MIN_PROBABILITY = 75

BEST_WINDOW_CONFIDENCE = 75.0


def _round_half_up(value: float) -> int:
    return int(Decimal(str(value)).quantize(Decimal("1"), rounding=ROUND_HALF_UP))


def _weighted_terms(factors: KatabaticFactors) -> Iterable[Tuple[str, object, float, float]]:
    for name, (weight, penalty) in FACTOR_WEIGHTS.items():
        yield name, getattr(factors, name), weight, penalty
    if factors.has_wave_factors:
        for name, (weight, penalty) in WAVE_FACTOR_WEIGHTS.items():
            yield name, getattr(factors, name), weight, penalty


def calculate_probability(factors: KatabaticFactors) -> int:
    """Weighted 0-100 probability with per-factor miss penalties."""
    weighted_sum = 0.0
    total_weight = 0.0
    for _, factor, weight, penalty in _weighted_terms(factors):
        if factor.meets:
            weighted_sum += factor.confidence * weight
        else:
            weighted_sum += max(0.0, factor.confidence - penalty) * weight
        total_weight += weight

    if total_weight <= 0:
        return 0
    score = max(0.0, min(100.0, weighted_sum / total_weight))
    return _round_half_up(score)


def mean_confidence(factors: KatabaticFactors) -> float:
    core = factors.core()
    return sum(f.confidence for f in core) / len(core)


def determine_confidence(factors: KatabaticFactors, probability: int) -> str:
    met = factors.factors_met
    mean = mean_confidence(factors)
    if met >= HIGH_MIN_FACTORS and mean >= HIGH_MIN_MEAN_CONFIDENCE and probability >= HIGH_MIN_PROBABILITY:
        return "high"
    if met >= MEDIUM_MIN_FACTORS and mean >= MEDIUM_MIN_MEAN_CONFIDENCE and probability >= MEDIUM_MIN_PROBABILITY:
        return "medium"
    return "low"


def generate_recommendation(probability: int, confidence: str, minimum_confidence: float) -> str:
    if probability >= GO_MIN_PROBABILITY and confidence == "high":
        return "go"
    if probability >= minimum_confidence and confidence != "low":
        return "maybe"
    return "skip"


def find_best_time_window(
    window: TimeWindow,
    tz: ZoneInfo,
    reference_utc: Optional[datetime] = None,
) -> BestTimeWindow:
    """
    Placeholder: echo the configured prediction window on the next local day.

    The forecast series is not consulted yet; a dynamic optimizer can
    replace this without changing the return type.
    """
    reference = reference_utc or datetime.now(UTC)
    if reference.tzinfo is None:
        reference = reference.replace(tzinfo=UTC)
    tomorrow = (reference.astimezone(tz) + timedelta(days=1)).date()

    start = datetime(tomorrow.year, tomorrow.month, tomorrow.day, window.start_hour, tzinfo=tz)
    end = datetime(tomorrow.year, tomorrow.month, tomorrow.day, window.end_hour, tzinfo=tz)
    if end <= start:
        end += timedelta(days=1)
    return BestTimeWindow(start=start, end=end, confidence=BEST_WINDOW_CONFIDENCE)


def _with_wave_factors(factors: KatabaticFactors, series: WeatherSeries) -> KatabaticFactors:
    waves = analyze_mountain_waves(series)
    profile = analyze_stability_profile(series)
    return KatabaticFactors(
        precipitation=factors.precipitation,
        sky_conditions=factors.sky_conditions,
        pressure_change=factors.pressure_change,
        temperature_differential=factors.temperature_differential,
        wave_pattern=wave_pattern_factor(waves),
        atmospheric_stability=stability_factor(profile),
    )


def analyze_prediction(
    series: WeatherSeries,
    criteria: Optional[Criteria] = None,
    reference_utc: Optional[datetime] = None,
) -> KatabaticPrediction:
    """
    Score tomorrow's dawn katabatic potential.

    Args:
        series: Valley and mountain hourly forecast
        criteria: Thresholds and windows (defaults from config)
        reference_utc: "Now" for the best-time-window projection

    Returns:
        A new KatabaticPrediction
    """
    criteria = criteria or Criteria()

    factors = analyze_factors(series, criteria)
    if criteria.include_wave_factors:
        factors = _with_wave_factors(factors, series)

    probability = calculate_probability(factors)
    confidence = determine_confidence(factors, probability)
    recommendation = generate_recommendation(probability, confidence, criteria.minimum_confidence)

    prediction = KatabaticPrediction(
        probability=probability,
        confidence=confidence,
        factors=factors,
        recommendation=recommendation,
        explanation=generate_explanation(factors, probability, recommendation),
        detailed_analysis=generate_detailed_analysis(factors),
        best_time_window=find_best_time_window(criteria.prediction_window, series.tz, reference_utc),
    )
    logger.debug(
        "Prediction: %d%% %s -> %s (%d/4 factors)",
        probability, confidence, recommendation, factors.factors_met,
    )
    return prediction
