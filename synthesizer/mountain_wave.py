"""
Mountain Wave Analyzer (Deterministic)

Estimates how lee-side mountain waves interact with the katabatic flow,
from the same surface forecast series:
- upstream (2-4 km) wind scaled from surface wind
- Brunt-Vaisala frequency N from the valley/mountain temperature gradient
- Froude number Fr = U / (N * H)
- qualitative amplitude / organization / surface-coupling classes
- a 0-100 wave propagation potential and the resulting enhancement

The companion stability profile estimates surface vs. wave-level stability
and how efficiently waves couple down to the surface.

Both analyses are total: when the inputs cannot support the physics (zero
stability frequency, non-finite values) the fixed default record is returned
with ``fallback=True``.
"""

import logging
import math
from typing import Optional, Sequence

from core.circular import circular_spread
from core.models import (
    MountainWaveAnalysis,
    StabilityFactor,
    StabilityProfile,
    WavePatternFactor,
    WeatherSample,
    WeatherSeries,
)

logger = logging.getLogger("mountain_wave")

# Front Range barrier and station geometry
TERRAIN_HEIGHT_M = 2000.0
STATION_ELEVATION_DIFF_M = 500.0

# Physics
GRAVITY = 9.81                  # m/s^2
STANDARD_TEMP_K = 288.15        # 15 °C
DRY_ADIABATIC_LAPSE = 0.0098    # K/m

# Upper-level wind runs ~1.5-2x surface wind in this region
UPSTREAM_WIND_SCALE = 1.7

# Froude bands
OPTIMAL_FR_MIN, OPTIMAL_FR_MAX = 0.4, 0.6
NEAR_FR_MIN, NEAR_FR_MAX = 0.3, 0.7
BROAD_FR_MIN, BROAD_FR_MAX = 0.2, 0.8
NEGATIVE_FR_MIN, NEGATIVE_FR_MAX = 0.2, 1.0

HIGH_AMPLITUDE_WIND = 10.0
MODERATE_AMPLITUDE_WIND = 6.0

STRONG_COUPLING_N = 0.01
MODERATE_COUPLING_N = 0.005

ORGANIZED_CONSISTENCY = 0.7
SPEED_SPREAD_NORM = 25.0        # m/s
DIRECTION_SPREAD_NORM = 90.0    # degrees

FROUDE_SCORE = (40, 30, 20, 0)
AMPLITUDE_SCORE = {"high": 25, "moderate": 15, "low": 5}
ORGANIZATION_SCORE = {"organized": 20, "mixed": 10, "chaotic": 0}
COUPLING_SCORE = {"strong": 15, "moderate": 10, "weak": 5}

POSITIVE_POTENTIAL = 60.0
NEGATIVE_POTENTIAL = 30.0

# Stability profile
SURFACE_STABILITY_SCALE = 0.0001
WAVE_LEVEL_RATIO = 0.8
GRADIENT_FLOOR = 0.001

DEFAULT_WAVE_ANALYSIS = MountainWaveAnalysis(
    froude_number=0.5,
    wave_amplitude="low",
    wave_organization="mixed",
    surface_coupling="weak",
    wave_propagation_potential=25.0,
    enhancement_potential="neutral",
    analysis="Unable to analyze mountain wave conditions - using default neutral impact.",
    fallback=True,
)

DEFAULT_STABILITY_PROFILE = StabilityProfile(
    surface_stability=0.005,
    wave_level_stability=0.004,
    stability_gradient="uniform",
    coupling_efficiency=40.0,
    profile_optimal=False,
    analysis="Unable to analyze atmospheric stability profile - using default moderate conditions.",
    fallback=True,
)


def _in_band(value: float, low: float, high: float) -> bool:
    return low <= value <= high


# =============================================================================
# Series aggregates (whole series, not windowed)
# =============================================================================

def average_wind_speed(samples: Sequence[WeatherSample]) -> float:
    if not samples:
        return 0.0
    return sum(s.wind_speed for s in samples) / len(samples)


def average_temperature(samples: Sequence[WeatherSample]) -> float:
    if not samples:
        return 0.0
    return sum(s.temperature for s in samples) / len(samples)


def temperature_gradient(series: WeatherSeries) -> float:
    """Mountain minus valley temperature per km of elevation (K/km)."""
    diff = average_temperature(series.mountain) - average_temperature(series.valley)
    return diff / STATION_ELEVATION_DIFF_M * 1000.0


def estimate_upstream_wind(series: WeatherSeries) -> float:
    valley = average_wind_speed(series.valley)
    mountain = average_wind_speed(series.mountain)
    return max(valley, mountain) * UPSTREAM_WIND_SCALE


def brunt_vaisala_frequency(gradient_k_per_km: float) -> float:
    """N in s^-1; a negative radicand is treated as neutral (N = 0)."""
    actual_lapse = gradient_k_per_km / 1000.0
    radicand = (GRAVITY / STANDARD_TEMP_K) * (DRY_ADIABATIC_LAPSE - actual_lapse)
    return math.sqrt(max(0.0, radicand))


def froude_number(upstream_wind: float, stability: float) -> float:
    """Fr = U / (N * H). Raises ZeroDivisionError when N is zero."""
    return upstream_wind / (stability * TERRAIN_HEIGHT_M)


def _std(values: Sequence[float]) -> float:
    if not values:
        return 0.0
    mean = sum(values) / len(values)
    return math.sqrt(sum((v - mean) ** 2 for v in values) / len(values))


def wind_consistency(samples: Sequence[WeatherSample]) -> float:
    """
    0-1 steadiness of the valley wind.

    Mean of a speed term (1 - std/25 m/s) and a direction term
    (1 - circular spread/90°), each floored at 0.
    """
    if not samples:
        return 0.0
    speed_spread = _std([s.wind_speed for s in samples])
    direction_spread = circular_spread([s.wind_direction for s in samples])
    speed_term = max(0.0, 1.0 - speed_spread / SPEED_SPREAD_NORM)
    direction_term = max(0.0, 1.0 - direction_spread / DIRECTION_SPREAD_NORM)
    return (speed_term + direction_term) / 2.0


# =============================================================================
# Classification
# =============================================================================

def assess_wave_amplitude(fr: float, wind_speed: float) -> str:
    if _in_band(fr, OPTIMAL_FR_MIN, OPTIMAL_FR_MAX) and wind_speed >= HIGH_AMPLITUDE_WIND:
        return "high"
    if _in_band(fr, NEAR_FR_MIN, NEAR_FR_MAX) and wind_speed >= MODERATE_AMPLITUDE_WIND:
        return "moderate"
    return "low"


def assess_wave_organization(fr: float, consistency: float) -> str:
    if _in_band(fr, OPTIMAL_FR_MIN, OPTIMAL_FR_MAX):
        return "organized" if consistency > ORGANIZED_CONSISTENCY else "mixed"
    if _in_band(fr, BROAD_FR_MIN, BROAD_FR_MAX):
        return "mixed"
    return "chaotic"


def assess_surface_coupling(stability: float) -> str:
    if stability > STRONG_COUPLING_N:
        return "strong"
    if stability > MODERATE_COUPLING_N:
        return "moderate"
    return "weak"


def wave_propagation_potential(fr: float, amplitude: str, organization: str, coupling: str) -> float:
    if _in_band(fr, OPTIMAL_FR_MIN, OPTIMAL_FR_MAX):
        score = FROUDE_SCORE[0]
    elif _in_band(fr, NEAR_FR_MIN, NEAR_FR_MAX):
        score = FROUDE_SCORE[1]
    elif _in_band(fr, BROAD_FR_MIN, BROAD_FR_MAX):
        score = FROUDE_SCORE[2]
    else:
        score = FROUDE_SCORE[3]
    score += AMPLITUDE_SCORE[amplitude]
    score += ORGANIZATION_SCORE[organization]
    score += COUPLING_SCORE[coupling]
    return float(min(100, score))


def determine_enhancement(fr: float, potential: float, coupling: str) -> str:
    if (
        _in_band(fr, OPTIMAL_FR_MIN, OPTIMAL_FR_MAX)
        and potential >= POSITIVE_POTENTIAL
        and coupling != "weak"
    ):
        return "positive"
    if fr < NEGATIVE_FR_MIN or fr > NEGATIVE_FR_MAX or potential < NEGATIVE_POTENTIAL:
        return "negative"
    return "neutral"


def wave_analysis_text(fr: float, amplitude: str, organization: str, enhancement: str) -> str:
    if enhancement == "positive":
        return (
            f"Excellent mountain wave conditions (Fr={fr:.2f}) with {amplitude} amplitude "
            f"{organization} waves enhancing katabatic potential."
        )
    if enhancement == "neutral":
        return (
            f"Moderate mountain wave activity (Fr={fr:.2f}) with {amplitude} amplitude "
            f"waves having neutral impact on katabatic flow."
        )
    return (
        f"Poor mountain wave conditions (Fr={fr:.2f}) likely disrupting katabatic "
        f"development with {organization} wave patterns."
    )


# =============================================================================
# Public analyses
# =============================================================================

def _compute_mountain_waves(series: WeatherSeries) -> Optional[MountainWaveAnalysis]:
    upstream_wind = estimate_upstream_wind(series)
    stability = brunt_vaisala_frequency(temperature_gradient(series))
    if stability <= 0.0 or not math.isfinite(upstream_wind):
        return None

    fr = froude_number(upstream_wind, stability)
    amplitude = assess_wave_amplitude(fr, upstream_wind)
    organization = assess_wave_organization(fr, wind_consistency(series.valley))
    coupling = assess_surface_coupling(stability)
    potential = wave_propagation_potential(fr, amplitude, organization, coupling)
    enhancement = determine_enhancement(fr, potential, coupling)

    logger.debug(
        "Waves: U=%.1fm/s N=%.4f Fr=%.2f %s/%s/%s potential=%.0f -> %s",
        upstream_wind, stability, fr, amplitude, organization, coupling, potential, enhancement,
    )
    return MountainWaveAnalysis(
        froude_number=fr,
        wave_amplitude=amplitude,
        wave_organization=organization,
        surface_coupling=coupling,
        wave_propagation_potential=potential,
        enhancement_potential=enhancement,
        analysis=wave_analysis_text(fr, amplitude, organization, enhancement),
    )


def analyze_mountain_waves(series: WeatherSeries) -> MountainWaveAnalysis:
    """
    Mountain wave analysis, or DEFAULT_WAVE_ANALYSIS when undefined.

    A zero stability frequency (mountain at least ~4.9°C warmer than the
    valley) is treated as undefined: the neutral default is returned rather
    than an infinite Froude number classified as chaotic and negative.
    """
    try:
        result = _compute_mountain_waves(series)
    except (ArithmeticError, ValueError) as e:
        logger.warning("Mountain wave analysis failed: %s - using default", e)
        return DEFAULT_WAVE_ANALYSIS
    if result is None:
        logger.warning("Stability frequency is zero, Froude number undefined - using default wave analysis")
        return DEFAULT_WAVE_ANALYSIS
    return result


def assess_stability_gradient(surface: float, wave_level: float) -> str:
    ratio = wave_level / max(surface, GRADIENT_FLOOR)
    if ratio > 1.1:
        return "increasing"
    if ratio < 0.9:
        return "decreasing"
    return "uniform"


def coupling_efficiency(surface: float, wave_level: float, gradient: str) -> float:
    efficiency = 0
    if surface > 0.01:
        efficiency += 40
    elif surface > 0.005:
        efficiency += 25

    if wave_level > 0.005:
        efficiency += 30
    elif wave_level > 0.002:
        efficiency += 20

    if gradient == "decreasing":
        efficiency += 30
    elif gradient == "uniform":
        efficiency += 15
    return float(min(100, efficiency))


def is_profile_optimal(surface: float, wave_level: float, efficiency: float) -> bool:
    return surface > 0.005 and wave_level > 0.002 and efficiency >= 50


def stability_analysis_text(surface: float, efficiency: float, optimal: bool) -> str:
    if optimal:
        return (
            f"Excellent atmospheric stability profile with strong surface layer "
            f"({surface * 1000:.1f}x10^-3 s^-1) and {efficiency:.0f}% coupling efficiency."
        )
    return (
        f"Suboptimal stability profile with limited coupling potential "
        f"({efficiency:.0f}%) between surface and wave levels."
    )


def analyze_stability_profile(series: WeatherSeries) -> StabilityProfile:
    """Surface vs. wave-level stability and coupling efficiency."""
    try:
        gradient_k_per_km = temperature_gradient(series)
        if not math.isfinite(gradient_k_per_km):
            raise ValueError(f"non-finite temperature gradient {gradient_k_per_km}")
    except (ArithmeticError, ValueError) as e:
        logger.warning("Stability profile analysis failed: %s - using default", e)
        return DEFAULT_STABILITY_PROFILE

    surface = max(0.0, gradient_k_per_km * SURFACE_STABILITY_SCALE)
    wave_level = surface * WAVE_LEVEL_RATIO
    gradient = assess_stability_gradient(surface, wave_level)
    efficiency = coupling_efficiency(surface, wave_level, gradient)
    optimal = is_profile_optimal(surface, wave_level, efficiency)

    return StabilityProfile(
        surface_stability=surface,
        wave_level_stability=wave_level,
        stability_gradient=gradient,
        coupling_efficiency=efficiency,
        profile_optimal=optimal,
        analysis=stability_analysis_text(surface, efficiency, optimal),
    )


# =============================================================================
# Wave factors for the 6-factor composite
# =============================================================================

def wave_pattern_factor(analysis: MountainWaveAnalysis) -> WavePatternFactor:
    fr = analysis.froude_number
    potential = analysis.wave_propagation_potential
    enhancement = analysis.enhancement_potential

    meets = _in_band(fr, OPTIMAL_FR_MIN, OPTIMAL_FR_MAX) and enhancement == "positive"

    if _in_band(fr, OPTIMAL_FR_MIN, OPTIMAL_FR_MAX):
        confidence = min(100.0, potential * 1.2)
    elif _in_band(fr, NEAR_FR_MIN, NEAR_FR_MAX):
        confidence = min(75.0, potential)
    elif _in_band(fr, BROAD_FR_MIN, BROAD_FR_MAX):
        confidence = min(50.0, potential * 0.8)
    else:
        confidence = max(10.0, potential * 0.5)

    if meets:
        text = (
            f"Optimal Froude number ({fr:.2f}) creating organized mountain waves "
            f"that enhance katabatic flow development."
        )
    else:
        text = f"Suboptimal Froude number ({fr:.2f}) with {enhancement} wave impact on katabatic conditions."

    return WavePatternFactor(
        meets=meets,
        froude_number=fr,
        wave_enhancement=enhancement,
        confidence=max(0.0, min(100.0, confidence)),
        analysis=text,
    )


def stability_factor(profile: StabilityProfile) -> StabilityFactor:
    efficiency = profile.coupling_efficiency
    optimal = profile.profile_optimal

    meets = optimal and efficiency >= 60
    if optimal and efficiency >= 80:
        confidence = 100.0
    elif optimal and efficiency >= 60:
        confidence = 75.0
    elif efficiency >= 40:
        confidence = 50.0
    else:
        confidence = max(20.0, efficiency)

    if optimal:
        text = (
            f"Strong atmospheric stability structure supporting excellent wave-katabatic "
            f"coupling ({efficiency:.0f}% efficiency)."
        )
    else:
        text = f"Limited atmospheric stability with reduced coupling potential ({efficiency:.0f}% efficiency)."

    return StabilityFactor(
        meets=meets,
        surface_stability=profile.surface_stability,
        coupling_efficiency=efficiency,
        confidence=confidence,
        analysis=text,
    )
