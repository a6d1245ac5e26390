"""
Narrative Generator - human-readable renderings of a katabatic prediction.
"""

from typing import List, Tuple

from config import SiteConfig
from core.models import AnalysisSummary, KatabaticFactors, KatabaticPrediction

FACTOR_SHORT_NAMES = {
    "precipitation": "rain",
    "sky_conditions": "clear sky",
    "pressure_change": "pressure",
    "temperature_differential": "temp diff",
}

CONCERN_NAMES = {
    "precipitation": "High precipitation risk",
    "sky_conditions": "Poor sky conditions",
    "pressure_change": "Insufficient pressure change",
    "temperature_differential": "Low temperature differential",
}

ASPECT_NAMES = {
    "precipitation": "Low precipitation",
    "sky_conditions": "Clear skies",
    "pressure_change": "Good pressure change",
    "temperature_differential": "Strong temperature differential",
}

TOTAL_CORE_FACTORS = 4


def _glyph(meets: bool) -> str:
    return "✅" if meets else "❌"


def _named_factors(factors: KatabaticFactors) -> List[Tuple[str, object]]:
    return list(zip(FACTOR_SHORT_NAMES.keys(), factors.core()))


def generate_explanation(factors: KatabaticFactors, probability: int, recommendation: str) -> str:
    met_names = [FACTOR_SHORT_NAMES[name] for name, f in _named_factors(factors) if f.meets]
    met = len(met_names)
    listed = ", ".join(met_names) if met_names else "none"

    if recommendation == "go":
        return (
            f"Strong conditions! {met}/{TOTAL_CORE_FACTORS} factors favorable ({listed}). "
            f"{probability}% katabatic probability."
        )
    if recommendation == "maybe":
        return (
            f"Mixed conditions. {met}/{TOTAL_CORE_FACTORS} factors favorable ({listed}). "
            f"{probability}% katabatic probability - check closer to dawn."
        )
    return (
        f"Poor conditions. Only {met}/{TOTAL_CORE_FACTORS} factors favorable. "
        f"{probability}% katabatic probability suggests waiting for better conditions."
    )


def generate_detailed_analysis(factors: KatabaticFactors) -> str:
    p = factors.precipitation
    s = factors.sky_conditions
    pc = factors.pressure_change
    t = factors.temperature_differential

    lines = [
        "KATABATIC FACTOR ANALYSIS",
        f"PRECIPITATION: {_glyph(p.meets)} {p.value:.0f}% chance (max {p.threshold:.0f}%)",
        f"CLEAR SKY: {_glyph(s.meets)} {s.clear_period_coverage:.0f}% clear period "
        f"(min {s.threshold:.0f}%, avg cloud {s.average_cloud_cover:.0f}%)",
        f"PRESSURE: {_glyph(pc.meets)} {pc.change:+.1f} hPa {pc.trend} (min {pc.threshold:.1f} hPa)",
        f"TEMP DIFF: {_glyph(t.meets)} {t.differential:.1f}°C "
        f"(valley {t.valley_temp:.1f}°C / mountain {t.mountain_temp:.1f}°C, min {t.threshold:.1f}°C)",
    ]
    if factors.wave_pattern is not None:
        w = factors.wave_pattern
        lines.append(f"WAVE PATTERN: {_glyph(w.meets)} Fr={w.froude_number:.2f} {w.wave_enhancement}")
    if factors.atmospheric_stability is not None:
        a = factors.atmospheric_stability
        lines.append(f"STABILITY: {_glyph(a.meets)} {a.coupling_efficiency:.0f}% coupling efficiency")
    return "\n".join(lines)


def format_prediction_log(site: SiteConfig, prediction: KatabaticPrediction) -> str:
    """
    One-line log entry for a prediction.

    Format: [valley] 2026-10-19 06:00-08:00 | 4/4 | P=89% high | GO
    """
    window = prediction.best_time_window
    if window is not None:
        when = f"{window.start:%Y-%m-%d %H:%M}-{window.end:%H:%M}"
    else:
        when = "n/a"
    return (
        f"[{site.site_id}] {when} | "
        f"{prediction.factors.factors_met}/{TOTAL_CORE_FACTORS} | "
        f"P={prediction.probability}% {prediction.confidence} | "
        f"{prediction.recommendation.upper()}"
    )


def summarize_prediction(prediction: KatabaticPrediction) -> AnalysisSummary:
    """Quick-reference summary: factors met, biggest concern, best aspect."""
    named = _named_factors(prediction.factors)

    unmet = [(name, f) for name, f in named if not f.meets]
    if unmet:
        name, _ = min(unmet, key=lambda item: item[1].confidence)
        primary_concern = CONCERN_NAMES[name]
    else:
        name, _ = min(named, key=lambda item: item[1].confidence)
        primary_concern = f"Monitor {CONCERN_NAMES[name].lower()}"

    met = [(name, f) for name, f in named if f.meets]
    name, _ = max(met or named, key=lambda item: item[1].confidence)

    return AnalysisSummary(
        probability=prediction.probability,
        confidence=prediction.confidence,
        recommendation=prediction.recommendation,
        factors_met=prediction.factors.factors_met,
        total_factors=TOTAL_CORE_FACTORS,
        primary_concern=primary_concern,
        best_aspect=ASPECT_NAMES[name],
    )
