"""
Katabatic Dawn Patrol - Synthesizer Module
Deterministic multi-factor katabatic prediction engine.
"""

from .katabatic import analyze_factors
from .mountain_wave import (
    analyze_mountain_waves,
    analyze_stability_profile,
    stability_factor,
    wave_pattern_factor,
)
from .scoring import analyze_prediction, find_best_time_window
from .narrative import format_prediction_log, summarize_prediction

__all__ = [
    "analyze_factors",
    "analyze_mountain_waves",
    "analyze_stability_profile",
    "analyze_prediction",
    "find_best_time_window",
    "format_prediction_log",
    "stability_factor",
    "summarize_prediction",
    "wave_pattern_factor",
]
