"""
Circular statistics for wind direction samples.

Wind direction is angular data: 350° and 10° are 20° apart, not 340°.
These helpers work on unit vectors so wraparound at 0°/360° is handled.

The wave analyzer uses circular_spread (and through it mean_direction) for
wind steadiness. direction_consistency and is_in_preferred_range are public
helpers for callers screening wind samples outside the scoring engine.
"""

from __future__ import annotations

import math
from typing import Iterable, List, Optional, Tuple


def _mean_components(samples_deg: Iterable[float]) -> Tuple[float, float, int]:
    """Mean sine/cosine of the samples and the sample count."""
    values: List[float] = [float(d) for d in samples_deg]
    n = len(values)
    if n == 0:
        return 0.0, 0.0, 0
    sin_sum = sum(math.sin(math.radians(d)) for d in values)
    cos_sum = sum(math.cos(math.radians(d)) for d in values)
    return sin_sum / n, cos_sum / n, n


def mean_direction(samples_deg: Iterable[float]) -> float:
    """Circular mean direction in [0, 360). Empty input returns 0."""
    mean_sin, mean_cos, n = _mean_components(samples_deg)
    if n == 0:
        return 0.0
    direction = math.degrees(math.atan2(mean_sin, mean_cos))
    if direction < 0:
        direction += 360.0
    # atan2 can land on -0.0 or round up to exactly 360.0
    return direction % 360.0


def direction_consistency(samples_deg: Iterable[float]) -> float:
    """
    Resultant vector length scaled to 0-100.

    100 means every sample points the same way, 0 means the samples cancel
    out. Fewer than 2 samples gives 0 (consistency is undefined).
    """
    mean_sin, mean_cos, n = _mean_components(samples_deg)
    if n < 2:
        return 0.0
    resultant = math.sqrt(mean_sin ** 2 + mean_cos ** 2) * 100.0
    return max(0.0, min(100.0, resultant))


def circular_spread(samples_deg: Iterable[float]) -> float:
    """
    RMS angular deviation (degrees) about the circular mean.

    Each difference is wrapped into (-180, 180] before squaring.
    """
    values = [float(d) for d in samples_deg]
    if not values:
        return 0.0
    mean_rad = math.radians(mean_direction(values))

    total = 0.0
    for d in values:
        diff = math.radians(d) - mean_rad
        while diff > math.pi:
            diff -= 2 * math.pi
        while diff < -math.pi:
            diff += 2 * math.pi
        total += diff ** 2
    return math.degrees(math.sqrt(total / len(values)))


def is_in_preferred_range(
    direction: Optional[float],
    preferred: Optional[float],
    range_deg: float,
) -> bool:
    """
    True when `direction` lies within preferred ± range_deg (mod 360).

    Fails open: a missing/NaN direction or an unset (falsy) preferred
    direction skips the check and returns True.
    """
    if direction is None or preferred is None or not preferred:
        return True
    try:
        direction = float(direction)
    except (TypeError, ValueError):
        return True
    if math.isnan(direction):
        return True

    direction %= 360.0
    lower = (preferred - range_deg) % 360.0
    upper = (preferred + range_deg) % 360.0

    if range_deg >= 180:
        return True
    if lower <= upper:
        return lower <= direction <= upper
    # Window crosses north (e.g. 340-20)
    return direction >= lower or direction <= upper
