"""
Clock-hour window extraction for hourly forecast series.

Samples are matched on local hour-of-day only. The calendar date is ignored,
so a window is expected to occur once per series; a window that wraps
midnight (22:00-02:00) matches hour >= 22 or hour <= 2 but still mixes
samples from different nights.
"""

from __future__ import annotations

import logging
from typing import List, Sequence
from zoneinfo import ZoneInfo

from core.models import TimeWindow, WeatherSample

logger = logging.getLogger("forecast_window")


def hour_in_window(hour: int, window: TimeWindow) -> bool:
    """Inclusive hour test against a clock window."""
    start, end = window.start_hour, window.end_hour
    if start > end:
        return hour >= start or hour <= end
    return start <= hour <= end


def select_window(
    samples: Sequence[WeatherSample],
    window: TimeWindow,
    tz: ZoneInfo,
) -> List[WeatherSample]:
    """Samples whose local hour falls inside `window` (inclusive)."""
    if window.wraps_midnight:
        logger.debug(
            "Window %s wraps midnight; samples are matched by hour only",
            window.label,
        )
    return [s for s in samples if hour_in_window(s.local_hour(tz), window)]


def last_samples(samples: Sequence[WeatherSample], count: int) -> List[WeatherSample]:
    """Trailing `count` samples (all of them if the series is shorter)."""
    if count <= 0:
        return []
    return list(samples[-count:])
