import os
import sys

sys.path.append(os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

import pytest

from core.circular import (
    circular_spread,
    direction_consistency,
    is_in_preferred_range,
    mean_direction,
)


def _angular_distance(a: float, b: float) -> float:
    d = abs(a - b) % 360.0
    return min(d, 360.0 - d)


def test_mean_direction_wraps_through_north():
    assert _angular_distance(mean_direction([350.0, 10.0]), 0.0) < 1e-6
    assert 0.0 <= mean_direction([350.0, 10.0]) < 360.0


def test_mean_direction_simple_and_empty():
    assert mean_direction([80.0, 100.0]) == pytest.approx(90.0)
    assert mean_direction([]) == 0.0


def test_direction_consistency_bounds():
    assert direction_consistency([270.0, 270.0, 270.0]) == pytest.approx(100.0)
    assert direction_consistency([0.0, 180.0]) == pytest.approx(0.0, abs=1e-9)
    # Undefined for a single sample
    assert direction_consistency([45.0]) == 0.0


def test_circular_spread_uses_wrapped_differences():
    assert circular_spread([350.0, 10.0]) == pytest.approx(10.0)
    assert circular_spread([270.0, 270.0]) == pytest.approx(0.0, abs=1e-9)
    assert circular_spread([]) == 0.0


class TestPreferredRange:

    def test_window_crossing_north(self):
        assert is_in_preferred_range(350.0, 10.0, 30.0) is True
        assert is_in_preferred_range(30.0, 10.0, 30.0) is True
        assert is_in_preferred_range(180.0, 10.0, 30.0) is False

    def test_plain_window(self):
        assert is_in_preferred_range(260.0, 270.0, 20.0) is True
        assert is_in_preferred_range(200.0, 270.0, 20.0) is False

    def test_fails_open(self):
        assert is_in_preferred_range(None, 270.0, 20.0) is True
        assert is_in_preferred_range(float("nan"), 270.0, 20.0) is True
        assert is_in_preferred_range("north", 270.0, 20.0) is True
        # Unset preferred direction skips the check
        assert is_in_preferred_range(90.0, 0.0, 10.0) is True

    def test_half_circle_or_more_always_matches(self):
        assert is_in_preferred_range(90.0, 270.0, 180.0) is True


def test_circular_spread_centres_on_mean_direction():
    # Mean sits on north, so each sample is 10 degrees off
    assert circular_spread([350.0, 10.0, 350.0, 10.0]) == pytest.approx(10.0)
    assert mean_direction([90.0, 100.0, 110.0]) == pytest.approx(100.0)
    assert circular_spread([90.0, 100.0, 110.0]) == pytest.approx((200.0 / 3.0) ** 0.5)
