"""
Tests for the Tap-Point Calculator
==================================
"""

from dataclasses import replace

import pytest

from visual_click.device.session import Rect
from visual_click.engine.tap_point import TapPoint, compute_tap_point, round_half_up
from visual_click.engine.tuning import DEFAULT_TUNING

RECT = Rect(x=100, y=200, width=50, height=80)


class TestComputeTapPoint:
    def test_default_biases_toward_lower_part(self):
        assert compute_tap_point(RECT, DEFAULT_TUNING) == TapPoint(x=125, y=260)

    def test_top_edge(self):
        tuning = replace(DEFAULT_TUNING, tap_y_percent=0)
        assert compute_tap_point(RECT, tuning).y == 200

    def test_bottom_edge(self):
        tuning = replace(DEFAULT_TUNING, tap_y_percent=1)
        assert compute_tap_point(RECT, tuning).y == 280

    def test_offsets_are_added(self):
        tuning = replace(DEFAULT_TUNING, tap_offset_x=-10, tap_offset_y=5)
        assert compute_tap_point(RECT, tuning) == TapPoint(x=115, y=265)

    def test_result_is_integer(self):
        point = compute_tap_point(Rect(x=0.4, y=0.4, width=3, height=3), DEFAULT_TUNING)
        assert isinstance(point.x, int)
        assert isinstance(point.y, int)

    def test_half_rounds_up(self):
        point = compute_tap_point(Rect(x=0, y=0, width=25, height=2), DEFAULT_TUNING)
        # 12.5 -> 13, 1.5 -> 2
        assert point == TapPoint(x=13, y=2)


@pytest.mark.parametrize(
    "value,expected",
    [(2.5, 3), (2.4, 2), (-2.5, -2), (-2.6, -3), (0.0, 0)],
)
def test_round_half_up(value, expected):
    assert round_half_up(value) == expected


def test_tap_y_percent_outside_match():
    below = compute_tap_point(RECT, replace(DEFAULT_TUNING, tap_y_percent=1.25))
    above = compute_tap_point(RECT, replace(DEFAULT_TUNING, tap_y_percent=-0.1))

    assert below.y == 300
    assert below.y > RECT.y + RECT.height
    assert above.y == 192
