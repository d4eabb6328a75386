"""
Tap-Point Calculator
====================

Turns a matched rectangle into the device coordinate to tap.

Matches are regions, not points. The default ``tap_y_percent`` of 0.75
biases the tap toward the lower part of the match, below any icon label.
"""

import math
from dataclasses import dataclass

from visual_click.device.session import Rect
from visual_click.engine.tuning import TuningParams


@dataclass(frozen=True)
class TapPoint:
    """Absolute device coordinate."""

    x: int
    y: int


def round_half_up(value: float) -> int:
    """Round to the nearest integer, halves toward +infinity."""
    return int(math.floor(value + 0.5))


def compute_tap_point(rect: Rect, tuning: TuningParams) -> TapPoint:
    """
    Compute the tap coordinate inside a matched rectangle.

    x is the horizontal centre plus ``tap_offset_x``; y is
    ``tap_y_percent`` of the way down from the top edge plus ``tap_offset_y``.

    Args:
        rect: Matched rectangle.
        tuning: Effective tuning (only the tap fields are read).

    Returns:
        Integer TapPoint.
    """
    return TapPoint(
        x=round_half_up(rect.x + rect.width / 2 + tuning.tap_offset_x),
        y=round_half_up(rect.y + rect.height * tuning.tap_y_percent + tuning.tap_offset_y),
    )
