"""
Tuning Cascade
==============

Resolves the effective match parameters for one locate operation:
step override, else app-level value, else the hard-coded default.
"""

from dataclasses import dataclass, fields
from typing import Any, Optional


@dataclass(frozen=True)
class TuningParams:
    """
    Effective parameters for one match attempt sequence.

    Attributes:
        wait_before_search_ms: Settle delay before the first attempt.
        image_threshold: Minimum template similarity (0..1).
        retries: Attempt budget (>= 1).
        retry_delay_ms: Delay between attempts.
        tap_y_percent: Fraction of the match height to tap at.
        tap_offset_x: Horizontal pixel offset added to the tap point.
        tap_offset_y: Vertical pixel offset added to the tap point.
    """

    wait_before_search_ms: float
    image_threshold: float
    retries: int
    retry_delay_ms: float
    tap_y_percent: float
    tap_offset_x: float
    tap_offset_y: float


DEFAULT_TUNING = TuningParams(
    wait_before_search_ms=2000,
    image_threshold=0.4,
    retries=3,
    retry_delay_ms=1200,
    tap_y_percent=0.75,  # tap lower by default
    tap_offset_x=0,
    tap_offset_y=0,
)

TUNING_FIELDS: tuple[str, ...] = tuple(f.name for f in fields(TuningParams))


def merge_tuning(app: Any, step: Optional[Any] = None) -> TuningParams:
    """
    Merge step overrides over app defaults over hard-coded constants.

    Both inputs are plain records read by attribute; ``None`` means unset.
    Nothing is mutated, so merging the same inputs twice gives equal results.

    Args:
        app: App-level record (an AppConfig).
        step: Optional step-level record (a StepSpec).

    Returns:
        The effective TuningParams.
    """
    values: dict[str, Any] = {}
    for name in TUNING_FIELDS:
        value = getattr(step, name, None) if step is not None else None
        if value is None:
            value = getattr(app, name, None)
        if value is None:
            value = getattr(DEFAULT_TUNING, name)
        values[name] = value

    values["retries"] = int(values["retries"])
    for name in TUNING_FIELDS:
        if name != "retries":
            values[name] = float(values[name])

    return TuningParams(**values)
