"""
Match Engine Module
===================

Template-image location and tapping.

This package contains:
    - assets: Template path resolution and base64 encoding
    - tap_point: Rectangle to tap coordinate
    - tuning: Step/app/default parameter cascade
    - matcher: Retrying locate and locate-and-tap
"""

from visual_click.engine.assets import TemplateError, encode_template, resolve_asset_path
from visual_click.engine.matcher import (
    ELEMENT_ID_KEYS,
    MalformedMatchError,
    MatchResult,
    extract_element_id,
    locate_and_tap,
    locate_only,
)
from visual_click.engine.tap_point import TapPoint, compute_tap_point
from visual_click.engine.tuning import DEFAULT_TUNING, TuningParams, merge_tuning

__all__ = [
    "TemplateError",
    "encode_template",
    "resolve_asset_path",
    "ELEMENT_ID_KEYS",
    "MalformedMatchError",
    "MatchResult",
    "extract_element_id",
    "locate_and_tap",
    "locate_only",
    "TapPoint",
    "compute_tap_point",
    "DEFAULT_TUNING",
    "TuningParams",
    "merge_tuning",
]
