"""
Descriptor Models
=================

Validated, immutable records for app descriptors and step descriptors.

Descriptor JSON uses camelCase keys (``homeIcon``, ``tapYPercent``); the
models accept either the camelCase alias or the snake_case field name.
Unset tuning fields stay ``None`` so the default cascade in
``visual_click.engine.tuning`` is the single place defaults are applied.
"""

from pathlib import Path
from typing import Any, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

StepType = Literal["tapImage", "assertImage"]

STEP_TYPES: tuple[str, ...] = ("tapImage", "assertImage")

# Session idle timeout (seconds) when the descriptor does not set one
DEFAULT_NEW_COMMAND_TIMEOUT = 300

_descriptor_config = ConfigDict(
    alias_generator=to_camel,
    populate_by_name=True,
    frozen=True,
    extra="ignore",
)


class TuningOverrides(BaseModel):
    """Optional numeric tuning shared by app and step descriptors."""

    model_config = _descriptor_config

    wait_before_search_ms: Optional[float] = Field(default=None, ge=0)
    image_threshold: Optional[float] = Field(default=None, ge=0, le=1)
    retries: Optional[int] = Field(default=None, ge=1)
    retry_delay_ms: Optional[float] = Field(default=None, ge=0)
    tap_y_percent: Optional[float] = None
    tap_offset_x: Optional[float] = None
    tap_offset_y: Optional[float] = None


class StepSpec(TuningOverrides):
    """
    One step of an app run.

    Attributes:
        type: ``tapImage`` (find and tap) or ``assertImage`` (find only).
        png: Template image reference, absolute or relative to the project root.
        screenshot_after: Capture a confirmation screenshot on success.
    """

    type: StepType
    png: str = Field(min_length=1)
    screenshot_after: bool = False

    @property
    def taps(self) -> bool:
        """Whether this step issues a tap gesture."""
        return self.type == "tapImage"


class AppConfig(TuningOverrides):
    """
    One app descriptor after discovery and validation.

    Attributes:
        name: App identity, used in logs and artifact names.
        apk: APK reference as written in the descriptor.
        apk_path: Resolved, existing APK path.
        home_icon: Home-icon template reference as written.
        home_icon_path: Resolved, existing home-icon template path.
        new_command_timeout: Session idle timeout in seconds.
        steps: Raw step records, validated one at a time when run.
    """

    name: str = Field(min_length=1)
    apk: str
    apk_path: Path
    home_icon: str
    home_icon_path: Path
    new_command_timeout: int = Field(default=DEFAULT_NEW_COMMAND_TIMEOUT, gt=0)
    steps: tuple[Any, ...] = ()
