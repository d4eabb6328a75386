"""
Step Orchestrator
=================

Runs an app's configured steps in order after the home-icon tap.

The first failing step ends the run. Each step is validated
when reached, dispatched to the match engine, and diagnosed with a
screenshot on failure.
"""

from dataclasses import dataclass
from pathlib import Path
from typing import Any, Optional

from pydantic import ValidationError

from visual_click.device.session import AutomationSession
from visual_click.engine.assets import TemplateError, encode_template, resolve_asset_path
from visual_click.engine.matcher import MatchResult, locate_and_tap, locate_only
from visual_click.engine.tuning import merge_tuning
from visual_click.models import STEP_TYPES, AppConfig, StepSpec
from visual_click.runner.artifacts import ArtifactStore
from visual_click.runner.loader import format_validation_error
from visual_click.utils.logger import get_logger

logger = get_logger(__name__)


@dataclass
class StepResult:
    """
    Result of running an app's step list.

    Attributes:
        success: Whether every step succeeded.
        error: Failure reason, prefixed with the step number.
        step_number: 1-based number of the failing step.
        steps_completed: Steps that succeeded before stopping.
    """

    success: bool
    error: Optional[str] = None
    step_number: Optional[int] = None
    steps_completed: int = 0


class StepValidationError(Exception):
    """A step record cannot be run."""

    pass


def parse_step(raw: Any, step_no: int, project_root: Path) -> tuple[StepSpec, Path]:
    """
    Validate one raw step record.

    Args:
        raw: Record from the descriptor.
        step_no: 1-based step number, for messages.
        project_root: Root for relative template paths.

    Returns:
        The StepSpec and its resolved template path.

    Raises:
        StepValidationError: With a message naming the step.
    """
    if not isinstance(raw, dict):
        raise StepValidationError(f"Step {step_no} is not an object")

    step_type = raw.get("type")
    if step_type not in STEP_TYPES:
        supported = ", ".join(f'"{t}"' for t in STEP_TYPES)
        raise StepValidationError(f'Step {step_no} unsupported type "{step_type}" (supported: {supported})')

    png = raw.get("png")
    if not png or not isinstance(png, str):
        raise StepValidationError(f'Step {step_no} missing "png"')

    png_path = resolve_asset_path(png, project_root)
    if not png_path.exists():
        raise StepValidationError(f"Step {step_no} PNG not found: {png_path}")

    try:
        spec = StepSpec.model_validate(raw)
    except ValidationError as e:
        raise StepValidationError(f"Step {step_no} has invalid overrides: {format_validation_error(e)}") from e

    return spec, png_path


class StepOrchestrator:
    """
    Sequences the steps of one app run on an open session.
    """

    def __init__(
        self,
        session: AutomationSession,
        app: AppConfig,
        artifacts: ArtifactStore,
        project_root: Path,
    ) -> None:
        """
        Args:
            session: Open session (home icon already tapped).
            app: App descriptor owning the steps.
            artifacts: Screenshot destination.
            project_root: Root for relative template paths.
        """
        self.session = session
        self.app = app
        self.artifacts = artifacts
        self.project_root = project_root

    async def run(self) -> StepResult:
        """
        Run all steps, stopping at the first failure.

        Returns:
            StepResult; success for an empty step list.
        """
        total = len(self.app.steps)
        if not total:
            return StepResult(success=True)

        for index, raw in enumerate(self.app.steps):
            step_no = index + 1

            try:
                spec, png_path = parse_step(raw, step_no, self.project_root)
                template = encode_template(png_path)
            except StepValidationError as e:
                logger.error("Invalid step", step=step_no, error=str(e))
                return StepResult(success=False, error=str(e), step_number=step_no, steps_completed=index)
            except TemplateError as e:
                error = f"Step {step_no} PNG unreadable: {e}"
                logger.error("Invalid step", step=step_no, error=error)
                return StepResult(success=False, error=error, step_number=step_no, steps_completed=index)

            tuning = merge_tuning(self.app, spec)

            logger.info(
                f"Step {step_no}/{total}: {spec.type} {spec.png}",
                threshold=tuning.image_threshold,
                tap_y_percent=tuning.tap_y_percent,
            )

            result: MatchResult
            if spec.taps:
                result = await locate_and_tap(self.session, template, tuning)
            else:
                result = await locate_only(self.session, template, tuning)

            if not result.success:
                await self.artifacts.save_failure(self.session, self.app.name, step_no)
                error = f"Step {step_no} failed ({spec.png}): {result.error_message}"
                logger.warning("Step failed", step=step_no, attempts=result.attempt, error=result.error_message)
                return StepResult(success=False, error=error, step_number=step_no, steps_completed=index)

            logger.info("Step passed", step=step_no, attempt=result.attempt)

            # Proves the UI changed
            if spec.screenshot_after:
                await self.artifacts.save_after_step(self.session, self.app.name, step_no)

        return StepResult(success=True, steps_completed=total)
