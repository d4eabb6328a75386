"""
App Run Controller
==================

Owns one end-to-end run for one app.

The run moves through:

    INIT -> SESSION_OPEN -> HOME_MATCHED -> STEPS_RUNNING -> SUCCEEDED | FAILED -> TORN_DOWN

Every outcome, including unexpected exceptions, becomes a RunResult; the
session is closed on every exit path and a close failure never replaces
the run's own outcome.

Usage:
    from visual_click.runner import AppRunController

    controller = AppRunController(app_config)
    result = await controller.run()
"""

import time
from dataclasses import dataclass
from enum import Enum, auto
from functools import partial
from typing import Any, Optional

from visual_click.config import AppiumSettings, Settings, get_settings
from visual_click.device.appium import AppiumSession
from visual_click.device.session import AutomationSession, SessionFactory
from visual_click.engine.assets import TemplateError, encode_template
from visual_click.engine.matcher import locate_and_tap
from visual_click.engine.tap_point import round_half_up
from visual_click.engine.tuning import merge_tuning
from visual_click.models import AppConfig
from visual_click.runner.artifacts import ArtifactStore
from visual_click.runner.steps import StepOrchestrator
from visual_click.utils.logger import LogContext, get_logger

logger = get_logger(__name__)


class RunState(Enum):
    """State of one app run."""

    INIT = auto()
    SESSION_OPEN = auto()
    HOME_MATCHED = auto()
    STEPS_RUNNING = auto()
    SUCCEEDED = auto()
    FAILED = auto()
    TORN_DOWN = auto()


@dataclass
class RunResult:
    """
    Final result of one app run.

    Attributes:
        name: App name.
        ok: Home icon and every step succeeded.
        attempt: Home-icon attempts consumed (0 if it never ran).
        threshold: App-level match threshold.
        duration_ms: Wall-clock time from session open attempt to completion.
        error: Failure reason.
    """

    name: str
    ok: bool
    attempt: int
    threshold: float
    duration_ms: int
    error: Optional[str] = None

    @property
    def duration_seconds(self) -> float:
        """Duration rounded to 0.1 s for display."""
        return round_half_up(self.duration_ms / 100) / 10

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for serialization."""
        return {
            "name": self.name,
            "ok": self.ok,
            "attempt": self.attempt,
            "threshold": self.threshold,
            "duration_ms": self.duration_ms,
            "error": self.error,
        }


def build_capabilities(app: AppConfig, appium: AppiumSettings) -> dict[str, Any]:
    """
    Derive session capabilities for an app.

    The ``appium:app`` capability installs and launches the APK.
    """
    return {
        "platformName": appium.platform_name,
        "appium:automationName": appium.automation_name,
        "appium:deviceName": appium.device_name,
        "appium:app": str(app.apk_path),
        "appium:newCommandTimeout": app.new_command_timeout,
        "appium:autoGrantPermissions": appium.auto_grant_permissions,
    }


class AppRunController:
    """
    Runs one app: open session, tap home icon, run steps, tear down.
    """

    def __init__(
        self,
        app: AppConfig,
        session_factory: Optional[SessionFactory] = None,
        artifacts: Optional[ArtifactStore] = None,
        settings: Optional[Settings] = None,
    ) -> None:
        """
        Args:
            app: Validated app descriptor.
            session_factory: Opens a session from capabilities;
                             defaults to AppiumSession.open.
            artifacts: Screenshot destination; defaults to the artifacts folder.
            settings: Process settings.
        """
        self.app = app
        self.settings = settings or get_settings()
        self.session_factory = session_factory or partial(AppiumSession.open, settings=self.settings.appium)
        self.artifacts = artifacts or ArtifactStore(self.settings.paths.artifacts_path)
        self.state = RunState.INIT
        self.history: list[RunState] = [RunState.INIT]

    def _transition(self, state: RunState) -> None:
        logger.debug("Run state", state=state.name, previous=self.state.name)
        self.state = state
        self.history.append(state)

    def _result(self, ok: bool, attempt: int, threshold: float, started: float, error: Optional[str] = None) -> RunResult:
        if not ok:
            self._transition(RunState.FAILED)
        else:
            self._transition(RunState.SUCCEEDED)
        return RunResult(
            name=self.app.name,
            ok=ok,
            attempt=attempt,
            threshold=threshold,
            duration_ms=int((time.monotonic() - started) * 1000),
            error=error,
        )

    async def run(self) -> RunResult:
        """
        Execute the run.

        Returns:
            RunResult; never raises for per-run failures.
        """
        with LogContext(app=self.app.name):
            return await self._run()

    async def _run(self) -> RunResult:
        tuning = merge_tuning(self.app)
        session: Optional[AutomationSession] = None
        started = time.monotonic()

        try:
            home_template = encode_template(self.app.home_icon_path)
        except TemplateError as e:
            result = self._result(False, 0, tuning.image_threshold, started, str(e))
            self._transition(RunState.TORN_DOWN)
            return result

        try:
            self._transition(RunState.SESSION_OPEN)
            started = time.monotonic()
            session = await self.session_factory(build_capabilities(self.app, self.settings.appium))

            home = await locate_and_tap(session, home_template, tuning)
            if not home.success:
                logger.warning("Home icon not found", attempts=home.attempt, error=home.error_message)
                return self._result(False, home.attempt, tuning.image_threshold, started, home.error_message)

            self._transition(RunState.HOME_MATCHED)
            logger.info("Home icon tapped", attempt=home.attempt)

            self._transition(RunState.STEPS_RUNNING)
            orchestrator = StepOrchestrator(
                session,
                self.app,
                self.artifacts,
                self.settings.paths.project_root,
            )
            steps = await orchestrator.run()

            if steps.success:
                return self._result(True, home.attempt, tuning.image_threshold, started)
            return self._result(False, home.attempt, tuning.image_threshold, started, steps.error or "Steps failed")

        except Exception as e:
            logger.exception("Run failed", error=str(e))
            return self._result(False, 0, tuning.image_threshold, started, str(e) or type(e).__name__)

        finally:
            await self._teardown(session)

    async def _teardown(self, session: Optional[AutomationSession]) -> None:
        """Close the session; close errors are logged, never raised."""
        if session is not None:
            try:
                await session.close()
            except Exception as e:
                logger.warning("Session teardown failed", error=str(e))
        self._transition(RunState.TORN_DOWN)
