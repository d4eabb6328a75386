"""
Run Aggregator
==============

Runs every selected app one after another and summarises the outcome.
"""

from dataclasses import dataclass, field
from typing import Callable, Optional, Sequence

from visual_click.config import Settings, get_settings
from visual_click.device.session import SessionFactory
from visual_click.models import AppConfig
from visual_click.runner.artifacts import ArtifactStore
from visual_click.runner.controller import AppRunController, RunResult
from visual_click.utils.logger import get_logger

logger = get_logger(__name__)


@dataclass
class RunSummary:
    """Results of all app runs, in execution order."""

    results: list[RunResult] = field(default_factory=list)

    @property
    def total(self) -> int:
        return len(self.results)

    @property
    def passed(self) -> int:
        return sum(1 for r in self.results if r.ok)

    @property
    def failed(self) -> int:
        return self.total - self.passed

    @property
    def exit_code(self) -> int:
        """Process exit code: 1 if any run failed."""
        return 1 if any(not r.ok for r in self.results) else 0


def format_summary(summary: RunSummary) -> str:
    """
    Render the human-readable summary table.

    One line per app with home-icon attempts, threshold and duration;
    failing apps get their reason on the following line.
    """
    lines = [
        "",
        "=== Visual Click Summary ===",
        f"Total: {summary.total}  Passed: {summary.passed}  Failed: {summary.failed}",
        "",
    ]

    for r in summary.results:
        status = "PASS" if r.ok else "FAIL"
        lines.append(f"{status}  {r.name}  (attempt {r.attempt}, thr {r.threshold:g}, {r.duration_seconds:g}s)")
        if not r.ok and r.error:
            lines.append(f"   ↳ {r.error}")

    lines.append("")
    return "\n".join(lines)


class RunAggregator:
    """
    Runs AppRunController over a list of apps.
    """

    def __init__(
        self,
        session_factory: Optional[SessionFactory] = None,
        artifacts: Optional[ArtifactStore] = None,
        settings: Optional[Settings] = None,
        on_start: Optional[Callable[[AppConfig], None]] = None,
    ) -> None:
        """
        Args:
            session_factory: Passed to every controller.
            artifacts: Shared screenshot destination.
            settings: Process settings.
            on_start: Called before each app run.
        """
        self.settings = settings or get_settings()
        self.session_factory = session_factory
        self.artifacts = artifacts or ArtifactStore(self.settings.paths.artifacts_path)
        self.on_start = on_start

    async def run(self, apps: Sequence[AppConfig]) -> RunSummary:
        """
        Run every app and collect results.

        Args:
            apps: Validated descriptors, in run order.

        Returns:
            RunSummary of all runs.
        """
        summary = RunSummary()

        # One device: the next run starts only after this one is torn down.
        for app in apps:
            if self.on_start:
                self.on_start(app)

            controller = AppRunController(
                app,
                session_factory=self.session_factory,
                artifacts=self.artifacts,
                settings=self.settings,
            )
            result = await controller.run()
            summary.results.append(result)

            logger.info("App run finished", **result.to_dict())

        logger.info("All runs finished", total=summary.total, passed=summary.passed, failed=summary.failed)
        return summary
