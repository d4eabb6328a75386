"""
Diagnostic Artifacts
====================

Best-effort screenshot capture into the artifacts folder.

Capture never raises: a failed capture is logged and reported as ``None``
so it cannot mask the failure being diagnosed.
"""

import base64
from pathlib import Path
from typing import Optional

from visual_click.device.session import AutomationSession
from visual_click.utils.logger import get_logger

logger = get_logger(__name__)


class ArtifactStore:
    """Writes screenshots named after app and step."""

    def __init__(self, directory: Path) -> None:
        self.directory = directory

    def failure_path(self, app_name: str, step_no: int) -> Path:
        return self.directory / f"{app_name}-step{step_no}.png"

    def after_step_path(self, app_name: str, step_no: int) -> Path:
        return self.directory / f"{app_name}-step{step_no}-after.png"

    async def capture(self, session: AutomationSession, path: Path) -> Optional[Path]:
        """
        Capture the current screen to ``path``.

        Args:
            session: Open session.
            path: Destination PNG.

        Returns:
            The written path, or None if capture or write failed.
        """
        try:
            screenshot_b64 = await session.capture_screenshot()
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_bytes(base64.b64decode(screenshot_b64))
        except Exception as e:
            logger.warning("Failed to save screenshot", path=str(path), error=str(e))
            return None

        logger.info("Saved screenshot", path=str(path))
        return path

    async def save_failure(self, session: AutomationSession, app_name: str, step_no: int) -> Optional[Path]:
        """Capture ``{app}-step{N}.png`` after a failed step."""
        return await self.capture(session, self.failure_path(app_name, step_no))

    async def save_after_step(self, session: AutomationSession, app_name: str, step_no: int) -> Optional[Path]:
        """Capture ``{app}-step{N}-after.png`` after a successful step."""
        return await self.capture(session, self.after_step_path(app_name, step_no))
