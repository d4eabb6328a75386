"""
Shared Test Fixtures
====================

Pytest fixtures used across all test modules.
Provides a mocked AutomationSession and an on-disk project layout with
real PNG templates.
"""

import base64
import io
from pathlib import Path
from typing import Any

import pytest
from unittest.mock import AsyncMock, MagicMock
from PIL import Image

from visual_click.config import AppiumSettings, PathSettings, RunnerSettings, Settings
from visual_click.device.session import AutomationSession, Rect
from visual_click.engine.matcher import W3C_ELEMENT_KEY
from visual_click.models import AppConfig

# A 1x1 black PNG base64
SCREENSHOT_B64 = "iVBORw0KGgoAAAANSUhEUgAAAAEAAAABCAYAAAAfFcSJAAAADUlEQVR42mP8/5+hHgAHggJ/PchI7wAAAABJRU5ErkJggg=="

TEMPLATE_COLORS = {
    "home": (0, 0, 255),
    "a": (255, 0, 0),
    "b": (0, 255, 0),
    "c": (255, 255, 0),
}


def _png_bytes(color: tuple[int, int, int], size: tuple[int, int] = (8, 8)) -> bytes:
    """Render a solid-colour PNG."""
    output = io.BytesIO()
    Image.new("RGB", size, color).save(output, format="PNG")
    return output.getvalue()


def template_b64(project: Path, name: str) -> str:
    """Base64 of a template as the engine will send it."""
    return base64.b64encode((project / "icons" / f"{name}.png").read_bytes()).decode("ascii")


def make_session() -> MagicMock:
    """Create a mock AutomationSession with every operation succeeding."""
    session = MagicMock(spec=AutomationSession)

    session.configure_match_sensitivity = AsyncMock(return_value=None)
    session.pause = AsyncMock(return_value=None)
    session.find_element_by_image = AsyncMock(return_value={W3C_ELEMENT_KEY: "el-1"})
    session.get_element_rect = AsyncMock(return_value=Rect(x=100, y=200, width=50, height=80))
    session.dispatch_touch = AsyncMock(return_value=None)
    session.release_actions = AsyncMock(return_value=None)
    session.capture_screenshot = AsyncMock(return_value=SCREENSHOT_B64)
    session.close = AsyncMock(return_value=None)

    return session


def make_app(project: Path, name: str = "demo", steps: tuple[Any, ...] = (), **overrides: Any) -> AppConfig:
    """Build an AppConfig pointing at the fixture project."""
    data: dict[str, Any] = {
        "name": name,
        "apk": "demo.apk",
        "apk_path": project / "apps" / "demo.apk",
        "home_icon": "icons/home.png",
        "home_icon_path": project / "icons" / "home.png",
        "wait_before_search_ms": 0,
        "retry_delay_ms": 0,
        "steps": tuple(steps),
    }
    data.update(overrides)
    return AppConfig(**data)


# ---------------------------------------------------------------------------
# Session mock
# ---------------------------------------------------------------------------

@pytest.fixture
def mock_session() -> MagicMock:
    return make_session()


# ---------------------------------------------------------------------------
# Project layout
# ---------------------------------------------------------------------------

@pytest.fixture
def project(tmp_path: Path) -> Path:
    """
    Create a project root::

        apps/demo.apk
        icons/{home,a,b,c}.png
        configs/
    """
    (tmp_path / "apps").mkdir()
    (tmp_path / "apps" / "demo.apk").write_bytes(b"PK\x03\x04 fake apk")
    (tmp_path / "icons").mkdir()
    for name, color in TEMPLATE_COLORS.items():
        (tmp_path / "icons" / f"{name}.png").write_bytes(_png_bytes(color))
    (tmp_path / "configs").mkdir()
    return tmp_path


@pytest.fixture
def settings(project: Path) -> Settings:
    """Settings rooted at the fixture project."""
    return Settings(
        appium=AppiumSettings(device_name="emulator-5554"),
        paths=PathSettings(project_root=project),
        runner=RunnerSettings(),
    )
