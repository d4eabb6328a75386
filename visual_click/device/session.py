"""
Automation Session Abstraction
==============================

Abstract base class defining the remote automation session contract the
match engine and runner consume: match sensitivity, element lookup by
template image, rectangle queries, touch gestures, screenshots and teardown.

Usage:
    from visual_click.device import AppiumSession

    session = await AppiumSession.open(capabilities)
    await session.configure_match_sensitivity(0.4)
    ref = await session.find_element_by_image(template_b64)
    await session.close()
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from enum import Enum
from typing import Any, Awaitable, Callable, Optional


class SessionState(Enum):
    """State of the remote session."""

    CLOSED = "closed"
    OPEN = "open"


class AutomationError(Exception):
    """Base class for errors raised by an automation session."""

    pass


class WebDriverError(AutomationError):
    """
    Error response returned by the remote WebDriver endpoint.

    Attributes:
        error: W3C error code (e.g. "no such element").
        status: HTTP status of the response, if any.
    """

    def __init__(self, message: str, error: str = "unknown error", status: Optional[int] = None):
        super().__init__(message)
        self.error = error
        self.status = status


class SessionNotCreatedError(WebDriverError):
    """The server refused or failed to create a session."""

    pass


class ElementNotFoundError(WebDriverError):
    """No element matched the locator."""

    pass


class StaleElementError(WebDriverError):
    """The element reference is no longer attached to the screen."""

    pass


@dataclass(frozen=True)
class Rect:
    """
    On-screen rectangle of a matched element, in device pixels.

    Attributes:
        x: Left edge.
        y: Top edge.
        width: Width of the match.
        height: Height of the match.
    """

    x: float
    y: float
    width: float
    height: float

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Rect":
        """Build from a WebDriver rect payload."""
        return cls(
            x=float(data["x"]),
            y=float(data["y"]),
            width=float(data["width"]),
            height=float(data["height"]),
        )


class AutomationSession(ABC):
    """
    Abstract base class for one live device/app automation context.

    A session is opened once per app run and closed exactly once.
    """

    def __init__(self, session_id: Optional[str] = None) -> None:
        self.session_id = session_id
        self.state = SessionState.CLOSED

    @property
    def is_open(self) -> bool:
        """Check if the session is currently usable."""
        return self.state == SessionState.OPEN

    @abstractmethod
    async def configure_match_sensitivity(self, threshold: float) -> None:
        """
        Set the minimum similarity (0..1) for template matches.

        Args:
            threshold: Match threshold.
        """
        pass

    @abstractmethod
    async def pause(self, milliseconds: float) -> None:
        """Suspend for the given number of milliseconds."""
        pass

    @abstractmethod
    async def find_element_by_image(self, encoded_image: str) -> Any:
        """
        Locate an element by template image.

        Args:
            encoded_image: Base64-encoded PNG template.

        Returns:
            The provider's raw element reference. Its shape varies between
            providers; see ``visual_click.engine.matcher.extract_element_id``.

        Raises:
            ElementNotFoundError: If nothing on screen matches.
        """
        pass

    @abstractmethod
    async def get_element_rect(self, element_id: str) -> Rect:
        """Return the on-screen rectangle of an element."""
        pass

    @abstractmethod
    async def dispatch_touch(self, actions: list[dict[str, Any]]) -> None:
        """
        Perform a W3C pointer action sequence.

        Args:
            actions: List of input source descriptions.
        """
        pass

    @abstractmethod
    async def release_actions(self) -> None:
        """Release all pressed pointers/keys."""
        pass

    @abstractmethod
    async def capture_screenshot(self) -> str:
        """
        Capture the current screen.

        Returns:
            Base64-encoded PNG screenshot.
        """
        pass

    @abstractmethod
    async def close(self) -> None:
        """Tear down the remote session and release resources."""
        pass


# Opens a session from a capability set
SessionFactory = Callable[[dict[str, Any]], Awaitable[AutomationSession]]
