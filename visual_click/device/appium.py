"""
Appium Session Client
=====================

Implementation of AutomationSession over the W3C WebDriver REST protocol
spoken by an Appium server with the images plugin enabled.

The images plugin adds the ``-image`` locator strategy; the selector is the
base64-encoded template PNG. Match sensitivity is an Appium setting
(``imageMatchThreshold``).

Usage:
    from visual_click.device import AppiumSession

    session = await AppiumSession.open(capabilities)
    ref = await session.find_element_by_image(template_b64)
    await session.close()
"""

import asyncio
import json
import time
from typing import Any, Optional

import aiohttp

from visual_click.config import AppiumSettings, get_settings
from visual_click.device.session import (
    AutomationSession,
    ElementNotFoundError,
    Rect,
    SessionNotCreatedError,
    SessionState,
    StaleElementError,
    WebDriverError,
)
from visual_click.utils.logger import get_logger

logger = get_logger(__name__)

# W3C error codes with a dedicated exception type
_ERROR_TYPES: dict[str, type[WebDriverError]] = {
    "no such element": ElementNotFoundError,
    "stale element reference": StaleElementError,
    "session not created": SessionNotCreatedError,
}


def raise_for_payload(status: int, payload: Any) -> None:
    """
    Raise the matching WebDriverError for an error response.

    Args:
        status: HTTP status code.
        payload: Decoded JSON body (or raw text when not JSON).

    Raises:
        WebDriverError: Always, typed by the W3C error code.
    """
    value = payload.get("value") if isinstance(payload, dict) else None
    if isinstance(value, dict):
        error = str(value.get("error") or "unknown error")
        message = str(value.get("message") or error)
    else:
        error = "unknown error"
        message = str(payload) if payload else f"HTTP {status}"

    exc_type = _ERROR_TYPES.get(error, WebDriverError)
    raise exc_type(message, error=error, status=status)


class AppiumSession(AutomationSession):
    """
    Appium/WebDriver session.

    Provides:
    - Session creation and deletion
    - Appium settings (image match threshold)
    - Image-template element lookup and rectangle queries
    - W3C pointer actions
    - Screenshot capture
    """

    def __init__(
        self,
        http: aiohttp.ClientSession,
        server_url: str,
        session_id: str,
        capabilities: Optional[dict[str, Any]] = None,
    ) -> None:
        """
        Wrap an already-created remote session.

        Args:
            http: HTTP client owned by this session.
            server_url: WebDriver base URL without trailing slash.
            session_id: Remote session id.
            capabilities: Capabilities echoed back by the server.
        """
        super().__init__(session_id)
        self._http = http
        self.server_url = server_url.rstrip("/")
        self.capabilities = capabilities or {}
        self._session_url = f"{self.server_url}/session/{session_id}"
        self.state = SessionState.OPEN

    @classmethod
    async def open(
        cls,
        capabilities: dict[str, Any],
        settings: Optional[AppiumSettings] = None,
        server_url: Optional[str] = None,
    ) -> "AppiumSession":
        """
        Create a new Appium session (installs and launches the app).

        Args:
            capabilities: W3C capabilities, ``appium:`` prefixed where needed.
            settings: Appium settings; defaults to the process settings.
            server_url: Override for the server base URL.

        Returns:
            An open AppiumSession.

        Raises:
            SessionNotCreatedError: If the server rejects the capabilities.
            aiohttp.ClientError: On transport failures.
        """
        settings = settings or get_settings().appium
        base_url = (server_url or settings.get_server_url()).rstrip("/")

        http = aiohttp.ClientSession(
            timeout=aiohttp.ClientTimeout(total=settings.request_timeout),
        )

        logger.info("Opening Appium session", server=base_url, device=capabilities.get("appium:deviceName"))
        start_time = time.time()

        try:
            async with http.post(
                f"{base_url}/session",
                json={"capabilities": {"alwaysMatch": capabilities, "firstMatch": [{}]}},
            ) as response:
                payload = await _read_payload(response)
                if response.status >= 400:
                    raise_for_payload(response.status, payload)

            value = payload.get("value") if isinstance(payload, dict) else None
            value = value if isinstance(value, dict) else {}
            # JSONWP servers put sessionId at the top level
            session_id = value.get("sessionId") or (payload.get("sessionId") if isinstance(payload, dict) else None)
            if not session_id:
                raise SessionNotCreatedError(
                    f"No session id in response: {payload}",
                    error="session not created",
                    status=response.status,
                )
        except BaseException:
            await http.close()
            raise

        logger.info(
            "Appium session opened",
            session_id=session_id,
            duration_ms=int((time.time() - start_time) * 1000),
        )
        return cls(http, base_url, session_id, value.get("capabilities"))

    async def _request(self, method: str, path: str, body: Optional[dict[str, Any]] = None) -> Any:
        """
        Send a session-scoped command and return its ``value``.

        Raises:
            WebDriverError: On an error response.
        """
        url = f"{self._session_url}{path}"
        async with self._http.request(method, url, json=body) as response:
            payload = await _read_payload(response)
            if response.status >= 400:
                raise_for_payload(response.status, payload)

        if isinstance(payload, dict):
            return payload.get("value")
        return payload

    async def configure_match_sensitivity(self, threshold: float) -> None:
        """Set the images plugin ``imageMatchThreshold`` setting."""
        await self._request("POST", "/appium/settings", {"settings": {"imageMatchThreshold": threshold}})
        logger.debug("Match threshold set", threshold=threshold)

    async def pause(self, milliseconds: float) -> None:
        """Sleep locally; the server has nothing to do."""
        await asyncio.sleep(milliseconds / 1000)

    async def find_element_by_image(self, encoded_image: str) -> Any:
        """Find one element with the ``-image`` strategy."""
        return await self._request("POST", "/element", {"using": "-image", "value": encoded_image})

    async def get_element_rect(self, element_id: str) -> Rect:
        """Get the element rectangle."""
        value = await self._request("GET", f"/element/{element_id}/rect")
        if not isinstance(value, dict):
            raise WebDriverError(f"Unexpected rect payload: {value!r}")
        return Rect.from_dict(value)

    async def dispatch_touch(self, actions: list[dict[str, Any]]) -> None:
        """Perform W3C actions."""
        await self._request("POST", "/actions", {"actions": actions})

    async def release_actions(self) -> None:
        """Release W3C actions."""
        await self._request("DELETE", "/actions")

    async def capture_screenshot(self) -> str:
        """
        Capture current screen as base64-encoded PNG.

        Returns:
            Base64-encoded screenshot string.
        """
        start_time = time.time()
        value = await self._request("GET", "/screenshot")
        logger.debug("Screenshot captured", duration_ms=int((time.time() - start_time) * 1000))
        return value or ""

    async def close(self) -> None:
        """Delete the remote session and close the HTTP client."""
        try:
            if self.is_open:
                async with self._http.delete(self._session_url) as response:
                    if response.status >= 400:
                        logger.warning("Session delete returned error", status=response.status)
                    else:
                        logger.info("Appium session deleted", session_id=self.session_id)
        finally:
            self.state = SessionState.CLOSED
            if not self._http.closed:
                await self._http.close()


async def _read_payload(response: aiohttp.ClientResponse) -> Any:
    """Decode a WebDriver response body, tolerating non-JSON error pages."""
    text = await response.text()
    if not text:
        return {}
    try:
        return json.loads(text)
    except ValueError:
        return text
