"""
Device Integration Module
=========================

Remote automation session layer.

This package contains:
    - session: Abstract session contract, Rect, and the error hierarchy
    - appium: Appium (W3C WebDriver) implementation over aiohttp
"""

from visual_click.device.appium import AppiumSession
from visual_click.device.session import (
    AutomationError,
    AutomationSession,
    ElementNotFoundError,
    Rect,
    SessionFactory,
    SessionNotCreatedError,
    SessionState,
    StaleElementError,
    WebDriverError,
)

__all__ = [
    "AppiumSession",
    "AutomationError",
    "AutomationSession",
    "ElementNotFoundError",
    "Rect",
    "SessionFactory",
    "SessionNotCreatedError",
    "SessionState",
    "StaleElementError",
    "WebDriverError",
]
