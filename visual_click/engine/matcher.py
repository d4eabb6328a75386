"""
Visual Match Engine
===================

Bounded retry loop around one remote locate-by-template call.

Template matching against a live UI is flaky (animations, slow loads), so
every locate runs under the same protocol:

1. Set the remote match threshold.
2. Optionally wait for the screen to settle.
3. Try up to ``retries`` times, pausing ``retry_delay_ms`` between attempts.

``locate_and_tap`` additionally reads the match rectangle and taps inside
it; ``locate_only`` just confirms a usable element exists.

Usage:
    from visual_click.engine import locate_and_tap, merge_tuning

    result = await locate_and_tap(session, template_b64, merge_tuning(app))
    if not result.success:
        print(result.error_message)
"""

from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Optional

from visual_click.device.session import AutomationError, AutomationSession, Rect
from visual_click.engine.tap_point import TapPoint, compute_tap_point
from visual_click.engine.tuning import TuningParams
from visual_click.utils.logger import get_logger

logger = get_logger(__name__)

W3C_ELEMENT_KEY = "element-6066-11e4-a52e-4f735466cecf"

# Probed in order; first present wins
ELEMENT_ID_KEYS: tuple[str, ...] = (W3C_ELEMENT_KEY, "ELEMENT", "elementId")

TAP_HOLD_MS = 80


class MalformedMatchError(AutomationError):
    """The locate call succeeded but returned no usable element id."""

    pass


@dataclass
class MatchResult:
    """
    Outcome of one locate (or locate+tap) operation.

    Attributes:
        success: Whether a usable element was found (and tapped).
        attempt: Attempts consumed (1-based; equals retries on failure).
        rect: Matched rectangle (tap only).
        tap_point: Coordinate tapped (tap only).
        error: Last error seen when the budget ran out.
    """

    success: bool
    attempt: int
    rect: Optional[Rect] = None
    tap_point: Optional[TapPoint] = None
    error: Optional[BaseException] = None

    @property
    def error_message(self) -> str:
        """Human-readable failure reason."""
        if self.error is None:
            return ""
        return str(self.error) or type(self.error).__name__


def extract_element_id(ref: Any) -> Optional[str]:
    """
    Pull the element id out of a locate response.

    Providers key the id differently (W3C key, legacy ``ELEMENT``,
    ``elementId``) or return it as a bare string.

    Args:
        ref: Raw element reference from the provider.

    Returns:
        Element id, or None if no known field is present.
    """
    if isinstance(ref, str):
        return ref or None
    if isinstance(ref, dict):
        for key in ELEMENT_ID_KEYS:
            value = ref.get(key)
            if value:
                return str(value)
    return None


def build_tap_gesture(point: TapPoint) -> list[dict[str, Any]]:
    """Single-finger tap: move, press, brief hold, release."""
    return [
        {
            "type": "pointer",
            "id": "finger1",
            "parameters": {"pointerType": "touch"},
            "actions": [
                {"type": "pointerMove", "duration": 0, "x": point.x, "y": point.y},
                {"type": "pointerDown", "button": 0},
                {"type": "pause", "duration": TAP_HOLD_MS},
                {"type": "pointerUp", "button": 0},
            ],
        }
    ]


async def _find_element_id(session: AutomationSession, template: str) -> str:
    """
    Locate the template and return a usable element id.

    Raises:
        MalformedMatchError: If the response carries no known id field.
    """
    ref = await session.find_element_by_image(template)
    element_id = extract_element_id(ref)
    if not element_id:
        raise MalformedMatchError(f"Image element returned without a valid element id. Got: {ref!r}")
    return element_id


async def _run_with_retries(
    session: AutomationSession,
    tuning: TuningParams,
    attempt_fn: Callable[[int], Awaitable[MatchResult]],
) -> MatchResult:
    """
    Shared protocol: threshold, settle delay, bounded retries.

    Exceptions from the threshold call or the settle delay propagate;
    exceptions inside an attempt are retained and retried.
    """
    await session.configure_match_sensitivity(tuning.image_threshold)

    if tuning.wait_before_search_ms > 0:
        await session.pause(tuning.wait_before_search_ms)

    last_error: Optional[BaseException] = None
    for attempt in range(1, tuning.retries + 1):
        try:
            return await attempt_fn(attempt)
        except Exception as e:
            last_error = e
            logger.debug(
                "Match attempt failed",
                attempt=attempt,
                retries=tuning.retries,
                error=str(e) or type(e).__name__,
            )
            if attempt < tuning.retries:
                await session.pause(tuning.retry_delay_ms)

    return MatchResult(success=False, attempt=tuning.retries, error=last_error)


async def locate_and_tap(
    session: AutomationSession,
    template: str,
    tuning: TuningParams,
) -> MatchResult:
    """
    Find a template on screen and tap inside the match.

    Args:
        session: Open automation session.
        template: Base64-encoded template PNG.
        tuning: Effective tuning.

    Returns:
        MatchResult with rect and tap point on success.
    """

    async def attempt_tap(attempt: int) -> MatchResult:
        element_id = await _find_element_id(session, template)
        rect = await session.get_element_rect(element_id)
        point = compute_tap_point(rect, tuning)

        await session.dispatch_touch(build_tap_gesture(point))
        await session.release_actions()

        logger.debug("Tapped match", attempt=attempt, x=point.x, y=point.y)
        return MatchResult(success=True, attempt=attempt, rect=rect, tap_point=point)

    return await _run_with_retries(session, tuning, attempt_tap)


async def locate_only(
    session: AutomationSession,
    template: str,
    tuning: TuningParams,
) -> MatchResult:
    """
    Confirm a template is on screen without touching the UI.

    Args:
        session: Open automation session.
        template: Base64-encoded template PNG.
        tuning: Effective tuning.

    Returns:
        MatchResult (no rect or tap point).
    """

    async def attempt_find(attempt: int) -> MatchResult:
        await _find_element_id(session, template)
        logger.debug("Template found", attempt=attempt)
        return MatchResult(success=True, attempt=attempt)

    return await _run_with_retries(session, tuning, attempt_find)
