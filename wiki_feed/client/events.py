"""Input normalization.

Keyboard, wheel and swipe input are reduced to Next/Previous intents before
they reach the feed controller. Wheel debouncing lives here, not in the
controller.
"""

import asyncio
import enum
from typing import Callable, Optional

DEFAULT_WHEEL_QUIET_PERIOD = 0.1


class Intent(enum.Enum):
    NEXT = "next"
    PREVIOUS = "previous"


KEY_BINDINGS = {
    "ArrowDown": Intent.NEXT,
    "j": Intent.NEXT,
    "ArrowUp": Intent.PREVIOUS,
    "k": Intent.PREVIOUS,
    # Terminal escape sequences for the arrow keys
    "\x1b[B": Intent.NEXT,
    "\x1b[A": Intent.PREVIOUS,
    "\x1bOB": Intent.NEXT,
    "\x1bOA": Intent.PREVIOUS,
}

SWIPE_BINDINGS = {
    "up": Intent.NEXT,
    "down": Intent.PREVIOUS,
}


def intent_for_key(key: str) -> Optional[Intent]:
    return KEY_BINDINGS.get(key)


def intent_for_swipe(direction: str) -> Optional[Intent]:
    return SWIPE_BINDINGS.get(direction.lower())


def intent_for_wheel(delta_y: float) -> Optional[Intent]:
    """Scrolling down (positive delta) moves to the next article."""
    if delta_y > 0:
        return Intent.NEXT
    if delta_y < 0:
        return Intent.PREVIOUS
    return None


class WheelDebouncer:
    """Coalesce a burst of wheel events into a single intent.

    Each event restarts the quiet-period timer; when it expires, the delta of
    the last event in the burst decides the direction.

    Args:
        on_intent: Callback receiving the resulting intent
        quiet_period: Seconds without wheel events that end a burst
    """

    def __init__(
        self,
        on_intent: Callable[[Intent], object],
        quiet_period: float = DEFAULT_WHEEL_QUIET_PERIOD,
    ):
        self._on_intent = on_intent
        self.quiet_period = quiet_period
        self._handle: Optional[asyncio.TimerHandle] = None

    @property
    def pending(self) -> bool:
        return self._handle is not None

    def feed(self, delta_y: float) -> None:
        """Register one raw wheel event. Must be called on the event loop."""
        if self._handle is not None:
            self._handle.cancel()
        loop = asyncio.get_running_loop()
        self._handle = loop.call_later(self.quiet_period, self._fire, delta_y)

    def cancel(self) -> None:
        if self._handle is not None:
            self._handle.cancel()
            self._handle = None

    def _fire(self, delta_y: float) -> None:
        self._handle = None
        intent = intent_for_wheel(delta_y)
        if intent is not None:
            self._on_intent(intent)


class InputRouter:
    """Single inbound stream of raw input, dispatched as intents.

    Args:
        on_intent: Usually ``FeedController.advance``
        wheel_quiet_period: Debounce window for wheel bursts
    """

    def __init__(
        self,
        on_intent: Callable[[Intent], object],
        wheel_quiet_period: float = DEFAULT_WHEEL_QUIET_PERIOD,
    ):
        self._on_intent = on_intent
        self.wheel = WheelDebouncer(on_intent, wheel_quiet_period)

    def key(self, key: str) -> Optional[Intent]:
        intent = intent_for_key(key)
        if intent is not None:
            self._on_intent(intent)
        return intent

    def swipe(self, direction: str) -> Optional[Intent]:
        intent = intent_for_swipe(direction)
        if intent is not None:
            self._on_intent(intent)
        return intent

    def scroll(self, delta_y: float) -> None:
        self.wheel.feed(delta_y)

    def close(self) -> None:
        self.wheel.cancel()
