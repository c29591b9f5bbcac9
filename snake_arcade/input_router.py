"""Keyboard, button and swipe input -> pending direction."""

from typing import Callable, Optional

from .constants import DIRECTIONS, KEY_BINDINGS, PAUSE_KEY, SWIPE_THRESHOLD
from .game import GameState
from .models import GamePhase


def classify_swipe(dx: float, dy: float, threshold: float = SWIPE_THRESHOLD) -> Optional[str]:
    """Direction of a swipe by its dominant axis, or None for a tap."""
    if abs(dx) > abs(dy):
        if dx > threshold:
            return "right"
        if dx < -threshold:
            return "left"
    else:
        if dy > threshold:
            return "down"
        if dy < -threshold:
            return "up"
    return None


def is_reversal(direction: tuple[int, int], heading: tuple[int, int]) -> bool:
    return direction == (-heading[0], -heading[1]) and direction != (0, 0)


class InputRouter:
    """Writes the pending-direction slot of a GameState.

    Handlers never advance the simulation; the clock consumes the pending
    direction on the next tick.
    """

    def __init__(self, state: GameState, on_pause: Callable[[], None]):
        self.state = state
        self.on_pause = on_pause
        self.touch_start: Optional[tuple[float, float]] = None

    def request_direction(self, name: str) -> bool:
        vec = DIRECTIONS.get(name)
        if vec is None or self.state.phase is not GamePhase.RUNNING:
            return False
        if is_reversal(vec, self.state.heading):
            return False
        self.state.pending_direction = vec
        return True

    def handle_key(self, code: str) -> bool:
        if code == PAUSE_KEY:
            self.on_pause()
            return True
        name = KEY_BINDINGS.get(code)
        if name is None:
            return False
        return self.request_direction(name)

    def handle_button(self, name: str) -> bool:
        return self.request_direction(name)

    def handle_touch_start(self, x: float, y: float):
        self.touch_start = (x, y)

    def handle_touch_end(self, x: float, y: float) -> bool:
        if self.touch_start is None:
            return False
        sx, sy = self.touch_start
        self.touch_start = None
        name = classify_swipe(x - sx, y - sy)
        if name is None:
            return False
        return self.request_direction(name)
