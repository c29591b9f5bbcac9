"""Frame-callback clock that runs a tick whenever the tick interval has elapsed."""

import asyncio
import time
from typing import Callable, Optional

from .constants import FRAME_RATE

FRAME_INTERVAL = 1 / FRAME_RATE


def call_later_frame(callback: Callable[[], None]):
    """Schedule ``callback`` for the next frame on the running event loop."""
    return asyncio.get_running_loop().call_later(FRAME_INTERVAL, callback)


class Clock:
    """Decouples the frame rate from the tick rate.

    Every frame compares the time since the last tick with ``interval_ms()``,
    which is read fresh each frame so the game speeds up as soon as the
    interval shrinks. ``start`` cancels the previous callback chain before
    starting a new one; a callback left over from an older chain is ignored.
    """

    def __init__(self, on_tick: Callable[[], None], interval_ms: Callable[[], float],
                 now: Callable[[], float] = time.monotonic,
                 request_frame: Callable = call_later_frame):
        self.on_tick = on_tick
        self.interval_ms = interval_ms
        self.now = now
        self.request_frame = request_frame
        self.running = False
        self._handle = None
        self._generation = 0
        self._last_tick_ms = 0.0

    def _now_ms(self) -> float:
        return self.now() * 1000.0

    def start(self):
        self.stop()
        self._generation += 1
        self.running = True
        self._last_tick_ms = self._now_ms()
        self._schedule(self._generation)

    def stop(self):
        self.running = False
        if self._handle is not None:
            self._handle.cancel()
            self._handle = None

    def _schedule(self, generation: int):
        self._handle = self.request_frame(lambda: self._frame(generation))

    def _frame(self, generation: int):
        if generation != self._generation or not self.running:
            return
        self._handle = None
        self.advance()
        # on_tick may have stopped or restarted the clock
        if generation == self._generation and self.running:
            self._schedule(generation)

    def advance(self) -> bool:
        """Run one tick if it is due. Returns whether a tick ran."""
        now = self._now_ms()
        if now - self._last_tick_ms < self.interval_ms():
            return False
        self._last_tick_ms = now
        self.on_tick()
        return True

    @property
    def pending(self) -> Optional[object]:
        return self._handle
