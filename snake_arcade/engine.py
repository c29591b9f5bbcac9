"""GameEngine: owns one game session and wires state, clock, input and rendering."""

import asyncio
import logging
import random
import time
from typing import Callable, Optional

from .clock import Clock, call_later_frame
from .constants import GRID_W, GRID_H, CELL_SIZE
from .game import GameState
from .input_router import InputRouter
from .models import Difficulty, GamePhase, UIEvent, UIEventKind
from .renderer import Renderer, RenderSurfaceError, Surface
from .storage import HighScoreStore

logger = logging.getLogger(__name__)

Presenter = Callable[[list[UIEvent]], None]


def save_in_background(save: Callable[[int], None], value: int):
    """Hand a high-score write to the default executor so the tick never waits on disk."""
    future = asyncio.get_running_loop().run_in_executor(None, save, value)
    future.add_done_callback(_log_save_failure)


def _log_save_failure(future):
    if not future.cancelled() and future.exception() is not None:
        logger.warning("High score save failed", exc_info=future.exception())


class GameEngine:
    def __init__(self, surface: Optional[Surface], presenter: Optional[Presenter] = None,
                 store: Optional[HighScoreStore] = None, *,
                 cols: int = GRID_W, rows: int = GRID_H, cell_size: int = CELL_SIZE,
                 rng: Optional[random.Random] = None,
                 now: Callable[[], float] = time.monotonic,
                 request_frame: Callable = call_later_frame,
                 persist: Callable = save_in_background):
        if surface is None:
            raise RenderSurfaceError("GameEngine needs a drawing surface")
        self.presenter = presenter
        self.store = store
        self.persist = persist
        self.state = GameState(cols, rows, rng)
        self.state.reset(high_score=self._load_high_score())
        self.renderer = Renderer(surface, cell_size)
        self.input = InputRouter(self.state, self.toggle_pause)
        self.clock = Clock(self.step, lambda: self.state.session.speed_ms, now=now, request_frame=request_frame)
        self.render()

    def _load_high_score(self) -> int:
        return self.store.load() if self.store is not None else 0

    def render(self):
        self.renderer.draw(self.state)

    def publish(self, events: list[UIEvent]):
        for event in events:
            if event.kind is UIEventKind.HIGH_SCORE and self.store is not None:
                logger.info("New high score %d", event.payload["high_score"])
                self.persist(self.store.save, event.payload["high_score"])
            elif event.kind is UIEventKind.GAME_OVER:
                logger.info("Game over: score=%d level=%d", event.payload["score"], event.payload["level"])
        if events and self.presenter is not None:
            self.presenter(events)

    def step(self):
        """One clock tick: simulate, draw, then tell the presenter."""
        events = self.state.tick()
        self.render()
        self.publish(events)
        if self.state.phase is GamePhase.ENDED:
            self.clock.stop()

    def start(self, difficulty=None):
        """New session with the given difficulty (or the current one), running immediately."""
        self.clock.stop()
        if difficulty is not None and not isinstance(difficulty, Difficulty):
            difficulty = Difficulty.parse(difficulty)
        self.state.reset(difficulty, high_score=self._load_high_score())
        logger.info("Game started on %s", self.state.difficulty.value)
        events = self.state.begin()
        self.render()
        self.publish(events)
        self.clock.start()

    def restart(self):
        self.start(self.state.difficulty)

    def show_start_screen(self):
        self.clock.stop()
        self.state.reset(high_score=self._load_high_score())
        self.render()
        self.publish([self.state.stats_event()])

    def toggle_pause(self):
        if self.state.toggle_pause():
            self.publish([UIEvent(UIEventKind.PAUSE, {"paused": self.state.session.game_paused})])

    def resume(self):
        if self.state.resume():
            self.publish([UIEvent(UIEventKind.PAUSE, {"paused": False})])

    def shutdown(self):
        self.clock.stop()
