import random

import pytest

from snake_arcade.game import GameState
from snake_arcade.models import Food, FRUIT_CATALOG


class FakeTime:
    def __init__(self, t=0.0):
        self.t = t

    def __call__(self):
        return self.t


class FakeHandle:
    def __init__(self, callback):
        self.callback = callback
        self.cancelled = False

    def cancel(self):
        self.cancelled = True


class FakeScheduler:
    """Stands in for the event loop's frame callbacks."""

    def __init__(self):
        self.handles = []

    def __call__(self, callback):
        handle = FakeHandle(callback)
        self.handles.append(handle)
        return handle

    @property
    def live(self):
        return [h for h in self.handles if not h.cancelled]

    def run_frame(self):
        handle = self.handles.pop()
        if not handle.cancelled:
            handle.callback()


@pytest.fixture
def fake_time():
    return FakeTime()


@pytest.fixture
def scheduler():
    return FakeScheduler()


def running_state(cols=10, rows=10, seed=1, snake=None, heading=(1, 0), difficulty=None):
    """A running game with no stones and the food parked in a corner."""
    state = GameState(cols, rows, random.Random(seed))
    if difficulty is not None:
        state.reset(difficulty)
    state.begin()
    state.obstacles = []
    if snake is not None:
        state.snake = list(snake)
    state.heading = heading
    state.pending_direction = heading
    state.food = Food((0, 0), FRUIT_CATALOG[0])
    return state
