import asyncio
import random
import threading

import pytest

from snake_arcade.canvas import CommandCanvas
from snake_arcade.engine import GameEngine
from snake_arcade.models import Difficulty, Food, FRUIT_CATALOG, GamePhase, UIEventKind
from snake_arcade.renderer import RenderSurfaceError
from snake_arcade.storage import HighScoreStore


@pytest.fixture
def published():
    return []


@pytest.fixture
def store(tmp_path):
    s = HighScoreStore(str(tmp_path / "scores.db"))
    yield s
    s.close()


@pytest.fixture
def engine(published, store, fake_time, scheduler):
    canvas = CommandCanvas(200, 200)
    return GameEngine(canvas, presenter=published.extend, store=store, cols=10, rows=10,
                      rng=random.Random(5), now=fake_time, request_frame=scheduler,
                      persist=lambda save, value: save(value))


def kinds(events):
    return [e.kind for e in events]


def clear_board(engine):
    engine.state.obstacles = []
    engine.state.food = Food((0, 0), FRUIT_CATALOG[0])


def test_surface_is_required():
    with pytest.raises(RenderSurfaceError):
        GameEngine(None)


def test_construction_draws_idle_board(engine):
    assert engine.state.phase is GamePhase.IDLE
    assert engine.renderer.surface.last_frame
    assert not engine.clock.running


def test_start_runs_session(engine, published, scheduler):
    engine.start("medium")
    assert engine.state.difficulty is Difficulty.MEDIUM
    assert engine.state.phase is GamePhase.RUNNING
    assert engine.clock.running
    assert len(scheduler.live) == 1
    assert UIEventKind.STATS in kinds(published)


def test_unknown_difficulty_plays_easy(engine):
    engine.start("nightmare")
    assert engine.state.difficulty is Difficulty.EASY


def test_clock_drives_the_snake(engine, fake_time, scheduler):
    engine.start()
    clear_board(engine)
    fake_time.t = 1.0
    scheduler.run_frame()
    assert engine.state.snake == [(6, 5)]


def test_game_over_stops_clock(engine, published, scheduler):
    engine.start()
    clear_board(engine)
    engine.state.session.lives = 1
    engine.state.snake = [(9, 5)]
    engine.step()

    assert engine.state.phase is GamePhase.ENDED
    assert not engine.clock.running
    assert scheduler.live == []
    assert UIEventKind.GAME_OVER in kinds(published)

    engine.step()
    assert engine.state.snake == [(9, 5)]


def test_high_score_is_persisted(engine, store):
    engine.start()
    clear_board(engine)
    engine.state.food = Food((6, 5), FRUIT_CATALOG[1])
    engine.step()
    assert store.load() == 15


def test_high_score_loaded_on_start(engine, store):
    store.save(300)
    engine.start()
    assert engine.state.session.high_score == 300


def test_restart_cancels_previous_loop(engine, scheduler):
    engine.start("hard")
    first = scheduler.handles[-1]
    engine.restart()
    assert first.cancelled
    assert engine.state.difficulty is Difficulty.HARD
    assert len(scheduler.live) == 1


def test_pause_via_space(engine, published):
    engine.start()
    published.clear()
    engine.input.handle_key("Space")
    assert engine.state.session.game_paused
    assert published[-1].kind is UIEventKind.PAUSE
    assert published[-1].payload == {"paused": True}

    engine.resume()
    assert not engine.state.session.game_paused
    assert published[-1].payload == {"paused": False}


def test_pause_ignored_before_start(engine, published):
    published.clear()
    engine.toggle_pause()
    assert published == []


def test_show_start_screen_returns_to_idle(engine, scheduler):
    engine.start()
    engine.show_start_screen()
    assert engine.state.phase is GamePhase.IDLE
    assert not engine.clock.running
    assert scheduler.live == []


class SlowStore:
    """Store whose writes wait until the test releases them."""

    def __init__(self):
        self.released = threading.Event()
        self.saved = []

    def load(self):
        return 0

    def save(self, value):
        self.released.wait(2)
        self.saved.append(value)


def test_high_score_save_does_not_block_tick(fake_time, scheduler):
    store = SlowStore()

    async def scenario():
        engine = GameEngine(CommandCanvas(200, 200), store=store, cols=10, rows=10,
                            rng=random.Random(5), now=fake_time, request_frame=scheduler)
        engine.start()
        clear_board(engine)
        engine.state.food = Food((6, 5), FRUIT_CATALOG[0])
        engine.step()
        # the tick finished while the write is still parked in the executor
        assert engine.state.session.score == 10
        assert store.saved == []

        store.released.set()
        for _ in range(200):
            if store.saved:
                break
            await asyncio.sleep(0.01)

    asyncio.run(scenario())
    assert store.saved == [10]
