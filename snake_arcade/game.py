"""Core game state and logic."""

import logging
import random
from typing import Optional

from .constants import (
    GRID_W, GRID_H, MAX_LIVES, DIRECTIONS, PLACEMENT_ATTEMPTS,
    POWER_UP_CHANCE, POWER_UP_TICKS,
)
from .levels import level_for_score, obstacle_target, speed_for_level, speed_label, theme_for_level
from .models import (
    FRUIT_CATALOG, Cell, Difficulty, Food, FruitType, GamePhase, SessionState,
    Theme, UIEvent, UIEventKind, food_at,
)

logger = logging.getLogger(__name__)

STOPPED = (0, 0)


def pick_fruit(rng, catalog=FRUIT_CATALOG) -> FruitType:
    """Weighted draw from the fruit catalog; rarer fruit is worth more."""
    total = sum(f.weight for f in catalog)
    r = rng.random() * total
    for fruit in catalog:
        r -= fruit.weight
        if r <= 0:
            return fruit
    return catalog[0]


def random_free_cell(rng, cols: int, rows: int, blocked) -> Optional[Cell]:
    """Rejection-sample a cell outside ``blocked``.

    Falls back to scanning the whole grid once the attempts run out, so a
    nearly full board still terminates. Returns None when no cell is free.
    """
    attempts = 0
    while attempts < PLACEMENT_ATTEMPTS:
        cell = (rng.randrange(cols), rng.randrange(rows))
        if cell not in blocked:
            return cell
        attempts += 1

    logger.debug("Placement fell back to a full scan (%d blocked cells)", len(blocked))
    free = [(x, y) for y in range(rows) for x in range(cols) if (x, y) not in blocked]
    if not free:
        return None
    return rng.choice(free)


class GameState:
    def __init__(self, cols: int = GRID_W, rows: int = GRID_H, rng: Optional[random.Random] = None):
        self.cols = cols
        self.rows = rows
        self.rng = rng or random.Random()
        self.difficulty = Difficulty.EASY
        self.reset()

    @property
    def center(self) -> Cell:
        return (self.cols // 2, self.rows // 2)

    @property
    def head(self) -> Cell:
        return self.snake[0]

    @property
    def theme(self) -> Theme:
        return theme_for_level(self.session.level)

    @property
    def phase(self) -> GamePhase:
        return self.session.phase

    def reset(self, difficulty: Optional[Difficulty] = None, high_score: int = 0):
        """Fresh session in the Idle phase; the snake waits at the center."""
        if difficulty is not None:
            self.difficulty = difficulty
        self.snake: list[Cell] = [self.center]
        self.heading = STOPPED
        self.pending_direction = STOPPED
        self.food: Optional[Food] = None
        self.obstacles: list[Cell] = []
        self.session = SessionState(
            lives=MAX_LIVES,
            high_score=high_score,
            speed_ms=speed_for_level(self.difficulty, 1),
        )
        self.place_food()
        self.spawn_obstacles()

    def begin(self) -> list[UIEvent]:
        self.session.phase = GamePhase.RUNNING
        self.heading = DIRECTIONS["right"]
        self.pending_direction = self.heading
        self.spawn_obstacles()
        return [
            UIEvent(UIEventKind.THEME, {"theme": self.theme.value}),
            UIEvent(UIEventKind.POWER_UP, {"active": False}),
            self.stats_event(),
        ]

    def in_bounds(self, cell: Cell) -> bool:
        x, y = cell
        return 0 <= x < self.cols and 0 <= y < self.rows

    # ── Placement ──────────────────────────────────────────────────

    def place_food(self):
        blocked = set(self.snake)
        blocked.update(self.obstacles)
        cell = random_free_cell(self.rng, self.cols, self.rows, blocked)
        self.food = Food(cell, pick_fruit(self.rng)) if cell is not None else None

    def spawn_obstacles(self):
        target = obstacle_target(self.difficulty, self.session.level)
        if len(self.obstacles) > target:
            del self.obstacles[target:]
            return

        # A respawned snake starts on the center cell heading right; keep both cells clear.
        cx, cy = self.center
        blocked = set(self.snake)
        blocked.update(self.obstacles)
        blocked.update(((cx, cy), (cx + 1, cy)))
        if self.food is not None:
            blocked.add(self.food.cell)

        while len(self.obstacles) < target:
            cell = random_free_cell(self.rng, self.cols, self.rows, blocked)
            if cell is None:
                break
            self.obstacles.append(cell)
            blocked.add(cell)

    # ── Controls ───────────────────────────────────────────────────

    def toggle_pause(self) -> bool:
        """Flip Running/Paused. Returns False when there is nothing to toggle."""
        if self.session.phase is GamePhase.RUNNING:
            self.session.phase = GamePhase.PAUSED
        elif self.session.phase is GamePhase.PAUSED:
            self.session.phase = GamePhase.RUNNING
        else:
            return False
        return True

    def resume(self) -> bool:
        if self.session.phase is not GamePhase.PAUSED:
            return False
        self.session.phase = GamePhase.RUNNING
        return True

    # ── Simulation ─────────────────────────────────────────────────

    def tick(self) -> list[UIEvent]:
        if self.session.phase is not GamePhase.RUNNING:
            return []

        self.heading = self.pending_direction
        dx, dy = self.heading
        hx, hy = self.head
        new_head = (hx + dx, hy + dy)

        if not self.in_bounds(new_head) or new_head in self.snake or new_head in self.obstacles:
            return self.lose_life()

        events = []
        s = self.session
        activated = False
        self.snake.insert(0, new_head)

        if food_at(self.food, new_head):
            prev_theme = self.theme
            s.score += self.food.fruit.points
            s.level = level_for_score(s.score)
            if self.rng.random() < POWER_UP_CHANCE:
                activated = True
                if not s.power_up_active:
                    events.append(UIEvent(UIEventKind.POWER_UP, {"active": True}))
                s.power_up_active = True
                s.power_up_ticks_remaining = POWER_UP_TICKS
            s.speed_ms = speed_for_level(self.difficulty, s.level, s.power_up_active)
            self.place_food()
            if self.theme is not prev_theme:
                events.append(UIEvent(UIEventKind.THEME, {"theme": self.theme.value}))
            self.spawn_obstacles()
        else:
            self.snake.pop()

        if s.power_up_active and not activated:
            s.power_up_ticks_remaining -= 1
            if s.power_up_ticks_remaining <= 0:
                self.clear_power_up(events)

        if s.score > s.high_score:
            s.high_score = s.score
            events.append(UIEvent(UIEventKind.HIGH_SCORE, {"high_score": s.high_score}))
        events.append(self.stats_event())
        return events

    def clear_power_up(self, events: list[UIEvent]):
        s = self.session
        if s.power_up_active:
            events.append(UIEvent(UIEventKind.POWER_UP, {"active": False}))
        s.power_up_active = False
        s.power_up_ticks_remaining = 0
        s.speed_ms = speed_for_level(self.difficulty, s.level)

    def lose_life(self) -> list[UIEvent]:
        s = self.session
        s.lives -= 1
        events = [UIEvent(UIEventKind.LIFE_LOST, {"lives": s.lives})]
        logger.debug("Life lost at %s, %d left", self.head, s.lives)

        if s.lives <= 0:
            s.lives = 0
            s.phase = GamePhase.ENDED
            events.append(self.stats_event())
            events.append(UIEvent(UIEventKind.GAME_OVER, {"score": s.score, "level": s.level}))
            return events

        self.snake = [self.center]
        self.heading = DIRECTIONS["right"]
        self.pending_direction = self.heading
        self.clear_power_up(events)
        self.place_food()
        events.append(self.stats_event())
        return events

    def stats_event(self) -> UIEvent:
        s = self.session
        return UIEvent(UIEventKind.STATS, {
            "score": s.score,
            "level": s.level,
            "lives": s.lives,
            "high_score": s.high_score,
            "speed": speed_label(s.level, s.power_up_active),
            "power_up": s.power_up_active,
        })
