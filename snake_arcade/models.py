"""Data models."""

from dataclasses import dataclass, field
from enum import Enum
from typing import Optional

from .constants import MAX_LIVES

Cell = tuple[int, int]


class Difficulty(Enum):
    EASY = "easy"
    MEDIUM = "medium"
    HARD = "hard"

    @classmethod
    def parse(cls, value) -> "Difficulty":
        """Difficulty named by ``value``; unknown selections play as easy."""
        try:
            return cls(value)
        except ValueError:
            return cls.EASY


class Theme(Enum):
    CLASSIC = "classic"
    DESERT = "desert"
    ICE = "ice"


class GamePhase(Enum):
    IDLE = "idle"
    RUNNING = "running"
    PAUSED = "paused"
    ENDED = "ended"


class UIEventKind(Enum):
    STATS = "stats"
    LIFE_LOST = "life_lost"
    POWER_UP = "power_up"
    PAUSE = "pause"
    THEME = "theme"
    HIGH_SCORE = "high_score"
    GAME_OVER = "game_over"


@dataclass(frozen=True)
class FruitType:
    name: str
    color: str
    points: int
    weight: int


FRUIT_CATALOG = (
    FruitType("Apple", "#ff3b30", 10, 30),
    FruitType("Banana", "#ffd60a", 15, 25),
    FruitType("Orange", "#ff9f0a", 20, 20),
    FruitType("Grapes", "#5856d6", 25, 15),
    FruitType("Strawberry", "#ff2d55", 30, 8),
    FruitType("Pineapple", "#34c759", 40, 2),
)


@dataclass
class Food:
    cell: Cell
    fruit: FruitType


@dataclass
class SessionState:
    score: int = 0
    level: int = 1
    lives: int = MAX_LIVES
    high_score: int = 0
    speed_ms: int = 0
    power_up_active: bool = False
    power_up_ticks_remaining: int = 0
    phase: GamePhase = GamePhase.IDLE

    @property
    def game_running(self) -> bool:
        return self.phase in (GamePhase.RUNNING, GamePhase.PAUSED)

    @property
    def game_paused(self) -> bool:
        return self.phase is GamePhase.PAUSED


@dataclass
class UIEvent:
    kind: UIEventKind
    payload: dict = field(default_factory=dict)

    def to_dict(self) -> dict:
        return {"event": self.kind.value, **self.payload}


def food_at(food: Optional[Food], cell: Cell) -> bool:
    return food is not None and food.cell == cell
