"""Game constants."""

import os

CELL_SIZE = 20
CANVAS_W, CANVAS_H = 600, 400
GRID_W, GRID_H = CANVAS_W // CELL_SIZE, CANVAS_H // CELL_SIZE
FRAME_RATE = 60
MAX_LIVES = 3
POINTS_PER_LEVEL = 100

BASE_SPEED_MS = {"easy": 160, "medium": 140, "hard": 120}
LEVEL_SPEED_STEP_MS = 12
HARD_MODE_BONUS_MS = 10
SPEED_FLOOR_MS = 60

POWER_UP_CHANCE = 0.1
POWER_UP_TICKS = 60
POWER_UP_BOOST_MS = 30
POWER_UP_FLOOR_MS = 40

OBSTACLE_BASE = {"easy": 2, "medium": 4, "hard": 6}
OBSTACLE_DENSITY = {"easy": 1.5, "medium": 1.5, "hard": 2}
MAX_OBSTACLES = 30

PLACEMENT_ATTEMPTS = 500
SWIPE_THRESHOLD = 20

DIRECTIONS = {
    "up": (0, -1),
    "down": (0, 1),
    "left": (-1, 0),
    "right": (1, 0),
}
OPPOSITES = {"up": "down", "down": "up", "left": "right", "right": "left"}

KEY_BINDINGS = {
    "ArrowUp": "up", "KeyW": "up",
    "ArrowDown": "down", "KeyS": "down",
    "ArrowLeft": "left", "KeyA": "left",
    "ArrowRight": "right", "KeyD": "right",
}
PAUSE_KEY = "Space"

THEME_PALETTES = {
    "classic": {"background": "#000", "grid": "#1a1a1a", "stone": "#888"},
    "desert": {"background": "#1a1208", "grid": "#3a2a18", "stone": "#9a8066"},
    "ice": {"background": "#021523", "grid": "#0c3a66", "stone": "#7aa2c9"},
}

HIGH_SCORE_KEY = "snakeHighScore"
OUTBOX_LIMIT = 64

# Deployment settings
HOST = os.getenv("SNAKE_HOST", "0.0.0.0")
PORT = int(os.getenv("SNAKE_PORT", "8765"))
DB_PATH = os.getenv("SNAKE_DB_PATH", "snake_arcade.db")
LOG_LEVEL = os.getenv("SNAKE_LOG_LEVEL", "INFO")
