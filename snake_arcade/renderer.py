"""Draws a GameState onto a Surface. Reads state only."""

import math
from typing import Optional, Protocol

from .constants import CELL_SIZE, THEME_PALETTES
from .game import STOPPED, GameState
from .models import Cell, Food

HEAD_BACK = "#3fa95a"
HEAD_FRONT = "#9df28f"
HEAD_OUTLINE = "#2e7d32"
NOSTRIL = "#1b5e20"
TAIL = "rgb(76,120,80)"
STEM = "#7b3f00"
LEAF = "#2ecc71"
HIGHLIGHT = "rgba(255,255,255,0.85)"
ARC_STEPS = 8


class RenderSurfaceError(RuntimeError):
    pass


class Surface(Protocol):
    width: int
    height: int

    def begin_frame(self): ...
    def fill_rect(self, x, y, w, h, color): ...
    def round_rect(self, x, y, w, h, radius, color): ...
    def line(self, x1, y1, x2, y2, color, width=1.0): ...
    def circle(self, cx, cy, radius, color): ...
    def ellipse(self, cx, cy, rx, ry, rotation, color): ...
    def polygon(self, points, color, gradient=None, stroke=None, stroke_width=1.0): ...
    def end_frame(self): ...


def arc_points(cx: float, cy: float, r: float, start: float, end: float) -> list[tuple[float, float]]:
    return [
        (cx + r * math.cos(start + (end - start) * i / ARC_STEPS),
         cy + r * math.sin(start + (end - start) * i / ARC_STEPS))
        for i in range(ARC_STEPS + 1)
    ]


def step_between(a: Cell, b: Cell) -> tuple[int, int]:
    """Unit step pointing from a to b."""
    return ((b[0] > a[0]) - (b[0] < a[0]), (b[1] > a[1]) - (b[1] < a[1]))


class Renderer:
    def __init__(self, surface: Optional[Surface], cell_size: int = CELL_SIZE):
        if surface is None:
            raise RenderSurfaceError("no drawing surface available")
        self.surface = surface
        self.cell = cell_size

    def draw(self, state: GameState):
        palette = THEME_PALETTES[state.theme.value]
        surface = self.surface
        surface.begin_frame()
        self.draw_board(state, palette)

        snake = state.snake
        self.draw_head(snake[0], self.head_direction(state))
        for i in range(1, len(snake) - 1):
            self.draw_body(snake[i], i)
        if len(snake) > 1:
            self.draw_tail(snake[-1], snake[-2])

        for x, y in state.obstacles:
            surface.fill_rect(x * self.cell + 2, y * self.cell + 2, self.cell - 4, self.cell - 4, palette["stone"])
        if state.food is not None:
            self.draw_food(state.food)
        surface.end_frame()

    def draw_board(self, state: GameState, palette: dict):
        s, gs = self.surface, self.cell
        w, h = state.cols * gs, state.rows * gs
        s.fill_rect(0, 0, s.width, s.height, palette["background"])
        for c in range(state.cols + 1):
            s.line(c * gs, 0, c * gs, h, palette["grid"], 0.5)
        for r in range(state.rows + 1):
            s.line(0, r * gs, w, r * gs, palette["grid"], 0.5)

    @staticmethod
    def head_direction(state: GameState) -> tuple[int, int]:
        if state.heading != STOPPED:
            return state.heading
        if len(state.snake) > 1:
            return step_between(state.snake[1], state.snake[0])
        return (1, 0)

    def draw_head(self, seg: Cell, direction: tuple[int, int]):
        gs = self.cell
        cx, cy = seg[0] * gs + gs / 2, seg[1] * gs + gs / 2
        ux, uy = direction
        px, py = -uy, ux
        ang = math.atan2(uy, ux)
        half_len, r = gs * 0.28, gs * 0.36
        tip = (cx + ux * half_len, cy + uy * half_len)
        base = (cx - ux * half_len, cy - uy * half_len)

        # capsule: wide front arc, slightly narrower back arc
        outline = arc_points(tip[0], tip[1], r, ang - math.pi / 2, ang + math.pi / 2)
        outline += arc_points(base[0], base[1], r * 0.8, ang + math.pi / 2, ang + 3 * math.pi / 2)
        self.surface.polygon(
            outline, HEAD_FRONT,
            gradient=(base[0], base[1], tip[0], tip[1], HEAD_BACK, HEAD_FRONT),
            stroke=HEAD_OUTLINE, stroke_width=2,
        )

        eye_r, fwd, side = 2.4, gs * 0.10, gs * 0.18
        for sign in (1, -1):
            ex, ey = cx + ux * fwd + sign * px * side, cy + uy * fwd + sign * py * side
            self.surface.circle(ex, ey, eye_r, "#fff")
            self.surface.circle(ex, ey, eye_r * 0.45, "#000")

        nx, ny = cx + ux * (half_len - gs * 0.06), cy + uy * (half_len - gs * 0.06)
        for sign in (1, -1):
            self.surface.circle(nx + sign * px * gs * 0.06, ny + sign * py * gs * 0.06, 1.2, NOSTRIL)

    def draw_body(self, seg: Cell, index: int):
        gs, margin = self.cell, 3
        green = max(60, 220 - index * 10)
        self.surface.round_rect(seg[0] * gs + margin, seg[1] * gs + margin,
                                gs - 2 * margin, gs - 2 * margin, 4, f"rgb(76,{green},80)")

    def draw_tail(self, seg: Cell, prev: Cell):
        gs = self.cell
        cx, cy = seg[0] * gs + gs / 2, seg[1] * gs + gs / 2
        ux, uy = step_between(prev, seg)
        px, py = -uy, ux
        half_w = gs * 0.22
        tip = (cx + ux * gs * 0.38, cy + uy * gs * 0.38)
        bx, by = cx - ux * gs * 0.2, cy - uy * gs * 0.2
        self.surface.polygon([tip, (bx + px * half_w, by + py * half_w), (bx - px * half_w, by - py * half_w)], TAIL)

    def draw_food(self, food: Food):
        gs = self.cell
        x, y = food.cell
        cx, cy = x * gs + gs / 2, y * gs + gs / 2
        # pricier fruit is drawn slightly larger
        rad = gs / 2 - 4 + min(2, food.fruit.points / 20)
        self.surface.circle(cx, cy, rad, food.fruit.color)
        self.surface.circle(cx - rad / 3, cy - rad / 3, 2, HIGHLIGHT)
        self.surface.line(cx, cy - rad + 1, cx, cy - rad - 3, STEM, 2)
        self.surface.ellipse(cx + 4, cy - rad, 4, 2, -0.6, LEAF)
