"""Surface that records draw calls as JSON-friendly commands for the browser canvas."""

from typing import Callable, Optional


def _r(value: float) -> float:
    return round(value, 2)


class CommandCanvas:
    def __init__(self, width: int, height: int, sink: Optional[Callable[[list[dict]], None]] = None):
        self.width = width
        self.height = height
        self.sink = sink
        self.commands: list[dict] = []
        self.last_frame: list[dict] = []

    def begin_frame(self):
        self.commands = []

    def end_frame(self):
        self.last_frame = self.commands
        self.commands = []
        if self.sink is not None:
            self.sink(self.last_frame)

    def fill_rect(self, x, y, w, h, color):
        self.commands.append({"op": "rect", "x": _r(x), "y": _r(y), "w": _r(w), "h": _r(h), "fill": color})

    def round_rect(self, x, y, w, h, radius, color):
        self.commands.append({
            "op": "round_rect", "x": _r(x), "y": _r(y), "w": _r(w), "h": _r(h),
            "r": _r(radius), "fill": color,
        })

    def line(self, x1, y1, x2, y2, color, width=1.0):
        self.commands.append({
            "op": "line", "x1": _r(x1), "y1": _r(y1), "x2": _r(x2), "y2": _r(y2),
            "stroke": color, "width": width,
        })

    def circle(self, cx, cy, radius, color):
        self.commands.append({"op": "circle", "x": _r(cx), "y": _r(cy), "r": _r(radius), "fill": color})

    def ellipse(self, cx, cy, rx, ry, rotation, color):
        self.commands.append({
            "op": "ellipse", "x": _r(cx), "y": _r(cy), "rx": _r(rx), "ry": _r(ry),
            "rotation": rotation, "fill": color,
        })

    def polygon(self, points, color, gradient=None, stroke=None, stroke_width=1.0):
        cmd = {"op": "polygon", "points": [[_r(x), _r(y)] for x, y in points], "fill": color}
        if gradient is not None:
            x0, y0, x1, y1, c0, c1 = gradient
            cmd["gradient"] = [_r(x0), _r(y0), _r(x1), _r(y1), c0, c1]
        if stroke is not None:
            cmd["stroke"] = stroke
            cmd["width"] = stroke_width
        self.commands.append(cmd)
