"""WebSocket session management and message serialization."""

import asyncio
import json
import logging
from typing import Optional

from fastapi import WebSocket

from .canvas import CommandCanvas
from .constants import CANVAS_W, CANVAS_H, CELL_SIZE, OUTBOX_LIMIT
from .engine import GameEngine
from .models import Difficulty, UIEvent
from .storage import HighScoreStore

logger = logging.getLogger(__name__)


class GameSession:
    """One browser tab: its own engine plus a queue of outgoing messages.

    The engine pushes frames and UI events from clock callbacks without
    awaiting; ``pump`` drains the queue onto the socket. The queue is bounded:
    with a slow reader, new frames are dropped (the next tick redraws
    everything) and a UI event evicts the oldest queued message.
    """

    def __init__(self, store: Optional[HighScoreStore] = None, outbox_limit: int = OUTBOX_LIMIT, **engine_kwargs):
        self.outbox: asyncio.Queue[str] = asyncio.Queue(maxsize=outbox_limit)
        self.dropped_frames = 0
        self.canvas = CommandCanvas(CANVAS_W, CANVAS_H, sink=self._send_frame)
        self.engine = GameEngine(self.canvas, presenter=self._send_events, store=store, **engine_kwargs)

    def _send_frame(self, commands: list[dict]):
        if self.outbox.full():
            self.dropped_frames += 1
            logger.debug("Outbox full, dropped frame (%d so far)", self.dropped_frames)
            return
        self.outbox.put_nowait(build_frame_msg(commands))

    def _send_events(self, events: list[UIEvent]):
        for event in events:
            if self.outbox.full():
                self.outbox.get_nowait()
            self.outbox.put_nowait(build_ui_msg(event))

    async def pump(self, ws: WebSocket):
        while True:
            message = await self.outbox.get()
            await ws.send_text(message)

    def close(self):
        self.engine.shutdown()


class ConnectionManager:
    def __init__(self):
        self.sessions: dict[WebSocket, GameSession] = {}

    def connect(self, ws: WebSocket, store: Optional[HighScoreStore] = None) -> GameSession:
        session = GameSession(store)
        self.sessions[ws] = session
        logger.info("Session opened (%d active)", len(self.sessions))
        return session

    def disconnect(self, ws: WebSocket):
        session = self.sessions.pop(ws, None)
        if session is not None:
            session.close()
            logger.info("Session closed (%d active)", len(self.sessions))


def build_welcome_msg(engine: GameEngine) -> str:
    state = engine.state
    return json.dumps({
        "type": "welcome",
        "grid": [state.cols, state.rows],
        "cell": CELL_SIZE,
        "canvas": [CANVAS_W, CANVAS_H],
        "high_score": state.session.high_score,
        "difficulties": [d.value for d in Difficulty],
    })


def build_frame_msg(commands: list[dict]) -> str:
    return json.dumps({"type": "frame", "commands": commands})


def build_ui_msg(event: UIEvent) -> str:
    return json.dumps({"type": "ui", **event.to_dict()})
