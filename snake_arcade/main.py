"""FastAPI application: HTTP route, WebSocket endpoint and per-tab game sessions."""

import asyncio
import json
import logging
import os

from contextlib import asynccontextmanager

from fastapi import FastAPI, WebSocket, WebSocketDisconnect
from fastapi.responses import FileResponse
from fastapi.staticfiles import StaticFiles

from .constants import DB_PATH, HOST, PORT, LOG_LEVEL
from .connection_manager import ConnectionManager, GameSession, build_welcome_msg
from .storage import HighScoreStore

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    app.state.store = HighScoreStore(DB_PATH)
    yield
    app.state.store.close()


app = FastAPI(lifespan=lifespan)
manager = ConnectionManager()

ROOT_DIR = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
static_dir = os.path.join(ROOT_DIR, "static")
app.mount("/static", StaticFiles(directory=static_dir), name="static")

HTML_PATH = os.path.join(ROOT_DIR, "index.html")


@app.get("/")
async def serve_index():
    return FileResponse(HTML_PATH, media_type="text/html")


def handle_message(session: GameSession, msg: dict):
    """Apply one client message to the session's engine."""
    engine = session.engine
    kind = msg.get("type")
    if kind == "start":
        engine.start(msg.get("difficulty"))
    elif kind == "restart":
        engine.restart()
    elif kind == "menu":
        engine.show_start_screen()
    elif kind == "pause":
        engine.toggle_pause()
    elif kind == "resume":
        engine.resume()
    elif kind == "key":
        code = msg.get("code")
        if isinstance(code, str):
            engine.input.handle_key(code)
    elif kind == "button":
        direction = msg.get("direction")
        if isinstance(direction, str):
            engine.input.handle_button(direction)
    elif kind in ("touch_start", "touch_end"):
        x, y = msg.get("x"), msg.get("y")
        if not isinstance(x, (int, float)) or not isinstance(y, (int, float)):
            logger.warning("Ignoring %s without coordinates", kind)
            return
        if kind == "touch_start":
            engine.input.handle_touch_start(x, y)
        else:
            engine.input.handle_touch_end(x, y)
    else:
        logger.warning("Ignoring unknown message type %r", kind)


@app.websocket("/ws")
async def websocket_endpoint(ws: WebSocket):
    await ws.accept()
    sender = None
    try:
        session = manager.connect(ws, getattr(ws.app.state, "store", None))
        await ws.send_text(build_welcome_msg(session.engine))
        sender = asyncio.create_task(session.pump(ws))
        while True:
            raw = await ws.receive_text()
            try:
                msg = json.loads(raw)
            except json.JSONDecodeError:
                logger.warning("Ignoring malformed message %.80r", raw)
                continue
            if not isinstance(msg, dict):
                logger.warning("Ignoring non-object message %.80r", raw)
                continue
            handle_message(session, msg)
    except WebSocketDisconnect:
        pass
    finally:
        manager.disconnect(ws)
        if sender is not None:
            sender.cancel()
            (outcome,) = await asyncio.gather(sender, return_exceptions=True)
            if isinstance(outcome, Exception):
                logger.warning("Session sender stopped: %r", outcome)


if __name__ == "__main__":
    import uvicorn
    logging.basicConfig(level=LOG_LEVEL, format="%(asctime)s %(levelname)s %(name)s: %(message)s")
    logger.info("Snake server starting on http://localhost:%d", PORT)
    uvicorn.run(app, host=HOST, port=PORT)
