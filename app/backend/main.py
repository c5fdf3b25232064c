from __future__ import annotations

import asyncio
import logging
import os
from typing import Literal, Optional

from fastapi import FastAPI, WebSocket, WebSocketDisconnect
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from fastapi.encoders import jsonable_encoder
from pydantic import BaseModel

from .engine import RevealSession

logger = logging.getLogger(__name__)

app = FastAPI(title="Graph Reveal API", version="0.1.0")

# Allow local dev frontends
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


def _load_session() -> RevealSession:
    """Session over the file named by REVEAL_GRAPH, or the built-in graph.

    A file that cannot be loaded yields a session in the error state rather
    than failing the import; `/reveal/state` then carries the message.
    """
    path = os.environ.get("REVEAL_GRAPH")
    if not path:
        return RevealSession()
    loaded = RevealSession(path=path)
    if loaded.loaded:
        logger.info("serving graph from %s", path)
    return loaded


session = _load_session()


class ControlRequest(BaseModel):
    cmd: Literal["step", "run", "pause", "reset", "select", "toggle"]
    id: Optional[str] = None
    frames: Optional[int] = None


@app.get("/reveal/graph")
async def get_graph():
    return JSONResponse(jsonable_encoder(session.graph()))


@app.get("/reveal/state")
async def get_state():
    return JSONResponse(jsonable_encoder(session.state()))


@app.post("/reveal/control")
async def post_control(body: ControlRequest):
    if not session.loaded and body.cmd != "reset":
        return {"ok": False, "error": session.status.message}
    if body.cmd == "step":
        done = await session.step(body.frames)
        return {"ok": True, "done": done}
    if body.cmd == "run":
        await session.run()
        return {"ok": True}
    if body.cmd == "pause":
        await session.pause()
        return {"ok": True}
    if body.cmd == "reset":
        await session.reset()
        if not session.loaded:
            return {"ok": False, "error": session.status.message}
        return {"ok": True}
    if body.cmd == "select":
        if body.id is None:
            return {"ok": False, "error": "select needs an id"}
        return {"ok": await session.select(body.id)}
    if body.cmd == "toggle":
        return {"ok": True, "showAll": await session.toggle()}
    return {"ok": False}


def _state_message(state) -> dict:
    message = jsonable_encoder(state)
    message["type"] = "state"
    return message


@app.websocket("/reveal/stream")
async def ws_stream(ws: WebSocket):
    await ws.accept()

    # Send initial graph
    await ws.send_json({
        "type": "init",
        "graph": jsonable_encoder(session.graph()),
    })

    q = session.subscribe()
    try:
        # Immediately push current state to client
        await ws.send_json(_state_message(session.state()))

        while True:
            try:
                st = await q.get()
            except asyncio.CancelledError:
                break

            await ws.send_json(_state_message(st))

            if session.is_done():
                await ws.send_json({"type": "done", "reason": "complete"})
    except WebSocketDisconnect:
        pass
    finally:
        session.unsubscribe(q)


@app.get("/")
async def root():
    return {"service": "reveal", "status": "ok"}
