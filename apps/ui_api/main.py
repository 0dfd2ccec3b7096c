from __future__ import annotations
from fastapi import FastAPI, WebSocket, WebSocketDisconnect
from pydantic import BaseModel, Field
from typing import Any, Dict, Optional
import asyncio, logging

from core.events import event_data
from core.state import SessionState
from sdk.runtime import GameSession

logger = logging.getLogger(__name__)


class ScoreUpdate(BaseModel):
    score: int = Field(ge=0)

class PieceUpdate(BaseModel):
    piece: str

class StartedUpdate(BaseModel):
    started: bool


def status_payload(session: GameSession) -> Dict[str, Any]:
    payload = session.status.get().to_payload()
    payload["displayTime"] = session.display_time.get()
    return payload


def create_app(session: Optional[GameSession] = None, background_ticker: bool = True) -> FastAPI:
    """Build the API around ``session``; resets also start its ticker unless disabled."""
    session = session or GameSession()
    app = FastAPI(title="Blockfall Session API")
    app.state.session = session

    @app.get("/session")
    def get_session():
        return session.state.to_payload()

    @app.get("/session/status")
    def get_status():
        return status_payload(session)

    @app.post("/session/reset")
    def reset():
        session.start(background=background_ticker)
        return status_payload(session)

    @app.post("/session/pause")
    def toggle_pause():
        session.toggle_pause()
        return status_payload(session)

    @app.post("/session/time")
    def update_time():
        session.store.update_time()
        return status_payload(session)

    @app.post("/session/over")
    def game_over():
        summary = session.game_over()
        return {**status_payload(session), "gameOver": summary.model_dump()}

    @app.post("/session/score")
    def update_score(body: ScoreUpdate):
        session.store.update_score(body.score)
        return status_payload(session)

    @app.post("/session/piece")
    def update_piece(body: PieceUpdate):
        session.store.update_piece(body.piece)
        return status_payload(session)

    @app.post("/session/started")
    def set_started(body: StartedUpdate):
        session.store.set_started(body.started)
        return status_payload(session)

    @app.websocket("/ws/session")
    async def ws_session(ws: WebSocket):
        await ws.accept()
        loop = asyncio.get_running_loop()
        queue: "asyncio.Queue[Dict[str, Any]]" = asyncio.Queue()

        def push(state: SessionState) -> None:
            # store mutations may come from the ticker thread
            loop.call_soon_threadsafe(queue.put_nowait, event_data(state).model_dump())

        unsubscribe = session.store.subscribe(push)
        receiver = asyncio.ensure_future(_wait_disconnect(ws))
        last: Optional[Dict[str, Any]] = None
        try:
            while True:
                getter = asyncio.ensure_future(queue.get())
                done, _ = await asyncio.wait({getter, receiver}, return_when=asyncio.FIRST_COMPLETED)
                if receiver in done:
                    getter.cancel()
                    return
                payload = getter.result()
                if payload != last:
                    await ws.send_json(payload)
                    last = payload
        except WebSocketDisconnect:
            return
        finally:
            unsubscribe()
            receiver.cancel()

    return app


async def _wait_disconnect(ws: WebSocket) -> None:
    try:
        while True:
            await ws.receive_text()
    except WebSocketDisconnect:
        logger.debug("session websocket disconnected")
