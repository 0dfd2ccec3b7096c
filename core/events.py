"""Event payloads published alongside session snapshots."""

from __future__ import annotations

from typing import Any, Dict, Literal, Optional

from pydantic import BaseModel, Field

from sdk.config import GameSettings
from sdk.ids import iso_utc, new_ulid, now_utc_ms

from .state import SessionState
from .timing.clock import format_seconds

EventKind = Literal["reset", "pause", "resume", "over", "score", "piece", "tick", "started"]


class GameEventData(BaseModel):
    """What the presentation layer needs to redraw its HUD."""

    paused: bool
    score: int
    time: int
    piece: str


class GameOverData(BaseModel):
    score: int
    duration: int


class ScoreRecord(BaseModel):
    """Summary of a finished session, ready for a score board.

    Records are built in memory only; storing them is up to the caller.
    """

    score: int
    timestamp: str
    duration: str
    rows: int
    cols: int


class SessionEvent(BaseModel):
    """Envelope for a session change, keyed by a ULID."""

    id: str = Field(default_factory=new_ulid)
    ts_ms: int = Field(default_factory=now_utc_ms)
    kind: EventKind
    session: Optional[str] = None
    data: Dict[str, Any] = Field(default_factory=dict)


def event_data(state: SessionState) -> GameEventData:
    return GameEventData(
        paused=state.paused,
        score=state.score,
        time=state.time.current,
        piece=state.current_piece,
    )


def game_over_data(state: SessionState) -> GameOverData:
    return GameOverData(score=state.score, duration=state.time.current)


def score_record(state: SessionState, settings: GameSettings, ts_ms: Optional[int] = None) -> ScoreRecord:
    """Build a :class:`ScoreRecord` for ``state`` on a board sized by ``settings``."""

    return ScoreRecord(
        score=state.score,
        timestamp=iso_utc(now_utc_ms() if ts_ms is None else ts_ms),
        duration=format_seconds(state.time.current),
        rows=settings.rows,
        cols=settings.cols,
    )


def classify_change(before: SessionState, after: SessionState) -> Optional[EventKind]:
    """Name the transition between two consecutive snapshots.

    Returns ``None`` when nothing a listener cares about changed. A reset
    cannot be told apart from flag changes here; the store's session id
    tracks that.
    """

    if after.over and not before.over:
        return "over"
    if after.paused != before.paused:
        return "pause" if after.paused else "resume"
    if after.started != before.started:
        return "started"
    if after.score != before.score:
        return "score"
    if after.current_piece != before.current_piece:
        return "piece"
    if after.time.current != before.time.current:
        return "tick"
    return None


__all__ = [
    "EventKind",
    "GameEventData",
    "GameOverData",
    "ScoreRecord",
    "SessionEvent",
    "classify_change",
    "event_data",
    "game_over_data",
    "score_record",
]
