"""Immutable snapshots describing one game session."""

from __future__ import annotations

from enum import Enum

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class SessionPhase(str, Enum):
    IDLE = "idle"
    RUNNING = "running"
    PAUSED = "paused"
    OVER = "over"


class _Snapshot(BaseModel):
    # camelCase on the wire, snake_case in Python
    model_config = ConfigDict(
        frozen=True,
        alias_generator=to_camel,
        populate_by_name=True,
    )

    def to_payload(self) -> dict:
        """Return the JSON-ready camelCase representation."""

        return self.model_dump(by_alias=True)


class SessionTime(_Snapshot):
    """Raw clock fields of a session.

    ``pause_start`` is only meaningful while the session is paused;
    ``paused_duration`` accumulates milliseconds and never decreases.
    """

    start: int = 0
    current: int = 0
    pause_start: int = 0
    paused_duration: int = 0


class SessionState(_Snapshot):
    """Authoritative record of one game session."""

    started: bool = False
    paused: bool = False
    over: bool = False
    time: SessionTime = Field(default_factory=SessionTime)
    score: int = 0
    current_piece: str = ""

    @property
    def phase(self) -> SessionPhase:
        if self.over:
            return SessionPhase.OVER
        if self.paused:
            return SessionPhase.PAUSED
        if self.started:
            return SessionPhase.RUNNING
        return SessionPhase.IDLE

    @property
    def running(self) -> bool:
        return self.started and not self.paused and not self.over


class SessionStatus(_Snapshot):
    """Aggregate status consumed by the presentation layer.

    ``is_active`` and ``started`` carry the same flag under two names.
    """

    is_active: bool
    is_paused: bool
    started: bool
    over: bool
    score: int
    current_piece: str


def initial_state() -> SessionState:
    return SessionState()


__all__ = [
    "SessionPhase",
    "SessionState",
    "SessionStatus",
    "SessionTime",
    "initial_state",
]
