"""Read-only projections recomputed from a session store."""

from __future__ import annotations

import threading
from typing import Callable, Dict, Generic, Optional, Protocol, TypeVar

from .state import SessionState, SessionStatus
from .timing.clock import format_seconds

S = TypeVar("S")
T = TypeVar("T")


class Readable(Protocol[S]):
    def get(self) -> S: ...

    def subscribe(self, callback: Callable[[S], None]) -> Callable[[], None]: ...


class DerivedView(Generic[S, T]):
    """Projection of another readable, recomputed on each publication.

    The view holds no value of its own. It attaches to ``source`` when the
    first subscriber arrives and detaches when the last one leaves.
    """

    def __init__(self, source: Readable[S], project: Callable[[S], T]) -> None:
        self._source = source
        self._project = project
        self._subscribers: Dict[int, Callable[[T], None]] = {}
        self._next_token = 0
        self._detach: Optional[Callable[[], None]] = None
        # share the source's lock so attaching, replaying and publishing are
        # serialised together
        self._lock = getattr(source, "lock", None) or threading.RLock()

    @property
    def lock(self):
        return self._lock

    def get(self) -> T:
        return self._project(self._source.get())

    def subscribe(self, callback: Callable[[T], None]) -> Callable[[], None]:
        with self._lock:
            token = self._next_token
            self._next_token += 1
            self._subscribers[token] = callback
            if self._detach is None:
                # the source replays its current value to us, which reaches
                # every subscriber registered so far, including this one
                self._detach = self._source.subscribe(self._on_source)
            else:
                callback(self.get())

        def unsubscribe() -> None:
            with self._lock:
                if self._subscribers.pop(token, None) is None:
                    return
                if not self._subscribers and self._detach is not None:
                    detach, self._detach = self._detach, None
                    detach()

        return unsubscribe

    @property
    def attached(self) -> bool:
        return self._detach is not None

    def _on_source(self, value: S) -> None:
        projected = self._project(value)
        for callback in list(self._subscribers.values()):
            callback(projected)


def project_status(state: SessionState) -> SessionStatus:
    return SessionStatus(
        is_active=state.started,
        is_paused=state.paused,
        started=state.started,
        over=state.over,
        score=state.score,
        current_piece=state.current_piece,
    )


def project_display_time(state: SessionState) -> str:
    return format_seconds(state.time.current)


def display_time(store: Readable[SessionState]) -> DerivedView[SessionState, str]:
    """Formatted elapsed time, e.g. ``"2:05"``."""

    return DerivedView(store, project_display_time)


def session_status(store: Readable[SessionState]) -> DerivedView[SessionState, SessionStatus]:
    return DerivedView(store, project_status)


__all__ = [
    "DerivedView",
    "Readable",
    "display_time",
    "project_display_time",
    "project_status",
    "session_status",
]
