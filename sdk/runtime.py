
from __future__ import annotations
import logging
from typing import Callable, List, Optional

from core.events import (
    GameEventData, GameOverData, ScoreRecord, SessionEvent,
    classify_change, event_data, game_over_data, score_record,
)
from core.game_logic import GameLogicSource, sync_from_source
from core.state import SessionState, SessionStatus
from core.store import SessionStore
from core.ticker import SessionTicker
from core.timing.clock import InstantSource, now_ms
from core.views import DerivedView, display_time, session_status

from .config import AppConfig, get_config

logger = logging.getLogger(__name__)

EventListener = Callable[[SessionEvent], None]


class GameSession:
    """Composition root for one play-through.

    Owns a store, its two derived views and, once started, a ticker. The
    ``toggle_pause``/``restart`` pair is what a board component exposes to
    its host page.
    """

    def __init__(self, config: Optional[AppConfig] = None, clock: Optional[InstantSource] = None,
                 source: Optional[GameLogicSource] = None):
        self.config = config or get_config()
        self.clock = clock or now_ms
        self.source = source
        self.store = SessionStore(self.clock, strict_lifecycle=self.config.session.strict_lifecycle)
        self.display_time: DerivedView[SessionState, str] = display_time(self.store)
        self.status: DerivedView[SessionState, SessionStatus] = session_status(self.store)
        self.ticker = SessionTicker(self.store, self.config.session.tick_interval_s, source)
        self._listeners: List[EventListener] = []
        self._background = False
        self._last = self.store.get()
        self._last_session_id = self.store.session_id
        self._detach = self.store.subscribe(self._on_change)

    # ----- events -----
    def on_event(self, listener: EventListener) -> Callable[[], None]:
        self._listeners.append(listener)
        def off() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)
        return off

    def _on_change(self, state: SessionState) -> None:
        before, self._last = self._last, state
        if self.store.session_id != self._last_session_id:
            self._last_session_id = self.store.session_id
            kind = "reset"
        else:
            kind = classify_change(before, state)
        if kind is None or not self._listeners:
            return
        data = game_over_data(state).model_dump() if kind == "over" else event_data(state).model_dump()
        event = SessionEvent(kind=kind, session=self.store.session_id, data=data)
        for listener in list(self._listeners):
            listener(event)

    # ----- lifecycle -----
    def start(self, background: bool = True) -> SessionState:
        state = self.store.reset()
        self._background = background
        if background:
            self.ticker.start()
        logger.info("game session %s started (%dx%d board)", self.store.session_id, self.config.game.cols, self.config.game.rows)
        return state

    def restart(self) -> SessionState:
        # game_over stops the ticker; a background session resumes ticking
        state = self.store.reset()
        if self._background:
            self.ticker.start()
        return state

    def toggle_pause(self) -> SessionState:
        return self.store.toggle_pause()

    def tick(self) -> SessionState:
        self.ticker.tick()
        return self.store.get()

    def sync(self) -> None:
        if self.source is not None:
            sync_from_source(self.store, self.source)

    def game_over(self) -> GameOverData:
        # final refresh so the reported duration includes the last partial tick
        self.store.update_time()
        self.sync()
        state = self.store.set_game_over()
        self.ticker.stop()
        return game_over_data(state)

    def close(self) -> None:
        self.ticker.stop()
        self._detach()
        self._listeners.clear()

    # ----- views -----
    @property
    def state(self) -> SessionState:
        return self.store.get()

    def event_data(self) -> GameEventData:
        return event_data(self.store.get())

    def score_record(self) -> ScoreRecord:
        return score_record(self.store.get(), self.config.game, self.clock())

    def __enter__(self) -> "GameSession":
        return self

    def __exit__(self, *_exc: object) -> None:
        self.close()
