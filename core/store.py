"""Session store: owns one session snapshot and publishes every change."""

from __future__ import annotations

import logging
import threading
from collections import deque
from typing import Callable, Deque, Dict, Optional, Tuple

from sdk.ids import new_ulid

from .state import SessionState, SessionTime, initial_state
from .timing.clock import InstantSource, elapsed_seconds, now_ms

logger = logging.getLogger(__name__)

Subscriber = Callable[[SessionState], None]
Unsubscribe = Callable[[], None]


class SessionStore:
    """Single writer for a :class:`~core.state.SessionState`.

    Each mutation builds a new frozen snapshot, stores it, and hands it to
    every subscriber in registration order before returning. Mutations are
    serialised with a re-entrant lock, so a ticker thread and a driver
    thread may share one store. A mutation issued from inside a subscriber
    is queued and delivered once the current round of notifications is done.

    With ``strict_lifecycle`` set, pausing an idle or finished session and
    starting a finished or never-reset one via :meth:`set_started` are
    ignored (with a warning) instead of being applied.
    """

    def __init__(
        self,
        clock: InstantSource = now_ms,
        *,
        strict_lifecycle: bool = False,
        initial: Optional[SessionState] = None,
    ) -> None:
        self._clock = clock
        self.strict_lifecycle = strict_lifecycle
        self.session_id: Optional[str] = None

        self._state = initial if initial is not None else initial_state()
        self._lock = threading.RLock()
        self._subscribers: Dict[int, Subscriber] = {}
        self._next_token = 0
        self._queue: Deque[Tuple[Subscriber, SessionState]] = deque()

    # ------------------------------------------------------------------
    # Readable interface
    # ------------------------------------------------------------------
    def get(self) -> SessionState:
        return self._state

    def subscribe(self, callback: Subscriber) -> Unsubscribe:
        """Register ``callback``; it is called at once with the current state."""

        with self._lock:
            token = self._next_token
            self._next_token += 1
            self._subscribers[token] = callback
            # replay under the lock so no publication can overtake it
            callback(self._state)

        def unsubscribe() -> None:
            with self._lock:
                self._subscribers.pop(token, None)

        return unsubscribe

    @property
    def lock(self):
        """Lock serialising mutations and deliveries; derived views share it."""

        return self._lock

    @property
    def subscriber_count(self) -> int:
        return len(self._subscribers)

    # ------------------------------------------------------------------
    # Lifecycle transitions
    # ------------------------------------------------------------------
    def reset(self) -> SessionState:
        """Start a fresh running session stamped with the current instant."""

        with self._lock:
            now = self._clock()
            self.session_id = new_ulid()
            fresh = initial_state().model_copy(
                update={
                    "started": True,
                    "over": False,
                    "time": SessionTime(start=now, current=0, paused_duration=0),
                }
            )
            logger.info("session %s reset at %d", self.session_id, now)
            return self._publish(fresh)

    def toggle_pause(self) -> SessionState:
        """Pause a running session or resume a paused one."""

        with self._lock:
            state = self._state
            now = self._clock()
            if not state.paused:
                if self.strict_lifecycle and not state.running:
                    logger.warning(
                        "session %s: ignoring pause while %s", self.session_id, state.phase.value
                    )
                    return state
                logger.info("session %s paused at %d", self.session_id, now)
                return self._publish(
                    state.model_copy(
                        update={
                            "paused": True,
                            "time": state.time.model_copy(update={"pause_start": now}),
                        }
                    )
                )

            paused_duration = state.time.paused_duration + (now - state.time.pause_start)
            logger.info(
                "session %s resumed at %d (paused %d ms in total)",
                self.session_id,
                now,
                paused_duration,
            )
            return self._publish(
                state.model_copy(
                    update={
                        "paused": False,
                        "time": state.time.model_copy(update={"paused_duration": paused_duration}),
                    }
                )
            )

    def update_time(self) -> SessionState:
        """Refresh the elapsed-seconds cache; a no-op unless running."""

        with self._lock:
            state = self._state
            if not state.running:
                return state
            current = elapsed_seconds(self._clock(), state.time.start, state.time.paused_duration)
            logger.debug("session %s tick: %ds", self.session_id, current)
            return self._publish(
                state.model_copy(update={"time": state.time.model_copy(update={"current": current})})
            )

    def update_score(self, score: int) -> SessionState:
        with self._lock:
            return self._publish(self._state.model_copy(update={"score": score}))

    def update_piece(self, piece: str) -> SessionState:
        with self._lock:
            return self._publish(self._state.model_copy(update={"current_piece": piece}))

    def set_started(self, started: bool) -> SessionState:
        """Overwrite the ``started`` flag.

        This can put ``started`` out of step with ``over``/``paused``. With
        ``strict_lifecycle`` set, starting a finished session or one that was
        never reset (no start instant to measure from) is ignored.
        """

        with self._lock:
            state = self._state
            if self.strict_lifecycle and started and (state.over or self.session_id is None):
                logger.warning(
                    "session %s: ignoring set_started(True) while %s", self.session_id, state.phase.value
                )
                return state
            return self._publish(state.model_copy(update={"started": started}))

    def set_game_over(self) -> SessionState:
        """Terminate the session; only :meth:`reset` leaves this state."""

        with self._lock:
            state = self._state
            logger.info("session %s over: score=%d time=%ds", self.session_id, state.score, state.time.current)
            return self._publish(
                state.model_copy(update={"over": True, "started": False, "paused": False})
            )

    # ------------------------------------------------------------------
    # Publication
    # ------------------------------------------------------------------
    def _publish(self, state: SessionState) -> SessionState:
        self._state = state
        drain = not self._queue
        for callback in list(self._subscribers.values()):
            self._queue.append((callback, state))
        if drain:
            try:
                while self._queue:
                    callback, snapshot = self._queue[0]
                    callback(snapshot)
                    self._queue.popleft()
            finally:
                self._queue.clear()
        return state


__all__ = ["SessionStore", "Subscriber", "Unsubscribe"]
