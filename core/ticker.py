"""Background driver that refreshes a session clock at a fixed cadence."""

from __future__ import annotations

import logging
import threading
from typing import Optional

from .game_logic import GameLogicSource, sync_from_source
from .store import SessionStore

logger = logging.getLogger(__name__)


class SessionTicker:
    """Call :meth:`SessionStore.update_time` every ``interval_s`` seconds.

    When a ``source`` is given its score and piece are pulled on each tick
    as well. The thread is a daemon and waits on an event, so :meth:`stop`
    returns promptly.
    """

    def __init__(
        self,
        store: SessionStore,
        interval_s: float = 1.0,
        source: Optional[GameLogicSource] = None,
    ) -> None:
        if interval_s <= 0:
            raise ValueError("interval_s must be positive")
        self.store = store
        self.interval_s = interval_s
        self.source = source
        self._stop_event = threading.Event()
        self._thread: Optional[threading.Thread] = None

    @property
    def running(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    def tick(self) -> None:
        if self.source is not None:
            sync_from_source(self.store, self.source)
        self.store.update_time()

    def start(self) -> None:
        if self.running:
            return
        self._stop_event.clear()
        self._thread = threading.Thread(target=self._run, name="session-ticker", daemon=True)
        self._thread.start()
        logger.debug("ticker started (interval=%.3fs)", self.interval_s)

    def stop(self, timeout: Optional[float] = None) -> None:
        self._stop_event.set()
        thread, self._thread = self._thread, None
        if thread is not None and thread is not threading.current_thread():
            thread.join(timeout)
            logger.debug("ticker stopped")

    def _run(self) -> None:
        while not self._stop_event.wait(self.interval_s):
            try:
                self.tick()
            except Exception:
                # one failed delivery does not end the loop
                logger.exception("session tick failed; ticker keeps running")

    def __enter__(self) -> "SessionTicker":
        self.start()
        return self

    def __exit__(self, *_exc: object) -> None:
        self.stop()


__all__ = ["SessionTicker"]
