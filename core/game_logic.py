"""Boundary with the board/piece engine that feeds score and piece labels."""

from __future__ import annotations

from typing import Protocol, runtime_checkable

from .store import SessionStore


@runtime_checkable
class GameLogicSource(Protocol):
    """Anything able to report the current score and active piece label."""

    def current_score(self) -> int: ...

    def current_piece(self) -> str: ...


def sync_from_source(store: SessionStore, source: GameLogicSource) -> None:
    """Push the source's score and piece into ``store`` when they differ."""

    score = source.current_score()
    piece = source.current_piece()
    state = store.get()
    if state.score != score:
        store.update_score(score)
    if state.current_piece != piece:
        store.update_piece(piece)


__all__ = ["GameLogicSource", "sync_from_source"]
