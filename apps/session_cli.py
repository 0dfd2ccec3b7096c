from __future__ import annotations

import logging
import threading
from typing import Dict, List, Optional, Tuple

import typer

from core.events import SessionEvent
from core.timing.clock import ManualClock, MS_PER_S
from sdk.config import get_config
from sdk.runtime import GameSession


app = typer.Typer(add_completion=False, no_args_is_help=True)


@app.callback()
def _setup(
    log_level: Optional[str] = typer.Option(None, help="Override BLOCKFALL_LOG_LEVEL"),
) -> None:
    """Drive a Blockfall game session from the terminal."""

    level = (log_level or get_config().log_level).upper()
    logging.basicConfig(level=level, format="%(asctime)s %(levelname)s %(name)s: %(message)s")


def _parse_timed(values: List[str], option: str) -> List[Tuple[int, str]]:
    """Parse ``SECOND:VALUE`` pairs, e.g. ``12:400``."""

    parsed: List[Tuple[int, str]] = []
    for raw in values:
        second, sep, value = raw.partition(":")
        if not sep or not second.strip().isdigit():
            raise typer.BadParameter(f"expected SECOND:VALUE, got {raw!r}", param_hint=option)
        parsed.append((int(second), value))
    return parsed


def _status_line(second: int, session: GameSession) -> str:
    status = session.status.get()
    phase = session.state.phase.value
    return (
        f"[blockfall] t={second:>4}s {phase:<8} time={session.display_time.get():>6} "
        f"score={status.score} piece={status.current_piece or '-'}"
    )


@app.command()
def simulate(
    duration: int = typer.Option(10, min=1, help="Wall-clock seconds to replay"),
    pause_at: Optional[List[int]] = typer.Option(None, "--pause-at", help="Second at which to pause (repeatable)"),
    resume_at: Optional[List[int]] = typer.Option(None, "--resume-at", help="Second at which to resume (repeatable)"),
    score: Optional[List[str]] = typer.Option(None, "--score", help="SECOND:VALUE score update (repeatable)"),
    piece: Optional[List[str]] = typer.Option(None, "--piece", help="SECOND:LABEL piece update (repeatable)"),
    strict: Optional[bool] = typer.Option(None, "--strict/--permissive", help="Lifecycle guard policy"),
) -> None:
    """Replay a scripted session against a manual clock, one line per second."""

    config = get_config()
    if strict is not None:
        config = config.model_copy(update={"session": config.session.model_copy(update={"strict_lifecycle": strict})})

    actions: Dict[int, List[Tuple[str, str]]] = {}
    for second in (pause_at or []) + (resume_at or []):
        actions.setdefault(second, []).append(("toggle", ""))
    for second, value in _parse_timed(score or [], "--score"):
        if not value.strip().lstrip("-").isdigit():
            raise typer.BadParameter(f"score must be an integer, got {value!r}", param_hint="--score")
        actions.setdefault(second, []).append(("score", value))
    for second, value in _parse_timed(piece or [], "--piece"):
        actions.setdefault(second, []).append(("piece", value))

    clock = ManualClock()
    with GameSession(config=config, clock=clock) as session:
        session.on_event(_echo_event)
        session.start(background=False)
        for second in range(duration + 1):
            clock.set(second * MS_PER_S)
            for kind, value in actions.get(second, []):
                if kind == "toggle":
                    session.toggle_pause()
                elif kind == "score":
                    session.store.update_score(int(value))
                else:
                    session.store.update_piece(value)
            session.tick()
            typer.echo(_status_line(second, session))

        summary = session.game_over()
        record = session.score_record()
    typer.echo(f"[blockfall] game over: score={summary.score} duration={record.duration}")


def _echo_event(event: SessionEvent) -> None:
    if event.kind in ("pause", "resume", "over"):
        typer.echo(f"[blockfall] {event.kind} {event.data}")


@app.command()
def watch(
    seconds: float = typer.Option(5.0, min=0.0, help="How long to run the live session"),
) -> None:
    """Run a real-time session and print the clock whenever it changes."""

    done = threading.Event()
    with GameSession() as session:
        unsubscribe = session.display_time.subscribe(lambda text: typer.echo(f"[blockfall] {text}"))
        session.start()
        try:
            done.wait(seconds)
        except KeyboardInterrupt:  # pragma: no cover - interactive only
            pass
        finally:
            summary = session.game_over()
            unsubscribe()
    typer.echo(f"[blockfall] stopped after {summary.duration}s")


@app.command()
def serve(
    host: str = typer.Option("127.0.0.1", help="Bind address"),
    port: int = typer.Option(8000, help="Bind port"),
) -> None:
    """Serve the session UI API with uvicorn."""

    import uvicorn

    uvicorn.run("sdk.server:app", host=host, port=port)


if __name__ == "__main__":
    app()
