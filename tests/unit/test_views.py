# tests/unit/test_views.py
import threading

import pytest

from core.state import SessionState, SessionStatus, SessionTime
from core.store import SessionStore
from core.timing.clock import ManualClock
from core.views import DerivedView, display_time, project_status, session_status


@pytest.fixture()
def clock():
    return ManualClock()


@pytest.fixture()
def store(clock):
    return SessionStore(clock)


def test_project_status_is_fixed_projection():
    state = SessionState(started=True, paused=True, score=12, current_piece="O")
    status = project_status(state)
    assert status == SessionStatus(
        is_active=True,
        is_paused=True,
        started=True,
        over=False,
        score=12,
        current_piece="O",
    )
    assert status.to_payload() == {
        "isActive": True,
        "isPaused": True,
        "started": True,
        "over": False,
        "score": 12,
        "currentPiece": "O",
    }


def test_display_time_formats_cached_seconds(clock):
    assert display_time(SessionStore(clock)).get() == "0:00"
    seeded = SessionStore(clock, initial=SessionState(time=SessionTime(current=125)))
    assert display_time(seeded).get() == "2:05"


def test_display_time_follows_ticks(store, clock):
    seen = []
    display_time(store).subscribe(seen.append)
    store.reset()
    for ms in (1_000, 1_500, 59_000, 61_000):
        clock.set(ms)
        store.update_time()
    assert seen == ["0:00", "0:00", "0:01", "0:01", "0:59", "1:01"]


def test_status_observers_see_each_score_in_order(store):
    seen = []
    session_status(store).subscribe(lambda status: seen.append(status.score))
    store.update_score(150)
    store.update_score(400)
    assert seen == [0, 150, 400]


def test_status_tracks_lifecycle(store):
    view = session_status(store)
    store.reset()
    assert view.get().is_active and view.get().started
    store.toggle_pause()
    assert view.get().is_paused
    store.set_game_over()
    status = view.get()
    assert status.over and not status.is_active and not status.is_paused


def test_view_attaches_lazily_and_detaches_with_last_subscriber(store):
    view = session_status(store)
    assert not view.attached
    assert store.subscriber_count == 0

    first = view.subscribe(lambda _: None)
    second = view.subscribe(lambda _: None)
    assert view.attached
    assert store.subscriber_count == 1

    first()
    assert view.attached
    second()
    assert not view.attached
    assert store.subscriber_count == 0


def test_late_subscriber_gets_current_projection(store):
    view = session_status(store)
    view.subscribe(lambda _: None)
    store.update_score(9)

    seen = []
    view.subscribe(seen.append)
    assert [s.score for s in seen] == [9]


def test_views_can_be_chained():
    store = SessionStore(ManualClock())
    score = DerivedView(store, lambda state: state.score)
    doubled = DerivedView(score, lambda value: value * 2)
    seen = []
    doubled.subscribe(seen.append)
    store.update_score(21)
    assert seen == [0, 42]


def test_view_shares_store_lock(store):
    view = session_status(store)
    assert view.lock is store.lock
    assert DerivedView(view, lambda status: status.score).lock is store.lock


def test_view_replay_is_not_overtaken_by_another_thread(store):
    seen = []
    writer = threading.Thread(target=store.update_score, args=(1,))

    def record(status):
        if writer.ident is None:
            writer.start()
            writer.join(0.2)
        seen.append(status.score)

    session_status(store).subscribe(record)
    writer.join()
    assert seen == [0, 1]


def test_concurrent_first_subscribers_attach_once(store):
    view = session_status(store)
    barrier = threading.Barrier(8)
    received = []

    def join_view():
        barrier.wait()
        view.subscribe(received.append)

    threads = [threading.Thread(target=join_view) for _ in range(8)]
    for t in threads:
        t.start()
    for t in threads:
        t.join()

    assert store.subscriber_count == 1
    assert len(received) == 8

    received.clear()
    store.update_score(3)
    assert [s.score for s in received] == [3] * 8
