"""Tests for session reconstruction and duration computation."""

from datetime import timedelta

import pytest

from shift.domain.task import (
    CorruptSessionError,
    TaskEvent,
    TaskState,
    get_times,
    group_events,
    ongoing,
    paused,
    running,
    session_intervals,
    summarize_sessions,
)
from tests.helpers import at, make_session, minutes

S = TaskState


def event(name, session, state, offset):
    return TaskEvent(name=name, session=session, state=state, time=at(offset))


@pytest.fixture
def writing():
    """Start at T0, pause at +30m, resume at +40m, stop at +100m."""
    return make_session(
        "writing",
        (S.STARTED, 0),
        (S.PAUSED, 30),
        (S.RESUMED, 40),
        (S.STOPPED, 100),
    )


class TestGroupEvents:
    def test_groups_by_session_in_first_seen_order(self):
        stream = [
            event("a", "s-a", S.STARTED, 0),
            event("b", "s-b", S.STARTED, 1),
            event("a", "s-a", S.STOPPED, 2),
            event("b", "s-b", S.STOPPED, 3),
        ]
        sessions = group_events(stream)
        assert [s.name for s in sessions] == ["a", "b"]
        assert [e.state for e in sessions[0].events] == [S.STARTED, S.STOPPED]

    def test_descending_input(self):
        stream = [
            event("a", "s-a", S.STARTED, 0),
            event("b", "s-b", S.STARTED, 1),
            event("a", "s-a", S.STOPPED, 2),
            event("b", "s-b", S.STOPPED, 3),
        ]
        sessions = group_events(reversed(stream), descending=True)
        assert [s.name for s in sessions] == ["b", "a"]
        for session in sessions:
            assert [e.state for e in session.events] == [S.STARTED, S.STOPPED]

    def test_equal_timestamps_keep_insertion_order(self):
        stream = [
            event("a", "s-a", S.STARTED, 0),
            event("a", "s-a", S.STOPPED, 0),
        ]
        assert [e.state for e in group_events(stream)[0].events] == [S.STARTED, S.STOPPED]
        newest_first = list(reversed(stream))
        grouped = group_events(newest_first, descending=True)
        assert [e.state for e in grouped[0].events] == [S.STARTED, S.STOPPED]

    def test_same_name_different_sessions_stay_apart(self):
        stream = [
            event("a", "s-1", S.STARTED, 0),
            event("a", "s-1", S.STOPPED, 5),
            event("a", "s-2", S.STARTED, 10),
        ]
        sessions = group_events(stream)
        assert [s.id for s in sessions] == ["s-1", "s-2"]

    def test_empty(self):
        assert group_events([]) == []


class TestFilters:
    def test_running_paused_ongoing(self):
        run = make_session("run", (S.STARTED, 0), session_id="s-run")
        held = make_session("held", (S.STARTED, 0), (S.PAUSED, 5), session_id="s-held")
        done = make_session("done", (S.STARTED, 0), (S.STOPPED, 5), session_id="s-done")
        sessions = [run, held, done]

        assert ongoing(sessions) == [run, held]
        assert running(sessions) == [run]
        assert paused(sessions) == [held]


class TestGetTimes:
    def test_pause_and_resume(self, writing):
        times = get_times(writing, now=at(500))
        assert times.elapsed == minutes(90)
        assert times.paused == minutes(10)
        assert writing.current_state == S.STOPPED

    def test_start_then_stop(self):
        session = make_session("a", (S.STARTED, 0), (S.STOPPED, 45))
        times = get_times(session, now=at(1000))
        assert times.elapsed == minutes(45)
        assert times.paused == timedelta(0)

    def test_multiple_pauses_accumulate(self):
        session = make_session(
            "a",
            (S.STARTED, 0),
            (S.PAUSED, 10),
            (S.RESUMED, 15),
            (S.PAUSED, 20),
            (S.RESUMED, 30),
            (S.STOPPED, 40),
        )
        times = get_times(session, now=at(40))
        assert times.elapsed == minutes(25)
        assert times.paused == minutes(15)

    def test_open_session_runs_until_now(self):
        session = make_session("a", (S.STARTED, 0))
        assert get_times(session, now=at(20)).elapsed == minutes(20)

    def test_open_paused_session_accrues_pause(self):
        session = make_session("a", (S.STARTED, 0), (S.PAUSED, 30))
        times = get_times(session, now=at(45))
        assert times.elapsed == minutes(30)
        assert times.paused == minutes(15)

    def test_now_before_last_event_adds_nothing(self):
        session = make_session("a", (S.STARTED, 0), (S.PAUSED, 30))
        times = get_times(session, now=at(10))
        assert times.elapsed == minutes(30)
        assert times.paused == timedelta(0)

    def test_paused_stop_closes_pause(self):
        session = make_session("a", (S.STARTED, 0), (S.PAUSED, 10), (S.STOPPED, 25))
        times = get_times(session, now=at(60))
        assert times.elapsed == minutes(10)
        assert times.paused == minutes(15)

    def test_window_clips_intervals(self, writing):
        times = get_times(writing, now=at(500), since=at(20), until=at(60))
        assert times.elapsed == minutes(30)
        assert times.paused == minutes(10)

    def test_window_outside_session(self, writing):
        times = get_times(writing, now=at(500), since=at(200))
        assert times.total == timedelta(0)

    def test_corrupt_session_raises(self):
        session = make_session("a", (S.STARTED, 0), (S.RESUMED, 10))
        with pytest.raises(CorruptSessionError):
            get_times(session, now=at(20))


class TestSessionIntervals:
    def test_intervals(self, writing):
        assert session_intervals(writing, now=at(500)) == [
            ("run", at(0), at(30)),
            ("pause", at(30), at(40)),
            ("run", at(40), at(100)),
        ]

    def test_trailing_interval_for_open_session(self):
        session = make_session("a", (S.STARTED, 0))
        assert session_intervals(session, now=at(5)) == [("run", at(0), at(5))]


class TestSummarizeSessions:
    def test_totals_per_name(self):
        sessions = [
            make_session("a", (S.STARTED, 0), (S.STOPPED, 60), session_id="s-1"),
            make_session("b", (S.STARTED, 10), (S.PAUSED, 20), (S.STOPPED, 30), session_id="s-2"),
            make_session("a", (S.STARTED, 70), (S.STOPPED, 80), session_id="s-3"),
            make_session("old", (S.STARTED, -30), (S.STOPPED, -20), session_id="s-4"),
        ]
        summaries = summarize_sessions(sessions, now=at(100), since=at(5))

        assert [s.name for s in summaries] == ["a", "b"]
        a, b = summaries
        assert a.elapsed == minutes(65)
        assert a.sessions == 2
        assert b.elapsed == minutes(10)
        assert b.paused == minutes(10)
        assert b.sessions == 1

    def test_open_session_clipped_to_window_end(self):
        sessions = [make_session("a", (S.STARTED, 0))]
        summaries = summarize_sessions(sessions, now=at(100), since=at(30), until=at(50))
        assert summaries[0].elapsed == minutes(20)

    def test_empty(self):
        assert summarize_sessions([], now=at(0)) == []

    def test_window_bounds_are_exclusive(self):
        on_edge = make_session("edge", (S.STARTED, 10), (S.STOPPED, 10), session_id="s-edge")
        inside = make_session("inside", (S.STARTED, 15), (S.STOPPED, 15), session_id="s-in")
        summaries = summarize_sessions([on_edge, inside], now=at(100), since=at(10), until=at(20))
        assert [(s.name, s.sessions, s.elapsed) for s in summaries] == [("inside", 1, timedelta(0))]
