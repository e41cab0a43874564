"""Tests for the task state machine."""

import pytest

from shift.domain.shared import Err, Ok
from shift.domain.task import (
    Command,
    CorruptSessionError,
    NoPauses,
    NoTasks,
    Ongoing,
    TaskEvent,
    TaskSession,
    TaskState,
    TimeConflict,
    check_append,
    next_state,
    validate_sequence,
)
from tests.helpers import at, make_session

S = TaskState
C = Command


class TestNextState:
    @pytest.mark.parametrize(
        "current, command, expected",
        [
            (None, C.START, S.STARTED),
            (S.STOPPED, C.START, S.STARTED),
            (S.STARTED, C.PAUSE, S.PAUSED),
            (S.STARTED, C.STOP, S.STOPPED),
            (S.RESUMED, C.PAUSE, S.PAUSED),
            (S.RESUMED, C.STOP, S.STOPPED),
            (S.PAUSED, C.RESUME, S.RESUMED),
            (S.PAUSED, C.STOP, S.STOPPED),
        ],
    )
    def test_allowed(self, current, command, expected):
        assert next_state(current, command) == Ok(expected)

    @pytest.mark.parametrize(
        "current, command, error",
        [
            (None, C.PAUSE, NoTasks()),
            (None, C.RESUME, NoPauses()),
            (None, C.STOP, NoTasks()),
            (S.STOPPED, C.STOP, NoTasks()),
            (S.STARTED, C.RESUME, NoPauses()),
            (S.RESUMED, C.RESUME, NoPauses()),
            (S.PAUSED, C.PAUSE, NoTasks()),
        ],
    )
    def test_rejected(self, current, command, error):
        assert next_state(current, command) == Err(error)

    @pytest.mark.parametrize("current", [S.STARTED, S.PAUSED, S.RESUMED])
    def test_start_while_open_is_ongoing(self, current):
        assert next_state(current, C.START, "writing") == Err(Ongoing("writing"))


class TestCheckAppend:
    def test_builds_event_in_session(self):
        session = make_session("writing", (S.STARTED, 0))
        result = check_append(session, C.PAUSE, at(30))
        assert isinstance(result, Ok)
        event = result.value
        assert event.session == session.id
        assert event.name == "writing"
        assert event.state == S.PAUSED
        assert event.time == at(30)

    def test_same_timestamp_allowed(self):
        session = make_session("writing", (S.STARTED, 0))
        assert isinstance(check_append(session, C.STOP, at(0)), Ok)

    def test_earlier_time_conflicts(self):
        session = make_session("writing", (S.STARTED, 10))
        result = check_append(session, C.STOP, at(5))
        assert isinstance(result, Err)
        assert isinstance(result.error, TimeConflict)
        assert result.error.session == session

    def test_illegal_transition_wins_over_time(self):
        session = make_session("writing", (S.STARTED, 10))
        assert check_append(session, C.RESUME, at(5)) == Err(NoPauses())


class TestValidateSequence:
    def test_full_lifecycle_is_valid(self):
        session = make_session(
            "writing",
            (S.STARTED, 0),
            (S.PAUSED, 30),
            (S.RESUMED, 40),
            (S.PAUSED, 50),
            (S.STOPPED, 60),
        )
        validate_sequence(session)

    @pytest.mark.parametrize(
        "steps",
        [
            [],
            [(S.PAUSED, 0)],
            [(S.STARTED, 0), (S.STARTED, 1)],
            [(S.STARTED, 0), (S.RESUMED, 1)],
            [(S.STARTED, 0), (S.PAUSED, 1), (S.PAUSED, 2)],
            [(S.STARTED, 0), (S.STOPPED, 1), (S.STARTED, 2)],
            [(S.STARTED, 5), (S.STOPPED, 1)],
        ],
    )
    def test_corrupt_timelines_raise(self, steps):
        session = make_session("writing", *steps)
        with pytest.raises(CorruptSessionError) as excinfo:
            validate_sequence(session)
        assert excinfo.value.session_id == session.id

    def test_foreign_event_raises(self):
        own = TaskEvent(name="writing", session="s-1", state=S.STARTED, time=at(0))
        foreign = TaskEvent(name="writing", session="s-2", state=S.STOPPED, time=at(1))
        session = TaskSession(id="s-1", name="writing", events=[own, foreign])
        with pytest.raises(CorruptSessionError, match="foreign"):
            validate_sequence(session)
