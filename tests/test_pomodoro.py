"""Tests for the Pomodoro timer."""
import pytest
from datetime import timedelta
from business_logic.pomodoro import Phase, PhaseKind, PhaseNotifier, Pomodoro
from helpers import BASE_TIME


@pytest.fixture
def pomodoro():
    """Fixture providing a 25/5 Pomodoro started at BASE_TIME."""
    return Pomodoro.from_minutes(25, 5, now=BASE_TIME)


def at(minutes=0, seconds=0):
    return BASE_TIME + timedelta(minutes=minutes, seconds=seconds)


class TestPomodoroPhase:
    """Test phase() at the interval boundaries."""

    def test_start_is_work(self, pomodoro):
        assert pomodoro.phase(at(0)) == Phase.work(timedelta(0))

    def test_during_work(self, pomodoro):
        assert pomodoro.phase(at(10)) == Phase.work(timedelta(minutes=10))

    def test_just_before_break(self, pomodoro):
        phase = pomodoro.phase(at(24, 59))
        assert phase.kind is PhaseKind.WORK
        assert phase.elapsed == timedelta(minutes=24, seconds=59)

    def test_end_of_work_is_break_zero(self, pomodoro):
        """Exactly at the work duration the break begins."""
        assert pomodoro.phase(at(25)) == Phase.break_(timedelta(0))

    def test_during_break(self, pomodoro):
        assert pomodoro.phase(at(29, 59)) == Phase.break_(timedelta(minutes=4, seconds=59))

    def test_end_of_break_is_done(self, pomodoro):
        assert pomodoro.phase(at(30)) == Phase.done()

    def test_long_after_is_done(self, pomodoro):
        assert pomodoro.phase(at(600)).kind is PhaseKind.DONE

    def test_clock_before_start_counts_as_start(self, pomodoro):
        """A time before the start is treated as zero elapsed."""
        assert pomodoro.phase(at(-3)) == Phase.work(timedelta(0))

    def test_total_duration(self, pomodoro):
        assert pomodoro.total_duration == timedelta(minutes=30)

    def test_create_defaults_to_now(self):
        timer = Pomodoro.create(timedelta(minutes=1), timedelta(minutes=1))
        assert timer.phase().kind is PhaseKind.WORK

    def test_phase_is_pure(self, pomodoro):
        """Querying the same instant twice gives the same answer."""
        assert pomodoro.phase(at(27)) == pomodoro.phase(at(27))


class TestPomodoroProgress:
    """Test progress()."""

    def test_half_way_through_work(self):
        timer = Pomodoro.from_minutes(20, 10, now=BASE_TIME)
        assert timer.progress(at(10)) == pytest.approx(0.5)

    def test_break_progress(self):
        timer = Pomodoro.from_minutes(20, 10, now=BASE_TIME)
        assert timer.progress(at(25)) == pytest.approx(0.5)

    def test_done_is_full(self, pomodoro):
        assert pomodoro.progress(at(31)) == 1.0


class TestPhaseNotifier:
    """Test that each phase change is announced exactly once."""

    def test_work_announced_once(self, pomodoro):
        notifier = PhaseNotifier()
        first = notifier.check(pomodoro, pomodoro.phase(at(0)))
        assert first == ("Start Working", "Working interval time: 25:00")
        assert notifier.check(pomodoro, pomodoro.phase(at(1))) is None

    def test_break_and_done_sequence(self, pomodoro):
        notifier = PhaseNotifier()
        sent = []
        for minute in range(0, 32):
            message = notifier.check(pomodoro, pomodoro.phase(at(minute)))
            if message:
                sent.append(message[0])
        assert sent == ["Start Working", "Take a Break", "Pomodoro is Done"]

    def test_break_body(self, pomodoro):
        notifier = PhaseNotifier()
        summary, body = notifier.check(pomodoro, pomodoro.phase(at(26)))
        assert summary == "Take a Break"
        assert body == "Break interval time: 5:00"

    def test_reset(self, pomodoro):
        notifier = PhaseNotifier()
        notifier.check(pomodoro, pomodoro.phase(at(0)))
        notifier.reset()
        assert notifier.last_sent is None
        assert notifier.check(pomodoro, pomodoro.phase(at(0))) is not None
