"""Pomodoro work/break timer.

The timer has no internal clock. Its phase is computed from the time elapsed
since it was created every time it is queried, so whoever displays it decides
how often to poll.
"""
from dataclasses import dataclass, field
from datetime import datetime, timedelta
from enum import Enum
from typing import Optional

from utils.time_utils import format_clock, utc_now


class PhaseKind(Enum):
    """The three phases of a Pomodoro interval."""
    WORK = "work"
    BREAK = "break"
    DONE = "done"


@dataclass(frozen=True)
class Phase:
    """Current phase of a Pomodoro and the time spent in it.

    ``elapsed`` is measured from the beginning of the phase and is None once
    the Pomodoro is done.
    """
    kind: PhaseKind
    elapsed: Optional[timedelta] = None

    @classmethod
    def work(cls, elapsed: timedelta) -> 'Phase':
        return cls(PhaseKind.WORK, elapsed)

    @classmethod
    def break_(cls, elapsed: timedelta) -> 'Phase':
        return cls(PhaseKind.BREAK, elapsed)

    @classmethod
    def done(cls) -> 'Phase':
        return cls(PhaseKind.DONE)


@dataclass(frozen=True)
class Pomodoro:
    """A single work interval followed by a single break interval.

    Durations must be positive; they are not validated here.
    """
    work_duration: timedelta
    break_duration: timedelta
    start: datetime = field(default_factory=utc_now)

    @classmethod
    def create(cls, work_duration: timedelta, break_duration: timedelta,
               now: Optional[datetime] = None) -> 'Pomodoro':
        """Start a Pomodoro at ``now`` (defaults to the current time)."""
        return cls(work_duration, break_duration, now if now is not None else utc_now())

    @classmethod
    def from_minutes(cls, work_minutes: int = 25, break_minutes: int = 5,
                     now: Optional[datetime] = None) -> 'Pomodoro':
        """Start a Pomodoro from minute counts, as configured by the user."""
        return cls.create(timedelta(minutes=work_minutes), timedelta(minutes=break_minutes), now)

    @property
    def total_duration(self) -> timedelta:
        return self.work_duration + self.break_duration

    def phase(self, now: Optional[datetime] = None) -> Phase:
        """
        Get the phase at a point in time.

        Work covers elapsed times strictly below the work duration, so the
        exact end of work is already Break(0). Reaching the end of the break
        is Done.

        Args:
            now: Point in time to evaluate, defaults to the current time

        Returns:
            Phase with the time elapsed inside that phase
        """
        if now is None:
            now = utc_now()
        # A clock that moved backwards counts as the very start of work
        elapsed = max(now - self.start, timedelta(0))

        if elapsed < self.work_duration:
            return Phase.work(elapsed)
        if elapsed < self.total_duration:
            return Phase.break_(elapsed - self.work_duration)
        return Phase.done()

    def progress(self, now: Optional[datetime] = None) -> float:
        """Fraction of the current phase that has passed, 1.0 when done."""
        current = self.phase(now)
        if current.kind is PhaseKind.DONE:
            return 1.0
        length = self.work_duration if current.kind is PhaseKind.WORK else self.break_duration
        if length <= timedelta(0):
            return 1.0
        return min(1.0, current.elapsed / length)


class PhaseNotifier:
    """Decides when to announce a Pomodoro phase change.

    Feed it every polled phase; it returns a (summary, body) pair exactly once
    per transition and None otherwise.
    """

    def __init__(self):
        self.last_sent: Optional[PhaseKind] = None

    def reset(self):
        """Forget what was announced, e.g. when a Pomodoro is stopped."""
        self.last_sent = None

    def check(self, pomodoro: Pomodoro, phase: Phase) -> Optional[tuple[str, str]]:
        """
        Get the notification for a polled phase, if one is due.

        Args:
            pomodoro: The running Pomodoro (for the interval lengths)
            phase: The phase just polled from it

        Returns:
            (summary, body) tuple, or None when nothing changed
        """
        if phase.kind is PhaseKind.WORK:
            if self.last_sent is PhaseKind.WORK:
                return None
            self.last_sent = PhaseKind.WORK
            return ("Start Working", f"Working interval time: {format_clock(pomodoro.work_duration)}")

        if phase.kind is PhaseKind.BREAK:
            if self.last_sent is PhaseKind.BREAK:
                return None
            self.last_sent = PhaseKind.BREAK
            return ("Take a Break", f"Break interval time: {format_clock(pomodoro.break_duration)}")

        if self.last_sent is PhaseKind.DONE:
            return None
        self.last_sent = PhaseKind.DONE
        return ("Pomodoro is Done", "")
