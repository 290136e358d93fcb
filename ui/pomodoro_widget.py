"""Pomodoro status widget."""
from datetime import datetime
from typing import Optional

from textual.widgets import Static

from business_logic.pomodoro import PhaseKind, Pomodoro
from config import config
from utils.time_utils import format_clock

BAR_WIDTH = 20


def progress_bar(fraction: float, width: int = BAR_WIDTH) -> str:
    """Text progress bar, e.g. "█████░░░░░" for 0.5."""
    filled = int(round(max(0.0, min(1.0, fraction)) * width))
    return "█" * filled + "░" * (width - filled)


class PomodoroWidget(Static):
    """Shows the running Pomodoro, or the configured intervals when idle.

    The widget is refreshed by the app's polling interval; it keeps no timer
    of its own.
    """

    DEFAULT_CSS = """
    PomodoroWidget {
        height: auto;
        padding: 0 1;
    }
    """

    def __init__(self, work_minutes: int, break_minutes: int):
        super().__init__()
        self.work_minutes = work_minutes
        self.break_minutes = break_minutes
        self.pomodoro: Optional[Pomodoro] = None

    def describe(self, now: Optional[datetime] = None) -> str:
        """Build the widget text for a point in time."""
        if self.pomodoro is None:
            return (
                f"[dim]Idle[/dim]\n"
                f"Work Interval:  {self.work_minutes} min\n"
                f"Break Interval: {self.break_minutes} min\n"
                f"[dim]Press[/dim] [bold]P[/bold] [dim]to start[/dim]"
            )

        phase = self.pomodoro.phase(now)
        bar = progress_bar(self.pomodoro.progress(now))
        if phase.kind is PhaseKind.WORK:
            return (
                f"[bold {config.color_in_progress}]Work Time: {format_clock(phase.elapsed)}[/]"
                f" / {format_clock(self.pomodoro.work_duration)}\n{bar}"
            )
        if phase.kind is PhaseKind.BREAK:
            return (
                f"[bold {config.color_finished}]Break Time: {format_clock(phase.elapsed)}[/]"
                f" / {format_clock(self.pomodoro.break_duration)}\n{bar}"
            )
        return f"[bold {config.color_primary}]Done[/]\n{bar}"

    def render(self) -> str:
        """Render the Pomodoro state."""
        return self.describe()
