"""Custom UI widgets for taskman."""
from typing import Iterable

from textual.widgets import Static

from models import TaskStatus

SEPARATOR = " [dim]•[/dim] "
HELP_HINT = "[bold]H[/bold] [dim]Help[/dim] [bold]Q[/bold] [dim]Quit[/dim]"
EMPTY_HINT = "[dim]Press[/dim] [bold]N[/bold] [dim]for a new task[/dim]"


def footer_text(statuses: Iterable[TaskStatus], autosave: bool = True) -> str:
    """
    Build the footer line from the statuses of all tasks.

    Example: "3 tasks • 1 in progress • 1 done • H Help Q Quit"
    """
    statuses = list(statuses)
    if not statuses:
        parts = [EMPTY_HINT]
    else:
        count = len(statuses)
        parts = [
            f"{count} task{'s' if count != 1 else ''}",
            f"{statuses.count(TaskStatus.STARTED)} in progress",
            f"{statuses.count(TaskStatus.FINISHED)} done",
        ]
    if not autosave:
        parts.append("[red]not saving[/red]")
    parts.append(HELP_HINT)
    return SEPARATOR.join(parts)


class StatusFooter(Static):
    """Footer showing task counts and the help hint, centered."""

    DEFAULT_CSS = """
    StatusFooter {
        background: transparent;
        color: #0abdc6;
        dock: bottom;
        height: 1;
        text-align: center;
    }
    """

    def __init__(self):
        super().__init__(footer_text([]))

    def show_counts(self, statuses: Iterable[TaskStatus], autosave: bool = True) -> None:
        """Replace the footer text with fresh counts."""
        self.update(footer_text(statuses, autosave))
