"""Task list widget for displaying and navigating tasks."""
from typing import List, Optional
from uuid import UUID

from rich.markup import escape
from textual.widgets import Static

from business_logic.task_registry import TaskRegistry
from config import config
from models import Task, TaskStatus
from utils.time_utils import format_hms, format_local

STATUS_LABELS = {
    TaskStatus.NOT_STARTED: "not started",
    TaskStatus.STARTED: "in progress",
    TaskStatus.FINISHED: "done",
}


def status_color(status: Optional[TaskStatus]) -> str:
    """Color used for a task status (None means the task is missing)."""
    if status is TaskStatus.FINISHED:
        return config.color_finished
    if status is TaskStatus.STARTED:
        return config.color_in_progress
    return config.color_not_started


class TaskListWidget(Static):
    """Widget to display the tasks of a registry, newest first."""

    def __init__(self, registry: TaskRegistry, datetime_format: Optional[str] = None):
        super().__init__()
        self.registry = registry
        self.datetime_format = datetime_format or config.datetime_format
        self.selected_index = 0

    @property
    def tasks(self) -> List[Task]:
        """Tasks in display order (most recently created first)."""
        return list(reversed(self.registry.list()))

    def get_selected_task(self) -> Optional[Task]:
        """Get the currently selected task."""
        tasks = self.tasks
        if 0 <= self.selected_index < len(tasks):
            return tasks[self.selected_index]
        return None

    def task_at_number(self, number: int) -> Optional[Task]:
        """Get a task by the 1-based number shown in the list."""
        tasks = self.tasks
        if 1 <= number <= len(tasks):
            return tasks[number - 1]
        return None

    def select_task(self, task_id: UUID) -> bool:
        """Move the selection to a task. Returns False if it is not listed."""
        for i, task in enumerate(self.tasks):
            if task.id == task_id:
                self.selected_index = i
                return True
        return False

    def clamp_selection(self) -> None:
        """Keep the selection inside the list after tasks were removed."""
        count = len(self.registry)
        if count == 0:
            self.selected_index = 0
        else:
            self.selected_index = max(0, min(self.selected_index, count - 1))

    def move_selection(self, delta: int) -> None:
        """Move the selection up or down, stopping at the ends."""
        if len(self.registry) == 0:
            return
        self.selected_index += delta
        self.clamp_selection()
        if self.is_mounted:
            self.refresh()

    def format_timeline(self, task: Task) -> str:
        """
        Format the timestamp line of a task.

        Examples:
        - Not started: "01.03.2024 09:00:00"
        - Started: "01.03.2024 09:00:00 | 01.03.2024 09:05:00 -> ..."
        - Finished: "... | start -> finish (Took 00:25:00)"
        """
        created = format_local(task.creation_time, self.datetime_format)
        status = task.status()
        if status is TaskStatus.NOT_STARTED:
            return created

        started = format_local(task.started, self.datetime_format)
        if status is TaskStatus.STARTED:
            return f"{created} | {started} -> ..."

        finished = format_local(task.finished, self.datetime_format)
        return f"{created} | {started} -> {finished} (Took {format_hms(task.elapsed_duration())})"

    def format_subtasks(self, task: Task) -> List[str]:
        """Format one line per subtask, colored by the subtask's status."""
        lines = []
        for ref, status in self.registry.subtask_statuses(task):
            name = escape(ref.name) if ref.name else "[i](unnamed)[/i]"
            if status is None:
                lines.append(f"      ↳ [dim]{name} (missing)[/dim]")
            else:
                lines.append(f"      ↳ [{status_color(status)}]{name}[/]")
        return lines

    def render(self) -> str:
        """Render the task list."""
        tasks = self.tasks
        if not tasks:
            return "[dim]No tasks yet. Press 'n' to add one.[/dim]"

        lines = []
        for i, task in enumerate(tasks):
            status = task.status()
            marker = ">" if i == self.selected_index else " "
            color = status_color(status)
            title = (
                f"{marker} {i + 1:>2}. [bold]{escape(task.name)}[/bold] "
                f"[{color}]\\[{STATUS_LABELS[status]}][/]"
            )
            if i == self.selected_index:
                title = f"[{config.color_accent} on {config.color_bg_medium}]{title}[/]"
            lines.append(title)
            lines.append(f"      [{color}]{self.format_timeline(task)}[/]")
            if task.description:
                for description_line in task.description.splitlines():
                    lines.append(f"      [dim]{escape(description_line)}[/dim]")
            lines.extend(self.format_subtasks(task))
            lines.append("")

        return "\n".join(lines).rstrip("\n")
