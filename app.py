"""Main TUI application for taskman."""
import logging
import sys
from pathlib import Path
from typing import Callable, Dict, Optional

from textual.app import App, ComposeResult
from textual.binding import Binding
from textual.containers import Container, Horizontal, Vertical
from textual.css.query import NoMatches
from textual.widgets import Header, Input, Static
from textual import events

from business_logic.pomodoro import PhaseNotifier, Pomodoro
from business_logic.task_registry import MergePolicy, TaskRegistry
from config import config
from errors import MalformedInput, StorageError
from logging_setup import setup_logging
from models import Task, TaskStatus
from task_storage import TaskStorage
from ui.help_screen import HelpScreen
from ui.pomodoro_widget import PomodoroWidget
from ui.task_list_widget import TaskListWidget
from ui.widgets import StatusFooter
from utils.time_utils import format_time, parse_time_string

logger = logging.getLogger(__name__)

DEFAULT_EXCHANGE_FILE = "~/taskman-export.json"


class TaskManagerApp(App):
    """A terminal task tracker with a Pomodoro timer."""

    TITLE = "taskman"

    CSS = """
    Screen {
        background: #1a1a2e;
    }

    Header {
        background: #2d2d44;
        color: #0abdc6;
    }

    #main {
        height: 1fr;
    }

    #sidebar {
        width: 34;
        padding: 1;
        background: #2d2d44;
    }

    #pomodoro_title {
        text-style: bold;
        color: #0abdc6;
        margin-bottom: 1;
    }

    #task_list {
        height: 1fr;
        padding: 1 2;
        overflow-y: auto;
        background: #1a1a2e;
    }

    TaskListWidget {
        height: auto;
        color: #e2e8f0;
    }

    #input_container {
        height: auto;
        padding: 1;
        background: #1a1a2e;
    }

    Input {
        margin: 0 1;
        background: #2d2d44;
        color: #ffffff;
        border: tall #8b5cf6;
    }

    Input:focus {
        border: tall #0abdc6;
    }
    """

    BINDINGS = [
        Binding("q", "quit", "Quit", show=False),
        Binding("h", "show_help", "Help", show=False),
        Binding("n", "new_task", "New", show=False),
        Binding("r", "rename_task", "Rename", show=False),
        Binding("D", "edit_description", "Description", show=False),
        Binding("s", "start_task", "Start", show=False),
        Binding("f", "finish_task", "Finish", show=False),
        Binding("d", "delete_task", "Delete", show=False),
        Binding("a", "link_subtask", "Subtask", show=False),
        Binding("j", "move_down", "Down", show=False),
        Binding("k", "move_up", "Up", show=False),
        Binding("down", "move_down", "Down", show=False),
        Binding("up", "move_up", "Up", show=False),
        # Pomodoro bindings
        Binding("p", "toggle_pomodoro", "Pomodoro", show=False),
        Binding("w", "set_work_minutes", "Work", show=False),
        Binding("b", "set_break_minutes", "Break", show=False),
        # Import / export bindings
        Binding("x", "export_tasks", "Export", show=False),
        Binding("i", "import_tasks", "Import", show=False),
        Binding("I", "import_tasks_overwrite", "Import (overwrite)", show=False),
    ]

    def __init__(self, storage: Optional[TaskStorage] = None):
        super().__init__()
        self.storage = storage
        self.registry = TaskRegistry()
        # Autosave is switched off when the stored task list could not be
        # read, so it is not replaced by an empty one.
        self.autosave = True
        self.load_error: Optional[str] = None
        self._load_tasks()

        self.pomodoro: Optional[Pomodoro] = None
        self.phase_notifier = PhaseNotifier()
        self.work_minutes = config.pomodoro_work_minutes
        self.break_minutes = config.pomodoro_break_minutes
        self.pomodoro_refresh_interval = None

        # Which prompt the mounted Input belongs to
        self.input_mode: Optional[str] = None

    def _load_tasks(self) -> None:
        """Load the stored task list into the registry."""
        try:
            if self.storage is None:
                self.storage = TaskStorage()
            self.registry = self.storage.load_tasks()
        except (StorageError, MalformedInput) as e:
            logger.error("Could not load tasks: %s", e)
            self.load_error = str(e)
            self.autosave = False

    def compose(self) -> ComposeResult:
        """Compose the UI."""
        yield Header()
        with Horizontal(id="main"):
            with Vertical(id="sidebar"):
                yield Static("Pomodoro", id="pomodoro_title")
                yield PomodoroWidget(self.work_minutes, self.break_minutes)
            yield Container(TaskListWidget(self.registry), id="task_list")
        yield Container(id="input_container")
        yield StatusFooter()

    def on_mount(self) -> None:
        """Set up the app after mounting."""
        self.update_footer()
        # Poll the Pomodoro for live progress and phase notifications
        self.pomodoro_refresh_interval = self.set_interval(config.refresh_interval, self._poll_pomodoro)
        if self.load_error:
            self.notify(
                f"Could not load tasks: {self.load_error}. Changes will not be saved.",
                title="Storage",
                severity="error",
                timeout=10,
            )

    def _poll_pomodoro(self) -> None:
        """Refresh the Pomodoro display and announce phase changes."""
        if self.pomodoro is None:
            return

        message = self.phase_notifier.check(self.pomodoro, self.pomodoro.phase())
        if message is not None:
            summary, body = message
            logger.info("Pomodoro: %s", summary)
            self.notify(body or summary, title=summary)

        try:
            self.query_one(PomodoroWidget).refresh()
        except NoMatches:
            # A modal screen is open; the timer keeps running regardless
            pass

    def update_footer(self) -> None:
        """Update the footer with task counts."""
        try:
            footer = self.query_one(StatusFooter)
        except NoMatches:
            return
        footer.show_counts((task.status() for task in self.registry.list()), self.autosave)

    def refresh_task_list(self) -> None:
        """Refresh the task list widget."""
        task_widget = self.query_one(TaskListWidget)
        task_widget.registry = self.registry
        task_widget.clamp_selection()
        task_widget.refresh(layout=True)
        self.update_footer()

    def save_current_tasks(self) -> None:
        """Save the task list, reporting failures without losing anything."""
        if not self.autosave or self.storage is None:
            return
        try:
            self.storage.save_tasks(self.registry)
        except StorageError as e:
            logger.error("Could not save tasks: %s", e)
            self.notify(f"Could not save tasks: {e.reason}", title="Storage", severity="error")

    def save_and_refresh(self) -> None:
        """Save current tasks and refresh the UI display."""
        self.save_current_tasks()
        self.refresh_task_list()

    def _selected_task(self) -> Optional[Task]:
        return self.query_one(TaskListWidget).get_selected_task()

    def action_move_down(self) -> None:
        """Move selection down."""
        self.query_one(TaskListWidget).move_selection(1)

    def action_move_up(self) -> None:
        """Move selection up."""
        self.query_one(TaskListWidget).move_selection(-1)

    def action_show_help(self) -> None:
        """Show the help screen."""
        self.push_screen(HelpScreen())

    def _prompt(self, mode: str, placeholder: str, value: str = "") -> None:
        """Show an input line at the bottom of the screen."""
        container = self.query_one("#input_container")
        for existing in container.query(Input):
            existing.remove()
        input_widget = Input(value=value, placeholder=placeholder)
        container.mount(input_widget)
        input_widget.focus()
        self.input_mode = mode

    def action_new_task(self) -> None:
        """Ask for the name of a new task."""
        self._prompt("new_task", "Task name")

    def action_rename_task(self) -> None:
        """Ask for a new name for the selected task."""
        task = self._selected_task()
        if task:
            self._prompt("rename_task", "New task name", task.name)

    def action_edit_description(self) -> None:
        """Ask for a new description for the selected task."""
        task = self._selected_task()
        if task:
            self._prompt("edit_description", "Description", task.description)

    def action_start_task(self) -> None:
        """Start the selected task."""
        task = self._selected_task()
        if task and task.status() is TaskStatus.NOT_STARTED:
            task.start()
            self.save_and_refresh()

    def action_finish_task(self) -> None:
        """Finish the selected task."""
        task = self._selected_task()
        if task is None:
            return
        if task.status() is TaskStatus.NOT_STARTED:
            self.notify("Start the task before finishing it", severity="warning")
            return
        if task.status() is TaskStatus.STARTED:
            task.finish()
            self.save_and_refresh()

    def action_delete_task(self) -> None:
        """Delete the selected task and every reference to it."""
        task = self._selected_task()
        if task:
            self.registry.remove(task.id)
            logger.info("Deleted task %s", task.id)
            self.save_and_refresh()

    def action_link_subtask(self) -> None:
        """Ask which task to link to (or unlink from) the selected task."""
        if self._selected_task():
            self._prompt("link_subtask", "Number of the task to link/unlink as subtask")

    def action_toggle_pomodoro(self) -> None:
        """Start a new Pomodoro, or stop the running one."""
        if self.pomodoro is not None:
            self.pomodoro = None
            logger.info("Pomodoro stopped")
        else:
            self.pomodoro = Pomodoro.from_minutes(self.work_minutes, self.break_minutes)
            logger.info("Pomodoro started (%d/%d min)", self.work_minutes, self.break_minutes)
        self.phase_notifier.reset()
        self._update_pomodoro_widget()
        self._poll_pomodoro()

    def _update_pomodoro_widget(self) -> None:
        widget = self.query_one(PomodoroWidget)
        widget.pomodoro = self.pomodoro
        widget.work_minutes = self.work_minutes
        widget.break_minutes = self.break_minutes
        widget.refresh()

    def action_set_work_minutes(self) -> None:
        """Ask for the work interval length."""
        if self._pomodoro_idle():
            self._prompt("work_minutes", f"Work interval [current: {self.work_minutes}m]")

    def action_set_break_minutes(self) -> None:
        """Ask for the break interval length."""
        if self._pomodoro_idle():
            self._prompt("break_minutes", f"Break interval [current: {self.break_minutes}m]")

    def _pomodoro_idle(self) -> bool:
        if self.pomodoro is not None:
            self.notify("Stop the Pomodoro before changing its intervals", severity="warning")
            return False
        return True

    def action_export_tasks(self) -> None:
        """Ask for the file to export to."""
        self._prompt("export", f"Export to file (default {DEFAULT_EXCHANGE_FILE})")

    def action_import_tasks(self) -> None:
        """Ask for the file to import from, keeping existing tasks."""
        self._prompt("import_skip", f"Import from file, keep existing (default {DEFAULT_EXCHANGE_FILE})")

    def action_import_tasks_overwrite(self) -> None:
        """Ask for the file to import from, replacing existing tasks."""
        self._prompt("import_overwrite", f"Import from file, overwrite existing (default {DEFAULT_EXCHANGE_FILE})")

    def _handle_new_task_input(self, value: str) -> None:
        task = Task.create(name=value.strip() or "New Task")
        self.registry.add(task)
        self.query_one(TaskListWidget).select_task(task.id)
        self.save_and_refresh()

    def _handle_rename_task_input(self, value: str) -> None:
        task = self._selected_task()
        if task and value.strip():
            task.name = value.strip()
            self.registry.refresh_subtask_names()
            self.save_and_refresh()

    def _handle_edit_description_input(self, value: str) -> None:
        task = self._selected_task()
        if task:
            task.description = value
            self.save_and_refresh()

    def _handle_link_subtask_input(self, value: str) -> None:
        task = self._selected_task()
        task_widget = self.query_one(TaskListWidget)
        try:
            target = task_widget.task_at_number(int(value.strip()))
        except ValueError:
            target = None
        if task is None or target is None:
            self.notify(f"No task numbered {value.strip()!r}", severity="warning")
            return

        if target.id == task.id:
            self.notify("A task cannot be its own subtask", severity="warning")
        elif task.has_subtask(target.id):
            task.remove_subtask(target.id)
            self.save_and_refresh()
        else:
            task.add_subtask(target.id, target.name)
            self.save_and_refresh()

    def _parse_minutes(self, value: str) -> Optional[int]:
        seconds = parse_time_string(value)
        if seconds is None:
            self.notify(f"Invalid interval: {value.strip()!r}", severity="warning")
            return None
        return config.clamp_minutes(round(seconds / 60))

    def _handle_work_minutes_input(self, value: str) -> None:
        minutes = self._parse_minutes(value)
        if minutes is not None:
            self.work_minutes = minutes
            self._update_pomodoro_widget()
            self.notify(f"Work interval set to {format_time(minutes * 60)}")

    def _handle_break_minutes_input(self, value: str) -> None:
        minutes = self._parse_minutes(value)
        if minutes is not None:
            self.break_minutes = minutes
            self._update_pomodoro_widget()
            self.notify(f"Break interval set to {format_time(minutes * 60)}")

    def _exchange_path(self, value: str) -> Path:
        return Path(value.strip() or DEFAULT_EXCHANGE_FILE).expanduser()

    def _storage_available(self) -> bool:
        if self.storage is None:
            self.notify("Task storage is unavailable", title="Storage", severity="error")
            return False
        return True

    def _handle_export_input(self, value: str) -> None:
        if not self._storage_available():
            return
        path = self._exchange_path(value)
        try:
            count = self.storage.export_tasks(self.registry, path)
        except StorageError as e:
            logger.error("Export failed: %s", e)
            self.notify(e.reason, title="Export failed", severity="error")
            return
        self.notify(f"Exported {count} task(s) to {path}", title="Export")

    def _import(self, value: str, policy: MergePolicy) -> None:
        if not self._storage_available():
            return
        path = self._exchange_path(value)
        try:
            result = self.storage.import_tasks(self.registry, path, policy)
        except (StorageError, MalformedInput) as e:
            logger.error("Import from %s failed: %s", path, e)
            self.notify(str(e), title="Import failed", severity="error")
            return
        self.notify(
            f"{result.added} added, {result.replaced} replaced, {result.skipped} skipped",
            title="Import",
        )
        self.save_and_refresh()

    def _handle_import_skip_input(self, value: str) -> None:
        self._import(value, MergePolicy.SKIP_EXISTING)

    def _handle_import_overwrite_input(self, value: str) -> None:
        self._import(value, MergePolicy.OVERWRITE)

    def on_input_submitted(self, event: Input.Submitted) -> None:
        """Dispatch the submitted input to the handler of the open prompt."""
        handlers: Dict[str, Callable[[str], None]] = {
            "new_task": self._handle_new_task_input,
            "rename_task": self._handle_rename_task_input,
            "edit_description": self._handle_edit_description_input,
            "link_subtask": self._handle_link_subtask_input,
            "work_minutes": self._handle_work_minutes_input,
            "break_minutes": self._handle_break_minutes_input,
            "export": self._handle_export_input,
            "import_skip": self._handle_import_skip_input,
            "import_overwrite": self._handle_import_overwrite_input,
        }
        mode = self.input_mode
        event.input.remove()
        self.input_mode = None

        handler = handlers.get(mode)
        if handler is not None:
            handler(event.value)

    def on_key(self, event: events.Key) -> None:
        """Cancel an open prompt with Escape."""
        focused = self.focused
        if isinstance(focused, Input) and event.key == "escape":
            focused.remove()
            self.input_mode = None
            event.prevent_default()
            event.stop()


def main():
    """Run the application."""
    try:
        setup_logging(config.log_dir, file_level=config.log_level)
    except OSError as e:
        # The app still works without a log file
        print(f"taskman: logging disabled: {e}", file=sys.stderr)
    app = TaskManagerApp()
    app.run()


if __name__ == "__main__":
    main()
