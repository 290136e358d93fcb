"""Help screen listing the keyboard shortcuts."""
from typing import List, Sequence, Tuple

from textual.app import ComposeResult
from textual.screen import Screen
from textual.widgets import Static
from textual.containers import VerticalScroll
from textual.binding import Binding
from textual import events

from config import config

# (section title, [(keys, description), ...]); a blank key continues the
# previous line.
HELP_SECTIONS: Sequence[Tuple[str, List[Tuple[str, str]]]] = [
    ("Navigation", [
        ("↑/↓ or j/k", "Move selection up/down"),
    ]),
    ("Tasks", [
        ("n", "New task"),
        ("r", "Rename selected task"),
        ("Shift+D", "Edit description of selected task"),
        ("s", "Start selected task (only once)"),
        ("f", "Finish selected task (only after starting it)"),
        ("d", "Delete selected task"),
        ("", "• Also removed from every other task's subtasks"),
        ("a", "Link/unlink a subtask by its list number"),
        ("", "• A task cannot be its own subtask"),
    ]),
    ("Pomodoro", [
        ("p", "Start / stop the Pomodoro"),
        ("w", "Set work interval (e.g. 25, 45m, 1h)"),
        ("b", "Set break interval (e.g. 5, 10m)"),
        ("", f"• Intervals range from {config.pomodoro_min_minutes} "
             f"to {config.pomodoro_max_minutes} minutes"),
        ("", "• Only adjustable while the timer is stopped"),
    ]),
    ("Import / Export", [
        ("x", "Export all tasks to a JSON file"),
        ("i", "Import tasks, keeping existing tasks with the same id"),
        ("Shift+I", "Import tasks, replacing existing tasks with the same id"),
    ]),
    ("General", [
        ("h", "Show this help"),
        ("q", "Quit"),
    ]),
]

KEY_COLUMN_WIDTH = 14


def format_help(sections: Sequence[Tuple[str, List[Tuple[str, str]]]] = HELP_SECTIONS) -> str:
    """Lay out help sections as two aligned columns of markup."""
    blocks = []
    for title, entries in sections:
        lines = [f"[bold]{title}[/bold]"]
        for keys, description in entries:
            lines.append(f"{keys:<{KEY_COLUMN_WIDTH}}{description}")
        blocks.append("\n".join(lines))
    blocks.append("[dim]Press Esc to close this help[/dim]")
    return "\n\n".join(blocks)


class HelpScreen(Screen):
    """Modal screen showing keyboard shortcuts."""

    BINDINGS = [
        Binding("escape", "dismiss", "Close", show=False),
    ]

    CSS = """
    HelpScreen {
        align: center middle;
        background: rgba(26, 26, 46, 0.9);
    }

    #help_container {
        width: 80;
        height: auto;
        max-height: 90%;
        background: #2d2d44;
        border: thick #0abdc6;
        padding: 1 2;
    }

    #help_title {
        text-align: center;
        text-style: bold;
        color: #0abdc6;
        margin-bottom: 1;
    }

    #help_content {
        height: auto;
        color: #e2e8f0;
    }
    """

    def compose(self) -> ComposeResult:
        """Compose the help screen."""
        with VerticalScroll(id="help_container"):
            yield Static("Keyboard Shortcuts", id="help_title")
            yield Static(format_help(), id="help_content")

    def on_key(self, event: events.Key) -> None:
        """Swallow keys so they do not reach the app's bindings."""
        # Esc is handled by the binding, arrows scroll the container
        if event.key not in ("escape", "up", "down"):
            event.prevent_default()
            event.stop()

    def action_dismiss(self) -> None:
        """Close the help screen."""
        self.dismiss()
