"""Tests for TaskListWidget."""
import pytest
from uuid import UUID
from config import config
from models import SubtaskRef, TaskStatus
from ui.task_list_widget import TaskListWidget, status_color
from helpers import make_task


@pytest.fixture
def widget(sample_registry):
    """Fixture providing a TaskListWidget over the sample tasks."""
    return TaskListWidget(sample_registry)


class TestTaskListWidget:
    """Test suite for TaskListWidget."""

    def test_init(self, widget, sample_registry):
        """Test widget initialization."""
        assert widget.registry is sample_registry
        assert widget.selected_index == 0
        assert widget.datetime_format == config.datetime_format

    def test_newest_first(self, widget):
        assert [t.name for t in widget.tasks] == ["Fix bug", "Review PR", "Write report"]

    def test_get_selected_task(self, widget):
        assert widget.get_selected_task().name == "Fix bug"

    def test_get_selected_task_empty(self, empty_registry):
        assert TaskListWidget(empty_registry).get_selected_task() is None

    def test_task_at_number(self, widget):
        """Numbers are the 1-based positions shown in the list."""
        assert widget.task_at_number(1).name == "Fix bug"
        assert widget.task_at_number(3).name == "Write report"
        assert widget.task_at_number(0) is None
        assert widget.task_at_number(4) is None

    def test_select_task(self, widget):
        assert widget.select_task(UUID(int=1)) is True
        assert widget.selected_index == 2
        assert widget.select_task(UUID(int=99)) is False
        assert widget.selected_index == 2


class TestNavigation:
    """Test moving the selection."""

    def test_move_down_and_up(self, widget):
        widget.move_selection(1)
        assert widget.selected_index == 1
        widget.move_selection(-1)
        assert widget.selected_index == 0

    def test_stops_at_ends(self, widget):
        widget.move_selection(-1)
        assert widget.selected_index == 0
        widget.move_selection(10)
        assert widget.selected_index == 2

    def test_empty_list(self, empty_registry):
        widget = TaskListWidget(empty_registry)
        widget.move_selection(1)
        assert widget.selected_index == 0

    def test_clamp_after_removal(self, widget, sample_registry):
        widget.selected_index = 2
        sample_registry.remove(UUID(int=1))
        widget.clamp_selection()
        assert widget.selected_index == 1


class TestRendering:
    """Test the rendered markup."""

    def test_empty_message(self, empty_registry):
        assert "No tasks yet" in TaskListWidget(empty_registry).render()

    def test_status_labels(self, widget):
        rendered = widget.render()
        assert "\\[done]" in rendered
        assert "\\[in progress]" in rendered
        assert "\\[not started]" in rendered

    def test_numbers_and_selection_marker(self, widget):
        lines = widget.render().splitlines()
        assert lines[0].endswith("[/]")
        assert ">  1. [bold]Fix bug[/bold]" in lines[0]
        assert any("   2. [bold]Review PR[/bold]" in line for line in lines)

    def test_name_markup_escaped(self, empty_registry):
        empty_registry.add(make_task("[red]not markup"))
        assert "\\[red]not markup" in TaskListWidget(empty_registry).render()

    def test_description_shown(self, empty_registry):
        empty_registry.add(make_task("A", description="first line\nsecond line"))
        rendered = TaskListWidget(empty_registry).render()
        assert "[dim]first line[/dim]" in rendered
        assert "[dim]second line[/dim]" in rendered

    def test_timeline_not_started(self, widget, sample_registry):
        task = sample_registry.get(UUID(int=1))
        assert "|" not in widget.format_timeline(task)

    def test_timeline_started(self, widget, sample_registry):
        task = sample_registry.get(UUID(int=2))
        assert widget.format_timeline(task).endswith(" -> ...")

    def test_timeline_finished(self, widget, sample_registry):
        task = sample_registry.get(UUID(int=3))
        assert widget.format_timeline(task).endswith("(Took 00:25:00)")

    def test_subtask_lines(self, widget, sample_registry):
        parent = sample_registry.get(UUID(int=1))
        parent.add_subtask(UUID(int=3), "Fix bug")
        parent.subtasks.append(SubtaskRef(UUID(int=99)))

        lines = widget.format_subtasks(parent)

        assert lines[0] == f"      ↳ [{config.color_finished}]Fix bug[/]"
        assert lines[1] == "      ↳ [dim][i](unnamed)[/i] (missing)[/dim]"

    def test_status_color(self):
        assert status_color(TaskStatus.FINISHED) == config.color_finished
        assert status_color(TaskStatus.STARTED) == config.color_in_progress
        assert status_color(TaskStatus.NOT_STARTED) == config.color_not_started
        assert status_color(None) == config.color_not_started
