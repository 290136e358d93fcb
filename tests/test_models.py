"""Tests for the Task model and its lifecycle."""
import pytest
from datetime import timedelta
from uuid import UUID, uuid4
from errors import InvalidStateTransition
import models
from models import SubtaskRef, Task, TaskStatus
from task_codec import deserialize_all, serialize_all
from helpers import BASE_TIME, make_task


class TestTaskCreation:
    """Test creating tasks."""

    def test_create_defaults(self):
        """A new task is not started and has no subtasks."""
        task = Task.create()
        assert task.name == "New Task"
        assert task.description == ""
        assert task.started is None
        assert task.finished is None
        assert task.subtasks is None
        assert task.status() is TaskStatus.NOT_STARTED

    def test_create_with_name_and_description(self):
        """Name and description are taken from the arguments."""
        task = Task.create("Write docs", "API section")
        assert task.name == "Write docs"
        assert task.description == "API section"

    def test_create_generates_unique_ids(self):
        """Every task gets its own id."""
        ids = {Task.create().id for _ in range(50)}
        assert len(ids) == 50

    def test_creation_time_is_utc(self):
        """Creation time is timezone-aware UTC."""
        task = Task.create()
        assert task.creation_time.tzinfo is not None
        assert task.creation_time.utcoffset() == timedelta(0)


class TestTaskLifecycle:
    """Test start/finish transitions."""

    def test_start_sets_started(self):
        """Starting a new task records the start time."""
        task = Task.create()
        task.start()
        assert task.started is not None
        assert task.status() is TaskStatus.STARTED

    def test_start_is_idempotent(self):
        """Starting twice keeps the first start time."""
        task = Task.create()
        task.start()
        first = task.started
        task.start()
        assert task.started == first

    def test_finish_before_start_is_noop(self):
        """Finishing a task that was never started does nothing."""
        task = Task.create()
        task.finish()
        assert task.finished is None
        assert task.status() is TaskStatus.NOT_STARTED

    def test_finish_after_start(self):
        """A started task can be finished."""
        task = Task.create()
        task.start()
        task.finish()
        assert task.finished is not None
        assert task.status() is TaskStatus.FINISHED

    def test_finish_is_idempotent(self):
        """Finishing twice keeps the first finish time."""
        task = Task.create()
        task.start()
        task.finish()
        first = task.finished
        task.finish()
        assert task.finished == first

    def test_start_after_finish_is_noop(self):
        """A finished task cannot be restarted."""
        task = make_task("Done", started_after=1, finished_after=2)
        started = task.started
        task.start()
        assert task.started == started
        assert task.status() is TaskStatus.FINISHED

    def test_finished_without_started_is_rejected(self):
        """A task finished without being started is a corrupt state."""
        task = Task.create()
        task.finished = BASE_TIME
        with pytest.raises(InvalidStateTransition):
            task.status()


class TestElapsedDuration:
    """Test elapsed_duration()."""

    def test_none_when_not_started(self):
        assert Task.create().elapsed_duration() is None

    def test_none_when_started(self):
        task = make_task("Running", started_after=5)
        assert task.elapsed_duration() is None

    def test_finished_minus_started(self):
        """Elapsed time is the difference between finish and start."""
        task = make_task("Done", started_after=5, finished_after=30)
        assert task.elapsed_duration() == timedelta(minutes=25)

    def test_non_negative_after_start_and_finish(self):
        """Start then finish yields a non-negative duration."""
        task = Task.create()
        task.start()
        task.finish()
        assert task.elapsed_duration() >= timedelta(0)

    def test_clock_moving_backwards(self, monkeypatch):
        """A clock jump back between start and finish gives zero elapsed time."""
        times = iter([BASE_TIME, BASE_TIME, BASE_TIME - timedelta(seconds=2)])
        monkeypatch.setattr(models, "utc_now", lambda: next(times))
        task = Task.create()
        task.start()
        task.finish()

        assert task.finished == task.started
        assert task.elapsed_duration() == timedelta(0)
        assert deserialize_all(serialize_all([task])) == [task]


class TestSubtasks:
    """Test subtask references."""

    def test_add_subtask(self):
        """Adding a subtask creates the list and stores the reference."""
        task = Task.create()
        other = Task.create("Other")
        assert task.add_subtask(other.id, other.name) is True
        assert task.has_subtask(other.id)
        assert task.subtasks == [SubtaskRef(other.id, "Other")]
        assert task.subtasks[0].name == "Other"

    def test_add_self_is_noop(self):
        """A task never references itself."""
        task = Task.create()
        assert task.add_subtask(task.id, task.name) is False
        assert not task.has_subtask(task.id)
        assert task.subtasks is None

    def test_add_duplicate_is_noop(self):
        """Adding the same reference twice keeps one."""
        task = Task.create()
        other_id = uuid4()
        task.add_subtask(other_id, "x")
        assert task.add_subtask(other_id, "y") is False
        assert task.subtask_ids() == [other_id]

    def test_order_is_preserved(self):
        """References keep their insertion order."""
        task = Task.create()
        ids = [UUID(int=n) for n in (5, 1, 3)]
        for task_id in ids:
            task.add_subtask(task_id, "")
        assert task.subtask_ids() == ids

    def test_remove_subtask(self):
        """Removing the last reference leaves an empty list."""
        task = Task.create()
        other_id = uuid4()
        task.add_subtask(other_id, "x")
        assert task.remove_subtask(other_id) is True
        assert not task.has_subtask(other_id)
        assert task.subtasks == []

    def test_remove_missing_subtask_is_noop(self):
        task = Task.create()
        assert task.remove_subtask(uuid4()) is False
        assert task.subtasks is None

    def test_has_subtask_without_list(self):
        assert Task.create().has_subtask(uuid4()) is False

    def test_subtask_name_not_compared(self):
        """Cached names do not affect equality of references."""
        task_id = uuid4()
        assert SubtaskRef(task_id, "old name") == SubtaskRef(task_id, "new name")
