"""Data models for task management."""
from dataclasses import dataclass, field
from datetime import datetime, timedelta
from enum import Enum
from typing import List, Optional
from uuid import UUID, uuid4

from errors import InvalidStateTransition
from utils.time_utils import utc_now


class TaskStatus(Enum):
    """Lifecycle state of a task, derived from its timestamps."""
    NOT_STARTED = "not_started"
    STARTED = "started"
    FINISHED = "finished"


@dataclass
class SubtaskRef:
    """Reference from one task to another task in the same registry.

    The name is a snapshot of the referenced task's name taken when the
    reference was added. It is for display only and is ignored when
    comparing references.
    """
    id: UUID
    name: str = field(default="", compare=False)


@dataclass
class Task:
    """Represents a single trackable unit of work.

    Lifecycle: NotStarted -> Started -> Finished, strictly forward.
    ``started`` and ``finished`` are UTC timestamps that are set once by
    start() and finish() and never cleared. ``finished`` is never set
    without ``started``.

    Subtasks are plain id references into the same registry; a task does not
    own the tasks it references. ``subtasks`` is None until the first
    reference is added and stays a (possibly empty) list afterwards.
    """
    id: UUID = field(default_factory=uuid4)
    creation_time: datetime = field(default_factory=utc_now)
    name: str = "New Task"
    description: str = ""
    started: Optional[datetime] = None
    finished: Optional[datetime] = None
    subtasks: Optional[List[SubtaskRef]] = None

    @classmethod
    def create(cls, name: str = "New Task", description: str = "") -> 'Task':
        """Create a new task with a fresh id and the current creation time."""
        return cls(id=uuid4(), creation_time=utc_now(), name=name, description=description)

    def is_started(self) -> bool:
        """Check whether the task has a start timestamp."""
        return self.started is not None

    def is_finished(self) -> bool:
        """Check whether the task has a finish timestamp."""
        return self.finished is not None

    def start(self):
        """Start the task. No-op unless the task has not been started yet."""
        if self.is_started() or self.is_finished():
            return
        self.started = utc_now()

    def finish(self):
        """Finish the task. No-op unless the task is currently started."""
        if not self.is_started() or self.is_finished():
            return
        # A clock that moved backwards must not finish before the start
        self.finished = max(utc_now(), self.started)

    def status(self) -> TaskStatus:
        """
        Get the lifecycle status of the task.

        Returns:
            TaskStatus derived from the started/finished timestamps

        Raises:
            InvalidStateTransition: If finished is set but started is not
        """
        if self.is_started():
            return TaskStatus.FINISHED if self.is_finished() else TaskStatus.STARTED
        if self.is_finished():
            raise InvalidStateTransition(
                f"task {self.id} is finished but was never started"
            )
        return TaskStatus.NOT_STARTED

    def elapsed_duration(self) -> Optional[timedelta]:
        """Time between start and finish, or None if the task is not finished."""
        if self.status() is not TaskStatus.FINISHED:
            return None
        return self.finished - self.started

    def has_subtask(self, task_id: UUID) -> bool:
        """Check whether task_id is referenced as a subtask."""
        if not self.subtasks:
            return False
        return any(ref.id == task_id for ref in self.subtasks)

    def add_subtask(self, task_id: UUID, display_name: str) -> bool:
        """
        Reference another task as a subtask.

        Adding the task itself or an already referenced task does nothing.

        Args:
            task_id: Id of the task to reference
            display_name: Name shown for the reference

        Returns:
            True if the reference was added
        """
        if task_id == self.id or self.has_subtask(task_id):
            return False
        if self.subtasks is None:
            self.subtasks = []
        self.subtasks.append(SubtaskRef(task_id, display_name))
        return True

    def remove_subtask(self, task_id: UUID) -> bool:
        """
        Drop a subtask reference.

        Returns:
            True if a reference was removed
        """
        if not self.has_subtask(task_id):
            return False
        self.subtasks = [ref for ref in self.subtasks if ref.id != task_id]
        return True

    def subtask_ids(self) -> List[UUID]:
        """Ids of the referenced subtasks, in order."""
        return [ref.id for ref in self.subtasks or []]
