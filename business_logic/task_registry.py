"""In-memory registry of all tasks, keyed by task id."""
import logging
from dataclasses import dataclass
from enum import Enum
from typing import Dict, Iterable, Iterator, List, Optional, Tuple
from uuid import UUID

from models import SubtaskRef, Task, TaskStatus

logger = logging.getLogger(__name__)


class MergePolicy(Enum):
    """How imported tasks are combined with tasks already in the registry."""
    OVERWRITE = "overwrite"
    SKIP_EXISTING = "skip-existing"


@dataclass
class MergeResult:
    """Outcome counts of a merge."""
    added: int = 0
    replaced: int = 0
    skipped: int = 0


class TaskRegistry:
    """
    Keyed collection of tasks owned by the application.

    The registry is the single source of truth for tasks. It is not ordered;
    list() sorts by creation time when asked. Removing a task also removes
    every subtask reference pointing at it.
    """

    def __init__(self, tasks: Optional[Iterable[Task]] = None):
        self._tasks: Dict[UUID, Task] = {}
        for task in tasks or []:
            self.add(task)

    def __len__(self) -> int:
        return len(self._tasks)

    def __contains__(self, task_id: UUID) -> bool:
        return task_id in self._tasks

    def __iter__(self) -> Iterator[Task]:
        return iter(self.list())

    def add(self, task: Task):
        """Insert a task, replacing any task with the same id."""
        self._tasks[task.id] = task

    def get(self, task_id: UUID) -> Optional[Task]:
        """Find a task by id."""
        return self._tasks.get(task_id)

    def remove(self, task_id: UUID) -> Optional[Task]:
        """
        Remove a task and sweep references to it.

        Args:
            task_id: Id of the task to remove

        Returns:
            The removed task, or None if no task had that id
        """
        task = self._tasks.pop(task_id, None)
        if task is None:
            return None

        swept = 0
        for other in self._tasks.values():
            if other.remove_subtask(task_id):
                swept += 1
        if swept:
            logger.debug("Removed %d subtask reference(s) to deleted task %s", swept, task_id)
        return task

    def list(self) -> List[Task]:
        """All tasks, oldest first (ties broken by id for a stable order)."""
        return sorted(self._tasks.values(), key=lambda t: (t.creation_time, t.id.int))

    def clear(self):
        """Remove every task."""
        self._tasks.clear()

    def merge(self, tasks: Iterable[Task], policy: MergePolicy) -> MergeResult:
        """
        Merge imported tasks into the registry.

        Args:
            tasks: Incoming tasks
            policy: OVERWRITE replaces tasks sharing an id, SKIP_EXISTING
                keeps the current task and drops the incoming one

        Returns:
            MergeResult with added/replaced/skipped counts
        """
        result = MergeResult()
        for task in tasks:
            if task.id in self._tasks:
                if policy is MergePolicy.SKIP_EXISTING:
                    result.skipped += 1
                    continue
                result.replaced += 1
            else:
                result.added += 1
            self._tasks[task.id] = task
        return result

    def refresh_subtask_names(self):
        """Re-snapshot cached subtask names from the referenced tasks."""
        for task in self._tasks.values():
            for ref in task.subtasks or []:
                target = self._tasks.get(ref.id)
                if target is not None:
                    ref.name = target.name

    def verify_integrity(self) -> int:
        """
        Repair subtask links after loading or importing.

        Drops references to tasks that are not in the registry and
        references of a task to itself, then refreshes cached names.

        Returns:
            Number of references removed
        """
        removed = 0
        for task in self._tasks.values():
            if not task.subtasks:
                continue
            kept = [ref for ref in task.subtasks if ref.id in self._tasks and ref.id != task.id]
            if len(kept) != len(task.subtasks):
                removed += len(task.subtasks) - len(kept)
                task.subtasks = kept

        self.refresh_subtask_names()
        if removed:
            logger.info("Removed %d dangling subtask reference(s)", removed)
        return removed

    def subtask_statuses(self, task: Task) -> List[Tuple[SubtaskRef, Optional[TaskStatus]]]:
        """
        Pair each subtask reference of a task with the referenced task's status.

        Returns:
            List of (reference, status) tuples; status is None when the
            referenced task is not in the registry
        """
        statuses = []
        for ref in task.subtasks or []:
            target = self._tasks.get(ref.id)
            statuses.append((ref, target.status() if target is not None else None))
        return statuses
