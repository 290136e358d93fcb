"""Task builders shared by the test modules."""
from datetime import datetime, timedelta, timezone
from uuid import UUID
from models import Task


BASE_TIME = datetime(2024, 3, 1, 9, 0, 0, tzinfo=timezone.utc)


def make_task(name, minutes=0, started_after=None, finished_after=None, task_id=None, description=""):
    """Build a task with a creation time relative to BASE_TIME.

    started_after/finished_after are minutes after creation.
    """
    created = BASE_TIME + timedelta(minutes=minutes)
    kwargs = {}
    if task_id is not None:
        kwargs["id"] = UUID(int=task_id)
    return Task(
        creation_time=created,
        name=name,
        description=description,
        started=created + timedelta(minutes=started_after) if started_after is not None else None,
        finished=created + timedelta(minutes=finished_after) if finished_after is not None else None,
        **kwargs,
    )
