"""Pytest configuration and shared fixtures."""
import pytest
from business_logic.task_registry import TaskRegistry
from helpers import make_task


@pytest.fixture
def sample_tasks():
    """Fixture providing tasks in each lifecycle state."""
    return [
        make_task("Write report", minutes=0, task_id=1),
        make_task("Review PR", minutes=10, started_after=5, task_id=2),
        make_task("Fix bug", minutes=20, started_after=1, finished_after=26, task_id=3),
    ]


@pytest.fixture
def sample_registry(sample_tasks):
    """Fixture providing a TaskRegistry with the sample tasks."""
    return TaskRegistry(sample_tasks)


@pytest.fixture
def empty_registry():
    """Fixture providing an empty TaskRegistry."""
    return TaskRegistry()
