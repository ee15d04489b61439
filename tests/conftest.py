from typing import List

import pytest

from lazytask.application.ports import StorageError
from lazytask.core import Task


def make_task(task_id: int, description: str = "", **kwargs) -> Task:
    defaults = {
        "created_at": "2024-01-01T00:00:00+00:00",
        "updated_at": "2024-01-01T00:00:00+00:00",
    }
    defaults.update(kwargs)
    return Task(id=task_id, description=description or f"Task {task_id}", **defaults)


class MemoryRepository:
    def __init__(self, tasks=None):
        self.tasks: List[Task] = [t.copy() for t in (tasks or [])]
        self.saves = 0

    def load_all(self) -> List[Task]:
        return [t.copy() for t in self.tasks]

    def save_all(self, tasks: List[Task]) -> None:
        self.saves += 1
        self.tasks = [t.copy() for t in tasks]

    def next_id(self) -> int:
        return max((t.id for t in self.tasks), default=0) + 1

    def get(self, task_id: int) -> Task:
        return next(t for t in self.tasks if t.id == task_id)


class FailingSaveRepository(MemoryRepository):
    def save_all(self, tasks: List[Task]) -> None:
        raise StorageError("disk full")


@pytest.fixture
def sample_tasks() -> List[Task]:
    return [
        make_task(1, "Write quarterly report", priority="high", tags=["work"], due_date="2024-02-01"),
        make_task(2, "Buy groceries", status="done", priority="low", tags=["home"]),
        make_task(3, "Fix login bug", status="in-progress", priority="critical", details="OAuth token refresh"),
        make_task(4, "Plan vacation", tags=["personal", "travel"]),
    ]


@pytest.fixture
def repo(sample_tasks) -> MemoryRepository:
    return MemoryRepository(sample_tasks)
