from typing import List, Protocol

from lazytask.core import Task


class StorageError(RuntimeError):
    """Underlying read/write failure of the task store."""


class TaskRepository(Protocol):
    def load_all(self) -> List[Task]:
        ...

    def save_all(self, tasks: List[Task]) -> None:
        ...

    def next_id(self) -> int:
        ...
