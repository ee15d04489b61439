"""Apply one mutation to many tasks with per-task outcomes.

Every operation loads the task list once, mutates it in memory and persists it
once, only when at least one task actually changed. Storage faults roll the
whole operation back: nothing is reported as succeeded.
"""

import logging
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, Iterable, List, Mapping, Optional, Sequence

from lazytask.application.ports import StorageError, TaskRepository
from lazytask.core import Task, iso_now, next_task_id, normalize_priority, normalize_status, validate_due_date

logger = logging.getLogger("lazytask.bulk")

UPDATABLE_FIELDS = ("priority", "status", "tags", "description", "details", "due_date")


@dataclass
class BulkFailure:
    id: int
    reason: str


@dataclass
class BulkResult:
    success_count: int = 0
    failed_count: int = 0
    errors: List[BulkFailure] = field(default_factory=list)
    rolled_back: bool = False

    @property
    def ok(self) -> bool:
        return self.failed_count == 0

    def fail(self, task_id: int, reason: str) -> None:
        self.failed_count += 1
        self.errors.append(BulkFailure(task_id, reason))

    def failed_ids(self) -> List[int]:
        return [e.id for e in self.errors]

    def to_dict(self) -> Dict[str, Any]:
        return {
            "success_count": self.success_count,
            "failed_count": self.failed_count,
            "errors": [{"id": e.id, "reason": e.reason} for e in self.errors],
            "rolled_back": self.rolled_back,
        }


def dedupe_ids(ids: Iterable[int]) -> List[int]:
    seen = set()
    ordered: List[int] = []
    for task_id in ids:
        if task_id not in seen:
            seen.add(task_id)
            ordered.append(task_id)
    return ordered


def _rolled_back(ids: Sequence[int], exc: Exception) -> BulkResult:
    result = BulkResult(rolled_back=True)
    for task_id in ids:
        result.fail(task_id, f"Storage error: {exc}")
    return result


class BulkMutationEngine:
    def __init__(self, repository: TaskRepository):
        self.repository = repository

    def _run(
        self,
        operation: str,
        ids: Iterable[int],
        mutate: Callable[[List[Task], int, BulkResult], Optional[List[Task]]],
    ) -> BulkResult:
        ordered = dedupe_ids(ids)
        try:
            tasks = self.repository.load_all()
            result = BulkResult()
            for task_id in ordered:
                replacement = mutate(tasks, task_id, result)
                if replacement is not None:
                    tasks = replacement
            if result.success_count:
                self.repository.save_all(tasks)
        except (StorageError, OSError) as exc:
            logger.warning("%s of %d task(s) rolled back: %s", operation, len(ordered), exc)
            return _rolled_back(ordered, exc)
        return result

    def bulk_mark(self, ids: Iterable[int], status: str) -> BulkResult:
        try:
            code = normalize_status(status)
        except ValueError:
            result = BulkResult()
            for task_id in dedupe_ids(ids):
                result.fail(task_id, f"Invalid status: {status}")
            return result

        def mark(tasks: List[Task], task_id: int, result: BulkResult) -> None:
            task = _find(tasks, task_id)
            if task is None:
                result.fail(task_id, "Task not found")
            elif task.status == code:
                result.fail(task_id, f"Task already has status: {code}")
            else:
                task.status = code
                task.touch()
                result.success_count += 1

        return self._run("mark", ids, mark)

    def bulk_delete(self, ids: Iterable[int]) -> BulkResult:
        def delete(tasks: List[Task], task_id: int, result: BulkResult) -> Optional[List[Task]]:
            if _find(tasks, task_id) is None:
                result.fail(task_id, "Task not found")
                return None
            result.success_count += 1
            return [t for t in tasks if t.id != task_id]

        return self._run("delete", ids, delete)

    def bulk_update(self, ids: Iterable[int], changes: Mapping[str, Any]) -> BulkResult:
        """Apply the keys present in ``changes`` to every task.

        A task whose changes do not validate is left untouched and reported.
        """
        updates = {k: v for k, v in changes.items() if k in UPDATABLE_FIELDS}

        def update(tasks: List[Task], task_id: int, result: BulkResult) -> None:
            task = _find(tasks, task_id)
            if task is None:
                result.fail(task_id, "Task not found")
                return
            try:
                staged = apply_changes(task, updates)
            except ValueError as exc:
                result.fail(task_id, str(exc))
                return
            if staged is not task:
                tasks[tasks.index(task)] = staged
            result.success_count += 1

        return self._run("update", ids, update)

    def create_task(
        self,
        description: str,
        *,
        priority: str = "medium",
        status: str = "todo",
        details: str = "",
        due_date: Optional[str] = None,
        tags: Optional[Sequence[str]] = None,
    ) -> tuple[Optional[Task], BulkResult]:
        """Append a new task; the returned result counts it as one operation."""
        result = BulkResult()
        try:
            task = Task(
                id=0,
                description=_require_description(description),
                status=normalize_status(status),
                priority=normalize_priority(priority),
                details=details or "",
                due_date=_checked_due_date(due_date),
                tags=[t for t in (tags or []) if t],
            )
        except ValueError as exc:
            result.fail(0, str(exc))
            return None, result
        try:
            tasks = self.repository.load_all()
            task.id = next_task_id(tasks)
            task.created_at = task.updated_at = iso_now()
            self.repository.save_all(tasks + [task])
        except (StorageError, OSError) as exc:
            logger.warning("create rolled back: %s", exc)
            return None, _rolled_back([task.id], exc)
        result.success_count = 1
        return task, result


def apply_changes(task: Task, changes: Mapping[str, Any]) -> Task:
    """Return an updated copy of ``task`` or raise ValueError on the first bad field.

    Returns ``task`` itself when nothing would change.
    """
    staged = task.copy()
    for key, value in changes.items():
        if key == "priority":
            staged.priority = normalize_priority(value)
        elif key == "status":
            staged.status = normalize_status(value)
        elif key == "description":
            staged.description = _require_description(value)
        elif key == "details":
            staged.details = value or ""
        elif key == "due_date":
            staged.due_date = _checked_due_date(value)
        elif key == "tags":
            staged.tags = [str(t) for t in (value or []) if str(t)]
    if staged == task:
        return task
    staged.touch()
    return staged


def _find(tasks: Sequence[Task], task_id: int) -> Optional[Task]:
    for task in tasks:
        if task.id == task_id:
            return task
    return None


def _require_description(value: Any) -> str:
    text = str(value or "").strip()
    if not text:
        raise ValueError("Description cannot be empty")
    return text


def _checked_due_date(value: Optional[str]) -> Optional[str]:
    error = validate_due_date(value)
    if error:
        raise ValueError(error)
    return str(value).strip() if value else None


__all__ = [
    "BulkFailure",
    "BulkResult",
    "BulkMutationEngine",
    "UPDATABLE_FIELDS",
    "apply_changes",
    "dedupe_ids",
]
