"""JSON/CSV export and validated import of task lists."""

import csv
import io
import json
from dataclasses import dataclass, field
from typing import Any, Dict, List, Sequence

from lazytask.core import PRIORITIES, STATUSES, Task, iso_now, next_task_id
from lazytask.core.task import DUE_DATE_PATTERN

FORMATS = ("json", "csv")
IMPORT_MODES = ("merge", "replace")
CSV_HEADERS = ["id", "description", "details", "status", "priority", "dueDate", "tags", "createdAt", "updatedAt"]


class ExchangeError(ValueError):
    """Input that cannot be read as a task list at all."""


@dataclass
class ImportResult:
    tasks: List[Task] = field(default_factory=list)
    errors: List[str] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.errors


def export_tasks(tasks: Sequence[Task], fmt: str = "json") -> str:
    if fmt == "json":
        return json.dumps([t.to_dict() for t in tasks], ensure_ascii=False, indent=2)
    if fmt != "csv":
        raise ExchangeError(f"Unsupported format: {fmt}")
    buf = io.StringIO()
    writer = csv.writer(buf, lineterminator="\n")
    writer.writerow(CSV_HEADERS)
    for task in tasks:
        writer.writerow([
            task.id,
            task.description,
            task.details or "",
            task.status,
            task.priority,
            task.due_date or "",
            ";".join(task.tags),
            task.created_at,
            task.updated_at,
        ])
    return buf.getvalue()


def _read_rows(text: str, fmt: str) -> List[Dict[str, Any]]:
    if fmt == "json":
        try:
            data = json.loads(text)
        except json.JSONDecodeError as exc:
            raise ExchangeError(f"Invalid JSON: {exc}") from exc
        if not isinstance(data, list):
            raise ExchangeError("JSON file must contain an array of tasks")
        return [row if isinstance(row, dict) else {} for row in data]
    if fmt != "csv":
        raise ExchangeError(f"Unsupported format: {fmt}")
    reader = csv.reader(io.StringIO(text.strip()))
    rows = [r for r in reader if r]
    if len(rows) < 2:
        raise ExchangeError("CSV file must have at least a header row and one data row")
    index = {h.strip().lower(): i for i, h in enumerate(rows[0])}
    parsed: List[Dict[str, Any]] = []
    for cells in rows[1:]:
        row: Dict[str, Any] = {}
        for header in CSV_HEADERS:
            pos = index.get(header.lower())
            if pos is not None and pos < len(cells) and cells[pos].strip():
                row[header] = cells[pos].strip()
        parsed.append(row)
    return parsed


def _validate_row(row: Dict[str, Any], line: int) -> tuple[Task | None, str | None]:
    problems = []
    description = row.get("description")
    if not isinstance(description, str) or not description.strip():
        problems.append("description is required and must be a string")
    if row.get("status") not in STATUSES:
        problems.append("status is required and must be one of: " + ", ".join(STATUSES))
    if row.get("priority") not in PRIORITIES:
        problems.append("priority is required and must be one of: " + ", ".join(PRIORITIES))
    due = row.get("dueDate")
    if due and not (isinstance(due, str) and DUE_DATE_PATTERN.match(due)):
        problems.append("dueDate must be in YYYY-MM-DD format")
    if problems:
        return None, f"Line {line}: " + ", ".join(problems)
    try:
        task_id = int(row.get("id") or 0)
    except (TypeError, ValueError):
        task_id = 0
    data = dict(row, id=task_id)
    return Task.from_dict(data), None


def import_tasks(text: str, fmt: str = "json") -> ImportResult:
    """Validate every row; the result carries either tasks or line-numbered errors."""
    result = ImportResult()
    for line, row in enumerate(_read_rows(text, fmt), start=1):
        task, error = _validate_row(row, line)
        if error:
            result.errors.append(error)
        else:
            result.tasks.append(task)
    if result.errors:
        result.tasks = []
    return result


def merge_tasks(existing: Sequence[Task], imported: Sequence[Task], mode: str = "merge") -> List[Task]:
    """Combine an import with the current list.

    ``merge`` appends the imported tasks renumbered after the current maximum
    ID. ``replace`` keeps only the imported tasks, renumbering missing or
    duplicate IDs.
    """
    if mode not in IMPORT_MODES:
        raise ExchangeError(f"Unknown import mode: {mode}")
    now = iso_now()
    if mode == "merge":
        base = next_task_id(list(existing))
        merged = list(existing)
        for offset, task in enumerate(imported):
            fresh = task.copy()
            fresh.id = base + offset
            fresh.updated_at = now
            merged.append(fresh)
        return merged
    replaced: List[Task] = []
    seen = set()
    for task in imported:
        fresh = task.copy()
        if fresh.id <= 0 or fresh.id in seen:
            fresh.id = max(seen | {t.id for t in imported}, default=0) + 1
        seen.add(fresh.id)
        replaced.append(fresh)
    return replaced


__all__ = [
    "CSV_HEADERS",
    "FORMATS",
    "IMPORT_MODES",
    "ExchangeError",
    "ImportResult",
    "export_tasks",
    "import_tasks",
    "merge_tasks",
]
