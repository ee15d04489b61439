"""Task ID range expressions: ``"1,3,5-7"`` → ``[1, 3, 5, 6, 7]``."""

import re
from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Sequence

from .task import Task

_INT = re.compile(r"^\d+$")


class SelectionError(ValueError):
    """Malformed ID expression."""


@dataclass
class SelectionResult:
    ids: List[int] = field(default_factory=list)
    errors: List[str] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.errors


def _parse_int(token: str, original: str) -> int:
    if not _INT.match(token):
        raise SelectionError(f"Invalid ID: {original}")
    return int(token)


def parse_id_expression(text: str) -> List[int]:
    """Parse a comma-separated list of IDs and ``A-B`` ranges.

    Whitespace around tokens and around the hyphen is ignored. The result is
    deduplicated and ascending. Empty input yields an empty list.
    """
    if not text or not text.strip():
        return []
    ids = set()
    for raw in text.split(","):
        part = raw.strip()
        if not part:
            raise SelectionError(f"Invalid ID: {raw!r}")
        if "-" in part:
            start_raw, sep, end_raw = part.partition("-")
            start_s, end_s = start_raw.strip(), end_raw.strip()
            if not _INT.match(start_s) or not _INT.match(end_s):
                raise SelectionError(f"Invalid range: {part}")
            start, end = int(start_s), int(end_s)
            if start > end:
                raise SelectionError(f"Invalid range: {part}")
            ids.update(range(start, end + 1))
        else:
            ids.add(_parse_int(part, part))
    return sorted(ids)


def validate_ids(ids: Iterable[int], tasks: Sequence[Task]) -> Dict[str, List[int]]:
    """Partition IDs into those present in ``tasks`` and those that are not."""
    existing = {t.id for t in tasks}
    valid: List[int] = []
    invalid: List[int] = []
    seen = set()
    for task_id in ids:
        if task_id in seen:
            continue
        seen.add(task_id)
        (valid if task_id in existing else invalid).append(task_id)
    return {"valid": valid, "invalid": invalid}


def prepare_bulk_operation(text: str, tasks: Sequence[Task]) -> SelectionResult:
    """Parse and validate in one step; never raises."""
    result = SelectionResult()
    try:
        parsed = parse_id_expression(text)
    except SelectionError as exc:
        result.errors.append(f"ID parsing error: {exc}")
        return result
    partition = validate_ids(parsed, tasks)
    if partition["invalid"]:
        result.errors.append("Invalid task IDs: " + ", ".join(str(i) for i in partition["invalid"]))
    if not partition["valid"]:
        result.errors.append("No valid task IDs provided")
    result.ids = partition["valid"]
    return result


def task_summaries(tasks: Sequence[Task], ids: Iterable[int]) -> List[str]:
    by_id = {t.id: t for t in tasks}
    lines = []
    for task_id in ids:
        task = by_id.get(task_id)
        lines.append(f"[{task_id}] {task.description}" if task else f"[{task_id}] Task not found")
    return lines


__all__ = [
    "SelectionError",
    "SelectionResult",
    "parse_id_expression",
    "validate_ids",
    "prepare_bulk_operation",
    "task_summaries",
]
