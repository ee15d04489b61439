from typing import Callable, Dict, List, Optional, Sequence, Tuple

from lazytask.core import Task
from lazytask.core.fuzzy import DEFAULT_THRESHOLD, search
from lazytask.core.status import PRIORITY_RANK, STATUS_RANK

SORT_FIELDS: Tuple[str, ...] = ("id", "due-date", "priority", "status", "created", "updated", "description")
SORT_ORDERS: Tuple[str, ...] = ("asc", "desc")

_SORT_KEYS: Dict[str, Callable[[Task], object]] = {
    "priority": lambda t: PRIORITY_RANK.get(t.priority, len(PRIORITY_RANK)),
    "status": lambda t: STATUS_RANK.get(t.status, len(STATUS_RANK)),
    "created": lambda t: t.created_at or "",
    "updated": lambda t: t.updated_at or "",
    "description": lambda t: t.description.casefold(),
}


def exact_filter(tasks: Sequence[Task], term: str) -> List[Task]:
    """Case-insensitive substring match on description, details and tags."""
    needle = (term or "").strip().lower()
    if not needle:
        return list(tasks)
    return [
        t for t in tasks
        if needle in t.description.lower()
        or needle in (t.details or "").lower()
        or any(needle in tag.lower() for tag in t.tags)
    ]


def fuzzy_filter(tasks: Sequence[Task], term: str, threshold: float = DEFAULT_THRESHOLD) -> List[Task]:
    """Tasks ranked by fuzzy score; blank terms keep everything."""
    if not (term or "").strip():
        return list(tasks)
    return [m.task for m in search(tasks, term, threshold)]


def filter_tasks(
    tasks: Sequence[Task],
    status: Optional[str] = None,
    priority: Optional[str] = None,
    tag: Optional[str] = None,
) -> List[Task]:
    result = list(tasks)
    if status:
        result = [t for t in result if t.status == status]
    if priority:
        result = [t for t in result if t.priority == priority]
    if tag:
        wanted = tag.strip().lower()
        result = [t for t in result if any(x.lower() == wanted for x in t.tags)]
    return result


def sort_tasks(tasks: Sequence[Task], field: str = "id", order: str = "asc") -> List[Task]:
    """Sort for display.

    ``id`` keeps the incoming order. Tasks without a due date always come last
    when sorting by ``due-date``. Ties keep their incoming order.
    """
    if field not in SORT_FIELDS:
        raise ValueError(f"Unknown sort field: {field}")
    reverse = order == "desc"
    if field == "id":
        ordered = list(tasks)
        return ordered[::-1] if reverse else ordered
    if field == "due-date":
        dated = [t for t in tasks if t.due_date]
        undated = [t for t in tasks if not t.due_date]
        return sorted(dated, key=lambda t: t.due_date, reverse=reverse) + undated
    return sorted(tasks, key=_SORT_KEYS[field], reverse=reverse)


def next_sort_field(field: str) -> str:
    try:
        idx = SORT_FIELDS.index(field)
    except ValueError:
        return SORT_FIELDS[0]
    return SORT_FIELDS[(idx + 1) % len(SORT_FIELDS)]


__all__ = [
    "SORT_FIELDS",
    "SORT_ORDERS",
    "exact_filter",
    "fuzzy_filter",
    "filter_tasks",
    "sort_tasks",
    "next_sort_field",
]
