from .status import (
    PRIORITIES,
    STATUSES,
    TaskPriority,
    TaskStatus,
    normalize_priority,
    normalize_status,
)
from .task import Task, iso_now, next_task_id, split_tags, validate_due_date
from .selection import (
    SelectionError,
    SelectionResult,
    parse_id_expression,
    prepare_bulk_operation,
    task_summaries,
    validate_ids,
)
from .fuzzy import FuzzyMatch, matches_fuzzy, search
from .stats import TaskStats, calculate_stats

__all__ = [
    "PRIORITIES",
    "STATUSES",
    "TaskPriority",
    "TaskStatus",
    "normalize_priority",
    "normalize_status",
    "Task",
    "iso_now",
    "next_task_id",
    "split_tags",
    "validate_due_date",
    # Selection
    "SelectionError",
    "SelectionResult",
    "parse_id_expression",
    "prepare_bulk_operation",
    "task_summaries",
    "validate_ids",
    # Search
    "FuzzyMatch",
    "matches_fuzzy",
    "search",
    # Stats
    "TaskStats",
    "calculate_stats",
]
