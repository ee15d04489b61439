from collections import Counter
from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
from typing import Dict, List, Optional, Sequence, Tuple

from .status import PRIORITIES, STATUSES, TaskStatus
from .task import Task, parse_instant


@dataclass
class TaskStats:
    total: int = 0
    by_status: Dict[str, int] = field(default_factory=lambda: {s: 0 for s in STATUSES})
    by_priority: Dict[str, int] = field(default_factory=lambda: {p: 0 for p in PRIORITIES})
    overdue: int = 0
    completion_rate: int = 0
    recent_activity: int = 0
    top_tags: List[Tuple[str, int]] = field(default_factory=list)


def calculate_stats(tasks: Sequence[Task], now: Optional[datetime] = None) -> TaskStats:
    """Aggregate counts shown by the stats panel, the footer and ``lazytask stats``."""
    now = now or datetime.now(timezone.utc)
    week_ago = now - timedelta(days=7)
    stats = TaskStats(total=len(tasks))
    tags: Counter = Counter()

    for task in tasks:
        if task.status in stats.by_status:
            stats.by_status[task.status] += 1
        if task.priority in stats.by_priority:
            stats.by_priority[task.priority] += 1
        if task.is_overdue(now.date()):
            stats.overdue += 1
        created = parse_instant(task.created_at)
        if created and created >= week_ago:
            stats.recent_activity += 1
        tags.update(task.tags or [])

    if stats.total:
        stats.completion_rate = round(stats.by_status[TaskStatus.DONE.code] / stats.total * 100)
    stats.top_tags = tags.most_common(5)
    return stats


__all__ = ["TaskStats", "calculate_stats"]
