import logging
import re
from dataclasses import dataclass, field, replace
from datetime import date, datetime, timezone
from typing import Any, Dict, List, Optional

from .status import TaskPriority, TaskStatus, normalize_priority, normalize_status

logger = logging.getLogger("lazytask.storage")

DUE_DATE_PATTERN = re.compile(r"^\d{4}-\d{2}-\d{2}$")


def iso_now() -> str:
    """UTC timestamp used for createdAt/updatedAt."""
    return datetime.now(timezone.utc).isoformat()


def parse_instant(value: Optional[str]) -> Optional[datetime]:
    if not value:
        return None
    raw = str(value).strip()
    if raw.endswith("Z"):
        raw = raw[:-1] + "+00:00"
    try:
        parsed = datetime.fromisoformat(raw)
    except ValueError:
        return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def parse_due_date(value: Optional[str]) -> Optional[date]:
    if not value:
        return None
    raw = str(value).strip()
    if not DUE_DATE_PATTERN.match(raw):
        return None
    try:
        return date.fromisoformat(raw)
    except ValueError:
        return None


def validate_due_date(value: Optional[str]) -> Optional[str]:
    """Return an error message for a malformed due date, None when acceptable."""
    if value is None or str(value).strip() == "":
        return None
    if parse_due_date(value) is None:
        return f"Invalid due date: {value} (expected YYYY-MM-DD)"
    return None


def split_tags(raw: Optional[str]) -> List[str]:
    if not raw:
        return []
    return [t.strip() for t in str(raw).split(",") if t.strip()]


@dataclass
class Task:
    id: int
    description: str
    status: str = TaskStatus.TODO.code
    priority: str = TaskPriority.MEDIUM.code
    details: str = ""
    due_date: Optional[str] = None
    tags: List[str] = field(default_factory=list)
    created_at: str = ""
    updated_at: str = ""

    def touch(self) -> None:
        self.updated_at = iso_now()

    def copy(self) -> "Task":
        return replace(self, tags=list(self.tags))

    @property
    def status_enum(self) -> TaskStatus:
        return TaskStatus.from_string(self.status)

    @property
    def priority_enum(self) -> TaskPriority:
        return TaskPriority.from_string(self.priority)

    def is_overdue(self, today: Optional[date] = None) -> bool:
        due = parse_due_date(self.due_date)
        if due is None or self.status == TaskStatus.DONE.code:
            return False
        return due < (today or date.today())

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {
            "id": self.id,
            "description": self.description,
            "details": self.details,
            "status": self.status,
            "priority": self.priority,
            "tags": list(self.tags),
            "createdAt": self.created_at,
            "updatedAt": self.updated_at,
        }
        if self.due_date:
            data["dueDate"] = self.due_date
        return data

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Task":
        """Build a task from its stored form, filling fields older files lack.

        Unknown status or priority values fall back to todo/medium with a warning.
        """
        now = iso_now()
        tags = data.get("tags") or []
        if isinstance(tags, str):
            tags = [t.strip() for t in tags.split(";") if t.strip()]
        return cls(
            id=int(data["id"]),
            description=str(data.get("description") or ""),
            status=_stored_code(data, "status", normalize_status, TaskStatus.TODO.code),
            priority=_stored_code(data, "priority", normalize_priority, TaskPriority.MEDIUM.code),
            details=str(data.get("details") or ""),
            due_date=data.get("dueDate") or None,
            tags=[str(t) for t in tags],
            created_at=str(data.get("createdAt") or now),
            updated_at=str(data.get("updatedAt") or now),
        )


def _stored_code(data: Dict[str, Any], key: str, normalize, default: str) -> str:
    raw = data.get(key)
    if not raw:
        return default
    try:
        return normalize(str(raw))
    except ValueError:
        logger.warning("Task %s: unknown %s %r; using %s", data.get("id"), key, raw, default)
        return default


def next_task_id(tasks: List[Task]) -> int:
    return max((t.id for t in tasks), default=0) + 1
