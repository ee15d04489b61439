from enum import Enum
from typing import Final, Tuple


class TaskStatus(Enum):
    TODO = ("todo", "status.todo", "●")
    IN_PROGRESS = ("in-progress", "status.active", "●")
    DONE = ("done", "status.done", "✔")

    @property
    def code(self) -> str:
        return self.value[0]

    @property
    def style(self) -> str:
        return self.value[1]

    @property
    def icon(self) -> str:
        return self.value[2]

    @classmethod
    def from_string(cls, value: str) -> "TaskStatus":
        code = normalize_status(value)
        for status in cls:
            if status.code == code:
                return status
        raise ValueError(f"Invalid status: {value}")  # pragma: no cover - normalize_status raises first


class TaskPriority(Enum):
    LOW = ("low", "priority.low", "Low")
    MEDIUM = ("medium", "priority.medium", "! Medium")
    HIGH = ("high", "priority.high", "!! High")
    CRITICAL = ("critical", "priority.critical", "!!! CRITICAL")

    @property
    def code(self) -> str:
        return self.value[0]

    @property
    def style(self) -> str:
        return self.value[1]

    @property
    def label(self) -> str:
        return self.value[2]

    @classmethod
    def from_string(cls, value: str) -> "TaskPriority":
        code = normalize_priority(value)
        for priority in cls:
            if priority.code == code:
                return priority
        raise ValueError(f"Invalid priority: {value}")  # pragma: no cover


STATUSES: Final[Tuple[str, ...]] = tuple(s.code for s in TaskStatus)
PRIORITIES: Final[Tuple[str, ...]] = tuple(p.code for p in TaskPriority)

# Sort ranks: enums compare by declaration order.
STATUS_RANK: Final = {code: idx for idx, code in enumerate(STATUSES)}
PRIORITY_RANK: Final = {code: idx for idx, code in enumerate(PRIORITIES)}


def normalize_status(value: str) -> str:
    """Normalize status input to one of todo / in-progress / done.

    Only surrounding whitespace and letter case are forgiven; any other
    spelling raises ValueError.
    """
    token = (value or "").strip().lower()
    if token in STATUSES:
        return token
    raise ValueError(f"Invalid status: {value}")


def normalize_priority(value: str) -> str:
    token = (value or "").strip().lower()
    if token in PRIORITIES:
        return token
    raise ValueError(f"Invalid priority: {value}")


def is_valid_status(value: str) -> bool:
    return value in STATUSES


def is_valid_priority(value: str) -> bool:
    return value in PRIORITIES
