"""Dashboard state, edit forms and the effects transitions ask the app to run."""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional, Sequence, Set, Tuple

from lazytask.application.listing import exact_filter, fuzzy_filter, sort_tasks
from lazytask.core import PRIORITIES, STATUSES, Task
from lazytask.core.fuzzy import DEFAULT_THRESHOLD


class Mode(str, Enum):
    VIEW = "view"
    ADD = "add"
    UPDATE = "update"
    DELETE_CONFIRM = "delete-confirm"
    SEARCH = "search"
    MARK = "mark"
    BULK_MENU = "bulk-menu"
    BULK_UPDATE = "bulk-update"
    BULK_DELETE_CONFIRM = "bulk-delete-confirm"
    HELP = "help"


class SearchMode(str, Enum):
    INACTIVE = "inactive"
    EXACT = "exact"
    FUZZY = "fuzzy"


FORM_FIELDS: Tuple[str, ...] = ("description", "priority", "status", "details", "due_date", "tags")
FIELD_LABELS: Dict[str, str] = {
    "description": "Description",
    "priority": "Priority",
    "status": "Status",
    "details": "Details",
    "due_date": "Due date",
    "tags": "Tags",
}
CHOICE_FIELDS: Dict[str, Tuple[str, ...]] = {"priority": PRIORITIES, "status": STATUSES}

BULK_MENU_OPTIONS: Tuple[Tuple[str, str], ...] = (
    ("mark", "Mark as..."),
    ("update", "Update properties"),
    ("delete", "Delete selected"),
    ("cancel", "Cancel"),
)
BULK_PRIORITY_CHOICES: Tuple[str, ...] = ("skip",) + PRIORITIES
BULK_TAG_CHOICES: Tuple[str, ...] = ("skip", "clear", "urgent", "work", "personal")


@dataclass
class EditForm:
    """Field values of the add/update form, all kept as text."""
    task_id: Optional[int] = None
    values: Dict[str, str] = field(default_factory=lambda: {
        "description": "",
        "priority": "medium",
        "status": "todo",
        "details": "",
        "due_date": "",
        "tags": "",
    })
    field_index: int = 0

    @classmethod
    def from_task(cls, task: Task) -> "EditForm":
        return cls(
            task_id=task.id,
            values={
                "description": task.description,
                "priority": task.priority,
                "status": task.status,
                "details": task.details or "",
                "due_date": task.due_date or "",
                "tags": ", ".join(task.tags),
            },
        )

    @property
    def active_field(self) -> str:
        return FORM_FIELDS[self.field_index]

    def next_field(self) -> None:
        self.field_index = (self.field_index + 1) % len(FORM_FIELDS)

    def previous_field(self) -> None:
        self.field_index = (self.field_index - 1) % len(FORM_FIELDS)

    def type_text(self, text: str) -> None:
        name = self.active_field
        if name in CHOICE_FIELDS:
            return
        self.values[name] += text

    def backspace(self) -> None:
        name = self.active_field
        if name not in CHOICE_FIELDS:
            self.values[name] = self.values[name][:-1]

    def cycle_choice(self, delta: int) -> None:
        choices = CHOICE_FIELDS.get(self.active_field)
        if not choices:
            return
        current = self.values[self.active_field]
        idx = choices.index(current) if current in choices else 0
        self.values[self.active_field] = choices[(idx + delta) % len(choices)]


@dataclass
class BulkUpdateForm:
    priority_index: int = 0
    tags_index: int = 0
    row: int = 0

    def cycle(self, delta: int) -> None:
        if self.row == 0:
            self.priority_index = (self.priority_index + delta) % len(BULK_PRIORITY_CHOICES)
        else:
            self.tags_index = (self.tags_index + delta) % len(BULK_TAG_CHOICES)

    def changes(self) -> Dict[str, Any]:
        changes: Dict[str, Any] = {}
        priority = BULK_PRIORITY_CHOICES[self.priority_index]
        if priority != "skip":
            changes["priority"] = priority
        tags = BULK_TAG_CHOICES[self.tags_index]
        if tags == "clear":
            changes["tags"] = []
        elif tags != "skip":
            changes["tags"] = [tags]
        return changes


@dataclass
class Message:
    text: str
    level: str = "info"


# Effects: storage work a transition asks the app loop to perform.


@dataclass
class CreateTask:
    values: Dict[str, Any]


@dataclass
class UpdateTasks:
    ids: List[int]
    changes: Dict[str, Any]


@dataclass
class MarkTasks:
    ids: List[int]
    status: str


@dataclass
class DeleteTasks:
    ids: List[int]


@dataclass
class Quit:
    pass


@dataclass
class DashboardState:
    selected_index: int = 0
    selected_ids: Set[int] = field(default_factory=set)
    multi_select: bool = False
    search_term: str = ""
    search_input: str = ""
    search_mode: SearchMode = SearchMode.INACTIVE
    pending_search_mode: SearchMode = SearchMode.EXACT
    sort_field: str = "id"
    sort_order: str = "asc"
    mode: Mode = Mode.VIEW
    form: Optional[EditForm] = None
    bulk_form: Optional[BulkUpdateForm] = None
    stats_view: bool = False
    messages: List[Message] = field(default_factory=list)
    menu_index: int = 0
    target_ids: List[int] = field(default_factory=list)
    fuzzy_threshold: float = DEFAULT_THRESHOLD
    running: bool = True

    def info(self, text: str) -> None:
        self.messages.append(Message(text, "info"))

    def error(self, text: str) -> None:
        self.messages.append(Message(text, "error"))

    def clear_messages(self) -> None:
        self.messages.clear()

    def enter_view(self) -> None:
        self.mode = Mode.VIEW
        self.form = None
        self.bulk_form = None
        self.menu_index = 0
        self.target_ids = []

    def set_multi_select(self, enabled: bool) -> None:
        self.multi_select = enabled
        if not enabled:
            self.selected_ids.clear()

    def clamp(self, count: int) -> None:
        self.selected_index = max(0, min(self.selected_index, count - 1)) if count else 0


def visible_tasks(state: DashboardState, tasks: Sequence[Task]) -> List[Task]:
    """Tasks in display order: search filter first, then the active sort."""
    filtered: List[Task]
    if state.search_mode == SearchMode.FUZZY:
        filtered = fuzzy_filter(tasks, state.search_term, state.fuzzy_threshold)
    elif state.search_mode == SearchMode.EXACT:
        filtered = exact_filter(tasks, state.search_term)
    else:
        filtered = list(tasks)
    return sort_tasks(filtered, state.sort_field, state.sort_order)


def current_task(state: DashboardState, tasks: Sequence[Task]) -> Optional[Task]:
    view = visible_tasks(state, tasks)
    if not view:
        return None
    state.clamp(len(view))
    return view[state.selected_index]


__all__ = [
    "Mode",
    "SearchMode",
    "FORM_FIELDS",
    "FIELD_LABELS",
    "CHOICE_FIELDS",
    "BULK_MENU_OPTIONS",
    "BULK_PRIORITY_CHOICES",
    "BULK_TAG_CHOICES",
    "EditForm",
    "BulkUpdateForm",
    "Message",
    "CreateTask",
    "UpdateTasks",
    "MarkTasks",
    "DeleteTasks",
    "Quit",
    "DashboardState",
    "visible_tasks",
    "current_task",
]
