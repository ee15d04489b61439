"""Key decoding and the (mode, event) transition table of the dashboard.

Handlers mutate ``DashboardState`` in place and may return one effect for the
app loop to execute against storage. The outcome of that effect comes back
through ``apply_result``.
"""

from dataclasses import dataclass
from typing import Callable, Dict, Optional, Sequence, Tuple, Union

from lazytask.application.bulk import BulkResult
from lazytask.application.listing import next_sort_field
from lazytask.core import STATUSES, Task, split_tags, validate_due_date
from lazytask.interface.tui_models import (
    BULK_MENU_OPTIONS,
    BulkUpdateForm,
    CreateTask,
    DashboardState,
    DeleteTasks,
    EditForm,
    MarkTasks,
    Mode,
    Quit,
    SearchMode,
    UpdateTasks,
    current_task,
    visible_tasks,
)

Effect = Union[CreateTask, UpdateTasks, MarkTasks, DeleteTasks, Quit]


@dataclass(frozen=True)
class Event:
    name: str
    char: str = ""


VIEW_KEYS: Dict[str, str] = {
    "j": "down",
    "down": "down",
    "k": "up",
    "up": "up",
    "g": "top",
    "G": "bottom",
    "tab": "toggle-multi",
    " ": "toggle-row",
    "a": "add",
    "u": "update",
    "enter": "update",
    "d": "delete",
    "m": "mark",
    "s": "stats",
    "/": "search-exact",
    "?": "search-fuzzy",
    "o": "cycle-sort",
    "r": "reverse-sort",
    "escape": "clear-search",
    "h": "help",
    "q": "quit",
}

FORM_KEYS: Dict[str, str] = {
    "tab": "next-field",
    "down": "next-field",
    "up": "prev-field",
    "left": "choice-prev",
    "right": "choice-next",
    "backspace": "backspace",
    "enter": "commit",
    "escape": "cancel",
}

CONFIRM_KEYS: Dict[str, str] = {"y": "confirm", "Y": "confirm", "n": "cancel", "N": "cancel", "escape": "cancel"}

SEARCH_KEYS: Dict[str, str] = {"enter": "apply", "escape": "cancel", "backspace": "backspace"}

MENU_KEYS: Dict[str, str] = {
    "j": "down",
    "down": "down",
    "k": "up",
    "up": "up",
    "enter": "choose",
    "escape": "cancel",
}

BULK_FORM_KEYS: Dict[str, str] = {
    "j": "down",
    "down": "down",
    "tab": "down",
    "k": "up",
    "up": "up",
    "left": "choice-prev",
    "h": "choice-prev",
    "right": "choice-next",
    "l": "choice-next",
    "enter": "commit",
    "escape": "cancel",
}

HELP_KEYS: Dict[str, str] = {"escape": "close", "enter": "close", "h": "close", "q": "close"}

# Modes whose unmapped printable keys are text input.
TEXT_MODES = {Mode.ADD, Mode.UPDATE, Mode.SEARCH}

KEYMAPS: Dict[Mode, Dict[str, str]] = {
    Mode.VIEW: VIEW_KEYS,
    Mode.ADD: FORM_KEYS,
    Mode.UPDATE: FORM_KEYS,
    Mode.DELETE_CONFIRM: CONFIRM_KEYS,
    Mode.BULK_DELETE_CONFIRM: CONFIRM_KEYS,
    Mode.SEARCH: SEARCH_KEYS,
    Mode.MARK: MENU_KEYS,
    Mode.BULK_MENU: MENU_KEYS,
    Mode.BULK_UPDATE: BULK_FORM_KEYS,
    Mode.HELP: HELP_KEYS,
}


def decode(mode: Mode, key: str) -> Optional[Event]:
    if key == "ctrl-c":
        return Event("quit")
    name = KEYMAPS[mode].get(key)
    if name:
        return Event(name, key)
    if mode in TEXT_MODES and len(key) == 1 and key.isprintable():
        return Event("text", key)
    return None


Handler = Callable[[DashboardState, Sequence[Task], Event], Optional[Effect]]


# --- view --------------------------------------------------------------------


def _move(delta: int) -> Handler:
    def handler(state: DashboardState, tasks: Sequence[Task], event: Event) -> None:
        count = len(visible_tasks(state, tasks))
        state.selected_index += delta
        state.clamp(count)

    return handler


def _top(state: DashboardState, tasks: Sequence[Task], event: Event) -> None:
    state.selected_index = 0


def _bottom(state: DashboardState, tasks: Sequence[Task], event: Event) -> None:
    state.selected_index = max(0, len(visible_tasks(state, tasks)) - 1)


def _toggle_multi(state: DashboardState, tasks: Sequence[Task], event: Event) -> None:
    state.set_multi_select(not state.multi_select)
    state.info("Multi-select on" if state.multi_select else "Multi-select off")


def _toggle_row(state: DashboardState, tasks: Sequence[Task], event: Event) -> None:
    if not state.multi_select:
        return
    task = current_task(state, tasks)
    if task is None:
        return
    if task.id in state.selected_ids:
        state.selected_ids.discard(task.id)
    else:
        state.selected_ids.add(task.id)


def _has_bulk_selection(state: DashboardState) -> bool:
    return state.multi_select and bool(state.selected_ids)


def _awaiting_selection(state: DashboardState) -> bool:
    """Multi-select is on but nothing is marked yet: single-task actions stay off."""
    if state.multi_select and not state.selected_ids:
        state.info("Select tasks first (space)")
        return True
    return False


def _open_bulk_menu(state: DashboardState) -> None:
    state.mode = Mode.BULK_MENU
    state.menu_index = 0
    state.target_ids = sorted(state.selected_ids)


def _start_add(state: DashboardState, tasks: Sequence[Task], event: Event) -> None:
    state.form = EditForm()
    state.mode = Mode.ADD


def _start_update(state: DashboardState, tasks: Sequence[Task], event: Event) -> None:
    if _awaiting_selection(state):
        return
    if _has_bulk_selection(state):
        _open_bulk_menu(state)
        return
    task = current_task(state, tasks)
    if task is None:
        state.error("No task selected")
        return
    state.form = EditForm.from_task(task)
    state.mode = Mode.UPDATE


def _start_delete(state: DashboardState, tasks: Sequence[Task], event: Event) -> None:
    if _awaiting_selection(state):
        return
    if _has_bulk_selection(state):
        _open_bulk_menu(state)
        return
    task = current_task(state, tasks)
    if task is None:
        state.error("No task selected")
        return
    state.target_ids = [task.id]
    state.mode = Mode.DELETE_CONFIRM


def _start_mark(state: DashboardState, tasks: Sequence[Task], event: Event) -> None:
    if _awaiting_selection(state):
        return
    if _has_bulk_selection(state):
        state.target_ids = sorted(state.selected_ids)
        state.menu_index = 0
    else:
        task = current_task(state, tasks)
        if task is None:
            state.error("No task selected")
            return
        state.target_ids = [task.id]
        state.menu_index = STATUSES.index(task.status) if task.status in STATUSES else 0
    state.mode = Mode.MARK


def _toggle_stats(state: DashboardState, tasks: Sequence[Task], event: Event) -> None:
    state.stats_view = not state.stats_view


def _start_search(search_mode: SearchMode) -> Handler:
    def handler(state: DashboardState, tasks: Sequence[Task], event: Event) -> None:
        state.pending_search_mode = search_mode
        state.search_input = state.search_term if state.search_mode == search_mode else ""
        state.mode = Mode.SEARCH

    return handler


def _cycle_sort(state: DashboardState, tasks: Sequence[Task], event: Event) -> None:
    state.sort_field = next_sort_field(state.sort_field)
    state.info(f"Sort: {state.sort_field} ({state.sort_order})")


def _reverse_sort(state: DashboardState, tasks: Sequence[Task], event: Event) -> None:
    state.sort_order = "desc" if state.sort_order == "asc" else "asc"
    state.info(f"Sort: {state.sort_field} ({state.sort_order})")


def _clear_search(state: DashboardState, tasks: Sequence[Task], event: Event) -> None:
    if state.search_mode == SearchMode.INACTIVE:
        return
    state.search_mode = SearchMode.INACTIVE
    state.search_term = ""
    state.selected_index = 0


def _open_help(state: DashboardState, tasks: Sequence[Task], event: Event) -> None:
    state.mode = Mode.HELP


def _quit(state: DashboardState, tasks: Sequence[Task], event: Event) -> Quit:
    state.running = False
    return Quit()


# --- add / update form ------------------------------------------------------


def _form_text(state: DashboardState, tasks: Sequence[Task], event: Event) -> None:
    state.form.type_text(event.char)


def _form_backspace(state: DashboardState, tasks: Sequence[Task], event: Event) -> None:
    state.form.backspace()


def _form_next(state: DashboardState, tasks: Sequence[Task], event: Event) -> None:
    state.form.next_field()


def _form_prev(state: DashboardState, tasks: Sequence[Task], event: Event) -> None:
    state.form.previous_field()


def _form_cycle(delta: int) -> Handler:
    def handler(state: DashboardState, tasks: Sequence[Task], event: Event) -> None:
        state.form.cycle_choice(delta)

    return handler


def _form_commit(state: DashboardState, tasks: Sequence[Task], event: Event) -> Optional[Effect]:
    values = state.form.values
    description = values["description"].strip()
    if not description:
        state.error("Description cannot be empty")
        return None
    due_error = validate_due_date(values["due_date"])
    if due_error:
        state.error(due_error)
        return None
    payload = {
        "description": description,
        "priority": values["priority"],
        "status": values["status"],
        "details": values["details"].strip(),
        "due_date": values["due_date"].strip() or None,
        "tags": split_tags(values["tags"]),
    }
    if state.mode == Mode.ADD:
        return CreateTask(payload)
    return UpdateTasks([state.form.task_id], payload)


def _cancel(state: DashboardState, tasks: Sequence[Task], event: Event) -> None:
    state.enter_view()


# --- confirmations, menus ------------------------------------------------------


def _confirm_delete(state: DashboardState, tasks: Sequence[Task], event: Event) -> DeleteTasks:
    return DeleteTasks(list(state.target_ids))


def _menu_move(delta: int, size: Callable[[DashboardState], int]) -> Handler:
    def handler(state: DashboardState, tasks: Sequence[Task], event: Event) -> None:
        state.menu_index = max(0, min(size(state) - 1, state.menu_index + delta))

    return handler


def _mark_size(state: DashboardState) -> int:
    return len(STATUSES)


def _bulk_menu_size(state: DashboardState) -> int:
    return len(BULK_MENU_OPTIONS)


def _choose_status(state: DashboardState, tasks: Sequence[Task], event: Event) -> MarkTasks:
    return MarkTasks(list(state.target_ids), STATUSES[state.menu_index])


def _choose_bulk_action(state: DashboardState, tasks: Sequence[Task], event: Event) -> None:
    action = BULK_MENU_OPTIONS[state.menu_index][0]
    if action == "mark":
        state.mode = Mode.MARK
        state.menu_index = 0
    elif action == "update":
        state.mode = Mode.BULK_UPDATE
        state.bulk_form = BulkUpdateForm()
    elif action == "delete":
        state.mode = Mode.BULK_DELETE_CONFIRM
    else:
        state.enter_view()


def _bulk_row(delta: int) -> Handler:
    def handler(state: DashboardState, tasks: Sequence[Task], event: Event) -> None:
        state.bulk_form.row = (state.bulk_form.row + delta) % 2

    return handler


def _bulk_cycle(delta: int) -> Handler:
    def handler(state: DashboardState, tasks: Sequence[Task], event: Event) -> None:
        state.bulk_form.cycle(delta)

    return handler


def _bulk_commit(state: DashboardState, tasks: Sequence[Task], event: Event) -> Optional[UpdateTasks]:
    changes = state.bulk_form.changes()
    if not changes:
        state.enter_view()
        state.info("No changes made.")
        return None
    return UpdateTasks(list(state.target_ids), changes)


# --- search --------------------------------------------------------------------


def _search_text(state: DashboardState, tasks: Sequence[Task], event: Event) -> None:
    state.search_input += event.char


def _search_backspace(state: DashboardState, tasks: Sequence[Task], event: Event) -> None:
    state.search_input = state.search_input[:-1]


def _search_apply(state: DashboardState, tasks: Sequence[Task], event: Event) -> None:
    term = state.search_input.strip()
    state.search_term = term
    state.search_mode = state.pending_search_mode if term else SearchMode.INACTIVE
    state.selected_index = 0
    state.enter_view()


def _search_cancel(state: DashboardState, tasks: Sequence[Task], event: Event) -> None:
    state.search_input = ""
    state.search_term = ""
    state.search_mode = SearchMode.INACTIVE
    state.selected_index = 0
    state.enter_view()


TRANSITIONS: Dict[Tuple[Mode, str], Handler] = {
    (Mode.VIEW, "down"): _move(1),
    (Mode.VIEW, "up"): _move(-1),
    (Mode.VIEW, "top"): _top,
    (Mode.VIEW, "bottom"): _bottom,
    (Mode.VIEW, "toggle-multi"): _toggle_multi,
    (Mode.VIEW, "toggle-row"): _toggle_row,
    (Mode.VIEW, "add"): _start_add,
    (Mode.VIEW, "update"): _start_update,
    (Mode.VIEW, "delete"): _start_delete,
    (Mode.VIEW, "mark"): _start_mark,
    (Mode.VIEW, "stats"): _toggle_stats,
    (Mode.VIEW, "search-exact"): _start_search(SearchMode.EXACT),
    (Mode.VIEW, "search-fuzzy"): _start_search(SearchMode.FUZZY),
    (Mode.VIEW, "cycle-sort"): _cycle_sort,
    (Mode.VIEW, "reverse-sort"): _reverse_sort,
    (Mode.VIEW, "clear-search"): _clear_search,
    (Mode.VIEW, "help"): _open_help,
    (Mode.SEARCH, "text"): _search_text,
    (Mode.SEARCH, "backspace"): _search_backspace,
    (Mode.SEARCH, "apply"): _search_apply,
    (Mode.SEARCH, "cancel"): _search_cancel,
    (Mode.DELETE_CONFIRM, "confirm"): _confirm_delete,
    (Mode.DELETE_CONFIRM, "cancel"): _cancel,
    (Mode.BULK_DELETE_CONFIRM, "confirm"): _confirm_delete,
    (Mode.BULK_DELETE_CONFIRM, "cancel"): _cancel,
    (Mode.MARK, "down"): _menu_move(1, _mark_size),
    (Mode.MARK, "up"): _menu_move(-1, _mark_size),
    (Mode.MARK, "choose"): _choose_status,
    (Mode.MARK, "cancel"): _cancel,
    (Mode.BULK_MENU, "down"): _menu_move(1, _bulk_menu_size),
    (Mode.BULK_MENU, "up"): _menu_move(-1, _bulk_menu_size),
    (Mode.BULK_MENU, "choose"): _choose_bulk_action,
    (Mode.BULK_MENU, "cancel"): _cancel,
    (Mode.BULK_UPDATE, "down"): _bulk_row(1),
    (Mode.BULK_UPDATE, "up"): _bulk_row(-1),
    (Mode.BULK_UPDATE, "choice-prev"): _bulk_cycle(-1),
    (Mode.BULK_UPDATE, "choice-next"): _bulk_cycle(1),
    (Mode.BULK_UPDATE, "commit"): _bulk_commit,
    (Mode.BULK_UPDATE, "cancel"): _cancel,
    (Mode.HELP, "close"): _cancel,
}

for _mode in Mode:
    TRANSITIONS[(_mode, "quit")] = _quit

for _mode in (Mode.ADD, Mode.UPDATE):
    TRANSITIONS.update({
        (_mode, "text"): _form_text,
        (_mode, "backspace"): _form_backspace,
        (_mode, "next-field"): _form_next,
        (_mode, "prev-field"): _form_prev,
        (_mode, "choice-prev"): _form_cycle(-1),
        (_mode, "choice-next"): _form_cycle(1),
        (_mode, "commit"): _form_commit,
        (_mode, "cancel"): _cancel,
    })


def reduce(state: DashboardState, tasks: Sequence[Task], key: str) -> Optional[Effect]:
    """Apply one key press; returns the effect to execute, if any."""
    event = decode(state.mode, key)
    if event is None:
        return None
    handler = TRANSITIONS.get((state.mode, event.name))
    if handler is None:
        return None
    state.clear_messages()
    return handler(state, tasks, event)


def apply_result(state: DashboardState, effect: Effect, result: BulkResult) -> None:
    """Report an executed effect and return to the task list.

    When the effect targeted the multi-select set, the selection shrinks to
    the IDs that failed so a retry targets exactly those.
    """
    for failure in result.errors:
        if isinstance(effect, CreateTask):
            state.error(failure.reason)
        else:
            state.error(f"Task {failure.id}: {failure.reason}")
    if result.success_count:
        state.info(_success_text(effect, result.success_count))
    if _targets_selection(state, effect):
        state.selected_ids = set(result.failed_ids())
    if isinstance(effect, CreateTask) and not result.success_count and not result.rolled_back:
        # Validation failures keep the form open for correction.
        return
    state.enter_view()


def _targets_selection(state: DashboardState, effect: Effect) -> bool:
    if not state.multi_select or isinstance(effect, CreateTask):
        return False
    return bool(state.selected_ids) and set(getattr(effect, "ids", ())) == state.selected_ids


def _success_text(effect: Effect, count: int) -> str:
    if isinstance(effect, CreateTask):
        return "Task added."
    if isinstance(effect, MarkTasks):
        return f"{count} task(s) marked as {effect.status}."
    if isinstance(effect, DeleteTasks):
        return f"{count} task(s) deleted."
    return f"{count} task(s) updated."


__all__ = [
    "Effect",
    "Event",
    "KEYMAPS",
    "TRANSITIONS",
    "decode",
    "reduce",
    "apply_result",
]
