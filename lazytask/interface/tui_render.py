"""Panel drawing and full-screen frame composition for the dashboard.

A rendered line is a prompt_toolkit fragment list (``[(style, text), ...]``).
Widths are counted in terminal cells with wcwidth, so styling never affects
alignment.
"""
from dataclasses import dataclass
from datetime import date
from typing import List, Optional, Sequence, Tuple

from prompt_toolkit.formatted_text import StyleAndTextTuples
from wcwidth import wcwidth

from lazytask.core import STATUSES, Task, TaskStatus, calculate_stats, task_summaries
from lazytask.interface.tui_models import (
    BULK_MENU_OPTIONS,
    BULK_PRIORITY_CHOICES,
    BULK_TAG_CHOICES,
    CHOICE_FIELDS,
    FIELD_LABELS,
    FORM_FIELDS,
    DashboardState,
    Mode,
    SearchMode,
    visible_tasks,
)
from lazytask.util.responsive import Rect, ResponsiveLayout

Line = StyleAndTextTuples

BORDER = "class:border"
BORDER_FOCUSED = "class:border.focused"
BORDER_MODAL = "class:border.modal"
DIM = "class:dim"

# Task summaries shown in a confirm or bulk modal before "... and N more".
MAX_SUMMARY_LINES = 8


def char_width(ch: str) -> int:
    return max(0, wcwidth(ch))


def text_width(text: str) -> int:
    return sum(char_width(ch) for ch in text)


def line_width(line: Line) -> int:
    return sum(text_width(frag[1]) for frag in line)


def line_text(line: Line) -> str:
    return "".join(frag[1] for frag in line)


def fit_line(line: Line, width: int) -> Line:
    """Cut ``line`` to ``width`` cells and pad it with spaces to exactly that width."""
    result: Line = []
    used = 0
    for frag in line:
        style, text = frag[0], frag[1]
        kept = []
        for ch in text:
            w = char_width(ch)
            if used + w > width:
                break
            kept.append(ch)
            used += w
        if kept:
            result.append((style, "".join(kept)))
        if used >= width or len(kept) < len(text):
            break
    if used < width:
        result.append(("", " " * (width - used)))
    return result


def restyle(line: Line, style: str) -> Line:
    return [(style, frag[1]) for frag in line]


def truncate_cells(text: str, width: int) -> str:
    """Cell-aware ``truncate_text``: ends with ``...`` when cut."""
    if text_width(text) <= width:
        return text
    if width <= 3:
        return fit_text(text, width)
    return fit_text(text, width - 3).rstrip() + "..."


def fit_text(text: str, width: int) -> str:
    out = []
    used = 0
    for ch in text:
        w = char_width(ch)
        if used + w > width:
            break
        out.append(ch)
        used += w
    return "".join(out)


def _frame(title: str, lines: Sequence[Line], width: int, height: int, border: str, content_style: Optional[str]) -> List[Line]:
    if width < 2 or height < 2:
        return [[("", " " * max(0, width))] for _ in range(max(0, height))]
    inner = width - 2
    label = truncate_cells(f" {title} ", max(0, inner - 1)) if title else ""
    top: Line = [(border, "+")]
    if label and inner >= 2:
        top.append((border, "-"))
        top.append((content_style or "class:title", label))
        top.append((border, "-" * (inner - 1 - text_width(label))))
    else:
        top.append((border, "-" * inner))
    top.append((border, "+"))

    # One blank cell of padding on each side when there is room for it.
    pad = " " if inner >= 2 else ""
    body_width = inner - 2 * len(pad)
    rows: List[Line] = [top]
    for idx in range(height - 2):
        content = fit_line(list(lines[idx]) if idx < len(lines) else [], body_width)
        if content_style:
            content = restyle(content, content_style)
        rows.append([(border, "|"), ("", pad)] + content + [("", pad), (border, "|")])
    rows.append([(border, "+" + "-" * inner + "+")])
    return rows


def box(
    title: str,
    lines: Sequence[Line],
    width: int,
    height: int,
    focused: bool = False,
    dimmed: bool = False,
) -> List[Line]:
    """Bordered panel of exactly ``height`` rows, each ``width`` cells wide."""
    if dimmed:
        return _frame(title, lines, width, height, DIM, DIM)
    return _frame(title, lines, width, height, BORDER_FOCUSED if focused else BORDER, None)


def draw_modal(title: str, lines: Sequence[Line], width: int, height: int) -> List[Line]:
    return _frame(title, lines, width, height, BORDER_MODAL, None)


@dataclass
class Panel:
    rect: Rect
    rows: List[Line]


class Canvas:
    """Cell grid used to splice panels and overlays into whole screen rows.

    The second cell of a double-width character holds an empty string.
    """

    def __init__(self, columns: int, rows: int):
        self.columns = columns
        self.rows = rows
        self.cells: List[List[Tuple[str, str]]] = [[("", " ")] * columns for _ in range(rows)]

    def _release(self, r: int, x: int) -> None:
        style, ch = self.cells[r][x]
        if ch == "" and x > 0:
            self.cells[r][x - 1] = (self.cells[r][x - 1][0], " ")
        elif char_width(ch) == 2 and x + 1 < self.columns:
            self.cells[r][x + 1] = (style, " ")

    def paint(self, column: int, row: int, line: Line) -> None:
        r = row - 1
        if not 0 <= r < self.rows:
            return
        x = column - 1
        for frag in line:
            style, text = frag[0], frag[1]
            for ch in text:
                w = char_width(ch)
                if w == 0:
                    continue
                if x < 0 or x + w > self.columns:
                    return
                self._release(r, x)
                if w == 2:
                    self._release(r, x + 1)
                self.cells[r][x] = (style, ch)
                if w == 2:
                    self.cells[r][x + 1] = (style, "")
                x += w

    def place(self, panel: Panel) -> None:
        for offset, line in enumerate(panel.rows):
            self.paint(panel.rect.column, panel.rect.row + offset, line)

    def dim(self) -> None:
        self.cells = [[(DIM, ch) for _, ch in row] for row in self.cells]

    def lines(self) -> List[Line]:
        out: List[Line] = []
        for row in self.cells:
            line: Line = []
            for style, ch in row:
                if not ch:
                    continue
                if line and line[-1][0] == style:
                    line[-1] = (style, line[-1][1] + ch)
                else:
                    line.append((style, ch))
            out.append(line)
        return out


def render_layout(panels: Sequence[Panel], modal: Optional[Panel] = None, size: Tuple[int, int] = (80, 24)) -> List[Line]:
    """Compose panels into screen rows.

    With a modal the background is painted and dimmed first, then the modal
    rows are painted over it.
    """
    columns, rows = size
    canvas = Canvas(columns, rows)
    for panel in panels:
        canvas.place(panel)
    if modal is not None:
        canvas.dim()
        canvas.place(modal)
    return canvas.lines()


# --- panel content -----------------------------------------------------------------


def _task_row(task: Task, state: DashboardState, compact: bool, today: date) -> Line:
    status = task.status_enum
    priority = task.priority_enum
    row: Line = []
    if state.multi_select:
        row.append(("class:marked" if task.id in state.selected_ids else "class:text.dim",
                    "[x] " if task.id in state.selected_ids else "[ ] "))
    row.append(("class:text.dim", f"{task.id:>3} "))
    row.append((f"class:{status.style}", status.icon + " "))
    label = priority.code[:1].upper() if compact else priority.label
    row.append((f"class:{priority.style}", f"{label:<{1 if compact else 12}} "))
    row.append(("class:text", task.description))
    if task.due_date:
        row.append(("class:overdue" if task.is_overdue(today) else "class:text.dim", f"  due {task.due_date}"))
    return row


def task_list_lines(state: DashboardState, view: Sequence[Task], rect: Rect, layout: ResponsiveLayout, today: date) -> List[Line]:
    inner_rows = max(0, rect.height - 2)
    if not view:
        if state.search_mode != SearchMode.INACTIVE:
            return [[("class:text.dim", f"No tasks match '{state.search_term}'")]]
        return [[("class:text.dim", "No tasks yet. Press 'a' to add one.")]]
    offset = max(0, state.selected_index - inner_rows + 1)
    lines: List[Line] = []
    for idx in range(offset, min(len(view), offset + inner_rows)):
        row = _task_row(view[idx], state, layout.is_compact, today)
        if idx == state.selected_index:
            row = fit_line(row, max(0, rect.width - 4))
            row = [("class:selected " + frag[0], frag[1]) for frag in row]
        lines.append(row)
    return lines


def detail_lines(task: Optional[Task]) -> List[Line]:
    if task is None:
        return [[("class:text.dim", "No task selected")]]
    lines: List[Line] = [
        [("class:title", task.description)],
        [],
        [("class:text.dim", "ID:       "), ("class:text", str(task.id))],
        [("class:text.dim", "Status:   "), (f"class:{task.status_enum.style}", task.status)],
        [("class:text.dim", "Priority: "), (f"class:{task.priority_enum.style}", task.priority)],
        [("class:text.dim", "Due:      "), ("class:text", task.due_date or "-")],
        [("class:text.dim", "Tags:     "), ("class:text", ", ".join(task.tags) or "-")],
    ]
    if task.details:
        lines.append([])
        lines.extend([("class:text", chunk)] for chunk in task.details.splitlines())
    return lines


def stats_lines(tasks: Sequence[Task]) -> List[Line]:
    stats = calculate_stats(tasks)
    lines: List[Line] = [
        [("class:text.dim", "Total:      "), ("class:text", str(stats.total))],
        [("class:text.dim", "Completion: "), ("class:status.done", f"{stats.completion_rate}%")],
        [("class:text.dim", "Overdue:    "), ("class:overdue" if stats.overdue else "class:text", str(stats.overdue))],
        [("class:text.dim", "Last 7 days:"), ("class:text", f" {stats.recent_activity}")],
        [],
        [("class:title", "Status")],
    ]
    for code, count in stats.by_status.items():
        lines.append([("class:text.dim", f"  {code:<12}"), ("class:text", str(count))])
    lines.append([])
    lines.append([("class:title", "Priority")])
    for code, count in stats.by_priority.items():
        lines.append([("class:text.dim", f"  {code:<12}"), ("class:text", str(count))])
    if stats.top_tags:
        lines.append([])
        lines.append([("class:title", "Top tags")])
        for tag, count in stats.top_tags:
            lines.append([("class:text.dim", f"  #{tag} "), ("class:text", str(count))])
    return lines


HELP_LINES: Tuple[Tuple[str, str], ...] = (
    ("j/k, up/down", "Navigate tasks"),
    ("g/G", "First / last task"),
    ("tab", "Toggle multi-select"),
    ("space", "Select task (multi-select)"),
    ("enter, u", "Update task / bulk actions"),
    ("a", "Add task"),
    ("d", "Delete task"),
    ("m", "Mark task status"),
    ("s", "Toggle stats view"),
    ("/", "Search"),
    ("?", "Fuzzy search"),
    ("o / r", "Cycle sort field / reverse order"),
    ("esc", "Clear search"),
    ("h", "This help"),
    ("q, ctrl-c", "Quit"),
)


def _cursor(active: bool) -> Tuple[str, str]:
    return ("class:marked", "> ") if active else ("", "  ")


def _summaries(tasks: Sequence[Task], ids: Sequence[int]) -> List[str]:
    summaries = task_summaries(tasks, ids)
    if len(summaries) <= MAX_SUMMARY_LINES:
        return summaries
    hidden = len(summaries) - MAX_SUMMARY_LINES
    return summaries[:MAX_SUMMARY_LINES] + [f"... and {hidden} more"]


def modal_content(state: DashboardState, tasks: Sequence[Task]) -> Tuple[str, List[Line], int]:
    """Title, lines and preferred width of the overlay for the current mode."""
    mode = state.mode
    if mode in (Mode.ADD, Mode.UPDATE):
        form = state.form
        title = "Add task" if mode == Mode.ADD else f"Update task {form.task_id}"
        lines: List[Line] = []
        for idx, name in enumerate(FORM_FIELDS):
            active = idx == form.field_index
            value = form.values[name]
            shown = f"< {value} >" if name in CHOICE_FIELDS else value + ("_" if active else "")
            lines.append([_cursor(active), ("class:text.dim", f"{FIELD_LABELS[name]:<12}"),
                          ("class:input" if active else "class:text", shown)])
        lines.append([])
        lines.append([("class:text.dim", "tab/down next  up prev  left/right choose  enter save  esc cancel")])
        return title, lines, 72
    if mode in (Mode.DELETE_CONFIRM, Mode.BULK_DELETE_CONFIRM):
        count = len(state.target_ids)
        title = "Delete task" if count == 1 else f"Delete {count} selected tasks"
        lines = [[("class:text", s)] for s in _summaries(tasks, state.target_ids)]
        lines += [[], [("class:message.error", "y"), ("class:text.dim", " delete   "),
                       ("class:text", "n/esc"), ("class:text.dim", " cancel")]]
        return title, lines, 60
    if mode == Mode.MARK:
        lines = [[("class:text.dim", f"Mark {len(state.target_ids)} task(s) as:")], []]
        for idx, code in enumerate(STATUSES):
            lines.append([_cursor(idx == state.menu_index), (f"class:{TaskStatus.from_string(code).style}", code)])
        return "Mark as", lines, 40
    if mode == Mode.BULK_MENU:
        lines = [[("class:text.dim", "Selected tasks:")]]
        lines += [[("class:text", "  " + s)] for s in _summaries(tasks, state.target_ids)]
        lines.append([])
        for idx, (_, label) in enumerate(BULK_MENU_OPTIONS):
            lines.append([_cursor(idx == state.menu_index), ("class:text", label)])
        return "Bulk actions", lines, 60
    if mode == Mode.BULK_UPDATE:
        form = state.bulk_form
        lines = [
            [_cursor(form.row == 0), ("class:text.dim", "Priority  "),
             ("class:input", f"< {BULK_PRIORITY_CHOICES[form.priority_index]} >")],
            [_cursor(form.row == 1), ("class:text.dim", "Tags      "),
             ("class:input", f"< {BULK_TAG_CHOICES[form.tags_index]} >")],
            [],
            [("class:text.dim", "left/right choose  enter apply  esc cancel")],
        ]
        return f"Update {len(state.target_ids)} task(s)", lines, 56
    lines = [[("class:marked", f"{keys:<14}"), ("class:text", text)] for keys, text in HELP_LINES]
    return "Help", lines, 56


def header_line(state: DashboardState, tasks: Sequence[Task], view: Sequence[Task], width: int) -> Line:
    left = " LazyTask"
    parts = [f"{len(view)}/{len(tasks)} tasks"]
    if state.sort_field != "id" or state.sort_order != "asc":
        parts.append(f"sort: {state.sort_field} {state.sort_order}")
    if state.multi_select:
        parts.append(f"{len(state.selected_ids)} selected")
    right = "  ".join(parts) + " "
    gap = max(1, width - text_width(left) - text_width(right))
    return fit_line([("class:header", left), ("", " " * gap), ("class:text.dim", right)], width)


def footer_line(state: DashboardState, tasks: Sequence[Task], layout: ResponsiveLayout) -> Line:
    width = layout.columns
    if state.mode == Mode.SEARCH:
        prefix = "?" if state.pending_search_mode == SearchMode.FUZZY else "/"
        return fit_line([("class:input", f"{prefix}{state.search_input}_")], width)
    if state.messages:
        last = state.messages[-1]
        extra = f" (+{len(state.messages) - 1} more)" if len(state.messages) > 1 else ""
        return fit_line([(f"class:message.{last.level}", " " + last.text + extra)], width)
    stats = calculate_stats(tasks)
    summary = f" {stats.by_status['done']}/{stats.total} done  {stats.completion_rate}%"
    if stats.overdue:
        summary += f"  {stats.overdue} overdue"
    hints = "  a:add u:update d:delete m:mark /:search ?:fuzzy s:stats h:help q:quit"
    if not layout.should_show_element(110):
        hints = "  h:help q:quit"
    return fit_line([("class:footer", summary), ("class:text.dim", hints)], width)


class _DefaultDrawing:
    """Drawing primitives used when no UI backend is given."""

    box = staticmethod(box)
    modal = staticmethod(draw_modal)

    @staticmethod
    def header(line: Line) -> Line:
        return line

    footer = header


def build_frame(
    state: DashboardState,
    tasks: Sequence[Task],
    layout: ResponsiveLayout,
    ui=None,
    today: Optional[date] = None,
) -> List[Line]:
    """All screen rows for the current state; shared by every UI backend.

    ``ui`` supplies ``header``, ``box``, ``modal`` and ``footer``; the module
    level drawing functions are used when it is omitted.
    """
    draw = ui or _DefaultDrawing
    today = today or date.today()
    view = visible_tasks(state, tasks)
    state.clamp(len(view))
    current = view[state.selected_index] if view else None
    search = ""
    if state.search_mode != SearchMode.INACTIVE:
        search = f" {'~' if state.search_mode == SearchMode.FUZZY else '/'}{state.search_term}"
    list_title = f"Tasks ({len(view)}){search}"
    focused = state.mode == Mode.VIEW

    panels: List[Panel] = [Panel(layout.header, [draw.header(header_line(state, tasks, view, layout.columns))])]
    if state.stats_view:
        side_rect, list_rect = layout.stats_sidebar, layout.task_list_with_stats
        panels.append(Panel(side_rect, draw.box("Stats", stats_lines(tasks), side_rect.width, side_rect.height)))
    else:
        side_rect, list_rect = layout.sidebar, layout.task_list
        if side_rect.visible:
            panels.append(Panel(side_rect, draw.box("Details", detail_lines(current), side_rect.width, side_rect.height)))
    rows = task_list_lines(state, view, list_rect, layout, today)
    panels.append(Panel(list_rect, draw.box(list_title, rows, list_rect.width, list_rect.height, focused=focused)))
    panels.append(Panel(layout.footer, [draw.footer(footer_line(state, tasks, layout))]))

    modal = None
    if state.mode not in (Mode.VIEW, Mode.SEARCH):
        title, lines, width = modal_content(state, tasks)
        rect = layout.modal_position(width, len(lines) + 2)
        modal = Panel(rect, draw.modal(title, lines, rect.width, rect.height))
    return render_layout(panels, modal, (layout.columns, layout.rows))


__all__ = [
    "Line",
    "Panel",
    "Canvas",
    "box",
    "draw_modal",
    "render_layout",
    "build_frame",
    "fit_line",
    "line_text",
    "line_width",
    "text_width",
    "truncate_cells",
]
