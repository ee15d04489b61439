from dataclasses import dataclass, field
from datetime import date
from pathlib import Path
from typing import Any, Callable, Dict, List, Optional, Tuple

from lazytask.application.bulk import BulkMutationEngine, BulkResult
from lazytask.application.listing import exact_filter, filter_tasks, fuzzy_filter, sort_tasks
from lazytask.application.ports import StorageError, TaskRepository
from lazytask.config import Settings, load_settings, set_user_value
from lazytask.core import Task, calculate_stats, prepare_bulk_operation, split_tags, task_summaries
from lazytask.core.selection import SelectionResult
from lazytask.infrastructure.exchange import ExchangeError, export_tasks, import_tasks, merge_tasks
from lazytask.interface.cli_io import Reporter


def ask_confirmation(prompt: str) -> bool:
    try:
        answer = input(f"{prompt} [y/N] ")
    except EOFError:
        return False
    return answer.strip().lower() in ("y", "yes")


@dataclass
class CliDeps:
    repository: TaskRepository
    settings: Settings = field(default_factory=Settings)
    reporter: Reporter = field(default_factory=Reporter)
    confirm: Callable[[str], bool] = ask_confirmation
    config_path: Optional[Path] = None

    @property
    def engine(self) -> BulkMutationEngine:
        return BulkMutationEngine(self.repository)


def format_task_line(task: Task) -> str:
    line = f"{task.id:>4}  {task.status_enum.icon} {task.status:<11} {task.priority:<8} {task.description}"
    if task.due_date:
        line += f"  (due {task.due_date}{', overdue' if task.is_overdue() else ''})"
    if task.tags:
        line += "  " + " ".join(f"#{t}" for t in task.tags)
    return line


def _select(deps: CliDeps, command: str, ids: str) -> Tuple[SelectionResult, List[Task], Optional[int]]:
    """Resolve an ID expression against the stored tasks.

    The third element is an exit code when there is nothing to operate on.
    """
    tasks = deps.repository.load_all()
    if not tasks:
        # An empty list is informational; storage faults are reported by the engine.
        return SelectionResult(), tasks, deps.reporter.ok(command, "No tasks available.", payload={"ids": []})
    selection = prepare_bulk_operation(ids, tasks)
    if not selection.ids:
        code = deps.reporter.error(command, "No task selected", payload={"errors": selection.errors},
                                   lines=selection.errors)
        return selection, tasks, code
    return selection, tasks, None


def _report_bulk(deps: CliDeps, command: str, selection: SelectionResult, result: BulkResult, done_text: str) -> int:
    problems = list(selection.errors) + [f"Task {e.id}: {e.reason}" for e in result.errors]
    payload: Dict[str, Any] = dict(result.to_dict(), ids=selection.ids, selection_errors=selection.errors)
    if not problems:
        return deps.reporter.ok(command, done_text, payload=payload)
    if result.success_count and not deps.reporter.as_json:
        deps.reporter.ok(command, done_text)
    if result.rolled_back:
        message = "Storage error; no task was changed"
    elif result.success_count:
        message = f"Completed with {len(problems)} problem(s)"
    else:
        message = "No task was changed"
    return deps.reporter.error(command, message, payload=payload, lines=problems)


def cmd_add(args, deps: CliDeps) -> int:
    task, result = deps.engine.create_task(
        args.description,
        priority=args.priority or "medium",
        status=args.status or "todo",
        details=args.details or "",
        due_date=args.due_date,
        tags=split_tags(args.tags),
    )
    if task is None:
        reason = result.errors[0].reason if result.errors else "Task not created"
        return deps.reporter.error("add", reason, payload=result.to_dict())
    return deps.reporter.ok("add", f"Task {task.id} added: {task.description}", payload={"task": task.to_dict()})


def _changes_from_args(args) -> Dict[str, Any]:
    changes: Dict[str, Any] = {}
    for name in ("description", "details", "priority", "status", "due_date"):
        value = getattr(args, name, None)
        if value is not None:
            changes[name] = value
    if getattr(args, "tags", None) is not None:
        changes["tags"] = split_tags(args.tags)
    return changes


def cmd_update(args, deps: CliDeps) -> int:
    command = args.command or "update"
    changes = _changes_from_args(args)
    if not changes:
        return deps.reporter.error(command, "No changes specified")
    selection, _, code = _select(deps, command, args.ids)
    if code is not None:
        return code
    result = deps.engine.bulk_update(selection.ids, changes)
    return _report_bulk(deps, command, selection, result, f"{result.success_count} task(s) updated.")


def cmd_mark(args, deps: CliDeps) -> int:
    command = args.command or "mark"
    selection, _, code = _select(deps, command, args.ids)
    if code is not None:
        return code
    result = deps.engine.bulk_mark(selection.ids, args.status)
    return _report_bulk(deps, command, selection, result, f"{result.success_count} task(s) marked as {args.status}.")


def cmd_delete(args, deps: CliDeps) -> int:
    command = args.command or "delete"
    selection, tasks, code = _select(deps, command, args.ids)
    if code is not None:
        return code
    summaries = task_summaries(tasks, selection.ids)
    if not args.force:
        if deps.reporter.as_json:
            return deps.reporter.error(command, "Confirmation required: pass --force", payload={"ids": selection.ids})
        deps.reporter.ok(command, "Tasks to delete:", lines=[f"  {s}" for s in summaries])
        if not deps.confirm(f"Delete {len(selection.ids)} task(s)?"):
            return deps.reporter.ok(command, "Deletion cancelled.")
    result = deps.engine.bulk_delete(selection.ids)
    return _report_bulk(deps, command, selection, result, f"{result.success_count} task(s) deleted.")


def cmd_list(args, deps: CliDeps) -> int:
    tasks = filter_tasks(deps.repository.load_all(), args.status, args.priority, args.tag)
    if args.search:
        if args.fuzzy:
            tasks = fuzzy_filter(tasks, args.search, deps.settings.fuzzy_threshold)
        else:
            tasks = exact_filter(tasks, args.search)
    tasks = sort_tasks(tasks, args.sort, args.order)
    payload = {"count": len(tasks), "tasks": [t.to_dict() for t in tasks]}
    if not tasks:
        return deps.reporter.ok("list", "No tasks found.", payload=payload)
    return deps.reporter.ok("list", f"{len(tasks)} task(s)", payload=payload,
                            lines=[format_task_line(t) for t in tasks])


def cmd_stats(args, deps: CliDeps) -> int:
    stats = calculate_stats(deps.repository.load_all())
    lines = [
        f"Completion:   {stats.completion_rate}%",
        f"Overdue:      {stats.overdue}",
        f"Last 7 days:  {stats.recent_activity} created",
        "Status:       " + ", ".join(f"{k} {v}" for k, v in stats.by_status.items()),
        "Priority:     " + ", ".join(f"{k} {v}" for k, v in stats.by_priority.items()),
    ]
    if stats.top_tags:
        lines.append("Top tags:     " + ", ".join(f"#{tag} ({n})" for tag, n in stats.top_tags))
    payload = {
        "total": stats.total,
        "by_status": stats.by_status,
        "by_priority": stats.by_priority,
        "overdue": stats.overdue,
        "completion_rate": stats.completion_rate,
        "recent_activity": stats.recent_activity,
        "top_tags": [{"tag": t, "count": n} for t, n in stats.top_tags],
    }
    return deps.reporter.ok("stats", f"{stats.total} task(s)", payload=payload, lines=lines)


def cmd_export(args, deps: CliDeps) -> int:
    tasks = filter_tasks(deps.repository.load_all(), args.status, args.priority)
    if args.tags:
        wanted = set(split_tags(args.tags))
        tasks = [t for t in tasks if wanted.intersection(t.tags)]
    output = Path(args.output or f"lazytask-export-{date.today().isoformat()}.{args.format}")
    try:
        output.write_text(export_tasks(tasks, args.format), encoding="utf-8")
    except OSError as exc:
        return deps.reporter.error("export", f"Export failed: {exc}")
    return deps.reporter.ok("export", f"Exported {len(tasks)} task(s) to {output}",
                            payload={"count": len(tasks), "output": str(output), "format": args.format})


def cmd_import(args, deps: CliDeps) -> int:
    try:
        text = Path(args.input).read_text(encoding="utf-8")
        result = import_tasks(text, args.format)
    except (OSError, ExchangeError) as exc:
        return deps.reporter.error("import", f"Import failed: {exc}")
    if not result.ok:
        return deps.reporter.error("import", f"Validation failed for {len(result.errors)} task(s)",
                                   payload={"errors": result.errors}, lines=result.errors)
    count = len(result.tasks)
    if args.validate_only:
        return deps.reporter.ok("import", f"Validation successful. {count} tasks would be imported.",
                                payload={"count": count, "mode": "validate-only"})
    try:
        merged = merge_tasks(deps.repository.load_all(), result.tasks, args.mode)
        deps.repository.save_all(merged)
    except (StorageError, OSError) as exc:
        return deps.reporter.error("import", f"Storage error: {exc}")
    if args.mode == "replace":
        message = f"Successfully replaced all tasks with {count} imported tasks."
    else:
        message = f"Successfully merged {count} tasks."
    return deps.reporter.ok("import", message, payload={"count": count, "mode": args.mode})


def cmd_config(args, deps: CliDeps) -> int:
    if args.key and args.value is not None:
        value: Any = args.value
        if args.key == "fuzzy_threshold" and value != "":
            try:
                value = float(value)
            except ValueError:
                return deps.reporter.error("config", f"fuzzy_threshold must be a number, got {args.value!r}")
        set_user_value(args.key, value, deps.config_path)
    settings = load_settings(deps.config_path)
    values = vars(settings)
    if args.key:
        return deps.reporter.ok("config", f"{args.key} = {values[args.key]}", payload={args.key: values[args.key]})
    return deps.reporter.ok("config", "", payload=values, lines=[f"{k} = {v}" for k, v in values.items()])


def cmd_dashboard(args, deps: CliDeps) -> int:
    from lazytask.interface.tui_app import cmd_tui

    return cmd_tui(args, deps.repository, deps.settings, reporter=deps.reporter)


__all__ = [
    "CliDeps",
    "ask_confirmation",
    "format_task_line",
    "cmd_add",
    "cmd_update",
    "cmd_mark",
    "cmd_delete",
    "cmd_list",
    "cmd_stats",
    "cmd_export",
    "cmd_import",
    "cmd_config",
    "cmd_dashboard",
]
