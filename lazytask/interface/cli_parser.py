"""CLI parser construction for the lazytask CLI/dashboard."""

import argparse
from typing import Any, Mapping

from lazytask.application.listing import SORT_FIELDS, SORT_ORDERS
from lazytask.core import PRIORITIES, STATUSES
from lazytask.infrastructure.exchange import FORMATS, IMPORT_MODES
from lazytask.interface.tui_backend import UI_NAMES

CONFIG_KEYS = ("data_file", "ui", "theme", "fuzzy_threshold", "log_file")


def build_parser(commands: Any, themes: Mapping[str, Any], default_theme: str, version: str = "") -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="lazytask",
        description="LazyTask: personal task tracker with a terminal dashboard",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="IDS accept lists and ranges, e.g. \"1,3,5-8\".",
    )
    parser.add_argument("--file", dest="file", help="task file (default: tasks.json, $LAZYTASK_FILE)")
    parser.add_argument("--json", dest="json", action="store_true", help="structured JSON output")
    parser.add_argument("--version", action="version", version=f"%(prog)s {version}")
    parser.set_defaults(func=commands.cmd_dashboard, ui=None, theme=None)

    def add_ids(sp):
        sp.add_argument("ids", help="task IDs, e.g. 1,3,5-8")
        return sp

    def add_task_fields(sp, *, description_flag: bool):
        if description_flag:
            sp.add_argument("--description", help="new description")
        sp.add_argument("-p", "--priority", help="low, medium, high, critical")
        sp.add_argument("-d", "--details", help="free-form details")
        sp.add_argument("-u", "--due-date", dest="due_date", help="due date (YYYY-MM-DD)")
        sp.add_argument("-t", "--tags", help="comma-separated tags")
        return sp

    def add_filters(sp, tag_dest: str = "tag"):
        sp.add_argument("-s", "--status", choices=list(STATUSES))
        sp.add_argument("-p", "--priority", choices=list(PRIORITIES))
        sp.add_argument("-t", f"--{tag_dest}", dest=tag_dest, help="only tasks carrying this tag")
        return sp

    sub = parser.add_subparsers(dest="command", metavar="COMMAND")

    dp = sub.add_parser("dashboard", help="open the full-screen dashboard (default)")
    dp.add_argument("--ui", choices=list(UI_NAMES), help="output backend")
    dp.add_argument("--theme", choices=list(themes.keys()), help=f"colour theme (default {default_theme})")
    dp.set_defaults(func=commands.cmd_dashboard)

    ap = sub.add_parser("add", help="add a task")
    ap.add_argument("description")
    ap.add_argument("-s", "--status", default="todo", help="initial status")
    add_task_fields(ap, description_flag=False)
    ap.set_defaults(func=commands.cmd_add)

    up = add_ids(sub.add_parser("update", help="update one or more tasks"))
    up.add_argument("-s", "--status", help="todo, in-progress, done")
    add_task_fields(up, description_flag=True)
    up.set_defaults(func=commands.cmd_update)

    rm = add_ids(sub.add_parser("delete", help="delete tasks"))
    rm.add_argument("-f", "--force", action="store_true", help="skip confirmation")
    rm.set_defaults(func=commands.cmd_delete)

    mk = sub.add_parser("mark", help="set the status of tasks")
    mk.add_argument("status", help="todo, in-progress, done")
    add_ids(mk)
    mk.set_defaults(func=commands.cmd_mark)

    bm = sub.add_parser("bulk-mark", help="set the status of many tasks")
    bm.add_argument("status", help="todo, in-progress, done")
    add_ids(bm)
    bm.set_defaults(func=commands.cmd_mark)

    bd = add_ids(sub.add_parser("bulk-delete", help="delete many tasks"))
    bd.add_argument("-f", "--force", action="store_true", help="skip confirmation")
    bd.set_defaults(func=commands.cmd_delete)

    bu = add_ids(sub.add_parser("bulk-update", help="change priority/tags of many tasks"))
    bu.add_argument("-p", "--priority", help="low, medium, high, critical")
    bu.add_argument("-t", "--tags", help="comma-separated tags (empty string clears)")
    bu.add_argument("-s", "--status", help="todo, in-progress, done")
    bu.set_defaults(func=commands.cmd_update, description=None, details=None, due_date=None)

    lp = add_filters(sub.add_parser("list", help="list tasks"))
    lp.add_argument("--search", help="search description, details and tags")
    lp.add_argument("--fuzzy", action="store_true", help="typo-tolerant search")
    lp.add_argument("--sort", choices=list(SORT_FIELDS), default="id")
    lp.add_argument("--order", choices=list(SORT_ORDERS), default="asc")
    lp.set_defaults(func=commands.cmd_list)

    st = sub.add_parser("stats", help="task statistics")
    st.set_defaults(func=commands.cmd_stats)

    ep = add_filters(sub.add_parser("export", help="export tasks"), tag_dest="tags")
    ep.add_argument("-f", "--format", choices=list(FORMATS), default="json")
    ep.add_argument("-o", "--output", help="output file (default lazytask-export-<date>.<format>)")
    ep.set_defaults(func=commands.cmd_export)

    ip = sub.add_parser("import", help="import tasks")
    ip.add_argument("input", help="file to import")
    ip.add_argument("-f", "--format", choices=list(FORMATS), default="json")
    ip.add_argument("-m", "--mode", choices=list(IMPORT_MODES), default="merge")
    ip.add_argument("--validate-only", dest="validate_only", action="store_true", help="check without saving")
    ip.set_defaults(func=commands.cmd_import)

    cp = sub.add_parser("config", help="show or change user settings")
    cp.add_argument("key", nargs="?", choices=list(CONFIG_KEYS))
    cp.add_argument("value", nargs="?", help="new value (empty string removes the key)")
    cp.set_defaults(func=commands.cmd_config)

    return parser
