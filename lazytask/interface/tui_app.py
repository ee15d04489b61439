"""Full-screen dashboard: one read-render loop over the task file."""

import logging
import logging.handlers
import signal
from contextlib import contextmanager
from typing import Iterator, Optional

from lazytask.application.bulk import BulkMutationEngine, BulkResult
from lazytask.application.ports import TaskRepository
from lazytask.interface.cli_io import Reporter
from lazytask.interface.tui_backend import UIBackend, create_ui
from lazytask.interface.tui_models import (
    CreateTask,
    DashboardState,
    DeleteTasks,
    MarkTasks,
    Quit,
    UpdateTasks,
)
from lazytask.interface.tui_render import build_frame
from lazytask.interface.tui_transitions import Effect, apply_result, reduce
from lazytask.util.responsive import ResizeWatcher, ResponsiveLayout

logger = logging.getLogger("lazytask.tui")

# Seconds between wake-ups while idle, to pick up resizes and external edits.
POLL_INTERVAL = 0.25


class DashboardApp:
    def __init__(
        self,
        repository: TaskRepository,
        ui: UIBackend,
        terminal,
        state: Optional[DashboardState] = None,
        layout: Optional[ResponsiveLayout] = None,
    ):
        self.repository = repository
        self.engine = BulkMutationEngine(repository)
        self.ui = ui
        self.terminal = terminal
        self.state = state or DashboardState()
        self.layout = layout or ResponsiveLayout()
        self.tasks = []

    def _signature(self) -> Optional[int]:
        compute = getattr(self.repository, "compute_signature", None)
        return compute() if compute else None

    def render(self) -> None:
        self.ui.render(build_frame(self.state, self.tasks, self.layout, self.ui))

    def execute(self, effect: Effect) -> Optional[BulkResult]:
        """Run one effect against storage and feed the outcome back into the state."""
        if isinstance(effect, Quit):
            self.state.running = False
            return None
        if isinstance(effect, CreateTask):
            _, result = self.engine.create_task(**effect.values)
        elif isinstance(effect, UpdateTasks):
            result = self.engine.bulk_update(effect.ids, effect.changes)
        elif isinstance(effect, MarkTasks):
            result = self.engine.bulk_mark(effect.ids, effect.status)
        elif isinstance(effect, DeleteTasks):
            result = self.engine.bulk_delete(effect.ids)
        else:
            raise TypeError(f"unsupported effect: {effect!r}")
        apply_result(self.state, effect, result)
        return result

    def run(self) -> int:
        interrupted = False
        with self.terminal.session(), ResizeWatcher(self.layout, self.terminal.size) as watcher, _terminate_on_sigterm():
            try:
                self._loop(watcher)
            except KeyboardInterrupt:
                interrupted = True
                logger.info("dashboard interrupted")
        return 130 if interrupted else 0

    def _loop(self, watcher: ResizeWatcher) -> None:
        dirty = True
        signature = None
        while self.state.running:
            current = self._signature()
            if dirty or current is None or current != signature:
                tasks = self.repository.load_all()
                signature = current
                if tasks != self.tasks:
                    self.tasks = tasks
                    dirty = True
            if watcher.poll() or dirty:
                self.render()
                dirty = False
            try:
                key = self.terminal.read_key(POLL_INTERVAL)
            except EOFError:
                logger.info("input closed; leaving dashboard")
                break
            if key is None:
                continue
            dirty = True
            effect = reduce(self.state, self.tasks, key)
            if effect is not None:
                self.execute(effect)


@contextmanager
def _terminate_on_sigterm() -> Iterator[None]:
    """SIGTERM unwinds like Ctrl-C so the terminal is restored on the way out."""
    def handler(signum, frame):
        raise KeyboardInterrupt

    try:
        previous = signal.signal(signal.SIGTERM, handler)
    except ValueError:
        # Not on the main thread: leave signal handling alone.
        yield
        return
    try:
        yield
    finally:
        signal.signal(signal.SIGTERM, previous)


def route_logging(log_file: Optional[str]) -> None:
    """Keep log records off the dashboard screen."""
    root = logging.getLogger("lazytask")
    root.propagate = False
    for handler in list(root.handlers):
        root.removeHandler(handler)
    if not log_file:
        root.addHandler(logging.NullHandler())
        return
    handler = logging.handlers.RotatingFileHandler(log_file, maxBytes=1_000_000, backupCount=2, encoding="utf-8")
    handler.setFormatter(logging.Formatter("%(asctime)s - %(name)s - %(levelname)s - %(message)s"))
    root.addHandler(handler)
    root.setLevel(logging.INFO)


def cmd_tui(args, repository: TaskRepository, settings, reporter: Optional[Reporter] = None) -> int:
    from lazytask.interface.tui_terminal import Terminal

    route_logging(settings.log_file)
    terminal = Terminal()
    ui_name = getattr(args, "ui", None) or settings.ui
    try:
        ui = create_ui(ui_name, output=terminal.output, theme=getattr(args, "theme", None) or settings.theme)
    except ValueError as exc:
        return (reporter or Reporter()).error("dashboard", str(exc))
    state = DashboardState(fuzzy_threshold=settings.fuzzy_threshold)
    return DashboardApp(repository, ui, terminal, state=state).run()


__all__ = ["DashboardApp", "POLL_INTERVAL", "cmd_tui", "route_logging"]
