import logging
import signal
from dataclasses import dataclass
from typing import Callable, Dict, Tuple

logger = logging.getLogger("lazytask.layout")

MIN_COLUMNS = 80
MIN_ROWS = 24
WIDE_COLUMNS = 120
COMPACT_COLUMNS = 100

SizeProvider = Callable[[], Tuple[int, int]]


@dataclass(frozen=True)
class Rect:
    """Screen rectangle, 1-based like terminal cursor coordinates."""
    column: int
    row: int
    width: int
    height: int

    @property
    def visible(self) -> bool:
        return self.width > 0 and self.height > 0


class ResponsiveLayout:
    """Panel geometry derived from the current terminal size.

    Every rectangle is recomputed on access so a resize takes effect on the
    next frame without any invalidation step.
    """

    def __init__(self, columns: int = MIN_COLUMNS, rows: int = MIN_ROWS):
        self.columns = MIN_COLUMNS
        self.rows = MIN_ROWS
        self.set_size(columns, rows)

    def set_size(self, columns: int, rows: int) -> None:
        self.columns = max(MIN_COLUMNS, int(columns))
        self.rows = max(MIN_ROWS, int(rows))

    def update_size(self, size_provider: SizeProvider) -> bool:
        """Refresh from ``size_provider``; returns True when the size changed."""
        before = (self.columns, self.rows)
        try:
            columns, rows = size_provider()
            self.set_size(columns, rows)
        except (OSError, ValueError, TypeError) as exc:
            logger.warning("Could not get terminal size: %s", exc)
            self.set_size(MIN_COLUMNS, MIN_ROWS)
        return (self.columns, self.rows) != before

    def current_size(self) -> Dict[str, int]:
        return {"columns": self.columns, "rows": self.rows}

    @property
    def _body_height(self) -> int:
        return max(10, self.rows - 2)

    @property
    def header(self) -> Rect:
        return Rect(1, 1, self.columns, 1)

    @property
    def footer(self) -> Rect:
        return Rect(1, self.rows, self.columns, 1)

    @property
    def sidebar(self) -> Rect:
        if self.columns < WIDE_COLUMNS:
            return Rect(1, 1, 0, 0)
        return Rect(1, 2, max(25, min(50, self.columns - 45)), self._body_height)

    @property
    def task_list(self) -> Rect:
        side = self.sidebar
        if not side.visible:
            return Rect(1, 2, self.columns, self._body_height)
        return Rect(side.width + 2, 2, max(40, self.columns - side.width - 2), self._body_height)

    @property
    def available_width(self) -> int:
        """Usable width of the stats-combined layout (two-cell margin each side)."""
        return self.columns - 4

    @property
    def stats_sidebar(self) -> Rect:
        return Rect(1, 2, max(25, min(50, self.available_width - 45)), self._body_height)

    @property
    def task_list_with_stats(self) -> Rect:
        side = self.stats_sidebar.width
        return Rect(side + 3, 2, max(40, self.available_width - side - 2), self._body_height)

    def modal_position(self, width: int, height: int) -> Rect:
        return Rect(
            max(1, (self.columns - width) // 2),
            max(2, (self.rows - height) // 2),
            min(width, self.columns - 2),
            min(height, self.rows - 2),
        )

    @property
    def is_compact(self) -> bool:
        return self.columns < COMPACT_COLUMNS

    def should_show_element(self, min_width: int, min_height: int = MIN_ROWS) -> bool:
        return self.columns >= min_width and self.rows >= min_height

    @staticmethod
    def truncate_text(text: str, max_length: int) -> str:
        return truncate_text(text, max_length)


def truncate_text(text: str, max_length: int) -> str:
    if len(text) <= max_length:
        return text
    if max_length <= 3:
        return text[:max(0, max_length)]
    return text[: max_length - 3] + "..."


class ResizeWatcher:
    """Tracks terminal resizes for the dashboard loop.

    ``poll()`` is called once per loop iteration. Where the platform offers
    SIGWINCH the handler only sets a flag; the size itself is always read from
    the provider inside the loop.
    """

    def __init__(self, layout: ResponsiveLayout, size_provider: SizeProvider):
        self.layout = layout
        self.size_provider = size_provider
        self.dirty = True
        self._previous_handler = None
        self._listening = False

    def _on_winch(self, signum, frame) -> None:
        self.dirty = True

    def start(self) -> None:
        sig = getattr(signal, "SIGWINCH", None)
        if sig is None:
            logger.warning("Resize signal not available on this platform; polling only")
            return
        try:
            self._previous_handler = signal.signal(sig, self._on_winch)
            self._listening = True
        except ValueError as exc:
            # signal.signal only works from the main thread.
            logger.warning("Resize listening not available: %s", exc)

    def stop(self) -> None:
        if not self._listening:
            return
        signal.signal(signal.SIGWINCH, self._previous_handler or signal.SIG_DFL)
        self._listening = False

    def poll(self) -> bool:
        """Re-read the size; True when the frame must be rebuilt for a new size."""
        changed = self.layout.update_size(self.size_provider)
        resized = changed or self.dirty
        self.dirty = False
        return resized

    def __enter__(self) -> "ResizeWatcher":
        self.start()
        return self

    def __exit__(self, *exc) -> None:
        self.stop()


__all__ = [
    "MIN_COLUMNS",
    "MIN_ROWS",
    "Rect",
    "ResponsiveLayout",
    "ResizeWatcher",
    "truncate_text",
]
