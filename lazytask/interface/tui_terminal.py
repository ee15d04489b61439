"""Raw-mode keyboard input and screen control on top of prompt_toolkit."""

import select
from collections import deque
from contextlib import ExitStack, contextmanager
from typing import Deque, Iterator, Optional, Tuple

from prompt_toolkit.input import Input, create_input
from prompt_toolkit.keys import Keys
from prompt_toolkit.output import Output, create_output

# Time to wait for the rest of an escape sequence before treating ESC as a key.
ESCAPE_TIMEOUT = 0.05

KEY_NAMES = {
    Keys.Up: "up",
    Keys.Down: "down",
    Keys.Left: "left",
    Keys.Right: "right",
    Keys.ControlM: "enter",
    Keys.ControlJ: "enter",
    Keys.ControlI: "tab",
    Keys.Escape: "escape",
    Keys.ControlH: "backspace",
    Keys.ControlC: "ctrl-c",
}


def key_name(key) -> Optional[str]:
    """Dashboard key name for a prompt_toolkit key, None for keys it ignores."""
    if key in KEY_NAMES:
        return KEY_NAMES[key]
    if isinstance(key, Keys):
        return None
    if isinstance(key, str) and len(key) == 1 and key.isprintable():
        return key
    return None


class Terminal:
    def __init__(self, input: Optional[Input] = None, output: Optional[Output] = None):
        self.input = input or create_input()
        self.output = output or create_output()
        self._pending: Deque[str] = deque()

    def size(self) -> Tuple[int, int]:
        size = self.output.get_size()
        return size.columns, size.rows

    @contextmanager
    def session(self) -> Iterator["Terminal"]:
        """Raw mode on the alternate screen; restored on every exit path."""
        with ExitStack() as stack:
            stack.enter_context(self.input.raw_mode())
            self.output.enter_alternate_screen()
            self.output.hide_cursor()
            self.output.flush()
            stack.callback(self._restore_screen)
            yield self

    def _restore_screen(self) -> None:
        self.output.reset_attributes()
        self.output.show_cursor()
        self.output.quit_alternate_screen()
        self.output.flush()

    def _queue(self, presses) -> None:
        for press in presses:
            if press.key == Keys.BracketedPaste:
                self._pending.extend(ch for ch in press.data if ch.isprintable())
                continue
            name = key_name(press.key)
            if name:
                self._pending.append(name)

    def read_key(self, timeout: Optional[float] = None) -> Optional[str]:
        """Next key name; None when ``timeout`` passes. Raises EOFError at end of input."""
        while not self._pending:
            if self.input.closed:
                raise EOFError
            ready, _, _ = select.select([self.input.fileno()], [], [], timeout)
            if not ready:
                return None
            self._queue(self.input.read_keys())
            if not self._pending:
                # A lone ESC is held back by the parser until flushed.
                more, _, _ = select.select([self.input.fileno()], [], [], ESCAPE_TIMEOUT)
                if not more:
                    self._queue(self.input.flush_keys())
        return self._pending.popleft()


__all__ = ["Terminal", "key_name", "KEY_NAMES"]
