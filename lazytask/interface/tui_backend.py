"""Interchangeable dashboard output backends."""

import sys
from typing import List, Optional, Protocol, Sequence, TextIO

from prompt_toolkit import print_formatted_text
from prompt_toolkit.formatted_text import FormattedText
from prompt_toolkit.output import Output

from lazytask.interface import tui_render
from lazytask.interface.tui_render import Line, line_text
from lazytask.interface.tui_themes import DEFAULT_THEME, build_style

UI_NAMES = ("formatted", "plain")


class UIBackend(Protocol):
    def header(self, line: Line) -> Line:
        ...

    def box(self, title: str, lines: Sequence[Line], width: int, height: int,
            focused: bool = False, dimmed: bool = False) -> List[Line]:
        ...

    def modal(self, title: str, lines: Sequence[Line], width: int, height: int) -> List[Line]:
        ...

    def footer(self, line: Line) -> Line:
        ...

    def render(self, frame: Sequence[Line]) -> None:
        ...


class FormattedUI:
    """Styled output through a prompt_toolkit ``Output`` and a theme ``Style``."""

    def __init__(self, output: Output, theme: str = DEFAULT_THEME):
        self.output = output
        self.style = build_style(theme)

    def header(self, line: Line) -> Line:
        return line

    def box(self, title, lines, width, height, focused=False, dimmed=False):
        return tui_render.box(title, lines, width, height, focused=focused, dimmed=dimmed)

    def modal(self, title, lines, width, height):
        return tui_render.draw_modal(title, lines, width, height)

    def footer(self, line: Line) -> Line:
        return line

    def render(self, frame: Sequence[Line]) -> None:
        fragments: Line = []
        for idx, line in enumerate(frame):
            if idx:
                fragments.append(("", "\n"))
            fragments.extend(line)
        self.output.hide_cursor()
        self.output.cursor_goto(0, 0)
        print_formatted_text(FormattedText(fragments), style=self.style, output=self.output, end="")
        self.output.flush()


class PlainUI:
    """Text-only output: no colour, no cursor addressing."""

    def __init__(self, stream: Optional[TextIO] = None):
        self.stream = stream or sys.stdout
        self.frames: int = 0

    @staticmethod
    def _strip(line: Line) -> Line:
        return [("", line_text(line))]

    def header(self, line: Line) -> Line:
        return self._strip(line)

    def box(self, title, lines, width, height, focused=False, dimmed=False):
        return [self._strip(row) for row in tui_render.box(title, lines, width, height, focused, dimmed)]

    def modal(self, title, lines, width, height):
        return [self._strip(row) for row in tui_render.draw_modal(title, lines, width, height)]

    def footer(self, line: Line) -> Line:
        return self._strip(line)

    def render(self, frame: Sequence[Line]) -> None:
        self.stream.write("\n".join(line_text(line).rstrip() for line in frame) + "\n")
        self.stream.flush()
        self.frames += 1


def create_ui(name: str, output: Optional[Output] = None, theme: str = DEFAULT_THEME,
              stream: Optional[TextIO] = None) -> UIBackend:
    """Backend by configured name (``formatted`` or ``plain``)."""
    key = (name or "formatted").strip().lower()
    if key == "formatted":
        if output is None:
            raise ValueError("formatted UI needs a prompt_toolkit output")
        return FormattedUI(output, theme)
    if key == "plain":
        return PlainUI(stream)
    raise ValueError(f"Unknown UI backend: {name} (expected one of: {', '.join(UI_NAMES)})")


__all__ = ["UI_NAMES", "UIBackend", "FormattedUI", "PlainUI", "create_ui"]
