import io

import pytest
from prompt_toolkit.output import DummyOutput
from prompt_toolkit.styles import Style

from lazytask.interface.tui_backend import FormattedUI, PlainUI, create_ui
from lazytask.interface.tui_themes import DEFAULT_THEME, THEMES, build_style, get_theme_palette


class TestThemes:
    def test_every_theme_defines_the_same_classes(self):
        keys = [set(palette) for palette in THEMES.values()]
        assert all(k == keys[0] for k in keys)

    def test_unknown_theme_falls_back(self):
        assert get_theme_palette("no-such-theme") == THEMES[DEFAULT_THEME]

    def test_palette_is_a_copy(self):
        palette = get_theme_palette(DEFAULT_THEME)
        palette["text"] = "#000000"
        assert THEMES[DEFAULT_THEME]["text"] != "#000000"

    def test_build_style(self):
        assert isinstance(build_style("dark-contrast"), Style)


class TestCreateUI:
    def test_plain(self):
        assert isinstance(create_ui("plain"), PlainUI)

    def test_formatted_needs_output(self):
        with pytest.raises(ValueError, match="prompt_toolkit output"):
            create_ui("formatted")

    def test_formatted(self):
        ui = create_ui(" Formatted ", output=DummyOutput(), theme="dark-contrast")
        assert isinstance(ui, FormattedUI)

    def test_unknown_name(self):
        with pytest.raises(ValueError, match="Unknown UI backend: curses"):
            create_ui("curses")


def test_plain_ui_strips_styles_and_trailing_space():
    stream = io.StringIO()
    ui = PlainUI(stream)
    rows = ui.box("T", [[("class:text", "abc")]], 9, 3)
    assert all(len(row) == 1 and row[0][0] == "" for row in rows)
    ui.render([[("class:header", "top   ")], [("", "bottom")]])
    assert stream.getvalue() == "top\nbottom\n"
    assert ui.frames == 1


def test_formatted_ui_renders_without_error():
    ui = FormattedUI(DummyOutput())
    frame = [ui.header([("class:header", "LazyTask")])] + ui.box("Tasks", [[("class:text", "one")]], 20, 3)
    ui.render(frame)
    assert ui.modal("M", [], 10, 3)[0][0] == ("class:border.modal", "+")
