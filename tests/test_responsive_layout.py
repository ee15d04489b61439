import signal

import pytest

from lazytask.util.responsive import MIN_COLUMNS, MIN_ROWS, ResizeWatcher, ResponsiveLayout, truncate_text


def test_size_is_clamped_to_minimum():
    layout = ResponsiveLayout(40, 10)
    assert layout.current_size() == {"columns": MIN_COLUMNS, "rows": MIN_ROWS}


def test_narrow_terminal_hides_sidebar():
    layout = ResponsiveLayout(100, 30)
    assert not layout.sidebar.visible
    assert layout.task_list.width == 100
    assert layout.task_list.column == 1


def test_wide_terminal_shows_sidebar_next_to_list():
    layout = ResponsiveLayout(120, 40)
    assert layout.sidebar.width == 50
    assert layout.task_list.column == 52
    assert layout.task_list.width == 68


@pytest.mark.parametrize("columns", [80, 81, 99, 100, 119, 120, 140, 200, 321])
def test_stats_layout_fills_available_width(columns):
    layout = ResponsiveLayout(columns, 30)
    side = layout.stats_sidebar
    main = layout.task_list_with_stats
    assert 25 <= side.width <= 50
    assert main.width >= 40
    assert main.width + side.width + 2 == layout.available_width
    assert main.column == side.width + 3


def test_body_panels_sit_between_header_and_footer():
    layout = ResponsiveLayout(120, 30)
    assert layout.header.row == 1
    assert layout.footer.row == 30
    assert layout.task_list.row == 2
    assert layout.task_list.height == 28


def test_modal_is_centered_and_clipped():
    layout = ResponsiveLayout(80, 24)
    rect = layout.modal_position(60, 10)
    assert (rect.column, rect.row, rect.width, rect.height) == (10, 7, 60, 10)

    clipped = layout.modal_position(200, 100)
    assert clipped.width == 78
    assert clipped.height == 22
    assert clipped.column == 1
    assert clipped.row == 2


def test_compact_and_element_visibility():
    layout = ResponsiveLayout(90, 24)
    assert layout.is_compact
    assert not layout.should_show_element(110)
    layout.set_size(130, 24)
    assert not layout.is_compact
    assert layout.should_show_element(110)
    assert not layout.should_show_element(110, min_height=40)


def test_update_size_reports_change():
    layout = ResponsiveLayout(80, 24)
    assert layout.update_size(lambda: (120, 40))
    assert not layout.update_size(lambda: (120, 40))


def test_update_size_falls_back_on_provider_error(caplog):
    layout = ResponsiveLayout(120, 40)

    def broken():
        raise OSError("not a tty")

    assert layout.update_size(broken)
    assert layout.current_size() == {"columns": 80, "rows": 24}
    assert "Could not get terminal size" in caplog.text


@pytest.mark.parametrize(
    "text,limit,expected",
    [
        ("short", 10, "short"),
        ("exactly10!", 10, "exactly10!"),
        ("a longer sentence", 10, "a longe..."),
        ("abcdef", 3, "abc"),
        ("abcdef", 0, ""),
    ],
)
def test_truncate_text(text, limit, expected):
    assert truncate_text(text, limit) == expected
    assert ResponsiveLayout.truncate_text(text, limit) == expected


def test_resize_watcher_polls_provider():
    sizes = iter([(80, 24), (80, 24), (100, 30)])
    layout = ResponsiveLayout()
    watcher = ResizeWatcher(layout, lambda: next(sizes))

    assert watcher.poll()  # first poll always redraws
    assert not watcher.poll()
    assert watcher.poll()
    assert layout.columns == 100


def test_resize_signal_marks_watcher_dirty():
    layout = ResponsiveLayout()
    watcher = ResizeWatcher(layout, lambda: (80, 24))
    watcher.poll()
    watcher._on_winch(getattr(signal, "SIGWINCH", 28), None)
    assert watcher.poll()


@pytest.mark.skipif(not hasattr(signal, "SIGWINCH"), reason="no resize signal")
def test_resize_watcher_restores_handler():
    before = signal.getsignal(signal.SIGWINCH)
    with ResizeWatcher(ResponsiveLayout(), lambda: (80, 24)) as watcher:
        assert signal.getsignal(signal.SIGWINCH) == watcher._on_winch
    assert signal.getsignal(signal.SIGWINCH) == before
