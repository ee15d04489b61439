import pytest
from prompt_toolkit.input import create_pipe_input
from prompt_toolkit.keys import Keys
from prompt_toolkit.output import DummyOutput

from lazytask.interface.tui_terminal import Terminal, key_name


@pytest.mark.parametrize(
    "key,expected",
    [
        (Keys.Up, "up"),
        (Keys.Enter, "enter"),
        (Keys.Tab, "tab"),
        (Keys.Escape, "escape"),
        (Keys.Backspace, "backspace"),
        (Keys.ControlC, "ctrl-c"),
        ("j", "j"),
        (" ", " "),
        ("é", "é"),
        (Keys.F5, None),
        ("\x00", None),
    ],
)
def test_key_name(key, expected):
    assert key_name(key) == expected


@pytest.fixture
def pipe():
    with create_pipe_input() as inp:
        yield inp


def test_read_key_decodes_escape_sequences(pipe):
    terminal = Terminal(pipe, DummyOutput())
    pipe.send_text("j\x1b[A\r")
    assert terminal.read_key(0.5) == "j"
    assert terminal.read_key(0.5) == "up"
    assert terminal.read_key(0.5) == "enter"


def test_read_key_times_out(pipe):
    assert Terminal(pipe, DummyOutput()).read_key(0.01) is None


def test_lone_escape_is_delivered(pipe):
    terminal = Terminal(pipe, DummyOutput())
    pipe.send_text("\x1b")
    assert terminal.read_key(0.5) == "escape"


def test_pasted_text_becomes_characters(pipe):
    terminal = Terminal(pipe, DummyOutput())
    pipe.send_text("\x1b[200~ab\x1b[201~")
    assert [terminal.read_key(0.5) for _ in range(2)] == ["a", "b"]


def test_closed_input_raises_eof(pipe):
    terminal = Terminal(pipe, DummyOutput())
    pipe.close()
    with pytest.raises(EOFError):
        terminal.read_key(0.5)


def test_session_restores_screen_on_error(pipe):
    class RecordingOutput(DummyOutput):
        def __init__(self):
            self.calls = []

        def enter_alternate_screen(self):
            self.calls.append("enter")

        def quit_alternate_screen(self):
            self.calls.append("quit")

    output = RecordingOutput()
    terminal = Terminal(pipe, output)
    with pytest.raises(RuntimeError):
        with terminal.session():
            raise RuntimeError("boom")
    assert output.calls == ["enter", "quit"]


def test_size_comes_from_output(pipe):
    assert Terminal(pipe, DummyOutput()).size() == (80, 40)
