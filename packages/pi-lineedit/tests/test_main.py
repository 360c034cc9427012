"""Tests for the ``python -m pi.lineedit`` example prompt."""

from __future__ import annotations

from pathlib import Path

import pytest

from pi.lineedit import __main__ as cli
from pi.lineedit.session import LineEditor


def test_complete_greeting() -> None:
    assert cli.complete_greeting("h") == ["hello", "hi", "hey", "howzit"]
    assert cli.complete_greeting("x") == []


@pytest.fixture
def run_main(monkeypatch: pytest.MonkeyPatch, make_terminal, tmp_path: Path):
    """Run ``main`` against a virtual terminal fed with *keys*."""
    monkeypatch.setenv("TERM", "xterm")
    monkeypatch.delenv("PI_LINEEDIT_WRITE_LOG", raising=False)
    history_file = tmp_path / "history.txt"
    editors: list[LineEditor] = []

    def _run(keys: bytes, *extra: str) -> tuple[int, LineEditor, Path]:
        terminal = make_terminal(keys)

        def make_editor(config):
            editor = LineEditor(config, terminal=terminal)
            editors.append(editor)
            return editor

        monkeypatch.setattr(cli, "LineEditor", make_editor)
        code = cli.main(["--history-file", str(history_file), *extra])
        return code, editors[-1], history_file

    return _run


class TestMain:
    def test_lines_are_saved_to_history(self, run_main) -> None:
        code, editor, history_file = run_main(b"hello\r\x04")
        assert code == 0
        assert editor.history.entries == ["hello"]
        assert history_file.read_text(encoding="utf-8") == "hello\n"

    def test_ctrl_c_exits(self, run_main) -> None:
        code, editor, history_file = run_main(b"abc\x03")
        assert code == 0
        assert not history_file.exists()

    def test_existing_history_is_loaded(self, run_main) -> None:
        code, editor, history_file = run_main(b"\x04")
        assert editor.history.entries == []

        history_file.write_text("earlier\n", encoding="utf-8")
        code, editor, _ = run_main(b"\x1b[A\r\x04")
        assert editor.history.entries == ["earlier"]

    def test_unreadable_history_file_is_reported(
        self, run_main, tmp_path: Path, capsys: pytest.CaptureFixture[str]
    ) -> None:
        (tmp_path / "history.txt").mkdir()
        code, editor, _ = run_main(b"hello\r\x04")
        assert code == 0
        assert editor.history.entries == ["hello"]
        out = capsys.readouterr().out
        assert "Error loading history" in out
        assert "Error saving history" in out

    def test_history_length_command(self, run_main) -> None:
        code, editor, _ = run_main(b"/historylen 5\r\x04")
        assert editor.history.max_len == 5
        assert editor.history.entries == []

    def test_invalid_history_length(self, run_main, capsys: pytest.CaptureFixture[str]) -> None:
        run_main(b"/historylen lots\r\x04")
        assert "Invalid history length" in capsys.readouterr().out

    def test_unknown_command(self, run_main, capsys: pytest.CaptureFixture[str]) -> None:
        run_main(b"/nope\r\x04")
        assert "Unrecognized command: /nope" in capsys.readouterr().out

    def test_multiline_flag(self, run_main, capsys: pytest.CaptureFixture[str]) -> None:
        code, editor, _ = run_main(b"\x04", "--multiline")
        assert editor.multiline
        assert "Multi-line mode enabled." in capsys.readouterr().out

    def test_completion_is_wired(self, run_main) -> None:
        code, editor, history_file = run_main(b"hel\t\r\x04")
        assert editor.history.entries == ["hello "]
