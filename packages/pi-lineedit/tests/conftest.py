"""Shared fixtures: an in-memory terminal that replays scripted key presses."""

from __future__ import annotations

import contextlib
import errno
from typing import Callable, Iterator

import pytest

from pi.lineedit.config import LineEditConfig
from pi.lineedit.history import History
from pi.lineedit.session import LineEditor


class VirtualTerminal:
    """In-memory terminal that records all writes for test inspection.

    Implements the ``Terminal`` protocol from ``pi.lineedit.terminal``.

    Parameters
    ----------
    keys:
        Bytes handed out by ``read``, one call at a time. Once exhausted
        ``read`` returns ``b""`` like a closed stream.
    columns:
        Number of terminal columns (width).
    tty:
        What ``isatty`` reports.
    """

    def __init__(self, keys: bytes = b"", *, columns: int = 80, tty: bool = True) -> None:
        self._input = bytearray(keys)
        self._columns = columns
        self._tty = tty
        self._buffer: list[str] = []
        self.fail_writes = False
        self.beeps = 0
        self.raw_entered = 0
        self.raw_active = False
        self.writes_while_raw: list[bool] = []

    # -- Terminal protocol --------------------------------------------------

    @property
    def columns(self) -> int:
        return self._columns

    @columns.setter
    def columns(self, value: int) -> None:
        self._columns = value

    def isatty(self) -> bool:
        return self._tty

    @contextlib.contextmanager
    def raw_mode(self) -> Iterator[None]:
        self.raw_entered += 1
        self.raw_active = True
        try:
            yield
        finally:
            self.raw_active = False

    def read(self, n: int = 1) -> bytes:
        chunk = bytes(self._input[:n])
        del self._input[:n]
        return chunk

    def write(self, data: str) -> None:
        if self.fail_writes:
            raise OSError(errno.EIO, "write failed")
        self._buffer.append(data)
        self.writes_while_raw.append(self.raw_active)

    def beep(self) -> None:
        self.beeps += 1

    # -- Test helpers -------------------------------------------------------

    def feed(self, keys: bytes) -> None:
        """Queue more input bytes."""
        self._input.extend(keys)

    @property
    def output(self) -> str:
        """Return everything written to the terminal as a single string."""
        return "".join(self._buffer)

    @property
    def write_count(self) -> int:
        return len(self._buffer)

    @property
    def pending_input(self) -> bytes:
        return bytes(self._input)

    def clear_buffer(self) -> None:
        self._buffer.clear()


GREETINGS = ["hello", "hi", "hey", "howzit"]


def greeting_producer(typed: str) -> list[str]:
    """Completion producer used throughout the tests."""
    return list(GREETINGS) if typed.startswith("h") else []


@pytest.fixture
def greetings() -> Callable[[str], list[str]]:
    return greeting_producer


@pytest.fixture
def make_terminal() -> Callable[..., VirtualTerminal]:
    return VirtualTerminal


@pytest.fixture
def make_editor() -> Callable[..., tuple[LineEditor, VirtualTerminal]]:
    """Build a ``LineEditor`` reading *keys* from a virtual terminal."""

    def _make(
        keys: bytes = b"",
        *,
        columns: int = 80,
        tty: bool = True,
        term: str | None = "xterm",
        history: History | None = None,
        **config_kwargs: object,
    ) -> tuple[LineEditor, VirtualTerminal]:
        terminal = VirtualTerminal(keys, columns=columns, tty=tty)
        config = LineEditConfig(term=term, write_log_path="", **config_kwargs)  # type: ignore[arg-type]
        return LineEditor(config, terminal=terminal, history=history), terminal

    return _make
