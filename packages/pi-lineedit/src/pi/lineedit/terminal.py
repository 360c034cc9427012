"""Terminal abstraction for raw-mode line editing.

Provides a ``Terminal`` protocol, the ``TerminalModeController`` that moves a
tty between canonical and raw mode, a concrete ``ProcessTerminal`` backed by
file descriptors, and ``select_input_mode`` which decides once per read
whether interactive editing is possible at all.
"""

from __future__ import annotations

import atexit
import contextlib
import logging
import os
import sys
import termios
import tty
from dataclasses import dataclass
from typing import ContextManager, Iterator, Protocol, Union

from pi.lineedit.errors import (
    NotATerminalError,
    TerminalConfigError,
    UnsupportedTerminalError,
)

logger = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# ANSI escape constants
# ---------------------------------------------------------------------------

CLEAR_SCREEN = "\x1b[H\x1b[2J"
_BELL = "\x07"

DEFAULT_COLUMNS = 80


# ---------------------------------------------------------------------------
# Terminal protocol
# ---------------------------------------------------------------------------


class Terminal(Protocol):
    """Interface for the terminal I/O an edit session needs."""

    @property
    def columns(self) -> int: ...

    def isatty(self) -> bool: ...

    def raw_mode(self) -> ContextManager[None]: ...

    def read(self, n: int = 1) -> bytes: ...

    def write(self, data: str) -> None: ...

    def beep(self) -> None: ...


# ---------------------------------------------------------------------------
# Raw mode
# ---------------------------------------------------------------------------


class TerminalModeController:
    """Switches a tty file descriptor into raw mode and back.

    The original attributes are remembered on entry and restored exactly.
    ``restore_mode`` is idempotent: it does nothing unless raw mode is
    active, so it is safe to call after a failed enter, several times, or
    from the ``atexit`` hook registered on first use.
    """

    def __init__(self, fd: int) -> None:
        self._fd = fd
        self._original_termios: list | None = None
        self._atexit_registered = False

    @property
    def fd(self) -> int:
        return self._fd

    @property
    def is_raw(self) -> bool:
        return self._original_termios is not None

    def enter_raw_mode(self) -> None:
        """Disable echo, line buffering, signal keys and output processing.

        Reads return as soon as one byte is available, with no timeout.
        """
        if self.is_raw:
            return
        if not os.isatty(self._fd):
            raise NotATerminalError(f"fd {self._fd} is not a terminal")

        try:
            original = termios.tcgetattr(self._fd)
        except termios.error as exc:
            raise TerminalConfigError(f"cannot read terminal attributes: {exc}") from exc

        if not self._atexit_registered:
            atexit.register(self.restore_mode)
            self._atexit_registered = True

        try:
            # setraw clears BRKINT ICRNL INPCK ISTRIP IXON, OPOST, ECHO ICANON
            # IEXTEN ISIG, sets CS8 and VMIN=1 VTIME=0, flushing pending input
            tty.setraw(self._fd, termios.TCSAFLUSH)
        except termios.error as exc:
            raise TerminalConfigError(f"cannot enable raw mode: {exc}") from exc

        self._original_termios = original

    def restore_mode(self) -> None:
        """Put the terminal back into the mode it was in before raw mode."""
        if self._original_termios is None:
            return
        try:
            termios.tcsetattr(self._fd, termios.TCSAFLUSH, self._original_termios)
        except termios.error as exc:
            logger.warning("Failed to restore terminal mode on fd %d: %s", self._fd, exc)
            return
        self._original_termios = None

    @contextlib.contextmanager
    def raw_mode(self) -> Iterator[None]:
        """Scope raw mode to a ``with`` block, restoring it on every exit path."""
        self.enter_raw_mode()
        try:
            yield
        finally:
            self.restore_mode()


# ---------------------------------------------------------------------------
# ProcessTerminal implementation
# ---------------------------------------------------------------------------


class ProcessTerminal:
    """Concrete terminal backed by the process's stdin/stdout descriptors."""

    def __init__(
        self,
        input_fd: int | None = None,
        output_fd: int | None = None,
        *,
        write_log_path: str = "",
    ) -> None:
        self._input_fd = sys.stdin.fileno() if input_fd is None else input_fd
        self._output_fd = sys.stdout.fileno() if output_fd is None else output_fd
        self._mode = TerminalModeController(self._input_fd)
        self._write_log_path = write_log_path

    # -- properties ---------------------------------------------------------

    @property
    def mode(self) -> TerminalModeController:
        return self._mode

    @property
    def columns(self) -> int:
        try:
            columns = os.get_terminal_size(self._output_fd).columns
        except (ValueError, OSError):
            return DEFAULT_COLUMNS
        return columns or DEFAULT_COLUMNS

    # -- mode ---------------------------------------------------------------

    def isatty(self) -> bool:
        return os.isatty(self._input_fd)

    def raw_mode(self) -> ContextManager[None]:
        return self._mode.raw_mode()

    # -- I/O ----------------------------------------------------------------

    def read(self, n: int = 1) -> bytes:
        """Read up to *n* bytes, blocking until at least one is available."""
        return os.read(self._input_fd, n)

    def write(self, data: str) -> None:
        """Write *data* to the output descriptor.

        Raises ``OSError`` if the write fails so callers can stop emitting.
        """
        payload = data.encode("utf-8")
        while payload:
            written = os.write(self._output_fd, payload)
            payload = payload[written:]

        if self._write_log_path:
            try:
                with open(self._write_log_path, "a", encoding="utf-8") as f:
                    f.write(data)
            except OSError:
                pass

    def beep(self) -> None:
        """Ring the bell on stderr."""
        try:
            sys.stderr.write(_BELL)
            sys.stderr.flush()
        except (OSError, ValueError):
            pass


# ---------------------------------------------------------------------------
# Interactive or fallback
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class Interactive:
    """Full line editing is available."""


@dataclass(frozen=True)
class Fallback:
    """Line editing is not possible; read a plain buffered line instead."""

    reason: NotATerminalError | UnsupportedTerminalError


InputMode = Union[Interactive, Fallback]


def is_unsupported_term(term: str | None, unsupported_terms: tuple[str, ...]) -> bool:
    """Return ``True`` if *term* is on the list of incapable terminals."""
    if not term:
        return False
    lowered = term.lower()
    return any(lowered == name.lower() for name in unsupported_terms)


def select_input_mode(
    terminal: Terminal,
    term: str | None,
    unsupported_terms: tuple[str, ...],
) -> InputMode:
    """Decide how a line should be read from *terminal*."""
    if is_unsupported_term(term, unsupported_terms):
        mode: InputMode = Fallback(UnsupportedTerminalError(term or ""))
    elif not terminal.isatty():
        mode = Fallback(NotATerminalError("input is not a terminal"))
    else:
        mode = Interactive()
    logger.debug("Input mode selected: %s", mode)
    return mode
