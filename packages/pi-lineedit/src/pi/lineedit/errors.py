"""Exceptions raised by the line editor.

Terminal-capability errors (:class:`NotATerminalError`,
:class:`UnsupportedTerminalError`) are normally not raised out of
``LineEditor.read_line``: they are carried as the reason for falling back to
a plain buffered read. Everything else propagates to the caller.
"""

from __future__ import annotations


class LineEditError(Exception):
    """Base class for all line-editing errors."""


class NotATerminalError(LineEditError):
    """The input stream is not attached to an interactive terminal."""


class UnsupportedTerminalError(LineEditError):
    """``TERM`` names a terminal known not to understand escape sequences."""

    def __init__(self, term: str) -> None:
        super().__init__(f"unsupported terminal type: {term!r}")
        self.term = term


class TerminalConfigError(LineEditError):
    """Querying or changing the terminal attributes failed."""


class ReadError(LineEditError):
    """Reading from the terminal failed or returned no data."""


class InputInterrupted(LineEditError):
    """The user pressed ctrl-c while editing."""


class EndOfInput(LineEditError, EOFError):
    """ctrl-d on an empty line, or end of stream in fallback mode."""


class PersistenceError(LineEditError):
    """Saving or loading the history file failed."""
