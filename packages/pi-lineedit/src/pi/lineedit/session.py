"""Interactive line reading.

``EditSession`` runs one read: it decodes keys, applies them to a
``LineBuffer`` (or to the history and completion engine) and redraws after
each change. ``LineEditor`` is the object applications hold on to; it owns
the configuration, the terminal, the history and the completion producer,
and decides per call whether interactive editing is possible at all.
"""

from __future__ import annotations

import contextlib
import logging
import os
from typing import Callable

from pi.lineedit.completion import CompletionEngine, CompletionProducer
from pi.lineedit.config import CompletionStyle, LineEditConfig
from pi.lineedit.errors import EndOfInput, InputInterrupted, ReadError, UnsupportedTerminalError
from pi.lineedit.history import History
from pi.lineedit.keys import ESC, TAB, EditAction, KeyDecoder, KeyEvent
from pi.lineedit.line_buffer import LineBuffer
from pi.lineedit.render import ScreenRenderer
from pi.lineedit.terminal import (
    CLEAR_SCREEN,
    Fallback,
    ProcessTerminal,
    Terminal,
    select_input_mode,
)
from pi.lineedit.utils import visible_width

logger = logging.getLogger(__name__)

HISTORY_OLDER = 1
HISTORY_NEWER = -1


class EditSession:
    """State of one interactive read; the terminal must already be raw."""

    def __init__(
        self,
        terminal: Terminal,
        prompt: str,
        history: History,
        *,
        completion: CompletionEngine | None = None,
        completion_style: CompletionStyle = "word",
        multiline: bool = False,
        capacity: int = 4096,
    ) -> None:
        self._terminal = terminal
        self.prompt = prompt
        self.history = history
        self.completion = completion
        self.completion_style = completion_style
        self.buffer = LineBuffer(capacity)
        self.renderer = ScreenRenderer(terminal, multiline=multiline)
        self.decoder = KeyDecoder(terminal.read)
        self.columns = 80
        self.history_index = 0

        buf = self.buffer
        self._handlers: dict[EditAction, Callable[[KeyEvent], bool]] = {
            "insertChar": self._insert,
            "complete": self._complete,
            "cursorLeft": lambda _: buf.move_left(),
            "cursorRight": lambda _: buf.move_right(),
            "cursorLineStart": lambda _: buf.move_home(),
            "cursorLineEnd": lambda _: buf.move_end(),
            "cursorWordLeft": lambda _: buf.move_word_left(),
            "cursorWordRight": lambda _: buf.move_word_right(),
            "deleteCharForward": lambda _: buf.delete_forward(),
            "deleteCharBackward": lambda _: buf.delete_backward(),
            "deleteWordBackward": lambda _: buf.delete_prev_word(),
            "deleteToLineEnd": lambda _: buf.delete_to_end(),
            "clearLine": lambda _: buf.clear(),
            "swapChars": lambda _: buf.swap_chars(),
            "clearScreen": self._clear_screen,
            "historyPrev": lambda _: self._history_move(HISTORY_OLDER),
            "historyNext": lambda _: self._history_move(HISTORY_NEWER),
        }

    def run(self) -> str:
        """Edit until enter and return the line.

        Raises ``InputInterrupted`` on ctrl-c, ``EndOfInput`` on ctrl-d with
        an empty line and ``ReadError`` when the input stream fails.
        """
        self.columns = self._terminal.columns
        # The newest history slot is the line being edited
        self.history.push_placeholder()
        try:
            self._emit(self.prompt)
            while True:
                event = self.decoder.next_event(line_empty=self.buffer.is_empty)
                if event.action == "submit":
                    return self.buffer.text
                if event.action == "interrupt":
                    raise InputInterrupted("interrupted by ctrl-c")
                if event.action == "endOfInput":
                    raise EndOfInput("end of input")
                if self._handlers[event.action](event):
                    self.refresh()
        finally:
            self.history.drop_placeholder()

    def refresh(self) -> None:
        self.renderer.refresh(self.prompt, self.buffer, self.columns)

    # -- handlers -------------------------------------------------------------

    def _insert(self, event: KeyEvent) -> bool:
        appending = self.buffer.at_end()
        if not self.buffer.insert(event.char):
            return False
        if (
            appending
            and not self.renderer.multiline
            and visible_width(self.prompt) + visible_width(self.buffer.text) < self.columns
        ):
            # Nothing after the cursor and the line still fits: just echo
            self._emit(event.char)
            return False
        return True

    def _clear_screen(self, _event: KeyEvent) -> bool:
        self._emit(CLEAR_SCREEN)
        self.renderer.reset()
        return True

    def _history_move(self, step: int) -> bool:
        moved = self.history.navigate(self.history_index, step, self.buffer.text)
        if moved is None:
            return False
        self.history_index, text = moved
        self.buffer.replace(text)
        return True

    def _complete(self, _event: KeyEvent) -> bool:
        if self.completion is None:
            return False
        if self.completion_style == "cycle":
            return self._complete_cycle(self.completion)

        result = self.completion.complete(self.buffer)
        if result.kind == "no-match":
            self._terminal.beep()
            return False
        if result.kind == "listed":
            self._emit(CompletionEngine.format_listing(result.candidates))
            self.renderer.reset()
        return True

    def _complete_cycle(self, engine: CompletionEngine) -> bool:
        """Show each candidate in place; tab advances, ESC cancels.

        The slot after the last candidate shows the original line. Any
        other key accepts what is shown and is then processed normally.
        """
        candidates = engine.candidates_for(self.buffer.text)
        if not candidates:
            self._terminal.beep()
            return False

        index = 0
        while True:
            if index < len(candidates):
                shown = LineBuffer(self.buffer.capacity)
                shown.replace(candidates[index])
                self.renderer.refresh(self.prompt, shown, self.columns)
            else:
                self.refresh()

            byte = self.decoder.read_byte()
            if byte == TAB:
                index = (index + 1) % (len(candidates) + 1)
                if index == len(candidates):
                    self._terminal.beep()
                continue
            if byte == ESC:
                return index < len(candidates)

            if index < len(candidates):
                self.buffer.replace(candidates[index])
            self.decoder.push_back(byte)
            return True

    # -- output -------------------------------------------------------------

    def _emit(self, data: str) -> None:
        try:
            self._terminal.write(data)
        except OSError as exc:
            logger.debug("Terminal write failed: %s", exc)


class LineEditor:
    """Reads edited lines from a terminal and keeps their history.

    Parameters
    ----------
    config:
        Editor settings; defaults to ``LineEditConfig()``.
    terminal:
        Terminal to read from; defaults to a ``ProcessTerminal`` on
        stdin/stdout.
    history:
        History shared across reads; a new one sized from *config* is
        created when omitted.
    """

    def __init__(
        self,
        config: LineEditConfig | None = None,
        *,
        terminal: Terminal | None = None,
        history: History | None = None,
    ) -> None:
        self.config = config or LineEditConfig()
        self._terminal: Terminal = terminal or ProcessTerminal(
            write_log_path=self.config.write_log_path
        )
        self._history = history if history is not None else History(self.config.history_max_len)
        self._completion: CompletionEngine | None = None

    # -- settings -------------------------------------------------------------

    @property
    def multiline(self) -> bool:
        return self.config.multiline

    @multiline.setter
    def multiline(self, enabled: bool) -> None:
        self.config.multiline = enabled

    def set_multiline(self, enabled: bool) -> None:
        self.multiline = enabled

    def set_completion_callback(self, producer: CompletionProducer | None) -> None:
        """Register the callable that supplies completion candidates."""
        self._completion = CompletionEngine(producer) if producer is not None else None

    # -- history --------------------------------------------------------------

    @property
    def history(self) -> History:
        return self._history

    def add_history(self, line: str) -> bool:
        return self._history.add(line)

    def set_history_max_len(self, max_len: int) -> bool:
        if not self._history.set_max_len(max_len):
            return False
        self.config.history_max_len = max_len
        return True

    def save_history(self, path: str | os.PathLike[str]) -> None:
        self._history.save(path)

    def load_history(self, path: str | os.PathLike[str]) -> None:
        self._history.load(path)

    # -- reading --------------------------------------------------------------

    def clear_screen(self) -> None:
        self._terminal.write(CLEAR_SCREEN)

    def read_line(self, prompt: str) -> str:
        """Show *prompt* and return the line the user entered.

        Falls back to a plain buffered read when the input is not a terminal
        or ``TERM`` names an incapable terminal.
        """
        mode = select_input_mode(self._terminal, self.config.term, self.config.unsupported_terms)
        if isinstance(mode, Fallback):
            logger.debug("Falling back to buffered input: %s", mode.reason)
            if isinstance(mode.reason, UnsupportedTerminalError):
                self._terminal.write(prompt)
            return self._read_buffered()
        return self._read_interactive(prompt)

    def _read_interactive(self, prompt: str) -> str:
        session = EditSession(
            self._terminal,
            prompt,
            self._history,
            completion=self._completion,
            completion_style=self.config.completion_style,
            multiline=self.config.multiline,
            capacity=self.config.max_line_length,
        )
        entered = False
        try:
            with self._terminal.raw_mode():
                entered = True
                return session.run()
        finally:
            # Written after the mode is restored, so it is a real newline
            if entered:
                with contextlib.suppress(OSError):
                    self._terminal.write("\n")

    def _read_buffered(self) -> str:
        data = bytearray()
        while len(data) < self.config.max_line_length:
            try:
                chunk = self._terminal.read(1)
            except OSError as exc:
                raise ReadError(f"input read failed: {exc}") from exc
            if not chunk:
                if not data:
                    raise EndOfInput("end of input")
                break
            if chunk == b"\n":
                break
            data += chunk
        return data.decode("utf-8", errors="replace").rstrip("\r\n")
