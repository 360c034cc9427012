"""Keyboard input decoding for the line editor.

Turns the raw byte stream of a terminal in raw mode into ``KeyEvent``
objects naming a logical edit action. Single control bytes are looked up in
``CONTROL_KEYS``; escape sequences are collected by a small state machine
(``ground`` -> ``escape`` -> ``csi`` / ``ss3``) and looked up in
``ESCAPE_SEQUENCES``. Anything unrecognised is discarded and decoding
resumes with the next byte.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Callable, Literal

from pi.lineedit.errors import ReadError

logger = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# Actions
# ---------------------------------------------------------------------------

EditAction = Literal[
    # Text input
    "insertChar",
    "complete",
    "submit",
    # Cursor movement
    "cursorLeft",
    "cursorRight",
    "cursorLineStart",
    "cursorLineEnd",
    "cursorWordLeft",
    "cursorWordRight",
    # Deletion
    "deleteCharForward",
    "deleteCharBackward",
    "deleteWordBackward",
    "deleteToLineEnd",
    "clearLine",
    # Editing
    "swapChars",
    "clearScreen",
    # History
    "historyPrev",
    "historyNext",
    # Session
    "interrupt",
    "endOfInput",
]


@dataclass(frozen=True)
class KeyEvent:
    """One decoded key press. ``char`` is only set for ``insertChar``."""

    action: EditAction
    char: str = ""


# ---------------------------------------------------------------------------
# Key tables
# ---------------------------------------------------------------------------

ESC = 0x1B
TAB = 0x09
CTRL_D = 0x04

CONTROL_KEYS: dict[int, EditAction] = {
    0x01: "cursorLineStart",     # ctrl-a
    0x02: "cursorLeft",          # ctrl-b
    0x03: "interrupt",           # ctrl-c
    0x05: "cursorLineEnd",       # ctrl-e
    0x06: "cursorRight",         # ctrl-f
    0x08: "deleteCharBackward",  # ctrl-h
    0x09: "complete",            # tab
    0x0A: "submit",              # line feed
    0x0B: "deleteToLineEnd",     # ctrl-k
    0x0C: "clearScreen",         # ctrl-l
    0x0D: "submit",              # enter
    0x0E: "historyNext",         # ctrl-n
    0x10: "historyPrev",         # ctrl-p
    0x14: "swapChars",           # ctrl-t
    0x15: "clearLine",           # ctrl-u
    0x17: "deleteWordBackward",  # ctrl-w
    0x7F: "deleteCharBackward",  # backspace
}

# Escape sequences, keyed on everything after the leading ESC
ESCAPE_SEQUENCES: dict[str, EditAction] = {
    "[A": "historyPrev",
    "[B": "historyNext",
    "[C": "cursorRight",
    "[D": "cursorLeft",
    "[H": "cursorLineStart",
    "[F": "cursorLineEnd",
    "OA": "historyPrev",
    "OB": "historyNext",
    "OC": "cursorRight",
    "OD": "cursorLeft",
    "OH": "cursorLineStart",
    "OF": "cursorLineEnd",
    "[1~": "cursorLineStart",
    "[3~": "deleteCharForward",
    "[8~": "cursorLineEnd",
    "[1;5C": "cursorWordRight",
    "[1;5D": "cursorWordLeft",
}

# Longest CSI body collected before the sequence is given up on
MAX_CSI_LENGTH = 8

_UTF8_CONTINUATION = range(0x80, 0xC0)


def _utf8_sequence_length(lead: int) -> int:
    if 0xC2 <= lead <= 0xDF:
        return 2
    if 0xE0 <= lead <= 0xEF:
        return 3
    if 0xF0 <= lead <= 0xF4:
        return 4
    return 0


# ---------------------------------------------------------------------------
# Decoder
# ---------------------------------------------------------------------------


class KeyDecoder:
    """Reads bytes one at a time and produces ``KeyEvent`` objects.

    Parameters
    ----------
    read:
        Callable returning up to ``n`` bytes; an empty result means the
        stream ended.
    """

    def __init__(self, read: Callable[[int], bytes]) -> None:
        self._read = read
        self._pending: list[int] = []

    def read_byte(self) -> int:
        """Return the next input byte, raising ``ReadError`` on a short read."""
        if self._pending:
            return self._pending.pop()
        try:
            data = self._read(1)
        except OSError as exc:
            raise ReadError(f"terminal read failed: {exc}") from exc
        if not data:
            raise ReadError("terminal input closed")
        return data[0]

    def push_back(self, byte: int) -> None:
        """Return *byte* to the stream so the next read sees it again."""
        self._pending.append(byte)

    def next_event(self, *, line_empty: bool = False) -> KeyEvent:
        """Block until a complete, recognised key press has been read.

        *line_empty* resolves ctrl-d: end of input on an empty line, forward
        delete otherwise.
        """
        while True:
            event = self._decode(self.read_byte(), line_empty)
            if event is not None:
                return event

    # -- private ------------------------------------------------------------

    def _decode(self, byte: int, line_empty: bool) -> KeyEvent | None:
        if byte == ESC:
            return self._decode_escape()
        if byte == CTRL_D:
            return KeyEvent("endOfInput" if line_empty else "deleteCharForward")

        action = CONTROL_KEYS.get(byte)
        if action is not None:
            return KeyEvent(action)
        if byte < 0x20:
            logger.debug("Discarding unbound control byte %#04x", byte)
            return None
        if byte < 0x80:
            return KeyEvent("insertChar", chr(byte))
        return KeyEvent("insertChar", self._decode_utf8(byte))

    def _decode_utf8(self, lead: int) -> str:
        length = _utf8_sequence_length(lead)
        if length == 0:
            return "\ufffd"

        raw = bytearray([lead])
        while len(raw) < length:
            byte = self.read_byte()
            if byte not in _UTF8_CONTINUATION:
                self.push_back(byte)
                return "\ufffd"
            raw.append(byte)

        text = raw.decode("utf-8", errors="replace")
        return text if len(text) == 1 else "\ufffd"

    def _decode_escape(self) -> KeyEvent | None:
        state = "escape"
        seq = ""
        while True:
            byte = self.read_byte()
            ch = chr(byte)

            if state == "escape":
                if ch == "[":
                    state = "csi"
                elif ch == "O":
                    state = "ss3"
                else:
                    return self._discard(ch)
                seq = ch
                continue

            seq += ch
            if state == "ss3":
                return self._lookup(seq)

            # csi: parameter/intermediate bytes until a final byte
            if 0x40 <= byte <= 0x7E:
                return self._lookup(seq)
            if not 0x20 <= byte <= 0x3F or len(seq) > MAX_CSI_LENGTH:
                return self._discard(seq)

    def _lookup(self, seq: str) -> KeyEvent | None:
        action = ESCAPE_SEQUENCES.get(seq)
        if action is None:
            return self._discard(seq)
        return KeyEvent(action)

    @staticmethod
    def _discard(seq: str) -> None:
        logger.debug("Discarding escape sequence %r", "\x1b" + seq)
        return None
