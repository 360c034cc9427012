"""Editable line buffer with a cursor."""

from __future__ import annotations

from pi.lineedit.utils import is_whitespace_char


class LineBuffer:
    """Text being edited plus the cursor offset into it.

    Invariant: ``0 <= pos <= length <= capacity``. Every mutator returns
    ``True`` when the text or the cursor changed, so the caller knows a
    redraw is needed, and ``False`` when the call was a no-op.
    """

    def __init__(self, capacity: int = 4096) -> None:
        if capacity < 1:
            raise ValueError(f"capacity must be >= 1, got {capacity}")
        self._capacity = capacity
        self._text: str = ""
        self._pos: int = 0

    # -- properties ---------------------------------------------------------

    @property
    def text(self) -> str:
        return self._text

    @property
    def pos(self) -> int:
        return self._pos

    @property
    def length(self) -> int:
        return len(self._text)

    @property
    def capacity(self) -> int:
        return self._capacity

    @property
    def is_empty(self) -> bool:
        return not self._text

    def __len__(self) -> int:
        return len(self._text)

    def __str__(self) -> str:
        return self._text

    def __repr__(self) -> str:
        return f"LineBuffer(text={self._text!r}, pos={self._pos})"

    # -- insertion ------------------------------------------------------------

    def insert(self, ch: str) -> bool:
        """Insert *ch* at the cursor and move past it. No-op when full."""
        if len(self._text) >= self._capacity:
            return False
        self._text = self._text[: self._pos] + ch + self._text[self._pos :]
        self._pos += 1
        return True

    def replace(self, text: str) -> bool:
        """Replace the whole line (history recall, completion cycling)."""
        text = text[: self._capacity]
        if text == self._text and self._pos == len(text):
            return False
        self._text = text
        self._pos = len(text)
        return True

    # -- deletion -------------------------------------------------------------

    def delete_forward(self) -> bool:
        """Delete the character under the cursor."""
        if self._pos >= len(self._text):
            return False
        self._text = self._text[: self._pos] + self._text[self._pos + 1 :]
        return True

    def delete_backward(self) -> bool:
        """Delete the character before the cursor (backspace)."""
        if self._pos == 0:
            return False
        self._text = self._text[: self._pos - 1] + self._text[self._pos :]
        self._pos -= 1
        return True

    def delete_prev_word(self) -> bool:
        """Delete from the start of the previous word up to the cursor."""
        start = self._pos
        while start > 0 and self._text[start - 1] == " ":
            start -= 1
        while start > 0 and self._text[start - 1] != " ":
            start -= 1
        if start == self._pos:
            return False
        self._text = self._text[:start] + self._text[self._pos :]
        self._pos = start
        return True

    def truncate_at(self, pos: int) -> bool:
        """Drop everything from *pos* onwards."""
        pos = max(0, min(pos, len(self._text)))
        if pos == len(self._text):
            return False
        self._text = self._text[:pos]
        self._pos = min(self._pos, pos)
        return True

    def delete_to_end(self) -> bool:
        return self.truncate_at(self._pos)

    def clear(self) -> bool:
        if not self._text and self._pos == 0:
            return False
        self._text = ""
        self._pos = 0
        return True

    # -- editing ------------------------------------------------------------

    def swap_chars(self) -> bool:
        """Transpose the characters around the cursor (ctrl-t).

        The cursor advances unless it sits on the last character.
        """
        if not 0 < self._pos < len(self._text):
            return False
        p = self._pos
        self._text = self._text[: p - 1] + self._text[p] + self._text[p - 1] + self._text[p + 1 :]
        if p != len(self._text) - 1:
            self._pos += 1
        return True

    # -- cursor movement ------------------------------------------------------

    def move_left(self) -> bool:
        if self._pos == 0:
            return False
        self._pos -= 1
        return True

    def move_right(self) -> bool:
        if self._pos >= len(self._text):
            return False
        self._pos += 1
        return True

    def move_home(self) -> bool:
        if self._pos == 0:
            return False
        self._pos = 0
        return True

    def move_end(self) -> bool:
        if self._pos == len(self._text):
            return False
        self._pos = len(self._text)
        return True

    def move_word_left(self) -> bool:
        """Jump to the start of the current or previous word."""
        pos = self._pos
        if pos > 0:
            pos -= 1
        while pos > 0 and is_whitespace_char(self._text[pos]):
            pos -= 1
        while pos > 0 and not is_whitespace_char(self._text[pos - 1]):
            pos -= 1
        return self._move_to(pos)

    def move_word_right(self) -> bool:
        """Jump past the current word and the whitespace after it."""
        pos = self._pos
        end = len(self._text)
        while pos < end and not is_whitespace_char(self._text[pos]):
            pos += 1
        while pos < end and is_whitespace_char(self._text[pos]):
            pos += 1
        return self._move_to(pos)

    def _move_to(self, pos: int) -> bool:
        if pos == self._pos:
            return False
        self._pos = pos
        return True

    # -- queries ------------------------------------------------------------

    def word_start(self) -> int:
        """Offset of the first character of the word being typed at the cursor."""
        start = self._pos
        while start > 0 and self._text[start - 1] != " ":
            start -= 1
        return start

    def current_word(self) -> str:
        """Text typed since the last space before the cursor."""
        return self._text[self.word_start() : self._pos]

    def at_end(self) -> bool:
        return self._pos == len(self._text)
