"""Screen refresh for the line being edited.

Two strategies are available. Single-row mode keeps prompt and buffer on
one terminal row, scrolling the buffer horizontally so the cursor stays
visible. Multi-row mode lets the line wrap and tracks how many rows have
been painted so a shrinking line can be cleared completely.

Only a handful of ANSI sequences are used:

* CHA ``ESC [ n G`` -- cursor to column *n*
* EL ``ESC [ 0 K`` -- erase to end of line
* CUF ``ESC [ n C`` -- cursor forward *n* columns
* CUU / CUD ``ESC [ n A`` / ``ESC [ n B`` -- cursor up / down *n* rows
"""

from __future__ import annotations

import logging

from pi.lineedit.line_buffer import LineBuffer
from pi.lineedit.terminal import Terminal
from pi.lineedit.utils import column_offsets, visible_width

logger = logging.getLogger(__name__)

_COLUMN_ZERO = "\x1b[0G"
_ERASE_TO_EOL = "\x1b[0K"
_CURSOR_FORWARD_FMT = "\x1b[{}C"
_CURSOR_UP_FMT = "\x1b[{}A"
_CURSOR_DOWN_FMT = "\x1b[{}B"
_CURSOR_COLUMN_FMT = "\x1b[{}G"
_CLEAR_ROW_AND_UP = "\x1b[0G\x1b[0K\x1b[1A"


class ScreenRenderer:
    """Redraws prompt and buffer so the terminal matches the logical state."""

    def __init__(self, terminal: Terminal, *, multiline: bool = False) -> None:
        self._terminal = terminal
        self.multiline = multiline
        # Cursor cell offset (within the buffer) at the last multi-row refresh
        self._old_pos = 0
        # Rows painted so far; only reset() lowers it
        self._max_rows = 0

    @property
    def old_pos(self) -> int:
        return self._old_pos

    @property
    def max_rows(self) -> int:
        return self._max_rows

    def reset(self) -> None:
        """Forget previously painted rows; the prompt starts on a fresh row."""
        self._old_pos = 0
        self._max_rows = 0

    def refresh(self, prompt: str, buffer: LineBuffer, columns: int) -> None:
        """Redraw *prompt* and *buffer* for a terminal *columns* wide."""
        columns = max(columns, 1)
        if self.multiline:
            self._refresh_multi_row(prompt, buffer, columns)
        else:
            self._refresh_single_row(prompt, buffer, columns)

    # -- single row ---------------------------------------------------------

    def visible_window(
        self, prompt: str, buffer: LineBuffer, columns: int
    ) -> tuple[int, int, int]:
        """Return ``(start, end, cursor_column)`` for single-row display.

        ``text[start:end]`` is the slice that fits after the prompt and
        ``cursor_column`` is the 0-based column the cursor lands on.
        """
        plen = visible_width(prompt)
        text = buffer.text
        pos = buffer.pos
        offsets = column_offsets(text)

        start = 0
        while start < pos and plen + offsets[pos] - offsets[start] >= columns:
            start += 1
        end = len(text)
        while end > start and plen + offsets[end] - offsets[start] > columns:
            end -= 1

        return start, end, plen + offsets[pos] - offsets[start]

    def _refresh_single_row(self, prompt: str, buffer: LineBuffer, columns: int) -> None:
        start, end, cursor_column = self.visible_window(prompt, buffer, columns)

        out = [_COLUMN_ZERO, prompt, buffer.text[start:end], _ERASE_TO_EOL, _COLUMN_ZERO]
        if cursor_column > 0:
            out.append(_CURSOR_FORWARD_FMT.format(cursor_column))
        self._write("".join(out))

    # -- multi row ----------------------------------------------------------

    def _refresh_multi_row(self, prompt: str, buffer: LineBuffer, columns: int) -> None:
        plen = visible_width(prompt)
        offsets = column_offsets(buffer.text)
        width = offsets[-1]
        pos = offsets[buffer.pos]

        rows = (plen + width + columns - 1) // columns
        rpos = (plen + self._old_pos + columns) // columns
        old_rows = self._max_rows
        if rows > self._max_rows:
            self._max_rows = rows

        trace = [f"[{buffer.length} {buffer.pos} {self._old_pos}] p: {plen}, rows: {rows}, "
                 f"rpos: {rpos}, max: {self._max_rows}, oldmax: {old_rows}"]
        out: list[str] = []

        # Go to the last painted row, then clear every row bottom-up
        if old_rows - rpos > 0:
            trace.append(f"go down {old_rows - rpos}")
            out.append(_CURSOR_DOWN_FMT.format(old_rows - rpos))
        for _ in range(old_rows - 1):
            out.append(_CLEAR_ROW_AND_UP)
        out.append(_COLUMN_ZERO + _ERASE_TO_EOL)

        out.append(prompt)
        out.append(buffer.text)

        # Cursor at end of line exactly on a row boundary: the terminal has
        # not wrapped yet, so force the cursor onto the next row
        if buffer.pos and buffer.at_end() and (pos + plen) % columns == 0:
            trace.append("<newline>")
            out.append("\n")
            out.append(_COLUMN_ZERO)
            rows += 1
            if rows > self._max_rows:
                self._max_rows = rows

        rpos2 = (plen + pos + columns) // columns
        if rows - rpos2 > 0:
            trace.append(f"go up {rows - rpos2}")
            out.append(_CURSOR_UP_FMT.format(rows - rpos2))
        col = 1 + (plen + pos) % columns
        trace.append(f"set col {col}")
        out.append(_CURSOR_COLUMN_FMT.format(col))

        logger.debug("Multi-row refresh %s", ", ".join(trace))
        if self._write("".join(out)):
            self._old_pos = pos

    # -- output -------------------------------------------------------------

    def _write(self, data: str) -> bool:
        try:
            self._terminal.write(data)
        except OSError as exc:
            logger.debug("Refresh aborted, terminal write failed: %s", exc)
            return False
        return True
