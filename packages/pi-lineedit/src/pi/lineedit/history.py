"""Bounded line history with navigation and plain-text persistence."""

from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Iterator

from pi.lineedit.errors import PersistenceError

logger = logging.getLogger(__name__)

DEFAULT_MAX_LEN = 100


class History:
    """Previously entered lines, oldest first.

    Holds at most ``max_len`` entries; adding to a full history evicts the
    oldest one. While a line is being edited the newest slot holds the
    in-progress text (the placeholder) so paging away and back restores it.
    """

    def __init__(self, max_len: int = DEFAULT_MAX_LEN) -> None:
        if max_len < 1:
            raise ValueError(f"max_len must be >= 1, got {max_len}")
        self._max_len = max_len
        self._entries: list[str] = []
        # Entry evicted to make room for the placeholder
        self._displaced: str | None = None

    # -- container protocol -------------------------------------------------

    def __len__(self) -> int:
        return len(self._entries)

    def __iter__(self) -> Iterator[str]:
        return iter(list(self._entries))

    def __getitem__(self, index: int) -> str:
        return self._entries[index]

    @property
    def entries(self) -> list[str]:
        return list(self._entries)

    @property
    def max_len(self) -> int:
        return self._max_len

    # -- mutation -------------------------------------------------------------

    def add(self, line: str) -> bool:
        """Append *line* unless it repeats the newest entry.

        Returns ``True`` if the line was added.
        """
        if self._entries and self._entries[-1] == line:
            return False
        self._append(line)
        return True

    def set_max_len(self, max_len: int) -> bool:
        """Change the capacity, keeping the newest entries when shrinking.

        Returns ``False`` (and changes nothing) when *max_len* is below 1.
        """
        if max_len < 1:
            return False
        if len(self._entries) > max_len:
            del self._entries[: len(self._entries) - max_len]
        self._max_len = max_len
        return True

    def push_placeholder(self) -> None:
        """Append the empty entry that stands for the line being edited.

        In a full history the oldest entry makes room and is put back by
        ``drop_placeholder``.
        """
        self._displaced = self._append("")

    def drop_placeholder(self) -> None:
        """Remove the newest entry (the in-progress line)."""
        if self._entries:
            self._entries.pop()
        displaced, self._displaced = self._displaced, None
        if displaced is not None and len(self._entries) < self._max_len:
            self._entries.insert(0, displaced)

    def clear(self) -> None:
        self._entries.clear()
        self._displaced = None

    def _append(self, line: str) -> str | None:
        evicted = None
        if len(self._entries) >= self._max_len:
            evicted = self._entries.pop(0)
        self._entries.append(line)
        return evicted

    # -- navigation ---------------------------------------------------------

    def navigate(self, index: int, step: int, current_text: str) -> tuple[int, str] | None:
        """Move from history *index* by *step* and return the entry there.

        Index 0 is the newest entry; a positive *step* moves to older
        entries. The slot being left is first overwritten with
        *current_text* so edits survive paging. Returns ``(new_index, text)``,
        or ``None`` when there is nowhere to move.
        """
        size = len(self._entries)
        if size < 2:
            return None

        self._entries[size - 1 - index] = current_text

        new_index = index + step
        if new_index < 0 or new_index >= size:
            return None
        return new_index, self._entries[size - 1 - new_index]

    # -- persistence --------------------------------------------------------

    def save(self, path: str | os.PathLike[str]) -> None:
        """Write one entry per line to *path*."""
        try:
            with open(path, "w", encoding="utf-8") as f:
                for line in self._entries:
                    f.write(f"{line}\n")
        except OSError as exc:
            raise PersistenceError(f"cannot save history to {path}: {exc}") from exc

    def load(self, path: str | os.PathLike[str]) -> None:
        """Append every line of *path* to the history.

        A missing file is not an error. Entries are added with the usual
        duplicate and capacity rules.
        """
        try:
            content = Path(path).read_text(encoding="utf-8", errors="replace")
        except FileNotFoundError:
            logger.debug("History file %s does not exist", path)
            return
        except OSError as exc:
            raise PersistenceError(f"cannot load history from {path}: {exc}") from exc

        lines = content.split("\n")
        if lines[-1] == "":
            lines.pop()
        for line in lines:
            self.add(line.rstrip("\r"))
