"""Tab completion for the word being typed.

A completion producer is any callable that takes the text typed so far and
returns candidate strings. The engine keeps the candidates that agree with
everything already typed. A single survivor is inserted, followed by a
space. Several survivors are listed and the line is left untouched.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Callable, Iterable, Literal

from pi.lineedit.line_buffer import LineBuffer

logger = logging.getLogger(__name__)

CompletionProducer = Callable[[str], Iterable[str]]

CompletionKind = Literal["no-match", "inserted", "listed"]


@dataclass
class CompletionResult:
    """Outcome of one completion request."""

    kind: CompletionKind
    candidates: list[str] = field(default_factory=list)
    inserted: str = ""


def matching_candidates(typed: str, candidates: Iterable[str]) -> list[str]:
    """Return the candidates whose leading characters equal *typed*."""
    return [c for c in candidates if c.startswith(typed)]


class CompletionEngine:
    """Completes the word at the cursor using a completion producer."""

    def __init__(self, producer: CompletionProducer) -> None:
        self.producer = producer

    def candidates_for(self, text: str) -> list[str]:
        """Ask the producer for candidates, producing a fresh list."""
        return list(self.producer(text))

    def complete(self, buffer: LineBuffer) -> CompletionResult:
        """Complete the word ending at the cursor of *buffer*.

        The buffer is modified only when exactly one candidate matches.
        """
        typed = buffer.current_word()
        candidates = self.candidates_for(typed)
        if not candidates:
            return CompletionResult("no-match")

        valid = matching_candidates(typed, candidates)
        logger.debug("Completion for %r: %d candidates, %d valid", typed, len(candidates), len(valid))

        if len(valid) > 1:
            return CompletionResult("listed", candidates=valid)
        if not valid:
            return CompletionResult("no-match", candidates=candidates)

        inserted = ""
        for ch in valid[0][len(typed) :] + " ":
            if not buffer.insert(ch):
                break
            inserted += ch
        return CompletionResult("inserted", candidates=valid, inserted=inserted)

    @staticmethod
    def format_listing(candidates: list[str]) -> str:
        """Render candidates on their own row, the prompt redraws below."""
        return "\r\n" + "".join(f" '{c}'" for c in candidates) + "\r\n"
