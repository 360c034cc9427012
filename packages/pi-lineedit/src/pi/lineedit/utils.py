"""Terminal text utilities: ANSI stripping and display-width measurement.

The renderer works in terminal cells rather than code points so that wide
(CJK) characters and coloured prompts position the cursor correctly.
"""

from __future__ import annotations

import re
import unicodedata

import grapheme
import wcwidth as _wcwidth

# CSI sequences: ESC[ <params> <final byte>, OSC 8 hyperlinks, APC payloads
_STRIP_RE = re.compile(
    r"\x1b\[[0-9;]*[mGKHJ]"        # CSI
    r"|\x1b\]8;;[^\x07]*\x07"       # OSC 8
    r"|\x1b_[^\x07\x1b]*(?:\x07|\x1b\\)"  # APC
)

# ---------------------------------------------------------------------------
# Width cache (capped at 512 entries)
# ---------------------------------------------------------------------------

_width_cache: dict[str, int] = {}
_WIDTH_CACHE_MAX = 512


def _cache_width(key: str, value: int) -> int:
    if len(_width_cache) >= _WIDTH_CACHE_MAX:
        _width_cache.clear()
    _width_cache[key] = value
    return value


# ---------------------------------------------------------------------------
# Per-character width
# ---------------------------------------------------------------------------

def char_width(ch: str) -> int:
    """Return the number of terminal cells occupied by code point *ch*."""
    cp = ord(ch)
    if 0x20 <= cp <= 0x7E:
        return 1
    if cp < 0x20 or (0x7F <= cp <= 0x9F):
        return 0
    return max(_wcwidth.wcwidth(ch), 0)


def column_offsets(text: str) -> list[int]:
    """Return cumulative cell offsets: ``offsets[i]`` is the width of ``text[:i]``.

    The list has ``len(text) + 1`` entries so any cursor position, including
    end-of-line, can be looked up directly.
    """
    offsets = [0] * (len(text) + 1)
    total = 0
    for i, ch in enumerate(text):
        total += char_width(ch)
        offsets[i + 1] = total
    return offsets


def _grapheme_width(g: str) -> int:
    """Return the terminal display width of a single grapheme cluster."""
    if len(g) == 1:
        return char_width(g)

    for ch in g:
        cp = ord(ch)
        # VS16, ZWJ sequences, skin tone modifiers, regional indicators
        if cp in (0xFE0F, 0x200D) or 0x1F3FB <= cp <= 0x1F3FF or 0x1F1E6 <= cp <= 0x1F1FF:
            return 2

    cat = unicodedata.category(g[0])
    if cat.startswith("M") or cat == "Cf":
        return 0
    return char_width(g[0])


# ---------------------------------------------------------------------------
# visible_width
# ---------------------------------------------------------------------------

def visible_width(text: str) -> int:
    """Calculate the visible terminal width of *text*.

    * Strips ANSI escape sequences, so coloured prompts measure correctly.
    * Uses a fast ASCII path when possible.
    * Caches results for non-ASCII strings.
    """
    if not text:
        return 0

    stripped = _STRIP_RE.sub("", text)
    if not stripped:
        return 0

    if stripped.isascii() and stripped.isprintable():
        return len(stripped)

    cached = _width_cache.get(stripped)
    if cached is not None:
        return cached

    total = sum(_grapheme_width(g) for g in grapheme.graphemes(stripped))
    return _cache_width(stripped, total)


# ---------------------------------------------------------------------------
# Character classification
# ---------------------------------------------------------------------------

def is_whitespace_char(char: str) -> bool:
    """Return ``True`` if *char* is a whitespace character."""
    return char in (" ", "\t", "\n", "\r", "\f", "\v")
