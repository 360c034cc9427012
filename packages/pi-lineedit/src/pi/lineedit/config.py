"""Configuration for the line editor."""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from typing import Literal

CompletionStyle = Literal["word", "cycle"]

DEFAULT_HISTORY_MAX_LEN = 100
DEFAULT_MAX_LINE_LENGTH = 4096
DEFAULT_UNSUPPORTED_TERMS: tuple[str, ...] = ("dumb", "cons25")

_TRUTHY = {"1", "true", "yes", "on"}


@dataclass
class LineEditConfig:
    """Line editor configuration."""

    multiline: bool = False
    history_max_len: int = DEFAULT_HISTORY_MAX_LEN
    max_line_length: int = DEFAULT_MAX_LINE_LENGTH
    completion_style: CompletionStyle = "word"
    unsupported_terms: tuple[str, ...] = DEFAULT_UNSUPPORTED_TERMS
    term: str | None = field(default_factory=lambda: os.environ.get("TERM"))
    write_log_path: str = field(
        default_factory=lambda: os.environ.get("PI_LINEEDIT_WRITE_LOG", "")
    )

    def __post_init__(self) -> None:
        if self.history_max_len < 1:
            raise ValueError(f"history_max_len must be >= 1, got {self.history_max_len}")
        if self.max_line_length < 1:
            raise ValueError(f"max_line_length must be >= 1, got {self.max_line_length}")
        if self.completion_style not in ("word", "cycle"):
            raise ValueError(f"unknown completion style: {self.completion_style!r}")

    @classmethod
    def from_env(cls, environ: dict[str, str] | None = None) -> LineEditConfig:
        """Build a config from ``PI_LINEEDIT_*`` environment variables."""
        env = os.environ if environ is None else environ

        multiline = env.get("PI_LINEEDIT_MULTILINE", "").strip().lower() in _TRUTHY

        history_max_len = DEFAULT_HISTORY_MAX_LEN
        raw_size = env.get("PI_LINEEDIT_HISTORY_SIZE")
        if raw_size:
            try:
                history_max_len = int(raw_size)
            except ValueError:
                raise ValueError(
                    f"PI_LINEEDIT_HISTORY_SIZE must be an integer, got {raw_size!r}"
                ) from None

        return cls(
            multiline=multiline,
            history_max_len=history_max_len,
            term=env.get("TERM"),
            write_log_path=env.get("PI_LINEEDIT_WRITE_LOG", ""),
        )
