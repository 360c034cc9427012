"""pi-lineedit: small readline-style line editing for terminal prompts."""

# Completion
from pi.lineedit.completion import (
    CompletionEngine,
    CompletionProducer,
    CompletionResult,
)

# Configuration
from pi.lineedit.config import LineEditConfig

# Errors
from pi.lineedit.errors import (
    EndOfInput,
    InputInterrupted,
    LineEditError,
    NotATerminalError,
    PersistenceError,
    ReadError,
    TerminalConfigError,
    UnsupportedTerminalError,
)

# History
from pi.lineedit.history import History

# Keyboard input decoding
from pi.lineedit.keys import (
    CONTROL_KEYS,
    ESCAPE_SEQUENCES,
    EditAction,
    KeyDecoder,
    KeyEvent,
)

# Editing
from pi.lineedit.line_buffer import LineBuffer
from pi.lineedit.render import ScreenRenderer
from pi.lineedit.session import EditSession, LineEditor

# Terminal
from pi.lineedit.terminal import (
    Fallback,
    Interactive,
    ProcessTerminal,
    Terminal,
    TerminalModeController,
    select_input_mode,
)

# Utilities
from pi.lineedit.utils import visible_width

__all__ = [
    # Completion
    "CompletionEngine",
    "CompletionProducer",
    "CompletionResult",
    # Configuration
    "LineEditConfig",
    # Errors
    "EndOfInput",
    "InputInterrupted",
    "LineEditError",
    "NotATerminalError",
    "PersistenceError",
    "ReadError",
    "TerminalConfigError",
    "UnsupportedTerminalError",
    # History
    "History",
    # Keys
    "CONTROL_KEYS",
    "ESCAPE_SEQUENCES",
    "EditAction",
    "KeyDecoder",
    "KeyEvent",
    # Editing
    "EditSession",
    "LineBuffer",
    "LineEditor",
    "ScreenRenderer",
    # Terminal
    "Fallback",
    "Interactive",
    "ProcessTerminal",
    "Terminal",
    "TerminalModeController",
    "select_input_mode",
    # Utilities
    "visible_width",
]
