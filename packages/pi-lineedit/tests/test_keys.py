"""Tests for pi.lineedit.keys -- key decoding."""

from __future__ import annotations

import io

import pytest

from pi.lineedit.errors import ReadError
from pi.lineedit.keys import (
    CONTROL_KEYS,
    ESCAPE_SEQUENCES,
    KeyDecoder,
    KeyEvent,
)


def decode(data: bytes, *, line_empty: bool = False) -> list[KeyEvent]:
    """Decode every event in *data*, stopping at end of stream."""
    decoder = KeyDecoder(io.BytesIO(data).read)
    events: list[KeyEvent] = []
    while True:
        try:
            events.append(decoder.next_event(line_empty=line_empty))
        except ReadError:
            return events


def actions(data: bytes, **kwargs: bool) -> list[str]:
    return [e.action for e in decode(data, **kwargs)]


# ---------------------------------------------------------------------------
# Key tables
# ---------------------------------------------------------------------------


class TestControlKeys:
    """Single control bytes map straight to actions."""

    @pytest.mark.parametrize(
        ("byte", "action"),
        [
            (1, "cursorLineStart"),
            (2, "cursorLeft"),
            (3, "interrupt"),
            (5, "cursorLineEnd"),
            (6, "cursorRight"),
            (8, "deleteCharBackward"),
            (9, "complete"),
            (11, "deleteToLineEnd"),
            (12, "clearScreen"),
            (13, "submit"),
            (14, "historyNext"),
            (16, "historyPrev"),
            (20, "swapChars"),
            (21, "clearLine"),
            (23, "deleteWordBackward"),
            (127, "deleteCharBackward"),
        ],
    )
    def test_control_byte(self, byte: int, action: str) -> None:
        assert CONTROL_KEYS[byte] == action
        assert actions(bytes([byte])) == [action]

    def test_line_feed_submits(self) -> None:
        assert actions(b"\n") == ["submit"]

    def test_ctrl_d_on_empty_line_is_end_of_input(self) -> None:
        assert actions(b"\x04", line_empty=True) == ["endOfInput"]

    def test_ctrl_d_with_text_deletes_forward(self) -> None:
        assert actions(b"\x04", line_empty=False) == ["deleteCharForward"]

    def test_unbound_control_byte_is_discarded(self) -> None:
        assert decode(b"\x00\x1fa") == [KeyEvent("insertChar", "a")]


class TestPrintable:
    """Printable input becomes insertChar events."""

    def test_ascii(self) -> None:
        assert decode(b"hi") == [KeyEvent("insertChar", "h"), KeyEvent("insertChar", "i")]

    def test_space(self) -> None:
        assert decode(b" ") == [KeyEvent("insertChar", " ")]

    def test_two_byte_utf8(self) -> None:
        assert decode("é".encode()) == [KeyEvent("insertChar", "é")]

    def test_three_byte_utf8(self) -> None:
        assert decode("世".encode()) == [KeyEvent("insertChar", "世")]

    def test_four_byte_utf8(self) -> None:
        assert decode("\U0001F600".encode()) == [KeyEvent("insertChar", "\U0001F600")]

    def test_invalid_lead_byte_is_replacement_char(self) -> None:
        assert decode(b"\xff") == [KeyEvent("insertChar", "\ufffd")]

    def test_truncated_sequence_keeps_following_byte(self) -> None:
        assert decode(b"\xc3a") == [
            KeyEvent("insertChar", "\ufffd"),
            KeyEvent("insertChar", "a"),
        ]


# ---------------------------------------------------------------------------
# Escape sequences
# ---------------------------------------------------------------------------


class TestEscapeSequences:
    """Multi-byte sequences starting with ESC."""

    @pytest.mark.parametrize(
        ("seq", "action"),
        [
            (b"\x1b[A", "historyPrev"),
            (b"\x1b[B", "historyNext"),
            (b"\x1b[C", "cursorRight"),
            (b"\x1b[D", "cursorLeft"),
            (b"\x1bOH", "cursorLineStart"),
            (b"\x1bOF", "cursorLineEnd"),
            (b"\x1b[H", "cursorLineStart"),
            (b"\x1b[F", "cursorLineEnd"),
            (b"\x1b[3~", "deleteCharForward"),
            (b"\x1b[1;5C", "cursorWordRight"),
            (b"\x1b[1;5D", "cursorWordLeft"),
        ],
    )
    def test_recognised_sequence(self, seq: bytes, action: str) -> None:
        assert actions(seq) == [action]

    def test_every_table_entry_decodes(self) -> None:
        for body, action in ESCAPE_SEQUENCES.items():
            assert actions(b"\x1b" + body.encode()) == [action], body

    def test_delete_does_not_swallow_next_key(self) -> None:
        assert decode(b"\x1b[3~x") == [
            KeyEvent("deleteCharForward"),
            KeyEvent("insertChar", "x"),
        ]

    @pytest.mark.parametrize("digit", [b"4", b"5", b"6", b"7"])
    def test_tilde_sequences_other_than_delete_are_discarded(self, digit: bytes) -> None:
        assert decode(b"\x1b[" + digit + b"~x") == [KeyEvent("insertChar", "x")]

    def test_shift_tab_is_discarded(self) -> None:
        assert decode(b"\x1b[Zx") == [KeyEvent("insertChar", "x")]

    def test_other_modifier_is_discarded(self) -> None:
        assert decode(b"\x1b[1;2Cx") == [KeyEvent("insertChar", "x")]

    def test_alt_key_is_discarded(self) -> None:
        assert decode(b"\x1bfa") == [KeyEvent("insertChar", "a")]

    def test_overlong_csi_never_produces_a_command(self) -> None:
        events = decode(b"\x1b[1;2;3;4;5;6C")
        assert events
        assert all(e.action == "insertChar" for e in events)

    def test_control_byte_inside_csi_aborts_sequence(self) -> None:
        assert decode(b"\x1b[1\x01a") == [KeyEvent("insertChar", "a")]

    def test_sequences_back_to_back(self) -> None:
        assert actions(b"\x1b[D\x1b[D\x1b[C") == ["cursorLeft", "cursorLeft", "cursorRight"]


# ---------------------------------------------------------------------------
# Reading
# ---------------------------------------------------------------------------


class TestReading:
    """Short reads and push-back."""

    def test_empty_stream_raises_read_error(self) -> None:
        decoder = KeyDecoder(io.BytesIO(b"").read)
        with pytest.raises(ReadError):
            decoder.next_event()

    def test_partial_escape_sequence_raises_read_error(self) -> None:
        decoder = KeyDecoder(io.BytesIO(b"\x1b[").read)
        with pytest.raises(ReadError):
            decoder.next_event()

    def test_os_error_becomes_read_error(self) -> None:
        def failing_read(n: int) -> bytes:
            raise OSError("boom")

        decoder = KeyDecoder(failing_read)
        with pytest.raises(ReadError) as exc_info:
            decoder.next_event()
        assert isinstance(exc_info.value.__cause__, OSError)

    def test_push_back_is_read_first(self) -> None:
        decoder = KeyDecoder(io.BytesIO(b"b").read)
        decoder.push_back(ord("a"))
        assert decoder.next_event() == KeyEvent("insertChar", "a")
        assert decoder.next_event() == KeyEvent("insertChar", "b")

    def test_read_byte_returns_raw_value(self) -> None:
        decoder = KeyDecoder(io.BytesIO(b"\t").read)
        assert decoder.read_byte() == 9
