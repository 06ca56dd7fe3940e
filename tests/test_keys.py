"""Tests for key decoding and the Unix key reader."""

import io
import os
import sys
from unittest.mock import patch

import pytest

from proctrace.tracer.keys import (
    KeyPress,
    KeyReader,
    decode_char,
    decode_escape_sequence,
    key_length,
)


class TestDecodeChar:
    """Tests for single character classification."""

    @pytest.mark.parametrize(
        "ch, name",
        [
            ("a", "char"),
            ("é", "char"),
            ("\r", "enter"),
            ("\n", "enter"),
            ("\x7f", "backspace"),
            ("\x08", "backspace"),
            ("\x1b", "escape"),
            ("\t", "ctrl"),
            ("\x03", "ctrl"),
            ("\x06", "ctrl"),
            ("\x13", "ctrl"),
        ],
    )
    def test_classification(self, ch, name):
        key = decode_char(ch)
        assert key.name == name
        assert key.text == ch

    def test_printable(self):
        assert decode_char("x").is_printable
        assert not decode_char("\x03").is_printable
        assert not KeyPress("up", "\x1b[A").is_printable


class TestDecodeEscapeSequence:
    """Tests for escape sequence classification."""

    @pytest.mark.parametrize(
        "seq, name",
        [
            ("[A", "up"),
            ("OA", "up"),
            ("[B", "down"),
            ("[C", "right"),
            ("[D", "left"),
            ("[5~", "page_up"),
            ("[6~", "page_down"),
            ("[H", "home"),
            ("[4~", "end"),
            ("[3~", "delete"),
            ("[1;2A", "up"),
            ("[1;5B", "down"),
        ],
    )
    def test_known_sequences(self, seq, name):
        key = decode_escape_sequence(seq)
        assert key.name == name
        assert key.text == "\x1b" + seq

    def test_bare_escape(self):
        assert decode_escape_sequence("") == KeyPress("escape", "\x1b")

    def test_unknown_sequence_keeps_raw_text(self):
        key = decode_escape_sequence("x")
        assert key.name == "unknown"
        assert key.text == "\x1bx"


class TestKeyLength:
    """Tests for splitting buffered input into single keys."""

    @pytest.mark.parametrize(
        "data, size",
        [
            (b"q", 1),
            ("\u00e9x".encode("utf-8"), 2),
            (b"\x1b", 1),
            (b"\x1b[B\x1b[B", 3),
            (b"\x1b[6~\x1b[6~", 4),
            (b"\x1b[1;5Ax", 6),
            (b"\x1bOAx", 3),
            (b"\x1b\x1b[A", 1),
            (b"\x1bx", 1),
        ],
    )
    def test_first_key_size(self, data, size):
        assert key_length(data) == size

    def test_truncated_character_asks_for_more(self):
        assert key_length("\u20ac".encode("utf-8")[:1]) == 3


@pytest.mark.skipif(sys.platform == "win32", reason="uses POSIX pipes with select")
class TestKeyReaderUnix:
    """Tests for reading keys from a file descriptor."""

    @pytest.fixture
    def pipe(self):
        read_fd, write_fd = os.pipe()
        reader_file = os.fdopen(read_fd, "r")
        yield reader_file, write_fd
        reader_file.close()
        try:
            os.close(write_fd)
        except OSError:
            pass

    def test_no_input_returns_none(self, pipe):
        stream, _ = pipe
        reader = KeyReader(stream=stream, poll_interval=0.01)
        assert reader.read_key() is None

    def test_reads_character(self, pipe):
        stream, write_fd = pipe
        os.write(write_fd, b"q")
        reader = KeyReader(stream=stream, poll_interval=0.01)
        assert reader.read_key() == KeyPress("char", "q")

    def test_reads_multibyte_character(self, pipe):
        stream, write_fd = pipe
        os.write(write_fd, "é".encode("utf-8"))
        reader = KeyReader(stream=stream, poll_interval=0.01)
        assert reader.read_key() == KeyPress("char", "é")

    def test_reads_arrow_key(self, pipe):
        stream, write_fd = pipe
        os.write(write_fd, b"\x1b[A")
        reader = KeyReader(stream=stream, poll_interval=0.01)
        assert reader.read_key() == KeyPress("up", "\x1b[A")

    def test_reads_bare_escape(self, pipe):
        stream, write_fd = pipe
        os.write(write_fd, b"\x1b")
        reader = KeyReader(stream=stream, poll_interval=0.01)
        assert reader.read_key() == KeyPress("escape", "\x1b")

    def test_setup_on_non_terminal_is_harmless(self, pipe):
        stream, _ = pipe
        with KeyReader(stream=stream) as reader:
            assert reader.read_key() is None

    def read_all(self, reader: KeyReader) -> list:
        keys = []
        while True:
            key = reader.read_key()
            if key is None:
                return keys
            keys.append(key)

    def test_buffered_arrows_are_separate_keys(self, pipe):
        stream, write_fd = pipe
        os.write(write_fd, b"\x1b[B" * 3)
        reader = KeyReader(stream=stream, poll_interval=0.01)
        assert self.read_all(reader) == [KeyPress("down", "\x1b[B")] * 3

    def test_buffered_page_down_leaves_no_stray_characters(self, pipe):
        stream, write_fd = pipe
        os.write(write_fd, b"\x1b[6~" * 3)
        reader = KeyReader(stream=stream, poll_interval=0.01)
        assert self.read_all(reader) == [KeyPress("page_down", "\x1b[6~")] * 3

    def test_sequence_followed_by_text(self, pipe):
        stream, write_fd = pipe
        os.write(write_fd, b"\x1b[Aok\x1b")
        reader = KeyReader(stream=stream, poll_interval=0.01)
        assert self.read_all(reader) == [
            KeyPress("up", "\x1b[A"),
            KeyPress("char", "o"),
            KeyPress("char", "k"),
            KeyPress("escape", "\x1b"),
        ]


@pytest.mark.skipif(sys.platform == "win32", reason="uses the POSIX controlling terminal")
class TestKeyReaderSource:
    """Tests for choosing where keys are read from."""

    def test_piped_stdin_is_not_read_as_keys(self):
        piped = io.StringIO("foo\n")
        with patch("proctrace.tracer.keys.sys.stdin", piped), patch(
            "proctrace.tracer.keys.open", create=True, side_effect=OSError("no tty")
        ):
            with KeyReader(poll_interval=0.01) as reader:
                assert reader.read_key() is None
        assert piped.read() == "foo\n"

    def test_controlling_terminal_used_when_stdin_is_piped(self):
        read_fd, write_fd = os.pipe()
        terminal = os.fdopen(read_fd, "r")
        os.write(write_fd, b"k")
        try:
            with patch("proctrace.tracer.keys.sys.stdin", io.StringIO("foo\n")), patch(
                "proctrace.tracer.keys.open", create=True, return_value=terminal
            ):
                with KeyReader(poll_interval=0.01) as reader:
                    assert reader.read_key() == KeyPress("char", "k")
            assert terminal.closed
        finally:
            os.close(write_fd)
