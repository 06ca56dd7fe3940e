"""Cross-platform non-blocking keyboard input.

The terminal is put in cbreak mode with signal keys and flow control
disabled, so Ctrl+C and Ctrl+S arrive as plain characters and can be used
as hotkeys.
"""

import logging
import os
import sys
import time
from dataclasses import dataclass
from typing import Any, Optional, TextIO

logger = logging.getLogger(__name__)

IS_WINDOWS = sys.platform == "win32"

if IS_WINDOWS:
    import msvcrt
else:
    import fcntl
    import select
    import termios
    import tty


ESC = "\x1b"

# Wait for the rest of an escape sequence after a lone ESC byte
ESCAPE_DELAY = 0.02

CONTROLLING_TTY = "/dev/tty"


@dataclass(frozen=True)
class KeyPress:
    """A decoded keypress.

    name is one of: char, ctrl, enter, escape, backspace, up, down,
    left, right, home, end, page_up, page_down, delete, unknown.
    text is what the key would have sent to a terminal program.
    """
    name: str
    text: str = ""

    @property
    def is_printable(self) -> bool:
        return self.name == "char" and self.text.isprintable()


# Escape sequences (after the leading ESC) for special keys
ESCAPE_SEQUENCES = {
    "[A": "up", "OA": "up",
    "[B": "down", "OB": "down",
    "[C": "right", "OC": "right",
    "[D": "left", "OD": "left",
    "[H": "home", "OH": "home", "[1~": "home", "[7~": "home",
    "[F": "end", "OF": "end", "[4~": "end", "[8~": "end",
    "[5~": "page_up",
    "[6~": "page_down",
    "[3~": "delete",
}

# Windows scan codes following a \x00 or \xe0 prefix byte
WINDOWS_SCAN_CODES = {
    "H": ("up", "\x1b[A"),
    "P": ("down", "\x1b[B"),
    "M": ("right", "\x1b[C"),
    "K": ("left", "\x1b[D"),
    "G": ("home", "\x1b[H"),
    "O": ("end", "\x1b[F"),
    "I": ("page_up", "\x1b[5~"),
    "Q": ("page_down", "\x1b[6~"),
    "S": ("delete", "\x1b[3~"),
}


def decode_char(ch: str) -> KeyPress:
    """Classify a single character read from the terminal."""
    if ch in ("\r", "\n"):
        return KeyPress("enter", ch)
    if ch in ("\x7f", "\x08"):
        return KeyPress("backspace", ch)
    if ch == ESC:
        return KeyPress("escape", ch)
    if ch == "\t":
        # Terminals report Ctrl+I and Tab identically
        return KeyPress("ctrl", ch)
    if len(ch) == 1 and ord(ch) < 0x20:
        return KeyPress("ctrl", ch)
    return KeyPress("char", ch)


def decode_escape_sequence(seq: str) -> KeyPress:
    """Classify the characters following an ESC."""
    if not seq:
        return KeyPress("escape", ESC)
    raw = ESC + seq
    name = ESCAPE_SEQUENCES.get(seq)
    if name is not None:
        return KeyPress(name, raw)
    # Modified arrows, e.g. ESC [1;2A
    if seq.startswith("[") and seq[-1] in "ABCD":
        name = {"A": "up", "B": "down", "C": "right", "D": "left"}[seq[-1]]
        return KeyPress(name, raw)
    return KeyPress("unknown", raw)


def _utf8_continuation_length(lead: int) -> int:
    if lead >= 0xF0:
        return 3
    if lead >= 0xE0:
        return 2
    if lead >= 0xC0:
        return 1
    return 0


def key_length(data: bytes) -> int:
    """Number of bytes making up the first key in data.

    A CSI sequence runs up to its final byte (0x40-0x7E), an SS3 sequence
    is three bytes. An ESC followed by anything else is a lone Escape. For a
    UTF-8 character cut short the result exceeds len(data).
    """
    lead = data[0]
    if lead != 0x1B:
        return 1 + _utf8_continuation_length(lead)
    introducer = data[1:2]
    if introducer == b"O":
        return min(3, len(data))
    if introducer != b"[":
        return 1
    for i in range(2, len(data)):
        if 0x40 <= data[i] <= 0x7E:
            return i + 1
    return len(data)


def decode_bytes(raw: bytes) -> Optional[KeyPress]:
    """Decode the bytes of exactly one key."""
    text = raw.decode("utf-8", errors="ignore")
    if not text:
        return None
    if text[0] == ESC and len(text) > 1:
        return decode_escape_sequence(text[1:])
    return decode_char(text)


class KeyReader:
    """Reads single keypresses without blocking the redraw loop.

    Without an explicit stream, keys come from stdin when it is a terminal
    and from the controlling terminal otherwise, so piped stdin is never
    mistaken for typing.
    """

    def __init__(self, stream: Optional[TextIO] = None, poll_interval: float = 0.02):
        self.stream = stream
        self.poll_interval = poll_interval
        self._old_terminal_settings: Optional[list[Any]] = None
        self._owns_stream = False
        # Bytes already read but not yet returned as keys
        self._pending = b""

    # =========================================================================
    # Terminal Management (Cross-platform)
    # =========================================================================

    def _open_stream(self) -> None:
        if self.stream is not None:
            return
        if sys.stdin is not None and sys.stdin.isatty():
            self.stream = sys.stdin
            return
        try:
            self.stream = open(CONTROLLING_TTY, "r")
            self._owns_stream = True
        except OSError as e:
            logger.warning("No terminal for keyboard input: %s", e)

    def setup(self) -> None:
        """Put the terminal in cbreak mode without signal keys."""
        if IS_WINDOWS:
            self._old_terminal_settings = None
            return
        self._open_stream()
        if self.stream is None:
            return
        try:
            fd = self.stream.fileno()
            self._old_terminal_settings = termios.tcgetattr(fd)
            tty.setcbreak(fd)
            mode = termios.tcgetattr(fd)
            mode[0] = mode[0] & ~termios.IXON
            mode[3] = mode[3] & ~(termios.ISIG | termios.IEXTEN)
            termios.tcsetattr(fd, termios.TCSADRAIN, mode)
        except (termios.error, AttributeError, ValueError, OSError) as e:
            logger.debug("Terminal raw mode unavailable: %s", e)
            self._old_terminal_settings = None

    def restore(self) -> None:
        """Restore the settings saved by setup()."""
        if not IS_WINDOWS and self._old_terminal_settings:
            try:
                termios.tcsetattr(
                    self.stream.fileno(), termios.TCSADRAIN, self._old_terminal_settings
                )
            except (termios.error, ValueError, OSError):
                pass
            self._old_terminal_settings = None
        if self._owns_stream:
            self.stream.close()
            self.stream = None
            self._owns_stream = False
        self._pending = b""

    def __enter__(self) -> "KeyReader":
        self.setup()
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.restore()

    # =========================================================================
    # Key Input
    # =========================================================================

    def _read_key_windows(self) -> Optional[KeyPress]:
        """Read a single key press on Windows (non-blocking)."""
        if not msvcrt.kbhit():
            time.sleep(self.poll_interval)
            return None

        ch = msvcrt.getwch()

        # Special keys arrive as a prefix followed by a scan code
        if ch in ("\x00", "\xe0"):
            code = msvcrt.getwch() if msvcrt.kbhit() else ""
            name, text = WINDOWS_SCAN_CODES.get(code, ("unknown", ""))
            return KeyPress(name, text)
        if ch == "\x08":
            return KeyPress("backspace", "\x7f")
        return decode_char(ch)

    def _read_available(self, fd: int) -> bytes:
        """Read whatever is already waiting on fd without blocking."""
        old_flags = fcntl.fcntl(fd, fcntl.F_GETFL)
        fcntl.fcntl(fd, fcntl.F_SETFL, old_flags | os.O_NONBLOCK)
        chunks = []
        try:
            while True:
                try:
                    chunk = os.read(fd, 64)
                except OSError:
                    break
                if not chunk:
                    break
                chunks.append(chunk)
        finally:
            fcntl.fcntl(fd, fcntl.F_SETFL, old_flags)
        return b"".join(chunks)

    def _read_key_unix(self) -> Optional[KeyPress]:
        """Read a single key press on Unix (non-blocking with short timeout)."""
        if self.stream is None:
            time.sleep(self.poll_interval)
            return None
        fd = self.stream.fileno()

        if not self._pending:
            ready, _, _ = select.select([fd], [], [], self.poll_interval)
            if not ready:
                return None

            first = os.read(fd, 1)
            if not first:
                # EOF on a non-terminal stream keeps select() ready, avoid spinning
                time.sleep(self.poll_interval)
                return None
            self._pending = first

            if first == b"\x1b":
                # Give the rest of an escape sequence time to arrive
                time.sleep(ESCAPE_DELAY)
                self._pending += self._read_available(fd)

        size = key_length(self._pending)
        if size > len(self._pending):
            # Finish a multi-byte character
            self._pending += os.read(fd, size - len(self._pending))

        raw, self._pending = self._pending[:size], self._pending[size:]
        return decode_bytes(raw)

    def read_key(self) -> Optional[KeyPress]:
        """Return the next keypress, or None after the poll interval."""
        if IS_WINDOWS:
            return self._read_key_windows()
        return self._read_key_unix()
