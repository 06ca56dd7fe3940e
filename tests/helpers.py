"""Test doubles shared across test modules."""

import sys
import time
from typing import Iterable, Optional

from proctrace.tracer.keys import KeyPress


def python_command(code: str) -> list[str]:
    """Return a command that runs code with the current interpreter."""
    return [sys.executable, "-u", "-c", code]


def ctrl(letter: str) -> KeyPress:
    """Build the keypress for Ctrl+letter."""
    return KeyPress("ctrl", chr(ord(letter.upper()) - 64))


def chars(text: str) -> list[KeyPress]:
    return [KeyPress("char", ch) for ch in text]


class ScriptedKeyReader:
    """Key reader that replays a fixed sequence, then reports no input."""

    def __init__(self, keys: Iterable[Optional[KeyPress]] = (), poll_interval: float = 0.005):
        self.keys = list(keys)
        self.poll_interval = poll_interval
        self.entered = False
        self.exited = False

    def __enter__(self) -> "ScriptedKeyReader":
        self.entered = True
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.exited = True

    def read_key(self) -> Optional[KeyPress]:
        if self.keys:
            return self.keys.pop(0)
        time.sleep(self.poll_interval)
        return None


class RecordingSink:
    """Collects text written to a child's stdin."""

    def __init__(self):
        self.written: list[str] = []

    def write(self, text: str) -> None:
        self.written.append(text)
