"""Derive the displayed subset of lines from a buffer snapshot."""

import re
from functools import lru_cache
from typing import Callable, Sequence

from .line_buffer import OutputLine
from .state import InputMode


Matcher = Callable[[str], bool]


def _match_all(text: str) -> bool:
    return True


@lru_cache(maxsize=64)
def compile_pattern(pattern: str) -> Matcher:
    """Build a matcher for a user-typed pattern.

    An empty pattern matches everything. A pattern that is not a valid
    regular expression is matched as a literal substring instead, since
    the user is usually still typing it.
    """
    if not pattern:
        return _match_all
    try:
        regex = re.compile(pattern)
    except re.error:
        return lambda text: pattern in text
    return lambda text: regex.search(text) is not None


def find_spans(text: str, pattern: str) -> list[tuple[int, int]]:
    """Return the (start, end) spans of pattern matches for highlighting."""
    if not pattern:
        return []
    try:
        regex = re.compile(pattern)
    except re.error:
        regex = re.compile(re.escape(pattern))
    return [m.span() for m in regex.finditer(text) if m.end() > m.start()]


def apply(
    snapshot: Sequence[OutputLine],
    mode: InputMode,
    filter_pattern: str,
    search_pattern: str,
) -> list[OutputLine]:
    """Compute the view buffer for the current mode, preserving order."""
    if mode == InputMode.INTERACTIVE:
        return list(snapshot)

    pattern = filter_pattern if mode == InputMode.FILTER else search_pattern
    if not pattern:
        return list(snapshot)

    matches = compile_pattern(pattern)
    return [line for line in snapshot if matches(line.text)]
