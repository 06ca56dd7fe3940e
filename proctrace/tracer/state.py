"""Input mode state machine and per-session UI state.

Modes:
- FILTER: live regex filter over captured lines (initial)
- SEARCH: full-buffer search with its own pattern
- INTERACTIVE: keystrokes are forwarded to the child's stdin

Mode changes happen only through hotkeys. Entering a mode clears the
pattern of the mode it replaces.
"""

from dataclasses import dataclass
from enum import Enum


class InputMode(Enum):
    """Keyboard interaction modes."""
    FILTER = "filter"
    SEARCH = "search"
    INTERACTIVE = "interactive"


@dataclass
class SessionState:
    """Mutable UI state, owned by the foreground loop only."""
    mode: InputMode = InputMode.FILTER
    filter_pattern: str = ""
    search_pattern: str = ""
    scroll_offset: int = 0
    quit_requested: bool = False
    auto_follow: bool = False  # Reaching the bottom resumes following
    follow: bool = False  # Track the bottom of the view as output grows

    # =========================================================================
    # Mode transitions
    # =========================================================================

    def enter_filter(self) -> None:
        self.mode = InputMode.FILTER
        self.search_pattern = ""

    def enter_search(self) -> None:
        self.mode = InputMode.SEARCH
        self.filter_pattern = ""

    def enter_interactive(self) -> None:
        self.mode = InputMode.INTERACTIVE
        self.filter_pattern = ""
        self.search_pattern = ""

    def request_quit(self) -> None:
        self.quit_requested = True

    # =========================================================================
    # Pattern editing
    # =========================================================================

    @property
    def active_pattern(self) -> str:
        """Text of the pattern being edited, empty in interactive mode."""
        if self.mode == InputMode.FILTER:
            return self.filter_pattern
        if self.mode == InputMode.SEARCH:
            return self.search_pattern
        return ""

    def _set_active_pattern(self, value: str) -> None:
        if self.mode == InputMode.FILTER:
            self.filter_pattern = value
        elif self.mode == InputMode.SEARCH:
            self.search_pattern = value

    def clear_pattern(self) -> None:
        """Clear the active pattern (Esc). Mode is unchanged."""
        self._set_active_pattern("")

    def backspace(self) -> None:
        """Delete the last character of the active pattern."""
        self._set_active_pattern(self.active_pattern[:-1])

    def type_text(self, text: str) -> None:
        """Append typed text to the active pattern."""
        self._set_active_pattern(self.active_pattern + text)

    # =========================================================================
    # Scrolling
    # =========================================================================

    @staticmethod
    def max_offset(view_length: int, window_height: int) -> int:
        return max(0, view_length - window_height)

    def clamp_scroll(self, view_length: int, window_height: int) -> int:
        """Keep the offset inside the view, jumping to the bottom when following."""
        max_offset = self.max_offset(view_length, window_height)
        if self.follow:
            self.scroll_offset = max_offset
        self.scroll_offset = max(0, min(self.scroll_offset, max_offset))
        return self.scroll_offset

    def scroll_up(self, view_length: int, window_height: int) -> None:
        self.clamp_scroll(view_length, window_height)
        self.scroll_offset = max(0, self.scroll_offset - 1)
        self.follow = False

    def scroll_down(self, view_length: int, window_height: int) -> None:
        max_offset = self.max_offset(view_length, window_height)
        self.scroll_offset = min(max_offset, max(0, self.scroll_offset) + 1)
        if self.scroll_offset >= max_offset and self.auto_follow:
            self.follow = True
