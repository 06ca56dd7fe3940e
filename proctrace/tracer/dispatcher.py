"""Route keypresses to hotkeys, scrolling, pattern editing or the child."""

import logging
from typing import Callable, Optional, Protocol

from .keys import KeyPress
from .state import InputMode, SessionState

logger = logging.getLogger(__name__)


class InputSink(Protocol):
    """Anything that accepts text for the child's stdin."""

    def write(self, text: str) -> None:
        ...


CTRL_C = "\x03"
CTRL_F = "\x06"
CTRL_I = "\t"
CTRL_S = "\x13"

# Global hotkeys, active in every mode
HOTKEYS: dict[str, Callable[[SessionState], None]] = {
    CTRL_F: SessionState.enter_filter,
    CTRL_I: SessionState.enter_interactive,
    CTRL_S: SessionState.enter_search,
    CTRL_C: SessionState.request_quit,
}

HELP_TEXT = (
    "Ctrl+F filter | Ctrl+S search | Ctrl+I interactive | "
    "Esc clear | Up/Down scroll | Ctrl+C quit"
)


class InputDispatcher:
    """Applies one keypress per tick to the session state."""

    def __init__(
        self,
        state: SessionState,
        sink: InputSink,
        forward_special_keys: bool = True,
    ):
        self.state = state
        self.sink = sink
        self.forward_special_keys = forward_special_keys

    def dispatch(self, key: Optional[KeyPress], view_length: int, window_height: int) -> None:
        """Handle a single keypress (None means no key was pending)."""
        if key is None:
            return

        if key.name == "ctrl":
            hotkey = HOTKEYS.get(key.text)
            if hotkey is not None:
                hotkey(self.state)
                return

        if key.name == "up":
            self.state.scroll_up(view_length, window_height)
            return
        if key.name == "down":
            self.state.scroll_down(view_length, window_height)
            return

        if self.state.mode == InputMode.INTERACTIVE:
            self._handle_key_interactive(key)
        else:
            self._handle_key_pattern(key)

    def _handle_key_pattern(self, key: KeyPress) -> None:
        """Edit the active filter or search pattern."""
        if key.name == "escape":
            self.state.clear_pattern()
        elif key.name == "backspace":
            self.state.backspace()
        elif key.is_printable:
            self.state.type_text(key.text)

    def _handle_key_interactive(self, key: KeyPress) -> None:
        """Forward the key to the child's stdin."""
        if key.name == "enter":
            # stdin is a pipe, not a tty: no line discipline turns \r into \n
            self.sink.write("\n")
        elif key.name in ("char", "ctrl", "escape", "backspace"):
            self.sink.write(key.text)
        elif self.forward_special_keys and key.text:
            self.sink.write(key.text)
        else:
            logger.debug("Dropped %s key in interactive mode", key.name)
