"""Full-screen rendering of the tracer view with Rich.

Layout (one terminal row each):
- Status bar: mode, filter text, search text, buffered line count, child status
- Content: window of the view buffer starting at the scroll offset
- Help bar: hotkeys
"""

import os
import sys
from typing import Optional, Sequence

from rich.cells import cell_len
from rich.console import Console, Group
from rich.control import Control
from rich.live import Live
from rich.text import Text

from .dispatcher import HELP_TEXT
from .line_buffer import STDERR, OutputLine
from .state import InputMode, SessionState
from .view_filter import find_spans

IS_WINDOWS = sys.platform == "win32"

SEPARATOR = " | " if IS_WINDOWS else " │ "

MODE_STYLES = {
    InputMode.FILTER: "bold black on cyan",
    InputMode.SEARCH: "bold black on yellow",
    InputMode.INTERACTIVE: "bold black on magenta",
}


def window_height_for(height: int) -> int:
    """Rows available for output lines (minus status and help bars)."""
    return max(1, height - 2)


class Renderer:
    """Draws the session state on every tick.

    Rendering is split so build() is a pure function of its inputs and
    draw() only pushes the result to the live display.
    """

    def __init__(self, console: Optional[Console] = None, no_color: bool = False):
        self.no_color = no_color
        # stdout is reserved for the final capture, draw on stderr
        self.console = console or Console(
            file=sys.stderr, force_terminal=True, no_color=no_color, highlight=False
        )
        self.live: Optional[Live] = None

    # =========================================================================
    # Terminal
    # =========================================================================

    @staticmethod
    def terminal_size() -> tuple[int, int]:
        """Get the width and height of the terminal behind stderr."""
        try:
            size = os.get_terminal_size(sys.stderr.fileno())
            return (size.columns, size.lines)
        except (OSError, ValueError, AttributeError):
            return (80, 24)

    def start(self) -> None:
        """Enter the alternate screen and start the live display."""
        if self.live is not None:
            return
        self.live = Live(
            Text(""),
            console=self.console,
            screen=True,
            auto_refresh=False,
            redirect_stdout=False,
            redirect_stderr=False,
        )
        self.live.start()

    def stop(self) -> None:
        """Leave the alternate screen."""
        if self.live is None:
            return
        try:
            self.live.stop()
        finally:
            self.live = None

    def clear(self) -> None:
        self.console.clear()

    # =========================================================================
    # Building
    # =========================================================================

    def _build_status(self, state: SessionState, total_lines: int, status: str) -> tuple[Text, int]:
        """Build the status bar and the caret column for the active pattern."""
        bar = Text(no_wrap=True, overflow="crop")
        caret = 0

        bar.append(f" {state.mode.name} ", style="" if self.no_color else MODE_STYLES[state.mode])
        bar.append(" filter: ", style="dim")
        bar.append(state.filter_pattern, style="" if self.no_color else "cyan")
        if state.mode == InputMode.FILTER:
            caret = cell_len(bar.plain)

        bar.append(SEPARATOR, style="dim")
        bar.append("search: ", style="dim")
        bar.append(state.search_pattern, style="" if self.no_color else "yellow")
        if state.mode == InputMode.SEARCH:
            caret = cell_len(bar.plain)

        bar.append(SEPARATOR, style="dim")
        bar.append(f"{total_lines} lines", style="" if self.no_color else "bold")
        if status:
            bar.append(SEPARATOR, style="dim")
            bar.append(status, style="dim")

        return bar, caret

    def _build_line(self, line: OutputLine, highlight: str, width: int) -> Text:
        """Render one captured line, padded or truncated to the terminal width."""
        raw = line.text.expandtabs(8)
        if self.no_color:
            text = Text(Text.from_ansi(raw).plain, no_wrap=True, overflow="crop")
        else:
            text = Text.from_ansi(raw, no_wrap=True, overflow="crop")
            if line.stream == STDERR:
                text.style = "red"
            for start, end in find_spans(text.plain, highlight):
                text.stylize("bold reverse", start, end)
        text.truncate(width, overflow="crop", pad=True)
        return text

    def build(
        self,
        view: Sequence[OutputLine],
        state: SessionState,
        total_lines: int,
        width: int,
        height: int,
        status: str = "",
    ) -> tuple[Group, tuple[int, int]]:
        """Build the screen renderable and the caret position (x, y)."""
        window_height = window_height_for(height)
        offset = state.clamp_scroll(len(view), window_height)

        status_bar, caret_x = self._build_status(state, total_lines, status)
        status_bar.truncate(width, pad=True)

        rows: list[Text] = [status_bar]
        highlight = state.active_pattern
        for line in view[offset:offset + window_height]:
            rows.append(self._build_line(line, highlight, width))
        while len(rows) < window_height + 1:
            rows.append(Text(" " * width, no_wrap=True))

        help_bar = Text(HELP_TEXT, style="dim", no_wrap=True, overflow="crop")
        help_bar.truncate(width, pad=True)
        rows.append(help_bar)

        if state.mode == InputMode.INTERACTIVE:
            caret = (0, 0)
        else:
            caret = (min(caret_x, max(0, width - 1)), 0)
        return Group(*rows), caret

    # =========================================================================
    # Drawing
    # =========================================================================

    def draw(
        self,
        view: Sequence[OutputLine],
        state: SessionState,
        total_lines: int,
        width: int,
        height: int,
        status: str = "",
    ) -> None:
        """Redraw the whole screen and put the caret where typing goes."""
        renderable, (x, y) = self.build(view, state, total_lines, width, height, status)
        if self.live is None:
            return
        self.live.update(renderable)
        self.live.refresh()
        self.console.control(Control.move_to(x, y), Control.show_cursor(True))
