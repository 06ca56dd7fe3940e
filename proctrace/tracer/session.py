"""Foreground loop of a tracing session.

One session = spawn the child, loop [filter -> draw -> poll key] until the
child exits or the user quits, then kill and reap the child and flush the
full capture to standard output.
"""

import logging
import sys
import time
from typing import Optional, TextIO

from ..config import TracerConfig
from . import view_filter
from .dispatcher import InputDispatcher
from .keys import KeyReader
from .line_buffer import LineBuffer, OutputLine
from .renderer import Renderer, window_height_for
from .state import SessionState
from .supervisor import ChildProcess

logger = logging.getLogger(__name__)


class TraceSession:
    """Runs one command under the interactive tracer."""

    def __init__(
        self,
        command: list[str],
        config: Optional[TracerConfig] = None,
        renderer: Optional[Renderer] = None,
        key_reader: Optional[KeyReader] = None,
        output: Optional[TextIO] = None,
    ):
        self.command = list(command)
        self.config = config or TracerConfig()
        self.buffer = LineBuffer()
        self.state = SessionState(follow=self.config.follow, auto_follow=self.config.follow)
        self.renderer = renderer or Renderer(no_color=self.config.no_color)
        self.key_reader = key_reader or KeyReader(poll_interval=self.config.poll_interval)
        self.output = output if output is not None else sys.stdout
        self.child: Optional[ChildProcess] = None
        self.dispatcher: Optional[InputDispatcher] = None
        self._view: list[OutputLine] = []
        self._window_height = 1

    def _child_status(self) -> str:
        if self.child is None:
            return ""
        if self.child.has_exited():
            return f"exited {self.child.returncode}"
        return f"pid {self.child.pid}"

    def _redraw(self) -> None:
        """Recompute the view buffer from a fresh snapshot and draw it."""
        snapshot = self.buffer.snapshot()
        self._view = view_filter.apply(
            snapshot, self.state.mode, self.state.filter_pattern, self.state.search_pattern
        )
        width, height = self.renderer.terminal_size()
        self._window_height = window_height_for(height)
        self.renderer.draw(
            self._view, self.state, len(snapshot), width, height, self._child_status()
        )

    def tick(self, redraw: bool = True) -> bool:
        """Optionally redraw, then handle at most one key.

        Returns True if a key was pressed.
        """
        if redraw:
            self._redraw()
        key = self.key_reader.read_key()
        self.dispatcher.dispatch(key, len(self._view), self._window_height)
        return key is not None

    def _main_loop(self) -> None:
        """Tick until the child exits or quit is requested."""
        last_update = 0.0
        key_pressed = False

        while not self.state.quit_requested and not self.child.has_exited():
            # Immediate update after a key press, otherwise at the frame rate
            now = time.monotonic()
            redraw = key_pressed or now - last_update >= self.config.frame_interval
            if redraw:
                last_update = now
            try:
                key_pressed = self.tick(redraw)
            except KeyboardInterrupt:
                # Windows consoles still deliver Ctrl+C as a signal
                self.state.request_quit()

    def run(self) -> int:
        """Run the session. Returns the child's exit code, or 0 after a quit.

        Raises:
            SpawnError: If the command cannot be started.
        """
        self.child = ChildProcess(
            self.command,
            self.buffer,
            cwd=self.config.cwd,
            terminate_timeout=self.config.terminate_timeout,
        )
        self.dispatcher = InputDispatcher(
            self.state, self.child, forward_special_keys=self.config.forward_special_keys
        )

        # Nothing to clean up if the spawn fails
        self.child.start()
        try:
            with self.child:
                self.renderer.start()
                try:
                    with self.key_reader:
                        self._main_loop()
                finally:
                    self.renderer.stop()
        finally:
            # The child has been killed and reaped by now
            self.renderer.clear()
            self.flush()

        if self.state.quit_requested:
            logger.debug("Session ended by user")
            return 0
        return self.child.returncode or 0

    def flush(self, stream: Optional[TextIO] = None) -> None:
        """Write the whole unfiltered capture, timestamp-prefixed."""
        out = stream if stream is not None else self.output
        for line in self.buffer.snapshot():
            out.write(line.format(self.config.timestamp_format) + "\n")
        out.flush()
