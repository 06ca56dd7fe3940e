"""Thread-safe append-only store of captured child output lines."""

import threading
from dataclasses import dataclass
from datetime import datetime


STDOUT = "stdout"
STDERR = "stderr"


@dataclass(frozen=True)
class OutputLine:
    """A single line received from the child process."""
    timestamp: datetime
    text: str
    stream: str = STDOUT

    def format(self, timestamp_format: str) -> str:
        """Render the line with its capture timestamp as a prefix."""
        # %f is shown as milliseconds, microseconds are too noisy for a prefix
        millis = f"{self.timestamp.microsecond // 1000:03d}"
        stamp = self.timestamp.strftime(timestamp_format.replace("%f", millis))
        return f"[{stamp}] {self.text}"


class LineBuffer:
    """Ordered, append-only sequence of OutputLine.

    Shared between the reader threads (writers) and the foreground loop
    (reader). Both sides hold the lock for a single operation only.
    """

    def __init__(self):
        self._lock = threading.Lock()
        self._lines: list[OutputLine] = []

    def append(self, line: OutputLine) -> None:
        """Append a line at the end of the buffer."""
        with self._lock:
            self._lines.append(line)

    def append_text(self, text: str, stream: str = STDOUT) -> OutputLine:
        """Timestamp a raw line of text and append it."""
        line = OutputLine(timestamp=datetime.now(), text=text, stream=stream)
        self.append(line)
        return line

    def snapshot(self) -> list[OutputLine]:
        """Return a copy of all lines in arrival order."""
        with self._lock:
            return list(self._lines)

    def __len__(self) -> int:
        with self._lock:
            return len(self._lines)
