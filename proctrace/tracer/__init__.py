"""Interactive process-output tracer."""

from .line_buffer import LineBuffer, OutputLine
from .state import InputMode, SessionState
from .supervisor import ChildProcess, SpawnError
from .session import TraceSession

__all__ = [
    "LineBuffer",
    "OutputLine",
    "InputMode",
    "SessionState",
    "ChildProcess",
    "SpawnError",
    "TraceSession",
]
