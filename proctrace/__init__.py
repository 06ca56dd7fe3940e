"""proctrace - run a command under an interactive output tracer."""

__version__ = "0.1.0"
