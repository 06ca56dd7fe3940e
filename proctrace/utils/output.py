"""Output utilities for user-facing messages with the Rich console."""

import sys
from typing import Optional, TextIO, Union

from rich.console import Console
from rich.text import Text


class OutputFormatter:
    """Handles formatted messages to the terminal.

    Messages go to stderr so stdout stays reserved for the captured output.
    """

    def __init__(self, no_color: bool = False, file: Optional[TextIO] = None):
        """Initialize output formatter.

        Args:
            no_color: If True, disable all colors and styling
            file: Stream to write to (defaults to stderr)
        """
        self._console = Console(
            file=file if file is not None else sys.stderr,
            no_color=no_color,
            force_terminal=None,
            highlight=False,
        )

    def print(self, message: Union[str, Text]) -> None:
        """Print message using Rich console.

        Args:
            message: Message to print (string or Rich Text)
        """
        self._console.print(message, highlight=False)

    def error(self, message: str) -> None:
        """Print an error message with a red prefix."""
        text = Text()
        text.append("Error:", style="bold red")
        text.append(f" {message}")
        self.print(text)
