"""Structured parsing helpers for the command to trace."""

import shlex
from dataclasses import dataclass
from typing import List, Optional


class CommandParseError(Exception):
    """Raised when the command to trace cannot be parsed."""


@dataclass(frozen=True)
class TraceCommand:
    """The executable and its arguments, ready to spawn."""

    executable: str
    args: List[str]

    @property
    def argv(self) -> List[str]:
        return [self.executable, *self.args]

    def __str__(self) -> str:
        return shlex.join(self.argv)


def split_command_string(command: str) -> List[str]:
    """Tokenize a command string with shell-like word splitting.

    Raises:
        CommandParseError: On unbalanced quotes or an empty command.
    """
    try:
        tokens = shlex.split(command)
    except ValueError as e:
        raise CommandParseError(f"Cannot parse command '{command}': {e}") from None
    if not tokens:
        raise CommandParseError("Command string is empty")
    return tokens


def parse_trace_command(
    command_string: Optional[str], positional: List[str]
) -> Optional[TraceCommand]:
    """
    Build the command to trace from CLI input.

    Accepts either an explicit executable with arguments (positional) or a
    single command string (-c), never both.

    Args:
        command_string: Value of -c/--command, if given.
        positional: Executable followed by its arguments.

    Returns:
        TraceCommand, or None if no command was given at all.

    Raises:
        CommandParseError: If the input is malformed (fail fast).
    """
    tokens = list(positional)
    if tokens and tokens[0] == "--":
        tokens = tokens[1:]

    if command_string is not None:
        if tokens:
            raise CommandParseError(
                "Give either a command string (-c) or an executable with arguments, not both"
            )
        tokens = split_command_string(command_string)

    if not tokens:
        return None

    executable, *args = tokens
    if executable.strip() == "":
        raise CommandParseError("Executable name is empty")
    return TraceCommand(executable=executable, args=args)
