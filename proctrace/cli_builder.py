"""Factory for constructing the CLI argument parser."""

import argparse

from . import __version__
from .config import DEFAULT_FPS, DEFAULT_TIMESTAMP_FORMAT


EPILOG = """\
hotkeys:
  Ctrl+F   filter mode (clears search)
  Ctrl+S   search mode (clears filter)
  Ctrl+I   interactive mode: keys go to the command's stdin
  Esc      clear the pattern being edited
  Up/Down  scroll
  Ctrl+C   quit

examples:
  proctrace -- ping -c 5 localhost
  proctrace -c "make test"
  make test 2>&1 | proctrace
"""


def build_arg_parser() -> argparse.ArgumentParser:
    """Construct the argparse parser for the CLI."""
    parser = argparse.ArgumentParser(
        prog="proctrace",
        description="Run a command and trace its output interactively",
        epilog=EPILOG,
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )

    parser.add_argument(
        "-c",
        "--command",
        dest="command_string",
        type=str,
        help="Command to run as a single string (split with shell-like rules)",
    )

    parser.add_argument(
        "--cwd",
        type=str,
        help="Working directory for the command",
    )

    parser.add_argument(
        "--follow",
        action="store_true",
        help="Keep the view scrolled to the newest output",
    )

    parser.add_argument(
        "--no-color",
        dest="no_color",
        action="store_true",
        help="Disable colored output",
    )

    parser.add_argument(
        "--fps",
        type=int,
        default=DEFAULT_FPS,
        help=f"Maximum redraw rate (default: {DEFAULT_FPS})",
    )

    parser.add_argument(
        "--timestamp-format",
        dest="timestamp_format",
        type=str,
        default=DEFAULT_TIMESTAMP_FORMAT,
        help="strftime format for the final output, %%f is milliseconds (default: %%H:%%M:%%S.%%f)",
    )

    parser.add_argument(
        "--no-special-keys",
        dest="no_special_keys",
        action="store_true",
        help="In interactive mode, do not forward arrow/function key sequences",
    )

    parser.add_argument(
        "--log-file",
        dest="log_file",
        type=str,
        help="Write diagnostic logs to this file",
    )

    parser.add_argument(
        "--debug",
        action="store_true",
        help="Enable debug logging",
    )

    parser.add_argument(
        "--version",
        action="version",
        version=f"%(prog)s {__version__}",
    )

    parser.add_argument(
        "cmd",
        nargs=argparse.REMAINDER,
        help="Executable and arguments to run",
    )

    return parser
