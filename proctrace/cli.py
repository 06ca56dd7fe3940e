"""Command-line interface for proctrace."""

import logging
import shutil
import sys
from typing import Optional, TextIO

from .cli_args import CommandParseError, TraceCommand, parse_trace_command
from .cli_builder import build_arg_parser
from .config import TracerConfig
from .tracer.session import TraceSession
from .tracer.supervisor import SpawnError
from .utils.log_setup import configure_logging
from .utils.output import OutputFormatter

logger = logging.getLogger(__name__)


class CLI:
    """Command-line interface for proctrace."""

    def __init__(self, stdin: Optional[TextIO] = None, stdout: Optional[TextIO] = None):
        self.parser = build_arg_parser()
        self.stdin = stdin if stdin is not None else sys.stdin
        self.stdout = stdout if stdout is not None else sys.stdout

    def run(self, argv: Optional[list[str]] = None) -> int:
        """Run the CLI.

        Args:
            argv: Command-line arguments (defaults to sys.argv[1:])

        Returns:
            Exit code
        """
        args = self.parser.parse_args(argv)
        output = OutputFormatter(no_color=args.no_color)
        configure_logging(debug=args.debug, log_file=args.log_file)

        try:
            command = parse_trace_command(args.command_string, args.cmd)
        except CommandParseError as e:
            output.error(str(e))
            return 1

        if command is None:
            if self._stdin_is_terminal():
                output.error("No command given")
                self.parser.print_usage(sys.stderr)
                return 1
            return self._passthrough()

        config = TracerConfig.from_args(args)
        return self._trace(command, config, output)

    def _stdin_is_terminal(self) -> bool:
        isatty = getattr(self.stdin, "isatty", None)
        return bool(isatty and isatty())

    def _passthrough(self) -> int:
        """Re-emit piped input unchanged, no UI and no child process."""
        logger.debug("No command, passing stdin through")
        shutil.copyfileobj(self.stdin, self.stdout)
        self.stdout.flush()
        return 0

    def _trace(self, command: TraceCommand, config: TracerConfig, output: OutputFormatter) -> int:
        """Run the interactive session for command."""
        logger.info("Tracing %s", command)
        session = TraceSession(command.argv, config=config, output=self.stdout)
        try:
            return session.run()
        except SpawnError as e:
            output.error(str(e))
            return 1
        except Exception as e:
            output.error(str(e))
            logger.debug("Session failed", exc_info=True)
            import traceback

            traceback.print_exc()
            return 1


def main() -> int:
    """Main entry point."""
    cli = CLI()
    return cli.run()


if __name__ == "__main__":
    sys.exit(main())
