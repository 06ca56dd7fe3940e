"""Child process supervision: spawn, stream output, forward input, clean up."""

import logging
import os
import subprocess
import sys
import threading
from pathlib import Path
from typing import IO, Optional

from .line_buffer import STDERR, STDOUT, LineBuffer

logger = logging.getLogger(__name__)

IS_WINDOWS = sys.platform == "win32"

# Keep the child from opening its own console window on Windows
CREATION_FLAGS = getattr(subprocess, "CREATE_NO_WINDOW", 0) if IS_WINDOWS else 0


class SpawnError(Exception):
    """Raised when the child process cannot be started."""

    def __init__(self, command: list[str], reason: str):
        self.command = command
        self.reason = reason
        super().__init__(f"Failed to start '{' '.join(command)}': {reason}")


class ChildProcess:
    """Runs a command with all standard streams piped.

    Two reader threads copy stdout and stderr into the line buffer as
    lines arrive. Use as a context manager to guarantee the process is
    killed and reaped on every exit path.
    """

    def __init__(
        self,
        command: list[str],
        buffer: LineBuffer,
        cwd: Optional[Path] = None,
        terminate_timeout: float = 2.0,
    ):
        self.command = list(command)
        self.buffer = buffer
        self.cwd = cwd
        self.terminate_timeout = terminate_timeout

        self.process: Optional[subprocess.Popen] = None
        self._readers: list[threading.Thread] = []
        self._stdin_lock = threading.Lock()
        self._disposed = False

    # =========================================================================
    # Lifecycle
    # =========================================================================

    def start(self) -> "ChildProcess":
        """Launch the command and begin streaming its output."""
        if self.process is not None:
            raise RuntimeError("Process already started")

        try:
            self.process = subprocess.Popen(
                self.command,
                cwd=str(self.cwd) if self.cwd else None,
                stdin=subprocess.PIPE,
                stdout=subprocess.PIPE,
                stderr=subprocess.PIPE,
                env=os.environ.copy(),
                text=True,
                encoding="utf-8",
                errors="replace",
                bufsize=1,
                creationflags=CREATION_FLAGS,
            )
        except FileNotFoundError:
            raise SpawnError(self.command, "executable not found") from None
        except PermissionError:
            raise SpawnError(self.command, "permission denied") from None
        except OSError as e:
            raise SpawnError(self.command, str(e)) from e

        logger.debug("Started pid %s: %s", self.process.pid, self.command)

        self._readers = [
            threading.Thread(
                target=self._stream_output,
                args=(self.process.stdout, STDOUT),
                name="proctrace-stdout",
                daemon=True,
            ),
            threading.Thread(
                target=self._stream_output,
                args=(self.process.stderr, STDERR),
                name="proctrace-stderr",
                daemon=True,
            ),
        ]
        for reader in self._readers:
            reader.start()
        return self

    def _stream_output(self, pipe: Optional[IO[str]], stream: str) -> None:
        """Append every line read from pipe to the buffer."""
        if pipe is None:
            return
        try:
            for line in pipe:
                self.buffer.append_text(line.rstrip("\r\n"), stream)
        except (OSError, ValueError):
            # Pipe closed under us during dispose
            logger.debug("%s reader stopped", stream)

    def has_exited(self) -> bool:
        """Check whether the child has terminated."""
        return self.process is not None and self.process.poll() is not None

    @property
    def returncode(self) -> Optional[int]:
        if self.process is None:
            return None
        return self.process.poll()

    @property
    def pid(self) -> Optional[int]:
        return self.process.pid if self.process else None

    def write(self, text: str) -> None:
        """Forward text to the child's stdin."""
        if self.process is None or self.process.stdin is None or not text:
            return
        with self._stdin_lock:
            try:
                self.process.stdin.write(text)
                self.process.stdin.flush()
            except (BrokenPipeError, ValueError, OSError) as e:
                logger.debug("Dropped input for exited child: %s", e)

    def terminate(self) -> None:
        """Force-kill the child. Safe to call repeatedly or after exit."""
        if self.process is None or self.process.poll() is not None:
            return
        logger.debug("Killing pid %s", self.process.pid)
        try:
            self.process.kill()
        except ProcessLookupError:
            pass

    def dispose(self) -> None:
        """Reap the process, close its pipes and stop the reader threads."""
        if self.process is None or self._disposed:
            return
        self._disposed = True

        try:
            self.process.wait(timeout=self.terminate_timeout)
        except subprocess.TimeoutExpired:
            logger.warning("Process %s did not exit after kill", self.process.pid)

        if self.process.stdin is not None:
            try:
                self.process.stdin.close()
            except (BrokenPipeError, OSError, ValueError):
                pass

        # Readers finish once the pipes hit EOF; a grandchild holding the
        # pipe open must not block shutdown
        for reader in self._readers:
            reader.join(timeout=self.terminate_timeout)

        for reader, pipe in zip(self._readers, (self.process.stdout, self.process.stderr)):
            if pipe is None or reader.is_alive():
                continue
            try:
                pipe.close()
            except OSError:
                pass

    def __enter__(self) -> "ChildProcess":
        if self.process is None:
            self.start()
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.terminate()
        self.dispose()
