"""Runtime configuration for a tracing session."""

import argparse
from dataclasses import dataclass
from pathlib import Path
from typing import Optional


DEFAULT_FPS = 24
DEFAULT_POLL_INTERVAL = 0.02
DEFAULT_TIMESTAMP_FORMAT = "%H:%M:%S.%f"
DEFAULT_TERMINATE_TIMEOUT = 2.0


@dataclass(frozen=True)
class TracerConfig:
    """Settings shared by the session components.

    Built once from the command line and passed explicitly to whichever
    component needs it.
    """

    frame_interval: float = 1.0 / DEFAULT_FPS
    poll_interval: float = DEFAULT_POLL_INTERVAL
    timestamp_format: str = DEFAULT_TIMESTAMP_FORMAT
    no_color: bool = False
    follow: bool = False
    forward_special_keys: bool = True
    terminate_timeout: float = DEFAULT_TERMINATE_TIMEOUT
    cwd: Optional[Path] = None

    @classmethod
    def from_args(cls, args: argparse.Namespace) -> "TracerConfig":
        """Build a config from parsed CLI arguments."""
        fps = args.fps if args.fps and args.fps > 0 else DEFAULT_FPS
        return cls(
            frame_interval=1.0 / fps,
            timestamp_format=args.timestamp_format,
            no_color=args.no_color,
            follow=args.follow,
            forward_special_keys=not args.no_special_keys,
            cwd=Path(args.cwd) if args.cwd else None,
        )
