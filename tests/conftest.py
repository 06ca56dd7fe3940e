"""Pytest configuration and shared fixtures."""

from unittest.mock import MagicMock

import pytest

from proctrace.tracer.renderer import Renderer
from tests.helpers import RecordingSink


@pytest.fixture
def fake_renderer() -> MagicMock:
    """Renderer double that never touches the terminal."""
    renderer = MagicMock(spec=Renderer)
    renderer.terminal_size.return_value = (80, 24)
    return renderer


@pytest.fixture
def sink() -> RecordingSink:
    """Stand-in for the child's stdin."""
    return RecordingSink()
