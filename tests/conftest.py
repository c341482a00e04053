"""Pytest configuration and fixtures."""

from __future__ import annotations

import io
import os
import sys
from pathlib import Path
from unittest import mock

import pytest

# Project root
PROJECT_ROOT = Path(__file__).parent.parent

# Add src to the Python path
SRC_DIR = PROJECT_ROOT / "src"
if str(SRC_DIR) not in sys.path:
    sys.path.insert(0, str(SRC_DIR))

RESET = "\x1b[0m"


@pytest.fixture
def stdout_sink() -> io.BytesIO:
    """In-memory stdout target."""
    return io.BytesIO()


@pytest.fixture
def stderr_sink() -> io.BytesIO:
    """In-memory stderr target."""
    return io.BytesIO()


@pytest.fixture
def posix_shell():
    """Run commands through plain sh regardless of the caller's SHELL."""
    with mock.patch.dict(os.environ, {"SHELL": "/bin/sh"}, clear=False):
        yield "/bin/sh"
