"""Runtime module for subprocess management.

Spawns shell commands with captured output streams and reports how each
of them terminated.
"""

from __future__ import annotations

from .process import ProcessHandle, ProcessLauncher, read_chunks

__all__ = [
    "ProcessHandle",
    "ProcessLauncher",
    "read_chunks",
]
