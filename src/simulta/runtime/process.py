"""Shell process launcher.

simulta runtime module

This module provides:
- Spawning a command string under the configured shell (``$SHELL -c``)
- Independent stdout/stderr byte streams per process
- A termination outcome per process that never raises

Key design points:
- stdin is not forwarded to children (DEVNULL)
- A shell that cannot be started yields a handle with empty streams and
  a LaunchFailed outcome instead of an exception
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import AsyncIterator
from dataclasses import dataclass, field

from ..config import resolve_shell
from ..types import Exited, LaunchFailed, TerminationOutcome

__all__ = [
    "ProcessHandle",
    "ProcessLauncher",
    "read_chunks",
]

logger = logging.getLogger(__name__)

# Bytes requested per read from a child pipe
READ_CHUNK_SIZE = 4096


async def read_chunks(
    reader: asyncio.StreamReader | None,
    chunk_size: int = READ_CHUNK_SIZE,
) -> AsyncIterator[bytes]:
    """Yield raw chunks from a pipe until EOF.

    Args:
        reader: The pipe to read, None for a process that never started
        chunk_size: Maximum bytes per read

    Yields:
        Non-empty byte chunks in arrival order
    """
    if reader is None:
        return
    while True:
        chunk = await reader.read(chunk_size)
        if not chunk:
            break
        yield chunk


@dataclass
class ProcessHandle:
    """One spawned command.

    Owns the child's stdout/stderr pipes and its exit status. Either
    ``process`` is set, or ``launch_error`` explains why it is not.

    Attributes:
        command: The shell command string
        process: The running child, None when the launch failed
        launch_error: The error raised while spawning the shell
    """

    command: str
    process: asyncio.subprocess.Process | None = None
    launch_error: OSError | None = None
    _outcome: TerminationOutcome | None = field(default=None, init=False, repr=False)

    @property
    def pid(self) -> int | None:
        return self.process.pid if self.process else None

    def stdout_chunks(self) -> AsyncIterator[bytes]:
        return read_chunks(self.process.stdout if self.process else None)

    def stderr_chunks(self) -> AsyncIterator[bytes]:
        return read_chunks(self.process.stderr if self.process else None)

    async def wait(self) -> TerminationOutcome:
        """Wait for the child to exit and return its outcome.

        Call after both streams are drained; waiting first can deadlock
        a child blocked on a full pipe.
        """
        if self._outcome is not None:
            return self._outcome

        if self.process is None:
            self._outcome = LaunchFailed(str(self.launch_error))
            return self._outcome

        returncode = await self.process.wait()
        logger.debug(
            f"Subprocess completed pid={self.process.pid} returncode={returncode}"
        )
        self._outcome = Exited(returncode)
        return self._outcome


@dataclass
class ProcessLauncher:
    """Spawns command strings under a shell.

    Example:
        launcher = ProcessLauncher(shell="bash")
        handle = await launcher.launch("make build && make test")

        async for chunk in handle.stdout_chunks():
            process_output(chunk)

        outcome = await handle.wait()

    Attributes:
        shell: Shell executable; resolved from ``SHELL`` when not given
        shell_args: Arguments placed before the command string
    """

    shell: str = field(default_factory=resolve_shell)
    shell_args: tuple[str, ...] = ("-c",)

    def build_argv(self, command: str) -> list[str]:
        """Build the argv passed to the OS for ``command``."""
        return [self.shell, *self.shell_args, command]

    async def launch(self, command: str) -> ProcessHandle:
        """Spawn ``command`` under the shell.

        Returns as soon as the child exists; does not wait for it.

        Args:
            command: Shell command string, interpreted by the shell as-is

        Returns:
            Handle owning the child's streams and exit status
        """
        argv = self.build_argv(command)
        try:
            process = await asyncio.create_subprocess_exec(
                *argv,
                stdin=asyncio.subprocess.DEVNULL,
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.PIPE,
            )
        except OSError as e:
            logger.warning(f"Failed to launch shell={self.shell} command={command!r}: {e}")
            return ProcessHandle(command=command, launch_error=e)

        logger.debug(
            f"Started subprocess pid={process.pid} shell={self.shell} command={command!r}"
        )
        return ProcessHandle(command=command, process=process)
