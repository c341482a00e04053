"""Run coordinator.

Launches every command, streams all stdout pipelines into one sink and all
stderr pipelines into another, then reduces the termination outcomes to
a single verdict.

Run phases: validate -> launch -> stream -> collect -> verdict.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import AsyncIterable, AsyncIterator, Sequence
from typing import BinaryIO

import anyio

from .config import FramingPolicy, get_config, resolve_shell
from .framing import decode_chunks, decorate, encode_units, framer_for, resolve_prefixes
from .multiplex import merge
from .runtime.process import ProcessHandle, ProcessLauncher
from .types import Failure, RunResult, Success, TerminationOutcome

__all__ = ["OutputSink", "simulta"]

logger = logging.getLogger(__name__)

NO_COMMAND_ERROR = "No command provided"


class OutputSink:
    """Writable byte target for one merged output channel.

    Flushes after every unit so output shows up live. The first write
    error is logged and recorded; later units are drained and dropped so
    children never block on a full pipe.

    Attributes:
        name: Channel name used in log messages (stdout/stderr)
        failed: Whether a write to the target has failed
    """

    def __init__(self, target: BinaryIO, name: str) -> None:
        self._target = target
        self.name = name
        self.failed = False

    def write(self, data: bytes) -> None:
        if self.failed:
            return
        try:
            self._target.write(data)
            self._target.flush()
        except (OSError, ValueError) as e:
            logger.warning(f"Write to {self.name} failed, discarding further output: {e}")
            self.failed = True

    async def drain(self, sources: Sequence[AsyncIterable[bytes]]) -> None:
        """Merge ``sources`` and write them here until all are exhausted."""
        async with merge(sources) as merged:
            async for data in merged:
                self.write(data)
        logger.debug(f"Drained {len(sources)} sources into {self.name}")


def _pipeline(
    chunks: AsyncIterable[bytes],
    prefix: str | None,
    policy: FramingPolicy,
) -> AsyncIterator[bytes]:
    frame = framer_for(policy)
    return encode_units(decorate(prefix)(frame(decode_chunks(chunks))))


def _validate(commands: Sequence[str], names: Sequence[str] | None) -> Failure | None:
    if not commands:
        return Failure(NO_COMMAND_ERROR)
    if names is not None and len(names) != len(commands):
        return Failure(
            f"--names options provided, but {len(names)} names were given "
            f"for {len(commands)} commands"
        )
    return None


async def _collect(handles: Sequence[ProcessHandle]) -> list[TerminationOutcome | BaseException]:
    return await asyncio.gather(
        *(handle.wait() for handle in handles),
        return_exceptions=True,
    )


async def simulta(
    commands: Sequence[str],
    *,
    stdout: BinaryIO,
    stderr: BinaryIO,
    names: Sequence[str] | None = None,
    prefix: bool = False,
    framing: FramingPolicy | None = None,
    shell: str | None = None,
) -> RunResult:
    """Run multiple commands simultaneously.

    All commands are run through the shell. Each line written to the
    sinks ends with a styling reset escape code.

    Args:
        commands: Shell command strings, in launch order
        stdout: Target for the merged stdout of all commands
        stderr: Target for the merged stderr of all commands
        names: Names to prefix commands with; must match commands in count
        prefix: Prefix each unit with the command's name, or its index
            when no names are given
        framing: Framing policy (defaults to the configured one)
        shell: Shell executable (defaults to ``SHELL`` or sh)

    Returns:
        Success when every command exited with code 0, Failure otherwise.
        Failure carries a message only for invalid input.
    """
    invalid = _validate(commands, names)
    if invalid is not None:
        return invalid

    policy = framing if framing is not None else get_config().framing
    prefixes = resolve_prefixes(len(commands), names, enabled=prefix)
    launcher = ProcessLauncher(shell=shell if shell is not None else resolve_shell())

    handles = list(await asyncio.gather(*(launcher.launch(command) for command in commands)))
    logger.debug(f"Launched {len(handles)} commands with shell={launcher.shell}")

    stdout_sink = OutputSink(stdout, "stdout")
    stderr_sink = OutputSink(stderr, "stderr")

    async with anyio.create_task_group() as tg:
        tg.start_soon(
            stdout_sink.drain,
            [_pipeline(h.stdout_chunks(), p, policy) for h, p in zip(handles, prefixes)],
        )
        tg.start_soon(
            stderr_sink.drain,
            [_pipeline(h.stderr_chunks(), p, policy) for h, p in zip(handles, prefixes)],
        )

    outcomes = await _collect(handles)

    for handle, outcome in zip(handles, outcomes):
        if isinstance(outcome, BaseException):
            logger.warning(f"Waiting for command {handle.command!r} failed: {outcome!r}")
        elif not outcome.success:
            logger.debug(f"Command {handle.command!r} failed: {outcome}")

    if stdout_sink.failed or stderr_sink.failed:
        return Failure()
    if any(isinstance(o, BaseException) or not o.success for o in outcomes):
        return Failure()
    return Success()
