"""Result types shared by the launcher and the run coordinator.

Termination outcomes describe how a single command ended; run verdicts
describe the whole run.
"""

from __future__ import annotations

from dataclasses import dataclass

__all__ = [
    "Exited",
    "LaunchFailed",
    "TerminationOutcome",
    "Success",
    "Failure",
    "RunResult",
]


@dataclass(frozen=True)
class Exited:
    """The shell started and exited with ``code``.

    Negative codes follow asyncio's convention for signal termination.
    """

    code: int

    @property
    def success(self) -> bool:
        return self.code == 0


@dataclass(frozen=True)
class LaunchFailed:
    """The shell binary could not be started."""

    reason: str

    @property
    def success(self) -> bool:
        return False


TerminationOutcome = Exited | LaunchFailed


@dataclass(frozen=True)
class Success:
    """Every command was launched and exited with code 0."""

    @property
    def success(self) -> bool:
        return True


@dataclass(frozen=True)
class Failure:
    """The run failed.

    Attributes:
        error: Message for input validation failures, None for runtime
            failures of the spawned commands
    """

    error: str | None = None

    @property
    def success(self) -> bool:
        return False


RunResult = Success | Failure
