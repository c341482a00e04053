"""simulta environment configuration.

Environment variables:
    SHELL: shell used to interpret every command
        - empty/unset = sh
        - invoked as ``$SHELL -c <command>``

    SIMULTA_FRAMING: how child output is cut into display units
        - line = one unit per source line (default)
        - chunk = one unit per read chunk, empty fragments dropped

    SIMULTA_LOG_DEBUG: debug logging
        - true/1/yes/on = on (log written to a temp file)
        - false/0/no/off = off (default, warnings go to stderr)
"""

from __future__ import annotations

import os
import tempfile
from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from pathlib import Path

__all__ = [
    "Config",
    "FramingPolicy",
    "DEFAULT_SHELL",
    "load_config",
    "get_config",
    "reload_config",
    "resolve_shell",
]

DEFAULT_SHELL = "sh"


class FramingPolicy(Enum):
    """Framing policy for child output.

    - LINE: buffer across reads, emit exactly one unit per source line
    - CHUNK: emit one unit per read chunk, dropping empty fragments
    """

    LINE = "line"
    CHUNK = "chunk"

    @classmethod
    def from_string(cls, value: str) -> "FramingPolicy":
        """Parse a policy name, falling back to LINE for unknown values."""
        value = value.lower().strip()
        for policy in cls:
            if policy.value == value:
                return policy
        return cls.LINE


def _parse_bool(value: str | None, default: bool = False) -> bool:
    """Parse a boolean environment variable."""
    if value is None:
        return default
    return value.lower() in ("true", "1", "yes", "on")


def _parse_framing(value: str | None) -> FramingPolicy:
    if not value:
        return FramingPolicy.LINE
    return FramingPolicy.from_string(value)


def resolve_shell(env: dict[str, str] | None = None) -> str:
    """Return the shell to run commands with.

    Args:
        env: Environment mapping to read from (defaults to os.environ)

    Returns:
        The ``SHELL`` override, or DEFAULT_SHELL when it is unset or blank
    """
    if env is None:
        env = dict(os.environ)
    shell = (env.get("SHELL") or "").strip()
    return shell or DEFAULT_SHELL


@dataclass
class Config:
    """simulta configuration.

    Attributes:
        shell: Shell executable used for every command
        framing: Framing policy for all output pipelines of a run
        log_debug: Write debug logs to a temp file
        log_file: Log file path (set when log_debug is True)
    """

    shell: str = DEFAULT_SHELL
    framing: FramingPolicy = FramingPolicy.LINE
    log_debug: bool = False
    log_file: str | None = None

    def __repr__(self) -> str:
        return (
            f"Config(shell={self.shell}, "
            f"framing={self.framing.value}, "
            f"log_debug={self.log_debug}, "
            f"log_file={self.log_file})"
        )


def _generate_log_file_path() -> str:
    """Build a timestamped log file path under the system temp directory."""
    log_dir = Path(tempfile.gettempdir()) / "simulta"
    log_dir.mkdir(parents=True, exist_ok=True)

    timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
    log_file = log_dir / f"simulta_debug_{timestamp}.log"

    return str(log_file.resolve())


def load_config() -> Config:
    """Load configuration from environment variables."""
    log_debug = _parse_bool(os.environ.get("SIMULTA_LOG_DEBUG"), default=False)
    log_file = _generate_log_file_path() if log_debug else None

    return Config(
        shell=resolve_shell(),
        framing=_parse_framing(os.environ.get("SIMULTA_FRAMING")),
        log_debug=log_debug,
        log_file=log_file,
    )


# Global config instance (loaded lazily)
_config: Config | None = None


def get_config() -> Config:
    """Return the global config instance."""
    global _config
    if _config is None:
        _config = load_config()
    return _config


def reload_config() -> Config:
    """Reload the global config instance from the environment."""
    global _config
    _config = load_config()
    return _config
