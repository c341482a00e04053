"""simulta - run multiple shell commands simultaneously.

Environment variables:
    SHELL: shell used to run commands (default sh)
    SIMULTA_FRAMING: line | chunk (default line)
    SIMULTA_LOG_DEBUG: write debug logs to a temp file (default false)

Usage:
    simulta --prefix "npm run watch" "npm run serve"
"""

__version__ = "0.1.0"

from .coordinator import simulta
from .types import Failure, Success

__all__ = ["__version__", "simulta", "Success", "Failure"]
