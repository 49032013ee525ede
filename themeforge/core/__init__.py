"""Process execution and configuration helpers shared across themeforge."""
from __future__ import annotations

from .command_runner import (
    CancellationToken,
    CommandResult,
    CommandRunner,
    RecordingCommandRunner,
    SubprocessCommandRunner,
    working_directory,
)

__all__ = [
    "CancellationToken",
    "CommandResult",
    "CommandRunner",
    "RecordingCommandRunner",
    "SubprocessCommandRunner",
    "working_directory",
]
