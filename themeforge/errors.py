"""Exception hierarchy shared by the themeforge services."""
from __future__ import annotations

from pathlib import Path
from typing import TYPE_CHECKING
import shlex

if TYPE_CHECKING:  # pragma: no cover
    from .core.command_runner import CommandResult


class ThemeForgeError(RuntimeError):
    """Base class for all errors raised by themeforge."""


class ConfigurationError(ThemeForgeError):
    """Raised when a configuration file cannot be interpreted."""


class ThemeNotInstalled(ThemeForgeError):
    """Raised when a theme code is unknown to the theme registry."""

    def __init__(self, theme_code: str):
        super().__init__(f"Theme {theme_code} is not installed.")
        self.theme_code = theme_code


class DetectionInconclusive(ThemeForgeError):
    """Raised when no registered builder claims a theme path."""

    def __init__(self, theme_code: str, theme_path: Path):
        super().__init__(f"No suitable builder found for theme {theme_code} ({theme_path}).")
        self.theme_code = theme_code
        self.theme_path = theme_path


class PrerequisiteMissing(ThemeForgeError):
    """Raised when a build prerequisite is missing and cannot be repaired."""

    def __init__(self, path: Path, reason: str):
        super().__init__(f"Missing prerequisite '{path}': {reason}")
        self.path = path
        self.reason = reason


class ExternalProcessFailure(ThemeForgeError):
    """Raised when an external command exits with a non-zero status."""

    def __init__(self, result: "CommandResult"):
        command_line = " ".join(map(shlex.quote, result.command))
        message = f"Command failed with exit code {result.returncode}: {command_line}"
        if result.cwd:
            message = f"{message} (cwd={result.cwd})"
        if result.streamed:
            message = f"{message}\nstdout/stderr already streamed above."
        else:
            message = (
                f"{message}\n"
                f"stdout: {result.stdout.strip()}\n"
                f"stderr: {result.stderr.strip()}"
            )
        super().__init__(message)
        self.result = result

    @property
    def output(self) -> str:
        """Captured output of the failed command, stderr first."""

        parts = [part.strip() for part in (self.result.stderr, self.result.stdout) if part and part.strip()]
        return "\n".join(parts)


class HousekeepingFailure(ThemeForgeError):
    """Cleanup failure; reported as a warning and never aborts a build."""

    def __init__(self, target: str, reason: str):
        super().__init__(f"Could not clean {target}: {reason}")
        self.target = target
        self.reason = reason


__all__ = [
    "ConfigurationError",
    "DetectionInconclusive",
    "ExternalProcessFailure",
    "HousekeepingFailure",
    "PrerequisiteMissing",
    "ThemeForgeError",
    "ThemeNotInstalled",
]
