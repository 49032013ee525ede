"""Console output used as the reporting sink for builds."""
from __future__ import annotations

from typing import TextIO
import sys


class Console:
    """Simple console output handler with configurable log level.

    Levels: none < error < warning < info < debug
    Default: 'info'
    """

    LEVELS = {
        "none": 0,
        "error": 1,
        "warning": 2,
        "info": 3,
        "debug": 4,
    }

    def __init__(
        self,
        level: str = "info",
        dry_run: bool = False,
        *,
        stdout: TextIO | None = None,
        stderr: TextIO | None = None,
    ):
        if level not in self.LEVELS:
            raise ValueError(f"Unknown log level '{level}'. Choose from: {', '.join(self.LEVELS)}")
        self.level_name = level
        self.level = self.LEVELS[level]
        self.dry_run = dry_run
        self._stdout = stdout
        self._stderr = stderr

    @property
    def verbose(self) -> bool:
        return self.level >= self.LEVELS["debug"]

    def _out(self) -> TextIO:
        return self._stdout or sys.stdout

    def _err(self) -> TextIO:
        return self._stderr or sys.stderr

    def info(self, message: str) -> None:
        if self.level >= self.LEVELS["info"]:
            print(f"[INFO] {message}", file=self._out())

    def success(self, message: str) -> None:
        if self.level >= self.LEVELS["info"]:
            print(f"[OK] {message}", file=self._out())

    def warning(self, message: str) -> None:
        if self.level >= self.LEVELS["warning"]:
            print(f"[WARN] {message}", file=self._err())

    def error(self, message: str) -> None:
        if self.level >= self.LEVELS["error"]:
            print(f"[ERROR] {message}", file=self._err())

    def debug(self, message: str) -> None:
        if self.level >= self.LEVELS["debug"]:
            print(f"[DEBUG] {message}", file=self._out())

    def dry(self, message: str) -> None:
        if self.dry_run:
            print(f"[DRY] {message}", file=self._out())

    def section(self, title: str) -> None:
        if self.level >= self.LEVELS["info"]:
            print(f"\n== {title}", file=self._out())

    def write(self, text: str) -> None:
        """Write ``text`` unprefixed, e.g. captured tool output or tables."""

        if self.level >= self.LEVELS["info"]:
            print(text, file=self._out())


__all__ = ["Console"]
