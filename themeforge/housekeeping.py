"""Cleanup services run around theme builds and by the ``clean`` command.

Every cleaner returns how many entries it removed (or would remove on a dry
run) and downgrades failures to console warnings.
"""
from __future__ import annotations

from abc import ABC, abstractmethod
from pathlib import Path
from typing import TYPE_CHECKING, List, Sequence
import shutil

from .console import Console
from .core.command_runner import CommandRunner
from .environment import HostEnvironment
from .errors import ExternalProcessFailure, HousekeepingFailure

if TYPE_CHECKING:  # pragma: no cover
    from .session import Session


def _split_code(theme_code: str) -> tuple[str, str] | None:
    parts = theme_code.split("/")
    if len(parts) != 2 or not all(parts):
        return None
    return parts[0], parts[1]


class DirectoryCleaner(ABC):
    """Removes a fixed set of directories below the application root."""

    label = "directories"

    def __init__(self, console: Console, environment: HostEnvironment) -> None:
        self._console = console
        self._environment = environment

    @abstractmethod
    def paths(self, target: str | None) -> List[Path]:
        """Directories this cleaner removes for ``target``."""

    def clean(self, target: str | None = None, dry_run: bool = False) -> int:
        cleaned = 0
        for path in self.paths(target):
            if not path.is_dir():
                continue
            relative = self._relative(path)
            try:
                if not dry_run:
                    shutil.rmtree(path)
            except OSError as exc:
                self._console.warning(str(HousekeepingFailure(relative, str(exc))))
                continue
            action = "Would clean" if dry_run else "Cleaned"
            self._console.debug(f"{action}: {relative}")
            cleaned += 1
        return cleaned

    def _relative(self, path: Path) -> str:
        try:
            return path.relative_to(self._environment.app_root).as_posix()
        except ValueError:
            return str(path)


class StaticAssetCleaner(DirectoryCleaner):
    label = "pub/static"

    def paths(self, target: str | None) -> List[Path]:
        parts = _split_code(target or "")
        if parts is None:
            return []
        return [self._environment.static_root / parts[0] / parts[1]]

    def has_static_files(self, theme_code: str) -> bool:
        return any(path.is_dir() for path in self.paths(theme_code))


class PreprocessedCleaner(DirectoryCleaner):
    label = "var/view_preprocessed"

    def paths(self, target: str | None) -> List[Path]:
        parts = _split_code(target or "")
        if parts is None:
            return []
        root = self._environment.preprocessed_root
        return [root / kind / "frontend" / parts[0] / parts[1] for kind in ("css", "source")]


class PageCacheCleaner(DirectoryCleaner):
    label = "var/page_cache"

    def paths(self, target: str | None) -> List[Path]:
        return [self._environment.app_root / "var" / "page_cache"]


class TempCleaner(DirectoryCleaner):
    label = "var/tmp"

    def paths(self, target: str | None) -> List[Path]:
        return [self._environment.app_root / "var" / "tmp"]


class GeneratedCleaner(DirectoryCleaner):
    label = "generated"

    def paths(self, target: str | None) -> List[Path]:
        generated = self._environment.app_root / "generated"
        return [generated / "code", generated / "metadata"]


class SymlinkCleaner:
    """Removes symlinks left in a theme's ``web/css`` directory."""

    def __init__(self, console: Console) -> None:
        self._console = console

    def clean(self, target: Path | str | None = None, dry_run: bool = False) -> int:
        if target is None:
            return 0
        css_dir = Path(target) / "web" / "css"
        if not css_dir.is_dir():
            return 0
        removed = 0
        try:
            for entry in sorted(css_dir.iterdir()):
                if not entry.is_symlink():
                    continue
                if not dry_run:
                    entry.unlink()
                removed += 1
                self._console.debug(f"Removed symlink: {entry.name}")
        except OSError as exc:
            self._console.warning(str(HousekeepingFailure(str(css_dir), str(exc))))
        if removed:
            self._console.debug(f"Removed {removed} symlink(s) from web/css/")
        return removed


class CacheInvalidator:
    """Flushes the application caches that hold rendered frontend output."""

    def __init__(
        self,
        runner: CommandRunner,
        console: Console,
        environment: HostEnvironment,
        *,
        magento: str = "bin/magento",
        types: Sequence[str] = ("full_page", "block_html", "layout", "translate"),
    ) -> None:
        self._runner = runner
        self._console = console
        self._environment = environment
        self._magento = magento
        self._types = list(types)

    def clean(self, target: str | None = None, dry_run: bool = False) -> int:
        command = [self._magento, "cache:clean", *self._types]
        if dry_run:
            self._console.dry(self._runner.format_command(command))
            return len(self._types)
        self._console.debug("Cleaning cache...")
        try:
            self._runner.run(command, cwd=self._environment.app_root, note="cache clean")
        except (ExternalProcessFailure, OSError) as exc:
            self._console.warning(str(HousekeepingFailure("cache", str(exc))))
            return 0
        self._console.debug("Cache cleaned successfully.")
        return len(self._types)


class StaticContentCleaner:
    """Drops stale static files before a developer-mode build."""

    def __init__(self, console: Console, environment: HostEnvironment) -> None:
        self._console = console
        self._environment = environment
        self._static = StaticAssetCleaner(console, environment)
        self._preprocessed = PreprocessedCleaner(console, environment)

    def clean_if_needed(self, theme_code: str) -> int:
        if not self._environment.is_developer_mode:
            return 0
        if not self._static.has_static_files(theme_code):
            return 0
        self._console.info(
            f"Developer mode detected: cleaning existing static files for theme '{theme_code}'"
        )
        return self._static.clean(theme_code) + self._preprocessed.clean(theme_code)


class ThemeCleaner:
    """Cleans everything that belongs to one theme, plus the shared directories once per session."""

    GLOBAL_STEP = "housekeeping:global"

    def __init__(self, session: "Session") -> None:
        self._session = session
        console = session.console
        environment = session.environment
        self._per_theme: List[DirectoryCleaner] = [
            PreprocessedCleaner(console, environment),
            StaticAssetCleaner(console, environment),
        ]
        self._global: List[DirectoryCleaner] = [
            PageCacheCleaner(console, environment),
            TempCleaner(console, environment),
            GeneratedCleaner(console, environment),
        ]

    def clean_theme(self, theme_code: str, dry_run: bool = False) -> int:
        cleaned = sum(cleaner.clean(theme_code, dry_run) for cleaner in self._per_theme)
        if not self._session.has_run(self.GLOBAL_STEP):
            cleaned += sum(cleaner.clean(None, dry_run) for cleaner in self._global)
            self._session.mark_run(self.GLOBAL_STEP)
        return cleaned


__all__ = [
    "CacheInvalidator",
    "DirectoryCleaner",
    "GeneratedCleaner",
    "PageCacheCleaner",
    "PreprocessedCleaner",
    "StaticAssetCleaner",
    "StaticContentCleaner",
    "SymlinkCleaner",
    "TempCleaner",
    "ThemeCleaner",
]
