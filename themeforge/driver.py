"""Drives requested themes through detection, repair and build or watch."""
from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Callable, List, Sequence
import time

from .builders.base import Builder
from .builders.registry import BuilderRegistry
from .errors import DetectionInconclusive, ThemeForgeError, ThemeNotInstalled
from .housekeeping import ThemeCleaner
from .session import BuildContext, Session
from .themes import ThemeDescriptor, ThemeRegistry


@dataclass(slots=True)
class BuildResult:
    theme_code: str
    success: bool
    builder_name: str | None = None
    duration_ms: int = 0
    message: str = ""


@dataclass(slots=True)
class BuildSummary:
    results: List[BuildResult] = field(default_factory=list)
    duration_ms: int = 0

    @property
    def succeeded(self) -> List[BuildResult]:
        return [result for result in self.results if result.success]

    @property
    def failed(self) -> List[BuildResult]:
        return [result for result in self.results if not result.success]

    @property
    def ok(self) -> bool:
        return not self.failed


@dataclass(slots=True)
class Detection:
    theme: ThemeDescriptor
    builder: Builder | None
    candidates: List[Builder]


def _elapsed_ms(started: float) -> int:
    return int((time.monotonic() - started) * 1000)


class BuildDriver:
    """Runs the build lifecycle for each requested theme.

    A failing theme is recorded in the summary and never stops the themes
    after it.
    """

    def __init__(self, session: Session, themes: ThemeRegistry, builders: BuilderRegistry) -> None:
        self._session = session
        self._themes = themes
        self._builders = builders

    @property
    def session(self) -> Session:
        return self._session

    @property
    def themes(self) -> ThemeRegistry:
        return self._themes

    def lookup(self, code: str) -> ThemeDescriptor:
        path = self._themes.resolve_path(code)
        if path is None:
            raise ThemeNotInstalled(code)
        return ThemeDescriptor(code=code, path=Path(path))

    def select(self, theme: ThemeDescriptor) -> Builder:
        builder = self._builders.resolve(theme.path)
        if builder is None:
            raise DetectionInconclusive(theme.code, theme.path)
        return builder

    def detect(self, code: str) -> Detection:
        theme = self.lookup(code)
        return Detection(
            theme=theme,
            builder=self._builders.resolve(theme.path),
            candidates=self._builders.candidates(theme.path),
        )

    def _run_theme(
        self,
        code: str,
        operation: Callable[[Builder, Path, BuildContext], bool],
        verb: str,
    ) -> BuildResult:
        console = self._session.console
        started = time.monotonic()
        builder_name: str | None = None
        try:
            theme = self.lookup(code)
            builder = self.select(theme)
            builder_name = builder.name
            console.section(f"{verb} theme {code} using {builder.name} builder")
            ctx = BuildContext(session=self._session, theme=theme)
            if operation(builder, theme.path, ctx):
                message = f"{verb} successfully using {builder.name} builder"
                console.success(f"{code}: {message}")
                return BuildResult(code, True, builder_name, _elapsed_ms(started), message)
            message = ctx.failure or f"{verb} failed using {builder.name} builder"
        except (ThemeForgeError, OSError) as exc:
            message = str(exc)
            console.error(message)
        console.error(f"Failed to process theme {code}.")
        return BuildResult(code, False, builder_name, _elapsed_ms(started), message)

    def build(self, codes: Sequence[str]) -> BuildSummary:
        started = time.monotonic()
        summary = BuildSummary()
        total = len(codes)
        for index, code in enumerate(codes, start=1):
            self._session.console.info(f"Building {code} ({index} of {total}) ...")
            result = self._run_theme(code, lambda builder, path, ctx: builder.build(path, ctx), "Built")
            summary.results.append(result)
            state = "done" if result.success else "failed"
            self._session.console.info(f"Building {code} ({index} of {total}) ... {state}")
        summary.duration_ms = _elapsed_ms(started)
        return summary

    def watch(self, code: str) -> BuildResult:
        return self._run_theme(code, lambda builder, path, ctx: builder.watch(path, ctx), "Watched")

    def clean(self, codes: Sequence[str], dry_run: bool = False) -> BuildSummary:
        started = time.monotonic()
        summary = BuildSummary()
        cleaner = ThemeCleaner(self._session)
        console = self._session.console
        for code in codes:
            theme_started = time.monotonic()
            try:
                self.lookup(code)
            except ThemeNotInstalled as exc:
                console.error(str(exc))
                summary.results.append(BuildResult(code, False, None, _elapsed_ms(theme_started), str(exc)))
                continue
            console.section(f"Cleaning static files for theme: {code}")
            cleaned = cleaner.clean_theme(code, dry_run)
            action = "Would clean" if dry_run else "Cleaned"
            message = (
                f"{action} {cleaned} director{'y' if cleaned == 1 else 'ies'}"
                if cleaned
                else "No files to clean"
            )
            console.info(f"{code}: {message}")
            summary.results.append(BuildResult(code, True, None, _elapsed_ms(theme_started), message))
        summary.duration_ms = _elapsed_ms(started)
        return summary

    def report(self, summary: BuildSummary, title: str = "Build") -> None:
        console = self._session.console
        console.write("")
        console.write(f"{title} completed in {summary.duration_ms / 1000:.2f} seconds")
        if not summary.results:
            console.warning("No themes were processed.")
            return
        for result in summary.results:
            mark = "ok" if result.success else "FAILED"
            console.write(f"  [{mark}] {result.theme_code}: {result.message}")
        if not summary.succeeded:
            console.warning("No themes were processed successfully.")


__all__ = ["BuildDriver", "BuildResult", "BuildSummary", "Detection"]
