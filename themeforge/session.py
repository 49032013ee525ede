"""Invocation-scoped state shared by builders and housekeeping services."""
from __future__ import annotations

from contextlib import contextmanager
from dataclasses import dataclass, field
from pathlib import Path
from typing import Callable, Dict, Iterator, TypeVar

from .config import Settings
from .consent import AutoConsent, ConsentPolicy
from .console import Console
from .core.command_runner import CancellationToken, CommandRunner, working_directory
from .deployer import StaticContentDeployer
from .dependency_checker import DependencyChecker
from .environment import HostEnvironment
from .housekeeping import CacheInvalidator, StaticContentCleaner, SymlinkCleaner
from .node_packages import NodePackageManager
from .themes import ThemeDescriptor

T = TypeVar("T")


@dataclass(slots=True)
class Session:
    """Everything one command invocation shares across themes."""

    console: Console
    runner: CommandRunner
    environment: HostEnvironment
    settings: Settings = field(default_factory=Settings)
    consent: ConsentPolicy = field(default_factory=AutoConsent)
    token: CancellationToken = field(default_factory=CancellationToken)
    _ledger: Dict[str, object] = field(default_factory=dict, init=False, repr=False)

    def has_run(self, step_id: str) -> bool:
        return step_id in self._ledger

    def mark_run(self, step_id: str, outcome: object = True) -> None:
        self._ledger[step_id] = outcome

    def run_once(self, step_id: str, action: Callable[[], T]) -> T:
        """Run ``action`` the first time ``step_id`` is seen and replay its result afterwards.

        An exception raised by ``action`` is not recorded, so a later theme
        retries the step.
        """

        if step_id in self._ledger:
            self.console.debug(f"Skipping '{step_id}', already done in this run")
            return self._ledger[step_id]  # type: ignore[return-value]
        outcome = action()
        self._ledger[step_id] = outcome
        return outcome

    @property
    def npm(self) -> NodePackageManager:
        return NodePackageManager(self.runner, self.console, npm=self.settings.commands.npm)

    @property
    def dependencies(self) -> DependencyChecker:
        return DependencyChecker(self.npm, self.console, self.consent)

    @property
    def deployer(self) -> StaticContentDeployer:
        return StaticContentDeployer(
            self.runner,
            self.console,
            self.environment,
            php=self.settings.commands.php,
            magento=self.settings.commands.magento,
        )

    @property
    def cache(self) -> CacheInvalidator:
        return CacheInvalidator(
            self.runner,
            self.console,
            self.environment,
            magento=self.settings.commands.magento,
            types=self.settings.cache_types,
        )

    @property
    def static_cleaner(self) -> StaticContentCleaner:
        return StaticContentCleaner(self.console, self.environment)

    @property
    def symlinks(self) -> SymlinkCleaner:
        return SymlinkCleaner(self.console)

    def magento_command(self, *args: str) -> list[str]:
        return [self.settings.commands.magento, *args]


@dataclass(slots=True)
class BuildContext:
    """Per-theme view of a :class:`Session`."""

    session: Session
    theme: ThemeDescriptor
    failure: str | None = None

    @property
    def console(self) -> Console:
        return self.session.console

    @property
    def runner(self) -> CommandRunner:
        return self.session.runner

    @property
    def verbose(self) -> bool:
        return self.session.console.verbose

    def fail(self, message: str) -> bool:
        """Record ``message`` as the reason this theme failed and return ``False``."""

        if self.failure is None:
            self.failure = message
        self.session.console.error(message)
        return False

    @contextmanager
    def in_directory(self, path: Path) -> Iterator[Path]:
        with working_directory(path) as current:
            yield current


__all__ = ["BuildContext", "Session"]
