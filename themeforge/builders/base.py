"""Common machinery shared by the theme builder strategies."""
from __future__ import annotations

from abc import ABC, abstractmethod
from pathlib import Path
from typing import Callable, List
import json

from ..core.command_runner import CommandResult
from ..dependency_checker import NODE_PROFILE
from ..errors import ExternalProcessFailure, PrerequisiteMissing
from ..session import BuildContext


class Builder(ABC):
    """One toolchain family able to compile and watch a theme.

    ``detect`` only looks at files; everything else may run external
    processes and reports failures through :meth:`BuildContext.fail`.
    """

    name: str = ""

    @abstractmethod
    def detect(self, theme_path: Path) -> bool:
        """Return whether this builder handles the theme at ``theme_path``."""

    @abstractmethod
    def auto_repair(self, theme_path: Path, ctx: BuildContext) -> bool:
        """Install or restore whatever the build needs."""

    @abstractmethod
    def build(self, theme_path: Path, ctx: BuildContext) -> bool:
        """Compile the theme assets and publish them."""

    @abstractmethod
    def watch(self, theme_path: Path, ctx: BuildContext) -> bool:
        """Run the family's watch process until it exits."""

    def __repr__(self) -> str:
        return f"{type(self).__name__}(name={self.name!r})"

    def attempt(self, ctx: BuildContext, failure: str, action: Callable[[], object]) -> bool:
        """Run ``action``; turn process or prerequisite errors into a recorded failure."""

        try:
            action()
        except (ExternalProcessFailure, PrerequisiteMissing) as exc:
            return ctx.fail(f"{failure}: {exc}")
        return True

    def run_shared_step(self, ctx: BuildContext, step_id: str, failure: str, action: Callable[[], bool]) -> bool:
        """Run a step shared by every theme of this family once per session.

        The first failure message is kept in the session ledger and repeated
        for later themes, so each of them reports the original cause.
        """

        outcome = ctx.session.run_once(step_id, lambda: None if action() else ctx.failure or failure)
        if outcome is None:
            return True
        if ctx.failure is None:
            ctx.fail(f"{failure}: {outcome}")
        return False

    def publish(self, ctx: BuildContext) -> bool:
        """Deploy static content for the theme and flush caches."""

        session = ctx.session
        if not self.attempt(ctx, "Static content deployment failed", lambda: session.deployer.deploy(ctx.theme.code)):
            return False
        session.cache.clean()
        return True

    def finish_watch(self, result: CommandResult, ctx: BuildContext) -> bool:
        if result.interrupted:
            ctx.console.info("Watch mode stopped.")
            return True
        if result.returncode != 0:
            return ctx.fail(f"Watch process exited with code {result.returncode}: {ctx.runner.format_command(result.command)}")
        return True


def read_text(path: Path) -> str:
    try:
        return path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError):
        return ""


def read_json(path: Path) -> dict:
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except (OSError, UnicodeDecodeError, json.JSONDecodeError):
        return {}
    return data if isinstance(data, dict) else {}


class NodeProjectBuilder(Builder):
    """Builder for themes compiled by an npm project's ``build``/``watch`` scripts."""

    @abstractmethod
    def build_root(self, theme_path: Path) -> Path:
        """Directory holding the npm project."""

    def prepare(self, theme_path: Path, ctx: BuildContext) -> bool:
        """Hook run before :meth:`auto_repair` during a build or watch."""

        return True

    def before_compile(self, theme_path: Path, ctx: BuildContext) -> bool:
        """Hook run between :meth:`auto_repair` and the compile step."""

        return True

    def auto_repair(self, theme_path: Path, ctx: BuildContext) -> bool:
        root = self.build_root(theme_path)
        if not root.is_dir():
            return ctx.fail(f"Build directory not found: {root}")
        session = ctx.session
        if not self.attempt(
            ctx,
            "Failed to install node modules",
            lambda: session.dependencies.ensure_ready(root, NODE_PROFILE),
        ):
            return False
        if ctx.verbose:
            session.npm.report_outdated(root)
        return True

    def npm_script(self, ctx: BuildContext, script: str) -> List[str]:
        command = [ctx.session.settings.commands.npm, "run", script]
        if not ctx.verbose:
            command.append("--quiet")
        return command

    def build(self, theme_path: Path, ctx: BuildContext) -> bool:
        if not self.detect(theme_path):
            return ctx.fail(f"{self.name} cannot build {theme_path}")
        if not self.prepare(theme_path, ctx):
            return False
        if not self.auto_repair(theme_path, ctx):
            return False
        if not self.before_compile(theme_path, ctx):
            return False

        root = self.build_root(theme_path)
        ctx.console.debug("Running npm build...")

        def compile_assets() -> None:
            with ctx.in_directory(root):
                ctx.runner.run(self.npm_script(ctx, "build"), cwd=root, note="npm build")

        if not self.attempt(ctx, f"Failed to build {self.name} theme", compile_assets):
            return False
        ctx.console.debug(f"{self.name} theme build completed successfully.")
        return self.publish(ctx)

    def watch(self, theme_path: Path, ctx: BuildContext) -> bool:
        if not self.detect(theme_path):
            return ctx.fail(f"{self.name} cannot watch {theme_path}")
        if not self.prepare(theme_path, ctx):
            return False
        if not self.auto_repair(theme_path, ctx):
            return False
        root = self.build_root(theme_path)
        command = [ctx.session.settings.commands.npm, "run", "watch"]
        ctx.console.info(f"Starting watch mode in {root} (Ctrl+C to stop)")
        with ctx.in_directory(root):
            result = ctx.runner.watch(command, cwd=root, token=ctx.session.token, note="npm watch")
        return self.finish_watch(result, ctx)


__all__ = ["Builder", "NodeProjectBuilder", "read_json", "read_text"]
