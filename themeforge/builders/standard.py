"""Builder for standard Magento themes compiled with Grunt and LESS."""
from __future__ import annotations

from pathlib import Path
from typing import List
import shutil

from ..dependency_checker import GRUNT_PROFILE
from ..session import BuildContext
from .base import Builder

ROOT_BOOTSTRAP_STEP = "standard:root-bootstrap"


class MagentoStandardBuilder(Builder):
    name = "MagentoStandard"

    def detect(self, theme_path: Path) -> bool:
        return (theme_path / "theme.xml").is_file() and not (theme_path / "web" / "tailwind").exists()

    def grunt_command(self, ctx: BuildContext, *tasks: str, quiet: bool = True) -> List[str]:
        app_root = ctx.session.environment.app_root
        local = app_root / "node_modules" / ".bin" / "grunt"
        grunt = str(local) if local.exists() else ctx.session.settings.commands.grunt
        command = [grunt, *tasks]
        if quiet and not ctx.verbose:
            command.append("--quiet")
        return command

    def _bootstrap(self, ctx: BuildContext) -> bool:
        session = ctx.session
        app_root = session.environment.app_root
        if not self.attempt(
            ctx,
            "Node dependencies are not ready in the application root",
            lambda: session.dependencies.ensure_ready(app_root, GRUNT_PROFILE),
        ):
            return False

        grunt = session.settings.commands.grunt
        if shutil.which(grunt) is None and not (app_root / "node_modules" / ".bin" / "grunt").exists():
            ctx.console.warning("Grunt not found. Installing grunt-cli...")
            if not self.attempt(
                ctx,
                "Failed to install grunt",
                lambda: ctx.runner.run(
                    [session.settings.commands.npm, "install", "-g", "grunt-cli", "--quiet"],
                    cwd=app_root,
                    note="install grunt",
                ),
            ):
                return False
            ctx.console.debug("Grunt installed successfully.")
        return True

    def auto_repair(self, theme_path: Path, ctx: BuildContext) -> bool:
        session = ctx.session
        if not self.run_shared_step(
            ctx,
            ROOT_BOOTSTRAP_STEP,
            "Application root bootstrap failed earlier in this run",
            lambda: self._bootstrap(ctx),
        ):
            return False
        if ctx.verbose:
            session.npm.report_outdated(session.environment.app_root)
        return True

    def build(self, theme_path: Path, ctx: BuildContext) -> bool:
        if not self.detect(theme_path):
            return ctx.fail(f"{self.name} cannot build {theme_path}")
        if not self.auto_repair(theme_path, ctx):
            return False

        app_root = ctx.session.environment.app_root

        def run_grunt() -> None:
            with ctx.in_directory(app_root):
                for task in ("clean", "less"):
                    ctx.console.debug(f"Running grunt {task}...")
                    result = ctx.runner.run(self.grunt_command(ctx, task), cwd=app_root, note=f"grunt {task}")
                    if ctx.verbose and result.stdout.strip():
                        ctx.console.write(result.stdout.rstrip())

        if not self.attempt(ctx, "Failed to run grunt tasks", run_grunt):
            return False
        ctx.console.debug("Grunt tasks completed successfully.")
        return self.publish(ctx)

    def watch(self, theme_path: Path, ctx: BuildContext) -> bool:
        if not self.detect(theme_path):
            return ctx.fail(f"{self.name} cannot watch {theme_path}")
        if not self.auto_repair(theme_path, ctx):
            return False
        app_root = ctx.session.environment.app_root
        command = self.grunt_command(ctx, "watch", quiet=False)
        ctx.console.info(f"Starting grunt watch in {app_root} (Ctrl+C to stop)")
        with ctx.in_directory(app_root):
            result = ctx.runner.watch(command, cwd=app_root, token=ctx.session.token, note="grunt watch")
        return self.finish_watch(result, ctx)


__all__ = ["MagentoStandardBuilder", "ROOT_BOOTSTRAP_STEP"]
