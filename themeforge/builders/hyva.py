"""Builder for Hyvä themes (Tailwind CSS compiled from ``web/tailwind``)."""
from __future__ import annotations

from pathlib import Path

from ..session import BuildContext
from .base import NodeProjectBuilder, read_json, read_text

CONFIG_GENERATE_STEP = "hyva:config:generate"


def is_hyva_theme(theme_path: Path) -> bool:
    """Return whether ``theme_path`` declares itself as a Hyvä theme."""

    if "hyva" in read_text(theme_path / "theme.xml").lower():
        return True
    composer = read_json(theme_path / "composer.json")
    name = composer.get("name")
    if isinstance(name, str) and "hyva" in name.lower():
        return True
    require = composer.get("require")
    if isinstance(require, dict):
        return any("hyva" in str(package).lower() for package in require)
    return False


class HyvaThemesBuilder(NodeProjectBuilder):
    name = "HyvaThemes"

    def detect(self, theme_path: Path) -> bool:
        if not (theme_path / "web" / "tailwind").is_dir():
            return False
        return is_hyva_theme(theme_path)

    def build_root(self, theme_path: Path) -> Path:
        return theme_path / "web" / "tailwind"

    def prepare(self, theme_path: Path, ctx: BuildContext) -> bool:
        ctx.session.static_cleaner.clean_if_needed(ctx.theme.code)
        return True

    def before_compile(self, theme_path: Path, ctx: BuildContext) -> bool:
        session = ctx.session
        if session.environment.is_developer_mode:
            session.symlinks.clean(theme_path)
        return self.run_shared_step(
            ctx,
            CONFIG_GENERATE_STEP,
            "Hyvä configuration generation failed earlier in this run",
            lambda: self._generate_config(ctx),
        )

    def _generate_config(self, ctx: BuildContext) -> bool:
        session = ctx.session
        ctx.console.debug("Generating Hyvä configuration...")
        return self.attempt(
            ctx,
            "Failed to generate Hyvä configuration",
            lambda: ctx.runner.run(
                session.magento_command("hyva:config:generate"),
                cwd=session.environment.app_root,
                note="hyva config",
            ),
        )


__all__ = ["CONFIG_GENERATE_STEP", "HyvaThemesBuilder", "is_hyva_theme"]
