"""Builder for custom (non-Hyvä) Tailwind CSS themes."""
from __future__ import annotations

from pathlib import Path

from .base import NodeProjectBuilder
from .hyva import is_hyva_theme


class TailwindCSSBuilder(NodeProjectBuilder):
    name = "TailwindCSS"

    def detect(self, theme_path: Path) -> bool:
        if not (theme_path / "web" / "tailwind").is_dir():
            return False
        return not is_hyva_theme(theme_path)

    def build_root(self, theme_path: Path) -> Path:
        return theme_path / "web" / "tailwind"


__all__ = ["TailwindCSSBuilder"]
