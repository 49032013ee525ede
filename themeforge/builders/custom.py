"""Fallback builder for themes that ship their own npm build."""
from __future__ import annotations

from pathlib import Path

from .base import NodeProjectBuilder, read_json


class CustomBuilder(NodeProjectBuilder):
    """Handles a theme whose root ``package.json`` declares a ``build`` script.

    Magento-registered themes (``theme.xml``) and Tailwind themes belong to
    the other builders and are never claimed here.
    """

    name = "Custom"

    def detect(self, theme_path: Path) -> bool:
        if (theme_path / "theme.xml").exists() or (theme_path / "web" / "tailwind").exists():
            return False
        scripts = read_json(theme_path / "package.json").get("scripts")
        return isinstance(scripts, dict) and "build" in scripts

    def build_root(self, theme_path: Path) -> Path:
        return theme_path


__all__ = ["CustomBuilder"]
