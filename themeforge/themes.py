"""Theme lookup for the host application."""
from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Dict, List, Mapping, Protocol
import re

_REGISTRATION = re.compile(r"""['"]frontend/(?P<vendor>[^/'"]+)/(?P<name>[^/'"]+)['"]""")


@dataclass(frozen=True, slots=True)
class ThemeDescriptor:
    code: str
    path: Path

    @property
    def vendor(self) -> str:
        return self.code.split("/", 1)[0]

    @property
    def name(self) -> str:
        return self.code.split("/", 1)[1]


class ThemeRegistry(Protocol):
    def list_all(self) -> List[ThemeDescriptor]:
        ...

    def resolve_path(self, code: str) -> Path | None:
        ...


class StaticThemeRegistry:
    """Registry backed by an explicit code to path mapping."""

    def __init__(self, themes: Mapping[str, Path]) -> None:
        self._themes = {code: Path(path) for code, path in themes.items()}

    def list_all(self) -> List[ThemeDescriptor]:
        return [ThemeDescriptor(code, path) for code, path in sorted(self._themes.items())]

    def resolve_path(self, code: str) -> Path | None:
        return self._themes.get(code)


class FileSystemThemeRegistry:
    """Discovers frontend themes installed in an application root.

    Themes are found in ``app/design/frontend/<Vendor>/<Name>`` (a ``theme.xml``
    marks a theme) and in ``vendor/*/*`` packages whose ``registration.php``
    registers a ``frontend/<Vendor>/<Name>`` theme. ``overrides`` adds or
    replaces entries; relative paths are taken from the application root.
    """

    def __init__(self, app_root: Path, overrides: Mapping[str, str] | None = None) -> None:
        self._app_root = app_root
        self._overrides = dict(overrides or {})
        self._cache: Dict[str, Path] | None = None

    def _scan(self) -> Dict[str, Path]:
        themes: Dict[str, Path] = {}

        design_root = self._app_root / "app" / "design" / "frontend"
        if design_root.is_dir():
            for theme_xml in sorted(design_root.glob("*/*/theme.xml")):
                theme_dir = theme_xml.parent
                themes[f"{theme_dir.parent.name}/{theme_dir.name}"] = theme_dir

        vendor_root = self._app_root / "vendor"
        if vendor_root.is_dir():
            for registration in sorted(vendor_root.glob("*/*/registration.php")):
                try:
                    text = registration.read_text(encoding="utf-8")
                except OSError:
                    continue
                match = _REGISTRATION.search(text)
                if match:
                    themes.setdefault(f"{match.group('vendor')}/{match.group('name')}", registration.parent)

        for code, raw_path in self._overrides.items():
            path = Path(raw_path).expanduser()
            themes[code] = path if path.is_absolute() else self._app_root / path

        return themes

    def _themes(self) -> Dict[str, Path]:
        if self._cache is None:
            self._cache = self._scan()
        return self._cache

    def list_all(self) -> List[ThemeDescriptor]:
        return [ThemeDescriptor(code, path) for code, path in sorted(self._themes().items())]

    def resolve_path(self, code: str) -> Path | None:
        return self._themes().get(code)


__all__ = [
    "FileSystemThemeRegistry",
    "StaticThemeRegistry",
    "ThemeDescriptor",
    "ThemeRegistry",
]
