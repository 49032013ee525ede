"""Facts about the host application that builds depend on."""
from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Mapping
import os
import re

DEVELOPER_MODE = "developer"
DEFAULT_MODE = "default"

_ENV_PHP_MODE = re.compile(r"""['"]MAGE_MODE['"]\s*=>\s*['"](?P<mode>[a-z]+)['"]""", re.IGNORECASE)


@dataclass(slots=True)
class HostEnvironment:
    """The application root and the deploy mode it runs in."""

    app_root: Path
    mode: str = DEFAULT_MODE

    @classmethod
    def discover(
        cls,
        app_root: Path,
        *,
        configured_mode: str | None = None,
        env: Mapping[str, str] | None = None,
    ) -> "HostEnvironment":
        environ = os.environ if env is None else env
        mode = configured_mode or environ.get("MAGE_MODE") or _read_env_php_mode(app_root)
        return cls(app_root=app_root, mode=(mode or DEFAULT_MODE).lower())

    @property
    def is_developer_mode(self) -> bool:
        return self.mode == DEVELOPER_MODE

    @property
    def static_root(self) -> Path:
        return self.app_root / "pub" / "static" / "frontend"

    @property
    def preprocessed_root(self) -> Path:
        return self.app_root / "var" / "view_preprocessed"


def _read_env_php_mode(app_root: Path) -> str | None:
    env_php = app_root / "app" / "etc" / "env.php"
    try:
        text = env_php.read_text(encoding="utf-8")
    except OSError:
        return None
    match = _ENV_PHP_MODE.search(text)
    return match.group("mode") if match else None


__all__ = ["DEFAULT_MODE", "DEVELOPER_MODE", "HostEnvironment"]
