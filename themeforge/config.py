"""Settings loaded from the optional themeforge configuration file."""
from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Mapping
import os

from .core.config_loader import (
    find_config_file,
    load_config_file,
    merge_mappings,
    normalize_string_list,
)
from .errors import ConfigurationError

CONFIG_STEM = "themeforge"
CONFIG_ENV_VAR = "THEMEFORGE_CONFIG"

DEFAULT_CACHE_TYPES = ["full_page", "block_html", "layout", "translate"]

_KNOWN_SECTIONS = {"global", "commands", "cache", "themes", "builders"}
_LOG_LEVELS = {"none", "error", "warning", "info", "debug"}


def _section(data: Mapping[str, Any], name: str) -> Mapping[str, Any]:
    value = data.get(name, {})
    if value is None:
        return {}
    if not isinstance(value, Mapping):
        raise ConfigurationError(f"[{name}] must be a table")
    return value


def _reject_unknown(section: Mapping[str, Any], allowed: set[str], name: str) -> None:
    unknown = sorted(set(section) - allowed)
    if unknown:
        raise ConfigurationError(f"Unknown key(s) in [{name}]: {', '.join(unknown)}")


@dataclass(slots=True)
class GlobalConfig:
    log_level: str = "info"
    mode: str | None = None
    auto_confirm: bool = False

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> "GlobalConfig":
        section = _section(data, "global")
        _reject_unknown(section, {"log_level", "mode", "auto_confirm"}, "global")
        log_level = str(section.get("log_level", "info")).lower()
        if log_level not in _LOG_LEVELS:
            raise ConfigurationError(
                f"global.log_level must be one of: {', '.join(sorted(_LOG_LEVELS))}"
            )
        mode = section.get("mode")
        return cls(
            log_level=log_level,
            mode=str(mode).strip() if mode else None,
            auto_confirm=bool(section.get("auto_confirm", False)),
        )


@dataclass(slots=True)
class CommandSettings:
    """Executables used for the external toolchain."""

    npm: str = "npm"
    php: str = "php"
    magento: str = "bin/magento"
    grunt: str = "grunt"

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> "CommandSettings":
        section = _section(data, "commands")
        _reject_unknown(section, {"npm", "php", "magento", "grunt"}, "commands")
        values: Dict[str, str] = {}
        for key in ("npm", "php", "magento", "grunt"):
            if key in section:
                text = str(section[key]).strip()
                if not text:
                    raise ConfigurationError(f"commands.{key} cannot be empty")
                values[key] = text
        return cls(**values)


@dataclass(slots=True)
class Settings:
    global_config: GlobalConfig = field(default_factory=GlobalConfig)
    commands: CommandSettings = field(default_factory=CommandSettings)
    cache_types: List[str] = field(default_factory=lambda: list(DEFAULT_CACHE_TYPES))
    themes: Dict[str, str] = field(default_factory=dict)
    builder_order: List[str] = field(default_factory=list)
    source: Path | None = None

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any], *, source: Path | None = None) -> "Settings":
        unknown = sorted(set(data) - _KNOWN_SECTIONS)
        if unknown:
            raise ConfigurationError(f"Unknown configuration section(s): {', '.join(unknown)}")

        cache_section = _section(data, "cache")
        _reject_unknown(cache_section, {"types"}, "cache")
        cache_types = normalize_string_list(cache_section.get("types"), field_name="cache.types")

        themes: Dict[str, str] = {}
        for code, path in _section(data, "themes").items():
            if str(code).count("/") != 1:
                raise ConfigurationError(f"Theme code '{code}' must look like 'Vendor/Name'")
            themes[str(code)] = str(path)

        builders_section = _section(data, "builders")
        _reject_unknown(builders_section, {"order"}, "builders")

        return cls(
            global_config=GlobalConfig.from_mapping(data),
            commands=CommandSettings.from_mapping(data),
            cache_types=cache_types or list(DEFAULT_CACHE_TYPES),
            themes=themes,
            builder_order=normalize_string_list(builders_section.get("order"), field_name="builders.order"),
            source=source,
        )


def load_settings(
    app_root: Path,
    *,
    config_path: Path | None = None,
    env: Mapping[str, str] | None = None,
) -> Settings:
    """Load settings for ``app_root``.

    The application root file is read first; an explicit ``config_path`` (or
    the ``THEMEFORGE_CONFIG`` variable) is merged over it.
    """

    environ = os.environ if env is None else env
    data: Dict[str, Any] = {}
    source: Path | None = None

    root_file = find_config_file(app_root, CONFIG_STEM)
    if root_file is not None:
        data = merge_mappings(data, load_config_file(root_file))
        source = root_file

    explicit = config_path
    if explicit is None and environ.get(CONFIG_ENV_VAR):
        explicit = Path(environ[CONFIG_ENV_VAR]).expanduser()
    if explicit is not None:
        if not explicit.is_file():
            raise ConfigurationError(f"Configuration file '{explicit}' does not exist")
        if root_file is None or explicit.resolve() != root_file.resolve():
            data = merge_mappings(data, load_config_file(explicit))
            source = explicit

    return Settings.from_mapping(data, source=source)


__all__ = [
    "CONFIG_ENV_VAR",
    "CONFIG_STEM",
    "CommandSettings",
    "DEFAULT_CACHE_TYPES",
    "GlobalConfig",
    "Settings",
    "load_settings",
]
