"""Ordered collection of builder strategies."""
from __future__ import annotations

from pathlib import Path
from typing import Iterator, List, Sequence

from ..errors import ConfigurationError
from .base import Builder
from .custom import CustomBuilder
from .hyva import HyvaThemesBuilder
from .standard import MagentoStandardBuilder
from .tailwind import TailwindCSSBuilder


class BuilderRegistry:
    """Resolves a theme path to the first registered builder that claims it."""

    def __init__(self, builders: Sequence[Builder] | None = None) -> None:
        self._builders: List[Builder] = list(builders or [])

    @classmethod
    def with_defaults(cls, order: Sequence[str] | None = None) -> "BuilderRegistry":
        """Registry with the bundled builders.

        ``order`` restricts and reorders them by name; unknown names raise
        :class:`ConfigurationError`.
        """

        defaults = cls(
            [
                HyvaThemesBuilder(),
                TailwindCSSBuilder(),
                MagentoStandardBuilder(),
                CustomBuilder(),
            ]
        )
        if not order:
            return defaults
        registry = cls()
        for name in order:
            builder = defaults.get(name)
            if builder is None:
                raise ConfigurationError(
                    f"Unknown builder '{name}' in builders.order. Available: {', '.join(defaults.names())}"
                )
            registry.register(builder)
        return registry

    def register(self, builder: Builder) -> None:
        self._builders.append(builder)

    def resolve(self, theme_path: Path) -> Builder | None:
        for builder in self._builders:
            if builder.detect(theme_path):
                return builder
        return None

    def candidates(self, theme_path: Path) -> List[Builder]:
        return [builder for builder in self._builders if builder.detect(theme_path)]

    def names(self) -> List[str]:
        return [builder.name for builder in self._builders]

    def get(self, name: str) -> Builder | None:
        lowered = name.lower()
        for builder in self._builders:
            if builder.name.lower() == lowered:
                return builder
        return None

    def __iter__(self) -> Iterator[Builder]:
        return iter(self._builders)

    def __len__(self) -> int:
        return len(self._builders)


__all__ = ["BuilderRegistry"]
