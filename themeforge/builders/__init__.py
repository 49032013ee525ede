"""Theme builder strategies."""
from __future__ import annotations

from .base import Builder, NodeProjectBuilder
from .custom import CustomBuilder
from .hyva import HyvaThemesBuilder
from .registry import BuilderRegistry
from .standard import MagentoStandardBuilder
from .tailwind import TailwindCSSBuilder

__all__ = [
    "Builder",
    "BuilderRegistry",
    "CustomBuilder",
    "HyvaThemesBuilder",
    "MagentoStandardBuilder",
    "NodeProjectBuilder",
    "TailwindCSSBuilder",
]
