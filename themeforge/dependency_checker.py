"""Ensure a build directory has the files and packages a toolchain needs."""
from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Tuple
import shutil

from .consent import ConsentPolicy
from .console import Console
from .errors import ExternalProcessFailure, PrerequisiteMissing
from .node_packages import NodePackageManager


@dataclass(frozen=True, slots=True)
class DependencyProfile:
    """What a build root must contain.

    ``manifest_template`` and scaffold templates are copied into place when
    the target is missing; a ``None`` template makes the file mandatory.
    """

    name: str
    manifest: str = "package.json"
    manifest_template: str | None = None
    packages_dir: str = "node_modules"
    install_needs_consent: bool = True
    sync_check: bool = False
    scaffolds: Tuple[Tuple[str, str], ...] = field(default_factory=tuple)


GRUNT_PROFILE = DependencyProfile(
    name="grunt",
    manifest_template="package.json.sample",
    install_needs_consent=True,
    scaffolds=(("Gruntfile.js", "Gruntfile.js.sample"),),
)

NODE_PROFILE = DependencyProfile(
    name="node",
    install_needs_consent=False,
    sync_check=True,
)


class DependencyChecker:
    def __init__(self, npm: NodePackageManager, console: Console, consent: ConsentPolicy) -> None:
        self._npm = npm
        self._console = console
        self._consent = consent

    def missing(self, build_root: Path, profile: DependencyProfile = GRUNT_PROFILE) -> List[Path]:
        """Return the required paths that do not exist yet, in check order."""

        paths: List[Path] = []
        manifest = build_root / profile.manifest
        if not manifest.is_file():
            paths.append(manifest)
        packages = build_root / profile.packages_dir
        if not packages.is_dir():
            paths.append(packages)
        for target, _template in profile.scaffolds:
            if not (build_root / target).is_file():
                paths.append(build_root / target)
        return paths

    def ensure_ready(self, build_root: Path, profile: DependencyProfile = GRUNT_PROFILE) -> bool:
        """Materialise whatever ``profile`` requires in ``build_root``.

        Returns ``True`` when everything is in place. Raises
        :class:`PrerequisiteMissing` naming the first path that could not be
        provided and :class:`ExternalProcessFailure` when installing fails.
        """

        self._ensure_file(build_root, profile.manifest, profile.manifest_template)
        self._ensure_packages(build_root, profile)
        for target, template in profile.scaffolds:
            self._ensure_file(build_root, target, template)
        return True

    def _ensure_file(self, build_root: Path, name: str, template: str | None) -> None:
        target = build_root / name
        if target.is_file():
            self._console.debug(f"Found {target}")
            return

        self._console.debug(f"{target} does not exist")
        if template is None:
            raise PrerequisiteMissing(target, "file is required")
        source = build_root / template
        if not source.is_file():
            raise PrerequisiteMissing(target, f"neither the file nor its template '{template}' exists")
        if not self._consent.confirm(f"Copy '{template}' to '{name}'?", default=False):
            raise PrerequisiteMissing(target, f"copying '{template}' was declined")
        shutil.copyfile(source, target)
        self._console.info(f"Copied '{template}' to '{name}' in {build_root}")

    def _ensure_packages(self, build_root: Path, profile: DependencyProfile) -> None:
        packages = build_root / profile.packages_dir
        if packages.is_dir():
            if not profile.sync_check or self._npm.is_in_sync(build_root):
                self._console.debug(f"Found {packages}")
                return
            self._console.warning(f"Node modules in {build_root} are out of sync, reinstalling")
        elif profile.install_needs_consent:
            if not self._consent.confirm("Run 'npm install' to install the dependencies?", default=False):
                raise PrerequisiteMissing(packages, "installing dependencies was declined")
        else:
            self._console.info(f"Installing node modules in {build_root}")

        try:
            self._npm.install(build_root)
        except ExternalProcessFailure:
            self._console.error(f"Failed to install node modules in {build_root}")
            raise


__all__ = [
    "DependencyChecker",
    "DependencyProfile",
    "GRUNT_PROFILE",
    "NODE_PROFILE",
]
