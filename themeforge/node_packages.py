"""npm operations used to prepare a build directory."""
from __future__ import annotations

from pathlib import Path
from typing import Dict
import json

from .console import Console
from .core.command_runner import CommandRunner
from .errors import ExternalProcessFailure


class NodePackageManager:
    def __init__(self, runner: CommandRunner, console: Console, *, npm: str = "npm") -> None:
        self._runner = runner
        self._console = console
        self._npm = npm

    def install(self, path: Path) -> None:
        """Install node modules in ``path``.

        ``npm ci`` is used when a lock file exists, falling back to
        ``npm install`` if it fails. Raises :class:`ExternalProcessFailure`
        when the final attempt fails.
        """

        if (path / "package-lock.json").is_file():
            try:
                self._runner.run([self._npm, "ci", "--quiet"], cwd=path, note="npm ci")
            except ExternalProcessFailure as exc:
                self._console.warning(f"npm ci failed, falling back to npm install: {exc.output or exc}")
                self._runner.run([self._npm, "install", "--quiet"], cwd=path, note="npm install")
        else:
            self._console.debug(f"No package-lock.json in {path}, running npm install")
            self._runner.run([self._npm, "install", "--quiet"], cwd=path, note="npm install")
        self._console.debug(f"Node modules installed in {path}")

    def is_in_sync(self, path: Path) -> bool:
        """Return whether ``node_modules`` matches ``package-lock.json``."""

        if not (path / "node_modules").is_dir():
            return False
        if not (path / "package-lock.json").is_file():
            return False
        result = self._runner.run(
            [self._npm, "ls", "--depth=0", "--json"], cwd=path, check=False, note="npm ls"
        )
        return result.returncode == 0

    def outdated(self, path: Path) -> Dict[str, Dict[str, str]]:
        """Return ``npm outdated`` results keyed by package name.

        ``npm outdated`` exits with status 1 when anything is outdated, so the
        exit code is ignored and only the JSON payload is inspected.
        """

        result = self._runner.run(
            [self._npm, "outdated", "--json"], cwd=path, check=False, note="npm outdated"
        )
        text = result.stdout.strip()
        if not text:
            if result.returncode not in (0, 1):
                raise ExternalProcessFailure(result)
            return {}
        try:
            data = json.loads(text)
        except json.JSONDecodeError as exc:
            raise ExternalProcessFailure(result) from exc
        if not isinstance(data, dict):
            return {}
        packages: Dict[str, Dict[str, str]] = {}
        for name, info in data.items():
            if isinstance(info, dict):
                packages[str(name)] = {
                    key: str(info[key]) for key in ("current", "wanted", "latest") if key in info
                }
        return packages

    def report_outdated(self, path: Path) -> None:
        """Warn about outdated packages; failures to query are only reported."""

        try:
            packages = self.outdated(path)
        except (ExternalProcessFailure, OSError) as exc:
            self._console.warning(f"Failed to check outdated packages: {exc}")
            return
        if not packages:
            return
        self._console.warning("Outdated packages found:")
        for name, info in sorted(packages.items()):
            current = info.get("current", "-")
            wanted = info.get("wanted", "-")
            latest = info.get("latest", "-")
            self._console.write(f"  {name}: {current} -> {wanted} (latest {latest})")


__all__ = ["NodePackageManager"]
