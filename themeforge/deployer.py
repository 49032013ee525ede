"""Static content deployment for a single theme."""
from __future__ import annotations

from .console import Console
from .core.command_runner import CommandRunner
from .environment import HostEnvironment


class StaticContentDeployer:
    def __init__(
        self,
        runner: CommandRunner,
        console: Console,
        environment: HostEnvironment,
        *,
        php: str = "php",
        magento: str = "bin/magento",
    ) -> None:
        self._runner = runner
        self._console = console
        self._environment = environment
        self._php = php
        self._magento = magento

    def deploy(self, theme_code: str) -> None:
        """Deploy static content for ``theme_code``, unless the host runs in developer mode.

        Raises :class:`ExternalProcessFailure` on failure.
        """

        if self._environment.is_developer_mode:
            self._console.debug("Skipping static content deployment in developer mode.")
            return

        self._console.debug("Deploying static content...")
        result = self._runner.run(
            [self._php, self._magento, "setup:static-content:deploy", "-t", theme_code, "-f", "--quiet"],
            cwd=self._environment.app_root,
            note="static content deploy",
        )
        if self._console.verbose and result.stdout.strip():
            self._console.write(result.stdout.rstrip())
        self._console.debug(f"Static content deployed for theme '{theme_code}'.")


__all__ = ["StaticContentDeployer"]
