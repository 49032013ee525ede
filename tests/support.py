from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
import io
import json

from themeforge.config import Settings
from themeforge.consent import AutoConsent, ConsentPolicy
from themeforge.console import Console
from themeforge.core.command_runner import RecordingCommandRunner
from themeforge.environment import HostEnvironment
from themeforge.session import Session

HYVA_CONFIG = "bin/magento hyva:config:generate"
CACHE_CLEAN = "bin/magento cache:clean full_page block_html layout translate"


def deploy_line(code: str) -> str:
    return f"php bin/magento setup:static-content:deploy -t {code} -f --quiet"


def write(path: Path, text: str = "") -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(text, encoding="utf-8")
    return path


def design_dir(app_root: Path, code: str) -> Path:
    vendor, name = code.split("/")
    return app_root / "app" / "design" / "frontend" / vendor / name


def _node_manifest(scripts: dict | None = None) -> str:
    return json.dumps({"name": "theme", "scripts": scripts or {"build": "tailwind build", "watch": "tailwind watch"}})


def make_hyva_theme(app_root: Path, code: str = "Hyva/default") -> Path:
    theme = design_dir(app_root, code)
    write(theme / "theme.xml", "<theme><title>Hyva Default</title><parent>Hyva/reset</parent></theme>")
    write(theme / "web" / "tailwind" / "package.json", _node_manifest())
    return theme


def make_tailwind_theme(app_root: Path, code: str = "Acme/wind") -> Path:
    theme = design_dir(app_root, code)
    write(theme / "theme.xml", "<theme><title>Acme Wind</title><parent>Magento/blank</parent></theme>")
    write(theme / "web" / "tailwind" / "package.json", _node_manifest())
    return theme


def make_standard_theme(app_root: Path, code: str = "Acme/luma") -> Path:
    theme = design_dir(app_root, code)
    write(theme / "theme.xml", "<theme><title>Acme Luma</title><parent>Magento/luma</parent></theme>")
    write(theme / "web" / "css" / "source" / "_theme.less", "")
    return theme


def make_custom_theme(root: Path) -> Path:
    write(root / "package.json", _node_manifest({"build": "vite build", "watch": "vite"}))
    return root


def make_grunt_root(app_root: Path) -> None:
    write(app_root / "package.json", json.dumps({"name": "magento2"}))
    write(app_root / "Gruntfile.js", "module.exports = function () {};")
    (app_root / "node_modules").mkdir(parents=True, exist_ok=True)


@dataclass
class Harness:
    session: Session
    runner: RecordingCommandRunner
    stdout: io.StringIO
    stderr: io.StringIO

    def lines(self) -> list[str]:
        return self.runner.command_lines()


def make_session(
    app_root: Path,
    *,
    mode: str = "production",
    verbose: bool = False,
    consent: ConsentPolicy | None = None,
    settings: Settings | None = None,
) -> Harness:
    stdout = io.StringIO()
    stderr = io.StringIO()
    console = Console(level="debug" if verbose else "info", stdout=stdout, stderr=stderr)
    runner = RecordingCommandRunner()
    session = Session(
        console=console,
        runner=runner,
        environment=HostEnvironment(app_root=app_root, mode=mode),
        settings=settings or Settings(),
        consent=consent or AutoConsent(),
    )
    return Harness(session=session, runner=runner, stdout=stdout, stderr=stderr)
