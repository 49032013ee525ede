"""Command line interface for themeforge."""
from __future__ import annotations

from argparse import ArgumentParser, Namespace
from pathlib import Path
from typing import Iterable, List
import sys

from .builders.registry import BuilderRegistry
from .config import Settings, load_settings
from .consent import AutoConsent, PromptConsent
from .console import Console
from .core.command_runner import SubprocessCommandRunner
from .driver import BuildDriver
from .environment import HostEnvironment
from .errors import ConfigurationError, ThemeForgeError
from .session import Session
from .themes import FileSystemThemeRegistry

EXIT_OK = 0
EXIT_FAILED = 1
EXIT_USAGE = 2


def _parse_arguments(argv: Iterable[str]) -> Namespace:
    parser = ArgumentParser(prog="themeforge", description="Frontend theme build orchestrator")
    parser.add_argument(
        "-C",
        "--app-root",
        type=Path,
        default=None,
        metavar="PATH",
        help="Application root directory (default: current directory)",
    )
    parser.add_argument(
        "--config",
        type=Path,
        default=None,
        help="Configuration file merged over the one in the application root",
    )
    parser.add_argument(
        "--verbose",
        "-v",
        action="store_true",
        help="Enable verbose output (maps to debug)",
    )
    parser.add_argument(
        "--log",
        "-l",
        choices=list(Console.LEVELS),
        default=None,
        help="Set log level (default: from configuration, else info)",
    )
    parser.add_argument(
        "--yes",
        "-y",
        action="store_true",
        help="Answer yes to every prerequisite repair question",
    )

    subparsers = parser.add_subparsers(dest="command", required=True)

    p_build = subparsers.add_parser("build", help="Build one or more themes")
    p_build.add_argument("themes", nargs="+", help="Theme codes (Vendor/theme)")

    p_watch = subparsers.add_parser("watch", help="Run a theme's watch mode")
    p_watch.add_argument("theme", help="Theme code (Vendor/theme)")

    p_clean = subparsers.add_parser("clean", help="Clean theme static files and cache directories")
    p_clean.add_argument("themes", nargs="*", help="Theme codes to clean")
    p_clean.add_argument("--all", action="store_true", help="Clean all themes")
    p_clean.add_argument(
        "--dry-run",
        "-n",
        action="store_true",
        help="Show what would be cleaned without deleting anything",
    )

    p_detect = subparsers.add_parser("detect", help="Show which builder handles a theme")
    p_detect.add_argument("theme", help="Theme code (Vendor/theme)")

    return parser.parse_args(list(argv))


def _log_level(args: Namespace, settings: Settings) -> str:
    # Explicit --log wins, then --verbose, then configuration.
    if args.log:
        return args.log
    if args.verbose:
        return "debug"
    return settings.global_config.log_level


def _make_driver(args: Namespace, *, dry_run: bool = False) -> BuildDriver:
    app_root = (args.app_root or Path.cwd()).resolve()
    if not app_root.is_dir():
        raise ConfigurationError(f"Application root not found: {app_root}")

    settings = load_settings(app_root, config_path=args.config)
    console = Console(level=_log_level(args, settings), dry_run=dry_run)
    if settings.source is not None:
        console.debug(f"Using configuration from {settings.source}")

    environment = HostEnvironment.discover(app_root, configured_mode=settings.global_config.mode)
    console.debug(f"Application root {app_root} (mode: {environment.mode})")

    auto_confirm = args.yes or settings.global_config.auto_confirm
    session = Session(
        console=console,
        runner=SubprocessCommandRunner(),
        environment=environment,
        settings=settings,
        consent=AutoConsent() if auto_confirm else PromptConsent(),
    )
    themes = FileSystemThemeRegistry(app_root, settings.themes)
    builders = BuilderRegistry.with_defaults(settings.builder_order)
    return BuildDriver(session, themes, builders)


def main(argv: Iterable[str] | None = None) -> int:
    args = _parse_arguments(sys.argv[1:] if argv is None else argv)
    dry_run = bool(getattr(args, "dry_run", False))
    try:
        driver = _make_driver(args, dry_run=dry_run)
    except ConfigurationError as exc:
        print(f"[ERROR] {exc}", file=sys.stderr)
        return EXIT_USAGE

    if args.command == "build":
        return _handle_build(args, driver)
    if args.command == "watch":
        return _handle_watch(args, driver)
    if args.command == "clean":
        return _handle_clean(args, driver)
    if args.command == "detect":
        return _handle_detect(args, driver)
    return EXIT_USAGE


def _handle_build(args: Namespace, driver: BuildDriver) -> int:
    summary = driver.build(args.themes)
    driver.report(summary, "Build")
    return EXIT_OK if summary.ok else EXIT_FAILED


def _handle_watch(args: Namespace, driver: BuildDriver) -> int:
    result = driver.watch(args.theme)
    return EXIT_OK if result.success else EXIT_FAILED


def _handle_clean(args: Namespace, driver: BuildDriver) -> int:
    console = driver.session.console
    codes: List[str] = list(args.themes)
    if args.all:
        codes = [theme.code for theme in driver.themes.list_all()]
        console.info(f"Cleaning all {len(codes)} theme{'' if len(codes) == 1 else 's'}...")
    if not codes:
        console.error("No themes given. Pass theme codes or --all.")
        console.info("Usage: themeforge clean <theme-code> [<theme-code>...]")
        console.info("       themeforge clean --all")
        return EXIT_USAGE

    summary = driver.clean(codes, dry_run=args.dry_run)
    driver.report(summary, "Dry run" if args.dry_run else "Clean")
    return EXIT_OK if summary.ok else EXIT_FAILED


def _handle_detect(args: Namespace, driver: BuildDriver) -> int:
    console = driver.session.console
    try:
        detection = driver.detect(args.theme)
    except ThemeForgeError as exc:
        console.error(str(exc))
        return EXIT_FAILED

    console.write(f"Theme:   {detection.theme.code}")
    console.write(f"Path:    {detection.theme.path}")
    if detection.builder is None:
        console.write("Builder: none")
        console.error(f"No suitable builder found for theme {detection.theme.code}.")
        return EXIT_FAILED
    console.write(f"Builder: {detection.builder.name}")
    if len(detection.candidates) > 1:
        names = ", ".join(builder.name for builder in detection.candidates)
        console.warning(f"Several builders match this theme ({names}); using the first one.")
    return EXIT_OK


if __name__ == "__main__":  # pragma: no cover
    sys.exit(main())
