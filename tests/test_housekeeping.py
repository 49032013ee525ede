from __future__ import annotations

from pathlib import Path
import io
import os
import tempfile
import unittest
from unittest.mock import patch

from themeforge.console import Console
from themeforge.core.command_runner import RecordingCommandRunner
from themeforge.environment import HostEnvironment
from themeforge.housekeeping import (
    CacheInvalidator,
    DirectoryCleaner,
    GeneratedCleaner,
    PageCacheCleaner,
    PreprocessedCleaner,
    StaticAssetCleaner,
    StaticContentCleaner,
    SymlinkCleaner,
    TempCleaner,
    ThemeCleaner,
)

from support import make_session, write


class DirectoryCleanerTests(unittest.TestCase):
    def setUp(self) -> None:
        self.temp_dir = tempfile.TemporaryDirectory()
        self.root = Path(self.temp_dir.name).resolve()
        self.stderr = io.StringIO()
        self.console = Console(level="debug", stdout=io.StringIO(), stderr=self.stderr)
        self.environment = HostEnvironment(app_root=self.root, mode="developer")

    def tearDown(self) -> None:
        self.temp_dir.cleanup()

    def test_base_cleaner_needs_paths(self) -> None:
        with self.assertRaises(TypeError):
            DirectoryCleaner(self.console, self.environment)

    def test_missing_targets_are_a_no_op(self) -> None:
        cleaners = [
            StaticAssetCleaner(self.console, self.environment),
            PreprocessedCleaner(self.console, self.environment),
            PageCacheCleaner(self.console, self.environment),
            TempCleaner(self.console, self.environment),
            GeneratedCleaner(self.console, self.environment),
        ]

        for cleaner in cleaners:
            self.assertEqual(cleaner.clean("Acme/luma"), 0)
            self.assertEqual(cleaner.clean("Acme/luma"), 0)
        self.assertEqual(SymlinkCleaner(self.console).clean(self.root / "missing"), 0)
        self.assertEqual(list(self.root.iterdir()), [])

    def test_static_assets_removed_for_theme_only(self) -> None:
        write(self.root / "pub/static/frontend/Acme/luma/en_US/css/styles.css", "body {}")
        write(self.root / "pub/static/frontend/Acme/other/en_US/css/styles.css", "body {}")

        cleaned = StaticAssetCleaner(self.console, self.environment).clean("Acme/luma")

        self.assertEqual(cleaned, 1)
        self.assertFalse((self.root / "pub/static/frontend/Acme/luma").exists())
        self.assertTrue((self.root / "pub/static/frontend/Acme/other").exists())

    def test_dry_run_keeps_files(self) -> None:
        write(self.root / "var/view_preprocessed/css/frontend/Acme/luma/styles.css")
        write(self.root / "var/view_preprocessed/source/frontend/Acme/luma/styles.less")

        cleaned = PreprocessedCleaner(self.console, self.environment).clean("Acme/luma", dry_run=True)

        self.assertEqual(cleaned, 2)
        self.assertTrue((self.root / "var/view_preprocessed/css/frontend/Acme/luma").exists())

    def test_malformed_theme_code_is_ignored(self) -> None:
        write(self.root / "pub/static/frontend/Acme/luma/file.css")

        self.assertEqual(StaticAssetCleaner(self.console, self.environment).clean("luma"), 0)

    def test_generated_counts_each_directory(self) -> None:
        write(self.root / "generated/code/Magento/Foo.php")
        write(self.root / "generated/metadata/global.php")

        self.assertEqual(GeneratedCleaner(self.console, self.environment).clean(), 2)
        self.assertFalse((self.root / "generated/code").exists())

    def test_removal_errors_become_warnings(self) -> None:
        write(self.root / "var/page_cache/mage--a/entry")

        with patch("themeforge.housekeeping.shutil.rmtree", side_effect=PermissionError("denied")):
            cleaned = PageCacheCleaner(self.console, self.environment).clean()

        self.assertEqual(cleaned, 0)
        self.assertIn("Could not clean var/page_cache: denied", self.stderr.getvalue())


@unittest.skipIf(os.name == "nt", "symlinks need privileges on Windows")
class SymlinkCleanerTests(unittest.TestCase):
    def test_removes_only_symlinks(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            theme = Path(tmp)
            css = theme / "web" / "css"
            write(css / "styles.css", "body {}")
            write(theme / "source.css", "")
            (css / "linked.css").symlink_to(theme / "source.css")
            console = Console(level="debug", stdout=io.StringIO(), stderr=io.StringIO())

            removed = SymlinkCleaner(console).clean(theme)

            self.assertEqual(removed, 1)
            self.assertFalse((css / "linked.css").is_symlink())
            self.assertTrue((css / "styles.css").exists())
            self.assertTrue((theme / "source.css").exists())


class CacheInvalidatorTests(unittest.TestCase):
    def setUp(self) -> None:
        self.runner = RecordingCommandRunner()
        self.stderr = io.StringIO()
        self.console = Console(level="info", stdout=io.StringIO(), stderr=self.stderr)
        self.environment = HostEnvironment(app_root=Path("/srv/shop"))

    def test_cleans_configured_types(self) -> None:
        invalidator = CacheInvalidator(self.runner, self.console, self.environment, types=["layout"])

        self.assertEqual(invalidator.clean(), 1)
        self.assertEqual(self.runner.command_lines(), ["bin/magento cache:clean layout"])
        self.assertEqual(self.runner.commands[0].cwd, "/srv/shop")

    def test_failure_is_only_a_warning(self) -> None:
        self.runner.script(["bin/magento", "cache:clean"], returncode=1, stderr="DB down")
        invalidator = CacheInvalidator(self.runner, self.console, self.environment)

        self.assertEqual(invalidator.clean(), 0)
        self.assertIn("DB down", self.stderr.getvalue())

    def test_dry_run_records_nothing(self) -> None:
        invalidator = CacheInvalidator(self.runner, self.console, self.environment)

        self.assertEqual(invalidator.clean(dry_run=True), 4)
        self.assertEqual(self.runner.commands, [])


class StaticContentCleanerTests(unittest.TestCase):
    def setUp(self) -> None:
        self.temp_dir = tempfile.TemporaryDirectory()
        self.root = Path(self.temp_dir.name).resolve()
        write(self.root / "pub/static/frontend/Acme/luma/en_US/styles.css")
        write(self.root / "var/view_preprocessed/css/frontend/Acme/luma/styles.css")
        self.console = Console(level="none")

    def tearDown(self) -> None:
        self.temp_dir.cleanup()

    def test_cleans_in_developer_mode(self) -> None:
        cleaner = StaticContentCleaner(self.console, HostEnvironment(self.root, "developer"))

        self.assertEqual(cleaner.clean_if_needed("Acme/luma"), 2)
        self.assertFalse((self.root / "pub/static/frontend/Acme/luma").exists())

    def test_leaves_files_outside_developer_mode(self) -> None:
        cleaner = StaticContentCleaner(self.console, HostEnvironment(self.root, "production"))

        self.assertEqual(cleaner.clean_if_needed("Acme/luma"), 0)
        self.assertTrue((self.root / "pub/static/frontend/Acme/luma").exists())


class ThemeCleanerTests(unittest.TestCase):
    def test_global_directories_cleaned_once_per_session(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            root = Path(tmp).resolve()
            write(root / "pub/static/frontend/Acme/luma/a.css")
            write(root / "pub/static/frontend/Acme/blank/a.css")
            write(root / "var/page_cache/entry")
            write(root / "var/tmp/upload")
            write(root / "generated/code/Foo.php")
            harness = make_session(root)
            cleaner = ThemeCleaner(harness.session)

            first = cleaner.clean_theme("Acme/luma")
            write(root / "var/page_cache/entry")
            second = cleaner.clean_theme("Acme/blank")

            self.assertEqual(first, 4)
            self.assertEqual(second, 1)
            self.assertTrue((root / "var/page_cache/entry").exists())


if __name__ == "__main__":
    unittest.main()
