from __future__ import annotations

from contextlib import redirect_stderr, redirect_stdout
from pathlib import Path
import io
import tempfile
import textwrap
import unittest
from unittest.mock import patch

from themeforge import cli
from themeforge.core.command_runner import RecordingCommandRunner

from support import make_hyva_theme, make_standard_theme, write


class CliTestCase(unittest.TestCase):
    def setUp(self) -> None:
        self.temp_dir = tempfile.TemporaryDirectory()
        self.root = Path(self.temp_dir.name).resolve()
        write(
            self.root / "themeforge.toml",
            textwrap.dedent(
                """
                [global]
                mode = "production"
                """
            ),
        )
        self.runner = RecordingCommandRunner()
        patcher = patch("themeforge.cli.SubprocessCommandRunner", return_value=self.runner)
        patcher.start()
        self.addCleanup(patcher.stop)

    def tearDown(self) -> None:
        self.temp_dir.cleanup()

    def _main(self, *argv: str) -> tuple[int, str, str]:
        stdout = io.StringIO()
        stderr = io.StringIO()
        with redirect_stdout(stdout), redirect_stderr(stderr):
            code = cli.main(["-C", str(self.root), *argv])
        return code, stdout.getvalue(), stderr.getvalue()


class BuildCommandTests(CliTestCase):
    def test_build_hyva_theme(self) -> None:
        make_hyva_theme(self.root, "Hyva/default")

        code, stdout, _ = self._main("-y", "build", "Hyva/default")

        self.assertEqual(code, 0)
        self.assertIn("npm run build --quiet", self.runner.command_lines())
        self.assertIn("[ok] Hyva/default: Built successfully using HyvaThemes builder", stdout)

    def test_unknown_theme_fails(self) -> None:
        make_hyva_theme(self.root, "Hyva/default")

        code, stdout, stderr = self._main("build", "Hyva/default", "Vendor/Missing")

        self.assertEqual(code, 1)
        self.assertIn("Theme Vendor/Missing is not installed.", stderr)
        self.assertIn("[FAILED] Vendor/Missing", stdout)

    def test_log_none_silences_output(self) -> None:
        make_hyva_theme(self.root, "Hyva/default")

        code, stdout, stderr = self._main("--log", "none", "build", "Hyva/default")

        self.assertEqual(code, 0)
        self.assertEqual(stdout, "")
        self.assertEqual(stderr, "")


class ConfigurationErrorTests(CliTestCase):
    def test_invalid_configuration_exits_with_usage_error(self) -> None:
        write(self.root / "themeforge.toml", "[deploy]\njobs = 4\n")

        code, _, stderr = self._main("build", "Hyva/default")

        self.assertEqual(code, 2)
        self.assertIn("Unknown configuration section(s): deploy", stderr)
        self.assertEqual(self.runner.commands, [])

    def test_missing_application_root(self) -> None:
        code = cli.main(["-C", str(self.root / "missing"), "detect", "Acme/luma"])

        self.assertEqual(code, 2)


class DetectCommandTests(CliTestCase):
    def test_detect_reports_builder(self) -> None:
        make_standard_theme(self.root, "Acme/luma")

        code, stdout, _ = self._main("detect", "Acme/luma")

        self.assertEqual(code, 0)
        self.assertIn("Builder: MagentoStandard", stdout)
        self.assertEqual(self.runner.commands, [])

    def test_detect_without_builder(self) -> None:
        (self.root / "odd").mkdir()
        write(
            self.root / "themeforge.toml",
            '[global]\nmode = "production"\n\n[themes]\n"Vendor/NotATheme" = "odd"\n',
        )

        code, stdout, _ = self._main("detect", "Vendor/NotATheme")

        self.assertEqual(code, 1)
        self.assertIn("Builder: none", stdout)


class CleanCommandTests(CliTestCase):
    def test_dry_run_keeps_files(self) -> None:
        make_standard_theme(self.root, "Acme/luma")
        write(self.root / "pub/static/frontend/Acme/luma/en_US/styles.css")

        code, stdout, _ = self._main("clean", "--dry-run", "Acme/luma")

        self.assertEqual(code, 0)
        self.assertIn("Would clean 1 directory", stdout)
        self.assertTrue((self.root / "pub/static/frontend/Acme/luma").exists())

    def test_clean_all_themes(self) -> None:
        make_standard_theme(self.root, "Acme/luma")
        make_hyva_theme(self.root, "Hyva/default")
        write(self.root / "pub/static/frontend/Acme/luma/en_US/styles.css")
        write(self.root / "pub/static/frontend/Hyva/default/en_US/styles.css")
        write(self.root / "var/page_cache/entry")

        code, stdout, _ = self._main("clean", "--all")

        self.assertEqual(code, 0)
        self.assertIn("Cleaning all 2 themes", stdout)
        self.assertFalse((self.root / "pub/static/frontend").joinpath("Acme", "luma").exists())
        self.assertFalse((self.root / "pub/static/frontend/Hyva/default").exists())
        self.assertFalse((self.root / "var/page_cache").exists())

    def test_clean_requires_themes(self) -> None:
        code, _, stderr = self._main("clean")

        self.assertEqual(code, 2)
        self.assertIn("No themes given", stderr)


if __name__ == "__main__":
    unittest.main()
