"""Tests for CLI module."""

import json
import logging
from pathlib import Path
from unittest.mock import AsyncMock, Mock, patch

import pytest

from page_probe.cli import (
    EXIT_FAILURES,
    EXIT_OK,
    EXIT_SETUP_ERROR,
    has_failures,
    load_config,
    log_report_summary,
    main,
    run,
)
from page_probe.errors import TargetUnreachableError
from page_probe.models.report import Report, ReportBuilder
from page_probe.models.result import ScenarioError, ScenarioResult
from page_probe.presets import SPEEDY_MATHS_URL
from page_probe.testing.factories import ScenarioResultFactory


def make_report(*results: ScenarioResult) -> Report:
    """Build a report from results."""
    builder = ReportBuilder()
    builder.extend(results)
    return builder.finalize()


def test_log_report_summary_passed(caplog: pytest.LogCaptureFixture) -> None:
    """Logs passed results with checkmark symbol."""
    report = make_report(
        ScenarioResult(
            suite_name="landing",
            scenario_name="load",
            status="passed",
            duration_ms=120.4,
        )
    )

    with caplog.at_level(logging.INFO):
        log_report_summary(logging.getLogger(), report)

    assert "Scenario Results Summary:" in caplog.text
    assert "✓ landing / load: passed (120ms)" in caplog.text
    assert "Totals: passed=1, failed=0, timed_out=0, errored=0" in caplog.text


def test_log_report_summary_error(caplog: pytest.LogCaptureFixture) -> None:
    """Logs the error of an errored result."""
    report = make_report(
        ScenarioResult(
            suite_name="pixi",
            scenario_name="controls",
            status="errored",
            duration_ms=5.0,
            error=ScenarioError(type="DriverError", message="Click failed"),
        )
    )

    with caplog.at_level(logging.INFO):
        log_report_summary(logging.getLogger(), report)

    assert "! pixi / controls: errored (5ms)" in caplog.text
    assert "Error: DriverError: Click failed" in caplog.text


def test_log_report_summary_caveats(caplog: pytest.LogCaptureFixture) -> None:
    """Logs caveats of degraded passes."""
    report = make_report(
        ScenarioResult(
            suite_name="landing",
            scenario_name="navigation",
            status="passed",
            duration_ms=1.0,
            data={"caveats": ["control not found: a.play"]},
        )
    )

    with caplog.at_level(logging.INFO):
        log_report_summary(logging.getLogger(), report)

    assert "Caveats: control not found: a.play" in caplog.text


def test_log_report_summary_timeout(caplog: pytest.LogCaptureFixture) -> None:
    """Logs timed out results with timer symbol."""
    report = make_report(
        ScenarioResult(
            suite_name="canvas",
            scenario_name="loop",
            status="timed_out",
            duration_ms=10000.0,
        )
    )

    with caplog.at_level(logging.INFO):
        log_report_summary(logging.getLogger(), report)

    assert "⏱ canvas / loop: timed_out (10000ms)" in caplog.text


@pytest.mark.parametrize(
    ("status", "expected"),
    [("passed", False), ("failed", True), ("timed_out", True), ("errored", True)],
)
def test_has_failures(status: str, expected: bool) -> None:
    """Anything but a pass counts as a failure."""
    report = make_report(ScenarioResultFactory.build(status=status))

    assert has_failures(report) is expected


def test_has_failures_empty_report() -> None:
    """An empty run has no failures."""
    assert has_failures(make_report()) is False


class TestLoadConfig:
    """Tests for load_config function."""

    async def test_uses_preset_without_path(self) -> None:
        """Falls back to the built-in suites."""
        config = await load_config(None, None)

        assert config.base_url == SPEEDY_MATHS_URL
        assert len(config.suites) == 4

    async def test_base_url_overrides_preset(self) -> None:
        """Applies the base URL to the preset."""
        config = await load_config(None, "http://game.test/")

        assert config.base_url == "http://game.test/"

    async def test_loads_file(self, tmp_path: Path) -> None:
        """Loads the given file with the base URL override."""
        path = tmp_path / "probe.yaml"
        path.write_text('base_url: "http://file.test/"\n')

        config = await load_config(path, "http://game.test/")

        assert config.base_url == "http://game.test/"


class TestRun:
    """Tests for run function."""

    @pytest.fixture
    def mock_browser_cm(self) -> AsyncMock:
        """Async context manager yielding a browser."""
        cm = AsyncMock()
        cm.__aenter__.return_value = Mock()
        cm.__aexit__.return_value = None
        return cm

    @pytest.fixture
    def mock_manifest(self, mock_browser_cm: AsyncMock) -> Mock:
        """Driver manifest creating the mock browser."""
        manifest = Mock()
        manifest.parse_config = Mock(return_value=Mock())
        manifest.browser_factory = Mock(return_value=mock_browser_cm)
        return manifest

    async def run_with(
        self, mock_manifest: Mock, report: Report, output_path: Path | None = None
    ) -> int:
        """Run the CLI with patched driver loading, preflight and runner."""
        with (
            patch(
                "page_probe.cli.load_driver_manifest", return_value=mock_manifest
            ),
            patch(
                "page_probe.cli.check_reachable",
                new_callable=AsyncMock,
                return_value=200,
            ),
            patch("page_probe.cli.Runner") as mock_runner_cls,
        ):
            mock_runner = Mock()
            mock_runner.run = AsyncMock(return_value=report)
            mock_runner_cls.return_value = mock_runner

            return await run(
                driver_key="playwright",
                driver_config_json='{"headless": true}',
                base_url="http://game.test/",
                output_path=output_path,
            )

    async def test_returns_zero_when_all_pass(
        self, mock_manifest: Mock, capsys: pytest.CaptureFixture[str]
    ) -> None:
        """Returns 0 and prints the report when every scenario passes."""
        report = make_report(ScenarioResultFactory.build(status="passed"))

        exit_code = await self.run_with(mock_manifest, report)

        assert exit_code == EXIT_OK
        output = json.loads(capsys.readouterr().out)
        assert output["total"] == 1
        assert output["summary"]["passed"] == 1
        mock_manifest.parse_config.assert_called_once_with('{"headless": true}')

    async def test_returns_one_when_a_scenario_fails(self, mock_manifest: Mock) -> None:
        """Returns 1 when any scenario does not pass."""
        report = make_report(
            ScenarioResultFactory.build(status="passed"),
            ScenarioResultFactory.build(status="timed_out"),
        )

        exit_code = await self.run_with(mock_manifest, report)

        assert exit_code == EXIT_FAILURES

    async def test_writes_report_file(self, mock_manifest: Mock, tmp_path: Path) -> None:
        """Writes the JSON report to the output path."""
        report = make_report(ScenarioResultFactory.build(status="passed"))
        output_path = tmp_path / "out" / "report.json"

        await self.run_with(mock_manifest, report, output_path=output_path)

        assert json.loads(output_path.read_text())["total"] == 1

    async def test_returns_two_for_unknown_driver(self) -> None:
        """Returns 2 when the driver cannot be loaded."""
        exit_code = await run(driver_key="nonexistent", driver_config_json="{}")

        assert exit_code == EXIT_SETUP_ERROR

    async def test_returns_two_for_invalid_driver_config(self) -> None:
        """Returns 2 when the driver configuration is invalid."""
        exit_code = await run(
            driver_key="playwright", driver_config_json='{"browser": "netscape"}'
        )

        assert exit_code == EXIT_SETUP_ERROR

    async def test_returns_two_for_malformed_json(self) -> None:
        """Returns 2 when the driver configuration is not JSON."""
        exit_code = await run(driver_key="playwright", driver_config_json="{")

        assert exit_code == EXIT_SETUP_ERROR

    @pytest.mark.parametrize("driver_config_json", ["[]", '"chromium"', "1"])
    async def test_returns_two_for_non_object_driver_config(
        self, driver_config_json: str
    ) -> None:
        """Returns 2 when the driver configuration is JSON but not an object."""
        exit_code = await run(
            driver_key="playwright", driver_config_json=driver_config_json
        )

        assert exit_code == EXIT_SETUP_ERROR

    async def test_returns_two_for_missing_config(self, tmp_path: Path) -> None:
        """Returns 2 when the config file does not exist."""
        exit_code = await run(
            driver_key="playwright",
            driver_config_json="{}",
            config_path=tmp_path / "missing.yaml",
        )

        assert exit_code == EXIT_SETUP_ERROR

    async def test_returns_two_when_target_unreachable(
        self, mock_manifest: Mock
    ) -> None:
        """Returns 2 without launching a browser when preflight fails."""
        with (
            patch(
                "page_probe.cli.load_driver_manifest", return_value=mock_manifest
            ),
            patch(
                "page_probe.cli.check_reachable",
                new_callable=AsyncMock,
                side_effect=TargetUnreachableError("Cannot reach http://game.test/"),
            ),
        ):
            exit_code = await run(
                driver_key="playwright",
                driver_config_json="{}",
                base_url="http://game.test/",
            )

        assert exit_code == EXIT_SETUP_ERROR
        mock_manifest.browser_factory.assert_not_called()

    async def test_skip_preflight(self, mock_manifest: Mock) -> None:
        """Does not check reachability when asked to skip it."""
        report = make_report()

        with (
            patch(
                "page_probe.cli.load_driver_manifest", return_value=mock_manifest
            ),
            patch(
                "page_probe.cli.check_reachable", new_callable=AsyncMock
            ) as mock_check,
            patch("page_probe.cli.Runner") as mock_runner_cls,
        ):
            mock_runner_cls.return_value.run = AsyncMock(return_value=report)

            exit_code = await run(
                driver_key="playwright",
                driver_config_json="{}",
                skip_preflight=True,
            )

        assert exit_code == EXIT_OK
        mock_check.assert_not_called()


def test_main_passes_arguments_to_run() -> None:
    """Parses arguments and exits with the run's exit code."""
    argv = [
        "page-probe",
        "--base-url",
        "http://game.test/",
        "--driver-config",
        '{"browser": "firefox"}',
        "--skip-preflight",
    ]

    with (
        patch("sys.argv", argv),
        patch("page_probe.cli.run", new_callable=AsyncMock, return_value=1) as mock_run,
        pytest.raises(SystemExit) as exc_info,
    ):
        main()

    assert exc_info.value.code == 1
    mock_run.assert_called_once_with(
        driver_key="playwright",
        driver_config_json='{"browser": "firefox"}',
        config_path=None,
        base_url="http://game.test/",
        output_path=None,
        skip_preflight=True,
    )
