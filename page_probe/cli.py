"""CLI entry point for running browser scenario suites."""

import argparse
import asyncio
import json
import logging
import sys
from pathlib import Path
from typing import Any

from page_probe.catalog import build_suites
from page_probe.config_loader import load_run_config
from page_probe.drivers.loading import load_driver_manifest
from page_probe.errors import ConfigError, TargetUnreachableError
from page_probe.models.definition import RunConfig
from page_probe.models.report import Report
from page_probe.preflight import check_reachable
from page_probe.presets import speedy_maths_config
from page_probe.runner import Runner

STATUS_SYMBOLS = {
    "passed": "✓",
    "failed": "✗",
    "errored": "!",
    "timed_out": "⏱",
}

FAILING_STATUSES = frozenset({"failed", "errored", "timed_out"})

EXIT_OK = 0
EXIT_FAILURES = 1
EXIT_SETUP_ERROR = 2


def log_report_summary(log: logging.Logger, report: Report) -> None:
    """Log a formatted summary of scenario results."""
    log.info("=" * 80)
    log.info("Scenario Results Summary:")
    log.info("=" * 80)

    for result in report.results:
        symbol = STATUS_SYMBOLS.get(result.status, "?")
        log.info(
            "%s %s / %s: %s (%.0fms)",
            symbol,
            result.suite_name,
            result.scenario_name,
            result.status,
            result.duration_ms,
        )
        if caveats := result.data.get("caveats"):
            log.info("  Caveats: %s", "; ".join(caveats))
        if result.error is not None:
            log.info("  Error: %s: %s", result.error.type, result.error.message)

    log.info(
        "Totals: %s",
        ", ".join(f"{status}={count}" for status, count in report.summary.items()),
    )


def has_failures(report: Report) -> bool:
    """Whether any scenario failed, errored or timed out."""
    return any(report.summary.get(status, 0) for status in FAILING_STATUSES)


async def load_config(config_path: Path | None, base_url: str | None) -> RunConfig:
    """Load the run configuration, falling back to the built-in preset."""
    overrides: dict[str, Any] = {"base_url": base_url} if base_url else {}
    if config_path is None:
        return speedy_maths_config(**overrides)
    return await load_run_config(config_path, overrides)


async def run(
    driver_key: str,
    driver_config_json: str,
    config_path: Path | None = None,
    base_url: str | None = None,
    output_path: Path | None = None,
    skip_preflight: bool = False,
) -> int:
    """Run the configured suites and return an exit code."""
    log = logging.getLogger("page_probe")

    try:
        config = await load_config(config_path, base_url)
        log.info("Loading driver: %s", driver_key)
        manifest = load_driver_manifest(driver_key)
        driver_config = manifest.parse_config(driver_config_json)
    except (ConfigError, FileNotFoundError) as exc:
        log.error("Invalid configuration: %s", exc)
        return EXIT_SETUP_ERROR

    if not skip_preflight:
        try:
            await check_reachable(config.base_url)
        except TargetUnreachableError as exc:
            log.error("Preflight failed: %s", exc)
            return EXIT_SETUP_ERROR

    suites = build_suites(config)

    async with manifest.browser_factory(driver_config) as browser:
        runner = Runner(browser=browser)
        report = await runner.run(suites, config)

    log_report_summary(log, report)

    output = json.dumps(report.to_dict(), indent=2)
    if output_path is not None:
        output_path.parent.mkdir(parents=True, exist_ok=True)
        output_path.write_text(output + "\n", encoding="utf-8")
        log.info("Report written to %s", output_path)
    print(output)

    return EXIT_FAILURES if has_failures(report) else EXIT_OK


def main() -> None:
    """CLI entry point."""
    parser = argparse.ArgumentParser(
        description="Run browser scenario suites against a web application"
    )
    parser.add_argument(
        "--config",
        type=Path,
        default=None,
        help="YAML run configuration (defaults to the built-in Speedy Maths suites)",
    )
    parser.add_argument(
        "--base-url",
        default=None,
        help="Override the base URL of the application under test",
    )
    parser.add_argument(
        "--driver",
        default="playwright",
        help="Driver key (default: playwright)",
    )
    parser.add_argument(
        "--driver-config",
        default="{}",
        help="JSON configuration for the driver",
    )
    parser.add_argument(
        "--output",
        type=Path,
        default=None,
        help="Also write the JSON report to this file",
    )
    parser.add_argument(
        "--skip-preflight",
        action="store_true",
        help="Do not check that the base URL answers before launching a browser",
    )

    args = parser.parse_args()

    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        stream=sys.stderr,
    )

    exit_code = asyncio.run(
        run(
            driver_key=args.driver,
            driver_config_json=args.driver_config,
            config_path=args.config,
            base_url=args.base_url,
            output_path=args.output,
            skip_preflight=args.skip_preflight,
        )
    )
    sys.exit(exit_code)


if __name__ == "__main__":  # pragma: no cover
    main()
