"""Load run configuration from YAML files."""

import asyncio
import logging
from pathlib import Path
from typing import Any

import yaml
from pydantic import ValidationError

from page_probe.errors import ConfigError
from page_probe.models.definition import RunConfig

log = logging.getLogger(__name__)


async def load_run_config(
    path: Path, overrides: dict[str, Any] | None = None
) -> RunConfig:
    """Load and validate a run configuration file.

    Args:
        path: Path to the YAML configuration
        overrides: Top-level keys replacing values from the file (e.g. base_url)

    Returns:
        The validated configuration

    Raises:
        FileNotFoundError: If the file does not exist
        ConfigError: If the file is empty, not valid YAML or fails validation

    """
    if not path.is_file():
        raise FileNotFoundError(f"Config file not found: {path}")

    text = await asyncio.to_thread(path.read_text, encoding="utf-8")

    try:
        raw = yaml.safe_load(text)
    except yaml.YAMLError as exc:
        raise ConfigError(f"Invalid YAML in {path}: {exc}") from exc

    if raw is None:
        raise ConfigError(f"Empty config file: {path}")
    if not isinstance(raw, dict):
        raise ConfigError(f"Config file {path} must contain a mapping")

    raw.update(overrides or {})

    try:
        config = RunConfig.model_validate(raw)
    except ValidationError as exc:
        raise ConfigError(f"Invalid run config schema in {path}: {exc}") from exc

    log.info("Loaded %d suite(s) from %s", len(config.suites), path)
    return config
