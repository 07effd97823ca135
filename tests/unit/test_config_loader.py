"""Tests for run config loading."""

from pathlib import Path

import pytest

from page_probe.config_loader import load_run_config
from page_probe.errors import ConfigError
from page_probe.models.definition import LoadCheckDefinition, StateProbeDefinition


class TestLoadRunConfig:
    """Tests for load_run_config function."""

    async def test_loads_valid_yaml(self, tmp_path: Path) -> None:
        """Loads and parses a valid config file."""
        path = tmp_path / "probe.yaml"
        path.write_text(
            """
base_url: "http://game.test/"
isolation: scenario
timeouts_ms:
  load: 2000
suites:
  - name: landing
    scenarios:
      - name: "landing page load"
        kind: load
        min_count: 2
  - name: pixi
    target_path: "speedy-maths-pixi.html"
    scenarios:
      - name: "game initialization"
        kind: state_probe
        ready_selector: canvas
        bindings:
          - key: pixiAppExists
            expression: app
            mode: exists
"""
        )

        config = await load_run_config(path)

        assert config.base_url == "http://game.test/"
        assert config.isolation == "scenario"
        assert config.timeout_ms_for("load") == 2000
        assert [s.name for s in config.suites] == ["landing", "pixi"]
        assert isinstance(config.suites[0].scenarios[0], LoadCheckDefinition)
        probe = config.suites[1].scenarios[0]
        assert isinstance(probe, StateProbeDefinition)
        assert probe.bindings[0].mode == "exists"

    async def test_applies_overrides(self, tmp_path: Path) -> None:
        """Overrides replace top-level values from the file."""
        path = tmp_path / "probe.yaml"
        path.write_text('base_url: "http://game.test/"\n')

        config = await load_run_config(path, {"base_url": "http://staging.test/"})

        assert config.base_url == "http://staging.test/"
        assert config.suites == []

    async def test_raises_for_missing_file(self, tmp_path: Path) -> None:
        """Raises FileNotFoundError for a missing file."""
        with pytest.raises(FileNotFoundError, match="Config file not found"):
            await load_run_config(tmp_path / "missing.yaml")

    async def test_raises_for_invalid_yaml(self, tmp_path: Path) -> None:
        """Raises ConfigError for malformed YAML."""
        path = tmp_path / "probe.yaml"
        path.write_text("invalid: yaml: content: [")

        with pytest.raises(ConfigError, match="Invalid YAML"):
            await load_run_config(path)

    async def test_raises_for_empty_file(self, tmp_path: Path) -> None:
        """Raises ConfigError for an empty file."""
        path = tmp_path / "probe.yaml"
        path.write_text("")

        with pytest.raises(ConfigError, match="Empty config file"):
            await load_run_config(path)

    async def test_raises_for_non_mapping(self, tmp_path: Path) -> None:
        """Raises ConfigError when the document is not a mapping."""
        path = tmp_path / "probe.yaml"
        path.write_text("- one\n- two\n")

        with pytest.raises(ConfigError, match="must contain a mapping"):
            await load_run_config(path)

    async def test_raises_for_invalid_schema(self, tmp_path: Path) -> None:
        """Raises ConfigError when validation fails."""
        path = tmp_path / "probe.yaml"
        path.write_text(
            """
base_url: "http://game.test/"
suites:
  - name: landing
    scenarios:
      - name: load
        kind: teleport
"""
        )

        with pytest.raises(ConfigError, match="Invalid run config schema"):
            await load_run_config(path)

    async def test_config_error_is_value_error(self, tmp_path: Path) -> None:
        """ConfigError can be handled as a ValueError."""
        path = tmp_path / "probe.yaml"
        path.write_text("")

        with pytest.raises(ValueError):
            await load_run_config(path)
