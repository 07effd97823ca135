"""Manifest through which a browser driver plugs into the runner."""

from collections.abc import Callable
from contextlib import AbstractAsyncContextManager
from dataclasses import dataclass

from pydantic import BaseModel, ValidationError

from page_probe.drivers.base import BrowserProvider
from page_probe.errors import ConfigError


@dataclass(frozen=True, kw_only=True)
class DriverManifest[ConfigT: BaseModel]:
    """What a driver entry point resolves to.

    ``browser_factory`` owns the browser for the duration of a run and hands
    out pages through the yielded :class:`BrowserProvider`.
    """

    config_cls: type[ConfigT]
    browser_factory: Callable[[ConfigT], AbstractAsyncContextManager[BrowserProvider]]

    def parse_config(self, raw_json: str) -> ConfigT:
        """Validate driver options given as a JSON object.

        Raises:
            ConfigError: If the text is not JSON, not an object or fails validation

        """
        try:
            return self.config_cls.model_validate_json(raw_json)
        except ValidationError as exc:
            raise ConfigError(f"Invalid driver configuration: {exc}") from exc
