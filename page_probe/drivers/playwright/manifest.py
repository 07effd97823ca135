"""Playwright driver manifest."""

from page_probe.drivers.manifest import DriverManifest
from page_probe.drivers.playwright.config import PlaywrightConfig
from page_probe.drivers.playwright.driver import PlaywrightBrowser

playwright_manifest = DriverManifest(
    config_cls=PlaywrightConfig,
    browser_factory=PlaywrightBrowser.from_config,
)
