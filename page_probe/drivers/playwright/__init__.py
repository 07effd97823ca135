"""Playwright driver module."""

from page_probe.drivers.playwright.config import PlaywrightConfig
from page_probe.drivers.playwright.driver import PlaywrightBrowser, PlaywrightPage
from page_probe.drivers.playwright.manifest import playwright_manifest

__all__ = ["PlaywrightBrowser", "PlaywrightConfig", "PlaywrightPage", "playwright_manifest"]
