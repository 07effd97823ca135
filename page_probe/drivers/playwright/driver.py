"""Playwright driver implementation."""

import logging
import re
import uuid
from collections.abc import AsyncGenerator, Iterator, Mapping, Sequence
from contextlib import asynccontextmanager, contextmanager
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from playwright.async_api import Browser, ElementHandle, Page, async_playwright
from playwright.async_api import Error as PlaywrightError
from playwright.async_api import TimeoutError as PlaywrightTimeoutError

from page_probe.drivers.base import BrowserProvider, FrameCounter, PageDriver
from page_probe.drivers.playwright.config import PlaywrightConfig
from page_probe.errors import DriverError, NavigationError, SessionLostError

log = logging.getLogger(__name__)

# Page crashes and closed targets leave the handle unusable
SESSION_LOST_PATTERN = re.compile(
    r"(Target( page, context or browser)? (has been )?closed|"
    r"Browser has been closed|Connection closed|"
    r"(page|target) crashed)",
    re.IGNORECASE,
)

INSTALL_FRAME_COUNTER = """key => {
  const state = { count: 0, active: true };
  const tick = () => {
    if (!state.active) return;
    state.count += 1;
    requestAnimationFrame(tick);
  };
  requestAnimationFrame(tick);
  window[key] = state;
}"""

READ_FRAME_COUNTER = "key => (window[key] ? window[key].count : 0)"

FRAME_COUNT_REACHED = "([key, count]) => !!window[key] && window[key].count >= count"

STOP_FRAME_COUNTER = "key => { if (window[key]) { window[key].active = false; } }"


@contextmanager
def translate_errors(action: str) -> Iterator[None]:
    """Map Playwright exceptions to the driver exception taxonomy."""
    try:
        yield
    except PlaywrightTimeoutError as exc:
        raise TimeoutError(f"{action} timed out: {exc.message}") from exc
    except PlaywrightError as exc:
        if SESSION_LOST_PATTERN.search(exc.message):
            raise SessionLostError(f"{action} failed: {exc.message}") from exc
        raise DriverError(f"{action} failed: {exc.message}") from exc


@dataclass(kw_only=True)
class PlaywrightFrameCounter(FrameCounter):
    """Frame counter backed by a requestAnimationFrame loop in the page."""

    page: Page = field(repr=False)
    key: str

    async def wait_for(self, count: int) -> None:
        """Wait until the in-page counter reaches ``count``."""
        with translate_errors("Waiting for frames"):
            await self.page.wait_for_function(
                FRAME_COUNT_REACHED, arg=[self.key, count], timeout=0
            )

    async def read(self) -> int:
        """Read the in-page counter."""
        with translate_errors("Reading frame counter"):
            return int(await self.page.evaluate(READ_FRAME_COUNTER, self.key))

    async def stop(self) -> None:
        """Stop the requestAnimationFrame loop."""
        with translate_errors("Stopping frame counter"):
            await self.page.evaluate(STOP_FRAME_COUNTER, self.key)


@dataclass(kw_only=True)
class PlaywrightPage(PageDriver):
    """Page handle backed by a Playwright page."""

    page: Page = field(repr=False)
    config: PlaywrightConfig

    async def navigate(self, url: str) -> None:
        """Navigate and fail on transport errors or HTTP error statuses."""
        log.debug("Navigating to %s", url)
        try:
            response = await self.page.goto(
                url, timeout=self.config.navigation_timeout_ms
            )
        except PlaywrightError as exc:
            if SESSION_LOST_PATTERN.search(exc.message):
                raise SessionLostError(f"Navigation failed: {exc.message}") from exc
            raise NavigationError(f"Failed to load {url}: {exc.message}") from exc

        if response is not None and response.status >= 400:
            raise NavigationError(f"Failed to load {url}: HTTP {response.status}")

    async def wait_for(self, selector: str, timeout_ms: float) -> None:
        """Wait for the selector to be attached to the DOM."""
        with translate_errors(f"Waiting for {selector!r}"):
            await self.page.wait_for_selector(
                selector, state="attached", timeout=timeout_ms
            )

    async def evaluate(self, script: str, arg: Any = None) -> Any:
        """Evaluate a script in page context."""
        with translate_errors("Script evaluation"):
            return await self.page.evaluate(script, arg)

    async def query(self, selector: str) -> ElementHandle | None:
        """Return the first match of the selector."""
        with translate_errors(f"Query {selector!r}"):
            return await self.page.query_selector(selector)

    async def query_all(self, selector: str) -> Sequence[ElementHandle]:
        """Return all matches of the selector."""
        with translate_errors(f"Query {selector!r}"):
            return await self.page.query_selector_all(selector)

    async def text(self, element: ElementHandle) -> str:
        """Return the element's text content."""
        with translate_errors("Reading text"):
            return await element.text_content() or ""

    async def click(
        self, element: ElementHandle, *, expect_navigation: bool = False
    ) -> None:
        """Click the element, waiting for the triggered navigation if requested."""
        with translate_errors("Click"):
            if expect_navigation:
                async with self.page.expect_navigation(
                    timeout=self.config.navigation_timeout_ms
                ):
                    await element.click()
            else:
                await element.click()

    async def press_key(self, key: str) -> None:
        """Press a key on the page keyboard."""
        with translate_errors(f"Pressing {key}"):
            await self.page.keyboard.press(key)

    async def set_viewport(self, width: int, height: int) -> None:
        """Resize the viewport."""
        with translate_errors("Setting viewport"):
            await self.page.set_viewport_size({"width": width, "height": height})

    async def screenshot(self, path: Path) -> str:
        """Write a PNG screenshot and return its path."""
        path.parent.mkdir(parents=True, exist_ok=True)
        with translate_errors("Screenshot"):
            await self.page.screenshot(path=str(path))
        return str(path)

    async def metrics(self) -> Mapping[str, float]:
        """Read Chrome DevTools performance metrics.

        Only Chromium exposes these counters; other browsers report none.
        """
        if self.config.browser != "chromium":
            log.info("Performance metrics unavailable on %s", self.config.browser)
            return {}

        with translate_errors("Reading metrics"):
            session = await self.page.context.new_cdp_session(self.page)
            try:
                await session.send("Performance.enable")
                response = await session.send("Performance.getMetrics")
            finally:
                await session.detach()

        return {item["name"]: item["value"] for item in response["metrics"]}

    async def current_url(self) -> str:
        """Return the page URL."""
        return self.page.url

    async def start_frame_counter(self) -> PlaywrightFrameCounter:
        """Install a requestAnimationFrame counting loop in the page."""
        key = f"__pageProbeFrames_{uuid.uuid4().hex}"
        with translate_errors("Starting frame counter"):
            await self.page.evaluate(INSTALL_FRAME_COUNTER, key)
        return PlaywrightFrameCounter(page=self.page, key=key)


@dataclass(frozen=True, kw_only=True)
class PlaywrightBrowser(BrowserProvider):
    """Browser provider opening one browser context per page."""

    config: PlaywrightConfig
    browser: Browser = field(repr=False)

    @classmethod
    @asynccontextmanager
    async def from_config(
        cls, config: PlaywrightConfig
    ) -> AsyncGenerator["PlaywrightBrowser", None]:
        """Create provider with managed browser lifecycle."""
        async with async_playwright() as playwright:
            launcher = getattr(playwright, config.browser)
            if config.cdp_endpoint:
                log.info("Connecting to browser at %s", config.cdp_endpoint)
                browser = await launcher.connect_over_cdp(config.cdp_endpoint)
            else:
                log.info(
                    "Launching %s (headless=%s)", config.browser, config.headless
                )
                browser = await launcher.launch(headless=config.headless)
            try:
                yield cls(config=config, browser=browser)
            finally:
                await browser.close()

    @asynccontextmanager
    async def open_page(self) -> AsyncGenerator[PlaywrightPage, None]:
        """Open a page in a fresh browser context."""
        with translate_errors("Opening page"):
            context = await self.browser.new_context(
                viewport={
                    "width": self.config.viewport_width,
                    "height": self.config.viewport_height,
                }
            )
        try:
            with translate_errors("Opening page"):
                page = await context.new_page()
            yield PlaywrightPage(page=page, config=self.config)
        finally:
            try:
                await context.close()
            except PlaywrightError as exc:
                log.warning("Failed to close browser context: %s", exc.message)
