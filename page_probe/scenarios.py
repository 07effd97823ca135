"""Scenario bodies for the supported scenario kinds.

Each factory returns a body coroutine function taking a page and a
:class:`ScenarioContext`. Bodies record what they have observed so far on the
context, so the runner can report partial data for a body that errors.
"""

import asyncio
import logging
from collections.abc import Mapping, Sequence
from typing import Any

from page_probe.drivers.base import PageDriver
from page_probe.errors import expect
from page_probe.models.definition import BindingSpec, ViewportSpec
from page_probe.models.suite import ScenarioBody, ScenarioContext
from page_probe.page_state import LayoutFacts, canvas_facts, memory_usage, read_bindings
from page_probe.timing import pause, race

log = logging.getLogger(__name__)


def frames_per_second(frame_count: int, elapsed_ms: float) -> float:
    """Frame rate over an observation window."""
    if elapsed_ms <= 0:
        return 0.0
    return frame_count / (elapsed_ms / 1000)


def wait_until_ready(body: ScenarioBody, selector: str) -> ScenarioBody:
    """Wrap ``body`` so it only starts once ``selector`` has appeared."""

    async def ready_body(page: PageDriver, ctx: ScenarioContext) -> Mapping[str, Any]:
        await page.wait_for(selector, ctx.timeout_ms)
        return await body(page, ctx)

    return ready_body


def load_check(selector: str, count_selector: str, min_count: int = 0) -> ScenarioBody:
    """Wait for ``selector``, read its text and count ``count_selector`` matches."""

    async def body(page: PageDriver, ctx: ScenarioContext) -> Mapping[str, Any]:
        await page.wait_for(selector, ctx.timeout_ms)

        element = await page.query(selector)
        title = await page.text(element) if element is not None else ""
        ctx.record("title", title)

        matches = await page.query_all(count_selector)
        ctx.record("gameCount", len(matches))
        log.info("Found %d element(s) matching %s", len(matches), count_selector)

        expect(
            len(matches) >= min_count,
            f"Expected at least {min_count} element(s) matching {count_selector!r}, "
            f"found {len(matches)}",
        )
        return {"title": title, "gameCount": len(matches)}

    return body


def navigation_check(links: Sequence[str]) -> ScenarioBody:
    """Follow each link selector from the suite page; absent links are noted."""

    async def body(page: PageDriver, ctx: ScenarioContext) -> Mapping[str, Any]:
        visits: list[dict[str, Any]] = []
        for selector in links:
            await page.navigate(ctx.target_url)
            control = await page.query(selector)
            if control is None:
                log.info("Navigation control %s not found", selector)
                ctx.note(f"control not found: {selector}")
                visits.append({"selector": selector, "found": False})
            else:
                await page.click(control, expect_navigation=True)
                url = await page.current_url()
                log.info("Navigated via %s to %s", selector, url)
                visits.append({"selector": selector, "found": True, "url": url})
            ctx.record("links", list(visits))
        return {"links": visits}

    return body


def state_probe(
    bindings: Sequence[BindingSpec],
    elements: Mapping[str, str] | None = None,
    canvas_selector: str | None = None,
) -> ScenarioBody:
    """Snapshot canvas facts, element presence and global bindings."""

    async def body(page: PageDriver, ctx: ScenarioContext) -> Mapping[str, Any]:
        data: dict[str, Any] = {}

        if canvas_selector is not None:
            data.update(await canvas_facts(page, canvas_selector))
            ctx.partial.update(data)

        for key, selector in (elements or {}).items():
            data[key] = await page.query(selector) is not None
            ctx.record(key, data[key])

        values = await read_bindings(page, (b.expression for b in bindings))
        for binding in bindings:
            value = values[binding.expression]
            if binding.mode == "exists":
                data[binding.key] = value.present
            else:
                data[binding.key] = value.or_default(binding.default)

        log.info("Page state: %s", data)
        return data

    return body


def input_sequence(
    keys: Sequence[str], pause_ms: float, requires: str | None = None
) -> ScenarioBody:
    """Press ``keys`` in order with a fixed pause between presses.

    When ``requires`` names a global binding that is absent, nothing is
    dispatched and the scenario reports ``skipped``.
    """

    async def body(page: PageDriver, ctx: ScenarioContext) -> Mapping[str, Any]:
        data: dict[str, Any] = {}
        if requires is not None:
            present = (await read_bindings(page, [requires]))[requires].present
            data["requires"] = requires
            data["preconditionMet"] = present
            if not present:
                ctx.note(f"binding not present: {requires}")
                return {**data, "skipped": True, "dispatched": []}

        dispatched: list[str] = []
        for index, key in enumerate(keys):
            if index:
                await pause(pause_ms)
            await page.press_key(key)
            dispatched.append(key)
            ctx.record("dispatched", list(dispatched))

        log.info("Dispatched keys: %s", ", ".join(dispatched))
        return {**data, "skipped": False, "dispatched": dispatched}

    return body


def frame_rate_sample(window_ms: float, target_frames: int) -> ScenarioBody:
    """Count animation frames until ``target_frames`` or the window ends.

    Running out of window is a measurement outcome, not a failure: the
    result carries ``timeout: True`` and the rate over the full window.
    """

    async def body(page: PageDriver, ctx: ScenarioContext) -> Mapping[str, Any]:
        counter = await page.start_frame_counter()

        async def count_frames() -> int:
            await counter.wait_for(target_frames)
            return await counter.read()

        try:
            outcome = await race(count_frames(), window_ms / 1000)
            if outcome.timed_out:
                frame_count = await counter.read()
            else:
                frame_count = outcome.value or 0
        finally:
            await counter.stop()

        data = {
            "frameCount": frame_count,
            "elapsedMs": round(outcome.elapsed_ms, 1),
            "fps": frames_per_second(frame_count, outcome.elapsed_ms),
            "timeout": outcome.timed_out,
        }
        log.info("Frame rate sample: %s", data)
        return data

    return body


def memory_sample(window_ms: float) -> ScenarioBody:
    """Let the page run for a fixed window, then read performance counters."""

    async def body(page: PageDriver, ctx: ScenarioContext) -> Mapping[str, Any]:
        loop = asyncio.get_running_loop()
        start = loop.time()
        await pause(window_ms)

        metrics = dict(await page.metrics())
        ctx.record("metrics", metrics)
        usage = await memory_usage(page)

        return {
            "durationMs": round((loop.time() - start) * 1000, 1),
            "metrics": metrics,
            "memoryUsage": usage,
        }

    return body


def responsive_sweep(
    viewports: Sequence[ViewportSpec] | None,
    card_selector: str,
    button_selector: str,
    screenshot_prefix: str,
) -> ScenarioBody:
    """Screenshot and measure the suite page at each viewport in turn."""

    async def body(page: PageDriver, ctx: ScenarioContext) -> Mapping[str, Any]:
        sweep: list[dict[str, Any]] = []
        for viewport in viewports or ctx.config.viewport_sweep:
            await page.set_viewport(viewport.width, viewport.height)
            await page.navigate(ctx.target_url)

            path = ctx.config.screenshot_dir / f"{screenshot_prefix}-{viewport.slug}.png"
            screenshot = await page.screenshot(path)

            facts = await LayoutFacts.measure(page, card_selector, button_selector)
            sweep.append(
                {
                    "viewport": viewport.label,
                    "width": viewport.width,
                    "height": viewport.height,
                    "gameCardsVisible": facts.card_count > 0,
                    "buttonsClickable": facts.button_count > 0,
                    "noHorizontalScroll": facts.no_horizontal_scroll,
                    "screenshot": screenshot,
                }
            )
            ctx.record("viewports", list(sweep))
            log.info("Viewport %s: %s", viewport.label, sweep[-1])

        return {"viewports": sweep}

    return body
