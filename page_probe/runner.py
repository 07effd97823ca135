"""Runner coordinating scenario execution against browser pages."""

import asyncio
import logging
from collections.abc import Callable, Mapping, Sequence
from contextlib import AsyncExitStack
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any

from page_probe.drivers.base import BrowserProvider, PageDriver
from page_probe.errors import SessionLostError
from page_probe.models.definition import RunConfig
from page_probe.models.report import Report, ReportBuilder, utcnow
from page_probe.models.result import ScenarioError, ScenarioResult, ScenarioStatus
from page_probe.models.suite import Scenario, ScenarioContext, Suite
from page_probe.timing import race

log = logging.getLogger(__name__)

SESSION_UNAVAILABLE = "session unavailable"


@dataclass(kw_only=True)
class PageSlot:
    """Holds the page currently owned by a suite execution."""

    browser: BrowserProvider
    page: PageDriver | None = None
    _stack: AsyncExitStack | None = field(default=None, repr=False)

    async def acquire(self) -> PageDriver | None:
        """Close the current page, if any, and open a fresh one.

        Returns None when no page can be opened.
        """
        await self.release()
        stack = AsyncExitStack()
        try:
            page = await stack.enter_async_context(self.browser.open_page())
        except Exception:
            log.exception("Failed to open a browser page")
            await stack.aclose()
            return None
        self.page, self._stack = page, stack
        return page

    async def release(self) -> None:
        """Close the current page."""
        stack, self._stack, self.page = self._stack, None, None
        if stack is None:
            return
        try:
            await stack.aclose()
        except Exception:
            log.warning("Failed to close browser page", exc_info=True)


@dataclass(frozen=True, kw_only=True)
class Runner:
    """Runs suites against pages opened by a browser provider."""

    browser: BrowserProvider
    clock: Callable[[], datetime] = utcnow

    async def run(self, suites: Sequence[Suite], config: RunConfig) -> Report:
        """Run every suite and assemble the report.

        Suites run one after another unless ``config.concurrent_suites`` is
        set, in which case each suite runs on its own page concurrently.
        """
        builder = ReportBuilder(clock=self.clock)
        if not suites:
            log.info("No suites to run")
            return builder.finalize()

        log.info("Running %d suite(s) against %s", len(suites), config.base_url)

        if config.concurrent_suites:
            await asyncio.gather(
                *(self._run_recorded(suite, config, builder) for suite in suites)
            )
        else:
            for suite in suites:
                await self._run_recorded(suite, config, builder)

        report = builder.finalize()
        log.info("Run completed: %s", dict(report.summary))
        return report

    async def _run_recorded(
        self, suite: Suite, config: RunConfig, builder: ReportBuilder
    ) -> None:
        """Run a suite, adding each result to ``builder`` as it completes.

        If the suite itself crashes, scenarios without a result yet are
        recorded as errored.
        """
        finished: set[str] = set()

        def record(result: ScenarioResult) -> None:
            finished.add(result.scenario_name)
            builder.add(result)

        try:
            await self.run_suite(suite, config, on_result=record)
        except Exception as exc:
            log.error("Suite %s failed: %s", suite.name, exc, exc_info=exc)
            error = ScenarioError.from_exception(exc)
            builder.extend(
                ScenarioResult(
                    suite_name=suite.name,
                    scenario_name=scenario.name,
                    status="errored",
                    duration_ms=0.0,
                    error=error,
                )
                for scenario in suite.scenarios
                if scenario.name not in finished
            )

    async def run_suite(
        self,
        suite: Suite,
        config: RunConfig,
        on_result: Callable[[ScenarioResult], None] | None = None,
    ) -> Sequence[ScenarioResult]:
        """Run a suite's scenarios in declared order on a shared page.

        ``on_result`` is called with each result as soon as it is known.
        """
        log.info("Running suite %s (%d scenario(s))", suite.name, len(suite.scenarios))
        results: list[ScenarioResult] = []
        slot = PageSlot(browser=self.browser)

        try:
            page = await slot.acquire()
            for index, scenario in enumerate(suite.scenarios):
                if config.isolation == "scenario" and index > 0:
                    page = await slot.acquire()

                if page is None:
                    result = self._unavailable(suite, scenario)
                    results.append(result)
                    if on_result is not None:
                        on_result(result)
                    continue

                result, session_lost = await self._attempt(suite, scenario, page, config)
                results.append(result)
                if on_result is not None:
                    on_result(result)
                log.info(
                    "Scenario completed: suite=%s scenario=%s status=%s duration=%.0fms",
                    suite.name,
                    scenario.name,
                    result.status,
                    result.duration_ms,
                )

                if session_lost:
                    log.warning("Page lost during %s, opening a fresh one", scenario.name)
                    page = await slot.acquire()
        finally:
            await slot.release()

        return results

    async def run_scenario(
        self,
        suite: Suite,
        scenario: Scenario,
        page: PageDriver,
        config: RunConfig,
    ) -> ScenarioResult:
        """Run one scenario under its deadline and classify the outcome."""
        result, _ = await self._attempt(suite, scenario, page, config)
        return result

    async def _attempt(
        self,
        suite: Suite,
        scenario: Scenario,
        page: PageDriver,
        config: RunConfig,
    ) -> tuple[ScenarioResult, bool]:
        """Run one scenario; also report whether the page was lost."""
        deadline_ms = scenario.deadline_ms(config)
        ctx = ScenarioContext(
            suite_name=suite.name,
            target_url=suite.target_url(config.base_url),
            config=config,
            timeout_ms=deadline_ms,
        )

        async def execute() -> dict[str, Any]:
            if scenario.navigate:
                await page.navigate(ctx.target_url)
            return dict(await scenario.body(page, ctx))

        loop = asyncio.get_running_loop()
        start = loop.time()

        def result(
            status: ScenarioStatus,
            data: Mapping[str, Any] | None = None,
            error: ScenarioError | None = None,
        ) -> ScenarioResult:
            return ScenarioResult(
                suite_name=suite.name,
                scenario_name=scenario.name,
                status=status,
                duration_ms=(loop.time() - start) * 1000,
                data={} if status == "timed_out" else self._with_caveats(data or {}, ctx),
                error=error,
            )

        log.info("Starting scenario %s/%s", suite.name, scenario.name)
        try:
            outcome = await race(execute(), deadline_ms / 1000)
        except AssertionError as exc:
            return result("failed", ctx.partial, ScenarioError.from_exception(exc)), False
        except TimeoutError as exc:
            return result("timed_out", error=ScenarioError.from_exception(exc)), False
        except Exception as exc:
            log.error(
                "Scenario %s/%s errored: %s", suite.name, scenario.name, exc, exc_info=exc
            )
            return (
                result("errored", ctx.partial, ScenarioError.from_exception(exc)),
                isinstance(exc, SessionLostError),
            )

        if outcome.timed_out:
            log.warning(
                "Scenario %s/%s exceeded its %.0fms deadline",
                suite.name,
                scenario.name,
                deadline_ms,
            )
            error = ScenarioError(
                type="TimeoutError",
                message=f"Scenario exceeded its {deadline_ms:.0f}ms deadline",
            )
            return result("timed_out", error=error), False

        return result("passed", outcome.value), False

    @staticmethod
    def _with_caveats(data: Mapping[str, Any], ctx: ScenarioContext) -> dict[str, Any]:
        if not ctx.caveats:
            return dict(data)
        return {**data, "caveats": list(ctx.caveats)}

    @staticmethod
    def _unavailable(suite: Suite, scenario: Scenario) -> ScenarioResult:
        return ScenarioResult(
            suite_name=suite.name,
            scenario_name=scenario.name,
            status="errored",
            duration_ms=0.0,
            error=ScenarioError(type=SessionLostError.__name__, message=SESSION_UNAVAILABLE),
        )
