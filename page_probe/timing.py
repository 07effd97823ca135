"""Deadline and fixed-window timing primitives."""

import asyncio
import logging
from collections.abc import Awaitable
from dataclasses import dataclass

log = logging.getLogger(__name__)


@dataclass(frozen=True, kw_only=True)
class RaceOutcome[T]:
    """Outcome of racing a piece of work against a timer.

    ``value`` is only set when the work finished first.
    """

    timed_out: bool
    elapsed_ms: float
    value: T | None = None


def _retrieve_outcome(task: asyncio.Future[object]) -> None:
    if task.cancelled():
        return
    if (exc := task.exception()) is not None:
        log.debug("Abandoned task finished with %r", exc)


def abandon(task: asyncio.Future[object]) -> None:
    """Request cancellation of ``task`` without waiting for it to stop."""
    task.cancel()
    task.add_done_callback(_retrieve_outcome)


async def race[T](work: Awaitable[T], window: float) -> RaceOutcome[T]:
    """Race ``work`` against a ``window``-second timer.

    The timer wins ties: if both have finished by the time the race is
    resolved, the outcome is a timeout. On timeout the work is cancelled
    best-effort and abandoned. Exceptions raised by the work propagate.
    """
    loop = asyncio.get_running_loop()
    start = loop.time()
    work_task = asyncio.ensure_future(work)
    timer = asyncio.ensure_future(asyncio.sleep(window))

    try:
        await asyncio.wait({work_task, timer}, return_when=asyncio.FIRST_COMPLETED)
    except asyncio.CancelledError:
        abandon(work_task)
        timer.cancel()
        raise

    elapsed_ms = (loop.time() - start) * 1000

    if timer.done():
        abandon(work_task)
        return RaceOutcome(timed_out=True, elapsed_ms=window * 1000)

    timer.cancel()
    return RaceOutcome(timed_out=False, elapsed_ms=elapsed_ms, value=work_task.result())


async def pause(milliseconds: float) -> None:
    """Sleep for a fixed number of milliseconds."""
    await asyncio.sleep(milliseconds / 1000)
