"""Abstract capability interface for browser drivers."""

from abc import ABC, abstractmethod
from collections.abc import Mapping, Sequence
from contextlib import AbstractAsyncContextManager
from pathlib import Path
from typing import Any


class FrameCounter(ABC):
    """Counts animation-frame callbacks on a page while active.

    Obtained from :meth:`PageDriver.start_frame_counter`; counting starts at
    zero when the counter is created.
    """

    @abstractmethod
    async def wait_for(self, count: int) -> None:
        """Suspend until at least ``count`` frames have been observed."""

    @abstractmethod
    async def read(self) -> int:
        """Return the number of frames observed so far."""

    @abstractmethod
    async def stop(self) -> None:
        """Stop counting."""


class PageDriver(ABC):
    """Handle to one live browser page.

    A page is not safe for concurrent use: callers must serialize every
    operation on the same handle.

    Drivers translate their own failures into the exceptions of
    :mod:`page_probe.errors`; waits that run out raise ``TimeoutError``.
    """

    @abstractmethod
    async def navigate(self, url: str) -> None:
        """Load ``url`` and wait for the load to complete.

        Raises:
            NavigationError: If the page could not be loaded

        """

    @abstractmethod
    async def wait_for(self, selector: str, timeout_ms: float) -> None:
        """Wait for ``selector`` to appear.

        Raises:
            TimeoutError: If the selector does not appear within timeout_ms

        """

    @abstractmethod
    async def evaluate(self, script: str, arg: Any = None) -> Any:
        """Evaluate a JavaScript function in page context and return its result."""

    @abstractmethod
    async def query(self, selector: str) -> Any | None:
        """Return the first element matching ``selector`` or None."""

    @abstractmethod
    async def query_all(self, selector: str) -> Sequence[Any]:
        """Return every element matching ``selector``."""

    @abstractmethod
    async def text(self, element: Any) -> str:
        """Return the text content of an element."""

    @abstractmethod
    async def click(self, element: Any, *, expect_navigation: bool = False) -> None:
        """Click an element, optionally waiting for the navigation it triggers."""

    @abstractmethod
    async def press_key(self, key: str) -> None:
        """Press and release a keyboard key (e.g. "ArrowLeft", "Space")."""

    @abstractmethod
    async def set_viewport(self, width: int, height: int) -> None:
        """Resize the page viewport."""

    @abstractmethod
    async def screenshot(self, path: Path) -> str:
        """Capture a screenshot to ``path`` and return a reference to it."""

    @abstractmethod
    async def metrics(self) -> Mapping[str, float]:
        """Return runtime performance counters reported by the browser."""

    @abstractmethod
    async def current_url(self) -> str:
        """Return the URL the page currently shows."""

    @abstractmethod
    async def start_frame_counter(self) -> FrameCounter:
        """Start counting animation-frame callbacks."""


class BrowserProvider(ABC):
    """Opens independent pages, each in its own browser context."""

    @abstractmethod
    def open_page(self) -> AbstractAsyncContextManager[PageDriver]:
        """Open a new page that is closed when the context exits.

        Raises:
            SessionLostError: If the browser is no longer available

        """
