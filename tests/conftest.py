"""Shared fixtures."""

from collections.abc import Generator, Mapping

import pytest
from aioresponses import aioresponses as aioresponses_cls

from page_probe.testing.fake_driver import FakeBrowser, FakeDocument, FakeElement

BASE_URL = "http://game.test/"
PIXI_URL = BASE_URL + "speedy-maths-pixi.html"
CANVAS_URL = BASE_URL + "smi-legacy.html"


@pytest.fixture
def aioresponses() -> Generator[aioresponses_cls, None, None]:
    """Mock aiohttp requests."""
    with aioresponses_cls() as mocked:
        yield mocked


@pytest.fixture
def landing_page() -> FakeDocument:
    """Landing page with a heading, two game cards and their play links."""
    return FakeDocument(
        elements={
            "h1": [FakeElement(text="Speedy Maths Games")],
            ".game-card": [FakeElement(), FakeElement()],
            ".play-button": [FakeElement(), FakeElement()],
            'a[href="speedy-maths-pixi.html"]': [
                FakeElement(text="Play", href="speedy-maths-pixi.html")
            ],
        },
        content_width=360,
    )


@pytest.fixture
def pixi_page() -> FakeDocument:
    """Game page with a canvas and partially initialized globals."""
    return FakeDocument(
        elements={"canvas": [FakeElement()]},
        globals={
            "app": {"stage": {}},
            "player": {"x": 10},
            "gameRunning": True,
            "Tone": {"context": {"state": "suspended"}},
        },
        memory={"usedJSHeapSize": 1000, "totalJSHeapSize": 2000},
        metrics={"JSHeapUsedSize": 1000.0},
        frames=10,
    )


@pytest.fixture
def site(landing_page: FakeDocument, pixi_page: FakeDocument) -> Mapping[str, FakeDocument]:
    """Fake site served at BASE_URL."""
    return {BASE_URL: landing_page, PIXI_URL: pixi_page}


@pytest.fixture
def browser(site: Mapping[str, FakeDocument]) -> FakeBrowser:
    """Fake browser serving the fake site."""
    return FakeBrowser(site=site)
