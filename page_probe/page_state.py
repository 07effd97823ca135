"""Read-only observations of in-page state."""

from collections.abc import Iterable, Mapping
from dataclasses import dataclass
from typing import Any

from page_probe.drivers.base import PageDriver

UNKNOWN = "unknown"

# Indirect eval resolves lexical (let/const) globals as well as window
# properties; anything that throws or is undefined counts as absent.
READ_BINDINGS = """expressions => {
  const out = {};
  for (const expression of expressions) {
    let value;
    try {
      value = (0, eval)(expression);
    } catch (error) {
      out[expression] = { present: false };
      continue;
    }
    if (value === undefined) {
      out[expression] = { present: false };
    } else if (value === null || ["boolean", "number", "string"].includes(typeof value)) {
      out[expression] = { present: true, value: value };
    } else {
      out[expression] = { present: true, value: true };
    }
  }
  return out;
}"""

CANVAS_FACTS = """selector => {
  const canvas = document.querySelector(selector);
  const context = canvas && canvas.getContext ? canvas.getContext("2d") : null;
  return {
    canvasExists: !!canvas,
    contextExists: !!context,
    canvasWidth: canvas ? canvas.width : 0,
    canvasHeight: canvas ? canvas.height : 0,
  };
}"""

LAYOUT_FACTS = """([cardSelector, buttonSelector]) => ({
  cardCount: document.querySelectorAll(cardSelector).length,
  buttonCount: document.querySelectorAll(buttonSelector).length,
  contentWidth: document.body.scrollWidth,
  viewportWidth: window.innerWidth,
})"""

MEMORY_USAGE = """() => performance.memory ? {
  usedJSHeapSize: performance.memory.usedJSHeapSize,
  totalJSHeapSize: performance.memory.totalJSHeapSize,
} : null"""


@dataclass(frozen=True, kw_only=True)
class BindingValue:
    """Result of looking up a page-global binding."""

    present: bool
    value: Any = None

    def or_default(self, default: Any) -> Any:
        """Return the value, or ``default`` when the binding is absent."""
        return self.value if self.present else default


ABSENT = BindingValue(present=False)


async def read_bindings(
    page: PageDriver, expressions: Iterable[str]
) -> Mapping[str, BindingValue]:
    """Look up global bindings without failing on missing ones."""
    expressions = list(dict.fromkeys(expressions))
    if not expressions:
        return {}

    raw = await page.evaluate(READ_BINDINGS, expressions) or {}
    values: dict[str, BindingValue] = {}
    for expression in expressions:
        entry = raw.get(expression) or {}
        if entry.get("present"):
            values[expression] = BindingValue(present=True, value=entry.get("value"))
        else:
            values[expression] = ABSENT
    return values


async def canvas_facts(page: PageDriver, selector: str) -> Mapping[str, Any]:
    """Existence, 2D context and size of a canvas element."""
    return dict(await page.evaluate(CANVAS_FACTS, selector))


@dataclass(frozen=True, kw_only=True)
class LayoutFacts:
    """Layout measurements taken at one viewport."""

    card_count: int
    button_count: int
    content_width: float
    viewport_width: float

    @classmethod
    async def measure(
        cls, page: PageDriver, card_selector: str, button_selector: str
    ) -> "LayoutFacts":
        """Measure the current page."""
        raw = await page.evaluate(LAYOUT_FACTS, [card_selector, button_selector])
        return cls(
            card_count=int(raw["cardCount"]),
            button_count=int(raw["buttonCount"]),
            content_width=float(raw["contentWidth"]),
            viewport_width=float(raw["viewportWidth"]),
        )

    @property
    def no_horizontal_scroll(self) -> bool:
        return self.content_width <= self.viewport_width


async def memory_usage(page: PageDriver) -> Mapping[str, float] | None:
    """Host-reported JS heap counters, or None where the browser has none."""
    usage = await page.evaluate(MEMORY_USAGE)
    return dict(usage) if usage else None
