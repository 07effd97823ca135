"""Runtime suite and scenario models."""

from collections.abc import Awaitable, Callable, Mapping, Sequence
from dataclasses import dataclass, field
from typing import Any

from page_probe.drivers.base import PageDriver
from page_probe.models.definition import RunConfig, ScenarioKind


@dataclass(kw_only=True)
class ScenarioContext:
    """Per-execution context handed to a scenario body.

    Bodies record intermediate observations with :meth:`record` so that a
    body failing halfway still reports what it saw, and note degraded
    outcomes with :meth:`note`.
    """

    suite_name: str
    target_url: str
    config: RunConfig
    timeout_ms: float
    partial: dict[str, Any] = field(default_factory=dict)
    caveats: list[str] = field(default_factory=list)

    def record(self, key: str, value: Any) -> None:
        """Remember a partial observation."""
        self.partial[key] = value

    def note(self, caveat: str) -> None:
        """Remember that the scenario passed in a degraded way."""
        self.caveats.append(caveat)


type ScenarioBody = Callable[[PageDriver, ScenarioContext], Awaitable[Mapping[str, Any]]]


@dataclass(frozen=True, kw_only=True)
class Scenario:
    """Named behavioural probe executed against a page."""

    name: str
    kind: ScenarioKind
    body: ScenarioBody = field(repr=False)
    navigate: bool = True
    timeout_ms: float | None = None
    window_ms: float = 0.0

    def deadline_ms(self, config: RunConfig) -> float:
        """Deadline for one execution, including any fixed sampling window."""
        base = self.timeout_ms if self.timeout_ms is not None else config.timeout_ms_for(self.kind)
        return base + self.window_ms


@dataclass(frozen=True, kw_only=True)
class Suite:
    """Named, ordered collection of scenarios sharing a target path."""

    name: str
    target_path: str
    scenarios: Sequence[Scenario] = ()

    def __post_init__(self) -> None:
        names = [scenario.name for scenario in self.scenarios]
        duplicates = sorted({name for name in names if names.count(name) > 1})
        if duplicates:
            raise ValueError(f"Duplicate scenario names in suite {self.name!r}: {duplicates}")
        object.__setattr__(self, "scenarios", tuple(self.scenarios))

    def target_url(self, base_url: str) -> str:
        """URL of the suite's page."""
        return base_url + self.target_path
