"""Models for run configuration loaded from YAML files."""

from collections.abc import Mapping, Sequence
from pathlib import Path
from typing import Annotated, Literal

from pydantic import (
    Field,
    NonNegativeFloat,
    PositiveFloat,
    PositiveInt,
    model_validator,
)

from page_probe.models.base import Model

type ScenarioKind = Literal[
    "load",
    "navigation",
    "state_probe",
    "input",
    "frame_rate",
    "memory",
    "responsive",
]

DEFAULT_TIMEOUTS_MS: Mapping[str, float] = {
    "load": 10_000,
    "navigation": 10_000,
    "state_probe": 10_000,
    "input": 10_000,
    "frame_rate": 5_000,
    "memory": 5_000,
    "responsive": 30_000,
}


class ViewportSpec(Model):
    """Named viewport size used by responsive sweeps."""

    width: PositiveInt
    height: PositiveInt
    label: str

    @property
    def slug(self) -> str:
        """Label in a form usable as a file name fragment."""
        return "-".join(self.label.lower().split())


DEFAULT_VIEWPORTS: Sequence[ViewportSpec] = (
    ViewportSpec(width=1920, height=1080, label="Desktop Large"),
    ViewportSpec(width=1366, height=768, label="Desktop Standard"),
    ViewportSpec(width=768, height=1024, label="Tablet"),
    ViewportSpec(width=375, height=667, label="Mobile"),
)


class BindingSpec(Model):
    """A page-global binding to read during a state probe.

    ``expression`` may be a dotted path such as ``Tone.context.state``.
    With ``mode="exists"`` the probe reports whether the binding is defined;
    with ``mode="value"`` it reports the value, or ``default`` when undefined.
    """

    key: str = Field(..., description="Key of the binding in the result data")
    expression: str = Field(
        ...,
        pattern=r"^[A-Za-z_$][\w$]*(\.[A-Za-z_$][\w$]*)*$",
        description="Global name or dotted path",
    )
    mode: Literal["exists", "value"] = "value"
    default: bool | str | None = False


class ScenarioDefinition(Model):
    """Fields shared by every scenario kind."""

    name: str = Field(..., min_length=1)
    navigate: bool = Field(
        default=True, description="Load the suite target before the body runs"
    )
    ready_selector: str | None = Field(
        default=None, description="Selector to wait for before the body runs"
    )
    timeout_ms: PositiveFloat | None = Field(
        default=None, description="Overrides the per-kind default deadline"
    )


class LoadCheckDefinition(ScenarioDefinition):
    """Wait for a heading and count matching elements."""

    kind: Literal["load"] = "load"
    selector: str = "h1"
    count_selector: str = ".game-card"
    min_count: int = Field(default=0, ge=0)


class NavigationCheckDefinition(ScenarioDefinition):
    """Follow optional link-like controls and record where they lead."""

    kind: Literal["navigation"] = "navigation"
    navigate: bool = False
    links: Sequence[str] = Field(..., min_length=1)


class StateProbeDefinition(ScenarioDefinition):
    """Read-only snapshot of page globals, element presence and canvas facts."""

    kind: Literal["state_probe"] = "state_probe"
    bindings: Sequence[BindingSpec] = Field(default_factory=list)
    elements: Mapping[str, str] = Field(
        default_factory=dict, description="Result key to selector"
    )
    canvas_selector: str | None = None


class InputSequenceDefinition(ScenarioDefinition):
    """Dispatch a fixed sequence of key presses."""

    kind: Literal["input"] = "input"
    keys: Sequence[str] = Field(..., min_length=1)
    pause_ms: NonNegativeFloat = 100
    requires: str | None = Field(
        default=None, description="Global binding that must exist before dispatch"
    )


class FrameRateDefinition(ScenarioDefinition):
    """Count animation frames over a fixed window."""

    kind: Literal["frame_rate"] = "frame_rate"
    window_ms: PositiveFloat = 5_000
    target_frames: PositiveInt = 60


class MemoryDefinition(ScenarioDefinition):
    """Observe the page for a fixed window then read memory counters."""

    kind: Literal["memory"] = "memory"
    window_ms: PositiveFloat = 5_000


class ResponsiveDefinition(ScenarioDefinition):
    """Capture screenshots and layout facts for several viewports."""

    kind: Literal["responsive"] = "responsive"
    navigate: bool = False
    viewports: Sequence[ViewportSpec] | None = Field(
        default=None, description="Defaults to the run's viewport sweep"
    )
    card_selector: str = ".game-card"
    button_selector: str = ".play-button"
    screenshot_prefix: str = "landing"


AnyScenarioDefinition = Annotated[
    LoadCheckDefinition
    | NavigationCheckDefinition
    | StateProbeDefinition
    | InputSequenceDefinition
    | FrameRateDefinition
    | MemoryDefinition
    | ResponsiveDefinition,
    Field(discriminator="kind"),
]


class SuiteDefinition(Model):
    """Named, ordered group of scenarios sharing a target page."""

    name: str = Field(..., min_length=1)
    target_path: str = ""
    scenarios: Sequence[AnyScenarioDefinition] = Field(default_factory=list)

    @model_validator(mode="after")
    def _unique_scenario_names(self) -> "SuiteDefinition":
        seen: set[str] = set()
        for scenario in self.scenarios:
            if scenario.name in seen:
                raise ValueError(
                    f"Duplicate scenario name {scenario.name!r} in suite {self.name!r}"
                )
            seen.add(scenario.name)
        return self


class RunConfig(Model):
    """Complete run configuration."""

    base_url: str = Field(..., description="Prefix joined with each suite target")
    suites: Sequence[SuiteDefinition] = Field(default_factory=list)
    timeouts_ms: Mapping[str, PositiveFloat] = Field(
        default_factory=lambda: dict(DEFAULT_TIMEOUTS_MS)
    )
    viewport_sweep: Sequence[ViewportSpec] = Field(
        default_factory=lambda: list(DEFAULT_VIEWPORTS)
    )
    isolation: Literal["suite", "scenario"] = "suite"
    concurrent_suites: bool = False
    screenshot_dir: Path = Path("screenshots")

    @model_validator(mode="after")
    def _known_timeout_kinds(self) -> "RunConfig":
        unknown = set(self.timeouts_ms) - set(DEFAULT_TIMEOUTS_MS)
        if unknown:
            raise ValueError(f"Unknown scenario kinds in timeouts_ms: {sorted(unknown)}")
        return self

    def timeout_ms_for(self, kind: str) -> float:
        """Deadline for a scenario kind, falling back to the built-in defaults."""
        return self.timeouts_ms.get(kind, DEFAULT_TIMEOUTS_MS[kind])
