"""Build runtime suites from run configuration."""

from collections.abc import Sequence

from page_probe.models.definition import (
    AnyScenarioDefinition,
    FrameRateDefinition,
    InputSequenceDefinition,
    LoadCheckDefinition,
    MemoryDefinition,
    NavigationCheckDefinition,
    ResponsiveDefinition,
    RunConfig,
    StateProbeDefinition,
    SuiteDefinition,
)
from page_probe.models.suite import Scenario, ScenarioBody, Suite
from page_probe.scenarios import (
    frame_rate_sample,
    input_sequence,
    load_check,
    memory_sample,
    navigation_check,
    responsive_sweep,
    state_probe,
    wait_until_ready,
)


def build_body(definition: AnyScenarioDefinition) -> ScenarioBody:
    """Create the body for a scenario definition."""
    match definition:
        case LoadCheckDefinition():
            body = load_check(
                definition.selector, definition.count_selector, definition.min_count
            )
        case NavigationCheckDefinition():
            body = navigation_check(definition.links)
        case StateProbeDefinition():
            body = state_probe(
                definition.bindings, definition.elements, definition.canvas_selector
            )
        case InputSequenceDefinition():
            body = input_sequence(
                definition.keys, definition.pause_ms, definition.requires
            )
        case FrameRateDefinition():
            body = frame_rate_sample(definition.window_ms, definition.target_frames)
        case MemoryDefinition():
            body = memory_sample(definition.window_ms)
        case ResponsiveDefinition():
            body = responsive_sweep(
                definition.viewports,
                definition.card_selector,
                definition.button_selector,
                definition.screenshot_prefix,
            )
        case _:  # pragma: no cover
            raise TypeError(f"Unsupported scenario definition: {definition!r}")

    if definition.ready_selector is not None:
        body = wait_until_ready(body, definition.ready_selector)
    return body


def build_scenario(definition: AnyScenarioDefinition) -> Scenario:
    """Create a runtime scenario from its definition."""
    window_ms = 0.0
    if isinstance(definition, FrameRateDefinition | MemoryDefinition):
        window_ms = definition.window_ms

    return Scenario(
        name=definition.name,
        kind=definition.kind,
        body=build_body(definition),
        navigate=definition.navigate,
        timeout_ms=definition.timeout_ms,
        window_ms=window_ms,
    )


def build_suite(definition: SuiteDefinition) -> Suite:
    """Create a runtime suite from its definition."""
    return Suite(
        name=definition.name,
        target_path=definition.target_path,
        scenarios=[build_scenario(s) for s in definition.scenarios],
    )


def build_suites(config: RunConfig) -> Sequence[Suite]:
    """Create every suite of a run configuration, in declared order."""
    return [build_suite(definition) for definition in config.suites]
