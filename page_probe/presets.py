"""Built-in run configuration for the Speedy Maths game pages."""

from page_probe.models.definition import (
    BindingSpec,
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

SPEEDY_MATHS_URL = "https://benixmaxedis.github.io/smi-legacy/"

PIXI_PAGE = "speedy-maths-pixi.html"
CANVAS_PAGE = "smi-legacy.html"


def speedy_maths_suites() -> list[SuiteDefinition]:
    """Suites covering the landing page, both games and responsive layout."""
    landing = SuiteDefinition(
        name="landing",
        target_path="",
        scenarios=[
            LoadCheckDefinition(name="landing page load", min_count=2),
            NavigationCheckDefinition(
                name="game navigation",
                links=[f'a[href="{PIXI_PAGE}"]', f'a[href="{CANVAS_PAGE}"]'],
            ),
        ],
    )

    pixi = SuiteDefinition(
        name="pixi",
        target_path=PIXI_PAGE,
        scenarios=[
            StateProbeDefinition(
                name="game initialization",
                ready_selector="canvas",
                elements={"canvasExists": "canvas"},
                bindings=[
                    BindingSpec(key="pixiAppExists", expression="app", mode="exists"),
                    BindingSpec(key="audioInitialized", expression="audioInitialized"),
                    BindingSpec(key="gameRunning", expression="gameRunning"),
                ],
            ),
            StateProbeDefinition(
                name="audio system",
                ready_selector="canvas",
                bindings=[
                    BindingSpec(key="toneJsAvailable", expression="Tone", mode="exists"),
                    BindingSpec(
                        key="contextState",
                        expression="Tone.context.state",
                        default="unknown",
                    ),
                    BindingSpec(
                        key="backgroundMusicExists",
                        expression="backgroundMusic",
                        mode="exists",
                    ),
                    BindingSpec(key="soundsExists", expression="sounds", mode="exists"),
                ],
            ),
            InputSequenceDefinition(
                name="game controls",
                ready_selector="canvas",
                keys=["ArrowLeft", "ArrowRight", "Space"],
                pause_ms=100,
                requires="player",
            ),
            MemoryDefinition(name="performance", ready_selector="canvas", window_ms=5000),
        ],
    )

    canvas = SuiteDefinition(
        name="canvas",
        target_path=CANVAS_PAGE,
        scenarios=[
            StateProbeDefinition(
                name="canvas rendering",
                ready_selector="canvas",
                canvas_selector="canvas",
                bindings=[
                    BindingSpec(
                        key="gameInitialized", expression="gameLoop", mode="exists"
                    ),
                ],
            ),
            FrameRateDefinition(
                name="game loop",
                ready_selector="canvas",
                window_ms=5000,
                target_frames=60,
            ),
        ],
    )

    responsive = SuiteDefinition(
        name="responsive",
        target_path="",
        scenarios=[ResponsiveDefinition(name="responsive design")],
    )

    return [landing, pixi, canvas, responsive]


def speedy_maths_config(base_url: str = SPEEDY_MATHS_URL) -> RunConfig:
    """Run configuration for the Speedy Maths pages served at ``base_url``."""
    return RunConfig(base_url=base_url, suites=speedy_maths_suites())
