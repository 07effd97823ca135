"""Configuration for the Playwright driver."""

from typing import Literal

from pydantic import BaseModel, PositiveInt


class PlaywrightConfig(BaseModel):
    """Configuration for the Playwright driver."""

    browser: Literal["chromium", "firefox", "webkit"] = "chromium"
    headless: bool = True
    viewport_width: PositiveInt = 1280
    viewport_height: PositiveInt = 720
    navigation_timeout_ms: PositiveInt = 30000
    # Connect to an already running browser instead of launching one
    cdp_endpoint: str | None = None
