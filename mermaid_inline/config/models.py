from typing import Literal

from pydantic import BaseModel, Field, PositiveFloat, PositiveInt


class RendererConfig(BaseModel):
    command: str = "mmdc"
    output_prefix: str = "mermaid"
    browser_env: str = "MMDC_CHROME_PATH"
    browser_candidates: list[str] = [
        "chromium",
        "chromium-browser",
        "google-chrome",
        "google-chrome-stable",
    ]
    sandbox_args: list[str] = [
        "--no-sandbox",
        "--disable-setuid-sandbox",
        "--disable-dev-shm-usage",
    ]
    timeout_seconds: PositiveFloat | None = None


class DisplayConfig(BaseModel):
    chunk_size: PositiveInt = 4096
    clear_before_render: bool = False


class WatchConfig(BaseModel):
    debounce_seconds: float = Field(default=0.15, ge=0)


class MermaidInlineConfig(BaseModel):
    renderer: RendererConfig = Field(default_factory=RendererConfig)
    display: DisplayConfig = Field(default_factory=DisplayConfig)
    watch: WatchConfig = Field(default_factory=WatchConfig)
    log_level: Literal["debug", "info", "warn", "error"] = "warn"
