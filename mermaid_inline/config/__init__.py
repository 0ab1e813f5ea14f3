from .loader import load_config
from .models import (
    DisplayConfig,
    MermaidInlineConfig,
    RendererConfig,
    WatchConfig,
)

__all__ = [
    "DisplayConfig",
    "MermaidInlineConfig",
    "RendererConfig",
    "WatchConfig",
    "load_config",
]
