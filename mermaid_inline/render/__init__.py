"""Rendering subsystem: runs mermaid-cli over extracted blocks."""

from mermaid_inline.render.models import RenderedDiagram, RenderOptions
from mermaid_inline.render.pipeline import RenderPipeline
from mermaid_inline.render.sandbox import detect_browser_executable, sandbox_config

__all__ = [
    "RenderOptions",
    "RenderPipeline",
    "RenderedDiagram",
    "detect_browser_executable",
    "sandbox_config",
]
