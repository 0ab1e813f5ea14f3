"""Pydantic models for the render pipeline."""

from __future__ import annotations

from pathlib import Path

from pydantic import BaseModel, ConfigDict, PositiveFloat, PositiveInt


class RenderOptions(BaseModel):
    """Optional sizing flags forwarded to the renderer."""

    model_config = ConfigDict(frozen=True)

    scale: PositiveFloat | None = None
    width: PositiveInt | None = None
    height: PositiveInt | None = None


class RenderedDiagram(BaseModel):
    """A PNG written for one diagram block."""

    model_config = ConfigDict(frozen=True)

    index: int
    output_path: Path
