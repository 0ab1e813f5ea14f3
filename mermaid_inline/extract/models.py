"""Pydantic models for extracted diagram blocks."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, PositiveInt


class DiagramBlock(BaseModel):
    """A fenced mermaid block, numbered by order of appearance (1-based)."""

    model_config = ConfigDict(frozen=True)

    index: PositiveInt
    source: str
