"""Mermaid block extraction from Markdown documents."""

from mermaid_inline.extract.extractor import extract_mermaid_blocks, filter_blocks
from mermaid_inline.extract.models import DiagramBlock

__all__ = [
    "DiagramBlock",
    "extract_mermaid_blocks",
    "filter_blocks",
]
