"""Fenced mermaid block extraction from Markdown text."""

from __future__ import annotations

import logging
import re

from mermaid_inline.extract.models import DiagramBlock

logger = logging.getLogger(__name__)

# ```mermaid<spaces>\n ... \n``` -- body is matched non-greedily so adjacent
# blocks stay separate. Line endings may be \n or \r\n.
_MERMAID_FENCE = re.compile(
    r"```mermaid[ \t]*\r?\n(.*?)\r?\n```",
    re.DOTALL | re.IGNORECASE,
)


def extract_mermaid_blocks(markdown: str) -> list[DiagramBlock]:
    """Return every mermaid block in ``markdown`` in document order.

    A document with no mermaid fences yields an empty list. The fence tag is
    matched case-insensitively, so ```Mermaid and ```MERMAID fences are
    extracted and numbered too, which shifts the index of every later block.
    """
    blocks = [
        DiagramBlock(index=i, source=match.group(1))
        for i, match in enumerate(_MERMAID_FENCE.finditer(markdown), start=1)
    ]
    logger.debug("extracted %d mermaid block(s)", len(blocks))
    return blocks


def filter_blocks(blocks: list[DiagramBlock], index: int | None = None) -> list[DiagramBlock]:
    """Keep only the block numbered ``index``; all blocks when ``index`` is None.

    An index that matches nothing returns an empty list rather than raising.
    """
    if index is None:
        return list(blocks)
    return [b for b in blocks if b.index == index]
