"""Inline image display via the Kitty graphics protocol."""

from mermaid_inline.display.kitty import CHUNK_SIZE, KittyPresenter, apc, encode_image
from mermaid_inline.display.terminal import supports_kitty_graphics

__all__ = [
    "CHUNK_SIZE",
    "KittyPresenter",
    "apc",
    "encode_image",
    "supports_kitty_graphics",
]
