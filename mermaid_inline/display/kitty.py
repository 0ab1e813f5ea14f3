"""Kitty graphics protocol presenter.

Images are sent as APC escape sequences::

    ESC _G <key=value,...> ; <base64 payload> ESC \\

The base64 text is split into chunks of at most ``chunk_size`` characters.
The first chunk carries the transfer description (``a=T`` transmit and
display, ``f=100`` PNG, ``t=d`` direct); every chunk carries ``m=1`` while
more data follows and the final one ``m=0``.

Protocol: https://sw.kovidgoyal.net/kitty/graphics-protocol/
"""

from __future__ import annotations

import base64
import logging
import sys
from pathlib import Path
from typing import TextIO

from mermaid_inline.errors import DisplayError

logger = logging.getLogger(__name__)

CHUNK_SIZE = 4096  # Max base64 payload per chunk

_APC_START = "\x1b_G"
_APC_END = "\x1b\\"


def apc(keys: str, payload: str = "") -> str:
    """Frame ``keys`` and ``payload`` as a single graphics command."""
    return f"{_APC_START}{keys};{payload}{_APC_END}"


def encode_image(data: bytes, chunk_size: int = CHUNK_SIZE) -> list[str]:
    """Encode PNG bytes into the ordered list of graphics commands."""
    if chunk_size <= 0:
        raise ValueError(f"chunk_size must be positive, got {chunk_size}")

    encoded = base64.standard_b64encode(data).decode("ascii")
    chunks = [encoded[i:i + chunk_size] for i in range(0, len(encoded), chunk_size)]
    if not chunks:
        chunks = [""]

    sequences = []
    for i, chunk in enumerate(chunks):
        if not chunk.isascii():
            raise DisplayError("encode image chunk", f"chunk {i} is not ASCII")
        more = 0 if i == len(chunks) - 1 else 1
        if i == 0:
            sequences.append(apc(f"a=T,f=100,t=d,m={more}", chunk))
        else:
            sequences.append(apc(f"m={more}", chunk))
    return sequences


class KittyPresenter:
    """Writes PNG files to a terminal using the Kitty graphics protocol.

    Only one ``show``/``clear`` may run at a time on a given stream; callers
    issue them sequentially.
    """

    def __init__(self, stream: TextIO | None = None, chunk_size: int = CHUNK_SIZE) -> None:
        self._stream = stream
        self.chunk_size = chunk_size

    @property
    def stream(self) -> TextIO:
        # Resolved lazily so a replaced sys.stdout is honoured.
        return self._stream if self._stream is not None else sys.stdout

    def clear(self) -> None:
        """Delete every visible image placement."""
        self._write(apc("a=d,d=A"), "send kitty protocol clear")

    def show(self, path: Path | str) -> None:
        """Transmit and display the PNG at ``path``, followed by a newline."""
        path = Path(path)
        try:
            data = path.read_bytes()
        except OSError as e:
            raise DisplayError(f"read image {path}", e) from e

        sequences = encode_image(data, self.chunk_size)
        logger.debug("sending %s in %d chunk(s)", path, len(sequences))
        self._write("".join(sequences) + "\n", f"send kitty image payload for {path}")

    def _write(self, text: str, operation: str) -> None:
        stream = self.stream
        try:
            stream.write(text)
            stream.flush()
        except OSError as e:
            raise DisplayError(operation, e) from e
