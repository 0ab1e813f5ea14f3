"""Best-effort detection of Kitty graphics support from the environment."""

from __future__ import annotations

import os
import sys
from collections.abc import Mapping
from typing import TextIO

_KITTY_PROGRAMS = {"kitty", "ghostty"}


def supports_kitty_graphics(
    environ: Mapping[str, str] | None = None,
    stream: TextIO | None = None,
) -> bool:
    """Guess whether ``stream`` is a terminal that understands Kitty graphics.

    Multiplexers (tmux, screen) drop APC sequences unless passthrough is
    configured, so they count as unsupported. A False result is only a hint;
    the caller still sends the image.
    """
    env = os.environ if environ is None else environ
    stream = sys.stdout if stream is None else stream

    isatty = getattr(stream, "isatty", None)
    if isatty is None or not isatty():
        return False

    if env.get("TMUX") or env.get("STY"):
        return False

    if env.get("KITTY_WINDOW_ID"):
        return True
    if env.get("TERM_PROGRAM", "").lower() in _KITTY_PROGRAMS:
        return True
    return "kitty" in env.get("TERM", "").lower()
