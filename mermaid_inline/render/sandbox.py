"""Browser discovery and the puppeteer launch config passed to mmdc.

mmdc drives a headless Chromium through puppeteer. Inside containers and on
hosts without user namespaces the Chromium sandbox refuses to start, so when
a system browser can be found we hand mmdc a config that points at it and
disables the sandbox.
"""

from __future__ import annotations

import json
import logging
import os
import shutil
import tempfile
from collections.abc import Iterable, Iterator, Mapping
from contextlib import contextmanager
from pathlib import Path

from mermaid_inline.errors import MermaidInlineError

logger = logging.getLogger(__name__)

DEFAULT_BROWSER_ENV = "MMDC_CHROME_PATH"

DEFAULT_BROWSER_CANDIDATES: tuple[str, ...] = (
    "chromium",
    "chromium-browser",
    "google-chrome",
    "google-chrome-stable",
)

DEFAULT_SANDBOX_ARGS: tuple[str, ...] = (
    "--no-sandbox",
    "--disable-setuid-sandbox",
    "--disable-dev-shm-usage",
)


def detect_browser_executable(
    env_var: str = DEFAULT_BROWSER_ENV,
    candidates: Iterable[str] = DEFAULT_BROWSER_CANDIDATES,
    environ: Mapping[str, str] | None = None,
) -> Path | None:
    """Find a Chromium-compatible browser for mmdc.

    The ``env_var`` override wins when set to a non-blank value; otherwise the
    first candidate found on PATH is returned. None means mmdc should fall
    back to its bundled browser.
    """
    env = os.environ if environ is None else environ
    override = env.get(env_var, "")
    if override.strip():
        logger.debug("using browser from $%s: %s", env_var, override)
        return Path(override)

    for candidate in candidates:
        found = shutil.which(candidate)
        if found:
            logger.debug("found browser %s at %s", candidate, found)
            return Path(found)

    logger.debug("no system browser found; mmdc will use its default")
    return None


@contextmanager
def sandbox_config(
    browser: Path | None,
    args: Iterable[str] = DEFAULT_SANDBOX_ARGS,
) -> Iterator[Path | None]:
    """Write a temporary puppeteer config for ``browser`` and yield its path.

    Yields None when ``browser`` is None. The file is removed on exit, including
    when the body raises. Failing to write the file raises MermaidInlineError.
    """
    if browser is None:
        yield None
        return

    try:
        fd, name = tempfile.mkstemp(prefix="mermaid-inline-puppeteer-", suffix=".json")
    except OSError as e:
        raise MermaidInlineError("create temporary puppeteer config", e) from e

    path = Path(name)
    try:
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                json.dump({"executablePath": str(browser), "args": list(args)}, f, indent=2)
                f.write("\n")
        except OSError as e:
            raise MermaidInlineError("write temporary puppeteer config", e) from e
        logger.debug("wrote puppeteer config %s", path)
        yield path
    finally:
        path.unlink(missing_ok=True)
