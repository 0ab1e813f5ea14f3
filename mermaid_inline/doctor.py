"""Dependency checks and install hints for the `setup` command."""

from __future__ import annotations

import logging
import shutil
import subprocess

from pydantic import BaseModel

from mermaid_inline.config.models import RendererConfig
from mermaid_inline.errors import RendererNotFoundError
from mermaid_inline.render.sandbox import detect_browser_executable

logger = logging.getLogger(__name__)

MERMAID_CLI_PACKAGE = "@mermaid-js/mermaid-cli"

_INSTALL_HINTS: dict[str, list[str]] = {
    "node": ["Install Node.js (node + npm) from https://nodejs.org"],
    "mmdc": [
        f"npm install -g {MERMAID_CLI_PACKAGE}",
        f"or: bun add -g {MERMAID_CLI_PACKAGE}",
    ],
}


class DependencyReport(BaseModel):
    """Outcome of probing PATH for the tools mermaid-inline shells out to."""

    found: dict[str, str] = {}
    missing: list[str] = []
    browser: str | None = None

    @property
    def ok(self) -> bool:
        return not self.missing

    def hints(self) -> list[str]:
        lines: list[str] = []
        for name in self.missing:
            lines.extend(_INSTALL_HINTS.get(name, [f"Install {name} and put it on PATH"]))
        return lines


def check_dependencies(config: RendererConfig | None = None) -> DependencyReport:
    """Look up node, the renderer, and a sandbox-compatible browser."""
    config = config or RendererConfig()
    report = DependencyReport()

    for name, command in (("node", "node"), ("mmdc", config.command)):
        path = shutil.which(command)
        if path:
            report.found[name] = path
        else:
            report.missing.append(name)

    browser = detect_browser_executable(config.browser_env, config.browser_candidates)
    report.browser = str(browser) if browser else None
    logger.debug("dependency report: %s", report)
    return report


def upgrade_renderer() -> bool:
    """Install the latest mermaid-cli globally with npm. Returns True on success."""
    npm = shutil.which("npm")
    if npm is None:
        raise RendererNotFoundError("locate npm", "npm is not on PATH; install Node.js first")

    cmd = [npm, "install", "-g", f"{MERMAID_CLI_PACKAGE}@latest"]
    logger.info("running %s", " ".join(cmd))
    try:
        proc = subprocess.run(cmd)
    except OSError as e:
        raise RendererNotFoundError(f"run npm install -g {MERMAID_CLI_PACKAGE}@latest", e) from e
    return proc.returncode == 0
