"""RenderPipeline: turns diagram blocks into PNGs by running mmdc."""

from __future__ import annotations

import logging
import os
import shutil
import subprocess
import tempfile
from pathlib import Path

from mermaid_inline.config.models import RendererConfig
from mermaid_inline.errors import RenderError, RendererNotFoundError
from mermaid_inline.extract.models import DiagramBlock
from mermaid_inline.render.models import RenderedDiagram, RenderOptions
from mermaid_inline.render.sandbox import detect_browser_executable, sandbox_config

logger = logging.getLogger(__name__)


def _format_number(value: float) -> str:
    """Render 2.0 as "2" and 1.5 as "1.5" for the mmdc command line."""
    return f"{value:g}"


class RenderPipeline:
    """Renders diagram blocks one at a time with the configured renderer.

    Rendering is sequential and fail-fast: the first block whose renderer
    process exits non-zero aborts the whole call, and later blocks are not
    attempted. A single puppeteer config is shared by every block of a call.
    """

    def __init__(self, config: RendererConfig | None = None) -> None:
        self.config = config or RendererConfig()

    def find_renderer(self) -> str:
        """Resolve the renderer command to an executable path."""
        command = self.config.command
        found = shutil.which(command)
        if found:
            return found
        if os.sep in command and Path(command).is_file():
            return command
        raise RendererNotFoundError(
            f"locate renderer '{command}'",
            "not found on PATH (run `mermaid-inline setup` for install hints)",
        )

    def render(
        self,
        blocks: list[DiagramBlock],
        out_dir: Path,
        options: RenderOptions | None = None,
    ) -> list[RenderedDiagram]:
        """Render ``blocks`` into ``out_dir`` as ``<prefix>-<index>.png``.

        Returns one RenderedDiagram per block, in input order. Raises
        RenderError identifying the first block that failed.
        """
        if not blocks:
            return []

        options = options or RenderOptions()
        renderer = self.find_renderer()
        out_dir = Path(out_dir)
        out_dir.mkdir(parents=True, exist_ok=True)

        browser = detect_browser_executable(
            self.config.browser_env, self.config.browser_candidates
        )
        rendered: list[RenderedDiagram] = []
        with sandbox_config(browser, self.config.sandbox_args) as puppeteer_config:
            for block in blocks:
                rendered.append(
                    self._render_block(renderer, block, out_dir, options, puppeteer_config)
                )
        return rendered

    def build_command(
        self,
        renderer: str,
        input_path: Path,
        output_path: Path,
        options: RenderOptions,
        puppeteer_config: Path | None = None,
    ) -> list[str]:
        cmd = [renderer, "-i", str(input_path), "-o", str(output_path), "--quiet"]
        if puppeteer_config is not None:
            cmd += ["-p", str(puppeteer_config)]
        if options.scale is not None:
            cmd += ["--scale", _format_number(options.scale)]
        if options.width is not None:
            cmd += ["--width", str(options.width)]
        if options.height is not None:
            cmd += ["--height", str(options.height)]
        return cmd

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _render_block(
        self,
        renderer: str,
        block: DiagramBlock,
        out_dir: Path,
        options: RenderOptions,
        puppeteer_config: Path | None,
    ) -> RenderedDiagram:
        output_path = out_dir / f"{self.config.output_prefix}-{block.index}.png"

        try:
            fd, name = tempfile.mkstemp(prefix="mermaid-inline-", suffix=".mmd")
        except OSError as e:
            raise RenderError(block.index, f"create temp .mmd file: {e}", e) from e

        scratch = Path(name)
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                f.write(block.source)

            # A file left by an earlier run must not pass for fresh output
            output_path.unlink(missing_ok=True)

            cmd = self.build_command(renderer, scratch, output_path, options, puppeteer_config)
            logger.debug("rendering diagram %d: %s", block.index, " ".join(cmd))
            try:
                proc = subprocess.run(
                    cmd,
                    capture_output=True,
                    text=True,
                    timeout=self.config.timeout_seconds,
                )
            except subprocess.TimeoutExpired as e:
                raise RenderError(
                    block.index, f"timed out after {self.config.timeout_seconds}s", e
                ) from e
            except FileNotFoundError as e:
                raise RendererNotFoundError(f"run {renderer}", e) from e
            except OSError as e:
                raise RenderError(block.index, f"run {renderer}: {e}", e) from e
        except OSError as e:
            raise RenderError(block.index, f"prepare render files: {e}", e) from e
        finally:
            scratch.unlink(missing_ok=True)

        if proc.returncode != 0:
            raise RenderError(block.index, (proc.stderr or "").strip())
        if not output_path.is_file():
            raise RenderError(block.index, f"renderer produced no output at {output_path}")

        logger.info("rendered diagram %d -> %s", block.index, output_path)
        return RenderedDiagram(index=block.index, output_path=output_path)
