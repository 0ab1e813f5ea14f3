"""Render-and-display orchestration shared by the one-shot and watch commands."""

from __future__ import annotations

import logging
import tempfile
from pathlib import Path

from pydantic import BaseModel, ConfigDict

from mermaid_inline.config.models import MermaidInlineConfig
from mermaid_inline.display import KittyPresenter
from mermaid_inline.errors import MermaidInlineError, NoDiagramsError, SourceError
from mermaid_inline.extract import extract_mermaid_blocks, filter_blocks
from mermaid_inline.render import RenderedDiagram, RenderOptions, RenderPipeline
from mermaid_inline.watch import WatchLoop

logger = logging.getLogger(__name__)


class RenderRequest(BaseModel):
    """Everything one `render` invocation needs, resolved from CLI and config."""

    model_config = ConfigDict(frozen=True)

    file: Path
    inline: bool = True
    out_dir: Path | None = None
    index: int | None = None
    clear: bool = False
    options: RenderOptions = RenderOptions()


def resolve_output_dir(out_dir: Path | None) -> Path:
    """Create ``out_dir`` if given, else a fresh temp dir that outlives the process."""
    try:
        if out_dir is not None:
            out_dir.mkdir(parents=True, exist_ok=True)
            return out_dir
        return Path(tempfile.mkdtemp(prefix="mermaid-inline-"))
    except OSError as e:
        raise MermaidInlineError(f"create output directory {out_dir or '(temp)'}", e) from e


def render_once(
    request: RenderRequest,
    config: MermaidInlineConfig | None = None,
    pipeline: RenderPipeline | None = None,
    presenter: KittyPresenter | None = None,
) -> list[RenderedDiagram]:
    """Extract, render and (optionally) display the diagrams in ``request.file``.

    Raises NoDiagramsError when nothing is left after index filtering.
    """
    config = config or MermaidInlineConfig()
    pipeline = pipeline or RenderPipeline(config.renderer)

    try:
        markdown = request.file.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as e:
        raise SourceError(f"read {request.file}", e) from e

    blocks = filter_blocks(extract_mermaid_blocks(markdown), request.index)
    if not blocks:
        if request.index is not None:
            raise NoDiagramsError(f"no mermaid diagram with index {request.index} in {request.file}")
        raise NoDiagramsError(f"no mermaid diagrams found in {request.file}")

    out_dir = resolve_output_dir(request.out_dir)
    rendered = pipeline.render(blocks, out_dir, request.options)

    if request.inline:
        presenter = presenter or KittyPresenter(chunk_size=config.display.chunk_size)
        if request.clear or config.display.clear_before_render:
            presenter.clear()
        for diagram in rendered:
            presenter.show(diagram.output_path)

    return rendered


def watch_and_render(
    request: RenderRequest,
    config: MermaidInlineConfig | None = None,
    pipeline: RenderPipeline | None = None,
    presenter: KittyPresenter | None = None,
) -> None:
    """Run ``render_once`` now and again on every change to ``request.file``.

    Blocks until the watcher fails (WatchError) or the process is interrupted.
    A temporary output directory is chosen once so every re-render overwrites
    the same files.
    """
    config = config or MermaidInlineConfig()
    if request.out_dir is None:
        request = request.model_copy(update={"out_dir": resolve_output_dir(None)})

    loop = WatchLoop(
        request.file,
        lambda: render_once(request, config, pipeline, presenter),
        debounce_seconds=config.watch.debounce_seconds,
    )
    loop.run()
