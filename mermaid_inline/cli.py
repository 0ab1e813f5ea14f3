"""CLI entry point for mermaid-inline."""

from __future__ import annotations

import logging
import sys
from pathlib import Path
from typing import Annotated

import typer
import yaml
from pydantic import ValidationError
from rich import print as rprint
from rich.syntax import Syntax
from rich.table import Table

from mermaid_inline.config import MermaidInlineConfig, load_config
from mermaid_inline.config.loader import CONFIG_FILENAME, DEFAULT_CONFIG_TEMPLATE
from mermaid_inline.display import supports_kitty_graphics
from mermaid_inline.doctor import MERMAID_CLI_PACKAGE, check_dependencies, upgrade_renderer
from mermaid_inline.errors import MermaidInlineError, NoDiagramsError
from mermaid_inline.render import RenderOptions
from mermaid_inline.runner import RenderRequest, render_once, watch_and_render

logger = logging.getLogger(__name__)

EXIT_FAILURE = 1
EXIT_NO_DIAGRAMS = 2

_LOG_LEVELS = {
    "debug": logging.DEBUG,
    "info": logging.INFO,
    "warn": logging.WARNING,
    "error": logging.ERROR,
}

app = typer.Typer(
    name="mermaid-inline",
    help="Render Mermaid blocks from Markdown and show them inline in Kitty.",
    no_args_is_help=True,
)

config_app = typer.Typer(help="Manage mermaid-inline configuration.")
app.add_typer(config_app, name="config")

# Global state
_config: MermaidInlineConfig | None = None


def _get_config() -> MermaidInlineConfig:
    if _config is None:
        return load_config()
    return _config


def _fail(message: object, code: int = EXIT_FAILURE) -> typer.Exit:
    typer.echo(f"error: {message}", err=True)
    return typer.Exit(code)


@app.callback()
def main(
    config: Annotated[
        str | None, typer.Option("--config", "-c", help=f"Path to {CONFIG_FILENAME}")
    ] = None,
    verbose: Annotated[bool, typer.Option("--verbose", "-v", help="Debug logging")] = False,
) -> None:
    """Global options."""
    global _config
    try:
        _config = load_config(config)
    except ValueError as e:
        raise _fail(e)

    level = logging.DEBUG if verbose else _LOG_LEVELS[_config.log_level]
    logging.basicConfig(format="%(levelname)s: %(message)s")
    logging.getLogger().setLevel(level)


@app.command()
def render(
    file: Path = typer.Argument(..., help="Markdown file path"),
    inline: bool = typer.Option(True, "--inline/--no-inline", help="Display PNGs inline (Kitty)"),
    out_dir: Annotated[
        Path | None, typer.Option("--out-dir", "-o", help="Output directory for PNGs (default: temp dir)")
    ] = None,
    index: Annotated[
        int | None, typer.Option("--index", "-n", help="1-based diagram index to render a single block")
    ] = None,
    watch: Annotated[bool, typer.Option("--watch", "-w", help="Watch file and re-render on change")] = False,
    clear: Annotated[bool, typer.Option("--clear", help="Clear previous inline images before rendering")] = False,
    scale: Annotated[
        float | None, typer.Option("--scale", help="Render scale passed to mmdc (e.g. 2.0)")
    ] = None,
    width: Annotated[int | None, typer.Option("--width", help="Output width passed to mmdc")] = None,
    height: Annotated[int | None, typer.Option("--height", help="Output height passed to mmdc")] = None,
) -> None:
    """Render Mermaid blocks from a Markdown file."""
    cfg = _get_config()

    try:
        options = RenderOptions(scale=scale, width=width, height=height)
    except ValidationError as e:
        raise _fail(f"invalid render options: {e.errors()[0]['msg']}")

    request = RenderRequest(
        file=file,
        inline=inline,
        out_dir=out_dir,
        index=index,
        clear=clear,
        options=options,
    )

    if inline and sys.stdout.isatty() and not supports_kitty_graphics():
        logger.warning("terminal does not look Kitty-compatible; images may not display")

    if watch:
        try:
            watch_and_render(request, cfg)
        except MermaidInlineError as e:
            raise _fail(e)
        except KeyboardInterrupt:
            raise typer.Exit(130)
        return

    try:
        rendered = render_once(request, cfg)
    except NoDiagramsError as e:
        raise _fail(e, EXIT_NO_DIAGRAMS)
    except MermaidInlineError as e:
        raise _fail(e)

    if not inline:
        for diagram in rendered:
            typer.echo(str(diagram.output_path))


@app.command()
def setup(
    upgrade: Annotated[
        bool, typer.Option("--upgrade", help="Upgrade Mermaid CLI to latest using npm")
    ] = False,
) -> None:
    """Check dependencies and print install hints."""
    cfg = _get_config()
    report = check_dependencies(cfg.renderer)

    table = Table(title="Dependencies")
    table.add_column("Tool", style="cyan")
    table.add_column("Status", justify="center")
    table.add_column("Path", style="dim")
    for name in ("node", "mmdc"):
        if name in report.found:
            table.add_row(name, "[green]found[/green]", report.found[name])
        else:
            table.add_row(name, "[red]missing[/red]", "-")
    table.add_row(
        "browser",
        "[green]found[/green]" if report.browser else "[yellow]default[/yellow]",
        report.browser or "(mmdc bundled Chromium)",
    )
    rprint(table)

    if report.ok:
        rprint("[green]All dependencies found.[/green]")
    else:
        rprint(f"[red]Missing dependencies:[/red] {', '.join(report.missing)}")
        rprint("[bold]Install hints:[/bold]")
        for hint in report.hints():
            rprint(f"  - {hint}")

    if upgrade:
        try:
            upgraded = upgrade_renderer()
        except MermaidInlineError as e:
            raise _fail(e)
        if upgraded:
            rprint("[green]Mermaid CLI upgraded to latest.[/green]")
        else:
            rprint(
                "[yellow]Upgrade failed.[/yellow] Try: "
                f"sudo npm install -g {MERMAID_CLI_PACKAGE}@latest"
            )


@config_app.command("show")
def config_show() -> None:
    """Show current resolved configuration."""
    cfg = _get_config()
    rprint(Syntax(yaml.dump(cfg.model_dump(), default_flow_style=False), "yaml"))


@config_app.command("init")
def config_init(
    force: bool = typer.Option(False, "--force", help="Overwrite existing config"),
) -> None:
    """Create default mermaid-inline.yaml in current directory."""
    target = Path(CONFIG_FILENAME)
    if target.exists() and not force:
        rprint(f"[yellow]{CONFIG_FILENAME} already exists.[/yellow] Use --force to overwrite.")
        raise typer.Exit(1)
    target.write_text(DEFAULT_CONFIG_TEMPLATE, encoding="utf-8")
    rprint(f"[green]Created[/green] {target}")


if __name__ == "__main__":
    app()
