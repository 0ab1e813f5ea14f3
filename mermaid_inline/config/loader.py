"""YAML config loading with env var expansion."""

import os
import re
from collections.abc import Iterator
from pathlib import Path

import yaml
from pydantic import ValidationError

from .models import MermaidInlineConfig

CONFIG_FILENAME = "mermaid-inline.yaml"

_ENV_REF = re.compile(r"\$\{(\w+)\}")


def _user_config_path() -> Path:
    return Path.home() / ".mermaid-inline" / "config.yaml"


def _search_paths(cli_path: str | None) -> Iterator[Path]:
    if cli_path:
        path = Path(cli_path)
        if not path.is_file():
            raise ValueError(f"Config file not found: {path}")
        yield path
    yield Path.cwd() / CONFIG_FILENAME
    yield _user_config_path()


def _read_yaml(path: Path) -> dict | None:
    """Parse ``path``; None for an empty document."""
    try:
        raw = yaml.safe_load(path.read_text(encoding="utf-8"))
    except yaml.YAMLError as e:
        raise ValueError(f"Invalid YAML in {path}: {e}") from e
    if raw is not None and not isinstance(raw, dict):
        raise ValueError(
            f"Invalid config in {path}: expected a mapping, got {type(raw).__name__}"
        )
    return raw


def load_config(cli_path: str | None = None) -> MermaidInlineConfig:
    """Load config from the first non-empty file of: ``--config`` path,
    ./mermaid-inline.yaml, ~/.mermaid-inline/config.yaml. Falls back to defaults.

    An explicit ``cli_path`` that does not exist is an error rather than being
    skipped.
    """
    for path in _search_paths(cli_path):
        if not path.is_file():
            continue
        raw = _read_yaml(path)
        if raw is None:
            continue
        try:
            return MermaidInlineConfig.model_validate(_expand_env_vars(raw))
        except ValidationError as e:
            raise ValueError(f"Invalid config in {path}: {e}") from e

    return MermaidInlineConfig()


def _expand_env_vars(obj: object) -> object:
    """Replace ${VAR} in every string of a parsed YAML tree; unset vars become ""."""
    if isinstance(obj, str):
        return _ENV_REF.sub(lambda m: os.environ.get(m.group(1), ""), obj)
    if isinstance(obj, dict):
        return {key: _expand_env_vars(value) for key, value in obj.items()}
    if isinstance(obj, list):
        return [_expand_env_vars(item) for item in obj]
    return obj


# Default YAML template for `mermaid-inline config init`
DEFAULT_CONFIG_TEMPLATE = """\
# mermaid-inline.yaml

# Mermaid CLI
renderer:
  command: "mmdc"
  output_prefix: "mermaid"       # PNGs are written as <prefix>-<index>.png
  browser_env: "MMDC_CHROME_PATH"
  # browser_candidates: [chromium, chromium-browser, google-chrome, google-chrome-stable]
  # sandbox_args: ["--no-sandbox", "--disable-setuid-sandbox", "--disable-dev-shm-usage"]
  # timeout_seconds: 60          # unset = wait for mmdc indefinitely

# Inline display (Kitty graphics protocol)
display:
  chunk_size: 4096
  clear_before_render: false

# Watch mode
watch:
  debounce_seconds: 0.15

# Logging
log_level: "warn"                # debug | info | warn | error
"""
