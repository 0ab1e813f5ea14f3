"""Shared test fixtures for mermaid-inline."""

import json
import os
import stat
import sys
from pathlib import Path

import pytest

from mermaid_inline.config.models import MermaidInlineConfig, RendererConfig

FIXTURES = Path(__file__).parent / "fixtures"

FAKE_PNG = b"\x89PNG\r\n\x1a\n" + b"fake-png-body" * 8

# Stand-in for mmdc: records each call as a JSON line, fails on sources that
# contain FAIL, exits 0 without writing anything for NOOUTPUT.
_FAKE_MMDC = """\
#!__PYTHON__
import json
import os
import sys

args = sys.argv[1:]
src = args[args.index("-i") + 1]
out = args[args.index("-o") + 1]
config = None
if "-p" in args:
    with open(args[args.index("-p") + 1]) as f:
        config = json.load(f)
with open(src) as f:
    source = f.read()

log = os.environ.get("FAKE_MMDC_LOG")
if log:
    with open(log, "a") as f:
        f.write(json.dumps({"args": args, "source": source, "config": config}) + "\\n")

if "FAIL" in source:
    sys.stderr.write("Parse error on line 1: FAIL\\n")
    sys.exit(1)
if "NOOUTPUT" in source:
    sys.exit(0)
with open(out, "wb") as f:
    f.write(__PNG__)
"""


class FakeRenderer:
    """Handle on the fake mmdc installed for a test."""

    def __init__(self, bin_dir: Path, log_path: Path) -> None:
        self.bin_dir = bin_dir
        self.log_path = log_path
        self.png = FAKE_PNG

    @property
    def path(self) -> Path:
        return self.bin_dir / "mmdc"

    def calls(self) -> list[dict]:
        if not self.log_path.exists():
            return []
        return [json.loads(line) for line in self.log_path.read_text().splitlines() if line]


@pytest.fixture
def fake_mmdc(tmp_path, monkeypatch):
    """Put a fake mmdc first on PATH and return a FakeRenderer."""
    bin_dir = tmp_path / "bin"
    bin_dir.mkdir()
    script = bin_dir / "mmdc"
    script.write_text(
        _FAKE_MMDC.replace("__PYTHON__", sys.executable).replace("__PNG__", repr(FAKE_PNG))
    )
    script.chmod(script.stat().st_mode | stat.S_IXUSR | stat.S_IXGRP | stat.S_IXOTH)

    log_path = tmp_path / "mmdc-calls.jsonl"
    monkeypatch.setenv("PATH", f"{bin_dir}{os.pathsep}{os.environ.get('PATH', '')}")
    monkeypatch.setenv("FAKE_MMDC_LOG", str(log_path))
    return FakeRenderer(bin_dir, log_path)


@pytest.fixture
def renderer_config(monkeypatch):
    """RendererConfig that never finds a system browser."""
    monkeypatch.delenv("MMDC_CHROME_PATH", raising=False)
    return RendererConfig(browser_candidates=[])


@pytest.fixture
def sample_config(renderer_config):
    return MermaidInlineConfig(renderer=renderer_config)


@pytest.fixture
def markdown_with_mermaid() -> str:
    return (FIXTURES / "markdown_with_mermaid.md").read_text(encoding="utf-8")


@pytest.fixture
def markdown_without_mermaid() -> str:
    return (FIXTURES / "markdown_without_mermaid.md").read_text(encoding="utf-8")


@pytest.fixture
def png_file(tmp_path) -> Path:
    path = tmp_path / "diagram.png"
    path.write_bytes(FAKE_PNG)
    return path
