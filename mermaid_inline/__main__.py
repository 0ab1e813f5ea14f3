from mermaid_inline.cli import app

app(prog_name="mermaid-inline")
