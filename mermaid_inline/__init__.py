"""Render Mermaid diagrams from Markdown and show them inline in the terminal."""

__version__ = "0.1.0"
