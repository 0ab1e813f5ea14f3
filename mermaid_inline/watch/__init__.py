"""Watch mode: re-render when the source file changes."""

from mermaid_inline.watch.watcher import WatchLoop

__all__ = ["WatchLoop"]
