"""Exception types raised by the render pipeline, presenter, and watcher."""

from __future__ import annotations


class MermaidInlineError(Exception):
    """Base error; carries a short description of the operation that failed."""

    def __init__(self, operation: str, cause: object | None = None) -> None:
        self.operation = operation
        message = f"{operation}: {cause}" if cause is not None else operation
        super().__init__(message)
        if isinstance(cause, BaseException):
            self.__cause__ = cause


class SourceError(MermaidInlineError):
    """The Markdown source could not be read."""


class NoDiagramsError(MermaidInlineError):
    """No mermaid blocks were left to render after extraction and filtering."""


class RendererNotFoundError(MermaidInlineError):
    """The external renderer executable could not be located or launched."""


class RenderError(MermaidInlineError):
    """Rendering a single diagram block failed."""

    def __init__(self, index: int, detail: str, cause: BaseException | None = None) -> None:
        self.index = index
        self.detail = detail
        super().__init__(f"mmdc failed for diagram {index}", detail)
        if cause is not None:
            self.__cause__ = cause


class DisplayError(MermaidInlineError):
    """Reading, encoding, or writing an inline image failed."""


class WatchError(MermaidInlineError):
    """The filesystem notification channel failed."""
