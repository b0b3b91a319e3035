"""Exceptions raised while materializing a template tree."""

from __future__ import annotations

from pathlib import Path


class MaterializeError(Exception):
    """Base class for every error the materializer raises on purpose."""


class UnknownVariantError(MaterializeError):
    """Raised by a strict variant lookup when the selector is not recognised."""

    def __init__(self, selector: str) -> None:
        self.selector = selector
        super().__init__(f"Unknown data provider selector: {selector!r}")


class TemplateNotFoundError(MaterializeError):
    """Raised when the template root does not exist or is not a directory."""

    def __init__(self, path: Path) -> None:
        self.path = path
        super().__init__(f"Template directory not found: {path}")


class TemplateIOError(MaterializeError):
    """Wraps an ``OSError`` hit while reading, writing or deleting a file.

    The run is aborted at the first one; files written before it stay on disk.
    """

    def __init__(self, operation: str, path: Path, cause: OSError) -> None:
        self.operation = operation
        self.path = path
        self.cause = cause
        super().__init__(f"Failed to {operation} {path}: {cause.strerror or cause}")


class DestinationCollisionError(MaterializeError):
    """Raised when two included source files rename onto the same destination."""

    def __init__(self, destination: Path, sources: list[Path]) -> None:
        self.destination = destination
        self.sources = sources
        joined = ", ".join(str(s) for s in sources)
        super().__init__(f"Destination {destination} would be written by several files: {joined}")
