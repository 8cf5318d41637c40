"""Error taxonomy for the publishing pipeline.

Per-document errors (:class:`DocumentError` and its subclasses) skip the
offending document and let the batch continue; they are collected into the
batch report. :class:`WriteConflictError` is batch-level and aborts the run
before anything is written.
"""

from __future__ import annotations

import typing as typ

if typ.TYPE_CHECKING:
    from pathlib import PurePosixPath


class PublishError(Exception):
    """Base class for every error raised by the publishing pipeline."""


class DocumentError(PublishError):
    """Raised when a single document cannot be processed."""

    def __init__(self, identifier: str, message: str) -> None:
        super().__init__(f"{identifier}: {message}")
        self.identifier = identifier
        self.reason = message


class MalformedHeaderError(DocumentError):
    """Raised when a document's front-matter header is not well formed."""


class UnresolvedFootnoteError(DocumentError):
    """Raised when a footnote reference has no matching definition."""

    def __init__(self, identifier: str, labels: list[str]) -> None:
        joined = ", ".join(f"[^{label}]" for label in labels)
        super().__init__(identifier, f"undefined footnote reference(s) {joined}")
        self.labels = labels


class UnresolvedIncludeError(DocumentError):
    """Raised when an include marker names a fragment the registry lacks."""

    def __init__(self, identifier: str, name: str) -> None:
        super().__init__(identifier, f"include fragment '{name}' not found")
        self.name = name


class LayoutNotFoundError(DocumentError):
    """Raised when a document requests a layout with no matching template."""

    def __init__(self, identifier: str, layout: str) -> None:
        super().__init__(identifier, f"layout '{layout}' not found")
        self.layout = layout


class WriteConflictError(PublishError):
    """Raised when two or more documents share a destination path."""

    def __init__(self, conflicts: dict[PurePosixPath, list[str]]) -> None:
        details = "; ".join(
            f"{destination} <- {', '.join(identifiers)}"
            for destination, identifiers in sorted(conflicts.items())
        )
        super().__init__(f"Destination path conflicts: {details}")
        self.conflicts = conflicts


__all__ = [
    "DocumentError",
    "LayoutNotFoundError",
    "MalformedHeaderError",
    "PublishError",
    "UnresolvedFootnoteError",
    "UnresolvedIncludeError",
    "WriteConflictError",
]
