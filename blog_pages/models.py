"""Shared dataclasses passed between the publishing pipeline stages."""

from __future__ import annotations

import dataclasses as dc
import datetime as dt
import re
import typing as typ
from pathlib import Path, PurePosixPath
from types import MappingProxyType

from ._constants import DEFAULT_LAYOUT

if typ.TYPE_CHECKING:
    from .errors import PublishError

DATE_PREFIX_PATTERN = re.compile(r"^(\d{4}-\d{2}-\d{2})-")
DATE_VALUE_PATTERN = re.compile(r"^\s*(\d{4}-\d{2}-\d{2})")


@dc.dataclass(frozen=True, slots=True)
class Document:
    """One article's metadata header and body, as loaded into memory.

    Attributes
    ----------
    identifier : str
        Source path relative to the source directory in POSIX form; unique
        within a batch.
    metadata : Mapping[str, Any]
        Read-only view of the parsed front-matter header.
    body : str
        Raw body text following the header block.
    header_block : str
        The header exactly as read, delimiters and line endings included.
    source_path : Path or None
        Filesystem path the document was read from, when loaded from disk.
    """

    identifier: str
    metadata: typ.Mapping[str, typ.Any]
    body: str
    header_block: str
    source_path: Path | None = None

    def __post_init__(self) -> None:
        if not isinstance(self.metadata, MappingProxyType):
            object.__setattr__(self, "metadata", MappingProxyType(dict(self.metadata)))

    def serialize(self) -> str:
        """Return the header and body exactly as they were loaded."""
        return self.header_block + self.body

    @property
    def title(self) -> str:
        return str(self.metadata.get("title", ""))

    @property
    def category(self) -> str:
        value = self.metadata.get("category", "")
        if isinstance(value, list):
            return "/".join(str(part) for part in value)
        return str(value)

    @property
    def tags(self) -> list[str]:
        value = self.metadata.get("tags")
        if value is None:
            return []
        if isinstance(value, str):
            return value.split()
        return [str(tag) for tag in value]

    @property
    def layout(self) -> str:
        value = self.metadata.get("layout")
        return str(value) if value else DEFAULT_LAYOUT

    @property
    def asset_path(self) -> str | None:
        value = self.metadata.get("asset_path")
        return str(value) if value else None

    @property
    def stem(self) -> str:
        """File name of the identifier without its suffix."""
        return PurePosixPath(self.identifier).stem

    @property
    def date(self) -> dt.date | None:
        """Publication date from the header, else from a dated file name."""
        value = self.metadata.get("date")
        match value:
            case dt.datetime():
                return value.date()
            case dt.date():
                return value
            case str():
                found = DATE_VALUE_PATTERN.match(value)
                if found:
                    return _parse_iso_date(found.group(1))
        prefix = DATE_PREFIX_PATTERN.match(self.stem)
        return _parse_iso_date(prefix.group(1)) if prefix else None

    @property
    def slug(self) -> str:
        """URL slug: the ``slug`` header key or the undated file stem."""
        value = self.metadata.get("slug")
        if value:
            return str(value)
        return DATE_PREFIX_PATTERN.sub("", self.stem) or self.stem


def _parse_iso_date(text: str) -> dt.date | None:
    try:
        return dt.date.fromisoformat(text)
    except ValueError:
        return None


@dc.dataclass(frozen=True, slots=True)
class Footnote:
    """A labeled annotation, numbered by the position of its first reference."""

    label: str
    text: str
    ordinal: int


@dc.dataclass(frozen=True, slots=True)
class ResolvedDocument:
    """Document whose include and footnote markers have been resolved."""

    document: Document
    body: str
    footnotes: tuple[Footnote, ...] = ()
    warnings: tuple[str, ...] = ()


@dc.dataclass(frozen=True, slots=True)
class RenderedPage:
    """Rendered HTML for one document plus its destination path."""

    document: Document
    html: str
    destination: PurePosixPath


@dc.dataclass(frozen=True, slots=True)
class DocumentFailure:
    """A per-document error recorded against the stage that raised it."""

    identifier: str
    stage: str
    error: PublishError

    def __str__(self) -> str:
        return f"[{self.stage}] {self.error}"


@dc.dataclass(slots=True)
class BatchReport:
    """Summary of a publish run.

    Attributes
    ----------
    written : list[Path]
        Files written (or that would be written during a dry run).
    failures : list[DocumentFailure]
        Documents skipped because of per-document errors.
    warnings : list[str]
        Non-fatal conditions noticed while resolving documents.
    dry_run : bool
        Whether the run skipped filesystem writes.
    checked : int
        Number of source documents the run looked at, failures included.
    """

    written: list[Path] = dc.field(default_factory=list)
    failures: list[DocumentFailure] = dc.field(default_factory=list)
    warnings: list[str] = dc.field(default_factory=list)
    dry_run: bool = False
    checked: int = 0

    @property
    def ok(self) -> bool:
        return not self.failures


__all__ = [
    "BatchReport",
    "Document",
    "DocumentFailure",
    "Footnote",
    "RenderedPage",
    "ResolvedDocument",
]
