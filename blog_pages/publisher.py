"""Compute destination paths and write rendered pages to the output tree.

Destination paths are a deterministic function of a document's category,
date and slug. The publisher checks the whole batch for collisions before
writing anything, so a run either writes every page or none of them.

Example
-------
>>> from blog_pages.loader import parse_document
>>> from blog_pages.publisher import destination_path
>>> doc = parse_document(
...     "---\\ntitle: Zero\\ncategory: blog\\n---\\n", "2020-01-20-zero.md"
... )
>>> str(destination_path(doc))
'blog/2020-01-20-zero'
"""

from __future__ import annotations

import collections
import json
import logging
import re
import typing as typ
from pathlib import Path, PurePosixPath

from ._constants import MANIFEST_FILENAME
from .errors import WriteConflictError

if typ.TYPE_CHECKING:
    from .models import Document, RenderedPage

logger = logging.getLogger(__name__)


def _slugify(value: str) -> str:
    """Convert a string into a lowercase hyphen-separated slug."""
    return re.sub(r"[^a-z0-9]+", "-", value.lower()).strip("-")


def destination_path(document: Document) -> PurePosixPath:
    """Return ``<category>/<date>-<slug>`` (or ``<category>/<slug>``) for ``document``."""
    segments = [_slugify(part) for part in document.category.split("/")]
    category = [segment for segment in segments if segment] or ["uncategorized"]
    slug = _slugify(document.slug) or "untitled"
    date = document.date
    name = f"{date.isoformat()}-{slug}" if date else slug
    return PurePosixPath(*category, name)


def _file_path(destination: PurePosixPath, extension: str) -> PurePosixPath:
    return destination.with_name(f"{destination.name}{extension}")


def find_conflicts(
    pages: typ.Iterable[RenderedPage], *, extension: str = ".html"
) -> dict[PurePosixPath, list[str]]:
    """Return destinations that cannot all be written in one batch.

    A destination conflicts when more than one document claims it, or when
    its file (``destination`` plus ``extension``) would have to be a
    directory holding another document's page.
    """
    claims: dict[PurePosixPath, list[str]] = collections.defaultdict(list)
    directories: dict[PurePosixPath, list[str]] = collections.defaultdict(list)
    for page in pages:
        identifier = page.document.identifier
        claims[page.destination].append(identifier)
        for parent in _file_path(page.destination, extension).parents:
            if parent != PurePosixPath("."):
                directories[parent].append(identifier)

    conflicts = {
        destination: list(identifiers)
        for destination, identifiers in claims.items()
        if len(identifiers) > 1
    }
    for destination, identifiers in claims.items():
        nested = directories.get(_file_path(destination, extension))
        if not nested:
            continue
        claimants = conflicts.setdefault(destination, list(identifiers))
        claimants.extend(item for item in nested if item not in claimants)
    return conflicts


class Publisher:
    """Write rendered pages below an output directory."""

    def __init__(self, output_dir: Path, *, extension: str = ".html") -> None:
        self.output_dir = output_dir
        self.extension = extension

    def target_for(self, page: RenderedPage) -> Path:
        """Return the filesystem path ``page`` is written to."""
        destination = page.destination
        filename = f"{destination.name}{self.extension}"
        return self.output_dir.joinpath(*destination.parent.parts, filename)

    def publish(
        self, pages: typ.Sequence[RenderedPage], *, dry_run: bool = False
    ) -> list[Path]:
        """Write every page, or nothing when destinations collide.

        Parameters
        ----------
        pages : Sequence[RenderedPage]
            The complete batch of rendered pages.
        dry_run : bool, optional
            Compute and return target paths without touching the filesystem.

        Returns
        -------
        list[Path]
            Paths written (or that would be written), in input order.

        Raises
        ------
        WriteConflictError
            If two or more pages share a destination, or one page would sit
            inside another page's file. Raised before any write.
        """
        conflicts = find_conflicts(pages, extension=self.extension)
        if conflicts:
            raise WriteConflictError(conflicts)

        targets = [self.target_for(page) for page in pages]
        if dry_run:
            return targets

        for page, target in zip(pages, targets, strict=True):
            target.parent.mkdir(parents=True, exist_ok=True)
            target.write_text(page.html, encoding="utf-8")
            logger.debug("wrote %s from %s", target, page.document.identifier)
        if pages:
            self._write_manifest(pages)
        return targets

    def _write_manifest(self, pages: typ.Sequence[RenderedPage]) -> None:
        """Persist a JSON map of destination paths to source identifiers."""
        manifest = {
            "pages": {
                str(page.destination): page.document.identifier
                for page in sorted(pages, key=lambda item: str(item.destination))
            }
        }
        path = self.output_dir / MANIFEST_FILENAME
        path.write_text(json.dumps(manifest, indent=2) + "\n", encoding="utf-8")


__all__ = ["Publisher", "destination_path", "find_conflicts"]
