r"""Load Markdown articles with a YAML front-matter header into Documents.

Each source file opens with a header block delimited by ``---`` lines and is
followed by the Markdown body. The loader keeps the header block verbatim so
``Document.serialize`` reproduces the input byte for byte.

Example
-------
>>> from blog_pages.loader import parse_document
>>> doc = parse_document(
...     "---\ntitle: Zero\ncategory: blog\ntags: [perf]\n---\nBody\n",
...     "2020-01-20-zero.md",
... )
>>> doc.title, doc.tags, doc.slug
('Zero', ['perf'], 'zero')
"""

from __future__ import annotations

import dataclasses as dc
import logging
import typing as typ
from pathlib import Path

from ruamel.yaml import YAML
from ruamel.yaml.constructor import DuplicateKeyError
from ruamel.yaml.error import YAMLError

from ._constants import HEADER_DELIMITER, SOURCE_PATTERNS
from .errors import MalformedHeaderError
from .models import Document, DocumentFailure

logger = logging.getLogger(__name__)

REQUIRED_KEYS = ("title", "category")


@dc.dataclass(slots=True)
class LoadResult:
    """Documents loaded from a source directory and the files that failed."""

    documents: list[Document] = dc.field(default_factory=list)
    failures: list[DocumentFailure] = dc.field(default_factory=list)


def _is_delimiter(line: str) -> bool:
    return line.rstrip("\r\n").rstrip() == HEADER_DELIMITER


def _split_header(text: str, identifier: str) -> tuple[str, str, str]:
    """Return ``(header_block, header_yaml, body)`` for ``text``."""
    lines = text.splitlines(keepends=True)
    if not lines or not _is_delimiter(lines[0].lstrip("\ufeff")):
        msg = f"missing opening '{HEADER_DELIMITER}' header delimiter"
        raise MalformedHeaderError(identifier, msg)
    for index in range(1, len(lines)):
        if _is_delimiter(lines[index]):
            header_block = "".join(lines[: index + 1])
            header_yaml = "".join(lines[1:index])
            body = "".join(lines[index + 1 :])
            return header_block, header_yaml, body
    msg = f"missing closing '{HEADER_DELIMITER}' header delimiter"
    raise MalformedHeaderError(identifier, msg)


def _parse_header(header_yaml: str, identifier: str) -> dict[str, typ.Any]:
    """Parse the YAML header, rejecting duplicate keys and non-mappings."""
    loader = YAML(typ="safe", pure=True)
    loader.version = (1, 2)
    try:
        loaded = loader.load(header_yaml)
    except DuplicateKeyError as exc:
        msg = f"duplicate header key: {exc.problem}"
        raise MalformedHeaderError(identifier, msg) from exc
    except YAMLError as exc:
        msg = f"header is not valid YAML: {exc}"
        raise MalformedHeaderError(identifier, msg) from exc
    if loaded is None:
        loaded = {}
    if not isinstance(loaded, dict):
        msg = "header must be a mapping of keys to values"
        raise MalformedHeaderError(identifier, msg)
    metadata = {str(key): value for key, value in loaded.items()}
    missing = [key for key in REQUIRED_KEYS if not metadata.get(key)]
    if missing:
        msg = f"missing required header key(s): {', '.join(missing)}"
        raise MalformedHeaderError(identifier, msg)
    tags = metadata.get("tags")
    if tags is not None and not isinstance(tags, (str, list)):
        msg = "'tags' must be a list or a whitespace-separated string"
        raise MalformedHeaderError(identifier, msg)
    return metadata


def parse_document(
    text: str, identifier: str, source_path: Path | None = None
) -> Document:
    """Split ``text`` into a header mapping and body.

    Parameters
    ----------
    text : str
        Full source text, header block included.
    identifier : str
        Unique identifier for the document, usually its relative path.
    source_path : Path, optional
        Filesystem path the text was read from.

    Returns
    -------
    Document
        Immutable document whose ``serialize()`` returns ``text`` unchanged.

    Raises
    ------
    MalformedHeaderError
        If a delimiter is missing, the header is not a YAML mapping, a key is
        duplicated, or a required key (``title``, ``category``) is absent.
    """
    header_block, header_yaml, body = _split_header(text, identifier)
    metadata = _parse_header(header_yaml, identifier)
    return Document(
        identifier=identifier,
        metadata=metadata,
        body=body,
        header_block=header_block,
        source_path=source_path,
    )


def _discover_sources(source_dir: Path, patterns: typ.Iterable[str]) -> list[Path]:
    """Return matching files under ``source_dir``, skipping ``_``/``.`` entries."""
    found: set[Path] = set()
    for pattern in patterns:
        for path in source_dir.rglob(pattern):
            relative = path.relative_to(source_dir)
            if any(part.startswith(("_", ".")) for part in relative.parts):
                continue
            if path.is_file():
                found.add(path)
    return sorted(found)


def load_documents(
    source_dir: Path, patterns: typ.Iterable[str] = SOURCE_PATTERNS
) -> LoadResult:
    """Load every article under ``source_dir``.

    Malformed files are recorded as ``load`` failures and skipped so the rest
    of the batch still loads.

    Raises
    ------
    FileNotFoundError
        If ``source_dir`` does not exist.
    """
    if not source_dir.is_dir():
        msg = f"Source directory '{source_dir}' not found."
        raise FileNotFoundError(msg)

    result = LoadResult()
    for path in _discover_sources(source_dir, patterns):
        identifier = path.relative_to(source_dir).as_posix()
        try:
            # Decode bytes directly so CRLF line endings survive a round trip.
            text = path.read_bytes().decode("utf-8")
        except UnicodeDecodeError as exc:
            error = MalformedHeaderError(identifier, f"not valid UTF-8: {exc}")
            result.failures.append(DocumentFailure(identifier, "load", error))
            continue
        try:
            document = parse_document(text, identifier, source_path=path)
        except MalformedHeaderError as exc:
            logger.warning("skipping %s", exc)
            result.failures.append(DocumentFailure(identifier, "load", exc))
            continue
        result.documents.append(document)
    logger.debug(
        "loaded %d document(s) from %s with %d failure(s)",
        len(result.documents),
        source_dir,
        len(result.failures),
    )
    return result


__all__ = ["LoadResult", "load_documents", "parse_document"]
