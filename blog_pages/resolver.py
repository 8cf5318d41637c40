r"""Resolve include markers and footnotes inside document bodies.

Includes are expanded first (``{% include name key="value" %}``) so that
fragments can contribute footnote references. Footnote definitions
(``[^label]: text``) are then lifted out of the body and each reference
(``[^label]``) is replaced with an ordinal link numbered by first reference.
Markers inside fenced or indented code blocks and inline code spans are left
untouched.

Example
-------
>>> from blog_pages.loader import parse_document
>>> from blog_pages.resolver import ReferenceResolver
>>> doc = parse_document(
...     "---\ntitle: Zero\ncategory: blog\n---\nSee[^a].\n\n[^a]: note text\n",
...     "2020-01-20-zero.md",
... )
>>> resolved = ReferenceResolver().resolve(doc)
>>> [(note.ordinal, note.text) for note in resolved.footnotes]
[(1, 'note text')]
"""

from __future__ import annotations

import dataclasses as dc
import logging
import re
import typing as typ

from jinja2 import Environment, TemplateError

from .errors import (
    DocumentError,
    UnresolvedFootnoteError,
    UnresolvedIncludeError,
)
from .fragments import FragmentRegistry, MappingFragmentRegistry
from .models import Document, DocumentFailure, Footnote, ResolvedDocument

logger = logging.getLogger(__name__)

FENCE_PATTERN = re.compile(r"^[ \t]*(`{3,}|~{3,})")
INDENTED_CODE_PATTERN = re.compile(r"^(?: {4}|\t)")
LIST_ITEM_PATTERN = re.compile(r"^ {0,3}(?:[-+*]|\d{1,9}[.)])(?:[ \t]|$)")
INCLUDE_PATTERN = re.compile(
    r"\{%-?\s*include\s+(?P<name>[^\s%]+)(?P<params>.*?)\s*-?%\}"
)
INCLUDE_PARAM_PATTERN = re.compile(
    r"""(?P<key>[A-Za-z_][\w-]*)\s*=\s*(?:"(?P<dq>[^"]*)"|'(?P<sq>[^']*)'|(?P<bare>\S+))"""
)
FOOTNOTE_DEF_PATTERN = re.compile(r"^ {0,3}\[\^(?P<label>[^\]\s]+)\]:[ \t]?(?P<text>.*)$")
FOOTNOTE_REF_PATTERN = re.compile(
    r"(?P<code>(?P<ticks>`+).+?(?P=ticks))|\[\^(?P<label>[^\]\s]+)\]"
)
CONTINUATION_PREFIXES = ("    ", "\t")


@dc.dataclass(slots=True)
class _Line:
    text: str
    in_code: bool


@dc.dataclass(slots=True)
class ResolveResult:
    """Resolved documents and the documents that failed to resolve."""

    resolved: list[ResolvedDocument] = dc.field(default_factory=list)
    failures: list[DocumentFailure] = dc.field(default_factory=list)


def _classify_lines(text: str) -> list[_Line]:
    """Split ``text`` into lines flagged by whether they sit in a code block.

    Fenced blocks (backticks or tildes) and indented code blocks count as
    code. An indented line only opens a code block after a blank line whose
    enclosing block is a plain paragraph; under a list item or a footnote
    definition it is continuation text.
    """
    lines: list[_Line] = []
    fence: str | None = None
    indented_code = False
    previous_blank = True
    in_container = False
    for raw in text.splitlines(keepends=True):
        match = FENCE_PATTERN.match(raw)
        if fence is not None:
            lines.append(_Line(raw, in_code=True))
            if (
                match
                and match.group(1)[0] == fence[0]
                and len(match.group(1)) >= len(fence)
                and not raw[match.end() :].strip()
            ):
                fence = None
            previous_blank = False
            continue

        if not raw.strip():
            lines.append(_Line(raw, in_code=indented_code))
            previous_blank = True
            continue

        indented = INDENTED_CODE_PATTERN.match(raw) is not None
        if indented and (indented_code or (previous_blank and not in_container)):
            indented_code = True
            lines.append(_Line(raw, in_code=True))
            previous_blank = False
            continue

        indented_code = False
        previous_blank = False
        if not indented:
            in_container = bool(
                LIST_ITEM_PATTERN.match(raw)
                or FOOTNOTE_DEF_PATTERN.match(raw.rstrip("\r\n"))
            )
        if match:
            fence = match.group(1)
        lines.append(_Line(raw, in_code=fence is not None))
    return lines


def _substitute_references(
    lines: typ.Iterable[_Line], replace: typ.Callable[[re.Match[str]], str]
) -> str:
    return "".join(
        line.text if line.in_code else FOOTNOTE_REF_PATTERN.sub(replace, line.text)
        for line in lines
    )


def _parse_include_params(raw: str) -> dict[str, str]:
    params: dict[str, str] = {}
    for match in INCLUDE_PARAM_PATTERN.finditer(raw):
        value = match.group("dq")
        if value is None:
            value = match.group("sq")
        if value is None:
            value = match.group("bare")
        params[match.group("key")] = value
    return params


def _strip_continuation(line: str) -> str:
    if line.startswith("\t"):
        return line[1:]
    return line[4:]


class ReferenceResolver:
    """Resolve include markers and footnotes for one document at a time.

    The resolver holds no per-document state, so a single instance can be
    shared between worker threads.
    """

    def __init__(self, registry: FragmentRegistry | None = None) -> None:
        """Initialize the resolver with the fragment registry to consult.

        Parameters
        ----------
        registry : FragmentRegistry, optional
            Source of include fragments. Defaults to an empty registry, so any
            include marker fails to resolve.
        """
        self.registry = registry or MappingFragmentRegistry()
        self._env = Environment(autoescape=False, keep_trailing_newline=True)

    def resolve(self, document: Document) -> ResolvedDocument:
        """Return ``document`` with includes expanded and footnotes numbered.

        Raises
        ------
        UnresolvedIncludeError
            If an include marker names a fragment the registry does not know.
        UnresolvedFootnoteError
            If a footnote reference has no definition in the document.
        DocumentError
            If an include fragment cannot be read or fails to render its
            parameters.
        """
        warnings: list[str] = []
        expanded = self._expand_includes(document)
        body_lines, definitions = self._collect_definitions(
            document.identifier, expanded, warnings
        )
        body, footnotes = self._number_references(
            document.identifier, body_lines, definitions, warnings
        )
        for message in warnings:
            logger.warning(message)
        return ResolvedDocument(
            document=document,
            body=body,
            footnotes=tuple(footnotes),
            warnings=tuple(warnings),
        )

    def _expand_includes(self, document: Document) -> str:
        """Replace include markers outside code blocks with fragment content."""

        def _replace(match: re.Match[str]) -> str:
            name = match.group("name")
            try:
                fragment = self.registry.get(name)
            except (OSError, UnicodeDecodeError) as exc:
                msg = f"include fragment '{name}' could not be read: {exc}"
                raise DocumentError(document.identifier, msg) from exc
            if fragment is None:
                raise UnresolvedIncludeError(document.identifier, name)
            params = _parse_include_params(match.group("params"))
            if params:
                try:
                    fragment = self._env.from_string(fragment).render(include=params)
                except TemplateError as exc:
                    msg = f"include fragment '{name}' failed to render: {exc}"
                    raise DocumentError(document.identifier, msg) from exc
            return fragment.removesuffix("\n")

        parts: list[str] = []
        for line in _classify_lines(document.body):
            if line.in_code:
                parts.append(line.text)
            else:
                parts.append(INCLUDE_PATTERN.sub(_replace, line.text))
        return "".join(parts)

    @staticmethod
    def _collect_definitions(
        identifier: str, text: str, warnings: list[str]
    ) -> tuple[list[_Line], dict[str, str]]:
        """Lift footnote definitions out of ``text``; the first definition wins."""
        lines = _classify_lines(text)
        body: list[_Line] = []
        definitions: dict[str, str] = {}
        index = 0
        while index < len(lines):
            line = lines[index]
            match = None if line.in_code else FOOTNOTE_DEF_PATTERN.match(
                line.text.rstrip("\r\n")
            )
            if match is None:
                body.append(line)
                index += 1
                continue

            parts = [match.group("text")]
            index += 1
            while index < len(lines):
                candidate = lines[index].text.rstrip("\r\n")
                if candidate.startswith(CONTINUATION_PREFIXES) and candidate.strip():
                    parts.append(_strip_continuation(candidate))
                    index += 1
                    continue
                following = lines[index + 1].text if index + 1 < len(lines) else ""
                if (
                    not candidate.strip()
                    and following.startswith(CONTINUATION_PREFIXES)
                    and following.strip()
                ):
                    parts.append("")
                    index += 1
                    continue
                break

            label = match.group("label")
            if label in definitions:
                warnings.append(
                    f"{identifier}: duplicate definition for footnote [^{label}] "
                    "ignored; the first definition wins"
                )
                continue
            definitions[label] = "\n".join(parts).strip()
        return body, definitions

    @staticmethod
    def _number_references(
        identifier: str,
        lines: list[_Line],
        definitions: dict[str, str],
        warnings: list[str],
    ) -> tuple[str, list[Footnote]]:
        """Replace references with ordinal links in first-reference order.

        The body is scanned first, then the text of each referenced note in
        ordinal order, so a note may cite another note.
        """
        ordinals: dict[str, int] = {}
        order: list[str] = []
        missing: list[str] = []

        def _replace(match: re.Match[str]) -> str:
            if match.group("code"):
                return match.group(0)
            label = match.group("label")
            if label not in definitions:
                if label not in missing:
                    missing.append(label)
                return match.group(0)
            if label in ordinals:
                ordinal = ordinals[label]
                return (
                    f'<sup><a href="#fn:{ordinal}" class="footnote-ref" '
                    f'role="doc-noteref">{ordinal}</a></sup>'
                )
            ordinal = len(ordinals) + 1
            ordinals[label] = ordinal
            order.append(label)
            return (
                f'<sup id="fnref:{ordinal}"><a href="#fn:{ordinal}" '
                f'class="footnote-ref" role="doc-noteref">{ordinal}</a></sup>'
            )

        body = _substitute_references(lines, _replace)
        texts: dict[str, str] = {}
        position = 0
        # ``order`` grows while notes citing new labels are scanned.
        while position < len(order):
            label = order[position]
            texts[label] = _substitute_references(
                _classify_lines(definitions[label]), _replace
            )
            position += 1
        if missing:
            raise UnresolvedFootnoteError(identifier, missing)

        for label in definitions:
            if label not in ordinals:
                warnings.append(
                    f"{identifier}: footnote [^{label}] is defined but "
                    "never referenced"
                )
        footnotes = [
            Footnote(label=label, text=texts[label], ordinal=ordinals[label])
            for label in order
        ]
        return body, footnotes


def resolve_documents(
    documents: typ.Iterable[Document], resolver: ReferenceResolver
) -> ResolveResult:
    """Resolve each document, recording failures without stopping the batch."""
    result = ResolveResult()
    for document in documents:
        try:
            result.resolved.append(resolver.resolve(document))
        except DocumentError as exc:
            logger.warning("skipping %s", exc)
            result.failures.append(DocumentFailure(document.identifier, "resolve", exc))
    return result


__all__ = ["ReferenceResolver", "ResolveResult", "resolve_documents"]
