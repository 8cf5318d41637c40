"""Utilities for rendering resolved article bodies into HTML.

The renderer is a pure function of its input: every call builds a fresh
``markdown.Markdown`` instance, so rendering the same resolved body twice
yields identical HTML.
"""

from __future__ import annotations

import posixpath
import re
import typing as typ
from html import escape

from markdown import Markdown
from pygments.formatters.html import HtmlFormatter

from .asset_rewriter import build_asset_extension

if typ.TYPE_CHECKING:
    from markdown.extensions import Extension

    from .models import Document, Footnote, ResolvedDocument
else:  # pragma: no cover - type-checking fallback
    Extension = typ.Any

FENCED_INDENT_PATTERN = re.compile(r"^[ ]{1,3}([`~]{3,})", re.MULTILINE)
FENCE_LABEL_PATTERN = re.compile(
    r"^([`~]{3,})([A-Za-z0-9_+#.-]+)?(,[^\r\n]+)$", re.MULTILINE
)
PARAGRAPH_WRAPPER = re.compile(r"^<p>(.*)</p>$", re.DOTALL)
LANG_PREFIX = "language-"


class LanguageHtmlFormatter(HtmlFormatter):
    """Pygments formatter that records the listing language on its wrapper.

    ``codehilite`` passes ``lang_str`` (``language-<name>``) to formatter
    classes for fenced and indented blocks alike; blocks without a language
    arrive as ``language-text``.
    """

    def __init__(self, lang_str: str = "", **options: typ.Any) -> None:
        super().__init__(**options)
        self.language = lang_str.removeprefix(LANG_PREFIX) or "text"

    def _wrap_div(
        self, inner: typ.Iterable[tuple[int, str]]
    ) -> typ.Iterator[tuple[int, str]]:
        wrapped = super()._wrap_div(inner)
        kind, opening = next(wrapped)
        language = escape(self.language, quote=True)
        yield kind, f'{opening[:-1]} data-language="{language}">'
        yield from wrapped


class HtmlContentRenderer:
    """Render markdown bodies, code listings and footnotes with consistent styling."""

    def __init__(self, pygments_style: str = "monokai", asset_base: str = "") -> None:
        """Initialize a renderer with a Pygments style and default asset base.

        Parameters
        ----------
        pygments_style : str, optional
            Name of the Pygments style used for syntax highlighting. Defaults to
            ``"monokai"``.
        asset_base : str, optional
            Site-wide prefix for relative image and asset references. A
            document's ``asset_path`` header overrides it; an empty value
            leaves references untouched.
        """
        self.pygments_style = pygments_style
        self.asset_base = asset_base
        self._formatter = HtmlFormatter(style=pygments_style, cssclass="codehilite")

    @property
    def stylesheet(self) -> str:
        """Return the CSS used for highlighted code blocks."""
        return self._formatter.get_style_defs(".codehilite")

    def asset_base_for(self, document: Document) -> str:
        """Return the asset prefix for ``document``.

        An absolute ``asset_path`` header wins outright; a relative one is
        joined onto the site asset base.
        """
        override = document.asset_path
        if not override:
            return self.asset_base
        if override.startswith("/") or "://" in override or not self.asset_base:
            return override
        return posixpath.join(self.asset_base, override)

    def render(self, resolved: ResolvedDocument) -> str:
        """Render a resolved document body followed by its footnote section."""
        asset_base = self.asset_base_for(resolved.document)
        body_html = self.markdown(resolved.body, asset_base=asset_base)
        notes_html = self.footnotes(resolved.footnotes, asset_base=asset_base)
        if not notes_html:
            return body_html
        if not body_html:
            return notes_html
        return f"{body_html}\n{notes_html}"

    def markdown(self, text: str, *, asset_base: str | None = None) -> str:
        """Render markdown into HTML using the configured extensions."""
        normalized = self._normalize_fenced_blocks(text)
        if not normalized.strip():
            return ""
        extensions: list[Extension | str] = [
            "fenced_code",
            "codehilite",
            "tables",
            "sane_lists",
            "toc",
        ]
        asset_extension = build_asset_extension(asset_base)
        if asset_extension:
            extensions.append(asset_extension)
        md = Markdown(
            extensions=extensions,
            extension_configs={
                "codehilite": {
                    "linenums": False,
                    "guess_lang": False,
                    "css_class": "codehilite",
                    "pygments_style": self.pygments_style,
                    "pygments_formatter": LanguageHtmlFormatter,
                    "lang_prefix": LANG_PREFIX,
                }
            },
        )
        return md.convert(normalized)

    def footnotes(
        self, notes: typ.Sequence[Footnote], *, asset_base: str | None = None
    ) -> str:
        """Render footnote definitions as an ordered list in ordinal order.

        Each entry carries the ``fn:<ordinal>`` anchor targeted by the inline
        references and a back link to the first reference.
        """
        if not notes:
            return ""
        items: list[str] = []
        for note in sorted(notes, key=lambda item: item.ordinal):
            content = self.markdown(note.text, asset_base=asset_base)
            single = PARAGRAPH_WRAPPER.match(content)
            if single and "<p>" not in single.group(1):
                content = single.group(1)
            backref = (
                f'<a href="#fnref:{note.ordinal}" class="footnote-backref" '
                f'role="doc-backlink">&#8617;</a>'
            )
            items.append(f'<li id="fn:{note.ordinal}">{content} {backref}</li>')
        joined = "\n".join(items)
        return (
            '<section class="footnotes" role="doc-endnotes">\n'
            "<hr>\n"
            f"<ol>\n{joined}\n</ol>\n"
            "</section>"
        )

    @staticmethod
    def _normalize_fenced_blocks(text: str) -> str:
        without_indent = FENCED_INDENT_PATTERN.sub(r"\1", text)

        def _strip_labels(match: re.Match[str]) -> str:
            fence, language, _extras = match.groups()
            label = language or ""
            return f"{fence}{label}"

        return FENCE_LABEL_PATTERN.sub(_strip_labels, without_indent)


__all__ = ["HtmlContentRenderer", "LanguageHtmlFormatter"]
