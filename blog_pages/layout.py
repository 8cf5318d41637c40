"""Wrap rendered article HTML in a named Jinja layout.

The layout engine receives the renderer's HTML fragment and applies the
template named by the document's ``layout`` header (``post`` by default).
Templates are looked up in the configured templates directory first, then in
the templates shipped with the package.
"""

from __future__ import annotations

import typing as typ
from pathlib import Path

from jinja2 import (
    ChoiceLoader,
    Environment,
    FileSystemLoader,
    TemplateError,
    TemplateNotFound,
    select_autoescape,
)
from markupsafe import Markup

from .config import ThemeConfig
from .errors import DocumentError, LayoutNotFoundError

if typ.TYPE_CHECKING:
    from pathlib import PurePosixPath

    from .models import Document

PACKAGE_TEMPLATES = Path(__file__).parent / "templates"


class LayoutEngine(typ.Protocol):
    """Apply a presentation layout around rendered body HTML."""

    def apply(self, document: Document, html: str, destination: PurePosixPath) -> str:
        """Return the full page for ``document``."""
        ...


class TemplateLayoutEngine:
    """Render pages through ``<layout>.jinja`` templates."""

    def __init__(
        self,
        *,
        templates_dir: Path | None = None,
        theme: ThemeConfig | None = None,
        default_layout: str | None = None,
        stylesheet: str = "",
    ) -> None:
        """Initialize the Jinja environment used for every page in a run.

        Parameters
        ----------
        templates_dir : Path, optional
            Site templates that take precedence over the packaged ones.
        theme : ThemeConfig, optional
            Site-wide values exposed to templates as ``theme``.
        default_layout : str, optional
            Layout used when a document's header leaves ``layout`` unset.
        stylesheet : str, optional
            Pygments CSS inlined by the packaged layouts.
        """
        search_path = [PACKAGE_TEMPLATES]
        if templates_dir is not None:
            search_path.insert(0, templates_dir)
        self.theme = theme or ThemeConfig()
        self.default_layout = default_layout
        self.stylesheet = stylesheet
        self.env = Environment(
            loader=ChoiceLoader([FileSystemLoader(str(path)) for path in search_path]),
            autoescape=select_autoescape(["html", "xml", "jinja"]),
            trim_blocks=True,
            lstrip_blocks=True,
        )

    def _layout_name(self, document: Document) -> str:
        if "layout" not in document.metadata and self.default_layout:
            return self.default_layout
        return document.layout

    def apply(self, document: Document, html: str, destination: PurePosixPath) -> str:
        """Render ``html`` inside the document's layout template.

        Raises
        ------
        LayoutNotFoundError
            If no ``<layout>.jinja`` template exists in the search path.
        DocumentError
            If the layout template fails to compile or render.
        """
        layout = self._layout_name(document)
        try:
            template = self.env.get_template(f"{layout}.jinja")
        except TemplateNotFound as exc:
            raise LayoutNotFoundError(document.identifier, layout) from exc
        except TemplateError as exc:
            msg = f"layout '{layout}' failed to compile: {exc}"
            raise DocumentError(document.identifier, msg) from exc
        date = document.date
        context = {
            "content": Markup(html),
            "page": {
                "title": document.title,
                "category": document.category,
                "tags": document.tags,
                "date": date.isoformat() if date else None,
                "url": f"{self.theme.base_url.rstrip('/')}/{destination}",
                "identifier": document.identifier,
            },
            "metadata": dict(document.metadata),
            "theme": self.theme,
            "pygments_css": self.stylesheet,
        }
        try:
            return template.render(**context)
        except TemplateError as exc:
            msg = f"layout '{layout}' failed to render: {exc}"
            raise DocumentError(document.identifier, msg) from exc


__all__ = ["LayoutEngine", "TemplateLayoutEngine"]
