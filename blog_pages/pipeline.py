"""High-level orchestration of a publish run.

:class:`PublishPipeline` wires the loader, resolver, renderer, layout engine
and publisher together. Per-document errors are collected into a
:class:`~blog_pages.models.BatchReport` so authors see every problem in one
pass; a destination conflict aborts the whole run before anything is
written.

Example
-------
>>> from pathlib import Path
>>> from blog_pages.config import load_site_config
>>> from blog_pages.pipeline import PublishPipeline
>>> config = load_site_config(Path("config/blog.yaml"))  # doctest: +SKIP
>>> report = PublishPipeline(config).run()  # doctest: +SKIP
>>> report.ok  # doctest: +SKIP
True
"""

from __future__ import annotations

import concurrent.futures
import logging
import typing as typ

from .errors import DocumentError
from .fragments import DirectoryFragmentRegistry, MappingFragmentRegistry
from .layout import TemplateLayoutEngine
from .loader import load_documents
from .models import BatchReport, DocumentFailure, RenderedPage, ResolvedDocument
from .publisher import Publisher, destination_path
from .renderer import HtmlContentRenderer
from .resolver import ReferenceResolver

if typ.TYPE_CHECKING:
    from .config import SiteConfig
    from .fragments import FragmentRegistry
    from .layout import LayoutEngine
    from .models import Document

logger = logging.getLogger(__name__)

_Outcome = tuple[ResolvedDocument | None, RenderedPage | None, DocumentFailure | None]


class PublishPipeline:
    """Run Loader -> Resolver -> Renderer -> Publisher over a source tree."""

    def __init__(
        self,
        config: SiteConfig,
        *,
        registry: FragmentRegistry | None = None,
        layout_engine: LayoutEngine | None = None,
    ) -> None:
        """Initialize every stage from the site configuration.

        Parameters
        ----------
        config : SiteConfig
            Directories, rendering options and theme for the run.
        registry : FragmentRegistry, optional
            Include fragment source; defaults to ``config.includes_dir`` or an
            empty registry when no includes directory is configured.
        layout_engine : LayoutEngine, optional
            Layout applied around each rendered body; defaults to the Jinja
            template engine.
        """
        self.config = config
        if registry is None:
            if config.includes_dir is not None:
                registry = DirectoryFragmentRegistry(config.includes_dir)
            else:
                registry = MappingFragmentRegistry()
        self.resolver = ReferenceResolver(registry)
        self.renderer = HtmlContentRenderer(
            config.pygments_style, asset_base=config.asset_base
        )
        self.layout_engine = layout_engine or TemplateLayoutEngine(
            templates_dir=config.templates_dir,
            theme=config.theme,
            default_layout=config.default_layout,
            stylesheet=self.renderer.stylesheet,
        )
        self.publisher = Publisher(config.output_dir, extension=config.output_extension)

    def run(self, *, dry_run: bool = False) -> BatchReport:
        """Publish every valid document under the source directory.

        Returns
        -------
        BatchReport
            Written paths plus the per-document failures and warnings.

        Raises
        ------
        WriteConflictError
            If two documents compute the same destination path. Nothing is
            written in that case.
        FileNotFoundError
            If the source directory does not exist.
        """
        report = BatchReport(dry_run=dry_run)
        loaded = load_documents(self.config.source_dir)
        report.failures.extend(loaded.failures)
        report.checked = len(loaded.documents) + len(loaded.failures)

        pages: list[RenderedPage] = []
        for resolved, page, failure in self._process(loaded.documents, render=True):
            if resolved is not None:
                report.warnings.extend(resolved.warnings)
            if failure is not None:
                report.failures.append(failure)
            elif page is not None:
                pages.append(page)

        report.written = self.publisher.publish(pages, dry_run=dry_run)
        logger.info(
            "published %d page(s), skipped %d document(s)",
            len(report.written),
            len(report.failures),
        )
        return report

    def check(self) -> BatchReport:
        """Load and resolve every document without rendering or writing."""
        report = BatchReport(dry_run=True)
        loaded = load_documents(self.config.source_dir)
        report.failures.extend(loaded.failures)
        report.checked = len(loaded.documents) + len(loaded.failures)
        for resolved, _page, failure in self._process(loaded.documents, render=False):
            if resolved is not None:
                report.warnings.extend(resolved.warnings)
            if failure is not None:
                report.failures.append(failure)
        return report

    def _process(
        self, documents: list[Document], *, render: bool
    ) -> list[_Outcome]:
        """Resolve (and optionally render) documents, preserving input order."""
        if self.config.workers <= 1 or len(documents) <= 1:
            return [self._process_one(document, render) for document in documents]
        with concurrent.futures.ThreadPoolExecutor(
            max_workers=self.config.workers
        ) as executor:
            return list(
                executor.map(lambda doc: self._process_one(doc, render), documents)
            )

    def _process_one(self, document: Document, render: bool) -> _Outcome:
        try:
            resolved = self.resolver.resolve(document)
        except DocumentError as exc:
            logger.warning("skipping %s", exc)
            return None, None, DocumentFailure(document.identifier, "resolve", exc)
        if not render:
            return resolved, None, None
        destination = destination_path(document)
        html = self.renderer.render(resolved)
        try:
            html = self.layout_engine.apply(document, html, destination)
        except DocumentError as exc:
            logger.warning("skipping %s", exc)
            return resolved, None, DocumentFailure(document.identifier, "render", exc)
        return resolved, RenderedPage(document, html, destination), None


__all__ = ["PublishPipeline"]
