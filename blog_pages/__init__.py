"""Utilities for publishing Markdown blog articles as static HTML pages.

This package exposes the CLI entry points used by ``uv run pages`` to render
a directory of annotated Markdown articles (front-matter header, footnotes,
include markers, fenced code listings) into one HTML page per article.

Exports
-------
- ``app``: Cyclopts application entry for subcommands.
- ``main``: Convenience function that invokes the Cyclopts app.

Examples
--------
>>> from blog_pages import main
>>> main()  # doctest: +SKIP
"""

from __future__ import annotations

from .cli import app, main

__all__ = ["app", "main"]
