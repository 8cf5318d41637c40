"""Typed dataclasses describing blog site configuration structures."""

from __future__ import annotations

import dataclasses as dc
from pathlib import Path

from blog_pages._constants import DEFAULT_LAYOUT


class SiteConfigError(ValueError):
    """Raised when the site configuration is invalid or incomplete."""


@dc.dataclass(slots=True)
class ThemeConfig:
    """Site-wide values exposed to layout templates."""

    site_name: str = "Performance Notes"
    tagline: str = "Performance engineering investigations"
    base_url: str = "/"


@dc.dataclass(slots=True)
class SiteConfig:
    """Resolved configuration for a single publish run.

    Attributes
    ----------
    source_dir : Path
        Directory scanned for Markdown articles.
    output_dir : Path
        Directory that receives rendered pages.
    includes_dir : Path or None
        Directory holding named include fragments; ``None`` disables includes.
    templates_dir : Path or None
        Directory holding layout templates; ``None`` uses the packaged ones.
    default_layout : str
        Layout applied when a document does not name one.
    pygments_style : str
        Pygments style used for highlighted code listings.
    asset_base : str
        Prefix applied to relative image and asset references.
    output_extension : str
        Suffix appended to each destination path when writing.
    workers : int
        Number of threads used to resolve and render documents.
    theme : ThemeConfig
        Values passed through to layout templates.
    """

    source_dir: Path
    output_dir: Path
    includes_dir: Path | None = None
    templates_dir: Path | None = None
    default_layout: str = DEFAULT_LAYOUT
    pygments_style: str = "monokai"
    asset_base: str = ""
    output_extension: str = ".html"
    workers: int = 1
    theme: ThemeConfig = dc.field(default_factory=ThemeConfig)


__all__ = ["SiteConfig", "SiteConfigError", "ThemeConfig"]
