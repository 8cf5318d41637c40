"""Load and validate site configuration YAML for blog publish runs.

This subpackage parses the project's ``blog.yaml`` file, applies defaults,
resolves directories relative to the configuration file, and produces typed
dataclasses (:class:`SiteConfig`, :class:`ThemeConfig`) consumed by the
publishing pipeline. The primary entry point is :func:`load_site_config`.

Examples
--------
>>> from pathlib import Path
>>> from blog_pages.config import load_site_config
>>> site = load_site_config(Path("config/blog.yaml"))  # doctest: +SKIP
>>> site.output_extension  # doctest: +SKIP
'.html'
"""

from .loader import load_site_config
from .models import SiteConfig, SiteConfigError, ThemeConfig

__all__ = [
    "SiteConfig",
    "SiteConfigError",
    "ThemeConfig",
    "load_site_config",
]
