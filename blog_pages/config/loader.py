"""Load site configuration YAML into typed dataclasses."""

from __future__ import annotations

import typing as typ
from pathlib import Path

from ruamel.yaml import YAML

from blog_pages._constants import DEFAULT_LAYOUT

from .helpers import (
    _build_theme_config,
    _normalize_extension,
    _optional_str,
    _parse_workers,
    _resolve_path,
)
from .models import SiteConfig, SiteConfigError


def load_site_config(path: Path) -> SiteConfig:
    """Load the YAML configuration describing a blog publish run.

    Parameters
    ----------
    path : Path
        Filesystem path to the YAML configuration file (for example,
        ``config/blog.yaml``). Relative paths inside the file are resolved
        against the file's directory.

    Returns
    -------
    SiteConfig
        Parsed configuration with defaults applied.

    Raises
    ------
    FileNotFoundError
        If the configuration file does not exist at ``path``.
    SiteConfigError
        If the top-level structure is not a mapping or a field is invalid.
    YAMLError
        If the YAML content cannot be parsed by the underlying loader.

    Examples
    --------
    >>> from pathlib import Path
    >>> from blog_pages.config import load_site_config
    >>> config = load_site_config(Path("config/blog.yaml"))  # doctest: +SKIP
    >>> config.default_layout  # doctest: +SKIP
    'post'
    """
    if not path.exists():
        msg = f"Configuration file '{path}' not found."
        raise FileNotFoundError(msg)

    loader = YAML(typ="safe")
    loader.version = (1, 2)
    with path.open("r", encoding="utf-8") as handle:
        loaded = loader.load(handle) or {}
    if not isinstance(loaded, dict):
        msg = "Top-level YAML structure must be a mapping."
        raise SiteConfigError(msg)
    raw: dict[str, typ.Any] = dict(loaded)
    base_dir = path.resolve().parent

    source_dir = _resolve_path(raw.get("source_dir", "_posts"), base_dir)
    output_dir = _resolve_path(raw.get("output_dir", "public"), base_dir)
    if source_dir is None or output_dir is None:
        msg = "'source_dir' and 'output_dir' must not be empty."
        raise SiteConfigError(msg)

    theme_raw = raw.get("theme") or {}
    if not isinstance(theme_raw, dict):
        msg = "'theme' must be a mapping."
        raise SiteConfigError(msg)

    return SiteConfig(
        source_dir=source_dir,
        output_dir=output_dir,
        includes_dir=_resolve_path(raw.get("includes_dir"), base_dir),
        templates_dir=_resolve_path(raw.get("templates_dir"), base_dir),
        default_layout=_optional_str(raw.get("default_layout")) or DEFAULT_LAYOUT,
        pygments_style=_optional_str(raw.get("pygments_style")) or "monokai",
        asset_base=_optional_str(raw.get("asset_base")) or "",
        output_extension=_normalize_extension(raw.get("output_extension", ".html")),
        workers=_parse_workers(raw.get("workers")),
        theme=_build_theme_config(theme_raw),
    )


__all__ = ["load_site_config"]
