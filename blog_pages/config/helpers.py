"""Utility helpers shared by the blog configuration loader."""

from __future__ import annotations

import typing as typ
from pathlib import Path

from .models import SiteConfigError, ThemeConfig


def _optional_str(value: object | None) -> str | None:
    """Return a stripped string value or None when empty."""
    if value is None:
        return None
    text = str(value).strip()
    return text or None


def _resolve_path(value: object | None, base_dir: Path) -> Path | None:
    """Return ``value`` as a path, anchoring relative paths at ``base_dir``."""
    text = _optional_str(value)
    if text is None:
        return None
    path = Path(text).expanduser()
    if not path.is_absolute():
        path = base_dir / path
    return path


def _build_theme_config(payload: typ.Mapping[str, typ.Any]) -> ThemeConfig:
    """Build a ThemeConfig instance from the provided mapping payload."""
    base = ThemeConfig()
    return ThemeConfig(
        site_name=payload.get("site_name", base.site_name),
        tagline=payload.get("tagline", base.tagline),
        base_url=payload.get("base_url", base.base_url),
    )


def _normalize_extension(value: object | None) -> str:
    """Return a dotted output extension, or an empty string for none."""
    text = _optional_str(value)
    if text is None:
        return ""
    return text if text.startswith(".") else f".{text}"


def _parse_workers(value: object | None) -> int:
    """Validate the worker count, defaulting to a single thread."""
    match value:
        case None:
            return 1
        case bool():
            msg = "'workers' must be a positive integer."
            raise SiteConfigError(msg)
        case int() if value >= 1:
            return value
        case _:
            msg = f"'workers' must be a positive integer, got {value!r}."
            raise SiteConfigError(msg)


__all__ = [
    "_build_theme_config",
    "_normalize_extension",
    "_optional_str",
    "_parse_workers",
    "_resolve_path",
]
