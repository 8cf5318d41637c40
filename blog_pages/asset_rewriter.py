"""Helpers for rewriting relative image and asset references to an asset base."""

from __future__ import annotations

import posixpath
import typing as typ
from urllib.parse import urlsplit

from markdown.extensions import Extension
from markdown.treeprocessors import Treeprocessor

if typ.TYPE_CHECKING:
    from xml.etree.ElementTree import Element

    from markdown import Markdown
else:  # pragma: no cover - type-checking fallback
    Markdown = typ.Any
    Element = typ.Any

ASSET_SUFFIXES = frozenset(
    {
        ".png",
        ".jpg",
        ".jpeg",
        ".gif",
        ".svg",
        ".webp",
        ".avif",
        ".pdf",
        ".csv",
        ".txt",
        ".zip",
    }
)


def build_asset_extension(asset_base: str | None) -> Extension | None:
    """Return an AssetPathExtension for ``asset_base`` or None when unset."""
    if not asset_base:
        return None
    return AssetPathExtension(asset_base)


class AssetPathExtension(Extension):
    """Prefix relative image sources and asset links with an asset base.

    Posts reference figures relative to their own asset folder
    (``![plot](ipc.png)``); the published page lives elsewhere, so the
    references are anchored at ``asset_base`` (``/assets/zero`` or a CDN URL).
    """

    def __init__(self, asset_base: str) -> None:
        super().__init__()
        self.asset_base = asset_base

    def extendMarkdown(self, md: Markdown) -> None:  # type: ignore[override]  # noqa: N802
        """Register the asset treeprocessor on the Markdown instance."""
        processor = AssetPathTreeprocessor(md, self.asset_base)
        md.treeprocessors.register(processor, "blog_asset_paths", 15)


class AssetPathTreeprocessor(Treeprocessor):
    """Rewrite ``img`` sources and asset ``a`` links below an asset base."""

    def __init__(self, md: Markdown, asset_base: str) -> None:
        super().__init__(md)
        self.asset_base = asset_base

    def run(self, root: Element) -> Element:
        """Rewrite relative asset references in the parsed markdown tree."""
        for element in root.iter():
            if element.tag == "img":
                rewritten = self.rewrite(element.get("src"))
                if rewritten:
                    element.set("src", rewritten)
            elif element.tag == "a":
                href = element.get("href")
                if href and self._is_asset_link(href):
                    rewritten = self.rewrite(href)
                    if rewritten:
                        element.set("href", rewritten)
        return root

    @staticmethod
    def _is_asset_link(target: str) -> bool:
        suffix = posixpath.splitext(urlsplit(target).path)[1].lower()
        return suffix in ASSET_SUFFIXES

    def rewrite(self, target: str | None) -> str | None:
        """Return ``target`` anchored at the asset base, or None to leave it."""
        if not target:
            return None
        if target.startswith(("#", "/", "//")) or "://" in target:
            return None
        lower = target.lower()
        if lower.startswith(("mailto:", "tel:", "data:", "javascript:")):
            return None

        parsed = urlsplit(target)
        if parsed.scheme or parsed.netloc or not parsed.path:
            return None
        normalized = posixpath.normpath(parsed.path)
        while normalized.startswith("../"):
            normalized = normalized[3:]
        if normalized in (".", "", ".."):
            return None

        url = f"{self.asset_base.rstrip('/')}/{normalized}"
        if parsed.query:
            url = f"{url}?{parsed.query}"
        if parsed.fragment:
            url = f"{url}#{parsed.fragment}"
        return url


__all__ = [
    "ASSET_SUFFIXES",
    "AssetPathExtension",
    "AssetPathTreeprocessor",
    "build_asset_extension",
]
