"""Include-fragment registries consumed by the reference resolver.

A registry maps a fragment name (as written in ``{% include name %}``) to its
raw content. The resolver only depends on :class:`FragmentRegistry`; the two
implementations here cover in-memory fragments and an ``_includes``-style
directory on disk.
"""

from __future__ import annotations

import threading
import typing as typ

if typ.TYPE_CHECKING:
    from pathlib import Path


class FragmentRegistry(typ.Protocol):
    """Look up include fragments by name."""

    def get(self, name: str) -> str | None:
        """Return the fragment content for ``name`` or ``None`` when unknown."""
        ...


class MappingFragmentRegistry:
    """Serve fragments from an in-memory mapping."""

    def __init__(self, fragments: typ.Mapping[str, str] | None = None) -> None:
        self._fragments = dict(fragments or {})

    def get(self, name: str) -> str | None:
        return self._fragments.get(name)


class DirectoryFragmentRegistry:
    """Serve fragments from files below a root directory with caching."""

    def __init__(self, root: Path) -> None:
        self.root = root.resolve()
        self._cache: dict[str, str | None] = {}
        self._lock = threading.Lock()

    def get(self, name: str) -> str | None:
        """Read ``root / name``; names escaping the root are treated as unknown.

        Parameters
        ----------
        name : str
            Relative fragment path, for example ``figure.html``.

        Returns
        -------
        str or None
            Fragment text, or ``None`` when no such file exists under ``root``.
        """
        with self._lock:
            if name in self._cache:
                return self._cache[name]
        candidate = (self.root / name).resolve()
        content: str | None = None
        if candidate.is_relative_to(self.root) and candidate.is_file():
            content = candidate.read_text(encoding="utf-8")
        with self._lock:
            self._cache[name] = content
        return content


__all__ = [
    "DirectoryFragmentRegistry",
    "FragmentRegistry",
    "MappingFragmentRegistry",
]
