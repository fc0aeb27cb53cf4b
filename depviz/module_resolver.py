"""Module resolution for relative and absolute ECMAScript import specifiers."""

import os
from functools import lru_cache
from pathlib import Path

from depviz.scanner import SUPPORTED_EXTENSIONS


class ModuleResolver:
    """Resolve ``(specifier, importing file)`` to a file on disk.

    Resolution order, first match wins:
      1. the specifier joined onto the importing file's directory, if it is a file
      2. that path plus each extension, in configured order
      3. if the path is a directory, ``index`` plus each extension inside it

    Anything else is unresolved (``None``); bare package names, aliases and
    virtual modules land here and are simply not graphed.

    Results are memoized per instance, so one run sees one answer per triple
    even if the disk changes underneath it.
    """

    def __init__(self, project_root: str | Path, extensions: list[str] | tuple[str, ...] | None = None):
        self.project_root = os.path.normpath(os.path.abspath(str(project_root)))
        self.extensions = tuple(extensions) if extensions is not None else SUPPORTED_EXTENSIONS
        self._resolve_cached = lru_cache(maxsize=None)(self._resolve)

    def resolve(self, specifier: str, from_file: str | Path) -> str | None:
        """Return the canonical absolute path the specifier refers to, or None."""
        return self._resolve_cached(specifier, os.path.normpath(os.path.abspath(str(from_file))))

    def _resolve(self, specifier: str, from_file: str) -> str | None:
        base = os.path.normpath(os.path.join(os.path.dirname(from_file), specifier))

        if os.path.isfile(base):
            return base

        for ext in self.extensions:
            candidate = base + ext
            if os.path.isfile(candidate):
                return candidate

        if os.path.isdir(base):
            for ext in self.extensions:
                candidate = os.path.join(base, f"index{ext}")
                if os.path.isfile(candidate):
                    return candidate

        return None

    def cache_info(self):
        return self._resolve_cached.cache_info()


def resolve_import_path(
    specifier: str,
    from_file: str | Path,
    root: str | Path,
    extensions: list[str] | tuple[str, ...] | None = None,
) -> str | None:
    """One-shot resolution without a shared cache."""
    return ModuleResolver(root, extensions)._resolve(specifier, os.path.normpath(os.path.abspath(str(from_file))))
