"""Source tree scanner - finds candidate ECMAScript files under a root."""

import os
from pathlib import Path

from depviz.config_runtime import DEFAULTS
from depviz.errors import InputError, NotFoundError
from depviz.utils.logging import logger

SKIP_DIRS: frozenset[str] = frozenset(DEFAULTS["scan"]["ignore_dirs"])
SUPPORTED_EXTENSIONS: tuple[str, ...] = tuple(DEFAULTS["scan"]["extensions"])


class Scanner:
    """Walk a directory tree and collect files with a supported extension.

    Directories are skipped by exact name match against ``ignore_dirs``
    (``node_modules`` is skipped, ``my_node_modules_notes`` is not).
    Results are sorted per directory so a fixed snapshot always scans the same
    way.
    """

    def __init__(
        self,
        ignore_dirs: list[str] | frozenset[str] | None = None,
        extensions: list[str] | tuple[str, ...] | None = None,
    ):
        self.ignore_dirs = frozenset(ignore_dirs) if ignore_dirs is not None else SKIP_DIRS
        self.extensions = tuple(extensions) if extensions is not None else SUPPORTED_EXTENSIONS
        self.skipped: list[str] = []

    def is_candidate(self, filename: str) -> bool:
        """Check the file extension against the supported set (case-sensitive, like the resolver)."""
        return os.path.splitext(filename)[1] in self.extensions

    def _on_walk_error(self, error: OSError) -> None:
        """Permission problems on one entry are skipped, never fatal."""
        logger.warning("Skipping unreadable path {}: {}", error.filename, error.strerror or error)
        self.skipped.append(str(error.filename))

    def scan(self, root: str | Path) -> list[str]:
        """Return absolute paths of every candidate file under root.

        Raises:
            NotFoundError: root does not exist
            InputError: root exists but is not a directory
        """
        root_path = Path(root)
        if not root_path.exists():
            raise NotFoundError(f"Directory not found: {root}", operation="scan")
        if not root_path.is_dir():
            raise InputError(f"Not a directory: {root}", operation="scan")

        self.skipped = []
        files: list[str] = []
        root_str = str(root_path.resolve())

        for dirpath, dirnames, filenames in os.walk(root_str, onerror=self._on_walk_error):
            dirnames[:] = sorted(d for d in dirnames if d not in self.ignore_dirs)
            for filename in sorted(filenames):
                if self.is_candidate(filename):
                    files.append(os.path.join(dirpath, filename))

        logger.debug("Scanned {}: {} candidate files, {} skipped entries", root_str, len(files), len(self.skipped))
        return files


def scan_directory(root: str | Path, ignore_dirs=None, extensions=None) -> list[str]:
    """Convenience wrapper around Scanner.scan."""
    return Scanner(ignore_dirs=ignore_dirs, extensions=extensions).scan(root)
