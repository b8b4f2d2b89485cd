"""Gitignore-style exclusions for manifest discovery."""

from pathlib import Path
from typing import Iterable

from pathspec import PathSpec
from pathspec.patterns import GitWildMatchPattern

from .constants import PACKAGE_VERSIONS_DIR


# Dependency and build output directories never scanned for manifests
DEFAULTS = [
    "node_modules/",
    "dist/",
    "out/",
    ".next/",
    ".turbo/",
    # package-versions metadata
    f"{PACKAGE_VERSIONS_DIR}/",
    # Version control
    ".git/",
]


class IgnoreSpec:
    """Manages gitignore-style patterns for discovery exclusion."""

    def __init__(self, root: Path, extra: Iterable[str] = ()):
        """Initialize ignore spec with default and custom patterns.

        Args:
            root: Workspace root directory
            extra: Additional patterns (the ``exclude`` setting)
        """
        self.root = root
        patterns = list(DEFAULTS)
        patterns.extend(extra)
        self.spec = PathSpec.from_lines(GitWildMatchPattern, patterns)

    def is_ignored(self, relpath: str) -> bool:
        """Check if a root-relative POSIX path should be ignored."""
        return self.spec.match_file(relpath)

    def should_traverse(self, dirpath: str) -> bool:
        """Check if a directory should be descended into during scanning.

        Args:
            dirpath: Root-relative directory path in POSIX format
        """
        if not dirpath.endswith("/"):
            dirpath = dirpath + "/"
        return not self.spec.match_file(dirpath)
