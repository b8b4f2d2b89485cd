"""Workspace context for managing roots and storage paths."""

from pathlib import Path
from typing import Iterable, List, Optional, Union

from .constants import (
    CONFIG_FILE,
    LOCK_FILE,
    MANIFEST_NAME,
    PACKAGE_VERSIONS_DIR,
    STATE_FILE,
)
from .ignore import IgnoreSpec


class WorkspaceContext:
    """Holds the workspace roots and where per-workspace state lives.

    The first root owns the storage directory, the same way an editor keeps
    workspace state for the whole (possibly multi-root) workspace.
    """

    def __init__(self, roots: Optional[Iterable[Union[str, Path]]] = None, exclude: Iterable[str] = ()):
        resolved = [Path(r).resolve() for r in (roots or [])]
        self.roots: List[Path] = resolved or [Path.cwd().resolve()]
        self._exclude = list(exclude)
        self._ignore_specs = {}

    @property
    def primary_root(self) -> Path:
        return self.roots[0]

    @property
    def storage_dir(self) -> Path:
        """Get the workspace storage directory."""
        return self.primary_root / PACKAGE_VERSIONS_DIR

    @property
    def config_path(self) -> Path:
        return self.storage_dir / CONFIG_FILE

    @property
    def state_path(self) -> Path:
        """Get path to the persisted workspace state."""
        return self.storage_dir / STATE_FILE

    @property
    def lock_path(self) -> Path:
        return self.storage_dir / LOCK_FILE

    def with_exclude(self, patterns: Iterable[str]) -> "WorkspaceContext":
        """Return a context for the same roots with extra discovery exclusions."""
        return WorkspaceContext(self.roots, exclude=[*self._exclude, *patterns])

    def get_ignore_spec(self, root: Optional[Path] = None) -> IgnoreSpec:
        """Get the ignore specification for a root (memoized)."""
        root = root or self.primary_root
        if root not in self._ignore_specs:
            self._ignore_specs[root] = IgnoreSpec(root, self._exclude)
        return self._ignore_specs[root]

    @staticmethod
    def is_manifest(path: Union[str, Path]) -> bool:
        """Check whether a path names a package.json."""
        return Path(path).name == MANIFEST_NAME
