"""Point-in-time dependency snapshots for one manifest or a whole workspace."""

import logging
import os
from concurrent.futures import ThreadPoolExecutor
from pathlib import Path
from typing import Iterable, List, Optional, Union

from .constants import DISCOVERY_LIMIT, MANIFEST_NAME
from .context import WorkspaceContext
from .core import Baseline, Snapshot
from .manifest import extract_fields, read_manifest

logger = logging.getLogger(__name__)


def snapshot_one(path: Union[str, Path], fields: Iterable[str]) -> Optional[Snapshot]:
    """Capture the tracked fields of one manifest.

    Returns None if the manifest is missing or unreadable.
    """
    manifest = read_manifest(path)
    if manifest is None:
        return None
    return Snapshot(fields=extract_fields(manifest, fields))


def find_root_manifests(ctx: WorkspaceContext) -> List[Path]:
    """Return the package.json sitting directly in each workspace root."""
    found = []
    for root in ctx.roots:
        candidate = root / MANIFEST_NAME
        if candidate.is_file():
            found.append(candidate)
    return found


def search_manifests(ctx: WorkspaceContext, limit: int = DISCOVERY_LIMIT) -> List[Path]:
    """Recursively find package.json files under all roots, skipping excluded dirs.

    Stops after ``limit`` hits.
    """
    found: List[Path] = []
    for root in ctx.roots:
        ignore_spec = ctx.get_ignore_spec(root)
        for dirpath, dirnames, filenames in os.walk(root):
            current = Path(dirpath)
            rel_dir = current.relative_to(root).as_posix()

            # Prune in place so os.walk never descends into excluded trees
            dirnames[:] = sorted(
                d for d in dirnames
                if ignore_spec.should_traverse(d if rel_dir == "." else f"{rel_dir}/{d}")
            )

            if MANIFEST_NAME in filenames:
                rel = MANIFEST_NAME if rel_dir == "." else f"{rel_dir}/{MANIFEST_NAME}"
                if not ignore_spec.is_ignored(rel):
                    found.append(current / MANIFEST_NAME)
                    if len(found) >= limit:
                        return found
    return found


def discover_manifests(ctx: WorkspaceContext, limit: int = DISCOVERY_LIMIT) -> List[Path]:
    """Find the manifests that make up the workspace.

    Root manifests win outright. Only when no root has one does the bounded
    recursive search run.
    """
    roots = find_root_manifests(ctx)
    if roots:
        logger.debug("Discovered %d root manifest(s)", len(roots))
        return roots

    found = search_manifests(ctx, limit)
    logger.debug("No root manifests; recursive search found %d", len(found))
    return found


def snapshot_workspace(ctx: WorkspaceContext, fields: Iterable[str]) -> Baseline:
    """Snapshot every discovered manifest.

    Manifests that cannot be read are left out of the result.
    """
    fields = list(fields)
    paths = discover_manifests(ctx)
    if not paths:
        return Baseline()

    with ThreadPoolExecutor(max_workers=min(len(paths), 8)) as pool:
        snapshots = list(pool.map(lambda p: snapshot_one(p, fields), paths))

    entries = {}
    for path, snap in zip(paths, snapshots):
        if snap is not None:
            entries[str(path)] = snap
        else:
            logger.debug("Skipping unreadable manifest %s", path)
    return Baseline(entries=entries)
