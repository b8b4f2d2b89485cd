"""Stable synchronous API for scripts and other tools.

The session is asyncio based; these helpers wrap the common one-shot
operations so callers do not need an event loop.
"""

import asyncio
from pathlib import Path
from typing import Iterable, List, Optional, Union

from .core import Change, ManifestChanges
from .session import Session

Roots = Optional[Iterable[Union[str, Path]]]


def take_snapshot(roots: Roots = None) -> int:
    """Replace the workspace baseline and return how many manifests it holds.

    Example:
        >>> from package_versions.api import take_snapshot
        >>> take_snapshot(["."])
        1
    """
    return asyncio.run(Session.open(roots).take_snapshot())


def changes_for(manifest: Union[str, Path], roots: Roots = None) -> List[Change]:
    """Diff one package.json against its baseline entry without mutating state."""
    return asyncio.run(Session.open(roots).show_changes(manifest))


def detect_changes(roots: Roots = None) -> List[ManifestChanges]:
    """Detect drift in every discovered manifest, advancing the baseline."""

    async def _detect():
        session = Session.open(roots)
        await session.activate()
        return await session.check_all()

    return asyncio.run(_detect())
