"""Polling event source for package.json changes.

Stands in for an editor's file-system watcher when running ``pkgv watch``.
"""

import asyncio
import logging
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Callable, Dict, List, Optional

from .constants import MANIFEST_NAME
from .context import WorkspaceContext

logger = logging.getLogger(__name__)

DEFAULT_INTERVAL = 0.5  # seconds


@dataclass
class ManifestEvents:
    """Manifest deltas between two polls."""

    created: List[str] = field(default_factory=list)
    changed: List[str] = field(default_factory=list)

    def has_events(self) -> bool:
        return bool(self.created or self.changed)


class ManifestWatcher:
    """Detect created and modified package.json files by polling mtimes.

    Deleted manifests produce no event; a manifest that cannot be read
    yields no changes anyway.
    """

    def __init__(self, ctx: WorkspaceContext, on_event: Callable[[str], None], interval: float = DEFAULT_INTERVAL):
        self.ctx = ctx
        self.on_event = on_event
        self.interval = interval
        self._mtimes: Dict[str, int] = {}

    def _scan(self) -> Dict[str, int]:
        current: Dict[str, int] = {}
        for root in self.ctx.roots:
            ignore_spec = self.ctx.get_ignore_spec(root)
            for dirpath, dirnames, filenames in os.walk(root):
                rel_dir = Path(dirpath).relative_to(root).as_posix()
                dirnames[:] = [
                    d for d in dirnames
                    if ignore_spec.should_traverse(d if rel_dir == "." else f"{rel_dir}/{d}")
                ]
                if MANIFEST_NAME not in filenames:
                    continue
                path = Path(dirpath) / MANIFEST_NAME
                try:
                    current[str(path)] = path.stat().st_mtime_ns
                except FileNotFoundError:
                    continue
        return current

    def prime(self) -> None:
        """Record current mtimes so the first poll reports only new edits."""
        self._mtimes = self._scan()

    def poll(self, current: Optional[Dict[str, int]] = None) -> ManifestEvents:
        """Compare a scan against the previous one and emit events."""
        if current is None:
            current = self._scan()
        events = ManifestEvents()
        for path, mtime in current.items():
            previous = self._mtimes.get(path)
            if previous is None:
                events.created.append(path)
            elif mtime != previous:
                events.changed.append(path)
        self._mtimes = current

        if events.has_events():
            logger.debug(
                "Manifest events: %d created, %d changed",
                len(events.created), len(events.changed),
            )
        for path in events.created + events.changed:
            self.on_event(path)
        return events

    async def run(self) -> None:
        """Poll forever; cancel the task to stop."""
        self.prime()
        while True:
            await asyncio.sleep(self.interval)
            # Scan off-loop, emit on the loop thread
            current = await asyncio.to_thread(self._scan)
            self.poll(current)
