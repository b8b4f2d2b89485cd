"""Session controller: the single owner of change-tracking state.

One Session exists per workspace session. It holds the settings, the
baseline store, the set of manifests with unacknowledged changes, the
debouncer and the install sink. Handlers receive the session explicitly.

File events are funnelled through one asyncio queue drained by ``run()``.
Debounce timers enqueue a flush onto the same queue, so every detection
cycle and every baseline mutation happens on that one consuming task in
arrival order.
"""

import asyncio
import logging
from enum import Enum
from pathlib import Path
from typing import Callable, Iterable, List, Optional, Set, Union

from .config import Settings, load_settings
from .context import WorkspaceContext
from .core import Change, ManifestChanges, Snapshot
from .debounce import ChangeDebouncer
from .diffing import diff_snapshots
from .errors import NotAManifestError
from .pm import InstallSink, SubprocessSink, run_install
from .snapshot import discover_manifests, snapshot_one, snapshot_workspace
from .store import BaselineStore, WorkspaceState
from .utils import plural

logger = logging.getLogger(__name__)

DetectListener = Callable[[str, List[Change]], None]

_EVENT = "event"
_FLUSH = "flush"


class UpdateChoice(str, Enum):
    """Options offered by the update prompt."""

    ALL = "all"
    CHANGED = "changed"
    SHOW = "show"
    DISMISS = "dismiss"


class Session:
    """Tracks dependency drift for one workspace."""

    def __init__(
        self,
        ctx: WorkspaceContext,
        settings: Optional[Settings] = None,
        store: Optional[BaselineStore] = None,
        sink: Optional[InstallSink] = None,
        on_detect: Optional[DetectListener] = None,
    ):
        self.settings = settings or load_settings(ctx)
        self.ctx = ctx.with_exclude(self.settings.exclude)
        self.store = store or BaselineStore(WorkspaceState(ctx))
        self.sink = sink or SubprocessSink()
        self.on_detect = on_detect
        self.fields = list(self.settings.suggest_on_fields)
        self.changed: Set[str] = set()
        self.debouncer = ChangeDebouncer(
            self.settings.debounce_ms,
            self._enqueue_flush,
            policy=self.settings.debounce_policy,
        )
        self._queue: asyncio.Queue = asyncio.Queue()

    @classmethod
    def open(cls, roots: Optional[Iterable[Union[str, Path]]] = None, **kwargs) -> "Session":
        """Build a session for the given workspace roots (default: cwd)."""
        return cls(WorkspaceContext(roots), **kwargs)

    # ============= Lifecycle =============

    async def activate(self) -> None:
        """Record an initial baseline if none has been persisted yet."""
        existing = await asyncio.to_thread(self.store.get)
        if len(existing) == 0:
            baseline = await asyncio.to_thread(snapshot_workspace, self.ctx, self.fields)
            await asyncio.to_thread(self.store.replace, baseline)
            logger.info("Initial baseline recorded for %d manifest(s)", len(baseline))

    def notify(self, path: Union[str, Path]) -> None:
        """Accept a file change/create/save notification."""
        if not self.ctx.is_manifest(path):
            return
        self._queue.put_nowait((_EVENT, str(Path(path).resolve())))

    async def run(self) -> None:
        """Drain the event queue until ``stop()`` is called."""
        while True:
            item = await self._queue.get()
            try:
                if item is None:
                    return
                kind, path = item
                if kind == _EVENT:
                    self.debouncer.trigger(path)
                else:
                    await self.detect(path)
            finally:
                self._queue.task_done()

    def stop(self) -> None:
        """Cancel pending timers and end ``run()`` after queued items."""
        self.debouncer.cancel()
        self._queue.put_nowait(None)

    def _enqueue_flush(self, path: str) -> None:
        self._queue.put_nowait((_FLUSH, path))

    # ============= Detection =============

    async def detect(self, path: Union[str, Path]) -> List[Change]:
        """Run one detection cycle for a manifest.

        Non-empty changes mark the manifest as pending and advance its
        baseline entry right away, so the same edit is never reported twice.
        """
        path = str(Path(path).resolve())
        current = await asyncio.to_thread(snapshot_one, path, self.fields)
        if current is None:
            return []

        changes = await asyncio.to_thread(self._advance_baseline, path, current)
        if not changes:
            return []

        self.changed.add(path)
        logger.info(
            "%d dependency %s in %s",
            len(changes), plural(len(changes), "change", "changes"), path,
        )
        if self.on_detect is not None:
            self.on_detect(path, changes)
        return changes

    def _advance_baseline(self, path: str, current: Snapshot) -> List[Change]:
        """Diff against the stored entry and replace it if anything changed.

        Runs in a worker thread as one unit. The baseline is read here rather
        than before the manifest read, since a full resnapshot may have
        replaced it in the meantime.
        """
        baseline = self.store.get()
        changes = diff_snapshots(baseline.get(path), current)
        if changes:
            self.store.replace(baseline.with_entry(path, current))
        return changes

    async def check_all(self) -> List[ManifestChanges]:
        """Run a detection cycle for every discovered manifest."""
        paths = await asyncio.to_thread(discover_manifests, self.ctx)
        results = []
        for path in paths:
            changes = await self.detect(path)
            if changes:
                results.append(ManifestChanges(path=str(path), changes=changes))
        return results

    # ============= Commands =============

    async def take_snapshot(self) -> int:
        """Replace the baseline with a fresh full-workspace snapshot."""
        baseline = await asyncio.to_thread(snapshot_workspace, self.ctx, self.fields)
        await asyncio.to_thread(self.store.replace, baseline)
        self.changed.clear()
        return len(baseline)

    async def reset(self) -> int:
        """Clear the baseline, then take a fresh full snapshot."""
        await asyncio.to_thread(self.store.clear)
        return await self.take_snapshot()

    async def show_changes(self, path: Union[str, Path]) -> List[Change]:
        """Diff a manifest against its baseline entry without mutating anything."""
        if not self.ctx.is_manifest(path):
            raise NotAManifestError(path)
        path = str(Path(path).resolve())
        current = await asyncio.to_thread(snapshot_one, path, self.fields)
        baseline = await asyncio.to_thread(self.store.get)
        return diff_snapshots(baseline.get(path), current)

    async def show_all_changes(self) -> List[ManifestChanges]:
        """Diff every pending manifest against its baseline entry."""
        results = []
        for path in sorted(self.changed):
            current = await asyncio.to_thread(snapshot_one, path, self.fields)
            baseline = await asyncio.to_thread(self.store.get)
            changes = diff_snapshots(baseline.get(path), current)
            if changes:
                results.append(ManifestChanges(path=path, changes=changes))
        return results

    async def update_all(self) -> List[Path]:
        """Start an install in every discovered manifest directory."""
        paths = await asyncio.to_thread(discover_manifests, self.ctx)
        folders = self._install([Path(p).parent for p in paths])
        self.dismiss()
        return folders

    async def update_changed(self) -> List[Path]:
        """Start an install in every directory with pending changes."""
        folders = self._install([Path(p).parent for p in sorted(self.changed)])
        self.dismiss()
        return folders

    def dismiss(self) -> None:
        """Acknowledge all pending changes without installing."""
        self.changed.clear()

    async def show_update_options(self, choice: Optional[UpdateChoice]):
        """Dispatch a choice from the update prompt.

        Returns the install folders for ALL/CHANGED, the pending changes for
        SHOW, and None for DISMISS or no choice.
        """
        if choice is None:
            return None
        choice = UpdateChoice(choice)
        if choice == UpdateChoice.ALL:
            return await self.update_all()
        if choice == UpdateChoice.CHANGED:
            return await self.update_changed()
        if choice == UpdateChoice.SHOW:
            return await self.show_all_changes()
        self.dismiss()
        return None

    def _install(self, folders: List[Path]) -> List[Path]:
        for folder in folders:
            run_install(folder, self.settings.package_manager, self.sink)
        logger.info(
            "Started install in %d package %s",
            len(folders), plural(len(folders), "directory", "directories"),
        )
        return folders

    # ============= Status =============

    @property
    def status_text(self) -> Optional[str]:
        """Status indicator label, or None when it should be hidden."""
        count = len(self.changed)
        if count == 0 or not self.settings.show_status_bar:
            return None
        return f"$(package) {count} {plural(count, 'package', 'packages')} changed"

    @property
    def status_tooltip(self) -> Optional[str]:
        if self.status_text is None:
            return None
        return f"{len(self.changed)} package(s) have dependency changes. Click to update."
