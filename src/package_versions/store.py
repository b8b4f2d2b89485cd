"""Persisted workspace state and the baseline store built on it.

State is a single JSON document under ``.package-versions/state.json``.
Writes go through a temp file and ``os.replace`` while holding a
``portalocker`` lock, so concurrent processes (a ``watch`` session and a
one-shot ``snapshot`` command) never interleave partial documents.
"""

import json
import logging
from typing import Any, Dict

import portalocker

from .constants import BASELINE_KEY
from .context import WorkspaceContext
from .core import Baseline, Snapshot
from .errors import StoreError
from .utils import atomic_write_text

logger = logging.getLogger(__name__)

LOCK_TIMEOUT = 10  # seconds


class WorkspaceState:
    """Key-value store scoped to one workspace, surviving restarts."""

    def __init__(self, ctx: WorkspaceContext):
        self.ctx = ctx

    def _read_all(self) -> Dict[str, Any]:
        path = self.ctx.state_path
        if not path.exists():
            return {}
        try:
            data = json.loads(path.read_text(encoding="utf-8"))
        except (OSError, ValueError) as e:
            logger.warning("Workspace state at %s is unreadable, starting empty: %s", path, e)
            return {}
        if not isinstance(data, dict):
            logger.warning("Workspace state at %s is not an object, starting empty", path)
            return {}
        return data

    def get(self, key: str, default: Any = None) -> Any:
        return self._read_all().get(key, default)

    def update(self, key: str, value: Any) -> None:
        """Set ``key`` to ``value`` (``None`` removes it) and persist."""
        try:
            self.ctx.storage_dir.mkdir(parents=True, exist_ok=True)
            with portalocker.Lock(str(self.ctx.lock_path), mode="a", timeout=LOCK_TIMEOUT):
                data = self._read_all()
                if value is None:
                    data.pop(key, None)
                else:
                    data[key] = value
                atomic_write_text(self.ctx.state_path, json.dumps(data, indent=2))
        except (OSError, portalocker.LockException) as e:
            raise StoreError(f"Failed to persist workspace state to {self.ctx.state_path}: {e}") from e


class BaselineStore:
    """Get/replace access to the persisted baseline.

    There is no per-entry update: callers read the baseline, build a
    modified copy and replace the whole thing.
    """

    def __init__(self, state: WorkspaceState):
        self.state = state

    def get(self) -> Baseline:
        """Return the persisted baseline, or an empty one."""
        raw = self.state.get(BASELINE_KEY) or {}
        if not isinstance(raw, dict):
            logger.warning("Persisted baseline is not a mapping, starting empty")
            return Baseline()
        entries = {}
        for path, snap in raw.items():
            try:
                entries[path] = Snapshot.model_validate(snap)
            except ValueError as e:
                logger.warning("Dropping malformed baseline entry for %s: %s", path, e)
        return Baseline(entries=entries)

    def replace(self, baseline: Baseline) -> None:
        """Persist the full baseline, overwriting any prior value."""
        payload = {
            path: snap.model_dump(by_alias=True)
            for path, snap in baseline.entries.items()
        }
        self.state.update(BASELINE_KEY, payload)
        logger.debug("Baseline replaced (%d manifest(s))", len(payload))

    def clear(self) -> None:
        self.replace(Baseline())
