"""Coalesce bursts of manifest change events into single detection cycles.

Two policies:

- ``global``: one timer for every manifest. Each event cancels whatever is
  pending and restarts the timer for the new path only, so an edit to B
  while A is pending drops A until A changes again.
- ``per-path``: one timer per manifest. Edits to different manifests do not
  cancel each other.

``global`` is the default.
"""

import asyncio
import logging
from typing import Callable, Dict, Optional

logger = logging.getLogger(__name__)

GLOBAL = "global"
PER_PATH = "per-path"


class ChangeDebouncer:
    """Delay-and-coalesce timer(s) on the running asyncio loop.

    ``callback(path)`` is called synchronously from the loop when a timer
    fires; it must not block.
    """

    def __init__(self, delay_ms: int, callback: Callable[[str], None], policy: str = GLOBAL):
        if policy not in (GLOBAL, PER_PATH):
            raise ValueError(f"Unknown debounce policy: {policy!r}")
        self.delay = max(0, delay_ms) / 1000
        self.callback = callback
        self.policy = policy
        self._timer: Optional[asyncio.TimerHandle] = None
        self._timers: Dict[str, asyncio.TimerHandle] = {}

    @property
    def pending(self) -> bool:
        """Whether any timer is armed."""
        return self._timer is not None or bool(self._timers)

    def trigger(self, path: str) -> None:
        """Register an event for ``path`` and (re)start its timer."""
        loop = asyncio.get_running_loop()
        if self.policy == GLOBAL:
            if self._timer is not None:
                self._timer.cancel()
                logger.debug("Debounce restarted by %s", path)
            self._timer = loop.call_later(self.delay, self._fire_global, path)
        else:
            existing = self._timers.pop(path, None)
            if existing is not None:
                existing.cancel()
            self._timers[path] = loop.call_later(self.delay, self._fire_path, path)

    def cancel(self) -> None:
        """Drop every pending timer without firing."""
        if self._timer is not None:
            self._timer.cancel()
            self._timer = None
        for handle in self._timers.values():
            handle.cancel()
        self._timers.clear()

    def _fire_global(self, path: str) -> None:
        self._timer = None
        self.callback(path)

    def _fire_path(self, path: str) -> None:
        self._timers.pop(path, None)
        self.callback(path)
