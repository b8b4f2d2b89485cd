"""Utility functions for package-versions."""

import os
import tempfile
import time
from pathlib import Path


def now_ms() -> int:
    """Get current timestamp as epoch milliseconds."""
    return int(time.time() * 1000)


def plural(count: int, singular: str, plural_form: str) -> str:
    """Pick the word form for a count."""
    return singular if count == 1 else plural_form


def atomic_write_text(path: Path, text: str) -> None:
    """Atomically write text to file with crash safety.

    1. Writes to temp file with fsync to ensure content is on disk
    2. Atomic rename to target path (appears all-at-once)
    3. Fsync parent directory to ensure rename is durable

    Directory fsync is best-effort (not supported on Windows).
    """
    path.parent.mkdir(parents=True, exist_ok=True)

    with tempfile.NamedTemporaryFile(
        mode="w",
        delete=False,
        dir=path.parent,
        prefix=f".{path.name}.tmp-",
        suffix="",
        encoding="utf-8",
    ) as f:
        f.write(text)
        f.flush()
        os.fsync(f.fileno())
        tmp = Path(f.name)

    try:
        os.replace(tmp, path)

        try:
            flags = os.O_RDONLY
            if hasattr(os, "O_DIRECTORY"):
                flags |= os.O_DIRECTORY

            dirfd = os.open(str(path.parent), flags)
            try:
                os.fsync(dirfd)
            finally:
                os.close(dirfd)
        except OSError:
            # Directory fsync unsupported; the file write itself is durable
            pass
    except BaseException:
        tmp.unlink(missing_ok=True)
        raise
