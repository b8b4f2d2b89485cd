"""Package-manager detection and install dispatch."""

import logging
import subprocess
from enum import Enum
from pathlib import Path
from typing import Protocol, Union

logger = logging.getLogger(__name__)


class PackageManager(str, Enum):
    """Install tools the resolver can pick."""

    NPM = "npm"
    PNPM = "pnpm"
    YARN = "yarn"
    BUN = "bun"


# Probed in order; first hit wins
LOCK_FILES = [
    ("pnpm-lock.yaml", PackageManager.PNPM),
    ("yarn.lock", PackageManager.YARN),
    ("bun.lockb", PackageManager.BUN),
    ("bun.lock", PackageManager.BUN),
]

INSTALL_COMMANDS = {
    PackageManager.NPM: "npm i",
    PackageManager.PNPM: "pnpm install",
    PackageManager.YARN: "yarn install",
    PackageManager.BUN: "bun install",
}


def detect_package_manager(folder: Union[str, Path], preference: str = "auto") -> PackageManager:
    """Pick the install tool for a directory.

    An explicit preference always wins. With ``auto``, lock files decide and
    npm is the fallback whether or not package-lock.json exists.
    """
    if preference and preference != "auto":
        return PackageManager(preference)

    folder = Path(folder)
    for lock_name, pm in LOCK_FILES:
        if (folder / lock_name).exists():
            return pm
    return PackageManager.NPM


def install_command(pm: PackageManager) -> str:
    return INSTALL_COMMANDS[pm]


class InstallSink(Protocol):
    """Something that runs a shell command in a directory under a session name."""

    def run(self, name: str, cwd: Path, command: str) -> None:
        ...


class SubprocessSink:
    """Start install commands as detached child processes.

    The result is not awaited or inspected.
    """

    def run(self, name: str, cwd: Path, command: str) -> None:
        logger.info("[%s] %s (in %s)", name, command, cwd)
        subprocess.Popen(command, shell=True, cwd=str(cwd))


def run_install(folder: Union[str, Path], preference: str, sink: InstallSink) -> PackageManager:
    """Resolve the package manager for ``folder`` and send its install command to ``sink``."""
    folder = Path(folder)
    pm = detect_package_manager(folder, preference)
    sink.run(f"Install: {folder.name}", folder, install_command(pm))
    return pm
