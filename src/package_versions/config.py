"""Workspace settings helpers."""

import logging
import os
from dataclasses import dataclass, field
from typing import List

import yaml

from .constants import DEFAULT_DEBOUNCE_MS, DEFAULT_FIELDS
from .context import WorkspaceContext
from .errors import InvalidSettingError
from .utils import atomic_write_text

logger = logging.getLogger(__name__)

PACKAGE_MANAGER_CHOICES = ("auto", "npm", "pnpm", "yarn", "bun")
DEBOUNCE_POLICIES = ("global", "per-path")

# Environment overrides
ENV_PACKAGE_MANAGER = "PACKAGE_VERSIONS_PACKAGE_MANAGER"
ENV_DEBOUNCE_MS = "PACKAGE_VERSIONS_DEBOUNCE_MS"


@dataclass
class Settings:
    """Settings controlling change tracking and install prompts."""

    suggest_on_fields: List[str] = field(default_factory=lambda: list(DEFAULT_FIELDS))
    debounce_ms: int = DEFAULT_DEBOUNCE_MS
    show_status_bar: bool = True
    package_manager: str = "auto"
    debounce_policy: str = "global"  # "global" or "per-path"
    exclude: List[str] = field(default_factory=list)

    def __post_init__(self):
        self.debounce_ms = max(0, int(self.debounce_ms))
        if self.package_manager not in PACKAGE_MANAGER_CHOICES:
            raise InvalidSettingError("packageManager", self.package_manager, PACKAGE_MANAGER_CHOICES)
        if self.debounce_policy not in DEBOUNCE_POLICIES:
            raise InvalidSettingError("debouncePolicy", self.debounce_policy, DEBOUNCE_POLICIES)

    @property
    def debounce_seconds(self) -> float:
        return self.debounce_ms / 1000

    def to_dict(self) -> dict:
        """Serialize using the on-disk key names."""
        return {
            "suggestOnFields": list(self.suggest_on_fields),
            "debounceMs": self.debounce_ms,
            "showStatusBar": self.show_status_bar,
            "packageManager": self.package_manager,
            "debouncePolicy": self.debounce_policy,
            "exclude": list(self.exclude),
        }


def load_settings(ctx: WorkspaceContext) -> Settings:
    """Load settings from .package-versions/config.yaml if present.

    Missing or unparseable files yield defaults. Values of the wrong type
    raise InvalidSettingError. Environment variables override the file for
    the package manager and debounce delay.
    """
    data = {}
    if ctx.config_path.exists():
        try:
            data = yaml.safe_load(ctx.config_path.read_text(encoding="utf-8")) or {}
        except (OSError, yaml.YAMLError) as e:
            logger.warning("Ignoring unreadable config %s: %s", ctx.config_path, e)
            data = {}
        if not isinstance(data, dict):
            logger.warning("Ignoring config %s: expected a mapping", ctx.config_path)
            data = {}

    defaults = Settings()
    debounce_ms = data.get("debounceMs", defaults.debounce_ms)
    package_manager = data.get("packageManager", defaults.package_manager)

    if os.environ.get(ENV_PACKAGE_MANAGER):
        package_manager = os.environ[ENV_PACKAGE_MANAGER]
    if os.environ.get(ENV_DEBOUNCE_MS):
        debounce_ms = os.environ[ENV_DEBOUNCE_MS]

    if isinstance(debounce_ms, bool):
        raise InvalidSettingError("debounceMs", debounce_ms, ["a non-negative integer"])
    try:
        debounce_ms = int(debounce_ms)
    except (TypeError, ValueError):
        raise InvalidSettingError("debounceMs", debounce_ms, ["a non-negative integer"])

    show_status_bar = data.get("showStatusBar", defaults.show_status_bar)
    if not isinstance(show_status_bar, bool):
        raise InvalidSettingError("showStatusBar", show_status_bar, ["true", "false"])

    return Settings(
        suggest_on_fields=_string_list(data, "suggestOnFields", defaults.suggest_on_fields),
        debounce_ms=debounce_ms,
        show_status_bar=show_status_bar,
        package_manager=package_manager,
        debounce_policy=data.get("debouncePolicy", defaults.debounce_policy),
        exclude=_string_list(data, "exclude", []),
    )


def _string_list(data: dict, key: str, default: List[str]) -> List[str]:
    """Read a list-of-strings setting; a missing or null value gives the default."""
    value = data.get(key)
    if value is None:
        return list(default)
    if not isinstance(value, list) or not all(isinstance(item, str) for item in value):
        raise InvalidSettingError(key, value, ["a list of strings"])
    return list(value)


def save_settings(settings: Settings, ctx: WorkspaceContext) -> None:
    """Save settings atomically."""
    text = yaml.safe_dump(settings.to_dict(), default_flow_style=False, sort_keys=False)
    atomic_write_text(ctx.config_path, text)
