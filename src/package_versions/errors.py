"""Custom exceptions for package-versions.

Manifest read failures are not represented here: they surface as an absent
snapshot, never as an exception.
"""


class PackageVersionsError(RuntimeError):
    """Base class for all package-versions errors."""
    pass


# Configuration Errors
class ConfigError(PackageVersionsError):
    """Base class for configuration errors."""
    pass


class InvalidSettingError(ConfigError):
    """A setting holds a value outside its recognized options."""

    def __init__(self, key: str, value, allowed):
        self.key = key
        self.value = value
        self.allowed = list(allowed)
        super().__init__(
            f"Invalid value {value!r} for '{key}'. "
            f"Expected one of: {', '.join(self.allowed)}"
        )


# Storage Errors
class StoreError(PackageVersionsError):
    """Workspace state could not be persisted."""
    pass


# Command Errors
class NotAManifestError(PackageVersionsError):
    """A command that needs a package.json was given some other file."""

    def __init__(self, path):
        self.path = path
        super().__init__(f"{path} is not a package.json. Open a package.json to show changes.")
