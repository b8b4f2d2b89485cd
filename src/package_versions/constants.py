"""Constants for package-versions."""

# Project marker directory
PACKAGE_VERSIONS_DIR = ".package-versions"

# Files inside PACKAGE_VERSIONS_DIR
CONFIG_FILE = "config.yaml"
STATE_FILE = "state.json"
LOCK_FILE = "state.lock"

# Key of the baseline entry in the workspace state document
BASELINE_KEY = "packageVersions.baseline"

MANIFEST_NAME = "package.json"

DEFAULT_FIELDS = [
    "dependencies",
    "devDependencies",
    "peerDependencies",
    "optionalDependencies",
    "bundledDependencies",
]

# Version recorded for names listed in array-shaped fields
LIST_SENTINEL_VERSION = "*"

DEFAULT_DEBOUNCE_MS = 250

# Cap for the recursive discovery fallback
DISCOVERY_LIMIT = 10

# Version
PACKAGE_VERSIONS_VERSION = "0.1.0"
