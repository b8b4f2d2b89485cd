"""Track dependency version drift across package.json manifests."""

from .constants import PACKAGE_VERSIONS_VERSION as __version__
