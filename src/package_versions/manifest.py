"""Manifest reading and dependency field extraction."""

import json
import logging
from pathlib import Path
from typing import Any, Dict, Iterable, Optional, Union

from .constants import LIST_SENTINEL_VERSION
from .core import DependencyMap

logger = logging.getLogger(__name__)


def read_manifest(path: Union[str, Path]) -> Optional[Dict[str, Any]]:
    """Load and parse a manifest file.

    Returns None when the file is missing, unreadable, not valid JSON, or
    does not hold a JSON object. Never raises.
    """
    path = Path(path)
    try:
        raw = path.read_text(encoding="utf-8")
        data = json.loads(raw)
    except (OSError, UnicodeDecodeError, ValueError) as e:
        logger.debug("Could not read manifest %s: %s", path, e)
        return None

    if not isinstance(data, dict):
        logger.debug("Manifest %s is not a JSON object", path)
        return None
    return data


def extract_fields(manifest: Dict[str, Any], fields: Iterable[str]) -> Dict[str, DependencyMap]:
    """Project a manifest onto the tracked dependency fields.

    Mapping-shaped fields are shallow-copied (string versions only). List-shaped fields (the
    historical ``bundledDependencies`` form) map every name to ``"*"``.
    Fields that are missing, null, or of any other shape are omitted.
    """
    out: Dict[str, DependencyMap] = {}
    for field in fields:
        value = manifest.get(field)
        if value is None:
            continue
        if isinstance(value, dict):
            # Non-string versions cannot be compared as specifiers
            out[field] = {name: version for name, version in value.items() if isinstance(version, str)}
        elif isinstance(value, list):
            out[field] = {name: LIST_SENTINEL_VERSION for name in value if isinstance(name, str)}
    return out
