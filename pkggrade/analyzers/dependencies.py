"""Manifest parsing and declared-dependency checks."""

from __future__ import annotations

import json
from typing import Any, Dict, Mapping, Optional, Set

MANIFEST_PATH = "package.json"
_DEPENDENCY_FIELDS = ("dependencies", "devDependencies")


def parse_manifest(text: str) -> Optional[Dict[str, Any]]:
    """Return the manifest object, or None when the text is not a JSON object."""
    try:
        data = json.loads(text)
    except json.JSONDecodeError:
        return None
    if not isinstance(data, dict):
        return None
    return data


def declared_dependencies(manifest: Mapping[str, Any]) -> Set[str]:
    """Union of runtime and development dependency names; versions are ignored."""
    names: Set[str] = set()
    for field_name in _DEPENDENCY_FIELDS:
        section = manifest.get(field_name)
        if isinstance(section, Mapping):
            names.update(str(name) for name in section.keys())
    return names


def has_dependency(package_name: str, manifest: Mapping[str, Any]) -> bool:
    return package_name in declared_dependencies(manifest)


__all__ = ["MANIFEST_PATH", "declared_dependencies", "has_dependency", "parse_manifest"]
