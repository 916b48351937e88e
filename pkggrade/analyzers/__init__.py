"""Repository analyzers: declared dependencies and implementation evidence."""

from __future__ import annotations

from typing import Any, Iterable, Mapping, Sequence

from ..models import AnalysisResult, RepositoryFile
from .dependencies import MANIFEST_PATH, declared_dependencies, has_dependency, parse_manifest
from .implementation import ImplementationDetector
from .patterns import BUILTIN_PATTERNS, PatternRegistry


def analyze_repository(
    manifest: Mapping[str, Any],
    files: Sequence[RepositoryFile],
    required_packages: Iterable[str],
    detector: ImplementationDetector,
) -> AnalysisResult:
    """Compute the dependency flag and implementation evidence for each package."""
    declared = declared_dependencies(manifest)
    result = AnalysisResult()
    for package in required_packages:
        result.dependencies[package] = package in declared
        result.implementation[package] = detector.detect(package, files)
    return result


__all__ = [
    "BUILTIN_PATTERNS",
    "ImplementationDetector",
    "MANIFEST_PATH",
    "PatternRegistry",
    "analyze_repository",
    "declared_dependencies",
    "has_dependency",
    "parse_manifest",
]
