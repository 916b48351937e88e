"""Implementation detector: finds evidence that a package is used in code."""

from __future__ import annotations

from typing import Iterable

from ..models import ImplementationResult, RepositoryFile
from .patterns import PatternRegistry

NO_PATTERNS_REASON = "No implementation patterns defined"
NOT_FOUND_REASON = "No implementation found"


class ImplementationDetector:
    """Matches repository files against the registered detection rules."""

    def __init__(self, registry: PatternRegistry | None = None) -> None:
        self.registry = registry or PatternRegistry()

    def detect(self, package_name: str, files: Iterable[RepositoryFile]) -> ImplementationResult:
        """Return the first file (in the given order) that shows the package in use."""
        rule = self.registry.get(package_name)
        if rule is None:
            return ImplementationResult(implemented=False, reason=NO_PATTERNS_REASON)

        for file in files:
            if not rule.matches_path(file.path):
                continue
            if rule.matches_content(file.content):
                return ImplementationResult(implemented=True, file=file.path, content=file.content)

        return ImplementationResult(implemented=False, reason=NOT_FOUND_REASON)


__all__ = ["ImplementationDetector", "NOT_FOUND_REASON", "NO_PATTERNS_REASON"]
