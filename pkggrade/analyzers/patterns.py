"""Detection rules that decide whether a package is actually used in code."""

from __future__ import annotations

from types import MappingProxyType
from typing import Any, Dict, Iterator, Mapping, Optional, Sequence

from ..models import DetectionRule

BUILTIN_PATTERNS: Mapping[str, DetectionRule] = MappingProxyType(
    {
        "react": DetectionRule(
            file_patterns=(".jsx", ".tsx", ".js", ".ts"),
            code_patterns=("import { useState }", 'from "react"'),
        ),
        "express": DetectionRule(
            file_patterns=(".js",),
            code_patterns=('require("express")', "import express"),
        ),
    }
)


class PatternRegistry:
    """Two-layer rule lookup: caller overrides first, then the built-in table.

    The registry is fixed at construction and never mutated afterwards, so one
    instance can be shared by concurrent analyses.
    """

    def __init__(
        self,
        overrides: Mapping[str, DetectionRule] | None = None,
        *,
        base: Mapping[str, DetectionRule] = BUILTIN_PATTERNS,
    ) -> None:
        self._base = base
        self._overlay: Mapping[str, DetectionRule] = MappingProxyType(dict(overrides or {}))

    def get(self, package_name: str) -> Optional[DetectionRule]:
        rule = self._overlay.get(package_name)
        if rule is not None:
            return rule
        return self._base.get(package_name)

    def __contains__(self, package_name: object) -> bool:
        return package_name in self._overlay or package_name in self._base

    def __iter__(self) -> Iterator[str]:
        seen = set()
        for name in list(self._overlay) + list(self._base):
            if name not in seen:
                seen.add(name)
                yield name

    def names(self) -> list[str]:
        return list(self)


def rule_from_mapping(data: Mapping[str, Any]) -> DetectionRule:
    """Build a rule from ``file_patterns``/``code_patterns`` (camelCase accepted)."""
    file_patterns = _as_patterns(data.get("file_patterns", data.get("filePatterns")))
    code_patterns = _as_patterns(data.get("code_patterns", data.get("codePatterns")))
    if not file_patterns or not code_patterns:
        raise ValueError("Detection rules require non-empty file_patterns and code_patterns")
    return DetectionRule(file_patterns=file_patterns, code_patterns=code_patterns)


def rules_from_mapping(data: Mapping[str, Any]) -> Dict[str, DetectionRule]:
    rules: Dict[str, DetectionRule] = {}
    for name, value in data.items():
        if isinstance(value, DetectionRule):
            rules[str(name)] = value
        elif isinstance(value, Mapping):
            try:
                rules[str(name)] = rule_from_mapping(value)
            except ValueError as exc:
                raise ValueError(f"Invalid detection rule for '{name}': {exc}") from exc
        else:
            raise ValueError(f"Invalid detection rule for '{name}': expected a mapping")
    return rules


def _as_patterns(value: Any) -> tuple[str, ...]:
    if isinstance(value, str):
        return (value,)
    if isinstance(value, Sequence):
        return tuple(str(item) for item in value if isinstance(item, str) and item)
    return ()


__all__ = ["BUILTIN_PATTERNS", "PatternRegistry", "rule_from_mapping", "rules_from_mapping"]
