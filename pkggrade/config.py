"""Configuration loading for pkggrade (.pkggrade.yml)."""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional, Sequence

import yaml

from .grading import DEFAULT_PASS_CUTOFF
from .models import DetectionRule
from .analyzers.patterns import rules_from_mapping
from .source.walker import TraversalLimits

CONFIG_FILENAME = ".pkggrade.yml"
ENV_SOURCE_TOKEN_KEYS = ("PKGGRADE_GITHUB_TOKEN", "GITHUB_TOKEN")


class ConfigError(RuntimeError):
    """Raised when the configuration file cannot be parsed."""


@dataclass
class SourceConfig:
    """Content store (GitHub) settings."""

    token: Optional[str] = None
    base_url: Optional[str] = None
    ref: Optional[str] = None
    request_timeout: Optional[float] = None


@dataclass
class LLMConfig:
    """Quality oracle runtime settings."""

    model: Optional[str] = None
    base_url: Optional[str] = None
    api_key: Optional[str] = None
    temperature: Optional[float] = None
    max_tokens: Optional[int] = None
    request_timeout: Optional[float] = None


@dataclass
class PkgGradeConfig:
    """Represents the settings defined in .pkggrade.yml."""

    root: Path
    source: SourceConfig = field(default_factory=SourceConfig)
    llm: LLMConfig = field(default_factory=LLMConfig)
    traversal: TraversalLimits = field(default_factory=TraversalLimits)
    pass_cutoff: int = DEFAULT_PASS_CUTOFF
    oracle_workers: int = 1
    patterns: Dict[str, DetectionRule] = field(default_factory=dict)

    def source_token(self) -> Optional[str]:
        """Configured token, falling back to the environment."""
        return self.source.token or env_source_token()


def env_source_token() -> Optional[str]:
    """First non-empty GitHub token among ``ENV_SOURCE_TOKEN_KEYS``."""
    for key in ENV_SOURCE_TOKEN_KEYS:
        value = os.getenv(key)
        if value:
            return value
    return None


def load_config(config_path: Path) -> PkgGradeConfig:
    """Load configuration from disk; a missing file yields the defaults."""
    config_file = _resolve_config_path(config_path)
    root = config_file.parent.resolve()

    if not config_file.exists():
        return PkgGradeConfig(root=root)

    data = _read_config(config_file)
    if not isinstance(data, dict):
        raise ConfigError(f"{CONFIG_FILENAME} must contain a mapping at the root")
    return config_from_mapping(data, root=root)


def config_from_mapping(data: Mapping[str, Any], *, root: Path) -> PkgGradeConfig:
    source_data = _as_dict(data.get("source"))
    source = SourceConfig(
        token=_as_str(source_data.get("token")),
        base_url=_as_str(source_data.get("base_url")),
        ref=_as_str(source_data.get("ref")),
        request_timeout=_as_float(source_data.get("request_timeout")),
    )

    llm_data = _as_dict(data.get("llm"))
    llm = LLMConfig(
        model=_as_str(llm_data.get("model")),
        base_url=_as_str(llm_data.get("base_url")),
        api_key=_as_str(llm_data.get("api_key")),
        temperature=_as_float(llm_data.get("temperature")),
        max_tokens=_as_int(llm_data.get("max_tokens")),
        request_timeout=_as_float(llm_data.get("request_timeout")),
    )

    traversal = _parse_traversal(_as_dict(data.get("traversal")))

    grading_data = _as_dict(data.get("grading"))
    pass_cutoff = DEFAULT_PASS_CUTOFF
    if "pass_cutoff" in grading_data:
        cutoff = _as_int(grading_data.get("pass_cutoff"))
        if cutoff is None or not 0 <= cutoff <= 100:
            raise ConfigError("grading.pass_cutoff must be an integer between 0 and 100")
        pass_cutoff = cutoff

    oracle_data = _as_dict(data.get("oracle"))
    workers = 1
    if "workers" in oracle_data:
        workers = _as_int(oracle_data.get("workers")) or 0
    if workers < 1:
        raise ConfigError("oracle.workers must be at least 1")

    patterns_data = data.get("patterns")
    patterns: Dict[str, DetectionRule] = {}
    if patterns_data is not None:
        if not isinstance(patterns_data, dict):
            raise ConfigError("patterns must be a mapping of package name to rule")
        try:
            patterns = rules_from_mapping(patterns_data)
        except ValueError as exc:
            raise ConfigError(str(exc)) from exc

    return PkgGradeConfig(
        root=root,
        source=source,
        llm=llm,
        traversal=traversal,
        pass_cutoff=pass_cutoff,
        oracle_workers=workers,
        patterns=patterns,
    )


def _parse_traversal(data: Dict[str, Any]) -> TraversalLimits:
    defaults = TraversalLimits()
    values: Dict[str, Any] = {}
    for key in ("max_files", "max_depth", "max_file_size"):
        if key not in data:
            continue
        raw = data[key]
        if raw is None:
            values[key] = None
            continue
        number = _as_int(raw)
        if number is None or number < 0:
            raise ConfigError(f"traversal.{key} must be a non-negative integer or null")
        values[key] = number
    if "exclude_paths" in data:
        values["exclude_paths"] = tuple(_as_str_list(data.get("exclude_paths")))
    return TraversalLimits(
        max_files=values.get("max_files", defaults.max_files),
        max_depth=values.get("max_depth", defaults.max_depth),
        max_file_size=values.get("max_file_size", defaults.max_file_size),
        exclude_paths=values.get("exclude_paths", defaults.exclude_paths),
    )


def _resolve_config_path(config_path: Path) -> Path:
    config_path = config_path.expanduser()
    if config_path.is_dir():
        return (config_path / CONFIG_FILENAME).resolve()
    return config_path.resolve()


def _read_config(path: Path) -> Dict[str, Any]:
    text = path.read_text(encoding="utf-8")
    if not text.strip():
        return {}
    try:
        loaded = yaml.safe_load(text)
    except yaml.YAMLError as exc:
        raise ConfigError(f"Failed to parse {path.name}: {exc}") from exc
    return loaded or {}


def _as_dict(value: Any) -> Dict[str, Any]:
    return value if isinstance(value, dict) else {}


def _as_str(value: Any) -> Optional[str]:
    return str(value) if isinstance(value, (str, int, float)) and not isinstance(value, bool) else None


def _as_float(value: Any) -> Optional[float]:
    if isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        return float(value)
    if isinstance(value, str):
        try:
            return float(value)
        except ValueError:
            return None
    return None


def _as_int(value: Any) -> Optional[int]:
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, str):
        try:
            return int(value)
        except ValueError:
            return None
    return None


def _as_str_list(value: Any) -> List[str]:
    if value is None:
        return []
    if isinstance(value, str):
        return [value]
    if isinstance(value, Sequence):
        return [str(item) for item in value if isinstance(item, (str, int, float))]
    return []


__all__ = [
    "CONFIG_FILENAME",
    "ConfigError",
    "LLMConfig",
    "PkgGradeConfig",
    "SourceConfig",
    "config_from_mapping",
    "env_source_token",
    "load_config",
]
