"""Configuration loading for repoprompt (.repoprompt.yml)."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional

import yaml

from .errors import ConfigurationError

CONFIG_FILENAME = ".repoprompt.yml"

FACET_NAMES: tuple[str, ...] = (
    "documentation",
    "workflow",
    "dependencies",
    "incident",
    "governance",
    "business",
)

# camelCase spellings accepted from JSON callers and older config files.
_ALIASES: Dict[str, str] = {
    "excludePatterns": "exclude_patterns",
    "maxFileSizeKB": "max_file_size_kb",
    "includeTests": "include_tests",
    "sampleLimit": "sample_limit",
    "maxFiles": "max_files",
    "timeBudgetSeconds": "time_budget_seconds",
    "maxDepth": "max_depth",
    "maxExamplesPerCategory": "max_examples_per_category",
}


@dataclass(frozen=True)
class AnalysisConfig:
    """Options recognised by a single analysis run."""

    exclude_patterns: List[str] = field(default_factory=list)
    max_file_size_kb: int = 1000
    include_tests: bool = True
    sample_limit: int = 20
    max_files: int = 5000
    time_budget_seconds: Optional[float] = None
    max_depth: int = 8
    max_examples_per_category: int = 5
    facets: List[str] = field(default_factory=lambda: list(FACET_NAMES))

    @property
    def max_file_bytes(self) -> int:
        return self.max_file_size_kb * 1024


def load_config(
    config_path: Path | None = None, overrides: Mapping[str, Any] | None = None
) -> AnalysisConfig:
    """Load configuration from disk and apply explicit overrides on top."""
    data: Dict[str, Any] = {}
    if config_path is not None:
        config_file = _resolve_config_path(config_path)
        if config_file.exists():
            loaded = _read_config(config_file)
            if not isinstance(loaded, dict):
                raise ConfigurationError(f"{CONFIG_FILENAME} must contain a mapping at the root")
            data.update(_normalise_keys(loaded))

    if overrides:
        data.update(
            {key: value for key, value in _normalise_keys(overrides).items() if value is not None}
        )

    return build_config(data)


def build_config(data: Mapping[str, Any]) -> AnalysisConfig:
    """Validate a mapping of options and return an ``AnalysisConfig``."""
    defaults = AnalysisConfig()
    values = _normalise_keys(data)

    exclude_patterns = _as_str_list("exclude_patterns", values.get("exclude_patterns"))
    max_file_size_kb = _require_int(values, "max_file_size_kb", defaults.max_file_size_kb)
    sample_limit = _require_int(values, "sample_limit", defaults.sample_limit)
    max_files = _require_int(values, "max_files", defaults.max_files)
    max_depth = _require_int(values, "max_depth", defaults.max_depth)
    max_examples = _require_int(
        values, "max_examples_per_category", defaults.max_examples_per_category
    )

    include_tests = defaults.include_tests
    if values.get("include_tests") is not None:
        parsed = _as_bool(values.get("include_tests"))
        if parsed is None:
            raise ConfigurationError("include_tests must be a boolean")
        include_tests = parsed

    time_budget = None
    if values.get("time_budget_seconds") is not None:
        time_budget = _as_float(values.get("time_budget_seconds"))
        if time_budget is None or time_budget <= 0:
            raise ConfigurationError("time_budget_seconds must be a positive number")

    if max_file_size_kb <= 0:
        raise ConfigurationError("max_file_size_kb must be greater than zero")
    if sample_limit < 0:
        raise ConfigurationError("sample_limit must not be negative")
    if max_files <= 0:
        raise ConfigurationError("max_files must be greater than zero")
    if max_depth < 1:
        raise ConfigurationError("max_depth must be at least 1")
    if max_examples < 0:
        raise ConfigurationError("max_examples_per_category must not be negative")

    facets = list(FACET_NAMES)
    if values.get("facets") is not None:
        facets = [name.lower() for name in _as_str_list("facets", values.get("facets"))]
        unknown = sorted(set(facets) - set(FACET_NAMES))
        if unknown:
            raise ConfigurationError(f"Unknown facets requested: {', '.join(unknown)}")

    return AnalysisConfig(
        exclude_patterns=exclude_patterns,
        max_file_size_kb=max_file_size_kb,
        include_tests=include_tests,
        sample_limit=sample_limit,
        max_files=max_files,
        time_budget_seconds=time_budget,
        max_depth=max_depth,
        max_examples_per_category=max_examples,
        facets=facets,
    )


def _resolve_config_path(config_path: Path) -> Path:
    config_path = config_path.expanduser()
    if config_path.is_dir():
        return (config_path / CONFIG_FILENAME).resolve()
    return config_path.resolve()


def _read_config(path: Path) -> Any:
    try:
        text = path.read_text(encoding="utf-8")
    except OSError as exc:
        raise ConfigurationError(f"Failed to read {path}: {exc}") from exc
    if not text.strip():
        return {}
    try:
        loaded = yaml.safe_load(text)
    except yaml.YAMLError as exc:
        raise ConfigurationError(f"Failed to parse {path}: {exc}") from exc
    return loaded if loaded is not None else {}


def _normalise_keys(values: Mapping[str, Any]) -> Dict[str, Any]:
    return {_ALIASES.get(str(key), str(key)): value for key, value in values.items()}


def _require_int(values: Mapping[str, Any], key: str, default: int) -> int:
    raw = values.get(key)
    if raw is None:
        return default
    parsed = _as_int(raw)
    if parsed is None:
        raise ConfigurationError(f"{key} must be an integer, got {raw!r}")
    return parsed


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


def _as_bool(value: Any) -> Optional[bool]:
    if isinstance(value, bool):
        return value
    if isinstance(value, str):
        lowered = value.strip().lower()
        if lowered in {"true", "yes", "1"}:
            return True
        if lowered in {"false", "no", "0"}:
            return False
    return None


def _as_str_list(key: str, value: Any) -> List[str]:
    if value is None:
        return []
    if isinstance(value, str):
        return [item.strip() for item in value.split(",") if item.strip()]
    if isinstance(value, (list, tuple)) and all(isinstance(item, str) for item in value):
        return [item.strip() for item in value if item.strip()]
    raise ConfigurationError(f"{key} must be a string or a list of strings, got {value!r}")


__all__ = [
    "AnalysisConfig",
    "CONFIG_FILENAME",
    "ConfigurationError",
    "FACET_NAMES",
    "build_config",
    "load_config",
]
