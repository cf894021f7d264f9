"""
Configuration management for reposentry.

Loads and validates ``.reposentry.yml``:
- practices: per-practice toggles and impact overrides
- components: the same, scoped to one component directory
- execution: pipeline settings (timeout, parallelism)
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Mapping, Optional

import yaml

from .practices.types import PracticeImpact, PracticeOverride

logger = logging.getLogger(__name__)

CONFIG_FILENAMES = (".reposentry.yml", ".reposentry.yaml")

_TOGGLE_VALUES = {
    "off": False,
    "false": False,
    "disabled": False,
    "on": True,
    "true": True,
    "enabled": True,
}


class ConfigError(ValueError):
    """Raised for unreadable or malformed configuration."""


@dataclass
class ExecutionConfig:
    """Pipeline execution settings."""
    practice_timeout: Optional[float] = None  # seconds; None = no limit
    parallel: bool = False
    max_workers: int = 4


@dataclass
class ReposentryConfig:
    """Root configuration object."""
    practices: Dict[str, PracticeOverride] = field(default_factory=dict)
    components: Dict[str, Dict[str, PracticeOverride]] = field(default_factory=dict)
    execution: ExecutionConfig = field(default_factory=ExecutionConfig)
    source: Optional[Path] = None

    @classmethod
    def from_dict(cls, data: Mapping[str, Any], source: Optional[Path] = None) -> "ReposentryConfig":
        if not isinstance(data, Mapping):
            raise ConfigError(f"Configuration root must be a mapping, got {type(data).__name__}")

        practices = parse_practice_overrides(data.get("practices") or {})

        components: Dict[str, Dict[str, PracticeOverride]] = {}
        for path, section in (data.get("components") or {}).items():
            if not isinstance(section, Mapping):
                raise ConfigError(f"Component section for {path!r} must be a mapping")
            components[_normalize_component_key(str(path))] = parse_practice_overrides(
                section.get("practices") or {}
            )

        exec_data = data.get("execution") or {}
        if not isinstance(exec_data, Mapping):
            raise ConfigError("'execution' must be a mapping")
        timeout = exec_data.get("practice_timeout")
        try:
            execution = ExecutionConfig(
                practice_timeout=float(timeout) if timeout is not None else None,
                parallel=bool(exec_data.get("parallel", False)),
                max_workers=int(exec_data.get("max_workers", 4)),
            )
        except (TypeError, ValueError) as exc:
            raise ConfigError(f"Invalid execution settings: {exc}") from exc

        return cls(practices=practices, components=components, execution=execution, source=source)


def parse_override(practice_id: str, value: Any) -> PracticeOverride:
    """Parse one practice entry.

    Accepts a toggle (``off``/``on``/bool), an impact (``low``/``medium``/
    ``high``), or a mapping with ``enabled`` and/or ``impact`` keys.
    """
    if isinstance(value, bool):
        return PracticeOverride(enabled=value)
    if isinstance(value, str):
        lowered = value.strip().lower()
        if lowered in _TOGGLE_VALUES:
            return PracticeOverride(enabled=_TOGGLE_VALUES[lowered])
        return PracticeOverride(impact=_parse_impact(practice_id, lowered))
    if isinstance(value, Mapping):
        enabled = value.get("enabled", True)
        if isinstance(enabled, str):
            if enabled.strip().lower() not in _TOGGLE_VALUES:
                raise ConfigError(f"Invalid 'enabled' value for {practice_id}: {enabled!r}")
            enabled = _TOGGLE_VALUES[enabled.strip().lower()]
        impact = value.get("impact")
        return PracticeOverride(
            enabled=bool(enabled),
            impact=_parse_impact(practice_id, str(impact).lower()) if impact is not None else None,
        )
    raise ConfigError(f"Invalid configuration for practice {practice_id}: {value!r}")


def parse_practice_overrides(section: Any) -> Dict[str, PracticeOverride]:
    if not isinstance(section, Mapping):
        raise ConfigError("'practices' must be a mapping of practice id to setting")
    return {str(pid): parse_override(str(pid), value) for pid, value in section.items()}


def _parse_impact(practice_id: str, value: str) -> PracticeImpact:
    try:
        return PracticeImpact(value)
    except ValueError:
        choices = ", ".join(i.value for i in PracticeImpact)
        raise ConfigError(
            f"Invalid setting for {practice_id}: {value!r} (expected on/off or one of {choices})"
        ) from None


def _normalize_component_key(path: str) -> str:
    key = path.strip().replace("\\", "/").strip("/")
    if key.startswith("./"):
        key = key[2:]
    return key or "."


def find_config_file(root: Path) -> Optional[Path]:
    """Find the configuration file in a repository root."""
    for name in CONFIG_FILENAMES:
        candidate = root / name
        if candidate.is_file():
            return candidate
    return None


def load_config(path: Optional[Path] = None, root: Optional[Path] = None) -> ReposentryConfig:
    """Load configuration from an explicit path or from ``root``.

    Returns defaults when no file is found.
    """
    if path is None and root is not None:
        path = find_config_file(root)
    if path is None:
        return ReposentryConfig()

    try:
        with open(path, encoding="utf-8") as f:
            data = yaml.safe_load(f) or {}
    except OSError as exc:
        raise ConfigError(f"Cannot read configuration {path}: {exc}") from exc
    except yaml.YAMLError as exc:
        raise ConfigError(f"Invalid YAML in {path}: {exc}") from exc

    logger.debug("Loaded configuration from %s", path)
    return ReposentryConfig.from_dict(data, source=path)


class StaticOverrideStore:
    """Override store over a plain mapping.

    Keys are either a practice id (applies to all components) or a
    ``(practice_id, component_id)`` pair, which wins over the former.
    """

    def __init__(self, overrides: Optional[Mapping[Any, PracticeOverride]] = None) -> None:
        self._overrides = dict(overrides or {})

    def get_override(self, practice_id: str, component_id: str) -> PracticeOverride:
        specific = self._overrides.get((practice_id, component_id))
        if specific is not None:
            return specific
        return self._overrides.get(practice_id, PracticeOverride())


class ConfigOverrideStore:
    """Override store backed by a loaded ``ReposentryConfig``.

    Component ids are paths; they are matched against the ``components``
    section relative to ``root``. Component entries win over root entries.
    """

    def __init__(self, config: ReposentryConfig, root: Path) -> None:
        self.config = config
        self.root = root

    def _component_key(self, component_id: str) -> str:
        path = Path(component_id)
        try:
            relative = path.relative_to(self.root)
        except ValueError:
            return _normalize_component_key(component_id)
        return _normalize_component_key(relative.as_posix())

    def get_override(self, practice_id: str, component_id: str) -> PracticeOverride:
        component_section = self.config.components.get(self._component_key(component_id), {})
        if practice_id in component_section:
            return component_section[practice_id]
        return self.config.practices.get(practice_id, PracticeOverride())
