"""Core types for practices - no external dependencies."""
from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, FrozenSet, Iterable, Mapping, Optional


class PracticeImpact(str, Enum):
    """Impact levels for practice findings."""

    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"

    @property
    def rank(self) -> int:
        return _IMPACT_RANK[self]


_IMPACT_RANK = {
    PracticeImpact.LOW: 1,
    PracticeImpact.MEDIUM: 2,
    PracticeImpact.HIGH: 3,
}


class PracticeEvaluationResult(str, Enum):
    """Outcome of evaluating a practice against a component."""

    PRACTICING = "practicing"
    NOT_PRACTICING = "notPracticing"
    UNKNOWN = "unknown"


class ProgrammingLanguage(str, Enum):
    JAVASCRIPT = "JavaScript"
    TYPESCRIPT = "TypeScript"
    PYTHON = "Python"
    GO = "Go"
    JAVA = "Java"
    UNKNOWN = "UNKNOWN"


class ProjectComponentFramework(str, Enum):
    REACT = "React"
    VUE = "Vue"
    ANGULAR = "Angular"
    EXPRESS = "Express"
    NEXT = "Next"
    UNKNOWN = "UNKNOWN"


class ProjectComponentPlatform(str, Enum):
    FRONTEND = "Frontend"
    BACKEND = "Backend"
    UNKNOWN = "UNKNOWN"


class ProjectComponentType(str, Enum):
    APPLICATION = "Application"
    LIBRARY = "Library"
    UNKNOWN = "UNKNOWN"


# Category display names for human-readable output
CATEGORY_DISPLAY_NAMES: Dict[str, str] = {
    "vcs": "Version Control",
    "dependencies": "Dependencies",
    "documentation": "Documentation",
    "editor": "Editor & Formatting",
    "general": "General",
}


@dataclass(frozen=True, slots=True)
class DependsOn:
    """Results other practices must have produced before a practice may run."""

    practicing: FrozenSet[str] = frozenset()
    not_practicing: FrozenSet[str] = frozenset()

    @classmethod
    def of(
        cls,
        practicing: Iterable[str] = (),
        not_practicing: Iterable[str] = (),
    ) -> "DependsOn":
        return cls(frozenset(practicing), frozenset(not_practicing))

    @property
    def all_ids(self) -> FrozenSet[str]:
        return self.practicing | self.not_practicing

    def __bool__(self) -> bool:
        return bool(self.practicing or self.not_practicing)


@dataclass(frozen=True, slots=True)
class PracticeMetadata:
    """Immutable descriptor of a registered practice."""

    id: str
    name: str
    impact: PracticeImpact
    suggestion: str = ""
    url: str = ""
    report_only_once: bool = False
    depends_on: DependsOn = field(default_factory=DependsOn)
    category: str = "general"

    @property
    def category_display_name(self) -> str:
        return CATEGORY_DISPLAY_NAMES.get(self.category, self.category.replace("_", " ").title())


@dataclass(frozen=True, slots=True)
class ProjectComponent:
    """A detected unit of the scanned codebase."""

    language: ProgrammingLanguage
    path: str
    framework: ProjectComponentFramework = ProjectComponentFramework.UNKNOWN
    platform: ProjectComponentPlatform = ProjectComponentPlatform.UNKNOWN
    type: ProjectComponentType = ProjectComponentType.UNKNOWN
    repository_path: Optional[str] = None

    @property
    def id(self) -> str:
        return self.path


@dataclass(frozen=True, slots=True)
class PracticeOverride:
    """Per-component toggle and impact override for a practice."""

    enabled: bool = True
    impact: Optional[PracticeImpact] = None


@dataclass(frozen=True, slots=True)
class EvaluationRecord:
    """Outcome of running (or explicitly not running) a practice on a component."""

    practice: PracticeMetadata
    component: ProjectComponent
    evaluation: PracticeEvaluationResult
    is_on: bool = True
    override_impact: Optional[PracticeImpact] = None
    details: Optional[Mapping[str, Any]] = field(default=None, hash=False)

    @property
    def practice_id(self) -> str:
        return self.practice.id

    @property
    def impact(self) -> PracticeImpact:
        return self.override_impact or self.practice.impact

    def to_dict(self) -> Dict[str, Any]:
        return {
            "component": self.component.path,
            "language": self.component.language.value,
            "repository": self.component.repository_path,
            "practice_id": self.practice.id,
            "name": self.practice.name,
            "category": self.practice.category,
            "evaluation": self.evaluation.value,
            "is_on": self.is_on,
            "impact": self.impact.value,
            "suggestion": self.practice.suggestion,
            "url": self.practice.url,
            "details": dict(self.details) if self.details else {},
        }
