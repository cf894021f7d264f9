"""Base classes and utilities for repository practices."""
from __future__ import annotations

import abc
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import TYPE_CHECKING, Any, ClassVar, Dict, Iterable, Iterator, Optional, Tuple, Type

from .types import (
    DependsOn,
    PracticeEvaluationResult,
    PracticeImpact,
    PracticeMetadata,
    PracticeOverride,
    ProgrammingLanguage,
    ProjectComponent,
)

if TYPE_CHECKING:
    from ..core.interfaces import FileSystem

logger = logging.getLogger(__name__)


@dataclass
class PracticeContext:
    """Everything a practice may touch while evaluating or fixing a component.

    ``details`` is scratch space owned by a single invocation; whatever the
    practice leaves there ends up on the evaluation record. File helpers
    resolve against the component directory, or against the scanned
    repository root with ``at_root=True``.
    """

    component: ProjectComponent
    fs: "FileSystem"
    override: PracticeOverride = field(default_factory=PracticeOverride)
    details: Dict[str, Any] = field(default_factory=dict)
    scan_root: Optional[Path] = None

    @property
    def component_root(self) -> Path:
        return Path(self.component.path)

    @property
    def root(self) -> Path:
        return self.scan_root or self.component_root

    def path(self, relative: str, at_root: bool = False) -> Path:
        return (self.root if at_root else self.component_root) / relative

    def read_file(self, relative: str, at_root: bool = False) -> Optional[str]:
        return self.fs.read_file(self.path(relative, at_root))

    def file_exists(self, relative: str, at_root: bool = False) -> bool:
        return self.fs.file_exists(self.path(relative, at_root))

    def write_file(self, relative: str, content: str, at_root: bool = False) -> None:
        self.fs.write_file(self.path(relative, at_root), content)


class PracticeRegistry:
    """Registry for all practices, keyed by practice id."""

    _registry: ClassVar[Dict[str, Type["Practice"]]] = {}

    @classmethod
    def register(cls, practice_cls: Type["Practice"]) -> None:
        practice_id = practice_cls.id
        if not practice_id:
            raise ValueError(f"Practice {practice_cls.__name__} must define an id")
        if practice_id in cls._registry:
            raise ValueError(f"Duplicate practice id registered: {practice_id}")
        cls._registry[practice_id] = practice_cls
        logger.debug("Registered practice: %s", practice_id)

    @classmethod
    def get_all(cls) -> Iterable[Type["Practice"]]:
        return cls._registry.values()

    @classmethod
    def get(cls, practice_id: str) -> Optional[Type["Practice"]]:
        return cls._registry.get(practice_id)

    @classmethod
    def by_category(cls, categories: Iterable[str]) -> Iterable[Type["Practice"]]:
        selected = {cat.lower().strip() for cat in categories}
        for practice_cls in cls._registry.values():
            if practice_cls.category.lower() in selected:
                yield practice_cls

    @classmethod
    def clear(cls) -> None:
        cls._registry.clear()


class PracticeMeta(abc.ABCMeta):
    """Metaclass that auto-registers concrete practices."""

    def __new__(mcls, name: str, bases: Tuple[type, ...], namespace: Dict[str, Any]):
        cls = super().__new__(mcls, name, bases, namespace)
        auto_register = getattr(cls, "auto_register", True)
        if auto_register and not inspect_is_abstract(cls):
            PracticeRegistry.register(cls)
        return cls


def inspect_is_abstract(cls: Type["Practice"]) -> bool:
    """Helper to determine whether a class is abstract."""

    abstract_methods = getattr(cls, "__abstractmethods__", set())
    return bool(abstract_methods)


class Practice(metaclass=PracticeMeta):
    """Base class for all practices.

    Subclasses describe themselves with class attributes and implement
    ``evaluate``. ``is_applicable`` defaults to matching ``languages`` (an
    empty tuple means language independent). Overriding ``fix`` makes the
    practice fixable.
    """

    auto_register: ClassVar[bool] = True
    id: ClassVar[str] = ""
    name: ClassVar[str] = ""
    impact: ClassVar[PracticeImpact] = PracticeImpact.MEDIUM
    suggestion: ClassVar[str] = ""
    url: ClassVar[str] = ""
    report_only_once: ClassVar[bool] = False
    depends_on_practicing: ClassVar[Tuple[str, ...]] = ()
    depends_on_not_practicing: ClassVar[Tuple[str, ...]] = ()
    category: ClassVar[str] = "general"
    languages: ClassVar[Tuple[ProgrammingLanguage, ...]] = ()

    @classmethod
    def get_metadata(cls) -> PracticeMetadata:
        cached = cls.__dict__.get("_metadata")
        if cached is None:
            cached = PracticeMetadata(
                id=cls.id,
                name=cls.name or cls.id,
                impact=cls.impact,
                suggestion=cls.suggestion,
                url=cls.url,
                report_only_once=cls.report_only_once,
                depends_on=DependsOn.of(cls.depends_on_practicing, cls.depends_on_not_practicing),
                category=cls.category,
            )
            cls._metadata = cached
        return cached

    @property
    def metadata(self) -> PracticeMetadata:
        return type(self).get_metadata()

    def is_applicable(self, component: ProjectComponent) -> bool:
        return not self.languages or component.language in self.languages

    @abc.abstractmethod
    def evaluate(self, ctx: PracticeContext) -> PracticeEvaluationResult:
        """Evaluate the practice for ``ctx.component``."""

    def fix(self, ctx: PracticeContext) -> None:
        raise NotImplementedError(f"{self.metadata.id} has no fix")

    @property
    def can_fix(self) -> bool:
        return type(self).fix is not Practice.fix

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(id={self.metadata.id!r}, impact={self.metadata.impact.value})"


class _InstantiationFailureStub(Practice):
    """Placeholder practice used when instantiation fails."""

    auto_register = False

    def __init__(self, original_cls: Type[Practice]) -> None:
        self.original_cls = original_cls
        self._metadata_copy = original_cls.get_metadata()

    @property
    def metadata(self) -> PracticeMetadata:
        return self._metadata_copy

    def is_applicable(self, component: ProjectComponent) -> bool:
        languages = getattr(self.original_cls, "languages", ())
        return not languages or component.language in languages

    def evaluate(self, ctx: PracticeContext) -> PracticeEvaluationResult:
        ctx.details["error"] = "Practice could not be instantiated. See logs for stack trace."
        ctx.details["original_class"] = self.original_cls.__name__
        return PracticeEvaluationResult.UNKNOWN


class PracticeCatalog:
    """Immutable, ordered snapshot of instantiated practices for one run."""

    def __init__(self, practices: Iterable[Practice]) -> None:
        self._practices: Tuple[Practice, ...] = tuple(practices)
        self._by_id: Dict[str, Practice] = {}
        for practice in self._practices:
            practice_id = practice.metadata.id
            if practice_id in self._by_id:
                raise ValueError(f"Duplicate practice id in catalog: {practice_id}")
            self._by_id[practice_id] = practice

    @classmethod
    def from_registry(
        cls,
        practice_classes: Optional[Iterable[Type[Practice]]] = None,
    ) -> "PracticeCatalog":
        """Instantiate registered practices in registration order."""

        classes = list(PracticeRegistry.get_all() if practice_classes is None else practice_classes)
        practices = []
        for practice_cls in classes:
            try:
                practices.append(practice_cls())
            except Exception:  # noqa: BLE001
                logger.exception("Failed to instantiate practice %s", practice_cls.__name__)
                practices.append(_InstantiationFailureStub(original_cls=practice_cls))
        return cls(practices)

    def __iter__(self) -> Iterator[Practice]:
        return iter(self._practices)

    def __len__(self) -> int:
        return len(self._practices)

    def __contains__(self, practice_id: object) -> bool:
        return practice_id in self._by_id

    def get(self, practice_id: str) -> Optional[Practice]:
        return self._by_id.get(practice_id)
