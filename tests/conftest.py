"""Pytest configuration and shared fixtures for practice tests."""
from __future__ import annotations

import sys
from pathlib import Path
from typing import Callable, List, Optional, Sequence, Tuple, Type

import pytest

# Add src to path for imports when the package is not installed
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from reposentry.core.injection import MockFileSystem  # noqa: E402
from reposentry.practices.base import Practice, PracticeCatalog, PracticeRegistry  # noqa: E402
from reposentry.practices.types import (  # noqa: E402
    PracticeEvaluationResult,
    PracticeImpact,
    ProgrammingLanguage,
    ProjectComponent,
)

REPO = Path("/repo")


# ==============================================================================
# Fixtures
# ==============================================================================

@pytest.fixture
def clear_practice_registry():
    """Empty the practice registry for a test and restore it afterwards."""
    saved = dict(PracticeRegistry._registry)
    PracticeRegistry.clear()
    yield
    PracticeRegistry.clear()
    PracticeRegistry._registry.update(saved)


@pytest.fixture
def mock_fs() -> MockFileSystem:
    fs = MockFileSystem()
    fs.mock_directory(REPO)
    return fs


@pytest.fixture
def js_component() -> ProjectComponent:
    return ProjectComponent(language=ProgrammingLanguage.JAVASCRIPT, path=str(REPO))


@pytest.fixture
def ts_component() -> ProjectComponent:
    return ProjectComponent(language=ProgrammingLanguage.TYPESCRIPT, path=str(REPO))


@pytest.fixture
def py_component() -> ProjectComponent:
    return ProjectComponent(language=ProgrammingLanguage.PYTHON, path=str(REPO))


def make_practice(
    practice_id: str,
    result=PracticeEvaluationResult.PRACTICING,
    *,
    impact: PracticeImpact = PracticeImpact.MEDIUM,
    depends_on_practicing: Sequence[str] = (),
    depends_on_not_practicing: Sequence[str] = (),
    report_only_once: bool = False,
    languages: Tuple[ProgrammingLanguage, ...] = (),
    calls: Optional[List[Tuple[str, str]]] = None,
    fix: Optional[Callable] = None,
) -> Type[Practice]:
    """Build a throwaway practice class.

    ``result`` is either an evaluation result or a callable taking the
    context. ``calls`` collects ``(practice_id, component_id)`` per evaluation.
    """

    def evaluate(self, ctx):
        if calls is not None:
            calls.append((practice_id, ctx.component.id))
        if callable(result):
            return result(ctx)
        return result

    attrs = {
        "auto_register": False,
        "id": practice_id,
        "name": practice_id,
        "impact": impact,
        "suggestion": f"Adopt {practice_id}",
        "depends_on_practicing": tuple(depends_on_practicing),
        "depends_on_not_practicing": tuple(depends_on_not_practicing),
        "report_only_once": report_only_once,
        "languages": languages,
        "evaluate": evaluate,
    }
    if fix is not None:
        attrs["fix"] = lambda self, ctx: fix(ctx)
    name = "Practice_" + practice_id.replace(".", "_").replace("-", "_")
    return type(name, (Practice,), attrs)


def make_catalog(*practice_classes: Type[Practice]) -> PracticeCatalog:
    return PracticeCatalog([cls() for cls in practice_classes])


@pytest.fixture
def practice_factory():
    """Factory fixture for throwaway practice classes."""
    return make_practice
