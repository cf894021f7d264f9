"""Practice implementations for reposentry."""
from __future__ import annotations

from importlib import import_module
from typing import Iterable

from .base import Practice, PracticeCatalog, PracticeContext, PracticeRegistry

_PRACTICE_MODULES: tuple[str, ...] = (
    "gitignore",
    "lockfile",
    "documentation",
    "editorconfig",
)


def load_practices() -> Iterable[type[Practice]]:
    """Import all practice modules to populate the registry."""

    for module_name in _PRACTICE_MODULES:
        import_module(f"{__name__}.{module_name}")
    return PracticeRegistry.get_all()


__all__ = [
    "Practice",
    "PracticeCatalog",
    "PracticeContext",
    "PracticeRegistry",
    "load_practices",
]
