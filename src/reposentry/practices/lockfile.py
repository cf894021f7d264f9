"""Dependency lockfile practices."""
from __future__ import annotations

from typing import List

from .base import Practice, PracticeContext
from .types import PracticeEvaluationResult, PracticeImpact, ProgrammingLanguage

JS_LOCKFILES = ("package-lock.json", "yarn.lock", "pnpm-lock.yaml")
PYTHON_LOCKFILES = ("poetry.lock", "Pipfile.lock", "uv.lock", "pdm.lock")


def _present(ctx: PracticeContext, names: tuple[str, ...]) -> List[str]:
    return [name for name in names if ctx.file_exists(name)]


class JsLockfileIsPresentPractice(Practice):
    """A package manager lockfile is committed next to package.json."""

    id = "JavaScript.LockfileIsPresent"
    name = "Lock Dependency Versions"
    impact = PracticeImpact.HIGH
    suggestion = "Commit the lockfile generated by your package manager to get reproducible installs."
    url = "https://docs.npmjs.com/cli/configuring-npm/package-lock-json"
    category = "dependencies"
    languages = (ProgrammingLanguage.JAVASCRIPT, ProgrammingLanguage.TYPESCRIPT)

    def evaluate(self, ctx: PracticeContext) -> PracticeEvaluationResult:
        found = _present(ctx, JS_LOCKFILES)
        if found:
            ctx.details["lockfiles"] = found
            return PracticeEvaluationResult.PRACTICING
        return PracticeEvaluationResult.NOT_PRACTICING


class JsExactlyOneLockfilePractice(Practice):
    """Only one package manager's lockfile is committed."""

    id = "JavaScript.ExactlyOneLockfile"
    name = "Use a Single Package Manager"
    impact = PracticeImpact.MEDIUM
    suggestion = "Keep exactly one lockfile; mixing npm, yarn and pnpm leads to diverging installs."
    url = "https://classic.yarnpkg.com/en/docs/migrating-from-npm"
    depends_on_practicing = (JsLockfileIsPresentPractice.id,)
    category = "dependencies"
    languages = (ProgrammingLanguage.JAVASCRIPT, ProgrammingLanguage.TYPESCRIPT)

    def evaluate(self, ctx: PracticeContext) -> PracticeEvaluationResult:
        found = _present(ctx, JS_LOCKFILES)
        if len(found) == 1:
            return PracticeEvaluationResult.PRACTICING
        ctx.details["lockfiles"] = found
        return PracticeEvaluationResult.NOT_PRACTICING


class PythonLockfileIsPresentPractice(Practice):
    """Python dependencies are locked, by a lockfile or fully pinned requirements."""

    id = "Python.LockfileIsPresent"
    name = "Lock Python Dependencies"
    impact = PracticeImpact.MEDIUM
    suggestion = "Commit a lockfile (poetry.lock, uv.lock, Pipfile.lock) or pin every requirement with ==."
    url = "https://pip.pypa.io/en/stable/topics/repeatable-installs/"
    category = "dependencies"
    languages = (ProgrammingLanguage.PYTHON,)

    def evaluate(self, ctx: PracticeContext) -> PracticeEvaluationResult:
        found = _present(ctx, PYTHON_LOCKFILES)
        if found:
            ctx.details["lockfiles"] = found
            return PracticeEvaluationResult.PRACTICING

        requirements = ctx.read_file("requirements.txt")
        if requirements is None:
            return PracticeEvaluationResult.NOT_PRACTICING

        unpinned = [
            line
            for line in (raw.split("#", 1)[0].strip() for raw in requirements.splitlines())
            if line and not line.startswith("-") and "==" not in line
        ]
        if unpinned:
            ctx.details["unpinned"] = unpinned
            return PracticeEvaluationResult.NOT_PRACTICING
        return PracticeEvaluationResult.PRACTICING
