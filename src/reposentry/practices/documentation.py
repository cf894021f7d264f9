"""Repository documentation practices."""
from __future__ import annotations

from .base import Practice, PracticeContext
from .types import PracticeEvaluationResult, PracticeImpact

LICENSE_FILES = ("LICENSE", "LICENSE.md", "LICENSE.txt", "COPYING")
README_FILES = ("README.md", "README.rst", "README.txt", "README")


class _RootFileMixin:
    """Practicing when any of ``filenames`` exists at the repository root."""

    filenames: tuple[str, ...] = ()

    def evaluate(self, ctx: PracticeContext) -> PracticeEvaluationResult:
        for filename in self.filenames:
            if ctx.file_exists(filename, at_root=True):
                ctx.details["found"] = filename
                return PracticeEvaluationResult.PRACTICING
        ctx.details["expected_one_of"] = list(self.filenames)
        return PracticeEvaluationResult.NOT_PRACTICING


class LicenseIsPresentPractice(_RootFileMixin, Practice):
    id = "LanguageIndependent.LicenseIsPresent"
    name = "Create a License"
    impact = PracticeImpact.MEDIUM
    suggestion = "Add a LICENSE file so others know how they may use the code."
    url = "https://choosealicense.com/"
    report_only_once = True
    category = "documentation"
    filenames = LICENSE_FILES


class ReadmeIsPresentPractice(_RootFileMixin, Practice):
    id = "LanguageIndependent.ReadmeIsPresent"
    name = "Create a README"
    impact = PracticeImpact.LOW
    suggestion = "Add a README describing what the project does and how to run it."
    url = "https://www.makeareadme.com/"
    report_only_once = True
    category = "documentation"
    filenames = README_FILES
