"""Editor configuration practice."""
from __future__ import annotations

from .base import Practice, PracticeContext
from .types import PracticeEvaluationResult, PracticeImpact

EDITORCONFIG = ".editorconfig"

DEFAULT_EDITORCONFIG = """\
root = true

[*]
charset = utf-8
end_of_line = lf
indent_style = space
indent_size = 2
insert_final_newline = true
trim_trailing_whitespace = true

[*.py]
indent_size = 4

[*.md]
trim_trailing_whitespace = false
"""


class EditorConfigIsPresentPractice(Practice):
    """The repository root contains an .editorconfig."""

    id = "LanguageIndependent.EditorConfigIsPresent"
    name = "Use .editorconfig"
    impact = PracticeImpact.LOW
    suggestion = "Add an .editorconfig so every editor uses the same whitespace settings."
    url = "https://editorconfig.org/"
    report_only_once = True
    category = "editor"

    def evaluate(self, ctx: PracticeContext) -> PracticeEvaluationResult:
        if ctx.file_exists(EDITORCONFIG, at_root=True):
            return PracticeEvaluationResult.PRACTICING
        return PracticeEvaluationResult.NOT_PRACTICING

    def fix(self, ctx: PracticeContext) -> None:
        if ctx.file_exists(EDITORCONFIG, at_root=True):
            return
        ctx.write_file(EDITORCONFIG, DEFAULT_EDITORCONFIG, at_root=True)
