"""Version control hygiene practices."""
from __future__ import annotations

import json
import logging
import re
from typing import Any, Dict, List, Optional, Tuple

from .base import Practice, PracticeContext
from .types import PracticeEvaluationResult, PracticeImpact, ProgrammingLanguage

logger = logging.getLogger(__name__)

GITIGNORE = ".gitignore"
TSCONFIG = "tsconfig.json"


def parse_gitignore(content: str) -> List[str]:
    """Return the pattern lines of a .gitignore, without blanks and comments."""
    return [
        line.strip()
        for line in content.splitlines()
        if line.strip() and not line.lstrip().startswith("#")
    ]


def _find(patterns: List[str], regex: str) -> Optional[str]:
    compiled = re.compile(regex)
    return next((p for p in patterns if compiled.search(p)), None)


class GitignoreIsPresentPractice(Practice):
    """The repository root contains a .gitignore file."""

    id = "LanguageIndependent.GitignoreIsPresent"
    name = "Create a .gitignore"
    impact = PracticeImpact.HIGH
    suggestion = "Add a .gitignore so build output and local files stay out of version control."
    url = "https://git-scm.com/docs/gitignore"
    report_only_once = True
    category = "vcs"

    def evaluate(self, ctx: PracticeContext) -> PracticeEvaluationResult:
        if ctx.file_exists(GITIGNORE, at_root=True):
            return PracticeEvaluationResult.PRACTICING
        return PracticeEvaluationResult.NOT_PRACTICING

    def fix(self, ctx: PracticeContext) -> None:
        if ctx.file_exists(GITIGNORE, at_root=True):
            return
        ctx.write_file(GITIGNORE, "", at_root=True)


class JsGitignoreCorrectlySetPractice(Practice):
    """The root .gitignore covers the usual Node.js artifacts."""

    id = "JavaScript.GitignoreCorrectlySet"
    name = "Set .gitignore Correctly"
    impact = PracticeImpact.HIGH
    suggestion = "Set patterns in the .gitignore as usual."
    url = "https://github.com/github/gitignore/blob/master/Node.gitignore"
    report_only_once = True
    depends_on_practicing = (GitignoreIsPresentPractice.id,)
    category = "vcs"
    languages = (ProgrammingLanguage.JAVASCRIPT,)

    # pattern regex -> line appended by fix()
    required_patterns = {
        r"node_modules": "node_modules/",
        r"coverage": "coverage/",
        r"\.log": "*.log",
    }

    def required(self, ctx: PracticeContext) -> Dict[str, str]:
        return dict(self.required_patterns)

    def _missing(self, ctx: PracticeContext, patterns: List[str]) -> List[str]:
        return [line for regex, line in self.required(ctx).items() if not _find(patterns, regex)]

    def evaluate(self, ctx: PracticeContext) -> PracticeEvaluationResult:
        content = ctx.read_file(GITIGNORE, at_root=True)
        if content is None:
            return PracticeEvaluationResult.UNKNOWN

        patterns = parse_gitignore(content)
        ignored_lockfiles = [
            lock for lock, regex in (("package-lock.json", r"package-lock\.json"), ("yarn.lock", r"yarn\.lock"))
            if _find(patterns, regex)
        ]
        missing = self._missing(ctx, patterns)

        if len(ignored_lockfiles) < 2 and not missing:
            return PracticeEvaluationResult.PRACTICING

        ctx.details["missing_patterns"] = missing
        if len(ignored_lockfiles) > 1:
            ctx.details["ignored_lockfiles"] = ignored_lockfiles
        return PracticeEvaluationResult.NOT_PRACTICING

    def fix(self, ctx: PracticeContext) -> None:
        content = ctx.read_file(GITIGNORE, at_root=True) or ""
        missing = self._missing(ctx, parse_gitignore(content))
        if not missing:
            return
        # appended entries go after a blank line
        if content and not content.endswith("\n"):
            content += "\n"
        if content:
            content += "\n"
        ctx.write_file(GITIGNORE, content + "\n".join(missing) + "\n", at_root=True)
        logger.debug("Appended %s to %s", missing, ctx.path(GITIGNORE, at_root=True))


class TsGitignoreCorrectlySetPractice(JsGitignoreCorrectlySetPractice):
    """TypeScript flavour; additionally expects the compiler output to be ignored.

    The output location comes from ``compilerOptions.outDir`` or ``outFile``
    in the component's tsconfig.json. Without either, any of build/, dist/
    or lib/ is accepted and fix() adds build/.
    """

    id = "TypeScript.GitignoreCorrectlySet"
    url = "https://github.com/github/gitignore/blob/master/Node.gitignore"
    languages = (ProgrammingLanguage.TYPESCRIPT,)

    default_build_output = (r"^/?(build|dist|lib)/?$", "build/")

    def required(self, ctx: PracticeContext) -> Dict[str, str]:
        regex, line = self.build_output(ctx) or self.default_build_output
        required = dict(self.required_patterns)
        required[regex] = line
        return required

    def build_output(self, ctx: PracticeContext) -> Optional[Tuple[str, str]]:
        """Return ``(regex, gitignore line)`` for the configured compiler output."""
        content = ctx.read_file(TSCONFIG)
        if content is None:
            return None
        try:
            options = json.loads(content).get("compilerOptions") or {}
        except (ValueError, AttributeError) as exc:
            logger.debug("Cannot read compilerOptions from %s: %s", ctx.path(TSCONFIG), exc)
            return None

        out_dir = _relative_output(ctx, options.get("outDir"))
        if out_dir:
            return rf"^/?{re.escape(out_dir)}/?$", f"/{out_dir}"
        out_file = _relative_output(ctx, options.get("outFile"))
        if out_file:
            return rf"^/?{re.escape(out_file)}$", out_file
        return None


def _relative_output(ctx: PracticeContext, value: Any) -> Optional[str]:
    """Normalize a tsconfig output path to one relative to the repository root."""
    if not isinstance(value, str):
        return None
    path = value.strip()
    while path.startswith("./"):
        path = path[2:]
    path = path.strip("/")
    if not path or path == ".":
        return None
    try:
        base = ctx.component_root.relative_to(ctx.root).as_posix()
    except ValueError:
        base = "."
    return path if base == "." else f"{base}/{path}"
