"""Tests for the version control practices."""
from __future__ import annotations

from pathlib import Path

import pytest

from conftest import REPO
from reposentry.practices.base import PracticeContext
from reposentry.practices.gitignore import (
    GitignoreIsPresentPractice,
    JsGitignoreCorrectlySetPractice,
    TsGitignoreCorrectlySetPractice,
    parse_gitignore,
)
from reposentry.practices.types import (
    PracticeEvaluationResult,
    PracticeImpact,
    ProgrammingLanguage,
    ProjectComponent,
)

BASIC_GITIGNORE = """
build
node_modules
coverage
.log
"""

FULL_GITIGNORE = """\
# dependencies
/node_modules

# testing
/coverage

# production
/build

# misc
.DS_Store
npm-debug.log*
yarn-debug.log*
"""

GITIGNORE = REPO / ".gitignore"


@pytest.fixture
def ctx(mock_fs, js_component):
    return PracticeContext(component=js_component, fs=mock_fs, scan_root=REPO)


class TestParseGitignore:
    def test_strips_comments_and_blank_lines(self):
        assert parse_gitignore("# c\n\n node_modules \n*.log\n") == ["node_modules", "*.log"]


class TestGitignoreIsPresent:
    def setup_method(self) -> None:
        self.practice = GitignoreIsPresentPractice()

    def test_metadata(self):
        metadata = self.practice.metadata
        assert metadata.id == "LanguageIndependent.GitignoreIsPresent"
        assert metadata.impact == PracticeImpact.HIGH
        assert metadata.report_only_once is True

    def test_present(self, ctx, mock_fs):
        mock_fs.mock_file_content(GITIGNORE, "")
        assert self.practice.evaluate(ctx) == PracticeEvaluationResult.PRACTICING

    def test_missing(self, ctx):
        assert self.practice.evaluate(ctx) == PracticeEvaluationResult.NOT_PRACTICING

    def test_checks_repository_root_for_subcomponents(self, mock_fs):
        mock_fs.mock_file_content(GITIGNORE, "node_modules\n")
        sub = ProjectComponent(ProgrammingLanguage.JAVASCRIPT, "/repo/packages/web")
        ctx = PracticeContext(component=sub, fs=mock_fs, scan_root=REPO)

        assert self.practice.evaluate(ctx) == PracticeEvaluationResult.PRACTICING

    def test_fix_creates_file_once(self, ctx, mock_fs):
        self.practice.fix(ctx)
        assert mock_fs.read_file(GITIGNORE) == ""

        mock_fs.mock_file_content(GITIGNORE, "dist/\n")
        self.practice.fix(ctx)
        assert mock_fs.read_file(GITIGNORE) == "dist/\n"


class TestJsGitignoreCorrectlySet:
    def setup_method(self) -> None:
        self.practice = JsGitignoreCorrectlySetPractice()

    def test_depends_on_gitignore_present(self):
        depends_on = self.practice.metadata.depends_on
        assert depends_on.practicing == {GitignoreIsPresentPractice.id}

    def test_practicing_for_full_gitignore(self, ctx, mock_fs):
        mock_fs.mock_file_content(GITIGNORE, FULL_GITIGNORE)
        assert self.practice.evaluate(ctx) == PracticeEvaluationResult.PRACTICING

    def test_practicing_without_lockfiles(self, ctx, mock_fs):
        mock_fs.mock_file_content(GITIGNORE, BASIC_GITIGNORE)
        assert self.practice.evaluate(ctx) == PracticeEvaluationResult.PRACTICING

    def test_practicing_with_one_lockfile_ignored(self, ctx, mock_fs):
        mock_fs.mock_file_content(GITIGNORE, BASIC_GITIGNORE + "\nyarn.lock")
        assert self.practice.evaluate(ctx) == PracticeEvaluationResult.PRACTICING

    def test_not_practicing_with_both_lockfiles_ignored(self, ctx, mock_fs):
        mock_fs.mock_file_content(GITIGNORE, BASIC_GITIGNORE + "\nyarn.lock\npackage-lock.json\n")

        assert self.practice.evaluate(ctx) == PracticeEvaluationResult.NOT_PRACTICING
        assert ctx.details["ignored_lockfiles"] == ["package-lock.json", "yarn.lock"]

    def test_not_practicing_lists_missing_patterns(self, ctx, mock_fs):
        mock_fs.mock_file_content(GITIGNORE, "...")

        assert self.practice.evaluate(ctx) == PracticeEvaluationResult.NOT_PRACTICING
        assert ctx.details["missing_patterns"] == ["node_modules/", "coverage/", "*.log"]

    def test_unknown_without_gitignore(self, ctx):
        assert self.practice.evaluate(ctx) == PracticeEvaluationResult.UNKNOWN

    def test_applicability(self):
        assert self.practice.is_applicable(ProjectComponent(ProgrammingLanguage.JAVASCRIPT, "/r"))
        assert not self.practice.is_applicable(ProjectComponent(ProgrammingLanguage.TYPESCRIPT, "/r"))

    def test_fix_appends_missing_patterns(self, ctx, mock_fs):
        mock_fs.mock_file_content(GITIGNORE, "/node_modules")

        self.practice.fix(ctx)

        assert mock_fs.read_file(GITIGNORE) == "/node_modules\n\ncoverage/\n*.log\n"
        assert self.practice.evaluate(ctx) == PracticeEvaluationResult.PRACTICING

    def test_fix_is_idempotent(self, ctx, mock_fs):
        mock_fs.mock_file_content(GITIGNORE, "...\n")

        self.practice.fix(ctx)
        first = mock_fs.read_file(GITIGNORE)
        self.practice.fix(ctx)

        assert mock_fs.read_file(GITIGNORE) == first


class TestTsGitignoreCorrectlySet:
    def setup_method(self) -> None:
        self.practice = TsGitignoreCorrectlySetPractice()

    @pytest.fixture
    def ts_ctx(self, mock_fs, ts_component):
        return PracticeContext(component=ts_component, fs=mock_fs, scan_root=REPO)

    def test_practicing_with_build_directory(self, ts_ctx, mock_fs):
        mock_fs.mock_file_content(GITIGNORE, BASIC_GITIGNORE)
        assert self.practice.evaluate(ts_ctx) == PracticeEvaluationResult.PRACTICING

    def test_build_output_required(self, ts_ctx, mock_fs):
        mock_fs.mock_file_content(GITIGNORE, "node_modules\ncoverage\n*.log\n")

        assert self.practice.evaluate(ts_ctx) == PracticeEvaluationResult.NOT_PRACTICING
        assert ts_ctx.details["missing_patterns"] == ["build/"]

    def test_dist_counts_as_build_output(self, ts_ctx, mock_fs):
        mock_fs.mock_file_content(GITIGNORE, "node_modules\ncoverage\n*.log\n/dist/\n")
        assert self.practice.evaluate(ts_ctx) == PracticeEvaluationResult.PRACTICING

    def test_applicability(self):
        assert self.practice.is_applicable(ProjectComponent(ProgrammingLanguage.TYPESCRIPT, "/r"))
        assert not self.practice.is_applicable(ProjectComponent(ProgrammingLanguage.UNKNOWN, "/r"))

    def test_shares_dependency_with_js_variant(self):
        assert self.practice.metadata.depends_on == JsGitignoreCorrectlySetPractice.get_metadata().depends_on
        assert self.practice.metadata.id != JsGitignoreCorrectlySetPractice.id


class TestTsGitignoreFixer:
    TSCONFIG = REPO / "tsconfig.json"

    def setup_method(self) -> None:
        self.practice = TsGitignoreCorrectlySetPractice()

    @pytest.fixture
    def ts_ctx(self, mock_fs, ts_component):
        mock_fs.mock_file_content(self.TSCONFIG, '{"compilerOptions": {"outDir": "./lib"}}')
        return PracticeContext(component=ts_component, fs=mock_fs, scan_root=REPO)

    def test_does_not_change_correct_gitignore(self, ts_ctx, mock_fs):
        gitignore = BASIC_GITIGNORE + "\npackage-lock.json\n/lib\n"
        mock_fs.mock_file_content(GITIGNORE, gitignore)

        assert self.practice.evaluate(ts_ctx) == PracticeEvaluationResult.PRACTICING
        self.practice.fix(ts_ctx)

        assert mock_fs.read_file(GITIGNORE) == gitignore

    def test_appends_missing_entry_after_blank_line(self, ts_ctx, mock_fs):
        mock_fs.mock_file_content(GITIGNORE, "/node_modules\n/coverage\n/lib\n")

        self.practice.fix(ts_ctx)

        assert mock_fs.read_file(GITIGNORE) == "/node_modules\n/coverage\n/lib\n\n*.log\n"

    def test_ignores_configured_output_directory(self, ts_ctx, mock_fs):
        mock_fs.mock_file_content(GITIGNORE, "/node_modules\n/coverage\n*.log\n")

        assert self.practice.evaluate(ts_ctx) == PracticeEvaluationResult.NOT_PRACTICING
        assert ts_ctx.details["missing_patterns"] == ["/lib"]
        self.practice.fix(ts_ctx)

        assert mock_fs.read_file(GITIGNORE) == "/node_modules\n/coverage\n*.log\n\n/lib\n"

    def test_ignores_configured_output_file(self, mock_fs, ts_component):
        mock_fs.mock_file_content(self.TSCONFIG, '{"compilerOptions": {"outFile": "./dist.ts"}}')
        mock_fs.mock_file_content(GITIGNORE, "/node_modules\n/coverage\n*.log\n")
        ctx = PracticeContext(component=ts_component, fs=mock_fs, scan_root=REPO)

        self.practice.fix(ctx)

        assert mock_fs.read_file(GITIGNORE) == "/node_modules\n/coverage\n*.log\n\ndist.ts\n"

    def test_build_directory_no_longer_enough_when_output_configured(self, ts_ctx, mock_fs):
        mock_fs.mock_file_content(GITIGNORE, BASIC_GITIGNORE)
        assert self.practice.evaluate(ts_ctx) == PracticeEvaluationResult.NOT_PRACTICING

    def test_output_of_nested_component_is_relative_to_root(self, mock_fs):
        web = ProjectComponent(ProgrammingLanguage.TYPESCRIPT, "/repo/packages/web")
        mock_fs.mock_file_content(Path(web.path) / "tsconfig.json", '{"compilerOptions": {"outDir": "dist/"}}')
        mock_fs.mock_file_content(GITIGNORE, "node_modules\ncoverage\n*.log\n")
        ctx = PracticeContext(component=web, fs=mock_fs, scan_root=REPO)

        self.practice.fix(ctx)

        assert mock_fs.read_file(GITIGNORE).endswith("\n\n/packages/web/dist\n")

    def test_unreadable_tsconfig_falls_back_to_build(self, mock_fs, ts_component):
        mock_fs.mock_file_content(self.TSCONFIG, "{ // comments are not JSON\n}")
        mock_fs.mock_file_content(GITIGNORE, "node_modules\ncoverage\n*.log\n")
        ctx = PracticeContext(component=ts_component, fs=mock_fs, scan_root=REPO)

        self.practice.fix(ctx)

        assert mock_fs.read_file(GITIGNORE) == "node_modules\ncoverage\n*.log\n\nbuild/\n"
