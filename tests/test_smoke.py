"""Smoke tests for the reposentry command line.

These tests validate the "happy path" end to end on real directories:
- the scan runs without crashing
- reports are produced in every format
- exit codes follow the evaluation outcome
"""

from __future__ import annotations

import json
from pathlib import Path

import pytest

from conftest import REPO, make_catalog, make_practice
from reposentry import __version__
from reposentry.audit import ExecutionOptions, _apply_fixes, _determine_exit_code, _parse_categories, main
from reposentry.config import StaticOverrideStore
from reposentry.core.injection import reset_container
from reposentry.core.pipeline import EvaluationPipeline
from reposentry.practices.types import PracticeEvaluationResult, ProgrammingLanguage, ProjectComponent

HEALTHY_GITIGNORE = "node_modules/\ncoverage/\n*.log\n"


@pytest.fixture(autouse=True)
def isolated_environment(monkeypatch, tmp_path):
    monkeypatch.setenv("REPOSENTRY_LOG_DIR", str(tmp_path / "logs"))
    reset_container()
    yield
    reset_container()


@pytest.fixture
def healthy_repo(tmp_path) -> Path:
    repo = tmp_path / "repo"
    repo.mkdir()
    (repo / "package.json").write_text('{"name": "app", "dependencies": {"express": "^4.0.0"}}')
    (repo / "package-lock.json").write_text("{}")
    (repo / ".gitignore").write_text(HEALTHY_GITIGNORE)
    (repo / ".editorconfig").write_text("root = true\n")
    (repo / "LICENSE").write_text("MIT")
    (repo / "README.md").write_text("# app\n")
    return repo


@pytest.fixture
def bare_repo(tmp_path) -> Path:
    repo = tmp_path / "bare"
    repo.mkdir()
    (repo / "package.json").write_text("{}")
    return repo


def _json_report(repo: Path, tmp_path: Path, *extra: str) -> tuple[int, dict]:
    output = tmp_path / "report.json"
    code = main([str(repo), "--format", "json", "-o", str(output), "-q", *extra])
    return code, json.loads(output.read_text(encoding="utf-8"))


class TestScan:
    def test_healthy_repository_exits_zero(self, healthy_repo, tmp_path):
        code, report = _json_report(healthy_repo, tmp_path)

        assert code == 0
        assert report["summary"]["notPracticing"] == 0
        assert report["summary"]["practicing"] == report["summary"]["total"]
        ids = {entry["practice_id"] for entry in report["practices"]}
        assert "JavaScript.ExactlyOneLockfile" in ids
        assert report["errors"] == []

    def test_bare_repository_reports_violations(self, bare_repo, tmp_path):
        code, report = _json_report(bare_repo, tmp_path)

        assert code == 2
        by_id = {entry["practice_id"]: entry for entry in report["practices"]}
        assert by_id["LanguageIndependent.GitignoreIsPresent"]["evaluation"] == "notPracticing"
        # gated on the missing .gitignore
        assert "JavaScript.GitignoreCorrectlySet" not in by_id
        assert "JavaScript.ExactlyOneLockfile" not in by_id

    def test_config_turns_practice_off(self, bare_repo, tmp_path):
        (bare_repo / ".reposentry.yml").write_text(
            "practices:\n"
            "  LanguageIndependent.GitignoreIsPresent: off\n"
            "  LanguageIndependent.LicenseIsPresent: off\n"
            "  LanguageIndependent.ReadmeIsPresent: off\n"
            "  LanguageIndependent.EditorConfigIsPresent: off\n"
            "  JavaScript.LockfileIsPresent: off\n"
        )

        code, report = _json_report(bare_repo, tmp_path)

        assert code == 0
        assert report["summary"]["off"] == 5
        assert all(not entry["is_on"] for entry in report["practices"])

    def test_min_impact_filters_report(self, bare_repo, tmp_path):
        code, report = _json_report(bare_repo, tmp_path, "--min-impact", "high")

        assert code == 2
        assert {entry["impact"] for entry in report["practices"]} == {"high"}

    def test_invalid_config_exits_three(self, bare_repo, tmp_path):
        (bare_repo / ".reposentry.yml").write_text("practices: [not, a, mapping]\n")

        assert main([str(bare_repo), "-q"]) == 3

    def test_missing_target_exits_three(self, tmp_path):
        assert main([str(tmp_path / "missing"), "-q"]) == 3

    def test_fix_creates_files(self, bare_repo, tmp_path):
        code, report = _json_report(bare_repo, tmp_path, "--fix")

        assert code == 2
        assert (bare_repo / ".gitignore").read_text() == ""
        assert (bare_repo / ".editorconfig").exists()
        statuses = {fix["practice_id"]: fix["status"] for fix in report["fixes"]}
        assert statuses["LanguageIndependent.GitignoreIsPresent"] == "success"

    def test_text_report_to_stdout(self, bare_repo, capsys):
        code = main([str(bare_repo)])

        out = capsys.readouterr().out
        assert code == 2
        assert "Create a .gitignore" in out

    def test_html_report(self, healthy_repo, tmp_path):
        output = tmp_path / "report.html"

        assert main([str(healthy_repo), "--format", "html", "-o", str(output), "-q"]) == 0
        assert output.read_text(encoding="utf-8").startswith("<!DOCTYPE html>")

    def test_writes_log_file(self, healthy_repo, tmp_path):
        main([str(healthy_repo), "-q"])

        assert (tmp_path / "logs" / "scan.log").exists()

    def test_categories_limit_evaluated_practices(self, healthy_repo, tmp_path):
        code, report = _json_report(healthy_repo, tmp_path, "--categories", "vcs")

        assert code == 0
        assert {entry["category"] for entry in report["practices"]} == {"vcs"}
        assert "JavaScript.GitignoreCorrectlySet" in {entry["practice_id"] for entry in report["practices"]}

    def test_unknown_category_exits_three(self, healthy_repo):
        assert main([str(healthy_repo), "-q", "--categories", "nonsense"]) == 3


class TestCommandLine:
    def test_dry_run(self, capsys):
        assert main(["--dry-run"]) == 0

        out = capsys.readouterr().out
        assert out.index("LanguageIndependent.GitignoreIsPresent") < out.index(
            "JavaScript.GitignoreCorrectlySet"
        )
        assert "Version Control: LanguageIndependent.GitignoreIsPresent" in out

    def test_dry_run_with_categories(self, capsys):
        assert main(["--dry-run", "--categories", "documentation"]) == 0

        out = capsys.readouterr().out
        assert "LanguageIndependent.ReadmeIsPresent" in out
        assert "JavaScript.GitignoreCorrectlySet" not in out

    def test_parse_categories(self):
        assert _parse_categories(" VCS, documentation,,") == ["vcs", "documentation"]
        assert _parse_categories(None) == []

    def test_version(self, capsys):
        with pytest.raises(SystemExit) as exc_info:
            main(["--version"])

        assert exc_info.value.code == 0
        assert __version__ in capsys.readouterr().out


class TestExitCodes:
    @pytest.mark.parametrize(
        "stats,expected",
        [
            ({"notPracticing": 0, "unknown": 0, "errors": 0}, 0),
            ({"notPracticing": 0, "unknown": 2, "errors": 0}, 1),
            ({"notPracticing": 1, "unknown": 2, "errors": 0}, 2),
            ({"notPracticing": 1, "unknown": 0, "errors": 1}, 3),
            ({}, 0),
        ],
    )
    def test_determine_exit_code(self, stats, expected):
        assert _determine_exit_code(stats) == expected


class TestApplyFixes:
    def test_report_once_practice_is_fixed_on_every_component(self, mock_fs):
        fixed = []
        catalog = make_catalog(
            make_practice(
                "Once",
                PracticeEvaluationResult.NOT_PRACTICING,
                report_only_once=True,
                fix=lambda ctx: fixed.append(ctx.component.id),
            )
        )
        web = ProjectComponent(ProgrammingLanguage.JAVASCRIPT, "/repo/web")
        api = ProjectComponent(ProgrammingLanguage.JAVASCRIPT, "/repo/api")
        store = StaticOverrideStore()
        scan = EvaluationPipeline(catalog, override_store=store, file_system=mock_fs, scan_root=REPO).run([web, api])

        outcomes = _apply_fixes(scan, catalog, store, ExecutionOptions(fix=True), mock_fs, REPO)

        assert len(scan.reportable_records()) == 1
        assert fixed == ["/repo/web", "/repo/api"]
        assert [outcome.component_id for outcome in outcomes] == ["/repo/web", "/repo/api"]
