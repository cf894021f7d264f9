"""Reporting helpers for reposentry."""
from __future__ import annotations

import datetime as _dt
import html
import json
import sys
from collections import Counter
from pathlib import Path
from typing import Iterable, Mapping, Sequence

from ..core.fixer import FixOutcome
from ..core.pipeline import ComponentEvaluation
from ..practices.types import EvaluationRecord, PracticeEvaluationResult, PracticeImpact

_HEADER_LINE = "═" * 70

# ANSI color codes for terminal output
_COLORS = {
    "reset": "\033[0m",
    "bold": "\033[1m",
    "red": "\033[91m",
    "green": "\033[92m",
    "yellow": "\033[93m",
    "blue": "\033[94m",
    "gray": "\033[90m",
}

_IMPACT_COLORS = {
    PracticeImpact.HIGH: _COLORS["bold"] + _COLORS["red"],
    PracticeImpact.MEDIUM: _COLORS["yellow"],
    PracticeImpact.LOW: _COLORS["blue"],
}

_EVALUATION_COLORS = {
    PracticeEvaluationResult.PRACTICING: _COLORS["green"],
    PracticeEvaluationResult.NOT_PRACTICING: _COLORS["red"],
    PracticeEvaluationResult.UNKNOWN: _COLORS["gray"],
}

_EVALUATION_LABELS = {
    PracticeEvaluationResult.PRACTICING: "PRACTICING",
    PracticeEvaluationResult.NOT_PRACTICING: "NOT PRACTICING",
    PracticeEvaluationResult.UNKNOWN: "UNKNOWN",
}


def _colorize(text: str, color: str) -> str:
    """Wrap text with ANSI color codes."""
    return f"{color}{text}{_COLORS['reset']}"


def _sort_records(records: Iterable[EvaluationRecord]) -> list[EvaluationRecord]:
    return sorted(
        records,
        key=lambda r: (
            r.component.path,
            -r.impact.rank,
            r.evaluation == PracticeEvaluationResult.PRACTICING,
            r.practice_id,
        ),
    )


def _timestamp(dt: _dt.datetime | None = None) -> str:
    return (dt or _dt.datetime.now()).strftime("%Y-%m-%d %H:%M")


def _utcnow() -> _dt.datetime:
    return _dt.datetime.now(_dt.timezone.utc).replace(tzinfo=None)


def filter_records(
    records: Iterable[EvaluationRecord],
    min_impact: PracticeImpact | None = None,
) -> list[EvaluationRecord]:
    """Drop records whose effective impact is below ``min_impact``."""
    if min_impact is None:
        return list(records)
    return [record for record in records if record.impact.rank >= min_impact.rank]


def collect_summary(records: Iterable[EvaluationRecord]) -> dict[str, int]:
    evaluations: Counter[str] = Counter()
    impacts: Counter[str] = Counter()
    off = 0

    for record in records:
        if not record.is_on:
            off += 1
            continue
        evaluations[record.evaluation.value] += 1
        if record.evaluation == PracticeEvaluationResult.NOT_PRACTICING:
            impacts[record.impact.value] += 1

    summary = {"total": sum(evaluations.values()) + off, "off": off}
    summary.update({e.value: evaluations.get(e.value, 0) for e in PracticeEvaluationResult})
    summary.update({i.value: impacts.get(i.value, 0) for i in PracticeImpact})
    return summary


def _error_entries(errors: Iterable[ComponentEvaluation]) -> list[dict]:
    entries = []
    for evaluation in errors:
        members = getattr(evaluation.error, "members", ())
        entries.append(
            {
                "component": evaluation.component.path,
                "error": str(evaluation.error),
                "cycle": list(members),
            }
        )
    return entries


def _format_scan_info(scan_info: Mapping[str, str]) -> str:
    return "Scan: " + ", ".join(f"{key}: {value}" for key, value in scan_info.items())


def format_text_report(
    *,
    records: Iterable[EvaluationRecord],
    scan_info: Mapping[str, str],
    errors: Sequence[ComponentEvaluation] = (),
    fixes: Sequence[FixOutcome] = (),
    verbose: bool = False,
    min_impact: PracticeImpact | None = None,
    color: bool | None = None,
) -> str:
    """Generate a human-readable text report.

    Args:
        color: Enable ANSI colors. None = auto-detect TTY.
    """
    use_color = color if color is not None else sys.stdout.isatty()
    records = list(records)

    display = []
    for record in filter_records(records, min_impact):
        if not verbose and (record.evaluation == PracticeEvaluationResult.PRACTICING or not record.is_on):
            continue
        display.append(record)

    summary = collect_summary(records)

    lines = [
        f"╔{_HEADER_LINE}╗",
        f"║              reposentry Report - {_timestamp()}                ║",
        f"╚{_HEADER_LINE}╝",
        "",
        _format_scan_info(scan_info),
        "",
    ]

    if not display:
        lines.append("No findings for selected criteria.")
        lines.append("")
    else:
        current_component = None
        for record in _sort_records(display):
            if record.component.path != current_component:
                current_component = record.component.path
                lines.append(f"{current_component} ({record.component.language.value})")
            impact_text = record.impact.value.upper()
            evaluation_text = _EVALUATION_LABELS[record.evaluation] if record.is_on else "OFF"
            if use_color:
                impact_text = _colorize(impact_text, _IMPACT_COLORS.get(record.impact, ""))
                evaluation_text = _colorize(evaluation_text, _EVALUATION_COLORS.get(record.evaluation, ""))
            lines.append(f"  [{impact_text}] {record.practice.name} - {evaluation_text}")
            if record.evaluation != PracticeEvaluationResult.PRACTICING and record.practice.suggestion:
                lines.append(f"    → {record.practice.suggestion}")
            if record.practice.url:
                lines.append(f"    → {record.practice.url}")
            if record.details:
                details_json = json.dumps(dict(record.details), indent=2, sort_keys=True, default=str)
                indented = details_json.replace("\n", "\n      ")
                lines.append(f"    Details: {indented}")
        lines.append("")

    for entry in _error_entries(errors):
        lines.append(f"ERROR {entry['component']}: {entry['error']}")
    if errors:
        lines.append("")

    if fixes:
        lines.append("Fixes:")
        for fix in fixes:
            suffix = f" ({fix.message})" if fix.message else ""
            lines.append(f"  {fix.status.value.upper()} {fix.practice_id} on {fix.component_id}{suffix}")
        lines.append("")

    lines.extend(
        [
            "Summary:",
            f"  Total records: {summary['total']}",
            f"  Practicing: {summary['practicing']}  Not practicing: {summary['notPracticing']}  Unknown: {summary['unknown']}  Off: {summary['off']}",
            f"  Violations by impact - High: {summary['high']}, Medium: {summary['medium']}, Low: {summary['low']}",
        ]
    )

    return "\n".join(lines).strip() + "\n"


def format_json_report(
    *,
    records: Iterable[EvaluationRecord],
    scan_info: Mapping[str, str],
    errors: Sequence[ComponentEvaluation] = (),
    fixes: Sequence[FixOutcome] = (),
    scan_time: _dt.datetime | None = None,
    summary_source: Iterable[EvaluationRecord] | None = None,
) -> str:
    """Generate a JSON report using filtered records for output."""

    scan_time = scan_time or _utcnow()
    records = list(records)
    summary_basis = list(summary_source) if summary_source is not None else records
    payload = {
        "scan_date": scan_time.replace(microsecond=0).isoformat() + "Z",
        "scan": dict(scan_info),
        "practices": [record.to_dict() for record in _sort_records(records)],
        "errors": _error_entries(errors),
        "fixes": [fix.to_dict() for fix in fixes],
        "summary": collect_summary(summary_basis),
    }

    return json.dumps(payload, indent=2, sort_keys=True, default=str)


def format_html_report(
    *,
    records: Iterable[EvaluationRecord],
    scan_info: Mapping[str, str],
    errors: Sequence[ComponentEvaluation] = (),
    scan_time: _dt.datetime | None = None,
    summary_source: Iterable[EvaluationRecord] | None = None,
) -> str:
    """Generate a minimal HTML report."""

    scan_time = scan_time or _utcnow()
    records = list(records)
    summary_basis = list(summary_source) if summary_source is not None else records
    summary = collect_summary(summary_basis)
    rows = []
    for record in _sort_records(records):
        impact_class = f"impact-{html.escape(record.impact.value)}"
        evaluation = record.evaluation.value if record.is_on else "off"
        link = (
            f"<a href=\"{html.escape(record.practice.url)}\">{html.escape(record.practice.name)}</a>"
            if record.practice.url
            else html.escape(record.practice.name)
        )
        rows.append(
            "<tr>"
            f"<td>{html.escape(record.component.path)}</td>"
            f"<td class=\"{impact_class}\">{html.escape(record.impact.value)}</td>"
            f"<td>{html.escape(evaluation)}</td>"
            f"<td>{link}</td>"
            f"<td>{html.escape(record.practice.suggestion)}</td>"
            "</tr>"
        )

    scan_list = "".join(
        f"<li><strong>{html.escape(key)}:</strong> {html.escape(str(value))}</li>"
        for key, value in scan_info.items()
    )
    error_list = "".join(
        f"<li>{html.escape(entry['component'])}: {html.escape(entry['error'])}</li>"
        for entry in _error_entries(errors)
    )
    error_block = f"<ul class=\"errors\">{error_list}</ul>" if error_list else ""
    table_body = "".join(rows) if rows else "<tr><td colspan=\"5\">No findings for selected filters.</td></tr>"

    html_doc = f"""<!DOCTYPE html>
<html lang=\"en\">
<head>
  <meta charset=\"utf-8\" />
  <title>reposentry Report</title>
  <style>
    body {{ font-family: -apple-system, BlinkMacSystemFont, 'Segoe UI', sans-serif; background: #f5f5f5; color: #222; padding: 2rem; }}
    header {{ margin-bottom: 2rem; }}
    table {{ width: 100%; border-collapse: collapse; background: #fff; }}
    th, td {{ padding: 0.75rem; border-bottom: 1px solid #ddd; text-align: left; }}
    th {{ background: #1f2937; color: #f9fafb; }}
    tr:nth-child(even) {{ background: #f1f5f9; }}
    .impact-high {{ color: #b91c1c; font-weight: 600; }}
    .impact-medium {{ color: #92400e; }}
    .impact-low {{ color: #0369a1; }}
    .errors {{ color: #b91c1c; }}
    footer {{ margin-top: 2rem; font-size: 0.9rem; color: #555; }}
  </style>
</head>
<body>
  <header>
    <h1>reposentry Report</h1>
    <p><strong>Generated:</strong> {html.escape(scan_time.isoformat())}Z</p>
    <ul>{scan_list}</ul>
  </header>
  <main>
    {error_block}
    <table>
      <thead>
        <tr>
          <th>Component</th>
          <th>Impact</th>
          <th>Evaluation</th>
          <th>Practice</th>
          <th>Suggestion</th>
        </tr>
      </thead>
      <tbody>
        {table_body}
      </tbody>
    </table>
  </main>
  <footer>
    <p>Total: {summary['total']} | Practicing: {summary['practicing']} | Not practicing: {summary['notPracticing']} | Unknown: {summary['unknown']} | Off: {summary['off']}</p>
  </footer>
</body>
</html>
"""

    return html_doc


def write_report(output_path: Path, content: str) -> None:
    """Persist report content to the specified path."""

    output_path.parent.mkdir(parents=True, exist_ok=True)
    output_path.write_text(content, encoding="utf-8")
