"""reposentry - repository practice scanner main entry point."""
from __future__ import annotations

import argparse
import logging
import logging.handlers
import os
import sys
from dataclasses import dataclass
from datetime import datetime
from pathlib import Path
from typing import Dict, List, Optional, Sequence

from . import __version__
from .cli import Colors, Console, Icons, Theme
from .config import ConfigError, ConfigOverrideStore, load_config
from .core.fixer import FixerInvoker, FixOutcome
from .core.injection import get_container
from .core.interfaces import FileSystem, OverrideStore
from .core.pipeline import EvaluationPipeline, PipelineConfig, ScanResult
from .core.resolver import DependencyCycleError, DependencyGraphResolver
from .detection import detect_components
from .practices import PracticeCatalog, PracticeRegistry, load_practices
from .practices.types import EvaluationRecord, PracticeEvaluationResult, PracticeImpact
from .source import ScanTarget, ScanTargetError, resolve_scan_target
from .utils.reporting import (
    collect_summary,
    filter_records,
    format_html_report,
    format_json_report,
    format_text_report,
    write_report,
)

_DEFAULT_LOG_DIR = Path.home() / ".reposentry" / "logs"

# Verbosity levels
VERBOSITY_QUIET = 0      # Only errors and summary
VERBOSITY_NORMAL = 1     # Violations and unknowns
VERBOSITY_VERBOSE = 2    # Include practicing records and details
VERBOSITY_DEBUG = 3      # Include timing


def _log_dir() -> Path:
    override = os.environ.get("REPOSENTRY_LOG_DIR")
    return Path(override).expanduser() if override else _DEFAULT_LOG_DIR


def configure_logging(level: int = logging.INFO, log_dir: Optional[Path] = None) -> None:
    """Configure logging for the application.

    Logs are written to ~/.reposentry/logs/scan.log (or $REPOSENTRY_LOG_DIR)
    with automatic rotation at 5MB and 3 backup files retained.
    """
    log_dir = log_dir or _log_dir()
    log_dir.mkdir(parents=True, exist_ok=True)
    log_file = log_dir / "scan.log"

    formatter = logging.Formatter(
        fmt="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )

    # Rotating file handler: 5MB max, keep 3 backups
    file_handler = logging.handlers.RotatingFileHandler(
        log_file,
        maxBytes=5 * 1024 * 1024,  # 5 MB
        backupCount=3,
        encoding="utf-8",
    )
    file_handler.setFormatter(formatter)
    file_handler.setLevel(level)

    console_handler = logging.StreamHandler()
    console_handler.setFormatter(formatter)
    console_handler.setLevel(logging.WARNING)

    logging.basicConfig(level=level, handlers=[file_handler, console_handler], force=True)


@dataclass
class ExecutionOptions:
    """Options controlling what is reported and fixed."""
    verbosity: int = VERBOSITY_NORMAL
    min_impact: Optional[PracticeImpact] = None
    fix: bool = False
    fix_impact: Optional[PracticeImpact] = None
    categories: Sequence[str] = ()

    @property
    def verbose(self) -> bool:
        return self.verbosity >= VERBOSITY_VERBOSE


def parse_args(argv: Sequence[str]) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        prog="reposentry",
        description="reposentry - evaluate development practices in a repository",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  %(prog)s                              Scan the current directory
  %(prog)s ../my-app --verbose          Show practicing records too
  %(prog)s --format json -o out.json    Export a JSON report
  %(prog)s https://github.com/org/repo  Scan a shallow clone of a remote repository
  %(prog)s --fix --fix-impact high      Apply fixes for high impact practices
  %(prog)s --categories vcs,documentation  Only evaluate some practice categories
""",
    )
    parser.add_argument(
        "target",
        nargs="?",
        default=".",
        help="Directory or git URL to scan (default: current directory)",
    )
    parser.add_argument(
        "--version",
        action="version",
        version=f"%(prog)s {__version__}",
    )
    parser.add_argument(
        "--format",
        choices=["text", "json", "html"],
        default="text",
        help="Report output format",
    )
    parser.add_argument(
        "--output", "-o",
        type=str,
        help="Write report to file instead of stdout",
    )
    parser.add_argument(
        "--config",
        type=str,
        help="Path to a .reposentry.yml (default: looked up in the scanned root)",
    )
    parser.add_argument(
        "--categories",
        type=str,
        help="Comma-separated list of practice categories to evaluate (default: all)",
    )
    parser.add_argument(
        "--min-impact",
        choices=[impact.value for impact in PracticeImpact],
        help="Minimum impact to report",
    )
    parser.add_argument(
        "--fix",
        action="store_true",
        help="Apply available fixes after evaluation",
    )
    parser.add_argument(
        "--fix-impact",
        choices=[impact.value for impact in PracticeImpact],
        help="Only fix practices with at least this impact",
    )
    parser.add_argument(
        "--dry-run",
        action="store_true",
        help="List practices in evaluation order without scanning",
    )
    parser.add_argument(
        "--parallel",
        action="store_true",
        help="Evaluate components in parallel",
    )
    parser.add_argument(
        "--timeout",
        type=float,
        help="Per-practice timeout in seconds",
    )
    parser.add_argument(
        "--verbose", "-v",
        action="count",
        default=0,
        help="Increase output verbosity (-v for practicing records, -vv for timing)",
    )
    parser.add_argument(
        "--quiet", "-q",
        action="store_true",
        help="Minimal output (only errors and summary)",
    )
    parser.add_argument(
        "--debug",
        action="store_true",
        help="Enable debug logging",
    )
    return parser.parse_args(argv)


def _verbosity(args: argparse.Namespace) -> int:
    if args.quiet:
        verbosity = VERBOSITY_QUIET
    elif args.debug or args.verbose >= 2:
        verbosity = VERBOSITY_DEBUG
    elif args.verbose == 1:
        verbosity = VERBOSITY_VERBOSE
    else:
        verbosity = VERBOSITY_NORMAL

    # JSON/HTML to stdout should only print the report
    if args.format in ("json", "html") and not args.output:
        verbosity = VERBOSITY_QUIET
    return verbosity


def _parse_categories(raw: Optional[str]) -> List[str]:
    if not raw:
        return []
    return [part.strip().lower() for part in raw.split(",") if part.strip()]


def _build_catalog(categories: Sequence[str]) -> PracticeCatalog:
    if categories:
        return PracticeCatalog.from_registry(PracticeRegistry.by_category(categories))
    return PracticeCatalog.from_registry()


def _print_dry_run(catalog: PracticeCatalog, console: Console) -> int:
    """Display practices in dependency order without evaluating them."""
    resolver = DependencyGraphResolver()
    try:
        ordered = resolver.resolve([practice.metadata for practice in catalog])
    except DependencyCycleError as exc:
        console.error(str(exc))
        return 3

    console.subheader("Practices in evaluation order (dry-run)")
    for metadata in ordered:
        impact = f"[{metadata.impact.value}]"
        if console.use_color:
            impact = f"{Theme.impact_color(metadata.impact)}{impact}{Colors.RESET}"
        deps = ", ".join(sorted(metadata.depends_on.all_ids))
        suffix = f" (after {deps})" if deps else ""
        print(f"    {Icons.BULLET} {metadata.category_display_name}: {metadata.id} {impact}{suffix}")

    console.blank()
    console.dim(f"Total: {len(catalog)} practices")
    return 0


def _render_report(
    *,
    scan: ScanResult,
    records: List[EvaluationRecord],
    fixes: Sequence[FixOutcome],
    scan_info: Dict[str, str],
    options: ExecutionOptions,
    output_format: str,
) -> str:
    filtered = filter_records(records, options.min_impact)
    if output_format == "json":
        return format_json_report(
            records=filtered,
            scan_info=scan_info,
            errors=scan.errors,
            fixes=fixes,
            summary_source=records,
        )
    if output_format == "html":
        return format_html_report(
            records=filtered,
            scan_info=scan_info,
            errors=scan.errors,
            summary_source=records,
        )
    return format_text_report(
        records=records,
        scan_info=scan_info,
        errors=scan.errors,
        fixes=fixes,
        verbose=options.verbose,
        min_impact=options.min_impact,
        color=False,
    )


def _display_results(
    records: Sequence[EvaluationRecord],
    scan: ScanResult,
    console: Console,
    options: ExecutionOptions,
) -> None:
    by_component: Dict[str, List[EvaluationRecord]] = {}
    for record in filter_records(records, options.min_impact):
        if not options.verbose and (record.evaluation == PracticeEvaluationResult.PRACTICING or not record.is_on):
            continue
        by_component.setdefault(record.component.path, []).append(record)

    console.subheader("Results")
    if not by_component:
        console.dim("No findings for selected criteria.")
    for path, component_records in by_component.items():
        console.component_label(path, component_records[0].component.language.value, len(component_records))
        for record in component_records:
            console.record_result(record, show_details=options.verbose)

    for evaluation in scan.errors:
        console.error(f"{evaluation.component.path}: {evaluation.error}")

    if options.verbosity >= VERBOSITY_DEBUG:
        for evaluation in scan.components:
            console.dim(
                f"{evaluation.component.path}: {len(evaluation.records)} records, "
                f"{len(evaluation.skipped)} skipped, {evaluation.execution_time_ms:.1f}ms"
            )


def _apply_fixes(
    scan: ScanResult,
    catalog: PracticeCatalog,
    store: OverrideStore,
    options: ExecutionOptions,
    fs: FileSystem,
    root: Path,
) -> List[FixOutcome]:
    """Fix every component's own records, before report deduplication."""
    invoker = FixerInvoker(
        catalog,
        file_system=fs,
        override_store=store,
        min_impact=options.fix_impact,
        scan_root=root,
    )
    return invoker.fix(scan.records)


def _scan(
    target: ScanTarget,
    args: argparse.Namespace,
    catalog: PracticeCatalog,
    options: ExecutionOptions,
    console: Console,
) -> int:
    logger = logging.getLogger(__name__)
    fs = get_container().fs

    config_path = Path(args.config).expanduser() if args.config else None
    try:
        config = load_config(path=config_path, root=target.root)
    except ConfigError as exc:
        console.error(f"Invalid configuration: {exc}")
        logger.error("Invalid configuration: %s", exc)
        return 3

    components = detect_components(target.root, fs, repository_path=target.repository_path)
    if options.verbosity >= VERBOSITY_NORMAL:
        console.subheader("Scan")
        console.info("Target", target.repository_path)
        console.info("Components", str(len(components)))
        console.info("Practices", str(len(catalog)))
        console.info("Scan Time", datetime.now().strftime("%Y-%m-%d %H:%M:%S"))

    pipeline_config = PipelineConfig(
        practice_timeout=args.timeout if args.timeout is not None else config.execution.practice_timeout,
        parallel=args.parallel or config.execution.parallel,
        max_workers=config.execution.max_workers,
    )
    store = ConfigOverrideStore(config, target.root)
    pipeline = EvaluationPipeline(
        catalog,
        override_store=store,
        config=pipeline_config,
        file_system=fs,
        scan_root=target.root,
    )
    scan = pipeline.run(components)
    records = scan.reportable_records()
    logger.info(
        "Evaluated %d components into %d records in %.2fs",
        len(components),
        len(records),
        scan.total_elapsed,
    )

    fixes: List[FixOutcome] = []
    if options.fix:
        fixes = _apply_fixes(scan, catalog, store, options, fs, target.root)

    if options.verbosity >= VERBOSITY_NORMAL:
        _display_results(records, scan, console, options)
        if fixes:
            console.subheader("Fixes")
            console.fix_results(fixes)

    stats = collect_summary(filter_records(records, options.min_impact))
    stats["errors"] = len(scan.errors)
    if options.verbosity > VERBOSITY_QUIET:
        console.summary_box(stats)
        console.impact_breakdown(stats)
        console.blank()

    scan_info = {
        "target": target.repository_path,
        "components": str(len(components)),
        "practices": str(len(catalog)),
    }
    output_path = Path(args.output).expanduser() if args.output else None
    if output_path or args.format in ("json", "html"):
        report = _render_report(
            scan=scan,
            records=records,
            fixes=fixes,
            scan_info=scan_info,
            options=options,
            output_format=args.format,
        )
        if output_path:
            try:
                write_report(output_path, report)
            except OSError as exc:
                console.error(f"Failed to save report: {exc}")
                return 3
            if options.verbosity > VERBOSITY_QUIET:
                console.success(f"Report saved to {output_path}")
        else:
            print(report)

    exit_code = _determine_exit_code(stats)
    if options.verbosity > VERBOSITY_QUIET:
        if exit_code == 3:
            console.error(f"Scan completed with {stats['errors']} component errors")
        elif exit_code == 2:
            console.warning(f"Scan completed with {stats['notPracticing']} practices not followed")
        elif exit_code == 1:
            console.dim("Scan completed with unknown results (review recommended)")
        else:
            console.success(f"All practices followed ({scan.total_elapsed:.1f}s)")
    return exit_code


def main(argv: Sequence[str] | None = None) -> int:
    args = parse_args(sys.argv[1:] if argv is None else argv)
    configure_logging(level=logging.DEBUG if args.debug else logging.INFO)
    logger = logging.getLogger(__name__)

    options = ExecutionOptions(
        verbosity=_verbosity(args),
        min_impact=PracticeImpact(args.min_impact) if args.min_impact else None,
        fix=args.fix,
        fix_impact=PracticeImpact(args.fix_impact) if args.fix_impact else None,
        categories=_parse_categories(args.categories),
    )
    console = Console()
    if options.verbosity > VERBOSITY_QUIET:
        console.banner()

    try:
        load_practices()
    except ImportError as exc:
        console.error(f"Failed to load practices: {exc}")
        logger.exception("Failed to load practices")
        return 3
    catalog = _build_catalog(options.categories)
    if options.categories and not catalog:
        console.error(f"No practices in categories: {', '.join(options.categories)}")
        return 3

    if args.dry_run:
        return _print_dry_run(catalog, console)

    try:
        target = resolve_scan_target(args.target)
    except ScanTargetError as exc:
        console.error(str(exc))
        logger.error("%s", exc)
        return 3

    try:
        return _scan(target, args, catalog, options, console)
    finally:
        target.cleanup()


def _determine_exit_code(stats: Dict[str, int]) -> int:
    """Determine appropriate exit code for CI/CD integration.

    Exit codes:
        0 = All evaluated practices are practiced
        1 = Some results are unknown
        2 = Practices not followed
        3 = Errors during execution
    """
    if stats.get("errors", 0) > 0:
        return 3
    if stats.get("notPracticing", 0) > 0:
        return 2
    if stats.get("unknown", 0) > 0:
        return 1
    return 0
