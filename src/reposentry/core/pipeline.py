"""Practice evaluation pipeline.

For each project component the pipeline:

1. Selects the applicable practices and sets the switched-off ones aside
2. Orders the rest so dependencies are evaluated first
3. Walks that order, skipping practices whose dependencies did not produce
   the required result
4. Evaluates the rest one at a time, mapping any failure to ``unknown``
5. Appends an ``unknown`` off record for every switched-off practice

No single practice failure can abort a component, and a dependency cycle
only aborts the component it was found in.

Usage:
    pipeline = EvaluationPipeline(catalog, override_store=store)
    scan = pipeline.run(components)
    records = scan.reportable_records()
"""
from __future__ import annotations

import logging
import threading
import time
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from pathlib import Path
from types import MappingProxyType
from typing import Any, Callable, Dict, Iterable, List, Mapping, Optional, Tuple

from ..config import StaticOverrideStore
from ..practices.base import Practice, PracticeCatalog, PracticeContext
from ..practices.types import (
    EvaluationRecord,
    PracticeEvaluationResult,
    PracticeMetadata,
    PracticeOverride,
    ProjectComponent,
)
from .injection import get_container
from .interfaces import FileSystem, OverrideStore
from .resolver import DependencyCycleError, DependencyGraphResolver

logger = logging.getLogger(__name__)


class _EvaluationTimeout(Exception):
    """An evaluation did not finish within the practice timeout."""


def _call_with_timeout(func: Callable[[Any], Any], arg: Any, timeout: float) -> Any:
    """Call ``func(arg)`` on a daemon thread, waiting at most ``timeout`` seconds.

    An overrunning call is abandoned, not interrupted. The daemon thread
    does not hold up interpreter exit.
    """
    result: Dict[str, Any] = {}

    def target() -> None:
        try:
            result["value"] = func(arg)
        except Exception as exc:  # noqa: BLE001 - re-raised in the caller
            result["error"] = exc

    worker = threading.Thread(target=target, name="reposentry-evaluate", daemon=True)
    worker.start()
    worker.join(timeout)
    if worker.is_alive():
        raise _EvaluationTimeout()
    if "error" in result:
        raise result["error"]
    return result.get("value")


@dataclass(frozen=True)
class PracticeOutcome:
    """Tagged result of one practice invocation: a value or a fault."""

    evaluation: PracticeEvaluationResult
    execution_time_ms: float = 0.0
    error: Optional[str] = None
    error_type: Optional[str] = None
    timed_out: bool = False

    @property
    def failed(self) -> bool:
        return self.error is not None


@dataclass
class PipelineConfig:
    """Configuration for practice evaluation."""

    # Timeout for individual practice evaluations (seconds), None disables it
    practice_timeout: Optional[float] = None

    # Evaluate independent components in parallel
    parallel: bool = False

    # Maximum parallel workers
    max_workers: int = 4


@dataclass
class ComponentEvaluation:
    """Records produced for one component, or the fault that prevented them."""

    component: ProjectComponent
    records: List[EvaluationRecord] = field(default_factory=list)
    skipped: List[str] = field(default_factory=list)
    error: Optional[DependencyCycleError] = None
    execution_time_ms: float = 0.0

    @property
    def failed(self) -> bool:
        return self.error is not None


@dataclass
class ScanResult:
    """All component evaluations of a run, in component processing order."""

    components: List[ComponentEvaluation]
    total_elapsed: float = 0.0

    @property
    def records(self) -> List[EvaluationRecord]:
        return [record for evaluation in self.components for record in evaluation.records]

    @property
    def errors(self) -> List[ComponentEvaluation]:
        return [evaluation for evaluation in self.components if evaluation.failed]

    def reportable_records(self) -> List[EvaluationRecord]:
        return deduplicate_report_only_once(self.records)


def deduplicate_report_only_once(records: Iterable[EvaluationRecord]) -> List[EvaluationRecord]:
    """Keep only the first record per practice id for ``report_only_once`` practices.

    This runs over a whole run's output, after every component finished.
    """
    seen: set[str] = set()
    kept: List[EvaluationRecord] = []
    for record in records:
        if record.practice.report_only_once:
            if record.practice_id in seen:
                continue
            seen.add(record.practice_id)
        kept.append(record)
    return kept


class EvaluationPipeline:
    """Evaluates a practice catalog against project components."""

    def __init__(
        self,
        catalog: PracticeCatalog,
        override_store: Optional[OverrideStore] = None,
        config: Optional[PipelineConfig] = None,
        resolver: Optional[DependencyGraphResolver] = None,
        file_system: Optional[FileSystem] = None,
        scan_root: Optional[Path] = None,
    ) -> None:
        self.catalog = catalog
        self.override_store = override_store or StaticOverrideStore()
        self.config = config or PipelineConfig()
        self.scan_root = scan_root
        self.resolver = resolver or DependencyGraphResolver()
        self.fs = file_system or get_container().fs

    def run(self, components: Iterable[ProjectComponent]) -> ScanResult:
        """Evaluate every component; returns once all of them are done."""
        components = list(components)
        start = time.perf_counter()

        if self.config.parallel and len(components) > 1:
            with ThreadPoolExecutor(max_workers=self.config.max_workers) as executor:
                evaluations = list(executor.map(self.evaluate_component, components))
        else:
            evaluations = [self.evaluate_component(component) for component in components]

        return ScanResult(components=evaluations, total_elapsed=time.perf_counter() - start)

    def select_practices(self, component: ProjectComponent) -> List[Tuple[Practice, PracticeOverride]]:
        """Return applicable practices with their overrides, in catalog order."""
        selected: List[Tuple[Practice, PracticeOverride]] = []
        for practice in self.catalog:
            if self._is_applicable(practice, component):
                override = self.override_store.get_override(practice.metadata.id, component.id)
                selected.append((practice, override))
        return selected

    def evaluate_component(self, component: ProjectComponent) -> ComponentEvaluation:
        start = time.perf_counter()
        evaluation = ComponentEvaluation(component=component)
        candidates = self.select_practices(component)
        enabled = [(practice, override) for practice, override in candidates if override.enabled]
        disabled = [(practice, override) for practice, override in candidates if not override.enabled]

        try:
            ordered = self.resolver.resolve([practice.metadata for practice, _ in enabled])
        except DependencyCycleError as exc:
            logger.error("Cannot evaluate component %s: %s", component.id, exc)
            evaluation.error = exc
            return evaluation

        by_id = {practice.metadata.id: (practice, override) for practice, override in enabled}
        produced: Dict[str, EvaluationRecord] = {}

        for metadata in ordered:
            practice, override = by_id[metadata.id]

            if not self.is_fulfilled(metadata, produced):
                logger.debug("Skipping %s on %s: dependencies not fulfilled", metadata.id, component.id)
                evaluation.skipped.append(metadata.id)
                continue

            ctx = PracticeContext(
                component=component,
                fs=self.fs,
                override=override,
                scan_root=self.scan_root,
            )
            outcome = self._invoke(practice, ctx)
            record = EvaluationRecord(
                practice=metadata,
                component=component,
                evaluation=outcome.evaluation,
                is_on=True,
                override_impact=override.impact,
                details=self._record_details(outcome, ctx),
            )
            logger.debug(
                "[%s] %s on %s - %.1fms",
                outcome.evaluation.value,
                metadata.id,
                component.id,
                outcome.execution_time_ms,
            )
            produced[metadata.id] = record
            evaluation.records.append(record)

        # Switched-off practices never run and never fulfil a dependency
        for practice, override in disabled:
            evaluation.records.append(
                EvaluationRecord(
                    practice=practice.metadata,
                    component=component,
                    evaluation=PracticeEvaluationResult.UNKNOWN,
                    is_on=False,
                    override_impact=override.impact,
                )
            )

        evaluation.execution_time_ms = (time.perf_counter() - start) * 1000
        return evaluation

    @staticmethod
    def is_fulfilled(metadata: PracticeMetadata, produced: Mapping[str, EvaluationRecord]) -> bool:
        """Check a practice's dependencies against records produced so far."""
        for dep_id in metadata.depends_on.practicing:
            record = produced.get(dep_id)
            if record is None or record.evaluation != PracticeEvaluationResult.PRACTICING:
                return False
        for dep_id in metadata.depends_on.not_practicing:
            record = produced.get(dep_id)
            if record is None or record.evaluation != PracticeEvaluationResult.NOT_PRACTICING:
                return False
        return True

    @staticmethod
    def _is_applicable(practice: Practice, component: ProjectComponent) -> bool:
        try:
            return bool(practice.is_applicable(component))
        except Exception:  # noqa: BLE001 - plugin boundary
            logger.exception(
                "Applicability check of %s failed on %s; treating as not applicable",
                practice.metadata.id,
                component.id,
            )
            return False

    def _invoke(self, practice: Practice, ctx: PracticeContext) -> PracticeOutcome:
        """Run ``practice.evaluate`` and turn every failure into an outcome."""
        practice_id = practice.metadata.id
        timeout = self.config.practice_timeout
        start = time.perf_counter()

        def elapsed() -> float:
            return (time.perf_counter() - start) * 1000

        try:
            if timeout is None:
                raw = practice.evaluate(ctx)
            else:
                raw = _call_with_timeout(practice.evaluate, ctx, timeout)
        except _EvaluationTimeout:
            logger.warning("Practice %s timed out after %.1fs", practice_id, timeout)
            return PracticeOutcome(
                evaluation=PracticeEvaluationResult.UNKNOWN,
                execution_time_ms=elapsed(),
                error=f"Timed out after {timeout}s",
                error_type="TimeoutError",
                timed_out=True,
            )
        except Exception as exc:  # noqa: BLE001 - plugin boundary
            logger.exception("Practice %s failed during evaluation", practice_id)
            return PracticeOutcome(
                evaluation=PracticeEvaluationResult.UNKNOWN,
                execution_time_ms=elapsed(),
                error=str(exc) or type(exc).__name__,
                error_type=type(exc).__name__,
            )

        try:
            evaluation = PracticeEvaluationResult(raw)
        except ValueError:
            logger.error("Practice %s returned an invalid result: %r", practice_id, raw)
            return PracticeOutcome(
                evaluation=PracticeEvaluationResult.UNKNOWN,
                execution_time_ms=elapsed(),
                error=f"Invalid evaluation result: {raw!r}",
                error_type="InvalidResult",
            )
        return PracticeOutcome(evaluation=evaluation, execution_time_ms=elapsed())

    @staticmethod
    def _record_details(outcome: PracticeOutcome, ctx: PracticeContext) -> Optional[Mapping[str, Any]]:
        if outcome.failed:
            details: Dict[str, Any] = {"error": outcome.error, "exception_type": outcome.error_type}
            if outcome.timed_out:
                details["timed_out"] = True
            return MappingProxyType(details)
        if ctx.details:
            return MappingProxyType(dict(ctx.details))
        return None
