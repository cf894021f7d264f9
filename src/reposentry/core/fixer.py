"""Fix invocation for evaluated practices.

Fixes are best effort: each one runs independently, a failing fix becomes a
warning on its own outcome, and nothing is rolled back.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Collection, Iterable, List, Optional

from ..config import StaticOverrideStore
from ..practices.base import PracticeCatalog, PracticeContext
from ..practices.types import EvaluationRecord, PracticeImpact
from .injection import get_container
from .interfaces import FileSystem, OverrideStore

logger = logging.getLogger(__name__)


class FixStatus(str, Enum):
    SUCCESS = "success"
    WARNING = "warning"


@dataclass(frozen=True)
class FixOutcome:
    """Result of one attempted fix."""

    practice_id: str
    component_id: str
    status: FixStatus
    message: Optional[str] = None

    @property
    def succeeded(self) -> bool:
        return self.status == FixStatus.SUCCESS

    def to_dict(self) -> dict:
        return {
            "practice_id": self.practice_id,
            "component": self.component_id,
            "status": self.status.value,
            "message": self.message,
        }


class FixerInvoker:
    """Invokes practice fixes for evaluation records produced in the same run."""

    def __init__(
        self,
        catalog: PracticeCatalog,
        file_system: Optional[FileSystem] = None,
        override_store: Optional[OverrideStore] = None,
        min_impact: Optional[PracticeImpact] = None,
        practice_ids: Optional[Collection[str]] = None,
        scan_root: Optional[Path] = None,
    ) -> None:
        self.catalog = catalog
        self.scan_root = scan_root
        self.fs = file_system or get_container().fs
        self.override_store = override_store or StaticOverrideStore()
        self.min_impact = min_impact
        self.practice_ids = set(practice_ids) if practice_ids is not None else None

    def is_eligible(self, record: EvaluationRecord) -> bool:
        if not record.is_on:
            return False
        practice = self.catalog.get(record.practice_id)
        if practice is None or not practice.can_fix:
            return False
        if self.practice_ids is not None and record.practice_id not in self.practice_ids:
            return False
        if self.min_impact is not None and record.impact.rank < self.min_impact.rank:
            return False
        return True

    def fix(self, records: Iterable[EvaluationRecord]) -> List[FixOutcome]:
        """Invoke ``fix`` for each eligible record, in record order."""
        outcomes: List[FixOutcome] = []
        for record in records:
            if not self.is_eligible(record):
                continue
            outcomes.append(self._fix_one(record))
        return outcomes

    def _fix_one(self, record: EvaluationRecord) -> FixOutcome:
        practice = self.catalog.get(record.practice_id)
        component = record.component
        ctx = PracticeContext(
            component=component,
            fs=self.fs,
            override=self.override_store.get_override(record.practice_id, component.id),
            scan_root=self.scan_root,
        )
        try:
            practice.fix(ctx)
        except Exception as exc:  # noqa: BLE001 - plugin boundary
            logger.warning(
                "Fix for %s on %s failed: %s: %s",
                record.practice_id,
                component.id,
                type(exc).__name__,
                exc,
            )
            return FixOutcome(
                practice_id=record.practice_id,
                component_id=component.id,
                status=FixStatus.WARNING,
                message=str(exc) or type(exc).__name__,
            )
        logger.info("Applied fix for %s on %s", record.practice_id, component.id)
        return FixOutcome(
            practice_id=record.practice_id,
            component_id=component.id,
            status=FixStatus.SUCCESS,
        )
