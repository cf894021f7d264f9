"""Dependency ordering for practices.

A practice may declare that other practices must have produced a given
result before it runs. The resolver turns those declarations into a linear
evaluation order where every practice comes after the practices it
references. Ties are broken by catalog registration order so repeated runs
produce the same order.
"""
from __future__ import annotations

import heapq
import logging
from typing import Dict, List, Sequence, Set, Tuple

from ..practices.types import PracticeMetadata

logger = logging.getLogger(__name__)


class DependencyCycleError(Exception):
    """Raised when practice dependency declarations form a cycle."""

    def __init__(self, members: Sequence[str]) -> None:
        self.members: Tuple[str, ...] = tuple(members)
        super().__init__("Practice dependency cycle: " + " -> ".join(self.members + self.members[:1]))


class DependencyGraphResolver:
    """Builds the practice dependency graph and resolves an evaluation order."""

    @staticmethod
    def build_graph(practices: Sequence[PracticeMetadata]) -> Dict[str, Set[str]]:
        """Map each practice id to the ids it depends on within ``practices``.

        References to ids outside the given set are dropped here; the
        pipeline treats them as permanently unsatisfied.
        """
        known = {p.id for p in practices}
        graph: Dict[str, Set[str]] = {}
        for practice in practices:
            deps = set(practice.depends_on.all_ids)
            missing = deps - known
            if missing:
                logger.debug(
                    "Practice %s references practices outside this set: %s",
                    practice.id,
                    ", ".join(sorted(missing)),
                )
            graph[practice.id] = deps & known
        return graph

    def resolve(self, practices: Sequence[PracticeMetadata]) -> List[PracticeMetadata]:
        """Return ``practices`` in dependency order.

        Args:
            practices: Practice metadata in catalog registration order

        Raises:
            DependencyCycleError: if the declarations contain a cycle
        """
        by_id = {p.id: p for p in practices}
        index = {p.id: i for i, p in enumerate(practices)}
        graph = self.build_graph(practices)

        remaining = {pid: len(deps) for pid, deps in graph.items()}
        dependents: Dict[str, List[str]] = {pid: [] for pid in graph}
        for pid, deps in graph.items():
            for dep in deps:
                dependents[dep].append(pid)

        ready = [(index[pid], pid) for pid, count in remaining.items() if count == 0]
        heapq.heapify(ready)

        ordered: List[PracticeMetadata] = []
        while ready:
            _, pid = heapq.heappop(ready)
            ordered.append(by_id[pid])
            for dependent in dependents[pid]:
                remaining[dependent] -= 1
                if remaining[dependent] == 0:
                    heapq.heappush(ready, (index[dependent], dependent))

        if len(ordered) != len(by_id):
            unresolved = {pid for pid, count in remaining.items() if count > 0}
            raise DependencyCycleError(self._find_cycle(graph, unresolved, index))
        return ordered

    @staticmethod
    def _find_cycle(
        graph: Dict[str, Set[str]],
        unresolved: Set[str],
        index: Dict[str, int],
    ) -> List[str]:
        # Every unresolved node still waits on at least one unresolved node,
        # so following those edges must revisit a node.
        node = min(unresolved, key=index.__getitem__)
        path: List[str] = []
        seen: Dict[str, int] = {}
        while node not in seen:
            seen[node] = len(path)
            path.append(node)
            node = min((d for d in graph[node] if d in unresolved), key=index.__getitem__)
        return path[seen[node]:]
