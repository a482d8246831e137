"""
Peaks & Hills Classifier

Tiers claims by support ratio and measures how much structure the graph
carries:

    peak   support_ratio >  peak_threshold  (0.5)
    hill   support_ratio >  hill_threshold  (0.25) and <= peak_threshold
    floor  everything else

    signal = 0.4 * edge + 0.3 * support + 0.3 * coverage
      edge     = clamp01(edges / max(3, 0.15 * claims))
      support  = clamp01(var(support_count / max_count) * 5)
      coverage = unique sources / model_count
"""

from __future__ import annotations

from typing import List, Sequence, Set, Tuple

import numpy as np

from claimgraph.config.settings import AnalysisSettings, DEFAULT_SETTINGS
from claimgraph.core.graph_builder import ClaimGraph
from claimgraph.core.models import EdgeKind
from .models import EnrichedClaim, PeakAnalysis, PeakPairRelation, PeakRelationship
from .stats import clamp01

EDGE_WEIGHT = 0.4
SUPPORT_WEIGHT = 0.3
COVERAGE_WEIGHT = 0.3


def signal_components(graph: ClaimGraph) -> Tuple[float, float, float]:
    """(edge, support, coverage) sub-signals; all zero without claims."""
    n = len(graph)
    if n == 0:
        return 0.0, 0.0, 0.0

    edge = clamp01(len(graph.edges) / max(3.0, n * 0.15))

    counts = np.array([c.support_count for c in graph.claims], dtype=float)
    top = max(float(counts.max()), 1.0)
    support = clamp01(float(np.var(counts / top)) * 5)

    coverage = (
        clamp01(len(graph.unique_sources) / graph.model_count) if graph.model_count > 0 else 0.0
    )
    return edge, support, coverage


def signal_strength(graph: ClaimGraph) -> float:
    edge, support, coverage = signal_components(graph)
    return EDGE_WEIGHT * edge + SUPPORT_WEIGHT * support + COVERAGE_WEIGHT * coverage


class PeakClassifier:
    """Partitions claims into peak / hill / floor tiers."""

    def __init__(self, settings: AnalysisSettings = DEFAULT_SETTINGS) -> None:
        self.settings = settings

    def tier(self, ratio: float) -> str:
        if ratio > self.settings.peak_threshold:
            return "peak"
        if ratio > self.settings.hill_threshold:
            return "hill"
        return "floor"

    def classify(self, graph: ClaimGraph, claims: Sequence[EnrichedClaim]) -> PeakAnalysis:
        tiers = {"peak": [], "hill": [], "floor": []}
        for c in claims:
            tiers[self.tier(c.support_ratio)].append(c.id)

        pairs = self._pair_relations(graph, tiers["peak"])
        return PeakAnalysis(
            peaks=tuple(tiers["peak"]),
            hills=tuple(tiers["hill"]),
            floor=tuple(tiers["floor"]),
            relationship=self._summarize(pairs),
            pair_relations=tuple(pairs),
            signal_strength=signal_strength(graph),
        )

    @staticmethod
    def _pair_relations(graph: ClaimGraph, peaks: List[str]) -> List[PeakPairRelation]:
        peak_set: Set[str] = set(peaks)
        kinds = {}
        for e in graph.edges:
            if e.is_self_loop or e.source not in peak_set or e.target not in peak_set:
                continue
            key = frozenset((e.source, e.target))
            kinds.setdefault(key, set()).add(e.kind)

        relations: List[PeakPairRelation] = []
        for i, a in enumerate(peaks):
            for b in peaks[i + 1:]:
                found = kinds.get(frozenset((a, b)), set())
                relations.append(PeakPairRelation(
                    a_id=a,
                    b_id=b,
                    conflicts=EdgeKind.CONFLICTS in found,
                    tradeoff=EdgeKind.TRADEOFF in found,
                    supports=EdgeKind.SUPPORTS in found or EdgeKind.PREREQUISITE in found,
                ))
        return relations

    @staticmethod
    def _summarize(pairs: Sequence[PeakPairRelation]) -> PeakRelationship:
        if any(p.conflicts for p in pairs):
            return PeakRelationship.CONFLICTING
        if any(p.tradeoff for p in pairs):
            return PeakRelationship.TRADEOFF
        if any(p.supports for p in pairs):
            return PeakRelationship.SUPPORTING
        return PeakRelationship.UNCONNECTED
