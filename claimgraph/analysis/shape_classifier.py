"""
Shape Classifier

Assigns exactly one primary shape and attaches independently detected
secondary patterns, evidence strings, the primary's payload and a
transfer question.

Primary decision (first match wins):
    sparse       no claims, no contenders, or weak signal
    constrained  tradeoffs among contenders, at least as many as conflicts
    forked       conflicts among contenders
    convergent   supportive edges among contenders, or a single contender
    parallel     contenders spread over separate components
    convergent   otherwise

Contenders are the peaks, extended by hills when there are fewer than two
peaks.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Dict, List, Sequence, Tuple

from claimgraph.config.settings import AnalysisSettings, DEFAULT_SETTINGS
from claimgraph.core.graph_builder import ClaimGraph
from claimgraph.core.models import EdgeKind
from .models import (
    EnrichedClaim,
    GraphAnalysis,
    PatternBundle,
    PeakAnalysis,
    PrimaryShape,
    ProblemStructure,
)
from .secondary_patterns import SecondaryPatternDetector
from .shape_builders import ShapeContext, build_shape_data, transfer_question
from .stats import clamp01


@dataclass(frozen=True)
class ContenderEdges:
    """Edge counts restricted to pairs of contenders."""
    conflicts: int = 0
    tradeoffs: int = 0
    supportive: int = 0

    @property
    def total(self) -> int:
        return self.conflicts + self.tradeoffs + self.supportive


def contenders_of(peaks: PeakAnalysis) -> List[str]:
    if len(peaks.peaks) >= 2:
        return list(peaks.peaks)
    return list(peaks.peaks) + list(peaks.hills)


def count_contender_edges(graph: ClaimGraph, contenders: Sequence[str]) -> ContenderEdges:
    members = set(contenders)
    counts = {EdgeKind.CONFLICTS: 0, EdgeKind.TRADEOFF: 0, EdgeKind.SUPPORTS: 0}
    for e in graph.edges:
        if e.is_self_loop or e.source not in members or e.target not in members:
            continue
        key = EdgeKind.SUPPORTS if e.kind.is_supportive else e.kind
        counts[key] += 1
    return ContenderEdges(
        conflicts=counts[EdgeKind.CONFLICTS],
        tradeoffs=counts[EdgeKind.TRADEOFF],
        supportive=counts[EdgeKind.SUPPORTS],
    )


class ShapeClassifier:
    """Produces the ProblemStructure for one analysis run."""

    def __init__(self, settings: AnalysisSettings = DEFAULT_SETTINGS) -> None:
        self.settings = settings
        self._secondary = SecondaryPatternDetector(settings)
        self._logger = logging.getLogger(__name__)

    def classify(
        self,
        graph: ClaimGraph,
        claims: Sequence[EnrichedClaim],
        topology: GraphAnalysis,
        bundle: PatternBundle,
        peaks: PeakAnalysis,
    ) -> ProblemStructure:
        signal = peaks.signal_strength
        contenders = contenders_of(peaks)
        edges = count_contender_edges(graph, contenders)
        spread = self._components_spanned(topology, contenders)

        primary, checks = self._primary(len(graph), contenders, edges, spread, signal)
        agreement = sum(checks) / len(checks) if checks else 0.0
        confidence = max(self.settings.min_confidence, clamp01(signal * (0.5 + 0.5 * agreement)))

        patterns = self._secondary.detect(graph, claims, peaks, topology)
        ctx = ShapeContext(graph, claims, topology, bundle, contenders, signal, patterns)
        data = build_shape_data(primary, ctx)

        structure = ProblemStructure(
            primary=primary,
            confidence=confidence,
            signal_strength=signal,
            patterns=tuple(patterns),
            evidence=tuple(self._evidence(graph, claims, topology, peaks, primary, edges, spread, signal)),
            data=data,
            transfer_question=transfer_question(primary, data),
            peaks=peaks.peaks,
            peak_relationship=peaks.relationship,
        )
        self._logger.info(
            "Shape: %s (confidence %.2f, signal %.2f), %d secondary patterns",
            primary.value, confidence, signal, len(patterns),
        )
        return structure

    # ------------------------------------------------------------------
    # Primary decision
    # ------------------------------------------------------------------

    def _primary(
        self,
        claim_count: int,
        contenders: Sequence[str],
        edges: ContenderEdges,
        spread: int,
        signal: float,
    ) -> Tuple[PrimaryShape, List[bool]]:
        """Primary shape plus the contributing signals used for agreement."""
        many = len(contenders) >= 2
        if claim_count == 0 or not contenders or signal < self.settings.sparse_signal_floor:
            return PrimaryShape.SPARSE, [
                claim_count == 0 or signal < self.settings.sparse_signal_floor,
                not many,
                edges.total == 0,
            ]
        if edges.tradeoffs > 0 and edges.tradeoffs >= edges.conflicts:
            return PrimaryShape.CONSTRAINED, [
                True,
                many,
                edges.conflicts == 0,
                edges.tradeoffs * 2 >= edges.total,
            ]
        if edges.conflicts > 0:
            return PrimaryShape.FORKED, [
                True,
                many,
                edges.tradeoffs == 0,
                edges.conflicts * 2 >= edges.total,
            ]
        if edges.supportive > 0 or len(contenders) == 1:
            return PrimaryShape.CONVERGENT, [
                True,
                edges.supportive > 0,
                spread <= 1,
            ]
        if spread >= 2:
            return PrimaryShape.PARALLEL, [
                True,
                many,
                edges.total == 0,
            ]
        return PrimaryShape.CONVERGENT, [many, spread <= 1, False]

    @staticmethod
    def _components_spanned(topology: GraphAnalysis, contenders: Sequence[str]) -> int:
        members = set(contenders)
        return sum(1 for comp in topology.components if members.intersection(comp))

    # ------------------------------------------------------------------
    # Evidence
    # ------------------------------------------------------------------

    def _evidence(
        self,
        graph: ClaimGraph,
        claims: Sequence[EnrichedClaim],
        topology: GraphAnalysis,
        peaks: PeakAnalysis,
        primary: PrimaryShape,
        edges: ContenderEdges,
        spread: int,
        signal: float,
    ) -> List[str]:
        n = len(graph)
        lines: List[str] = []
        if n == 0:
            lines.append("No claims were supplied")
        else:
            lines.append(
                f"{len(peaks.peaks)} peak(s), {len(peaks.hills)} hill(s) and "
                f"{len(peaks.floor)} floor claim(s) across {n} claims"
            )

        if primary == PrimaryShape.SPARSE and n > 0:
            if len(graph.edges) < n:
                lines.append(
                    f"Only {len(graph.edges)} relationships mapped against {n} claims, "
                    "insufficient signal"
                )
            if not peaks.peaks and not peaks.hills:
                lines.append("No claim reaches a quarter of the sources")
        elif primary == PrimaryShape.CONSTRAINED:
            lines.append(f"{edges.tradeoffs} tradeoff relationship(s) among the leading claims")
        elif primary == PrimaryShape.FORKED:
            lines.append(f"{edges.conflicts} direct conflict(s) among the leading claims")
        elif primary == PrimaryShape.CONVERGENT:
            if edges.supportive:
                lines.append(f"{edges.supportive} supporting relationship(s) among the leading claims")
            else:
                lines.append("A single position leads without direct opposition")
        elif primary == PrimaryShape.PARALLEL:
            lines.append(f"Leading claims sit in {spread} independent components")

        by_id: Dict[str, EnrichedClaim] = {c.id: c for c in claims}
        floor = set(peaks.floor)
        for cid in topology.articulation_points:
            if cid in floor:
                lines.append(f"{by_id[cid].label} holds the structure together on thin support")

        lines.append(f"Signal strength: {round(signal * 100)}%")
        return lines
