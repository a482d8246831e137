"""
Pattern Detector

Scans enriched claims and edges for structural anomalies:

    Leverage inversions  low-support claims carrying high structural leverage
    Cascade risks        claims whose removal would strand many dependents
    Conflicts            conflicts edges, with consensus and dynamics tags
    Conflict clusters    one claim contested from several sides
    Tradeoffs            tradeoff edges with symmetry and dominance
    Convergence points   several claims feeding one target the same way
    Isolated claims      claims without any edge
    Ghosts               externally supplied gaps, passed through

Usage:
    bundle = PatternDetector(settings).detect(graph, enriched_claims)
"""

from __future__ import annotations

import logging
from typing import Dict, List, Optional, Sequence, Set, Tuple

from claimgraph.config.settings import AnalysisSettings, DEFAULT_SETTINGS
from claimgraph.core.graph_builder import ClaimGraph
from claimgraph.core.models import ClaimRole, EdgeKind
from .models import (
    CascadeRisk,
    ConflictCluster,
    ConflictPair,
    ConvergencePoint,
    EnrichedClaim,
    GhostAnalysis,
    InversionReason,
    LeverageInversion,
    PatternBundle,
    TradeoffPair,
    TradeoffSymmetry,
)
from .topology_analyzer import longest_path_depths

#: Share of leverage that must come from raw connectivity for the
#: high_connectivity_low_support reason.
CONNECTIVITY_SHARE = 0.4


def _unique_pairs(graph: ClaimGraph, kind: EdgeKind) -> List[Tuple[str, str]]:
    """Endpoints of ``kind`` edges, first direction kept, self-loops and repeats skipped."""
    seen: Set[frozenset] = set()
    pairs: List[Tuple[str, str]] = []
    for e in graph.edges_of_kind(kind):
        key = frozenset((e.source, e.target))
        if e.is_self_loop or key in seen:
            continue
        seen.add(key)
        pairs.append((e.source, e.target))
    return pairs


def tension_dynamics(a: EnrichedClaim, b: EnrichedClaim, delta: float = 0.15) -> str:
    return "symmetric" if abs(a.support_ratio - b.support_ratio) < delta else "asymmetric"


def tradeoff_dominance(a: EnrichedClaim, b: EnrichedClaim) -> Optional[str]:
    """Id of the option whose supporters strictly contain the other's, if any."""
    sa, sb = set(a.supporters), set(b.supporters)
    if sb and sb < sa:
        return a.id
    if sa and sa < sb:
        return b.id
    return None


def analyze_ghosts(ghosts: Sequence[str], claims: Sequence[EnrichedClaim]) -> GhostAnalysis:
    challengers = tuple(
        c.id for c in claims if c.role == ClaimRole.CHALLENGER.value or c.is_challenger
    )
    return GhostAnalysis(
        count=len(ghosts),
        may_extend_challenger=bool(ghosts) and bool(challengers),
        challenger_ids=challengers,
    )


class PatternDetector:
    """Detects structural patterns from a ClaimGraph and its enriched claims."""

    def __init__(self, settings: AnalysisSettings = DEFAULT_SETTINGS) -> None:
        self.settings = settings
        self._logger = logging.getLogger(__name__)

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def detect(
        self,
        graph: ClaimGraph,
        claims: Sequence[EnrichedClaim],
        include_cascades: bool = True,
        include_convergence: bool = True,
    ) -> PatternBundle:
        """
        Detect all patterns.

        ``include_cascades`` and ``include_convergence`` may be switched off
        by callers that only need the shape classification.
        """
        by_id = {c.id: c for c in claims}
        conflicts = self.conflicts(graph, by_id)
        bundle = PatternBundle(
            leverage_inversions=tuple(self._leverage_inversions(graph, claims)),
            cascade_risks=tuple(self._cascade_risks(graph, by_id)) if include_cascades else (),
            conflicts=tuple(conflicts),
            conflict_clusters=tuple(self._conflict_clusters(conflicts, by_id)),
            tradeoffs=tuple(self.tradeoffs(graph, by_id)),
            convergence_points=(
                tuple(self._convergence_points(graph, by_id)) if include_convergence else ()
            ),
            isolated_claims=tuple(c.id for c in claims if c.is_isolated),
            ghosts=graph.ghosts,
        )
        self._logger.info(
            "Patterns: %d inversions, %d cascades, %d conflicts, %d tradeoffs, %d convergence points",
            len(bundle.leverage_inversions), len(bundle.cascade_risks), len(bundle.conflicts),
            len(bundle.tradeoffs), len(bundle.convergence_points),
        )
        return bundle

    def conflicts(self, graph: ClaimGraph, by_id: Dict[str, EnrichedClaim]) -> List[ConflictPair]:
        out: List[ConflictPair] = []
        for a_id, b_id in _unique_pairs(graph, EdgeKind.CONFLICTS):
            a, b = by_id[a_id], by_id[b_id]
            out.append(ConflictPair(
                claim_a=a.ref(),
                claim_b=b.ref(),
                is_both_consensus=a.is_high_support and b.is_high_support,
                dynamics=tension_dynamics(a, b, self.settings.symmetric_conflict_delta),
            ))
        return out

    def tradeoffs(self, graph: ClaimGraph, by_id: Dict[str, EnrichedClaim]) -> List[TradeoffPair]:
        out: List[TradeoffPair] = []
        for a_id, b_id in _unique_pairs(graph, EdgeKind.TRADEOFF):
            a, b = by_id[a_id], by_id[b_id]
            if a.is_high_support and b.is_high_support:
                symmetry = TradeoffSymmetry.BOTH_HIGH
            elif not a.is_high_support and not b.is_high_support:
                symmetry = TradeoffSymmetry.BOTH_LOW
            else:
                symmetry = TradeoffSymmetry.ASYMMETRIC
            out.append(TradeoffPair(
                claim_a=a.ref(),
                claim_b=b.ref(),
                symmetry=symmetry,
                dominance=tradeoff_dominance(a, b),
            ))
        return out

    # ------------------------------------------------------------------
    # Internal detectors
    # ------------------------------------------------------------------

    def _leverage_inversions(
        self, graph: ClaimGraph, claims: Sequence[EnrichedClaim]
    ) -> List[LeverageInversion]:
        high = {c.id for c in claims if c.is_high_support}
        out: List[LeverageInversion] = []
        for c in claims:
            if not c.is_leverage_inversion:
                continue
            idx = graph.index_of[c.id]
            prereq_to = [
                graph.claims[t].id for t in graph.out_neighbors(idx, EdgeKind.PREREQUISITE)
                if t != idx
            ]
            high_targets = [t for t in prereq_to if t in high]

            if c.role == ClaimRole.CHALLENGER.value and high_targets:
                reason, affected = InversionReason.CHALLENGER_PREREQUISITE, high_targets
            elif prereq_to:
                reason, affected = InversionReason.SINGULAR_FOUNDATION, prereq_to
            elif c.leverage_factors.connectivity > c.leverage * CONNECTIVITY_SHARE:
                reason, affected = InversionReason.HIGH_CONNECTIVITY, []
            else:
                continue

            out.append(LeverageInversion(
                claim_id=c.id,
                claim_label=c.label,
                supporter_count=len(c.supporters),
                reason=reason,
                affected_claims=tuple(dict.fromkeys(affected)),
            ))
        return out

    def _cascade_risks(self, graph: ClaimGraph, by_id: Dict[str, EnrichedClaim]) -> List[CascadeRisk]:
        s = self.settings
        depths = longest_path_depths(len(graph), graph.supportive_successors)
        out: List[CascadeRisk] = []
        for i, claim in enumerate(graph.claims):
            dependents = by_id[claim.id].dependents
            if not dependents:
                continue
            if len(dependents) < s.cascade_min_fanout and depths[i] < s.cascade_min_depth:
                continue
            out.append(CascadeRisk(
                source_id=claim.id,
                source_label=claim.label,
                dependent_ids=dependents,
                dependent_labels=tuple(by_id[d].label for d in dependents),
                depth=depths[i],
            ))
        return out

    @staticmethod
    def _conflict_clusters(
        conflicts: Sequence[ConflictPair], by_id: Dict[str, EnrichedClaim]
    ) -> List[ConflictCluster]:
        opponents: Dict[str, List[str]] = {}
        for pair in conflicts:
            opponents.setdefault(pair.claim_a.id, []).append(pair.claim_b.id)
            opponents.setdefault(pair.claim_b.id, []).append(pair.claim_a.id)

        clusters: List[ConflictCluster] = []
        for target_id, others in opponents.items():
            if len(others) < 2:
                continue
            target = by_id[target_id]
            attacked = any(by_id[o].role == ClaimRole.CHALLENGER.value for o in others)
            if not (attacked or target.is_high_support):
                continue
            clusters.append(ConflictCluster(
                id=f"cluster_{target_id}",
                target_id=target_id,
                challenger_ids=tuple(others),
                axis=f"Contestation of {target.label}",
            ))
        return clusters

    @staticmethod
    def _convergence_points(
        graph: ClaimGraph, by_id: Dict[str, EnrichedClaim]
    ) -> List[ConvergencePoint]:
        groups: Dict[Tuple[str, EdgeKind], List[str]] = {}
        for e in graph.edges_of_kind(EdgeKind.SUPPORTS, EdgeKind.PREREQUISITE):
            if e.is_self_loop:
                continue
            sources = groups.setdefault((e.target, e.kind), [])
            if e.source not in sources:
                sources.append(e.source)

        points: List[ConvergencePoint] = []
        for (target_id, kind), sources in groups.items():
            if len(sources) < 2:
                continue
            supporter_sets = [set(by_id[s].supporters) for s in sources]
            independent = any(
                a and b and not (a & b)
                for i, a in enumerate(supporter_sets)
                for b in supporter_sets[i + 1:]
            )
            points.append(ConvergencePoint(
                target_id=target_id,
                target_label=by_id[target_id].label,
                source_ids=tuple(sources),
                source_labels=tuple(by_id[s].label for s in sources),
                edge_kind=kind.value,
                independent=independent,
            ))
        return points
