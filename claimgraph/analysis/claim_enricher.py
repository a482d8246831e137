"""
Claim Enricher

Per-claim structural scores and population-relative boolean flags.

Scores:
    support_ratio      support_count / model_count (0 without sources)
    leverage           structural + reach + connectivity + role weight
    keystone_score     leverage scaled by inverse support ratio
    evidence_gap_score downstream dependents per supporting source
    support_skew       share of mentions from the single largest source

Flags are percentile-derived over the current population, so they must be
recomputed whenever the claim set changes.
"""

from __future__ import annotations

import logging
from collections import deque
from typing import Dict, List, Set

from claimgraph.config.settings import AnalysisSettings, DEFAULT_SETTINGS
from claimgraph.core.graph_builder import ClaimGraph
from claimgraph.core.models import ClaimCategory, ClaimData, ClaimRole, EdgeKind
from .models import EnrichedClaim, GraphAnalysis, LeverageFactors
from .stats import PercentileRanker, support_ratio
from .topology_analyzer import prerequisite_depths

ROLE_WEIGHTS: Dict[str, float] = {
    ClaimRole.CHALLENGER.value: 1.0,
    ClaimRole.ANCHOR.value: 0.5,
    ClaimRole.BRANCH.value: 0.25,
    ClaimRole.SUPPLEMENT.value: 0.0,
}


def downstream_distances(graph: ClaimGraph, index: int) -> Dict[int, int]:
    """BFS distances to every claim reachable via outgoing supports/prerequisite edges."""
    dist: Dict[int, int] = {}
    queue = deque([(index, 0)])
    seen = {index}
    while queue:
        node, d = queue.popleft()
        for nxt in graph.supportive_successors(node):
            if nxt in seen:
                continue
            seen.add(nxt)
            dist[nxt] = d + 1
            queue.append((nxt, d + 1))
    return dist


def support_skew(claim: ClaimData) -> float:
    counts = [n for _, n in claim.mentions]
    total = sum(counts)
    return max(counts) / total if total > 0 else 0.0


class ClaimEnricher:
    """Produces EnrichedClaim records for every claim of a ClaimGraph."""

    def __init__(self, settings: AnalysisSettings = DEFAULT_SETTINGS) -> None:
        self.settings = settings
        self._logger = logging.getLogger(__name__)

    def enrich(self, graph: ClaimGraph, topology: GraphAnalysis) -> List[EnrichedClaim]:
        n = len(graph)
        if n == 0:
            return []

        s = self.settings
        mc = graph.model_count
        ratios = [support_ratio(c, mc) for c in graph.claims]
        depths = prerequisite_depths(graph)
        reach = [downstream_distances(graph, i) for i in range(n)]
        factors = [self._leverage_factors(graph, i, reach[i]) for i in range(n)]
        leverage = [f.total for f in factors]
        floor_ratio = 1.0 / max(mc, 1)
        keystone = [leverage[i] / max(ratios[i], floor_ratio) for i in range(n)]
        gaps = [len(reach[i]) / max(graph.claims[i].support_count, 1) for i in range(n)]
        skews = [support_skew(c) for c in graph.claims]

        ratio_rank = PercentileRanker(ratios)
        leverage_rank = PercentileRanker(leverage)
        keystone_rank = PercentileRanker(keystone)
        gap_rank = PercentileRanker(gaps)
        skew_rank = PercentileRanker(skews)

        high = [ratio_rank.is_top(r, s.high_support_pct) for r in ratios]
        high_idx: Set[int] = {i for i in range(n) if high[i]}
        chain_root = topology.longest_chain[0] if topology.longest_chain else None

        enriched: List[EnrichedClaim] = []
        for i, claim in enumerate(graph.claims):
            conflict_nbrs = self._conflict_neighbors(graph, i)
            prereq_targets = set(graph.out_neighbors(i, EdgeKind.PREREQUISITE)) - {i}
            low = ratio_rank.is_bottom(ratios[i], s.low_support_pct) and not high[i]
            attacks_high = bool(conflict_nbrs & high_idx) or bool(prereq_targets & high_idx)
            dependents = tuple(graph.claims[j].id for j in sorted(reach[i]))

            enriched.append(EnrichedClaim(
                id=claim.id,
                label=claim.label,
                text=claim.text,
                supporters=claim.supporters,
                support_count=claim.support_count,
                category=claim.category,
                role=claim.role,
                challenges=claim.challenges,
                support_ratio=ratios[i],
                leverage=leverage[i],
                leverage_factors=factors[i],
                keystone_score=keystone[i],
                evidence_gap_score=gaps[i],
                support_skew=skews[i],
                in_degree=graph.in_degree(i),
                out_degree=graph.out_degree(i),
                dependents=dependents,
                chain_depth=depths[i],
                is_high_support=high[i],
                is_leverage_inversion=low and leverage_rank.is_top(leverage[i], s.leverage_pct),
                is_keystone=keystone_rank.is_top(keystone[i], s.keystone_pct) and bool(dependents),
                is_evidence_gap=gap_rank.is_top(gaps[i], s.evidence_gap_pct) and gaps[i] > 0,
                is_outlier=(
                    len(claim.supporters) >= 2
                    and skews[i] > 1.0 / len(claim.supporters)
                    and skew_rank.is_top(skews[i], s.outlier_pct)
                ),
                is_contested=bool(conflict_nbrs & high_idx),
                is_conditional=claim.category == ClaimCategory.CONDITIONAL.value,
                is_challenger=(
                    claim.role == ClaimRole.CHALLENGER.value
                    and not high[i]
                    and attacks_high
                ),
                is_isolated=graph.degree(i) == 0,
                is_chain_root=claim.id == chain_root,
            ))

        if s.debug:
            for c in enriched:
                self._logger.debug(
                    "Claim %s: ratio=%.2f leverage=%.2f keystone=%.2f gap=%.2f",
                    c.id, c.support_ratio, c.leverage, c.keystone_score, c.evidence_gap_score,
                )
        self._logger.info(
            "Enriched %d claims: %d high support, %d leverage inversions, %d keystones",
            n, len(high_idx),
            sum(1 for c in enriched if c.is_leverage_inversion),
            sum(1 for c in enriched if c.is_keystone),
        )
        return enriched

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    @staticmethod
    def _conflict_neighbors(graph: ClaimGraph, index: int) -> Set[int]:
        nbrs = set(graph.out_neighbors(index, EdgeKind.CONFLICTS))
        nbrs.update(graph.in_neighbors(index, EdgeKind.CONFLICTS))
        nbrs.discard(index)
        return nbrs

    @staticmethod
    def _leverage_factors(graph: ClaimGraph, index: int, distances: Dict[int, int]) -> LeverageFactors:
        claim = graph.claims[index]
        return LeverageFactors(
            structural=float(len(graph.supportive_successors(index))),
            reach=sum(1.0 / d for d in distances.values()),
            connectivity=0.25 * graph.degree(index) + 1.5 * graph.degree(index, EdgeKind.CONFLICTS),
            role=ROLE_WEIGHTS.get(claim.role, 0.0),
        )
