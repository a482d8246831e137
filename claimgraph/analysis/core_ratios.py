"""
Core Ratios

Five headline numbers summarizing the graph's shape, each in [0, 1]:

    concentration  most-supported claim's support over the source count
    alignment      reinforcing share of edges among the top-support claims
    tension        conflicts + tradeoff share of all edges
    fragmentation  (components - 1) / (claims - 1)
    depth          longest prerequisite chain over claim count
"""

from __future__ import annotations

from typing import Sequence

from claimgraph.core.graph_builder import ClaimGraph
from claimgraph.core.models import EdgeKind
from .models import CoreRatios, EnrichedClaim, GraphAnalysis
from .stats import clamp01, top_n_count

#: Alignment when the top-support claims share no edges.
NEUTRAL_ALIGNMENT = 0.5
TOP_SUPPORT_SHARE = 0.3


def compute_core_ratios(
    graph: ClaimGraph,
    claims: Sequence[EnrichedClaim],
    topology: GraphAnalysis,
) -> CoreRatios:
    n = len(claims)
    if n == 0:
        return CoreRatios()

    max_support = max(c.support_count for c in claims)
    concentration = max_support / graph.model_count if graph.model_count > 0 else 0.0

    ranked = sorted(claims, key=lambda c: -c.support_count)
    top_ids = {c.id for c in ranked[:top_n_count(n, TOP_SUPPORT_SHARE)]}
    among_top = [e for e in graph.edges if e.source in top_ids and e.target in top_ids]
    if among_top:
        reinforcing = sum(1 for e in among_top if e.kind.is_supportive)
        alignment = reinforcing / len(among_top)
    else:
        alignment = NEUTRAL_ALIGNMENT

    edge_count = len(graph.edges)
    tension_edges = len(graph.edges_of_kind(EdgeKind.CONFLICTS, EdgeKind.TRADEOFF))
    tension = tension_edges / edge_count if edge_count > 0 else 0.0

    fragmentation = (topology.component_count - 1) / (n - 1) if n > 1 else 0.0
    depth = len(topology.longest_chain) / n

    return CoreRatios(
        concentration=clamp01(concentration),
        alignment=clamp01(alignment),
        tension=clamp01(tension),
        fragmentation=clamp01(fragmentation),
        depth=clamp01(depth),
    )
