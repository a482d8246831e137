"""
Topology Analyzer

Graph-level structure of a ClaimGraph:

    Components   : connected components of the undirected projection
    Chains       : prerequisite depth, longest chain, chain roots
    Hub          : claim with the highest supports+prerequisite out-degree,
                   named only when it clearly dominates (dominance is always reported)
    Resilience   : articulation points (cut vertices)
    Density      : cluster cohesion among high-support claims and
                   size-weighted local coherence per component

Depth computation is an iterative post-order walk over the index arena, so
cyclic prerequisite chains and very long chains both terminate without
touching the interpreter recursion limit.

Usage:
    analyzer = TopologyAnalyzer()
    result = analyzer.analyze(graph, high_support_ids)
"""

from __future__ import annotations

import logging
from typing import Callable, Iterable, List, Optional, Sequence, Set, Tuple

import networkx as nx

from claimgraph.config.settings import AnalysisSettings, DEFAULT_SETTINGS
from claimgraph.core.graph_builder import ClaimGraph
from claimgraph.core.models import EdgeKind
from .models import GraphAnalysis
from .stats import clamp01, support_ratio

#: Dominance reported when the hub has no runner-up.
HUB_DOMINANCE_SENTINEL = 10.0

#: A hub is only named when it dominates the runner-up and feeds several claims.
HUB_MIN_DOMINANCE = 1.5
HUB_MIN_OUT_DEGREE = 2


# ---------------------------------------------------------------------------
# Depth traversal (pure functions)
# ---------------------------------------------------------------------------

def longest_path_depths(count: int, neighbors: Callable[[int], Sequence[int]]) -> List[int]:
    """
    ``depth(i) = 1 + max(depth(j) for j in neighbors(i))``, 0 when ``i`` has
    no neighbours.

    A neighbour that is still on the active path (a cycle) contributes 0
    instead of being expanded. Self-loops are ignored.
    """
    depth: List[Optional[int]] = [None] * count

    for start in range(count):
        if depth[start] is not None:
            continue
        visiting: Set[int] = {start}
        stack: List[Tuple[int, int]] = [(start, 0)]
        while stack:
            node, pos = stack[-1]
            nbrs = neighbors(node)
            if pos < len(nbrs):
                stack[-1] = (node, pos + 1)
                nxt = nbrs[pos]
                if nxt != node and nxt not in visiting and depth[nxt] is None:
                    visiting.add(nxt)
                    stack.append((nxt, 0))
                continue

            stack.pop()
            visiting.discard(node)
            best = -1
            for nxt in nbrs:
                if nxt == node:
                    continue
                best = max(best, 0 if nxt in visiting else (depth[nxt] or 0))
            depth[node] = best + 1 if best >= 0 else 0

    return [d or 0 for d in depth]


def prerequisite_depths(graph: ClaimGraph) -> List[int]:
    """Per-claim depth along incoming prerequisite edges."""
    return longest_path_depths(
        len(graph), lambda i: graph.in_neighbors(i, EdgeKind.PREREQUISITE)
    )


def longest_chain(graph: ClaimGraph, depths: Optional[List[int]] = None) -> List[str]:
    """Longest prerequisite chain ordered root to terminal; empty without prerequisites."""
    if not graph.edges_of_kind(EdgeKind.PREREQUISITE):
        return []
    depths = depths if depths is not None else prerequisite_depths(graph)
    if not depths or max(depths) == 0:
        return []

    tail = depths.index(max(depths))
    chain = [tail]
    on_chain = {tail}
    current = tail
    while True:
        preds = [
            p for p in graph.in_neighbors(current, EdgeKind.PREREQUISITE)
            if p not in on_chain
        ]
        if not preds:
            break
        current = min(preds, key=lambda p: (-depths[p], p))
        chain.append(current)
        on_chain.add(current)

    chain.reverse()
    return [graph.claims[i].id for i in chain]


# ---------------------------------------------------------------------------
# Analyzer
# ---------------------------------------------------------------------------

class TopologyAnalyzer:
    """Computes GraphAnalysis for a ClaimGraph."""

    def __init__(self, settings: AnalysisSettings = DEFAULT_SETTINGS) -> None:
        self.settings = settings
        self._logger = logging.getLogger(__name__)

    def analyze(self, graph: ClaimGraph, high_support_ids: Iterable[str] = ()) -> GraphAnalysis:
        if len(graph) == 0:
            return GraphAnalysis()

        components = self._components(graph)
        depths = prerequisite_depths(graph)
        chain = longest_chain(graph, depths)
        hub, dominance = self._hub(graph)
        cut_vertices = self._articulation_points(graph)
        high = set(high_support_ids)

        result = GraphAnalysis(
            component_count=len(components),
            components=tuple(tuple(c) for c in components),
            longest_chain=tuple(chain),
            chain_count=self._chain_count(graph),
            hub_claim=hub,
            hub_dominance=dominance,
            cluster_cohesion=self._cluster_cohesion(graph, high),
            local_coherence=self._local_coherence(graph, components),
            articulation_points=tuple(cut_vertices),
        )
        self._logger.info(
            "Topology: %d components, chain length %d, hub=%s, %d articulation points",
            result.component_count, len(chain), hub, len(cut_vertices),
        )
        return result

    # ------------------------------------------------------------------
    # Components
    # ------------------------------------------------------------------

    @staticmethod
    def _components(graph: ClaimGraph) -> List[List[str]]:
        idx = graph.index_of
        comps = [
            sorted(members, key=idx.__getitem__)
            for members in nx.connected_components(graph.undirected)
        ]
        comps.sort(key=lambda members: idx[members[0]])
        return comps

    @staticmethod
    def _articulation_points(graph: ClaimGraph) -> List[str]:
        U = graph.undirected.copy()
        U.remove_edges_from(list(nx.selfloop_edges(U)))
        points = set(nx.articulation_points(U))
        return [cid for cid in graph.ids if cid in points]

    # ------------------------------------------------------------------
    # Chains / hub
    # ------------------------------------------------------------------

    @staticmethod
    def _chain_count(graph: ClaimGraph) -> int:
        return sum(
            1 for i in range(len(graph))
            if graph.out_degree(i, EdgeKind.PREREQUISITE) > 0
            and graph.in_degree(i, EdgeKind.PREREQUISITE) == 0
        )

    @staticmethod
    def _hub(graph: ClaimGraph) -> Tuple[Optional[str], float]:
        out = [len(graph.supportive_successors(i)) for i in range(len(graph))]
        top = max(out) if out else 0
        if top == 0:
            return None, 0.0
        hub_idx = out.index(top)
        rest = [d for i, d in enumerate(out) if i != hub_idx]
        second = max(rest) if rest else 0
        dominance = float(top / second if second > 0 else HUB_DOMINANCE_SENTINEL)
        if dominance < HUB_MIN_DOMINANCE or top < HUB_MIN_OUT_DEGREE:
            return None, dominance
        return graph.claims[hub_idx].id, dominance

    # ------------------------------------------------------------------
    # Density
    # ------------------------------------------------------------------

    @staticmethod
    def _cluster_cohesion(graph: ClaimGraph, high: Set[str]) -> float:
        n = len(high)
        if n < 2:
            return 1.0
        internal = sum(
            1 for e in graph.edges_of_kind(EdgeKind.SUPPORTS, EdgeKind.PREREQUISITE)
            if e.source in high and e.target in high and not e.is_self_loop
        )
        return clamp01(internal / (n * (n - 1)))

    @staticmethod
    def _local_coherence(graph: ClaimGraph, components: List[List[str]]) -> float:
        weighted = 0.0
        total_size = 0
        for members in components:
            size = len(members)
            if size < 2:
                continue
            member_set = set(members)
            internal = sum(
                1 for e in graph.edges
                if e.source in member_set and e.target in member_set and not e.is_self_loop
            )
            density = clamp01(internal / (size * (size - 1)))
            avg_support = sum(
                support_ratio(graph.claim(cid), graph.model_count) for cid in members
            ) / size
            weighted += density * avg_support * size
            total_size += size
        if total_size == 0:
            return 0.0
        return clamp01(weighted / total_size)
