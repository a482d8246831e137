"""
Graph Builder

Normalizes raw claim/edge records into a ClaimGraph:

- duplicate claim ids collapse to their first occurrence
- relationship names (including legacy aliases) map onto the four
  canonical EdgeKinds; unknown names default to ``supports``
- edges whose endpoints are not claims are dropped
- supporters / support counts are normalized

The ClaimGraph is an index arena: claims are addressed by integer position,
with outgoing/incoming adjacency split by kind, plus an undirected networkx
projection used by the topology algorithms.

Usage:
    graph = GraphBuilder().build(AnalysisInput.from_dict(payload))
"""

from __future__ import annotations

import logging
from dataclasses import replace
from typing import Dict, Iterable, List, Optional, Tuple

import networkx as nx

from claimgraph.config.settings import AnalysisSettings, DEFAULT_SETTINGS
from .models import AnalysisInput, ClaimData, EdgeData, EdgeKind, EdgeRecord


#: Relationship names accepted from older schema versions.
EDGE_KIND_ALIASES: Dict[str, EdgeKind] = {
    "supports": EdgeKind.SUPPORTS,
    "support": EdgeKind.SUPPORTS,
    "supported_by": EdgeKind.SUPPORTS,
    "complements": EdgeKind.SUPPORTS,
    "bifurcation": EdgeKind.SUPPORTS,
    "conflicts": EdgeKind.CONFLICTS,
    "conflict": EdgeKind.CONFLICTS,
    "contradicts": EdgeKind.CONFLICTS,
    "contradiction": EdgeKind.CONFLICTS,
    "tradeoff": EdgeKind.TRADEOFF,
    "trade-off": EdgeKind.TRADEOFF,
    "trade_off": EdgeKind.TRADEOFF,
    "tradeoffs": EdgeKind.TRADEOFF,
    "prerequisite": EdgeKind.PREREQUISITE,
    "prereq": EdgeKind.PREREQUISITE,
    "requires": EdgeKind.PREREQUISITE,
    "enables": EdgeKind.PREREQUISITE,
    "depends_on": EdgeKind.PREREQUISITE,
}


def normalize_edge_kind(relation: str) -> Optional[EdgeKind]:
    """Map a raw relationship name to an EdgeKind, or None if unrecognized."""
    key = (relation or "").strip().lower().replace(" ", "_")
    return EDGE_KIND_ALIASES.get(key)


# ---------------------------------------------------------------------------
# Arena
# ---------------------------------------------------------------------------

class ClaimGraph:
    """Immutable, index-addressed claim graph."""

    def __init__(
        self,
        claims: Iterable[ClaimData],
        edges: Iterable[EdgeData],
        ghosts: Iterable[str] = (),
        declared_model_count: Optional[int] = None,
        source_query: Optional[str] = None,
    ) -> None:
        self.claims: Tuple[ClaimData, ...] = tuple(claims)
        self.edges: Tuple[EdgeData, ...] = tuple(edges)
        self.ghosts: Tuple[str, ...] = tuple(ghosts)
        self.source_query = source_query
        self.index_of: Dict[str, int] = {c.id: i for i, c in enumerate(self.claims)}

        n = len(self.claims)
        self._out: List[Dict[EdgeKind, List[int]]] = [{k: [] for k in EdgeKind} for _ in range(n)]
        self._in: List[Dict[EdgeKind, List[int]]] = [{k: [] for k in EdgeKind} for _ in range(n)]
        for e in self.edges:
            s, t = self.index_of[e.source], self.index_of[e.target]
            self._out[s][e.kind].append(t)
            self._in[t][e.kind].append(s)

        self.undirected = nx.Graph()
        self.undirected.add_nodes_from(c.id for c in self.claims)
        self.undirected.add_edges_from((e.source, e.target) for e in self.edges)

        self.unique_sources: Tuple[str, ...] = tuple(
            dict.fromkeys(s for c in self.claims for s in c.supporters)
        )
        if declared_model_count is not None and declared_model_count > 0:
            self.model_count = declared_model_count
        else:
            self.model_count = len(self.unique_sources)

    def __len__(self) -> int:
        return len(self.claims)

    @property
    def ids(self) -> List[str]:
        return [c.id for c in self.claims]

    def claim(self, claim_id: str) -> ClaimData:
        return self.claims[self.index_of[claim_id]]

    def out_neighbors(self, index: int, *kinds: EdgeKind) -> List[int]:
        kinds = kinds or tuple(EdgeKind)
        return [t for k in kinds for t in self._out[index][k]]

    def in_neighbors(self, index: int, *kinds: EdgeKind) -> List[int]:
        kinds = kinds or tuple(EdgeKind)
        return [s for k in kinds for s in self._in[index][k]]

    def out_degree(self, index: int, *kinds: EdgeKind) -> int:
        return len(self.out_neighbors(index, *kinds))

    def in_degree(self, index: int, *kinds: EdgeKind) -> int:
        return len(self.in_neighbors(index, *kinds))

    def degree(self, index: int, *kinds: EdgeKind) -> int:
        return self.out_degree(index, *kinds) + self.in_degree(index, *kinds)

    def edges_of_kind(self, *kinds: EdgeKind) -> List[EdgeData]:
        return [e for e in self.edges if e.kind in kinds]

    def supportive_successors(self, index: int) -> List[int]:
        return self.out_neighbors(index, EdgeKind.SUPPORTS, EdgeKind.PREREQUISITE)


# ---------------------------------------------------------------------------
# Builder
# ---------------------------------------------------------------------------

class GraphBuilder:
    """Turns an AnalysisInput into a ClaimGraph. Never raises on content."""

    def __init__(self, settings: AnalysisSettings = DEFAULT_SETTINGS) -> None:
        self.settings = settings
        self._logger = logging.getLogger(__name__)

    def build(self, data: AnalysisInput) -> ClaimGraph:
        claims = self._dedupe_claims(data.claims)
        known = {c.id for c in claims}
        edges = [e for e in (self._normalize_edge(r, known) for r in data.edges) if e is not None]

        graph = ClaimGraph(
            claims,
            edges,
            ghosts=data.ghosts,
            declared_model_count=data.model_count,
            source_query=data.source_query,
        )
        self._logger.info(
            "Claim graph built: %d claims, %d edges (%d dropped), %d sources",
            len(graph), len(edges), len(data.edges) - len(edges), graph.model_count,
        )
        return graph

    def _dedupe_claims(self, raw: Iterable[ClaimData]) -> List[ClaimData]:
        seen: Dict[str, ClaimData] = {}
        for claim in raw:
            if claim.id in seen:
                self._logger.warning("Duplicate claim id '%s' ignored", claim.id)
                continue
            seen[claim.id] = self._normalize_claim(claim)
        return list(seen.values())

    @staticmethod
    def _normalize_claim(claim: ClaimData) -> ClaimData:
        supporters = tuple(dict.fromkeys(claim.supporters))
        mentions = claim.mentions or tuple((s, 1) for s in supporters)
        support_count = claim.support_count
        if support_count <= 0:
            support_count = max(1, len(supporters))
        return replace(
            claim,
            supporters=supporters,
            support_count=support_count,
            mentions=mentions,
            label=claim.label or claim.id,
            text=claim.text or claim.label or claim.id,
        )

    def _normalize_edge(self, record: EdgeRecord, known: set) -> Optional[EdgeData]:
        if record.source not in known or record.target not in known:
            if self.settings.debug:
                self._logger.debug(
                    "Dropping edge %s -> %s: unknown endpoint", record.source, record.target
                )
            return None
        kind = normalize_edge_kind(record.relation)
        if kind is None:
            self._logger.warning(
                "Unknown relationship '%s' on %s -> %s, treating as supports",
                record.relation, record.source, record.target,
            )
            kind = EdgeKind.SUPPORTS
        return EdgeData(source=record.source, target=record.target, kind=kind)
