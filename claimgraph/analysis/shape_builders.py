"""
Shape Payload Builders

One builder per primary shape. ``build_shape_data`` applies the
fallbacks between them:

    forked      without conflicts or clusters   -> convergent payload
    constrained without tradeoffs               -> forked, else sparse
    parallel    with fewer than two components  -> convergent payload
    any builder raising ValueError              -> sparse payload
"""

from __future__ import annotations

import logging
from typing import Dict, List, Optional, Sequence

from claimgraph.core.graph_builder import ClaimGraph
from claimgraph.core.models import ClaimRole, EdgeKind
from .models import (
    CentralConflict,
    ChallengerInfo,
    ConvergentData,
    Dimension,
    DissentData,
    DominatedOption,
    EnrichedClaim,
    FloorClaim,
    ForkedData,
    GraphAnalysis,
    ParallelData,
    PatternBundle,
    PrimaryShape,
    SecondaryPattern,
    SecondaryPatternType,
    ShapePayload,
    ShapeTradeoff,
    SparseData,
    TradeoffOption,
    TradeoffShapeData,
)
from .stats import clamp01

logger = logging.getLogger(__name__)

STRONGEST_SIGNAL_COUNT = 3


class ShapeContext:
    """Everything a payload builder may read."""

    def __init__(
        self,
        graph: ClaimGraph,
        claims: Sequence[EnrichedClaim],
        topology: GraphAnalysis,
        bundle: PatternBundle,
        contenders: Sequence[str],
        signal_strength: float,
        patterns: Sequence[SecondaryPattern] = (),
    ) -> None:
        self.graph = graph
        self.claims = list(claims)
        self.by_id: Dict[str, EnrichedClaim] = {c.id: c for c in claims}
        self.topology = topology
        self.bundle = bundle
        self.contenders = list(contenders)
        self.signal_strength = signal_strength
        self.patterns = list(patterns)

    def conflict_partners(self, claim_id: str) -> List[str]:
        idx = self.graph.index_of[claim_id]
        nbrs = self.graph.out_neighbors(idx, EdgeKind.CONFLICTS)
        nbrs += self.graph.in_neighbors(idx, EdgeKind.CONFLICTS)
        return [self.graph.claims[j].id for j in sorted(set(nbrs)) if j != idx]

    def floor_claim(self, claim_id: str) -> FloorClaim:
        c = self.by_id[claim_id]
        partners = self.conflict_partners(claim_id)
        return FloorClaim(
            id=c.id,
            label=c.label,
            text=c.text,
            support_count=c.support_count,
            support_ratio=c.support_ratio,
            is_contested=bool(partners),
            contested_by=tuple(partners),
        )

    def dissent(self) -> Optional[DissentData]:
        for p in self.patterns:
            if p.type == SecondaryPatternType.DISSENT:
                return p.data
        return None


def _option(c: EnrichedClaim) -> TradeoffOption:
    return TradeoffOption(c.id, c.label, c.text, c.support_count, c.support_ratio)


def _floor_strength(count: int) -> str:
    if count > 2:
        return "strong"
    return "weak" if count > 0 else "absent"


# ---------------------------------------------------------------------------
# Builders
# ---------------------------------------------------------------------------

def build_convergent(ctx: ShapeContext) -> ConvergentData:
    floor_ids = ctx.contenders or [c.id for c in ctx.claims if c.is_high_support]
    floor = tuple(ctx.floor_claim(cid) for cid in floor_ids)
    avg = sum(f.support_ratio for f in floor) / len(floor) if floor else 0.0
    strength = "strong" if avg >= 0.7 else "moderate" if avg >= 0.5 else "weak"

    high = {c.id for c in ctx.claims if c.is_high_support}
    challengers = []
    for c in ctx.claims:
        if not (c.is_challenger or c.role == ClaimRole.CHALLENGER.value):
            continue
        targets = [p for p in ctx.conflict_partners(c.id) if p in high]
        targets += [
            ctx.graph.claims[j].id
            for j in ctx.graph.out_neighbors(ctx.graph.index_of[c.id], EdgeKind.PREREQUISITE)
            if ctx.graph.claims[j].id in high
        ]
        challengers.append(ChallengerInfo(
            id=c.id,
            label=c.label,
            text=c.text,
            support_count=c.support_count,
            challenges=c.challenges,
            targets_claim=targets[0] if targets else None,
        ))

    floor_set = set(floor_ids)
    assumptions = []
    for c in ctx.claims:
        if not c.is_conditional:
            continue
        idx = ctx.graph.index_of[c.id]
        feeds_floor = any(
            ctx.graph.claims[j].id in floor_set for j in ctx.graph.supportive_successors(idx)
        )
        if feeds_floor or c.id in floor_set:
            assumptions.append(c.label)

    dissent = ctx.dissent()
    return ConvergentData(
        floor=floor,
        floor_strength=strength,
        challengers=tuple(challengers),
        blind_spots=ctx.graph.ghosts,
        floor_assumptions=tuple(assumptions),
        strongest_outlier=dissent.strongest_voice if dissent else None,
    )


def build_forked(ctx: ShapeContext) -> ForkedData:
    bundle = ctx.bundle
    if bundle.conflict_clusters:
        cluster = max(bundle.conflict_clusters, key=lambda cl: len(cl.challenger_ids))
        members = (cluster.target_id,) + cluster.challenger_ids
        central = CentralConflict(
            kind="cluster",
            axis=cluster.axis,
            claims=tuple(ctx.by_id[m].ref() for m in members),
            dynamics="one_vs_many",
        )
    elif bundle.conflicts:
        top = max(
            bundle.conflicts,
            key=lambda p: p.claim_a.support_ratio + p.claim_b.support_ratio,
        )
        members = (top.claim_a.id, top.claim_b.id)
        central = CentralConflict(
            kind="individual",
            axis=f"{top.claim_a.label} vs {top.claim_b.label}",
            claims=(top.claim_a, top.claim_b),
            dynamics=top.dynamics,
        )
    else:
        raise ValueError("forked payload requires at least one conflict")

    used = set(members)
    secondary = tuple(
        p for p in bundle.conflicts if p.claim_a.id not in used and p.claim_b.id not in used
    )
    floor = tuple(
        ctx.floor_claim(c.id) for c in ctx.claims if c.is_high_support and c.id not in used
    )
    return ForkedData(
        central_conflict=central,
        secondary_conflicts=secondary,
        floor=floor,
        floor_strength=_floor_strength(len(floor)),
        leverage_inversions=tuple(li.claim_id for li in bundle.leverage_inversions),
        articulation_points=ctx.topology.articulation_points,
    )


def build_constrained(ctx: ShapeContext) -> TradeoffShapeData:
    if not ctx.bundle.tradeoffs:
        raise ValueError("constrained payload requires at least one tradeoff")

    tradeoffs: List[ShapeTradeoff] = []
    dominated: List[DominatedOption] = []
    in_tradeoff = set()
    for i, pair in enumerate(ctx.bundle.tradeoffs):
        a, b = ctx.by_id[pair.claim_a.id], ctx.by_id[pair.claim_b.id]
        in_tradeoff.update((a.id, b.id))
        tradeoffs.append(ShapeTradeoff(
            id=f"tradeoff_{i}",
            option_a=_option(a),
            option_b=_option(b),
            symmetry=pair.symmetry,
        ))
        if pair.dominance is not None:
            winner, loser = (a, b) if pair.dominance == a.id else (b, a)
            dominated.append(DominatedOption(
                dominated=loser.id,
                dominated_by=winner.id,
                reason=f"All sources backing {loser.label} also back {winner.label}",
            ))

    floor = tuple(
        ctx.floor_claim(c.id) for c in ctx.claims if c.is_high_support and c.id not in in_tradeoff
    )
    return TradeoffShapeData(
        tradeoffs=tuple(tradeoffs),
        dominated_options=tuple(dominated),
        floor=floor,
    )


def build_parallel(ctx: ShapeContext) -> ParallelData:
    contenders = set(ctx.contenders)
    dimensions: List[Dimension] = []
    for members in ctx.topology.components:
        if len(members) < 2 and not contenders.intersection(members):
            continue
        claims = [ctx.by_id[m] for m in members]
        lead = max(claims, key=lambda c: c.support_ratio)
        member_set = set(members)
        internal = sum(
            1 for e in ctx.graph.edges
            if e.source in member_set and e.target in member_set and not e.is_self_loop
        )
        size = len(members)
        cohesion = clamp01(internal / (size * (size - 1))) if size > 1 else 1.0
        dimensions.append(Dimension(
            id=f"dimension_{len(dimensions)}",
            theme=lead.label,
            claims=tuple(c.ref() for c in claims),
            cohesion=cohesion,
            avg_support=sum(c.support_ratio for c in claims) / size,
        ))
    if not dimensions:
        raise ValueError("parallel payload requires at least one dimension")

    dominant = max(dimensions, key=lambda d: d.avg_support)
    hidden = min(dimensions, key=lambda d: d.avg_support)
    return ParallelData(
        dimensions=tuple(dimensions),
        gaps=ctx.graph.ghosts,
        dominant_dimension=dominant.id,
        hidden_dimension=hidden.id if len(dimensions) > 1 and hidden.id != dominant.id else None,
    )


def build_sparse(ctx: ShapeContext) -> SparseData:
    ranked = sorted(ctx.claims, key=lambda c: -c.support_ratio)
    reasons: List[str] = []
    n = len(ctx.claims)
    edges = len(ctx.graph.edges)
    if n == 0:
        reasons.append("No claims to analyze")
    else:
        if edges < n / 2:
            reasons.append(f"Only {edges} relationships mapped against {n} claims")
        if not any(c.support_ratio > 0.5 for c in ctx.claims):
            reasons.append("No claim is backed by a majority of sources")
        isolated = len(ctx.bundle.isolated_claims)
        if isolated:
            reasons.append(f"{isolated} of {n} claims are disconnected")

    return SparseData(
        strongest_signals=tuple(c.ref() for c in ranked[:STRONGEST_SIGNAL_COUNT]),
        isolated_claims=ctx.bundle.isolated_claims,
        signal_strength=ctx.signal_strength,
        sparsity_reasons=tuple(reasons),
        gaps=ctx.graph.ghosts,
    )


# ---------------------------------------------------------------------------
# Dispatch
# ---------------------------------------------------------------------------

def _build(primary: PrimaryShape, ctx: ShapeContext) -> ShapePayload:
    bundle = ctx.bundle
    if primary == PrimaryShape.CONVERGENT:
        return build_convergent(ctx)
    if primary == PrimaryShape.FORKED:
        if not bundle.conflicts and not bundle.conflict_clusters:
            return build_convergent(ctx)
        return build_forked(ctx)
    if primary == PrimaryShape.CONSTRAINED:
        if not bundle.tradeoffs:
            return build_forked(ctx) if bundle.conflicts else build_sparse(ctx)
        return build_constrained(ctx)
    if primary == PrimaryShape.PARALLEL:
        if ctx.topology.component_count < 2:
            return build_convergent(ctx)
        return build_parallel(ctx)
    return build_sparse(ctx)


def build_shape_data(primary: PrimaryShape, ctx: ShapeContext) -> ShapePayload:
    try:
        return _build(primary, ctx)
    except ValueError as exc:
        logger.warning("Shape payload for %s failed (%s), using sparse payload", primary.value, exc)
        return build_sparse(ctx)


# ---------------------------------------------------------------------------
# Transfer question
# ---------------------------------------------------------------------------

DEFAULT_TRANSFER_QUESTIONS: Dict[PrimaryShape, str] = {
    PrimaryShape.CONVERGENT: (
        "For the consensus to hold, what assumption must be true? Is it true in your situation?"
    ),
    PrimaryShape.FORKED: "Which constraint matters more to you? The choice determines the path.",
    PrimaryShape.CONSTRAINED: "What are you optimizing for? The structure cannot maximize both.",
    PrimaryShape.PARALLEL: "Which dimension is most relevant to your situation?",
    PrimaryShape.SPARSE: "What specific question would collapse this ambiguity?",
}


def transfer_question(primary: PrimaryShape, data: Optional[ShapePayload]) -> str:
    if primary == PrimaryShape.CONSTRAINED and isinstance(data, TradeoffShapeData):
        t = data.tradeoffs[0]
        return (
            f"What are you optimizing for: {t.option_a.label} or {t.option_b.label}? "
            "The structure cannot maximize both."
        )
    if primary == PrimaryShape.FORKED and isinstance(data, ForkedData):
        claims = data.central_conflict.claims
        if data.central_conflict.kind == "individual" and len(claims) == 2:
            return (
                f"Which matters more to you: {claims[0].label} or {claims[1].label}? "
                "The choice determines the path."
            )
    if primary == PrimaryShape.CONVERGENT and isinstance(data, ConvergentData):
        if data.floor_assumptions:
            return (
                f"For the consensus to hold, {data.floor_assumptions[0]} must be true. "
                "Is it true in your situation?"
            )
    return DEFAULT_TRANSFER_QUESTIONS[primary]
