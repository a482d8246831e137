"""
Analysis Result Models

Result containers produced by the pipeline stages. Every container is
frozen and exposes ``to_dict()`` with camelCase keys for JSON consumers.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Optional, Tuple, Union

from claimgraph.core.models import Severity


def _r(value: float, digits: int = 4) -> float:
    return round(float(value), digits)


# ---------------------------------------------------------------------------
# Topology / landscape / ratios
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class GraphAnalysis:
    component_count: int = 0
    components: Tuple[Tuple[str, ...], ...] = ()
    longest_chain: Tuple[str, ...] = ()
    chain_count: int = 0
    hub_claim: Optional[str] = None
    hub_dominance: float = 0.0
    cluster_cohesion: float = 0.0
    local_coherence: float = 0.0
    articulation_points: Tuple[str, ...] = ()

    def to_dict(self) -> Dict[str, Any]:
        return {
            "componentCount": self.component_count,
            "components": [list(c) for c in self.components],
            "longestChain": list(self.longest_chain),
            "chainCount": self.chain_count,
            "hubClaim": self.hub_claim,
            "hubDominance": _r(self.hub_dominance),
            "clusterCohesion": _r(self.cluster_cohesion),
            "localCoherence": _r(self.local_coherence),
            "articulationPoints": list(self.articulation_points),
        }


@dataclass(frozen=True)
class LandscapeMetrics:
    claim_count: int = 0
    model_count: int = 0
    dominant_category: str = "prescriptive"
    category_distribution: Tuple[Tuple[str, int], ...] = ()
    dominant_role: str = "anchor"
    role_distribution: Tuple[Tuple[str, int], ...] = ()
    convergence_ratio: float = 0.0

    def to_dict(self) -> Dict[str, Any]:
        return {
            "claimCount": self.claim_count,
            "modelCount": self.model_count,
            "dominantType": self.dominant_category,
            "typeDistribution": dict(self.category_distribution),
            "dominantRole": self.dominant_role,
            "roleDistribution": dict(self.role_distribution),
            "convergenceRatio": _r(self.convergence_ratio),
        }


@dataclass(frozen=True)
class CoreRatios:
    concentration: float = 0.0
    alignment: float = 0.0
    tension: float = 0.0
    fragmentation: float = 0.0
    depth: float = 0.0

    def to_dict(self) -> Dict[str, float]:
        return {
            "concentration": _r(self.concentration),
            "alignment": _r(self.alignment),
            "tension": _r(self.tension),
            "fragmentation": _r(self.fragmentation),
            "depth": _r(self.depth),
        }


# ---------------------------------------------------------------------------
# Enriched claims
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class LeverageFactors:
    structural: float = 0.0
    reach: float = 0.0
    connectivity: float = 0.0
    role: float = 0.0

    @property
    def total(self) -> float:
        return self.structural + self.reach + self.connectivity + self.role

    def to_dict(self) -> Dict[str, float]:
        return {
            "structuralWeight": _r(self.structural),
            "reachWeight": _r(self.reach),
            "connectivityWeight": _r(self.connectivity),
            "roleWeight": _r(self.role),
        }


@dataclass(frozen=True)
class EnrichedClaim:
    """A claim together with its structural scores and population-relative flags."""
    id: str
    label: str
    text: str
    supporters: Tuple[str, ...]
    support_count: int
    category: str
    role: str
    challenges: Optional[str]
    support_ratio: float
    leverage: float
    leverage_factors: LeverageFactors
    keystone_score: float
    evidence_gap_score: float
    support_skew: float
    in_degree: int
    out_degree: int
    dependents: Tuple[str, ...] = ()
    chain_depth: int = 0
    is_high_support: bool = False
    is_leverage_inversion: bool = False
    is_keystone: bool = False
    is_evidence_gap: bool = False
    is_outlier: bool = False
    is_contested: bool = False
    is_conditional: bool = False
    is_challenger: bool = False
    is_isolated: bool = False
    is_chain_root: bool = False

    def ref(self) -> "ClaimRef":
        return ClaimRef(self.id, self.label, self.support_ratio)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "label": self.label,
            "text": self.text,
            "supporters": list(self.supporters),
            "supportCount": self.support_count,
            "type": self.category,
            "role": self.role,
            "challenges": self.challenges,
            "supportRatio": _r(self.support_ratio),
            "leverage": _r(self.leverage),
            "leverageFactors": self.leverage_factors.to_dict(),
            "keystoneScore": _r(self.keystone_score),
            "evidenceGapScore": _r(self.evidence_gap_score),
            "supportSkew": _r(self.support_skew),
            "inDegree": self.in_degree,
            "outDegree": self.out_degree,
            "dependents": list(self.dependents),
            "chainDepth": self.chain_depth,
            "isHighSupport": self.is_high_support,
            "isLeverageInversion": self.is_leverage_inversion,
            "isKeystone": self.is_keystone,
            "isEvidenceGap": self.is_evidence_gap,
            "isOutlier": self.is_outlier,
            "isContested": self.is_contested,
            "isConditional": self.is_conditional,
            "isChallenger": self.is_challenger,
            "isIsolated": self.is_isolated,
            "isChainRoot": self.is_chain_root,
        }


@dataclass(frozen=True)
class ClaimRef:
    id: str
    label: str
    support_ratio: float = 0.0

    def to_dict(self) -> Dict[str, Any]:
        return {"id": self.id, "label": self.label, "supportRatio": _r(self.support_ratio)}


# ---------------------------------------------------------------------------
# Pattern records
# ---------------------------------------------------------------------------

class InversionReason(str, Enum):
    CHALLENGER_PREREQUISITE = "challenger_prerequisite_to_consensus"
    SINGULAR_FOUNDATION = "singular_foundation"
    HIGH_CONNECTIVITY = "high_connectivity_low_support"


class TradeoffSymmetry(str, Enum):
    BOTH_HIGH = "both_high"
    BOTH_LOW = "both_low"
    ASYMMETRIC = "asymmetric"


@dataclass(frozen=True)
class LeverageInversion:
    claim_id: str
    claim_label: str
    supporter_count: int
    reason: InversionReason
    affected_claims: Tuple[str, ...] = ()

    def to_dict(self) -> Dict[str, Any]:
        return {
            "claimId": self.claim_id,
            "claimLabel": self.claim_label,
            "supporterCount": self.supporter_count,
            "reason": self.reason.value,
            "affectedClaims": list(self.affected_claims),
        }


@dataclass(frozen=True)
class CascadeRisk:
    source_id: str
    source_label: str
    dependent_ids: Tuple[str, ...]
    dependent_labels: Tuple[str, ...]
    depth: int

    def to_dict(self) -> Dict[str, Any]:
        return {
            "sourceId": self.source_id,
            "sourceLabel": self.source_label,
            "dependentIds": list(self.dependent_ids),
            "dependentLabels": list(self.dependent_labels),
            "depth": self.depth,
        }


@dataclass(frozen=True)
class ConflictPair:
    claim_a: ClaimRef
    claim_b: ClaimRef
    is_both_consensus: bool
    dynamics: str

    def to_dict(self) -> Dict[str, Any]:
        return {
            "claimA": self.claim_a.to_dict(),
            "claimB": self.claim_b.to_dict(),
            "isBothConsensus": self.is_both_consensus,
            "dynamics": self.dynamics,
        }


@dataclass(frozen=True)
class ConflictCluster:
    id: str
    target_id: str
    challenger_ids: Tuple[str, ...]
    axis: str

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "targetId": self.target_id,
            "challengerIds": list(self.challenger_ids),
            "axis": self.axis,
        }


@dataclass(frozen=True)
class TradeoffPair:
    claim_a: ClaimRef
    claim_b: ClaimRef
    symmetry: TradeoffSymmetry
    dominance: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "claimA": self.claim_a.to_dict(),
            "claimB": self.claim_b.to_dict(),
            "symmetry": self.symmetry.value,
            "dominance": self.dominance,
        }


@dataclass(frozen=True)
class ConvergencePoint:
    target_id: str
    target_label: str
    source_ids: Tuple[str, ...]
    source_labels: Tuple[str, ...]
    edge_kind: str
    independent: bool = False

    def to_dict(self) -> Dict[str, Any]:
        return {
            "targetId": self.target_id,
            "targetLabel": self.target_label,
            "sourceIds": list(self.source_ids),
            "sourceLabels": list(self.source_labels),
            "edgeType": self.edge_kind,
            "independent": self.independent,
        }


@dataclass(frozen=True)
class PatternBundle:
    leverage_inversions: Tuple[LeverageInversion, ...] = ()
    cascade_risks: Tuple[CascadeRisk, ...] = ()
    conflicts: Tuple[ConflictPair, ...] = ()
    conflict_clusters: Tuple[ConflictCluster, ...] = ()
    tradeoffs: Tuple[TradeoffPair, ...] = ()
    convergence_points: Tuple[ConvergencePoint, ...] = ()
    isolated_claims: Tuple[str, ...] = ()
    ghosts: Tuple[str, ...] = ()

    def to_dict(self) -> Dict[str, Any]:
        return {
            "leverageInversions": [x.to_dict() for x in self.leverage_inversions],
            "cascadeRisks": [x.to_dict() for x in self.cascade_risks],
            "conflicts": [x.to_dict() for x in self.conflicts],
            "conflictClusters": [x.to_dict() for x in self.conflict_clusters],
            "tradeoffs": [x.to_dict() for x in self.tradeoffs],
            "convergencePoints": [x.to_dict() for x in self.convergence_points],
            "isolatedClaims": list(self.isolated_claims),
            "ghosts": list(self.ghosts),
        }


@dataclass(frozen=True)
class GhostAnalysis:
    count: int = 0
    may_extend_challenger: bool = False
    challenger_ids: Tuple[str, ...] = ()

    def to_dict(self) -> Dict[str, Any]:
        return {
            "count": self.count,
            "mayExtendChallenger": self.may_extend_challenger,
            "challengerIds": list(self.challenger_ids),
        }


# ---------------------------------------------------------------------------
# Secondary patterns (tagged union)
# ---------------------------------------------------------------------------

class SecondaryPatternType(str, Enum):
    DISSENT = "dissent"
    KEYSTONE = "keystone"
    CHAIN = "chain"
    FRAGILE = "fragile"
    CHALLENGED = "challenged"
    ORPHANED = "orphaned"


class VoiceType(str, Enum):
    LEVERAGE_INVERSION = "leverage_inversion"
    EXPLICIT_CHALLENGER = "explicit_challenger"
    UNIQUE_PERSPECTIVE = "unique_perspective"
    EDGE_CASE = "edge_case"


@dataclass(frozen=True)
class DissentVoice:
    id: str
    label: str
    text: str
    support_ratio: float
    insight_type: VoiceType
    targets: Tuple[str, ...]
    insight_score: float

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "label": self.label,
            "text": self.text,
            "supportRatio": _r(self.support_ratio),
            "insightType": self.insight_type.value,
            "targets": list(self.targets),
            "insightScore": _r(self.insight_score),
        }


@dataclass(frozen=True)
class DissentData:
    voices: Tuple[DissentVoice, ...]
    strongest_voice: Optional[DissentVoice]
    why_it_matters: str = ""
    suppressed_dimensions: Tuple[str, ...] = ()

    def to_dict(self) -> Dict[str, Any]:
        strongest = None
        if self.strongest_voice is not None:
            strongest = {**self.strongest_voice.to_dict(), "whyItMatters": self.why_it_matters}
        return {
            "voices": [v.to_dict() for v in self.voices],
            "strongestVoice": strongest,
            "suppressedDimensions": list(self.suppressed_dimensions),
        }


@dataclass(frozen=True)
class KeystoneData:
    keystone: ClaimRef
    dependents: Tuple[str, ...]
    cascade_size: int

    def to_dict(self) -> Dict[str, Any]:
        return {
            "keystone": self.keystone.to_dict(),
            "dependents": list(self.dependents),
            "cascadeSize": self.cascade_size,
        }


@dataclass(frozen=True)
class ChainData:
    chain: Tuple[str, ...]
    length: int
    weak_links: Tuple[str, ...] = ()

    def to_dict(self) -> Dict[str, Any]:
        return {"chain": list(self.chain), "length": self.length, "weakLinks": list(self.weak_links)}


@dataclass(frozen=True)
class Fragility:
    peak: ClaimRef
    weak_foundation: ClaimRef

    def to_dict(self) -> Dict[str, Any]:
        return {
            "peak": {"id": self.peak.id, "label": self.peak.label},
            "weakFoundation": self.weak_foundation.to_dict(),
        }


@dataclass(frozen=True)
class FragileData:
    fragilities: Tuple[Fragility, ...]

    def to_dict(self) -> Dict[str, Any]:
        return {"fragilities": [f.to_dict() for f in self.fragilities]}


@dataclass(frozen=True)
class Challenge:
    challenger: ClaimRef
    target: ClaimRef

    def to_dict(self) -> Dict[str, Any]:
        return {"challenger": self.challenger.to_dict(), "target": self.target.to_dict()}


@dataclass(frozen=True)
class ChallengedData:
    challenges: Tuple[Challenge, ...]

    def to_dict(self) -> Dict[str, Any]:
        return {"challenges": [c.to_dict() for c in self.challenges]}


@dataclass(frozen=True)
class Orphan:
    id: str
    label: str
    support_ratio: float
    reason: str

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "label": self.label,
            "supportRatio": _r(self.support_ratio),
            "reason": self.reason,
        }


@dataclass(frozen=True)
class OrphanedData:
    orphans: Tuple[Orphan, ...]

    def to_dict(self) -> Dict[str, Any]:
        return {"orphans": [o.to_dict() for o in self.orphans]}


SecondaryPayload = Union[
    DissentData, KeystoneData, ChainData, FragileData, ChallengedData, OrphanedData
]

PAYLOAD_TYPES: Dict[SecondaryPatternType, type] = {
    SecondaryPatternType.DISSENT: DissentData,
    SecondaryPatternType.KEYSTONE: KeystoneData,
    SecondaryPatternType.CHAIN: ChainData,
    SecondaryPatternType.FRAGILE: FragileData,
    SecondaryPatternType.CHALLENGED: ChallengedData,
    SecondaryPatternType.ORPHANED: OrphanedData,
}


@dataclass(frozen=True)
class SecondaryPattern:
    type: SecondaryPatternType
    severity: Severity
    data: SecondaryPayload

    def __post_init__(self) -> None:
        expected = PAYLOAD_TYPES[self.type]
        if not isinstance(self.data, expected):
            raise ValueError(
                f"{self.type.value} pattern requires {expected.__name__}, "
                f"got {type(self.data).__name__}"
            )

    def to_dict(self) -> Dict[str, Any]:
        return {"type": self.type.value, "severity": self.severity.value, "data": self.data.to_dict()}


# ---------------------------------------------------------------------------
# Primary shape payloads
# ---------------------------------------------------------------------------

class PrimaryShape(str, Enum):
    SPARSE = "sparse"
    CONVERGENT = "convergent"
    FORKED = "forked"
    CONSTRAINED = "constrained"
    PARALLEL = "parallel"


class PeakRelationship(str, Enum):
    CONFLICTING = "conflicting"
    TRADEOFF = "trading-off"
    SUPPORTING = "supporting"
    UNCONNECTED = "none"


@dataclass(frozen=True)
class FloorClaim:
    id: str
    label: str
    text: str
    support_count: int
    support_ratio: float
    is_contested: bool = False
    contested_by: Tuple[str, ...] = ()

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "label": self.label,
            "text": self.text,
            "supportCount": self.support_count,
            "supportRatio": _r(self.support_ratio),
            "isContested": self.is_contested,
            "contestedBy": list(self.contested_by),
        }


@dataclass(frozen=True)
class TradeoffOption:
    id: str
    label: str
    text: str
    support_count: int
    support_ratio: float

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "label": self.label,
            "text": self.text,
            "supportCount": self.support_count,
            "supportRatio": _r(self.support_ratio),
        }


@dataclass(frozen=True)
class ShapeTradeoff:
    id: str
    option_a: TradeoffOption
    option_b: TradeoffOption
    symmetry: TradeoffSymmetry
    governing_factor: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "optionA": self.option_a.to_dict(),
            "optionB": self.option_b.to_dict(),
            "symmetry": self.symmetry.value,
            "governingFactor": self.governing_factor,
        }


@dataclass(frozen=True)
class DominatedOption:
    dominated: str
    dominated_by: str
    reason: str

    def to_dict(self) -> Dict[str, Any]:
        return {"dominated": self.dominated, "dominatedBy": self.dominated_by, "reason": self.reason}


@dataclass(frozen=True)
class TradeoffShapeData:
    tradeoffs: Tuple[ShapeTradeoff, ...]
    dominated_options: Tuple[DominatedOption, ...] = ()
    floor: Tuple[FloorClaim, ...] = ()

    pattern = PrimaryShape.CONSTRAINED

    def to_dict(self) -> Dict[str, Any]:
        return {
            "pattern": self.pattern.value,
            "tradeoffs": [t.to_dict() for t in self.tradeoffs],
            "dominatedOptions": [d.to_dict() for d in self.dominated_options],
            "floor": [f.to_dict() for f in self.floor],
        }


@dataclass(frozen=True)
class ChallengerInfo:
    id: str
    label: str
    text: str
    support_count: int
    challenges: Optional[str]
    targets_claim: Optional[str]

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "label": self.label,
            "text": self.text,
            "supportCount": self.support_count,
            "challenges": self.challenges,
            "targetsClaim": self.targets_claim,
        }


@dataclass(frozen=True)
class ConvergentData:
    floor: Tuple[FloorClaim, ...]
    floor_strength: str
    challengers: Tuple[ChallengerInfo, ...] = ()
    blind_spots: Tuple[str, ...] = ()
    floor_assumptions: Tuple[str, ...] = ()
    strongest_outlier: Optional[DissentVoice] = None

    pattern = PrimaryShape.CONVERGENT

    def to_dict(self) -> Dict[str, Any]:
        return {
            "pattern": self.pattern.value,
            "floor": [f.to_dict() for f in self.floor],
            "floorStrength": self.floor_strength,
            "challengers": [c.to_dict() for c in self.challengers],
            "blindSpots": list(self.blind_spots),
            "floorAssumptions": list(self.floor_assumptions),
            "strongestOutlier": self.strongest_outlier.to_dict() if self.strongest_outlier else None,
        }


@dataclass(frozen=True)
class CentralConflict:
    kind: str
    axis: str
    claims: Tuple[ClaimRef, ...]
    dynamics: str

    def to_dict(self) -> Dict[str, Any]:
        return {
            "type": self.kind,
            "axis": self.axis,
            "claims": [c.to_dict() for c in self.claims],
            "dynamics": self.dynamics,
        }


@dataclass(frozen=True)
class ForkedData:
    central_conflict: CentralConflict
    secondary_conflicts: Tuple[ConflictPair, ...] = ()
    floor: Tuple[FloorClaim, ...] = ()
    floor_strength: str = "absent"
    leverage_inversions: Tuple[str, ...] = ()
    articulation_points: Tuple[str, ...] = ()

    pattern = PrimaryShape.FORKED

    def to_dict(self) -> Dict[str, Any]:
        return {
            "pattern": self.pattern.value,
            "centralConflict": self.central_conflict.to_dict(),
            "secondaryConflicts": [c.to_dict() for c in self.secondary_conflicts],
            "floor": {
                "exists": bool(self.floor),
                "claims": [f.to_dict() for f in self.floor],
                "strength": self.floor_strength,
            },
            "fragilities": {
                "leverageInversions": list(self.leverage_inversions),
                "articulationPoints": list(self.articulation_points),
            },
        }


@dataclass(frozen=True)
class Dimension:
    id: str
    theme: str
    claims: Tuple[ClaimRef, ...]
    cohesion: float
    avg_support: float

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "theme": self.theme,
            "claims": [c.to_dict() for c in self.claims],
            "cohesion": _r(self.cohesion),
            "avgSupport": _r(self.avg_support),
        }


@dataclass(frozen=True)
class ParallelData:
    dimensions: Tuple[Dimension, ...]
    gaps: Tuple[str, ...] = ()
    dominant_dimension: Optional[str] = None
    hidden_dimension: Optional[str] = None

    pattern = PrimaryShape.PARALLEL

    def to_dict(self) -> Dict[str, Any]:
        return {
            "pattern": self.pattern.value,
            "dimensions": [d.to_dict() for d in self.dimensions],
            "gaps": list(self.gaps),
            "dominantDimension": self.dominant_dimension,
            "hiddenDimension": self.hidden_dimension,
        }


@dataclass(frozen=True)
class SparseData:
    strongest_signals: Tuple[ClaimRef, ...] = ()
    isolated_claims: Tuple[str, ...] = ()
    signal_strength: float = 0.0
    sparsity_reasons: Tuple[str, ...] = ()
    gaps: Tuple[str, ...] = ()

    pattern = PrimaryShape.SPARSE

    def to_dict(self) -> Dict[str, Any]:
        return {
            "pattern": self.pattern.value,
            "strongestSignals": [s.to_dict() for s in self.strongest_signals],
            "isolatedClaims": list(self.isolated_claims),
            "signalStrength": _r(self.signal_strength),
            "sparsityReasons": list(self.sparsity_reasons),
            "gaps": list(self.gaps),
        }


ShapePayload = Union[ConvergentData, ForkedData, TradeoffShapeData, ParallelData, SparseData]


@dataclass(frozen=True)
class PeakPairRelation:
    a_id: str
    b_id: str
    conflicts: bool = False
    tradeoff: bool = False
    supports: bool = False

    def to_dict(self) -> Dict[str, Any]:
        return {
            "aId": self.a_id,
            "bId": self.b_id,
            "conflicts": self.conflicts,
            "tradeoff": self.tradeoff,
            "supports": self.supports,
        }


@dataclass(frozen=True)
class PeakAnalysis:
    """Support-tier partition plus the relationships among peaks."""
    peaks: Tuple[str, ...] = ()
    hills: Tuple[str, ...] = ()
    floor: Tuple[str, ...] = ()
    relationship: PeakRelationship = PeakRelationship.UNCONNECTED
    pair_relations: Tuple[PeakPairRelation, ...] = ()
    signal_strength: float = 0.0

    def to_dict(self) -> Dict[str, Any]:
        return {
            "peaks": list(self.peaks),
            "hills": list(self.hills),
            "floor": list(self.floor),
            "peakRelationship": self.relationship.value,
            "peakPairRelations": [p.to_dict() for p in self.pair_relations],
            "signalStrength": _r(self.signal_strength),
        }


@dataclass(frozen=True)
class ProblemStructure:
    primary: PrimaryShape
    confidence: float
    signal_strength: float
    patterns: Tuple[SecondaryPattern, ...] = ()
    evidence: Tuple[str, ...] = ()
    data: Optional[ShapePayload] = None
    transfer_question: Optional[str] = None
    peaks: Tuple[str, ...] = ()
    peak_relationship: PeakRelationship = PeakRelationship.UNCONNECTED

    def to_dict(self) -> Dict[str, Any]:
        return {
            "primary": self.primary.value,
            "confidence": _r(self.confidence),
            "signalStrength": _r(self.signal_strength),
            "patterns": [p.to_dict() for p in self.patterns],
            "evidence": list(self.evidence),
            "data": self.data.to_dict() if self.data is not None else None,
            "transferQuestion": self.transfer_question,
            "peaks": list(self.peaks),
            "peakRelationship": self.peak_relationship.value,
        }


# ---------------------------------------------------------------------------
# Insights
# ---------------------------------------------------------------------------

class InsightKind(str, Enum):
    DISSENT = "dissent"
    KEYSTONE = "keystone"
    CHAIN = "chain"
    FRAGILE_FOUNDATION = "fragile_foundation"
    CHALLENGED = "challenged"
    ORPHANED = "orphaned"
    HIGH_LEVERAGE_SINGULAR = "high_leverage_singular"
    EVIDENCE_GAP = "evidence_gap"
    CONSENSUS_CONFLICT = "consensus_conflict"
    CASCADE_RISK = "cascade_risk"
    SUPPORT_OUTLIER = "support_outlier"


class InsightSource(str, Enum):
    PATTERN = "pattern"
    GRAPH = "graph"
    CLAIM_FLAG = "claim_flag"

    @property
    def priority(self) -> int:
        return {"pattern": 0, "graph": 1, "claim_flag": 2}[self.value]


@dataclass(frozen=True)
class InsightKey:
    kind: InsightKind
    claim_id: str


@dataclass(frozen=True)
class InsightClaim:
    id: str
    label: str
    supporters: Tuple[str, ...] = ()

    def to_dict(self) -> Dict[str, Any]:
        return {"id": self.id, "label": self.label, "supporters": list(self.supporters)}


@dataclass(frozen=True)
class InsightData:
    kind: InsightKind
    claim: InsightClaim
    severity: Severity
    source: InsightSource
    metadata: Dict[str, Any] = field(default_factory=dict, hash=False, compare=False)

    @property
    def key(self) -> InsightKey:
        return InsightKey(self.kind, self.claim.id)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "type": self.kind.value,
            "claim": self.claim.to_dict(),
            "metadata": self.metadata,
            "severity": self.severity.value,
            "source": self.source.value,
        }


# ---------------------------------------------------------------------------
# Full result
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class StructuralAnalysis:
    graph: GraphAnalysis
    landscape: LandscapeMetrics
    claims_with_leverage: Tuple[EnrichedClaim, ...]
    ratios: CoreRatios
    patterns: PatternBundle
    ghost_analysis: GhostAnalysis
    shape: ProblemStructure
    input_id: Optional[str] = None

    def claim(self, claim_id: str) -> EnrichedClaim:
        for c in self.claims_with_leverage:
            if c.id == claim_id:
                return c
        raise KeyError(claim_id)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "inputId": self.input_id,
            "graph": self.graph.to_dict(),
            "landscape": self.landscape.to_dict(),
            "claimsWithLeverage": [c.to_dict() for c in self.claims_with_leverage],
            "ratios": self.ratios.to_dict(),
            "patterns": self.patterns.to_dict(),
            "ghostAnalysis": self.ghost_analysis.to_dict(),
            "shape": self.shape.to_dict(),
        }
