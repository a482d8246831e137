"""
Insight Generator

Turns a StructuralAnalysis into a ranked, de-duplicated list of findings.

Phases (strictly ordered):
    1. one insight per secondary pattern                (source: pattern)
    2. hub fallback keystone when no keystone pattern   (source: graph)
    3. claim-flag insights not already covered          (source: claim_flag)
    4. stable sort by source priority, then severity
    5. de-duplicate by InsightKey(kind, claim_id), first occurrence wins

Usage:
    insights = InsightGenerator().generate(analysis)
"""

from __future__ import annotations

import logging
from typing import Callable, Dict, List, Optional, Set

from claimgraph.core.models import Severity
from .models import (
    ChainData,
    ChallengedData,
    DissentData,
    EnrichedClaim,
    FragileData,
    InsightClaim,
    InsightData,
    InsightKey,
    InsightKind,
    InsightSource,
    KeystoneData,
    OrphanedData,
    SecondaryPattern,
    SecondaryPatternType,
    StructuralAnalysis,
)

#: Hub dominance at which the fallback keystone is reported as medium rather than low.
HUB_DOMINANCE_MEDIUM = 3.0
CASCADE_INSIGHT_MIN_DEPTH = 3

PatternHandler = Callable[["InsightGenerator", SecondaryPattern, Dict[str, EnrichedClaim]], List[InsightData]]


def _claim(c: EnrichedClaim) -> InsightClaim:
    return InsightClaim(c.id, c.label, c.supporters)


class InsightGenerator:
    """Five-phase insight ranking over a finished analysis."""

    def __init__(self) -> None:
        self._logger = logging.getLogger(__name__)

    def generate(self, analysis: StructuralAnalysis) -> List[InsightData]:
        by_id = {c.id: c for c in analysis.claims_with_leverage}
        insights: List[InsightData] = []

        # 1. secondary patterns
        for pattern in analysis.shape.patterns:
            insights.extend(PATTERN_HANDLERS[pattern.type](self, pattern, by_id))

        # 2. hub fallback
        has_keystone = any(
            p.type == SecondaryPatternType.KEYSTONE for p in analysis.shape.patterns
        )
        if not has_keystone:
            hub = self._hub_keystone(analysis, by_id)
            if hub is not None:
                insights.append(hub)

        # 3. claim flags
        insights.extend(self._claim_flag_insights(analysis, by_id))

        # 4. rank
        insights.sort(key=lambda i: (i.source.priority, i.severity.rank))

        # 5. dedupe
        seen: Set[InsightKey] = set()
        ranked: List[InsightData] = []
        for insight in insights:
            if insight.key in seen:
                continue
            seen.add(insight.key)
            ranked.append(insight)

        self._logger.info(
            "Insights: %d generated, %d after de-duplication", len(insights), len(ranked)
        )
        return ranked

    # ------------------------------------------------------------------
    # Phase 1: one handler per secondary pattern type
    # ------------------------------------------------------------------

    def _from_dissent(self, p: SecondaryPattern, by_id: Dict[str, EnrichedClaim]) -> List[InsightData]:
        data: DissentData = p.data
        voice = data.strongest_voice
        if voice is None:
            return []
        return [InsightData(
            kind=InsightKind.DISSENT,
            claim=_claim(by_id[voice.id]),
            severity=p.severity,
            source=InsightSource.PATTERN,
            metadata={
                "insightType": voice.insight_type.value,
                "targets": list(voice.targets),
                "whyItMatters": data.why_it_matters,
                "voiceCount": len(data.voices),
            },
        )]

    def _from_keystone(self, p: SecondaryPattern, by_id: Dict[str, EnrichedClaim]) -> List[InsightData]:
        data: KeystoneData = p.data
        return [InsightData(
            kind=InsightKind.KEYSTONE,
            claim=_claim(by_id[data.keystone.id]),
            severity=p.severity,
            source=InsightSource.PATTERN,
            metadata={
                "dependentCount": data.cascade_size,
                "dependentLabels": [by_id[d].label for d in data.dependents],
            },
        )]

    def _from_chain(self, p: SecondaryPattern, by_id: Dict[str, EnrichedClaim]) -> List[InsightData]:
        data: ChainData = p.data
        root = by_id[data.chain[0]]
        return [InsightData(
            kind=InsightKind.CHAIN,
            claim=_claim(root),
            severity=p.severity,
            source=InsightSource.PATTERN,
            metadata={
                "cascadeDepth": data.length,
                "chain": [by_id[cid].label for cid in data.chain],
                "weakLinks": list(data.weak_links),
            },
        )]

    def _from_fragile(self, p: SecondaryPattern, by_id: Dict[str, EnrichedClaim]) -> List[InsightData]:
        data: FragileData = p.data
        return [
            InsightData(
                kind=InsightKind.FRAGILE_FOUNDATION,
                claim=_claim(by_id[f.weak_foundation.id]),
                severity=p.severity,
                source=InsightSource.PATTERN,
                metadata={
                    "dependentLabels": [f.peak.label],
                    "supporterCount": len(by_id[f.weak_foundation.id].supporters),
                },
            )
            for f in data.fragilities
        ]

    def _from_challenged(self, p: SecondaryPattern, by_id: Dict[str, EnrichedClaim]) -> List[InsightData]:
        data: ChallengedData = p.data
        return [
            InsightData(
                kind=InsightKind.CHALLENGED,
                claim=_claim(by_id[c.target.id]),
                severity=p.severity,
                source=InsightSource.PATTERN,
                metadata={
                    "challengerId": c.challenger.id,
                    "challengerLabel": c.challenger.label,
                    "supporterCount": len(by_id[c.challenger.id].supporters),
                },
            )
            for c in data.challenges
        ]

    def _from_orphaned(self, p: SecondaryPattern, by_id: Dict[str, EnrichedClaim]) -> List[InsightData]:
        data: OrphanedData = p.data
        return [
            InsightData(
                kind=InsightKind.ORPHANED,
                claim=_claim(by_id[o.id]),
                severity=p.severity,
                source=InsightSource.PATTERN,
                metadata={"supporterCount": len(by_id[o.id].supporters), "reason": o.reason},
            )
            for o in data.orphans
        ]

    # ------------------------------------------------------------------
    # Phase 2
    # ------------------------------------------------------------------

    @staticmethod
    def _hub_keystone(
        analysis: StructuralAnalysis, by_id: Dict[str, EnrichedClaim]
    ) -> Optional[InsightData]:
        hub_id = analysis.graph.hub_claim
        if hub_id is None or hub_id not in by_id:
            return None
        hub = by_id[hub_id]
        dominance = analysis.graph.hub_dominance
        return InsightData(
            kind=InsightKind.KEYSTONE,
            claim=_claim(hub),
            severity=Severity.MEDIUM if dominance >= HUB_DOMINANCE_MEDIUM else Severity.LOW,
            source=InsightSource.GRAPH,
            metadata={
                "dependentCount": len(hub.dependents),
                "dependentLabels": [by_id[d].label for d in hub.dependents],
                "hubDominance": round(dominance, 4),
            },
        )

    # ------------------------------------------------------------------
    # Phase 3
    # ------------------------------------------------------------------

    @staticmethod
    def _claim_flag_insights(
        analysis: StructuralAnalysis, by_id: Dict[str, EnrichedClaim]
    ) -> List[InsightData]:
        patterns = analysis.shape.patterns
        dissent_ids: Set[str] = set()
        keystone_ids: Set[str] = set()
        for p in patterns:
            if p.type == SecondaryPatternType.DISSENT:
                dissent_ids.update(v.id for v in p.data.voices)
            elif p.type == SecondaryPatternType.KEYSTONE:
                keystone_ids.add(p.data.keystone.id)

        out: List[InsightData] = []
        for inv in analysis.patterns.leverage_inversions:
            if inv.claim_id in dissent_ids:
                continue
            c = by_id[inv.claim_id]
            out.append(InsightData(
                kind=InsightKind.HIGH_LEVERAGE_SINGULAR,
                claim=_claim(c),
                severity=Severity.HIGH if inv.affected_claims else Severity.MEDIUM,
                source=InsightSource.CLAIM_FLAG,
                metadata={
                    "leverageScore": round(c.leverage, 4),
                    "supporterCount": inv.supporter_count,
                    "reason": inv.reason.value,
                    "dependentLabels": [by_id[a].label for a in inv.affected_claims],
                },
            ))

        for c in analysis.claims_with_leverage:
            if not c.is_evidence_gap:
                continue
            out.append(InsightData(
                kind=InsightKind.EVIDENCE_GAP,
                claim=_claim(c),
                severity=Severity.MEDIUM,
                source=InsightSource.CLAIM_FLAG,
                metadata={
                    "gapScore": round(c.evidence_gap_score, 4),
                    "dependentCount": len(c.dependents),
                    "supporterCount": len(c.supporters),
                },
            ))

        for pair in analysis.patterns.conflicts:
            if not pair.is_both_consensus:
                continue
            out.append(InsightData(
                kind=InsightKind.CONSENSUS_CONFLICT,
                claim=_claim(by_id[pair.claim_a.id]),
                severity=Severity.HIGH,
                source=InsightSource.CLAIM_FLAG,
                metadata={
                    "conflictsWith": pair.claim_b.label,
                    "conflictsWithId": pair.claim_b.id,
                    "dynamics": pair.dynamics,
                },
            ))

        for risk in analysis.patterns.cascade_risks:
            if risk.depth < CASCADE_INSIGHT_MIN_DEPTH or risk.source_id in keystone_ids:
                continue
            out.append(InsightData(
                kind=InsightKind.CASCADE_RISK,
                claim=_claim(by_id[risk.source_id]),
                severity=Severity.MEDIUM,
                source=InsightSource.CLAIM_FLAG,
                metadata={
                    "cascadeDepth": risk.depth,
                    "dependentCount": len(risk.dependent_ids),
                    "dependentLabels": list(risk.dependent_labels),
                },
            ))

        for c in analysis.claims_with_leverage:
            if not c.is_outlier:
                continue
            out.append(InsightData(
                kind=InsightKind.SUPPORT_OUTLIER,
                claim=_claim(c),
                severity=Severity.LOW,
                source=InsightSource.CLAIM_FLAG,
                metadata={
                    "skew": round(c.support_skew, 4),
                    "supporterCount": len(c.supporters),
                },
            ))
        return out


PATTERN_HANDLERS: Dict[SecondaryPatternType, PatternHandler] = {
    SecondaryPatternType.DISSENT: InsightGenerator._from_dissent,
    SecondaryPatternType.KEYSTONE: InsightGenerator._from_keystone,
    SecondaryPatternType.CHAIN: InsightGenerator._from_chain,
    SecondaryPatternType.FRAGILE: InsightGenerator._from_fragile,
    SecondaryPatternType.CHALLENGED: InsightGenerator._from_challenged,
    SecondaryPatternType.ORPHANED: InsightGenerator._from_orphaned,
}

_missing = set(SecondaryPatternType) - set(PATTERN_HANDLERS)
if _missing:
    raise RuntimeError(f"no insight handler for: {sorted(m.value for m in _missing)}")
