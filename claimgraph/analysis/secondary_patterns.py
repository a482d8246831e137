"""
Secondary Pattern Detection

Patterns detected independently of the primary shape, each with its own
severity:

    dissent     minority claims with outsized argumentative weight
    keystone    the claim most others depend on
    chain       a long prerequisite sequence, weak links flagged
    fragile     a peak resting on a floor-tier prerequisite
    challenged  a low-support claim directly attacking a peak
    orphaned    high support but no structural connections
"""

from __future__ import annotations

from typing import Dict, List, Optional, Sequence, Set

from claimgraph.config.settings import AnalysisSettings, DEFAULT_SETTINGS
from claimgraph.core.graph_builder import ClaimGraph
from claimgraph.core.models import ClaimRole, EdgeKind, Severity
from .models import (
    Challenge,
    ChallengedData,
    ChainData,
    DissentData,
    DissentVoice,
    EnrichedClaim,
    FragileData,
    Fragility,
    GraphAnalysis,
    KeystoneData,
    Orphan,
    OrphanedData,
    PeakAnalysis,
    SecondaryPattern,
    SecondaryPatternType,
    VoiceType,
)


class SecondaryPatternDetector:
    def __init__(self, settings: AnalysisSettings = DEFAULT_SETTINGS) -> None:
        self.settings = settings

    def detect(
        self,
        graph: ClaimGraph,
        claims: Sequence[EnrichedClaim],
        peaks: PeakAnalysis,
        topology: GraphAnalysis,
    ) -> List[SecondaryPattern]:
        by_id = {c.id: c for c in claims}
        found = [
            self._dissent(graph, claims, peaks, by_id),
            self._keystone(claims),
            self._chain(topology, peaks),
            self._fragile(graph, peaks, by_id),
            self._challenged(graph, claims, peaks, by_id),
            self._orphaned(claims, peaks),
        ]
        return [p for p in found if p is not None]

    # ------------------------------------------------------------------
    # Dissent
    # ------------------------------------------------------------------

    def _dissent(
        self,
        graph: ClaimGraph,
        claims: Sequence[EnrichedClaim],
        peaks: PeakAnalysis,
        by_id: Dict[str, EnrichedClaim],
    ) -> Optional[SecondaryPattern]:
        if not peaks.peaks:
            return None
        peak_set = set(peaks.peaks)
        peak_categories = {by_id[p].category for p in peaks.peaks}

        voices: List[DissentVoice] = []
        for c in claims:
            if c.id in peak_set or c.is_high_support:
                continue
            voice_type = self._voice_type(c, peak_categories)
            if voice_type is None:
                continue
            voices.append(DissentVoice(
                id=c.id,
                label=c.label,
                text=c.text,
                support_ratio=c.support_ratio,
                insight_type=voice_type,
                targets=tuple(self._peak_targets(graph, c, peak_set)),
                insight_score=c.leverage * (1.0 - c.support_ratio),
            ))
        if not voices:
            return None

        voices.sort(key=lambda v: -v.insight_score)
        strongest = voices[0]
        suppressed = tuple(dict.fromkeys(
            by_id[v.id].category for v in voices if by_id[v.id].category not in peak_categories
        ))

        if strongest.insight_type in (VoiceType.LEVERAGE_INVERSION, VoiceType.EXPLICIT_CHALLENGER):
            severity = Severity.HIGH
        elif len(voices) >= 2:
            severity = Severity.MEDIUM
        else:
            severity = Severity.LOW

        return SecondaryPattern(
            type=SecondaryPatternType.DISSENT,
            severity=severity,
            data=DissentData(
                voices=tuple(voices),
                strongest_voice=strongest,
                why_it_matters=self._why_it_matters(strongest, by_id),
                suppressed_dimensions=suppressed,
            ),
        )

    @staticmethod
    def _voice_type(c: EnrichedClaim, peak_categories: Set[str]) -> Optional[VoiceType]:
        if c.is_leverage_inversion:
            return VoiceType.LEVERAGE_INVERSION
        if c.is_challenger or c.role == ClaimRole.CHALLENGER.value:
            return VoiceType.EXPLICIT_CHALLENGER
        if c.category not in peak_categories:
            return VoiceType.UNIQUE_PERSPECTIVE
        if c.is_conditional:
            return VoiceType.EDGE_CASE
        return None

    @staticmethod
    def _peak_targets(graph: ClaimGraph, c: EnrichedClaim, peak_set: Set[str]) -> List[str]:
        idx = graph.index_of[c.id]
        nbrs = graph.out_neighbors(idx, EdgeKind.CONFLICTS, EdgeKind.PREREQUISITE)
        nbrs += graph.in_neighbors(idx, EdgeKind.CONFLICTS)
        targets = [graph.claims[j].id for j in sorted(set(nbrs))]
        if c.challenges and c.challenges in graph.index_of:
            targets.append(c.challenges)
        return [t for t in dict.fromkeys(targets) if t in peak_set]

    @staticmethod
    def _why_it_matters(voice: DissentVoice, by_id: Dict[str, EnrichedClaim]) -> str:
        if voice.insight_type == VoiceType.LEVERAGE_INVERSION:
            return f"{voice.label} carries structural weight far beyond its support"
        if voice.insight_type == VoiceType.EXPLICIT_CHALLENGER:
            if voice.targets:
                names = ", ".join(by_id[t].label for t in voice.targets)
                return f"{voice.label} directly contests {names}"
            return f"{voice.label} contests the prevailing position"
        if voice.insight_type == VoiceType.UNIQUE_PERSPECTIVE:
            return f"{voice.label} raises a dimension the leading claims do not address"
        return f"{voice.label} marks a condition under which the consensus may not hold"

    # ------------------------------------------------------------------
    # Keystone / chain
    # ------------------------------------------------------------------

    @staticmethod
    def _keystone(claims: Sequence[EnrichedClaim]) -> Optional[SecondaryPattern]:
        candidates = [c for c in claims if c.is_keystone and len(c.dependents) >= 2]
        if not candidates:
            return None
        best = max(candidates, key=lambda c: len(c.dependents))
        return SecondaryPattern(
            type=SecondaryPatternType.KEYSTONE,
            severity=Severity.MEDIUM if best.is_high_support else Severity.HIGH,
            data=KeystoneData(
                keystone=best.ref(),
                dependents=best.dependents,
                cascade_size=len(best.dependents),
            ),
        )

    def _chain(self, topology: GraphAnalysis, peaks: PeakAnalysis) -> Optional[SecondaryPattern]:
        chain = topology.longest_chain
        if len(chain) < self.settings.chain_min_length:
            return None
        floor = set(peaks.floor)
        weak = tuple(cid for cid in chain if cid in floor)
        return SecondaryPattern(
            type=SecondaryPatternType.CHAIN,
            severity=Severity.HIGH if weak else Severity.MEDIUM,
            data=ChainData(chain=chain, length=len(chain), weak_links=weak),
        )

    # ------------------------------------------------------------------
    # Fragile / challenged / orphaned
    # ------------------------------------------------------------------

    @staticmethod
    def _fragile(
        graph: ClaimGraph, peaks: PeakAnalysis, by_id: Dict[str, EnrichedClaim]
    ) -> Optional[SecondaryPattern]:
        floor = set(peaks.floor)
        fragilities: List[Fragility] = []
        for pid in peaks.peaks:
            idx = graph.index_of[pid]
            for j in dict.fromkeys(graph.in_neighbors(idx, EdgeKind.PREREQUISITE)):
                foundation = graph.claims[j].id
                if foundation in floor:
                    fragilities.append(Fragility(by_id[pid].ref(), by_id[foundation].ref()))
        if not fragilities:
            return None
        return SecondaryPattern(
            type=SecondaryPatternType.FRAGILE,
            severity=Severity.HIGH if len(fragilities) >= 2 else Severity.MEDIUM,
            data=FragileData(fragilities=tuple(fragilities)),
        )

    @staticmethod
    def _challenged(
        graph: ClaimGraph,
        claims: Sequence[EnrichedClaim],
        peaks: PeakAnalysis,
        by_id: Dict[str, EnrichedClaim],
    ) -> Optional[SecondaryPattern]:
        peak_set = set(peaks.peaks)
        floor = set(peaks.floor)
        challenges: List[Challenge] = []
        for c in claims:
            if c.id in peak_set:
                continue
            if c.id not in floor and not c.is_challenger:
                continue
            idx = graph.index_of[c.id]
            nbrs = graph.out_neighbors(idx, EdgeKind.CONFLICTS) + graph.in_neighbors(idx, EdgeKind.CONFLICTS)
            for j in sorted(set(nbrs)):
                target = graph.claims[j].id
                if target in peak_set:
                    challenges.append(Challenge(c.ref(), by_id[target].ref()))
        if not challenges:
            return None
        return SecondaryPattern(
            type=SecondaryPatternType.CHALLENGED,
            severity=Severity.HIGH if len(challenges) >= 2 else Severity.MEDIUM,
            data=ChallengedData(challenges=tuple(challenges)),
        )

    @staticmethod
    def _orphaned(claims: Sequence[EnrichedClaim], peaks: PeakAnalysis) -> Optional[SecondaryPattern]:
        peak_set = set(peaks.peaks)
        orphans = tuple(
            Orphan(
                id=c.id,
                label=c.label,
                support_ratio=c.support_ratio,
                reason="High support but no structural connections",
            )
            for c in claims
            if c.is_isolated and (c.is_high_support or c.id in peak_set)
        )
        if not orphans:
            return None
        return SecondaryPattern(
            type=SecondaryPatternType.ORPHANED,
            severity=Severity.MEDIUM,
            data=OrphanedData(orphans=orphans),
        )
