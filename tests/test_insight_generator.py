"""
Unit Tests for claimgraph/analysis/insight_generator.py

Tests for:
    - Handler coverage of every secondary pattern type
    - Ranking by source priority then severity
    - De-duplication by (kind, claim)
    - Hub fallback keystone and claim-flag insights
"""

import pytest

from claimgraph.analysis.analyzer import StructuralAnalyzer
from claimgraph.analysis.insight_generator import PATTERN_HANDLERS, InsightGenerator
from claimgraph.analysis.models import InsightKind, InsightSource, SecondaryPatternType
from claimgraph.core.models import AnalysisInput, Severity
from conftest import claim, edge, make_input


def insights_for(data):
    return InsightGenerator().generate(StructuralAnalyzer().analyze(data))


# =============================================================================
# Fixtures
# =============================================================================

@pytest.fixture
def scenario_insights(scenario_input):
    return insights_for(scenario_input)


@pytest.fixture
def consensus_conflict_raw(scenario_raw):
    """Scenario plus a conflict between the peaks A and C."""
    raw = dict(scenario_raw)
    raw["edges"] = scenario_raw["edges"] + [edge("A", "C", "conflicts")]
    return raw


# =============================================================================
# Dispatch
# =============================================================================

class TestDispatch:

    def test_every_pattern_type_has_handler(self):
        assert set(PATTERN_HANDLERS) == set(SecondaryPatternType)

    def test_source_priority_order(self):
        assert InsightSource.PATTERN.priority < InsightSource.GRAPH.priority
        assert InsightSource.GRAPH.priority < InsightSource.CLAIM_FLAG.priority


# =============================================================================
# Ranking
# =============================================================================

class TestRanking:

    def test_scenario_insights(self, scenario_insights):
        kinds = [(i.kind, i.claim.id) for i in scenario_insights]
        assert kinds == [
            (InsightKind.DISSENT, "D"),
            (InsightKind.CHALLENGED, "C"),
            (InsightKind.EVIDENCE_GAP, "D"),
        ]

    def test_keys_unique(self, scenario_insights, consensus_conflict_raw):
        for insights in (scenario_insights, insights_for(AnalysisInput.from_dict(consensus_conflict_raw))):
            keys = [i.key for i in insights]
            assert len(keys) == len(set(keys))

    def test_sorted_by_source_then_severity(self, scenario_insights):
        ranks = [(i.source.priority, i.severity.rank) for i in scenario_insights]
        assert ranks == sorted(ranks)

    def test_hub_fallback_keystone(self):
        data = make_input(
            [claim("R", [1, 2]), claim("A", [1]), claim("B", [2]), claim("C", [3])],
            [edge("R", "A"), edge("R", "B"), edge("R", "C")],
        )
        analysis = StructuralAnalyzer().analyze(data)
        by_id = {c.id: c for c in analysis.claims_with_leverage}
        hub = InsightGenerator._hub_keystone(analysis, by_id)
        assert hub.kind == InsightKind.KEYSTONE
        assert hub.claim.id == "R"
        assert hub.source == InsightSource.GRAPH
        assert hub.severity == Severity.MEDIUM
        assert hub.metadata["dependentLabels"] == ["A", "B", "C"]

    def test_single_supportive_edge_gives_no_hub_keystone(self, scenario_insights):
        assert not any(i.source == InsightSource.GRAPH for i in scenario_insights)

    def test_leverage_inversion_covered_by_dissent(self, scenario_insights):
        assert not any(i.kind == InsightKind.HIGH_LEVERAGE_SINGULAR for i in scenario_insights)

    def test_to_dict(self, scenario_insights):
        d = scenario_insights[0].to_dict()
        assert d["type"] == "dissent"
        assert d["source"] == "pattern"
        assert d["severity"] == "high"
        assert d["claim"]["id"] == "D"


# =============================================================================
# Consensus Conflicts
# =============================================================================

class TestConsensusConflict:

    def test_conflict_between_peaks_reported(self, scenario_insights, consensus_conflict_raw):
        before = [i for i in scenario_insights if i.kind == InsightKind.CONSENSUS_CONFLICT]
        after = [
            i for i in insights_for(AnalysisInput.from_dict(consensus_conflict_raw))
            if i.kind == InsightKind.CONSENSUS_CONFLICT
        ]
        assert before == []
        assert len(after) == 1
        assert after[0].claim.id == "A"
        assert after[0].metadata["conflictsWith"] == "C"
        assert after[0].severity == Severity.HIGH

    def test_tension_does_not_decrease(self, scenario_input, consensus_conflict_raw):
        analyzer = StructuralAnalyzer()
        before = analyzer.analyze(scenario_input).ratios.tension
        after = analyzer.analyze(consensus_conflict_raw).ratios.tension
        assert after >= before


# =============================================================================
# Empty Input
# =============================================================================

class TestEmpty:

    def test_no_insights(self, empty_input):
        assert insights_for(empty_input) == []

    def test_isolated_claims_only(self):
        data = make_input([{"id": c, "supporters": [i]} for i, c in enumerate("AB")])
        insights = insights_for(data)
        assert all(i.kind != InsightKind.KEYSTONE for i in insights)
