"""
Unit Tests for peaks, secondary patterns and shape classification

Tests for:
    - PeakClassifier: tier partition, signal strength, peak relations
    - SecondaryPatternDetector: dissent, keystone, chain, fragile,
      challenged, orphaned
    - ShapeClassifier: primary decision, confidence, evidence, payloads
      and transfer questions
"""

import pytest

from claimgraph.analysis.analyzer import StructuralAnalyzer
from claimgraph.analysis.claim_enricher import ClaimEnricher
from claimgraph.analysis.models import (
    ChainData,
    ConvergentData,
    ForkedData,
    ParallelData,
    PatternBundle,
    PeakRelationship,
    PrimaryShape,
    SecondaryPattern,
    SecondaryPatternType,
    SparseData,
    TradeoffShapeData,
    VoiceType,
)
from claimgraph.analysis.peaks import PeakClassifier, signal_components, signal_strength
from claimgraph.analysis.secondary_patterns import SecondaryPatternDetector
from claimgraph.analysis.shape_builders import (
    DEFAULT_TRANSFER_QUESTIONS,
    ShapeContext,
    build_constrained,
    build_forked,
    build_shape_data,
)
from claimgraph.analysis.stats import high_support_ids
from claimgraph.analysis.topology_analyzer import TopologyAnalyzer
from claimgraph.config.settings import AnalysisSettings
from claimgraph.core.graph_builder import GraphBuilder
from claimgraph.core.models import Severity
from conftest import claim, edge, make_input


def shape_of(data):
    return StructuralAnalyzer().problem_structure(data)


def peaks_of(data):
    graph = GraphBuilder().build(data)
    topology = TopologyAnalyzer().analyze(graph, high_support_ids(graph, AnalysisSettings()))
    claims = ClaimEnricher().enrich(graph, topology)
    return graph, topology, claims, PeakClassifier().classify(graph, claims)


# =============================================================================
# Fixtures
# =============================================================================

@pytest.fixture
def forked_input():
    """Two peaks in direct conflict, one floor claim."""
    return make_input(
        [claim("A", [1, 2, 3]), claim("B", [2, 3, 4]), claim("C", [1])],
        [edge("A", "B", "conflicts")],
        model_count=4,
    )


@pytest.fixture
def parallel_input():
    """Two peaks, each leading its own component."""
    return make_input(
        [claim("A", [1, 2, 3]), claim("B", [2, 3, 4]), claim("C", [1]), claim("D", [4])],
        [edge("A", "C"), edge("B", "D")],
        model_count=4,
    )


@pytest.fixture
def convergent_input():
    """Two peaks reinforcing each other; C is a conditional that feeds A."""
    return make_input(
        [claim("A", [1, 2, 3]), claim("B", [2, 3, 4]), claim("C", [1], category="conditional")],
        [edge("B", "A"), edge("C", "A")],
        model_count=4,
    )


@pytest.fixture
def sparse_input():
    """Five single-source claims, no relationships."""
    return make_input([claim(c, [i]) for i, c in enumerate("ABCDE")])


@pytest.fixture
def fragile_input():
    """Peaks A and B both rest on the floor-tier prerequisite F; F attacks nothing."""
    return make_input(
        [claim("A", [1, 2, 3]), claim("B", [2, 3, 4]), claim("F", [1])],
        [edge("F", "A", "prerequisite"), edge("F", "B", "prerequisite")],
        model_count=4,
    )


# =============================================================================
# Peaks
# =============================================================================

class TestPeaks:

    def test_partition_is_complete_and_disjoint(self, scenario_input):
        _, _, claims, peaks = peaks_of(scenario_input)
        tiers = list(peaks.peaks) + list(peaks.hills) + list(peaks.floor)
        assert sorted(tiers) == sorted(c.id for c in claims)
        assert peaks.peaks == ("A", "B", "C")
        assert peaks.floor == ("D", "E", "F", "G", "H")

    def test_tier_boundaries(self):
        classifier = PeakClassifier()
        assert classifier.tier(0.51) == "peak"
        assert classifier.tier(0.5) == "hill"
        assert classifier.tier(0.25) == "floor"

    def test_signal_strength(self, scenario_input):
        graph = GraphBuilder().build(scenario_input)
        edge_s, support_s, coverage_s = signal_components(graph)
        assert edge_s == 1.0
        assert support_s == pytest.approx(0.129375 * 5)
        assert coverage_s == 1.0
        assert signal_strength(graph) == pytest.approx(0.4 + 0.3 * 0.646875 + 0.3)

    def test_empty_signal_is_zero(self, empty_input):
        assert signal_strength(GraphBuilder().build(empty_input)) == 0.0

    def test_peak_relationship(self, scenario_input, forked_input, convergent_input, parallel_input):
        assert peaks_of(scenario_input)[3].relationship == PeakRelationship.TRADEOFF
        assert peaks_of(forked_input)[3].relationship == PeakRelationship.CONFLICTING
        assert peaks_of(convergent_input)[3].relationship == PeakRelationship.SUPPORTING
        assert peaks_of(parallel_input)[3].relationship == PeakRelationship.UNCONNECTED


# =============================================================================
# Secondary Patterns
# =============================================================================

class TestSecondaryPatterns:

    def detect(self, data):
        graph, topology, claims, peaks = peaks_of(data)
        found = SecondaryPatternDetector().detect(graph, claims, peaks, topology)
        return {p.type: p for p in found}

    def test_scenario(self, scenario_input):
        found = self.detect(scenario_input)
        assert set(found) == {SecondaryPatternType.DISSENT, SecondaryPatternType.CHALLENGED}

        dissent = found[SecondaryPatternType.DISSENT]
        assert dissent.severity == Severity.HIGH
        assert dissent.data.strongest_voice.id == "D"
        assert dissent.data.strongest_voice.insight_type == VoiceType.LEVERAGE_INVERSION
        assert dissent.data.strongest_voice.targets == ("C",)

        challenged = found[SecondaryPatternType.CHALLENGED]
        assert challenged.severity == Severity.MEDIUM
        assert challenged.data.challenges[0].challenger.id == "D"
        assert challenged.data.challenges[0].target.id == "C"

    def test_fragile(self, fragile_input):
        fragile = self.detect(fragile_input)[SecondaryPatternType.FRAGILE]
        assert fragile.severity == Severity.HIGH
        assert {f.peak.id for f in fragile.data.fragilities} == {"A", "B"}
        assert all(f.weak_foundation.id == "F" for f in fragile.data.fragilities)

    def test_keystone(self, fragile_input):
        keystone = self.detect(fragile_input)[SecondaryPatternType.KEYSTONE]
        assert keystone.data.keystone.id == "F"
        assert keystone.data.cascade_size == 2
        assert keystone.severity == Severity.HIGH

    def test_chain(self, prerequisite_chain_input):
        chain = self.detect(prerequisite_chain_input)[SecondaryPatternType.CHAIN]
        assert chain.data.chain == ("A", "B", "C", "D")
        assert chain.data.length == 4
        assert chain.severity == Severity.HIGH

    def test_orphaned(self):
        data = make_input(
            [claim("A", [1, 2, 3]), claim("B", [4]), claim("C", [4])],
            [edge("B", "C")],
            model_count=4,
        )
        orphaned = self.detect(data)[SecondaryPatternType.ORPHANED]
        assert [o.id for o in orphaned.data.orphans] == ["A"]

    def test_payload_type_enforced(self):
        with pytest.raises(ValueError):
            SecondaryPattern(
                type=SecondaryPatternType.KEYSTONE,
                severity=Severity.HIGH,
                data=ChainData(chain=("A", "B", "C"), length=3),
            )


# =============================================================================
# Shape Classification
# =============================================================================

class TestShapeClassifier:

    def test_scenario_is_constrained(self, scenario_input):
        shape = shape_of(scenario_input)
        assert shape.primary == PrimaryShape.CONSTRAINED
        assert shape.peaks == ("A", "B", "C")
        assert shape.signal_strength == pytest.approx(0.8940625)
        assert shape.confidence == pytest.approx(0.8940625)

    def test_scenario_payload(self, scenario_input):
        data = shape_of(scenario_input).data
        assert isinstance(data, TradeoffShapeData)
        assert len(data.tradeoffs) == 2
        assert len(data.dominated_options) == 1
        dominated = data.dominated_options[0]
        assert (dominated.dominated, dominated.dominated_by) == ("C", "B")
        assert dominated.reason == "All sources backing C also back B"

    def test_scenario_transfer_question(self, scenario_input):
        shape = shape_of(scenario_input)
        assert shape.transfer_question == (
            "What are you optimizing for: A or B? The structure cannot maximize both."
        )

    def test_scenario_evidence(self, scenario_input):
        evidence = shape_of(scenario_input).evidence
        assert evidence[-1] == "Signal strength: 89%"
        assert "D holds the structure together on thin support" in evidence
        assert any("2 tradeoff" in line for line in evidence)

    def test_forked(self, forked_input):
        shape = shape_of(forked_input)
        assert shape.primary == PrimaryShape.FORKED
        assert isinstance(shape.data, ForkedData)
        assert shape.data.central_conflict.kind == "individual"
        assert shape.transfer_question == (
            "Which matters more to you: A or B? The choice determines the path."
        )

    def test_convergent(self, convergent_input):
        shape = shape_of(convergent_input)
        assert shape.primary == PrimaryShape.CONVERGENT
        assert isinstance(shape.data, ConvergentData)
        assert shape.data.floor_assumptions == ("C",)
        assert shape.transfer_question.startswith("For the consensus to hold, C must be true.")

    def test_parallel(self, parallel_input):
        shape = shape_of(parallel_input)
        assert shape.primary == PrimaryShape.PARALLEL
        assert isinstance(shape.data, ParallelData)
        assert len(shape.data.dimensions) == 2
        assert shape.transfer_question == DEFAULT_TRANSFER_QUESTIONS[PrimaryShape.PARALLEL]

    def test_sparse(self, sparse_input):
        shape = shape_of(sparse_input)
        assert shape.primary == PrimaryShape.SPARSE
        assert isinstance(shape.data, SparseData)
        assert len(shape.data.strongest_signals) == 3
        assert shape.data.isolated_claims == ("A", "B", "C", "D", "E")

    def test_empty_is_sparse_with_floor_confidence(self, empty_input):
        shape = shape_of(empty_input)
        assert shape.primary == PrimaryShape.SPARSE
        assert shape.confidence == AnalysisSettings().min_confidence
        assert shape.evidence == ("No claims were supplied", "Signal strength: 0%")
        assert shape.transfer_question

    def test_confidence_in_unit_interval(self, scenario_input, forked_input, parallel_input, sparse_input):
        for data in (scenario_input, forked_input, parallel_input, sparse_input):
            shape = shape_of(data)
            assert AnalysisSettings().min_confidence <= shape.confidence <= 1.0
            assert shape.evidence[-1].startswith("Signal strength:")


# =============================================================================
# Payload Builders
# =============================================================================

class TestShapeBuilders:

    def context(self, data, bundle=None):
        graph, topology, claims, peaks = peaks_of(data)
        return ShapeContext(graph, claims, topology, bundle or PatternBundle(), list(peaks.peaks), 0.5)

    def test_forked_requires_conflict(self, scenario_input):
        with pytest.raises(ValueError):
            build_forked(self.context(scenario_input))

    def test_constrained_requires_tradeoff(self, scenario_input):
        with pytest.raises(ValueError):
            build_constrained(self.context(scenario_input))

    def test_forked_without_conflicts_falls_back_to_convergent(self, scenario_input):
        data = build_shape_data(PrimaryShape.FORKED, self.context(scenario_input))
        assert isinstance(data, ConvergentData)

    def test_constrained_without_tradeoffs_falls_back_to_sparse(self, scenario_input):
        data = build_shape_data(PrimaryShape.CONSTRAINED, self.context(scenario_input))
        assert isinstance(data, SparseData)
