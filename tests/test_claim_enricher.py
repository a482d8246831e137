"""
Unit Tests for claimgraph/analysis/claim_enricher.py and stats.py

Tests for:
    - PercentileRanker thresholds (actual observed values, no interpolation)
    - Support ratios and the high-support set
    - Leverage factors, keystone and evidence gap scores
    - Population-relative claim flags
"""

import pytest

from claimgraph.analysis.claim_enricher import ClaimEnricher, downstream_distances, support_skew
from claimgraph.analysis.stats import PercentileRanker, clamp01, high_support_ids, top_n_count
from claimgraph.analysis.topology_analyzer import TopologyAnalyzer
from claimgraph.config.settings import AnalysisSettings
from claimgraph.core.graph_builder import GraphBuilder
from claimgraph.core.models import ClaimData
from conftest import claim, edge, make_input


def enrich(data, settings=None):
    settings = settings or AnalysisSettings()
    graph = GraphBuilder(settings).build(data)
    topology = TopologyAnalyzer(settings).analyze(graph, high_support_ids(graph, settings))
    return graph, {c.id: c for c in ClaimEnricher(settings).enrich(graph, topology)}


# =============================================================================
# Percentiles
# =============================================================================

class TestPercentileRanker:

    def test_threshold_picks_observed_value(self):
        ranker = PercentileRanker([5, 1, 4, 2, 3])
        assert ranker.threshold(0.0) == 1
        assert ranker.threshold(0.5) == 3
        assert ranker.threshold(1.0) == 5

    def test_top_and_bottom(self):
        ranker = PercentileRanker([1, 2, 3, 4, 5, 6, 7, 8, 9, 10])
        assert ranker.is_top(8, 0.3)
        assert not ranker.is_top(7, 0.3)
        assert ranker.is_bottom(4, 0.3)
        assert not ranker.is_bottom(5, 0.3)

    def test_empty_population_never_qualifies(self):
        ranker = PercentileRanker([])
        assert ranker.threshold(0.5) is None
        assert not ranker.is_top(1.0, 0.3)
        assert not ranker.is_bottom(0.0, 0.3)

    def test_top_n_count_at_least_one(self):
        assert top_n_count(8, 0.3) == 3
        assert top_n_count(1, 0.3) == 1

    def test_clamp01(self):
        assert clamp01(1.7) == 1.0
        assert clamp01(-0.2) == 0.0
        assert clamp01(float("nan")) == 0.0


# =============================================================================
# Scores
# =============================================================================

class TestScores:

    def test_support_ratio(self, scenario_input):
        _, claims = enrich(scenario_input)
        assert claims["A"].support_ratio == pytest.approx(5 / 6)
        assert claims["C"].support_ratio == pytest.approx(4 / 6)
        assert claims["F"].support_ratio == pytest.approx(1 / 6)

    def test_support_ratio_zero_without_sources(self):
        _, claims = enrich(make_input([claim("A")], model_count=0))
        assert claims["A"].support_ratio == 0.0

    def test_support_ratio_capped_when_count_exceeds_models(self):
        data = make_input(
            [claim("A", [1, 2, 3], support_count=9), claim("B", [1])],
            model_count=6,
        )
        _, claims = enrich(data)
        assert claims["A"].support_ratio == 1.0
        assert all(0.0 <= c.support_ratio <= 1.0 for c in claims.values())

    def test_downstream_distances(self, prerequisite_chain_input):
        graph = GraphBuilder().build(prerequisite_chain_input)
        assert downstream_distances(graph, 0) == {1: 1, 2: 2, 3: 3}
        assert downstream_distances(graph, 3) == {}

    def test_leverage_factors(self, scenario_input):
        _, claims = enrich(scenario_input)
        d = claims["D"].leverage_factors
        assert d.structural == 1.0
        assert d.reach == 1.0
        assert d.connectivity == pytest.approx(0.25 * 2 + 1.5)
        assert d.role == 0.5
        assert claims["D"].leverage == pytest.approx(4.5)

    def test_leverage_factor_keys(self, scenario_input):
        _, claims = enrich(scenario_input)
        factors = claims["D"].to_dict()["leverageFactors"]
        assert set(factors) == {"structuralWeight", "reachWeight", "connectivityWeight", "roleWeight"}

    def test_evidence_gap_score(self, prerequisite_chain_input):
        _, claims = enrich(prerequisite_chain_input)
        assert claims["A"].evidence_gap_score == pytest.approx(3.0)
        assert claims["D"].evidence_gap_score == 0.0

    def test_support_skew(self):
        c = ClaimData.from_dict(claim("A", [1, 1, 1, 2]))
        assert support_skew(c) == pytest.approx(0.75)

    def test_chain_depth_and_dependents(self, prerequisite_chain_input):
        _, claims = enrich(prerequisite_chain_input)
        assert claims["D"].chain_depth == 3
        assert claims["A"].dependents == ("B", "C", "D")
        assert claims["A"].is_chain_root


# =============================================================================
# Flags
# =============================================================================

class TestFlags:

    def test_high_support(self, scenario_input):
        _, claims = enrich(scenario_input)
        high = {cid for cid, c in claims.items() if c.is_high_support}
        assert high == {"A", "B", "C"}

    def test_leverage_inversion(self, scenario_input):
        _, claims = enrich(scenario_input)
        assert claims["D"].is_leverage_inversion
        assert not claims["C"].is_leverage_inversion

    def test_keystone_requires_dependents(self, scenario_input):
        _, claims = enrich(scenario_input)
        assert claims["D"].is_keystone
        assert not claims["E"].is_keystone

    def test_evidence_gap(self, scenario_input):
        _, claims = enrich(scenario_input)
        gaps = {cid for cid, c in claims.items() if c.is_evidence_gap}
        assert gaps == {"D"}

    def test_outlier_needs_two_supporters(self, scenario_input):
        _, claims = enrich(scenario_input)
        assert not any(claims[c].is_outlier for c in "DEFGH")

    def test_outlier_ranked_against_all_claims(self, scenario_input):
        _, claims = enrich(scenario_input)
        assert not any(c.is_outlier for c in claims.values())

    def test_outlier_flags_lopsided_support(self):
        data = make_input([
            claim("A", [1, 1, 1, 2]),
            claim("B", [1, 2]),
            claim("C", [2, 3]),
            claim("D", [3, 4]),
            claim("E", [1, 4]),
        ])
        _, claims = enrich(data)
        assert {cid for cid, c in claims.items() if c.is_outlier} == {"A"}

    def test_even_support_is_never_an_outlier(self):
        data = make_input([claim(c, [1, 2]) for c in "ABCD"])
        _, claims = enrich(data)
        assert not any(c.is_outlier for c in claims.values())

    def test_contested(self, scenario_input):
        _, claims = enrich(scenario_input)
        assert claims["D"].is_contested
        assert not claims["C"].is_contested

    def test_challenger(self):
        data = make_input(
            [
                claim("A", [1, 2, 3]),
                claim("B", [1, 2, 3]),
                claim("X", [4], role="challenger"),
                claim("Y", [4], role="challenger"),
            ],
            [edge("X", "A", "conflicts")],
            model_count=4,
        )
        _, claims = enrich(data)
        assert claims["X"].is_challenger
        assert not claims["Y"].is_challenger

    def test_conditional_and_isolated(self):
        _, claims = enrich(make_input([claim("A", [1], category="conditional")]))
        assert claims["A"].is_conditional
        assert claims["A"].is_isolated

    def test_flags_recomputed_per_population(self, scenario_raw):
        _, before = enrich(make_input(scenario_raw["claims"], scenario_raw["edges"], model_count=6))
        fewer = [c for c in scenario_raw["claims"] if c["id"] not in ("F", "G", "H")]
        _, after = enrich(make_input(fewer, scenario_raw["edges"], model_count=6))
        assert before["C"].is_high_support
        assert not after["C"].is_high_support

    def test_empty(self, empty_input):
        _, claims = enrich(empty_input)
        assert claims == {}
