"""
Unit Tests for claimgraph/analysis/analyzer.py

Tests for:
    - Deterministic output for identical input
    - content_key and the bounded result cache
    - problem_structure matching analyze().shape
    - StaleResultGuard
    - Error propagation for malformed input
"""

import json

import pytest

from claimgraph.analysis.analyzer import StaleResultGuard, StructuralAnalyzer, content_key
from claimgraph.config.settings import AnalysisSettings
from claimgraph.core.models import InputValidationError
from conftest import claim, make_input


def as_json(analysis):
    return json.dumps(analysis.to_dict(), sort_keys=True)


# =============================================================================
# Determinism
# =============================================================================

class TestDeterminism:

    def test_identical_input_identical_output(self, scenario_raw):
        first = StructuralAnalyzer().analyze(scenario_raw)
        second = StructuralAnalyzer().analyze(scenario_raw)
        assert as_json(first) == as_json(second)

    def test_problem_structure_matches_analyze(self, scenario_input, prerequisite_chain_input, empty_input):
        for data in (scenario_input, prerequisite_chain_input, empty_input):
            full = StructuralAnalyzer().analyze(data).shape
            quick = StructuralAnalyzer().problem_structure(data)
            assert quick == full

    def test_scenario_summary(self, scenario_input):
        analysis = StructuralAnalyzer().analyze(scenario_input)
        assert analysis.input_id == "scenario"
        assert analysis.graph.component_count == 4
        assert analysis.ratios.fragmentation == pytest.approx(3 / 7)
        assert analysis.shape.primary.value == "constrained"
        assert analysis.claim("D").is_leverage_inversion
        with pytest.raises(KeyError):
            analysis.claim("Z")

    def test_to_dict_is_json_ready(self, scenario_input):
        d = StructuralAnalyzer().analyze(scenario_input).to_dict()
        json.dumps(d)
        assert set(d) == {
            "inputId", "graph", "landscape", "claimsWithLeverage", "ratios",
            "patterns", "ghostAnalysis", "shape",
        }
        assert d["shape"]["primary"] == "constrained"


# =============================================================================
# Cache
# =============================================================================

class TestCache:

    def test_content_key_ignores_id(self, scenario_raw):
        other = dict(scenario_raw, id="renamed")
        assert content_key(scenario_raw) == content_key(other)

    def test_content_key_tracks_content(self, scenario_raw):
        other = dict(scenario_raw, edges=scenario_raw["edges"][:-1])
        assert content_key(scenario_raw) != content_key(other)

    def test_content_key_tracks_supporter_multiplicity(self):
        lopsided = make_input([claim("A", [1, 1, 1, 2])])
        even = make_input([claim("A", [1, 2])])
        assert content_key(lopsided) != content_key(even)

    def test_cache_distinguishes_supporter_multiplicity(self):
        analyzer = StructuralAnalyzer()
        lopsided = analyzer.analyze(make_input([claim("A", [1, 1, 1, 2])]))
        even = analyzer.analyze(make_input([claim("A", [1, 2])]))
        assert lopsided.claim("A").support_skew == pytest.approx(0.75)
        assert even.claim("A").support_skew == pytest.approx(0.5)

    def test_cache_hit_keeps_caller_id(self, scenario_raw):
        analyzer = StructuralAnalyzer()
        first = analyzer.analyze(scenario_raw)
        second = analyzer.analyze(dict(scenario_raw, id="again"))
        assert second.input_id == "again"
        assert second.shape is first.shape

    def test_cache_bounded(self):
        analyzer = StructuralAnalyzer(AnalysisSettings(cache_size=2))
        for i in range(4):
            analyzer.analyze(make_input([claim("A", [i])]))
        assert len(analyzer._cache) == 2

    def test_cache_disabled(self, scenario_input):
        analyzer = StructuralAnalyzer(AnalysisSettings(cache_size=0))
        analyzer.analyze(scenario_input)
        assert len(analyzer._cache) == 0

    def test_clear_cache(self, scenario_input):
        analyzer = StructuralAnalyzer()
        analyzer.analyze(scenario_input)
        analyzer.clear_cache()
        assert len(analyzer._cache) == 0


# =============================================================================
# Stale Results
# =============================================================================

class TestStaleResultGuard:

    def test_accepts_current(self, scenario_input):
        guard = StaleResultGuard()
        guard.target("scenario")
        result = StructuralAnalyzer().analyze(scenario_input)
        assert guard.accept(result) is result

    def test_discards_stale(self, scenario_input):
        guard = StaleResultGuard()
        guard.target("scenario")
        result = StructuralAnalyzer().analyze(scenario_input)
        guard.target("next-input")
        assert guard.accept(result) is None
        assert guard.current == "next-input"

    def test_no_target_accepts_nothing(self):
        assert not StaleResultGuard().is_current(None)


# =============================================================================
# Errors
# =============================================================================

class TestErrors:

    def test_malformed_input_raises(self):
        with pytest.raises(InputValidationError):
            StructuralAnalyzer().analyze({"claims": "not a list"})

    def test_degenerate_input_does_not_raise(self):
        analysis = StructuralAnalyzer().analyze({"claims": [{"id": "A"}], "edges": [{"from": "A", "to": "A"}]})
        assert analysis.graph.component_count == 1
