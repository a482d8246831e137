"""
Structural Analyzer

Facade wiring the pipeline stages in dependency order:

    GraphBuilder -> TopologyAnalyzer -> Landscape -> ClaimEnricher ->
    CoreRatios -> PatternDetector -> PeakClassifier -> ShapeClassifier

Results are memoized by a content-derived key (bounded LRU). Insight
generation is a separate step, see InsightGenerator.

Usage:
    analyzer = StructuralAnalyzer()
    analysis = analyzer.analyze(AnalysisInput.from_dict(payload))
    shape = analyzer.problem_structure(payload)
"""

from __future__ import annotations

import hashlib
import json
import logging
from collections import OrderedDict
from dataclasses import replace
from typing import Any, Mapping, Optional, Union

from claimgraph.config.settings import AnalysisSettings, DEFAULT_SETTINGS
from claimgraph.core.graph_builder import ClaimGraph, GraphBuilder
from claimgraph.core.models import AnalysisInput
from .claim_enricher import ClaimEnricher
from .core_ratios import compute_core_ratios
from .landscape import compute_landscape
from .models import ProblemStructure, StructuralAnalysis
from .pattern_detector import PatternDetector, analyze_ghosts
from .peaks import PeakClassifier
from .shape_classifier import ShapeClassifier
from .stats import high_support_ids
from .topology_analyzer import TopologyAnalyzer

InputLike = Union[AnalysisInput, Mapping[str, Any]]


def _coerce(data: InputLike) -> AnalysisInput:
    if isinstance(data, AnalysisInput):
        return data
    return AnalysisInput.from_dict(data)


def content_key(data: InputLike) -> str:
    """SHA-256 over the canonical JSON of the input, ignoring its id."""
    payload = _coerce(data).to_dict()
    payload.pop("id", None)
    canonical = json.dumps(payload, sort_keys=True, separators=(",", ":"), default=str)
    return hashlib.sha256(canonical.encode("utf-8")).hexdigest()


# ---------------------------------------------------------------------------
# Stale-result discipline
# ---------------------------------------------------------------------------

class StaleResultGuard:
    """
    Cancelled-if-stale bookkeeping for callers that run analyses lazily.

    The caller announces its current input with ``target``; a result that
    arrives later is only accepted if it was produced for that input.
    """

    def __init__(self) -> None:
        self._current: Optional[str] = None

    @property
    def current(self) -> Optional[str]:
        return self._current

    def target(self, input_id: Optional[str]) -> None:
        self._current = input_id

    def is_current(self, input_id: Optional[str]) -> bool:
        return input_id is not None and input_id == self._current

    def accept(self, result: Any) -> Optional[Any]:
        """Return ``result`` if it belongs to the current input, else None."""
        if self.is_current(getattr(result, "input_id", None)):
            return result
        logging.getLogger(__name__).debug("Discarding stale result for %s", getattr(result, "input_id", None))
        return None


# ---------------------------------------------------------------------------
# Facade
# ---------------------------------------------------------------------------

class StructuralAnalyzer:
    """Runs the claim-graph pipeline."""

    def __init__(self, settings: AnalysisSettings = DEFAULT_SETTINGS) -> None:
        self.settings = settings
        self._builder = GraphBuilder(settings)
        self._topology = TopologyAnalyzer(settings)
        self._enricher = ClaimEnricher(settings)
        self._detector = PatternDetector(settings)
        self._peaks = PeakClassifier(settings)
        self._shape = ShapeClassifier(settings)
        self._cache: "OrderedDict[str, StructuralAnalysis]" = OrderedDict()
        self._logger = logging.getLogger(__name__)

    # ------------------------------------------------------------------
    # Public entry points
    # ------------------------------------------------------------------

    def analyze(self, data: InputLike) -> StructuralAnalysis:
        data = _coerce(data)
        key = content_key(data)
        cached = self._cache.get(key)
        if cached is not None:
            self._cache.move_to_end(key)
            self._logger.debug("Cache hit for %s", key[:12])
            return replace(cached, input_id=data.input_id)

        result = self._run(data)
        self._remember(key, result)
        return result

    def problem_structure(self, data: InputLike) -> ProblemStructure:
        """
        Shape classification only.

        Skips landscape metrics, core ratios, cascade and convergence
        detection; the shape is identical to ``analyze(data).shape``.
        """
        data = _coerce(data)
        cached = self._cache.get(content_key(data))
        if cached is not None:
            return cached.shape

        graph = self._builder.build(data)
        topology = self._topology.analyze(graph, high_support_ids(graph, self.settings))
        claims = self._enricher.enrich(graph, topology)
        bundle = self._detector.detect(
            graph, claims, include_cascades=False, include_convergence=False
        )
        peaks = self._peaks.classify(graph, claims)
        return self._shape.classify(graph, claims, topology, bundle, peaks)

    def clear_cache(self) -> None:
        self._cache.clear()

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _run(self, data: AnalysisInput) -> StructuralAnalysis:
        graph: ClaimGraph = self._builder.build(data)
        topology = self._topology.analyze(graph, high_support_ids(graph, self.settings))
        landscape = compute_landscape(graph)
        claims = self._enricher.enrich(graph, topology)
        ratios = compute_core_ratios(graph, claims, topology)
        bundle = self._detector.detect(graph, claims)
        peaks = self._peaks.classify(graph, claims)
        shape = self._shape.classify(graph, claims, topology, bundle, peaks)

        self._logger.info(
            "Structural analysis [%s]: %d claims, %d edges, primary=%s",
            data.input_id or "-", len(graph), len(graph.edges), shape.primary.value,
        )
        return StructuralAnalysis(
            graph=topology,
            landscape=landscape,
            claims_with_leverage=tuple(claims),
            ratios=ratios,
            patterns=bundle,
            ghost_analysis=analyze_ghosts(graph.ghosts, claims),
            shape=shape,
            input_id=data.input_id,
        )

    def _remember(self, key: str, result: StructuralAnalysis) -> None:
        if self.settings.cache_size <= 0:
            return
        self._cache[key] = result
        self._cache.move_to_end(key)
        while len(self._cache) > self.settings.cache_size:
            self._cache.popitem(last=False)
