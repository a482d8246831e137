"""
Statistics helpers shared by the analysis stages.

Percentile thresholds are population-relative cut-offs used by the claim
flags. Unlike interpolating box-plot quartiles, they pick an actual
observed value:

    threshold(p) = sorted_values[min(floor(n * p), n - 1)]

so "top 30%" means ``value >= threshold(0.7)`` and "bottom 30%" means
``value <= threshold(0.3)``. With an empty population no value qualifies.
"""

import math
from typing import Iterable, List, Optional, Set

import numpy as np

from claimgraph.config.settings import AnalysisSettings
from claimgraph.core.graph_builder import ClaimGraph
from claimgraph.core.models import ClaimData


def support_ratio(claim: ClaimData, model_count: int) -> float:
    if model_count <= 0:
        return 0.0
    return clamp01(claim.support_count / model_count)


def support_ratios(graph: ClaimGraph) -> List[float]:
    return [support_ratio(c, graph.model_count) for c in graph.claims]


def high_support_ids(graph: ClaimGraph, settings: AnalysisSettings) -> Set[str]:
    """Ids in the top ``high_support_pct`` of the population by support ratio."""
    ratios = support_ratios(graph)
    ranker = PercentileRanker(ratios)
    return {
        c.id for c, r in zip(graph.claims, ratios)
        if ranker.is_top(r, settings.high_support_pct)
    }


class PercentileRanker:
    """Sorted snapshot of one metric over the current claim population."""

    def __init__(self, values: Iterable[float]) -> None:
        self._sorted = np.sort(np.asarray(list(values), dtype=float))

    def __len__(self) -> int:
        return int(self._sorted.size)

    def threshold(self, p: float) -> Optional[float]:
        n = self._sorted.size
        if n == 0:
            return None
        idx = min(int(math.floor(n * p)), n - 1)
        return float(self._sorted[max(idx, 0)])

    def is_top(self, value: float, fraction: float) -> bool:
        t = self.threshold(1.0 - fraction)
        return t is not None and value >= t

    def is_bottom(self, value: float, fraction: float) -> bool:
        t = self.threshold(fraction)
        return t is not None and value <= t


def top_n_count(total: int, ratio: float) -> int:
    """Number of items making up the top ``ratio`` share, at least one."""
    return max(1, math.ceil(total * ratio))


def clamp01(value: float) -> float:
    if value != value:  # NaN
        return 0.0
    return max(0.0, min(1.0, float(value)))
