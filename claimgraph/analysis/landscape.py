"""
Landscape Metrics

Aggregate counts across the claim population: claim and source counts,
dominant category/role and how far support converges on the plurality
source set.
"""

from __future__ import annotations

import logging
from collections import Counter
from typing import Iterable, Tuple

from claimgraph.core.graph_builder import ClaimGraph
from claimgraph.core.models import ClaimCategory, ClaimRole
from .models import LandscapeMetrics


def _mode(values: Iterable[str], default: str) -> Tuple[str, Tuple[Tuple[str, int], ...]]:
    counts = Counter()
    order = []
    for v in values:
        if v not in counts:
            order.append(v)
        counts[v] += 1
    if not counts:
        return default, ()
    top = max(counts.values())
    dominant = next(v for v in order if counts[v] == top)
    return dominant, tuple((v, counts[v]) for v in order)


def compute_landscape(graph: ClaimGraph) -> LandscapeMetrics:
    claims = graph.claims
    if not claims:
        return LandscapeMetrics(model_count=graph.model_count)

    dominant_category, categories = _mode(
        (c.category for c in claims), ClaimCategory.PRESCRIPTIVE.value
    )
    dominant_role, roles = _mode((c.role for c in claims), ClaimRole.ANCHOR.value)

    plurality = max(claims, key=lambda c: c.support_count)
    plurality_sources = set(plurality.supporters)
    overlapping = sum(1 for c in claims if plurality_sources.intersection(c.supporters))

    metrics = LandscapeMetrics(
        claim_count=len(claims),
        model_count=graph.model_count,
        dominant_category=dominant_category,
        category_distribution=categories,
        dominant_role=dominant_role,
        role_distribution=roles,
        convergence_ratio=overlapping / len(claims),
    )
    logging.getLogger(__name__).debug(
        "Landscape: %d claims from %d sources, dominant=%s/%s",
        metrics.claim_count, metrics.model_count, dominant_category, dominant_role,
    )
    return metrics
