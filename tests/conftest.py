"""
Test Configuration and Fixtures
================================

Shared pytest fixtures for the claimgraph test suite.

Usage:
    pytest tests/                    # Run all tests
    pytest tests/ -v                 # Verbose output
    pytest tests/ -k "topology"      # Run only topology tests
"""

import sys
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence

import pytest

sys.path.insert(0, str(Path(__file__).parent.parent))

from claimgraph.core.models import AnalysisInput


# =============================================================================
# Custom Markers
# =============================================================================

def pytest_configure(config):
    """Register custom markers"""
    config.addinivalue_line("markers", "slow: marks tests as slow")
    config.addinivalue_line("markers", "integration: marks integration tests")


# =============================================================================
# Builders
# =============================================================================

def claim(cid: str, supporters: Sequence[Any] = (), **extra) -> Dict[str, Any]:
    data = {"id": cid, "label": cid, "supporters": list(supporters)}
    data.update(extra)
    return data


def edge(source: str, target: str, kind: str = "supports") -> Dict[str, Any]:
    return {"from": source, "to": target, "type": kind}


def make_input(
    claims: List[Dict[str, Any]],
    edges: Optional[List[Dict[str, Any]]] = None,
    model_count: Optional[int] = None,
    **extra,
) -> AnalysisInput:
    raw: Dict[str, Any] = {"claims": claims, "edges": edges or []}
    if model_count is not None:
        raw["model_count"] = model_count
    raw.update(extra)
    return AnalysisInput.from_dict(raw)


# =============================================================================
# Graph Data Fixtures
# =============================================================================

@pytest.fixture
def scenario_raw() -> Dict[str, Any]:
    """
    Eight claims from six sources.

    A, B and C are peaks locked in a tradeoff chain (A-B, B-C); D conflicts
    with C and supports E; F, G and H are isolated single-source claims.
    B's supporters strictly contain C's.
    """
    return {
        "id": "scenario",
        "model_count": 6,
        "claims": [
            claim("A", [1, 2, 3, 4, 5], support_count=5),
            claim("B", [2, 3, 4, 5, 6], support_count=5),
            claim("C", [2, 3, 4, 5], support_count=4),
            claim("D", [1], support_count=1),
            claim("E", [2], support_count=1),
            claim("F", [3], support_count=1),
            claim("G", [6], support_count=1),
            claim("H", [5], support_count=1),
        ],
        "edges": [
            edge("A", "B", "tradeoff"),
            edge("B", "C", "tradeoff"),
            edge("C", "D", "conflicts"),
            edge("D", "E", "supports"),
        ],
    }


@pytest.fixture
def scenario_input(scenario_raw) -> AnalysisInput:
    return AnalysisInput.from_dict(scenario_raw)


@pytest.fixture
def empty_input() -> AnalysisInput:
    """No claims, no edges."""
    return make_input([])


@pytest.fixture
def prerequisite_chain_input() -> AnalysisInput:
    """Linear prerequisite chain A -> B -> C -> D."""
    return make_input(
        [claim(c, [i + 1]) for i, c in enumerate("ABCD")],
        [edge("A", "B", "prerequisite"), edge("B", "C", "prerequisite"), edge("C", "D", "prerequisite")],
    )


@pytest.fixture
def cyclic_input() -> AnalysisInput:
    """Prerequisite cycle A -> B -> C -> A."""
    return make_input(
        [claim("A", [1]), claim("B", [2]), claim("C", [3])],
        [edge("A", "B", "prerequisite"), edge("B", "C", "prerequisite"), edge("C", "A", "prerequisite")],
    )


@pytest.fixture
def articulation_input() -> AnalysisInput:
    """B is a cut vertex: A--B--C, B--D."""
    return make_input(
        [claim(c, [1]) for c in "ABCD"],
        [edge("A", "B"), edge("B", "C"), edge("B", "D")],
    )
