"""
Core input types and the graph builder.
"""

from .models import (
    AnalysisInput,
    ClaimCategory,
    ClaimData,
    ClaimRole,
    EdgeData,
    EdgeKind,
    EdgeRecord,
    InputValidationError,
    Severity,
)
from .graph_builder import ClaimGraph, GraphBuilder, normalize_edge_kind

__all__ = [
    "AnalysisInput",
    "ClaimCategory",
    "ClaimData",
    "ClaimRole",
    "EdgeData",
    "EdgeKind",
    "EdgeRecord",
    "InputValidationError",
    "Severity",
    "ClaimGraph",
    "GraphBuilder",
    "normalize_edge_kind",
]
