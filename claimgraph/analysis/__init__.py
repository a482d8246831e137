"""
Claim-graph analysis pipeline.
"""

from .analyzer import StaleResultGuard, StructuralAnalyzer, content_key
from .claim_enricher import ClaimEnricher
from .core_ratios import compute_core_ratios
from .insight_generator import InsightGenerator
from .landscape import compute_landscape
from .models import (
    CoreRatios,
    EnrichedClaim,
    GraphAnalysis,
    InsightData,
    InsightKey,
    InsightKind,
    InsightSource,
    LandscapeMetrics,
    PatternBundle,
    PrimaryShape,
    ProblemStructure,
    SecondaryPattern,
    SecondaryPatternType,
    StructuralAnalysis,
)
from .pattern_detector import PatternDetector, analyze_ghosts
from .peaks import PeakClassifier, signal_strength
from .shape_classifier import ShapeClassifier
from .topology_analyzer import TopologyAnalyzer, longest_path_depths, prerequisite_depths

__all__ = [
    "StructuralAnalyzer",
    "StaleResultGuard",
    "content_key",
    "ClaimEnricher",
    "compute_core_ratios",
    "InsightGenerator",
    "compute_landscape",
    "CoreRatios",
    "EnrichedClaim",
    "GraphAnalysis",
    "InsightData",
    "InsightKey",
    "InsightKind",
    "InsightSource",
    "LandscapeMetrics",
    "PatternBundle",
    "PrimaryShape",
    "ProblemStructure",
    "SecondaryPattern",
    "SecondaryPatternType",
    "StructuralAnalysis",
    "PatternDetector",
    "analyze_ghosts",
    "PeakClassifier",
    "signal_strength",
    "ShapeClassifier",
    "TopologyAnalyzer",
    "longest_path_depths",
    "prerequisite_depths",
]
