"""
claimgraph: structural analysis of multi-source claim graphs.
"""

from claimgraph.config.settings import AnalysisSettings
from claimgraph.core.models import AnalysisInput, InputValidationError
from claimgraph.analysis.analyzer import StaleResultGuard, StructuralAnalyzer, content_key
from claimgraph.analysis.insight_generator import InsightGenerator

__version__ = "1.0.0"

__all__ = [
    "AnalysisSettings",
    "AnalysisInput",
    "InputValidationError",
    "StructuralAnalyzer",
    "StaleResultGuard",
    "content_key",
    "InsightGenerator",
]
