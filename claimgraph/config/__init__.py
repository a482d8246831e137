from .settings import AnalysisSettings, DEFAULT_SETTINGS

__all__ = ["AnalysisSettings", "DEFAULT_SETTINGS"]
