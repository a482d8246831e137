"""
Analysis Settings

Thresholds and switches for the claim-graph pipeline. One instance is
passed explicitly into every component; nothing reads module-level flags.
"""

import os
from dataclasses import dataclass


def _env_float(name: str, default: float) -> float:
    raw = os.getenv(name)
    return float(raw) if raw not in (None, "") else default


def _env_int(name: str, default: int) -> int:
    raw = os.getenv(name)
    return int(raw) if raw not in (None, "") else default


def _env_bool(name: str, default: bool) -> bool:
    raw = os.getenv(name)
    if raw in (None, ""):
        return default
    return raw.strip().lower() in ("1", "true", "yes", "on")


@dataclass(frozen=True)
class AnalysisSettings:
    """Analysis settings from defaults or environment."""

    # Support tiers
    peak_threshold: float = 0.5
    hill_threshold: float = 0.25

    # Percentile flags (fractions of the claim population)
    high_support_pct: float = 0.30
    low_support_pct: float = 0.30
    leverage_pct: float = 0.25
    keystone_pct: float = 0.20
    evidence_gap_pct: float = 0.20
    outlier_pct: float = 0.20

    # Shape classification
    sparse_signal_floor: float = 0.3
    min_confidence: float = 0.1
    symmetric_conflict_delta: float = 0.15

    # Cascades
    cascade_min_fanout: int = 3
    cascade_min_depth: int = 3
    chain_min_length: int = 3

    # Runtime
    debug: bool = False
    cache_size: int = 32

    @classmethod
    def from_env(cls) -> "AnalysisSettings":
        """Load settings from CLAIMGRAPH_* environment variables."""
        d = cls()
        return cls(
            peak_threshold=_env_float("CLAIMGRAPH_PEAK_THRESHOLD", d.peak_threshold),
            hill_threshold=_env_float("CLAIMGRAPH_HILL_THRESHOLD", d.hill_threshold),
            high_support_pct=_env_float("CLAIMGRAPH_HIGH_SUPPORT_PCT", d.high_support_pct),
            low_support_pct=_env_float("CLAIMGRAPH_LOW_SUPPORT_PCT", d.low_support_pct),
            leverage_pct=_env_float("CLAIMGRAPH_LEVERAGE_PCT", d.leverage_pct),
            keystone_pct=_env_float("CLAIMGRAPH_KEYSTONE_PCT", d.keystone_pct),
            evidence_gap_pct=_env_float("CLAIMGRAPH_EVIDENCE_GAP_PCT", d.evidence_gap_pct),
            outlier_pct=_env_float("CLAIMGRAPH_OUTLIER_PCT", d.outlier_pct),
            sparse_signal_floor=_env_float("CLAIMGRAPH_SPARSE_SIGNAL_FLOOR", d.sparse_signal_floor),
            min_confidence=_env_float("CLAIMGRAPH_MIN_CONFIDENCE", d.min_confidence),
            symmetric_conflict_delta=_env_float(
                "CLAIMGRAPH_SYMMETRIC_CONFLICT_DELTA", d.symmetric_conflict_delta
            ),
            cascade_min_fanout=_env_int("CLAIMGRAPH_CASCADE_MIN_FANOUT", d.cascade_min_fanout),
            cascade_min_depth=_env_int("CLAIMGRAPH_CASCADE_MIN_DEPTH", d.cascade_min_depth),
            chain_min_length=_env_int("CLAIMGRAPH_CHAIN_MIN_LENGTH", d.chain_min_length),
            debug=_env_bool("CLAIMGRAPH_DEBUG", d.debug),
            cache_size=_env_int("CLAIMGRAPH_CACHE_SIZE", d.cache_size),
        )


DEFAULT_SETTINGS = AnalysisSettings()
