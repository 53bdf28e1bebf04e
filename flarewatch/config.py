"""
Centralized configuration for all thresholds, constants, and window parameters.

Every tunable constant lives here. The symptom channel set itself is
per-patient data passed into every call; only its record type lives here.
"""

from dataclasses import dataclass, field
from typing import Optional


# ---------------------------------------------------------------------------
# Symptom channels
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class SymptomChannel:
    """A tracked symptom metric (e.g. pain, fatigue) and its composite weight."""

    key: str
    label: str
    weight: float
    # Key to read from the baseline profile; falls back to `key`
    baseline_key: Optional[str] = None

    @property
    def baseline_field(self) -> str:
        return self.baseline_key or self.key


# ---------------------------------------------------------------------------
# Normalization
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class NormalizationParams:
    """Parameters for baseline calibration and EWMA smoothing."""

    ewma_alpha: float = 0.3

    # Std dev floor keeps z-scores bounded for very stable reference windows
    std_dev_floor: float = 0.75

    # Number of earliest logs used to estimate per-channel spread
    baseline_window: int = 14

    def __post_init__(self):
        if not 0.0 < self.ewma_alpha <= 1.0:
            raise ValueError(f"EWMA alpha must be in (0, 1], got {self.ewma_alpha}")
        if self.std_dev_floor <= 0.0:
            raise ValueError(f"Std dev floor must be positive, got {self.std_dev_floor}")
        if self.baseline_window < 1:
            raise ValueError(f"Baseline window must be >= 1, got {self.baseline_window}")


# ---------------------------------------------------------------------------
# Flare level thresholds
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class LevelThresholds:
    """
    Composite score boundaries for raw flare levels.

    Calibrated for a weighted-average composite (weights sum to 1.0):
        score <  watch          → none
        watch <= score < mild   → watch
        mild  <= score < severe → mild
        score >= severe         → severe
    """

    watch: float = 0.8
    mild: float = 1.5
    severe: float = 2.5

    def __post_init__(self):
        if not self.watch < self.mild < self.severe:
            raise ValueError(
                f"Level thresholds must be ascending, got "
                f"watch={self.watch}, mild={self.mild}, severe={self.severe}"
            )


# ---------------------------------------------------------------------------
# Flare window segmentation
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class WindowParams:
    """A window closes after `exit_days` consecutive days below `exit_threshold`."""

    exit_threshold: float = 0.5
    exit_days: int = 2

    def __post_init__(self):
        if self.exit_days < 1:
            raise ValueError(f"Exit days must be >= 1, got {self.exit_days}")


# ---------------------------------------------------------------------------
# Trend direction
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class TrendParams:
    """Recent-vs-prior comparison for the summary trend direction."""

    window: int = 7        # recent/prior span once 2 * window days exist
    min_days: int = 4      # below this, trend is "stable"
    delta: float = 0.2     # mean change needed to call improving/worsening


# ---------------------------------------------------------------------------
# Per-log flare risk
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class RiskThresholds:
    """
    Raw-deviation rules for the per-log flare risk.

    Total thresholds are stated for `reference_metric_count` channels and
    scale proportionally with the number of channels actually tracked.
    """

    high_total: float = 10.0
    medium_total: float = 6.0
    max_single: float = 4.0
    reference_metric_count: int = 4


# ---------------------------------------------------------------------------
# Top-level config aggregate
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class FlareConfig:
    """Complete engine configuration. Pass to pipeline to override defaults."""

    normalization: NormalizationParams = field(default_factory=NormalizationParams)
    levels: LevelThresholds = field(default_factory=LevelThresholds)
    windows: WindowParams = field(default_factory=WindowParams)
    trend: TrendParams = field(default_factory=TrendParams)
    risk: RiskThresholds = field(default_factory=RiskThresholds)

    # Channel weights further than this from 1.0 are reported, not corrected
    weight_tolerance: float = 1e-3
