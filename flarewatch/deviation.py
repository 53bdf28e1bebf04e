"""
Per-log raw deviation and rule-based flare risk.

Independent of the statistical pipeline: compares each log's raw values
directly against the baseline and applies fixed rules. Red flags override
everything.
"""

from typing import Dict, Mapping, Optional, Sequence, Tuple

from flarewatch.baseline import read_value
from flarewatch.config import FlareConfig, SymptomChannel


RED_FLAGS = (
    "chestPainWeaknessConfusion",
    "feverSweatsChills",
    "missedOrNewMedication",
)


def calculate_deviation(
    log: Mapping,
    baseline: Mapping,
    channels: Sequence[SymptomChannel],
) -> Tuple[Dict[str, float], float]:
    """
    Signed per-channel deviation from baseline and the total absolute deviation.

    Returns:
        ({key: value - baseline}, Σ |value - baseline|)
    """
    per_metric = {
        ch.key: read_value(log, ch.key) - read_value(baseline, ch.baseline_field)
        for ch in channels
    }
    total = float(sum(abs(v) for v in per_metric.values()))
    return per_metric, total


def read_red_flags(log: Mapping) -> Dict[str, bool]:
    """Safety check-in answers from a log, under red_flags or redFlags."""
    flags = log.get("red_flags")
    if flags is None:
        flags = log.get("redFlags")
    return dict(flags or {})


def has_red_flag(red_flags: Optional[Mapping]) -> bool:
    return bool(red_flags) and any(bool(v) for v in red_flags.values())


def calculate_flare_risk(
    deviation_total: float,
    per_metric: Mapping[str, float],
    red_flags: Optional[Mapping],
    metric_count: int,
    cfg: FlareConfig,
) -> str:
    """
    Classify one log as low / medium / high risk.

    Rules, first match wins:
        1. any red flag set                                  → high
        2. total > high_total·scale or any |dev| >= max_single → high
        3. total >= medium_total·scale                        → medium
        4. otherwise                                          → low

    scale = metric_count / reference_metric_count.
    """
    r = cfg.risk

    if has_red_flag(red_flags):
        return "high"
    if not per_metric:
        return "low"

    scale = metric_count / r.reference_metric_count
    max_single = max(abs(v) for v in per_metric.values())

    if deviation_total > r.high_total * scale or max_single >= r.max_single:
        return "high"
    if deviation_total >= r.medium_total * scale:
        return "medium"
    return "low"


def assess_log(
    log: Mapping,
    baseline: Mapping,
    channels: Sequence[SymptomChannel],
    cfg: FlareConfig,
) -> Dict:
    """Deviation score and flare risk for a single log."""
    per_metric, total = calculate_deviation(log, baseline, channels)
    risk = calculate_flare_risk(
        total, per_metric, read_red_flags(log), len(channels), cfg,
    )
    return {"deviation_score": total, "flare_risk": risk}
