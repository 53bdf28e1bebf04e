"""
Run summary: current status and streak, worst channel, average score,
flare totals, and trend direction.
"""

from typing import Dict, List, Sequence

import numpy as np
import pandas as pd

from flarewatch.config import FlareConfig, SymptomChannel
from flarewatch.levels import FLARE_STATES
from flarewatch.normalize import channel_matrix


# ---------------------------------------------------------------------------
# Current streak
# ---------------------------------------------------------------------------

def compute_current_streak(levels: Sequence[str]) -> int:
    """Count trailing consecutive days sharing the final day's level."""
    if not levels:
        return 0

    current = levels[-1]
    streak = 0
    for level in reversed(levels):
        if level == current:
            streak += 1
        else:
            break
    return streak


# ---------------------------------------------------------------------------
# Trend direction
# ---------------------------------------------------------------------------

def compute_trend_direction(scores: Sequence[float], cfg: FlareConfig) -> str:
    """
    Compare recent vs. prior mean composite score.

    With >= 2·window days: the last `window` days against the `window`
    before them. With fewer (but at least min_days): split at the midpoint,
    prior = first half. Fewer than min_days is "stable" by definition.
    """
    t = cfg.trend
    scores = np.asarray(scores, dtype=np.float64)
    n = len(scores)

    if n >= 2 * t.window:
        recent = scores[-t.window:]
        prior = scores[-2 * t.window : -t.window]
    elif n >= t.min_days:
        mid = n // 2
        recent = scores[mid:]
        prior = scores[:mid]
    else:
        return "stable"

    diff = float(recent.mean() - prior.mean())
    if diff < -t.delta:
        return "improving"
    if diff > t.delta:
        return "worsening"
    return "stable"


# ---------------------------------------------------------------------------
# Worst symptom
# ---------------------------------------------------------------------------

def compute_worst_symptom(
    df: pd.DataFrame,
    channels: Sequence[SymptomChannel],
) -> str:
    """Channel with the highest mean EWMA across every analyzed day."""
    if not channels or len(df) == 0:
        return ""
    means = channel_matrix(df, channels, "ewma").mean(axis=0)
    return channels[int(np.argmax(means))].key


# ---------------------------------------------------------------------------
# Summary
# ---------------------------------------------------------------------------

def compute_summary(
    df: pd.DataFrame,
    windows: List[Dict],
    channels: Sequence[SymptomChannel],
    cfg: FlareConfig,
) -> Dict:
    """Reduce the analyzed frame and window list to one status report."""
    levels = df["validated_level"].tolist() if len(df) else []
    scores = df["composite_score"].to_numpy(dtype=np.float64) if len(df) else np.array([])

    return {
        "total_flare_windows": len(windows),
        "total_flare_days": sum(1 for lv in levels if lv in FLARE_STATES),
        "severe_flare_days": sum(1 for lv in levels if lv == "severe"),
        "current_status": levels[-1] if levels else "none",
        "current_streak": compute_current_streak(levels),
        "worst_symptom": compute_worst_symptom(df, channels),
        "average_composite_score": float(scores.mean()) if len(scores) else 0.0,
        "trend_direction": compute_trend_direction(scores, cfg),
    }
