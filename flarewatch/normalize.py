"""
Daily normalization: z-scores, positive z, EWMA trend, and composite score.

Each function is a pure column transform — takes the log DataFrame, returns
it with new per-channel columns appended:

    value_<key>  → z_<key> → pos_z_<key> → ewma_<key> → composite_score
"""

from typing import Dict, Sequence

import numpy as np
import pandas as pd

from flarewatch.config import FlareConfig, SymptomChannel


# ---------------------------------------------------------------------------
# Scalar primitives
# ---------------------------------------------------------------------------

def compute_z_score(value: float, mean: float, std_dev: float) -> float:
    return (value - mean) / std_dev


def compute_ewma(current: float, previous: float, alpha: float) -> float:
    """One step of the exponential smoother: α·current + (1-α)·previous."""
    return alpha * current + (1.0 - alpha) * previous


# ---------------------------------------------------------------------------
# Z-scores
# ---------------------------------------------------------------------------

def compute_z_scores(
    df: pd.DataFrame,
    stats: Dict,
    channels: Sequence[SymptomChannel],
) -> pd.DataFrame:
    """
    Add z_<key> and pos_z_<key> columns.

    Only worsening relative to baseline counts toward a flare: negative z is
    zeroed, so a good day can fail to extend the trend but never offset it.
    """
    for ch in channels:
        mean = stats["means"][ch.key]
        std = stats["std_devs"][ch.key]
        z = (df[f"value_{ch.key}"] - mean) / std
        df[f"z_{ch.key}"] = z
        df[f"pos_z_{ch.key}"] = z.clip(lower=0.0)
    return df


# ---------------------------------------------------------------------------
# EWMA
# ---------------------------------------------------------------------------

def compute_ewma_columns(
    df: pd.DataFrame,
    channels: Sequence[SymptomChannel],
    cfg: FlareConfig,
) -> pd.DataFrame:
    """
    Add ewma_<key> columns.

    Seeded with day 0's positive z, then ewma[i] = α·pz[i] + (1-α)·ewma[i-1].
    With adjust=False, pandas' exponential mean is exactly this recursion.
    """
    alpha = cfg.normalization.ewma_alpha
    for ch in channels:
        df[f"ewma_{ch.key}"] = (
            df[f"pos_z_{ch.key}"].ewm(alpha=alpha, adjust=False).mean()
        )
    return df


# ---------------------------------------------------------------------------
# Composite score
# ---------------------------------------------------------------------------

def compute_composite_scores(
    df: pd.DataFrame,
    channels: Sequence[SymptomChannel],
) -> pd.DataFrame:
    """
    composite_score = Σ ewma_<key> · weight over all channels.

    With weights summing to 1.0 this is a weighted average, so thresholds
    mean the same thing regardless of how many channels a patient tracks.
    Weights are used as given.
    """
    composite = pd.Series(0.0, index=df.index)
    for ch in channels:
        composite += df[f"ewma_{ch.key}"] * ch.weight
    df["composite_score"] = composite
    return df


def build_contributions(
    row: pd.Series,
    channels: Sequence[SymptomChannel],
) -> list:
    """Per-channel contributions for one day, largest contribution first."""
    contribs = [
        {
            "key": ch.key,
            "label": ch.label,
            "z_score": float(row[f"z_{ch.key}"]),
            "ewma": float(row[f"ewma_{ch.key}"]),
            "weight": float(ch.weight),
            "contribution": float(row[f"ewma_{ch.key}"] * ch.weight),
        }
        for ch in channels
    ]
    # sorted() is stable, so equal contributions keep channel order
    return sorted(contribs, key=lambda c: c["contribution"], reverse=True)


def channel_matrix(
    df: pd.DataFrame,
    channels: Sequence[SymptomChannel],
    prefix: str,
) -> np.ndarray:
    """(days x channels) array of one per-channel column family."""
    if not channels:
        return np.zeros((len(df), 0), dtype=np.float64)
    cols = [f"{prefix}_{ch.key}" for ch in channels]
    return df[cols].to_numpy(dtype=np.float64)
