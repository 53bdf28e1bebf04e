"""
Baseline calibration: per-channel mean and spread from the reference window.

The spread is measured from the patient's declared baseline, over the
EARLIEST logs only, so later flare days never inflate it.
"""

import numbers
from typing import Dict, Mapping, Sequence

import numpy as np
import pandas as pd

from flarewatch.config import FlareConfig, SymptomChannel


def read_value(record: Mapping, key: str) -> float:
    """
    Read a numeric channel value from a log or baseline record.

    Looks in `record["responses"]` first, then at the top level.
    Anything missing or non-numeric reads as 0.
    """
    if not record:
        return 0.0
    responses = record.get("responses") or {}
    val = responses.get(key)
    if isinstance(val, numbers.Real) and not isinstance(val, bool):
        return float(val)
    val = record.get(key)
    if isinstance(val, numbers.Real) and not isinstance(val, bool):
        return float(val)
    return 0.0


def compute_std_dev(values: np.ndarray, mean: float, floor: float) -> float:
    """
    Population standard deviation of `values` around `mean`, floored.

    The deviation is taken from the given mean, not the sample's own mean.
    Fewer than two values leave the variance undefined, so the floor is used.
    """
    values = np.asarray(values, dtype=np.float64)
    if len(values) < 2:
        return floor
    variance = float(np.mean((values - mean) ** 2))
    return max(float(np.sqrt(variance)), floor)


def compute_channel_stats(
    df: pd.DataFrame,
    baseline: Mapping,
    channels: Sequence[SymptomChannel],
    cfg: FlareConfig,
) -> Dict:
    """
    Compute ChannelStats from the value columns of the log frame.

    Returns:
        {"means": {key: float}, "std_devs": {key: float}, "log_count": int}
    """
    norm = cfg.normalization
    window = df.head(min(norm.baseline_window, len(df)))

    means = {ch.key: read_value(baseline, ch.baseline_field) for ch in channels}
    std_devs = {
        ch.key: compute_std_dev(
            window[f"value_{ch.key}"].values,
            means[ch.key],
            norm.std_dev_floor,
        )
        for ch in channels
    }

    return {"means": means, "std_devs": std_devs, "log_count": len(df)}
