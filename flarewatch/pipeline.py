"""
Pipeline orchestration: load → calibrate → normalize → classify → segment → summarize → report.

This is the only module with I/O (file loading, report formatting).
All analytical logic is delegated to baseline, normalize, levels, windows,
summary, and deviation.

Engine contract:
    - Logs arrive sorted ascending by date with no duplicates; the engine
      does not sort or deduplicate (file mode does, as the log store would).
    - Stateless. Inputs are copied into a fresh DataFrame and never mutated.
    - Never raises for well-formed input; contract violations are logged.
"""

import json
import logging
from pathlib import Path
from typing import Dict, Mapping, Sequence, Union

import pandas as pd

from flarewatch.config import FlareConfig, SymptomChannel
from flarewatch.baseline import compute_channel_stats, read_value
from flarewatch.channels import (
    channels_from_records,
    channels_from_schema,
    check_weights,
)
from flarewatch.deviation import assess_log, read_red_flags
from flarewatch.levels import classify_raw_level, validate_levels
from flarewatch.normalize import (
    build_contributions,
    compute_composite_scores,
    compute_ewma_columns,
    compute_z_scores,
)
from flarewatch.summary import compute_summary
from flarewatch.windows import identify_flare_windows


logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Data loading (CLI mode only)
# ---------------------------------------------------------------------------

REQUIRED_SECTIONS = {"baseline", "logs"}


def load_data(filepath: Union[str, Path]) -> Dict:
    """
    Load a patient document from a JSON file.

    Expected shape:
        {"baseline": {...}, "channels": [...] or "schema": {...}, "logs": [...]}

    Returns:
        {"logs": [...sorted, one per date], "baseline": {...},
         "channels": [SymptomChannel, ...]}
    """
    path = Path(filepath)
    if not path.exists():
        raise FileNotFoundError(f"Data file not found: {path}")

    with open(path, "r") as f:
        data = json.load(f)

    if not data:
        raise ValueError("Data file is empty")

    missing = REQUIRED_SECTIONS - set(data)
    if missing:
        raise ValueError(f"Missing required sections: {missing}")

    if "channels" in data:
        channels = channels_from_records(data["channels"])
    elif "schema" in data:
        channels = channels_from_schema(data["schema"])
    else:
        raise ValueError("Data file needs either 'channels' or 'schema'")

    # One log per date, latest entry wins, ascending order
    by_date = {}
    for log in data["logs"]:
        if "date" not in log:
            raise ValueError(f"Log entry missing 'date': {log}")
        by_date[pd.Timestamp(log["date"])] = log
    logs = [by_date[d] for d in sorted(by_date)]

    return {"logs": logs, "baseline": data["baseline"], "channels": channels}


# ---------------------------------------------------------------------------
# Frame construction
# ---------------------------------------------------------------------------

def _build_frame(
    logs: Sequence[Mapping],
    channels: Sequence[SymptomChannel],
) -> pd.DataFrame:
    """One row per log: date, notes, red flags, and a value_<key> per channel."""
    rows = []
    for log in logs:
        row = {
            "date": log.get("date"),
            "notes": log.get("notes") or "",
            "red_flags": read_red_flags(log),
        }
        for ch in channels:
            row[f"value_{ch.key}"] = read_value(log, ch.key)
        rows.append(row)

    df = pd.DataFrame(rows)
    df["date"] = pd.to_datetime(df["date"])
    df["date_str"] = df["date"].dt.strftime("%Y-%m-%d")

    if not (df["date"].is_monotonic_increasing and df["date"].is_unique):
        logger.warning(
            "Logs are not strictly ascending by date; analyzing in the given order"
        )
    return df


def _day_record(row: pd.Series, log: Mapping, baseline: Mapping,
                channels: Sequence[SymptomChannel], cfg: FlareConfig) -> Dict:
    keys = [ch.key for ch in channels]
    return {
        "date": row["date_str"],
        "z_scores": {k: float(row[f"z_{k}"]) for k in keys},
        "positive_z": {k: float(row[f"pos_z_{k}"]) for k in keys},
        "ewma": {k: float(row[f"ewma_{k}"]) for k in keys},
        "composite_score": float(row["composite_score"]),
        "raw_level": row["raw_level"],
        "validated_level": row["validated_level"],
        "contributing_symptoms": build_contributions(row, channels),
        **assess_log(log, baseline, channels, cfg),
    }


# ---------------------------------------------------------------------------
# Core analysis (PURE FUNCTION — NO FILE I/O)
# ---------------------------------------------------------------------------

def _analyze_df(
    df: pd.DataFrame,
    logs: Sequence[Mapping],
    baseline: Mapping,
    channels: Sequence[SymptomChannel],
    cfg: FlareConfig,
) -> Dict:
    """
    Core analysis operating purely on a DataFrame.

    Stateless.
    No file reads.
    Safe for backend / API usage.
    """

    # Stage 1: Baseline calibration
    stats = compute_channel_stats(df, baseline, channels, cfg)

    # Stage 2: Normalization
    df = compute_z_scores(df, stats, channels)
    df = compute_ewma_columns(df, channels, cfg)
    df = compute_composite_scores(df, channels)

    # Stage 3: Level classification + hysteresis
    df["raw_level"] = [classify_raw_level(s, cfg) for s in df["composite_score"]]
    df["validated_level"] = validate_levels(df["raw_level"].tolist())

    # Stage 4: Window segmentation
    windows = identify_flare_windows(df, channels, cfg)

    # Stage 5: Summary
    summary = compute_summary(df, windows, channels, cfg)

    daily = [
        _day_record(row, log, baseline, channels, cfg)
        for (_, row), log in zip(df.iterrows(), logs)
    ]

    logger.debug(
        "Analyzed %d day(s): status=%s, trend=%s",
        len(daily), summary["current_status"], summary["trend_direction"],
    )

    return {
        "daily_analysis": daily,
        "flare_windows": windows,
        "baseline_stats": stats,
        "summary": summary,
    }


def _empty_result(
    baseline: Mapping,
    channels: Sequence[SymptomChannel],
    cfg: FlareConfig,
) -> Dict:
    floor = cfg.normalization.std_dev_floor
    return {
        "daily_analysis": [],
        "flare_windows": [],
        "baseline_stats": {
            "means": {ch.key: read_value(baseline, ch.baseline_field) for ch in channels},
            "std_devs": {ch.key: floor for ch in channels},
            "log_count": 0,
        },
        "summary": {
            "total_flare_windows": 0,
            "total_flare_days": 0,
            "severe_flare_days": 0,
            "current_status": "none",
            "current_streak": 0,
            "worst_symptom": "",
            "average_composite_score": 0.0,
            "trend_direction": "stable",
        },
    }


# ---------------------------------------------------------------------------
# Public Entry Points
# ---------------------------------------------------------------------------

def analyze_data(
    logs: Sequence[Mapping],
    baseline: Mapping,
    channels: Sequence[Union[SymptomChannel, Mapping]],
    cfg: FlareConfig | None = None,
) -> Dict:
    """
    Backend / UI integration entry point.

    Accepts one patient's date-ascending logs, baseline profile, and active
    channels (SymptomChannel or plain dicts). No file system usage.
    """
    if cfg is None:
        cfg = FlareConfig()

    channels = [
        ch if isinstance(ch, SymptomChannel) else channels_from_records([ch])[0]
        for ch in channels
    ]
    check_weights(channels, cfg.weight_tolerance)

    if not logs:
        logger.debug("No logs supplied; returning empty result")
        return _empty_result(baseline or {}, channels, cfg)

    df = _build_frame(logs, channels)
    return _analyze_df(df, logs, baseline or {}, channels, cfg)


def analyze(
    filepath: Union[str, Path],
    cfg: FlareConfig | None = None,
) -> Dict:
    """
    CLI-compatible entry point.
    Reads JSON file and runs analysis.
    """
    data = load_data(filepath)
    return analyze_data(data["logs"], data["baseline"], data["channels"], cfg)


# ---------------------------------------------------------------------------
# Report generation
# ---------------------------------------------------------------------------

def generate_report(result: Dict) -> str:
    """Format the analysis result as a human-readable text report."""
    s = result["summary"]
    stats = result["baseline_stats"]

    lines = [
        "FLAREWATCH STATUS REPORT",
        "=" * 58,
        "",
        f"  Days Analyzed       : {stats['log_count']}",
        f"  Current Status      : {s['current_status']} ({s['current_streak']}d streak)",
        f"  Trend               : {s['trend_direction']}",
        f"  Avg Composite Score : {s['average_composite_score']:.3f}",
        f"  Flare Windows       : {s['total_flare_windows']}"
        f" ({s['total_flare_days']} flare days, {s['severe_flare_days']} severe)",
        f"  Worst Symptom       : {s['worst_symptom'] or '-'}",
        "",
        "  Baseline (mean / std dev):",
    ]

    for key, mean in stats["means"].items():
        lines.append(f"    {key:20s} : {mean:5.2f} / {stats['std_devs'][key]:.3f}")

    if result["flare_windows"]:
        lines.append("")
        lines.append("  Flare Windows:")
        for w in result["flare_windows"]:
            end = w["end_date"] or "ongoing"
            lines.append(
                f"    - {w['start_date']} → {end}: {w['peak_level']} peak "
                f"{w['peak_score']:.2f} on {w['peak_date']}, "
                f"{w['duration_days']}d, dominant: {w['dominant_symptom'] or '-'}"
            )
            if w["escalated"]:
                lines.append(f"      escalated to severe on {w['escalation_date']}")
            for day in w["red_flag_days"]:
                lines.append(f"      red flags {day['date']}: {', '.join(day['flags'])}")
            for note in w["trigger_notes"]:
                lines.append(f"      note: {note}")

    if s["current_status"] in ("mild", "severe"):
        lines.append("")
        lines.append("  ⚠  ACTIVE FLARE: Symptoms sustained above personal baseline")

    lines.append("")
    lines.append("=" * 58)
    return "\n".join(lines)
