"""
Flare window segmentation.

A forward scan over the validated levels, run as a two-state automaton
(outside / inside a window) with one counter of consecutive days below the
exit threshold. Windows close retroactively: the debounce days that trigger
the close are not part of the window.
"""

import logging
from typing import Dict, List, Sequence

import numpy as np
import pandas as pd

from flarewatch.config import FlareConfig, SymptomChannel
from flarewatch.levels import FLARE_STATES
from flarewatch.normalize import channel_matrix


logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Segmentation
# ---------------------------------------------------------------------------

def identify_flare_windows(
    df: pd.DataFrame,
    channels: Sequence[SymptomChannel],
    cfg: FlareConfig,
) -> List[Dict]:
    """
    Scan the analyzed frame and emit one dict per flare window.

    Requires columns: date_str, composite_score, validated_level,
    ewma_<key>, notes, red_flags.

    Transitions:
        outside + validated mild/severe          → inside (window opens)
        inside  + score <  exit_threshold        → counter += 1
        inside  + counter reaches exit_days      → close at i - exit_days
        inside  + score >= exit_threshold        → counter = 0
        end of input while inside                → ongoing window
    """
    wp = cfg.windows
    levels = df["validated_level"].tolist()
    scores = df["composite_score"].to_numpy(dtype=np.float64)

    windows: List[Dict] = []
    start = -1
    below = 0

    for i in range(len(df)):
        if start == -1:
            if levels[i] in FLARE_STATES:
                start = i
                below = 0
            continue

        if scores[i] < wp.exit_threshold:
            below += 1
            if below >= wp.exit_days:
                end = i - wp.exit_days
                windows.append(
                    build_flare_window(len(windows), df, start, end, channels)
                )
                start = -1
                below = 0
        else:
            below = 0

    if start != -1:
        windows.append(
            build_flare_window(
                len(windows), df, start, len(df) - 1, channels, ongoing=True,
            )
        )

    logger.debug("Identified %d flare window(s) over %d day(s)", len(windows), len(df))
    return windows


# ---------------------------------------------------------------------------
# Window attributes
# ---------------------------------------------------------------------------

def _escalation_date(levels: Sequence[str], dates: Sequence[str]):
    """Date of the first severe day that follows a mild day, else None."""
    seen_mild = False
    for level, date in zip(levels, dates):
        if level == "mild":
            seen_mild = True
        elif level == "severe" and seen_mild:
            return date
    return None


def _dominant_symptom(
    window: pd.DataFrame,
    channels: Sequence[SymptomChannel],
) -> str:
    """Channel with the largest summed ewma·weight across the window."""
    if not channels:
        return ""
    weights = np.array([ch.weight for ch in channels], dtype=np.float64)
    totals = (channel_matrix(window, channels, "ewma") * weights).sum(axis=0)
    # argmax returns the first maximum, so ties go to the earlier channel
    return channels[int(np.argmax(totals))].key


def _red_flag_days(window: pd.DataFrame) -> List[Dict]:
    out = []
    for date, flags in zip(window["date_str"], window["red_flags"]):
        raised = [name for name, on in (flags or {}).items() if on]
        if raised:
            out.append({"date": date, "flags": raised})
    return out


def build_flare_window(
    index: int,
    df: pd.DataFrame,
    start: int,
    end: int,
    channels: Sequence[SymptomChannel],
    ongoing: bool = False,
) -> Dict:
    """Summarize days [start, end] (inclusive) as a flare window."""
    window = df.iloc[start : end + 1]
    dates = window["date_str"].tolist()
    levels = window["validated_level"].tolist()
    scores = window["composite_score"].to_numpy(dtype=np.float64)

    peak = int(np.argmax(scores))
    escalation_date = _escalation_date(levels, dates)

    trigger_notes = [
        note for note in window["notes"]
        if isinstance(note, str) and note.strip()
    ]

    logger.debug(
        "Flare window %d: %s → %s (%d days)",
        index, dates[0], "ongoing" if ongoing else dates[-1], len(dates),
    )

    return {
        "id": f"flare-{index}",
        "start_date": dates[0],
        "end_date": None if ongoing else dates[-1],
        "peak_date": dates[peak],
        "peak_score": float(scores[peak]),
        "peak_level": levels[peak],
        "escalated": escalation_date is not None,
        "escalation_date": escalation_date,
        "duration_days": len(dates),
        "avg_score": float(scores.mean()),
        "dominant_symptom": _dominant_symptom(window, channels),
        "trigger_notes": trigger_notes,
        "red_flag_days": _red_flag_days(window),
    }
