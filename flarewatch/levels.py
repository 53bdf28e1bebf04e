"""
Flare level classification and hysteresis validation.

Raw levels come straight from the composite score. Validation then demotes
isolated one-day mild/severe spikes to "watch" unless an adjacent day
corroborates them.
"""

from typing import List, Sequence

from flarewatch.config import FlareConfig


FLARE_LEVELS = ("none", "watch", "mild", "severe")

LEVEL_RANK = {level: rank for rank, level in enumerate(FLARE_LEVELS)}

FLARE_STATES = ("mild", "severe")


# ---------------------------------------------------------------------------
# Raw classification
# ---------------------------------------------------------------------------

def classify_raw_level(score: float, cfg: FlareConfig) -> str:
    """Map a composite score to none / watch / mild / severe."""
    t = cfg.levels

    if score >= t.severe:
        return "severe"
    if score >= t.mild:
        return "mild"
    if score >= t.watch:
        return "watch"
    return "none"


# ---------------------------------------------------------------------------
# Hysteresis validation
# ---------------------------------------------------------------------------

def validate_levels(raw_levels: Sequence[str]) -> List[str]:
    """
    Confirm each mild/severe day against its immediate neighbors.

    A day of raw rank r keeps its level only if the previous or next day
    (where one exists) has raw rank >= r; otherwise it is demoted to watch.
    none/watch pass through. Neighbors are always compared on RAW levels,
    so a two-day elevation registers at full severity from its first day.
    """
    n = len(raw_levels)
    validated: List[str] = []

    for i, raw in enumerate(raw_levels):
        if raw not in FLARE_STATES:
            validated.append(raw)
            continue

        rank = LEVEL_RANK[raw]
        prev_ok = i > 0 and LEVEL_RANK[raw_levels[i - 1]] >= rank
        next_ok = i < n - 1 and LEVEL_RANK[raw_levels[i + 1]] >= rank

        validated.append(raw if (prev_ok or next_ok) else "watch")

    return validated
