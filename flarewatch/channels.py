"""
Symptom channel set helpers.

The engine treats the channel set as caller-owned data. These helpers serve
the profile store side: deriving channels from a log form schema and keeping
weights summing to 1.0 when channels are added or removed.
"""

import logging
from dataclasses import replace
from typing import Dict, List, Sequence

from flarewatch.config import SymptomChannel


logger = logging.getLogger(__name__)


def channels_from_schema(schema: Dict) -> List[SymptomChannel]:
    """
    Collect every slider question across all schema pages as a channel.

    Sliders without an explicit weight get an equal share of 1/n.
    """
    sliders = [
        q
        for page in schema.get("pages", [])
        for q in page.get("questions", [])
        if q.get("type") == "slider"
    ]
    if not sliders:
        return []

    default_weight = 1.0 / len(sliders)
    return [
        SymptomChannel(
            key=q["id"],
            label=q.get("label", q["id"]),
            weight=float(q.get("weight", default_weight)),
            baseline_key=q.get("baselineKey"),
        )
        for q in sliders
    ]


def channels_from_records(records: Sequence[Dict]) -> List[SymptomChannel]:
    """Build channels from plain dicts with key/label/weight[/baseline_key]."""
    channels = []
    for rec in records:
        if "key" not in rec:
            raise ValueError(f"Channel record missing 'key': {rec}")
        channels.append(
            SymptomChannel(
                key=rec["key"],
                label=rec.get("label", rec["key"]),
                weight=float(rec.get("weight", 0.0)),
                baseline_key=rec.get("baseline_key") or rec.get("baselineKey"),
            )
        )
    return channels


def total_weight(channels: Sequence[SymptomChannel]) -> float:
    return float(sum(ch.weight for ch in channels))


def check_weights(channels: Sequence[SymptomChannel], tolerance: float) -> bool:
    """
    Return True when channel weights sum to 1.0 within `tolerance`.

    An invalid weight set is logged, never corrected: composite scores are
    scaled by whatever the weights sum to.
    """
    if not channels:
        return True
    total = total_weight(channels)
    if abs(total - 1.0) > tolerance:
        logger.warning(
            "Channel weights sum to %.4f, not 1.0; composite scores will be scaled",
            total,
        )
        return False
    return True


def redistribute_weights(channels: Sequence[SymptomChannel]) -> List[SymptomChannel]:
    """
    Give every channel an equal weight.

    Shares are rounded to 4 decimals and the last channel absorbs the
    rounding remainder so the weights sum to exactly 1.0.
    """
    n = len(channels)
    if n == 0:
        return []

    share = round(1.0 / n, 4)
    last = round(1.0 - share * (n - 1), 4)
    return [
        replace(ch, weight=last if i == n - 1 else share)
        for i, ch in enumerate(channels)
    ]
