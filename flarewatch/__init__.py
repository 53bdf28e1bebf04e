"""
FLAREWATCH v1.0 — Personal-Baseline Flare Detection Engine

Converts a patient's daily self-reported symptom severities into a calibrated
flare signal relative to that patient's own baseline.

Core engine is fully stateless and safe for backend/API usage.

Architecture:
    config      — All thresholds and constants (single source of truth)
    channels    — Symptom channel set helpers (schema, weights)
    baseline    — Per-channel mean and floored std dev from the reference window
    normalize   — Z-scores, EWMA trend, weighted composite score
    levels      — Raw flare levels and neighbor hysteresis
    windows     — Flare window segmentation with debounced exit
    summary     — Current status, streak, worst symptom, trend direction
    deviation   — Per-log raw deviation and rule-based flare risk
    pipeline    — Orchestration: load → calibrate → normalize → classify → segment → report

Public API:
    analyze(filepath)                          → CLI mode
    analyze_data(logs, baseline, channels)     → UI / backend mode
    generate_report(result)                    → formatted report
"""

from flarewatch.config import FlareConfig, SymptomChannel
from flarewatch.pipeline import analyze, analyze_data, generate_report

__version__ = "1.0.0"

__all__ = [
    "FlareConfig",
    "SymptomChannel",
    "analyze",
    "analyze_data",
    "generate_report",
]
