"""
Named constants for the analysis pipeline.

Every heuristic number lives here instead of being sprinkled through the
code.  A project can override any of them with a ``TELEMETRY`` dict in the
Django settings, e.g. ``TELEMETRY = {"HISTORY_LIMIT": 30}``.
"""
from __future__ import annotations

from typing import Any

from django.conf import settings

DEFAULTS: dict[str, Any] = {
    # Status thresholds (strictly greater than).
    "CRITICAL_TEMPERATURE": 100.0,
    "CRITICAL_PRESSURE": 500.0,
    "WARNING_TEMPERATURE": 80.0,
    "WARNING_PRESSURE": 300.0,
    # Outlier fence: [q1 - k*iqr, q3 + k*iqr]
    "IQR_MULTIPLIER": 1.5,
    # Quality score
    "QUALITY_START": 100,
    "MISSING_FIELD_PENALTY": 2,
    "OUTLIER_PENALTY": 1,
    # Storage
    "HISTORY_LIMIT": 15,
    "STORAGE_QUOTA_BYTES": 5 * 1024 * 1024,
    # Demo data
    "SAMPLE_ROW_COUNT": 50,
    "SAMPLE_INTERVAL_SECONDS": 3600,
    "SAMPLE_FLOWRATE_RANGE": (50.0, 150.0),
    "SAMPLE_PRESSURE_RANGE": (100.0, 600.0),
    "SAMPLE_TEMPERATURE_RANGE": (20.0, 170.0),
    "SAMPLE_FIRST_EQUIPMENT_NUMBER": 1000,
    "DEMO_FILE_NAME": "demo_batch_001.csv",
    # Insights
    "PENDING_CLASSIFICATION": "Pending AI Analysis",
    "INSIGHT_COLLABORATOR": "telemetry.insights.PlaceholderInsightCollaborator",
    "INSIGHT_LATENCY_SECONDS": 1.5,
    # Report chart colours per equipment category.
    "CATEGORY_PALETTE": {
        "Reactor": "#2563eb",
        "Pump": "#0891b2",
        "Heat Exchanger": "#f59e0b",
        "Separator": "#10b981",
        "Unknown": "#94a3b8",
        "Other": "#6366f1",
    },
}

# Column names the parser understands (already lower-cased).
NUMERIC_COLUMNS = ("flowrate", "pressure", "temperature")
SAMPLE_HEADER = "timestamp,equipment_id,type,flowrate,pressure,temperature"

# Storage keys, kept identical to the browser version so exported data lines up.
SESSION_DATA_KEY = "last_session_data"
SESSION_SUMMARY_KEY = "last_session_summary"
HISTORY_KEY = "upload_history"
USER_KEY = "chem_user"
GENERATION_KEY = "session_generation"
DATASET_KEY_PREFIX = "dataset_"


def get_setting(name: str) -> Any:
    """Look up ``name`` in ``settings.TELEMETRY``, falling back to DEFAULTS."""
    overrides = getattr(settings, "TELEMETRY", {}) or {}
    if name in overrides:
        return overrides[name]
    return DEFAULTS[name]


def dataset_key(summary_id: str) -> str:
    return f"{DATASET_KEY_PREFIX}{summary_id}"
