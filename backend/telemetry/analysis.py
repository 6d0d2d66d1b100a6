"""
Summary statistics for one record batch.

Pandas does the heavy lifting (means and the type tally).  The outlier fence
uses plain order statistics on the sorted temperatures instead of
``Series.quantile`` on purpose: the quartiles are the values at index
``floor(0.25 * n)`` and ``floor(0.75 * n)``, without interpolation.
"""
from __future__ import annotations

import math
import threading
import time
from datetime import datetime
from typing import Callable, Sequence

import numpy as np
import pandas as pd

from .conf import get_setting
from .exceptions import EmptyDatasetError
from .records import DatasetSummary, EquipmentRecord

_id_lock = threading.Lock()
_last_id = 0


def next_summary_id() -> str:
    """Milliseconds since the epoch, bumped by one if the clock has not moved."""
    global _last_id
    with _id_lock:
        candidate = int(time.time() * 1000)
        if candidate <= _last_id:
            candidate = _last_id + 1
        _last_id = candidate
    return str(candidate)


def temperature_fence(temperatures: Sequence[float]) -> tuple[float, float]:
    """Return the closed ``(lower, upper)`` IQR fence for ``temperatures``."""
    ordered = np.sort(np.asarray(temperatures, dtype=float))
    n = len(ordered)
    q1 = ordered[math.floor(n * 0.25)]
    q3 = ordered[math.floor(n * 0.75)]
    iqr = q3 - q1
    multiplier = get_setting("IQR_MULTIPLIER")
    return float(q1 - multiplier * iqr), float(q3 + multiplier * iqr)


def count_outliers(temperatures: pd.Series) -> int:
    lower, upper = temperature_fence(temperatures.to_numpy())
    return int(((temperatures < lower) | (temperatures > upper)).sum())


def quality_score(frame: pd.DataFrame, outlier_count: int) -> int:
    """
    Start from 100 and only ever subtract.

    A record counts as incomplete when its ``equipment_id`` is empty or its
    flowrate is not a finite number.  The parser already coerces unreadable
    numbers to 0, so in practice this mostly catches missing ids.
    """
    missing_id = frame["equipment_id"].astype(str).str.strip() == ""
    bad_flowrate = ~np.isfinite(frame["flowrate"].to_numpy(dtype=float))
    incomplete = int((missing_id.to_numpy() | bad_flowrate).sum())

    score = (
        get_setting("QUALITY_START")
        - incomplete * get_setting("MISSING_FIELD_PENALTY")
        - outlier_count * get_setting("OUTLIER_PENALTY")
    )
    return max(0, int(score))


def analyze_dataset(
    records: Sequence[EquipmentRecord],
    file_name: str,
    now: Callable[[], datetime] = datetime.now,
) -> DatasetSummary:
    """Build the summary for ``records``; an empty batch is an error."""
    total_count = len(records)
    if total_count == 0:
        raise EmptyDatasetError("Dataset is empty")

    frame = pd.DataFrame(
        {
            "equipment_id": [r.equipment_id for r in records],
            "type": [r.type for r in records],
            "flowrate": [r.flowrate for r in records],
            "pressure": [r.pressure for r in records],
            "temperature": [r.temperature for r in records],
        }
    )

    outlier_count = count_outliers(frame["temperature"])

    # Plain dict so the tally survives JSON encoding unchanged.
    type_distribution = {
        str(equipment_type): int(count)
        for equipment_type, count in frame["type"].value_counts(sort=False).items()
    }

    return DatasetSummary(
        id=next_summary_id(),
        file_name=file_name,
        upload_date=now().strftime("%Y-%m-%d %H:%M:%S"),
        total_count=total_count,
        avg_flowrate=float(frame["flowrate"].mean()),
        avg_pressure=float(frame["pressure"].mean()),
        avg_temperature=float(frame["temperature"].mean()),
        outlier_count=outlier_count,
        type_distribution=type_distribution,
        data_quality_score=quality_score(frame, outlier_count),
        classification=get_setting("PENDING_CLASSIFICATION"),
    )
