"""Synthetic equipment CSV for the "Load Sample Data" button."""
from __future__ import annotations

import random
from datetime import datetime, timedelta, timezone
from typing import Optional

from .conf import SAMPLE_HEADER, get_setting
from .records import EquipmentCategory


def _iso_utc(moment: datetime) -> str:
    return moment.isoformat(timespec="milliseconds").replace("+00:00", "Z")


def generate_sample_csv(
    rows: Optional[int] = None, rng: Optional[random.Random] = None
) -> str:
    """
    Return a header plus ``rows`` random but well-formed data lines.

    Timestamps start at "now" and step back one interval per row, so the
    newest reading is on the first line.
    """
    rng = rng or random.Random()
    if rows is None:
        rows = get_setting("SAMPLE_ROW_COUNT")

    flow_low, flow_high = get_setting("SAMPLE_FLOWRATE_RANGE")
    press_low, press_high = get_setting("SAMPLE_PRESSURE_RANGE")
    temp_low, temp_high = get_setting("SAMPLE_TEMPERATURE_RANGE")
    interval = timedelta(seconds=get_setting("SAMPLE_INTERVAL_SECONDS"))
    first_number = get_setting("SAMPLE_FIRST_EQUIPMENT_NUMBER")
    categories = EquipmentCategory.sample_choices()

    started = datetime.now(timezone.utc)
    lines = [SAMPLE_HEADER]
    for i in range(rows):
        category = rng.choice(categories)
        flow = rng.uniform(flow_low, flow_high)
        press = rng.uniform(press_low, press_high)
        temp = rng.uniform(temp_low, temp_high)
        lines.append(
            f"{_iso_utc(started - i * interval)},EQ-{first_number + i},"
            f"{category.value},{flow:.2f},{press:.2f},{temp:.2f}"
        )
    return "\n".join(lines)
