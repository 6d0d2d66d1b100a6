"""
Turn the raw text of an uploaded CSV file into ``EquipmentRecord`` objects.

The format is deliberately simple: the first line is the header, every other
line is split on commas (no quoting support), and rows that are shorter than
the header are skipped.  Pandas only handles the numeric coercion, the line
handling is done by hand so row ids keep their original line numbers.
"""
from __future__ import annotations

import logging

import numpy as np
import pandas as pd

from .conf import NUMERIC_COLUMNS
from .exceptions import CSVParseError
from .records import EquipmentRecord, classify_status

logger = logging.getLogger(__name__)

# Header names that clash with fields we compute ourselves.
_RESERVED_COLUMNS = {"id", "status"}
_KNOWN_COLUMNS = {"timestamp", "equipment_id", "type", *NUMERIC_COLUMNS}

# Leading decimal number of a cell, so "600 kPa" reads as 600.
_LEADING_NUMBER = r"^\s*([+-]?(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?)"


def decode_upload(raw: bytes) -> str:
    """Decode an uploaded file; anything that is not UTF-8 counts as a parse error."""
    try:
        return raw.decode("utf-8")
    except UnicodeDecodeError as exc:
        raise CSVParseError("CSV file is not valid UTF-8 text.") from exc


def _split_header(line: str) -> list[str]:
    # Excel likes to put a BOM in front of the first column name.
    return [name.strip().lower() for name in line.lstrip("\ufeff").split(",")]


def parse_csv(text: str) -> list[EquipmentRecord]:
    """Parse ``text`` into records; ids are ``row-<line>`` counted after the header."""
    if not isinstance(text, str):
        raise CSVParseError("CSV payload must be text.")

    lines = text.strip().split("\n")
    if not lines[0].strip():
        raise CSVParseError("CSV payload has no header line.")

    headers = _split_header(lines[0])

    row_ids: list[str] = []
    rows: list[dict[str, str]] = []
    for line_number, line in enumerate(lines[1:], start=1):
        values = line.split(",")
        if len(values) < len(headers):
            continue
        # Later duplicates of a header name win, extra trailing values are dropped.
        rows.append({name: value.strip() for name, value in zip(headers, values)})
        row_ids.append(f"row-{line_number}")

    skipped = len(lines) - 1 - len(rows)
    if skipped:
        logger.debug("Skipped %d short row(s) while parsing CSV", skipped)

    if not rows:
        return []

    frame = pd.DataFrame(rows)
    for column in NUMERIC_COLUMNS:
        if column in frame.columns:
            prefixes = frame[column].astype(str).str.extract(_LEADING_NUMBER, expand=False)
            numbers = pd.to_numeric(prefixes, errors="coerce")
            frame[column] = numbers.replace([np.inf, -np.inf], np.nan).fillna(0.0)
        else:
            frame[column] = 0.0

    records: list[EquipmentRecord] = []
    for row_id, row in zip(row_ids, frame.to_dict(orient="records")):
        flowrate = float(row["flowrate"])
        pressure = float(row["pressure"])
        temperature = float(row["temperature"])
        records.append(
            EquipmentRecord(
                id=row_id,
                timestamp=str(row.get("timestamp", "")),
                equipment_id=str(row.get("equipment_id", "")),
                type=str(row.get("type") or "Unknown"),
                flowrate=flowrate,
                pressure=pressure,
                temperature=temperature,
                status=classify_status(temperature, pressure),
                extra={
                    name: str(value)
                    for name, value in row.items()
                    if name not in _KNOWN_COLUMNS and name not in _RESERVED_COLUMNS
                },
            )
        )
    return records
