"""
Plain data types shared by the parser, the analyzer and the storage layer.

Records and summaries are frozen dataclasses.  They are serialised with the
same camelCase keys the browser dashboard used, so a stored summary looks
exactly like the JSON the old frontend kept in ``localStorage``.
"""
from __future__ import annotations

import dataclasses
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Optional

from .conf import get_setting


class EquipmentStatus(str, Enum):
    """Traffic-light status of a single reading."""

    NORMAL = "Normal"
    WARNING = "Warning"
    CRITICAL = "Critical"


class EquipmentCategory(str, Enum):
    """
    Known equipment categories.

    The ``type`` column is free text, so parsing and the type distribution keep
    whatever string was in the file.  Only the code that renders categories
    (chart colours in the PDF report) maps the text onto this enum, and every
    string it does not know becomes ``OTHER``.
    """

    REACTOR = "Reactor"
    PUMP = "Pump"
    HEAT_EXCHANGER = "Heat Exchanger"
    SEPARATOR = "Separator"
    UNKNOWN = "Unknown"
    OTHER = "Other"

    @classmethod
    def from_label(cls, label: str) -> "EquipmentCategory":
        for category in cls:
            if category is not cls.OTHER and category.value == label:
                return category
        return cls.OTHER

    @classmethod
    def sample_choices(cls) -> list["EquipmentCategory"]:
        """Categories the demo generator draws from."""
        return [cls.REACTOR, cls.PUMP, cls.HEAT_EXCHANGER, cls.SEPARATOR]

    @property
    def colour(self) -> str:
        palette = get_setting("CATEGORY_PALETTE")
        return palette.get(self.value, palette[EquipmentCategory.OTHER.value])


def classify_status(temperature: float, pressure: float) -> EquipmentStatus:
    """Critical beats Warning beats Normal; each check is a strict '>'."""
    if (
        temperature > get_setting("CRITICAL_TEMPERATURE")
        or pressure > get_setting("CRITICAL_PRESSURE")
    ):
        return EquipmentStatus.CRITICAL
    if (
        temperature > get_setting("WARNING_TEMPERATURE")
        or pressure > get_setting("WARNING_PRESSURE")
    ):
        return EquipmentStatus.WARNING
    return EquipmentStatus.NORMAL


@dataclass(frozen=True)
class EquipmentRecord:
    """One data row of an uploaded CSV file."""

    id: str
    timestamp: str
    equipment_id: str
    type: str
    flowrate: float
    pressure: float
    temperature: float
    status: EquipmentStatus
    # Columns we do not use for anything, kept so nothing from the file is lost.
    extra: Dict[str, str] = field(default_factory=dict)

    _KNOWN_KEYS = (
        "id",
        "timestamp",
        "equipment_id",
        "type",
        "flowrate",
        "pressure",
        "temperature",
        "status",
    )

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {"id": self.id}
        data.update(self.extra)
        data.update(
            {
                "timestamp": self.timestamp,
                "equipment_id": self.equipment_id,
                "type": self.type,
                "flowrate": self.flowrate,
                "pressure": self.pressure,
                "temperature": self.temperature,
                "status": self.status.value,
            }
        )
        return data

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "EquipmentRecord":
        return cls(
            id=str(data["id"]),
            timestamp=str(data.get("timestamp", "")),
            equipment_id=str(data.get("equipment_id", "")),
            type=str(data.get("type") or "Unknown"),
            flowrate=float(data.get("flowrate", 0.0)),
            pressure=float(data.get("pressure", 0.0)),
            temperature=float(data.get("temperature", 0.0)),
            status=EquipmentStatus(data["status"]),
            extra={k: v for k, v in data.items() if k not in cls._KNOWN_KEYS},
        )


@dataclass(frozen=True)
class DatasetSummary:
    """Statistics for one record batch, plus the (optional) AI insight."""

    id: str
    file_name: str
    upload_date: str
    total_count: int
    avg_flowrate: float
    avg_pressure: float
    avg_temperature: float
    outlier_count: int
    type_distribution: Dict[str, int]
    data_quality_score: int
    classification: str
    ai_insights: Optional[str] = None

    @property
    def is_enriched(self) -> bool:
        return self.ai_insights is not None

    def with_insight(self, narrative: str, classification: str) -> "DatasetSummary":
        """Return a copy with the insight fields set; applying twice is harmless."""
        return dataclasses.replace(
            self, ai_insights=narrative, classification=classification
        )

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {
            "id": self.id,
            "fileName": self.file_name,
            "uploadDate": self.upload_date,
            "totalCount": self.total_count,
            "avgFlowrate": self.avg_flowrate,
            "avgPressure": self.avg_pressure,
            "avgTemperature": self.avg_temperature,
            "outlierCount": self.outlier_count,
            "typeDistribution": dict(self.type_distribution),
            "dataQualityScore": self.data_quality_score,
            "classification": self.classification,
        }
        if self.ai_insights is not None:
            data["aiInsights"] = self.ai_insights
        return data

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "DatasetSummary":
        return cls(
            id=str(data["id"]),
            file_name=data["fileName"],
            upload_date=data["uploadDate"],
            total_count=int(data["totalCount"]),
            avg_flowrate=float(data["avgFlowrate"]),
            avg_pressure=float(data["avgPressure"]),
            avg_temperature=float(data["avgTemperature"]),
            outlier_count=int(data["outlierCount"]),
            type_distribution={
                str(k): int(v) for k, v in data["typeDistribution"].items()
            },
            data_quality_score=int(data["dataQualityScore"]),
            classification=data.get(
                "classification", get_setting("PENDING_CLASSIFICATION")
            ),
            ai_insights=data.get("aiInsights"),
        )
