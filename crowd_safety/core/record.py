"""Per-location record schema produced by each generation cycle."""

from __future__ import annotations

from dataclasses import asdict, dataclass
from enum import Enum
from typing import Any

SCHEMA_VERSION = 2


class Scenario(str, Enum):
    NORMAL = "Normal"
    FESTIVAL = "Festival"
    WEEKEND = "Weekend"
    EMERGENCY = "Emergency"

    @classmethod
    def parse(cls, value: str | Scenario) -> Scenario:
        """Accept either an enum member or its display value."""
        if isinstance(value, cls):
            return value
        for member in cls:
            if member.value.lower() == str(value).lower():
                return member
        raise ValueError(f"unknown scenario: {value!r}")


class RoadCondition(str, Enum):
    GOOD = "Good"
    POTHOLES = "Potholes"
    CONSTRUCTION = "Construction"
    BLOCKED = "Blocked"


class WasteIndex(str, Enum):
    CLEAN = "Clean"
    MODERATE = "Moderate"
    HIGH_ACCUMULATION = "High Accumulation"


class ElectricityStatus(str, Enum):
    STABLE = "Stable"
    FLUCTUATING = "Fluctuating"
    OUTAGE = "Outage"


class DiseaseRisk(str, Enum):
    LOW = "Low"
    MODERATE = "Moderate"
    HIGH = "High"


# Fields of the earlier, infrastructure-free revision of the record.
MINIMAL_FIELDS: tuple[str, ...] = (
    "id", "name", "lat", "lon", "base_capacity", "current_crowd",
    "risk_score", "scenario", "confidence", "inflow_rate", "outflow_rate",
    "temperature", "humidity", "aqi", "last_updated",
)


@dataclass(frozen=True)
class LocationRecord:
    """One location's metrics for a single generation cycle.

    The extended (infrastructure-aware) schema is canonical; the minimal
    schema is exposed only as a projection through :meth:`to_dict`.
    """

    id: str
    name: str
    lat: float
    lon: float
    base_capacity: int
    scenario: Scenario
    current_crowd: int
    risk_score: int
    confidence: float
    inflow_rate: int
    outflow_rate: int
    temperature: int
    humidity: int
    aqi: int
    last_updated: str
    electricity_status: ElectricityStatus
    street_light_coverage: int
    road_condition: RoadCondition
    waste_index: WasteIndex
    bus_frequency: int
    sanitation_score: int
    disease_risk: DiseaseRisk

    @property
    def occupancy(self) -> float:
        """Current crowd as a fraction of base capacity."""
        return self.current_crowd / self.base_capacity

    def to_dict(self, minimal: bool = False) -> dict[str, Any]:
        """Plain-value dict with enum members flattened to their labels."""
        raw = asdict(self)
        out: dict[str, Any] = {"schema_version": 1 if minimal else SCHEMA_VERSION}
        keys = MINIMAL_FIELDS if minimal else tuple(raw)
        for key in keys:
            value = raw[key]
            out[key] = value.value if isinstance(value, Enum) else value
        return out
