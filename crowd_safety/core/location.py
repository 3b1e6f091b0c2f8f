"""Location registry for the monitored district.

A registry is a static, ordered collection of named points.  It is built
once at start-up, validated eagerly, and never mutated afterwards.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Any, Iterable, Iterator


class RegistryError(ValueError):
    """Raised when a registry entry cannot be used for generation."""


@dataclass(frozen=True)
class Location:
    """A monitored point with its nominal sustainable occupancy."""

    name: str
    lat: float
    lon: float
    base_capacity: int

    def __post_init__(self) -> None:
        if not isinstance(self.name, str) or not self.name.strip():
            raise RegistryError("location name must be a non-empty string")
        for axis, value, bound in (("lat", self.lat, 90.0), ("lon", self.lon, 180.0)):
            if isinstance(value, bool) or not isinstance(value, (int, float)):
                raise RegistryError(f"{self.name}: {axis} must be a number")
            if not math.isfinite(value) or abs(value) > bound:
                raise RegistryError(f"{self.name}: {axis}={value!r} out of range")
        cap = self.base_capacity
        if isinstance(cap, bool) or not isinstance(cap, int):
            raise RegistryError(f"{self.name}: base_capacity must be an integer")
        if cap <= 0:
            raise RegistryError(f"{self.name}: base_capacity must be positive, got {cap}")


class LocationRegistry:
    """Ordered, name-unique collection of :class:`Location` entries."""

    def __init__(self, locations: Iterable[Location]) -> None:
        entries = tuple(locations)
        if not entries:
            raise RegistryError("registry must contain at least one location")
        seen: set[str] = set()
        for loc in entries:
            if not isinstance(loc, Location):
                raise RegistryError(f"registry entries must be Location, got {type(loc).__name__}")
            if loc.name in seen:
                raise RegistryError(f"duplicate location name: {loc.name}")
            seen.add(loc.name)
        self._locations = entries

    def __len__(self) -> int:
        return len(self._locations)

    def __iter__(self) -> Iterator[Location]:
        return iter(self._locations)

    def __getitem__(self, index: int) -> Location:
        return self._locations[index]

    @property
    def names(self) -> list[str]:
        return [loc.name for loc in self._locations]

    def get(self, name: str) -> Location | None:
        for loc in self._locations:
            if loc.name == name:
                return loc
        return None

    # ── Factory helpers ──────────────────────────────────────────────

    @classmethod
    def from_dicts(cls, rows: Iterable[dict[str, Any]]) -> LocationRegistry:
        """Build a registry from ``{"name", "lat", "lon", "baseCapacity"}`` rows.

        Both ``baseCapacity`` and ``base_capacity`` keys are accepted.
        """
        locations = []
        for row in rows:
            cap = row.get("base_capacity", row.get("baseCapacity"))
            if cap is None:
                raise RegistryError(f"{row.get('name', '?')}: missing base capacity")
            locations.append(Location(
                name=row.get("name", ""),
                lat=row.get("lat"),
                lon=row.get("lon"),
                base_capacity=cap,
            ))
        return cls(locations)


VARANASI_LOCATIONS: list[dict[str, Any]] = [
    {"name": "Dashashwamedh Ghat",      "lat": 25.3109, "lon": 83.0107, "baseCapacity": 5000},
    {"name": "Godowlia Chowk",          "lat": 25.3116, "lon": 83.0103, "baseCapacity": 3000},
    {"name": "Vishwanath Gali",         "lat": 25.3108, "lon": 83.0097, "baseCapacity": 2000},
    {"name": "Kashi Vishwanath Temple", "lat": 25.3109, "lon": 83.0106, "baseCapacity": 4000},
    {"name": "Assi Ghat",               "lat": 25.2876, "lon": 83.0053, "baseCapacity": 3500},
    {"name": "Manikarnika Ghat",        "lat": 25.3142, "lon": 83.0147, "baseCapacity": 2500},
    {"name": "Varanasi Junction",       "lat": 25.3189, "lon": 83.0260, "baseCapacity": 8000},
    {"name": "BHU Main Gate",           "lat": 25.2677, "lon": 82.9913, "baseCapacity": 4000},
    {"name": "Sigra Chauraha",          "lat": 25.3252, "lon": 82.9876, "baseCapacity": 3000},
    {"name": "Lanka Chowk",             "lat": 25.2756, "lon": 82.9923, "baseCapacity": 2500},
    {"name": "Bhelupur",                "lat": 25.2989, "lon": 82.9912, "baseCapacity": 2000},
    {"name": "Lahartara Chowk",         "lat": 25.3401, "lon": 83.0123, "baseCapacity": 2500},
    {"name": "Nadesar",                 "lat": 25.3312, "lon": 82.9834, "baseCapacity": 1500},
    {"name": "Sarnath",                 "lat": 25.3814, "lon": 83.0225, "baseCapacity": 3000},
    {"name": "Ramnagar Fort",           "lat": 25.2876, "lon": 83.0312, "baseCapacity": 2000},
    {"name": "Tulsi Ghat",              "lat": 25.2923, "lon": 83.0034, "baseCapacity": 1500},
    {"name": "Harishchandra Ghat",      "lat": 25.3034, "lon": 83.0089, "baseCapacity": 1800},
    {"name": "Kedar Ghat",              "lat": 25.3056, "lon": 83.0078, "baseCapacity": 1600},
    {"name": "Meer Ghat",               "lat": 25.3078, "lon": 83.0098, "baseCapacity": 1400},
    {"name": "Pandey Ghat",             "lat": 25.3023, "lon": 83.0067, "baseCapacity": 1200},
]


def default_registry() -> LocationRegistry:
    """The compiled-in Varanasi registry."""
    return LocationRegistry.from_dicts(VARANASI_LOCATIONS)
