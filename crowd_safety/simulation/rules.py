"""Scenario profiles and derived-metric correlation rules.

Every function here is deterministic given the values drawn from *rng*.
Each rule consumes a fixed number of draws, so the order in which the
generator calls them fully determines a snapshot for a seeded source.
"""

from __future__ import annotations

import math
from typing import NamedTuple, Protocol

from ..core.record import (
    DiseaseRisk,
    ElectricityStatus,
    RoadCondition,
    Scenario,
    WasteIndex,
)


class RandomSource(Protocol):
    """Anything exposing ``random() -> float`` in ``[0, 1)``."""

    def random(self) -> float: ...


def uniform(rng: RandomSource, low: float, high: float) -> float:
    """One draw mapped onto ``[low, high)``."""
    return low + float(rng.random()) * (high - low)


# ── Scenario profiles ────────────────────────────────────────────────

class ScenarioProfile(NamedTuple):
    surge_low: float
    surge_high: float
    confidence_base: float


SCENARIO_PROFILES: dict[Scenario, ScenarioProfile] = {
    Scenario.FESTIVAL: ScenarioProfile(15.0, 35.0, 0.75),
    Scenario.WEEKEND: ScenarioProfile(2.0, 5.0, 0.90),
    Scenario.EMERGENCY: ScenarioProfile(0.3, 0.8, 0.65),
    Scenario.NORMAL: ScenarioProfile(1.0, 2.0, 0.95),
}

# Upper thresholds on a single uniform draw, checked top-down.
SCENARIO_THRESHOLDS: tuple[tuple[float, Scenario], ...] = (
    (0.95, Scenario.EMERGENCY),
    (0.80, Scenario.WEEKEND),
    (0.60, Scenario.FESTIVAL),
)


def draw_scenario(rng: RandomSource) -> Scenario:
    """Normal 60%, Festival 20%, Weekend 15%, Emergency 5%."""
    r = rng.random()
    for threshold, scenario in SCENARIO_THRESHOLDS:
        if r > threshold:
            return scenario
    return Scenario.NORMAL


def draw_surge(rng: RandomSource, scenario: Scenario) -> tuple[float, float]:
    """Return ``(surge_ratio, confidence_base)`` for *scenario*."""
    profile = SCENARIO_PROFILES[scenario]
    return uniform(rng, profile.surge_low, profile.surge_high), profile.confidence_base


# ── Crowd and risk ───────────────────────────────────────────────────

def density_risk(rng: RandomSource, surge: float) -> float:
    """Density-based risk: ``min(100, u * surge * surge * 5)``, ``u`` in [0.5, 2)."""
    density = uniform(rng, 0.5, 2.0) * surge
    return min(100.0, density * surge * 5)


def festival_risk(rng: RandomSource) -> float:
    """Festivals are always elevated: uniform in [50, 100), ignoring density."""
    return min(100.0, 50 + rng.random() * 50)


def draw_crowd(rng: RandomSource, base_capacity: int, surge: float) -> int:
    return math.floor(base_capacity * surge * uniform(rng, 0.8, 1.2))


def draw_confidence(rng: RandomSource, base: float, clamp: bool = True) -> float:
    value = base + uniform(rng, -0.05, 0.05)
    if clamp:
        value = min(1.0, max(0.0, value))
    return round(value, 2)


def draw_flows(rng: RandomSource, surge: float) -> tuple[int, int]:
    """Return ``(inflow, outflow)``; outflow is 60-110% of inflow."""
    inflow = math.floor(uniform(rng, 50, 500) * surge)
    outflow = math.floor(inflow * uniform(rng, 0.6, 1.1))
    return inflow, outflow


# ── Infrastructure correlations ──────────────────────────────────────

ROAD_STATES: tuple[RoadCondition, ...] = (
    RoadCondition.GOOD,
    RoadCondition.GOOD,
    RoadCondition.POTHOLES,
    RoadCondition.CONSTRUCTION,
    RoadCondition.BLOCKED,
)

IMPASSABLE = frozenset({RoadCondition.BLOCKED, RoadCondition.CONSTRUCTION})


def road_condition(rng: RandomSource, risk: float) -> RoadCondition:
    """High risk forces Blocked/Construction, low risk forces Good."""
    road = ROAD_STATES[min(int(rng.random() * len(ROAD_STATES)), len(ROAD_STATES) - 1)]
    if risk > 80:
        road = RoadCondition.BLOCKED if rng.random() > 0.3 else RoadCondition.CONSTRUCTION
    if risk < 30:
        road = RoadCondition.GOOD
    return road


def waste_index(current_crowd: int, base_capacity: int) -> WasteIndex:
    if current_crowd > base_capacity * 1.5:
        return WasteIndex.HIGH_ACCUMULATION
    if current_crowd > base_capacity:
        return WasteIndex.MODERATE
    return WasteIndex.CLEAN


ELECTRICITY_MODELS = ("sequential", "categorical")


def electricity_status(rng: RandomSource, model: str = "sequential") -> ElectricityStatus:
    """Grid state for one location.

    ``sequential`` runs two independent checks, the second overwriting the
    first, so Outage can appear without Fluctuating.  ``categorical`` makes
    a single mutually exclusive draw with the same 10% / 2% marginals.
    """
    if model == "sequential":
        status = ElectricityStatus.STABLE
        if rng.random() > 0.9:
            status = ElectricityStatus.FLUCTUATING
        if rng.random() > 0.98:
            status = ElectricityStatus.OUTAGE
        return status
    if model == "categorical":
        r = rng.random()
        if r > 0.98:
            return ElectricityStatus.OUTAGE
        if r > 0.88:
            return ElectricityStatus.FLUCTUATING
        return ElectricityStatus.STABLE
    raise ValueError(f"unknown electricity model: {model!r}")


def street_light_coverage(rng: RandomSource) -> int:
    return math.floor(uniform(rng, 85, 100))


def bus_frequency(rng: RandomSource, road: RoadCondition) -> int:
    """Buses per hour, 2-9; cut by 4 (not below 0) on impassable roads."""
    buses = math.floor(uniform(rng, 2, 10))
    if road in IMPASSABLE:
        buses = max(0, buses - 4)
    return buses


SANITATION_WASTE_PENALTY = 30


def sanitation_score(rng: RandomSource, waste: WasteIndex) -> int:
    score = math.floor(uniform(rng, 60, 100))
    if waste is WasteIndex.HIGH_ACCUMULATION:
        score -= SANITATION_WASTE_PENALTY
    return score


def disease_risk(sanitation: int, risk: float) -> DiseaseRisk:
    if sanitation < 40 or risk > 90:
        return DiseaseRisk.HIGH
    if sanitation < 70:
        return DiseaseRisk.MODERATE
    return DiseaseRisk.LOW


def air_quality(rng: RandomSource, road: RoadCondition, buses: int) -> int:
    """Base AQI plus construction dust and bus emissions."""
    aqi = uniform(rng, 100, 200)
    if road is RoadCondition.CONSTRUCTION:
        aqi += 50
    if buses > 5:
        aqi += 20
    return math.floor(aqi)
