"""Synthetic metrics generator.

Produces one :class:`LocationRecord` per registry entry.  All randomness
is drawn from an injected source, so a seeded ``numpy`` generator makes
the whole snapshot reproducible.
"""

from __future__ import annotations

from datetime import datetime
from typing import Callable

import numpy as np

from ..core.location import Location, LocationRegistry, default_registry
from ..core.record import LocationRecord, Scenario
from . import rules
from .rules import RandomSource
from .snapshot import Snapshot

ID_OFFSET = 100


class SyntheticGenerator:
    """Stateless (with respect to history) snapshot factory.

    Parameters
    ----------
    rng:
        Random source exposing ``random()``; defaults to
        ``np.random.default_rng(seed)``.
    clamp_confidence:
        Clamp confidence to ``[0, 1]`` after jitter.
    electricity_model:
        ``"sequential"`` or ``"categorical"``, see
        :func:`rules.electricity_status`.
    clock:
        Zero-argument callable returning the generation time.
    """

    def __init__(
        self,
        rng: RandomSource | None = None,
        *,
        seed: int | None = None,
        clamp_confidence: bool = True,
        electricity_model: str = "sequential",
        clock: Callable[[], datetime] | None = None,
    ) -> None:
        if electricity_model not in rules.ELECTRICITY_MODELS:
            raise ValueError(f"unknown electricity model: {electricity_model!r}")
        self.rng = rng if rng is not None else np.random.default_rng(seed)
        self.clamp_confidence = clamp_confidence
        self.electricity_model = electricity_model
        self.clock = clock or datetime.now

    def generate(
        self,
        registry: LocationRegistry,
        scenario: Scenario | str | None = None,
        sequence: int = 0,
    ) -> Snapshot:
        """Generate a full snapshot for *registry*.

        If *scenario* is given every location uses it and no scenario
        draw is consumed.
        """
        forced = Scenario.parse(scenario) if scenario is not None else None
        now = self.clock()
        stamp = now.strftime("%H:%M:%S")
        records = tuple(
            self._record(index, loc, stamp, forced)
            for index, loc in enumerate(registry)
        )
        return Snapshot(records=records, generated_at=now, sequence=sequence)

    def _record(
        self,
        index: int,
        loc: Location,
        stamp: str,
        forced: Scenario | None,
    ) -> LocationRecord:
        rng = self.rng
        scenario = forced if forced is not None else rules.draw_scenario(rng)
        surge, confidence_base = rules.draw_surge(rng, scenario)

        risk = rules.density_risk(rng, surge)
        if scenario is Scenario.FESTIVAL:
            risk = rules.festival_risk(rng)

        crowd = rules.draw_crowd(rng, loc.base_capacity, surge)
        confidence = rules.draw_confidence(rng, confidence_base, self.clamp_confidence)
        inflow, outflow = rules.draw_flows(rng, surge)

        road = rules.road_condition(rng, risk)
        waste = rules.waste_index(crowd, loc.base_capacity)
        power = rules.electricity_status(rng, self.electricity_model)
        lights = rules.street_light_coverage(rng)
        buses = rules.bus_frequency(rng, road)
        sanitation = rules.sanitation_score(rng, waste)
        disease = rules.disease_risk(sanitation, risk)
        aqi = rules.air_quality(rng, road, buses)

        return LocationRecord(
            id=f"LOC-{index + ID_OFFSET}",
            name=loc.name,
            lat=loc.lat,
            lon=loc.lon,
            base_capacity=loc.base_capacity,
            scenario=scenario,
            current_crowd=crowd,
            risk_score=int(risk),
            confidence=confidence,
            inflow_rate=inflow,
            outflow_rate=outflow,
            temperature=int(rules.uniform(rng, 28, 33)),
            humidity=int(rules.uniform(rng, 60, 80)),
            aqi=aqi,
            last_updated=stamp,
            electricity_status=power,
            street_light_coverage=lights,
            road_condition=road,
            waste_index=waste,
            bus_frequency=buses,
            sanitation_score=sanitation,
            disease_risk=disease,
        )


def generate_snapshot(
    registry: LocationRegistry | None = None,
    rng: RandomSource | None = None,
) -> Snapshot:
    """Zero-argument entry point: one snapshot of the default registry."""
    return SyntheticGenerator(rng).generate(registry or default_registry())
