"""Tests for snapshot projections."""

from __future__ import annotations

from dataclasses import replace
from datetime import datetime

import numpy as np
import pytest

from crowd_safety.core.location import Location, LocationRegistry
from crowd_safety.core.record import RoadCondition, Scenario
from crowd_safety.simulation.generator import SyntheticGenerator
from crowd_safety.simulation.snapshot import Snapshot


def _base_record():
    reg = LocationRegistry([Location("Base", 25.3, 83.0, 1000)])
    gen = SyntheticGenerator(np.random.default_rng(0), clock=lambda: datetime(2026, 1, 1))
    return gen.generate(reg)[0]


def _snapshot(*specs) -> Snapshot:
    """Build a snapshot from ``(name, overrides)`` pairs."""
    base = _base_record()
    records = tuple(
        replace(base, id=f"LOC-{100 + i}", name=name, **overrides)
        for i, (name, overrides) in enumerate(specs)
    )
    return Snapshot(records=records, generated_at=datetime(2026, 1, 1), sequence=3)


@pytest.fixture
def snap():
    return _snapshot(
        ("Calm", dict(scenario=Scenario.NORMAL, risk_score=10, current_crowd=500,
                      road_condition=RoadCondition.GOOD, confidence=0.95)),
        ("Busy", dict(scenario=Scenario.FESTIVAL, risk_score=90, current_crowd=30000,
                      road_condition=RoadCondition.BLOCKED, confidence=0.72)),
        ("Edge", dict(scenario=Scenario.WEEKEND, risk_score=60, current_crowd=3000,
                      road_condition=RoadCondition.CONSTRUCTION, confidence=0.88)),
        ("Quiet", dict(scenario=Scenario.NORMAL, risk_score=35, current_crowd=700,
                       road_condition=RoadCondition.GOOD, confidence=0.99)),
        ("Crowded", dict(scenario=Scenario.NORMAL, risk_score=20, current_crowd=900,
                         road_condition=RoadCondition.GOOD, confidence=0.93)),
    )


class TestScenarioFilter:
    def test_filter(self, snap):
        view = snap.by_scenario("Normal")
        assert [r.name for r in view] == ["Calm", "Quiet", "Crowded"]
        assert view.generated_at == snap.generated_at
        assert view.sequence == snap.sequence

    def test_filter_does_not_mutate(self, snap):
        before = snap.records
        snap.by_scenario(Scenario.FESTIVAL)
        assert snap.records is before
        assert len(snap) == 5

    def test_all_returns_copy(self, snap):
        view = snap.by_scenario("All")
        assert view is not snap
        assert view.records == snap.records

    def test_unknown_scenario(self, snap):
        with pytest.raises(ValueError):
            snap.by_scenario("Holiday")


class TestViews:
    def test_high_risk_strict_and_sorted(self, snap):
        assert [r.name for r in snap.high_risk(60)] == ["Busy"]
        assert [r.name for r in snap.high_risk(30)] == ["Busy", "Edge", "Quiet"]

    def test_count_at_or_above(self, snap):
        assert snap.count_at_or_above(60) == 2

    def test_safe_places(self, snap):
        # Crowded is under 40 risk but at 90% capacity
        assert snap.get("LOC-104").occupancy == pytest.approx(0.9)
        assert [r.name for r in snap.safe_places()] == ["Calm", "Quiet"]

    def test_avoid_places(self, snap):
        assert [r.name for r in snap.avoid_places()] == ["Busy", "Edge"]

    def test_needs_review(self, snap):
        assert [r.name for r in snap.needs_review(0.90)] == ["Busy", "Edge"]
        assert [r.name for r in snap.needs_review(0.90, reviewed={"LOC-101"})] == ["Edge"]

    def test_top_congested(self, snap):
        assert [r.name for r in snap.top_congested(2)] == ["Busy", "Edge"]

    def test_summary(self, snap):
        s = snap.summary(60)
        assert s["zones"] == 5
        assert s["total_crowd"] == 500 + 30000 + 3000 + 700 + 900
        assert s["mean_risk"] == pytest.approx(43.0)
        assert s["high_risk"] == 2
        assert s["scenarios"] == {"Normal": 3, "Festival": 1, "Weekend": 1, "Emergency": 0}

    def test_lookup(self, snap):
        assert snap.get("LOC-102").name == "Edge"
        assert snap.get("LOC-999") is None


class TestFrame:
    def test_to_frame(self, snap):
        frame = snap.to_frame()
        assert len(frame) == 5
        assert list(frame["name"]) == ["Calm", "Busy", "Edge", "Quiet", "Crowded"]
        assert frame.loc[1, "road_condition"] == "Blocked"

    def test_minimal_frame(self, snap):
        frame = snap.to_frame(minimal=True)
        assert "road_condition" not in frame.columns
        assert "risk_score" in frame.columns
