"""Tests for the monitoring engine."""

from __future__ import annotations

import logging

import numpy as np
import pytest

from crowd_safety.core.location import default_registry
from crowd_safety.core.record import Scenario
from crowd_safety.simulation.engine import MonitorEngine
from crowd_safety.simulation.generator import SyntheticGenerator


def _engine(history_size: int = 5) -> MonitorEngine:
    gen = SyntheticGenerator(np.random.default_rng(11))
    return MonitorEngine(default_registry(), gen, history_size=history_size)


class TestMonitorEngine:
    def test_step_replaces_snapshot(self):
        engine = _engine()
        first = engine.step()
        second = engine.step()
        assert engine.snapshot is second
        assert second is not first
        assert first.sequence == 0
        assert second.sequence == 1
        assert engine.round_count == 2

    def test_previous_snapshot_untouched(self):
        engine = _engine()
        first = engine.step()
        crowds = [r.current_crowd for r in first]
        engine.step()
        assert [r.current_crowd for r in first] == crowds

    def test_history_bounded(self):
        engine = _engine(history_size=3)
        history = engine.run(7)
        assert len(history) == 3
        assert [s.sequence for s in history] == [4, 5, 6]

    def test_current_generates_on_demand(self):
        engine = _engine()
        assert engine.snapshot is None
        snap = engine.current()
        assert len(snap) == 20
        assert engine.current() is snap

    def test_forced_scenario(self):
        engine = _engine()
        snap = engine.step(scenario=Scenario.EMERGENCY)
        assert {r.scenario for r in snap} == {Scenario.EMERGENCY}

    def test_get_field(self):
        engine = _engine()
        engine.step()
        field = engine.get_field("risk_score")
        assert list(field) == engine.snapshot.ids
        assert all(0 <= v <= 100 for v in field.values())

    def test_timeline(self):
        engine = _engine(history_size=4)
        engine.run(6)
        frame = engine.timeline("current_crowd")
        assert frame.shape == (4, 20)
        assert list(frame.index) == [2, 3, 4, 5]
        assert frame.loc[5, "Sarnath"] == next(
            r.current_crowd for r in engine.snapshot if r.name == "Sarnath"
        )

    def test_invalid_history_size(self):
        with pytest.raises(ValueError):
            MonitorEngine(default_registry(), history_size=0)

    def test_logs_start_up(self, caplog):
        with caplog.at_level(logging.INFO, logger="crowd_safety.simulation.engine"):
            _engine()
        assert "Monitoring 20 locations" in caplog.text
