"""Immutable generation output and the read-only views derived from it."""

from __future__ import annotations

from collections import Counter
from dataclasses import dataclass, replace
from datetime import datetime
from typing import Any, Iterable, Iterator

import pandas as pd

from ..core.record import LocationRecord, RoadCondition, Scenario

ALL_SCENARIOS = "All"


@dataclass(frozen=True)
class Snapshot:
    """Ordered records from one generation call, in registry order.

    A snapshot is never updated in place.  Every projection below returns
    a new object (or a fresh list) and leaves ``records`` untouched.
    """

    records: tuple[LocationRecord, ...]
    generated_at: datetime
    sequence: int = 0

    def __len__(self) -> int:
        return len(self.records)

    def __iter__(self) -> Iterator[LocationRecord]:
        return iter(self.records)

    def __getitem__(self, index: int) -> LocationRecord:
        return self.records[index]

    @property
    def ids(self) -> list[str]:
        return [r.id for r in self.records]

    def get(self, record_id: str) -> LocationRecord | None:
        for r in self.records:
            if r.id == record_id:
                return r
        return None

    # ── Projections ──────────────────────────────────────────────────

    def by_scenario(self, scenario: Scenario | str) -> Snapshot:
        """Subset for one scenario; ``"All"`` returns an equal copy."""
        if scenario == ALL_SCENARIOS:
            return replace(self, records=tuple(self.records))
        wanted = Scenario.parse(scenario)
        return replace(self, records=tuple(r for r in self.records if r.scenario is wanted))

    def high_risk(self, threshold: float = 60) -> list[LocationRecord]:
        """Records strictly above *threshold*, riskiest first."""
        hits = [r for r in self.records if r.risk_score > threshold]
        return sorted(hits, key=lambda r: r.risk_score, reverse=True)

    def count_at_or_above(self, threshold: float) -> int:
        return sum(1 for r in self.records if r.risk_score >= threshold)

    def safe_places(self, limit: int = 6) -> list[LocationRecord]:
        """Low-risk, under-capacity locations with clear roads."""
        hits = [
            r for r in self.records
            if r.risk_score < 40
            and r.occupancy < 0.8
            and r.road_condition is RoadCondition.GOOD
        ]
        return sorted(hits, key=lambda r: r.risk_score)[:limit]

    def avoid_places(self, limit: int = 5) -> list[LocationRecord]:
        hits = [
            r for r in self.records
            if r.risk_score > 60
            or r.road_condition in (RoadCondition.BLOCKED, RoadCondition.CONSTRUCTION)
        ]
        return sorted(hits, key=lambda r: r.risk_score, reverse=True)[:limit]

    def needs_review(
        self,
        confidence_threshold: float,
        reviewed: Iterable[str] = (),
    ) -> list[LocationRecord]:
        """Low-confidence predictions not yet acknowledged by an operator."""
        done = set(reviewed)
        return [
            r for r in self.records
            if r.confidence < confidence_threshold and r.id not in done
        ]

    def top_congested(self, limit: int = 10) -> list[LocationRecord]:
        return sorted(self.records, key=lambda r: r.current_crowd, reverse=True)[:limit]

    def summary(self, risk_threshold: float = 60) -> dict[str, Any]:
        n = len(self.records)
        counts = Counter(r.scenario.value for r in self.records)
        return {
            "zones": n,
            "total_crowd": sum(r.current_crowd for r in self.records),
            "mean_risk": sum(r.risk_score for r in self.records) / n if n else 0.0,
            "high_risk": self.count_at_or_above(risk_threshold),
            "scenarios": {s.value: counts.get(s.value, 0) for s in Scenario},
        }

    def to_frame(self, minimal: bool = False) -> pd.DataFrame:
        """One row per record, columns in schema order."""
        rows = [r.to_dict(minimal=minimal) for r in self.records]
        return pd.DataFrame(rows)
