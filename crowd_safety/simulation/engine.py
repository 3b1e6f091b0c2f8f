"""Monitoring engine: regenerates the district snapshot each round."""

from __future__ import annotations

import logging
from typing import Any

import pandas as pd

from ..core.location import LocationRegistry
from ..core.record import Scenario
from .generator import SyntheticGenerator
from .snapshot import Snapshot

logger = logging.getLogger(__name__)


class MonitorEngine:
    """Synchronous refresh loop over a fixed registry.

    Each :meth:`step` produces a brand-new snapshot that replaces the
    previous one wholesale.  A bounded list of recent snapshots is kept for
    trend charts only; nothing is carried from one round into the next.
    """

    def __init__(
        self,
        registry: LocationRegistry,
        generator: SyntheticGenerator | None = None,
        history_size: int = 30,
    ) -> None:
        if history_size < 1:
            raise ValueError("history_size must be at least 1")
        self.registry = registry
        self.generator = generator or SyntheticGenerator()
        self.history_size = history_size
        self.round_count = 0
        self.snapshot: Snapshot | None = None
        # Most recent snapshots, oldest first
        self.history: list[Snapshot] = []
        logger.info("Monitoring %d locations (history=%d)", len(registry), history_size)

    def step(self, scenario: Scenario | str | None = None) -> Snapshot:
        """Generate and install a fresh snapshot."""
        snap = self.generator.generate(self.registry, scenario=scenario,
                                       sequence=self.round_count)
        self.round_count += 1
        self.snapshot = snap
        self.history.append(snap)
        if len(self.history) > self.history_size:
            del self.history[: len(self.history) - self.history_size]
        logger.debug("Snapshot %d generated at %s", snap.sequence,
                     snap.generated_at.isoformat(timespec="seconds"))
        return snap

    def run(self, num_rounds: int) -> list[Snapshot]:
        """Run *num_rounds* refreshes. Returns the retained history."""
        for _ in range(num_rounds):
            self.step()
        return self.history

    def current(self) -> Snapshot:
        """The latest snapshot, generating the first one on demand."""
        if self.snapshot is None:
            return self.step()
        return self.snapshot

    def get_field(self, key: str) -> dict[str, Any]:
        """Map record id to attribute *key* of the latest snapshot."""
        return {r.id: getattr(r, key) for r in self.current()}

    def timeline(self, key: str = "risk_score") -> pd.DataFrame:
        """Per-location series of *key* across retained history.

        Rows are snapshot sequence numbers, columns are location names.
        """
        rows = {
            snap.sequence: {r.name: getattr(r, key) for r in snap}
            for snap in self.history
        }
        frame = pd.DataFrame.from_dict(rows, orient="index")
        frame.index.name = "round"
        return frame
