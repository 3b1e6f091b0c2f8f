"""Matplotlib-based static views of a district snapshot."""

from __future__ import annotations

from typing import Any, Callable

import numpy as np
import matplotlib.pyplot as plt
import matplotlib.colors as mcolors

from ..core.record import LocationRecord, Scenario
from ..simulation.snapshot import Snapshot

SCENARIO_COLORS = {
    Scenario.NORMAL.value: "#00C851",
    Scenario.FESTIVAL.value: "#764ba2",
    Scenario.WEEKEND.value: "#ffbb33",
    Scenario.EMERGENCY.value: "#ff4444",
}


class SnapshotRenderer:
    """Renders location records on a lon/lat plane."""

    def __init__(self, snapshot: Snapshot) -> None:
        self.snapshot = snapshot

    def _positions(self) -> tuple[np.ndarray, np.ndarray]:
        xs = np.array([r.lon for r in self.snapshot], dtype=float)
        ys = np.array([r.lat for r in self.snapshot], dtype=float)
        return xs, ys

    def render_scalar_field(
        self,
        value_fn: Callable[[LocationRecord], float],
        *,
        title: str = "Risk Score",
        cmap: str = "YlOrRd",
        vmin: float | None = 0,
        vmax: float | None = 100,
        show_labels: bool = False,
        ax: Any = None,
    ) -> Any:
        """Draw locations colored by a numeric attribute."""
        if ax is None:
            _fig, ax = plt.subplots(1, 1, figsize=(8, 8))

        xs, ys = self._positions()
        vals = np.array([value_fn(r) for r in self.snapshot], dtype=float)

        sc = ax.scatter(
            xs, ys, c=vals, cmap=cmap, s=120, edgecolors="black",
            linewidths=0.5, zorder=2, vmin=vmin, vmax=vmax,
        )
        plt.colorbar(sc, ax=ax, shrink=0.8)

        if show_labels:
            for r in self.snapshot:
                ax.annotate(
                    r.name, (r.lon, r.lat),
                    textcoords="offset points", xytext=(5, 5),
                    fontsize=6, color="gray",
                )

        ax.set_title(title)
        ax.set_xlabel("Longitude")
        ax.set_ylabel("Latitude")
        return ax

    def render_categorical_field(
        self,
        label_fn: Callable[[LocationRecord], str],
        *,
        title: str = "Categorical Field",
        color_map: dict[str, str] | None = None,
        ax: Any = None,
    ) -> Any:
        """Draw locations colored by a label (scenario, road condition...)."""
        if ax is None:
            _fig, ax = plt.subplots(1, 1, figsize=(8, 8))

        xs, ys = self._positions()
        labels = [label_fn(r) for r in self.snapshot]
        unique = sorted(set(labels))

        if color_map is None:
            tab_colors = list(mcolors.TABLEAU_COLORS.values())
            color_map = {lbl: tab_colors[i % len(tab_colors)] for i, lbl in enumerate(unique)}

        colors = [color_map.get(lbl, "gray") for lbl in labels]
        ax.scatter(xs, ys, c=colors, s=120, edgecolors="black",
                   linewidths=0.5, zorder=2)

        # Legend
        for lbl in unique:
            ax.scatter([], [], c=color_map.get(lbl, "gray"), label=lbl, s=60)
        ax.legend(loc="upper right", fontsize=8)

        ax.set_title(title)
        ax.set_xlabel("Longitude")
        ax.set_ylabel("Latitude")
        return ax

    def render_scenario_mix(self, *, title: str = "Scenario Mix", ax: Any = None) -> Any:
        """Bar chart of how many locations fall in each scenario."""
        if ax is None:
            _fig, ax = plt.subplots(1, 1, figsize=(6, 4))
        counts = self.snapshot.summary()["scenarios"]
        names = list(counts)
        ax.bar(names, [counts[n] for n in names],
               color=[SCENARIO_COLORS[n] for n in names])
        ax.set_title(title)
        ax.set_ylabel("Locations")
        return ax
