"""Energy model: a pure cost function over room-to-cell assignments."""

from roomlayout.energy.model import (
    AssignmentGrid,
    EnergyBreakdown,
    EnergyWeights,
    compute_energy,
    energy_breakdown,
    grid_from_cells,
    link_pairs,
)

__all__ = [
    "AssignmentGrid",
    "EnergyWeights",
    "EnergyBreakdown",
    "compute_energy",
    "energy_breakdown",
    "grid_from_cells",
    "link_pairs",
]
