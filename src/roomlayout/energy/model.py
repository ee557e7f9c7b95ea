"""Spatial cost of a room-to-cell assignment (lower is better).

Every unordered pair of distinct, room-assigned cells is classified into
buckets:
- center-of-mass: every pair
- intra-room: pairs in the same room
- inter-room: pairs whose rooms are linked (never also intra-room)

Each bucket contributes mean(squared grid distance) ** weight, or 0 when
the bucket is empty. Dividing by the pair count normalizes the buckets with
respect to each other.

Usage:
    grid = grid_from_cells(cells)
    energy = compute_energy(grid, link_pairs(links), EnergyWeights())
"""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from dataclasses import dataclass

from roomlayout.core.types import RecordId
from roomlayout.models.cell import Cell
from roomlayout.models.link import Link

AssignmentGrid = Sequence[Sequence[RecordId | None]]
"""grid[row][col] is a room id, or None for an unusable or unassigned cell."""


@dataclass(frozen=True, slots=True)
class EnergyWeights:
    """Exponents applied to each bucket's mean squared distance. All positive."""

    center_of_mass: float = 0.5
    intra_room: float = 2.0
    inter_room: float = 1.0

    def __post_init__(self) -> None:
        for name in ("center_of_mass", "intra_room", "inter_room"):
            value = getattr(self, name)
            if not value > 0:
                raise ValueError(f"Energy weight '{name}' must be positive, got {value}")


@dataclass(slots=True)
class _Bucket:
    count: int = 0
    total: float = 0.0

    def add(self, squared_distance: float) -> None:
        self.count += 1
        self.total += squared_distance

    def term(self, weight: float) -> float:
        if self.count == 0:
            return 0.0
        return (self.total / self.count) ** weight


@dataclass(frozen=True, slots=True)
class EnergyBreakdown:
    """Weighted contribution of each bucket."""

    center_of_mass: float
    intra_room: float
    inter_room: float

    @property
    def total(self) -> float:
        return self.center_of_mass + self.intra_room + self.inter_room


def energy_breakdown(
    grid: AssignmentGrid,
    links: Iterable[tuple[RecordId, RecordId]],
    weights: EnergyWeights | None = None,
) -> EnergyBreakdown:
    """Compute the per-bucket energy terms for an assignment grid.

    Args:
        grid: Room id per cell, None for cells that do not count.
        links: Pairs of linked room ids (order irrelevant).
        weights: Bucket exponents. Defaults to EnergyWeights().

    Returns:
        EnergyBreakdown with one weighted term per bucket.
    """
    weights = weights or EnergyWeights()

    linked: set[tuple[RecordId, RecordId]] = set()
    for a, b in links:
        linked.add((a, b))
        linked.add((b, a))

    assigned = [
        (i, j, room_id)
        for i, row in enumerate(grid)
        for j, room_id in enumerate(row)
        if room_id is not None
    ]

    center = _Bucket()
    intra = _Bucket()
    inter = _Bucket()
    for index, (i1, j1, room1) in enumerate(assigned):
        for i2, j2, room2 in assigned[index + 1 :]:
            squared = float((i2 - i1) ** 2 + (j2 - j1) ** 2)
            center.add(squared)
            if room1 == room2:
                intra.add(squared)
            elif (room1, room2) in linked:
                inter.add(squared)

    return EnergyBreakdown(
        center_of_mass=center.term(weights.center_of_mass),
        intra_room=intra.term(weights.intra_room),
        inter_room=inter.term(weights.inter_room),
    )


def compute_energy(
    grid: AssignmentGrid,
    links: Iterable[tuple[RecordId, RecordId]],
    weights: EnergyWeights | None = None,
) -> float:
    """Total energy of an assignment grid. See energy_breakdown()."""
    return energy_breakdown(grid, links, weights).total


def grid_from_cells(cells: Sequence[Sequence[Cell]]) -> list[list[RecordId | None]]:
    """Project Cell records onto an assignment grid.

    Unusable cells never count, whatever their status says.
    """
    return [[cell.status.room_id if cell.spec.usable else None for cell in row] for row in cells]


def link_pairs(links: Iterable[Link]) -> list[tuple[RecordId, RecordId]]:
    """Resolved room id pairs of the given links; unresolved links are skipped."""
    return [link.status.room_ids for link in links if link.status.room_ids is not None]
