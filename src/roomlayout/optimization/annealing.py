"""Simulated annealing over room-to-cell assignments.

Each iteration swaps the assignments of two usable cells in a copy of the
current layout and scores it with the energy model. A candidate is accepted
as the new current layout while its energy stays within a tolerance of the
best energy seen; the tolerance shrinks quadratically to zero over the run:

    candidate / best < 1 + (N - iteration)**2 / N**2

Swaps only permute assignments, so room sizes and explicit assignments stay
satisfied. The result replaces the input only if it is strictly better under
the commit weights, which default to the search weights.

Usage:
    optimizer = AnnealingOptimizer(EnergyWeights(), rng=random.Random(7))
    result = optimizer.optimize(base, cells, links, iterations=2**12)
    if result.improved:
        reconciler.commit(result.base, result.flat_cells())
"""

from __future__ import annotations

import copy as cp
import logging
import math
import random
from collections.abc import Iterable, Sequence
from dataclasses import dataclass, field
from typing import Protocol, runtime_checkable

from roomlayout.core.types import Coordinates, RecordId
from roomlayout.energy.model import EnergyWeights, compute_energy, grid_from_cells, link_pairs
from roomlayout.models import Base, BaseState, Cell, Link, RoomName
from roomlayout.optimization.models import OptimizationResult

logger = logging.getLogger(__name__)


@runtime_checkable
class RandomSource(Protocol):
    """Source of uniform integers. random.Random satisfies it."""

    def randrange(self, stop: int) -> int:
        """Return an integer in [0, stop)."""
        ...


@dataclass(slots=True)
class Layout:
    """Working copy of one Base's assignments.

    Three parallel grids are swapped together:
    - explicit: room names assigned in the Base spec
    - names: room names in the Cell specs
    - room_ids: room ids in the Cell statuses (None for unusable cells)
    """

    explicit: list[list[RoomName | None]]
    names: list[list[RoomName | None]]
    room_ids: list[list[RecordId | None]]
    usable: list[Coordinates] = field(default_factory=list)
    energy: float = 0.0

    @classmethod
    def from_records(cls, base: Base, cells: Sequence[Sequence[Cell]]) -> Layout:
        """Build a layout from a reconciled Base and its Cell grid.

        Raises:
            ValueError: If the cell grid does not match the Base grid.
        """
        size = base.spec.size
        if len(cells) != size or any(len(row) != size for row in cells):
            raise ValueError(f"Cell grid does not match the {size}x{size} grid of base '{base.id}'")
        return cls(
            explicit=[[spec.room_name for spec in row] for row in base.spec.cells],
            names=[[cell.spec.room_name for cell in row] for row in cells],
            room_ids=grid_from_cells(cells),
            usable=[
                (i, j) for i, row in enumerate(cells) for j, cell in enumerate(row) if cell.spec.usable
            ],
        )

    def clone(self) -> Layout:
        return Layout(
            explicit=[list(row) for row in self.explicit],
            names=[list(row) for row in self.names],
            room_ids=[list(row) for row in self.room_ids],
            usable=self.usable,
            energy=self.energy,
        )

    def room_id(self, position: Coordinates) -> RecordId | None:
        i, j = position
        return self.room_ids[i][j]

    def swappable(self) -> bool:
        """True if at least two usable cells hold different assignments."""
        return len({self.room_id(position) for position in self.usable}) >= 2

    def swap(self, first: Coordinates, second: Coordinates) -> None:
        (i1, j1), (i2, j2) = first, second
        for grid in (self.explicit, self.names, self.room_ids):
            grid[i1][j1], grid[i2][j2] = grid[i2][j2], grid[i1][j1]


def accepts(candidate: float, best: float, remaining: int, total: int) -> bool:
    """Quadratically decaying acceptance rule.

    A zero best energy makes any positive candidate infinitely worse; two
    zeros compare as equal.
    """
    if best == 0:
        ratio = 1.0 if candidate == 0 else math.inf
    else:
        ratio = candidate / best
    return ratio < 1 + remaining**2 / total**2


class AnnealingOptimizer:
    """Minimizes a Base's energy by swapping cell assignments.

    Two sets of weights take part in a run. The search weights score every
    candidate and drive acceptance. The commit weights score the entry
    layout and every candidate for the result: the returned layout is the
    one with the lowest commit energy seen, and it counts as improved only
    if that energy is strictly below the entry energy.

    Args:
        weights: Search weights. Defaults to EnergyWeights().
        rng: Random source for picking cells. Defaults to random.Random(seed).
        seed: Seed for the default random source.
        commit_weights: Weights the result is judged and stored with. These
            should be the weights the Base's stored energy was computed
            with. Defaults to the search weights.
    """

    def __init__(
        self,
        weights: EnergyWeights | None = None,
        rng: RandomSource | None = None,
        seed: int | None = None,
        commit_weights: EnergyWeights | None = None,
    ):
        self._weights = weights or EnergyWeights()
        self._commit_weights = commit_weights or self._weights
        self._rng: RandomSource = rng if rng is not None else random.Random(seed)

    @property
    def weights(self) -> EnergyWeights:
        return self._weights

    @property
    def commit_weights(self) -> EnergyWeights:
        return self._commit_weights

    def score(self, layout: Layout, links: Iterable[tuple[RecordId, RecordId]]) -> float:
        return compute_energy(layout.room_ids, links, self._weights)

    def judge(self, layout: Layout, links: Iterable[tuple[RecordId, RecordId]]) -> float:
        """Energy of a layout under the commit weights."""
        if self._commit_weights == self._weights:
            return layout.energy
        return compute_energy(layout.room_ids, links, self._commit_weights)

    def optimize(
        self,
        base: Base,
        cells: Sequence[Sequence[Cell]],
        links: Iterable[Link],
        iterations: int,
    ) -> OptimizationResult:
        """Search for a lower-energy assignment of the given Base.

        Args:
            base: A READY Base. Never mutated.
            cells: Its Cell records, in the shape of base.status.cells.
            links: Its Link records; unresolved links are ignored.
            iterations: Number of swaps to try.

        Returns:
            OptimizationResult holding new records if improved, else the input.
            Its energies and the returned Base's status.energy are computed
            with the commit weights.

        Raises:
            ValueError: If iterations < 0, the Base is not READY, or the
                cell grid does not match the Base.
        """
        if iterations < 0:
            raise ValueError(f"Iteration count must be >= 0, got {iterations}")
        if base.status.state != BaseState.READY:
            raise ValueError(f"Base '{base.id}' must be READY to optimize, got {base.status.state}")

        pairs = link_pairs(links)
        entry = Layout.from_records(base, cells)
        entry.energy = self.score(entry, pairs)
        entry_energy = self.judge(entry, pairs)

        if iterations == 0 or not entry.swappable():
            logger.debug("Base '%s': nothing to optimize", base.id)
            return self._unchanged(base, cells, entry_energy)

        current = best = kept = entry
        kept_energy = entry_energy
        for iteration in range(iterations):
            candidate = current.clone()
            candidate.swap(*self._draw(candidate))
            candidate.energy = self.score(candidate, pairs)
            if accepts(candidate.energy, best.energy, iterations - iteration, iterations):
                current = candidate
            if candidate.energy < best.energy:
                best = candidate
            energy = self.judge(candidate, pairs)
            if energy < kept_energy:
                kept, kept_energy = candidate, energy

        if not kept_energy < entry_energy:
            logger.info(
                "Base '%s': no improvement over %.4f in %d iteration(s)",
                base.id,
                entry_energy,
                iterations,
            )
            return self._unchanged(base, cells, entry_energy, iterations)

        logger.info(
            "Base '%s': energy %.4f -> %.4f in %d iteration(s)",
            base.id,
            entry_energy,
            kept_energy,
            iterations,
        )
        return OptimizationResult(
            base=self._apply_to_base(base, kept, kept_energy),
            cells=self._apply_to_cells(cells, kept),
            entry_energy=entry_energy,
            energy=kept_energy,
            improved=True,
            iterations=iterations,
        )

    def _draw(self, layout: Layout) -> tuple[Coordinates, Coordinates]:
        """Two distinct usable positions holding different assignments."""
        usable = layout.usable
        while True:
            first = usable[self._rng.randrange(len(usable))]
            second = usable[self._rng.randrange(len(usable))]
            if first != second and layout.room_id(first) != layout.room_id(second):
                return first, second

    @staticmethod
    def _unchanged(
        base: Base, cells: Sequence[Sequence[Cell]], energy: float, iterations: int = 0
    ) -> OptimizationResult:
        return OptimizationResult(
            base=cp.deepcopy(base),
            cells=[[cp.deepcopy(cell) for cell in row] for row in cells],
            entry_energy=energy,
            energy=energy,
            improved=False,
            iterations=iterations,
        )

    @staticmethod
    def _apply_to_base(base: Base, layout: Layout, energy: float) -> Base:
        result = cp.deepcopy(base)
        for i, row in enumerate(result.spec.cells):
            for j, cell_spec in enumerate(row):
                cell_spec.room_name = layout.explicit[i][j]
        result.status.energy = energy
        result.status.state = BaseState.READY
        return result

    @staticmethod
    def _apply_to_cells(cells: Sequence[Sequence[Cell]], layout: Layout) -> list[list[Cell]]:
        result = [[cp.deepcopy(cell) for cell in row] for row in cells]
        for i, row in enumerate(result):
            for j, cell in enumerate(row):
                cell.assign(layout.names[i][j], layout.room_ids[i][j])
        return result
