"""Tests for the simulated-annealing optimizer.

Critical Invariants:
1. The result energy is never above the entry energy
2. Swaps permute assignments: room sizes are preserved
3. Inputs are never mutated; a run without improvement returns them as-is
4. A seeded random source makes runs reproducible
"""

import math
import random
from collections import Counter

import pytest

from roomlayout.energy import EnergyWeights
from roomlayout.models import Base, BaseState
from roomlayout.optimization import AnnealingOptimizer, RandomSource, accepts
from roomlayout.storage import LayoutStores

ROW_ENERGY = math.sqrt(2) + 4.0
BEST_ROW_ENERGY = math.sqrt(2) + 1.0


class ScriptedRandom:
    """Returns pre-recorded draws in order."""

    def __init__(self, draws: list[int]) -> None:
        self.draws = list(draws)

    def randrange(self, stop: int) -> int:
        value = self.draws.pop(0)
        assert 0 <= value < stop
        return value


@pytest.fixture
def row_layout(stores, reconciler, spec_factory):
    """Rooms a, b, c on the top row of a 3x3 grid, with a linked to c.

    Auto-fill places them a b c, so the linked pair starts two cells apart.
    """
    spec = spec_factory(
        3,
        rooms=[
            {"name": "a", "color": "#ff0000", "size": 1},
            {"name": "b", "color": "#00ff00", "size": 1},
            {"name": "c", "color": "#0000ff", "size": 1},
        ],
        links=[("a", "c")],
        unusable={(i, j) for i in (1, 2) for j in range(3)},
    )
    created = stores.bases.create(Base.create(spec))
    return load(stores, created.id)


def load(stores: LayoutStores, base_id: str):
    base = stores.bases.get(base_id)
    cells = [[stores.cells.get(cell_id) for cell_id in row] for row in base.status.cells]
    links = [stores.links.get(link_id) for link_id in base.status.links]
    return base, cells, links


def row_names(cells) -> list[str | None]:
    return [cell.spec.room_name for cell in cells[0]]


def test_default_rng_satisfies_protocol() -> None:
    assert isinstance(random.Random(1), RandomSource)


@pytest.mark.parametrize(
    ("candidate", "best", "remaining", "total", "expected"),
    [
        (1.0, 1.0, 1, 2, True),
        (2.0, 1.0, 0, 4, False),
        (1.9, 1.0, 4, 4, True),
        (0.0, 1.0, 0, 4, True),
        (0.0, 0.0, 0, 4, False),
        (0.0, 0.0, 1, 4, True),
        (1.0, 0.0, 4, 4, False),
    ],
)
def test_acceptance_rule(candidate, best, remaining, total, expected) -> None:
    assert accepts(candidate, best, remaining, total) is expected


def test_entry_energy_matches_reconciled_energy(row_layout) -> None:
    base, cells, links = row_layout

    result = AnnealingOptimizer(rng=random.Random(0)).optimize(base, cells, links, 0)

    assert base.status.energy == pytest.approx(ROW_ENERGY)
    assert result.entry_energy == pytest.approx(ROW_ENERGY)
    assert result.improved is False
    assert result.iterations == 0


def test_scripted_swap_redraws_no_op_pairs(row_layout) -> None:
    """Equal positions are redrawn; the first distinct pair is swapped."""
    base, cells, links = row_layout
    rng = ScriptedRandom([0, 0, 1, 1, 0, 1])

    result = AnnealingOptimizer(rng=rng).optimize(base, cells, links, 1)

    assert rng.draws == []
    assert result.improved is True
    assert row_names(result.cells) == ["b", "a", "c"]
    assert result.energy == pytest.approx(BEST_ROW_ENERGY)
    assert result.base.status.energy == pytest.approx(BEST_ROW_ENERGY)
    assert result.base.status.state == BaseState.READY


def test_optimizer_finds_adjacent_linked_rooms(row_layout) -> None:
    base, cells, links = row_layout

    result = AnnealingOptimizer(rng=random.Random(3)).optimize(base, cells, links, 200)

    assert result.improved is True
    assert result.energy == pytest.approx(BEST_ROW_ENERGY)
    names = row_names(result.cells)
    assert abs(names.index("a") - names.index("c")) == 1
    assert Counter(names) == Counter(row_names(cells))


def test_improved_result_keeps_spec_and_status_in_step(row_layout) -> None:
    base, cells, links = row_layout
    room_ids = {room_name: room_id for room_name, room_id in zip("abc", base.status.rooms)}

    result = AnnealingOptimizer(rng=random.Random(3)).optimize(base, cells, links, 200)

    for row in result.cells:
        for cell in row:
            if cell.spec.room_name is None:
                assert cell.status.room_id is None
            else:
                assert cell.status.room_id == room_ids[cell.spec.room_name]
    assert [cell.id for row in result.cells for cell in row] == [
        cell.id for row in cells for cell in row
    ]


def test_inputs_are_not_mutated(row_layout) -> None:
    base, cells, links = row_layout
    before = (base.to_dict(), [[cell.to_dict() for cell in row] for row in cells])

    AnnealingOptimizer(rng=random.Random(3)).optimize(base, cells, links, 50)

    assert (base.to_dict(), [[cell.to_dict() for cell in row] for row in cells]) == before


@pytest.mark.parametrize("seed", range(5))
def test_result_is_never_worse(row_layout, seed) -> None:
    base, cells, links = row_layout

    result = AnnealingOptimizer(rng=random.Random(seed)).optimize(base, cells, links, 16)

    assert result.energy <= result.entry_energy
    assert result.improved == (result.energy < result.entry_energy)


def test_same_seed_same_result(row_layout) -> None:
    base, cells, links = row_layout

    first = AnnealingOptimizer(seed=11).optimize(base, cells, links, 32)
    second = AnnealingOptimizer(seed=11).optimize(base, cells, links, 32)

    assert first.to_dict() == second.to_dict()


def test_explicit_assignments_move_with_their_cells(stores, reconciler, spec_factory) -> None:
    """Base-spec room names are swapped together with the cells."""
    spec = spec_factory(
        3,
        rooms=[
            {"name": "a", "color": "#ff0000", "size": 1},
            {"name": "b", "color": "#00ff00", "size": 1},
            {"name": "c", "color": "#0000ff", "size": 1},
        ],
        links=[("a", "c")],
        unusable={(i, j) for i in (1, 2) for j in range(3)},
        assigned={(0, 0): "a"},
    )
    created = stores.bases.create(Base.create(spec))
    base, cells, links = load(stores, created.id)

    result = AnnealingOptimizer(rng=ScriptedRandom([0, 1])).optimize(base, cells, links, 1)

    assert [cell.room_name for cell in result.base.spec.cells[0]] == [None, "a", None]
    assert row_names(result.cells) == ["b", "a", "c"]


def test_single_assignment_returns_input_without_iterating(stores, reconciler, spec_factory) -> None:
    """With nothing to swap the optimizer must not spin on redraws."""
    created = stores.bases.create(
        Base.create(spec_factory(1, rooms=[{"name": "a", "color": "#ff0000", "size": 1}]))
    )
    base, cells, links = load(stores, created.id)

    result = AnnealingOptimizer(rng=ScriptedRandom([])).optimize(base, cells, links, 100)

    assert result.improved is False
    assert result.iterations == 0
    assert result.base == base


def test_negative_iterations_raise(row_layout) -> None:
    base, cells, links = row_layout

    with pytest.raises(ValueError, match="Iteration"):
        AnnealingOptimizer().optimize(base, cells, links, -1)


def test_base_must_be_ready(row_layout) -> None:
    base, cells, links = row_layout
    base.status.state = BaseState.RECONCILING

    with pytest.raises(ValueError, match="READY"):
        AnnealingOptimizer().optimize(base, cells, links, 1)


def test_mismatched_cell_grid_raises(row_layout) -> None:
    base, cells, links = row_layout

    with pytest.raises(ValueError, match="does not match"):
        AnnealingOptimizer().optimize(base, cells[:2], links, 1)


def test_custom_weights_score_entry_and_result(row_layout) -> None:
    base, cells, links = row_layout
    weights = EnergyWeights(center_of_mass=1.0, intra_room=1.0, inter_room=2.0)

    result = AnnealingOptimizer(weights, rng=random.Random(0)).optimize(base, cells, links, 0)

    assert result.entry_energy == pytest.approx(2.0 + 16.0)


def test_commit_weights_score_entry_and_result(row_layout) -> None:
    """Search weights drive the walk; the result is judged with commit weights."""
    base, cells, links = row_layout
    steep = EnergyWeights(center_of_mass=3.0, intra_room=2.0, inter_room=3.0)
    optimizer = AnnealingOptimizer(steep, rng=random.Random(3), commit_weights=EnergyWeights())

    result = optimizer.optimize(base, cells, links, 200)

    assert optimizer.commit_weights == EnergyWeights()
    assert result.entry_energy == pytest.approx(ROW_ENERGY)
    assert result.energy == pytest.approx(BEST_ROW_ENERGY)
    assert result.base.status.energy == pytest.approx(BEST_ROW_ENERGY)
    assert result.energy <= base.status.energy
