"""Tests for Base spec mutators.

Critical Invariants:
1. Every successful mutator sets state to RECONCILING and returns the Base
2. A rejected mutation leaves the Base unchanged
3. set_size grows and shrinks one ring at a time, alternating edges by parity
4. set_cell_usability clears any explicit room name on the cell
"""

import pytest
from hypothesis import given
from hypothesis import strategies as st

from roomlayout.models import Base, BaseState, SpecValidationError


@pytest.fixture
def base(spec_factory) -> Base:
    base = Base.create(
        spec_factory(
            2,
            rooms=[
                {"name": "kitchen", "color": "#ff7373", "size": 1},
                {"name": "storage", "color": "#fc8332", "size": 1},
            ],
            links=[("kitchen", "storage")],
        )
    )
    base.status.state = BaseState.READY
    return base


def usable_mask(base: Base) -> list[list[bool]]:
    return [[cell.usable for cell in row] for row in base.spec.cells]


def test_add_room_appends_and_marks_reconciling(base) -> None:
    result = base.add_room("office", "#00ff00", 2)

    assert result is base
    assert [room.name for room in base.spec.rooms] == ["kitchen", "storage", "office"]
    assert base.status.state == BaseState.RECONCILING


def test_add_room_with_duplicate_name_leaves_base_unchanged(base) -> None:
    """CRITICAL: A rejected mutation must not half-apply.

    Why: Mutators edit a copy and validate before assigning, so a caller
    that catches the error still holds a consistent Base.
    """
    before = base.spec.model_copy(deep=True)

    with pytest.raises(SpecValidationError, match="more than once"):
        base.add_room("kitchen", "#000000", 1)

    assert base.spec == before
    assert base.status.state == BaseState.READY


def test_delete_room_keeps_links_naming_it(base) -> None:
    base.delete_room(0)

    assert [room.name for room in base.spec.rooms] == ["storage"]
    assert base.spec.links[0].room_names == ("kitchen", "storage")


@pytest.mark.parametrize("index", [-1, 2])
def test_room_index_out_of_range_raises(base, index) -> None:
    with pytest.raises(IndexError):
        base.delete_room(index)
    with pytest.raises(IndexError):
        base.set_room_size(index, 1)


def test_add_link_requires_existing_rooms(base) -> None:
    base.delete_link(0)

    with pytest.raises(SpecValidationError, match="no room with name 'attic'"):
        base.add_link("kitchen", "attic")

    base.add_link("storage", "kitchen")
    assert base.spec.links[0].room_names == ("storage", "kitchen")


def test_add_link_rejects_existing_pair_in_either_order(base) -> None:
    with pytest.raises(SpecValidationError):
        base.add_link("storage", "kitchen")
    with pytest.raises(SpecValidationError):
        base.add_link("kitchen", "kitchen")
    assert len(base.spec.links) == 1


def test_set_room_fields(base) -> None:
    base.set_room_name(0, "galley").set_room_color(0, "#123abc").set_room_size(0, 3)

    room = base.spec.rooms[0]
    assert (room.name, room.color, room.size) == ("galley", "#123abc", 3)
    assert base.status.state == BaseState.RECONCILING


def test_set_room_name_to_existing_name_raises(base) -> None:
    with pytest.raises(SpecValidationError):
        base.set_room_name(1, "kitchen")
    assert base.spec.rooms[1].name == "storage"


@pytest.mark.parametrize(("color", "size"), [("blue", 1), ("#ff7373", -1)])
def test_set_room_color_and_size_validate(base, color, size) -> None:
    with pytest.raises(SpecValidationError):
        base.set_room_color(0, color).set_room_size(0, size)


def test_set_cell_usability_clears_room_name(base) -> None:
    base.set_cell_room_name((0, 1), "kitchen")
    assert base.spec.cells[0][1].room_name == "kitchen"

    base.set_cell_usability((0, 1), True)

    assert base.spec.cells[0][1].usable is True
    assert base.spec.cells[0][1].room_name is None


def test_cell_coordinates_out_of_range_raise(base) -> None:
    with pytest.raises(IndexError):
        base.set_cell_usability((2, 0), False)
    with pytest.raises(IndexError):
        base.set_cell_room_name((0, -1), "kitchen")


def test_set_link_room_names(base) -> None:
    base.set_link_room_names(0, ("storage", "kitchen"))
    assert base.spec.links[0].room_names == ("storage", "kitchen")

    with pytest.raises(SpecValidationError):
        base.set_link_room_names(0, ("storage", "storage"))
    with pytest.raises(IndexError):
        base.set_link_room_names(1, ("storage", "kitchen"))


def test_set_size_grows_bottom_left_from_even(base) -> None:
    base.set_cell_usability((0, 1), False)

    base.set_size(3)

    assert usable_mask(base) == [
        [False, True, False],
        [False, True, True],
        [False, False, False],
    ]


def test_set_size_grows_top_right_from_odd(spec_factory) -> None:
    base = Base.create(spec_factory(1))

    base.set_size(2)

    assert usable_mask(base) == [[False, False], [True, False]]


def test_set_size_shrinks(spec_factory) -> None:
    base = Base.create(spec_factory(3, unusable={(2, 0)}))
    base.set_cell_usability((0, 2), False)

    base.set_size(2)  # odd: drop bottom row and left column
    assert usable_mask(base) == [[True, False], [True, True]]

    base.set_size(1)  # even: drop top row and right column
    assert usable_mask(base) == [[True]]

    base.set_size(0)
    assert base.spec.cells == []


def test_set_size_negative_raises(base) -> None:
    with pytest.raises(ValueError):
        base.set_size(-1)
    assert base.spec.size == 2


@given(start=st.integers(min_value=0, max_value=5), steps=st.integers(min_value=0, max_value=4))
def test_grow_then_shrink_restores_grid(start, steps) -> None:
    """Growing by k and shrinking by k returns the original cells."""
    cells = [[{"usable": (i + j) % 2 == 0} for j in range(start)] for i in range(start)]
    base = Base.create({"cells": cells})
    original = base.spec.model_copy(deep=True)

    base.set_size(start + steps).set_size(start)

    assert base.spec == original
