"""Tests for structural validation and boundary serialization of Base specs.

Critical Invariants:
1. The cell grid is square
2. Room names are unique
3. Links are unordered pairs of distinct rooms, declared at most once
4. Structural violations raise SpecValidationError (a ValueError)
5. to_dict()/from_dict() use the camelCase boundary shapes
"""

import pytest

from roomlayout.models import (
    Base,
    BaseState,
    BaseStatus,
    Cell,
    CellSpec,
    CellStatus,
    Link,
    LinkSpec,
    LinkStatus,
    SpecValidationError,
    not_enough_space,
    validate_spec,
)


def test_valid_spec_accepts_camel_case(spec_factory) -> None:
    data = spec_factory(
        2,
        rooms=[{"name": "kitchen", "color": "#FF7373", "size": 2}],
        assigned={(0, 0): "kitchen"},
    )

    spec = validate_spec(data)

    assert spec.size == 2
    assert spec.cells[0][0].room_name == "kitchen"
    assert spec.usable_cell_count() == 4
    assert spec.total_room_size() == 2
    assert spec.room_index("kitchen") == 0
    assert spec.room_index("attic") is None


def test_empty_spec_is_valid() -> None:
    spec = validate_spec({})

    assert spec.size == 0
    assert spec.rooms == []


@pytest.mark.parametrize(
    ("mutate", "message"),
    [
        (lambda d: d["cells"][1].pop(), "square"),
        (lambda d: d["rooms"].append(dict(d["rooms"][0])), "more than once"),
        (lambda d: d["rooms"][0].update(color="red"), "color"),
        (lambda d: d["rooms"][0].update(size=-1), "size"),
        (lambda d: d["rooms"][0].update(size="2"), "size"),
        (lambda d: d["cells"][0][0].update(usable="yes"), "usable"),
        (lambda d: d["links"].append({"roomNames": ["kitchen", "kitchen"]}), "itself"),
        (lambda d: d["links"].append({"roomNames": ["storage", "kitchen"]}), "linked more than once"),
        (lambda d: d.update(extra=1), "extra"),
    ],
    ids=[
        "ragged-grid",
        "duplicate-room",
        "bad-color",
        "negative-size",
        "string-size",
        "string-usable",
        "self-link",
        "reversed-duplicate-link",
        "unknown-field",
    ],
)
def test_structural_violations_raise(spec_factory, mutate, message) -> None:
    """CRITICAL: Structural problems are fatal.

    Why: The reconciler assumes a square grid, unique names and one link per
    pair; it only heals cross-reference problems.
    """
    data = spec_factory(
        2,
        rooms=[
            {"name": "kitchen", "color": "#ff7373", "size": 1},
            {"name": "storage", "color": "#fc8332", "size": 1},
        ],
        links=[("kitchen", "storage")],
    )
    mutate(data)

    with pytest.raises(SpecValidationError, match=message) as exc_info:
        validate_spec(data)
    assert isinstance(exc_info.value, ValueError)


def test_link_to_missing_room_is_structurally_valid(spec_factory) -> None:
    """Unknown link endpoints are a reconciliation issue, not a schema error."""
    spec = validate_spec(spec_factory(1, links=[("kitchen", "attic")]))

    assert spec.links[0].key() == frozenset({"kitchen", "attic"})
    assert spec.links[0].touches("attic")


def test_base_to_dict_uses_boundary_shapes(spec_factory) -> None:
    base = Base.create(
        spec_factory(1, rooms=[{"name": "kitchen", "color": "#ff7373", "size": 1}])
    )
    base.id = "base-1"
    base.status = BaseStatus(
        cells=[["cell-1"]],
        rooms=["room-1"],
        energy=0.0,
        errors=[not_enough_space(0, 1)],
        state=BaseState.READY,
    )

    data = base.to_dict()

    assert data == {
        "id": "base-1",
        "spec": {
            "cells": [[{"usable": True}]],
            "rooms": [{"name": "kitchen", "color": "#ff7373", "size": 1}],
            "links": [],
        },
        "status": {
            "cells": [[{"id": "cell-1"}]],
            "rooms": [{"id": "room-1"}],
            "links": [],
            "energy": 0.0,
            "errors": [
                {
                    "kind": "NOT_ENOUGH_SPACE",
                    "message": "0 cell(s) are available, but 1 cell(s) are needed.",
                }
            ],
            "state": "READY",
        },
    }
    assert Base.from_dict(data) == base


def test_base_from_dict_rejects_negative_energy(spec_factory) -> None:
    data = {"id": "b", "spec": spec_factory(1), "status": {"energy": -1.0, "state": "READY"}}

    with pytest.raises(SpecValidationError, match="energy"):
        Base.from_dict(data)


def test_base_from_dict_rejects_unknown_state(spec_factory) -> None:
    data = {"id": "b", "spec": spec_factory(1), "status": {"state": "BROKEN"}}

    with pytest.raises(ValueError):
        Base.from_dict(data)


def test_child_records_serialize_optional_status() -> None:
    cell = Cell(spec=CellSpec(usable=True, room_name="kitchen"), owner="b", id="c")
    link = Link(spec=LinkSpec(room_names=("kitchen", "storage")), owner="b", id="l")

    assert cell.to_dict() == {
        "id": "c",
        "owner": "b",
        "spec": {"usable": True, "roomName": "kitchen"},
        "status": {},
    }
    assert link.to_dict()["status"] == {}

    cell.status = CellStatus(room_id="r1")
    link.status = LinkStatus(room_ids=("r1", "r2"))

    assert cell.to_dict()["status"] == {"roomId": "r1"}
    assert link.to_dict() == {
        "id": "l",
        "owner": "b",
        "spec": {"roomNames": ["kitchen", "storage"]},
        "status": {"roomIds": ["r1", "r2"]},
    }
    assert Cell.from_dict(cell.to_dict()) == cell
    assert Link.from_dict(link.to_dict()) == link
