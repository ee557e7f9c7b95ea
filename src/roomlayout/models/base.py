"""Base records: the square grid, its rooms and their links.

A Base carries the user-authored spec and the reconciler-derived status.
Mutators edit the spec, re-validate it structurally and flag the Base for
reconciliation; they never touch child records directly.

Usage:
    base = Base.create({
        "cells": [[{"usable": True}, {"usable": True}], [{"usable": True}, {"usable": True}]],
        "rooms": [{"name": "kitchen", "color": "#ff7373", "size": 1}],
        "links": [],
    })
    base.add_room("storage", "#fc8332", 1).add_link("kitchen", "storage")
    bases.put(base)  # notifies the reconciler
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Self

from pydantic import model_validator

from roomlayout.core.types import Coordinates, RecordId
from roomlayout.models.cell import CellSpec
from roomlayout.models.link import LinkSpec
from roomlayout.models.room import RoomName, RoomSpec
from roomlayout.models.validation import SpecModel, SpecValidationError, validate_model


class BaseState(str, Enum):
    """Reconciliation state of a Base."""

    RECONCILING = "RECONCILING"
    READY = "READY"


class ErrorKind(str, Enum):
    """Classes of recoverable problems recorded in a Base status."""

    NOT_ENOUGH_SPACE = "NOT_ENOUGH_SPACE"
    ROOM_NOT_FOUND = "ROOM_NOT_FOUND"
    ROOM_OVER_CAPACITY = "ROOM_OVER_CAPACITY"
    UNUSABLE_CELL_ASSIGNED = "UNUSABLE_CELL_ASSIGNED"


@dataclass(frozen=True, slots=True)
class LayoutIssue:
    """A recoverable problem found while reconciling a Base."""

    kind: ErrorKind
    message: str

    def to_dict(self) -> dict[str, Any]:
        return {"kind": self.kind.value, "message": self.message}

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> LayoutIssue:
        return cls(kind=ErrorKind(data["kind"]), message=data["message"])


def not_enough_space(cells_available: int, cells_needed: int) -> LayoutIssue:
    return LayoutIssue(
        ErrorKind.NOT_ENOUGH_SPACE,
        f"{cells_available} cell(s) are available, but {cells_needed} cell(s) are needed.",
    )


def room_not_found(message: str) -> LayoutIssue:
    return LayoutIssue(ErrorKind.ROOM_NOT_FOUND, message)


class BaseSpec(SpecModel):
    """Desired state of a Base.

    Structural rules enforced here:
    - the cell grid is square (row count == every row's length)
    - room names are unique
    - each unordered pair of rooms is linked at most once
    """

    cells: list[list[CellSpec]] = []
    rooms: list[RoomSpec] = []
    links: list[LinkSpec] = []

    @model_validator(mode="after")
    def _check_structure(self) -> Self:
        size = len(self.cells)
        for i, row in enumerate(self.cells):
            if len(row) != size:
                raise ValueError(
                    f"The grid of cells must be square: row {i} has {len(row)} cell(s), "
                    f"expected {size}"
                )

        names: set[RoomName] = set()
        for room in self.rooms:
            if room.name in names:
                raise ValueError(f"Room name '{room.name}' is used more than once")
            names.add(room.name)

        # Links are unordered, so (A, B) and (B, A) are one reciprocal link.
        seen: set[frozenset[RoomName]] = set()
        for link in self.links:
            if link.key() in seen:
                a, b = link.room_names
                raise ValueError(f"Rooms '{a}' and '{b}' are linked more than once")
            seen.add(link.key())
        return self

    @property
    def size(self) -> int:
        return len(self.cells)

    def room_index(self, name: RoomName) -> int | None:
        """Position of the room with this name, or None."""
        for i, room in enumerate(self.rooms):
            if room.name == name:
                return i
        return None

    def usable_cell_count(self) -> int:
        return sum(1 for row in self.cells for cell in row if cell.usable)

    def total_room_size(self) -> int:
        return sum(room.size for room in self.rooms)


def validate_spec(data: Any) -> BaseSpec:
    """Validate a Base spec from a dict or model, returning a detached copy.

    Raises:
        SpecValidationError: If the spec is structurally invalid.
    """
    return validate_model(BaseSpec, data)


@dataclass(slots=True)
class BaseStatus:
    """Derived state of a Base.

    cells/rooms/links mirror the spec shapes but hold child record ids.
    """

    cells: list[list[RecordId]] = field(default_factory=list)
    rooms: list[RecordId] = field(default_factory=list)
    links: list[RecordId] = field(default_factory=list)
    energy: float = 0.0
    errors: list[LayoutIssue] = field(default_factory=list)
    state: BaseState = BaseState.RECONCILING

    def issues(self, kind: ErrorKind) -> list[LayoutIssue]:
        return [issue for issue in self.errors if issue.kind == kind]

    def to_dict(self) -> dict[str, Any]:
        return {
            "cells": [[{"id": cell_id} for cell_id in row] for row in self.cells],
            "rooms": [{"id": room_id} for room_id in self.rooms],
            "links": [{"id": link_id} for link_id in self.links],
            "energy": self.energy,
            "errors": [issue.to_dict() for issue in self.errors],
            "state": self.state.value,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> BaseStatus:
        energy = float(data.get("energy", 0.0))
        if energy < 0:
            raise SpecValidationError(f"Base energy must be >= 0, got {energy}")
        return cls(
            cells=[[ref["id"] for ref in row] for row in data.get("cells", [])],
            rooms=[ref["id"] for ref in data.get("rooms", [])],
            links=[ref["id"] for ref in data.get("links", [])],
            energy=energy,
            errors=[LayoutIssue.from_dict(issue) for issue in data.get("errors", [])],
            state=BaseState(data["state"]) if "state" in data else BaseState.RECONCILING,
        )


@dataclass(slots=True)
class Base:
    """The root entity: a square grid plus the rooms and links laid out on it."""

    spec: BaseSpec
    status: BaseStatus = field(default_factory=BaseStatus)
    id: RecordId = ""

    @classmethod
    def create(cls, spec: BaseSpec | dict[str, Any]) -> Base:
        """Build an unsaved Base from a spec, validating it structurally.

        The new Base starts in RECONCILING with an empty status.
        """
        return cls(spec=validate_spec(spec))

    # --- mutators -------------------------------------------------------

    def _mutate(self, change: Callable[[BaseSpec], None]) -> Self:
        """Apply change to a copy of the spec, re-validate, then commit.

        A rejected change leaves this Base untouched.
        """
        draft = self.spec.model_copy(deep=True)
        change(draft)
        self.spec = validate_spec(draft)
        self.status.state = BaseState.RECONCILING
        return self

    def _room_at(self, index: int) -> None:
        if not 0 <= index < len(self.spec.rooms):
            raise IndexError(
                f"Room index {index} is out of range for {len(self.spec.rooms)} room(s)"
            )

    def _link_at(self, index: int) -> None:
        if not 0 <= index < len(self.spec.links):
            raise IndexError(
                f"Link index {index} is out of range for {len(self.spec.links)} link(s)"
            )

    def _cell_at(self, coordinates: Coordinates) -> None:
        row, col = coordinates
        size = self.spec.size
        if not (0 <= row < size and 0 <= col < size):
            raise IndexError(
                f"Cell coordinates ({row}, {col}) are outside the {size}x{size} grid"
            )

    def add_room(self, name: RoomName, color: str, size: int) -> Self:
        """Append a room. Raises SpecValidationError on a duplicate name."""
        room = validate_model(RoomSpec, {"name": name, "color": color, "size": size})
        return self._mutate(lambda spec: spec.rooms.append(room))

    def delete_room(self, index: int) -> Self:
        self._room_at(index)
        return self._mutate(lambda spec: spec.rooms.pop(index))

    def add_link(self, room_a: RoomName, room_b: RoomName) -> Self:
        """Link two existing rooms.

        Raises:
            SpecValidationError: If either room does not exist, the rooms are
                the same, or the pair is already linked.
        """
        for name in (room_a, room_b):
            if self.spec.room_index(name) is None:
                raise SpecValidationError(
                    f"Can't create link between rooms '{room_a}' and '{room_b}' because "
                    f"there is no room with name '{name}'."
                )
        link = validate_model(LinkSpec, {"room_names": (room_a, room_b)})
        return self._mutate(lambda spec: spec.links.append(link))

    def delete_link(self, index: int) -> Self:
        self._link_at(index)
        return self._mutate(lambda spec: spec.links.pop(index))

    def set_room_name(self, index: int, name: RoomName) -> Self:
        """Rename a room. Cells and links naming the old name are not rewritten."""
        self._room_at(index)

        def change(spec: BaseSpec) -> None:
            spec.rooms[index].name = name

        return self._mutate(change)

    def set_room_color(self, index: int, color: str) -> Self:
        self._room_at(index)

        def change(spec: BaseSpec) -> None:
            spec.rooms[index].color = color

        return self._mutate(change)

    def set_room_size(self, index: int, size: int) -> Self:
        self._room_at(index)

        def change(spec: BaseSpec) -> None:
            spec.rooms[index].size = size

        return self._mutate(change)

    def set_cell_usability(self, coordinates: Coordinates, usable: bool) -> Self:
        """Mark a cell (un)usable. Always clears its explicit room assignment."""
        self._cell_at(coordinates)
        row, col = coordinates

        def change(spec: BaseSpec) -> None:
            spec.cells[row][col] = CellSpec(usable=usable)

        return self._mutate(change)

    def set_cell_room_name(self, coordinates: Coordinates, room_name: RoomName | None) -> Self:
        """Explicitly assign a cell to a room by name, or clear the assignment.

        The name is resolved during reconciliation, not here.
        """
        self._cell_at(coordinates)
        row, col = coordinates

        def change(spec: BaseSpec) -> None:
            spec.cells[row][col].room_name = room_name

        return self._mutate(change)

    def set_link_room_names(self, index: int, room_names: tuple[RoomName, RoomName]) -> Self:
        self._link_at(index)
        link = validate_model(LinkSpec, {"room_names": room_names})

        def change(spec: BaseSpec) -> None:
            spec.links[index] = link

        return self._mutate(change)

    def set_size(self, new_size: int) -> Self:
        """Resize the square grid one row and one column per step.

        If the grid is too small:
          at EVEN size, add a row on the BOTTOM and a column on the LEFT;
          at ODD size, add a row on the TOP and a column on the RIGHT.
        If the grid is too big:
          at EVEN size, remove the TOP row and the RIGHT column;
          at ODD size, remove the BOTTOM row and the LEFT column.
        New cells are unusable.
        """
        if new_size < 0:
            raise ValueError(f"Grid size must be >= 0, got {new_size}")

        def change(spec: BaseSpec) -> None:
            cells = spec.cells
            while len(cells) > new_size:
                if len(cells) % 2 == 0:
                    cells.pop(0)
                    for row in cells:
                        row.pop()
                else:
                    cells.pop()
                    for row in cells:
                        row.pop(0)
            while len(cells) < new_size:
                grown = len(cells) + 1
                if len(cells) % 2 == 0:
                    for row in cells:
                        row.insert(0, CellSpec())
                    cells.append([CellSpec() for _ in range(grown)])
                else:
                    for row in cells:
                        row.append(CellSpec())
                    cells.insert(0, [CellSpec() for _ in range(grown)])

        return self._mutate(change)

    # --- serialization --------------------------------------------------

    def to_dict(self) -> dict[str, Any]:
        """Convert to JSON-serializable dictionary."""
        return {
            "id": self.id,
            "spec": self.spec.to_dict(),
            "status": self.status.to_dict(),
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Base:
        """Create from dictionary, validating the spec structurally."""
        status = data.get("status")
        return cls(
            id=data.get("id", ""),
            spec=validate_spec(data["spec"]),
            status=BaseStatus() if status is None else BaseStatus.from_dict(status),
        )
