"""Domain model: Base, Room, Cell and Link records with their spec schemas.

Every record pairs a declarative spec (validated with pydantic) with a
derived status (maintained by the reconciler). Child records carry the id
of their owning Base.
"""

from roomlayout.models.base import (
    Base,
    BaseSpec,
    BaseState,
    BaseStatus,
    ErrorKind,
    LayoutIssue,
    not_enough_space,
    room_not_found,
    validate_spec,
)
from roomlayout.models.cell import Cell, CellSpec, CellStatus
from roomlayout.models.link import Link, LinkSpec, LinkStatus
from roomlayout.models.room import Room, RoomName, RoomSpec, RoomStatus
from roomlayout.models.validation import SpecValidationError

__all__ = [
    # Base
    "Base",
    "BaseSpec",
    "BaseStatus",
    "BaseState",
    "ErrorKind",
    "LayoutIssue",
    "validate_spec",
    "not_enough_space",
    "room_not_found",
    # Children
    "Room",
    "RoomName",
    "RoomSpec",
    "RoomStatus",
    "Cell",
    "CellSpec",
    "CellStatus",
    "Link",
    "LinkSpec",
    "LinkStatus",
    # Validation
    "SpecValidationError",
]
