"""Cell records: one square of a Base grid."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from pydantic import Field

from roomlayout.core.types import RecordId
from roomlayout.models.room import RoomName
from roomlayout.models.validation import SpecModel, validate_model


class CellSpec(SpecModel):
    """Desired state of a cell.

    room_name may be set on an unusable cell at the schema level; the
    reconciler records that as an issue and drops the assignment.
    """

    usable: bool = Field(default=False, strict=True)
    room_name: RoomName | None = None


@dataclass(slots=True)
class CellStatus:
    """Derived state of a cell: the id of the room it resolved to."""

    room_id: RecordId | None = None

    def to_dict(self) -> dict[str, Any]:
        return {} if self.room_id is None else {"roomId": self.room_id}


@dataclass(slots=True)
class Cell:
    """Cell entity. Its position is implicit in the owning Base's status grid."""

    spec: CellSpec
    owner: RecordId | None = None
    status: CellStatus = field(default_factory=CellStatus)
    id: RecordId = ""

    @property
    def room_id(self) -> RecordId | None:
        return self.status.room_id

    def assign(self, room_name: RoomName | None, room_id: RecordId | None) -> None:
        """Set or clear the room assignment, keeping spec and status in step."""
        self.spec.room_name = room_name
        self.status.room_id = room_id

    def to_dict(self) -> dict[str, Any]:
        """Convert to JSON-serializable dictionary."""
        return {
            "id": self.id,
            "owner": self.owner,
            "spec": self.spec.to_dict(),
            "status": self.status.to_dict(),
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Cell:
        """Create from dictionary (for deserialization)."""
        status = data.get("status") or {}
        return cls(
            id=data["id"],
            owner=data.get("owner"),
            spec=validate_model(CellSpec, data["spec"]),
            status=CellStatus(room_id=status.get("roomId")),
        )
