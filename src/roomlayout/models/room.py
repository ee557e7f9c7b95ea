"""Room records: a named, colored group of cells with a fixed size."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from pydantic import Field

from roomlayout.core.types import RecordId
from roomlayout.models.validation import HEX_COLOR_PATTERN, SpecModel, validate_model

RoomName = str


class RoomSpec(SpecModel):
    """Desired state of a room."""

    name: RoomName
    color: str = Field(pattern=HEX_COLOR_PATTERN)
    size: int = Field(ge=0, strict=True)


@dataclass(slots=True)
class RoomStatus:
    """Derived state of a room. Rooms currently derive nothing."""

    def to_dict(self) -> dict[str, Any]:
        return {}


@dataclass(slots=True)
class Room:
    """Room entity owned by exactly one Base.

    Attributes:
        spec: Copy of the owning Base's room spec at the same position.
        owner: Id of the owning Base (arena key for garbage collection).
        status: Derived state (empty).
        id: Store-generated id; empty until created.
    """

    spec: RoomSpec
    owner: RecordId | None = None
    status: RoomStatus = field(default_factory=RoomStatus)
    id: RecordId = ""

    def to_dict(self) -> dict[str, Any]:
        """Convert to JSON-serializable dictionary."""
        return {
            "id": self.id,
            "owner": self.owner,
            "spec": self.spec.to_dict(),
            "status": self.status.to_dict(),
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Room:
        """Create from dictionary (for deserialization)."""
        return cls(
            id=data["id"],
            owner=data.get("owner"),
            spec=validate_model(RoomSpec, data["spec"]),
        )
