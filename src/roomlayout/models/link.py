"""Link records: an unordered connection between two rooms."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from pydantic import field_validator

from roomlayout.core.types import RecordId
from roomlayout.models.room import RoomName
from roomlayout.models.validation import SpecModel, validate_model


class LinkSpec(SpecModel):
    """Desired state of a link, naming its two rooms."""

    room_names: tuple[RoomName, RoomName]

    @field_validator("room_names")
    @classmethod
    def _distinct_endpoints(cls, v: tuple[RoomName, RoomName]) -> tuple[RoomName, RoomName]:
        if v[0] == v[1]:
            raise ValueError(f"A link cannot connect room '{v[0]}' to itself")
        return v

    def key(self) -> frozenset[RoomName]:
        """Order-independent identity: (A, B) and (B, A) are the same link."""
        return frozenset(self.room_names)

    def touches(self, room_name: RoomName) -> bool:
        return room_name in self.room_names


@dataclass(slots=True)
class LinkStatus:
    """Derived state of a link.

    room_ids is None when either name failed to resolve in the last pass.
    """

    room_ids: tuple[RecordId, RecordId] | None = None

    def to_dict(self) -> dict[str, Any]:
        return {} if self.room_ids is None else {"roomIds": list(self.room_ids)}


@dataclass(slots=True)
class Link:
    """Link entity owned by exactly one Base."""

    spec: LinkSpec
    owner: RecordId | None = None
    status: LinkStatus = field(default_factory=LinkStatus)
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
    def from_dict(cls, data: dict[str, Any]) -> Link:
        """Create from dictionary (for deserialization)."""
        status = data.get("status") or {}
        room_ids = status.get("roomIds")
        return cls(
            id=data["id"],
            owner=data.get("owner"),
            spec=validate_model(LinkSpec, data["spec"]),
            status=LinkStatus(room_ids=None if room_ids is None else (room_ids[0], room_ids[1])),
        )
