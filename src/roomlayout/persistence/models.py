"""Data models for the persistence boundary.

A snapshot is four collections of plain records keyed by id. The core does
not choose a storage medium or a schema version; embedders serialize the
dict however they like (JSON works as-is).
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from roomlayout.core.types import RecordId

PlainRecords = dict[RecordId, dict[str, Any]]


@dataclass(slots=True)
class StoreSnapshot:
    """Complete state of the four record stores.

    Attributes:
        bases: Base records keyed by id.
        rooms: Room records keyed by id.
        cells: Cell records keyed by id.
        links: Link records keyed by id.

    Example:
        snapshot = workspace.snapshot()
        payload = json.dumps(snapshot.to_dict())
        workspace.restore(StoreSnapshot.from_dict(json.loads(payload)))
    """

    bases: PlainRecords = field(default_factory=dict)
    rooms: PlainRecords = field(default_factory=dict)
    cells: PlainRecords = field(default_factory=dict)
    links: PlainRecords = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        """Convert to JSON-serializable dictionary."""
        return {
            "bases": self.bases,
            "rooms": self.rooms,
            "cells": self.cells,
            "links": self.links,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> StoreSnapshot:
        """Create from dictionary (for deserialization)."""
        return cls(
            bases=dict(data.get("bases", {})),
            rooms=dict(data.get("rooms", {})),
            cells=dict(data.get("cells", {})),
            links=dict(data.get("links", {})),
        )

    def record_count(self) -> int:
        return len(self.bases) + len(self.rooms) + len(self.cells) + len(self.links)
