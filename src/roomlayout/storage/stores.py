"""The four record stores a layout lives in, bundled together."""

from __future__ import annotations

from collections.abc import Callable, Iterator
from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from roomlayout.core.types import RecordId
from roomlayout.models import Base, Cell, Link, Room
from roomlayout.persistence.models import StoreSnapshot
from roomlayout.storage.local import LocalStore, new_record_id


class Collection(str, Enum):
    """Names of the four record collections."""

    BASE = "base"
    ROOM = "room"
    CELL = "cell"
    LINK = "link"


@dataclass
class LayoutStores:
    """Base, Room, Cell and Link stores sharing one id factory."""

    id_factory: Callable[[], RecordId] = new_record_id
    bases: LocalStore[Base] = field(init=False)
    rooms: LocalStore[Room] = field(init=False)
    cells: LocalStore[Cell] = field(init=False)
    links: LocalStore[Link] = field(init=False)

    def __post_init__(self) -> None:
        self.bases = LocalStore(Base, id_factory=self.id_factory)
        self.rooms = LocalStore(Room, id_factory=self.id_factory)
        self.cells = LocalStore(Cell, id_factory=self.id_factory)
        self.links = LocalStore(Link, id_factory=self.id_factory)

    def items(self) -> Iterator[tuple[Collection, LocalStore[Any]]]:
        """(collection, store) pairs in dependency order."""
        yield Collection.BASE, self.bases
        yield Collection.ROOM, self.rooms
        yield Collection.CELL, self.cells
        yield Collection.LINK, self.links

    def children(self) -> Iterator[LocalStore[Any]]:
        """Stores whose records are owned by a Base."""
        yield self.rooms
        yield self.cells
        yield self.links

    def snapshot(self) -> StoreSnapshot:
        """Plain-record copy of all four stores."""
        return StoreSnapshot(
            bases=self.bases.snapshot(),
            rooms=self.rooms.snapshot(),
            cells=self.cells.snapshot(),
            links=self.links.snapshot(),
        )

    def restore(self, snapshot: StoreSnapshot) -> None:
        """Replace every store's contents from a snapshot.

        Children are restored before bases so that subscribers notified about
        a Base already see the records it references.
        """
        self.rooms.restore(snapshot.rooms)
        self.links.restore(snapshot.links)
        self.cells.restore(snapshot.cells)
        self.bases.restore(snapshot.bases)
