"""Storage protocol for swappable record stores.

The storage layer abstracts keyed record storage, enabling:
- Local in-memory (default)
- Persistent backends behind the same interface (embedding concern)

Usage:
    rooms: Store[Room] = LocalStore(Room)
    room = rooms.create(Room(spec=RoomSpec(name="kitchen", color="#ff7373", size=1)))
"""

from __future__ import annotations

from collections.abc import Callable
from typing import Any, Protocol, Self, TypeVar

from roomlayout.core.errors import LayoutError
from roomlayout.core.types import RecordId


class Record(Protocol):
    """Anything a store can hold: an id plus plain-dict (de)serialization."""

    id: RecordId

    def to_dict(self) -> dict[str, Any]:
        """Convert to a JSON-serializable dictionary."""
        ...

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Self:
        """Create from a dictionary produced by to_dict()."""
        ...


R = TypeVar("R", bound=Record)

Subscriber = Callable[[RecordId], None]
"""Signature: (affected_record_id) -> None"""

Unsubscribe = Callable[[], None]

Predicate = Callable[[R], bool]


class RecordNotFoundError(LayoutError, KeyError):
    """Raised when a lookup targets an id the store does not hold."""

    def __init__(self, record_id: RecordId, collection: str = "record") -> None:
        super().__init__(record_id)
        self.record_id = record_id
        self.collection = collection

    def __str__(self) -> str:
        return f"{self.collection} with id '{self.record_id}' not found"


class Store(Protocol[R]):
    """Abstract record store. Implementations hold the actual data.

    Every value crossing the interface is a copy, so callers can
    read, mutate and write back without aliasing store state.
    """

    def create(self, record: R) -> R:
        """Store a new record under a generated id and return a copy."""
        ...

    def get(self, record_id: RecordId) -> R:
        """Get a copy of a record. Raises RecordNotFoundError if absent."""
        ...

    def put(self, record: R) -> R:
        """Insert or replace a record by id and return a copy."""
        ...

    def delete(self, record_id: RecordId) -> R:
        """Remove a record and return it. Raises RecordNotFoundError if absent."""
        ...

    def list(self, *predicates: Predicate[R]) -> list[R]:
        """Copies of every record matching all predicates."""
        ...

    def exists(self, record_id: RecordId) -> bool:
        """Check if a record is present."""
        ...

    def subscribe(self, subscriber: Subscriber) -> Unsubscribe:
        """Register a change callback. Returns a function that removes it."""
        ...

    def snapshot(self) -> dict[RecordId, dict[str, Any]]:
        """Serialize every record as plain data keyed by id."""
        ...

    def restore(self, data: dict[RecordId, dict[str, Any]]) -> None:
        """Replace the contents with records from snapshot()."""
        ...
